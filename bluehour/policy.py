from .settings import Mode

LONG_BREAK_EVERY = 4
AUTO_START_DELAY_MS = 600


def next_mode(completed: Mode, sessions_today: int) -> Mode:
    """Mode to switch to once ``completed`` has run out.

    ``sessions_today`` is the count after the finished pomodoro was recorded.
    """
    if Mode(completed) is not Mode.POMODORO:
        return Mode.POMODORO
    if sessions_today > 0 and sessions_today % LONG_BREAK_EVERY == 0:
        return Mode.LONG
    return Mode.SHORT
