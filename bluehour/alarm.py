import io
import logging
import platform
import subprocess
import wave
from pathlib import Path

import numpy as np

from .settings import parse_alarm

LOGGER = logging.getLogger(__name__)

SAMPLE_RATE = 22050

# kind -> [(onset s, freq Hz, length s, gain)]
TONES = {
    "soft": [(0.0, 660, 0.12, 0.08), (0.16, 880, 0.10, 0.06)],
    "bell": [(0.0, 880, 0.18, 0.10), (0.22, 660, 0.16, 0.08), (0.46, 990, 0.12, 0.06)],
    "digital": [(0.0, 1046, 0.08, 0.10), (0.10, 1046, 0.08, 0.10), (0.22, 1318, 0.10, 0.08)],
}


def synthesize(kind: str, rate: int = SAMPLE_RATE) -> np.ndarray:
    tones = TONES.get(kind)
    if not tones:
        return np.zeros(0, dtype=np.float32)
    total = max(onset + length for onset, _, length, _ in tones)
    out = np.zeros(int(np.ceil(total * rate)), dtype=np.float32)
    for onset, freq, length, gain in tones:
        n = int(length * rate)
        t = np.arange(n) / rate
        tone = gain * np.sin(2 * np.pi * freq * t)
        # short linear fade so the tones don't click
        ramp = min(n // 2, int(0.005 * rate))
        if ramp:
            env = np.ones(n)
            env[:ramp] = np.linspace(0.0, 1.0, ramp)
            env[-ramp:] = np.linspace(1.0, 0.0, ramp)
            tone = tone * env
        start = int(onset * rate)
        out[start:start + n] += tone[: len(out) - start]
    return out


def to_wav_bytes(samples: np.ndarray, rate: int = SAMPLE_RATE) -> bytes:
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(rate)
        w.writeframes(pcm.tobytes())
    return buf.getvalue()


def _player_commands(path: str) -> list:
    system = platform.system()
    if system == "Darwin":
        return [["afplay", path]]
    return [
        ["paplay", path],
        ["aplay", "-q", path],
        ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", path],
    ]


class ToneAlarm:
    """Plays the synthesized alarm patterns through the platform's player.

    ``fallback`` is called when no player can be launched (the window passes
    its ``bell``).
    """

    def __init__(self, cache_dir, fallback=None):
        self.cache_dir = Path(cache_dir)
        self.fallback = fallback

    def wav_path(self, kind: str) -> Path:
        path = self.cache_dir / f"alarm-{kind}.wav"
        if not path.exists():
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(to_wav_bytes(synthesize(kind)))
        return path

    def play_alarm(self, kind: str) -> None:
        if kind not in TONES:
            return
        path = str(self.wav_path(kind))
        if platform.system() == "Windows":
            import winsound
            winsound.PlaySound(path, winsound.SND_FILENAME | winsound.SND_ASYNC)
            return
        for cmd in _player_commands(path):
            try:
                subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
                return
            except FileNotFoundError:
                continue
        if self.fallback is not None:
            self.fallback()


def notify_completion(alarm_kind: str, player) -> None:
    kind = parse_alarm(alarm_kind)
    if kind == "none" or player is None:
        return
    try:
        player.play_alarm(kind)
    except Exception as e:
        LOGGER.debug("Alarm playback failed (%s): %s", kind, e)
