from .analytics import AnalyticsAggregator, DayRecord
from .settings import Mode, Settings, seconds_for
from .timer import CountdownTimer, Status, TimerState

__version__ = "1.0.0"
