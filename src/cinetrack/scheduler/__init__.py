"""Episode air-date schedule and the jobs that consume it."""

from .episode_scheduler import EpisodeScheduler
from .models import Notification, ScheduledShow, ShowMeta, ShowState, to_timestamp
from .notifier import NotificationProcessor, NotificationSink, PeriodicRunner, ProcessReport, TBAProcessor, WatchlistLookup
from .tracker import ShowTracker

__all__ = [
    "EpisodeScheduler",
    "ShowTracker",
    "NotificationProcessor",
    "TBAProcessor",
    "PeriodicRunner",
    "ProcessReport",
    "WatchlistLookup",
    "NotificationSink",
    "Notification",
    "ScheduledShow",
    "ShowMeta",
    "ShowState",
    "to_timestamp",
]
