"""Token renewal: discovery, scheduling and variable sync."""

from .discovery import DiscoveryLoop, DiscoveryResult, ScheduledJob
from .scheduler import RecurringJob, RenewalScheduler
from .sync import sync_secret

__all__ = [
    "DiscoveryLoop",
    "DiscoveryResult",
    "RecurringJob",
    "RenewalScheduler",
    "ScheduledJob",
    "sync_secret",
]
