"""Recurring renewal jobs, at most one per GitLab project."""

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, List, Optional, Set

logger = logging.getLogger(__name__)

# Long intervals are slept in slices so the wait deadline never overflows
MAX_WAIT_SECONDS = 86400.0


def wait_for(stop_event: threading.Event, seconds: float) -> bool:
    """
    Block for ``seconds`` or until ``stop_event`` is set.

    Returns:
        bool: True if the event was set
    """
    deadline = time.monotonic() + seconds
    remaining = seconds
    while remaining > 0:
        if stop_event.wait(min(remaining, MAX_WAIT_SECONDS)):
            return True
        remaining = deadline - time.monotonic()
    return stop_event.is_set()


class RecurringJob:
    """Runs an action every ``interval`` on its own daemon thread.

    The first run happens one interval after ``start``. A failing action
    is logged and the job keeps its schedule.
    """

    def __init__(self, interval: timedelta, action: Callable[[], None], name: str = "renewal"):
        if interval <= timedelta(0):
            raise ValueError(f"interval must be positive, got {interval}")

        self.interval = interval
        self.action = action
        self.name = name
        self.runs = 0
        self.failures = 0
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run_loop, name=f"vglink-{name}", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()

    def _run_loop(self) -> None:
        while not wait_for(self._stop_event, self.interval.total_seconds()):
            self.runs += 1
            try:
                self.action()
            except Exception:
                self.failures += 1
                logger.exception("Job %s failed, next attempt in %s", self.name, self.interval)


class RenewalScheduler:
    """Registry of managed projects and the recurring jobs that renew them."""

    def __init__(self):
        # Shared with the discovery loop; re-entrant so a tick can hold it
        # while registering projects.
        self.lock = threading.RLock()
        self._registered: Set[int] = set()
        self._jobs: List[RecurringJob] = []

    def register_if_absent(self, repo_id: int) -> bool:
        """
        Claim a project for scheduling.

        Args:
            repo_id: GitLab project id

        Returns:
            bool: True the first time ``repo_id`` is seen, False afterwards
        """
        with self.lock:
            if repo_id in self._registered:
                return False
            self._registered.add(repo_id)
            return True

    def is_registered(self, repo_id: int) -> bool:
        with self.lock:
            return repo_id in self._registered

    @property
    def registered(self) -> List[int]:
        with self.lock:
            return sorted(self._registered)

    @property
    def jobs(self) -> List[RecurringJob]:
        with self.lock:
            return list(self._jobs)

    def schedule_recurring(
        self,
        interval: timedelta,
        action: Callable[[], None],
        name: Optional[str] = None,
    ) -> RecurringJob:
        """
        Run ``action`` every ``interval``, starting one interval from now.

        Args:
            interval: Time between runs
            action: Callable with no arguments
            name: Label used in thread names and logs

        Returns:
            RecurringJob: Handle of the started job
        """
        with self.lock:
            job = RecurringJob(interval, action, name=name or f"job-{len(self._jobs) + 1}")
            self._jobs.append(job)
        job.start()
        logger.debug("Scheduled %s every %s", job.name, interval)
        return job

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop every job. Registrations are kept."""
        for job in self.jobs:
            job.stop(timeout=timeout)
        logger.debug("Stopped %d renewal job(s)", len(self._jobs))
