"""Discovery of GitLab projects and first-time scheduling of their renewals."""

import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional

from ..policy.models import RepoSpec
from ..policy.resolver import PolicyResolver
from ..utils.errors import PlatformError, PolicyError
from .scheduler import RecurringJob, RenewalScheduler, wait_for
from .sync import sync_secret

logger = logging.getLogger(__name__)

DEFAULT_DISCOVERY_INTERVAL = timedelta(minutes=5)


@dataclass(frozen=True)
class ScheduledJob:
    """A project under management and the policy captured when it was first seen."""

    repo_id: int
    path: str
    repository_spec: RepoSpec
    token_spec: Optional[Dict[str, Any]]
    job: RecurringJob


@dataclass
class DiscoveryResult:
    """Counters for one discovery tick."""

    projects_seen: int = 0
    disabled: int = 0
    already_scheduled: int = 0
    scheduled: int = 0
    initial_sync_failures: int = 0
    unresolved: int = 0
    aborted: bool = False


class DiscoveryLoop:
    """Walks every GitLab group and project and puts new projects under renewal."""

    def __init__(self, resolver: PolicyResolver, scheduler: RenewalScheduler, platform, issuer):
        """
        Initialize the loop.

        Args:
            resolver: Policy resolver over the merged tree
            scheduler: Registry of renewal jobs
            platform: GitLab client
            issuer: Vault client
        """
        self.resolver = resolver
        self.scheduler = scheduler
        self.platform = platform
        self.issuer = issuer
        self._scheduled: Dict[int, ScheduledJob] = {}

    @property
    def scheduled(self) -> List[ScheduledJob]:
        with self.scheduler.lock:
            return [self._scheduled[repo_id] for repo_id in sorted(self._scheduled)]

    def tick(self) -> DiscoveryResult:
        """
        Run one discovery pass.

        A listing failure ends the pass early; projects handled before it
        stay scheduled and the next tick starts over.

        Returns:
            DiscoveryResult: What happened during the pass
        """
        result = DiscoveryResult()

        # Held for the whole pass, HTTP calls included, so two ticks never
        # interleave. Renewal jobs do not take this lock.
        with self.scheduler.lock:
            try:
                groups = self.platform.list_groups()
                for group in groups:
                    for project in self.platform.list_projects(group):
                        result.projects_seen += 1
                        self._handle_project(project, result)
            except PlatformError as e:
                result.aborted = True
                logger.error("Discovery aborted: %s", e.message)

        logger.info(
            "Discovery tick: %d project(s) seen, %d newly scheduled, %d disabled%s",
            result.projects_seen,
            result.scheduled,
            result.disabled,
            " (aborted)" if result.aborted else "",
        )
        return result

    def run_forever(
        self,
        interval: timedelta = DEFAULT_DISCOVERY_INTERVAL,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Tick every ``interval`` until ``stop_event`` is set.

        Args:
            interval: Time between discovery passes
            stop_event: Event that ends the loop (never set by default)
        """
        stop_event = stop_event or threading.Event()
        while not stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Discovery tick failed, retrying in %s", interval)
            wait_for(stop_event, interval.total_seconds())

    def _handle_project(self, project, result: DiscoveryResult) -> None:
        try:
            link = self.resolver.resolve(project.path_with_namespace)
        except PolicyError as e:
            result.unresolved += 1
            logger.warning("Skipping project %s: %s", project.id, e.message)
            return

        repo_spec = link.repository_spec
        if not repo_spec.enabled:
            result.disabled += 1
            return

        if not self.scheduler.register_if_absent(project.id):
            result.already_scheduled += 1
            return

        token_spec = link.token_spec
        build_key = repo_spec.build_key

        if not sync_secret(self.platform, self.issuer, project.id, build_key, token_spec):
            result.initial_sync_failures += 1

        def renew(repo_id=project.id):
            sync_secret(self.platform, self.issuer, repo_id, build_key, token_spec)

        job = self.scheduler.schedule_recurring(
            repo_spec.renew_interval,
            renew,
            name=f"project-{project.id}",
        )
        self._scheduled[project.id] = ScheduledJob(
            repo_id=project.id,
            path=project.path_with_namespace,
            repository_spec=repo_spec,
            token_spec=token_spec,
            job=job,
        )
        result.scheduled += 1
        logger.info(
            "Project %s (%s) scheduled: %s every %s",
            project.id,
            project.path_with_namespace,
            build_key,
            repo_spec.renew_period,
        )
