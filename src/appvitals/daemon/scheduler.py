"""Scheduling of analyses as observable asyncio tasks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from appvitals.analyzers.engine import ScoringEngine
from appvitals.models.schemas import AnalysisResult, RepositoryRecord, TrackedApplication
from appvitals.storage.base import PersistenceGateway

logger = logging.getLogger(__name__)


class AnalysisScheduler:
    """Runs analyses in the background and hands back task handles.

    - At most ``max_concurrent`` analyses run at once; this is the only
      throttle against provider and hosting rate limits
    - Analyses of the same application id run one after another, so the
      last submitted analysis is also the last write
    - Failures surface through the task: the engine's pending result with
      a warning, or the exception for cancellation

    Usage:
        scheduler = AnalysisScheduler(engine, gateway=gateway)
        task = scheduler.submit(app, delay=2.0)
        result = await task
    """

    def __init__(
        self,
        engine: ScoringEngine,
        gateway: PersistenceGateway | None = None,
        max_concurrent: int = 4,
    ) -> None:
        """Initialize the scheduler.

        Args:
            engine: Engine that performs each analysis.
            gateway: Source of repositories when a submission doesn't pass any.
                Defaults to the engine's gateway.
            max_concurrent: Maximum number of analyses in flight.
        """
        self.engine = engine
        self.gateway = gateway if gateway is not None else engine.gateway
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of submitted analyses that have not finished."""
        return sum(1 for task in self._tasks if not task.done())

    def submit(
        self,
        app: TrackedApplication,
        repos: Sequence[RepositoryRecord] | None = None,
        delay: float = 0.0,
    ) -> asyncio.Task[AnalysisResult]:
        """Schedule an analysis and return its task.

        Must be called from within a running event loop.

        Args:
            app: Application to analyze.
            repos: Repositories to match against. Loaded from the gateway if None.
            delay: Seconds to wait before starting.
        """
        task = asyncio.create_task(self._run(app, repos, delay), name=f"analyze:{app.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def analyze_many(
        self,
        apps: Sequence[TrackedApplication],
        repos: Sequence[RepositoryRecord] | None = None,
    ) -> list[AnalysisResult]:
        """Analyze several applications concurrently, results in input order."""
        tasks = [self.submit(app, repos) for app in apps]
        return list(await asyncio.gather(*tasks))

    async def analyze_by_id(self, application_id: str) -> AnalysisResult:
        """Load an application from the gateway and analyze it.

        Raises:
            ApplicationNotFoundError: If the gateway doesn't know the id.
        """
        if self.gateway is None:
            raise ValueError("analyze_by_id requires a persistence gateway")
        app = self.gateway.get_application(application_id)
        return await self.submit(app)

    async def cancel_all(self) -> None:
        """Cancel every unfinished analysis and wait for them to stop."""
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info(f"Cancelled {len(tasks)} pending analyses")
            await asyncio.gather(*tasks, return_exceptions=True)

    def _acquire_lock_ref(self, application_id: str) -> asyncio.Lock:
        if application_id not in self._locks:
            self._locks[application_id] = asyncio.Lock()
        self._lock_users[application_id] = self._lock_users.get(application_id, 0) + 1
        return self._locks[application_id]

    def _release_lock_ref(self, application_id: str) -> None:
        # Drop the lock once no submission holds or awaits it
        self._lock_users[application_id] -= 1
        if self._lock_users[application_id] == 0:
            del self._lock_users[application_id]
            del self._locks[application_id]

    async def _run(
        self,
        app: TrackedApplication,
        repos: Sequence[RepositoryRecord] | None,
        delay: float,
    ) -> AnalysisResult:
        if delay > 0:
            await asyncio.sleep(delay)

        lock = self._acquire_lock_ref(app.id)
        try:
            async with lock:
                async with self._semaphore:
                    if repos is None:
                        try:
                            repos = self._load_repositories(app)
                        except Exception as e:
                            logger.warning(f"Could not load repositories for {app.name}: {e}")
                            return AnalysisResult.pending(
                                f"Could not fully analyze {app.name}. Manual review may be needed. ({e})"
                            )
                    return await self.engine.analyze(app, repos)
        finally:
            self._release_lock_ref(app.id)

    def _load_repositories(self, app: TrackedApplication) -> list[RepositoryRecord]:
        if self.gateway is None:
            return []
        return self.gateway.list_repositories(app.user_id)
