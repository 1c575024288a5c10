"""Watcher pipeline orchestration.

Sequences one pass of fetch, diff, notify and persist:

    LOAD_STATE -> FETCH -> DIFF -> BRANCH -> NOTIFY -> SIDE_DISPATCH -> PERSIST -> DONE

An empty diff skips straight from BRANCH to PERSIST so ``last_run`` still
advances. Fatal errors (credentials, catalog failures) propagate before
PERSIST and leave the state file untouched. Notification and recon failures
never fail the run.

Usage:
    pipeline = WatcherPipeline.from_settings(settings)
    result = await pipeline.run()
"""

from typing import Optional

import aiohttp
import structlog

from h1_watcher.models.config import WatcherSettings
from h1_watcher.orchestration.result import RunResult, Stage
from h1_watcher.services.catalog_client import HackerOneClient
from h1_watcher.services.diff_service import add_programs, diff_programs
from h1_watcher.services.notification_service import NotificationService
from h1_watcher.services.recon_service import ReconDispatcher
from h1_watcher.services.state_store import StateStore

logger = structlog.get_logger()


class WatcherPipeline:
    """Runs one watcher pass over injected collaborators.

    Attributes:
        catalog: Fetches the current public program list
        state_store: Loads and saves known programs
        notifier: Sends new-program alerts
        recon: Optional recon trigger; None disables the stage's request
    """

    def __init__(
        self,
        catalog: HackerOneClient,
        state_store: StateStore,
        notifier: NotificationService,
        recon: Optional[ReconDispatcher] = None,
    ) -> None:
        self.catalog = catalog
        self.state_store = state_store
        self.notifier = notifier
        self.recon = recon

    @classmethod
    def from_settings(
        cls,
        settings: WatcherSettings,
        state_path: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "WatcherPipeline":
        """Build every collaborator from a single settings object."""
        return cls(
            catalog=HackerOneClient(settings.hackerone, session=session),
            state_store=StateStore(state_path or settings.state_path),
            notifier=NotificationService(
                settings.telegram, settings.discord, session=session
            ),
            recon=ReconDispatcher(settings.recon, session=session),
        )

    async def run(self) -> RunResult:
        """Execute one pass.

        Returns:
            RunResult describing what was found, sent and persisted

        Raises:
            ConfigurationError: Catalog credentials are missing
            CatalogAPIError: The catalog could not be fetched
            OSError: The state file could not be written
        """
        result = RunResult()

        result.stages.append(Stage.LOAD_STATE)
        state = self.state_store.load()
        result.state_recovered_reason = self.state_store.last_load_reason

        logger.info(
            "watcher_starting",
            known_programs=state.tracked_count,
            last_run=state.last_run,
            state_recovered_reason=result.state_recovered_reason,
        )

        result.stages.append(Stage.FETCH)
        current = await self.catalog.fetch_all()
        result.total_programs = len(current)

        result.stages.append(Stage.DIFF)
        new_programs = diff_programs(state, current)
        result.new_programs = new_programs

        result.stages.append(Stage.BRANCH)
        if new_programs:
            logger.info(
                "new_programs_detected",
                count=len(new_programs),
                handles=[p.handle for p in new_programs],
            )

            result.stages.append(Stage.NOTIFY)
            result.notification_results = await self.notifier.notify(new_programs)

            result.stages.append(Stage.SIDE_DISPATCH)
            result.recon_dispatched = await self._dispatch_recon(result)

            add_programs(state, new_programs)
        else:
            logger.info("no_new_programs", total_programs=result.total_programs)

        result.stages.append(Stage.PERSIST)
        self.state_store.save(state)
        result.tracked_programs = state.tracked_count

        result.stages.append(Stage.DONE)
        logger.info(
            "watcher_completed",
            new_programs=result.new_count,
            total_programs=result.total_programs,
            tracked_programs=result.tracked_programs,
            notifications=result.notification_results,
            recon_dispatched=result.recon_dispatched,
        )
        return result

    async def _dispatch_recon(self, result: RunResult) -> bool:
        if self.recon is None:
            return False
        try:
            return await self.recon.dispatch(result.new_programs)
        except Exception as e:
            logger.exception("recon_stage_failed", error=str(e))
            return False
