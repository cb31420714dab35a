"""
Auto-save loop for the post editor.

Every interval the current editor snapshot is compared with the last one
that saved successfully; when they differ the post is saved. After
max_failures consecutive failures the loop disables itself and asks the
operator to save manually.
"""

import asyncio
import copy
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from .notifications import NotificationLevel

if TYPE_CHECKING:
    from .service import PostStorageService

logger = logging.getLogger(__name__)

FAILURE_WARNING_DURATION = 3.0


class AutoSaver:
    """
    Periodic save of an editor snapshot through PostStorageService.

    Overlapping saves are not prevented: if a save outlives the interval the
    next tick still fires.
    """

    def __init__(
        self,
        storage: "PostStorageService",
        snapshot: Callable[[], dict[str, Any]],
        interval: float = 30.0,
        max_failures: int = 3,
        sleep=asyncio.sleep,
    ):
        self.storage = storage
        self.snapshot = snapshot
        self.interval = interval
        self.max_failures = max_failures
        self.last_saved: Optional[dict[str, Any]] = None
        self.failures = 0
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._stopped = False
        self._saving = False

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """
        Start ticking. Must be called from a running event loop.

        Restarting after stop() while a save is still in flight starts a new
        loop; the old one ends once that save completes.
        """
        if self.running and not self._stopped:
            return
        self._stopped = False
        self.failures = 0
        self._task = asyncio.create_task(self._run())
        logger.info(f"[AutoSave] Enabled (every {self.interval:g}s)")

    def stop(self) -> None:
        """Prevent future ticks. A save already in flight runs to completion."""
        self._stopped = True
        task = self._task
        if task and not task.done() and not self._saving and task is not asyncio.current_task():
            task.cancel()
        logger.info("[AutoSave] Stopped")

    def has_unsaved_changes(self, current: dict[str, Any]) -> bool:
        return self.last_saved is None or current != self.last_saved

    async def tick(self) -> bool:
        """
        Run one auto-save cycle.

        Returns:
            True if the snapshot was saved
        """
        try:
            current = self.snapshot()
            if not self.has_unsaved_changes(current):
                return False

            self._saving = True
            logger.info("[AutoSave] Auto-saving post...")
            await self.storage.save_post(current)
        except Exception as e:
            self._record_failure(e)
            return False
        finally:
            self._saving = False

        self.failures = 0
        self.last_saved = copy.deepcopy(current)
        logger.info("[AutoSave] Auto-save completed")
        return True

    async def _run(self) -> None:
        # A restart replaces self._task; the previous loop exits after its save
        task = asyncio.current_task()
        while not self._stopped and self._task is task:
            await self._sleep(self.interval)
            if self._stopped or self._task is not task:
                break
            await self.tick()

    def _record_failure(self, error: Exception) -> None:
        self.failures += 1
        logger.error(f"[AutoSave] Auto-save failed (attempt {self.failures}): {error}")

        if self.failures >= self.max_failures:
            self.storage.notifier.notify(
                "Auto-save has failed multiple times. Please save manually to prevent data loss.",
                NotificationLevel.ERROR,
                duration=None,
            )
            self.stop()
        else:
            self.storage.notifier.notify(
                f"Auto-save failed. Will retry in {self.interval:g} seconds.",
                NotificationLevel.WARNING,
                duration=FAILURE_WARNING_DURATION,
            )
