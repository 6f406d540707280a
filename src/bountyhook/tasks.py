"""Fire-and-forget background work.

Some webhook side effects, like annotating a closed issue with its closing
commit, must not delay the webhook acknowledgment. They are submitted here
as asyncio tasks; failures are logged from a done-callback instead of being
surfaced to the HTTP response.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, Optional, Set


logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """Runs coroutines as detached tasks and logs their failures.

    The event loop only keeps weak references to tasks, so the runner holds
    a strong reference to each one until it finishes.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def submit(
        self,
        coro: Coroutine[Any, Any, Any],
        name: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> asyncio.Task:
        """Schedule ``coro`` on the running loop.

        Args:
            coro: The coroutine to run.
            name: Task name used in logs.
            context: Extra log fields attached to a failure record.

        Returns:
            The created task.
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        log_context = dict(context or {})

        def _on_done(done: asyncio.Task) -> None:
            self._tasks.discard(done)
            if done.cancelled():
                logger.warning("Background task cancelled", extra={"task": name, **log_context})
                return
            error = done.exception()
            if error is not None:
                logger.error(
                    "Background task failed",
                    exc_info=error,
                    extra={"task": name, "error": str(error), **log_context},
                )

        task.add_done_callback(_on_done)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all submitted tasks to finish.

        Used on shutdown and in tests. Task failures are reported by the
        done-callback, not raised here.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
