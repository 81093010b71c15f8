import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Awaitable, Callable, Deque, Dict, Set

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """
    Fire-and-forget runner for side-channel work such as error notifications.

    Tasks run independently of the request that dispatched them. A failing
    task is logged and recorded in its own failure log; it never reaches
    the caller.
    """

    def __init__(self, max_failures: int = 100):
        self._tasks: Set[asyncio.Task] = set()
        self.failures: Deque[Dict[str, str]] = deque(maxlen=max_failures)

    def dispatch(self, job: Callable[[], Awaitable[object]], name: str) -> asyncio.Task:
        """Schedule job() on the running loop"""
        task = asyncio.get_running_loop().create_task(self._run(job, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, job: Callable[[], Awaitable[object]], name: str):
        try:
            await job()
        except Exception as e:
            logger.error(f"Background task {name} failed: {e}")
            self.failures.append({
                "task": name,
                "error": f"{type(e).__name__}: {e}",
                "failed_at": datetime.now(timezone.utc).isoformat()
            })

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self):
        """Wait for every dispatched task (used on shutdown and in tests)"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
