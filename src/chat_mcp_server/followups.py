"""Supervision of delayed follow-up actions scheduled by tool handlers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

FollowUpAction = Callable[[], Awaitable[object]]


class FollowUpSupervisor:
    """Run delayed actions outside the request/response cycle.

    A scheduled action runs after ``delay`` seconds. If it fails, the optional
    fallback runs instead, and both outcomes are only logged: the request
    that scheduled the action has already been answered. ``cancel_all`` is
    called on server shutdown so no follow-up outlives its listener.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of follow-ups that have not finished yet."""
        return len(self._tasks)

    def schedule(
        self,
        delay: float,
        action: FollowUpAction,
        *,
        fallback: FollowUpAction | None = None,
        name: str = "follow-up",
    ) -> asyncio.Task[None]:
        """Schedule ``action`` on the running loop and return its task."""
        task = asyncio.get_running_loop().create_task(
            self._run(delay, action, fallback, name), name=name
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self,
        delay: float,
        action: FollowUpAction,
        fallback: FollowUpAction | None,
        name: str,
    ) -> None:
        await asyncio.sleep(delay)
        try:
            await action()
        except Exception as exc:
            if fallback is None:
                logger.error("Follow-up %s failed: %s", name, exc)
                return
            logger.warning("Follow-up %s failed, running fallback: %s", name, exc)
            try:
                await fallback()
            except Exception:
                logger.exception("Fallback for follow-up %s failed", name)
                return
        logger.debug("Follow-up %s completed", name)

    async def cancel_all(self) -> int:
        """Cancel every pending follow-up and wait for them to unwind.

        Returns:
            Number of follow-ups that were cancelled.
        """
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.debug("Cancelled %d pending follow-up(s)", len(tasks))
        return len(tasks)
