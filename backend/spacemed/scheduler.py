"""Cancellable periodic and one-shot timers on top of asyncio.

Callbacks are plain functions executed on the event loop thread, so each one
runs to completion before the next timer fires.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class RepeatingTask:
    """Invoke ``callback`` every ``interval`` seconds until cancelled."""

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callback,
        run_immediately: bool = False,
    ) -> None:
        self.name = name
        self.interval = interval
        self.callback = callback
        self.run_immediately = run_immediately
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the task on the running loop. No-op if already running."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name=f"repeat-{self.name}")

    def cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        try:
            if self.run_immediately:
                self._invoke()
            while True:
                await asyncio.sleep(self.interval)
                self._invoke()
        except asyncio.CancelledError:
            logger.debug("Periodic task %s cancelled", self.name)
            raise

    def _invoke(self) -> None:
        try:
            self.callback()
        except Exception:  # noqa: BLE001 - a failing tick must not stop the timer
            logger.exception("Periodic task %s failed", self.name)


class Scheduler:
    """Registry of named repeating tasks and pending one-shot calls."""

    def __init__(self) -> None:
        self._tasks: Dict[str, RepeatingTask] = {}
        self._pending: Dict[str, asyncio.TimerHandle] = {}

    def every(
        self,
        name: str,
        interval: float,
        callback: Callback,
        run_immediately: bool = False,
    ) -> RepeatingTask:
        """Register (but do not start) a repeating task."""
        if name in self._tasks:
            self._tasks[name].cancel()
        task = RepeatingTask(name, interval, callback, run_immediately=run_immediately)
        self._tasks[name] = task
        return task

    def start(self, name: Optional[str] = None) -> None:
        for task in self._select(name):
            task.start()

    def cancel(self, name: Optional[str] = None) -> None:
        """Cancel one task, or every task and pending call when ``name`` is None."""
        for task in self._select(name):
            task.cancel()
        if name is None:
            for handle in self._pending.values():
                handle.cancel()
            self._pending.clear()

    def is_running(self, name: str) -> bool:
        task = self._tasks.get(name)
        return bool(task and task.running)

    def call_later(self, name: str, delay: float, callback: Callback) -> asyncio.TimerHandle:
        """Run ``callback`` once after ``delay`` seconds, replacing a pending call of that name."""
        self.cancel_call(name)
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._pending.pop(name, None)
            callback()

        handle = loop.call_later(delay, _fire)
        self._pending[name] = handle
        return handle

    def cancel_call(self, name: str) -> None:
        handle = self._pending.pop(name, None)
        if handle:
            handle.cancel()

    def has_pending(self, name: str) -> bool:
        return name in self._pending

    def _select(self, name: Optional[str]):
        if name is None:
            return list(self._tasks.values())
        return [self._tasks[name]]
