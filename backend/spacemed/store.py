"""Thread-safe in-memory holder for the current monitor state."""
from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List, Optional

from asyncio import AbstractEventLoop

from .schemas import Alert, Snapshot

Evaluator = Callable[[Snapshot], List[Alert]]


@dataclass
class MonitorState:
    snapshot: Snapshot = field(default_factory=Snapshot)
    alerts: List[Alert] = field(default_factory=list)
    connected: bool = True
    clock: str = ""
    updated_at: Optional[datetime] = None
    cycles: int = 0


class StateStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = MonitorState()
        self._subscribers: list[asyncio.Queue[MonitorState]] = []
        self._loop: AbstractEventLoop | None = None

    def state(self) -> MonitorState:
        with self._lock:
            return self._copy()

    def publish(self, snapshot: Snapshot, alerts: List[Alert], updated_at: datetime, cycle: bool = False) -> MonitorState:
        """Swap in a new snapshot and its alert list, dropping the previous alerts."""
        with self._lock:
            self._state.snapshot = snapshot
            self._state.alerts = list(alerts)
            self._state.updated_at = updated_at
            if cycle:
                self._state.cycles += 1
            current = self._copy()
        self._broadcast(current)
        return current

    def merge(self, update: Snapshot, evaluate: Evaluator, updated_at: datetime) -> MonitorState:
        """Fold a partial update into the held snapshot and re-evaluate it.

        Reading, merging, evaluating and swapping happen under one lock hold so
        concurrent partial updates never drop each other's fields.
        """
        with self._lock:
            snapshot = self._state.snapshot.merged(update)
            self._state.snapshot = snapshot
            self._state.alerts = list(evaluate(snapshot))
            self._state.updated_at = updated_at
            current = self._copy()
        self._broadcast(current)
        return current

    def set_connected(self, connected: bool) -> bool:
        """Return True when the flag actually changed."""
        with self._lock:
            if self._state.connected == connected:
                return False
            self._state.connected = connected
            current = self._copy()
        self._broadcast(current)
        return True

    def set_clock(self, clock: str) -> None:
        # Clock ticks are not pushed to subscribers; the page keeps its own time.
        with self._lock:
            self._state.clock = clock

    def subscribe(self, queue: asyncio.Queue[MonitorState]) -> None:
        """Deliver every later state change to ``queue``.

        Subscribing from a coroutine binds the running loop if none is bound yet.
        """
        with self._lock:
            self._subscribers.append(queue)
            if self._loop is None:
                try:
                    self._loop = asyncio.get_running_loop()
                except RuntimeError:
                    # Outside a loop; ``bind_loop`` must be called before changes are delivered.
                    pass

    def unsubscribe(self, queue: asyncio.Queue[MonitorState]) -> None:
        with self._lock:
            if queue in self._subscribers:
                self._subscribers.remove(queue)

    def bind_loop(self, loop: AbstractEventLoop) -> None:
        with self._lock:
            self._loop = loop

    def _copy(self) -> MonitorState:
        return replace(self._state, alerts=list(self._state.alerts))

    def _broadcast(self, state: MonitorState) -> None:
        with self._lock:
            loop = self._loop
            queues = list(self._subscribers)
        if loop is None:
            return

        for queue in queues:
            try:
                asyncio.run_coroutine_threadsafe(queue.put(state), loop)
            except RuntimeError:
                # Loop already closed at shutdown.
                break
