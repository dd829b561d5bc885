"""Change events and their delivery to a history recorder."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

from .const import EVENT_FLUSH_TIMEOUT

_LOGGER = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    """Classification of a change event."""

    CONFIG_CHANGE = "config_change"
    STATUS_CHANGE = "status_change"
    PERIODIC_SNAPSHOT = "periodic_snapshot"
    CONNECTIVITY_CHANGE = "connectivity_change"
    VLAN_CREATED = "vlan_created"
    VLAN_DELETED = "vlan_deleted"


class EntityType(StrEnum):
    """Kind of entity a change event is about."""

    PORT = "port"
    VLAN = "vlan"
    SYSTEM = "system"
    CABLE = "cable"
    SWITCH = "switch"


@dataclass(frozen=True)
class ChangeEvent:
    """A detected difference between two observations of a switch."""

    entity_type: EntityType
    entity_key: int | str
    change_kind: ChangeKind
    previous_value: str | None
    new_value: str | None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    fields: tuple[str, ...] = ()
    notes: str | None = None
    latency_ms: int | None = None
    downtime_seconds: float | None = None


class HistoryRecorder(Protocol):
    """Receives change events for persistence."""

    def record(self, event: ChangeEvent) -> None | Awaitable[None]:
        """Record one event."""


class ConnectivityReporter(Protocol):
    """Receives reachability transitions of a switch."""

    def report(
        self,
        reachable: bool,
        latency_ms: int | None = None,
        error_message: str | None = None,
    ) -> None:
        """Report a reachability transition."""


class EventDispatcher:
    """Deliver change events to a recorder in order, off the polling path.

    Events are queued by publish() and handed to the recorder by a single
    consumer task, so the recorder sees them in publish order.
    """

    def __init__(self, recorder: HistoryRecorder) -> None:
        self._recorder = recorder
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """Return the number of events not yet delivered."""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the consumer task."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._consume(), name="event-dispatcher")

    def publish(self, event: ChangeEvent) -> None:
        """Queue an event for delivery. Never blocks."""
        self._queue.put_nowait(event)

    async def flush(self) -> None:
        """Wait until every queued event has been delivered."""
        await self._queue.join()

    async def stop(self, timeout: float = EVENT_FLUSH_TIMEOUT) -> None:
        """Deliver queued events (bounded by ``timeout``) and stop the consumer."""
        if self.is_running and not self._queue.empty():
            try:
                await asyncio.wait_for(self._queue.join(), timeout)
            except TimeoutError:
                _LOGGER.warning(
                    "Dropping %d undelivered change events after %ss",
                    self._queue.qsize(),
                    timeout,
                )

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                result = self._recorder.record(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                _LOGGER.exception(
                    "History recorder failed for %s %s event",
                    event.entity_type,
                    event.change_kind,
                )
            finally:
                self._queue.task_done()
