"""Monitoring loop for one TP-Link Easy Smart switch."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from .connectivity import LoggingConnectivityReporter, format_downtime
from .const import (
    CONTEXT_MONITOR,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_SCAN_INTERVAL,
    EVENT_FLUSH_TIMEOUT,
    RENEWAL_FRACTION,
)
from .diff import diff_snapshots
from .easy_smart_client.client import SwitchClient
from .easy_smart_client.exceptions import (
    SwitchAuthenticationError,
    SwitchClientError,
    SwitchUnreachableError,
)
from .easy_smart_client.models import DeviceSnapshot
from .easy_smart_client.utils import host_key
from .helpers import log_debug, log_error, log_info, log_warning
from .history import (
    ChangeEvent,
    ChangeKind,
    ConnectivityReporter,
    EntityType,
    EventDispatcher,
    HistoryRecorder,
)

_LOGGER = logging.getLogger(__name__)

REACHABLE = "reachable"
UNREACHABLE = "unreachable"


class LoopState(StrEnum):
    """Connection state of a monitoring loop."""

    DISCONNECTED = "disconnected"
    AUTHENTICATING = "authenticating"
    CONNECTED = "connected"


class MonitoringLoop:
    """Poll a switch, diff its snapshots and emit change events.

    Transport failures back off exponentially, from the scan interval up to
    ``max_backoff``. Rejected logins retry on the scan interval. Only
    reachability transitions produce connectivity events.
    """

    def __init__(
        self,
        client: SwitchClient,
        recorder: HistoryRecorder,
        reporter: ConnectivityReporter | None = None,
        scan_interval: int = DEFAULT_SCAN_INTERVAL,
        max_backoff: int = DEFAULT_MAX_BACKOFF,
        name: str | None = None,
    ) -> None:
        """Initialize the monitoring loop.

        Args:
            client: Switch client, shared with on-demand callers
            recorder: Receives change events
            reporter: Receives reachability transitions. Defaults to a
                LoggingConnectivityReporter.
            scan_interval: Seconds between polls while connected
            max_backoff: Upper bound in seconds for the retry delay
            name: Display name of the switch (default: its host)

        """
        self.client = client
        self.host = host_key(client.base_url)
        self.name = name or self.host
        self.scan_interval = scan_interval
        self.max_backoff = max(max_backoff, scan_interval)
        self._reporter = reporter or LoggingConnectivityReporter(self.name, self.host)
        self._dispatcher = EventDispatcher(recorder)

        self._state = LoopState.DISCONNECTED
        self._reachable: bool | None = None
        self._consecutive_failures = 0
        self._next_interval: float = scan_interval
        self._last_successful_connection: datetime | None = None
        self._last_cookie_renewal: datetime | None = None
        self._failure_started: datetime | None = None
        self._last_error: str | None = None
        self._last_latency_ms: int | None = None
        self._previous: DeviceSnapshot | None = None

        self._poll_lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self.client.is_authenticated

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_reachable(self) -> bool | None:
        """Return the last observed reachability, or None before the first poll."""
        return self._reachable

    @property
    def last_successful_connection(self) -> datetime | None:
        return self._last_successful_connection

    @property
    def last_cookie_renewal(self) -> datetime | None:
        return self._last_cookie_renewal

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def next_interval(self) -> float:
        """Return the delay in seconds before the next poll."""
        return self._next_interval

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def last_latency_ms(self) -> int | None:
        return self._last_latency_ms

    @property
    def latest_snapshot(self) -> DeviceSnapshot | None:
        return self._previous

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    def backoff_delay(self, failures: int) -> float:
        """Return the retry delay after ``failures`` consecutive transport failures."""
        if failures <= 0:
            return self.scan_interval
        return min(self.scan_interval * 2 ** (failures - 1), self.max_backoff)

    def _renewal_due(self, now: datetime) -> bool:
        state = self.client.state
        if state is None:
            return False
        lifetime = timedelta(seconds=self.client.session_lifetime * RENEWAL_FRACTION)
        return now - state.issued_at >= lifetime

    async def async_refresh(self) -> bool:
        """Poll once now. Returns True if the poll succeeded."""
        return await self.async_tick()

    async def async_tick(self) -> bool:
        """Run one polling cycle.

        A tick that starts while another is in flight is skipped.

        Returns:
            True if a snapshot was fetched

        """
        if self._poll_lock.locked():
            log_debug(_LOGGER, CONTEXT_MONITOR, "Poll already in flight, skipping", host=self.host)
            return False

        self._dispatcher.start()
        async with self._poll_lock:
            return await self._async_poll()

    async def _async_poll(self) -> bool:
        started = time.monotonic()
        try:
            now = datetime.now(UTC)
            if not self.client.is_authenticated:
                self._state = LoopState.AUTHENTICATING
                await self.client.login()
                self._last_cookie_renewal = datetime.now(UTC)
            elif self._renewal_due(now):
                log_debug(_LOGGER, CONTEXT_MONITOR, "Renewing session", host=self.host)
                await self.client.renew()
                self._last_cookie_renewal = datetime.now(UTC)

            snapshot = await self.client.get_snapshot()

        except SwitchUnreachableError as err:
            self._handle_transport_failure(err)
            return False

        except SwitchAuthenticationError as err:
            # Credentials are likely wrong; retry on the normal interval
            log_error(_LOGGER, CONTEXT_MONITOR, "Authentication failed", host=self.host, error=err)
            self._handle_failure(err)
            self._next_interval = self.scan_interval
            return False

        except SwitchClientError as err:
            self._handle_transport_failure(err)
            return False

        except Exception as err:
            _LOGGER.exception("Unexpected error while polling %s: %s", self.host, err)
            self._handle_transport_failure(err)
            return False

        latency_ms = int((time.monotonic() - started) * 1000)
        self._handle_success(snapshot, latency_ms)
        return True

    def _handle_failure(self, err: Exception) -> None:
        self._state = LoopState.DISCONNECTED
        self._consecutive_failures += 1
        self._last_error = str(err)

    def _handle_transport_failure(self, err: Exception) -> None:
        self._handle_failure(err)
        self._next_interval = self.backoff_delay(self._consecutive_failures)
        log_warning(
            _LOGGER,
            CONTEXT_MONITOR,
            "Poll failed",
            host=self.host,
            failures=self._consecutive_failures,
            retry_in=self._next_interval,
            error=err,
        )

        if self._reachable is False:
            return

        now = datetime.now(UTC)
        since_success = (
            (now - self._last_successful_connection).total_seconds()
            if self._last_successful_connection
            else None
        )
        self._dispatcher.publish(
            ChangeEvent(
                entity_type=EntityType.SWITCH,
                entity_key=self.host,
                change_kind=ChangeKind.CONNECTIVITY_CHANGE,
                previous_value=REACHABLE if self._reachable else None,
                new_value=UNREACHABLE,
                timestamp=now,
                notes=str(err),
                downtime_seconds=since_success,
            )
        )
        self._reachable = False
        self._failure_started = now
        self._reporter.report(False, error_message=str(err))

    def _handle_success(self, snapshot: DeviceSnapshot, latency_ms: int) -> None:
        now = datetime.now(UTC)
        self._state = LoopState.CONNECTED
        self._consecutive_failures = 0
        self._next_interval = self.scan_interval
        self._last_successful_connection = now
        self._last_error = None
        self._last_latency_ms = latency_ms

        if self._reachable is not True:
            downtime = (
                (now - self._failure_started).total_seconds()
                if self._failure_started
                else None
            )
            self._dispatcher.publish(
                ChangeEvent(
                    entity_type=EntityType.SWITCH,
                    entity_key=self.host,
                    change_kind=ChangeKind.CONNECTIVITY_CHANGE,
                    previous_value=UNREACHABLE if self._reachable is False else None,
                    new_value=REACHABLE,
                    timestamp=now,
                    latency_ms=latency_ms,
                    downtime_seconds=downtime,
                )
            )
            if downtime is not None:
                log_info(
                    _LOGGER,
                    CONTEXT_MONITOR,
                    "Switch reachable again",
                    host=self.host,
                    downtime=format_downtime(downtime),
                )
            self._reachable = True
            self._failure_started = None
            self._reporter.report(True, latency_ms=latency_ms)

        if snapshot.vlan_parse_failed and self._previous is not None:
            # Keep the last known VLANs instead of reporting them deleted
            snapshot = replace(
                snapshot,
                vlans=self._previous.vlans,
                vlan_enabled=self._previous.vlan_enabled,
            )

        events = diff_snapshots(self._previous, snapshot)
        for event in events:
            self._dispatcher.publish(event)
        self._previous = snapshot

        log_debug(
            _LOGGER,
            CONTEXT_MONITOR,
            "Poll complete",
            host=self.host,
            latency_ms=latency_ms,
            events=len(events),
        )

    async def _async_run(self) -> None:
        while True:
            await self.async_tick()
            await asyncio.sleep(self._next_interval)

    async def async_start(self) -> None:
        """Start polling in a background task."""
        if self.is_running:
            return
        log_info(
            _LOGGER,
            CONTEXT_MONITOR,
            "Starting monitoring",
            host=self.host,
            scan_interval=self.scan_interval,
        )
        self._dispatcher.start()
        self._task = asyncio.create_task(self._async_run(), name=f"monitor-{self.host}")

    async def async_stop(self) -> None:
        """Stop polling, deliver pending events and close the switch session.

        Safe to call mid-poll: the in-flight poll is cancelled.
        """
        log_info(_LOGGER, CONTEXT_MONITOR, "Stopping monitoring", host=self.host)
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        try:
            await self._dispatcher.stop(EVENT_FLUSH_TIMEOUT)
        finally:
            await self.client.close()
            self._state = LoopState.DISCONNECTED
