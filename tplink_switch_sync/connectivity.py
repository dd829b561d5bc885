"""Connectivity issue and recovery reporting for monitored switches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

_LOGGER = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_downtime(seconds: float) -> str:
    """Format a downtime in compact form.

    Args:
        seconds: Downtime in seconds

    Returns:
        Text such as "30s", "5m 23s" or "1h 1m" (seconds are dropped once
        the downtime reaches an hour)

    """
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    if minutes:
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"
    return f"{secs}s"


@dataclass(frozen=True)
class RecoveryNotice:
    """Summary of an outage that has ended."""

    device_name: str
    started_at: str
    ended_at: str
    downtime: str


class LoggingConnectivityReporter:
    """Report switch connection issues and recoveries through the log."""

    def __init__(self, device_name: str, host: str) -> None:
        self.device_name = device_name
        self.host = host
        self._failure_started: datetime | None = None
        self.last_recovery: RecoveryNotice | None = None

    @property
    def issue_active(self) -> bool:
        """Return True while a connection issue is open."""
        return self._failure_started is not None

    def report(
        self,
        reachable: bool,
        latency_ms: int | None = None,
        error_message: str | None = None,
    ) -> None:
        """Open a connection issue, or close it with a recovery notice."""
        now = datetime.now(UTC)

        if not reachable:
            if self._failure_started is None:
                self._failure_started = now
            _LOGGER.warning(
                "Connection issue: %s (%s) is unreachable: %s",
                self.device_name,
                self.host,
                error_message or "unknown error",
            )
            return

        if self._failure_started is None:
            _LOGGER.info(
                "%s (%s) is reachable (latency: %s ms)",
                self.device_name,
                self.host,
                latency_ms,
            )
            return

        notice = RecoveryNotice(
            device_name=self.device_name,
            started_at=self._failure_started.strftime(TIMESTAMP_FORMAT),
            ended_at=now.strftime(TIMESTAMP_FORMAT),
            downtime=format_downtime((now - self._failure_started).total_seconds()),
        )
        self._failure_started = None
        self.last_recovery = notice
        _LOGGER.info(
            "%s recovered (started: %s, ended: %s, downtime: %s)",
            notice.device_name,
            notice.started_at,
            notice.ended_at,
            notice.downtime,
        )
