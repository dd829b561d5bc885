"""Diagnostics support for monitored switches."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict
from datetime import datetime
from typing import Any

from .config import DeviceConfig
from .const import CONF_HOST, CONF_PASSWORD, CONF_USERNAME, DOMAIN, VERSION
from .monitor import MonitoringLoop

REDACTED = "**REDACTED**"

# Keys to redact from diagnostics output
TO_REDACT = {
    CONF_HOST,
    CONF_PASSWORD,
    CONF_USERNAME,
    "token",
    "mac_address",
    "ip_address",
    "gateway",
}


def redact_data(data: Any, to_redact: set[str]) -> Any:
    """Return a copy of ``data`` with the given keys redacted at any depth."""
    if isinstance(data, Mapping):
        return {
            key: REDACTED if key in to_redact else redact_data(value, to_redact)
            for key, value in data.items()
        }
    if isinstance(data, list | tuple):
        return [redact_data(item, to_redact) for item in data]
    return data


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def get_monitor_diagnostics(monitor: MonitoringLoop, config: DeviceConfig) -> dict[str, Any]:
    """Return a JSON-serializable health report for one monitored switch."""
    config_data = {
        "domain": DOMAIN,
        "version": VERSION,
        "data": redact_data(asdict(config), TO_REDACT),
    }

    session = monitor.client.state
    session_data = {
        "phase": str(monitor.client.phase),
        "authenticated": monitor.is_authenticated,
        "issued_at": _isoformat(session.issued_at) if session else None,
        "expires_at": _isoformat(session.expires_at) if session else None,
    }

    monitor_data = {
        "state": str(monitor.state),
        "running": monitor.is_running,
        "reachable": monitor.is_reachable,
        "consecutive_failures": monitor.consecutive_failures,
        "next_interval_seconds": monitor.next_interval,
        "last_successful_connection": _isoformat(monitor.last_successful_connection),
        "last_cookie_renewal": _isoformat(monitor.last_cookie_renewal),
        "last_latency_ms": monitor.last_latency_ms,
        "last_error": monitor.last_error,
        "pending_events": monitor.dispatcher.pending,
    }

    # Counts only, no port or VLAN details
    snapshot_summary: dict[str, Any] = {}
    snapshot = monitor.latest_snapshot
    if snapshot is not None:
        snapshot_summary = {
            "captured_at": _isoformat(snapshot.captured_at),
            "system_info": redact_data(asdict(snapshot.system_info), TO_REDACT),
            "max_ports": snapshot.max_ports,
            "port_count": len(snapshot.ports),
            "ports_enabled": sum(1 for port in snapshot.ports if port.is_enabled),
            "ports_connected": sum(1 for port in snapshot.ports if port.is_connected),
            "vlan_enabled": snapshot.vlan_enabled,
            "vlan_count": len(snapshot.vlans),
            "vlan_parse_failed": snapshot.vlan_parse_failed,
            "cable_diagnostic_count": len(snapshot.cable_diagnostics),
        }

    return {
        "config": config_data,
        "session": session_data,
        "monitor": monitor_data,
        "snapshot_summary": snapshot_summary,
    }
