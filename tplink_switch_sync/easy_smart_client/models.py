"""Data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from .const import (
    CABLE_CATEGORY_DISCONNECTED,
    CABLE_CATEGORY_HEALTHY,
    CABLE_CATEGORY_ISSUE,
    CABLE_CATEGORY_UNKNOWN,
    CABLE_CATEGORY_UNTESTED,
    DEFAULT_MAX_PORTS,
    LINK_DOWN_LABEL,
    PORT_ENABLED_LABEL,
)


class ConnectionPhase(StrEnum):
    """Phases of the authenticated conversation with a switch."""

    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    SESSION_EXPIRED = "session_expired"


@dataclass(frozen=True)
class SessionState:
    """Authenticated session with a switch."""

    token: str | None  # SessionID cookie value, if the switch set one
    issued_at: datetime
    expires_at: datetime
    authenticated: bool = True

    @classmethod
    def issue(cls, token: str | None, lifetime: float) -> SessionState:
        """Create a fresh session state valid for ``lifetime`` seconds."""
        now = datetime.now(UTC)
        return cls(
            token=token,
            issued_at=now,
            expires_at=now + timedelta(seconds=lifetime),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once the session lifetime has elapsed."""
        return (now or datetime.now(UTC)) >= self.expires_at


@dataclass(frozen=True)
class SystemInfo:
    """System information page."""

    device_name: str = ""
    mac_address: str = ""
    ip_address: str = ""
    subnet_mask: str = ""
    gateway: str = ""
    firmware_version: str = ""
    hardware_version: str = ""


@dataclass(frozen=True)
class PortState:
    """One row of the port settings page."""

    port_number: int
    status: str = ""
    speed_config: str = ""
    speed_actual: str = ""
    flow_control_config: str = ""
    flow_control_actual: str = ""
    trunk: str = ""

    @property
    def is_enabled(self) -> bool:
        return self.status == PORT_ENABLED_LABEL

    @property
    def is_connected(self) -> bool:
        return self.speed_actual != LINK_DOWN_LABEL


@dataclass(frozen=True)
class PortTable:
    """Parsed port settings page."""

    ports: tuple[PortState, ...] = ()
    max_ports: int = DEFAULT_MAX_PORTS


@dataclass(frozen=True)
class VlanState:
    """A VLAN and its port membership.

    A port may be listed in both sets when the switch reports it that way;
    the sets are kept exactly as decoded.
    """

    vlan_id: int
    name: str = ""
    tagged_ports: frozenset[int] = field(default_factory=frozenset)
    untagged_ports: frozenset[int] = field(default_factory=frozenset)

    @property
    def member_ports(self) -> list[int]:
        return sorted(self.tagged_ports | self.untagged_ports)


@dataclass(frozen=True)
class VlanConfig:
    """Parsed VLAN configuration page."""

    enabled: bool = False
    total_ports: int = DEFAULT_MAX_PORTS
    vlan_count: int = 0
    vlans: tuple[VlanState, ...] = ()
    parse_failed: bool = False  # True when the defaults stand in for unparsable data


@dataclass(frozen=True)
class DiagnosticState:
    """Cable diagnostic result for one port."""

    port_number: int
    state_code: int
    state_description: str
    length_meters: int | None
    healthy: bool
    issue: bool
    untested: bool
    disconnected: bool

    @property
    def category(self) -> str:
        if self.healthy:
            return CABLE_CATEGORY_HEALTHY
        if self.issue:
            return CABLE_CATEGORY_ISSUE
        if self.untested:
            return CABLE_CATEGORY_UNTESTED
        if self.disconnected:
            return CABLE_CATEGORY_DISCONNECTED
        return CABLE_CATEGORY_UNKNOWN


@dataclass(frozen=True)
class CableDiagnostics:
    """Parsed cable diagnostic page."""

    max_ports: int = DEFAULT_MAX_PORTS
    diagnostics: tuple[DiagnosticState, ...] = ()


@dataclass(frozen=True)
class DeviceSnapshot:
    """Complete view of a switch at one poll."""

    system_info: SystemInfo
    ports: tuple[PortState, ...]
    vlans: tuple[VlanState, ...]
    cable_diagnostics: tuple[DiagnosticState, ...]
    captured_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)
    max_ports: int = DEFAULT_MAX_PORTS
    vlan_enabled: bool = False
    vlan_parse_failed: bool = False

    def port(self, port_number: int) -> PortState | None:
        """Return the port with the given number, if present."""
        for port in self.ports:
            if port.port_number == port_number:
                return port
        return None

    def vlan(self, vlan_id: int) -> VlanState | None:
        """Return the VLAN with the given id, if present."""
        for vlan in self.vlans:
            if vlan.vlan_id == vlan_id:
                return vlan
        return None
