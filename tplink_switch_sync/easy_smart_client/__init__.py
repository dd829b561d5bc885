"""TP-Link Easy Smart switch client library."""

from .bitmask import decode_port_mask, encode_port_mask, format_port_range, parse_port_range
from .client import SwitchClient
from .exceptions import (
    SwitchAuthenticationError,
    SwitchClientError,
    SwitchConnectionError,
    SwitchOperationError,
    SwitchUnreachableError,
    SwitchValidationError,
)
from .models import (
    CableDiagnostics,
    ConnectionPhase,
    DeviceSnapshot,
    DiagnosticState,
    PortState,
    PortTable,
    SessionState,
    SystemInfo,
    VlanConfig,
    VlanState,
)
from .parser import (
    parse_cable_diagnostics,
    parse_port_table,
    parse_system_info,
    parse_vlan_config,
)

__all__ = [
    # Client
    "SwitchClient",
    # Bitmask codec
    "decode_port_mask",
    "encode_port_mask",
    "format_port_range",
    "parse_port_range",
    # Parsers
    "parse_cable_diagnostics",
    "parse_port_table",
    "parse_system_info",
    "parse_vlan_config",
    # Models
    "CableDiagnostics",
    "ConnectionPhase",
    "DeviceSnapshot",
    "DiagnosticState",
    "PortState",
    "PortTable",
    "SessionState",
    "SystemInfo",
    "VlanConfig",
    "VlanState",
    # Exceptions
    "SwitchAuthenticationError",
    "SwitchClientError",
    "SwitchConnectionError",
    "SwitchOperationError",
    "SwitchUnreachableError",
    "SwitchValidationError",
]
