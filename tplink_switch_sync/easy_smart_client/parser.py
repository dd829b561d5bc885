"""Response parsers for Easy Smart switch pages.

Every parser is a pure function of the page text: no I/O, and no exception
escapes. Malformed input yields a complete structure filled with defaults.

VLAN pages come in two shapes, and the parser picks one by sniffing:

- structured: a ``qvlan_ds``/``pvlan_ds`` literal with parallel ``vids``,
  ``names``, ``tagMbrs`` and ``untagMbrs`` arrays (masks decimal or 0x-hex),
- legacy: ``vlanId | portRange`` rows under a ``VLAN ID | Member Ports`` header.
"""

from __future__ import annotations

import logging
import re

from .bitmask import decode_port_mask, parse_mask_value, parse_port_range
from .const import (
    CABLE_STATE_ISSUE_CODES,
    CABLE_STATE_MAP,
    CABLE_STATE_NO_CABLE,
    CABLE_STATE_NORMAL,
    CABLE_STATE_OTHER,
    CABLE_STATE_UNTESTED,
    DEFAULT_MAX_PORTS,
    MAX_SUPPORTED_PORTS,
    MAX_VLAN_ID,
    MIN_PORT_NUMBER,
    MIN_VLAN_ID,
    PORT_TABLE_HEADER,
    PORT_TABLE_SEPARATOR,
    SYSTEM_INFO_KEYS,
    VLAN_TABLE_HEADER,
    VLAN_TABLE_SEPARATOR,
)
from .models import (
    CableDiagnostics,
    DiagnosticState,
    PortState,
    PortTable,
    SystemInfo,
    VlanConfig,
    VlanState,
)

_LOGGER = logging.getLogger(__name__)

# Structured VLAN page rules
STRUCTURED_VLAN_MARKER = re.compile(r"\b(?:qvlan_ds|pvlan_ds)\b|\bvids\s*:\s*\[")
VLAN_STATE_PATTERN = re.compile(r"\bstate\s*:\s*(\d+)")
VLAN_PORT_NUM_PATTERN = re.compile(r"\bportNum\s*:\s*(\d+)")
VLAN_COUNT_PATTERN = re.compile(r"\bcount\s*:\s*(\d+)")
VLAN_IDS_PATTERN = re.compile(r"\bvids\s*:\s*\[([^\]]*)\]")
VLAN_NAMES_PATTERN = re.compile(r"\bnames\s*:\s*\[([^\]]*)\]")
VLAN_TAGGED_PATTERN = re.compile(r"\btagMbrs\s*:\s*\[([^\]]*)\]")
VLAN_UNTAGGED_PATTERN = re.compile(r"\buntagMbrs\s*:\s*\[([^\]]*)\]")
VLAN_MEMBERS_PATTERN = re.compile(r"\bmbrs\s*:\s*\[([^\]]*)\]")
QUOTED_STRING_PATTERN = re.compile(r"\"([^\"]*)\"|'([^']*)'")

# Cable diagnostic page rules
CABLE_STATE_PATTERN = re.compile(r"\bcablestate\s*=\s*\[([^\]]*)\]")
CABLE_LENGTH_PATTERN = re.compile(r"\bcablelength\s*=\s*\[([^\]]*)\]")
CABLE_MAX_PORT_PATTERN = re.compile(r"\bmaxPort\s*=\s*(\d+)")


def parse_system_info(text: str) -> SystemInfo:
    """Parse ``key : value`` lines into a SystemInfo."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        field_name = SYSTEM_INFO_KEYS.get(key.strip())
        if field_name:
            values[field_name] = value.strip()
    return SystemInfo(**values)


def parse_port_table(text: str) -> PortTable:
    """Parse the pipe-delimited port table.

    Rows whose first column is not a port number, or with fewer than six
    columns, are dropped. ``max_ports`` is the highest port seen, or 24.
    """
    ports: list[PortState] = []
    data_started = False
    for line in text.splitlines():
        if PORT_TABLE_HEADER in line:
            data_started = True
            continue
        if PORT_TABLE_SEPARATOR in line or not data_started or not line.strip():
            continue

        parts = [part.strip() for part in line.split("|")]
        if len(parts) < 6:
            continue
        try:
            port_number = int(parts[0])
        except ValueError:
            continue
        if port_number < MIN_PORT_NUMBER:
            continue
        ports.append(
            PortState(
                port_number=port_number,
                status=parts[1],
                speed_config=parts[2],
                speed_actual=parts[3],
                flow_control_config=parts[4],
                flow_control_actual=parts[5],
                trunk=parts[6] if len(parts) > 6 else "",
            )
        )

    max_ports = max((port.port_number for port in ports), default=DEFAULT_MAX_PORTS)
    return PortTable(ports=tuple(ports), max_ports=max_ports)


def is_structured_vlan_page(text: str) -> bool:
    """Return True if the payload carries a structured VLAN literal."""
    return STRUCTURED_VLAN_MARKER.search(text) is not None


def parse_vlan_config(text: str) -> VlanConfig:
    """Parse a VLAN page, picking the structured or legacy format."""
    if is_structured_vlan_page(text):
        return parse_structured_vlan_config(text)
    return parse_legacy_vlan_config(text)


def _split_items(content: str) -> list[str]:
    return [item.strip() for item in re.split(r"[,\r\n]+", content) if item.strip()]


def _parse_names(content: str) -> list[str]:
    quoted = QUOTED_STRING_PATTERN.findall(content)
    if quoted:
        return [double or single for double, single in quoted]
    return _split_items(content)


def parse_structured_vlan_config(text: str) -> VlanConfig:
    """Parse the structured VLAN literal.

    Any failure yields the empty default with ``parse_failed`` set.
    """
    try:
        state_match = VLAN_STATE_PATTERN.search(text)
        enabled = bool(state_match) and state_match.group(1) == "1"

        port_num_match = VLAN_PORT_NUM_PATTERN.search(text)
        total_ports = int(port_num_match.group(1)) if port_num_match else DEFAULT_MAX_PORTS

        ids_match = VLAN_IDS_PATTERN.search(text)
        vlan_ids = [int(item) for item in _split_items(ids_match.group(1))] if ids_match else []

        names_match = VLAN_NAMES_PATTERN.search(text)
        names = _parse_names(names_match.group(1)) if names_match else None

        tagged_match = VLAN_TAGGED_PATTERN.search(text)
        tagged_masks = (
            [parse_mask_value(item) for item in _split_items(tagged_match.group(1))]
            if tagged_match
            else []
        )

        untagged_match = VLAN_UNTAGGED_PATTERN.search(text) or VLAN_MEMBERS_PATTERN.search(text)
        untagged_masks = (
            [parse_mask_value(item) for item in _split_items(untagged_match.group(1))]
            if untagged_match
            else []
        )

        entry_count = len(vlan_ids) if names is None else min(len(vlan_ids), len(names))
        vlans: list[VlanState] = []
        for index in range(entry_count):
            vlan_id = vlan_ids[index]
            if not MIN_VLAN_ID <= vlan_id <= MAX_VLAN_ID:
                _LOGGER.debug("Skipping out-of-range VLAN id %d", vlan_id)
                continue
            tagged = tagged_masks[index] if index < len(tagged_masks) else 0
            untagged = untagged_masks[index] if index < len(untagged_masks) else 0
            vlans.append(
                VlanState(
                    vlan_id=vlan_id,
                    name=names[index] if names is not None else "",
                    tagged_ports=frozenset(decode_port_mask(tagged, total_ports)),
                    untagged_ports=frozenset(decode_port_mask(untagged, total_ports)),
                )
            )

        count_match = VLAN_COUNT_PATTERN.search(text)
        if count_match and int(count_match.group(1)) != len(vlans):
            _LOGGER.debug(
                "VLAN page reports count=%s, parsed %d entries",
                count_match.group(1),
                len(vlans),
            )

        return VlanConfig(
            enabled=enabled,
            total_ports=total_ports,
            vlan_count=len(vlans),
            vlans=tuple(vlans),
        )
    except Exception as err:
        _LOGGER.debug("Structured VLAN parse failed: %s", err)
        return VlanConfig(parse_failed=True)


def parse_legacy_vlan_config(text: str) -> VlanConfig:
    """Parse ``vlanId | portRange`` rows. Legacy VLANs are untagged-only.

    Without a header line every line is a candidate row.
    """
    has_header = VLAN_TABLE_HEADER in text
    data_started = not has_header
    enabled: bool | None = None
    total_ports = DEFAULT_MAX_PORTS
    members: dict[int, str] = {}

    for line in text.splitlines():
        if "Status:" in line:
            enabled = "Enabled" in line
            continue
        if "Total Ports:" in line:
            _, _, value = line.partition(":")
            try:
                total_ports = int(value.strip())
            except ValueError:
                pass
            continue
        if VLAN_TABLE_HEADER in line:
            data_started = True
            continue
        if VLAN_TABLE_SEPARATOR in line or not data_started:
            continue

        parts = [part.strip() for part in line.split("|")]
        if len(parts) < 2:
            continue
        try:
            vlan_id = int(parts[0])
        except ValueError:
            continue
        if not MIN_VLAN_ID <= vlan_id <= MAX_VLAN_ID:
            continue
        members[vlan_id] = parts[1]

    # Members are bounded by the port count, which may be reported after the rows
    max_port = min(total_ports, MAX_SUPPORTED_PORTS)
    vlans = [
        VlanState(
            vlan_id=vlan_id,
            untagged_ports=frozenset(parse_port_range(port_text, max_port)),
        )
        for vlan_id, port_text in members.items()
    ]

    return VlanConfig(
        enabled=bool(vlans) if enabled is None else enabled,
        total_ports=total_ports,
        vlan_count=len(vlans),
        vlans=tuple(vlans),
    )


def _parse_int_list(content: str) -> list[int]:
    values: list[int] = []
    for item in content.split(","):
        try:
            values.append(int(item.strip()))
        except ValueError:
            values.append(CABLE_STATE_UNTESTED)
    return values


def describe_cable_state(state_code: int) -> str:
    """Return the display text for a cable diagnostic state code."""
    return CABLE_STATE_MAP.get(state_code, CABLE_STATE_OTHER)


def parse_cable_diagnostics(text: str) -> CableDiagnostics:
    """Parse the cable diagnostic state/length arrays."""
    state_match = CABLE_STATE_PATTERN.search(text)
    states = _parse_int_list(state_match.group(1)) if state_match else []

    length_match = CABLE_LENGTH_PATTERN.search(text)
    lengths = _parse_int_list(length_match.group(1)) if length_match else []

    max_match = CABLE_MAX_PORT_PATTERN.search(text)
    max_ports = int(max_match.group(1)) if max_match else DEFAULT_MAX_PORTS

    diagnostics: list[DiagnosticState] = []
    for index, state_code in enumerate(states[:max_ports]):
        length = lengths[index] if index < len(lengths) else -1
        diagnostics.append(
            DiagnosticState(
                port_number=index + 1,
                state_code=state_code,
                state_description=describe_cable_state(state_code),
                length_meters=length if length >= 0 else None,
                healthy=state_code == CABLE_STATE_NORMAL,
                issue=state_code in CABLE_STATE_ISSUE_CODES,
                untested=state_code == CABLE_STATE_UNTESTED,
                disconnected=state_code == CABLE_STATE_NO_CABLE,
            )
        )

    return CableDiagnostics(max_ports=max_ports, diagnostics=tuple(diagnostics))
