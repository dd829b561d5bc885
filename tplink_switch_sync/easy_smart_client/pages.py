"""Render the switch's script-literal pages into canonical text.

The system information and port settings pages carry their data in
JavaScript literals (``info_ds`` and ``all_info``). These helpers pull the
literals out and render the ``key : value`` and pipe-table text understood by
:mod:`.parser`. Unrecognized pages are passed through or rendered as a
notice, so the parser falls back to its defaults.
"""

from __future__ import annotations

import logging
import re

from .const import (
    DEFAULT_MAX_PORTS,
    PORT_FLOW_CONTROL_LABELS,
    PORT_SPEED_LABELS,
    PORT_STATE_LABELS,
    PORT_TRUNK_LABELS,
    UNKNOWN_LABEL,
)

_LOGGER = logging.getLogger(__name__)

# info_ds = new Array("desc", "mac", ...)
SYSTEM_INFO_ARRAY_PATTERN = re.compile(r"var\s+info_ds\s*=\s*new\s+Array\(([^)]*)\);")
# info_ds = {descriStr:["desc"], macStr:["mac"], ...}
SYSTEM_INFO_OBJECT_PATTERN = re.compile(r"var\s+info_ds\s*=\s*\{([\s\S]*?)\};")
ARRAY_STRING_PATTERN = re.compile(r"\"([^\"]*)\"|'([^']*)'")
PORT_INFO_PATTERN = re.compile(r"var\s+all_info\s*=\s*\{([\s\S]*?)\};")
MAX_PORT_PATTERN = re.compile(r"var\s+max_port_num\s*=\s*(\d+)\s*;")

# Field order of the array form, and key names of the object form
SYSTEM_INFO_FIELDS = (
    ("Device Description", "descriStr"),
    ("MAC Address", "macStr"),
    ("IP Address", "ipStr"),
    ("Subnet Mask", "netmaskStr"),
    ("Gateway", "gatewayStr"),
    ("Firmware Version", "firmwareStr"),
    ("Hardware Version", "hardwareStr"),
)

PORT_COLUMNS = ("state", "spd_cfg", "spd_act", "fc_cfg", "fc_act", "trunk_info")

PORT_PARSE_FAILED_TEXT = "Could not parse port information from response."


def render_system_info_page(html: str) -> str:
    """Render the system information page as ``key : value`` lines.

    Tries the ``new Array(...)`` format first, then the object-literal format.
    Falls back to the raw page when neither is present.
    """
    array_match = SYSTEM_INFO_ARRAY_PATTERN.search(html)
    if array_match:
        content = array_match.group(1)
        quoted = ARRAY_STRING_PATTERN.findall(content)
        if quoted:
            parts = [double or single for double, single in quoted]
        else:
            parts = [part.strip() for part in content.split(",")]
        if len(parts) >= len(SYSTEM_INFO_FIELDS):
            return "\n".join(
                f"{label}: {value}"
                for (label, _), value in zip(SYSTEM_INFO_FIELDS, parts, strict=False)
            )
        _LOGGER.debug("info_ds array has %d fields, expected %d", len(parts), len(SYSTEM_INFO_FIELDS))

    object_match = SYSTEM_INFO_OBJECT_PATTERN.search(html)
    if object_match:
        content = object_match.group(1)
        values: dict[str, str] = {}
        for label, key in SYSTEM_INFO_FIELDS:
            match = re.search(rf"\b{key}\s*:\s*\[\s*[\"']([^\"']*)[\"']\s*\]", content)
            if match:
                values[label] = match.group(1)
        if values:
            return "\n".join(
                f"{label}: {values.get(label, '')}" for label, _ in SYSTEM_INFO_FIELDS
            )

    _LOGGER.debug("No info_ds literal found, passing system info page through")
    return html


def extract_int_array(content: str, name: str) -> list[int]:
    """Extract a named integer array such as ``state:[1,0,1]``.

    Entries that do not parse become 0. A missing array yields an empty list.
    """
    match = re.search(rf"\b{re.escape(name)}\s*:\s*\[([\d,\s-]*)\]", content)
    if not match:
        return []
    values: list[int] = []
    for item in match.group(1).split(","):
        item = item.strip()
        if not item:
            continue
        try:
            values.append(int(item))
        except ValueError:
            values.append(0)
    return values


def _label(labels: tuple[str, ...], values: list[int], index: int, clamp: bool) -> str:
    if index >= len(values):
        return UNKNOWN_LABEL
    code = values[index]
    if clamp:
        return labels[max(0, min(code, len(labels) - 1))]
    if 0 <= code < len(labels):
        return labels[code]
    return UNKNOWN_LABEL


def render_port_page(html: str) -> str:
    """Render the port settings page as a pipe-delimited table."""
    match = PORT_INFO_PATTERN.search(html)
    if not match:
        _LOGGER.debug("No all_info literal found in port settings page")
        return PORT_PARSE_FAILED_TEXT

    content = match.group(1)
    columns = {name: extract_int_array(content, name) for name in PORT_COLUMNS}

    max_match = MAX_PORT_PATTERN.search(html)
    max_ports = int(max_match.group(1)) if max_match else DEFAULT_MAX_PORTS

    lines = [
        "=== Port Information ===",
        "Port | Status  | Speed Config | Speed Actual | Flow Ctrl Cfg | Flow Ctrl Act | Trunk",
        "-----|---------|--------------|--------------|---------------|---------------|-------",
    ]
    for index in range(max_ports):
        trunk_values = columns["trunk_info"]
        trunk = ""
        if index < len(trunk_values) and 0 <= trunk_values[index] < len(PORT_TRUNK_LABELS):
            trunk = PORT_TRUNK_LABELS[trunk_values[index]]
        lines.append(
            f"{index + 1:4} | "
            f"{_label(PORT_STATE_LABELS, columns['state'], index, clamp=True):<7} | "
            f"{_label(PORT_SPEED_LABELS, columns['spd_cfg'], index, clamp=False):<12} | "
            f"{_label(PORT_SPEED_LABELS, columns['spd_act'], index, clamp=False):<12} | "
            f"{_label(PORT_FLOW_CONTROL_LABELS, columns['fc_cfg'], index, clamp=True):<13} | "
            f"{_label(PORT_FLOW_CONTROL_LABELS, columns['fc_act'], index, clamp=True):<13} | "
            f"{trunk}"
        )
    return "\n".join(lines)
