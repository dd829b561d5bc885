"""Port membership bitmask codec.

Bit ``i`` of a mask means port ``i + 1`` is a member. Masks are 32 bits wide,
so ports above 32 cannot be represented; callers working with larger switches
get the first 32 ports only.
"""

from __future__ import annotations

from collections.abc import Iterable

from .const import MAX_PORT_BITMASK_SIZE, MAX_SUPPORTED_PORTS, MIN_PORT_NUMBER

_MASK_LIMIT = (1 << MAX_PORT_BITMASK_SIZE) - 1


def decode_port_mask(mask: int, total_ports: int = MAX_PORT_BITMASK_SIZE) -> list[int]:
    """Decode a membership bitmask into an ordered port list.

    Args:
        mask: Bitmask as reported by the switch
        total_ports: Number of ports on the switch (clamped to 32)

    Returns:
        Ascending list of member port numbers

    """
    mask &= _MASK_LIMIT
    limit = max(0, min(total_ports, MAX_PORT_BITMASK_SIZE))
    return [bit + 1 for bit in range(limit) if mask & (1 << bit)]


def encode_port_mask(ports: Iterable[int]) -> int:
    """Encode port numbers into a membership bitmask.

    Ports outside 1..32 are ignored.
    """
    mask = 0
    for port in ports:
        if 1 <= port <= MAX_PORT_BITMASK_SIZE:
            mask |= 1 << (port - 1)
    return mask


def parse_mask_value(text: str) -> int:
    """Parse a decimal or 0x-prefixed hexadecimal mask.

    Raises:
        ValueError: If the text is neither

    """
    value = text.strip().strip("'\"")
    if value.lower().startswith("0x"):
        return int(value, 16)
    return int(value)


def format_port_range(ports: Iterable[int]) -> str:
    """Format port numbers as compact range text, e.g. ``1-4,7``."""
    ordered = sorted(set(ports))
    if not ordered:
        return ""

    parts: list[str] = []
    start = prev = ordered[0]
    for port in ordered[1:]:
        if port == prev + 1:
            prev = port
            continue
        parts.append(str(start) if start == prev else f"{start}-{prev}")
        start = prev = port
    parts.append(str(start) if start == prev else f"{start}-{prev}")
    return ",".join(parts)


def parse_port_range(text: str, max_port: int = MAX_SUPPORTED_PORTS) -> list[int]:
    """Expand range text such as ``1-4,7`` into a sorted, distinct port list.

    Ranges are clipped to 1..max_port and single ports outside it dropped.
    Items that do not parse are skipped.
    """
    ports: set[int] = set()
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        if "-" in item:
            start_text, _, end_text = item.partition("-")
            try:
                start, end = int(start_text), int(end_text)
            except ValueError:
                continue
            ports.update(range(max(start, MIN_PORT_NUMBER), min(end, max_port) + 1))
            continue
        try:
            port = int(item)
        except ValueError:
            continue
        if MIN_PORT_NUMBER <= port <= max_port:
            ports.add(port)
    return sorted(ports)
