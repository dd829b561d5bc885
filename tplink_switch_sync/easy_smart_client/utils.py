"""Utility functions for the Easy Smart switch client."""

from __future__ import annotations

import asyncio
import logging
import re
import socket
from collections.abc import Iterable
from urllib.parse import urlparse

from .const import MAX_SUPPORTED_PORTS, MAX_VLAN_ID, MIN_PORT_NUMBER, MIN_VLAN_ID
from .exceptions import SwitchConnectionError, SwitchValidationError

_LOGGER = logging.getLogger(__name__)

IP_ADDRESS_PATTERN = re.compile(
    r"^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$"
)
HOSTNAME_PATTERN = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$"
)


def build_base_url(host: str) -> str:
    """Return the base URL for a host, defaulting to plain HTTP."""
    host = host.strip().rstrip("/")
    if not host.startswith(("http://", "https://")):
        return f"http://{host}"
    return host


def host_key(host: str) -> str:
    """Return a normalized identity for a host or base URL."""
    parsed = urlparse(build_base_url(host))
    hostname = (parsed.hostname or "").lower()
    return f"{hostname}:{parsed.port}" if parsed.port else hostname


def is_valid_host(host: str | None) -> bool:
    """Return True for a dotted IPv4 address or a DNS hostname."""
    if not host or not host.strip():
        return False
    if IP_ADDRESS_PATTERN.match(host):
        return True
    return len(host) <= 253 and HOSTNAME_PATTERN.match(host) is not None


def validate_port_number(port: int, max_ports: int = MAX_SUPPORTED_PORTS) -> int:
    """Validate a single port number.

    Raises:
        SwitchValidationError: If the port is outside 1..max_ports

    """
    if not isinstance(port, int) or isinstance(port, bool) or not MIN_PORT_NUMBER <= port <= max_ports:
        raise SwitchValidationError(
            f"Invalid port number: {port}. Must be between {MIN_PORT_NUMBER} and {max_ports}."
        )
    return port


def validate_port_numbers(ports: Iterable[int], max_ports: int = MAX_SUPPORTED_PORTS) -> list[int]:
    """Validate a non-empty port list and return it sorted and distinct.

    Raises:
        SwitchValidationError: If the list is empty or any port is out of range

    """
    port_list = list(ports)
    if not port_list:
        raise SwitchValidationError("At least one port must be specified.")
    invalid = [
        port
        for port in port_list
        if not isinstance(port, int) or isinstance(port, bool) or not MIN_PORT_NUMBER <= port <= max_ports
    ]
    if invalid:
        raise SwitchValidationError(
            f"Invalid port number(s): {','.join(str(port) for port in invalid)}"
        )
    return sorted(set(port_list))


def validate_vlan_id(vlan_id: int) -> int:
    """Validate a VLAN id.

    Raises:
        SwitchValidationError: If the id is outside 1..4094

    """
    if not isinstance(vlan_id, int) or isinstance(vlan_id, bool) or not MIN_VLAN_ID <= vlan_id <= MAX_VLAN_ID:
        raise SwitchValidationError(
            f"Invalid VLAN ID: {vlan_id}. Must be between {MIN_VLAN_ID} and {MAX_VLAN_ID}."
        )
    return vlan_id


async def check_socket_connection(
    base_url: str,
    timeout: int = 5,
) -> None:
    """Check if TCP socket connection is possible before HTTP request.

    Performs a quick socket connection test to fail fast when the switch is
    offline, instead of waiting for the full HTTP timeout.

    Args:
        base_url: Base URL of the switch (e.g., "http://192.168.0.1")
        timeout: Socket connection timeout in seconds (default: 5)

    Raises:
        SwitchConnectionError: If socket connection fails

    """
    parsed = urlparse(base_url)
    hostname = parsed.hostname or parsed.netloc.split(":")[0]
    port = parsed.port or (443 if parsed.scheme == "https" else 80)

    _LOGGER.debug("Checking socket connection to %s:%d", hostname, port)

    try:
        sock = await asyncio.wait_for(
            asyncio.get_running_loop().run_in_executor(
                None,
                lambda: socket.create_connection((hostname, port), timeout=timeout),
            ),
            timeout=timeout,
        )
        sock.close()
        _LOGGER.debug("Socket connection to %s:%d successful", hostname, port)

    except TimeoutError as err:
        msg = f"Timeout connecting to {hostname}:{port}"
        _LOGGER.info("%s - switch may be offline", msg)
        raise SwitchConnectionError(msg) from err

    except OSError as err:
        msg = f"Cannot connect to {hostname}:{port}"
        _LOGGER.info("%s - %s", msg, err)
        raise SwitchConnectionError(f"{msg}: {err}") from err
