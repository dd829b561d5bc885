"""Easy Smart switch login.

The switch has no API authentication. A session is opened by posting the
web console's login form to ``/logon.cgi``; the switch answers with a
``SessionID`` cookie and serves the management pages until it expires.
Any page that links back to ``logon.cgi`` is the login page, which means
the session is missing or expired.
"""

from __future__ import annotations

import logging

import aiohttp

from .const import (
    ENDPOINT_LOGIN,
    ENDPOINT_ROOT,
    ENDPOINT_SYSTEM_INFO,
    LOGIN_PAGE_MARKER,
    LOGIN_TIMEOUT,
    OPERATION_SUCCESSFUL_MARKER,
    TEST_CONNECTION_TIMEOUT,
)
from .exceptions import (
    SwitchAuthenticationError,
    SwitchConnectionError,
    SwitchUnreachableError,
)
from .utils import check_socket_connection

_LOGGER = logging.getLogger(__name__)


def build_login_form(username: str, password: str) -> dict[str, str]:
    """Build the form posted to ``/logon.cgi``."""
    return {"username": username, "password": password, "logon": "Login"}


def is_login_page(text: str) -> bool:
    """Return True if the body is the login page (session missing or expired)."""
    return LOGIN_PAGE_MARKER in text


def is_operation_successful(text: str) -> bool:
    """Return True if a write response carries the success notice."""
    return OPERATION_SUCCESSFUL_MARKER in text


async def async_login(
    session: aiohttp.ClientSession,
    base_url: str,
    username: str,
    password: str,
    timeout: int = LOGIN_TIMEOUT,
    test_timeout: int = TEST_CONNECTION_TIMEOUT,
) -> None:
    """Log in to the switch web console.

    Checks that the switch accepts TCP connections, posts the login form if
    the root page asks for it, then verifies that the system information
    page is served without a redirect to the login page. The session cookie
    ends up in the session's cookie jar.

    Args:
        session: aiohttp client session (its cookie jar keeps the SessionID)
        base_url: Base URL of the switch (e.g., http://192.168.0.1)
        username: Console username
        password: Console password
        timeout: Timeout for each login request in seconds
        test_timeout: Timeout for the reachability check in seconds

    Raises:
        SwitchUnreachableError: If the switch cannot be reached
        SwitchAuthenticationError: If the switch rejects the credentials

    """
    try:
        await check_socket_connection(base_url, timeout=test_timeout)
    except SwitchConnectionError as err:
        raise SwitchUnreachableError(
            f"Cannot connect to switch at {base_url}. "
            "Check the IP address and network connectivity."
        ) from err

    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        async with session.get(
            f"{base_url}{ENDPOINT_ROOT}", timeout=client_timeout
        ) as response:
            root_page = await response.text(errors="replace")

        if is_login_page(root_page):
            _LOGGER.debug("Posting login form to %s%s", base_url, ENDPOINT_LOGIN)
            async with session.post(
                f"{base_url}{ENDPOINT_LOGIN}",
                data=build_login_form(username, password),
                timeout=client_timeout,
            ) as response:
                _LOGGER.debug("Login form response: status=%d", response.status)
        else:
            _LOGGER.debug("Root page did not ask for a login, verifying access")

        async with session.get(
            f"{base_url}{ENDPOINT_SYSTEM_INFO}", timeout=client_timeout
        ) as response:
            status = response.status
            verify_page = await response.text(errors="replace")

    except (aiohttp.ClientError, TimeoutError) as err:
        _LOGGER.debug("Login request failed: %s (type=%s)", err, type(err).__name__)
        raise SwitchUnreachableError(
            f"Connection error during login to {base_url}: {err}"
        ) from err

    if status != 200 or is_login_page(verify_page):
        _LOGGER.error("Login to %s failed (verification status=%d)", base_url, status)
        raise SwitchAuthenticationError(
            "Login failed - check username and password"
        )

    _LOGGER.debug("Logged in to %s as %s", base_url, username)
