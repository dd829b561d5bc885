"""Easy Smart switch client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from types import TracebackType

import aiohttp
from yarl import URL

from .auth import async_login, is_login_page, is_operation_successful
from .const import (
    CABLE_TEST_ACTION,
    DEFAULT_TIMEOUT,
    ENDPOINT_CABLE_DIAGNOSTIC,
    ENDPOINT_PORT_CONFIG,
    ENDPOINT_PORT_SETTINGS,
    ENDPOINT_REBOOT,
    ENDPOINT_ROOT,
    ENDPOINT_SYSTEM_INFO,
    ENDPOINT_VLAN_CONFIG,
    ENDPOINT_VLAN_SET,
    LOGIN_TIMEOUT,
    PORT_CONFIG_APPLY,
    PORT_SPEED_AUTO,
    PORT_SPEED_CODES,
    SESSION_COOKIE_NAME,
    SESSION_LIFETIME,
    TEST_CONNECTION_TIMEOUT,
    VALUE_SUFFIX,
    VLAN_ADD_ACTION,
    VLAN_DELETE_ACTION,
)
from .exceptions import (
    SwitchClientError,
    SwitchConnectionError,
    SwitchOperationError,
    SwitchValidationError,
)
from .models import (
    CableDiagnostics,
    ConnectionPhase,
    DeviceSnapshot,
    PortTable,
    SessionState,
    SystemInfo,
    VlanConfig,
)
from .pages import render_port_page, render_system_info_page
from .parser import (
    parse_cable_diagnostics,
    parse_port_table,
    parse_system_info,
    parse_vlan_config,
)
from .utils import (
    build_base_url,
    validate_port_number,
    validate_port_numbers,
    validate_vlan_id,
)

_LOGGER = logging.getLogger(__name__)


def build_query(pairs: Iterable[tuple[str, object]], action: str) -> str:
    """Build a CGI query string with suffixed values, e.g. ``vid=10^&pvlan_add=Apply``."""
    params = [f"{key}={value}{VALUE_SUFFIX}" for key, value in pairs]
    params.append(action)
    return "&".join(params)


class SwitchClient:
    """Authenticated session with one Easy Smart switch.

    All requests and logins are serialized by a per-client lock, so a
    monitoring loop and on-demand callers can share one instance.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        session: aiohttp.ClientSession | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        login_timeout: int = LOGIN_TIMEOUT,
        test_timeout: int = TEST_CONNECTION_TIMEOUT,
        session_lifetime: int = SESSION_LIFETIME,
    ):
        """Initialize the switch client.

        Args:
            host: Switch IP address, hostname or base URL
            username: Console username
            password: Console password
            session: Optional aiohttp session. If None, the client creates one
                with a cookie jar that accepts cookies from IP addresses, and
                closes it on close().
            timeout: Timeout for page requests in seconds
            login_timeout: Timeout for login requests in seconds
            test_timeout: Timeout for reachability checks in seconds
            session_lifetime: Seconds before the switch expires a session

        """
        self.base_url = build_base_url(host)
        self.username = username
        self._password = password
        self._session = session
        self._owns_session = session is None
        self.timeout = timeout
        self.login_timeout = login_timeout
        self.test_timeout = test_timeout
        self.session_lifetime = session_lifetime
        self._lock = asyncio.Lock()
        self._phase = ConnectionPhase.LOGGED_OUT
        self._state: SessionState | None = None

    @property
    def phase(self) -> ConnectionPhase:
        """Return the current connection phase."""
        return self._phase

    @property
    def state(self) -> SessionState | None:
        """Return the current session state, if logged in."""
        return self._state

    @property
    def is_authenticated(self) -> bool:
        """Return True while an unexpired session is held."""
        return (
            self._phase == ConnectionPhase.AUTHENTICATED
            and self._state is not None
            and not self._state.is_expired()
        )

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                cookie_jar=aiohttp.CookieJar(unsafe=True)
            )
            self._owns_session = True
        return self._session

    def _session_token(self, session: aiohttp.ClientSession) -> str | None:
        cookie = session.cookie_jar.filter_cookies(URL(self.base_url)).get(
            SESSION_COOKIE_NAME
        )
        return cookie.value if cookie is not None else None

    async def login(self) -> SessionState:
        """Log in and start a new session.

        Raises:
            SwitchUnreachableError: If the switch cannot be reached
            SwitchAuthenticationError: If the switch rejects the credentials

        """
        async with self._lock:
            return await self._login_locked()

    async def renew(self) -> SessionState:
        """Replace the current session with a fresh one before it expires."""
        async with self._lock:
            _LOGGER.debug("Renewing session with %s", self.base_url)
            return await self._login_locked()

    async def _login_locked(self) -> SessionState:
        session = self._ensure_session()
        self._phase = ConnectionPhase.AUTHENTICATING
        self._state = None
        try:
            await async_login(
                session,
                self.base_url,
                self.username,
                self._password,
                timeout=self.login_timeout,
                test_timeout=self.test_timeout,
            )
        except Exception:
            self._phase = ConnectionPhase.LOGGED_OUT
            raise

        self._state = SessionState.issue(
            self._session_token(session), self.session_lifetime
        )
        self._phase = ConnectionPhase.AUTHENTICATED
        _LOGGER.info("Logged in to switch at %s", self.base_url)
        return self._state

    async def execute(
        self,
        endpoint: str,
        method: str = "GET",
        data: Mapping[str, str] | None = None,
        query: str | None = None,
        timeout: int | None = None,
    ) -> str:
        """Send a request within the authenticated session.

        Logs in first when no live session is held. If the switch answers
        with its login page the session has expired: the client logs in once
        more and retries the request once.

        Args:
            endpoint: Page or CGI path (e.g., "/SystemInfoRpm.htm")
            method: HTTP method
            data: Optional form fields
            query: Optional pre-encoded query string
            timeout: Request timeout in seconds (default: client timeout)

        Returns:
            Response body text

        Raises:
            SwitchConnectionError: If the request fails, or the session
                expires again right after the re-login
            SwitchAuthenticationError: If the re-login is rejected

        """
        async with self._lock:
            if not self.is_authenticated:
                await self._login_locked()

            text = await self._request(endpoint, method, data, query, timeout)
            if not is_login_page(text):
                return text

            _LOGGER.info("Session with %s expired, logging in again", self.base_url)
            self._phase = ConnectionPhase.SESSION_EXPIRED
            await self._login_locked()

            text = await self._request(endpoint, method, data, query, timeout)
            if is_login_page(text):
                self._phase = ConnectionPhase.SESSION_EXPIRED
                raise SwitchConnectionError(
                    f"Session expired again after re-login ({method} {endpoint})"
                )
            return text

    async def _request(
        self,
        endpoint: str,
        method: str,
        data: Mapping[str, str] | None,
        query: str | None,
        timeout: int | None,
    ) -> str:
        session = self._ensure_session()
        url = f"{self.base_url}{endpoint}"
        if query:
            url = f"{url}?{query}"

        try:
            async with session.request(
                method,
                URL(url, encoded=True),
                data=data,
                timeout=aiohttp.ClientTimeout(total=timeout or self.timeout),
            ) as response:
                if response.status != 200:
                    raise SwitchConnectionError(
                        f"{method} {endpoint} failed: HTTP {response.status}"
                    )
                text = await response.text(errors="replace")
        except (aiohttp.ClientError, TimeoutError) as err:
            raise SwitchConnectionError(f"{method} {endpoint} error: {err}") from err

        _LOGGER.debug("%s %s: %d bytes", method, endpoint, len(text))
        return text

    async def test_connection(self, timeout: int | None = None) -> bool:
        """Return True if the switch answers its root page.

        Never raises and never touches the session state.
        """
        session = self._ensure_session()
        try:
            async with session.get(
                f"{self.base_url}{ENDPOINT_ROOT}",
                timeout=aiohttp.ClientTimeout(total=timeout or self.test_timeout),
            ) as response:
                return response.status == 200
        except (aiohttp.ClientError, TimeoutError, OSError) as err:
            _LOGGER.debug("Connection test to %s failed: %s", self.base_url, err)
            return False

    async def get_system_info(self) -> SystemInfo:
        """Fetch the system information page."""
        html = await self.execute(ENDPOINT_SYSTEM_INFO)
        return parse_system_info(render_system_info_page(html))

    async def get_port_info(self) -> PortTable:
        """Fetch the port settings page."""
        html = await self.execute(ENDPOINT_PORT_SETTINGS)
        return parse_port_table(render_port_page(html))

    async def get_vlan_config(self) -> VlanConfig:
        """Fetch the VLAN configuration page."""
        html = await self.execute(ENDPOINT_VLAN_CONFIG)
        config = parse_vlan_config(html)
        if config.parse_failed:
            _LOGGER.warning(
                "Could not parse VLAN configuration from %s, using defaults",
                self.base_url,
            )
        return config

    async def get_cable_diagnostics(self) -> CableDiagnostics:
        """Fetch the results of the last cable test."""
        html = await self.execute(ENDPOINT_CABLE_DIAGNOSTIC)
        return parse_cable_diagnostics(html)

    async def run_cable_diagnostics(self, ports: Iterable[int]) -> CableDiagnostics:
        """Run a cable test on the given ports and return the results.

        Raises:
            SwitchValidationError: If the list is empty or a port is out of range

        """
        port_list = validate_port_numbers(ports)
        query = build_query(
            ((f"chk_{port}", port) for port in port_list), CABLE_TEST_ACTION
        )
        _LOGGER.info("Running cable diagnostics on ports %s", port_list)
        html = await self.execute(ENDPOINT_CABLE_DIAGNOSTIC, query=query)
        return parse_cable_diagnostics(html)

    async def get_snapshot(self) -> DeviceSnapshot:
        """Fetch all pages and build a complete device snapshot."""
        system_info = await self.get_system_info()
        port_table = await self.get_port_info()
        vlan_config = await self.get_vlan_config()
        cable = await self.get_cable_diagnostics()
        return DeviceSnapshot(
            system_info=system_info,
            ports=port_table.ports,
            vlans=vlan_config.vlans,
            cable_diagnostics=cable.diagnostics,
            max_ports=port_table.max_ports,
            vlan_enabled=vlan_config.enabled,
            vlan_parse_failed=vlan_config.parse_failed,
        )

    async def set_port_config(
        self,
        port: int,
        enable: bool,
        speed: int = PORT_SPEED_AUTO,
        flow_control: bool = False,
    ) -> None:
        """Configure state, speed and flow control of a port.

        Raises:
            SwitchValidationError: If the port or speed code is invalid

        """
        validate_port_number(port)
        if speed not in PORT_SPEED_CODES:
            raise SwitchValidationError(
                f"Invalid speed code: {speed}. Must be between "
                f"{PORT_SPEED_CODES.start} and {PORT_SPEED_CODES.stop - 1}."
            )
        form = {
            "portid": f"{port}{VALUE_SUFFIX}",
            "state": f"{int(enable)}{VALUE_SUFFIX}",
            "speed": f"{speed}{VALUE_SUFFIX}",
            "flowcontrol": f"{int(flow_control)}{VALUE_SUFFIX}",
            "apply": PORT_CONFIG_APPLY,
        }
        _LOGGER.info(
            "Configuring port %d: enabled=%s speed=%d flow_control=%s",
            port,
            enable,
            speed,
            flow_control,
        )
        await self.execute(ENDPOINT_PORT_CONFIG, method="POST", data=form)

    async def create_vlan(self, vlan_id: int, ports: Iterable[int]) -> None:
        """Create a port-based VLAN with the given member ports.

        Raises:
            SwitchValidationError: If the VLAN id or a port is out of range
            SwitchOperationError: If the switch does not confirm the change

        """
        validate_vlan_id(vlan_id)
        port_list = validate_port_numbers(ports)
        pairs = [("vid", vlan_id)] + [("selPorts", port) for port in port_list]
        html = await self.execute(
            ENDPOINT_VLAN_SET, query=build_query(pairs, VLAN_ADD_ACTION)
        )
        if not is_operation_successful(html):
            raise SwitchOperationError(
                f"VLAN {vlan_id} creation was not confirmed by the switch"
            )
        _LOGGER.info("Created VLAN %d with ports %s", vlan_id, port_list)

    async def delete_vlans(self, vlan_ids: Iterable[int]) -> None:
        """Delete port-based VLANs.

        Raises:
            SwitchValidationError: If the list is empty or an id is out of range
            SwitchOperationError: If the switch does not confirm the change

        """
        id_list = list(vlan_ids)
        if not id_list:
            raise SwitchValidationError("At least one VLAN ID must be specified.")
        for vlan_id in id_list:
            validate_vlan_id(vlan_id)

        html = await self.execute(
            ENDPOINT_VLAN_SET,
            query=build_query((("selVlans", vid) for vid in id_list), VLAN_DELETE_ACTION),
        )
        if not is_operation_successful(html):
            raise SwitchOperationError(
                f"Deletion of VLAN(s) {id_list} was not confirmed by the switch"
            )
        _LOGGER.info("Deleted VLAN(s) %s", id_list)

    async def reboot(self) -> None:
        """Reboot the switch without saving. The current session ends."""
        _LOGGER.info("Rebooting switch at %s", self.base_url)
        await self.execute(
            ENDPOINT_REBOOT,
            method="POST",
            data={"reboot_op": f"reboot{VALUE_SUFFIX}", "save_op": "false"},
        )
        async with self._lock:
            self._drop_session()

    def _drop_session(self) -> None:
        self._state = None
        self._phase = ConnectionPhase.LOGGED_OUT
        if self._session is not None:
            self._session.cookie_jar.clear()

    async def logout(self) -> None:
        """Forget the session token and cookies."""
        async with self._lock:
            if self._state is not None:
                _LOGGER.debug("Logging out of %s", self.base_url)
            self._drop_session()

    async def close(self) -> None:
        """Log out and close the HTTP session if the client created it."""
        await self.logout()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
        _LOGGER.debug("Switch client for %s closed", self.base_url)

    async def __aenter__(self) -> SwitchClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
