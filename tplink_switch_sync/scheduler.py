"""Per-device session registry and monitoring scheduler."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping
from typing import Any

import aiohttp

from .config import DeviceConfig, validate_device_config
from .const import CONTEXT_SCHEDULER, STARTUP_MESSAGE
from .easy_smart_client.client import SwitchClient
from .easy_smart_client.exceptions import SwitchValidationError
from .easy_smart_client.utils import host_key
from .helpers import log_debug, log_info
from .history import ConnectivityReporter, HistoryRecorder
from .monitor import MonitoringLoop

_LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    """Switch clients keyed by normalized host.

    Holds one client per switch, shared by its monitoring loop and by
    on-demand callers.
    """

    def __init__(self) -> None:
        self._clients: dict[str, SwitchClient] = {}

    def __contains__(self, host: object) -> bool:
        return isinstance(host, str) and host_key(host) in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def __iter__(self) -> Iterator[str]:
        return iter(self._clients)

    def get(self, host: str) -> SwitchClient | None:
        """Return the client for a host, if registered."""
        return self._clients.get(host_key(host))

    def get_or_create(
        self,
        config: DeviceConfig,
        session: aiohttp.ClientSession | None = None,
    ) -> SwitchClient:
        """Return the registered client for the config's host, creating it if needed."""
        key = host_key(config.host)
        client = self._clients.get(key)
        if client is None:
            client = SwitchClient(
                config.host,
                config.username,
                config.password,
                session=session,
                timeout=config.timeout,
                login_timeout=config.login_timeout,
                test_timeout=config.test_timeout,
                session_lifetime=config.session_lifetime,
            )
            self._clients[key] = client
            _LOGGER.debug("Registered switch client for %s", key)
        return client

    def remove(self, host: str) -> SwitchClient | None:
        """Unregister and return the client for a host."""
        return self._clients.pop(host_key(host), None)

    async def async_close_all(self) -> None:
        """Close and unregister every client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()


class MonitorScheduler:
    """Own one monitoring loop per switch."""

    def __init__(
        self,
        recorder: HistoryRecorder,
        registry: SessionRegistry | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            recorder: Receives change events from every loop
            registry: Client registry to share with on-demand callers
            session: Optional aiohttp session for all clients. If None, each
                client creates and closes its own.

        """
        self._recorder = recorder
        self.registry = registry if registry is not None else SessionRegistry()
        self._session = session
        self._monitors: dict[str, MonitoringLoop] = {}

    @property
    def monitors(self) -> dict[str, MonitoringLoop]:
        return dict(self._monitors)

    def get_monitor(self, host: str) -> MonitoringLoop | None:
        return self._monitors.get(host_key(host))

    async def async_setup_device(
        self,
        config: DeviceConfig | Mapping[str, Any],
        reporter: ConnectivityReporter | None = None,
        name: str | None = None,
    ) -> MonitoringLoop:
        """Start monitoring a switch.

        Args:
            config: Validated config, or raw data to validate
            reporter: Optional connectivity reporter for this switch
            name: Optional display name

        Returns:
            The started monitoring loop

        Raises:
            SwitchValidationError: If the config is invalid or the host is
                already monitored

        """
        _LOGGER.info(STARTUP_MESSAGE)

        if not isinstance(config, DeviceConfig):
            config = validate_device_config(dict(config))

        key = host_key(config.host)
        if key in self._monitors:
            raise SwitchValidationError(f"Switch {key} is already monitored")

        log_debug(
            _LOGGER,
            CONTEXT_SCHEDULER,
            "Setting up switch",
            host=key,
            username=config.username,
            scan_interval=config.scan_interval,
        )

        client = self.registry.get_or_create(config, self._session)
        monitor = MonitoringLoop(
            client,
            self._recorder,
            reporter=reporter,
            scan_interval=config.scan_interval,
            max_backoff=config.max_backoff,
            name=name,
        )
        self._monitors[key] = monitor
        await monitor.async_start()

        log_info(_LOGGER, CONTEXT_SCHEDULER, "Monitoring started", host=key)
        return monitor

    async def async_unload_device(self, host: str) -> bool:
        """Stop monitoring a switch and release its session.

        Returns:
            False if the host was not monitored

        """
        key = host_key(host)
        monitor = self._monitors.pop(key, None)
        if monitor is None:
            return False

        try:
            await monitor.async_stop()
        finally:
            self.registry.remove(key)

        log_info(_LOGGER, CONTEXT_SCHEDULER, "Monitoring stopped", host=key)
        return True

    async def async_shutdown(self) -> None:
        """Stop every loop and close every session."""
        log_debug(_LOGGER, CONTEXT_SCHEDULER, "Shutting down", monitors=len(self._monitors))
        await asyncio.gather(
            *(self.async_unload_device(host) for host in list(self._monitors)),
            return_exceptions=True,
        )
        await self.registry.async_close_all()
