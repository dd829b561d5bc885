"""Device configuration for TP-Link Easy Smart switch sync."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import voluptuous as vol

from .const import (
    CONF_HOST,
    CONF_LOGIN_TIMEOUT,
    CONF_MAX_BACKOFF,
    CONF_PASSWORD,
    CONF_SCAN_INTERVAL,
    CONF_SESSION_LIFETIME,
    CONF_TEST_TIMEOUT,
    CONF_TIMEOUT,
    CONF_USERNAME,
    DEFAULT_LOGIN_TIMEOUT,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_SESSION_LIFETIME,
    DEFAULT_TEST_TIMEOUT,
    DEFAULT_TIMEOUT,
    DEFAULT_USERNAME,
    MAX_PASSWORD_LENGTH,
    MAX_SCAN_INTERVAL,
    MAX_TIMEOUT,
    MIN_SCAN_INTERVAL,
    MIN_SESSION_LIFETIME,
    MIN_TIMEOUT,
    USERNAME_PATTERN,
)
from .easy_smart_client.exceptions import SwitchValidationError
from .easy_smart_client.utils import build_base_url, is_valid_host

_LOGGER = logging.getLogger(__name__)


def _host(value: Any) -> str:
    """Validate an IP address or hostname, optionally given as a base URL."""
    host = str(value).strip()
    name = urlparse(build_base_url(host)).hostname if "://" in host else host
    if not is_valid_host(name):
        raise vol.Invalid(f"Invalid host: {host!r}")
    return host


def _timeout() -> vol.All:
    return vol.All(vol.Coerce(int), vol.Range(min=MIN_TIMEOUT, max=MAX_TIMEOUT))


DEVICE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): _host,
        vol.Optional(CONF_USERNAME, default=DEFAULT_USERNAME): vol.All(
            str, vol.Match(USERNAME_PATTERN, msg="Invalid username")
        ),
        vol.Required(CONF_PASSWORD): vol.All(
            str, vol.Length(min=1, max=MAX_PASSWORD_LENGTH)
        ),
        vol.Optional(CONF_SCAN_INTERVAL, default=DEFAULT_SCAN_INTERVAL): vol.All(
            vol.Coerce(int),
            vol.Range(min=MIN_SCAN_INTERVAL, max=MAX_SCAN_INTERVAL),
        ),
        vol.Optional(CONF_MAX_BACKOFF, default=DEFAULT_MAX_BACKOFF): vol.All(
            vol.Coerce(int), vol.Range(min=MIN_SCAN_INTERVAL)
        ),
        vol.Optional(CONF_SESSION_LIFETIME, default=DEFAULT_SESSION_LIFETIME): vol.All(
            vol.Coerce(int), vol.Range(min=MIN_SESSION_LIFETIME)
        ),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT): _timeout(),
        vol.Optional(CONF_LOGIN_TIMEOUT, default=DEFAULT_LOGIN_TIMEOUT): _timeout(),
        vol.Optional(CONF_TEST_TIMEOUT, default=DEFAULT_TEST_TIMEOUT): _timeout(),
    }
)


@dataclass(frozen=True)
class DeviceConfig:
    """Validated configuration for one monitored switch."""

    host: str
    password: str
    username: str = DEFAULT_USERNAME
    scan_interval: int = DEFAULT_SCAN_INTERVAL
    max_backoff: int = DEFAULT_MAX_BACKOFF
    session_lifetime: int = DEFAULT_SESSION_LIFETIME
    timeout: int = DEFAULT_TIMEOUT
    login_timeout: int = DEFAULT_LOGIN_TIMEOUT
    test_timeout: int = DEFAULT_TEST_TIMEOUT

    @property
    def base_url(self) -> str:
        return build_base_url(self.host)


def validate_device_config(data: dict[str, Any]) -> DeviceConfig:
    """Validate raw configuration data.

    Args:
        data: Mapping with at least host and password

    Returns:
        Validated, defaulted configuration

    Raises:
        SwitchValidationError: If any value is missing or invalid

    """
    try:
        validated = DEVICE_SCHEMA(dict(data))
    except vol.Invalid as err:
        _LOGGER.debug("Invalid device configuration: %s", err)
        raise SwitchValidationError(f"Invalid device configuration: {err}") from err

    return DeviceConfig(
        host=validated[CONF_HOST],
        username=validated[CONF_USERNAME],
        password=validated[CONF_PASSWORD],
        scan_interval=validated[CONF_SCAN_INTERVAL],
        max_backoff=validated[CONF_MAX_BACKOFF],
        session_lifetime=validated[CONF_SESSION_LIFETIME],
        timeout=validated[CONF_TIMEOUT],
        login_timeout=validated[CONF_LOGIN_TIMEOUT],
        test_timeout=validated[CONF_TEST_TIMEOUT],
    )
