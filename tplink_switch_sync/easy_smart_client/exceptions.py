"""Exceptions for the Easy Smart switch client."""


class SwitchClientError(Exception):
    """Base exception for the switch client."""


class SwitchConnectionError(SwitchClientError):
    """Transport error: unreachable, timed out or malformed HTTP exchange."""


class SwitchAuthenticationError(SwitchClientError):
    """The switch rejected the login."""


class SwitchUnreachableError(SwitchAuthenticationError, SwitchConnectionError):
    """Login could not reach the switch at all."""


class SwitchValidationError(SwitchClientError, ValueError):
    """Out-of-range port, VLAN id or configuration value."""


class SwitchOperationError(SwitchClientError):
    """A write was sent but the switch did not confirm it."""
