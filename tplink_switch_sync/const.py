"""Constants for TP-Link Easy Smart switch sync."""

DOMAIN = "tplink_switch_sync"
VERSION = "1.0.0"

# Configuration
CONF_HOST = "host"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_SCAN_INTERVAL = "scan_interval"
CONF_MAX_BACKOFF = "max_backoff"
CONF_SESSION_LIFETIME = "session_lifetime"
CONF_TIMEOUT = "timeout"
CONF_LOGIN_TIMEOUT = "login_timeout"
CONF_TEST_TIMEOUT = "test_timeout"

DEFAULT_USERNAME = "admin"
DEFAULT_SCAN_INTERVAL = 30
MIN_SCAN_INTERVAL = 10
MAX_SCAN_INTERVAL = 3600
DEFAULT_MAX_BACKOFF = 300
DEFAULT_SESSION_LIFETIME = 3600
MIN_SESSION_LIFETIME = 60
DEFAULT_TIMEOUT = 60
DEFAULT_LOGIN_TIMEOUT = 10
DEFAULT_TEST_TIMEOUT = 5
MIN_TIMEOUT = 1
MAX_TIMEOUT = 300

MAX_USERNAME_LENGTH = 64
MAX_PASSWORD_LENGTH = 128
USERNAME_PATTERN = rf"^[a-zA-Z0-9._@-]{{1,{MAX_USERNAME_LENGTH}}}$"

# Session is renewed once this fraction of its lifetime has elapsed
RENEWAL_FRACTION = 0.5

# Upper bound for draining queued change events on shutdown (seconds)
EVENT_FLUSH_TIMEOUT = 10

# Logging contexts
CONTEXT_MONITOR = "monitor"
CONTEXT_SCHEDULER = "scheduler"

STARTUP_MESSAGE = f"""
-------------------------------------------------------------------
{DOMAIN}
Version: {VERSION}
Monitoring TP-Link Easy Smart switches
-------------------------------------------------------------------
"""
