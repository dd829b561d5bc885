"""Constants for the Easy Smart switch client."""

# Web-management endpoints
ENDPOINT_ROOT = "/"
ENDPOINT_LOGIN = "/logon.cgi"
ENDPOINT_SYSTEM_INFO = "/SystemInfoRpm.htm"
ENDPOINT_PORT_SETTINGS = "/PortSettingRpm.htm"
ENDPOINT_PORT_CONFIG = "/port_setting.cgi"
ENDPOINT_VLAN_CONFIG = "/VlanPortBasicRpm.htm"
ENDPOINT_VLAN_SET = "/pvlanSet.cgi"
ENDPOINT_CABLE_DIAGNOSTIC = "/cable_diag_get.cgi"
ENDPOINT_REBOOT = "/reboot.cgi"

# Response markers
LOGIN_PAGE_MARKER = "logon.cgi"
OPERATION_SUCCESSFUL_MARKER = "Operation successful"

SESSION_COOKIE_NAME = "SessionID"

# Timeouts (seconds)
DEFAULT_TIMEOUT = 60
LOGIN_TIMEOUT = 10
TEST_CONNECTION_TIMEOUT = 5

# Session lifetime (seconds)
SESSION_LIFETIME = 3600

# Port and VLAN limits
MIN_PORT_NUMBER = 1
MAX_SUPPORTED_PORTS = 48
DEFAULT_MAX_PORTS = 24
MAX_PORT_BITMASK_SIZE = 32
MIN_VLAN_ID = 1
MAX_VLAN_ID = 4094

# Port page label tables, indexed by the integer codes in the all_info literal
PORT_STATE_LABELS = ("Disabled", "Enabled")
PORT_SPEED_LABELS = ("Link Down", "Auto", "10MH", "10MF", "100MH", "100MF", "1000MF", "")
PORT_FLOW_CONTROL_LABELS = ("Off", "On")
PORT_TRUNK_LABELS = ("", "LAG1", "LAG2", "LAG3", "LAG4", "LAG5", "LAG6", "LAG7", "LAG8")
UNKNOWN_LABEL = "Unknown"
LINK_DOWN_LABEL = "Link Down"
PORT_ENABLED_LABEL = "Enabled"

# Port speed codes accepted by port_setting.cgi
PORT_SPEED_AUTO = 1
PORT_SPEED_CODES = range(1, 7)

# Cable diagnostic state codes
CABLE_STATE_UNTESTED = -1
CABLE_STATE_NO_CABLE = 0
CABLE_STATE_NORMAL = 1
CABLE_STATE_MAP = {
    CABLE_STATE_UNTESTED: "--",
    CABLE_STATE_NO_CABLE: "No Cable",
    CABLE_STATE_NORMAL: "Normal",
    2: "Open",
    3: "Short",
    4: "Open & Short",
    5: "Cross Cable",
}
CABLE_STATE_ISSUE_CODES = frozenset({2, 3, 4, 5})
CABLE_STATE_OTHER = "Others"

# Cable diagnostic categories
CABLE_CATEGORY_HEALTHY = "healthy"
CABLE_CATEGORY_ISSUE = "issue"
CABLE_CATEGORY_UNTESTED = "untested"
CABLE_CATEGORY_DISCONNECTED = "disconnected"
CABLE_CATEGORY_UNKNOWN = "unknown"

# System info keys as rendered in "key : value" text
SYSTEM_INFO_KEYS = {
    "Device Description": "device_name",
    "MAC Address": "mac_address",
    "IP Address": "ip_address",
    "Subnet Mask": "subnet_mask",
    "Gateway": "gateway",
    "Firmware Version": "firmware_version",
    "Hardware Version": "hardware_version",
}

# Port and VLAN table markers
PORT_TABLE_HEADER = "Port | Status"
PORT_TABLE_SEPARATOR = "-----|"
VLAN_TABLE_HEADER = "VLAN ID | Member Ports"
VLAN_TABLE_SEPARATOR = "--------|"

# Request form and query values (the switch expects a trailing "^" on values)
VALUE_SUFFIX = "^"
PORT_CONFIG_APPLY = "Apply"
VLAN_ADD_ACTION = "pvlan_add=Apply"
VLAN_DELETE_ACTION = "pvlan_del=Delete"
CABLE_TEST_ACTION = "Apply=Apply"
