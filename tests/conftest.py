"""Common fixtures for TP-Link Easy Smart switch sync tests."""

from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from tplink_switch_sync.const import DEFAULT_SCAN_INTERVAL, DEFAULT_USERNAME
from tplink_switch_sync.easy_smart_client.models import (
    DeviceSnapshot,
    DiagnosticState,
    PortState,
    SystemInfo,
    VlanState,
)

# Test configuration values
TEST_HOST = "192.168.0.1"
TEST_BASE_URL = f"http://{TEST_HOST}"
TEST_USERNAME = DEFAULT_USERNAME
TEST_PASSWORD = "secret"  # noqa: S105
TEST_SCAN_INTERVAL = DEFAULT_SCAN_INTERVAL
TEST_CAPTURED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

# Sample pages as served by the switch
LOGIN_PAGE = """<html><head><title>Login</title></head>
<body><form name="logon" action="/logon.cgi" method="post">
<input type="text" name="username"><input type="password" name="password">
<input type="submit" name="logon" value="Login"></form></body></html>"""

SYSTEM_INFO_ARRAY_PAGE = """<html><script>
var info_ds = new Array("TL-SG108E", "AA:BB:CC:DD:EE:FF", "192.168.0.1", "255.255.255.0", "192.168.0.254", "1.0.0 Build 20200101 Rel.50000", "TL-SG108E 4.0");
</script></html>"""

SYSTEM_INFO_OBJECT_PAGE = """<html><script>
var info_ds = {
descriStr:["TL-SG105E"],
macStr:["11:22:33:44:55:66"],
ipStr:["10.0.0.2"],
netmaskStr:["255.255.255.0"],
gatewayStr:["10.0.0.1"],
firmwareStr:["1.0.0 Build 20190101"],
hardwareStr:["TL-SG105E 5.0"]
};
</script></html>"""

PORT_SETTINGS_PAGE = """<html><script>
var max_port_num = 8;
var all_info = {
state:[1,1,0,1,1,1,1,1,0,0],
spd_cfg:[1,1,1,1,1,1,1,6,0,0],
spd_act:[6,0,0,5,6,6,6,6,0,0],
fc_cfg:[0,0,0,0,0,0,0,1,0,0],
fc_act:[0,0,0,0,0,0,0,1,0,0],
trunk_info:[0,0,0,0,0,0,1,1,0,0]
};
</script></html>"""

VLAN_8021Q_PAGE = """<html><script>
var qvlan_ds = {
state:1,
count:2,
portNum:8,
vids:[1,10],
names:['Default','Servers'],
tagMbrs:[0x0,0x6],
untagMbrs:[0xFF,0x0]
};
</script></html>"""

VLAN_PORT_BASED_PAGE = """<html><script>
var pvlan_ds = {
state:1,
portNum:8,
vids:[1,2],
mbrs:[0xFF,0x0C],
count:2
};
</script></html>"""

VLAN_LEGACY_TEXT = """=== VLAN Configuration ===
Status: Enabled
Total Ports: 8
VLAN ID | Member Ports
--------|-------------
1 | 1-8
20 | 2,4-5
"""

CABLE_DIAGNOSTIC_PAGE = """<html><script>
var maxPort=8;
var cablestate=[1,0,2,-1,3,5,9,1];
var cablelength=[12,0,7,-1,3,0,0,25];
</script></html>"""

OPERATION_SUCCESS_PAGE = """<html><body><span class="TIP">Operation successful.</span></body></html>"""


def mock_response(status: int = 200, text: str = "") -> MagicMock:
    """Create a mock aiohttp response."""
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    return response


def mock_raw_response(status: int = 200, body: bytes = b"") -> MagicMock:
    """Create a mock aiohttp response that decodes its body as UTF-8."""
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(
        side_effect=lambda encoding=None, errors="strict": body.decode(encoding or "utf-8", errors)
    )
    return response


def mock_request_context(response: MagicMock) -> AsyncMock:
    """Wrap a mock response in an async context manager."""
    return AsyncMock(
        __aenter__=AsyncMock(return_value=response),
        __aexit__=AsyncMock(return_value=False),
    )


def make_port(port_number: int, **overrides: str) -> PortState:
    """Create a port with sensible defaults."""
    values = {
        "status": "Enabled",
        "speed_config": "Auto",
        "speed_actual": "1000MF",
        "flow_control_config": "Off",
        "flow_control_actual": "Off",
        "trunk": "",
    }
    values.update(overrides)
    return PortState(port_number=port_number, **values)


def make_cable(port_number: int, state_code: int, description: str, length: int | None = 10) -> DiagnosticState:
    """Create a cable diagnostic result."""
    return DiagnosticState(
        port_number=port_number,
        state_code=state_code,
        state_description=description,
        length_meters=length,
        healthy=state_code == 1,
        issue=state_code in (2, 3, 4, 5),
        untested=state_code == -1,
        disconnected=state_code == 0,
    )


def make_snapshot(
    ports: tuple[PortState, ...] | None = None,
    vlans: tuple[VlanState, ...] | None = None,
    cable: tuple[DiagnosticState, ...] = (),
    system_info: SystemInfo | None = None,
    captured_at: datetime = TEST_CAPTURED_AT,
    vlan_parse_failed: bool = False,
) -> DeviceSnapshot:
    """Create a device snapshot with sensible defaults."""
    if ports is None:
        ports = tuple(make_port(number) for number in range(1, 5))
    if vlans is None:
        vlans = (VlanState(vlan_id=1, name="Default", untagged_ports=frozenset({1, 2, 3, 4})),)
    return DeviceSnapshot(
        system_info=system_info or SystemInfo(device_name="TL-SG108E", ip_address=TEST_HOST),
        ports=ports,
        vlans=vlans,
        cable_diagnostics=cable,
        captured_at=captured_at,
        max_ports=len(ports) or 24,
        vlan_enabled=bool(vlans),
        vlan_parse_failed=vlan_parse_failed,
    )


@pytest.fixture
def mock_session() -> MagicMock:
    """Create mock aiohttp session with an empty cookie jar."""
    session = MagicMock(spec=aiohttp.ClientSession)
    session.cookie_jar = MagicMock()
    session.cookie_jar.filter_cookies.return_value = {}
    return session


@pytest.fixture
def mock_socket_check() -> Generator[AsyncMock]:
    """Patch the socket reachability check used by login."""
    with patch(
        "tplink_switch_sync.easy_smart_client.auth.check_socket_connection",
        new_callable=AsyncMock,
    ) as mock_check:
        yield mock_check


@pytest.fixture
def snapshot() -> DeviceSnapshot:
    """Return a default device snapshot."""
    return make_snapshot()
