"""Tests for snapshot comparison."""

from __future__ import annotations

from datetime import timedelta

from tplink_switch_sync.diff import (
    SYSTEM_ENTITY_KEY,
    describe_port,
    describe_vlan,
    diff_snapshots,
)
from tplink_switch_sync.easy_smart_client.models import DeviceSnapshot, SystemInfo, VlanState
from tplink_switch_sync.history import ChangeKind, EntityType

from .conftest import TEST_CAPTURED_AT, make_cable, make_port, make_snapshot

LATER = TEST_CAPTURED_AT + timedelta(seconds=30)


class TestDiffIdentity:
    """Tests for comparing equal snapshots."""

    def test_same_snapshot_has_no_events(self, snapshot: DeviceSnapshot) -> None:
        """Test a snapshot compared with itself yields nothing."""
        assert diff_snapshots(snapshot, snapshot) == []

    def test_equal_snapshots_at_different_times(self) -> None:
        """Test the capture time does not count as a change."""
        cable = (make_cable(1, 1, "Normal"),)
        assert diff_snapshots(make_snapshot(cable=cable), make_snapshot(cable=cable, captured_at=LATER)) == []


class TestDiffPorts:
    """Tests for port comparison."""

    def test_single_status_change(self) -> None:
        """Test one disabled port yields exactly one status event."""
        previous = make_snapshot()
        ports = tuple(
            make_port(n, status="Disabled") if n == 3 else make_port(n) for n in range(1, 5)
        )
        current = make_snapshot(ports=ports, captured_at=LATER)

        (event,) = diff_snapshots(previous, current)

        assert event.entity_type == EntityType.PORT
        assert event.entity_key == 3
        assert event.change_kind == ChangeKind.STATUS_CHANGE
        assert event.previous_value == "Enabled"
        assert event.new_value == "Disabled"
        assert event.fields == ("status",)
        assert event.timestamp == LATER

    def test_config_only_change(self) -> None:
        """Test configuration fields yield a config event."""
        previous = make_snapshot(ports=(make_port(1),))
        current = make_snapshot(ports=(make_port(1, speed_config="100MF"),))

        (event,) = diff_snapshots(previous, current)

        assert event.change_kind == ChangeKind.CONFIG_CHANGE
        assert (event.previous_value, event.new_value) == ("Auto", "100MF")

    def test_multiple_fields_labelled(self) -> None:
        """Test several changed fields render as labelled pairs."""
        previous = make_snapshot(ports=(make_port(1),))
        current = make_snapshot(
            ports=(make_port(1, speed_config="10MH", speed_actual="Link Down"),)
        )

        (event,) = diff_snapshots(previous, current)

        assert event.change_kind == ChangeKind.STATUS_CHANGE
        assert event.fields == ("speed_config", "speed_actual")
        assert event.previous_value == "Speed Config: Auto, Speed Actual: 1000MF"
        assert event.new_value == "Speed Config: 10MH, Speed Actual: Link Down"

    def test_new_port_gets_baseline(self) -> None:
        """Test a port seen for the first time gets a snapshot event."""
        previous = make_snapshot(ports=(make_port(1),))
        current = make_snapshot(ports=(make_port(1), make_port(2)))

        (event,) = diff_snapshots(previous, current)

        assert event.entity_key == 2
        assert event.change_kind == ChangeKind.PERIODIC_SNAPSHOT
        assert event.previous_value is None
        assert event.new_value == describe_port(make_port(2))

    def test_vanished_port(self) -> None:
        """Test a port no longer reported yields a status event."""
        previous = make_snapshot(ports=(make_port(1), make_port(2)))
        current = make_snapshot(ports=(make_port(1),))

        (event,) = diff_snapshots(previous, current)

        assert event.entity_key == 2
        assert event.change_kind == ChangeKind.STATUS_CHANGE
        assert event.new_value is None
        assert event.notes == "Port no longer reported"

    def test_events_ordered_by_port(self) -> None:
        """Test port events come in port order."""
        previous = make_snapshot()
        current = make_snapshot(
            ports=(
                make_port(4, trunk="LAG1"),
                make_port(2, status="Disabled"),
                make_port(1),
                make_port(3),
            )
        )

        assert [event.entity_key for event in diff_snapshots(previous, current)] == [2, 4]


class TestDiffVlans:
    """Tests for VLAN comparison."""

    def test_vlan_created_and_deleted(self) -> None:
        """Test added and removed VLANs."""
        previous = make_snapshot(vlans=(VlanState(vlan_id=1), VlanState(vlan_id=5)))
        current = make_snapshot(vlans=(VlanState(vlan_id=1), VlanState(vlan_id=10, name="IoT")))

        deleted, created = diff_snapshots(previous, current)

        assert deleted.change_kind == ChangeKind.VLAN_DELETED
        assert deleted.entity_key == 5
        assert deleted.new_value is None
        assert created.change_kind == ChangeKind.VLAN_CREATED
        assert created.entity_key == 10
        assert created.new_value == "Name: IoT, Tagged: , Untagged: "

    def test_membership_change(self) -> None:
        """Test membership changes are config events with full descriptions."""
        old = VlanState(vlan_id=10, name="Servers", untagged_ports=frozenset({1, 2}))
        new = VlanState(
            vlan_id=10,
            name="Servers",
            tagged_ports=frozenset({5}),
            untagged_ports=frozenset({1, 2, 3}),
        )

        (event,) = diff_snapshots(make_snapshot(vlans=(old,)), make_snapshot(vlans=(new,)))

        assert event.entity_type == EntityType.VLAN
        assert event.change_kind == ChangeKind.CONFIG_CHANGE
        assert event.fields == ("tagged_ports", "untagged_ports")
        assert event.previous_value == describe_vlan(old)
        assert event.new_value == "Name: Servers, Tagged: 5, Untagged: 1-3"

    def test_unparsable_vlans_skipped(self) -> None:
        """Test an unparsable VLAN page is not reported as deletions."""
        previous = make_snapshot()
        current = make_snapshot(vlans=(), vlan_parse_failed=True)

        assert diff_snapshots(previous, current) == []


class TestDiffSystemAndCable:
    """Tests for system information and cable comparison."""

    def test_system_change(self) -> None:
        """Test system information changes yield one config event."""
        previous = make_snapshot(system_info=SystemInfo(device_name="sw1"))
        current = make_snapshot(system_info=SystemInfo(device_name="sw2", firmware_version="1.1"))

        (event,) = diff_snapshots(previous, current)

        assert event.entity_type == EntityType.SYSTEM
        assert event.entity_key == SYSTEM_ENTITY_KEY
        assert event.change_kind == ChangeKind.CONFIG_CHANGE
        assert event.fields == ("device_name", "firmware_version")
        assert "Device Name: sw2" in event.new_value

    def test_cable_state_change(self) -> None:
        """Test a new cable state code yields a status event."""
        previous = make_snapshot(cable=(make_cable(1, 1, "Normal"),))
        current = make_snapshot(cable=(make_cable(1, 2, "Open", length=4),))

        (event,) = diff_snapshots(previous, current)

        assert event.entity_type == EntityType.CABLE
        assert event.change_kind == ChangeKind.STATUS_CHANGE
        assert (event.previous_value, event.new_value) == ("Normal", "Open")
        assert event.fields == ("state_code",)

    def test_cable_length_only_ignored(self) -> None:
        """Test a length change with the same state is not reported."""
        previous = make_snapshot(cable=(make_cable(1, 1, "Normal", length=10),))
        current = make_snapshot(cable=(make_cable(1, 1, "Normal", length=11),))

        assert diff_snapshots(previous, current) == []

    def test_cable_missing_and_new_ports(self) -> None:
        """Test absent ports are skipped and new ports get a baseline."""
        previous = make_snapshot(cable=(make_cable(1, 1, "Normal"),))
        current = make_snapshot(cable=(make_cable(2, 0, "No Cable", length=0),))

        (event,) = diff_snapshots(previous, current)

        assert event.entity_key == 2
        assert event.change_kind == ChangeKind.PERIODIC_SNAPSHOT
        assert event.notes == "length=0m"


class TestBaseline:
    """Tests for the first comparison without a previous snapshot."""

    def test_baseline_covers_every_entity(self) -> None:
        """Test every entity gets a snapshot event in order."""
        current = make_snapshot(
            ports=(make_port(2), make_port(1)),
            vlans=(VlanState(vlan_id=20), VlanState(vlan_id=1)),
            cable=(make_cable(1, -1, "--", length=None),),
        )

        events = diff_snapshots(None, current)

        assert all(event.change_kind == ChangeKind.PERIODIC_SNAPSHOT for event in events)
        assert all(event.previous_value is None for event in events)
        assert all(event.timestamp == TEST_CAPTURED_AT for event in events)
        assert [(event.entity_type, event.entity_key) for event in events] == [
            (EntityType.SYSTEM, SYSTEM_ENTITY_KEY),
            (EntityType.PORT, 1),
            (EntityType.PORT, 2),
            (EntityType.VLAN, 1),
            (EntityType.VLAN, 20),
            (EntityType.CABLE, 1),
        ]
        assert events[-1].notes is None
