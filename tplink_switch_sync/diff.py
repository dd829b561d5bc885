"""Compare consecutive device snapshots and classify the differences."""

from __future__ import annotations

import logging
from datetime import datetime

from .easy_smart_client.bitmask import format_port_range
from .easy_smart_client.models import (
    DeviceSnapshot,
    DiagnosticState,
    PortState,
    SystemInfo,
    VlanState,
)
from .history import ChangeEvent, ChangeKind, EntityType

_LOGGER = logging.getLogger(__name__)

SYSTEM_ENTITY_KEY = "system_info"

# Tracked port fields and their display labels
PORT_FIELD_LABELS = {
    "status": "Status",
    "speed_config": "Speed Config",
    "speed_actual": "Speed Actual",
    "flow_control_config": "Flow Control Config",
    "flow_control_actual": "Flow Control Actual",
    "trunk": "Trunk",
}
# Port fields that describe link state rather than configuration
PORT_STATUS_FIELDS = frozenset({"status", "speed_actual", "flow_control_actual"})

SYSTEM_FIELD_LABELS = {
    "device_name": "Device Name",
    "mac_address": "MAC Address",
    "ip_address": "IP Address",
    "subnet_mask": "Subnet Mask",
    "gateway": "Gateway",
    "firmware_version": "Firmware Version",
    "hardware_version": "Hardware Version",
}

VLAN_FIELD_LABELS = {
    "name": "Name",
    "tagged_ports": "Tagged",
    "untagged_ports": "Untagged",
}


def _value_text(value: object) -> str:
    if isinstance(value, frozenset):
        return format_port_range(value)
    return str(value)


def _describe(obj: object, labels: dict[str, str], names: list[str] | None = None) -> str:
    """Render ``Label: value`` pairs; a single requested field renders bare."""
    names = list(labels) if names is None else names
    if len(names) == 1:
        return _value_text(getattr(obj, names[0]))
    return ", ".join(f"{labels[name]}: {_value_text(getattr(obj, name))}" for name in names)


def _changed(previous: object, current: object, labels: dict[str, str]) -> list[str]:
    return [name for name in labels if getattr(previous, name) != getattr(current, name)]


def describe_port(port: PortState) -> str:
    """Return the full text form of a port."""
    return _describe(port, PORT_FIELD_LABELS)


def describe_vlan(vlan: VlanState) -> str:
    """Return the full text form of a VLAN."""
    return _describe(vlan, VLAN_FIELD_LABELS)


def describe_system_info(info: SystemInfo) -> str:
    """Return the full text form of the system information."""
    return _describe(info, SYSTEM_FIELD_LABELS)


def _baseline(snapshot: DeviceSnapshot) -> list[ChangeEvent]:
    timestamp = snapshot.captured_at
    events = [
        ChangeEvent(
            entity_type=EntityType.SYSTEM,
            entity_key=SYSTEM_ENTITY_KEY,
            change_kind=ChangeKind.PERIODIC_SNAPSHOT,
            previous_value=None,
            new_value=describe_system_info(snapshot.system_info),
            timestamp=timestamp,
        )
    ]
    events.extend(
        _port_baseline(port, timestamp)
        for port in sorted(snapshot.ports, key=lambda p: p.port_number)
    )
    events.extend(
        ChangeEvent(
            entity_type=EntityType.VLAN,
            entity_key=vlan.vlan_id,
            change_kind=ChangeKind.PERIODIC_SNAPSHOT,
            previous_value=None,
            new_value=describe_vlan(vlan),
            timestamp=timestamp,
        )
        for vlan in sorted(snapshot.vlans, key=lambda v: v.vlan_id)
    )
    events.extend(_cable_baseline(diag, timestamp) for diag in snapshot.cable_diagnostics)
    return events


def _port_baseline(port: PortState, timestamp: datetime) -> ChangeEvent:
    return ChangeEvent(
        entity_type=EntityType.PORT,
        entity_key=port.port_number,
        change_kind=ChangeKind.PERIODIC_SNAPSHOT,
        previous_value=None,
        new_value=describe_port(port),
        timestamp=timestamp,
    )


def _cable_baseline(diag: DiagnosticState, timestamp: datetime) -> ChangeEvent:
    return ChangeEvent(
        entity_type=EntityType.CABLE,
        entity_key=diag.port_number,
        change_kind=ChangeKind.PERIODIC_SNAPSHOT,
        previous_value=None,
        new_value=diag.state_description,
        timestamp=timestamp,
        notes=f"length={diag.length_meters}m" if diag.length_meters is not None else None,
    )


def _diff_system(previous: DeviceSnapshot, current: DeviceSnapshot) -> list[ChangeEvent]:
    changed = _changed(previous.system_info, current.system_info, SYSTEM_FIELD_LABELS)
    if not changed:
        return []
    return [
        ChangeEvent(
            entity_type=EntityType.SYSTEM,
            entity_key=SYSTEM_ENTITY_KEY,
            change_kind=ChangeKind.CONFIG_CHANGE,
            previous_value=describe_system_info(previous.system_info),
            new_value=describe_system_info(current.system_info),
            timestamp=current.captured_at,
            fields=tuple(changed),
        )
    ]


def _diff_ports(previous: DeviceSnapshot, current: DeviceSnapshot) -> list[ChangeEvent]:
    events: list[ChangeEvent] = []
    old_ports = {port.port_number: port for port in previous.ports}
    new_ports = {port.port_number: port for port in current.ports}

    for number in sorted(new_ports.keys() | old_ports.keys()):
        old, new = old_ports.get(number), new_ports.get(number)
        if old is None:
            events.append(_port_baseline(new, current.captured_at))
            continue
        if new is None:
            events.append(
                ChangeEvent(
                    entity_type=EntityType.PORT,
                    entity_key=number,
                    change_kind=ChangeKind.STATUS_CHANGE,
                    previous_value=describe_port(old),
                    new_value=None,
                    timestamp=current.captured_at,
                    notes="Port no longer reported",
                )
            )
            continue

        changed = _changed(old, new, PORT_FIELD_LABELS)
        if not changed:
            continue
        kind = (
            ChangeKind.STATUS_CHANGE
            if PORT_STATUS_FIELDS.intersection(changed)
            else ChangeKind.CONFIG_CHANGE
        )
        events.append(
            ChangeEvent(
                entity_type=EntityType.PORT,
                entity_key=number,
                change_kind=kind,
                previous_value=_describe(old, PORT_FIELD_LABELS, changed),
                new_value=_describe(new, PORT_FIELD_LABELS, changed),
                timestamp=current.captured_at,
                fields=tuple(changed),
            )
        )
    return events


def _diff_vlans(previous: DeviceSnapshot, current: DeviceSnapshot) -> list[ChangeEvent]:
    if current.vlan_parse_failed:
        _LOGGER.debug("VLAN page unparsable, skipping VLAN comparison")
        return []

    events: list[ChangeEvent] = []
    old_vlans = {vlan.vlan_id: vlan for vlan in previous.vlans}
    new_vlans = {vlan.vlan_id: vlan for vlan in current.vlans}

    for vlan_id in sorted(new_vlans.keys() | old_vlans.keys()):
        old, new = old_vlans.get(vlan_id), new_vlans.get(vlan_id)
        if old is None:
            events.append(
                ChangeEvent(
                    entity_type=EntityType.VLAN,
                    entity_key=vlan_id,
                    change_kind=ChangeKind.VLAN_CREATED,
                    previous_value=None,
                    new_value=describe_vlan(new),
                    timestamp=current.captured_at,
                )
            )
        elif new is None:
            events.append(
                ChangeEvent(
                    entity_type=EntityType.VLAN,
                    entity_key=vlan_id,
                    change_kind=ChangeKind.VLAN_DELETED,
                    previous_value=describe_vlan(old),
                    new_value=None,
                    timestamp=current.captured_at,
                )
            )
        else:
            changed = _changed(old, new, VLAN_FIELD_LABELS)
            if changed:
                events.append(
                    ChangeEvent(
                        entity_type=EntityType.VLAN,
                        entity_key=vlan_id,
                        change_kind=ChangeKind.CONFIG_CHANGE,
                        previous_value=describe_vlan(old),
                        new_value=describe_vlan(new),
                        timestamp=current.captured_at,
                        fields=tuple(changed),
                    )
                )
    return events


def _diff_cable(previous: DeviceSnapshot, current: DeviceSnapshot) -> list[ChangeEvent]:
    events: list[ChangeEvent] = []
    old_diags = {diag.port_number: diag for diag in previous.cable_diagnostics}

    # Ports absent from the current results are skipped
    for diag in current.cable_diagnostics:
        old = old_diags.get(diag.port_number)
        if old is None:
            events.append(_cable_baseline(diag, current.captured_at))
        elif old.state_code != diag.state_code:
            events.append(
                ChangeEvent(
                    entity_type=EntityType.CABLE,
                    entity_key=diag.port_number,
                    change_kind=ChangeKind.STATUS_CHANGE,
                    previous_value=old.state_description,
                    new_value=diag.state_description,
                    timestamp=current.captured_at,
                    fields=("state_code",),
                )
            )
    return events


def diff_snapshots(
    previous: DeviceSnapshot | None, current: DeviceSnapshot
) -> list[ChangeEvent]:
    """Compute the change events between two snapshots.

    With no previous snapshot every entity gets a baseline
    ``PERIODIC_SNAPSHOT`` event. Otherwise only differences are reported,
    so comparing a snapshot with itself yields no events.

    Args:
        previous: Snapshot from the last successful poll, or None
        current: Snapshot from this poll

    Returns:
        Events ordered system, ports, VLANs, cable diagnostics

    """
    if previous is None:
        events = _baseline(current)
    else:
        events = (
            _diff_system(previous, current)
            + _diff_ports(previous, current)
            + _diff_vlans(previous, current)
            + _diff_cable(previous, current)
        )

    _LOGGER.debug("Snapshot diff produced %d events", len(events))
    return events
