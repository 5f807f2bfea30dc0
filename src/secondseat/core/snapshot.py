"""
Snapshots of the device topology and the pure functions over them.

- take_snapshot: Read the live topology through a gateway
- diff_snapshots: Devices that appeared between two snapshots
- filter_devices: Select devices by role and/or type
"""

from typing import Iterable, List, Optional, Set
import logging

from .errors import GatewayError, QueryFailure
from .gateway import CommandGateway, RawDeviceRecord
from .models import (
    Device, DeviceRole, DeviceType, Snapshot,
    parse_device_role, parse_device_type,
)

logger = logging.getLogger(__name__)


def _parse_int(value: str, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} {value!r} is not an integer") from None


def device_from_record(record: RawDeviceRecord) -> Device:
    """
    Convert a raw listing record into a Device.

    Args:
        record: Record as returned by CommandGateway.list_devices

    Returns:
        The parsed device

    Raises:
        QueryFailure: If a required field is missing or malformed
    """
    missing = [
        field_name for field_name in ("name", "id", "role", "device_type")
        if not getattr(record, field_name)
    ]
    if missing:
        raise QueryFailure(
            f"device record {record} is missing {', '.join(missing)}")

    try:
        device_id = _parse_int(record.id, "id")
        role = parse_device_role(record.role)
        device_type = parse_device_type(record.device_type)

        primary_id = None
        if record.primary_id is not None:
            primary_id = _parse_int(record.primary_id, "primary id")
        elif role is DeviceRole.PRIMARY:
            raise ValueError("primary device has no paired device id")
    except ValueError as e:
        raise QueryFailure(f"invalid device record {record}: {e}") from e

    return Device(
        name=record.name,
        id=device_id,
        device_type=device_type,
        role=role,
        primary_id=primary_id,
    )


def take_snapshot(gateway: CommandGateway) -> Snapshot:
    """
    Capture the current device topology.

    Args:
        gateway: Gateway to list devices through

    Returns:
        Mapping of device id to device

    Raises:
        QueryFailure: If listing fails or any record is malformed
    """
    try:
        records = gateway.list_devices()
    except QueryFailure:
        raise
    except GatewayError as e:
        raise QueryFailure(f"listing devices failed: {e}") from e

    snapshot: Snapshot = {}
    for record in records:
        device = device_from_record(record)
        if device.id in snapshot:
            raise QueryFailure(f"device id {device.id} listed twice")
        snapshot[device.id] = device

    logger.debug(f"Snapshot taken with {len(snapshot)} devices")
    return snapshot


def diff_snapshots(old: Snapshot, new: Snapshot) -> Set[Device]:
    """
    Return devices whose id is in `new` but not in `old`.

    Only id presence counts; a device whose attributes changed under the
    same id is not reported.
    """
    return {device for device_id, device in new.items() if device_id not in old}


def filter_devices(devices: Iterable[Device],
                   role: Optional[DeviceRole] = None,
                   device_type: Optional[DeviceType] = None) -> List[Device]:
    """
    Select devices by ownership role and device type.

    A criterion left as None matches every value. Input order is kept.
    """
    return [
        d for d in devices
        if (role is None or d.role is role)
        and (device_type is None or d.device_type is device_type)
    ]
