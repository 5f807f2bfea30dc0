"""
Core module for secondseat.

This module provides the fundamental building blocks:
- Data models for devices, snapshots and primary pairs
- The gateway interface to the X input environment
- DeviceManager for detecting and reattaching devices
"""

from .models import (
    DeviceType,
    DeviceRole,
    Device,
    Snapshot,
    PrimaryPair,
    parse_device_type,
    parse_device_role,
)

from .errors import (
    SecondSeatError,
    GatewayError,
    QueryFailure,
    PairingError,
    PairingFailure,
    DetectionError,
)

from .gateway import (
    CommandGateway,
    RawDeviceRecord,
)

from .snapshot import (
    take_snapshot,
    device_from_record,
    diff_snapshots,
    filter_devices,
)

from .pairing import validate_primary_pair

from .device_manager import (
    DeviceManager,
    Event,
    EventType,
    EventCallback,
)

__all__ = [
    # Models
    "DeviceType",
    "DeviceRole",
    "Device",
    "Snapshot",
    "PrimaryPair",
    "parse_device_type",
    "parse_device_role",
    # Errors
    "SecondSeatError",
    "GatewayError",
    "QueryFailure",
    "PairingError",
    "PairingFailure",
    "DetectionError",
    # Gateway
    "CommandGateway",
    "RawDeviceRecord",
    # Snapshots
    "take_snapshot",
    "device_from_record",
    "diff_snapshots",
    "filter_devices",
    "validate_primary_pair",
    # Device Manager
    "DeviceManager",
    "Event",
    "EventType",
    "EventCallback",
]
