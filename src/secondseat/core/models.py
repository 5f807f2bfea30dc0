"""
Core data models for secondseat.

These models represent the X input topology as reported by xinput:
- Device: One logical (primary) or physical (secondary) input device
- Snapshot: All devices known to the X server at one instant
- PrimaryPair: A primary pointer and the primary keyboard it is paired with
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, NamedTuple, Optional


class DeviceType(Enum):
    """Semantic class of an input device."""
    POINTER = "pointer"
    KEYBOARD = "keyboard"


class DeviceRole(Enum):
    """
    Ownership role of a device.

    The values are the tokens xinput prints: primaries are "master"
    devices, physical devices routed into them are "slave" devices.
    """
    PRIMARY = "master"      # Virtual aggregation endpoint
    SECONDARY = "slave"     # Physical hardware attached to a primary


def parse_device_type(token: str) -> DeviceType:
    """
    Parse a device type token.

    Raises:
        ValueError: If the token is not a known device type
    """
    try:
        return DeviceType(token)
    except ValueError:
        raise ValueError(f"unknown device type {token!r}") from None


def parse_device_role(token: str) -> DeviceRole:
    """
    Parse an ownership role token.

    Raises:
        ValueError: If the token is not a known device role
    """
    try:
        return DeviceRole(token)
    except ValueError:
        raise ValueError(f"unknown device role {token!r}") from None


@dataclass(frozen=True)
class Device:
    """
    Represents one input device inside a snapshot.

    The id is only meaningful within the snapshot it came from: the
    X server hands out ids of removed devices to new ones.
    """
    name: str                                  # Display name, not unique
    id: int                                    # Unique within one snapshot
    device_type: DeviceType
    role: DeviceRole
    primary_id: Optional[int] = None           # Paired primary, or attached primary

    @property
    def is_primary(self) -> bool:
        return self.role is DeviceRole.PRIMARY

    @property
    def is_secondary(self) -> bool:
        return self.role is DeviceRole.SECONDARY

    def __str__(self) -> str:
        return (f"{self.name} (id={self.id}, {self.role.name.lower()} "
                f"{self.device_type.value}, primary={self.primary_id})")


# Device topology at one instant, keyed by device id
Snapshot = Dict[int, Device]


class PrimaryPair(NamedTuple):
    """A primary pointer and primary keyboard that reference each other."""
    pointer: Device
    keyboard: Device

    @property
    def name(self) -> str:
        """Name of the pair, as given to xinput create-master."""
        suffix = " pointer"
        if self.pointer.name.endswith(suffix):
            return self.pointer.name[:-len(suffix)]
        return self.pointer.name
