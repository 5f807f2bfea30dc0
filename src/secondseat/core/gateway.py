"""
System command gateway interface.

The device manager never talks to the X server directly. It goes through
a CommandGateway, which the xinput package implements with subprocesses
and the simulation package implements in memory.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class RawDeviceRecord:
    """
    One unparsed device entry from a device listing.

    Fields hold the tokens exactly as listed. A field the listing did not
    supply is None; the snapshot layer decides whether that is fatal.
    """
    name: Optional[str] = None
    id: Optional[str] = None
    role: Optional[str] = None                 # "master" or "slave"
    device_type: Optional[str] = None          # "pointer" or "keyboard"
    primary_id: Optional[str] = None


class CommandGateway(ABC):
    """
    Operations the device manager needs from the input environment.

    All calls are synchronous, single-shot and not idempotent: calling
    create_primary twice creates two pairs. Failures raise GatewayError.
    """

    @abstractmethod
    def list_devices(self) -> List[RawDeviceRecord]:
        """List every device known to the X server."""

    @abstractmethod
    def create_primary(self, name: str) -> None:
        """Create a primary pointer/keyboard pair named `name`."""

    @abstractmethod
    def remove_primary(self, device_id: int) -> None:
        """
        Remove a primary device.

        The X server removes the paired primary along with it.
        """

    @abstractmethod
    def reattach_device(self, device_id: int, target_primary_id: int) -> None:
        """Route a secondary device through another primary."""
