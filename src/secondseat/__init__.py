"""
secondseat: Share one X11 display between two users.

This package creates an extra primary (master) pointer/keyboard pair with
xinput and reattaches one physical mouse and keyboard to it, so two
people get independent cursors and keyboard focus on the same screen.

Modules:
- core: Device models, snapshots, pair validation and the device manager
- xinput: Gateway to the xinput tool and the X server version check
- config: Configuration file handling
- cli: Command-line interface
- simulation: In-memory X server for tests

Example usage:
    from secondseat.core import DeviceManager, DeviceType
    from secondseat.xinput import XinputGateway

    manager = DeviceManager(XinputGateway())

    # Create the second seat's primary pair
    pair = manager.create_primary_pair("secondseat")

    # Plug in a mouse, then move it over
    mice = manager.detect_new_secondaries(DeviceType.POINTER)
    manager.reattach(mice, pair.pointer.id)
"""

__version__ = "0.1.0"
__author__ = "secondseat contributors"

# Convenience imports
from .core import (
    DeviceManager,
    Device,
    DeviceType,
    DeviceRole,
    PrimaryPair,
    SecondSeatError,
)

__all__ = [
    "__version__",
    "DeviceManager",
    "Device",
    "DeviceType",
    "DeviceRole",
    "PrimaryPair",
    "SecondSeatError",
]
