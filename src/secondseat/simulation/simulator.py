"""
Simulation framework for testing secondseat without an X server.

This module provides:
- An in-memory X input hierarchy that implements CommandGateway
- Plugging and unplugging of virtual physical devices
- Failure injection and call recording for gateway operations
- Rendering of the hierarchy as `xinput list` output
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Set, Tuple
import logging

from ..core import (
    CommandGateway,
    Device,
    DeviceRole,
    DeviceType,
    GatewayError,
    RawDeviceRecord,
)
from ..xinput.parser import parse_list_output

logger = logging.getLogger(__name__)


CREATE_PAIR = "pair"                # Normal create-master behavior
CREATE_POINTER_ONLY = "pointer-only"  # Only the pointer appears
CREATE_UNLINKED = "unlinked"        # Both appear but don't reference each other


@dataclass
class InjectedFailure:
    """A failure scheduled for a gateway operation."""
    operation: str
    message: str
    skip: int = 0                   # Successful calls to let through first


class SimulatedXServer(CommandGateway):
    """
    Simulated X server input hierarchy.

    Starts with the virtual core pointer (id 2) and keyboard (id 3) and
    their XTEST devices, like a real server. Ids are handed out lowest
    free first, so ids of removed devices get reused.
    """

    CORE_POINTER_ID = 2
    CORE_KEYBOARD_ID = 3

    def __init__(self, with_core_devices: bool = True,
                 create_mode: str = CREATE_PAIR):
        """
        Initialize the simulated server.

        Args:
            with_core_devices: Create the virtual core pair and XTEST devices
            create_mode: How create_primary behaves (CREATE_* constants)
        """
        self.devices: Dict[int, Device] = {}
        self.floating: Set[int] = set()
        self.create_mode = create_mode

        # Appended verbatim to every listing
        self.extra_records: List[RawDeviceRecord] = []

        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._failures: List[InjectedFailure] = []
        self._core_ids: Set[int] = set()

        if with_core_devices:
            self._core_ids = {self.CORE_POINTER_ID, self.CORE_KEYBOARD_ID}
            self.add_device(Device("Virtual core pointer", self.CORE_POINTER_ID,
                                   DeviceType.POINTER, DeviceRole.PRIMARY,
                                   self.CORE_KEYBOARD_ID))
            self.add_device(Device("Virtual core keyboard", self.CORE_KEYBOARD_ID,
                                   DeviceType.KEYBOARD, DeviceRole.PRIMARY,
                                   self.CORE_POINTER_ID))
            self.add_device(Device("Virtual core XTEST pointer", 4,
                                   DeviceType.POINTER, DeviceRole.SECONDARY,
                                   self.CORE_POINTER_ID))
            self.add_device(Device("Virtual core XTEST keyboard", 5,
                                   DeviceType.KEYBOARD, DeviceRole.SECONDARY,
                                   self.CORE_KEYBOARD_ID))

    # === Hierarchy Setup ===

    def _next_id(self, after: int = 1) -> int:
        """Lowest free device id above `after`; X never hands out 0 or 1."""
        device_id = after + 1
        while device_id in self.devices:
            device_id += 1
        return device_id

    def add_device(self, device: Device) -> Device:
        """Insert a device as is, replacing any device with the same id."""
        self.devices[device.id] = device
        self.floating.discard(device.id)
        return device

    def _core_primary(self, device_type: DeviceType) -> int:
        """Id of the first primary of a type, the one new devices attach to."""
        for device in sorted(self.devices.values(), key=lambda d: d.id):
            if device.is_primary and device.device_type is device_type:
                return device.id
        raise GatewayError(f"no primary {device_type.value} to attach to")

    def plug(self, name: str, device_type: DeviceType) -> Device:
        """
        Simulate plugging in a physical device.

        The device is attached to the first primary of its type.

        Returns:
            The new secondary device
        """
        device = self.add_device(Device(
            name=name,
            id=self._next_id(),
            device_type=device_type,
            role=DeviceRole.SECONDARY,
            primary_id=self._core_primary(device_type),
        ))
        logger.info(f"Plugged '{name}' as device {device.id}")
        return device

    def unplug(self, device_id: int) -> None:
        """Simulate unplugging a physical device."""
        device = self.devices.pop(device_id, None)
        self.floating.discard(device_id)
        if device:
            logger.info(f"Unplugged '{device.name}' ({device_id})")

    def find(self, name: str) -> Optional[Device]:
        """Get the first device with exactly this name."""
        for device in self.devices.values():
            if device.name == name:
                return device
        return None

    # === Failure Injection ===

    def inject_failure(self, operation: str, message: str = "simulated failure",
                       skip: int = 0) -> None:
        """
        Make a future call of a gateway operation fail once.

        Args:
            operation: Gateway method name, e.g. "reattach_device"
            message: Diagnostic text carried by the GatewayError
            skip: Number of calls to let succeed before failing
        """
        self._failures.append(InjectedFailure(operation, message, skip))

    def _record(self, operation: str, *args: Any) -> None:
        """Record a call and raise if a failure is scheduled for it."""
        for failure in self._failures:
            if failure.operation != operation:
                continue
            if failure.skip > 0:
                failure.skip -= 1
                break
            self._failures.remove(failure)
            logger.info(f"Injected failure in {operation}{args}")
            raise GatewayError(f"{operation} failed with output '{failure.message}'")

        self.calls.append((operation, args))

    def calls_to(self, operation: str) -> List[Tuple[Any, ...]]:
        """Arguments of every successful call to an operation."""
        return [args for op, args in self.calls if op == operation]

    # === CommandGateway ===

    def list_devices(self) -> List[RawDeviceRecord]:
        self._record("list_devices")
        return parse_list_output(self.render_listing()) + list(self.extra_records)

    def create_primary(self, name: str) -> None:
        self._record("create_primary", name)

        pointer_id = self._next_id()
        keyboard_id = self._next_id(after=pointer_id)

        if self.create_mode == CREATE_UNLINKED:
            keyboard_link = self.CORE_POINTER_ID
        else:
            keyboard_link = pointer_id

        self.add_device(Device(f"{name} pointer", pointer_id,
                               DeviceType.POINTER, DeviceRole.PRIMARY, keyboard_id))
        if self.create_mode != CREATE_POINTER_ONLY:
            self.add_device(Device(f"{name} keyboard", keyboard_id,
                                   DeviceType.KEYBOARD, DeviceRole.PRIMARY,
                                   keyboard_link))
            self.add_device(Device(f"{name} XTEST pointer", self._next_id(),
                                   DeviceType.POINTER, DeviceRole.SECONDARY,
                                   pointer_id))
            self.add_device(Device(f"{name} XTEST keyboard", self._next_id(),
                                   DeviceType.KEYBOARD, DeviceRole.SECONDARY,
                                   keyboard_id))

        logger.info(f"Created primary pair '{name}' ({pointer_id}, {keyboard_id})")

    def remove_primary(self, device_id: int) -> None:
        self._record("remove_primary", device_id)

        device = self.devices.get(device_id)
        if device is None or not device.is_primary:
            raise GatewayError(f"remove-master failed with output "
                               f"'X Error: BadDevice, invalid or uninitialized "
                               f"input device ({device_id})'")
        if device_id in self._core_ids:
            raise GatewayError("remove-master failed with output "
                               "'X Error: BadValue, cannot remove core device'")

        removed = {device_id}
        partner = self.devices.get(device.primary_id)
        if partner is not None and partner.is_primary:
            removed.add(partner.id)

        for other in list(self.devices.values()):
            if other.id in removed or other.primary_id not in removed:
                continue
            if " XTEST " in other.name:
                del self.devices[other.id]
            else:
                # Physical devices of a removed primary are left floating
                self.devices[other.id] = replace(other, primary_id=None)
                self.floating.add(other.id)

        for removed_id in removed:
            del self.devices[removed_id]

        logger.info(f"Removed primary devices {sorted(removed)}")

    def reattach_device(self, device_id: int, target_primary_id: int) -> None:
        self._record("reattach_device", device_id, target_primary_id)

        device = self.devices.get(device_id)
        target = self.devices.get(target_primary_id)
        if device is None or target is None:
            raise GatewayError("reattach failed with output "
                               "'X Error: BadDevice, invalid or uninitialized "
                               "input device'")
        if not device.is_secondary or not target.is_primary:
            raise GatewayError("reattach failed with output "
                               "'X Error: BadDevice, can only attach a slave "
                               "to a master'")
        if device.device_type is not target.device_type:
            raise GatewayError("reattach failed with output "
                               "'X Error: BadDevice, device type mismatch'")

        self.devices[device_id] = replace(device, primary_id=target_primary_id)
        self.floating.discard(device_id)
        logger.info(f"Reattached '{device.name}' to {target_primary_id}")

    # === Rendering ===

    def render_listing(self) -> str:
        """
        Render the hierarchy the way `xinput list` prints it.

        Pointer primaries come first, then keyboard primaries, each followed
        by the secondaries attached to it. Floating devices come last.
        """
        lines = []

        def line(prefix: str, device: Device, role: str) -> str:
            info = f"{role:<6} {device.device_type.value:<8} ({device.primary_id})"
            return f"{prefix}{device.name:<40}\tid={device.id}\t[{info}]"

        ordered = sorted(self.devices.values(),
                         key=lambda d: (d.device_type is DeviceType.KEYBOARD, d.id))
        for primary in ordered:
            if not primary.is_primary:
                continue
            pointer = primary.device_type is DeviceType.POINTER
            lines.append(line("⎡ " if pointer else "⎣ ", primary, "master"))
            for device in ordered:
                if (device.is_secondary and device.id not in self.floating
                        and device.primary_id == primary.id):
                    lines.append(line("⎜   ↳ " if pointer else "    ↳ ",
                                      device, "slave"))

        for device_id in sorted(self.floating):
            device = self.devices[device_id]
            lines.append(f"∼ {device.name:<40}\tid={device.id}\t[floating slave]")

        return "\n".join(lines) + "\n"

    def get_state_summary(self) -> str:
        """Get a text summary of the current hierarchy."""
        lines = ["=== Simulated X Server ===", ""]
        lines.append(self.render_listing())
        lines.append(f"Calls: {len(self.calls)}")
        for op, args in self.calls:
            lines.append(f"  {op}{args}")
        return '\n'.join(lines)
