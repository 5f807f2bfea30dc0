"""
Device Manager - Core logic for detecting and reattaching input devices.

This is the heart of secondseat. It manages:
- Holding the last known snapshot of the device topology
- Creating, looking up and removing primary pairs
- Detecting devices that appeared since the last snapshot
- Reattaching secondary devices to a primary
"""

from typing import Any, Callable, Dict, Iterable, List, Optional
from dataclasses import dataclass, field
from enum import Enum, auto
import logging

from .errors import GatewayError
from .gateway import CommandGateway
from .models import Device, DeviceRole, DeviceType, PrimaryPair, Snapshot
from .pairing import validate_primary_pair
from .snapshot import diff_snapshots, filter_devices, take_snapshot

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can be emitted."""
    STATE_REFRESHED = auto()
    PRIMARY_CREATED = auto()
    PRIMARY_REMOVED = auto()
    DEVICE_REATTACHED = auto()


@dataclass
class Event:
    """Event emitted by the device manager."""
    event_type: EventType
    device_id: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)


EventCallback = Callable[[Event], None]


class DeviceManager:
    """
    Tracks the X input topology and changes it through a gateway.

    The manager owns one snapshot. It is replaced as a whole on every
    refresh and after every operation that changes the topology, so that
    diffing two snapshots always compares two points in time.

    A manager belongs to one session; it is not safe to share between
    threads.
    """

    def __init__(self, gateway: CommandGateway):
        """
        Initialize the device manager and take the first snapshot.

        Args:
            gateway: Gateway used for every call into the X server

        Raises:
            QueryFailure: If the initial listing fails
        """
        self._gateway = gateway
        self._event_listeners: List[EventCallback] = []
        self._state: Snapshot = {}
        self.refresh_state()

    @property
    def state(self) -> Snapshot:
        """Copy of the current snapshot."""
        return dict(self._state)

    def add_event_listener(self, callback: EventCallback) -> None:
        """Add an event listener."""
        self._event_listeners.append(callback)

    def remove_event_listener(self, callback: EventCallback) -> None:
        """Remove an event listener."""
        if callback in self._event_listeners:
            self._event_listeners.remove(callback)

    def _emit_event(self, event: Event) -> None:
        """Emit an event to all listeners."""
        for listener in self._event_listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Event listener error: {e}")

    # === State ===

    def refresh_state(self) -> None:
        """
        Replace the current snapshot with a fresh one.

        Raises:
            QueryFailure: If listing or parsing fails; state is left as it was
        """
        self._state = take_snapshot(self._gateway)
        self._emit_event(Event(
            event_type=EventType.STATE_REFRESHED,
            data={"device_count": len(self._state)}
        ))

    def _detect_new(self) -> List[Device]:
        """Refresh and return devices that were not in the previous snapshot."""
        old_state = self._state
        self.refresh_state()
        return sorted(diff_snapshots(old_state, self._state), key=lambda d: d.id)

    def list_primaries(self) -> List[Device]:
        """Get all primary devices in the current snapshot."""
        return filter_devices(self._state.values(), role=DeviceRole.PRIMARY)

    def list_secondaries(self, primary_id: Optional[int] = None) -> List[Device]:
        """
        Get secondary devices in the current snapshot.

        Args:
            primary_id: Only return devices attached to this primary
        """
        secondaries = filter_devices(self._state.values(), role=DeviceRole.SECONDARY)
        if primary_id is None:
            return secondaries
        return [d for d in secondaries if d.primary_id == primary_id]

    # === Primary Pairs ===

    def find_primary_pair_by_name(self, name: str) -> PrimaryPair:
        """
        Find the primary pair whose device names contain `name`.

        Matching is a case-sensitive substring match over the current
        snapshot; the matches must form exactly one valid pair.

        Args:
            name: Substring of the primary device names

        Returns:
            The matching pair as (pointer, keyboard)

        Raises:
            PairingError: If the matches are not exactly one consistent pair
        """
        matches = [d for d in self.list_primaries() if name in d.name]
        return validate_primary_pair(matches)

    def create_primary_pair(self, name: str) -> PrimaryPair:
        """
        Create a new primary pair and identify it in the topology.

        Args:
            name: Name passed to the X server for the new pair

        Returns:
            The new pair as (pointer, keyboard)

        Raises:
            GatewayError: If the X server refuses to create the pair
            QueryFailure: If the topology cannot be read afterwards
            PairingError: If the new primaries are not exactly one valid pair
        """
        self._gateway.create_primary(name)

        pair = validate_primary_pair(self.detect_new_primaries())

        logger.info(f"Created primary pair '{name}' "
                    f"(pointer {pair.pointer.id}, keyboard {pair.keyboard.id})")
        self._emit_event(Event(
            event_type=EventType.PRIMARY_CREATED,
            device_id=pair.pointer.id,
            data={"name": name, "pointer": pair.pointer, "keyboard": pair.keyboard}
        ))

        return pair

    def remove_primary_pair(self, device_id: int) -> None:
        """
        Remove a primary pair.

        Removing either half removes its partner as well, so one call
        is enough.

        Args:
            device_id: Id of the primary pointer or primary keyboard

        Raises:
            GatewayError: If the X server refuses the removal
            QueryFailure: If the topology cannot be read afterwards
        """
        self._gateway.remove_primary(device_id)

        logger.info(f"Removed primary pair of device {device_id}")
        self.refresh_state()
        self._emit_event(Event(
            event_type=EventType.PRIMARY_REMOVED,
            device_id=device_id,
        ))

    # === Detection ===

    def detect_new_primaries(self) -> List[Device]:
        """
        Refresh and return primary devices that appeared since the last snapshot.

        Raises:
            QueryFailure: If the topology cannot be read
        """
        return filter_devices(self._detect_new(), role=DeviceRole.PRIMARY)

    def detect_new_secondaries(self, device_type: DeviceType) -> List[Device]:
        """
        Refresh and return secondary devices of a type that appeared since
        the last snapshot.

        An empty result is not an error here; the caller decides.

        Args:
            device_type: Type of device to look for

        Raises:
            QueryFailure: If the topology cannot be read
        """
        new_devices = filter_devices(self._detect_new(),
                                     role=DeviceRole.SECONDARY,
                                     device_type=device_type)
        logger.debug(f"Detected {len(new_devices)} new {device_type.value} devices")
        return new_devices

    # === Reattachment ===

    def reattach(self, devices: Iterable[Device], target_primary_id: int) -> None:
        """
        Route secondary devices through a primary.

        Devices are reattached in order. The first failure stops the loop
        and is raised as is; devices already reattached stay where they
        are and the snapshot is not refreshed.

        Args:
            devices: Secondary devices to move
            target_primary_id: Id of the primary to attach them to

        Raises:
            GatewayError: If any reattachment fails
            QueryFailure: If the topology cannot be read afterwards
        """
        for device in devices:
            try:
                self._gateway.reattach_device(device.id, target_primary_id)
            except GatewayError:
                logger.error(f"Reattaching '{device.name}' ({device.id}) "
                             f"to {target_primary_id} failed")
                raise

            logger.info(f"Reattached '{device.name}' ({device.id}) "
                        f"to primary {target_primary_id}")
            self._emit_event(Event(
                event_type=EventType.DEVICE_REATTACHED,
                device_id=device.id,
                data={"name": device.name, "primary_id": target_primary_id}
            ))

        self.refresh_state()

    # === State Queries ===

    def get_status(self) -> Dict[str, Any]:
        """
        Get the current topology grouped by primary.

        Returns:
            Dict with every primary and the secondaries attached to it
        """
        return {
            "primaries": [
                {
                    "id": p.id,
                    "name": p.name,
                    "type": p.device_type.value,
                    "paired_id": p.primary_id,
                    "secondaries": [
                        {"id": s.id, "name": s.name, "type": s.device_type.value}
                        for s in sorted(self.list_secondaries(p.id), key=lambda d: d.id)
                    ],
                }
                for p in sorted(self.list_primaries(), key=lambda d: d.id)
            ],
            "device_count": len(self._state),
        }
