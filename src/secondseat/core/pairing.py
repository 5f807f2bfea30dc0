"""
Primary pair validation.

xinput create-master gives no guarantee that exactly one consistent pair
appears, so every pair the tool creates or looks up goes through
validate_primary_pair before any device is reattached to it.
"""

from typing import Sequence

from .errors import PairingError, PairingFailure
from .models import Device, DeviceType, PrimaryPair


def validate_primary_pair(candidates: Sequence[Device]) -> PrimaryPair:
    """
    Check that two primaries form a mutually linked pointer/keyboard pair.

    The candidates may come in either order. The first is taken as the
    pointer; if it is not one, the two are swapped once.

    Args:
        candidates: Exactly two primary devices

    Returns:
        The pair in (pointer, keyboard) order

    Raises:
        PairingError: With reason WRONG_COUNT, TYPE_MISMATCH or LINK_MISMATCH
    """
    if len(candidates) != 2:
        raise PairingError(
            PairingFailure.WRONG_COUNT,
            f"expected 2 primary devices, got {len(candidates)}")

    pointer, keyboard = candidates
    if pointer.device_type is not DeviceType.POINTER:
        pointer, keyboard = keyboard, pointer

    if (pointer.device_type is not DeviceType.POINTER or
            keyboard.device_type is not DeviceType.KEYBOARD):
        raise PairingError(
            PairingFailure.TYPE_MISMATCH,
            f"primary devices have invalid types: {pointer.device_type.value}"
            f" and {keyboard.device_type.value}")

    if pointer.primary_id != keyboard.id or keyboard.primary_id != pointer.id:
        raise PairingError(
            PairingFailure.LINK_MISMATCH,
            f"primary devices {pointer.id} and {keyboard.id} do not point "
            f"to each other")

    return PrimaryPair(pointer=pointer, keyboard=keyboard)
