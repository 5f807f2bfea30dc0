"""
Unit tests for core data models.
"""

import unittest
from dataclasses import FrozenInstanceError

from secondseat.core.models import (
    Device,
    DeviceRole,
    DeviceType,
    PrimaryPair,
    parse_device_role,
    parse_device_type,
)


class TestTokenParsing(unittest.TestCase):
    """Tests for xinput token parsing."""

    def test_parse_device_type(self):
        """Test known device type tokens."""
        self.assertEqual(parse_device_type("pointer"), DeviceType.POINTER)
        self.assertEqual(parse_device_type("keyboard"), DeviceType.KEYBOARD)

    def test_parse_unknown_device_type(self):
        """Test unknown device type token raises ValueError."""
        with self.assertRaises(ValueError):
            parse_device_type("touchpad")

    def test_parse_device_role(self):
        """Test master/slave map to primary/secondary."""
        self.assertEqual(parse_device_role("master"), DeviceRole.PRIMARY)
        self.assertEqual(parse_device_role("slave"), DeviceRole.SECONDARY)

    def test_parse_unknown_device_role(self):
        """Test unknown role token raises ValueError."""
        with self.assertRaises(ValueError):
            parse_device_role("floating")


class TestDevice(unittest.TestCase):
    """Tests for Device class."""

    def test_create_device(self):
        """Test basic device creation."""
        device = Device(
            name="Logitech M705",
            id=10,
            device_type=DeviceType.POINTER,
            role=DeviceRole.SECONDARY,
            primary_id=2,
        )
        self.assertEqual(device.id, 10)
        self.assertTrue(device.is_secondary)
        self.assertFalse(device.is_primary)

    def test_device_is_immutable(self):
        """Test devices cannot be changed inside a snapshot."""
        device = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 2)
        with self.assertRaises(FrozenInstanceError):
            device.primary_id = 3

    def test_device_equality(self):
        """Test devices compare by value."""
        device1 = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 2)
        device2 = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 2)
        device3 = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 7)

        self.assertEqual(device1, device2)
        self.assertNotEqual(device1, device3)  # Reattached
        self.assertEqual(len({device1, device2}), 1)

    def test_str(self):
        """Test readable description."""
        device = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 2)
        self.assertIn("id=10", str(device))
        self.assertIn("secondary pointer", str(device))


class TestPrimaryPair(unittest.TestCase):
    """Tests for PrimaryPair."""

    def test_pair_name_from_pointer(self):
        """Test pair name drops the ' pointer' suffix xinput adds."""
        pair = PrimaryPair(
            pointer=Device("secondseat pointer", 11, DeviceType.POINTER,
                           DeviceRole.PRIMARY, 12),
            keyboard=Device("secondseat keyboard", 12, DeviceType.KEYBOARD,
                            DeviceRole.PRIMARY, 11),
        )
        self.assertEqual(pair.name, "secondseat")

    def test_pair_unpacks_pointer_first(self):
        """Test pair unpacks in (pointer, keyboard) order."""
        pointer = Device("A", 1, DeviceType.POINTER, DeviceRole.PRIMARY, 2)
        keyboard = Device("A kbd", 2, DeviceType.KEYBOARD, DeviceRole.PRIMARY, 1)
        first, second = PrimaryPair(pointer, keyboard)
        self.assertIs(first, pointer)
        self.assertIs(second, keyboard)
        self.assertEqual(PrimaryPair(pointer, keyboard).name, "A")


if __name__ == "__main__":
    unittest.main()
