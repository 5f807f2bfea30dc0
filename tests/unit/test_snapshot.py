"""
Unit tests for snapshots, the differencer and the classifier.
"""

import unittest

from secondseat.core import (
    CommandGateway,
    Device,
    DeviceRole,
    DeviceType,
    GatewayError,
    QueryFailure,
    RawDeviceRecord,
    device_from_record,
    diff_snapshots,
    filter_devices,
    take_snapshot,
)


class RecordGateway(CommandGateway):
    """Gateway returning canned records."""

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error

    def list_devices(self):
        if self.error:
            raise self.error
        return list(self.records)

    def create_primary(self, name):
        raise NotImplementedError

    def remove_primary(self, device_id):
        raise NotImplementedError

    def reattach_device(self, device_id, target_primary_id):
        raise NotImplementedError


def record(name="Mouse", id="10", role="slave", device_type="pointer",
           primary_id="2"):
    return RawDeviceRecord(name=name, id=id, role=role,
                           device_type=device_type, primary_id=primary_id)


POINTER = Device("Virtual core pointer", 2, DeviceType.POINTER, DeviceRole.PRIMARY, 3)
KEYBOARD = Device("Virtual core keyboard", 3, DeviceType.KEYBOARD, DeviceRole.PRIMARY, 2)
MOUSE = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 2)
KBD = Device("Keyboard", 11, DeviceType.KEYBOARD, DeviceRole.SECONDARY, 3)


class TestDeviceFromRecord(unittest.TestCase):
    """Tests for record conversion."""

    def test_secondary_record(self):
        """Test a complete secondary record."""
        self.assertEqual(device_from_record(record()), MOUSE)

    def test_primary_record(self):
        """Test a complete primary record."""
        device = device_from_record(record(
            name="Virtual core keyboard", id="3", role="master",
            device_type="keyboard", primary_id="2"))
        self.assertEqual(device, KEYBOARD)

    def test_missing_fields(self):
        """Test every required field is enforced."""
        for field_name in ("name", "id", "role", "device_type"):
            with self.subTest(field=field_name):
                with self.assertRaises(QueryFailure):
                    device_from_record(record(**{field_name: None}))

    def test_empty_name(self):
        """Test an empty name counts as missing."""
        with self.assertRaises(QueryFailure):
            device_from_record(record(name=""))

    def test_primary_without_link(self):
        """Test primaries must name their paired device."""
        with self.assertRaises(QueryFailure):
            device_from_record(record(role="master", primary_id=None))

    def test_secondary_without_link(self):
        """Test secondaries may omit the primary link."""
        device = device_from_record(record(primary_id=None))
        self.assertIsNone(device.primary_id)

    def test_invalid_values(self):
        """Test malformed tokens are rejected."""
        bad_records = [
            record(id="ten"),
            record(primary_id="x"),
            record(role="floating"),
            record(device_type="touchscreen"),
        ]
        for bad in bad_records:
            with self.subTest(record=bad):
                with self.assertRaises(QueryFailure):
                    device_from_record(bad)


class TestTakeSnapshot(unittest.TestCase):
    """Tests for take_snapshot."""

    def test_snapshot_keyed_by_id(self):
        """Test snapshot maps ids to devices."""
        gateway = RecordGateway([
            record("Virtual core pointer", "2", "master", "pointer", "3"),
            record("Virtual core keyboard", "3", "master", "keyboard", "2"),
            record(),
        ])
        snapshot = take_snapshot(gateway)

        self.assertEqual(set(snapshot), {2, 3, 10})
        self.assertEqual(snapshot[10], MOUSE)

    def test_one_bad_record_fails_listing(self):
        """Test a malformed record fails the whole snapshot."""
        gateway = RecordGateway([
            record("Virtual core pointer", "2", "master", "pointer", "3"),
            record(device_type=None),
        ])
        with self.assertRaises(QueryFailure):
            take_snapshot(gateway)

    def test_gateway_error_becomes_query_failure(self):
        """Test listing errors surface as QueryFailure."""
        gateway = RecordGateway(error=GatewayError("xinput not found"))
        with self.assertRaises(QueryFailure) as ctx:
            take_snapshot(gateway)
        self.assertIn("xinput not found", str(ctx.exception))

    def test_duplicate_id(self):
        """Test the same id listed twice is rejected."""
        gateway = RecordGateway([record(), record(name="Other")])
        with self.assertRaises(QueryFailure):
            take_snapshot(gateway)

    def test_empty_listing(self):
        """Test an empty listing is an empty snapshot."""
        self.assertEqual(take_snapshot(RecordGateway([])), {})


class TestDiffSnapshots(unittest.TestCase):
    """Tests for diff_snapshots."""

    def setUp(self):
        """Set up test fixtures."""
        self.base = {2: POINTER, 3: KEYBOARD}

    def test_diff_with_itself_is_empty(self):
        """Test no snapshot differs from itself."""
        self.assertEqual(diff_snapshots(self.base, self.base), set())
        self.assertEqual(diff_snapshots({}, {}), set())

    def test_new_ids_reported(self):
        """Test devices with new ids are reported."""
        new = dict(self.base)
        new[10] = MOUSE
        new[11] = KBD
        self.assertEqual(diff_snapshots(self.base, new), {MOUSE, KBD})

    def test_removed_ids_not_reported(self):
        """Test devices that disappeared are not reported."""
        old = {2: POINTER, 3: KEYBOARD, 10: MOUSE}
        self.assertEqual(diff_snapshots(old, self.base), set())

    def test_attribute_changes_ignored(self):
        """Test devices keeping their id are not reported when changed."""
        old = {10: MOUSE}
        moved = Device("Mouse", 10, DeviceType.POINTER, DeviceRole.SECONDARY, 7)
        renamed = Device("Renamed", 11, DeviceType.KEYBOARD, DeviceRole.SECONDARY, 3)
        self.assertEqual(diff_snapshots(old, {10: moved, 11: renamed}), {renamed})

    def test_diff_does_not_modify_inputs(self):
        """Test diff is free of side effects."""
        new = {2: POINTER, 3: KEYBOARD, 10: MOUSE}
        diff_snapshots(self.base, new)
        self.assertEqual(len(self.base), 2)
        self.assertEqual(len(new), 3)


class TestFilterDevices(unittest.TestCase):
    """Tests for filter_devices."""

    def setUp(self):
        """Set up test fixtures."""
        self.devices = [POINTER, KEYBOARD, MOUSE, KBD]

    def test_no_criteria_matches_all(self):
        """Test both criteria as wildcards."""
        self.assertEqual(filter_devices(self.devices), self.devices)

    def test_filter_by_role(self):
        """Test filtering by ownership role only."""
        self.assertEqual(filter_devices(self.devices, role=DeviceRole.PRIMARY),
                         [POINTER, KEYBOARD])

    def test_filter_by_type(self):
        """Test filtering by device type only."""
        self.assertEqual(
            filter_devices(self.devices, device_type=DeviceType.KEYBOARD),
            [KEYBOARD, KBD])

    def test_filter_by_role_and_type(self):
        """Test both criteria together."""
        self.assertEqual(
            filter_devices(self.devices, role=DeviceRole.SECONDARY,
                           device_type=DeviceType.POINTER),
            [MOUSE])

    def test_no_match_is_empty(self):
        """Test no match gives an empty list, not an error."""
        self.assertEqual(
            filter_devices([POINTER], role=DeviceRole.SECONDARY), [])

    def test_accepts_any_iterable(self):
        """Test snapshot values can be filtered directly."""
        snapshot = {d.id: d for d in self.devices}
        self.assertEqual(
            filter_devices(snapshot.values(), role=DeviceRole.SECONDARY),
            [MOUSE, KBD])


if __name__ == "__main__":
    unittest.main()
