"""Unit tests for the settings model and settings pydantic models."""

from __future__ import annotations

import threading

import pytest

from pantilt.core.settings import SettingsModel
from pantilt.exceptions import InvalidParameterError
from pantilt.models.settings import (
    PARAMETER_SPECS,
    SETTING_ORDER,
    DeviceSettings,
    SettingKey,
    SettingsSnapshot,
)

DEFAULTS = {
    SettingKey.CAL_X: 2048,
    SettingKey.CAL_DZ: 100,
    SettingKey.CAL_N: 90,
    SettingKey.PAN_MP: 10,
    SettingKey.PAN_AP: 5,
}


@pytest.fixture
def model() -> SettingsModel:
    return SettingsModel()


class TestParameterTable:
    def test_ranges(self):
        ranges = {k: (s.minimum, s.maximum) for k, s in PARAMETER_SPECS.items()}
        assert ranges == {
            SettingKey.CAL_X: (0, 4095),
            SettingKey.CAL_DZ: (0, 500),
            SettingKey.CAL_N: (0, 180),
            SettingKey.PAN_MP: (1, 20),
            SettingKey.PAN_AP: (1, 20),
        }

    def test_order(self):
        assert [k.value for k in SETTING_ORDER] == ["CAL_X", "CAL_DZ", "CAL_N", "PAN_MP", "PAN_AP"]

    def test_defaults(self, model):
        assert dict(model.current().as_pairs()) == DEFAULTS


class TestApplyLocalDelta:
    def test_increment(self, model):
        assert model.apply_local_delta(SettingKey.CAL_DZ, +1) == 101
        assert model.get("CAL_DZ") == 101

    def test_clamped_at_max(self, model):
        model.set_local(SettingKey.CAL_N, 180)
        assert model.apply_local_delta(SettingKey.CAL_N, +1) == 180

    def test_clamped_at_min(self, model):
        model.set_local(SettingKey.CAL_N, 0)
        assert model.apply_local_delta(SettingKey.CAL_N, -1) == 0

    def test_pace_never_below_one(self, model):
        model.set_local("PAN_MP", 1)
        assert model.apply_local_delta("PAN_MP", -1) == 1

    def test_string_key(self, model):
        assert model.apply_local_delta("PAN_AP", -1) == 4

    def test_unknown_key(self, model):
        with pytest.raises(InvalidParameterError):
            model.apply_local_delta("SPEED", 1)

    def test_other_fields_untouched(self, model):
        model.apply_local_delta(SettingKey.CAL_X, -1)
        pairs = dict(model.current().as_pairs())
        assert pairs[SettingKey.CAL_X] == 2047
        assert {k: v for k, v in pairs.items() if k != SettingKey.CAL_X} == {
            k: v for k, v in DEFAULTS.items() if k != SettingKey.CAL_X
        }


class TestSetLocal:
    def test_clamps(self, model):
        assert model.set_local("CAL_X", 5000) == 4095
        assert model.set_local("PAN_AP", 0) == 1


class TestMergeSnapshot:
    def test_partial_merge_changes_only_present_keys(self, model):
        model.set_local("CAL_X", 1000)
        model.set_local("PAN_MP", 3)
        before = model.current()

        model.merge_snapshot(SettingsSnapshot.from_mapping({"CAL_N": 45}))

        after = model.current()
        assert after.cal_n == 45
        assert after.cal_x == before.cal_x == 1000
        assert after.cal_dz == before.cal_dz
        assert after.pan_mp == before.pan_mp == 3
        assert after.pan_ap == before.pan_ap

    def test_device_values_not_clamped(self, model):
        model.merge_snapshot(SettingsSnapshot.from_mapping({"PAN_AP": 50}))
        assert model.get("PAN_AP") == 50

    def test_empty_snapshot_is_noop(self, model):
        changes = model.changes.subscribe()
        model.merge_snapshot(SettingsSnapshot())
        assert model.current() == DeviceSettings()
        assert changes.drain() == []


class TestResetToDefaults:
    def test_pairs_in_fixed_order(self, model):
        model.set_local("CAL_X", 1)
        model.merge_snapshot(SettingsSnapshot.from_mapping({"PAN_AP": 17, "CAL_N": 3}))

        pairs = model.reset_to_defaults()

        assert pairs == [
            (SettingKey.CAL_X, 2048),
            (SettingKey.CAL_DZ, 100),
            (SettingKey.CAL_N, 90),
            (SettingKey.PAN_MP, 10),
            (SettingKey.PAN_AP, 5),
        ]
        assert model.current() == DeviceSettings()


class TestChangeEvents:
    def test_each_mutation_publishes(self, model):
        changes = model.changes.subscribe()

        model.apply_local_delta("CAL_N", 1)
        model.merge_snapshot(SettingsSnapshot.from_mapping({"CAL_DZ": 7}))
        model.reset_to_defaults()

        events = changes.drain()
        assert [e.cal_n for e in events] == [91, 91, 90]
        assert events[1].cal_dz == 7

    def test_concurrent_deltas_are_not_lost(self, model):
        model.set_local("CAL_X", 0)

        def bump():
            for _ in range(200):
                model.apply_local_delta("CAL_X", 1)

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert model.get("CAL_X") == 800


class TestDeviceSettings:
    def test_alias_dump(self):
        dumped = DeviceSettings().model_dump(by_alias=True)
        assert dumped == {"CAL_X": 2048, "CAL_DZ": 100, "CAL_N": 90, "PAN_MP": 10, "PAN_AP": 5}

    def test_get_by_name(self):
        assert DeviceSettings(CAL_N=12).get("CAL_N") == 12
