"""Pydantic models for device calibration and pace settings."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pantilt.exceptions import InvalidParameterError


class SettingKey(StrEnum):
    """Named integer parameters held by the device."""

    CAL_X = "CAL_X"  # joystick calibration center
    CAL_DZ = "CAL_DZ"  # joystick deadzone
    CAL_N = "CAL_N"  # neutral servo angle
    PAN_MP = "PAN_MP"  # manual pace
    PAN_AP = "PAN_AP"  # auto pace


class ParameterSpec(BaseModel):
    """Range and default of a single setting."""

    model_config = ConfigDict(frozen=True)

    key: SettingKey
    minimum: int
    maximum: int
    default: int
    label: str = ""

    def clamp(self, value: int) -> int:
        return max(self.minimum, min(self.maximum, value))


# Insertion order is the order used for resets and dumps.
PARAMETER_SPECS: dict[SettingKey, ParameterSpec] = {
    SettingKey.CAL_X: ParameterSpec(
        key=SettingKey.CAL_X, minimum=0, maximum=4095, default=2048,
        label="Calibration center",
    ),
    SettingKey.CAL_DZ: ParameterSpec(
        key=SettingKey.CAL_DZ, minimum=0, maximum=500, default=100,
        label="Deadzone",
    ),
    SettingKey.CAL_N: ParameterSpec(
        key=SettingKey.CAL_N, minimum=0, maximum=180, default=90,
        label="Neutral angle",
    ),
    SettingKey.PAN_MP: ParameterSpec(
        key=SettingKey.PAN_MP, minimum=1, maximum=20, default=10,
        label="Manual pace",
    ),
    SettingKey.PAN_AP: ParameterSpec(
        key=SettingKey.PAN_AP, minimum=1, maximum=20, default=5,
        label="Auto pace",
    ),
}

SETTING_ORDER: tuple[SettingKey, ...] = tuple(PARAMETER_SPECS)


def coerce_key(key: SettingKey | str) -> SettingKey:
    """Return *key* as a SettingKey.

    Raises:
        InvalidParameterError: If *key* does not name a setting.
    """
    try:
        return SettingKey(key)
    except ValueError:
        raise InvalidParameterError(
            f"Unknown setting {key!r}; expected one of "
            f"{', '.join(k.value for k in SETTING_ORDER)}"
        ) from None


class SettingsSnapshot(BaseModel):
    """Partial settings record decoded from one telemetry line.

    Only keys present on the wire are held; absent keys are simply absent.
    """

    model_config = ConfigDict(frozen=True)

    values: dict[SettingKey, int] = Field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __len__(self) -> int:
        return len(self.values)

    def keys(self) -> list[SettingKey]:
        return list(self.values)

    def get(self, key: SettingKey | str, default: int | None = None) -> int | None:
        return self.values.get(coerce_key(key), default)

    def items(self) -> list[tuple[SettingKey, int]]:
        return list(self.values.items())

    @property
    def is_empty(self) -> bool:
        return not self.values

    @classmethod
    def from_mapping(cls, values: Mapping[SettingKey | str, int]) -> SettingsSnapshot:
        return cls(values={coerce_key(k): v for k, v in values.items()})


class DeviceSettings(BaseModel):
    """Complete, read-only view of all five settings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cal_x: int = Field(default=PARAMETER_SPECS[SettingKey.CAL_X].default, alias="CAL_X")
    cal_dz: int = Field(default=PARAMETER_SPECS[SettingKey.CAL_DZ].default, alias="CAL_DZ")
    cal_n: int = Field(default=PARAMETER_SPECS[SettingKey.CAL_N].default, alias="CAL_N")
    pan_mp: int = Field(default=PARAMETER_SPECS[SettingKey.PAN_MP].default, alias="PAN_MP")
    pan_ap: int = Field(default=PARAMETER_SPECS[SettingKey.PAN_AP].default, alias="PAN_AP")

    def get(self, key: SettingKey | str) -> int:
        return getattr(self, coerce_key(key).value.lower())

    def as_pairs(self) -> list[tuple[SettingKey, int]]:
        """Return (key, value) pairs in the fixed setting order."""
        return [(key, self.get(key)) for key in SETTING_ORDER]

    @classmethod
    def from_values(cls, values: Mapping[SettingKey, int]) -> DeviceSettings:
        return cls.model_validate({key.value: value for key, value in values.items()})
