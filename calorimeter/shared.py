"""Enumerations, data records and a small signal/slot helper shared by the package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping


class MessageLevel(Enum):
    """Severity of a message sent to the log."""

    INFORMATION = 0
    WARNING = 1
    CRITICAL = 2
    EMPTY = 3


class RegulatorMode(Enum):
    """Operating mode of a heater regulator."""

    AUTOMATIC = 0
    MANUAL = 1
    PROGRAM_POWER = 2
    STOP_CURRENT_TEMPERATURE = 3
    CONST_VELOCITY = 4
    CONST_VALUE = 5


class FileType(Enum):
    """Destination file of a recorded line."""

    LOG = 0
    DATA = 1
    REGULATOR_FURNACE = 2
    REGULATOR_THERMOSTAT = 3
    REGULATOR_UP_HEATER = 4
    REGULATOR_DOWN_HEATER = 5
    MAIN_SIGNALS = 6
    THERMOSTAT_SIGNALS = 7
    CALIBRATION_HEATER = 8


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


_SETTING_KEYS = {
    "procent_per_sec": ("ProcentPerSecond", _to_float),
    "min_power": ("MinPower", _to_float),
    "max_power": ("MaxPower", _to_float),
    "offset": ("OffsetPower", _to_float),
    "g_p": ("P", _to_float),
    "g_i": ("I", _to_float),
    "g_d": ("D", _to_float),
    "max_integral_value": ("MaxIntegralValue", _to_float),
    "max_proportional_value": ("MaxProportionalValue", _to_float),
    "average_count": ("AverageAdc", _to_int),
    "average_power_count": ("AveragePower", _to_int),
}


@dataclass
class RegulatorParameters:
    """Tuning parameters of a PID heater regulator."""

    min_power: float = 0.0
    max_power: float = 0.0
    g_i: float = 0.0
    g_p: float = 0.0
    g_d: float = 0.0
    offset: float = 0.0
    procent_per_sec: float = 0.0
    max_integral_value: float = 0.0
    max_proportional_value: float = 0.0
    average_count: int = 0
    average_power_count: int = 0

    def to_dict(self) -> dict[str, float | int]:
        """Return the parameters keyed by their settings names."""
        return {key: getattr(self, attr) for attr, (key, _) in _SETTING_KEYS.items()}

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "RegulatorParameters":
        """Build parameters from settings names; missing or bad values become zero."""
        return cls(
            **{attr: convert(values.get(key)) for attr, (key, convert) in _SETTING_KEYS.items()}
        )


@dataclass
class TerconData:
    """One measured value from an acquisition device channel."""

    channel: int = 0
    device_number: int = 0
    value: float = 0.0
    unit: str = "T"
    time: int = 0


class Signal:
    """A list of callables invoked in connection order on emit."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        try:
            self._slots.remove(slot)
        except ValueError:
            raise ValueError("slot is not connected") from None

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)