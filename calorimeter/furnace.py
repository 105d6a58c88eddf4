"""Central coordinator of the calorimeter: routes measured data, logs and regulator settings."""

from __future__ import annotations

import configparser
import dataclasses
import time as _time
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from .conversion import convert_u2c, format_data_record, signal_file_record
from .recorder import DataRecorder
from .shared import FileType, RegulatorParameters, Signal, TerconData

MAIN_HEATER_GROUP = "Regulator of main heater"
THERMOSTAT_GROUP = "Regulator of thermostat"
UP_HEATER_GROUP = "Regulator of up heater"
DOWN_HEATER_GROUP = "Regulator of down heater"

REGULATOR_GROUPS = {
    "furnace": MAIN_HEATER_GROUP,
    "thermostat": THERMOSTAT_GROUP,
    "up_heater": UP_HEATER_GROUP,
    "down_heater": DOWN_HEATER_GROUP,
}

_REGULATOR_LOG_FILES = {
    "furnace": FileType.REGULATOR_FURNACE,
    "thermostat": FileType.REGULATOR_THERMOSTAT,
    "up_heater": FileType.REGULATOR_UP_HEATER,
    "down_heater": FileType.REGULATOR_DOWN_HEATER,
}

HEADER_LINE = "Time\tDeviceNumber\tNChannel\tValue\r\n"


def _new_config() -> configparser.ConfigParser:
    config = configparser.ConfigParser(interpolation=None)
    config.optionxform = str  # keep key case
    return config


def save_regulator_settings(
    parameters_by_group: Mapping[str, RegulatorParameters], path: str | Path
) -> None:
    """Write regulator parameters to an INI file, one section per regulator group."""
    config = _new_config()
    for group, parameters in parameters_by_group.items():
        config[group] = {key: repr(value) for key, value in parameters.to_dict().items()}
    with open(path, "w", encoding="utf-8") as handle:
        config.write(handle)


def load_regulator_settings(path: str | Path) -> Dict[str, RegulatorParameters]:
    """Read the parameters of the four regulators; missing values become zero."""
    config = _new_config()
    config.read(path, encoding="utf-8")
    return {
        group: RegulatorParameters.from_dict(config[group] if config.has_section(group) else {})
        for group in REGULATOR_GROUPS.values()
    }


def _monotonic_clock() -> Callable[[], int]:
    start = _time.monotonic()
    return lambda: int((_time.monotonic() - start) * 1000)


class Furnace:
    """Stamps and records incoming data and feeds the regulators their process values.

    The regulator inputs are signals: ``furnace_value``, ``thermostat_value``,
    ``up_heater_value`` and ``down_heater_value``; the guard heaters receive
    their temperature relative to the main heater.
    """

    def __init__(
        self,
        recorder: DataRecorder,
        clock: Optional[Callable[[], int]] = None,
        settings_path: Optional[str | Path] = None,
    ) -> None:
        self.recorder = recorder
        self.elapsed_ms = clock or _monotonic_clock()
        self.settings_path = Path(settings_path) if settings_path is not None else None

        self.adc_tercon_data_send = Signal()
        self.message = Signal()
        self.furnace_value = Signal()
        self.thermostat_value = Signal()
        self.up_heater_value = Signal()
        self.down_heater_value = Signal()

        self._furnace_temperature = 0.0
        self._furnace_temperature_ready = False

        if self.settings_path is not None:
            self.regulator_parameters = load_regulator_settings(self.settings_path)
        else:
            self.regulator_parameters = {
                group: RegulatorParameters() for group in REGULATOR_GROUPS.values()
            }

        self.recorder.write_file(HEADER_LINE, FileType.DATA)

    def save_settings(self) -> None:
        """Store the current regulator parameters in the settings file, if one is set."""
        if self.settings_path is None:
            raise RuntimeError("no settings file configured")
        save_regulator_settings(self.regulator_parameters, self.settings_path)

    def data_received(self, data: TerconData) -> TerconData:
        """Time-stamp and record a value, convert the sample EMF and pass it on."""
        stamped = dataclasses.replace(data, time=self.elapsed_ms())
        self._write_file(stamped)
        if stamped.device_number == 1 and stamped.channel == 2:
            stamped = dataclasses.replace(stamped, value=convert_u2c(stamped.value))
        self.adc_tercon_data_send.emit(stamped)
        return stamped

    def receive_data(self, data: TerconData) -> None:
        """Route a measured temperature to the regulator it controls."""
        if data.device_number == 2 and data.channel == 2:
            self.thermostat_value.emit(data.value)
        elif data.device_number == 5 and data.channel == 2:
            self.furnace_value.emit(data.value)
            self._furnace_temperature = data.value
            self._furnace_temperature_ready = True
        elif data.device_number == 5 and data.channel == 1:
            if self._furnace_temperature_ready:
                self.up_heater_value.emit(data.value - self._furnace_temperature)
        elif data.device_number == 5 and data.channel == 3:
            if self._furnace_temperature_ready:
                self.down_heater_value.emit(data.value - self._furnace_temperature)

    def write_log_message(self, message: str) -> None:
        self.recorder.write_file(message, FileType.LOG)

    def write_regulator_log(self, name: str, line: str) -> None:
        """Append a trace line to the log of the regulator ``name``."""
        try:
            file_type = _REGULATOR_LOG_FILES[name]
        except KeyError:
            raise ValueError(f"unknown regulator: {name!r}") from None
        self.recorder.write_file(line, file_type)

    def begin_data_record(self) -> None:
        self.recorder.begin_record()

    def end_data_record(self) -> None:
        self.recorder.end_record()

    def _write_file(self, data: TerconData) -> None:
        self.recorder.write_file(format_data_record(data), FileType.DATA)
        fragment = signal_file_record(data)
        if fragment is not None:
            file_type, text = fragment
            self.recorder.write_file(text, file_type)