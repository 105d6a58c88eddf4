"""Writes logs, measurement data and regulator traces into a dated session folder."""

from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import BinaryIO

from .shared import FileType

_REGULATOR_HEADER = b"Value\tavValue\tError\tPower\tP\tI\tD\r\n"

_SESSION_FILES: dict[FileType, tuple[str, bytes]] = {
    FileType.LOG: ("log.txt", b""),
    FileType.DATA: ("data.txt", b""),
    FileType.REGULATOR_FURNACE: ("regulatorFurnace.txt", _REGULATOR_HEADER),
    FileType.REGULATOR_THERMOSTAT: ("regulatorThermostat.txt", _REGULATOR_HEADER),
    FileType.REGULATOR_UP_HEATER: ("regulatorUpHeater.txt", _REGULATOR_HEADER),
    FileType.REGULATOR_DOWN_HEATER: ("regulatorDownHeater.txt", _REGULATOR_HEADER),
}

_RECORD_FILES: dict[FileType, tuple[str, bytes]] = {
    FileType.MAIN_SIGNALS: (
        "mainSignals",
        b"Time(sec)\tResistance(Omh)\tSampleTemperature(mV)\r\n",
    ),
    FileType.THERMOSTAT_SIGNALS: (
        "thermostatSignals",
        b"Time(sec)\tDiffTemperature(mV)\tThermostatTemperature(gr C)\r\n",
    ),
    FileType.CALIBRATION_HEATER: (
        "calibrHeaterSignals",
        b"Time(sec)\tCalibrHeaterI(mV)\tCalibrHeaterV(mV)\r\n",
    ),
}


def create_session_dir(base_dir: str | Path, today: _dt.date) -> Path:
    """Create and return ``base_dir/data/DD_MM_YYYY[_N]``, picking the first free name."""
    data_dir = Path(base_dir) / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    name = today.strftime("%d_%m_%Y")
    candidate = data_dir / name
    suffix = 1
    while candidate.exists():
        candidate = data_dir / f"{name}_{suffix}"
        suffix += 1
    candidate.mkdir()
    return candidate.resolve()


def _encode(data: str, file_type: FileType) -> bytes:
    if file_type is FileType.LOG:
        return data.encode("utf-8")
    return data.encode("latin-1", errors="replace")


class DataRecorder:
    """Owns the session files; signal files are written only between begin and end."""

    def __init__(self, base_dir: str | Path = ".", today: _dt.date | None = None) -> None:
        self.path = create_session_dir(base_dir, today or _dt.date.today())
        self.recording = False
        self._record_count = 1
        self._session: dict[FileType, BinaryIO] = {}
        self._recorded: dict[FileType, BinaryIO] = {}
        for file_type, (name, header) in _SESSION_FILES.items():
            handle = open(self.path / name, "wb")
            handle.write(header)
            self._session[file_type] = handle

    def begin_record(self) -> None:
        self._close_recorded()
        self.recording = True
        for file_type, (stem, header) in _RECORD_FILES.items():
            handle = open(self.path / f"{stem}_{self._record_count}.txt", "wb")
            handle.write(header)
            self._recorded[file_type] = handle
        self._record_count += 1

    def end_record(self) -> None:
        self.recording = False
        self._close_recorded()

    def write_file(self, data: str, file_type: FileType) -> None:
        handle = self._session.get(file_type)
        if handle is None and self.recording:
            handle = self._recorded.get(file_type)
        if handle is None or handle.closed:
            return
        handle.write(_encode(data, file_type))
        handle.flush()

    def close(self) -> None:
        self._close_recorded()
        for handle in self._session.values():
            handle.close()

    def _close_recorded(self) -> None:
        for handle in self._recorded.values():
            handle.close()
        self._recorded.clear()

    def __enter__(self) -> "DataRecorder":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()