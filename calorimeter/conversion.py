"""Thermocouple EMF conversion and record formatting for measured data."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .shared import FileType, TerconData

COLD_JUNCTION_OFFSET_MV = 0.173  # cold junction at 30 °C

_LOW_RANGE_LIMIT = 1.874
_HIGH_RANGE_LIMIT = 10.332

_LOW_RANGE = (
    0.0,
    1.8494946e02,
    -8.00504062e01,
    1.0223743e02,
    -1.52248592e02,
    1.88821343e02,
    -1.59085941e02,
    8.2302788e01,
    -2.34181944e01,
    2.7978626e00,
)

_MID_RANGE = (
    1.291507177e01,
    1.466298863e02,
    -1.534713402e01,
    3.145945973e00,
    -4.163257839e-01,
    3.187963771e-02,
    -1.2916375e-03,
    2.183475087e-05,
    -1.447379511e-07,
    8.211272125e-09,
)

_HIGH_RANGE = (
    -8.087801117e01,
    1.621573104e02,
    -8.536869453e00,
    4.719686976e-01,
    -1.441693666e-02,
    2.08161889e-04,
)

_SIGNAL_FILES = {
    1: FileType.MAIN_SIGNALS,
    2: FileType.THERMOSTAT_SIGNALS,
    3: FileType.CALIBRATION_HEATER,
}


def _polynomial(x: float, coefficients: Sequence[float]) -> float:
    return sum(c * x**power for power, c in enumerate(coefficients))


def convert_u2c(u: float) -> float:
    """Temperature (°C) from thermocouple EMF in mV, compensating a 30 °C cold junction."""
    u += COLD_JUNCTION_OFFSET_MV
    if u < _LOW_RANGE_LIMIT:
        return _polynomial(u, _LOW_RANGE)
    if u < _HIGH_RANGE_LIMIT:
        return _polynomial(u, _MID_RANGE)
    if u >= _HIGH_RANGE_LIMIT:
        return _polynomial(u, _HIGH_RANGE)
    return 0.0


def _seconds(data: TerconData) -> str:
    return f"{data.time / 1000.0:.3f}"


def format_data_record(data: TerconData) -> str:
    """Line of the data file: time in seconds, device, channel and value."""
    return f"{_seconds(data)}\t{data.device_number}\t{data.channel}\t{data.value:.4f}\r\n"


def signal_file_record(data: TerconData) -> Optional[Tuple[FileType, str]]:
    """Destination and text of the signal-file fragment for a record, if any.

    Channel 1 starts a line with the time and value; other channels finish it.
    """
    file_type = _SIGNAL_FILES.get(data.device_number)
    if file_type is None:
        return None
    if data.channel == 1:
        return file_type, f"{_seconds(data)}\t{data.value:.4f}\t"
    return file_type, f"{data.value:.4f}\r\n"