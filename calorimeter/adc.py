"""Thermocouple signal processing for the analogue input module."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Sequence

from .shared import Signal, TerconData

ADC_DEVICE_NUMBER = 4
MAX_DELTA_CURRENT_PREV_VALUE = 0.1  # mV
OFFSET_ZERO = 0.004
SCALE = 0.99976
REFERENCE_JUNCTION_TEMPERATURE = 25.0


def moving_average(values: Iterable[float]) -> float:
    """Arithmetic mean of the values; raises ValueError when there are none."""
    items = list(values)
    if not items:
        raise ValueError("moving average of an empty sequence")
    return sum(items) / len(items)


def _polynomial(x: float, coefficients: Sequence[float]) -> float:
    return sum(c * x**power for power, c in enumerate(coefficients))


_A1_VOLT_TO_TEMPERATURE = (
    0.9643027,
    79.495086,
    -4.9990310,
    0.6341776,
    -4.7440967e-2,
    2.1811337e-3,
    -5.8324228e-5,
    8.2433725e-7,
    -4.5928480e-9,
)

_A1_TEMPERATURE_TO_VOLT = (
    7.1564735e-04,
    1.1951905e-02,
    1.6672625e-05,
    -2.8287807e-08,
    2.8397839e-11,
    -1.8505007e-14,
    7.3632123e-18,
    -1.6148878e-21,
    1.4901679e-25,
)

_K_VOLT_TO_TEMPERATURE = (
    -0.12,
    25.64975235588457,
    -0.8055076713568498,
    0.1956119653603405,
    -2.2808773974444e-2,
    1.493718627979179e-3,
    -5.965771945226433e-5,
    1.489119820403751e-6,
    -2.269922703788692e-8,
    1.933261352900763e-10,
    -7.049691433910994e-13,
)

_K_TEMPERATURE_TO_VOLT = (0.0, 0.0395, 2e-05)


def volt_to_temperature_a1(value: float) -> float:
    """Temperature (°C) of a type A-1 thermocouple from its EMF in mV."""
    return _polynomial(value, _A1_VOLT_TO_TEMPERATURE)


def temperature_to_volt_a1(temperature: float) -> float:
    """EMF (mV) of a type A-1 thermocouple at the given temperature (°C)."""
    return _polynomial(temperature, _A1_TEMPERATURE_TO_VOLT)


def volt_to_temperature_k(value: float) -> float:
    """Temperature (°C) of a type K thermocouple from its EMF in mV."""
    return _polynomial(value, _K_VOLT_TO_TEMPERATURE)


def temperature_to_volt_k(temperature: float) -> float:
    """EMF (mV) of a type K thermocouple; valid from 0 °C to 35 °C."""
    return _polynomial(temperature, _K_TEMPERATURE_TO_VOLT)


_CONVERTERS = {
    "A1": (volt_to_temperature_a1, temperature_to_volt_a1),
    "K": (volt_to_temperature_k, temperature_to_volt_k),
}


@dataclass
class AdcParameters:
    """Settings of the thermocouple input channel."""

    room_temperature: float = 17.0
    average_count: int = 10
    filter: bool = False
    thermocouple_type: str = "A1"
    port_name: str = ""


def _push(buffer: Deque[float], value: float, limit: int) -> None:
    buffer.append(value)
    if len(buffer) > limit:
        buffer.popleft()


def _reference_channel(buffer: Deque[float], value: float, limit: int) -> TerconData:
    _push(buffer, (value + OFFSET_ZERO) * SCALE, limit)
    average = moving_average(buffer) if buffer else math.nan
    temperature = volt_to_temperature_a1(
        average + temperature_to_volt_a1(REFERENCE_JUNCTION_TEMPERATURE)
    )
    return TerconData(channel=1, device_number=ADC_DEVICE_NUMBER, value=temperature, unit="T")


class ThermocoupleProcessor:
    """Turns processed module samples into temperatures of the sample and reference channels.

    Sample index 2 feeds channel 0 (the furnace thermocouple, cold junction at room
    temperature); sample index 1 feeds channel 1 (referenced to 25 °C).
    """

    def __init__(self, parameters: AdcParameters | None = None) -> None:
        self.data_send = Signal()
        self._parameters = AdcParameters()
        self._offset_volt = 0.0
        self.parameters = parameters or AdcParameters()
        self._first_value = False
        self._prev_value = 0.0
        self._channel0: Deque[float] = deque()
        self._channel1: Deque[float] = deque()

    @property
    def parameters(self) -> AdcParameters:
        return self._parameters

    @parameters.setter
    def parameters(self, parameters: AdcParameters) -> None:
        self._parameters = parameters
        converters = _CONVERTERS.get(parameters.thermocouple_type)
        if converters is not None:
            self._offset_volt = converters[1](parameters.room_temperature)

    @property
    def offset_volt(self) -> float:
        """Cold-junction compensation EMF for the room temperature."""
        return self._offset_volt

    def reset(self) -> None:
        """Accept the next channel 0 sample unfiltered, as on acquisition start."""
        self._first_value = False

    def process(self, samples: Sequence[float]) -> List[TerconData]:
        """Convert one block of samples, emit each record on ``data_send`` and return them."""
        records: List[TerconData] = []
        for index, value in enumerate(samples):
            if index == 2:
                record = self._sample_channel(value)
            elif index == 1:
                record = _reference_channel(self._channel1, value, self._parameters.average_count)
            else:
                continue
            self.data_send.emit(record)
            records.append(record)
        return records

    def _sample_channel(self, value: float) -> TerconData:
        params = self._parameters
        if not self._first_value:
            self._first_value = True
            accepted = value
        elif params.filter and abs(value - self._prev_value) > MAX_DELTA_CURRENT_PREV_VALUE:
            accepted = self._prev_value
        else:
            accepted = value
        self._prev_value = accepted

        _push(self._channel0, accepted, params.average_count)

        result = accepted
        converters = _CONVERTERS.get(params.thermocouple_type)
        if converters is not None:
            source = moving_average(self._channel0) if params.average_count > 0 else accepted
            result = converters[0](source + self._offset_volt)
        return TerconData(channel=0, device_number=ADC_DEVICE_NUMBER, value=result, unit="T")


class LegacyThermocoupleProcessor:
    """Earlier channel layout: index 0 feeds channel 0, index 1 feeds channel 1.

    Zero samples are skipped, both channels average over 20 samples and
    channel 0 compensates a 17 °C cold junction with the A-1 tables.
    """

    AVERAGE_COUNT = 20
    ROOM_TEMPERATURE = 17.0

    def __init__(self) -> None:
        self.data_send = Signal()
        self.offset_volt = temperature_to_volt_a1(self.ROOM_TEMPERATURE)
        self._channel0: Deque[float] = deque()
        self._channel1: Deque[float] = deque()

    def process(self, samples: Sequence[float]) -> List[TerconData]:
        """Convert one block of samples, emit each record on ``data_send`` and return them."""
        records: List[TerconData] = []
        for index, value in enumerate(samples):
            if value == 0.0:
                continue
            if index == 0:
                _push(self._channel0, (value + OFFSET_ZERO) * SCALE, self.AVERAGE_COUNT)
                temperature = volt_to_temperature_a1(moving_average(self._channel0) + self.offset_volt)
                record = TerconData(
                    channel=0, device_number=ADC_DEVICE_NUMBER, value=temperature, unit="T"
                )
            elif index == 1:
                record = _reference_channel(self._channel1, value, self.AVERAGE_COUNT)
            else:
                continue
            self.data_send.emit(record)
            records.append(record)
        return records