"""Diagnostics of the furnace thermocouple and cooling-water pressure."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Callable

from .shared import MessageLevel, Signal


class ThermocoupleStatus(Enum):
    NORMAL = 0
    BREAKAGE = 1


class Pressure(Enum):
    NORMAL = 0
    UPPER = 1
    LOWER = 2
    UNDEFINED = 3


class _RestartableTimer:
    """One-shot timer that can be restarted and stopped."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._interval, self._callback)
            self._timer.daemon = True
            self._timer.start()

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def active(self) -> bool:
        with self._lock:
            return self._timer is not None


class Diagnostic:
    """Watches sensor readings and raises alarms while signalling is enabled."""

    def __init__(self, off_regulator_delay: float = 60.0) -> None:
        self.message = Signal()
        self.control_thermocouple = Signal()
        self.alarm_upper_pressure = Signal()
        self.alarm_normal_pressure = Signal()
        self.alarm_lower_pressure = Signal()
        self.smooth_off_regulator = Signal()

        self._first_value = True
        self._enable_signals = False
        self._old_value = 0.0
        self._thermocouple_status = ThermocoupleStatus.NORMAL
        self._pressure = Pressure.UNDEFINED
        self._off_timer = _RestartableTimer(off_regulator_delay, self.off_regulator_timeout)

    @property
    def thermocouple_status(self) -> ThermocoupleStatus:
        return self._thermocouple_status

    @property
    def pressure(self) -> Pressure:
        return self._pressure

    @property
    def signals_enabled(self) -> bool:
        return self._enable_signals

    @property
    def off_timer_active(self) -> bool:
        return self._off_timer.active

    def diagnostic_thermocouple(self, value: float) -> None:
        if self._first_value:
            self._old_value = value
            self._first_value = False
            if self._enable_signals:
                self.control_thermocouple.emit(False)
            return

        old = self._old_value
        relative_change = abs(value - old) / old if old != 0 else float("inf")
        if relative_change < 0.5:
            self._old_value = value
            if self._thermocouple_status is not ThermocoupleStatus.NORMAL and self._enable_signals:
                self.control_thermocouple.emit(False)
                self.message.emit("Диагностика: Термопара в норме.", MessageLevel.INFORMATION)
            self._thermocouple_status = ThermocoupleStatus.NORMAL
        else:
            self._thermocouple_status = ThermocoupleStatus.BREAKAGE

    def upper_pressure(self) -> None:
        if self._enable_signals and self._pressure is not Pressure.UPPER:
            self.alarm_upper_pressure.emit()
            self.message.emit(
                "Диагностика: Превышенное давление в системе охлаждения печи калориметра!",
                MessageLevel.CRITICAL,
            )
            self._off_timer.start()
            self._pressure = Pressure.UPPER

    def normal_pressure(self) -> None:
        if self._enable_signals and self._pressure is not Pressure.NORMAL:
            self.alarm_normal_pressure.emit()
            self.message.emit(
                "Диагностика: Давление в системе охлаждения печи калориметра в пределах нормы.",
                MessageLevel.INFORMATION,
            )
            self._off_timer.stop()
            self._pressure = Pressure.NORMAL

    def lower_pressure(self) -> None:
        if self._enable_signals and self._pressure is not Pressure.LOWER:
            self.alarm_lower_pressure.emit()
            self.message.emit(
                "Диагностика: Пониженное давление в системе охлаждения печи калориметра!",
                MessageLevel.CRITICAL,
            )
            self._off_timer.start()
            self._pressure = Pressure.LOWER

    def start_emit_alarm_signals(self) -> None:
        self._enable_signals = True
        self._first_value = True
        self._pressure = Pressure.UNDEFINED

    def stop_emit_alarm_signals(self) -> None:
        self._enable_signals = False

    def enable_emit_alarm_signals(self, enable: bool) -> None:
        self._enable_signals = enable

    def off_regulator_timeout(self) -> None:
        """Ask the regulators to switch off smoothly after a lasting pressure alarm."""
        self.smooth_off_regulator.emit()
        self._off_timer.stop()