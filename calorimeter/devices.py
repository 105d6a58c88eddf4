"""Calorimeter covers, safety valve and sample lock driven through a digital I/O module."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .shared import MessageLevel, Signal

Scheduler = Callable[[float, Callable[[], None]], None]

_OUTPUT_PORT = 3
_PIN_BOTTOM_COVER = 0
_PIN_HIGH_VOLTAGE = 1
_PIN_TOP_COVER = 2
_PIN_LOCK = 3

_IN_REMOTE_OPEN_LOCK = 1 << 1
_IN_BOTTOM_COVER = 1 << 2
_IN_VALVE_CLOSED = 1 << 3
_IN_VALVE_OPEN = 1 << 4
_IN_TOP_COVER = 1 << 5


class DigitalIO(Protocol):
    """The part of the digital I/O module the devices need."""

    def write_port(self, port: int, pin: int, value: bool) -> None: ...

    def read_ports(self) -> int: ...


def _call_later(delay: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


@dataclass(frozen=True)
class PortState:
    """Input lines of the I/O module; ``True`` means the line is active (pulled low)."""

    top_cover_open: bool
    bottom_cover_open: bool
    valve_open: bool
    valve_closed: bool
    remote_open_lock: bool


def decode_port(status: int) -> PortState:
    """Decode the input port byte held in bits 16..23 of a port status word."""
    active = ((status >> 16) & 0xFF) ^ 0xFF
    return PortState(
        top_cover_open=bool(active & _IN_TOP_COVER),
        bottom_cover_open=bool(active & _IN_BOTTOM_COVER),
        valve_open=bool(active & _IN_VALVE_OPEN),
        valve_closed=bool(active & _IN_VALVE_CLOSED),
        remote_open_lock=bool(active & _IN_REMOTE_OPEN_LOCK),
    )


class _IODevice:
    def __init__(self, io: Optional[DigitalIO], scheduler: Optional[Scheduler]) -> None:
        self.io = io
        self._schedule: Scheduler = scheduler or _call_later
        self.message = Signal()

    def _write(self, pin: int, value: bool) -> None:
        if self.io is None:
            raise RuntimeError("no digital I/O module attached")
        self.io.write_port(_OUTPUT_PORT, pin, value)

    def _high_voltage(self) -> None:
        self._write(_PIN_HIGH_VOLTAGE, True)

    def _low_voltage(self) -> None:
        self._write(_PIN_HIGH_VOLTAGE, False)

    def _info(self, text: str) -> None:
        self.message.emit(text, MessageLevel.INFORMATION)


class Covers(_IODevice):
    """Top and bottom covers of the calorimeter, confirmed by limit switches or by timers."""

    _TOP_OPENED = "Верхняя крышка открыта."
    _BOTTOM_OPENED = "Нижняя крышка открыта."
    _TOP_CLOSED = "Верхняя крышка закрыта."
    _BOTTOM_CLOSED = "Нижняя крышка закрыта."

    def __init__(self, io: Optional[DigitalIO] = None, scheduler: Optional[Scheduler] = None) -> None:
        super().__init__(io, scheduler)
        self.top_opened_by_timer = Signal()
        self.bottom_opened_by_timer = Signal()
        self.top_closed_by_timer = Signal()
        self.bottom_closed_by_timer = Signal()
        self.top_opened = Signal()
        self.bottom_opened = Signal()
        self.top_closed = Signal()
        self.bottom_closed = Signal()

        self._top_open = False
        self._bottom_open = False
        self._top_timer_stopped = True
        self._bottom_timer_stopped = True

    @property
    def top_cover_is_open(self) -> bool:
        return self._top_open

    @property
    def bottom_cover_is_open(self) -> bool:
        return self._bottom_open

    def open_top_cover(self) -> None:
        self._high_voltage()
        self._write(_PIN_TOP_COVER, True)
        self._schedule(1.0, self._low_voltage)
        self._schedule(2.0, self._open_top_by_timer)
        self._top_timer_stopped = False

    def close_top_cover(self) -> None:
        self._write(_PIN_TOP_COVER, False)
        self._schedule(1.0, self._close_top_by_timer)
        self._top_timer_stopped = False

    def open_bottom_cover(self) -> None:
        self._high_voltage()
        self._write(_PIN_BOTTOM_COVER, True)
        self._schedule(1.0, self._low_voltage)
        self._schedule(2.0, self._open_bottom_by_timer)
        self._bottom_timer_stopped = False

    def close_bottom_cover(self) -> None:
        self._write(_PIN_BOTTOM_COVER, False)
        self._schedule(1.0, self._close_bottom_by_timer)
        self._bottom_timer_stopped = False

    def status_port(self, status: int) -> None:
        state = decode_port(status)
        if self._top_open and not state.top_cover_open:
            self._close_top_by_switch()
        if self._bottom_open and not state.bottom_cover_open:
            self._close_bottom_by_switch()
        if not self._top_open and state.top_cover_open:
            self._open_top_by_switch()
        if not self._bottom_open and state.bottom_cover_open:
            self._open_bottom_by_switch()

    def _open_top_by_timer(self) -> None:
        if not self._top_timer_stopped:
            self.top_opened_by_timer.emit()
            self._info(self._TOP_OPENED)

    def _open_bottom_by_timer(self) -> None:
        if not self._bottom_timer_stopped:
            self.bottom_opened_by_timer.emit()
            self._info(self._BOTTOM_OPENED)

    def _close_top_by_timer(self) -> None:
        if not self._top_timer_stopped:
            self.top_closed_by_timer.emit()
            self._info(self._TOP_CLOSED)

    def _close_bottom_by_timer(self) -> None:
        if not self._bottom_timer_stopped:
            self.bottom_closed_by_timer.emit()
            self._info(self._BOTTOM_CLOSED)

    def _open_top_by_switch(self) -> None:
        self._top_timer_stopped = True
        self._top_open = True
        self._schedule(0.5, self._low_voltage)
        self.top_opened.emit()
        self._info(self._TOP_OPENED)

    def _open_bottom_by_switch(self) -> None:
        self._bottom_timer_stopped = True
        self._bottom_open = True
        self._schedule(0.5, self._low_voltage)
        self.bottom_opened.emit()
        self._info(self._BOTTOM_OPENED)

    def _close_top_by_switch(self) -> None:
        self._top_timer_stopped = True
        self._top_open = False
        self.top_closed.emit()
        self._info(self._TOP_CLOSED)

    def _close_bottom_by_switch(self) -> None:
        self._bottom_timer_stopped = True
        self._bottom_open = False
        self.bottom_closed.emit()
        self._info(self._BOTTOM_CLOSED)


class SafetyValve(_IODevice):
    """Tracks the safety valve position and triggers a remote drop when it opens."""

    def __init__(self, io: Optional[DigitalIO] = None, scheduler: Optional[Scheduler] = None) -> None:
        super().__init__(io, scheduler)
        self.opened = Signal()
        self.closed = Signal()
        self.undefined = Signal()
        self.remote_drop = Signal()
        self.remote_drop_completed = Signal()

        self._is_open = False
        self._is_closed = False
        self._is_undefined = False
        self.remote_drop_enable = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_closed(self) -> bool:
        return self._is_closed

    @property
    def is_undefined(self) -> bool:
        return self._is_undefined

    def set_remote_drop_enable(self, enable: bool) -> None:
        self.remote_drop_enable = enable

    def status_port(self, status: int) -> None:
        state = decode_port(status)
        undefined = not (state.valve_open or state.valve_closed)

        if state.valve_open and not self._is_open:
            self._is_open = True
            self._is_undefined = False
            self.opened.emit()
            self._info("Отсекатель открыт.")
            if self.remote_drop_enable:
                self.remote_drop.emit()

        if state.valve_closed and not self._is_closed:
            self._is_closed = True
            self._is_undefined = False
            self.closed.emit()
            self.remote_drop_completed.emit()
            self._info("Отсекатель закрыт.")

        if undefined and not self._is_undefined:
            self._is_open = False
            self._is_closed = False
            self._is_undefined = True
            self.undefined.emit()


class SampleLock(_IODevice):
    """Lock holding the sample ampoule; releases it once the covers and valve are open."""

    MAX_DROP_RETRIES = 5

    def __init__(self, io: Optional[DigitalIO] = None, scheduler: Optional[Scheduler] = None) -> None:
        super().__init__(io, scheduler)
        self.drop_enable_changed = Signal()
        self.lock_opened = Signal()
        self.lock_closed = Signal()

        self.drop_enable = False
        self._cover_open = False
        self._valve_open = False
        self._lock_open = False
        self._remote_prev = False
        self._drop_attempts = 0

    @property
    def lock_is_open(self) -> bool:
        return self._lock_open

    @property
    def cover_is_open(self) -> bool:
        return self._cover_open

    @property
    def safety_valve_is_open(self) -> bool:
        return self._valve_open

    def set_drop_enable(self, enable: bool) -> None:
        self.drop_enable = enable
        self.drop_enable_changed.emit(enable)

    def drop(self) -> None:
        if not self.drop_enable:
            return
        if self.io is None:
            raise RuntimeError("no digital I/O module attached")
        self.status_port(self.io.read_ports())
        if not self._cover_open and self._drop_attempts < self.MAX_DROP_RETRIES:
            self._drop_attempts += 1
            self._schedule(0.5, self.drop)
            return
        if self._cover_open and self._valve_open:
            self._drop_attempts = 0
            self.lock_open()
            self._schedule(1.0, self.lock_close)

    def lock_open(self) -> None:
        if not self.drop_enable:
            return
        self._high_voltage()
        self._write(_PIN_LOCK, True)
        self._schedule(1.0, self._low_voltage)
        self._lock_open = True
        self.lock_opened.emit()
        self._info("Замок открыт.")

    def lock_close(self) -> None:
        self._write(_PIN_LOCK, False)
        self._lock_open = False
        self._info("Замок закрыт.")
        self.lock_closed.emit()

    def status_port(self, status: int) -> None:
        state = decode_port(status)
        self._valve_open = state.valve_open
        self._cover_open = state.top_cover_open and state.bottom_cover_open

        if state.remote_open_lock != self._remote_prev:
            if self._lock_open:
                self.lock_close()
            else:
                self.lock_open()
            self._remote_prev = state.remote_open_lock