"""Serial-connected ampoule drop detector with an indicator LED."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

import serial

from .shared import MessageLevel, Signal

_log = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], None]
SerialFactory = Callable[[str, int], Any]

BAUD_RATE = 115200


def _call_later(delay: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


def _open_serial(port_name: str, baudrate: int) -> serial.Serial:
    return serial.Serial(port_name, baudrate=baudrate, timeout=0)


class Arduino:
    """Talks to the drop detector: arms it, toggles its LED and reports drops."""

    def __init__(
        self,
        port_name: str = "COM3",
        serial_factory: Optional[SerialFactory] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.port_name = port_name
        self.message = Signal()
        self.dropped = Signal()
        self.wait_drop_enable = False
        self._factory: SerialFactory = serial_factory or _open_serial
        self._schedule: Scheduler = scheduler or _call_later
        self._port: Any = None

    @property
    def is_open(self) -> bool:
        return self._port is not None and bool(self._port.is_open)

    def start(self) -> bool:
        try:
            self._port = self._factory(self.port_name, BAUD_RATE)
        except (serial.SerialException, OSError) as exc:
            _log.warning("open fail: %s", exc)
            self._port = None
        return True

    def stop(self) -> bool:
        if self.is_open:
            self.enable_led(False)
            self._port.close()
        return True

    def poll(self) -> None:
        """Read whatever the device has sent and handle it."""
        if not self.is_open:
            return
        waiting = self._port.in_waiting
        if waiting:
            self.read_data(self._port.read(waiting).decode("ascii", errors="replace"))

    def read_data(self, text: str) -> None:
        _log.debug("received %r", text)
        if text.startswith("drop"):
            self._schedule(0.5, self._delay_drop)
        elif text.startswith("fail: drop timeout"):
            self.message.emit("Пролет ампулы не зафиксирован.", MessageLevel.WARNING)
            self._schedule(0.5, self._delay_drop)

    def enable_led(self, enable: bool) -> None:
        if enable:
            self.message.emit(
                "Светодиод системы детектирования пролета ампулы включен.",
                MessageLevel.INFORMATION,
            )
            self._write(b"2\r\n")
        else:
            self.message.emit(
                "Светодиод системы детектирования пролета ампулы выключен.",
                MessageLevel.INFORMATION,
            )
            self._write(b"3\r\n")

    def wait_drop(self) -> None:
        if self.wait_drop_enable:
            self._write(b"1\r\n")
            self.wait_drop_enable = False

    def set_wait_drop_enable(self) -> None:
        self.wait_drop_enable = True

    def _write(self, payload: bytes) -> None:
        if self.is_open:
            self._port.write(payload)

    def _delay_drop(self) -> None:
        self.message.emit("Ампула сброшена.", MessageLevel.INFORMATION)
        self.dropped.emit()

    def __enter__(self) -> "Arduino":
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()