"""Message log that timestamps messages and forwards them for the log file."""

from __future__ import annotations

import datetime as _dt
from typing import Callable, NamedTuple

from .shared import MessageLevel, Signal

_LEVELS = {
    MessageLevel.INFORMATION: ("black", "Information:> "),
    MessageLevel.WARNING: ("blue", "Warning:> "),
    MessageLevel.CRITICAL: ("red", "Critical:> "),
}


class LogEntry(NamedTuple):
    text: str
    color: str


def _format_time(moment: _dt.time) -> str:
    return f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"


class MessageLog:
    """Keeps displayed log lines and emits file lines on ``send_message_to_file``."""

    def __init__(
        self,
        elapsed_ms: Callable[[], float | None] | None = None,
        clock: Callable[[], _dt.time] | None = None,
    ) -> None:
        self.send_message_to_file = Signal()
        self.entries: list[LogEntry] = []
        self.elapsed_ms = elapsed_ms
        self._clock = clock or (lambda: _dt.datetime.now().time())
        self._color = "black"

    def append_message(self, msg: str, level: MessageLevel) -> None:
        elapsed = self.elapsed_ms() if self.elapsed_ms is not None else None
        elapsed_text = f"({elapsed / 1000.0:g})" if elapsed is not None else ""
        stamp = _format_time(self._clock()) + elapsed_text + "\t"

        if level in _LEVELS:
            self._color, prefix = _LEVELS[level]
            self.send_message_to_file.emit(stamp + prefix + msg + "\r\n")

        text = stamp + msg if level is not MessageLevel.EMPTY else ""
        self.entries.append(LogEntry(text, self._color))