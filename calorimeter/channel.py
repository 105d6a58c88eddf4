"""TCP channel to the acquisition crate server with per-call timeouts."""

from __future__ import annotations

import errno
import ipaddress
import socket
import time
from typing import Optional, Union

Address = Union[int, str]

_RETRY_DELAY = 0.05
_NON_FATAL_CONNECT_ERRORS = frozenset(
    code
    for code in (
        getattr(errno, "ECONNREFUSED", None),
        getattr(errno, "ENETUNREACH", None),
        getattr(errno, "EHOSTUNREACH", None),
        getattr(errno, "ETIMEDOUT", None),
        getattr(errno, "WSAECONNREFUSED", None),
        getattr(errno, "WSAENETUNREACH", None),
        getattr(errno, "WSAEHOSTUNREACH", None),
        getattr(errno, "WSAETIMEDOUT", None),
    )
    if code is not None
)


class ChannelError(OSError):
    """Raised when the channel cannot connect, send or receive."""


class ChannelClosedError(ChannelError):
    """Raised when data is sent or received on a channel that is not open."""


def _host(addr: Address) -> str:
    if isinstance(addr, int):
        return str(ipaddress.IPv4Address(addr))
    return addr


class _Deadline:
    def __init__(self, timeout_ms: Optional[float]) -> None:
        self._end = None if timeout_ms is None else time.monotonic() + timeout_ms / 1000.0

    def remaining(self) -> Optional[float]:
        if self._end is None:
            return None
        return max(0.0, self._end - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0


class Channel:
    """A stream socket whose receive and send calls give up after a timeout.

    A timeout of ``None`` means wait without limit; calls that pass no timeout
    use the default set with :meth:`set_default_timeout`.
    """

    def __init__(self, default_timeout_ms: Optional[float] = None) -> None:
        self._socket: Optional[socket.socket] = None
        self.default_timeout_ms = default_timeout_ms

    def set_default_timeout(self, timeout_ms: Optional[float]) -> None:
        self.default_timeout_ms = timeout_ms

    def is_open(self) -> bool:
        return self._socket is not None

    def open(self, addr: Address, port: int, timeout_ms: Optional[float]) -> None:
        """Connect, retrying on non-fatal errors until ``timeout_ms`` has passed."""
        self.close()
        host = _host(addr)
        deadline = _Deadline(timeout_ms)
        while True:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
            try:
                sock.settimeout(deadline.remaining() or None)
                sock.connect((host, port))
            except OSError as exc:
                sock.close()
                code = errno.ETIMEDOUT if isinstance(exc, socket.timeout) else exc.errno
                if code not in _NON_FATAL_CONNECT_ERRORS or deadline.expired():
                    raise ChannelError(f"cannot connect to {host}:{port}: {exc}") from exc
                time.sleep(_RETRY_DELAY)
                if deadline.expired():
                    raise ChannelError(f"cannot connect to {host}:{port}: {exc}") from exc
                continue
            self._socket = sock
            return

    def close(self) -> None:
        if self._socket is None:
            return
        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._socket.close()
        self._socket = None

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            time.sleep(0.001)
            raise ChannelClosedError("channel is closed")
        return self._socket

    def _timeout(self, timeout_ms: Optional[float]) -> Optional[float]:
        return self.default_timeout_ms if timeout_ms is None else timeout_ms

    def recv(self, size: int, timeout_ms: Optional[float] = None) -> bytes:
        """Receive up to ``size`` bytes; stops early on timeout or when the peer closes."""
        if size < 0:
            raise ValueError("size must not be negative")
        sock = self._require_socket()
        deadline = _Deadline(self._timeout(timeout_ms))
        received = bytearray()
        while len(received) < size:
            remaining = deadline.remaining()
            if remaining is not None and remaining <= 0.0:
                break
            sock.settimeout(remaining)
            try:
                chunk = sock.recv(size - len(received))
            except socket.timeout:
                break
            except OSError as exc:
                raise ChannelError(f"receive failed: {exc}") from exc
            if not chunk:
                break
            received += chunk
        return bytes(received)

    def send(self, data: bytes, timeout_ms: Optional[float] = None) -> int:
        """Send ``data`` once and return the number of bytes written (0 on timeout)."""
        sock = self._require_socket()
        if not data:
            return 0
        sock.settimeout(_Deadline(self._timeout(timeout_ms)).remaining())
        try:
            return sock.send(data)
        except socket.timeout:
            return 0
        except OSError as exc:
            raise ChannelError(f"send failed: {exc}") from exc

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()