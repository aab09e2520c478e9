"""A buffered channel over one TCP connection."""

from __future__ import annotations

import contextlib
import socket
import time

from empcircuit.io_channel import IOChannel

NETWORK_BUFFER_SIZE = 1024 * 1024
_RETRY_DELAY = 0.001


def _check_port(port: int, message: str) -> None:
    if not 0 <= port <= 65535:
        raise ValueError(message)


def _accept_one(port: int) -> socket.socket:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(("", port))
        listener.listen(1)
        connection, _ = listener.accept()
    return connection


def _connect_with_retry(address: str, port: int) -> socket.socket:
    while True:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.connect((address, port))
        except OSError:
            sock.close()
            time.sleep(_RETRY_DELAY)
        else:
            return sock


class NetIO(IOChannel):
    """TCP channel: listens when ``address`` is None, otherwise connects."""

    def __init__(self, address: str | None, port: int, quiet: bool = False) -> None:
        _check_port(port, "Invalid port number!")
        super().__init__()
        self.port = port
        self.is_server = address is None
        self.addr = "" if address is None else address
        if self.is_server:
            self.sock = _accept_one(port)
        else:
            self.sock = _connect_with_retry(self.addr, port)
        self.set_nodelay()
        self.stream = self.sock.makefile("rwb", buffering=NETWORK_BUFFER_SIZE)
        self.has_sent = False
        self._closed = False
        if not quiet:
            print("connected using our code")

    def sync(self) -> None:
        """Exchange one byte with the peer so both sides reach this point."""
        token = b"\x00"
        if self.is_server:
            self._send_data_internal(token)
            self._recv_data_internal(1)
        else:
            self._recv_data_internal(1)
            self._send_data_internal(token)
            self.flush()

    def flush(self) -> None:
        """Send buffered output to the peer."""
        self.stream.flush()

    def set_nodelay(self) -> None:
        """Disable Nagle's algorithm on the connection."""
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

    def set_delay(self) -> None:
        """Re-enable Nagle's algorithm on the connection."""
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 0)

    def _counter_message(self) -> str:
        return f"Transfer cost (bytes): {self.counter}"

    def print_counter(self) -> str:
        """Print the transfer cost so far and return the printed line."""
        message = self._counter_message()
        print(message)
        return message

    def close(self) -> None:
        """Flush pending output and close the connection."""
        if self._closed:
            return
        self._closed = True
        with contextlib.suppress(OSError):
            self.stream.flush()
        with contextlib.suppress(OSError):
            self.stream.close()
        self.sock.close()

    def _send_data_internal(self, data: bytes) -> None:
        self.stream.write(data)
        self.has_sent = True

    def _recv_data_internal(self, nbyte: int) -> bytes:
        if self.has_sent:
            self.stream.flush()
        self.has_sent = False
        return self._read_exact(self.stream, nbyte, ConnectionError, "net_recv_data")