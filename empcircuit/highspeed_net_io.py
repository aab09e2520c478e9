"""A channel over two TCP connections, one per direction, sent in fixed chunks."""

from __future__ import annotations

import contextlib
import enum
import socket
import time
from typing import BinaryIO

from empcircuit.io_channel import IOChannel
from empcircuit.net_io import _accept_one, _check_port, _connect_with_retry

NETWORK_BUFFER_SIZE = 1024 * 1024
CHUNK_SIZE = 32 * 1024
_SERVER_PAUSE = 0.002


class _SubChannel:
    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk size must be positive")
        self.stream = stream
        self.chunk_size = chunk_size
        self.counter = 0
        self.flushes = 0

    def close(self) -> None:
        """Close the underlying stream."""
        with contextlib.suppress(OSError):
            self.stream.close()


class SenderSubChannel(_SubChannel):
    """Sending half: gathers small writes and pads each flush to a whole chunk."""

    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        super().__init__(stream, chunk_size)
        self._pending = bytearray()

    def flush(self) -> None:
        """Send pending data, padded so the total sent is a multiple of the chunk size."""
        self.flushes += 1
        self.send_data_raw(bytes(self._pending))
        remainder = self.counter % self.chunk_size
        if remainder:
            self.send_data_raw(bytes(self.chunk_size - remainder))
        self.stream.flush()
        self._pending.clear()

    def send_data(self, data: bytes | bytearray | memoryview) -> None:
        """Queue data, writing straight through when it does not fit the chunk."""
        raw = bytes(data)
        if len(raw) <= self.chunk_size - len(self._pending):
            self._pending += raw
        else:
            self.send_data_raw(bytes(self._pending))
            self.send_data_raw(raw)
            self._pending.clear()

    def send_data_raw(self, data: bytes | bytearray | memoryview) -> None:
        """Write bytes to the stream without buffering in the channel."""
        raw = bytes(data)
        self.counter += len(raw)
        self.stream.write(raw)


class RecverSubChannel(_SubChannel):
    """Receiving half: reads whole chunks and hands out bytes from them."""

    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        super().__init__(stream, chunk_size)
        self._chunk = b""
        self._pos = 0

    def flush(self) -> None:
        """Discard the rest of the current chunk, matching a sender flush."""
        self.flushes += 1
        self._chunk = b""
        self._pos = 0

    def recv_data(self, length: int) -> bytes:
        """Return the next ``length`` bytes, reading further chunks as needed."""
        available = len(self._chunk) - self._pos
        if length <= available:
            out = self._chunk[self._pos : self._pos + length]
            self._pos += length
            return out
        parts = [self._chunk[self._pos :]]
        remain = length - available
        while True:
            self._chunk = self.recv_data_raw(self.chunk_size)
            if remain <= self.chunk_size:
                parts.append(self._chunk[:remain])
                self._pos = remain
                break
            parts.append(self._chunk)
            remain -= self.chunk_size
        return b"".join(parts)

    def recv_data_raw(self, length: int) -> bytes:
        """Read exactly ``length`` bytes from the stream."""
        self.counter += length
        return IOChannel._read_exact(self.stream, length, ConnectionError, "net_recv_data")


class _Direction(enum.Enum):
    IDLE = 0
    RECEIVING = 1
    SENDING = 2


class HighSpeedNetIO(IOChannel):
    """Two-connection TCP channel: listens when ``address`` is None."""

    def __init__(
        self,
        address: str | None,
        send_port: int,
        recv_port: int,
        quiet: bool = True,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        _check_port(send_port, "Invalid send port number!")
        _check_port(recv_port, "Invalid receive port number!")
        super().__init__()
        self.quiet = quiet
        self.is_server = address is None
        if self.is_server:
            self.recv_sock = _accept_one(send_port)
            time.sleep(_SERVER_PAUSE)
            self.send_sock = _accept_one(recv_port)
        else:
            self.send_sock = _connect_with_retry(address, send_port)
            self.recv_sock = _connect_with_retry(address, recv_port)
        self._direction = _Direction.IDLE
        for sock in (self.send_sock, self.recv_sock):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self.schannel = SenderSubChannel(
            self.send_sock.makefile("wb", buffering=NETWORK_BUFFER_SIZE), chunk_size
        )
        self.rchannel = RecverSubChannel(
            self.recv_sock.makefile("rb", buffering=NETWORK_BUFFER_SIZE), chunk_size
        )
        self._closed = False
        if not quiet:
            print("hs connected using our code")

    def sync(self) -> None:
        """Nothing to synchronise: the two directions are flushed explicitly."""

    def flush(self) -> None:
        """Flush both directions, in the order that keeps the peers aligned."""
        if self.is_server:
            self.schannel.flush()
            self.rchannel.flush()
        else:
            self.rchannel.flush()
            self.schannel.flush()
        self._direction = _Direction.IDLE

    def close(self) -> None:
        """Flush, report traffic unless quiet, and close both connections."""
        if self._closed:
            return
        self._closed = True
        with contextlib.suppress(OSError):
            self.flush()
        if not self.quiet:
            print(f"Data Sent: \t{self.schannel.counter}")
            print(f"Data Received: \t{self.rchannel.counter}")
            print(f"Flushes:\t{self.schannel.flushes}\t{self.rchannel.flushes}")
        self.schannel.close()
        self.rchannel.close()
        self.send_sock.close()
        self.recv_sock.close()

    def _send_data_internal(self, data: bytes) -> None:
        if self._direction is _Direction.RECEIVING:
            self.rchannel.flush()
        self.schannel.send_data(data)
        self._direction = _Direction.SENDING

    def _recv_data_internal(self, nbyte: int) -> bytes:
        if self._direction is _Direction.SENDING:
            self.schannel.flush()
        data = self.rchannel.recv_data(nbyte)
        self._direction = _Direction.RECEIVING
        return data