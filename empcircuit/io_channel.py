"""Base class for byte channels, with block and packed-bit encodings."""

from __future__ import annotations

import abc
from collections.abc import Iterable
from typing import BinaryIO, Union

BLOCK_SIZE = 16

BlockLike = Union[bytes, bytearray, memoryview, int]


def _block_bytes(block: BlockLike) -> bytes:
    if isinstance(block, int):
        return block.to_bytes(BLOCK_SIZE, "little")
    raw = bytes(block)
    if len(raw) != BLOCK_SIZE:
        raise ValueError(f"a block is {BLOCK_SIZE} bytes, got {len(raw)}")
    return raw


class IOChannel(abc.ABC):
    """A byte channel that counts what it sends.

    Subclasses supply the raw transport; this class layers 16-byte blocks
    and packed booleans on top of it.
    """

    def __init__(self) -> None:
        self.counter = 0

    def __enter__(self) -> "IOChannel":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abc.abstractmethod
    def _send_data_internal(self, data: bytes) -> None:
        """Write raw bytes to the transport."""

    @abc.abstractmethod
    def _recv_data_internal(self, nbyte: int) -> bytes:
        """Read exactly ``nbyte`` raw bytes from the transport."""

    @staticmethod
    def _read_exact(
        stream: BinaryIO, nbyte: int, error_type: type[Exception], message: str
    ) -> bytes:
        chunks = []
        remaining = nbyte
        while remaining > 0:
            piece = stream.read(remaining)
            if not piece:
                raise error_type(message)
            chunks.append(piece)
            remaining -= len(piece)
        return b"".join(chunks)

    def flush(self) -> None:
        """Push out buffered data; unbuffered channels have nothing to do."""

    def close(self) -> None:
        """Flush the channel and release what it holds."""
        self.flush()

    def send_data(self, data: bytes | bytearray | memoryview) -> None:
        """Send raw bytes and add their length to the counter."""
        raw = bytes(data)
        self.counter += len(raw)
        self._send_data_internal(raw)

    def recv_data(self, nbyte: int) -> bytes:
        """Receive exactly ``nbyte`` bytes."""
        if nbyte < 0:
            raise ValueError("cannot receive a negative number of bytes")
        return self._recv_data_internal(nbyte)

    def send_block(self, blocks: Iterable[BlockLike]) -> None:
        """Send 16-byte blocks; integers are encoded little-endian."""
        self.send_data(b"".join(_block_bytes(block) for block in blocks))

    def recv_block(self, nblock: int) -> list[bytes]:
        """Receive ``nblock`` 16-byte blocks."""
        raw = self.recv_data(nblock * BLOCK_SIZE)
        return [raw[i : i + BLOCK_SIZE] for i in range(0, len(raw), BLOCK_SIZE)]

    def send_bool(self, bits: Iterable[object]) -> None:
        """Send booleans, eight to a byte, with any tail one byte each."""
        flags = [bool(bit) for bit in bits]
        whole = len(flags) - len(flags) % 8
        packed = bytes(
            sum(1 << j for j, flag in enumerate(flags[i : i + 8]) if flag)
            for i in range(0, whole, 8)
        )
        if packed:
            self.send_data(packed)
        if whole != len(flags):
            self.send_data(bytes(flags[whole:]))

    def recv_bool(self, length: int) -> list[bool]:
        """Receive ``length`` booleans sent by :meth:`send_bool`."""
        whole = length - length % 8
        packed = self.recv_data(whole // 8)
        bits = [bool(byte >> j & 1) for byte in packed for j in range(8)]
        if whole != length:
            bits.extend(byte != 0 for byte in self.recv_data(length - whole))
        return bits

    def _counter_message(self) -> str:
        return f"counter{self.counter}"

    def print_counter(self) -> str:
        """Print the number of bytes sent so far and return the printed line."""
        message = self._counter_message()
        print(message)
        return message