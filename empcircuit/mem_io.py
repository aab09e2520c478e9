"""A channel held entirely in memory."""

from __future__ import annotations

from empcircuit.io_channel import IOChannel


class MemIO(IOChannel):
    """Channel that appends sent data to a buffer and reads it back in order."""

    def __init__(self) -> None:
        super().__init__()
        self.buffer = bytearray()
        self.read_pos = 0

    @property
    def size(self) -> int:
        """Number of bytes currently held."""
        return len(self.buffer)

    def load_from_file(self, fio: IOChannel, size: int) -> None:
        """Replace the contents with ``size`` bytes read from another channel."""
        self.buffer = bytearray(fio.recv_data(size))
        self.read_pos = 0

    def clear(self) -> None:
        """Drop the stored data; the read position is kept."""
        self.buffer.clear()

    def _send_data_internal(self, data: bytes) -> None:
        self.buffer += data

    def _recv_data_internal(self, nbyte: int) -> bytes:
        end = self.read_pos + nbyte
        if end > len(self.buffer):
            raise EOFError("mem_recv_data")
        out = bytes(self.buffer[self.read_pos : end])
        self.read_pos = end
        return out