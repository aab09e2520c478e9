"""A channel that writes to and reads from a file."""

from __future__ import annotations

import os

from empcircuit.io_channel import IOChannel

FILE_BUFFER_SIZE = 16 * 1024


class FileIO(IOChannel):
    """Channel backed by a file opened for reading or for (over)writing."""

    def __init__(self, path: str | os.PathLike[str], read: bool) -> None:
        super().__init__()
        self.bytes_sent = 0
        mode = "rb+" if read else "wb+"
        self.stream = open(path, mode, buffering=FILE_BUFFER_SIZE)

    def flush(self) -> None:
        """Write buffered data to the file."""
        self.stream.flush()

    def reset(self) -> None:
        """Rewind to the start of the file."""
        self.stream.seek(0)

    def close(self) -> None:
        """Flush and close the file."""
        if not self.stream.closed:
            self.stream.flush()
            self.stream.close()

    def _send_data_internal(self, data: bytes) -> None:
        self.bytes_sent += len(data)
        self.stream.write(data)

    def _recv_data_internal(self, nbyte: int) -> bytes:
        return self._read_exact(self.stream, nbyte, EOFError, "file_recv_data")