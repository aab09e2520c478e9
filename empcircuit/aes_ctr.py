"""AES-128 in counter mode, on plain bytes and inside a circuit."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from empcircuit.bit import Bit
from empcircuit.circuit_file import BristolFashion
from empcircuit.execution import PUBLIC, get_circuit_execution
from empcircuit.integer import Integer
from empcircuit.io_channel import BlockLike, _block_bytes

_BLOCK_BITS = 128
_COUNT_MASK = (1 << 64) - 1


def _reverse_bytes(i: int) -> int:
    return 8 * (15 - i // 8) + i % 8


_REVERSED = [_reverse_bytes(i) for i in range(_BLOCK_BITS)]


def _with_count(iv: bytes, count: int) -> bytes:
    return iv[:8] + (count & _COUNT_MASK).to_bytes(8, "big")


def aes_128_ctr(
    key: BlockLike,
    iv: BlockLike,
    data: bytes | bytearray | memoryview | None = None,
    length: int | None = None,
    start_chunk: int = 0,
) -> bytes:
    """Encrypt ``data``, or return ``length`` bytes of key stream when it is None.

    ``start_chunk`` is added to the big-endian low 64 bits of the counter.
    """
    if start_chunk < 0:
        raise ValueError("start_chunk must not be negative")
    key_bytes = _block_bytes(key)
    iv_bytes = _block_bytes(iv)
    if data is None:
        if length is None:
            raise ValueError("either data or a length is needed")
        if length < 0:
            raise ValueError("length must not be negative")
        plain = bytes(length)
    else:
        plain = bytes(data)
        if length is not None:
            if not 0 <= length <= len(plain):
                raise ValueError("length does not fit the data")
            plain = plain[:length]
    counter = _with_count(iv_bytes, int.from_bytes(iv_bytes[8:], "big") + start_chunk)
    encryptor = Cipher(algorithms.AES(key_bytes), modes.CTR(counter)).encryptor()
    return encryptor.update(plain) + encryptor.finalize()


def _label(value: Any) -> Any:
    return value.label if isinstance(value, Bit) else value


def _block_labels(values: Iterable[Any], what: str) -> list[Any]:
    labels = [_label(v) for v in values]
    if len(labels) != _BLOCK_BITS:
        raise ValueError(f"{what} must be {_BLOCK_BITS} labels, got {len(labels)}")
    return labels


def _resolve(data: Iterable[Any] | None, length: int | None) -> tuple[list[Any] | None, int]:
    if data is None:
        size = _BLOCK_BITS if length is None else length
        if size < 0:
            raise ValueError("length must not be negative")
        return None, size
    labels = [_label(v) for v in data]
    size = len(labels) if length is None else length
    if not 0 <= size <= len(labels):
        raise ValueError("length does not fit the data")
    return labels, size


def _chunks(size: int) -> list[tuple[int, int]]:
    return [(offset, min(_BLOCK_BITS, size - offset)) for offset in range(0, size, _BLOCK_BITS)]


class AES128CTRCalculator:
    """AES-128-CTR over wire labels, one bit per label.

    Keeps the loaded key between calls, so one object must not be shared
    by concurrent callers.
    """

    def __init__(self, circuit: BristolFashion | None = None) -> None:
        if circuit is not None and (
            circuit.num_input != 2 * _BLOCK_BITS or circuit.num_output != _BLOCK_BITS
        ):
            raise ValueError("an AES-128 circuit takes 256 inputs and gives 128 outputs")
        self.circuit = circuit
        self._keyiv: list[Any] = [None] * (2 * _BLOCK_BITS)
        self._has_key = False

    @staticmethod
    def reverse_bytes(i: int) -> int:
        """Map a bit index to the same bit of the byte-reversed block."""
        return _reverse_bytes(i)

    def _require_circuit(self) -> BristolFashion:
        if self.circuit is None:
            raise RuntimeError("no AES circuit is loaded")
        return self.circuit

    def _load_key(self, key: Iterable[Any] | None) -> None:
        if key is None:
            if not self._has_key:
                raise ValueError("no key has been loaded")
            return
        labels = _block_labels(key, "key")
        self._keyiv[:_BLOCK_BITS] = [labels[r] for r in _REVERSED]
        self._has_key = True

    def _encrypt_chunk(
        self,
        iv_labels: list[Any],
        piece: list[Any] | None,
        size: int,
        party: int,
        start_chunk: int,
    ) -> list[Any]:
        circuit = self._require_circuit()
        if start_chunk == 0:
            self._keyiv[_BLOCK_BITS:] = [iv_labels[r] for r in _REVERSED]
        else:
            counter = Integer(Bit.from_label(iv_labels[r]) for r in _REVERSED)
            counter = counter + Integer.from_int(_BLOCK_BITS, start_chunk, party)
            self._keyiv[_BLOCK_BITS:] = [bit.label for bit in counter]
        blind = circuit.compute(self._keyiv)
        if piece is None:
            return [blind[_REVERSED[i]] for i in range(size)]
        gates = get_circuit_execution()
        return [gates.xor_gate(x, blind[_REVERSED[i]]) for i, x in enumerate(piece)]

    def encrypt_labels(
        self,
        key: Iterable[Any] | None,
        iv: Iterable[Any],
        data: Iterable[Any] | None = None,
        length: int | None = None,
        party: int = PUBLIC,
        start_chunk: int = 0,
    ) -> list[Any]:
        """Encrypt labels with a secret key and IV; ``key=None`` reuses the last key.

        Without ``data`` the key stream itself is returned.
        """
        self._require_circuit()
        if start_chunk < 0:
            raise ValueError("start_chunk must not be negative")
        self._load_key(key)
        iv_labels = _block_labels(iv, "iv")
        labels, size = _resolve(data, length)
        out: list[Any] = []
        for index, (offset, count) in enumerate(_chunks(size)):
            piece = None if labels is None else labels[offset : offset + count]
            out.extend(self._encrypt_chunk(iv_labels, piece, count, party, start_chunk + index))
        return out

    def encrypt_public_iv(
        self,
        key: Iterable[Any] | None,
        iv: BlockLike,
        data: Iterable[Any] | None = None,
        length: int | None = None,
        party: int = PUBLIC,
        start_chunk: int = 0,
    ) -> list[Any]:
        """Encrypt labels with a secret key and a public 16-byte IV."""
        self._require_circuit()
        if start_chunk < 0:
            raise ValueError("start_chunk must not be negative")
        self._load_key(key)
        iv_bytes = _block_bytes(iv)
        labels, size = _resolve(data, length)
        count = int.from_bytes(iv_bytes[8:], "big") + start_chunk
        out: list[Any] = []
        for index, (offset, chunk_size) in enumerate(_chunks(size)):
            counter = _with_count(iv_bytes, count + index)
            counter_labels = [bit.label for bit in Integer.from_bytes(_BLOCK_BITS, counter, party)]
            piece = None if labels is None else labels[offset : offset + chunk_size]
            out.extend(self._encrypt_chunk(counter_labels, piece, chunk_size, party, 0))
        return out

    def encrypt_public(
        self,
        key: BlockLike,
        iv: BlockLike,
        data: Iterable[Any] | None = None,
        length: int | None = None,
        party: int = PUBLIC,
        start_chunk: int = 0,
    ) -> list[Any]:
        """Encrypt labels with a public key and IV, feeding the key stream as ``party``."""
        labels, size = _resolve(data, length)
        stream = aes_128_ctr(key, iv, None, (size + 7) // 8, start_chunk)
        blind = Integer.from_bytes(size, stream, party)
        if labels is None:
            return [bit.label for bit in blind]
        gates = get_circuit_execution()
        return [gates.xor_gate(x, bit.label) for x, bit in zip(labels, blind)]