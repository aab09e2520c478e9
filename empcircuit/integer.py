"""Fixed-width two's-complement integers built from secret bits."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from empcircuit.bit import Bit
from empcircuit.comparable import Comparable
from empcircuit.execution import (
    PUBLIC,
    get_circuit_execution,
    get_protocol_execution,
)


def _add(
    op1: list[Bit], op2: list[Bit], carry_in: Bit | None = None, with_carry: bool = False
) -> tuple[list[Bit], Bit | None]:
    size = len(op1)
    if size == 0:
        return [], carry_in if with_carry else None
    carry = carry_in if carry_in is not None else Bit(False)
    steps = size if with_carry else size - 1
    dest = []
    for a, b in zip(op1[:steps], op2[:steps]):
        axc = a ^ carry
        bxc = b ^ carry
        dest.append(a ^ bxc)
        carry = carry ^ (axc & bxc)
    if with_carry:
        return dest, carry
    dest.append(carry ^ op2[steps] ^ op1[steps])
    return dest, None


def _sub(
    op1: list[Bit], op2: list[Bit], borrow_in: Bit | None = None, with_borrow: bool = False
) -> tuple[list[Bit], Bit | None]:
    size = len(op1)
    if size == 0:
        return [], borrow_in if with_borrow else None
    borrow = borrow_in if borrow_in is not None else Bit(False)
    steps = size if with_borrow else size - 1
    dest = []
    for a, b in zip(op1[:steps], op2[:steps]):
        bxa = a ^ b
        bxc = borrow ^ b
        dest.append(bxa ^ borrow)
        borrow = borrow ^ (bxa & bxc)
    if with_borrow:
        return dest, borrow
    dest.append(op1[steps] ^ op2[steps] ^ borrow)
    return dest, None


def _mul(op1: list[Bit], op2: list[Bit]) -> list[Bit]:
    size = len(op1)
    total = [Bit(False) for _ in range(size)]
    for i, multiplier in enumerate(op2[:size]):
        partial = [a & multiplier for a in op1[: size - i]]
        total[i:], _ = _add(total[i:], partial)
    return total


def _if_then_else(tsrc: list[Bit], fsrc: list[Bit], cond: Bit) -> list[Bit]:
    return [(cond & (t ^ f)) ^ f for t, f in zip(tsrc, fsrc)]


def _cond_neg(cond: Bit, src: list[Bit]) -> list[Bit]:
    if not src:
        return []
    carry = cond
    dest = []
    for s in src[:-1]:
        flipped = s ^ cond
        dest.append(flipped ^ carry)
        carry = carry & flipped
    dest.append(cond ^ carry ^ src[-1])
    return dest


def _div(op1: list[Bit], op2: list[Bit]) -> tuple[list[Bit], list[Bit]]:
    size = len(op1)
    if size == 0:
        return [], []
    overflow = [Bit(False)]
    for i in range(1, size):
        overflow.append(overflow[i - 1] | op2[size - i])
    rem = list(op1)
    quot: list[Bit] = [Bit(False)] * size
    for i in range(size - 1, -1, -1):
        diff, borrow = _sub(rem[i:], op2[: size - i], with_borrow=True)
        borrow = borrow | overflow[i]
        rem[i:] = _if_then_else(rem[i:], diff, borrow)
        quot[i] = ~borrow
    return quot, rem


def _ceil_log2(n: int) -> int:
    return (n - 1).bit_length() if n > 0 else 0


class Integer(Comparable):
    """Bits least significant first; arithmetic wraps at the width."""

    def __init__(self, bits: Iterable[Bit] = ()) -> None:
        self.bits: list[Bit] = list(bits)

    @classmethod
    def from_bools(cls, bools: Iterable[object], party: int = PUBLIC) -> "Integer":
        """Build from plain booleans, least significant first."""
        flags = [bool(flag) for flag in bools]
        if party == PUBLIC:
            circuit = get_circuit_execution()
            one = circuit.public_label(True)
            zero = circuit.public_label(False)
            return cls(Bit.from_label(one if flag else zero) for flag in flags)
        labels = get_protocol_execution().feed(party, flags)
        return cls(Bit.from_label(label) for label in labels)

    @classmethod
    def from_int(cls, length: int, value: int, party: int = PUBLIC) -> "Integer":
        """Build the two's-complement encoding of ``value`` in ``length`` bits."""
        if length < 0:
            raise ValueError("length must not be negative")
        return cls.from_bools(((value >> i) & 1 for i in range(length)), party)

    @classmethod
    def from_bytes(
        cls, length: int, data: bytes | bytearray | memoryview, party: int = PUBLIC
    ) -> "Integer":
        """Build from the first ``length`` bits of little-endian ``data``."""
        raw = bytes(data)
        if length < 0:
            raise ValueError("length must not be negative")
        if length > 8 * len(raw):
            raise ValueError(f"{length} bits requested from {len(raw)} bytes")
        return cls.from_bools(((raw[i // 8] >> (i % 8)) & 1 for i in range(length)), party)

    def size(self) -> int:
        """Number of bits."""
        return len(self.bits)

    def __len__(self) -> int:
        return len(self.bits)

    def __iter__(self) -> Iterator[Bit]:
        return iter(self.bits)

    def _clamp(self, index: int) -> int:
        if not self.bits:
            raise IndexError("empty integer has no bits")
        return min(index, len(self.bits) - 1)

    def __getitem__(self, index: int) -> Bit:
        return self.bits[self._clamp(index)]

    def __setitem__(self, index: int, bit: Bit) -> None:
        self.bits[self._clamp(index)] = bit

    def __repr__(self) -> str:
        return f"Integer(size={len(self.bits)})"

    def _check_same_size(self, rhs: "Integer") -> None:
        if len(self.bits) != len(rhs.bits):
            raise ValueError(f"size mismatch: {len(self.bits)} and {len(rhs.bits)}")

    def reveal_bools(self, party: int = PUBLIC) -> list[bool]:
        """Open every bit to ``party``, least significant first."""
        labels = [bit.label for bit in self.bits]
        return [bool(v) for v in get_protocol_execution().reveal(party, labels)]

    def reveal(self, party: int = PUBLIC) -> int:
        """Open the value as an unsigned integer."""
        return sum(1 << i for i, flag in enumerate(self.reveal_bools(party)) if flag)

    def reveal_signed(self, party: int = PUBLIC) -> int:
        """Open the value as a two's-complement integer."""
        flags = self.reveal_bools(party)
        value = sum(1 << i for i, flag in enumerate(flags) if flag)
        if flags and flags[-1]:
            value -= 1 << len(flags)
        return value

    def reveal_string(self, party: int = PUBLIC) -> str:
        """Open the bits as ``'0'``/``'1'`` characters, least significant first."""
        return "".join("1" if flag else "0" for flag in self.reveal_bools(party))

    def geq(self, rhs: "Integer") -> Bit:
        """Signed ``self >= rhs``."""
        self._check_same_size(rhs)
        width = len(self.bits) + 1
        lhs_ext = Integer(self.bits).resize(width, True)
        rhs_ext = Integer(rhs.bits).resize(width, True)
        diff = lhs_ext - rhs_ext
        return ~diff[diff.size() - 1]

    def equal(self, rhs: "Integer") -> Bit:
        """Bitwise equality of two integers of the same width."""
        self._check_same_size(rhs)
        result = Bit(True)
        for a, b in zip(self.bits, rhs.bits):
            result = result & (a == b)
        return result

    def select(self, sel: Bit, rhs: "Integer") -> "Integer":
        """Return ``rhs`` where ``sel`` is set, otherwise this integer."""
        self._check_same_size(rhs)
        return Integer(a.select(sel, b) for a, b in zip(self.bits, rhs.bits))

    def abs(self) -> "Integer":
        """Absolute value; the most negative value maps to itself."""
        if not self.bits:
            return Integer()
        sign = Integer([self.bits[-1]] * len(self.bits))
        return (self + sign) ^ sign

    def resize(self, length: int, signed_extend: bool = True) -> "Integer":
        """Truncate or extend in place, by sign or by zero; returns ``self``."""
        if length < 0:
            raise ValueError("length must not be negative")
        if signed_extend:
            if not self.bits:
                raise ValueError("cannot sign-extend an empty integer")
            fill = self.bits[-1]
        else:
            fill = Bit(False)
        del self.bits[length:]
        self.bits.extend([fill] * (length - len(self.bits)))
        return self

    def mod_exp(self, p: "Integer", q: "Integer") -> "Integer":
        """``self ** p % q``; ``q`` should be below half the largest value."""
        base = Integer(self.bits)
        result = Integer.from_int(len(self.bits), 1)
        for exponent_bit in p:
            tmp = (result * base) % q
            result = result.select(exponent_bit, tmp)
            base = (base * base) % q
        return result

    def leading_zeros(self) -> "Integer":
        """Count of zero bits above the highest set bit."""
        res = Integer(self.bits)
        for i in range(len(res.bits) - 2, -1, -1):
            res[i] = res[i + 1] | res[i]
        return Integer(~bit for bit in res).hamming_weight()

    def hamming_weight(self) -> "Integer":
        """Number of set bits, as a tree of additions."""
        if not self.bits:
            raise ValueError("hamming weight of an empty integer")
        counts = []
        for bit in self.bits:
            single = Integer.from_int(2, 0)
            single[0] = bit
            counts.append(single)
        while len(counts) > 1:
            merged = [counts[i] + counts[i + 1] for i in range(0, len(counts) - 1, 2)]
            if len(counts) % 2 == 1:
                merged.append(counts[-1])
            for item in merged:
                item.resize(item.size() + 1, False)
            counts = merged
        return counts[0]

    def _shift_left(self, shamt: int) -> "Integer":
        if shamt < 0:
            raise ValueError("negative shift count")
        size = len(self.bits)
        if shamt >= size:
            return Integer(Bit(False) for _ in range(size))
        return Integer([Bit(False) for _ in range(shamt)] + self.bits[: size - shamt])

    def _shift_right(self, shamt: int) -> "Integer":
        if shamt < 0:
            raise ValueError("negative shift count")
        size = len(self.bits)
        if shamt >= size:
            return Integer(Bit(False) for _ in range(size))
        return Integer(self.bits[shamt:] + [Bit(False) for _ in range(shamt)])

    def _barrel(self, shamt: "Integer", left: bool) -> "Integer":
        if not shamt.bits:
            raise ValueError("shift amount has no bits")
        rounds = min(_ceil_log2(len(self.bits)), shamt.size() - 1)
        result = Integer(self.bits)
        for i in range(rounds):
            moved = result._shift_left(1 << i) if left else result._shift_right(1 << i)
            result = result.select(shamt[i], moved)
        return result

    def __lshift__(self, shamt: "int | Integer") -> "Integer":
        if isinstance(shamt, Integer):
            return self._barrel(shamt, left=True)
        if isinstance(shamt, int):
            return self._shift_left(shamt)
        return NotImplemented

    def __rshift__(self, shamt: "int | Integer") -> "Integer":
        if isinstance(shamt, Integer):
            return self._barrel(shamt, left=False)
        if isinstance(shamt, int):
            return self._shift_right(shamt)
        return NotImplemented

    def __xor__(self, rhs: object) -> "Integer":
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        return Integer(a ^ b for a, b in zip(self.bits, rhs.bits))

    def __and__(self, rhs: object) -> "Integer":
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        return Integer(a & b for a, b in zip(self.bits, rhs.bits))

    def __or__(self, rhs: object) -> "Integer":
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        return Integer(a | b for a, b in zip(self.bits, rhs.bits))

    def __add__(self, rhs: object) -> "Integer":
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        return Integer(_add(self.bits, rhs.bits)[0])

    def __sub__(self, rhs: object) -> "Integer":
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        return Integer(_sub(self.bits, rhs.bits)[0])

    def __mul__(self, rhs: object) -> "Integer":
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        return Integer(_mul(self.bits, rhs.bits))

    def __floordiv__(self, rhs: object) -> "Integer":
        """Signed division rounding toward zero."""
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        sign = self.bits[-1] ^ rhs[rhs.size() - 1]
        quot, _ = _div(self.abs().bits, rhs.abs().bits)
        return Integer(_cond_neg(sign, quot))

    def __mod__(self, rhs: object) -> "Integer":
        """Remainder taking the sign of the dividend."""
        if not isinstance(rhs, Integer):
            return NotImplemented
        self._check_same_size(rhs)
        sign = self.bits[-1]
        _, rem = _div(self.abs().bits, rhs.abs().bits)
        return Integer(_cond_neg(sign, rem))

    def __neg__(self) -> "Integer":
        return Integer.from_int(len(self.bits), 0) - self