"""Boolean circuits in the Bristol and Bristol Fashion text formats."""

from __future__ import annotations

import enum
import os
from collections.abc import Iterable, MutableSequence, Sequence
from dataclasses import dataclass, field
from typing import Any

from empcircuit.bit import Bit
from empcircuit.execution import get_circuit_execution

GateTuple = tuple[int, int, int, int]


class GateType(enum.IntEnum):
    """Kind of a gate; any value outside the first three evaluates as OR."""

    AND = 0
    XOR = 1
    NOT = 2
    OR = 3


def execute_circuit(
    wires: MutableSequence[Any], gates: Iterable[Sequence[int]]
) -> MutableSequence[Any]:
    """Evaluate ``(in0, in1, out, kind)`` gates over ``wires`` in place."""
    circuit = get_circuit_execution()
    for in0, in1, out, kind in gates:
        if kind == GateType.AND:
            wires[out] = circuit.and_gate(wires[in0], wires[in1])
        elif kind == GateType.XOR:
            wires[out] = circuit.xor_gate(wires[in0], wires[in1])
        elif kind == GateType.NOT:
            wires[out] = circuit.not_gate(wires[in0])
        else:
            a, b = wires[in0], wires[in1]
            wires[out] = circuit.xor_gate(circuit.xor_gate(a, b), circuit.and_gate(a, b))
    return wires


class _Tokens:
    def __init__(self, text: str) -> None:
        self._words = iter(text.split())

    def word(self) -> str:
        try:
            return next(self._words)
        except StopIteration:
            raise ValueError("unexpected end of circuit description") from None

    def number(self) -> int:
        word = self.word()
        try:
            return int(word)
        except ValueError:
            raise ValueError(f"expected an integer, got {word!r}") from None


def _kind(value: int) -> int:
    try:
        return GateType(value)
    except ValueError:
        return int(value)


def _gate_tuple(gate: Sequence[int]) -> GateTuple:
    in0, in1, out, kind = gate
    return (int(in0), int(in1), int(out), _kind(int(kind)))


def _read_gates(tokens: _Tokens, num_gate: int) -> list[GateTuple]:
    if num_gate < 0:
        raise ValueError("negative gate count")
    gates: list[GateTuple] = []
    for _ in range(num_gate):
        n_in = tokens.number()
        n_out = tokens.number()
        if n_out != 1:
            raise ValueError(f"gates must have one output, got {n_out}")
        if n_in == 2:
            a, b, out = tokens.number(), tokens.number(), tokens.number()
            name = tokens.word()
            if name.startswith("A"):
                kind = GateType.AND
            elif name.startswith("X"):
                kind = GateType.XOR
            else:
                raise ValueError(f"unknown two-input gate {name!r}")
            gates.append((a, b, out, kind))
        elif n_in == 1:
            a, out = tokens.number(), tokens.number()
            tokens.word()
            gates.append((a, 0, out, GateType.NOT))
        else:
            raise ValueError(f"gates must have one or two inputs, got {n_in}")
    return gates


def _unwrap(values: Iterable[Any]) -> tuple[list[Any], bool]:
    items = list(values)
    wrapped = any(isinstance(item, Bit) for item in items)
    return [item.label if isinstance(item, Bit) else item for item in items], wrapped


def _check_non_negative(**counts: int) -> None:
    for name, value in counts.items():
        if value < 0:
            raise ValueError(f"{name} must not be negative")


@dataclass
class BristolFormat:
    """Circuit with two input groups and one output group."""

    num_wire: int
    n1: int
    n2: int
    n3: int
    gates: list[GateTuple] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_non_negative(num_wire=self.num_wire, n1=self.n1, n2=self.n2, n3=self.n3)
        if self.n1 + self.n2 > self.num_wire or self.n3 > self.num_wire:
            raise ValueError("more inputs or outputs than wires")
        self.gates = [_gate_tuple(gate) for gate in self.gates]

    @property
    def num_gate(self) -> int:
        """Number of gates."""
        return len(self.gates)

    @classmethod
    def from_text(cls, text: str) -> "BristolFormat":
        """Parse a circuit description."""
        tokens = _Tokens(text)
        num_gate, num_wire = tokens.number(), tokens.number()
        n1, n2, n3 = tokens.number(), tokens.number(), tokens.number()
        gates = _read_gates(tokens, num_gate)
        return cls(num_wire, n1, n2, n3, gates)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "BristolFormat":
        """Parse a circuit description stored in a file."""
        with open(path, encoding="ascii") as handle:
            return cls.from_text(handle.read())

    def to_file(self, filename: str | os.PathLike[str], prefix: str) -> None:
        """Write the circuit as array declarations named after ``prefix``."""
        lines = [
            f"int {prefix}_num_gate = {self.num_gate};\n",
            f"int {prefix}_num_wire = {self.num_wire};\n",
            f"int {prefix}_n1 = {self.n1};\n",
            f"int {prefix}_n2 = {self.n2};\n",
            f"int {prefix}_n3 = {self.n3};\n",
            f"int {prefix}_gate_arr [{self.num_gate * 4}] = {{\n",
        ]
        lines.extend("".join(f"{int(v)}, " for v in gate) + "\n" for gate in self.gates)
        lines.append("};\n")
        with open(filename, "w", encoding="ascii") as handle:
            handle.writelines(lines)

    def compute(self, in1: Iterable[Any], in2: Iterable[Any]) -> list[Any]:
        """Evaluate on labels or Bits; outputs come back in the same form."""
        first, wrap1 = _unwrap(in1)
        second, wrap2 = _unwrap(in2)
        if len(first) < self.n1 or len(second) < self.n2:
            raise ValueError("not enough inputs for the circuit")
        wires: list[Any] = [None] * self.num_wire
        wires[: self.n1] = first[: self.n1]
        wires[self.n1 : self.n1 + self.n2] = second[: self.n2]
        execute_circuit(wires, self.gates)
        out = wires[self.num_wire - self.n3 : self.num_wire]
        return [Bit.from_label(x) for x in out] if (wrap1 or wrap2) else out


@dataclass
class BristolFashion:
    """Circuit with any number of input and output groups, read as one each."""

    num_wire: int
    num_input: int
    num_output: int
    gates: list[GateTuple] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_non_negative(
            num_wire=self.num_wire, num_input=self.num_input, num_output=self.num_output
        )
        if self.num_input > self.num_wire or self.num_output > self.num_wire:
            raise ValueError("more inputs or outputs than wires")
        self.gates = [_gate_tuple(gate) for gate in self.gates]

    @property
    def num_gate(self) -> int:
        """Number of gates."""
        return len(self.gates)

    @classmethod
    def from_text(cls, text: str) -> "BristolFashion":
        """Parse a circuit description."""
        tokens = _Tokens(text)
        num_gate, num_wire = tokens.number(), tokens.number()
        num_input = sum(tokens.number() for _ in range(tokens.number()))
        num_output = sum(tokens.number() for _ in range(tokens.number()))
        gates = _read_gates(tokens, num_gate)
        return cls(num_wire, num_input, num_output, gates)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "BristolFashion":
        """Parse a circuit description stored in a file."""
        with open(path, encoding="ascii") as handle:
            return cls.from_text(handle.read())

    def compute(self, inputs: Iterable[Any]) -> list[Any]:
        """Evaluate on labels or Bits; outputs come back in the same form."""
        values, wrapped = _unwrap(inputs)
        if len(values) < self.num_input:
            raise ValueError("not enough inputs for the circuit")
        wires: list[Any] = [None] * self.num_wire
        wires[: self.num_input] = values[: self.num_input]
        execute_circuit(wires, self.gates)
        out = wires[self.num_wire - self.num_output : self.num_wire]
        return [Bit.from_label(x) for x in out] if wrapped else out