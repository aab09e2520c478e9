"""A single secret bit held as a wire label."""

from __future__ import annotations

from typing import Any

from empcircuit.execution import (
    PUBLIC,
    get_circuit_execution,
    get_protocol_execution,
)

# Plain booleans that one bit occupies when laid out for batching.
_PLAIN_LAYOUT = (bool,)


class Bit:
    """One wire of a circuit; operators emit gates on the installed back end."""

    __slots__ = ("label",)

    def __init__(self, value: bool = False, party: int = PUBLIC) -> None:
        if party == PUBLIC:
            self.label = get_circuit_execution().public_label(bool(value))
        else:
            (self.label,) = get_protocol_execution().feed(party, [bool(value)])

    @classmethod
    def from_label(cls, label: Any) -> "Bit":
        """Wrap an existing wire label."""
        bit = cls.__new__(cls)
        bit.label = label
        return bit

    @staticmethod
    def _coerce(other: object) -> "Bit | None":
        if isinstance(other, Bit):
            return other
        if isinstance(other, bool):
            return Bit(other)
        return None

    def reveal(self, party: int = PUBLIC) -> bool:
        """Open the bit to ``party``."""
        (value,) = get_protocol_execution().reveal(party, [self.label])
        return bool(value)

    def reveal_string(self, party: int = PUBLIC) -> str:
        """Open the bit and spell it as ``"true"`` or ``"false"``."""
        (value,) = get_protocol_execution().reveal(party, [self.label])
        return "true" if value else "false"

    def select(self, sel: "Bit", new_value: "Bit") -> "Bit":
        """Return ``new_value`` where ``sel`` is set, otherwise this bit."""
        tmp = self ^ new_value
        tmp = tmp & sel
        return self ^ tmp

    @staticmethod
    def bool_size(*args: object) -> int:
        """Number of plain booleans one bit takes."""
        return len(_PLAIN_LAYOUT)

    def __and__(self, rhs: object) -> "Bit":
        other = self._coerce(rhs)
        if other is None:
            return NotImplemented
        return Bit.from_label(get_circuit_execution().and_gate(self.label, other.label))

    __rand__ = __and__

    def __xor__(self, rhs: object) -> "Bit":
        other = self._coerce(rhs)
        if other is None:
            return NotImplemented
        return Bit.from_label(get_circuit_execution().xor_gate(self.label, other.label))

    __rxor__ = __xor__

    def __or__(self, rhs: object) -> "Bit":
        other = self._coerce(rhs)
        if other is None:
            return NotImplemented
        return (self ^ other) ^ (self & other)

    __ror__ = __or__

    def __invert__(self) -> "Bit":
        return Bit.from_label(get_circuit_execution().not_gate(self.label))

    def __eq__(self, rhs: object) -> "Bit":  # type: ignore[override]
        other = self._coerce(rhs)
        if other is None:
            return NotImplemented
        return ~(self ^ other)

    def __ne__(self, rhs: object) -> "Bit":  # type: ignore[override]
        other = self._coerce(rhs)
        if other is None:
            return NotImplemented
        return self ^ other

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Bit(label={self.label!r})"