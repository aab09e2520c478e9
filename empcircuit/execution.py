"""Process-wide circuit and protocol back ends that gates are evaluated by."""

from __future__ import annotations

import abc
from collections.abc import Sequence
from typing import Any

PUBLIC = 0

Label = Any


class CircuitExecution(abc.ABC):
    """Evaluates gates on wire labels."""

    @abc.abstractmethod
    def and_gate(self, a: Label, b: Label) -> Label:
        """Return the label of ``a AND b``."""

    @abc.abstractmethod
    def xor_gate(self, a: Label, b: Label) -> Label:
        """Return the label of ``a XOR b``."""

    @abc.abstractmethod
    def not_gate(self, a: Label) -> Label:
        """Return the label of ``NOT a``."""

    @abc.abstractmethod
    def public_label(self, value: bool) -> Label:
        """Return the label of a constant known to every party."""


class ProtocolExecution(abc.ABC):
    """Moves plain values into wire labels and back out again."""

    @abc.abstractmethod
    def feed(self, party: int, values: Sequence[bool]) -> list[Label]:
        """Turn the inputs of ``party`` into labels, one per value."""

    @abc.abstractmethod
    def reveal(self, party: int, labels: Sequence[Label]) -> list[bool]:
        """Open ``labels`` to ``party`` and return their plain values."""


_circuit: CircuitExecution | None = None
_protocol: ProtocolExecution | None = None


def _check_backend(backend: object, kind: type) -> None:
    if backend is not None and not isinstance(backend, kind):
        raise TypeError(
            f"expected a {kind.__name__} or None, got {type(backend).__name__}"
        )


def set_circuit_execution(backend: CircuitExecution | None) -> CircuitExecution | None:
    """Install the circuit back end and return the one it replaces."""
    global _circuit
    _check_backend(backend, CircuitExecution)
    previous = _circuit
    _circuit = backend
    return previous


def get_circuit_execution() -> CircuitExecution:
    """Return the installed circuit back end."""
    if _circuit is None:
        raise RuntimeError("no circuit execution back end is installed")
    return _circuit


def set_protocol_execution(backend: ProtocolExecution | None) -> ProtocolExecution | None:
    """Install the protocol back end and return the one it replaces."""
    global _protocol
    _check_backend(backend, ProtocolExecution)
    previous = _protocol
    _protocol = backend
    return previous


def get_protocol_execution() -> ProtocolExecution:
    """Return the installed protocol back end."""
    if _protocol is None:
        raise RuntimeError("no protocol execution back end is installed")
    return _protocol