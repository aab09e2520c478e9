"""Mixin giving ordering operators from ``geq`` and ``equal``."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from empcircuit.bit import Bit


class Comparable(abc.ABC):
    """Derives all six comparisons, each returning a secret :class:`Bit`."""

    __slots__ = ()

    @abc.abstractmethod
    def geq(self, rhs) -> "Bit":
        """Return the bit ``self >= rhs``."""

    @abc.abstractmethod
    def equal(self, rhs) -> "Bit":
        """Return the bit ``self == rhs``."""

    def _same_kind(self, rhs: object) -> bool:
        return isinstance(rhs, type(self))

    def __ge__(self, rhs):
        if not self._same_kind(rhs):
            return NotImplemented
        return self.geq(rhs)

    def __lt__(self, rhs):
        if not self._same_kind(rhs):
            return NotImplemented
        return ~self.geq(rhs)

    def __le__(self, rhs):
        if not self._same_kind(rhs):
            return NotImplemented
        return rhs.geq(self)

    def __gt__(self, rhs):
        if not self._same_kind(rhs):
            return NotImplemented
        return ~rhs.geq(self)

    def __eq__(self, rhs):  # type: ignore[override]
        if not self._same_kind(rhs):
            return NotImplemented
        return self.equal(rhs)

    def __ne__(self, rhs):  # type: ignore[override]
        if not self._same_kind(rhs):
            return NotImplemented
        return ~self.equal(rhs)

    __hash__ = None  # type: ignore[assignment]