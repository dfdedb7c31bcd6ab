"""Sparse stage coordinate over the six stage axes."""

from enum import Enum
from typing import Iterator, Mapping

__all__ = ["Axis", "StageCoordinate"]


class Axis(str, Enum):
    X = "X"
    Y = "Y"
    Z = "Z"
    R = "R"  # rotation
    T = "T"  # tilt
    B = "B"  # bank


class StageCoordinate(Mapping):
    """Stage position holding only the axes a file actually reported.

    An absent axis is not zero: ``Axis.Z in coord`` is False until set.

    Examples
    --------
    >>> c = StageCoordinate(X=1.5, Y=-2.0)
    >>> c[Axis.X], Axis.Z in c
    (1.5, False)
    """

    def __init__(self, values: Mapping | None = None, **axes: float):
        self._values = {}
        for key, value in {**(values or {}), **axes}.items():
            self.set(key, value)

    def set(self, axis, value: float) -> None:
        self._values[Axis(axis)] = float(value)

    def clear(self, axis) -> None:
        self._values.pop(Axis(axis), None)

    def __getitem__(self, axis) -> float:
        return self._values[Axis(axis)]

    def __contains__(self, axis) -> bool:
        try:
            return Axis(axis) in self._values
        except ValueError:
            return False

    def __iter__(self) -> Iterator[Axis]:
        return (a for a in Axis if a in self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other):
        if not isinstance(other, StageCoordinate):
            return NotImplemented
        return self._values == other._values

    def __hash__(self):
        return hash(frozenset(self._values.items()))

    def copy(self) -> "StageCoordinate":
        return StageCoordinate(self._values)

    def __repr__(self):
        body = ", ".join(f"{a.value}={self._values[a]:g}" for a in self)
        return f"StageCoordinate({body})"
