"""Typed, sparse property store for spectrum metadata."""

from datetime import datetime
from typing import Any, Iterator, Mapping

import numpy as np

from edsio.model.composition import Composition
from edsio.model.properties import PropertyKind, SpectrumProperty

__all__ = ["PropertyBag"]


def _coerce(prop: SpectrumProperty, value: Any) -> Any:
    kind = prop.kind
    if kind is PropertyKind.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
            raise TypeError(f"{prop.name} expects a number, got {type(value).__name__}")
        return float(value)
    if kind is PropertyKind.TEXT:
        if not isinstance(value, str):
            raise TypeError(f"{prop.name} expects text, got {type(value).__name__}")
        return value
    if kind is PropertyKind.TIMESTAMP:
        if not isinstance(value, datetime):
            raise TypeError(f"{prop.name} expects a datetime, got {type(value).__name__}")
        return value
    if kind is PropertyKind.COMPOSITION:
        if not isinstance(value, Composition):
            raise TypeError(f"{prop.name} expects a Composition, got {type(value).__name__}")
        return value
    if kind is PropertyKind.IMAGE:
        if not isinstance(value, np.ndarray) or value.ndim not in (2, 3):
            raise TypeError(f"{prop.name} expects a 2-D or 3-D numpy raster")
        return value
    if kind is PropertyKind.BOOLEAN:
        return bool(value)
    return value


class PropertyBag(Mapping):
    """Mapping from ``SpectrumProperty`` to a value of the property's kind.

    Absence is represented only by absence: ``None`` is never stored, and
    assigning it raises. Re-assignment replaces the old value wholesale;
    ``append_text`` is the one accumulating operation.
    """

    def __init__(self, values: Mapping | None = None):
        self._values: dict[SpectrumProperty, Any] = {}
        if values:
            self.update(values)

    def set(self, prop: SpectrumProperty, value: Any) -> None:
        if value is None:
            raise ValueError(f"Refusing to store None for {prop.name}; omit the property instead")
        self._values[prop] = _coerce(prop, value)

    def update(self, values: Mapping) -> None:
        for prop, value in values.items():
            self.set(prop, value)

    def remove(self, prop: SpectrumProperty) -> None:
        self._values.pop(prop, None)

    def get_number(self, prop: SpectrumProperty, default: float | None = None) -> float | None:
        return self._values.get(prop, default)

    def get_text(self, prop: SpectrumProperty, default: str | None = None) -> str | None:
        return self._values.get(prop, default)

    def append_text(self, prop: SpectrumProperty, text: str, separator: str = "\n") -> None:
        """Append to a text property, creating it when absent."""
        old = self._values.get(prop)
        self.set(prop, text if not old else old + separator + text)

    def prepend_text(self, prop: SpectrumProperty, text: str, separator: str = "\n") -> None:
        old = self._values.get(prop)
        self.set(prop, text if not old else text + separator + old)

    def copy(self) -> "PropertyBag":
        bag = PropertyBag()
        bag._values = dict(self._values)
        return bag

    def __getitem__(self, prop: SpectrumProperty) -> Any:
        return self._values[prop]

    def __setitem__(self, prop: SpectrumProperty, value: Any) -> None:
        self.set(prop, value)

    def __delitem__(self, prop: SpectrumProperty) -> None:
        del self._values[prop]

    def __iter__(self) -> Iterator[SpectrumProperty]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self):
        return f"PropertyBag({len(self)} properties)"
