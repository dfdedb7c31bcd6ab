"""Canonical in-memory spectrum model."""

from edsio.model.properties import PropertyKind, SpectrumProperty
from edsio.model.bag import PropertyBag
from edsio.model.composition import Composition
from edsio.model.elements import Element, element
from edsio.model.stage import Axis, StageCoordinate
from edsio.model.spectrum import Spectrum

__all__ = [
    "PropertyKind",
    "SpectrumProperty",
    "PropertyBag",
    "Composition",
    "Element",
    "element",
    "Axis",
    "StageCoordinate",
    "Spectrum",
]
