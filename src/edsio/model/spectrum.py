"""Canonical spectrum: a fixed-length channel array plus a property bag.

Every decoder produces ``Spectrum`` objects. The channel count is fixed at
construction; the values are float64 even where the vendor stored integers
because several formats rescale channels while decoding.
"""

import numpy as np
import pandas as pd
import xarray as xr

from edsio.model.bag import PropertyBag
from edsio.model.properties import PropertyKind, SpectrumProperty

__all__ = ["Spectrum", "DEFAULT_ENERGY_SCALE"]


DEFAULT_ENERGY_SCALE = 10.0  # eV/channel when a file gives no calibration


class Spectrum:
    """Channel counts with typed metadata.

    Parameters
    ----------
    channels : array-like
        Counts per channel. Copied into a read-only float64 array.
    properties : PropertyBag or mapping, optional
        Initial metadata.

    Examples
    --------
    >>> s = Spectrum([0, 5, 7], {SpectrumProperty.EnergyScale: 10.0})
    >>> s.channel_count(), s.counts(1), s.energy_for_channel(2)
    (3, 5.0, 20.0)
    """

    def __init__(self, channels, properties=None):
        data = np.array(channels, dtype=np.float64)
        if data.ndim != 1:
            raise ValueError(f"Channel data must be 1-D, got shape {data.shape}")
        data.setflags(write=False)
        self._channels = data
        if isinstance(properties, PropertyBag):
            self._properties = properties
        else:
            self._properties = PropertyBag(properties)

    @property
    def channels(self) -> np.ndarray:
        """Read-only view of the channel counts."""
        return self._channels

    def channel_count(self) -> int:
        return int(self._channels.shape[0])

    def counts(self, i: int) -> float:
        return float(self._channels[i])

    def properties(self) -> PropertyBag:
        return self._properties

    @property
    def offset(self) -> float:
        return self._properties.get_number(SpectrumProperty.EnergyOffset, 0.0)

    @property
    def width(self) -> float:
        return self._properties.get_number(SpectrumProperty.EnergyScale, DEFAULT_ENERGY_SCALE)

    def energy_for_channel(self, i: float) -> float:
        """Lower edge energy of channel ``i`` in eV."""
        return self.offset + i * self.width

    def channel_for_energy(self, energy: float) -> int:
        return int((energy - self.offset) // self.width)

    def energies(self) -> np.ndarray:
        return self.offset + np.arange(self.channel_count()) * self.width

    def display_name(self) -> str:
        return self._properties.get_text(SpectrumProperty.SpectrumDisplayName, "") or ""

    def with_channels(self, channels) -> "Spectrum":
        """Copy carrying the same properties but new channel data."""
        return Spectrum(channels, self._properties.copy())

    def to_dataarray(self) -> xr.DataArray:
        """Export as ``xarray.DataArray`` over an ``energy`` coordinate.

        Numeric, text and boolean properties become attrs; timestamps are
        stored as ISO strings. Compositions, images and objects are left out.
        """
        attrs = {}
        for prop, value in self._properties.items():
            if prop.kind in (PropertyKind.NUMBER, PropertyKind.TEXT, PropertyKind.BOOLEAN):
                attrs[prop.name] = value
            elif prop.kind is PropertyKind.TIMESTAMP:
                attrs[prop.name] = value.isoformat()
        return xr.DataArray(
            np.array(self._channels),
            dims=("channel",),
            coords={"channel": np.arange(self.channel_count()), "energy": ("channel", self.energies())},
            name=self.display_name() or "counts",
            attrs=attrs,
        )

    def to_frame(self) -> pd.DataFrame:
        """Tabulate as ``channel``, ``energy``, ``counts`` columns."""
        return pd.DataFrame({
            "channel": np.arange(self.channel_count()),
            "energy": self.energies(),
            "counts": self._channels,
        })

    def __len__(self):
        return self.channel_count()

    def __repr__(self):
        name = self.display_name()
        return f"Spectrum({name!r}, channels={self.channel_count()}, properties={len(self._properties)})"
