"""DTSA (Desktop Spectrum Analyzer) multi-spectrum file decoder.

Big-endian Pascal records: a global header shared by every spectrum, then
``last - first + 1`` spectrum records. Text fields are length-prefixed
fixed-capacity strings (``EndianReader.read_pascal``). A stored zero means
"not recorded" for most physical quantities and the property is omitted.
"""

import math

import numpy as np

from edsio.binary import ByteOrder, EndianReader
from edsio.contracts import StructuralCorruption, require
from edsio.formats.base import SpectrumFormat, recover_or_raise, set_positive
from edsio.formats.emsa import E_MNKA
from edsio.model import Composition, Element, PropertyBag, Spectrum, SpectrumProperty as P, StageCoordinate
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "MAX_ELEMENTS", "SPARE_FLOATS"]

MAX_ELEMENTS = 15  # slots in the per-spectrum element table
SPARE_FLOATS = 157
NOMINAL_DETECTOR_DISTANCE = 50.0  # mm

# Global header window and layer thicknesses, in file order
_HEADER_LAYERS = (
    (P.DetectorArea, 1.0),
    (P.DetectorThickness, 1.0),
    (P.CarbonCoating, 1.0),
    (P.DiamondWindow, 1.0),
    (P.MylarWindow, 1.0),
    (P.BoronNitrideWindow, 1.0),
    (P.SiliconNitrideWindow, 1.0),
    (P.IceThickness, 1.0),
    (P.GoldLayer, 1000.0),  # µm in the file, nm here
    (P.AluminumLayer, 1.0),
    (P.BerylliumWindow, 1.0),
)


def _set_nonzero(props: PropertyBag, prop, value: float, scale: float = 1.0) -> None:
    if value != 0.0:
        props.set(prop, scale * value)


def _set_text(props: PropertyBag, prop, value: str) -> None:
    if value.strip():
        props.set(prop, value.strip())


def sniff(data: bytes) -> bool:
    """Plausibility test on the spectrum range and detector geometry."""
    r = EndianReader(data[:512], ByteOrder.BIG)
    last = r.read_int16()
    first = r.read_int16()
    if first not in (0, 1) or not first <= last <= 100:
        return False
    for n in (50, 25, 255, 25):
        r.read_pascal(n)
    r.read_int16()
    r.read_pascal(50)
    r.skip(4)
    azimuth = r.read_float32()
    if not -360.0 < azimuth <= 360.0:
        return False
    elevation = r.read_float32()
    if not -90.0 <= elevation <= 90.0:
        return False
    area = r.read_float32()
    if not (area == 0.0 or 0.01 < area < 2000.0):
        return False
    thickness = r.read_float32()
    return thickness == 0.0 or 0.01 < thickness <= 100.0


def _read_header(r: EndianReader) -> tuple[int, int, int, PropertyBag]:
    """Global header; returns (first, last, channel count, shared properties)."""
    g = PropertyBag()
    last = r.read_int16()
    first = r.read_int16()
    _set_text(g, P.SpecimenName, r.read_pascal(50))
    r.read_pascal(25)  # original source file name
    _set_text(g, P.SpecimenDesc, r.read_pascal(255))
    r.read_pascal(25)  # password
    r.read_int16()  # reference file
    _set_text(g, P.InstrumentOperator, r.read_pascal(50))
    r.skip(4)  # detector spec and id

    azimuth = r.read_float32()
    elevation = r.read_float32()
    g.set(P.Azimuth, azimuth)
    g.set(P.Elevation, elevation)
    az, el = math.radians(azimuth), math.radians(elevation)
    d = NOMINAL_DETECTOR_DISTANCE
    g.set(P.DetectorPosition, (d * math.cos(az) * math.cos(el), d * math.sin(az) * math.cos(el), d * math.sin(el)))

    for prop, scale in _HEADER_LAYERS:
        _set_nonzero(g, prop, r.read_float32(), scale)
    r.read_float32()  # silicon thickness
    _set_nonzero(g, P.MoxtekWindow, r.read_float32())
    _set_nonzero(g, P.ParaleneWindow, r.read_float32())
    r.read_float32()  # WDS resolution
    g.set(P.EnergyScale, r.read_float32())
    resolution = r.read_float32()
    if resolution != 0.0:
        g.set(P.Resolution, resolution)
        g.set(P.ResolutionLine, E_MNKA)
    g.set(P.EnergyOffset, r.read_float32())
    r.read_float32()
    n_channels = r.read_int16()
    set_positive(g, P.BeamEnergy, r.read_float32())
    g.set(P.DetectorTilt, r.read_float32())
    _set_nonzero(g, P.QuantumEfficiency, r.read_float32())
    r.skip(4 * 2 + 3 * 2)  # spares, plot connection/symbol, RGB colour
    return first, last, n_channels, g


def _read_spectrum(r: EndianReader, n_channels: int, shared: PropertyBag) -> Spectrum:
    p = shared.copy()
    _set_text(p, P.SpectrumType, r.read_pascal(4))
    _set_text(p, P.SpecimenDesc, r.read_pascal(255))
    r.read_int16()  # spectrum number
    _set_text(p, P.SpectrumClass, r.read_pascal(25))
    p.set(P.IsTheoreticallyGenerated, r.read_uint8() != 0)
    p.set(P.IsStandard, r.read_uint8() != 0)
    p.set(P.BackgroundCorrected, r.read_uint8() != 0)
    r.skip(1)
    r.skip(2 * 4)  # max and min counts
    x_tilt = r.read_float32()
    y_tilt = r.read_float32()
    if x_tilt != 0.0 or y_tilt != 0.0:
        p.set(P.SampleOrientation, (x_tilt, y_tilt))
    _set_nonzero(p, P.TakeOffAngle, r.read_float32())
    _set_nonzero(p, P.DetectorDistance, r.read_float32())
    r.read_float32()
    _set_nonzero(p, P.SpecimenThickness, r.read_float32())
    _set_nonzero(p, P.SpecimenDensity, r.read_float32())

    n_elements = r.read_int16()
    fractions = {}
    for i in range(MAX_ELEMENTS):
        z = r.read_int16()
        r.read_float32()
        weight_fraction = r.read_float32()
        r.skip(2 * 4)  # spare, valence
        if i < n_elements and Element.is_valid(z) and weight_fraction > 0.0:
            fractions[Element(z)] = weight_fraction
    if fractions:
        p.set(P.StandardComposition, Composition(fractions, by_mass=True))
    r.skip(4 * SPARE_FLOATS + 2 + 2 * 4 + 2 * 2)

    # Acquisition info
    _set_nonzero(p, P.ProbeArea, r.read_float32())
    x, y = r.read_float32(), r.read_float32()
    if x != 0.0 or y != 0.0:
        p.set(P.StagePosition, StageCoordinate(X=x, Y=y))
    r.read_float32()
    first = r.read_int16() - 1
    last = r.read_int16()
    if (first, last) == (-1, 0):
        first, last = 0, n_channels
    last = min(last, n_channels)
    if first >= last:
        first = 0
    _set_nonzero(p, P.ProbeCurrent, r.read_float32())
    r.skip(4 + 2 * 4 + 2)  # begin time, first/end value, spare
    set_positive(p, P.RealTime, r.read_float32())
    set_positive(p, P.LiveTime, r.read_float32())
    _set_nonzero(p, P.SlowChannelCounts, r.read_int32())
    _set_nonzero(p, P.MediumChannelCounts, r.read_int32())
    _set_nonzero(p, P.FastChannelCounts, r.read_int32())
    r.skip(2 * 4 + 2)  # requested and actual live time, acquiring flags
    p.set(P.LLD, r.read_int16())
    r.skip(3 * 2)

    count = last - first
    require(4 * count <= r.remaining(), "DTSA channel block runs past end of file",
            offset=r.tell(), expected=4 * count, found=r.remaining())
    channels = np.zeros(n_channels, dtype=np.float64)
    channels[first:last] = r.read_array("float32", count)
    return Spectrum(channels, p)


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode every spectrum record in a DTSA file.

    Returns
    -------
    list of Spectrum
        One per record. Under ``best_effort`` a truncated file yields the
        records decoded before the damage.
    """
    r = EndianReader(data, ByteOrder.BIG)
    first, last, n_channels, shared = _read_header(r)
    require(n_channels > 0, "DTSA header declares no channels", offset=r.tell(), expected="> 0", found=n_channels)
    require(last >= first, "DTSA spectrum range is reversed", offset=0, expected=f">= {first}", found=last)
    spectra = []
    for index in range(last - first + 1):
        start = r.tell()
        try:
            spectra.append(_read_spectrum(r, n_channels, shared))
        except EOFError as e:
            err = StructuralCorruption(f"DTSA record {index + 1} truncated: {e}", offset=start)
            recover_or_raise(config, err, "DTSA")
            break
        except StructuralCorruption as e:
            recover_or_raise(config, e, "DTSA")
            break
    require(bool(spectra), "DTSA file holds no readable spectrum", offset=r.tell())
    return spectra


FORMAT = SpectrumFormat("DTSA", sniff, decode, (".dtsa",))
