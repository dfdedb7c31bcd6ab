"""EDAX ``.spc`` spectrum decoder.

Little-endian, fixed layout. Offsets below are from the start of the file.

=======  ======================================================
Offset   Field
=======  ======================================================
0        float32 file version, in [0.5, 1.0)
16       acquisition date and time (short year, byte fields)
32       int16 channel count
442      calibration start/end (keV), live time, tilt, TOA, ...
476      detector type code and window/layer thicknesses
532      beam energy (kV)
638      element list (48 slots)
3096     quantitative result (24 slots)
3840     int32 channels, always 4096 slots
20224    optional tail: source file name, image path, process time
=======  ======================================================
"""

import logging
from datetime import datetime
from pathlib import PureWindowsPath

from edsio.binary import ByteOrder, EndianReader
from edsio.contracts import StructuralCorruption, require
from edsio.formats.base import SpectrumFormat, recover_or_raise, set_positive
from edsio.model import Composition, Element, PropertyBag, Spectrum, SpectrumProperty as P, StageCoordinate
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "DETECTOR_TYPES", "MAX_CHANNELS"]

logger = logging.getLogger(__name__)

MIN_VERSION = 0.5
MAX_VERSION = 1.0
MAX_CHANNELS = 4096
CHANNEL_OFFSET = 3840
TAIL_OFFSET = CHANNEL_OFFSET + 4 * MAX_CHANNELS

DETECTOR_TYPES = (
    "std",
    "UTW",
    "Super UTW",
    "ECON 3/4 Open",
    "ECON 3/4 Closed",
    "Econ 5/6 Open",
    "Econ 5/6 Closed",
    "TEMECON",
)

# Window/layer thickness at offset 480.., property and multiplier
_LAYERS = (
    (P.HydroCarbonWindow, 1.0),
    (P.AluminumWindow, 1000.0),
    (P.BerylliumWindow, 1.0),
    (P.GoldLayer, 1000.0),
    (P.DeadLayer, 1.0),
    (P.DetectorThickness, 10.0),
)


def sniff(data: bytes) -> bool:
    """Version float in range and a plausible channel count."""
    r = EndianReader(data[:64], ByteOrder.LITTLE)
    version = r.read_float32()
    if not MIN_VERSION <= version < MAX_VERSION:
        return False
    r.seek(32)
    return 0 < r.read_int16() <= MAX_CHANNELS


def _read_timestamp(r: EndianReader, props: PropertyBag) -> None:
    year = r.read_int16()
    day = r.read_uint8()
    month = r.read_uint8()
    minute = r.read_uint8()
    hour = r.read_uint8()
    r.read_uint8()  # hundredths
    second = r.read_uint8()
    try:
        props.set(P.AcquisitionTime, datetime(year, month, day, hour, minute, second))
    except ValueError:
        logger.warning("Invalid EDAX acquisition date %04d-%02d-%02d %02d:%02d:%02d",
                       year, month, day, hour, minute, second)


def _read_header(r: EndianReader, props: PropertyBag) -> int:
    """Fields up to the quantitative block; returns the channel count."""
    version = r.read_float32()
    require(MIN_VERSION <= version < MAX_VERSION, "Not an EDAX SPC file: version out of range",
            offset=0, expected=f"[{MIN_VERSION}, {MAX_VERSION})", found=version)
    props.set(P.Software, f"EDAX v. {r.read_float32():g}")
    name = r.read_chars(8)
    if name:
        props.set(P.SpecimenName, name)
    _read_timestamp(r, props)
    r.read_int32()  # file length
    r.read_int32()  # data start
    n_channels = r.read_int16()
    require(0 < n_channels <= MAX_CHANNELS, "EDAX SPC channel count out of range",
            offset=32, expected=f"1..{MAX_CHANNELS}", found=n_channels)

    r.seek(64)
    desc = r.read_chars(40)
    if desc:
        props.set(P.SpecimenDesc, desc)
    comment = r.read_chars(216)
    if comment:
        props.set(P.SpectrumComment, comment)
    r.skip(8)
    props.set(P.BeamSpotX, r.read_int16())
    props.set(P.BeamSpotY, r.read_int16())

    r.seek(442)
    r.read_int16()  # escape peaks removed
    r.read_int32()  # analyzer type
    start = r.read_float32()
    end = r.read_float32()
    props.set(P.EnergyOffset, 1000.0 * start)
    props.set(P.EnergyScale, 1000.0 * (end - start) / n_channels)
    set_positive(props, P.LiveTime, r.read_float32())
    props.set(P.StagePosition, StageCoordinate(T=r.read_float32()))
    props.set(P.TakeOffAngle, r.read_float32())
    set_positive(props, P.ProbeCurrent, r.read_float32())
    props.set(P.Resolution, r.read_float32())
    code = r.read_int32() - 1
    props.set(P.DetectorDescription, DETECTOR_TYPES[code] if 0 <= code < len(DETECTOR_TYPES) else "unknown")
    for prop, scale in _LAYERS:
        set_positive(props, prop, r.read_float32(), scale)
    props.set(P.DetectorInclination, r.read_float32())
    props.set(P.Azimuth, r.read_float32())
    props.set(P.Elevation, r.read_float32())

    r.seek(532)
    set_positive(props, P.BeamEnergy, r.read_float32())
    r.seek(576)
    props.set(P.Instrument, "TEM" if r.read_int16() == 1 else "SEM")

    r.seek(638)
    n_elements = r.read_int16()
    elements = sorted({Element(int(z)) for i, z in enumerate(r.read_array("int16", 48))
                       if i < n_elements and Element.is_valid(int(z))})
    if elements:
        props.set(P.ElementList, ", ".join(el.symbol for el in elements))
    return n_channels


def _read_quant(r: EndianReader, props: PropertyBag) -> None:
    r.seek(3096)
    n = r.read_int16()
    zs = r.read_array("int16", 24)
    concentrations = r.read_array("float32", 24)
    fractions = {}
    for z, c in zip(zs[:max(n, 0)], concentrations[:max(n, 0)]):
        if Element.is_valid(int(z)) and c > 0.0:
            fractions[Element(int(z))] = 0.01 * float(c)
    if fractions:
        props.set(P.MicroanalyticalComposition, Composition(fractions, by_mass=True))


def _read_tail(r: EndianReader, props: PropertyBag) -> None:
    r.seek(TAIL_OFFSET)
    filename = r.read_chars(256)
    if filename:
        props.set(P.SpecimenName, PureWindowsPath(filename).stem)
    r.read_chars(256)  # image path, not resolved
    props.set(P.PulseProcessTime, r.read_float32())


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one EDAX SPC spectrum.

    The trailing file-name block is optional in older files. A file that ends before the channel block is corrupt.
    """
    r = EndianReader(data, ByteOrder.LITTLE)
    props = PropertyBag()
    try:
        n_channels = _read_header(r, props)
        _read_quant(r, props)
    except EOFError as e:
        raise StructuralCorruption(f"EDAX SPC header truncated: {e}", offset=r.tell()) from e

    r.seek(CHANNEL_OFFSET)
    require(4 * n_channels <= r.remaining(), "EDAX SPC channel block runs past end of file",
            offset=CHANNEL_OFFSET, expected=4 * n_channels, found=r.remaining())
    channels = r.read_array("int32", n_channels)
    if r.length >= TAIL_OFFSET + 516:
        _read_tail(r, props)
    elif r.length > TAIL_OFFSET:
        recover_or_raise(config, StructuralCorruption("EDAX SPC trailing block truncated", offset=TAIL_OFFSET,
                                                      expected=516, found=r.length - TAIL_OFFSET), "EDAX SPC")
    return [Spectrum(channels, props)]


FORMAT = SpectrumFormat("EDAX SPC", sniff, decode, (".spc",))
