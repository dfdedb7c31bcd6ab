"""Bruker handheld XRF ``.pdz`` spectrum decoder.

Little-endian, fixed offsets:

=======  ==================================================
Offset   Field
=======  ==================================================
0        magic ``01 01 17 00``
6        int16 channel count
50       float64 eV per channel
114      4 x (int16 Z, int16 thickness µm) primary beam filter
146      int16 year, month, UTC offset (h), day, hour, min, sec
162      float32 tube voltage (kV), tube current (µA)
342      float32 real time, dead time, (unknown), live time
358      int32 channels
=======  ==================================================
"""

import logging
from datetime import datetime, timedelta, timezone

from edsio.binary import ByteOrder, EndianReader
from edsio.contracts import StructuralCorruption, require
from edsio.formats.base import SpectrumFormat, set_positive
from edsio.model import Element, PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "MAGIC"]

logger = logging.getLogger(__name__)

MAGIC = b"\x01\x01\x17\x00"
CHANNEL_OFFSET = 358


def sniff(data: bytes) -> bool:
    return data[:4] == MAGIC


def _filter_text(layers: list[tuple[int, int]]) -> str:
    """``(Sym,th.0e-6)`` items, thickness in metres, joined by commas."""
    items = []
    for z, thickness in layers:
        if z > 0 and Element.is_valid(z):
            items.append(f"({Element(z).symbol},{thickness}.0e-6)")
    return ",".join(items)


def _timestamp(fields: list[int]) -> datetime | None:
    year, month, utc_offset, day, hour, minute, second = fields
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone(timedelta(hours=utc_offset)))
    except ValueError:
        logger.warning("Invalid PDZ acquisition time %s", fields)
        return None


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    r = EndianReader(data, ByteOrder.LITTLE)
    require(data[:4] == MAGIC, "Not a Bruker PDZ file: bad magic", offset=0, expected=MAGIC, found=data[:4])
    props = PropertyBag()
    try:
        r.seek(6)
        n_channels = r.read_int16()
        r.seek(50)
        props.set(P.EnergyOffset, 0.0)
        props.set(P.EnergyScale, r.read_float64())
        r.seek(114)
        layers = [(r.read_int16(), r.read_int16()) for _ in range(4)]
        r.seek(146)
        when = _timestamp([r.read_int16() for _ in range(7)])
        r.seek(162)
        props.set(P.XRFSourceVoltage, r.read_float32())
        props.set(P.XRFTubeCurrent, r.read_float32())
        r.seek(342)
        real_time = r.read_float32()
        r.read_float32()  # dead time
        r.read_float32()
        live_time = r.read_float32()
    except EOFError as e:
        raise StructuralCorruption(f"Bruker PDZ header truncated: {e}", offset=r.tell()) from e

    require(n_channels > 0, "Bruker PDZ header declares no channels", offset=6, expected="> 0", found=n_channels)
    filter_text = _filter_text(layers)
    if filter_text:
        props.set(P.XRFFilter, filter_text)
    if when is not None:
        props.set(P.AcquisitionTime, when)
    set_positive(props, P.RealTime, real_time)
    set_positive(props, P.LiveTime, live_time)

    r.seek(CHANNEL_OFFSET)
    require(4 * n_channels <= r.remaining(), "Bruker PDZ channel block runs past end of file",
            offset=CHANNEL_OFFSET, expected=4 * n_channels, found=r.remaining())
    return [Spectrum(r.read_array("int32", n_channels), props)]


FORMAT = SpectrumFormat("Bruker PDZ", sniff, decode, (".pdz",))
