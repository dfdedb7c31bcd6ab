"""Radiant PiSpec ``.spd`` spectrum decoder.

Layout (little-endian):

- uint8 description length ``n`` then ``n`` description bytes
- 34 byte block: live time (float32) at +18, pulse process time at +26
- 2048 float32 channels

The format has no magic number; a file is accepted when its size is
exactly what the description length implies.
"""

import io

from edsio.binary import LittleEndianStream
from edsio.contracts import require
from edsio.formats.base import SpectrumFormat, set_positive
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "N_CHANNELS", "BLOCK_LENGTH"]

N_CHANNELS = 2048
BLOCK_LENGTH = 34


def expected_size(description_length: int) -> int:
    return 1 + description_length + BLOCK_LENGTH + 4 * N_CHANNELS


def sniff(data: bytes) -> bool:
    return len(data) > 0 and len(data) == expected_size(data[0])


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    require(len(data) > 0, "Radiant SPD file is empty", offset=0)
    n = data[0]
    require(len(data) == expected_size(n), "Radiant SPD file size disagrees with its header",
            offset=0, expected=expected_size(n), found=len(data))
    r = LittleEndianStream(io.BytesIO(data))
    r.skip(1)
    props = PropertyBag()
    props.set(P.EnergyOffset, 0.0)
    props.set(P.EnergyScale, 10.0)
    desc = r.read_fully(n).decode("latin-1").strip("\x00 ")
    if desc:
        props.set(P.SpecimenDesc, desc)
    props.set(P.Software, "Radiant PiSpec")
    start = r.tell()
    r.skip(18)
    set_positive(props, P.LiveTime, r.read_float32())
    r.skip(4)
    set_positive(props, P.PulseProcessTime, r.read_float32())
    r.skip(BLOCK_LENGTH - (r.tell() - start))
    channels = r.read_array("float32", N_CHANNELS)
    return [Spectrum(channels, props)]


FORMAT = SpectrumFormat("Radiant SPD", sniff, decode, (".spd",))
