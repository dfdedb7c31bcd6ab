"""Amptek PMCA ``.mca`` spectrum decoder.

``<<PMCA SPECTRUM>>`` banner, ``NAME - value`` header lines, then one count
per line between ``<<DATA>>`` and ``<<END>>``. The file carries no energy
calibration of its own; the default 10 eV/channel is stored.
"""

import logging

import numpy as np

from edsio.contracts import require
from edsio.formats.base import SpectrumFormat
from edsio.formats.text import text_lines
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "BANNER"]

logger = logging.getLogger(__name__)

BANNER = "<<PMCA SPECTRUM>>"
DATA_START = "<<DATA>>"
DATA_END = "<<END>>"

_TEXT = {
    "TAG": P.SpectrumComment,
    "DESCRIPTION": P.Software,
    "SERIAL_NUMBER": P.ClientsSampleID,
}
_NUMBERS = {
    "LIVE_TIME": P.LiveTime,
    "REAL_TIME": P.RealTime,
}


def sniff(data: bytes) -> bool:
    lines = text_lines(data, 64)
    return bool(lines) and lines[0].strip().startswith(BANNER)


def _store(props: PropertyBag, prefix: str, value: str) -> None:
    for name, prop in _TEXT.items():
        if prefix.startswith(name):
            if value:
                props.set(prop, value)
            return
    for name, prop in _NUMBERS.items():
        if prefix.startswith(name):
            try:
                props.set(prop, float(value))
            except ValueError:
                logger.warning("Bad value for PMCA %s: %r", name, value)
            return


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one PMCA spectrum; unparseable count lines read as zero."""
    lines = text_lines(data)
    require(bool(lines) and lines[0].strip().startswith(BANNER), "Not a PMCA spectrum: banner missing",
            offset=0, expected=BANNER, found=lines[0][:32] if lines else "")
    props = PropertyBag()
    props.set(P.EnergyOffset, 0.0)
    props.set(P.EnergyScale, 10.0)
    idx = 1
    while idx < len(lines) and not lines[idx].startswith(DATA_START):
        prefix, sep, value = lines[idx].partition("-")
        if sep:
            _store(props, prefix.strip(), value.strip())
        idx += 1

    values = []
    for line in lines[idx + 1:]:
        if line.startswith(DATA_END):
            break
        try:
            values.append(float(line.strip()))
        except ValueError:
            values.append(0.0)
    return [Spectrum(np.array(values, dtype=np.float64), props)]


FORMAT = SpectrumFormat("PMCA", sniff, decode, (".mca",))
