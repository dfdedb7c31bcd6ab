"""IXRF Iridium text spectrum decoder.

Two banner lines (``Iridium ...`` then ``Spectrum ...``), comma separated
``name,value`` header rows ending with ``Number of Channels``, then one
count per line. Numbers are always written with a ``.`` decimal point.
"""

import csv
import logging

import numpy as np

from edsio.contracts import require
from edsio.formats.base import SpectrumFormat
from edsio.formats.text import text_lines
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode"]

logger = logging.getLogger(__name__)

_HEADER = {
    "ev per channel": P.EnergyScale,
    "calzero": P.EnergyOffset,
    "elevationangle": P.TakeOffAngle,
    "activearea": P.DetectorArea,
    "sithick": P.DetectorThickness,
}
_END_OF_HEADER = "number of channels"


def sniff(data: bytes) -> bool:
    lines = text_lines(data, 256)[:2]
    return (len(lines) == 2 and lines[0].strip().startswith("Iridium")
            and lines[1].strip().startswith("Spectrum"))


def _row(line: str) -> list[str]:
    return next(csv.reader([line]), [])


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one IXRF spectrum.

    Missing channel lines at the end of the file leave zeros and are
    reported as a warning.
    """
    lines = text_lines(data)
    require(len(lines) >= 2 and lines[0].strip().lower().startswith("iridium")
            and lines[1].strip().lower().startswith("spectrum"),
            "Not an IXRF spectrum: banner lines missing", offset=0)
    props = PropertyBag()
    props.set(P.Software, lines[0].strip())
    props.set(P.EnergyOffset, 0.0)
    props.set(P.EnergyScale, 10.0)

    n_channels = None
    idx = 2
    while idx < len(lines) and n_channels is None:
        items = _row(lines[idx].strip().lower())
        idx += 1
        if not items:
            continue
        name = items[0].strip()
        value = items[1].strip() if len(items) > 1 else ""
        try:
            if name == _END_OF_HEADER:
                n_channels = int(float(value))
            elif name in _HEADER:
                props.set(_HEADER[name], float(value))
        except ValueError:
            logger.warning("Bad value for IXRF header %s: %r", name, value)
            if name == _END_OF_HEADER:
                break
    require(n_channels is not None and n_channels > 0, "IXRF header has no channel count",
            expected="Number of Channels", found=n_channels)

    channels = np.zeros(n_channels, dtype=np.float64)
    count = 0
    for line in lines[idx:]:
        if count >= n_channels:
            break
        line = line.strip()
        if not line:
            continue
        try:
            channels[count] = float(line)
        except ValueError:
            logger.debug("Skipping unparseable IXRF channel value %r", line)
            continue
        count += 1
    if count < n_channels:
        logger.warning("IXRF file holds %d of %d channels", count, n_channels)
    return [Spectrum(channels, props)]


FORMAT = SpectrumFormat("IXRF", sniff, decode, (".txt",))
