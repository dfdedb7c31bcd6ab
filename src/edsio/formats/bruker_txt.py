"""Bruker Esprit text export decoder.

Two banner lines, ``Name: value`` header lines up to the ``Energy Counts``
column header, then whitespace separated ``energy counts`` rows. Times are
in ms in the file.
"""

import logging

import numpy as np

from edsio.contracts import require
from edsio.formats.base import SpectrumFormat
from edsio.formats.emsa import E_MNKA
from edsio.formats.text import text_lines
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "BANNER"]

logger = logging.getLogger(__name__)

BANNER = "Bruker Nano GmbH Berlin, Germany"
_TABLE_HEADER = "Energy Counts"

# Header label -> property and multiplier to the property's unit
_NUMBERS = {
    "real time": (P.RealTime, 1.0e-3),
    "life time": (P.LiveTime, 1.0e-3),
    "primary energy": (P.BeamEnergy, 1.0),
    "take off angle": (P.TakeOffAngle, 1.0),
    "tilt angle": (P.DetectorTilt, 1.0),
    "detector thickness": (P.DetectorThickness, 1.0),
    "si dead layer": (P.DeadLayer, 1.0),
    "calibration, lin.": (P.EnergyScale, 1.0),
    "calibration, abs.": (P.EnergyOffset, 1.0),
}
_IGNORED = frozenset(("date", "pulse density", "azimut angle", "window type", "fano factor"))


def sniff(data: bytes) -> bool:
    lines = text_lines(data, 256)[:2]
    return len(lines) == 2 and lines[0] == BANNER and lines[1].startswith("Esprit")


def _header_line(props: PropertyBag, line: str) -> int | None:
    """Apply one header line; returns the channel count on ``Channels:``."""
    label, sep, value = line.partition(":")
    if not sep:
        return None
    label, value = label.strip().lower(), value.strip()
    if label == "channels":
        return int(value)
    if label == "detector type":
        if value:
            props.set(P.DetectorDescription, value)
    elif label == "mn fwhm":
        props.set(P.Resolution, float(value))
        props.set(P.ResolutionLine, E_MNKA)
    elif label in _NUMBERS:
        prop, scale = _NUMBERS[label]
        props.set(prop, scale * float(value))
    elif label not in _IGNORED:
        logger.warning("Unknown Bruker TXT header: %s", line)
    return None


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one Bruker TXT spectrum.

    The second column of each data row holds the counts; rows beyond the
    declared channel count are ignored.
    """
    lines = text_lines(data)
    require(len(lines) >= 2 and lines[0] == BANNER and lines[1].startswith("Esprit"),
            "Not a Bruker TXT spectrum: banner lines missing", offset=0, expected=BANNER,
            found=lines[0] if lines else "")
    props = PropertyBag()
    n_channels = None
    idx = 2
    while idx < len(lines) and not lines[idx].startswith(_TABLE_HEADER):
        line = lines[idx].strip()
        idx += 1
        try:
            n = _header_line(props, line)
        except ValueError:
            logger.warning("Bad value in Bruker TXT header: %s", line)
            continue
        if n is not None:
            n_channels = n
    require(n_channels is not None and n_channels > 0, "Bruker TXT header has no channel count",
            expected="Channels: n", found=n_channels)

    channels = np.zeros(n_channels, dtype=np.float64)
    count = 0
    for line in lines[idx + 1:]:
        items = line.split()
        if not items or count >= n_channels:
            break
        if len(items) > 1:
            try:
                channels[count] = float(items[1])
            except ValueError:
                logger.debug("Skipping unparseable Bruker TXT row %r", line)
        count += 1
    if count < n_channels:
        logger.warning("Bruker TXT file holds %d of %d channels", count, n_channels)
    return [Spectrum(channels, props)]


FORMAT = SpectrumFormat("Bruker TXT", sniff, decode, (".txt",))
