"""Oxford Instruments XRF ``.spt`` text spectrum decoder.

UTF-8 with a byte order mark. ``Name: value`` header lines up to the first
blank line, a ``Raw<TAB>Corrected`` column header, then one tab separated
row per channel. The corrected column is used.
"""

import logging
from datetime import datetime

import numpy as np

from edsio.contracts import require
from edsio.formats.base import SpectrumFormat
from edsio.formats.text import decode_text
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode"]

logger = logging.getLogger(__name__)

BOM = b"\xef\xbb\xbf"
COLUMNS = "Raw\tCorrected"

_NUMBERS = {
    "Tube Voltage": P.XRFSourceVoltage,
    "Tube Current": P.XRFTubeCurrent,
}
_TEXT = {
    "Secondary Filter": P.XRFFilter,
}
_IGNORED = frozenset((
    "Collimator", "Center", "FWHM", "Correction Slope", "Correction Offset", "Shift Slope",
    "Shift Offset", "Process Time", "Incident Angle, rads",
))


def sniff(data: bytes) -> bool:
    if not data.startswith(BOM):
        return False
    lines = decode_text(data[:256]).splitlines()
    return len(lines) >= 2 and lines[0].startswith("Acquired: ") and lines[1].startswith("Collimator: ")


class _Header:
    def __init__(self):
        self.props = PropertyBag()
        self.live_time: float | None = None
        self.dead_fraction: float | None = None
        self.n_channels: int | None = None

    def line(self, name: str, value: str) -> None:
        props = self.props
        if name == "Acquired":
            props.set(P.AcquisitionTime, datetime.strptime(value, "%m/%d/%Y %I:%M:%S %p"))
        elif name == "Time":
            self.live_time = float(value)
            props.set(P.LiveTime, self.live_time)
        elif name == "Dead Time":
            self.dead_fraction = 0.01 * float(value.split("%")[0])
        elif name == "BinsToProcess":
            self.n_channels = int(value)
        elif name in _NUMBERS:
            props.set(_NUMBERS[name], float(value))
        elif name in _TEXT:
            if value:
                props.set(_TEXT[name], value)
        elif name not in _IGNORED:
            logger.warning("Unknown Oxford SPT header: %s: %s", name, value)

    def finish(self) -> None:
        if self.live_time is not None and self.dead_fraction is not None:
            self.props.set(P.RealTime, self.live_time * (1.0 + self.dead_fraction))


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one Oxford SPT spectrum at the default 10 eV/channel."""
    lines = decode_text(data).splitlines()
    header = _Header()
    header.props.set(P.EnergyOffset, 0.0)
    header.props.set(P.EnergyScale, 10.0)
    idx = 0
    while idx < len(lines) and lines[idx].strip():
        name, sep, value = lines[idx].strip().partition(": ")
        idx += 1
        if not sep:
            continue
        try:
            header.line(name, value.strip())
        except ValueError as e:
            logger.warning("Bad value for Oxford SPT header %s: %r (%s)", name, value, e)
    header.finish()
    n = header.n_channels
    require(n is not None and n > 0, "Oxford SPT header has no BinsToProcess", expected="> 0", found=n)

    channels = np.zeros(n, dtype=np.float64)
    idx += 1
    if idx < len(lines) and lines[idx].strip() == COLUMNS:
        count = 0
        for row in lines[idx + 1:]:
            if not row or count >= n:
                break
            items = row.split("\t")
            if len(items) > 1:
                try:
                    channels[count] = float(items[1])
                except ValueError:
                    logger.debug("Skipping unparseable Oxford SPT row %r", row)
            count += 1
        if count < n:
            logger.warning("Oxford SPT file holds %d of %d channels", count, n)
    else:
        logger.warning("Oxford SPT file has no %r data table", COLUMNS)
    return [Spectrum(channels, header.props)]


FORMAT = SpectrumFormat("Oxford SPT", sniff, decode, (".spt",))
