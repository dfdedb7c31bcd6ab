"""EMSA/MAS 1.0 spectrum writer, the inverse of ``edsio.formats.emsa``."""

import logging
import math
from pathlib import Path
from typing import BinaryIO, Union

from edsio.formats.emsa import DETECTOR_CODES, THICKNESS_TAGS, WINDOW_CODES
from edsio.formats.text import MONTHS, half_up
from edsio.model import Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig, default_config

__all__ = ["write_emsa", "emsa_bytes", "emsa_channel_count"]

logger = logging.getLogger(__name__)

_TITLE_CHUNK = 64
_DTSA_MAX_CHANNELS = 8192


def _fmt(value: float) -> str:
    return half_up(value, 5, trim=True)


def _sci(value: float) -> str:
    # Window and layer thicknesses in cm are too small for five decimals
    return f"{value:.6E}"


def _ascii(text: str) -> str:
    return "".join(c if 32 <= ord(c) <= 126 else "?" for c in text)


def emsa_channel_count(n: int, config: InternalConfig) -> int:
    """Channel count written for ``n`` data channels.

    The next power of two, capped by the configured maximum (8192 when
    writing for DTSA compatibility).
    """
    cap = config.emsa.max_channels
    if config.emsa.dtsa_compatible:
        cap = min(cap, _DTSA_MAX_CHANNELS)
    size = 1
    while size < n:
        size *= 2
    return min(size, cap)


class _Lines:
    def __init__(self):
        self.out: list[str] = []

    def tag(self, keyword: str, value: str = "") -> None:
        self.out.append(_ascii(("#" + keyword).ljust(13) + ": " + value))

    def raw(self, text: str) -> None:
        self.out.append(_ascii(text))

    def encode(self) -> bytes:
        return ("\r\n".join(self.out) + "\r\n").encode("ascii")


def _header(lines: _Lines, spec: Spectrum, n_channels: int, config: InternalConfig) -> None:
    props = spec.properties()

    def num(keyword, prop, scale=1.0, fmt=_fmt):
        if prop in props:
            lines.tag(keyword, fmt(props[prop] * scale))

    lines.tag("FORMAT", "EMSA/MAS Spectral Data File")
    lines.tag("VERSION", "1.0")
    title = props.get_text(P.SpectrumComment) or spec.display_name() or "Unknown"
    for start in range(0, len(title), _TITLE_CHUNK):
        lines.tag("TITLE", title[start:start + _TITLE_CHUNK])
    when = props.get(P.AcquisitionTime)
    if when is not None:
        lines.tag("DATE", f"{when.day:02d}-{MONTHS[when.month - 1].upper()}-{when.year:04d}")
        lines.tag("TIME", f"{when.hour:02d}:{when.minute:02d}")
    lines.tag("OWNER", props.get_text(P.InstrumentOperator) or config.emsa.default_owner)
    lines.tag("NPOINTS", str(n_channels))
    lines.tag("NCOLUMNS", "1")
    lines.tag("XUNITS", "eV")
    lines.tag("YUNITS", "counts")
    lines.tag("DATATYPE", "Y")
    lines.tag("XPERCHAN", _fmt(spec.width))
    lines.tag("OFFSET", _fmt(spec.offset))
    num("BEAMKV   -kV", P.BeamEnergy)
    lines.tag("SIGNALTYPE", "EDS")
    num("ELEVANGLE-dg", P.Elevation)
    num("AZIMANGLE-dg", P.Azimuth)
    num("LIVETIME  -s", P.LiveTime)
    num("REALTIME  -s", P.RealTime)
    if props.get_number(P.ProbeCurrent, 0.0) > 0.0:
        num("PROBECUR -nA", P.ProbeCurrent)

    for tag, (prop, scale) in THICKNESS_TAGS.items():
        if prop is P.ActiveLayer and prop not in props and P.DetectorThickness in props:
            lines.tag("TACTLYR  -cm", _sci(props[P.DetectorThickness] / 10.0))
            continue
        num(tag[1:].ljust(9) + "-cm", prop, 1.0 / scale, _sci)

    lines.tag("CHOFFSET", "0.0")
    lines.tag("XLABEL", "Energy (eV)")
    lines.tag("YLABEL", "Counts")
    num("EMISSION -uA", P.EmissionCurrent)
    if P.ProbeArea in props:
        lines.tag("BEAMDIA  -nm", _fmt(2.0 * math.sqrt(props[P.ProbeArea] / math.pi)))
    stage = props.get(P.StagePosition)
    if stage is not None:
        for axis in ("X", "Y", "Z"):
            if axis in stage:
                lines.tag(f"{axis}POSITION mm", _fmt(stage[axis]))
    _edsdet(lines, props)
    num("MAGCAM", P.Magnification)
    num("CONVANGLE-mR", P.ConvergenceAngle)
    num("INTEGTIME-ms", P.IntegrationTime)

    if P.SpecimenDesc in props:
        lines.tag("#SPECIMEN", props[P.SpecimenDesc])
    for keyword, prop in (("#D2STDCMP", P.StandardComposition), ("#D2QUANT", P.MicroanalyticalComposition)):
        if prop in props:
            lines.tag(keyword, props[prop].to_parsable())
    if (P.ElementList in props and P.StandardComposition not in props
            and P.MicroanalyticalComposition not in props):
        symbols = [s.strip() for s in props[P.ElementList].replace(",", " ").split()]
        lines.tag("#D2ELEMS", "[" + ",".join(symbols) + "]")
    num("#WORKING", P.WorkingDistance)
    num("#MASSTHICK", P.MassThickness)
    num("#MULTISPEC", P.MultiSpectrumMetric)
    if P.ConductiveCoating in props:
        lines.tag("#CONDCOATING", props[P.ConductiveCoating])


def _edsdet(lines: _Lines, props) -> None:
    det = props.get_text(P.DetectorType)
    window = props.get_text(P.WindowType)
    if det is None and window is None:
        return
    prefix = next((code for code, name in DETECTOR_CODES.items() if name == det), "UNK")
    suffix = next((code for code, name in WINDOW_CODES.items() if name == window), "")
    lines.tag("EDSDET", prefix + suffix)


def emsa_bytes(spectrum: Spectrum, config: InternalConfig | None = None) -> bytes:
    """Render ``spectrum`` as an EMSA 1.0 document.

    Channels beyond the configured maximum are dropped with a warning;
    the channel count is padded up to a power of two with zeros.
    """
    config = config or default_config()
    n = emsa_channel_count(spectrum.channel_count(), config)
    if spectrum.channel_count() > n:
        logger.warning("Truncating %d channels to %d for EMSA output", spectrum.channel_count(), n)
    lines = _Lines()
    _header(lines, spectrum, n, config)
    lines.tag("SPECTRUM", "Spectral Data Starts Here")
    data = spectrum.channels
    for i in range(n):
        lines.raw((_fmt(data[i]) if i < len(data) else "0") + ",")
    lines.tag("ENDOFDATA", "")
    return lines.encode()


def write_emsa(spectrum: Spectrum, dest: Union[str, Path, BinaryIO],
               config: InternalConfig | None = None) -> None:
    """Write ``spectrum`` as EMSA to a path or a binary stream."""
    payload = emsa_bytes(spectrum, config)
    if isinstance(dest, (str, Path)):
        with open(dest, "wb") as f:
            f.write(payload)
    else:
        dest.write(payload)
