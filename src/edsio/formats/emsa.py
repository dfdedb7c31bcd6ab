"""EMSA/MAS spectral data file decoder (ISO 22029 text-tag format).

A header of ``#KEYWORD [-unit]: value`` lines, a ``#SPECTRUM`` line, then
comma-separated channel values up to ``#ENDOFDATA``. Custom ``##`` tags
written by DTSA-II, JEOL and TESCAN software are understood; other ``##``
tags are skipped silently and unknown ``#`` tags are logged.

Unit conventions: window and layer thicknesses are stored in cm in the
file and converted to µm (or nm for gold) on read; keV energy axes are
converted to eV.
"""

import logging
import math
from datetime import date, time
from typing import Callable

import numpy as np

from edsio.formats.base import SpectrumFormat
from edsio.formats.text import MONTHS, combine, decode_text, parse_count, parse_number
from edsio.model import (
    Composition, PropertyBag, Spectrum, SpectrumProperty as P, StageCoordinate, element,
)
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "E_MNKA", "DETECTOR_CODES", "WINDOW_CODES"]

logger = logging.getLogger(__name__)

E_MNKA = 5898.7  # eV, Mn Kα, line at which detector resolution is quoted

SILI = "Si(Li)"
SDD = "Silicon Drift Detector"
MICROCAL = "Microcalorimeter"
GE = "Germanium"

NO_WINDOW = "No window"
UT_WINDOW = "Ultra-thin window"
BE_WINDOW = "Be window"
DIAMOND_WINDOW = "Diamond window"
BN_WINDOW = "Boron Nitride"

# EDSDET code prefix -> detector type, suffix -> window type
DETECTOR_CODES = {"SI": SILI, "GE": GE, "SD": SDD, "UCAL": MICROCAL}
WINDOW_CODES = {"BEW": BE_WINDOW, "UTW": UT_WINDOW, "WLS": NO_WINDOW, "DIA": DIAMOND_WINDOW, "BNW": BN_WINDOW}

# File thickness (cm) -> property, multiplier to the property's unit
THICKNESS_TAGS = {
    "#TBEWIND": (P.BerylliumWindow, 1.0e4),
    "#TAUWIND": (P.GoldLayer, 1.0e7),
    "#TDEADLYR": (P.DeadLayer, 1.0e4),
    "#TACTLYR": (P.ActiveLayer, 1.0e4),
    "#TALWIND": (P.AluminumWindow, 1.0e7),
    "#TPYWIND": (P.PyroleneWindow, 1.0e4),
    "#TBNWIND": (P.BoronNitrideWindow, 1.0e4),
    "#TDIWIND": (P.DiamondWindow, 1.0e4),
    "#THCWIND": (P.HydroCarbonWindow, 1.0e4),
}

SHAPING_TIMES = {0: 3.2, 1: 6.4, 2: 51.2, 3: 102.4}  # JEOL ##SH_TIME code -> µs

_VALID_FORMATS = ("EMSA/MAS SPECTRAL DATA FILE", "EMSA/MAS SPECTRAL DATA STANDARD")
_SPECUTIL_BANNER = "Converted by SpecUtil32 of EDAX INC"


def sniff(data: bytes) -> bool:
    """First non-blank line starts with ``#FORMAT``."""
    for line in decode_text(data[:512]).splitlines()[:2]:
        line = line.strip()
        if line:
            return line.upper().startswith("#FORMAT")
    return False


class _Session:
    """Per-decode state: the property bag plus header flags."""

    def __init__(self):
        self.props = PropertyBag()
        self.stage = StageCoordinate()
        self.n_points: int | None = None
        self.is_xy = False
        self.is_cps = False
        self.x_unit = 1.0
        self.x_tilt: float | None = None
        self.y_tilt: float | None = None
        self.pending_time: time | None = None
        self.title_lines = 0

    def number(self, value: str) -> float:
        return parse_number(value)

    def set_number(self, prop, value: str, scale: float = 1.0) -> None:
        self.props.set(prop, scale * self.number(value))

    def set_text(self, prop, value: str) -> None:
        if value:
            self.props.set(prop, value)

    # ---------------------------------------------------------------------
    # Date/time: each tag keeps the component the other one supplied
    # ---------------------------------------------------------------------
    def set_date(self, value: str) -> None:
        items = value.split("-")
        if len(items) < 3:
            logger.warning("Misformatted date in EMSA file: %s", value)
            return
        try:
            day = int(items[0])
            month = MONTHS.index(items[1].strip().lower()[:3]) + 1
            year = int(items[2])
        except ValueError:
            logger.warning("Unable to parse EMSA date: %s", value)
            return
        if year < 100:
            year += 2000
        elif year < 200:
            year += 1900
        stored = self.props.get(P.AcquisitionTime)
        self.props.set(P.AcquisitionTime, combine(stored, date=date(year, month, day), tod=self.pending_time))
        self.pending_time = None

    def set_time(self, value: str) -> None:
        items = value.split(":")
        if len(items) < 2:
            logger.warning("Misformatted time in EMSA file: %s", value)
            return
        try:
            tod = time(int(items[0]), int(items[1]), int(float(items[2])) if len(items) > 2 else 0)
        except ValueError:
            logger.warning("Unable to parse EMSA time: %s", value)
            return
        stored = self.props.get(P.AcquisitionTime)
        if stored is None:
            self.pending_time = tod
        else:
            self.props.set(P.AcquisitionTime, combine(stored, tod=tod))

    def set_tilt(self) -> None:
        self.props.set(P.SampleOrientation, (self.x_tilt or 0.0, self.y_tilt or 0.0))


# =============================================================================
# Tag handlers
# =============================================================================

def _format(s: _Session, v: str) -> None:
    if v.upper() not in _VALID_FORMATS:
        logger.warning("The format header in this EMSA file is spurious: %s", v)


def _version(s: _Session, v: str) -> None:
    try:
        ok = s.number(v) == 1.0
    except ValueError:
        ok = v.upper() == "TC202V1.0"
    if not ok:
        logger.warning("EMSA version is %s, not 1.0", v)


def _title(s: _Session, v: str) -> None:
    if not v or v.startswith("EDS Spectral Data"):
        return
    # Long titles are written as consecutive 64 character #TITLE lines
    if s.title_lines:
        s.props.append_text(P.SpectrumComment, v, separator="")
    else:
        s.props.set(P.SpectrumComment, v)
    s.title_lines += 1


def _npoints(s: _Session, v: str) -> None:
    s.n_points = parse_count(v)


def _xunits(s: _Session, v: str) -> None:
    s.x_unit = 1.0
    if "KEV" in v.upper():
        s.x_unit = 1000.0
        v = "eV"
    s.set_text(P.XUnits, v)


def _yunits(s: _Session, v: str) -> None:
    if v.upper() == "CPS":
        s.is_cps = True
        s.props.set(P.YUnits, "Counts")
    else:
        s.set_text(P.YUnits, v)


def _datatype(s: _Session, v: str) -> None:
    s.is_xy = v.upper() == "XY"


def _comment(s: _Session, v: str) -> None:
    if P.SpectrumComment not in s.props and v and not v.startswith(_SPECUTIL_BANNER):
        s.props.set(P.SpectrumComment, v)


def _beam_current(s: _Session, v: str) -> None:
    value = s.number(v)
    if value > 0.0:
        s.props.set(P.ProbeCurrent, value)


def _beamdia(s: _Session, v: str) -> None:
    r = s.number(v) / 2.0
    s.props.set(P.ProbeArea, math.pi * r * r)


def _opermode(s: _Session, v: str) -> None:
    s.set_text(P.OperatingMode, "IMAGE" if v == "IMAG" else v)


def _xtilt(s: _Session, v: str) -> None:
    s.x_tilt = s.number(v)
    s.set_tilt()


def _ytilt(s: _Session, v: str) -> None:
    s.y_tilt = s.number(v)
    s.set_tilt()


def _position(axis: str) -> Callable[[_Session, str], None]:
    def handler(s: _Session, v: str) -> None:
        s.stage.set(axis, s.number(v))
    return handler


def _thickness(prop, scale: float) -> Callable[[_Session, str], None]:
    def handler(s: _Session, v: str) -> None:
        s.set_number(prop, v, scale)
    return handler


def _edsdet(s: _Session, v: str) -> None:
    code = v.upper()
    for prefix, det in DETECTOR_CODES.items():
        if code.startswith(prefix) and code[len(prefix):] in WINDOW_CODES:
            s.props.set(P.DetectorType, det)
            s.props.set(P.WindowType, WINDOW_CODES[code[len(prefix):]])
            return
    logger.debug("Unrecognized EDSDET code %s", v)


def _composition(prop) -> Callable[[_Session, str], None]:
    def handler(s: _Session, v: str) -> None:
        comp = Composition.from_parsable(v)
        if comp is not None:
            s.props.set(prop, comp)
    return handler


def _elements(s: _Session, v: str) -> None:
    text = v.strip().lstrip("[").rstrip("]")
    symbols = []
    for item in text.replace(",", " ").split():
        try:
            symbols.append(element(item).symbol)
        except ValueError:
            continue
    if symbols:
        s.props.set(P.ElementList, ", ".join(symbols))


def _resolution(s: _Session, v: str) -> None:
    s.set_number(P.Resolution, v)
    s.props.set(P.ResolutionLine, E_MNKA)


def _shaping(s: _Session, v: str) -> None:
    code = int(v)
    if code in SHAPING_TIMES:
        s.props.set(P.PulseProcessTime, SHAPING_TIMES[code])


def _ignore(s: _Session, v: str) -> None:
    pass


def _number(prop) -> Callable[[_Session, str], None]:
    def handler(s: _Session, v: str) -> None:
        s.set_number(prop, v)
    return handler


def _text(prop) -> Callable[[_Session, str], None]:
    def handler(s: _Session, v: str) -> None:
        s.set_text(prop, v)
    return handler


TAGS: dict[str, Callable[[_Session, str], None]] = {
    "#FORMAT": _format,
    "#VERSION": _version,
    "#TITLE": _title,
    "#DATE": lambda s, v: s.set_date(v),
    "#TIME": lambda s, v: s.set_time(v),
    "#OWNER": _text(P.InstrumentOperator),
    "#NPOINTS": _npoints,
    "#NCOLUMNS": _ignore,
    "#XUNITS": _xunits,
    "#YUNITS": _yunits,
    "#XLABEL": _ignore,
    "#YLABEL": _ignore,
    "#DATATYPE": _datatype,
    "#XPERCHAN": _number(P.EnergyScale),
    "#OFFSET": _number(P.EnergyOffset),
    "#CHOFFSET": _ignore,
    "#SIGNALTYPE": _text(P.SignalType),
    "#COMMENT": _comment,
    "#SPECIMEN": _text(P.SpecimenDesc),
    "#BEAMKV": _number(P.BeamEnergy),
    "#EMISSION": _number(P.EmissionCurrent),
    "#PROBECUR": _beam_current,
    "#BEAMDIA": _beamdia,
    "#MAGCAM": _number(P.Magnification),
    "#CONVANGLE": _number(P.ConvergenceAngle),
    "#OPERMODE": _opermode,
    "#THICKNESS": _number(P.SpecimenThickness),
    "#XTILTSTGE": _xtilt,
    "#YTILTSTGE": _ytilt,
    "#XPOSITION": _position("X"),
    "#YPOSITION": _position("Y"),
    "#ZPOSITION": _position("Z"),
    "#DWELLTIME": _number(P.DwellTime),
    "#INTEGTIME": _number(P.IntegrationTime),
    "#COLLANGLE": _number(P.CollectionAngle),
    "#ELSDET": _ignore,
    "#ELEVANGLE": _number(P.Elevation),
    "#AZIMANGLE": _number(P.Azimuth),
    "#SOLIDANGL": _number(P.SolidAngle),
    "#LIVETIME": _number(P.LiveTime),
    "#REALTIME": _number(P.RealTime),
    "#EDSDET": _edsdet,
    **{tag: _thickness(prop, scale) for tag, (prop, scale) in THICKNESS_TAGS.items()},
    # Custom tags
    "##D2STDCMP": _composition(P.StandardComposition),
    "##D2QUANT": _composition(P.MicroanalyticalComposition),
    "##D2ELEMS": _elements,
    "##WORKING": _number(P.WorkingDistance),
    "##WINDOW": _text(P.WindowType),
    "##MNFWHM": _resolution,
    "##SPECIMEN": _text(P.SpecimenDesc),
    "##SH_TIME": _shaping,
    "##DEAD_TM": _number(P.DeadPercent),
    "##MASSTHICK": _number(P.MassThickness),
    "##MULTISPEC": _number(P.MultiSpectrumMetric),
    "##CONDCOATING": _text(P.ConductiveCoating),
    "##IMAGE_REF": _text(P.ImageRef),
    "##SAMPLE": _text(P.SpecimenDesc),
}


def _keyword(prefix: str) -> str:
    """``'#LIVETIME  -s'`` and ``'#ELEVANGLE-dg'`` -> the bare keyword."""
    parts = prefix.strip().upper().split()
    return parts[0].split("-", 1)[0] if parts else ""


def _store(session: _Session, prefix: str, value: str) -> bool:
    """Apply one header line. Returns False once ``#SPECTRUM`` is seen."""
    keyword = _keyword(prefix)
    if keyword.startswith("#SPECTRUM"):
        return False
    handler = TAGS.get(keyword)
    if handler is None:
        if keyword.startswith("##"):
            logger.debug("Ignoring custom EMSA tag %s", keyword)
        else:
            logger.warning("Unknown tag type in EMSA file - %s", prefix.strip())
        return True
    try:
        handler(session, value.strip())
    except ValueError as e:
        logger.warning("Bad value for EMSA tag %s: %r (%s)", keyword, value.strip(), e)
    return True


def _read_channels(session: _Session, lines: list[str], scale: float) -> np.ndarray:
    values: list[float] = []
    limit = session.n_points
    item_index = 0
    for line in lines:
        if line.lstrip().upper().startswith("#ENDOFDATA"):
            break
        for item in line.split(","):
            item = item.strip()
            if not item:
                continue
            if not session.is_xy or item_index % 2 == 1:
                try:
                    values.append(scale * session.number(item))
                except ValueError:
                    logger.debug("Skipping unparseable EMSA channel value %r", item)
            item_index += 1
            if limit is not None and len(values) >= limit:
                break
        if limit is not None and len(values) >= limit:
            break
    if limit is None:
        return np.array(values, dtype=np.float64)
    if len(values) != limit:
        logger.warning("The number of data points (%d) was fewer than the reported number of channels (%d)",
                       len(values), limit)
    channels = np.zeros(limit, dtype=np.float64)
    channels[:len(values)] = values[:limit]
    return channels


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one EMSA spectrum.

    Parameters
    ----------
    data : bytes
        Complete file contents.
    config : InternalConfig
        Unused; numbers are always read with "." as the decimal point.

    Returns
    -------
    list of Spectrum
        Exactly one spectrum. A channel shortfall is logged and the
        missing channels are zero.
    """
    session = _Session()
    lines = decode_text(data).splitlines()
    idx = 0
    while idx < len(lines) and not lines[idx].strip():
        idx += 1
    in_header = True
    while in_header and idx < len(lines):
        line = lines[idx].strip()
        idx += 1
        if not line:
            continue
        colon = line.find(":")
        prefix, value = (line[:colon], line[colon + 1:]) if colon != -1 else (line, "")
        in_header = _store(session, prefix, value)

    if session.stage:
        session.props.set(P.StagePosition, session.stage)
    props = session.props
    scale = props.get_number(P.LiveTime, 1.0) if session.is_cps else 1.0
    channels = _read_channels(session, lines[idx:], scale)

    if P.EnergyScale in props:
        props.set(P.EnergyScale, props[P.EnergyScale] * session.x_unit)
    if P.EnergyOffset in props:
        props.set(P.EnergyOffset, props[P.EnergyOffset] * session.x_unit)
    return [Spectrum(channels, props)]


FORMAT = SpectrumFormat("EMSA", sniff, decode, (".msa", ".emsa", ".txt"))
