"""ASPEX spectrum/image TIFF decoder.

The spectrum rides in private tags of the first directory:

=======  ===============  ======================================
Tag      Name             Content
=======  ===============  ======================================
0x8352   SPECTRAL_DATA    channel counts (any integer or float type)
0x8353   SPECTRAL_XRES    eV/channel, ASCII
0x8354   SPECTRAL_XOFF    zero offset in eV, ASCII
0x8355   SPECTRAL_YRES    count scale, ASCII
0x8356   SPECTRAL_YOFF    count offset, ASCII
=======  ===============  ======================================

Acquisition metadata is ``key=value`` lines in IMAGE_DESCRIPTION (270).
"""

import logging
from datetime import date, time

import numpy as np

from edsio.contracts import require
from edsio.formats.base import SpectrumFormat
from edsio.formats.text import combine, parse_duration, parse_number
from edsio.formats.tiff import LITTLE_MAGIC, read_directories, read_gray_image
from edsio.model import (
    Composition, PropertyBag, Spectrum, SpectrumProperty as P, StageCoordinate, element,
)
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "SPECTRAL_DATA", "SPECTRAL_XRES", "SPECTRAL_XOFF",
           "SPECTRAL_YRES", "SPECTRAL_YOFF", "IMAGE_DESCRIPTION", "SOFTWARE"]

logger = logging.getLogger(__name__)

SPECTRAL_DATA = 0x8352
SPECTRAL_XRES = 0x8353
SPECTRAL_XOFF = 0x8354
SPECTRAL_YRES = 0x8355
SPECTRAL_YOFF = 0x8356
IMAGE_DESCRIPTION = 270
SOFTWARE = 305

# Known image description keys with no spectrum property
IGNORED_KEYS = frozenset((
    "dead_percent", "type4et", "composition", "peak_label", "pixel_size", "display_mag", "afa",
    "field#", "magfield#", "x_abs", "y_abs", "x_cg", "y_cg", "x_feret", "y_feret", "dmax", "dmin",
    "dperp", "aspect", "area", "perimeter", "orientation", "mag_index", "action", "first_elem",
    "second_elem", "third_elem", "fourth_elem", "first_conc", "second_conc", "third_conc",
    "fourth_conc", "first_pct", "second_pct", "third_pct", "fourth_pct", "video", "counts",
    "type(4et)#", "density", "psem_class", "sample_description", "sample_group", "instrument",
    "prepmethod_name", "prepsample_name", "analysis_name", "rasterbox", "about", "location0",
    "user_masthead", "void_area", "void_count", "edge_roughness", "rms_video", "roundness",
    "formfactor", "ecd", "skel", "hull_area", "hull_perim", "part_attrib", "x_dac", "y_dac", "dave",
))


def sniff(data: bytes) -> bool:
    """Little-endian TIFF whose first directory carries SPECTRAL_DATA."""
    if data[:4] != LITTLE_MAGIC:
        return False
    directories = read_directories(data, 1)
    return bool(directories) and SPECTRAL_DATA in directories[0]


class _Description:
    """Interprets IMAGE_DESCRIPTION lines into a property bag."""

    def __init__(self, props: PropertyBag, config: InternalConfig):
        self.props = props
        self.config = config
        self.stage = StageCoordinate()
        self.atomic: dict = {}
        self.pending_time: time | None = None
        self.handlers = {
            "live_time": lambda v: props.set(P.LiveTime, parse_duration(v)),
            "acquisition_time": lambda v: props.set(P.RealTime, parse_duration(v)),
            "beam_current": self.number(P.ProbeCurrent),
            "probe_current": self.number(P.ProbeCurrent),
            "element_percent": self.element_percent,
            "mag": self.number(P.Magnification),
            "zoom": self.number(P.MagnificationZoom),
            "spot_size": self.number(P.SpotSize),
            "accelerating_voltage": self.number(P.BeamEnergy),
            "beam_energy": self.number(P.BeamEnergy),
            "working_distance": self.number(P.WorkingDistance),
            "analysis_date": self.analysis_date,
            "analysis_time": self.analysis_time,
            "sample_number": self.text(P.SampleId),
            "client_number": self.text(P.ClientsSampleID),
            "client_name": self.text(P.ClientName),
            "project_number": self.text(P.ProjectName),
            "comment": self.text(P.SpectrumComment),
            "caption": self.specimen,
            "description": self.specimen,
            "part#": self.part,
            "beam_x": self.number(P.BeamSpotX),
            "beam_y": self.number(P.BeamSpotY),
            "operator": self.text(P.InstrumentOperator),
            "take_off_angle": self.elevation,
            "detector_tilt": self.elevation,
        }
        for axis in "xyzrtb":
            self.handlers[f"stage_{axis}"] = self.stage_axis(axis.upper())

    def number(self, prop):
        return lambda v: self.props.set(prop, parse_number(v))

    def text(self, prop):
        def handler(v):
            if v:
                self.props.set(prop, v)
        return handler

    def stage_axis(self, axis):
        return lambda v: self.stage.set(axis, parse_number(v))

    def element_percent(self, v):
        symbol, sep, pct = v.partition(",")
        if sep:
            self.atomic[element(symbol.strip())] = parse_number(pct)

    def specimen(self, v):
        if v:
            self.props.prepend_text(P.SpecimenDesc, v, separator=" ")

    def part(self, v):
        if v:
            self.props.append_text(P.SpecimenDesc, f"#[{v}]", separator=" ")

    def elevation(self, v):
        value = parse_number(v)
        corrections = self.config.corrections
        if corrections.fix_elevation and value == corrections.bogus_elevation:
            value = corrections.corrected_elevation
        self.props.set(P.Elevation, value)

    def analysis_date(self, v):
        """``MM/DD/YYYY``; two digit years below 80 are 20xx."""
        month, day, year = (int(item) for item in v.split("/"))
        if year < 100:
            year += 2000 if year < 80 else 1900
        stored = self.props.get(P.AcquisitionTime)
        self.props.set(P.AcquisitionTime, combine(stored, date=date(year, month, day), tod=self.pending_time))
        self.pending_time = None

    def analysis_time(self, v):
        """``H:MM:SS`` with an optional AM/PM suffix."""
        clock = v.upper().replace("AM", "").replace("PM", "").strip()
        hour, minute, second = (int(item) for item in clock.split(":")[:3])
        if "PM" in v.upper() and hour < 12:
            hour += 12
        elif "AM" in v.upper() and hour == 12:
            hour = 0
        tod = time(hour, minute, second)
        stored = self.props.get(P.AcquisitionTime)
        if stored is None:
            self.pending_time = tod
        else:
            self.props.set(P.AcquisitionTime, combine(stored, tod=tod))

    def parse(self, text: str) -> None:
        for line in text.split("\n"):
            key, sep, value = line.partition("=")
            if not sep:
                continue
            key, value = key.strip().lower(), value.strip()
            handler = self.handlers.get(key)
            if handler is None:
                if key not in IGNORED_KEYS:
                    logger.warning("Unknown ASPEX image description tag: %s=%s", key, value)
                continue
            try:
                handler(value)
            except ValueError as e:
                logger.warning("Bad value for ASPEX tag %s: %r (%s)", key, value, e)
        self.finish()

    def finish(self) -> None:
        props = self.props
        if self.atomic:
            comp = Composition(self.atomic, by_mass=False).normalized()
            if len(comp) == 1:
                comp.name = "Pure " + next(iter(comp)).symbol
            props.set(P.StandardComposition, comp)
        if P.Elevation not in props:
            props.set(P.Elevation, self.config.corrections.default_elevation)
        if self.stage:
            props.set(P.StagePosition, self.stage)
        comment = props.get_text(P.SpectrumComment)
        if comment and len(comment) > 1:
            props.set(P.SpectrumDisplayName, comment)


def _ascii_number(ifd, tag, default: float) -> float:
    f = ifd.get(tag)
    if f is None:
        return default
    try:
        return parse_number(f.as_string())
    except ValueError:
        logger.debug("Unparseable ASPEX calibration tag 0x%04x: %r", tag, f.as_string())
        return default


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode the spectrum (and 8-bit micro image, if any) of an ASPEX TIFF."""
    directories = read_directories(data, config.decode.max_directories)
    require(bool(directories), "TIFF file has no image directories", offset=4)
    ifd = directories[0]
    props = PropertyBag()
    props.set(P.EnergyScale, _ascii_number(ifd, SPECTRAL_XRES, 10.0))
    props.set(P.EnergyOffset, _ascii_number(ifd, SPECTRAL_XOFF, 0.0))
    y_res = _ascii_number(ifd, SPECTRAL_YRES, 1.0)
    y_off = _ascii_number(ifd, SPECTRAL_YOFF, 0.0)

    field = ifd.get(SPECTRAL_DATA)
    require(field is not None, "Not an ASPEX spectrum: no SPECTRAL_DATA tag",
            expected=f"tag 0x{SPECTRAL_DATA:04x}", found="absent")
    channels = y_res * field.as_array().astype(np.float64) + y_off

    description = ifd.get(IMAGE_DESCRIPTION)
    if description is not None:
        _Description(props, config).parse(description.as_string())
    software = ifd.get(SOFTWARE)
    if software is not None and software.as_string():
        props.set(P.Software, software.as_string())
    image = read_gray_image(data, ifd)
    if image is not None:
        props.set(P.MicroImage, image)
    return [Spectrum(channels, props)]


FORMAT = SpectrumFormat("ASPEX TIFF", sniff, decode, (".tif", ".tiff"))
