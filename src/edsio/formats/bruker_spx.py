"""Bruker Esprit ``.spx`` XML spectrum decoder.

Values are looked up by element path below ``TRTSpectrum``. Energies are
in keV and times in ms in the file; window layers are attributes of the
``WindowLayers/Layer*`` elements with thicknesses in µm.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import date, time

import numpy as np

from edsio.contracts import StructuralCorruption, require
from edsio.formats.base import SpectrumFormat
from edsio.formats.text import combine, text_lines
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode"]

logger = logging.getLogger(__name__)

_HEADER = "TRTSpectrum/ClassInstance/TRTHeaderedClass/ClassInstance/"
_CALIBRATION = "TRTSpectrum/ClassInstance/ClassInstance/"
_CHANNELS = "TRTSpectrum/ClassInstance/Channels"
_SERIES_NAME = ("TRTSpectrum/ClassInstance/ChildClassInstances/ClassInstance/"
                "TRTChartConfigurationData/SeriesProperties/ClassInstance/Name")

# Element path -> property and multiplier to the property's unit
_NUMBERS = {
    _HEADER + "RealTime": (P.RealTime, 1.0e-3),
    _HEADER + "LifeTime": (P.LiveTime, 1.0e-3),
    _HEADER + "DeadTime": (P.DeadPercent, 1.0),
    _HEADER + "PrimaryEnergy": (P.BeamEnergy, 1.0),
    _HEADER + "ElevationAngle": (P.Elevation, 1.0),
    _HEADER + "ShapingTime": (P.PulseProcessTime, 1.0e-5),
    _HEADER + "DetectorThickness": (P.DetectorThickness, 1.0),
    _HEADER + "SiDeadLayerThickness": (P.DeadLayer, 1.0),
    _CALIBRATION + "CalibAbs": (P.EnergyOffset, 1000.0),
    _CALIBRATION + "CalibLin": (P.EnergyScale, 1000.0),
}
_TEXT = {
    _HEADER + "Type": P.DetectorDescription,
    _HEADER + "WindowType": P.WindowType,
    _SERIES_NAME: P.SpectrumDisplayName,
}
# Window layer atomic number -> property (thickness µm -> nm)
_LAYERS = {
    13: P.AluminumLayer,
    79: P.GoldLayer,
}


def sniff(data: bytes) -> bool:
    lines = text_lines(data, 256)[:2]
    return len(lines) == 2 and lines[0].startswith("<?xml") and lines[1].startswith("<TRTSpectrum>")


class _Document:
    """Collects properties while walking the element tree."""

    def __init__(self):
        self.props = PropertyBag()
        self.day: date | None = None
        self.tod: time | None = None
        self.n_channels: int | None = None
        self.channel_text: str | None = None

    def walk(self, node: ET.Element, path: str) -> None:
        if node.tag.startswith("Layer") and path.startswith(_HEADER + "WindowLayers/"):
            self.layer(node)
        text = (node.text or "").strip()
        if text:
            try:
                self.value(path, text)
            except ValueError as e:
                logger.warning("Bad value in Bruker SPX at %s: %r (%s)", path, text, e)
        for child in node:
            self.walk(child, f"{path}/{child.tag}")

    def value(self, path: str, text: str) -> None:
        if path in _NUMBERS:
            prop, scale = _NUMBERS[path]
            self.props.set(prop, scale * float(text))
        elif path in _TEXT:
            self.props.set(_TEXT[path], text)
        elif path == _CALIBRATION + "Date":
            day, month, year = (int(item) for item in text.split("."))
            self.day = date(year, month, day)
        elif path == _CALIBRATION + "Time":
            hour, minute, second = (int(item) for item in text.split(":"))
            self.tod = time(hour, minute, second)
        elif path == _CALIBRATION + "ChannelCount":
            self.n_channels = int(text)
        elif path == _CHANNELS:
            self.channel_text = text

    def layer(self, node: ET.Element) -> None:
        try:
            z = int(node.get("Atom", "-1"))
            thickness = float(node.get("Thickness", "0"))
        except ValueError:
            logger.warning("Bad Bruker SPX window layer attributes: %s", node.attrib)
            return
        if z <= 0 or thickness <= 0.0:
            return
        prop = _LAYERS.get(z)
        if prop is None:
            logger.debug("Ignoring Bruker SPX window layer Z=%d", z)
            return
        self.props.set(prop, 1000.0 * thickness)

    def channels(self) -> np.ndarray:
        require(self.n_channels is not None and self.n_channels > 0, "Bruker SPX has no ChannelCount",
                expected="ChannelCount > 0", found=self.n_channels)
        data = np.zeros(self.n_channels, dtype=np.float64)
        items = (self.channel_text or "").split(",")
        count = 0
        for item in items[:self.n_channels]:
            item = item.strip()
            if item:
                data[count] = float(item)
            count += 1
        if count < self.n_channels:
            logger.warning("Bruker SPX file holds %d of %d channels", count, self.n_channels)
        return data


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode one Bruker SPX spectrum.

    Raises
    ------
    StructuralCorruption
        If the XML is malformed or declares no channel count.
    """
    try:
        root = ET.fromstring(data)
    except (ET.ParseError, LookupError) as e:
        # LookupError: the XML declaration names an unknown encoding
        raise StructuralCorruption(f"Malformed Bruker SPX XML: {e}", offset=None) from e
    require(root.tag == "TRTSpectrum", "Bruker SPX root element is not TRTSpectrum",
            expected="TRTSpectrum", found=root.tag)
    doc = _Document()
    doc.walk(root, root.tag)
    try:
        channels = doc.channels()
    except ValueError as e:
        raise StructuralCorruption(f"Unparseable Bruker SPX channel data: {e}") from e
    if doc.day is not None:
        doc.props.set(P.AcquisitionTime, combine(None, date=doc.day, tod=doc.tod))
    return [Spectrum(channels, doc.props)]


FORMAT = SpectrumFormat("Bruker SPX", sniff, decode, (".spx",))
