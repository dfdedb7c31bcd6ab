"""ASPEX-style spectrum TIFF writer, the inverse of ``edsio.formats.aspex``."""

from pathlib import Path
from typing import BinaryIO, Union

import numpy as np

from edsio.formats.aspex import (
    IMAGE_DESCRIPTION, SOFTWARE, SPECTRAL_DATA, SPECTRAL_XOFF, SPECTRAL_XRES, SPECTRAL_YOFF, SPECTRAL_YRES,
)
from edsio.formats.text import half_up
from edsio.formats.tiff import TiffDirectory, TiffField, TiffType, encode_tiff, gray_image_fields
from edsio.model import Spectrum, SpectrumProperty as P

__all__ = ["write_aspex_tiff", "aspex_tiff_bytes", "image_description"]

SOFTWARE_NAME = "edsio"


def image_description(spectrum: Spectrum) -> str:
    """Build the ``key=value`` IMAGE_DESCRIPTION block."""
    props = spectrum.properties()
    items: list[str] = []

    def add(key, value):
        if value is not None:
            items.append(f"{key}={value}")

    def num(key, prop, decimals):
        if prop in props:
            add(key, half_up(props[prop], decimals))

    num("live_time", P.LiveTime, 2)
    num("acquisition_time", P.RealTime, 2)
    num("probe_current", P.ProbeCurrent, 5)
    comp = props.get(P.StandardComposition)
    if comp is not None:
        for el, frac in sorted(comp.mole_fractions().items()):
            add("element_percent", f"{el.symbol},{half_up(100.0 * frac, 3)}")
    num("mag", P.Magnification, 1)
    num("zoom", P.MagnificationZoom, 4)
    stage = props.get(P.StagePosition)
    if stage is not None:
        for axis in stage:
            add(f"stage_{axis.value.lower()}", half_up(stage[axis], 4))
    num("spot_size", P.SpotSize, 1)
    num("accelerating_voltage", P.BeamEnergy, 2)
    num("working_distance", P.WorkingDistance, 2)
    when = props.get(P.AcquisitionTime)
    if when is not None:
        add("analysis_date", when.strftime("%m/%d/%Y"))
        add("analysis_time", when.strftime("%H:%M:%S"))
    for key, prop in (("sample_number", P.SampleId), ("client_number", P.ClientsSampleID),
                      ("client_name", P.ClientName), ("project_number", P.ProjectName),
                      ("comment", P.SpectrumComment), ("caption", P.SpecimenDesc)):
        add(key, props.get_text(prop))
    num("beam_x", P.BeamSpotX, 0)
    num("beam_y", P.BeamSpotY, 0)
    add("operator", props.get_text(P.InstrumentOperator, "unknown"))
    num("take_off_angle", P.Elevation, 1)
    return "\n".join(items)


def aspex_tiff_bytes(spectrum: Spectrum) -> bytes:
    """Encode one spectrum as a single-directory ASPEX TIFF.

    Channels are rounded to signed 32-bit integers. A 2-D ``MicroImage``
    raster is stored as an 8-bit grayscale strip.
    """
    ifd = TiffDirectory()
    ifd.add(TiffField.ascii(SPECTRAL_XRES, half_up(spectrum.width, 3)))
    ifd.add(TiffField.ascii(SPECTRAL_XOFF, half_up(spectrum.offset, 3)))
    ifd.add(TiffField.ascii(SPECTRAL_YRES, half_up(1.0, 3)))
    ifd.add(TiffField.ascii(SPECTRAL_YOFF, half_up(0.0, 3)))
    counts = np.clip(np.rint(spectrum.channels), np.iinfo(np.int32).min, np.iinfo(np.int32).max)
    ifd.add(TiffField.numbers(SPECTRAL_DATA, TiffType.SLONG, counts.astype(np.int32)))
    ifd.add(TiffField.ascii(IMAGE_DESCRIPTION, image_description(spectrum)))
    ifd.add(TiffField.ascii(SOFTWARE, SOFTWARE_NAME))
    image = spectrum.properties().get(P.MicroImage)
    if image is not None:
        gray_image_fields(ifd, image)
    return encode_tiff([ifd])


def write_aspex_tiff(spectrum: Spectrum, dest: Union[str, Path, BinaryIO]) -> None:
    payload = aspex_tiff_bytes(spectrum)
    if isinstance(dest, (str, Path)):
        with open(dest, "wb") as f:
            f.write(payload)
    else:
        dest.write(payload)
