"""Tests for the ASPEX TIFF decoder and the TIFF container reader."""

from datetime import datetime

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from edsio.contracts import StructuralCorruption
from edsio.formats import aspex
from edsio.formats.tiff import TiffDirectory, TiffField, TiffType, encode_tiff, gray_image_fields, read_directories
from edsio.model import Axis, Element, SpectrumProperty as P
from tests.helpers.samples import ASPEX_DESCRIPTION, aspex_bytes


class TestAspexSniff:

    def test_accepts_sample(self):
        assert aspex.sniff(aspex_bytes())

    def test_rejects_plain_tiff(self):
        """A TIFF without SPECTRAL_DATA is someone else's image."""
        ifd = TiffDirectory()
        ifd.add(TiffField.ascii(aspex.IMAGE_DESCRIPTION, "just an image"))
        assert not aspex.sniff(encode_tiff([ifd]))


class TestAspexDecode:

    def test_channels_and_calibration(self, internal_config):
        s = aspex.decode(aspex_bytes(), internal_config)[0]
        props = s.properties()

        np.testing.assert_array_equal(s.channels, [5.0, 10.0, 15.0, 20.0])
        assert props[P.EnergyScale] == 5.0
        assert props[P.EnergyOffset] == -10.0
        assert props[P.Software] == "ASPEX PSEM"

    def test_description_values(self, internal_config):
        props = aspex.decode(aspex_bytes(), internal_config)[0].properties()

        assert props[P.LiveTime] == 60.0
        assert props[P.RealTime] == 65.5
        assert props[P.ProbeCurrent] == 1.25
        assert props[P.BeamEnergy] == 20.0
        assert props[P.SpecimenDesc] == "#[7]"
        assert props[P.SpectrumDisplayName] == "Particle 7"
        assert props[P.StagePosition][Axis.X] == 12.5
        assert props[P.StagePosition][Axis.Y] == -3.25

    def test_two_digit_year_and_pm_time(self, internal_config):
        props = aspex.decode(aspex_bytes(), internal_config)[0].properties()

        assert props[P.AcquisitionTime] == datetime(2023, 3, 14, 14, 5, 9)

    def test_element_percent_is_atomic_and_normalized(self, internal_config):
        comp = aspex.decode(aspex_bytes(), internal_config)[0].properties()[P.StandardComposition]

        assert comp.by_mass is False
        assert comp[Element(26)] == pytest.approx(0.5)
        assert comp.total() == pytest.approx(1.0)

    def test_bogus_elevation_is_corrected(self, internal_config):
        """The misreported 57 degree elevation becomes 37 by default."""
        props = aspex.decode(aspex_bytes(), internal_config)[0].properties()

        assert props[P.Elevation] == 37.0

    def test_elevation_correction_can_be_disabled(self, make_config):
        config = make_config(FIX_ELEVATION=False)

        props = aspex.decode(aspex_bytes(), config)[0].properties()

        assert props[P.Elevation] == 57.0

    def test_default_elevation_when_absent(self, make_config):
        description = ASPEX_DESCRIPTION.replace("take_off_angle=57\n", "")
        config = make_config(DEFAULT_ELEVATION=40)

        props = aspex.decode(aspex_bytes(description=description), config)[0].properties()

        assert props[P.Elevation] == 40.0

    def test_values_ignore_csv_locale(self, make_config):
        """Calibration and description numbers always use "." decimals."""
        config = make_config(DECIMAL_SEPARATOR=",")

        props = aspex.decode(aspex_bytes(), config)[0].properties()

        assert props[P.EnergyScale] == 5.0
        assert props[P.EnergyOffset] == -10.0
        assert props[P.RealTime] == 65.5
        assert props[P.ProbeCurrent] == 1.25
        assert props[P.StagePosition][Axis.Y] == -3.25

    def test_unknown_description_key_is_logged(self, internal_config, caplog):
        description = ASPEX_DESCRIPTION + "\nmystery_key=1"

        aspex.decode(aspex_bytes(description=description), internal_config)

        assert "Unknown ASPEX image description tag: mystery_key" in caplog.text

    def test_micro_image_is_loaded(self, internal_config):
        ifd = TiffDirectory()
        ifd.add(TiffField.numbers(aspex.SPECTRAL_DATA, TiffType.SLONG, [1, 2]))
        raster = np.arange(12, dtype=np.uint8).reshape(3, 4)
        gray_image_fields(ifd, raster)

        props = aspex.decode(encode_tiff([ifd]), internal_config)[0].properties()

        np.testing.assert_array_equal(props[P.MicroImage], raster)


class TestTiffChain:

    def test_multiple_directories(self):
        first, second = TiffDirectory(), TiffDirectory()
        first.add(TiffField.ascii(270, "one"))
        second.add(TiffField.ascii(270, "two"))

        directories = read_directories(encode_tiff([first, second]), 64)

        assert [d.get(270).as_string() for d in directories] == ["one", "two"]

    def test_chain_is_bounded(self):
        dirs = [TiffDirectory() for _ in range(5)]
        for d in dirs:
            d.add(TiffField.numbers(256, TiffType.SHORT, [1]))

        assert len(read_directories(encode_tiff(dirs), 3)) == 3

    def test_cycle_is_corruption(self):
        ifd = TiffDirectory()
        ifd.add(TiffField.numbers(256, TiffType.SHORT, [1]))
        data = bytearray(encode_tiff([ifd]))
        start = int.from_bytes(data[4:8], "little")
        # point the directory's next link back at itself
        link = start + 2 + 12
        data[link:link + 4] = start.to_bytes(4, "little")

        with pytest.raises(StructuralCorruption, match="loops"):
            read_directories(bytes(data), 64)

    def test_not_a_tiff(self):
        with pytest.raises(StructuralCorruption, match="Not a TIFF file"):
            read_directories(b"GIF89a" + b"\x00" * 10, 64)
