"""Tests for the EMSA/MAS text-tag decoder."""

from datetime import datetime

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from edsio.formats import emsa
from edsio.model import Axis, SpectrumProperty as P
from tests.helpers.samples import EMSA_TEXT, emsa_bytes_sample


def _with_lines(*replacements):
    """EMSA_TEXT with (old, new) line replacements applied."""
    text = EMSA_TEXT
    for old, new in replacements:
        assert old in text
        text = text.replace(old, new)
    return text.encode("ascii")


class TestEmsaSniff:

    def test_accepts_format_line(self):
        assert emsa.sniff(emsa_bytes_sample())

    def test_accepts_leading_blank_line(self):
        assert emsa.sniff(b"\r\n" + emsa_bytes_sample())

    def test_rejects_other_text(self):
        assert not emsa.sniff(b"Iridium Ultra\nSpectrum 1\n")


class TestEmsaDecode:

    def test_golden_values(self, internal_config):
        """keV energy axis is reported in eV."""
        s = emsa.decode(emsa_bytes_sample(), internal_config)[0]
        props = s.properties()

        np.testing.assert_array_equal(s.channels, [1.0, 2.0, 3.0, 4.0])
        assert props[P.EnergyScale] == pytest.approx(10.0)
        assert props[P.EnergyOffset] == pytest.approx(-100.0)
        assert props[P.BeamEnergy] == 20.0
        assert props[P.LiveTime] == 60.5
        assert props[P.RealTime] == 62.0
        assert props[P.Elevation] == 35.0
        assert props[P.InstrumentOperator] == "Analyst"
        assert props[P.SpectrumComment] == "Test spectrum"
        assert props[P.AcquisitionTime] == datetime(2023, 3, 14, 14, 5)

    def test_thickness_converted_from_cm(self, internal_config):
        props = emsa.decode(emsa_bytes_sample(), internal_config)[0].properties()

        assert props[P.BerylliumWindow] == pytest.approx(8.0)

    def test_detector_code_and_composition(self, internal_config):
        props = emsa.decode(emsa_bytes_sample(), internal_config)[0].properties()

        assert props[P.DetectorType] == emsa.SDD
        assert props[P.WindowType] == emsa.BE_WINDOW
        comp = props[P.StandardComposition]
        assert comp.name == "Brass"
        assert comp["Zn"] == pytest.approx(0.3)
        assert comp.density == pytest.approx(8.53)
        assert props[P.StagePosition][Axis.X] == 1.25

    def test_time_before_date(self, internal_config):
        """The timestamp is the same whichever of DATE and TIME comes first."""
        data = _with_lines(
            ("#DATE        : 14-MAR-2023\r\n#TIME        : 14:05",
             "#TIME        : 14:05\r\n#DATE        : 14-MAR-2023"),
        )
        props = emsa.decode(data, internal_config)[0].properties()

        assert props[P.AcquisitionTime] == datetime(2023, 3, 14, 14, 5)

    def test_unknown_tag_is_tolerated(self, internal_config, caplog):
        """Unknown tags are logged and the rest of the file decodes."""
        data = _with_lines(("#OWNER       : Analyst", "#FOO        : bar\r\n#OWNER       : Analyst"))

        s = emsa.decode(data, internal_config)[0]

        assert s.properties()[P.InstrumentOperator] == "Analyst"
        assert "Unknown tag type in EMSA file" in caplog.text

    def test_bad_value_skips_only_that_tag(self, internal_config):
        data = _with_lines(("#BEAMKV   -kV: 20.0", "#BEAMKV   -kV: twenty"))

        props = emsa.decode(data, internal_config)[0].properties()

        assert P.BeamEnergy not in props
        assert props[P.LiveTime] == 60.5

    def test_channel_shortfall_is_zero_filled(self, internal_config, caplog):
        data = _with_lines(("#NPOINTS     : 4", "#NPOINTS     : 6"))

        s = emsa.decode(data, internal_config)[0]

        np.testing.assert_array_equal(s.channels, [1.0, 2.0, 3.0, 4.0, 0.0, 0.0])
        assert "fewer than the reported number of channels" in caplog.text

    def test_cps_scaled_by_live_time(self, internal_config):
        data = _with_lines(("#YUNITS      : counts", "#YUNITS      : cps"))

        s = emsa.decode(data, internal_config)[0]

        assert s.counts(0) == pytest.approx(60.5)
        assert s.properties()[P.YUnits] == "Counts"

    def test_xy_data_takes_second_column(self, internal_config):
        data = _with_lines(
            ("#DATATYPE    : Y", "#DATATYPE    : XY"),
            ("1.0, 2.0,\r\n3.0, 4.0,", "0.0, 7.0\r\n0.01, 8.0\r\n0.02, 9.0\r\n0.03, 10.0"),
        )
        s = emsa.decode(data, internal_config)[0]

        np.testing.assert_array_equal(s.channels, [7.0, 8.0, 9.0, 10.0])


class TestEmsaNumberFormat:

    def test_values_ignore_csv_locale(self, internal_config, make_config):
        """EMSA numbers always use "." no matter how CSV export is configured."""
        config = make_config(DECIMAL_SEPARATOR=",")

        s = emsa.decode(emsa_bytes_sample(), config)[0]
        props = s.properties()

        assert props[P.LiveTime] == 60.5
        assert props[P.BeamEnergy] == 20.0
        np.testing.assert_array_equal(s.channels, emsa.decode(emsa_bytes_sample(), internal_config)[0].channels)

    def test_comma_decimal_is_not_a_number(self, internal_config):
        data = _with_lines(("#LIVETIME  -s: 60.5", "#LIVETIME  -s: 60,5"))

        props = emsa.decode(data, internal_config)[0].properties()

        assert P.LiveTime not in props
