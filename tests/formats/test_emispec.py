"""Tests for the EMISPEC series decoder."""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from edsio.contracts import StructuralCorruption
from edsio.formats import emispec
from edsio.model import SpectrumProperty as P
from tests.helpers.samples import emispec_bytes


class TestEmispecDecode:

    def test_sniff(self):
        assert emispec.sniff(emispec_bytes())
        assert not emispec.sniff(b"II*\x00" + b"\x00" * 10)

    def test_elements_are_summed(self, internal_config):
        """The result is the channel-wise sum of every valid element."""
        spectra = emispec.decode(emispec_bytes(), internal_config)

        assert len(spectra) == 1
        np.testing.assert_array_equal(spectra[0].channels, [11.0, 22.0, 33.0])

    def test_calibration_and_description(self, internal_config):
        props = emispec.decode(emispec_bytes(), internal_config)[0].properties()

        assert props[P.EnergyOffset] == -100.0
        assert props[P.EnergyScale] == 20.0
        assert props[P.SpecimenDesc] == "Spectrum position"

    def test_only_valid_elements_are_read(self, internal_config):
        s = emispec.decode(emispec_bytes(valid=1), internal_config)[0]

        np.testing.assert_array_equal(s.channels, [1.0, 2.0, 3.0])

    def test_integer_data_type(self, internal_config):
        s = emispec.decode(emispec_bytes(elements=((1, 2), (3, 4)), type_code=6), internal_config)[0]

        np.testing.assert_array_equal(s.channels, [4.0, 6.0])

    def test_length_mismatch_truncates(self, internal_config, caplog):
        s = emispec.decode(emispec_bytes(elements=((1.0, 2.0, 3.0), (1.0, 1.0))), internal_config)[0]

        np.testing.assert_array_equal(s.channels, [2.0, 3.0])
        assert "has 2 channels, expected 3" in caplog.text

    def test_two_dimensional_data_rejected(self, internal_config):
        with pytest.raises(StructuralCorruption, match="Two dimensional"):
            emispec.decode(emispec_bytes(data_type=emispec.TWO_DIMENSIONAL), internal_config)

    def test_complex_data_rejected(self, internal_config):
        data = bytearray(emispec_bytes(elements=((1.0,),), type_code=7))
        # overwrite the element's type code (zero, width, cal element precede it)
        start = len(data) - (26 + 4)
        data[start + 20:start + 22] = (9).to_bytes(2, "little")

        with pytest.raises(StructuralCorruption, match="complex"):
            emispec.decode(bytes(data), internal_config)

    def test_valid_count_exceeding_total(self, internal_config):
        with pytest.raises(StructuralCorruption, match="valid element count"):
            emispec.decode(emispec_bytes(valid=3), internal_config)
