"""Tests for decode contracts.

These tests verify the error taxonomy and the canonical spectrum contract
enforced before spectra leave the registry.
"""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from edsio.contracts import (
    ContractViolation,
    CubeFormatError,
    CubeTypeError,
    DecodeError,
    StructuralCorruption,
    UnrecognizedFormat,
    assert_canonical,
    require,
)
from edsio.model import Spectrum, SpectrumProperty as P


class TestRequire:
    """Layout invariant enforcement."""

    def test_require_passes_when_true(self):
        # Should not raise
        require(True, "never shown")

    def test_require_reports_offset_expected_found(self):
        """StructuralCorruption carries the diagnostic context."""
        with pytest.raises(StructuralCorruption, match=r"offset=32, expected=16, found=4") as info:
            require(False, "channel block runs past end of file", offset=32, expected=16, found=4)
        assert info.value.offset == 32
        assert info.value.expected == 16
        assert info.value.found == 4


class TestTaxonomy:
    """Every decode failure derives from DecodeError."""

    def test_decode_errors_share_a_base(self):
        assert issubclass(StructuralCorruption, DecodeError)
        assert issubclass(UnrecognizedFormat, DecodeError)
        assert issubclass(CubeFormatError, DecodeError)

    def test_cube_type_error_is_a_type_error(self):
        assert issubclass(CubeTypeError, TypeError)

    def test_unrecognized_format_lists_tried_sniffers(self):
        err = UnrecognizedFormat("x.bin", ["EMSA", "DTSA"])
        assert err.tried == ["EMSA", "DTSA"]
        assert "tried: EMSA, DTSA" in str(err)


class TestCanonicalContract:
    """Post-decode spectrum contract."""

    def test_valid_spectrum_passes(self):
        # Should not raise
        assert_canonical(Spectrum([1.0, 2.0], {P.EnergyScale: 10.0}))

    def test_non_spectrum_rejected(self):
        with pytest.raises(ContractViolation, match="returned list"):
            assert_canonical([1.0, 2.0])

    def test_non_finite_energy_scale_rejected(self):
        with pytest.raises(ContractViolation, match="non-finite energy scale"):
            assert_canonical(Spectrum([1.0], {P.EnergyScale: np.inf}))
