"""Tests for the canonical spectrum model."""

from datetime import datetime

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from edsio.model import (
    Axis, Composition, Element, PropertyBag, Spectrum, SpectrumProperty as P, StageCoordinate, element,
)


class TestPropertyBag:
    """Typed, sparse property storage."""

    def test_absent_property_is_absent(self):
        """A property never set is not in the bag and reads as the default."""
        bag = PropertyBag()
        assert P.LiveTime not in bag
        assert bag.get_number(P.LiveTime) is None
        assert bag.get_number(P.LiveTime, 1.0) == 1.0

    def test_none_is_rejected(self):
        """Absence is expressed by omission, never by storing None."""
        bag = PropertyBag()
        with pytest.raises(ValueError, match="Refusing to store None"):
            bag.set(P.LiveTime, None)

    def test_kind_is_enforced(self):
        """Numbers, text and timestamps only accept their own kind."""
        bag = PropertyBag()
        with pytest.raises(TypeError, match="expects a number"):
            bag.set(P.LiveTime, "60")
        with pytest.raises(TypeError, match="expects text"):
            bag.set(P.SpecimenDesc, 3)
        with pytest.raises(TypeError, match="expects a datetime"):
            bag.set(P.AcquisitionTime, "2023-01-01")

    def test_numbers_are_stored_as_float(self):
        bag = PropertyBag({P.LLD: 5})
        assert bag[P.LLD] == 5.0
        assert isinstance(bag[P.LLD], float)

    def test_reset_replaces_wholesale(self):
        """Setting a property again overwrites it."""
        bag = PropertyBag({P.SpecimenDesc: "first"})
        bag.set(P.SpecimenDesc, "second")
        assert bag[P.SpecimenDesc] == "second"

    def test_append_text_accumulates(self):
        bag = PropertyBag()
        bag.append_text(P.SpecimenDesc, "a", separator=" ")
        bag.append_text(P.SpecimenDesc, "b", separator=" ")
        bag.prepend_text(P.SpecimenDesc, "z", separator=" ")
        assert bag[P.SpecimenDesc] == "z a b"

    def test_copy_is_independent(self):
        bag = PropertyBag({P.LiveTime: 1.0})
        other = bag.copy()
        other.set(P.LiveTime, 2.0)
        assert bag[P.LiveTime] == 1.0


class TestSpectrum:
    """Canonical spectrum interface."""

    def test_channels_are_read_only_float64(self):
        s = Spectrum([1, 2, 3])
        assert s.channels.dtype == np.float64
        with pytest.raises(ValueError):
            s.channels[0] = 5.0

    def test_input_array_is_copied(self):
        """Mutating the caller's array does not change the spectrum."""
        data = np.array([1.0, 2.0])
        s = Spectrum(data)
        data[0] = 99.0
        assert s.counts(0) == 1.0

    def test_two_dimensional_data_rejected(self):
        with pytest.raises(ValueError, match="must be 1-D"):
            Spectrum(np.zeros((2, 2)))

    def test_energy_for_channel_uses_calibration(self):
        """energy = offset + i * width."""
        s = Spectrum([0, 0, 0], {P.EnergyOffset: -100.0, P.EnergyScale: 20.0})
        assert s.energy_for_channel(0) == -100.0
        assert s.energy_for_channel(2) == -60.0
        assert s.channel_for_energy(-59.0) == 2

    def test_default_calibration(self):
        """Without calibration the offset is 0 eV and the width 10 eV."""
        s = Spectrum([0, 0])
        assert s.energy_for_channel(1) == 10.0

    def test_to_dataarray_carries_properties(self):
        when = datetime(2023, 3, 14, 14, 5)
        s = Spectrum([1, 2], {P.EnergyScale: 5.0, P.SpectrumDisplayName: "x", P.AcquisitionTime: when,
                              P.StandardComposition: Composition({"Cu": 1.0})})
        da = s.to_dataarray()
        assert da.name == "x"
        np.testing.assert_array_equal(da["energy"].values, [0.0, 5.0])
        assert da.attrs["EnergyScale"] == 5.0
        assert da.attrs["AcquisitionTime"] == "2023-03-14T14:05:00"
        assert "StandardComposition" not in da.attrs

    def test_to_frame_columns(self):
        df = Spectrum([3, 4], {P.EnergyScale: 10.0}).to_frame()
        assert list(df.columns) == ["channel", "energy", "counts"]
        assert df["energy"].tolist() == [0.0, 10.0]

    def test_with_channels_copies_properties(self):
        s = Spectrum([1.0], {P.LiveTime: 2.0})
        t = s.with_channels([5.0, 6.0])
        t.properties().set(P.LiveTime, 3.0)
        assert t.channel_count() == 2
        assert s.properties()[P.LiveTime] == 2.0


class TestComposition:
    """Element fraction mappings."""

    def test_keys_accept_symbols_and_numbers(self):
        comp = Composition({"Fe": 0.5, 28: 0.5})
        assert comp[Element(26)] == 0.5
        assert comp["ni"] == 0.5

    def test_negative_fraction_rejected(self):
        with pytest.raises(ValueError, match="Negative fraction"):
            Composition({"Fe": -0.1})

    def test_parsable_round_trip(self):
        comp = Composition({"Cu": 0.7, "Zn": 0.3}, name="Brass", density=8.53)
        back = Composition.from_parsable(comp.to_parsable())
        assert back.name == "Brass"
        assert back.density == pytest.approx(8.53)
        assert back["Cu"] == pytest.approx(0.7)

    def test_from_parsable_without_elements(self):
        assert Composition.from_parsable("Nothing,here") is None

    def test_mole_fraction_conversion(self):
        """Equal masses of light and heavy elements favour the light one by mole."""
        fractions = Composition({"C": 0.5, "Au": 0.5}, by_mass=True).mole_fractions()
        assert fractions[element("C")] > 0.9
        assert sum(fractions.values()) == pytest.approx(1.0)


class TestElements:

    def test_symbol_lookup_is_case_insensitive(self):
        assert element("fe").z == 26
        assert Element(79).symbol == "Au"

    def test_invalid_atomic_number(self):
        with pytest.raises(ValueError, match="Invalid atomic number"):
            Element(0)
        assert not Element.is_valid(100)

    def test_unknown_symbol(self):
        with pytest.raises(ValueError, match="Unknown element symbol"):
            element("Xx")


class TestStageCoordinate:

    def test_absent_axis_is_not_zero(self):
        c = StageCoordinate(X=1.5)
        assert Axis.X in c
        assert Axis.Z not in c
        assert list(c) == [Axis.X]

    def test_equality(self):
        assert StageCoordinate(X=1.0, Y=2.0) == StageCoordinate({"Y": 2.0, "X": 1.0})
