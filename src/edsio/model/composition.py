"""Element-to-fraction mapping attached to spectra as a property value."""

from typing import Iterator, Mapping, Union

from edsio.model.elements import Element, element

__all__ = ["Composition"]


class Composition(Mapping):
    """Immutable mapping of ``Element`` to a non-negative fraction.

    Parameters
    ----------
    fractions : mapping
        Keys may be ``Element``, symbols or atomic numbers.
    by_mass : bool
        True for mass fractions, False for mole (atomic) fractions.
    name : str, optional
        Material name, if the source file gives one.
    density : float, optional
        Density in g/cm³, if known.

    Raises
    ------
    ValueError
        If a fraction is negative or a key is not an element.
    """

    def __init__(self, fractions: Mapping[Union[Element, str, int], float] | None = None,
                 by_mass: bool = True, name: str = "", density: float | None = None):
        data = {}
        for key, value in (fractions or {}).items():
            value = float(value)
            if value < 0.0:
                raise ValueError(f"Negative fraction {value} for {key}")
            el = element(key)
            data[el] = data.get(el, 0.0) + value
        self._data = data
        self.by_mass = by_mass
        self.name = name
        self.density = density

    def __getitem__(self, key) -> float:
        return self._data[element(key)]

    def __iter__(self) -> Iterator[Element]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other):
        if not isinstance(other, Composition):
            return NotImplemented
        return self.by_mass == other.by_mass and self._data == other._data

    def __hash__(self):
        return hash((self.by_mass, frozenset(self._data.items())))

    def total(self) -> float:
        return sum(self._data.values())

    def normalized(self) -> "Composition":
        """Copy whose fractions sum to one (unchanged if empty or zero)."""
        total = self.total()
        if total <= 0.0:
            return self
        return Composition({el: v / total for el, v in self._data.items()},
                           by_mass=self.by_mass, name=self.name, density=self.density)

    def mole_fractions(self) -> dict[Element, float]:
        """Normalized atomic fractions, converting through atomic weights when by mass."""
        if self.by_mass:
            raw = {el: v / el.atomic_weight for el, v in self._data.items()}
        else:
            raw = dict(self._data)
        total = sum(raw.values())
        return {el: v / total for el, v in raw.items()} if total > 0.0 else raw

    def mass_fractions(self) -> dict[Element, float]:
        """Normalized mass fractions, converting through atomic weights when by mole."""
        if self.by_mass:
            raw = dict(self._data)
        else:
            raw = {el: v * el.atomic_weight for el, v in self._data.items()}
        total = sum(raw.values())
        return {el: v / total for el, v in raw.items()} if total > 0.0 else raw

    def __repr__(self):
        kind = "mass" if self.by_mass else "mole"
        body = ", ".join(f"{el.symbol}: {v:.4g}" for el, v in sorted(self._data.items()))
        return f"Composition({kind}; {body})"

    def to_parsable(self) -> str:
        """Render as ``name,(El:pct),...[,density]`` with fractions as percent."""
        parts = [self.name.replace(",", " ")]
        for el, frac in sorted(self._data.items()):
            parts.append(f"({el.symbol}:{100.0 * frac:.4f})")
        if self.density is not None:
            parts.append(f"{self.density:.2f}")
        return ",".join(parts)

    @classmethod
    def from_parsable(cls, text: str) -> "Composition | None":
        """Parse ``to_parsable()`` output; ``None`` when no element is found.

        Items that fail to parse are skipped.
        """
        items = text.split(",")
        fractions = {}
        density = None
        for item in items[1:]:
            item = item.strip()
            colon = item.find(":")
            try:
                if item.startswith("(") and item.endswith(")") and colon > 0:
                    fractions[element(item[1:colon].strip())] = 0.01 * float(item[colon + 1:-1])
                else:
                    density = float(item)
            except ValueError:
                continue
        if not fractions:
            return None
        return cls(fractions, by_mass=True, name=items[0].strip(), density=density)
