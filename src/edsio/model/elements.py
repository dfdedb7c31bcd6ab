"""Chemical element lookup by symbol or atomic number."""

from typing import Union

__all__ = ["Element", "element"]

_SYMBOLS = (
    "H", "He", "Li", "Be", "B", "C", "N", "O", "F", "Ne",
    "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar", "K", "Ca",
    "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni", "Cu", "Zn",
    "Ga", "Ge", "As", "Se", "Br", "Kr", "Rb", "Sr", "Y", "Zr",
    "Nb", "Mo", "Tc", "Ru", "Rh", "Pd", "Ag", "Cd", "In", "Sn",
    "Sb", "Te", "I", "Xe", "Cs", "Ba", "La", "Ce", "Pr", "Nd",
    "Pm", "Sm", "Eu", "Gd", "Tb", "Dy", "Ho", "Er", "Tm", "Yb",
    "Lu", "Hf", "Ta", "W", "Re", "Os", "Ir", "Pt", "Au", "Hg",
    "Tl", "Pb", "Bi", "Po", "At", "Rn", "Fr", "Ra", "Ac", "Th",
    "Pa", "U", "Np", "Pu", "Am", "Cm", "Bk", "Cf", "Es",
)

# Standard atomic weights (g/mol); mass numbers of the longest-lived isotope where none is defined
_WEIGHTS = (
    1.008, 4.0026, 6.94, 9.0122, 10.81, 12.011, 14.007, 15.999, 18.998, 20.180,
    22.990, 24.305, 26.982, 28.085, 30.974, 32.06, 35.45, 39.948, 39.098, 40.078,
    44.956, 47.867, 50.942, 51.996, 54.938, 55.845, 58.933, 58.693, 63.546, 65.38,
    69.723, 72.630, 74.922, 78.971, 79.904, 83.798, 85.468, 87.62, 88.906, 91.224,
    92.906, 95.95, 98.0, 101.07, 102.91, 106.42, 107.87, 112.41, 114.82, 118.71,
    121.76, 127.60, 126.90, 131.29, 132.91, 137.33, 138.91, 140.12, 140.91, 144.24,
    145.0, 150.36, 151.96, 157.25, 158.93, 162.50, 164.93, 167.26, 168.93, 173.05,
    174.97, 178.49, 180.95, 183.84, 186.21, 190.23, 192.22, 195.08, 196.97, 200.59,
    204.38, 207.2, 208.98, 209.0, 210.0, 222.0, 223.0, 226.0, 227.0, 232.04,
    231.04, 238.03, 237.0, 244.0, 243.0, 247.0, 247.0, 251.0, 252.0,
)

_BY_SYMBOL = {s.lower(): z for z, s in enumerate(_SYMBOLS, start=1)}


class Element:
    """An element identified by atomic number ``z`` (1..99)."""

    __slots__ = ("z",)

    def __init__(self, z: int):
        if not 1 <= z <= len(_SYMBOLS):
            raise ValueError(f"Invalid atomic number: {z}")
        self.z = int(z)

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self.z - 1]

    @property
    def atomic_weight(self) -> float:
        return _WEIGHTS[self.z - 1]

    @staticmethod
    def is_valid(z: int) -> bool:
        return 1 <= z <= len(_SYMBOLS)

    @classmethod
    def from_symbol(cls, symbol: str) -> "Element":
        try:
            return cls(_BY_SYMBOL[symbol.strip().lower()])
        except KeyError:
            raise ValueError(f"Unknown element symbol: {symbol!r}") from None

    def __eq__(self, other):
        return isinstance(other, Element) and other.z == self.z

    def __hash__(self):
        return hash(self.z)

    def __lt__(self, other):
        return self.z < other.z

    def __repr__(self):
        return f"Element({self.symbol})"

    def __str__(self):
        return self.symbol


def element(value: Union[int, str, Element]) -> Element:
    """Coerce an atomic number, a symbol or an ``Element`` to ``Element``."""
    if isinstance(value, Element):
        return value
    if isinstance(value, str):
        return Element.from_symbol(value)
    return Element(int(value))
