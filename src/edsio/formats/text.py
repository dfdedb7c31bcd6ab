"""Helpers shared by the line-oriented text decoders."""

import math
import re
from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP

__all__ = ["parse_number", "parse_count", "decode_text", "text_lines", "parse_duration", "combine", "half_up", "MONTHS"]

MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

_BOMS = (b"\xef\xbb\xbf", b"\xff\xfe", b"\xfe\xff")


def decode_text(data: bytes) -> str:
    """Decode a vendor text file as Latin-1, dropping a byte order mark.

    UTF-16 files (BOM ``FF FE`` / ``FE FF``) are decoded as such.
    """
    if data.startswith(b"\xff\xfe") or data.startswith(b"\xfe\xff"):
        return data.decode("utf-16")
    if data.startswith(_BOMS[0]):
        data = data[len(_BOMS[0]):]
    return data.decode("latin-1")


def text_lines(data: bytes, limit: int | None = None) -> list[str]:
    """Split decoded text into lines (any newline convention)."""
    text = decode_text(data if limit is None else data[:limit])
    return text.splitlines()


def parse_number(text: str) -> float:
    """Parse a number written with ``.`` as the decimal point.

    A leading or exponent ``+`` is accepted. The vendor text formats are
    defined with a US number format, so this never depends on configuration.

    Raises
    ------
    ValueError
        If the text is not a number.
    """
    return float(text.strip().replace("+", ""))


def parse_count(text: str) -> int:
    return int(round(parse_number(text)))


_HMS = re.compile(r"^\s*(\d+):(\d{1,2})(?::(\d{1,2}(?:\.\d*)?))?\s*$")


def parse_duration(text: str) -> float:
    """Seconds from ``hh:mm[:ss]`` or a plain number of seconds."""
    m = _HMS.match(text)
    if m:
        hours, minutes, seconds = m.group(1), m.group(2), m.group(3) or "0"
        return 3600.0 * int(hours) + 60.0 * int(minutes) + float(seconds)
    return parse_number(text)


def combine(stored: datetime | None, *, date=None, tod: time | None = None) -> datetime:
    """Merge a date or a time of day into a previously stored timestamp.

    The component not supplied is kept from ``stored``; with nothing stored,
    a missing time of day is midnight.
    """
    if date is not None:
        tod = tod if tod is not None else (stored.time() if stored is not None else time(0, 0, 0))
        return datetime.combine(date, tod)
    if stored is None:
        raise ValueError("A time of day needs a stored date")
    return datetime.combine(stored.date(), tod)


def half_up(value: float, decimals: int, trim: bool = False) -> str:
    """Fixed-point text with half-up rounding and ``.`` as decimal point.

    With ``trim`` trailing zeros (and a bare point) are removed.

    Examples
    --------
    >>> half_up(2.5, 0), half_up(0.125, 2), half_up(1.5, 3, trim=True)
    ('3', '0.13', '1.5')
    """
    if not math.isfinite(value):
        return "0"
    quantum = Decimal(1).scaleb(-decimals)
    s = format(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP), "f")
    if trim and "." in s:
        s = s.rstrip("0").rstrip(".")
    if s.startswith("-") and not s.strip("-0."):
        s = s[1:]
    return s
