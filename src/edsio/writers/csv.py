"""Tabular channel export via pandas."""

from pathlib import Path
from typing import Optional, TextIO, Union

from edsio.model import PropertyKind, Spectrum
from edsio.schemas import InternalConfig, default_config

__all__ = ["write_csv", "csv_text"]


def _header_lines(spectrum: Spectrum, decimal: str) -> list[str]:
    lines = []
    for prop, value in spectrum.properties().items():
        if prop.kind is PropertyKind.NUMBER:
            text = str(value).replace(".", decimal)
        elif prop.kind in (PropertyKind.TEXT, PropertyKind.BOOLEAN):
            text = str(value).replace("\r", " ").replace("\n", " ")
        elif prop.kind is PropertyKind.TIMESTAMP:
            text = value.isoformat()
        elif prop.kind is PropertyKind.COMPOSITION:
            text = value.to_parsable()
        else:
            continue
        unit = f" ({prop.unit})" if prop.unit else ""
        lines.append(f"# {prop.label}{unit}: {text}")
    return lines


def csv_text(spectrum: Spectrum, include_properties: bool = True,
             config: Optional[InternalConfig] = None) -> str:
    """Render ``channel,energy,counts`` rows.

    With ``include_properties`` the table is preceded by ``#`` comment
    lines, one per scalar property; ``pandas.read_csv(..., comment="#")``
    reads the table back. ``config.csv`` picks the decimal and field
    separators (default ``.`` and ``,``).
    """
    layout = (config or default_config()).csv
    table = spectrum.to_frame().to_csv(
        index=False, lineterminator="\n", sep=layout.field_separator, decimal=layout.decimal_separator,
    )
    if not include_properties:
        return table
    header = _header_lines(spectrum, layout.decimal_separator)
    return "\n".join(header) + ("\n" if header else "") + table


def write_csv(spectrum: Spectrum, dest: Union[str, Path, TextIO], include_properties: bool = True,
              config: Optional[InternalConfig] = None) -> None:
    text = csv_text(spectrum, include_properties, config)
    if isinstance(dest, (str, Path)):
        with open(dest, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    else:
        dest.write(text)
