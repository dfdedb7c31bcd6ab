"""Per-spectrum property summary as a pandas table."""

import logging
from pathlib import Path
from typing import Sequence, Union

import pandas as pd

from edsio.model import PropertyKind, Spectrum, SpectrumProperty as P

__all__ = ["summary_frame", "write_summary"]

logger = logging.getLogger(__name__)

_SCALAR_KINDS = (PropertyKind.NUMBER, PropertyKind.TEXT, PropertyKind.BOOLEAN)


def summary_frame(spectra: Sequence[Spectrum]) -> pd.DataFrame:
    """One row per spectrum: identity, channel count, total counts and scalar properties."""
    rows = []
    for spectrum in spectra:
        props = spectrum.properties()
        row = {
            "source_file_id": props.get_text(P.SourceFileId, ""),
            "name": spectrum.display_name(),
            "channels": spectrum.channel_count(),
            "total_counts": float(spectrum.channels.sum()),
        }
        for prop, value in props.items():
            if prop.kind in _SCALAR_KINDS and prop not in (P.SourceFileId, P.SpectrumDisplayName):
                row[prop.name] = value
            elif prop.kind is PropertyKind.TIMESTAMP:
                row[prop.name] = value.isoformat()
        rows.append(row)
    return pd.DataFrame(rows)


def write_summary(spectra: Sequence[Spectrum], path: Union[str, Path]) -> Path:
    """Write the summary as Parquet, or CSV when ``path`` ends in ``.csv``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = summary_frame(spectra)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        df.to_parquet(path, engine="pyarrow", index=False)
    logger.info("Exported %d spectrum rows to: %s", len(df), path)
    return path
