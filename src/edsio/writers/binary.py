"""Raw channel dump: big-endian int32 or float64, no header."""

from pathlib import Path
from typing import BinaryIO, Literal, Union

import numpy as np

from edsio.binary import ByteOrder, EndianWriter
from edsio.model import Spectrum

__all__ = ["write_raw", "raw_bytes"]


def raw_bytes(spectrum: Spectrum, kind: Literal["int32", "float64"] = "int32") -> bytes:
    """Channels as big-endian values; ``int32`` rounds to the nearest count."""
    if kind not in ("int32", "float64"):
        raise ValueError(f"Unsupported raw dump type: {kind}")
    data = spectrum.channels
    if kind == "int32":
        data = np.clip(np.rint(data), np.iinfo(np.int32).min, np.iinfo(np.int32).max)
    writer = EndianWriter(ByteOrder.BIG)
    writer.write_array(kind, data)
    return writer.getvalue()


def write_raw(spectrum: Spectrum, dest: Union[str, Path, BinaryIO],
              kind: Literal["int32", "float64"] = "int32") -> None:
    payload = raw_bytes(spectrum, kind)
    if isinstance(dest, (str, Path)):
        with open(dest, "wb") as f:
            f.write(payload)
    else:
        dest.write(payload)
