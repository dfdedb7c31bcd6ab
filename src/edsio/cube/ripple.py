"""Random-access reader/writer for Ripple raw cubes.

The raw file holds ``height x width`` pixels, each a vector of ``depth``
samples (``record-by vector``). ``RippleFile`` keeps a ``(row, col, item)``
cursor that every read and write advances; the cursor wraps from the last
item of a pixel to the next pixel and from the last column to the next
row. End of file is the cursor ``(height, 0, 0)``.

One ``RippleFile`` owns one open handle and one cursor. Use a separate
instance per thread.
"""

import logging
import numbers
from pathlib import Path
from typing import Union

import numpy as np
import xarray as xr

from edsio.binary import EndianReader, EndianWriter
from edsio.contracts import CubeFormatError, CubeTypeError
from edsio.cube.header import RippleHeader

__all__ = ["RippleFile", "find_raw"]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_SIGNED = {1: "int8", 2: "int16", 4: "int32"}
_UNSIGNED = {1: "uint8", 2: "uint16", 4: "uint32"}


def find_raw(rpl_path: PathLike) -> Path:
    """Locate the raw file that belongs to a ``.rpl`` header.

    Tries ``name.raw``, ``name.RAW`` and then ``name`` with no extension.

    Raises
    ------
    FileNotFoundError
        If none exists.
    """
    rpl = Path(rpl_path)
    for candidate in (rpl.with_suffix(".raw"), rpl.with_suffix(".RAW"), rpl.with_suffix("")):
        if candidate != rpl and candidate.exists():
            return candidate
    raise FileNotFoundError(f"Unable to find a raw file to associate with {rpl}")


class RippleFile:
    """An open Ripple cube.

    Use ``RippleFile.open`` for an existing header/raw pair and
    ``RippleFile.create`` for a new one. Instances are context managers.

    Parameters
    ----------
    header : RippleHeader
        Validated geometry and encoding.
    raw_path : path
        Raw data file.
    mode : {"r", "r+", "w"}
        ``r`` read only, ``r+`` read/write of an existing file, ``w``
        create or truncate.
    rpl_path : path, optional
        Header file the cube was opened from, kept for provenance.

    Raises
    ------
    CubeFormatError
        When opening an existing raw file whose size disagrees with the
        header.
    """

    def __init__(self, header: RippleHeader, raw_path: PathLike, mode: str = "r",
                 rpl_path: PathLike | None = None):
        if mode not in ("r", "r+", "w"):
            raise ValueError(f"Unsupported mode {mode!r}")
        self.header = header
        self.raw_path = Path(raw_path)
        self.rpl_path = Path(rpl_path) if rpl_path is not None else None
        self.mode = mode
        if mode != "w":
            size = self.raw_path.stat().st_size
            if size != header.file_size:
                raise CubeFormatError(
                    f"Raw file {self.raw_path} is {size} bytes; header requires {header.file_size} "
                    f"({header.width}x{header.height}x{header.depth}x{header.data_length} + {header.offset})"
                )
        self._file = open(self.raw_path, {"r": "rb", "r+": "r+b", "w": "w+b"}[mode])
        self._reader = EndianReader(self._file, header.order)
        self._writer = EndianWriter(header.order, self._file)
        self._row = 0
        self._col = 0
        self._item = 0
        self._file.seek(header.offset)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def open(cls, rpl_path: PathLike, raw_path: PathLike | None = None, mode: str = "r") -> "RippleFile":
        """Open an existing cube from its header file.

        Raises
        ------
        CubeFormatError
            Invalid header, or raw size mismatch.
        FileNotFoundError
            Missing header or raw file.
        """
        rpl_path = Path(rpl_path)
        header = RippleHeader.parse(rpl_path.read_text(encoding="latin-1"))
        raw = Path(raw_path) if raw_path is not None else find_raw(rpl_path)
        logger.debug("Opening Ripple cube %s (%dx%dx%d %s%d)", raw, header.width, header.height,
                     header.depth, header.data_type, header.data_length)
        return cls(header, raw, mode, rpl_path=rpl_path)

    @classmethod
    def create(cls, rpl_path: PathLike, raw_path: PathLike, header: RippleHeader) -> "RippleFile":
        """Write ``header`` to ``rpl_path`` and open an empty raw file for writing."""
        cube = cls(header, raw_path, "w", rpl_path=rpl_path)
        cube.write_header(rpl_path)
        return cube

    def write_header(self, rpl_path: PathLike) -> None:
        Path(rpl_path).write_text(self.header.to_text(), encoding="ascii")

    # =========================================================================
    # Resource handling
    # =========================================================================

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # =========================================================================
    # Cursor
    # =========================================================================

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def depth(self) -> int:
        return self.header.depth

    @property
    def position(self) -> tuple[int, int, int]:
        """Cursor as ``(row, col, item)``."""
        return self._row, self._col, self._item

    def is_eof(self) -> bool:
        return self.position == (self.height, 0, 0)

    def increment(self, n: int = 1) -> None:
        """Advance the cursor by ``n`` samples, carrying item -> col -> row."""
        if n < 0:
            raise ValueError(f"Cannot move the cursor backwards by {n}")
        item = self._item + n
        col = self._col + item // self.depth
        self._item = item % self.depth
        self._row += col // self.width
        self._col = col % self.width

    def seek(self, row: int, col: int, item: int = 0) -> None:
        """Move to sample ``item`` of pixel ``(row, col)``.

        Raises
        ------
        IndexError
            If the position is outside the cube.
        """
        if not (0 <= row < self.height and 0 <= col < self.width and 0 <= item < self.depth):
            raise IndexError(f"Position ({row}, {col}, {item}) outside cube "
                             f"{self.height}x{self.width}x{self.depth}")
        index = (row * self.width + col) * self.depth + item
        self._file.seek(self.header.offset + index * self.header.data_length)
        self._row, self._col, self._item = row, col, item

    def set_position(self, x: int, y: int, item: int = 0) -> None:
        """Image-style ``seek``: ``x`` is the column, ``y`` the row."""
        self.seek(y, x, item)

    # =========================================================================
    # Reading
    # =========================================================================

    def _check_readable(self, n: int = 1) -> None:
        if self.is_eof():
            raise EOFError("Read past the end of the cube")
        if self.mode == "w" and self._file.tell() + n * self.header.data_length > self._size_written():
            raise EOFError("Read past the data written so far")

    def _size_written(self) -> int:
        pos = self._file.tell()
        end = self._file.seek(0, 2)
        self._file.seek(pos)
        return end

    def read_int(self) -> int:
        """Read one integer sample, signed or unsigned per the data type.

        Raises
        ------
        CubeTypeError
            On a float cube; use ``read_double``.
        """
        if self.header.is_float:
            raise CubeTypeError("read_int on a float cube")
        self._check_readable()
        table = _UNSIGNED if self.header.data_type == "unsigned" else _SIGNED
        value = getattr(self._reader, f"read_{table[self.header.data_length]}")()
        self.increment(1)
        return value

    def read_unsigned(self) -> int:
        """Read one integer sample as unsigned regardless of the data type."""
        if self.header.is_float:
            raise CubeTypeError("read_unsigned on a float cube")
        self._check_readable()
        value = getattr(self._reader, f"read_{_UNSIGNED[self.header.data_length]}")()
        self.increment(1)
        return value

    def read_double(self) -> float:
        """Read one sample as float; integer samples are widened."""
        if not self.header.is_float:
            return float(self.read_int())
        self._check_readable()
        value = self._reader.read_float32() if self.header.data_length == 4 else self._reader.read_float64()
        self.increment(1)
        return value

    def read_ints(self, n: int) -> np.ndarray:
        return np.array([self.read_int() for _ in range(n)], dtype=np.int64)

    def read_doubles(self, n: int) -> np.ndarray:
        return np.array([self.read_double() for _ in range(n)], dtype=np.float64)

    def read_item(self) -> np.ndarray:
        """Read ``depth`` samples from the cursor (one pixel vector after ``seek``)."""
        self._check_readable(self.depth)
        values = self._reader.read_array(self.header.kind, self.depth)
        self.increment(self.depth)
        return values

    # =========================================================================
    # Writing
    # =========================================================================

    def _check_writable(self) -> None:
        if self.mode == "r":
            raise PermissionError(f"{self.raw_path} is open read-only")
        if self.is_eof():
            raise EOFError("Write past the end of the cube")

    def _check_kind(self, value) -> None:
        if isinstance(value, (bool, np.bool_)):
            raise CubeTypeError("Booleans cannot be written to a cube")
        if self.header.is_float:
            if not isinstance(value, numbers.Real) or isinstance(value, numbers.Integral):
                raise CubeTypeError(f"Attempting to write {type(value).__name__} to a float cube")
        elif not isinstance(value, numbers.Integral):
            raise CubeTypeError(f"Attempting to write {type(value).__name__} to an integer cube")

    def _check_range(self, value: int) -> None:
        info = np.iinfo(np.dtype(self.header.kind))
        if not info.min <= value <= info.max:
            raise ValueError(f"{value} does not fit a {self.header.kind} cube")

    def write(self, value) -> None:
        """Write one sample at the cursor and advance.

        Raises
        ------
        CubeTypeError
            If an integer is written to a float cube or a float to an
            integer cube.
        ValueError
            If an integer does not fit the sample type.
        """
        self._check_kind(value)
        self._check_writable()
        if self.header.is_float:
            if self.header.data_length == 4:
                self._writer.write_float32(float(value))
            else:
                self._writer.write_float64(float(value))
        else:
            value = int(value)
            self._check_range(value)
            self._writer.write_array(self.header.kind, [value])
        self.increment(1)

    def write_many(self, values) -> None:
        """Write an array of samples; the array dtype must match the cube kind."""
        data = np.asarray(values)
        if data.dtype.kind == "b":
            raise CubeTypeError("Booleans cannot be written to a cube")
        if self.header.is_float and data.dtype.kind != "f":
            raise CubeTypeError(f"Attempting to write {data.dtype} samples to a float cube")
        if not self.header.is_float and data.dtype.kind not in "iu":
            raise CubeTypeError(f"Attempting to write {data.dtype} samples to an integer cube")
        if not self.header.is_float and data.size:
            self._check_range(int(data.min()))
            self._check_range(int(data.max()))
        remaining = (self.height - self._row) * self.width * self.depth - self._col * self.depth - self._item
        if data.size > remaining:
            raise EOFError(f"Writing {data.size} samples overruns the cube by {data.size - remaining}")
        self._check_writable()
        self._writer.write_array(self.header.kind, data.ravel())
        self.increment(int(data.size))

    # =========================================================================
    # Whole-cube access
    # =========================================================================

    def to_dataarray(self) -> xr.DataArray:
        """Whole cube as a ``(row, column, channel)`` DataArray in native byte order."""
        pos = self._file.tell()
        self._file.seek(self.header.offset)
        raw = self._file.read(self.header.payload_size)
        self._file.seek(pos)
        if len(raw) != self.header.payload_size:
            raise EOFError(f"Cube payload is {len(raw)} bytes, expected {self.header.payload_size}")
        data = np.frombuffer(raw, dtype=self.header.dtype)
        data = data.astype(data.dtype.newbyteorder("=")).reshape(self.height, self.width, self.depth)
        return xr.DataArray(
            data,
            dims=("row", "column", "channel"),
            coords={"row": np.arange(self.height), "column": np.arange(self.width),
                    "channel": np.arange(self.depth)},
            name=self.rpl_path.stem if self.rpl_path is not None else self.raw_path.stem,
            attrs={"data_type": self.header.data_type, "data_length": self.header.data_length},
        )

    def __repr__(self):
        state = "closed" if self.closed else f"at {self.position}"
        return (f"RippleFile({self.raw_path.name!r}, {self.height}x{self.width}x{self.depth} "
                f"{self.header.kind}, {state})")
