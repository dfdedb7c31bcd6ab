"""Endian-aware scalar readers and writers.

Two readers cover the vendor formats:

- ``EndianReader``: random access over an in-memory buffer or a seekable
  stream, byte order selectable (and switchable mid-file, which TIFF needs).
- ``LittleEndianStream``: forward-only little-endian reader over any
  file-like object that only offers ``read()``. Layouts read strictly front
  to back (Radiant SPD) use it.

``EndianWriter`` is the inverse of ``EndianReader`` and is what the export
writers and the test builders use to lay bytes down.

A short read is always an error (``EOFError``); there is no partial value.
"""

import io
import struct
from enum import Enum
from typing import BinaryIO, Union

import numpy as np

__all__ = ["ByteOrder", "EndianReader", "LittleEndianStream", "EndianWriter"]


class ByteOrder(str, Enum):
    """Byte order of a binary field."""
    BIG = "big"
    LITTLE = "little"

    @property
    def prefix(self) -> str:
        """``struct`` / numpy byte order character."""
        return ">" if self is ByteOrder.BIG else "<"


_SCALARS = {
    "int8": "b",
    "uint8": "B",
    "int16": "h",
    "uint16": "H",
    "int32": "i",
    "uint32": "I",
    "int64": "q",
    "float32": "f",
    "float64": "d",
}


class EndianReader:
    """Random-access reader with a selectable byte order.

    Parameters
    ----------
    source : bytes or binary file object
        Raw bytes are wrapped in ``io.BytesIO``. A file object must be
        seekable; the reader does not close it.
    order : ByteOrder
        Initial byte order. May be changed at any time via ``order``.

    Examples
    --------
    >>> r = EndianReader(b"\\x00\\x01\\x02\\x00", ByteOrder.BIG)
    >>> r.read_int16()
    1
    >>> r.order = ByteOrder.LITTLE
    >>> r.read_int16()
    2
    """

    def __init__(self, source: Union[bytes, bytearray, BinaryIO],
                 order: ByteOrder = ByteOrder.BIG):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self.order = ByteOrder(order)
        pos = self._stream.tell()
        self._length = self._stream.seek(0, io.SEEK_END)
        self._stream.seek(pos)

    @property
    def length(self) -> int:
        return self._length

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, pos: int) -> None:
        if pos < 0:
            raise ValueError(f"Negative seek position {pos}")
        self._stream.seek(pos)

    def skip(self, n: int) -> None:
        self._stream.seek(n, io.SEEK_CUR)

    def remaining(self) -> int:
        return self._length - self._stream.tell()

    def read_fully(self, n: int) -> bytes:
        """Read exactly ``n`` bytes or raise ``EOFError``."""
        if n < 0:
            raise ValueError(f"Negative read length {n}")
        pos = self._stream.tell()
        data = self._stream.read(n)
        if len(data) != n:
            raise EOFError(f"Short read at offset {pos}: wanted {n} bytes, got {len(data)}")
        return data

    def _scalar(self, code: str):
        size = struct.calcsize(code)
        return struct.unpack(self.order.prefix + code, self.read_fully(size))[0]

    def read_int8(self) -> int:
        return self._scalar("b")

    def read_uint8(self) -> int:
        return self._scalar("B")

    def read_int16(self) -> int:
        return self._scalar("h")

    def read_uint16(self) -> int:
        return self._scalar("H")

    def read_int32(self) -> int:
        return self._scalar("i")

    def read_uint32(self) -> int:
        return self._scalar("I")

    def read_int64(self) -> int:
        return self._scalar("q")

    def read_float32(self) -> float:
        return self._scalar("f")

    def read_float64(self) -> float:
        return self._scalar("d")

    def read_array(self, kind: str, count: int) -> np.ndarray:
        """Read ``count`` values of scalar ``kind`` (e.g. ``"int32"``).

        The result is a native-order numpy array.
        """
        dtype = np.dtype(self.order.prefix + _SCALARS[kind])
        data = self.read_fully(dtype.itemsize * count)
        return np.frombuffer(data, dtype=dtype).astype(dtype.newbyteorder("="))

    def read_chars(self, n: int, encoding: str = "latin-1") -> str:
        """Read a fixed-width text field, dropping everything from the first NUL."""
        raw = self.read_fully(n)
        return raw.split(b"\x00", 1)[0].decode(encoding).strip()

    def read_pascal(self, n_max: int) -> str:
        """Read a length-prefixed text field of fixed capacity ``n_max``.

        One signed length byte, ``n_max`` bytes of storage, plus one pad
        byte when ``n_max`` is even so records stay word aligned.
        """
        n = min(self.read_int8(), n_max)
        raw = self.read_fully(n_max)
        if n_max % 2 == 0:
            self.read_fully(1)
        return raw[:max(n, 0)].decode("latin-1")


class LittleEndianStream:
    """Forward-only little-endian reader over a ``read()``-able stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._pos = 0

    def tell(self) -> int:
        return self._pos

    def read_fully(self, n: int) -> bytes:
        data = self._stream.read(n)
        if len(data) != n:
            raise EOFError(f"Short read at offset {self._pos}: wanted {n} bytes, got {len(data)}")
        self._pos += n
        return data

    def skip(self, n: int) -> None:
        self.read_fully(n)

    def _scalar(self, code: str):
        return struct.unpack("<" + code, self.read_fully(struct.calcsize(code)))[0]

    def read_uint8(self) -> int:
        return self._scalar("B")

    def read_int16(self) -> int:
        return self._scalar("h")

    def read_uint16(self) -> int:
        return self._scalar("H")

    def read_int32(self) -> int:
        return self._scalar("i")

    def read_int64(self) -> int:
        return self._scalar("q")

    def read_float32(self) -> float:
        return self._scalar("f")

    def read_float64(self) -> float:
        return self._scalar("d")

    def read_array(self, kind: str, count: int) -> np.ndarray:
        """Read ``count`` little-endian values of ``kind`` as a native-order array."""
        dtype = np.dtype("<" + _SCALARS[kind])
        data = self.read_fully(dtype.itemsize * count)
        return np.frombuffer(data, dtype=dtype).astype(dtype.newbyteorder("="))


class EndianWriter:
    """Sequential writer, the inverse of ``EndianReader``.

    Writes into an owned ``io.BytesIO`` unless a writable stream is given;
    ``getvalue()`` is only available for the owned buffer.
    """

    def __init__(self, order: ByteOrder = ByteOrder.BIG, stream: BinaryIO | None = None):
        self.order = ByteOrder(order)
        self._stream = stream if stream is not None else io.BytesIO()

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, pos: int) -> None:
        self._stream.seek(pos)

    def getvalue(self) -> bytes:
        return self._stream.getvalue()

    def write_bytes(self, data: bytes) -> None:
        self._stream.write(data)

    def pad(self, n: int, fill: int = 0) -> None:
        self._stream.write(bytes([fill]) * n)

    def _scalar(self, code: str, value) -> None:
        self._stream.write(struct.pack(self.order.prefix + code, value))

    def write_int8(self, v: int) -> None:
        self._scalar("b", v)

    def write_uint8(self, v: int) -> None:
        self._scalar("B", v)

    def write_int16(self, v: int) -> None:
        self._scalar("h", v)

    def write_uint16(self, v: int) -> None:
        self._scalar("H", v)

    def write_int32(self, v: int) -> None:
        self._scalar("i", v)

    def write_uint32(self, v: int) -> None:
        self._scalar("I", v)

    def write_int64(self, v: int) -> None:
        self._scalar("q", v)

    def write_float32(self, v: float) -> None:
        self._scalar("f", v)

    def write_float64(self, v: float) -> None:
        self._scalar("d", v)

    def write_array(self, kind: str, values) -> None:
        dtype = np.dtype(self.order.prefix + _SCALARS[kind])
        self._stream.write(np.asarray(values).astype(dtype).tobytes())

    def write_chars(self, text: str, n: int, encoding: str = "latin-1") -> None:
        """Write ``text`` into a NUL-padded field of exactly ``n`` bytes."""
        raw = text.encode(encoding, errors="replace")[:n]
        self._stream.write(raw + b"\x00" * (n - len(raw)))

    def write_pascal(self, text: str, n_max: int) -> None:
        raw = text.encode("latin-1", errors="replace")[:n_max]
        self.write_int8(len(raw))
        self._stream.write(raw + b"\x00" * (n_max - len(raw)))
        if n_max % 2 == 0:
            self._stream.write(b"\x00")
