"""TIFF container: image file directory (IFD) chain reader and encoder.

Only the container is handled here; the spectrum payload carried in vendor
tags is interpreted by ``edsio.formats.aspex``. Chain traversal is bounded
by the file length, a visited-offset set and ``max_directories``.
"""

import io
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from edsio.binary import ByteOrder, EndianReader, EndianWriter
from edsio.contracts import require

__all__ = [
    "LITTLE_MAGIC", "BIG_MAGIC", "TiffType", "TiffField", "TiffDirectory",
    "tiff_byte_order", "read_directories", "encode_tiff", "gray_image_fields", "read_gray_image",
]

LITTLE_MAGIC = b"II\x2a\x00"
BIG_MAGIC = b"MM\x00\x2a"


class TiffType:
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


# Bytes per item and numpy code, indexed by TiffType
_TYPES = {
    TiffType.BYTE: (1, "u1"),
    TiffType.ASCII: (1, "u1"),
    TiffType.SHORT: (2, "u2"),
    TiffType.LONG: (4, "u4"),
    TiffType.RATIONAL: (8, "u4"),
    TiffType.SBYTE: (1, "i1"),
    TiffType.UNDEFINED: (1, "u1"),
    TiffType.SSHORT: (2, "i2"),
    TiffType.SLONG: (4, "i4"),
    TiffType.SRATIONAL: (8, "i4"),
    TiffType.FLOAT: (4, "f4"),
    TiffType.DOUBLE: (8, "f8"),
}

# Baseline tags used for 8-bit grayscale strips
IMAGE_WIDTH = 256
IMAGE_LENGTH = 257
BITS_PER_SAMPLE = 258
COMPRESSION = 259
PHOTOMETRIC_INTERPRETATION = 262
STRIP_OFFSETS = 273
SAMPLES_PER_PIXEL = 277
ROWS_PER_STRIP = 278
STRIP_BYTE_COUNTS = 279
X_RESOLUTION = 282
Y_RESOLUTION = 283
RESOLUTION_UNIT = 296


@dataclass
class TiffField:
    """One directory entry with its value bytes already resolved."""
    tag: int
    type: int
    count: int
    data: bytes
    order: ByteOrder = ByteOrder.LITTLE

    def as_string(self) -> str:
        return self.data.split(b"\x00", 1)[0].decode("latin-1")

    def as_array(self) -> np.ndarray:
        """Values as a native numpy array; rationals become float64."""
        code = _TYPES[self.type][1]
        raw = np.frombuffer(self.data, dtype=np.dtype(self.order.prefix + code))
        if self.type in (TiffType.RATIONAL, TiffType.SRATIONAL):
            pairs = raw.astype(np.float64).reshape(-1, 2)
            with np.errstate(divide="ignore", invalid="ignore"):
                return pairs[:, 0] / pairs[:, 1]
        return raw.astype(raw.dtype.newbyteorder("="))

    def as_int(self) -> int:
        return int(self.as_array()[0])

    @classmethod
    def ascii(cls, tag: int, text: str) -> "TiffField":
        raw = text.encode("ascii", errors="replace")
        # NUL terminated, padded to an even count
        raw += b"\x00" * (2 if len(raw) % 2 == 0 else 1)
        return cls(tag, TiffType.ASCII, len(raw), raw)

    @classmethod
    def numbers(cls, tag: int, type_: int, values: Iterable) -> "TiffField":
        code = _TYPES[type_][1]
        arr = np.asarray(list(values))
        if type_ in (TiffType.RATIONAL, TiffType.SRATIONAL):
            count = arr.size // 2
        else:
            count = arr.size
        data = arr.astype(np.dtype("<" + code)).tobytes()
        return cls(tag, type_, count, data)


@dataclass
class TiffDirectory:
    fields: dict[int, TiffField] = field(default_factory=dict)
    next_offset: int = 0
    image: np.ndarray | None = None

    def get(self, tag: int) -> TiffField | None:
        return self.fields.get(tag)

    def add(self, f: TiffField) -> None:
        self.fields[f.tag] = f

    def __contains__(self, tag: int) -> bool:
        return tag in self.fields


def tiff_byte_order(data: bytes) -> ByteOrder | None:
    if data[:4] == LITTLE_MAGIC:
        return ByteOrder.LITTLE
    if data[:4] == BIG_MAGIC:
        return ByteOrder.BIG
    return None


def _read_field(reader: EndianReader, order: ByteOrder) -> TiffField | None:
    start = reader.tell()
    tag = reader.read_uint16()
    type_ = reader.read_uint16()
    count = reader.read_uint32()
    if type_ not in _TYPES:
        # Unknown field types are skipped
        reader.skip(4)
        return None
    size = _TYPES[type_][0] * count
    if size <= 4:
        data = reader.read_fully(4)[:size]
    else:
        offset = reader.read_uint32()
        require(offset + size <= reader.length, "TIFF field data runs past end of file",
                offset=start + 8, expected=f"<= {reader.length}", found=offset + size)
        here = reader.tell()
        reader.seek(offset)
        data = reader.read_fully(size)
        reader.seek(here)
    return TiffField(tag, type_, count, data, order)


def read_directories(data: bytes, max_directories: int) -> list[TiffDirectory]:
    """Walk the IFD chain.

    Raises
    ------
    StructuralCorruption
        On a bad magic number, an offset outside the file or a cycle.
    """
    order = tiff_byte_order(data)
    require(order is not None, "Not a TIFF file", offset=0, expected="II*\\0 or MM\\0*", found=data[:4])
    reader = EndianReader(data, order)
    reader.seek(4)
    offset = reader.read_uint32()
    directories: list[TiffDirectory] = []
    seen = set()
    while offset != 0 and len(directories) < max_directories:
        require(8 <= offset and offset + 2 <= len(data), "TIFF directory offset outside file",
                offset=offset, expected=f"8..{len(data) - 2}", found=offset)
        require(offset not in seen, "TIFF directory chain loops", offset=offset)
        seen.add(offset)
        reader.seek(offset)
        n_items = reader.read_uint16()
        require(offset + 2 + 12 * n_items + 4 <= len(data), "TIFF directory runs past end of file",
                offset=offset, expected=f"<= {len(data)}", found=offset + 6 + 12 * n_items)
        ifd = TiffDirectory()
        for _ in range(n_items):
            f = _read_field(reader, order)
            if f is not None:
                ifd.add(f)
        ifd.next_offset = reader.read_uint32()
        directories.append(ifd)
        offset = ifd.next_offset
    return directories


def read_gray_image(data: bytes, ifd: TiffDirectory) -> np.ndarray | None:
    """Decode an uncompressed 8-bit single-sample raster, else None."""
    needed = (IMAGE_WIDTH, IMAGE_LENGTH, STRIP_OFFSETS, STRIP_BYTE_COUNTS)
    if not all(tag in ifd for tag in needed):
        return None
    bits = ifd.get(BITS_PER_SAMPLE)
    compression = ifd.get(COMPRESSION)
    samples = ifd.get(SAMPLES_PER_PIXEL)
    if ((bits is not None and bits.as_int() != 8)
            or (compression is not None and compression.as_int() != 1)
            or (samples is not None and samples.as_int() != 1)):
        return None
    width = ifd.get(IMAGE_WIDTH).as_int()
    height = ifd.get(IMAGE_LENGTH).as_int()
    pixels = bytearray()
    for off, n in zip(ifd.get(STRIP_OFFSETS).as_array(), ifd.get(STRIP_BYTE_COUNTS).as_array()):
        off, n = int(off), int(n)
        require(off + n <= len(data), "TIFF strip runs past end of file",
                offset=off, expected=f"<= {len(data)}", found=off + n)
        pixels += data[off:off + n]
    if len(pixels) < width * height:
        return None
    return np.frombuffer(bytes(pixels[:width * height]), dtype=np.uint8).reshape(height, width)


def gray_image_fields(ifd: TiffDirectory, image: np.ndarray) -> None:
    """Attach an 8-bit grayscale raster; strip offsets are filled by ``encode_tiff``."""
    image = np.asarray(image)
    if image.ndim == 3:
        image = image.mean(axis=2)
    image = np.clip(np.rint(image), 0, 255).astype(np.uint8)
    height, width = image.shape
    ifd.image = image
    ifd.add(TiffField.numbers(IMAGE_WIDTH, TiffType.LONG, [width]))
    ifd.add(TiffField.numbers(IMAGE_LENGTH, TiffType.LONG, [height]))
    ifd.add(TiffField.numbers(BITS_PER_SAMPLE, TiffType.SHORT, [8]))
    ifd.add(TiffField.numbers(COMPRESSION, TiffType.SHORT, [1]))
    ifd.add(TiffField.numbers(PHOTOMETRIC_INTERPRETATION, TiffType.SHORT, [1]))
    ifd.add(TiffField.numbers(SAMPLES_PER_PIXEL, TiffType.SHORT, [1]))
    ifd.add(TiffField.numbers(ROWS_PER_STRIP, TiffType.LONG, [height]))
    ifd.add(TiffField.numbers(STRIP_OFFSETS, TiffType.LONG, [0]))
    ifd.add(TiffField.numbers(STRIP_BYTE_COUNTS, TiffType.LONG, [width * height]))
    ifd.add(TiffField.numbers(X_RESOLUTION, TiffType.RATIONAL, [300, 1]))
    ifd.add(TiffField.numbers(Y_RESOLUTION, TiffType.RATIONAL, [300, 1]))
    ifd.add(TiffField.numbers(RESOLUTION_UNIT, TiffType.SHORT, [2]))


def encode_tiff(directories: list[TiffDirectory]) -> bytes:
    """Serialize directories as a little-endian TIFF.

    Each directory is preceded by its raster (one strip); out-of-line field
    data follows the entries, word aligned.
    """
    w = EndianWriter(ByteOrder.LITTLE, io.BytesIO())
    w.write_bytes(LITTLE_MAGIC)
    link = w.tell()
    w.write_uint32(0)
    for ifd in directories:
        if ifd.image is not None:
            strip = w.tell()
            w.write_bytes(ifd.image.tobytes())
            ifd.add(TiffField.numbers(STRIP_OFFSETS, TiffType.LONG, [strip]))
        if w.tell() % 2:
            w.pad(1)
        start = w.tell()
        w.seek(link)
        w.write_uint32(start)
        w.seek(start)
        w.write_uint16(len(ifd.fields))
        deferred = []
        for tag in sorted(ifd.fields):
            f = ifd.fields[tag]
            w.write_uint16(f.tag)
            w.write_uint16(f.type)
            w.write_uint32(f.count)
            if len(f.data) <= 4:
                w.write_bytes(f.data.ljust(4, b"\x00"))
            else:
                deferred.append((w.tell(), f.data))
                w.write_uint32(0)
        link = w.tell()
        w.write_uint32(0)
        for slot, payload in deferred:
            if w.tell() % 2:
                w.pad(1)
            here = w.tell()
            w.seek(slot)
            w.write_uint32(here)
            w.seek(here)
            w.write_bytes(payload)
    return w.getvalue()
