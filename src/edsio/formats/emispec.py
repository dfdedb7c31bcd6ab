"""EMISPEC (TIA ``.ser``) series decoder.

Little-endian. A fixed header, one dimension record per series dimension,
two offset arrays, then one data element per offset. Every valid 1-D
element is a spectrum; the result is their channel-wise sum.
"""

import logging

import numpy as np

from edsio.binary import ByteOrder, EndianReader
from edsio.contracts import StructuralCorruption, require
from edsio.formats.base import SpectrumFormat, recover_or_raise
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig

__all__ = ["FORMAT", "sniff", "decode", "BYTE_ORDER_CODE", "FILE_ID", "VERSION",
           "ONE_DIMENSIONAL", "TWO_DIMENSIONAL", "DATA_TYPES"]

logger = logging.getLogger(__name__)

BYTE_ORDER_CODE = 0x4949
FILE_ID = 0x0197
VERSION = 0x0210

ONE_DIMENSIONAL = 0x4120
TWO_DIMENSIONAL = 0x4122
TAG_TIME_ONLY = 0x4152
TAG_2D_WITH_TIME = 0x4142

# Element data type code -> scalar kind understood by EndianReader.read_array
DATA_TYPES = {
    1: "uint8",
    2: "uint16",
    3: "uint32",
    4: "int8",
    5: "int16",
    6: "int32",
    7: "float32",
    8: "float64",
}
_COMPLEX_TYPES = (9, 10)


def sniff(data: bytes) -> bool:
    r = EndianReader(data[:6], ByteOrder.LITTLE)
    return (r.read_uint16(), r.read_uint16(), r.read_uint16()) == (BYTE_ORDER_CODE, FILE_ID, VERSION)


def _read_dimension(r: EndianReader, props: PropertyBag) -> None:
    r.read_int32()  # dimension size
    r.read_float64()  # calibration offset
    r.read_float64()  # calibration delta
    r.read_int32()  # calibration element
    description = r.read_chars(_text_length(r))
    if description:
        props.set(P.SpecimenDesc, description)
    r.read_chars(_text_length(r))  # units


def _text_length(r: EndianReader) -> int:
    n = r.read_int32()
    require(0 <= n <= r.remaining(), "EMISPEC dimension text runs past end of file",
            offset=r.tell() - 4, expected=f"0..{r.remaining()}", found=n)
    return n


def _read_element(r: EndianReader, offset: int, props: PropertyBag) -> np.ndarray:
    r.seek(offset)
    zero = r.read_float64()
    width = r.read_float64()
    r.read_int32()  # calibration element
    type_code = r.read_int16()
    count = r.read_int32()
    if type_code in _COMPLEX_TYPES:
        raise StructuralCorruption("Unsupported EMISPEC complex data type", offset=offset + 20,
                                   expected="1..8", found=type_code)
    require(type_code in DATA_TYPES, "Unrecognized EMISPEC data type", offset=offset + 20,
            expected="1..8", found=type_code)
    require(count >= 0, "Negative EMISPEC channel count", offset=offset + 22, expected=">= 0", found=count)
    props.set(P.EnergyOffset, zero)
    props.set(P.EnergyScale, width)
    return r.read_array(DATA_TYPES[type_code], count).astype(np.float64)


def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
    """Decode an EMISPEC series into one summed spectrum.

    Returns
    -------
    list of Spectrum
        Exactly one spectrum, the sum over the valid data elements. The
        energy calibration is taken from the data elements.

    Raises
    ------
    StructuralCorruption
        On a bad header, 2-D image data or a complex data type.
    """
    r = EndianReader(data, ByteOrder.LITTLE)
    for expected in (BYTE_ORDER_CODE, FILE_ID, VERSION):
        found = r.read_uint16()
        require(found == expected, "Not an EMISPEC series header", offset=r.tell() - 2,
                expected=hex(expected), found=hex(found))
    data_type = r.read_int32()
    require(data_type in (ONE_DIMENSIONAL, TWO_DIMENSIONAL), "Invalid EMISPEC data type id",
            offset=6, expected=(hex(ONE_DIMENSIONAL), hex(TWO_DIMENSIONAL)), found=hex(data_type))
    if data_type == TWO_DIMENSIONAL:
        raise StructuralCorruption("Two dimensional EMISPEC data is not supported", offset=6,
                                   expected=hex(ONE_DIMENSIONAL), found=hex(data_type))
    tag_type = r.read_int32()
    if tag_type not in (TAG_TIME_ONLY, TAG_2D_WITH_TIME):
        logger.debug("Unrecognized EMISPEC tag type 0x%04x", tag_type)
    total = r.read_int32()
    valid = r.read_int32()
    require(0 <= valid <= total, "EMISPEC valid element count exceeds total", offset=14,
            expected=f"<= {total}", found=valid)
    r.read_int32()  # offset array offset
    n_dims = r.read_int32()

    props = PropertyBag()
    for _ in range(n_dims):
        _read_dimension(r, props)
    require(8 * total <= r.remaining(), "EMISPEC offset arrays run past end of file",
            offset=r.tell(), expected=8 * total, found=r.remaining())
    data_offsets = r.read_array("int32", total)
    r.read_array("int32", total)  # tag offsets

    summed: np.ndarray | None = None
    for index, offset in enumerate(data_offsets[:valid]):
        try:
            require(0 <= offset < r.length, "EMISPEC data offset outside file", offset=int(offset),
                    expected=f"< {r.length}", found=int(offset))
            counts = _read_element(r, int(offset), props)
        except EOFError as e:
            recover_or_raise(config, StructuralCorruption(f"EMISPEC element {index} truncated: {e}",
                                                          offset=int(offset)), "EMISPEC")
            break
        except StructuralCorruption as e:
            if summed is None:
                raise
            recover_or_raise(config, e, "EMISPEC")
            break
        if summed is None:
            summed = counts
        else:
            n = min(len(summed), len(counts))
            if len(counts) != len(summed):
                logger.warning("EMISPEC element %d has %d channels, expected %d", index, len(counts), len(summed))
            summed = summed[:n] + counts[:n]
    require(summed is not None, "EMISPEC series holds no readable data element", offset=r.tell())
    return [Spectrum(summed, props)]


FORMAT = SpectrumFormat("EMISPEC", sniff, decode, (".ser", ".emi"))
