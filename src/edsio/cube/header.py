"""Ripple (``.rpl``) cube header.

A Ripple header is a small text file of ``key<TAB>value`` lines, the first
of which is literally ``key<TAB>value``. It describes the geometry and
sample encoding of the companion raw file::

    key             value
    width           4
    height          3
    depth           2
    offset          0
    data-length     2
    data-type       unsigned
    byte-order      little-endian
    record-by       vector

Keys are case-insensitive; keys this codec does not use (for example
``ev-per-chan``) are ignored.
"""

import logging
import re
from typing import Literal

import numpy as np
from pydantic import ConfigDict, Field, ValidationError, field_validator, model_validator

from edsio.binary import ByteOrder
from edsio.contracts import CubeFormatError
from edsio.schemas.base import EdsioBaseModel

__all__ = ["RippleHeader", "INTEGER_SIZES", "FLOAT_SIZES"]

logger = logging.getLogger(__name__)

INTEGER_SIZES = (1, 2, 4)
FLOAT_SIZES = (4, 8)

_FIRST_LINE = re.compile(r"^key\s+value$", re.IGNORECASE)
_KEYS = ("width", "height", "depth", "offset", "data-length", "data-type", "byte-order", "record-by")


class RippleHeader(EdsioBaseModel):
    """Validated Ripple cube geometry and encoding.

    Validation happens at construction, so an invalid combination of
    data type and byte depth is rejected before any raw data is touched.

    Raises
    ------
    CubeFormatError
        From ``parse``; direct construction raises pydantic's
        ``ValidationError``.

    Examples
    --------
    >>> h = RippleHeader(width=4, height=3, depth=2, data_length=2,
    ...                  data_type="unsigned", byte_order="little-endian")
    >>> h.payload_size
    48
    """

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    depth: int = Field(gt=0)
    offset: int = Field(0, ge=0)
    data_length: int = Field(alias="data-length")
    data_type: Literal["signed", "unsigned", "float"] = Field(alias="data-type")
    byte_order: Literal["big-endian", "little-endian", "dont-care"] = Field("dont-care", alias="byte-order")
    record_by: Literal["vector", "dont-care"] = Field("vector", alias="record-by")

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    @field_validator("data_type", "byte_order", "record_by", mode="before")
    @classmethod
    def lower_case(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def check_encoding(self):
        """Byte depth must suit the data type; only single bytes may omit the byte order."""
        if self.data_type == "float":
            if self.data_length not in FLOAT_SIZES:
                raise ValueError(f"Only 4 and 8 byte floats are supported, not {self.data_length}")
        elif self.data_length not in INTEGER_SIZES:
            raise ValueError(f"Only 1, 2 and 4 byte integers are supported, not {self.data_length}")
        if self.byte_order == "dont-care" and self.data_length != 1:
            raise ValueError("byte-order is dont-care but data-length is not 1")
        return self

    # =========================================================================
    # Derived values
    # =========================================================================

    @property
    def order(self) -> ByteOrder:
        """Effective byte order; ``dont-care`` reads as big-endian."""
        return ByteOrder.LITTLE if self.byte_order == "little-endian" else ByteOrder.BIG

    @property
    def is_float(self) -> bool:
        return self.data_type == "float"

    @property
    def kind(self) -> str:
        """Scalar kind name as used by ``EndianReader.read_array``."""
        bits = 8 * self.data_length
        if self.is_float:
            return f"float{bits}"
        return f"{'u' if self.data_type == 'unsigned' else ''}int{bits}"

    @property
    def dtype(self) -> np.dtype:
        """On-disk numpy dtype, byte order included."""
        return np.dtype(self.kind).newbyteorder(self.order.prefix)

    @property
    def payload_size(self) -> int:
        return self.width * self.height * self.depth * self.data_length

    @property
    def file_size(self) -> int:
        """Exact size the raw file must have."""
        return self.payload_size + self.offset

    # =========================================================================
    # Text form
    # =========================================================================

    @classmethod
    def parse(cls, text: str) -> "RippleHeader":
        """Parse header text.

        Raises
        ------
        CubeFormatError
            If the first line is not ``key value``, a required key is
            missing, or a value or combination is invalid.
        """
        lines = text.splitlines()
        if not lines or not _FIRST_LINE.match(lines[0].strip()):
            raise CubeFormatError("The header file does not appear to be a valid RPL header")
        values = {}
        for line in lines[1:]:
            items = line.strip().split(None, 1)
            if len(items) != 2:
                continue
            key, value = items[0].lower(), items[1].strip()
            if key in _KEYS:
                values[key] = value
            else:
                logger.debug("Ignoring RPL header key %s", key)
        if values.get("record-by", "vector").lower() == "image":
            raise CubeFormatError("record-by image is not supported")
        for key in ("width", "height", "depth"):
            if key not in values:
                raise CubeFormatError(f"Image {key} not initialized by header")
        if "data-type" not in values:
            raise CubeFormatError("Data-type not initialized by header")
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise CubeFormatError(f"Invalid RPL header: {e}") from e

    def to_text(self) -> str:
        rows = [
            ("key", "value"),
            ("width", self.width),
            ("height", self.height),
            ("depth", self.depth),
            ("offset", self.offset),
            ("data-length", self.data_length),
            ("data-type", self.data_type),
            ("byte-order", "dont-care" if self.data_length == 1 else self.byte_order),
            ("record-by", "dont-care" if self.depth == 1 else "vector"),
        ]
        return "".join(f"{key}\t{value}\n" for key, value in rows)
