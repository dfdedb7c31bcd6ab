"""Decode contracts: error taxonomy and fail-fast layout checks.

Key principle:
- Pydantic validates configuration
- Contracts validate decoder output and vendor layouts
- Sniffers decide format membership and never raise
"""

from edsio.contracts.failure import (
    ContractViolation,
    CubeFormatError,
    CubeTypeError,
    DecodeError,
    FailurePolicy,
    StructuralCorruption,
    UnrecognizedFormat,
)
from edsio.contracts.base import require
from edsio.contracts.spectrum import assert_canonical

__all__ = [
    "ContractViolation",
    "CubeFormatError",
    "CubeTypeError",
    "DecodeError",
    "FailurePolicy",
    "StructuralCorruption",
    "UnrecognizedFormat",
    "require",
    "assert_canonical",
]
