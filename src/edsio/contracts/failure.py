"""Error taxonomy for the decode layer.

A sniffer declining a file is not an error and never raises. Everything
else that can go wrong while turning bytes into spectra is a subclass of
``DecodeError`` so callers can handle a bad file uniformly.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """What a decoder does when the body of a file is corrupt.

    FAIL_FAST: raise ``StructuralCorruption``.
    BEST_EFFORT (default): keep what was decoded so far, log a warning and
    return the partial spectrum. Header corruption is always fatal.
    """
    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


class DecodeError(RuntimeError):
    """Base class for every failure to decode a spectrum file."""
    pass


class StructuralCorruption(DecodeError):
    """A fixed-layout offset or length invariant does not hold.

    Attributes
    ----------
    offset : int or None
        Byte offset at which the problem was detected.
    expected, found
        What the layout required and what the file contained.
    """

    def __init__(self, message: str, offset: int | None = None, expected=None, found=None):
        self.offset = offset
        self.expected = expected
        self.found = found
        details = []
        if offset is not None:
            details.append(f"offset={offset}")
        if expected is not None:
            details.append(f"expected={expected!r}")
        if found is not None:
            details.append(f"found={found!r}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class UnrecognizedFormat(DecodeError):
    """No registered sniffer accepted the file."""

    def __init__(self, path, tried: list[str]):
        self.path = path
        self.tried = list(tried)
        super().__init__(
            f"{path} does not seem to be in one of the known file formats "
            f"(tried: {', '.join(self.tried)})"
        )


class CubeFormatError(DecodeError):
    """A Ripple header is invalid or disagrees with its raw file."""
    pass


class CubeTypeError(TypeError):
    """A value of the wrong numeric kind was written to a cube."""
    pass


class ContractViolation(RuntimeError):
    """A decoder returned output that breaks the canonical model contract.

    This indicates a bug in a decoder, not a bad input file.
    """
    pass
