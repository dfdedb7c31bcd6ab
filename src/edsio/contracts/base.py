"""Base contract enforcement utilities.

``require()`` guards fixed-layout invariants inside decoders: declared
counts against remaining bytes, section end offsets, header plausibility.
"""

from edsio.contracts.failure import StructuralCorruption


def require(condition: bool, message: str, offset: int | None = None,
            expected=None, found=None) -> None:
    """Enforce a layout invariant of a vendor format.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.
    message : str
        What was being checked, phrased for someone diagnosing a vendor
        format variant.
    offset : int, optional
        Byte offset where the check happened.
    expected, found : optional
        Values reported alongside the message.

    Raises
    ------
    StructuralCorruption
        If condition is False.

    Examples
    --------
    >>> require(n_channels * 4 <= reader.remaining(),
    ...         "SPC contract violated: channel block overruns file",
    ...         offset=reader.tell(), expected=n_channels * 4, found=reader.remaining())
    """
    if not condition:
        raise StructuralCorruption(message, offset=offset, expected=expected, found=found)
