"""Canonical spectrum contract.

Enforces the guarantees every decoder makes about its output before the
registry hands spectra to callers.
"""

import numpy as np

from edsio.contracts.failure import ContractViolation
from edsio.model import PropertyBag, Spectrum, SpectrumProperty


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise ContractViolation(message)


def assert_canonical(spectrum: Spectrum) -> None:
    """Enforce the canonical spectrum contract.

    Parameters
    ----------
    spectrum : Spectrum
        Decoder output.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    _check(
        isinstance(spectrum, Spectrum),
        f"Spectrum contract violated: decoder returned {type(spectrum).__name__}"
    )
    channels = spectrum.channels
    _check(
        channels.ndim == 1 and channels.dtype == np.float64,
        f"Spectrum contract violated: channels are {channels.dtype} with {channels.ndim} dims"
    )
    _check(
        not channels.flags.writeable,
        "Spectrum contract violated: channel array is writeable"
    )
    props = spectrum.properties()
    _check(
        isinstance(props, PropertyBag),
        "Spectrum contract violated: properties are not a PropertyBag"
    )
    for prop, value in props.items():
        _check(
            isinstance(prop, SpectrumProperty),
            f"Spectrum contract violated: unknown property key {prop!r}"
        )
        _check(
            value is not None,
            f"Spectrum contract violated: '{prop.name}' holds None"
        )
    width = props.get_number(SpectrumProperty.EnergyScale)
    _check(
        width is None or np.isfinite(width),
        f"Spectrum contract violated: non-finite energy scale {width}"
    )
