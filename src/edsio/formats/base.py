"""Shared plumbing for vendor format modules.

Each format module exposes a module-level ``FORMAT`` descriptor pairing a
side-effect-free ``sniff(data)`` with a pure ``decode(data, config)``.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from edsio.contracts import StructuralCorruption
from edsio.model import PropertyBag, Spectrum
from edsio.schemas import InternalConfig

__all__ = ["SpectrumFormat", "recover_or_raise", "set_positive"]

logger = logging.getLogger(__name__)

Sniffer = Callable[[bytes], bool]
Decoder = Callable[[bytes, InternalConfig], list[Spectrum]]


@dataclass(frozen=True)
class SpectrumFormat:
    """A registered vendor format.

    Attributes
    ----------
    name : str
        Short name used in logs and in ``UnrecognizedFormat.tried``.
    sniff : callable
        ``bytes -> bool``. May raise; the registry maps that to False.
    decode : callable
        ``(bytes, InternalConfig) -> list[Spectrum]``.
    extensions : tuple of str
        Customary file extensions, lower case with the dot.
    """
    name: str
    sniff: Sniffer
    decode: Decoder
    extensions: tuple[str, ...] = field(default_factory=tuple)

    def accepts(self, data: bytes) -> bool:
        """Run the sniffer, treating any exception as 'not this format'."""
        try:
            return bool(self.sniff(data))
        except Exception as e:
            logger.debug("%s sniffer rejected input: %s", self.name, e)
            return False


def recover_or_raise(config: InternalConfig, error: StructuralCorruption, what: str) -> None:
    """Apply the failure policy to corruption found after the header.

    Under ``best_effort`` the error is logged and the caller keeps the
    partial data it already has; under ``fail_fast`` it is re-raised.
    """
    if not config.best_effort:
        raise error
    logger.warning("%s: returning partial data after corruption: %s", what, error)


def set_positive(props: PropertyBag, prop, value: float, scale: float = 1.0) -> None:
    """Store ``scale * value`` only when ``value`` is a positive number.

    Binary headers write 0 for "not recorded"; zero, negative and NaN
    readings are left out of the bag.
    """
    if value > 0.0:
        props.set(prop, scale * value)
