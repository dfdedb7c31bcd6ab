"""Ordered format dispatch.

``read_spectra`` is the single entry point for vendor files: it reads the
whole file (every supported format is at most a few megabytes), offers the
bytes to each registered sniffer in ``FORMATS`` order and hands them to the
first format that accepts them. The file handle is closed before any
sniffing starts, so no decoder can leak it.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

from edsio.contracts import StructuralCorruption, UnrecognizedFormat, assert_canonical
from edsio.formats import FORMATS, SpectrumFormat
from edsio.model import Spectrum, SpectrumProperty as P
from edsio.schemas import InternalConfig, default_config

__all__ = ["read_spectra", "decode_bytes", "sniff_format"]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def sniff_format(data: bytes, formats: Sequence[SpectrumFormat] = FORMATS) -> Optional[SpectrumFormat]:
    """Return the first format whose sniffer accepts ``data``, or None."""
    for fmt in formats:
        if fmt.accepts(data):
            return fmt
    return None


def decode_bytes(data: bytes, config: Optional[InternalConfig] = None, source: Optional[PathLike] = None,
                 formats: Sequence[SpectrumFormat] = FORMATS) -> list[Spectrum]:
    """Decode an in-memory file.

    Parameters
    ----------
    data : bytes
        Complete file contents.
    config : InternalConfig, optional
        Defaults to ``default_config()``.
    source : path, optional
        Where the bytes came from. Used for ``SourceFile``, ``SourceFileId``
        and the default display name.
    formats : sequence of SpectrumFormat, optional
        Dispatch order; defaults to every registered format.

    Returns
    -------
    list of Spectrum
        One entry for single-spectrum formats, one per record otherwise.

    Raises
    ------
    UnrecognizedFormat
        If no sniffer accepts the data.
    StructuralCorruption
        If the matching decoder finds the layout broken.
    """
    if config is None:
        config = default_config()
    fmt = sniff_format(data, formats)
    if fmt is None:
        raise UnrecognizedFormat(source if source is not None else "<bytes>", [f.name for f in formats])
    logger.debug("Decoding %s as %s", source or "<bytes>", fmt.name)
    try:
        spectra = fmt.decode(data, config)
    except EOFError as e:
        raise StructuralCorruption(f"{fmt.name} file is truncated: {e}") from e

    for idx, spectrum in enumerate(spectra):
        _stamp(spectrum, idx, source)
        assert_canonical(spectrum)
    logger.info("Read %d spectra from %s (%s)", len(spectra), source or "<bytes>", fmt.name)
    return spectra


def _stamp(spectrum: Spectrum, idx: int, source: Optional[PathLike]) -> None:
    props = spectrum.properties()
    props.set(P.SpectrumIndex, idx + 1)
    if source is None:
        return
    path = Path(source)
    props.set(P.SourceFile, str(path.resolve()))
    props.set(P.SourceFileId, f"{path.stem}[{idx + 1}]")
    if not spectrum.display_name():
        props.set(P.SpectrumDisplayName, path.stem)


def read_spectra(source: Union[PathLike, BinaryIO], config: Optional[InternalConfig] = None) -> list[Spectrum]:
    """Read every spectrum in a vendor file.

    Parameters
    ----------
    source : path or binary file object
        A file object is read to the end but not closed.
    config : InternalConfig, optional
        Defaults to ``default_config()``.

    Raises
    ------
    FileNotFoundError
        If the path does not exist.
    UnrecognizedFormat
        If the file is in none of the registered formats.
    StructuralCorruption
        If the file is recognised but corrupt.

    Examples
    --------
    >>> spectra = read_spectra("sample.msa")
    >>> spectra[0].channel_count()
    2048
    """
    if hasattr(source, "read"):
        data = source.read()
        name = getattr(source, "name", None)
        return decode_bytes(data, config, name if isinstance(name, (str, Path)) else None)
    path = Path(source)
    data = path.read_bytes()
    return decode_bytes(data, config, path)
