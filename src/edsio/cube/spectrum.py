"""Pixel-block spectra extracted from a Ripple cube."""

from typing import Mapping, Union

import numpy as np

from edsio.cube.ripple import RippleFile
from edsio.model import PropertyBag, Spectrum, SpectrumProperty as P

__all__ = ["spectrum_at"]


def spectrum_at(cube: RippleFile, row: int, col: int, row_span: int = 1, col_span: int = 1,
                template: Union[Spectrum, Mapping, None] = None) -> Spectrum:
    """Sum the pixel block starting at ``(row, col)`` into one spectrum.

    Parameters
    ----------
    cube : RippleFile
        Open cube; its cursor is moved.
    row, col : int
        Top-left pixel of the block.
    row_span, col_span : int
        Block size, at least 1; clipped at the cube edge.
    template : Spectrum or mapping, optional
        Per-pixel properties (calibration, live time, ...) copied onto the
        result. A per-pixel ``LiveTime`` is multiplied by the number of
        pixels summed.

    Returns
    -------
    Spectrum
        ``depth`` channels; ``SampleId`` records the block as
        ``name[[row, max_row),[col, max_col)]``.
    """
    if isinstance(template, Spectrum):
        template = template.properties()
    props = PropertyBag(template)
    max_row = min(row + max(1, row_span), cube.height)
    max_col = min(col + max(1, col_span), cube.width)
    data = np.zeros(cube.depth, dtype=np.float64)
    for r in range(row, max_row):
        for c in range(col, max_col):
            cube.seek(r, c)
            data += cube.read_item()

    source = cube.rpl_path or cube.raw_path
    name = props.get_text(P.SpectrumDisplayName) or source.stem
    props.set(P.SpectrumDisplayName, name)
    props.set(P.SampleId, f"{name}[[{row}, {max_row}),[{col}, {max_col})]")
    props.set(P.SourceFile, str(source.resolve()))
    live_time = props.get_number(P.LiveTime)
    if live_time is not None:
        props.set(P.LiveTime, (max_row - row) * (max_col - col) * live_time)
    return Spectrum(data, props)
