"""Ripple hyperspectral cube codec."""

from edsio.cube.header import RippleHeader
from edsio.cube.ripple import RippleFile, find_raw
from edsio.cube.spectrum import spectrum_at

__all__ = ["RippleHeader", "RippleFile", "find_raw", "spectrum_at"]
