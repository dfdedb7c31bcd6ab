"""`edsio` - readers and writers for EDS/XRF spectrum files.

Subpackages:
- binary: Endian-aware primitive readers and writers
- model: Canonical spectrum and property bag
- formats: Vendor sniffers and decoders
- writers: EMSA, ASPEX TIFF, CSV, raw, NetCDF and summary export
- cube: Ripple hyperspectral cubes
- schemas / contracts: Configuration and error taxonomy
"""

__version__ = "0.1.0"

from edsio.model import Spectrum, SpectrumProperty, PropertyBag
from edsio.registry import read_spectra, decode_bytes
from edsio.cube import RippleFile, RippleHeader

__all__ = [
    "Spectrum",
    "SpectrumProperty",
    "PropertyBag",
    "read_spectra",
    "decode_bytes",
    "RippleFile",
    "RippleHeader",
]
