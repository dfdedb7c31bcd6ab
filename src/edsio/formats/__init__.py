"""Vendor spectrum formats.

``FORMATS`` is the dispatch order used by ``edsio.registry``. Formats that
can share low-depth header patterns are ordered so the stricter sniffer
runs first; the first match wins.
"""

from edsio.formats.base import SpectrumFormat, recover_or_raise, set_positive
from edsio.formats import (
    aspex,
    bruker_pdz,
    bruker_spx,
    bruker_txt,
    dtsa,
    edax_spc,
    emispec,
    emsa,
    ixrf,
    oxford_spt,
    pmca,
    radiant,
)

FORMATS: tuple[SpectrumFormat, ...] = (
    dtsa.FORMAT,
    emsa.FORMAT,
    emispec.FORMAT,
    aspex.FORMAT,
    ixrf.FORMAT,
    pmca.FORMAT,
    radiant.FORMAT,
    edax_spc.FORMAT,
    bruker_spx.FORMAT,
    bruker_txt.FORMAT,
    bruker_pdz.FORMAT,
    oxford_spt.FORMAT,
)

__all__ = ["FORMATS", "SpectrumFormat", "recover_or_raise", "set_positive"]
