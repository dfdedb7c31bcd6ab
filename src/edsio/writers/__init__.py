"""Export writers, the inverses of the corresponding decoders."""

from edsio.writers.binary import raw_bytes, write_raw
from edsio.writers.csv import csv_text, write_csv
from edsio.writers.emsa import emsa_bytes, write_emsa
from edsio.writers.netcdf import spectra_dataset, write_netcdf
from edsio.writers.table import summary_frame, write_summary
from edsio.writers.tiff import aspex_tiff_bytes, write_aspex_tiff

__all__ = [
    "raw_bytes",
    "write_raw",
    "csv_text",
    "write_csv",
    "emsa_bytes",
    "write_emsa",
    "spectra_dataset",
    "write_netcdf",
    "summary_frame",
    "write_summary",
    "aspex_tiff_bytes",
    "write_aspex_tiff",
]
