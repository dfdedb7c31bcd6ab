"""NetCDF export of decoded spectra through xarray."""

import logging
from pathlib import Path
from typing import Sequence, Union

import numpy as np
import xarray as xr

from edsio.model import Spectrum

__all__ = ["spectra_dataset", "write_netcdf"]

logger = logging.getLogger(__name__)


def _netcdf_attrs(attrs: dict) -> dict:
    # netCDF attributes cannot hold booleans
    return {k: int(v) if isinstance(v, (bool, np.bool_)) else v for k, v in attrs.items()}


def spectra_dataset(spectra: Sequence[Spectrum]) -> xr.Dataset:
    """One ``spectrum_N`` variable per spectrum, each on its own channel dimension."""
    variables = {}
    for index, spectrum in enumerate(spectra, start=1):
        da = spectrum.to_dataarray()
        dim = f"channel_{index}"
        da = da.rename({"channel": dim}).rename(f"spectrum_{index}")
        da = da.assign_coords({f"energy_{index}": (dim, da["energy"].values)}).drop_vars("energy")
        da.attrs = _netcdf_attrs(da.attrs)
        da.attrs["display_name"] = spectrum.display_name()
        variables[da.name] = da
    return xr.Dataset(variables, attrs={"Conventions": "CF-1.8", "source": "edsio"})


def write_netcdf(spectra: Sequence[Spectrum], path: Union[str, Path]) -> Path:
    """Write spectra to a compressed NetCDF file and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ds = spectra_dataset(spectra)
    encoding = {var: {"zlib": True, "complevel": 9} for var in ds.data_vars}
    ds.to_netcdf(path, encoding=encoding, engine="netcdf4")
    logger.info("Saved spectra NetCDF: %s", path)
    return path
