"""edsio User Configuration.

This is the user-facing configuration file. Modify settings here to customize
how spectra are decoded and written. Defaults are in src/edsio/schemas/param.py

Usage:
    python scripts/inspect_spectra.py sample.msa --config scripts/user_config.py
    edsio-inspect data/*.spc --config scripts/user_config.py --emsa out/
"""

CONFIG = {
    # ========================================================================
    # CSV EXPORT (vendor files are always read with "." decimals)
    # ========================================================================
    "DECIMAL_SEPARATOR": ".",     # "." or ","
    "FIELD_SEPARATOR": ",",       # "," or ";" (must differ from the decimal)

    # ========================================================================
    # VENDOR CORRECTIONS
    # ========================================================================
    "FIX_ELEVATION": True,        # Report 57 deg detector elevations as 37 deg
    "DEFAULT_ELEVATION": 37.0,    # Used when an ASPEX file carries none

    # ========================================================================
    # DECODING
    # ========================================================================
    "FAILURE_POLICY": "best_effort",  # "best_effort" or "fail_fast"

    # ========================================================================
    # EMSA OUTPUT
    # ========================================================================
    "OWNER": "Unknown",
    "emsa": {
        "dtsa_compatible": False,  # Cap output at 8192 channels
    },

    "LOG_LEVEL": "INFO",
}
