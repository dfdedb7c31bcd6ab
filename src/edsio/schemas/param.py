"""ParamConfig: Expert defaults for decoding and writing spectra.

Every tunable value has its default here. Decoders never define their own
fallbacks for these; they only receive an InternalConfig.
"""

from typing import Literal
from pydantic import Field, field_validator, model_validator
from edsio.schemas.base import EdsioBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class CsvConfig(EdsioBaseModel):
    """Number layout of CSV exports.

    Vendor files are always read with "." as the decimal point; this only
    shapes what ``edsio.writers.csv`` writes.
    """
    decimal_separator: Literal[".", ","] = "."
    field_separator: Literal[",", ";"] = ","

    @model_validator(mode="after")
    def separators_differ(self):
        """Decimal and field separators must not collide."""
        if self.decimal_separator == self.field_separator:
            raise ValueError("decimal_separator and field_separator must differ")
        return self


class CorrectionConfig(EdsioBaseModel):
    """Vendor value corrections applied during decoding."""
    fix_elevation: bool = Field(True, description="Replace a reported bogus elevation with the corrected one")
    bogus_elevation: float = Field(57.0, description="Elevation value some ASPEX firmware reports in error")
    corrected_elevation: float = Field(37.0, description="Replacement for bogus_elevation")
    default_elevation: float = Field(37.0, ge=-90.0, le=90.0, description="Elevation when an ASPEX file has none")

    @field_validator("bogus_elevation", "corrected_elevation", mode="before")
    @classmethod
    def coerce_angle_to_float(cls, v):
        """Allow int or float for angles."""
        return float(v)


class DecodeConfig(EdsioBaseModel):
    """Decoder behaviour on damaged files."""
    failure_policy: Literal["fail_fast", "best_effort"] = "best_effort"
    max_directories: int = Field(64, ge=1, description="Upper bound on TIFF directory chain length")

    @field_validator("failure_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Accept 'FAIL-FAST', 'Best_Effort', ..."""
        if isinstance(v, str):
            return v.lower().strip().replace("-", "_")
        return v


class EmsaConfig(EdsioBaseModel):
    """EMSA writer options."""
    max_channels: int = Field(16384, ge=1)
    dtsa_compatible: bool = Field(False, description="Cap channel count at 8192 for old DTSA readers")
    default_owner: str = "Unknown"


class LoggingConfig(EdsioBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(EdsioBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    Not used directly by decoders. It is the base layer in resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    csv: CsvConfig = Field(default_factory=CsvConfig)
    corrections: CorrectionConfig = Field(default_factory=CorrectionConfig)
    decode: DecodeConfig = Field(default_factory=DecodeConfig)
    emsa: EmsaConfig = Field(default_factory=EmsaConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
