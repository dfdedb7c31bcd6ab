"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that decoders and writers see. It is fully
validated and carries an explicit value for every field.
"""

from typing import Literal
from pydantic import Field, ConfigDict
from edsio.schemas.base import EdsioBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalCsvConfig(EdsioBaseModel):
    """Runtime CSV export layout."""
    decimal_separator: Literal[".", ","]
    field_separator: Literal[",", ";"]

    model_config = ConfigDict(frozen=True)


class InternalCorrectionConfig(EdsioBaseModel):
    """Runtime vendor corrections."""
    fix_elevation: bool
    bogus_elevation: float
    corrected_elevation: float
    default_elevation: float

    model_config = ConfigDict(frozen=True)


class InternalDecodeConfig(EdsioBaseModel):
    """Runtime decoder behaviour."""
    failure_policy: Literal["fail_fast", "best_effort"]
    max_directories: int = Field(ge=1)

    model_config = ConfigDict(frozen=True)


class InternalEmsaConfig(EdsioBaseModel):
    """Runtime EMSA writer options."""
    max_channels: int = Field(ge=1)
    dtsa_compatible: bool
    default_owner: str

    model_config = ConfigDict(frozen=True)


class InternalLoggingConfig(EdsioBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(EdsioBaseModel):
    """Authoritative runtime configuration.

    Decoders receive it and read fields directly:

        def decode(data: bytes, config: InternalConfig) -> list[Spectrum]:
            if config.corrections.fix_elevation:
                ...

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - Immutable, so concurrent decode calls can share one instance
    """

    csv: InternalCsvConfig
    corrections: InternalCorrectionConfig
    decode: InternalDecodeConfig
    emsa: InternalEmsaConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    @property
    def best_effort(self) -> bool:
        return self.decode.failure_policy == "best_effort"
