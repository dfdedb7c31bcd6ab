"""UserConfig: Forgiving, minimal user-facing configuration.

Accepts flat keys with upper-case aliases (DECIMAL_SEPARATOR,
FIX_ELEVATION, ...) as well as nested sections for advanced users.
Users only specify what they want to override from ParamConfig.
"""

from typing import Any, Optional
from pydantic import Field, field_validator
from edsio.schemas.base import EdsioBaseModel


class UserCsvConfig(EdsioBaseModel):
    """User-facing CSV export section."""
    decimal_separator: Optional[str] = None
    field_separator: Optional[str] = None


class UserCorrectionConfig(EdsioBaseModel):
    """User-facing corrections section."""
    fix_elevation: Optional[bool] = None
    bogus_elevation: Optional[float] = None
    corrected_elevation: Optional[float] = None
    default_elevation: Optional[float] = None


class UserEmsaConfig(EdsioBaseModel):
    """User-facing EMSA writer section."""
    max_channels: Optional[int] = None
    dtsa_compatible: Optional[bool] = None
    default_owner: Optional[str] = None


class UserConfig(EdsioBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            DECIMAL_SEPARATOR=",",
            FIX_ELEVATION=False,
            log_level="debug",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Flat aliases
    decimal_separator: Optional[str] = Field(None, alias="DECIMAL_SEPARATOR")
    field_separator: Optional[str] = Field(None, alias="FIELD_SEPARATOR")
    fix_elevation: Optional[bool] = Field(None, alias="FIX_ELEVATION")
    default_elevation: Optional[float] = Field(None, alias="DEFAULT_ELEVATION")
    failure_policy: Optional[str] = Field(None, alias="FAILURE_POLICY")
    max_directories: Optional[int] = Field(None, alias="MAX_DIRECTORIES")
    owner: Optional[str] = Field(None, alias="OWNER")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    csv: Optional[UserCsvConfig] = None
    corrections: Optional[UserCorrectionConfig] = None
    emsa: Optional[UserEmsaConfig] = None

    model_config = EdsioBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("default_elevation", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("failure_policy", "log_level", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize enum-like strings."""
        if isinstance(v, str):
            return v.strip().replace("-", "_")
        return v

    def to_internal_overrides(self) -> dict[str, Any]:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides: dict[str, Any] = {}

        csv = {}
        if self.decimal_separator is not None:
            csv["decimal_separator"] = self.decimal_separator
        if self.field_separator is not None:
            csv["field_separator"] = self.field_separator
        if self.csv is not None:
            csv.update(self.csv.model_dump(exclude_none=True))
        # A comma decimal implies semicolon-separated fields unless given
        if csv.get("decimal_separator") == "," and "field_separator" not in csv:
            csv["field_separator"] = ";"
        if csv:
            overrides["csv"] = csv

        corrections = {}
        if self.fix_elevation is not None:
            corrections["fix_elevation"] = self.fix_elevation
        if self.default_elevation is not None:
            corrections["default_elevation"] = self.default_elevation
        if self.corrections is not None:
            corrections.update(self.corrections.model_dump(exclude_none=True))
        if corrections:
            overrides["corrections"] = corrections

        decode = {}
        if self.failure_policy is not None:
            decode["failure_policy"] = self.failure_policy.lower()
        if self.max_directories is not None:
            decode["max_directories"] = self.max_directories
        if decode:
            overrides["decode"] = decode

        emsa = {}
        if self.owner is not None:
            emsa["default_owner"] = self.owner
        if self.emsa is not None:
            emsa.update(self.emsa.model_dump(exclude_none=True))
        if emsa:
            overrides["emsa"] = emsa

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level.upper()}

        return overrides
