"""CLIConfig: Command-line overrides.

Minimal configuration for settings that commonly change between runs:
verbosity, failure policy and the elevation correction.
"""

from typing import Literal, Optional
from edsio.schemas.base import EdsioBaseModel


class CLIConfig(EdsioBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(log_level="DEBUG", failure_policy="fail_fast")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    failure_policy: Optional[Literal["fail_fast", "best_effort"]] = None
    fix_elevation: Optional[bool] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}
        if self.failure_policy is not None:
            overrides["decode"] = {"failure_policy": self.failure_policy}
        if self.fix_elevation is not None:
            overrides["corrections"] = {"fix_elevation": self.fix_elevation}

        return overrides
