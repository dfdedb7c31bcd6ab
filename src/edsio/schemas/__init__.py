"""Pydantic configuration schemas for edsio.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
default_config : function
    Cached InternalConfig with expert defaults only
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line overrides
"""

from edsio.schemas.resolve import default_config, resolve_config
from edsio.schemas.internal import InternalConfig
from edsio.schemas.param import ParamConfig
from edsio.schemas.user import UserConfig
from edsio.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'default_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
