"""Root-level pytest fixtures for the edsio test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests use these fixtures instead of building InternalConfig
by hand.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from edsio.schemas import ParamConfig, UserConfig, CLIConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to a decoder.

    Examples
    --------
    >>> def test_decode(internal_config):
    ...     spectra = emsa.decode(data, internal_config)
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_comma_decimal(make_config):
    ...     config = make_config(DECIMAL_SEPARATOR=",")
    ...     assert config.csv.field_separator == ";"
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


@pytest.fixture
def fail_fast_config(param_config):
    """Runtime configuration that propagates every StructuralCorruption."""
    return resolve_config(param_config, None, CLIConfig(failure_policy="fail_fast"))


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)
