"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

pytestmark = pytest.mark.unit

from edsio.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, default_config
from edsio.schemas.resolve import deep_merge, resolve_config


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.csv.decimal_separator == "."
        assert config.csv.field_separator == ","
        assert config.corrections.fix_elevation is True
        assert config.corrections.bogus_elevation == 57.0
        assert config.corrections.corrected_elevation == 37.0
        assert config.decode.failure_policy == "best_effort"
        assert config.emsa.max_channels == 16384
        assert config.logging.level == "INFO"

    def test_user_config_overrides_param_config(self):
        """UserConfig values override ParamConfig defaults."""
        config = resolve_config(ParamConfig(), UserConfig(FIX_ELEVATION=False), None)

        assert config.corrections.fix_elevation is False

    def test_cli_beats_user(self):
        """Full precedence: CLI > User > Param."""
        user = UserConfig(FAILURE_POLICY="best_effort", LOG_LEVEL="warning")
        cli = CLIConfig(failure_policy="fail_fast")
        config = resolve_config(ParamConfig(), user, cli)

        assert config.decode.failure_policy == "fail_fast"
        assert config.logging.level == "WARNING"
        assert not config.best_effort

    def test_dict_inputs_are_validated(self):
        config = resolve_config({}, {"OWNER": "Lab"}, {"log_level": "DEBUG"})

        assert config.emsa.default_owner == "Lab"
        assert config.logging.level == "DEBUG"

    def test_default_config_is_cached(self):
        assert default_config() is default_config()


class TestUserConfigAliases:
    """Test UserConfig flat aliases map correctly."""

    def test_csv_aliases(self):
        config = resolve_config(ParamConfig(), UserConfig(DECIMAL_SEPARATOR=",", FIELD_SEPARATOR=";"))

        assert config.csv.decimal_separator == ","
        assert config.csv.field_separator == ";"

    def test_comma_decimal_switches_field_separator(self):
        """A comma decimal alone selects semicolon-separated fields."""
        config = resolve_config(ParamConfig(), UserConfig(DECIMAL_SEPARATOR=","))

        assert config.csv.field_separator == ";"

    def test_nested_section_overrides_flat(self):
        """Nested sections are applied after the flat aliases of the same section."""
        user = UserConfig(OWNER="flat", emsa={"default_owner": "nested", "dtsa_compatible": True})
        config = resolve_config(ParamConfig(), user)

        assert config.emsa.default_owner == "nested"
        assert config.emsa.dtsa_compatible is True

    def test_policy_spelling_is_normalized(self):
        config = resolve_config(ParamConfig(), UserConfig(FAILURE_POLICY="Fail-Fast"))

        assert config.decode.failure_policy == "fail_fast"

    def test_unknown_keys_are_ignored(self):
        """UserConfig is forgiving about keys it does not know."""
        user = UserConfig.model_validate({"OUTPUT_DIR": "/tmp/spectra", "OWNER": "x"})

        assert user.owner == "x"


class TestValidation:
    """Invalid values are rejected at resolution time."""

    def test_separator_collision_rejected(self):
        with pytest.raises(ValidationError, match="must differ"):
            resolve_config(ParamConfig(), UserConfig(DECIMAL_SEPARATOR=",", FIELD_SEPARATOR=","))

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(FAILURE_POLICY="sometimes"))

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.decode.failure_policy = "fail_fast"

    def test_param_config_forbids_extra(self):
        with pytest.raises(ValidationError):
            ParamConfig(mode="realtime")


class TestDeepMerge:

    def test_nested_merge(self):
        base = {"a": 1, "b": {"c": 2, "d": 3}}
        assert deep_merge(base, {"b": {"d": 4}}, {"e": 5}) == {"a": 1, "b": {"c": 2, "d": 4}, "e": 5}
        assert base == {"a": 1, "b": {"c": 2, "d": 3}}
