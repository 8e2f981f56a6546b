"""
Tests for settings.py module.

Tests cover:
- TemplateSettings: dataclass defaults, CLI parsing, CLI generation
"""

from dataclasses import fields

from wordtemplate.settings import (
    CLI_ARG_MAP,
    FIELD_TO_CLI,
    INSTRUCTION_PATTERN,
    TemplateSettings,
)


class TestTemplateSettingsDefaults:
    """Test TemplateSettings default values."""

    def test_default_construction(self):
        """Test that default settings scan everything strictly."""
        settings = TemplateSettings()
        assert settings.include_headers is True
        assert settings.include_footers is True
        assert settings.scan_tables is True
        assert settings.accept_tracked_changes is True
        assert settings.strict_undefined is True
        assert settings.evaluate_on_parse is False
        assert settings.instruction_pattern == INSTRUCTION_PATTERN

    def test_every_flag_maps_to_a_bool_field(self):
        """Test that each CLI flag names a boolean field."""
        names = {field.name for field in fields(TemplateSettings)}
        for flag, field_name in CLI_ARG_MAP.items():
            assert flag.startswith("--")
            assert field_name in names
            assert isinstance(getattr(TemplateSettings(), field_name), bool)


class TestTemplateSettingsFromCliArgs:
    """Test TemplateSettings.from_cli_args()."""

    def test_empty_args(self):
        """Test that empty args returns defaults."""
        assert TemplateSettings.from_cli_args([]) == TemplateSettings()

    def test_disable_flags(self):
        """Test that each flag turns its field off."""
        settings = TemplateSettings.from_cli_args(["--no-headers", "--lenient"])
        assert settings.include_headers is False
        assert settings.strict_undefined is False
        assert settings.include_footers is True

    def test_unknown_args_ignored(self):
        """Test that unrelated arguments are ignored."""
        settings = TemplateSettings.from_cli_args(["--debug", "render"])
        assert settings == TemplateSettings()

    def test_base_is_updated(self):
        """Test that a base settings object is updated in place."""
        base = TemplateSettings(evaluate_on_parse=True)
        settings = TemplateSettings.from_cli_args(["--no-tables"], base=base)
        assert settings is base
        assert settings.scan_tables is False
        assert settings.evaluate_on_parse is True


class TestTemplateSettingsToCliArgs:
    """Test TemplateSettings.to_cli_args()."""

    def test_defaults_produce_no_args(self):
        """Test that default settings need no flags."""
        assert TemplateSettings().to_cli_args() == []

    def test_round_trip(self):
        """Test that flags survive a parse and regenerate cycle."""
        flags = ["--no-footers", "--keep-revisions"]
        regenerated = TemplateSettings.from_cli_args(flags).to_cli_args()
        assert sorted(regenerated) == sorted(flags)

    def test_all_flags(self):
        """Test that disabling every switch yields every flag."""
        settings = TemplateSettings()
        for field_name in FIELD_TO_CLI:
            setattr(settings, field_name, False)
        assert sorted(settings.to_cli_args()) == sorted(CLI_ARG_MAP)
