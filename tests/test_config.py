"""Tests for settings, removal options and save options."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from removable import (
    RemovableOptions,
    RemovableSettings,
    SaveOptions,
    configure,
    get_config,
    set_config,
)


class TestRemovableSettings:
    """Test package-wide settings."""

    def test_defaults(self):
        settings = RemovableSettings()

        assert settings.default_column_name == "removed_at"
        assert settings.default_validate is False
        assert settings.timezone == "UTC"
        assert settings.log_mutations is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REMOVABLE_DEFAULT_COLUMN_NAME", "deleted_on")
        monkeypatch.setenv("REMOVABLE_DEFAULT_VALIDATE", "yes")
        monkeypatch.setenv("REMOVABLE_TIMEZONE", "Europe/Berlin")

        settings = RemovableSettings.from_env()

        assert settings.default_column_name == "deleted_on"
        assert settings.default_validate is True
        assert settings.timezone == "Europe/Berlin"

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError) as exc:
            RemovableSettings(timezone="Mars/Olympus_Mons")

        assert "Unknown timezone" in str(exc.value)

    def test_column_name_must_not_be_blank(self):
        with pytest.raises(ValidationError):
            RemovableSettings(default_column_name=" ")

    def test_now_is_timezone_aware(self):
        now = RemovableSettings(timezone="America/New_York").now()

        assert isinstance(now, datetime)
        assert now.tzinfo is not None
        assert now.tzinfo.zone == "America/New_York"


class TestGlobalSettings:
    """Test the module-level settings helpers."""

    def test_get_config_reads_environment(self, monkeypatch):
        monkeypatch.setenv("REMOVABLE_LOG_MUTATIONS", "true")
        set_config(None)

        assert get_config().log_mutations is True

    def test_configure_updates(self):
        configure(timezone="Asia/Tokyo")
        settings = configure(default_validate=True)

        assert settings.timezone == "Asia/Tokyo"
        assert settings.default_validate is True
        assert get_config() is settings

    def test_set_config(self):
        settings = RemovableSettings(default_column_name="gone_at")
        set_config(settings)

        assert get_config() is settings


class TestRemovableOptions:
    """Test per-model options."""

    def test_build_defaults(self):
        options = RemovableOptions.build()

        assert options.column_name == "removed_at"
        assert options.validate_on_remove is False

    def test_build_uses_settings(self):
        configure(default_column_name="deleted_at", default_validate=True)

        options = RemovableOptions.build()

        assert options.column_name == "deleted_at"
        assert options.validate_on_remove is True

    def test_explicit_values_win(self):
        configure(default_validate=True)

        options = RemovableOptions.build(column_name="use_this_column", validate=False)

        assert options.column_name == "use_this_column"
        assert options.validate_on_remove is False

    def test_build_from_previous(self):
        configure(default_column_name="deleted_at")
        previous = RemovableOptions.build(column_name="hidden_at")

        options = RemovableOptions.build(validate=True, previous=previous)

        assert options.column_name == "hidden_at"
        assert options.validate_on_remove is True

    def test_column_name_need_not_be_identifier(self):
        assert RemovableOptions.build(column_name="removed-at").column_name == (
            "removed-at"
        )

    def test_options_are_frozen(self):
        options = RemovableOptions.build()

        with pytest.raises(ValidationError):
            options.column_name = "other"

    def test_unknown_option(self):
        with pytest.raises(ValidationError):
            RemovableOptions.model_validate({"column_name": "x", "cascade": True})

    def test_save_options(self):
        assert RemovableOptions.build(validate=True).save_options().run_validations
        assert not RemovableOptions.build().save_options().run_validations


class TestSaveOptions:
    """Test merging caller save options."""

    def test_caller_overrides_default(self):
        merged = SaveOptions(validate=False).merged({"validate": True})

        assert merged.run_validations is True

    def test_no_overrides_returns_same(self):
        options = SaveOptions(validate=True)

        assert options.merged({}) is options

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            SaveOptions(validate=True).merged({"touch": False})
