"""
Configuration module for removable models.

Holds the package-wide settings, the per-model removal options fixed at
registration time, and the per-call save options.
"""

import os
from datetime import datetime
from typing import Any, Dict, Optional

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RemovableSettings(BaseModel):
    """Package-wide defaults for removable models.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (REMOVABLE_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> settings = RemovableSettings(timezone="Europe/Berlin")
        >>> os.environ["REMOVABLE_DEFAULT_VALIDATE"] = "true"
        >>> settings = RemovableSettings.from_env()

    Note:
        Defaults only apply to models registered after the settings change.
        Options of already registered models are frozen.
    """

    default_column_name: str = Field(
        "removed_at", description="Marker column used when a model names none"
    )
    default_validate: bool = Field(
        False, description="Run validation rules on removal saves by default"
    )
    timezone: str = Field("UTC", description="Timezone of removal timestamps")
    log_mutations: bool = Field(
        False, description="Log every remove and unremove at DEBUG level"
    )

    @field_validator("default_column_name")
    @classmethod
    def validate_column_name(cls, v: str) -> str:
        """Ensure the default column name is not blank."""
        return _check_column_name(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone is known to pytz."""
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump()

    def now(self) -> datetime:
        """Current time in the configured timezone."""
        return datetime.now(pytz.timezone(self.timezone))

    @classmethod
    def from_env(cls, prefix: str = "REMOVABLE_") -> "RemovableSettings":
        """
        Load settings from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Settings instance
        """
        settings: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var not in os.environ:
                continue
            value = os.environ[env_var]

            if field_info.annotation == bool:
                settings[field_name] = value.lower() in ("true", "1", "yes", "on")
            else:
                settings[field_name] = value

        return cls.model_validate(settings)


class RemovableOptions(BaseModel):
    """Options a model is registered with. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    column_name: str = Field("removed_at", description="Marker column name")
    validate_on_remove: bool = Field(
        False,
        alias="validate",
        description="Run validation rules on removal saves",
    )

    @field_validator("column_name", mode="before")
    @classmethod
    def validate_column_name(cls, v: Any) -> str:
        """
        Accept any non-empty string-like name.

        Database column names need not be identifiers; whether the mapped
        table has the column is checked at registration.
        """
        return _check_column_name(str(v))

    @classmethod
    def build(
        cls,
        column_name: Optional[str] = None,
        validate: Optional[bool] = None,
        settings: Optional[RemovableSettings] = None,
        previous: Optional["RemovableOptions"] = None,
    ) -> "RemovableOptions":
        """
        Build options, filling omitted values.

        Omitted values come from ``previous`` when given (re-registration
        merges into the existing options), otherwise from the package
        settings.
        """
        if previous is not None:
            defaults = {
                "column_name": previous.column_name,
                "validate": previous.validate_on_remove,
            }
        else:
            settings = settings or get_config()
            defaults = {
                "column_name": settings.default_column_name,
                "validate": settings.default_validate,
            }
        if column_name is not None:
            defaults["column_name"] = column_name
        if validate is not None:
            defaults["validate"] = validate
        return cls.model_validate(defaults)

    def save_options(self) -> "SaveOptions":
        """Default save options for removal saves of this model."""
        return SaveOptions(validate=self.validate_on_remove)


class SaveOptions(BaseModel):
    """Options accepted by the save primitive."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    run_validations: bool = Field(
        True, alias="validate", description="Run validation rules before flushing"
    )

    def merged(self, overrides: Dict[str, Any]) -> "SaveOptions":
        """Return a copy with caller overrides applied on top of these options."""
        if not overrides:
            return self
        values = self.model_dump(by_alias=True)
        values.update(overrides)
        return SaveOptions.model_validate(values)


def _check_column_name(name: str) -> str:
    if not name.strip():
        raise ValueError("Column name must not be blank")
    return name


# Global settings instance
_config: Optional[RemovableSettings] = None


def get_config() -> RemovableSettings:
    """
    Get the global settings instance.

    Returns:
        Global settings, loaded from the environment on first use
    """
    global _config

    if _config is None:
        _config = RemovableSettings.from_env()

    return _config


def set_config(config: Optional[RemovableSettings]) -> None:
    """
    Set the global settings instance.

    Args:
        config: Settings to use, or None to reload from the environment
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> RemovableSettings:
    """
    Update the global settings with keyword arguments.

    Args:
        **kwargs: Setting values

    Returns:
        Updated settings
    """
    global _config

    if _config is None:
        _config = RemovableSettings(**kwargs)
    else:
        values = _config.to_dict()
        values.update(kwargs)
        _config = RemovableSettings(**values)

    return _config
