"""
Validation rules for mapped records.

SQLAlchemy models carry no validation of their own, so removable models
declare rules in ``__validations__`` and the save primitive checks them
before flushing::

    class Invalid(Base, Removable):
        __validations__ = {"name": {ValidationRule.PRESENCE: True}}
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional


class ValidationRule(str, Enum):
    """Rules understood by ``__validations__``."""

    PRESENCE = "presence"
    REQUIRED = "required"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"
    MIN_VALUE = "min_value"
    MAX_VALUE = "max_value"
    IN_LIST = "in_list"
    NOT_IN_LIST = "not_in_list"
    CUSTOM = "custom"


@dataclass
class ValidationResult:
    """Result of validating a record."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    field_errors: Dict[str, List[str]] = field(default_factory=dict)

    def add_error(self, message: str, field: Optional[str] = None) -> None:
        """Add validation error."""
        self.is_valid = False
        if field:
            self.field_errors.setdefault(field, []).append(message)
        else:
            self.errors.append(message)

    def full_messages(self) -> List[str]:
        """Errors as sentences, field errors prefixed with a humanized field name."""
        messages = list(self.errors)
        for field_name, errors in self.field_errors.items():
            label = field_name.replace("_", " ").capitalize()
            messages.extend(f"{label} {error}" for error in errors)
        return messages


class RecordValidator:
    """Applies ``__validations__`` rules to record attributes."""

    def __init__(self) -> None:
        """Initialize validator."""
        self.custom_validators: Dict[str, Callable[[Any], bool]] = {}

    def register_validator(self, name: str, validator: Callable[[Any], bool]) -> None:
        """
        Register custom validator function.

        Args:
            name: Validator name, referenced by ``ValidationRule.CUSTOM``
            validator: Function that returns True if valid
        """
        self.custom_validators[name] = validator

    def validate(self, record: Any) -> ValidationResult:
        """
        Validate a record against its class rules and its own hook.

        Args:
            record: Mapped instance to validate

        Returns:
            ValidationResult
        """
        result = ValidationResult()
        rules: Mapping[str, Mapping[str, Any]] = getattr(
            type(record), "__validations__", {}
        )

        for field_name, field_rules in rules.items():
            normalized = {
                ValidationRule(key): value for key, value in field_rules.items()
            }
            self._validate_value(
                getattr(record, field_name, None), field_name, normalized, result
            )

        hook = getattr(record, "validate_record", None)
        if callable(hook):
            hook(result)

        return result

    def _validate_value(
        self,
        value: Any,
        field_name: str,
        rules: Mapping[str, Any],
        result: ValidationResult,
    ) -> None:
        if rules.get(ValidationRule.PRESENCE) and _is_blank(value):
            result.add_error("can't be blank", field_name)
            return

        if rules.get(ValidationRule.REQUIRED) and value is None:
            result.add_error("is required", field_name)
            return

        if value is None:
            return

        if isinstance(value, str):
            if ValidationRule.MIN_LENGTH in rules:
                minimum = rules[ValidationRule.MIN_LENGTH]
                if len(value) < minimum:
                    result.add_error(
                        f"is too short (minimum is {minimum} characters)", field_name
                    )

            if ValidationRule.MAX_LENGTH in rules:
                maximum = rules[ValidationRule.MAX_LENGTH]
                if len(value) > maximum:
                    result.add_error(
                        f"is too long (maximum is {maximum} characters)", field_name
                    )

            if ValidationRule.PATTERN in rules:
                if not re.match(rules[ValidationRule.PATTERN], value):
                    result.add_error("is invalid", field_name)

        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            if ValidationRule.MIN_VALUE in rules:
                if value < rules[ValidationRule.MIN_VALUE]:
                    result.add_error(
                        f"must be greater than or equal to "
                        f"{rules[ValidationRule.MIN_VALUE]}",
                        field_name,
                    )

            if ValidationRule.MAX_VALUE in rules:
                if value > rules[ValidationRule.MAX_VALUE]:
                    result.add_error(
                        f"must be less than or equal to "
                        f"{rules[ValidationRule.MAX_VALUE]}",
                        field_name,
                    )

        if ValidationRule.IN_LIST in rules:
            if value not in rules[ValidationRule.IN_LIST]:
                result.add_error("is not included in the list", field_name)

        if ValidationRule.NOT_IN_LIST in rules:
            if value in rules[ValidationRule.NOT_IN_LIST]:
                result.add_error("is reserved", field_name)

        if ValidationRule.CUSTOM in rules:
            custom_name = rules[ValidationRule.CUSTOM]
            if custom_name not in self.custom_validators:
                raise KeyError(f"Unknown custom validator: {custom_name}")
            if not self.custom_validators[custom_name](value):
                result.add_error("is invalid", field_name)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


# Global validator instance
_validator: Optional[RecordValidator] = None


def get_validator() -> RecordValidator:
    """Get global validator instance."""
    global _validator
    if _validator is None:
        _validator = RecordValidator()
    return _validator


def validate_record(record: Any) -> ValidationResult:
    """
    Validate a record with the global validator.

    Args:
        record: Mapped instance to validate

    Returns:
        ValidationResult
    """
    return get_validator().validate(record)
