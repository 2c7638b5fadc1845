"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import DisplayParams, EngineParams, HistoryParams, LoggingParams

ANGLE_MODES = ("radians", "degrees")
CALCULATOR_MODES = ("basic", "advanced")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_SECTIONS = {
    "display": DisplayParams,
    "engine": EngineParams,
    "history": HistoryParams,
    "logging": LoggingParams,
}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_display_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate display parameters."""
        errors = []

        if "max_length" in params:
            value = params["max_length"]
            # "-1.0000000000e+100" is the widest scientific rendering
            if not _is_positive_int(value) or value < 8:
                errors.append(ValidationError(
                    field="max_length",
                    message="Must be an integer of at least 8",
                    value=value
                ))

        if "round_digits" in params:
            value = params["round_digits"]
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 15:
                errors.append(ValidationError(
                    field="round_digits",
                    message="Must be an integer between 0 and 15",
                    value=value
                ))

        if "exponent_digits" in params:
            value = params["exponent_digits"]
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 16:
                errors.append(ValidationError(
                    field="exponent_digits",
                    message="Must be an integer between 0 and 16",
                    value=value
                ))

        if "error_text" in params:
            value = params["error_text"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="error_text",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_engine_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate engine parameters."""
        errors = []

        if "angle_mode" in params and params["angle_mode"] not in ANGLE_MODES:
            errors.append(ValidationError(
                field="angle_mode",
                message=f"Must be one of {', '.join(ANGLE_MODES)}",
                value=params["angle_mode"]
            ))

        if "mode" in params and params["mode"] not in CALCULATOR_MODES:
            errors.append(ValidationError(
                field="mode",
                message=f"Must be one of {', '.join(CALCULATOR_MODES)}",
                value=params["mode"]
            ))

        return errors

    @staticmethod
    def validate_history_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate history parameters."""
        errors = []

        if "enabled" in params and not isinstance(params["enabled"], bool):
            errors.append(ValidationError(
                field="enabled",
                message="Must be a boolean",
                value=params["enabled"]
            ))

        if "max_entries" in params and not _is_positive_int(params["max_entries"]):
            errors.append(ValidationError(
                field="max_entries",
                message="Must be a positive integer",
                value=params["max_entries"]
            ))

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="db_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a merged configuration dictionary section by section."""
        errors = []
        validators = {
            "display": cls.validate_display_params,
            "engine": cls.validate_engine_params,
            "history": cls.validate_history_params,
            "logging": cls.validate_logging_params,
        }

        for section, params in config.items():
            if section not in _SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=params
                ))
                continue

            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue

            known = {f.name for f in fields(_SECTIONS[section])}
            for key in params:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration field",
                        value=params[key]
                    ))

            errors.extend(validators[section](params))

        return errors
