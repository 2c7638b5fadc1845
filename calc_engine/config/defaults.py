"""Default configuration parameters for the calculator engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DisplayParams:
    """Display rendering parameters."""
    max_length: int = 16                   # Display width before scientific fallback
    round_digits: int = 12                 # Decimal digits kept when rounding results
    exponent_digits: int = 10              # Mantissa fraction digits in scientific form
    error_text: str = "Error"              # Marker shown for any failed evaluation


@dataclass(frozen=True)
class EngineParams:
    """Initial engine state."""
    angle_mode: str = "radians"            # "radians" or "degrees"
    mode: str = "advanced"                 # "basic" or "advanced"


@dataclass(frozen=True)
class HistoryParams:
    """Calculation history parameters."""
    enabled: bool = True
    max_entries: int = 50                  # Most-recent entries kept
    db_path: str = "calc_history.db"


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    display: DisplayParams
    engine: EngineParams
    history: HistoryParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        display=DisplayParams(),
        engine=EngineParams(),
        history=HistoryParams(),
        logging=LoggingParams(),
    )
