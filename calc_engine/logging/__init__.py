"""
Logging configuration and utilities for the calculator engine.
"""
from .config import (
    build_processors,
    configure_logging,
    get_evaluation_logger,
    get_logger,
    log_evaluation,
)

__all__ = ["build_processors", "configure_logging", "get_logger", "get_evaluation_logger", "log_evaluation"]
