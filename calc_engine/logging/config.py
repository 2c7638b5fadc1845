"""
Centralized logging configuration for the calculator engine.

This module provides standardized logging configuration using structlog
for all components. Evaluation outcomes, history writes and configuration
problems are logged as structured events through this configuration.
"""
import logging
import sys
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.types import FilteringBoundLogger

if TYPE_CHECKING:
    from ..expression.models import EvaluationResult


SHARED_PROCESSORS = (
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
)


def build_processors(
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None,
) -> list:
    """
    Assemble the processor chain, ending in the console or JSON renderer.

    Args:
        format_json: Render events as JSON lines instead of console output
        include_timestamp: Add an ISO timestamp to every event
        include_caller: Add the calling file name and line number
        extra_processors: Processors inserted just before the renderer
    """
    chain = list(SHARED_PROCESSORS)

    if include_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso"))
    if include_caller:
        callsite = structlog.processors.CallsiteParameter
        chain.append(structlog.processors.CallsiteParameterAdder(
            parameters=[callsite.FILENAME, callsite.LINENO]
        ))
    chain.extend(extra_processors or [])

    renderer = (structlog.processors.JSONRenderer() if format_json
                else structlog.dev.ConsoleRenderer(colors=True))
    chain.append(renderer)
    return chain


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Route structlog through the standard library at ``level``.

    Call once at startup, normally with the values of ``LoggingParams``.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s",
    )

    structlog.configure(
        processors=build_processors(format_json, include_timestamp,
                                    include_caller, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_evaluation_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound with evaluator context.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for evaluation outcomes
    """
    logger = get_logger(name)

    return logger.bind(subsystem="evaluator")


def log_evaluation(
    logger: FilteringBoundLogger,
    expression: str,
    result: "EvaluationResult",
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log an evaluation outcome with standardized format.

    Successful evaluations are logged at debug level, failures at warning
    level together with their error kind.

    Args:
        logger: Structlog logger instance
        expression: Space-joined expression text
        result: Outcome of the evaluation
        context: Additional context data
    """
    bound_logger = logger.bind(
        expression=expression,
        display=result.display,
        outcome="OK" if result.ok else "ERROR",
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if result.ok:
        bound_logger.debug("Expression evaluated", value=result.value)
    else:
        bound_logger.warning(
            "Expression evaluation failed",
            error_kind=result.error.value if result.error else None,
            raw_value=result.raw_value,
        )
