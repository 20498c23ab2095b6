"""Structured logging configuration for telemetry components"""
import logging
import sys
from typing import Any, Dict
import structlog
from structlog.stdlib import LoggerFactory
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, StackInfoRenderer
from config import Config


def setup_structured_logging(config: Config) -> None:
    """Setup structured logging with JSON or console rendering"""

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.logger_style == "console":
        processors.append(ConsoleRenderer())
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, config.log_level.upper())

    handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(str(config.log_file))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=handlers,
        force=True
    )

    # Metadata probes are expected to fail off-cloud
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def log_detection_result(logger: structlog.stdlib.BoundLogger, provider: str, environment: str, detected: bool) -> None:
    """Log the outcome of a cloud environment detection"""
    logger.info(
        "Cloud environment detection completed",
        provider=provider,
        environment=environment,
        detected=detected,
        event_type="env_detection"
    )


def log_error(logger: structlog.stdlib.BoundLogger, error: Exception, context: Dict[str, Any] = None) -> None:
    """Log error with structured context"""
    logger.error(
        "Error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        event_type="error",
        exc_info=True
    )
