import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.stdlib import BoundLogger


if TYPE_CHECKING:
    from reskit.config.settings import Settings


# Loggers routed through the root handler installed by setup_logging
_MANAGED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "reskit")


def configure_structlog(json_logs: bool = False) -> None:
    """Configure structlog with the processors shared by every reskit logger."""
    # JSON output keeps tracebacks structured instead of pre-rendered text
    exc_processor = (
        structlog.processors.dict_tracebacks
        if json_logs
        else structlog.processors.format_exc_info
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        exc_processor,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        # Hand the event dict to ProcessorFormatter so we don't double-render
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,  # Don't cache to allow reconfiguration
    )


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> BoundLogger:
    """
    Setup logging for reskit and the ASGI stack it runs under.
    Returns a structlog logger instance.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # Set the root level first so structlog's level filter can see it
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    configure_structlog(json_logs=json_logs)

    handler = logging.StreamHandler(sys.stdout)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    # ProcessorFormatter renders both structlog and stdlib records
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
        )
    )
    root_logger.handlers = [handler]

    for logger_name in _MANAGED_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(level)

    return structlog.get_logger()  # type: ignore[no-any-return]


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def configure_logging(settings: "Settings | None" = None) -> None:
    """Apply the configured level and format unless structlog is already set up."""
    if structlog.is_configured():
        return
    if settings is None:
        from reskit.config.settings import get_settings

        settings = get_settings()
    setup_logging(
        json_logs=settings.logging.json_logs,
        log_level=settings.logging.level,
    )
