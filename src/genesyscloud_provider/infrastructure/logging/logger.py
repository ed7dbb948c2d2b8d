import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, List, Optional

import structlog

from genesyscloud_provider.config.schemas.logging_schema import LoggingConfig

_SHARED_PROCESSORS: List[Any] = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.CallsiteParameterAdder(
        {
            structlog.processors.CallsiteParameter.MODULE,
            structlog.processors.CallsiteParameter.FUNC_NAME,
            structlog.processors.CallsiteParameter.LINENO,
        }
    ),
]


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def setup_logging(config: Optional[LoggingConfig] = None) -> structlog.stdlib.BoundLogger:
    """
    Set up structured logging for the provider using structlog.

    Args:
        config: Logging configuration. If None, defaults are used.

    Returns:
        Configured structlog logger instance.
    """
    config = config or LoggingConfig()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))

    if config.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_SHARED_PROCESSORS,
    )

    handlers: List[logging.Handler] = []

    if config.destination in ("file", "both"):
        log_file = os.path.expandvars(config.file.path)
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.file.max_size_mb * 1024 * 1024,
            backupCount=config.file.backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if config.destination in ("stdout", "both"):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    # Remove any existing handlers and add new ones
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    _configure_structlog()

    logger = structlog.get_logger("genesyscloud_provider")
    logger.debug(
        "Logging configured",
        log_level=config.level,
        log_destination=config.destination,
        log_format=config.format,
    )
    return logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger bound to the given module name.

    Events are wrapped for ``ProcessorFormatter``, so the first call installs
    the default handlers via ``setup_logging`` when the root logger has none.
    Existing handlers are kept and only structlog is configured.
    """
    if not structlog.is_configured():
        if logging.getLogger().handlers:
            _configure_structlog()
        else:
            setup_logging()
    return structlog.get_logger(name)
