"""structlog configuration.

Call ``configure_logging`` once at startup (the CLI does this). Modules log
through ``structlog.get_logger(__name__)`` and bind per-session context with
``structlog.contextvars.bound_contextvars(session_key=...)``.
"""

import logging

import structlog
from structlog.typing import Processor


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog for console (colored) or JSON output."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
