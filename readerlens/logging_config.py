"""
Centralized logging configuration for readerlens.

Separates logs into files by component:

    logs/
    ├── server.log      # HTTP API requests
    ├── llm.log         # Provider selection, LLM calls, parse failures
    ├── documents.log   # Upload validation and text extraction
    ├── config.log      # Settings and prompt loading
    └── errors.log      # ALL errors from ALL components (ERROR+)

Usage:
    from readerlens.logging_config import setup_logging
    setup_logging("server")   # activates: server, llm, documents, config
    setup_logging("cli")      # activates: llm, documents, config
"""

import logging
import os
import sys
from pathlib import Path

import structlog

LOGS_DIR = Path(os.getenv("READERLENS_LOG_DIR", Path.cwd() / "logs"))

LOG_CATEGORIES = {
    "server": "server.log",
    "llm": "llm.log",
    "documents": "documents.log",
    "config": "config.log",
}

# Which categories each process activates
PROCESS_CATEGORIES = {
    "server": ["server", "llm", "documents", "config"],
    "cli": ["llm", "documents", "config"],
}

_initialized = False


def setup_logging(component: str = "app", level: str = "INFO", log_to_files: bool = True) -> None:
    """Configure logging with per-category file handlers.

    Args:
        component: Process name ("server" or "cli"); selects the log files.
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_to_files: Write logs/ files in addition to the console.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = getattr(logging, level.upper(), logging.INFO)

    # -----------------------------------------------------------------------
    # Root logger: console + errors.log
    # -----------------------------------------------------------------------
    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_h = logging.StreamHandler(sys.stderr)
    console_h.setLevel(log_level)
    console_h.setFormatter(fmt)
    root.addHandler(console_h)

    categories = PROCESS_CATEGORIES.get(component, list(LOG_CATEGORIES.keys()))

    if log_to_files:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)

        errors_h = logging.FileHandler(str(LOGS_DIR / "errors.log"), encoding="utf-8")
        errors_h.setLevel(logging.ERROR)
        errors_h.setFormatter(fmt)
        root.addHandler(errors_h)

        for category in categories:
            cat_logger = logging.getLogger(category)
            cat_logger.setLevel(log_level)
            if not cat_logger.handlers:
                file_h = logging.FileHandler(
                    str(LOGS_DIR / LOG_CATEGORIES[category]), encoding="utf-8",
                )
                file_h.setLevel(log_level)
                file_h.setFormatter(fmt)
                cat_logger.addHandler(file_h)
            # Propagate to root so console + errors.log still work
            cat_logger.propagate = True

    # -----------------------------------------------------------------------
    # structlog → stdlib bridge
    # -----------------------------------------------------------------------
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(component).info(
        "logging_initialized",
        component=component,
        categories=categories,
        level=level,
    )
