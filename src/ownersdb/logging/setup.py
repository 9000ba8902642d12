"""
Structured logging setup.

Three independent pipelines:
1. File (JSON): only if config.file is set. Captures everything (DEBUG+).
2. Human handler (stderr): only HUMAN progress events.
3. Technical console (stderr): WARNING by default, -v INFO, -vv DEBUG.
   Excludes HUMAN.

--quiet silences pipelines 2 and 3; the file pipeline is unaffected.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import LoggingConfig
from .human import HumanBoundLogger, HumanLogHandler
from .levels import HUMAN

_NAMED_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "human": HUMAN,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(config: LoggingConfig, quiet: bool = False) -> None:
    """Configure all logging pipelines.

    Args:
        config: Logging configuration (level, file, verbose)
        quiet: If True, disables the human and console handlers
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()

    # Root logger lets everything through; handlers filter by level
    logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[])

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    # ── Pipeline 1: JSON file ─────────────────────────────────────────────
    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(file_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(file_handler)

    if not quiet:
        # ── Pipeline 2: Human handler ─────────────────────────────────────
        level = _NAMED_LEVELS.get(config.level, HUMAN)
        if level <= HUMAN:
            human_handler = HumanLogHandler(stream=sys.stderr)
            human_handler.setLevel(HUMAN)
            human_handler.addFilter(lambda record: record.levelno == HUMAN)
            logging.root.addHandler(human_handler)

        # ── Pipeline 3: Technical console ─────────────────────────────────
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_console_level(config))
        console_handler.addFilter(lambda record: record.levelno != HUMAN)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(console_handler)

    structlog.configure(
        processors=shared_processors + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=HumanBoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _console_level(config: LoggingConfig) -> int:
    """Console threshold: the lower of the -v count and an explicit level.

    Without -v   -> WARNING (skipped ports, fatal errors)
    -v           -> INFO
    -vv and more -> DEBUG
    """
    by_verbose = {0: logging.WARNING, 1: logging.INFO}.get(config.verbose, logging.DEBUG)
    by_level = _NAMED_LEVELS.get(config.level, HUMAN)
    if by_level == HUMAN:
        return by_verbose
    return min(by_verbose, by_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structured logger (usually get_logger(__name__))."""
    return structlog.get_logger(name)
