"""Logging configuration for pairsync.

Everything is written through the "pairsync" logger. aiohttp's client and
websocket loggers share its handlers so transport failures behind a
ChannelError or NetworkUnavailable land in the same log file; they only
pass DEBUG records when pairsync itself runs at DEBUG.
"""

import logging
from pathlib import Path

from pairsync.config import Config

# aiohttp loggers relevant to session requests and the pairing channel
TRANSPORT_LOGGERS = ("aiohttp.client", "aiohttp.websocket")

# Module-level logger cache
_logger: logging.Logger | None = None


def setup_logging(config: Config) -> logging.Logger:
    """Set up logging based on configuration.

    Args:
        config: Configuration object with log settings.

    Returns:
        Configured logger instance.
    """
    global _logger

    # Return existing logger if already set up (idempotent)
    if _logger is not None:
        return _logger

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger = logging.getLogger("pairsync")
    logger.setLevel(level)
    logger.handlers.clear()

    # Log format: 2025-01-27 10:30:45 [INFO] message
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    formatter.datefmt = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = []
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Keep pairsync output out of the root logger
    logger.propagate = False

    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        transport = logging.getLogger(name)
        transport.setLevel(transport_level)
        transport.handlers.clear()
        for handler in handlers:
            transport.addHandler(handler)
        transport.propagate = False

    _logger = logger
    return logger


def reset_logging() -> None:
    """Reset logging state. Used for testing."""
    global _logger
    if _logger is None:
        return

    for handler in _logger.handlers:
        handler.close()
    _logger.handlers.clear()

    for name in TRANSPORT_LOGGERS:
        transport = logging.getLogger(name)
        transport.handlers.clear()
        transport.setLevel(logging.NOTSET)
        transport.propagate = True

    _logger = None
