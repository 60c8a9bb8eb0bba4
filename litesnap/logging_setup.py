"""Logging configuration for the litesnap CLI."""

from __future__ import annotations

import logging

import json_log_formatter

from .config import ObservabilityConfig

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: ObservabilityConfig | None = None, verbose: bool = False) -> None:
    """Configure the root logger.

    Args:
        config: Observability configuration (level and format)
        verbose: Force DEBUG level
    """
    config = config or ObservabilityConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)

    if config.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
