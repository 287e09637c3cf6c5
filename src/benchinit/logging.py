# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter

_DEFAULT_NOISY_LOGGERS = ["asyncio", "markdown_it"]

_PLAIN_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
_STRUCTURED_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class LoggerConfig:
    name: str
    level: str


@dataclass
class OutputConfig:
    destination: TextIO | Path
    structured: bool


@dataclass
class LoggingConfig:
    logger_configs: list[LoggerConfig]
    output_configs: list[OutputConfig]
    root_level: str = "INFO"
    to_silence: list[str] = field(default_factory=lambda: list(_DEFAULT_NOISY_LOGGERS))

    @classmethod
    def default(cls, level: str = "WARNING", structured: bool = False) -> LoggingConfig:
        """Logging setup used by the CLI: everything on stderr, stdout stays reserved for results."""
        return cls(
            logger_configs=[LoggerConfig(name="benchinit", level=level)],
            output_configs=[OutputConfig(destination=sys.stderr, structured=structured)],
            root_level=level,
        )


def configure_logging(config: LoggingConfig) -> None:
    root_logger = logging.getLogger()

    # Remove all handlers
    root_logger.handlers.clear()

    for output_config in config.output_configs:
        root_logger.addHandler(_create_handler(output_config))

    root_logger.setLevel(config.root_level)

    for logger_config in config.logger_configs:
        logger = logging.getLogger(logger_config.name)
        logger.setLevel(logger_config.level)

    for name in config.to_silence:
        quiet_noisy_logger(name)


def quiet_noisy_logger(name: str) -> None:
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)


def _create_handler(output_config: OutputConfig) -> logging.Handler:
    if isinstance(output_config.destination, Path):
        handler: logging.Handler = logging.FileHandler(str(output_config.destination))
    else:
        handler = logging.StreamHandler(output_config.destination)

    if output_config.structured:
        formatter: logging.Formatter = JsonFormatter(_STRUCTURED_FORMAT)
    else:
        formatter = logging.Formatter(_PLAIN_FORMAT, datefmt="%H:%M:%S")

    handler.setFormatter(formatter)
    return handler
