# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from benchinit.config.base import ConfigBase
from benchinit.config.constants import (
    DEFAULT_GO_COMMAND,
    DEFAULT_LOG_LEVEL,
    GO_COMMAND_ENV_VAR,
    LOG_JSON_ENV_VAR,
    LOG_LEVEL_ENV_VAR,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(ConfigBase):
    go_command: str = DEFAULT_GO_COMMAND
    log_level: LogLevel = DEFAULT_LOG_LEVEL
    structured_logs: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from BENCHINIT_* environment variables.

        Args:
            environ: Environment mapping to read from. Defaults to os.environ.

        Returns:
            Settings with every unset variable left at its default.
        """
        environ = os.environ if environ is None else environ
        return cls(
            go_command=environ.get(GO_COMMAND_ENV_VAR) or DEFAULT_GO_COMMAND,
            log_level=(environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper(),
            structured_logs=environ.get(LOG_JSON_ENV_VAR, "false").lower() in ("1", "true", "yes"),
        )
