# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field

from benchinit.config.base import ConfigBase

# Obtained from 'go help build'. The flags -a, -n, -x and -v are left out on purpose:
# they shouldn't be used in nested cmd/go calls, and -v is a test flag for us.
GO_BUILD_FLAGS = frozenset(
    {
        "asan",
        "asmflags",
        "buildmode",
        "buildvcs",
        "compiler",
        "gccgoflags",
        "gcflags",
        "installsuffix",
        "ldflags",
        "linkshared",
        "mod",
        "modcacherw",
        "modfile",
        "msan",
        "overlay",
        "p",
        "pkgdir",
        "race",
        "tags",
        "toolexec",
        "trimpath",
        "work",
        "workfile",
    }
)

# Obtained from 'go help build' and 'go help testflag', plus our own boolean flags.
GO_BOOLEAN_FLAGS = frozenset(
    {
        # Global help.
        "h",
        "help",
        # Shared build flags.
        "a",
        "i",
        "n",
        "v",
        "work",
        "x",
        "race",
        "msan",
        "asan",
        "linkshared",
        "modcacherw",
        "trimpath",
        "buildvcs",
        # Test flags.
        "c",
        "json",
        "cover",
        "failfast",
        "short",
        "benchmem",
        # benchinit flags.
        "r",
        "inprocess",
    }
)

ROLLUP_FLAG = "r"
INPROCESS_FLAG = "inprocess"

BENCHINIT_TOOL_FLAGS = frozenset({ROLLUP_FLAG, INPROCESS_FLAG})
HELP_FLAGS = frozenset({"h", "help"})


class FlagTables(ConfigBase):
    """Static flag knowledge used to route command-line flags.

    Attributes:
        build_flags: Flags forwarded to both 'go list' and 'go test'.
        boolean_flags: Flags which never consume a following argument as their value.
        tool_flags: Flags understood by benchinit itself.
        help_flags: Flags requesting the usage text.
    """

    build_flags: frozenset[str] = Field(default=GO_BUILD_FLAGS)
    boolean_flags: frozenset[str] = Field(default=GO_BOOLEAN_FLAGS)
    tool_flags: frozenset[str] = Field(default=BENCHINIT_TOOL_FLAGS)
    help_flags: frozenset[str] = Field(default=HELP_FLAGS)

    def is_tool_flag(self, name: str) -> bool:
        # Exact matches only; a prefix match would swallow user test flags.
        return name in self.tool_flags or name in self.help_flags


DEFAULT_FLAG_TABLES = FlagTables()
