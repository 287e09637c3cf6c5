# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Routing of command-line flags between cmd/go, the test binary and benchinit.

The approach was initially borrowed from garble, which has to pass flags down to
cmd/go in a very similar way.
"""

from __future__ import annotations

from collections.abc import Sequence

from benchinit.config.base import ConfigBase
from benchinit.config.flags import DEFAULT_FLAG_TABLES, FlagTables

SEPARATOR = "--"


class FlagTriage(ConfigBase):
    """Command-line arguments split by destination.

    Attributes:
        build: Build flags, forwarded to both 'go list' and 'go test'.
        test: Test flags, forwarded to 'go test' only.
        tool_flags: Flags for benchinit itself.
        positional: Everything from the first non-flag argument onwards.
    """

    build: tuple[str, ...] = ()
    test: tuple[str, ...] = ()
    tool_flags: tuple[str, ...] = ()
    positional: tuple[str, ...] = ()

    @property
    def tool(self) -> tuple[str, ...]:
        return self.tool_flags + self.positional


def flag_name(arg: str) -> str:
    """Turn `-name`, `--name` or `-name=value` into `name`."""
    name, _, _ = arg.lstrip("-").partition("=")
    return name


def parse_go_bool(value: str) -> bool | None:
    """Parse a boolean flag value the way Go's strconv.ParseBool does, or return None."""
    if value in ("1", "t", "T", "TRUE", "true", "True"):
        return True
    if value in ("0", "f", "F", "FALSE", "false", "False"):
        return False
    return None


def filter_flags(args: Sequence[str], tables: FlagTables = DEFAULT_FLAG_TABLES) -> FlagTriage:
    """Partition command-line arguments into build, test and benchinit destinations.

    Flags are scanned left to right until the first argument that isn't a flag, or
    the literal "--". Unknown flags are assumed to be test flags, so that flags added
    by newer Go versions are still forwarded.

    Args:
        args: Raw command-line arguments, without the program name.
        tables: Flag knowledge used to route and size each flag.

    Returns:
        The partition. Concatenating its sequences reproduces every input argument
        exactly once, and a flag's separate value always directly follows it.
    """
    build: list[str] = []
    test: list[str] = []
    tool: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]
        if not arg.startswith("-") or arg == SEPARATOR:
            return FlagTriage(build=tuple(build), test=tuple(test), tool_flags=tuple(tool), positional=tuple(args[i:]))

        name = flag_name(arg)
        start = i
        if "=" in arg:
            pass  # -flag=value
        elif name in tables.boolean_flags:
            pass  # -boolflag
        elif i + 1 < len(args):
            i += 1  # -flag value

        group = args[start : i + 1]
        if name in tables.build_flags:
            build.extend(group)
        elif tables.is_tool_flag(name):
            tool.extend(group)
        else:
            test.extend(group)
        i += 1

    return FlagTriage(build=tuple(build), test=tuple(test), tool_flags=tuple(tool))
