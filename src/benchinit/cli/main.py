# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass

import typer
from pydantic import ValidationError

from benchinit.cli.commands import bench
from benchinit.cli.ui import print_error
from benchinit.config.flags import DEFAULT_FLAG_TABLES, FlagTables
from benchinit.config.settings import Settings
from benchinit.engine.triage import SEPARATOR, FlagTriage, filter_flags, parse_go_bool
from benchinit.logging import LoggingConfig, configure_logging

# Initialize Typer app with custom configuration
app = typer.Typer(
    name="benchinit",
    help="Benchmark the initialization cost of Go packages",
    add_completion=False,
    rich_markup_mode="rich",
)
# Help is a benchinit flag like any other, exiting with code 2 like Go's flag package.
app.command(name="benchinit", context_settings={"help_option_names": []})(bench.bench_command)


@dataclass(frozen=True)
class BenchContext:
    """State shared with the command: routed flags and settings."""

    flags: FlagTriage
    settings: Settings


def tool_args(flags: FlagTriage, tables: FlagTables = DEFAULT_FLAG_TABLES) -> list[str]:
    """Arguments for our own command-line parser: our flags, then the packages.

    Boolean flags given Go-style values, like `-r=true` or `-inprocess=0`, become the
    bare flag or are left out. Flag parsing stops at the first package, as with Go's
    flag package.
    """
    args: list[str] = []
    for arg in flags.tool_flags:
        name, has_value, value = arg.lstrip("-").partition("=")
        enabled = parse_go_bool(value) if has_value and name in tables.boolean_flags else None
        if enabled is None:
            args.append(arg)
        elif enabled:
            args.append(arg.partition("=")[0])
    positional = list(flags.positional)
    if positional and positional[0] != SEPARATOR:
        positional.insert(0, SEPARATOR)
    return [*args, *positional]


def main1(argv: Sequence[str] | None = None, tables: FlagTables = DEFAULT_FLAG_TABLES) -> int:
    """Run benchinit and return its exit code.

    Args:
        argv: Command-line arguments, without the program name. Defaults to sys.argv[1:].
        tables: Flag knowledge used to route arguments.

    Returns:
        0 on success, 1 on any benchmarking failure, 2 on usage errors or help.
    """
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        print_error(f"invalid BENCHINIT_* settings: {e}")
        return 2
    configure_logging(LoggingConfig.default(level=settings.log_level, structured=settings.structured_logs))

    # Figure out which flags should be passed on to 'go list' and 'go test'.
    flags = filter_flags(sys.argv[1:] if argv is None else argv, tables)
    try:
        # Typer reports usage errors itself and always exits in standalone mode.
        app(
            args=tool_args(flags, tables),
            prog_name="benchinit",
            obj=BenchContext(flags=flags, settings=settings),
        )
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    return 0


def main() -> None:
    """Main entry point for the CLI."""
    sys.exit(main1())


if __name__ == "__main__":
    main()
