# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import typer
from rich.console import Console
from rich.text import Text

# Diagnostics go to stderr; stdout is reserved for benchmark results so that
# they can be piped straight into tools like benchstat.
_console = Console(stderr=True, highlight=False)

USAGE = """\
Usage of benchinit:

	benchinit [benchinit flags] [go test flags] [packages]

For example:

	benchinit -count=10 .

All flags accepted by 'go test', including the benchmarking ones, should be
accepted. See 'go help testflag' for a complete list.

benchinit flags:

	-r          include the init costs of each package's dependencies
	-inprocess  re-run init functions within the benchmark process
"""


def print_result(line: str) -> None:
    """Print a benchmark result or passthrough line to stdout, verbatim.

    Args:
        line: Line to print, without its trailing newline
    """
    typer.echo(line)


def print_error(message: str) -> None:
    """Print an error message with red styling.

    Args:
        message: Error message to display, never interpreted as markup
    """
    _console.print(Text(message, style="red"), soft_wrap=True)


def print_warning(message: str) -> None:
    """Print a warning message with yellow styling.

    Args:
        message: Warning message to display
    """
    _console.print(Text(message, style="yellow"), soft_wrap=True)


def print_usage() -> None:
    _console.print(Text(USAGE), end="", soft_wrap=True)
