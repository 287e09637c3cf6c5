# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from benchinit.cli.controllers.bench_controller import BenchController
from benchinit.cli.ui import print_usage

if TYPE_CHECKING:
    from benchinit.cli.main import BenchContext


def _help_callback(value: bool) -> None:
    if value:
        print_usage()
        raise typer.Exit(code=2)


def bench_command(
    ctx: typer.Context,
    packages: list[str] | None = typer.Argument(
        None,
        help="Packages to benchmark. Defaults to the package in the current directory.",
        show_default=False,
    ),
    recursive: bool = typer.Option(
        False,
        "-r",
        "--r",
        help="Include the init costs of each package's dependencies.",
    ),
    inprocess: bool = typer.Option(
        False,
        "-inprocess",
        "--inprocess",
        help="Re-run init functions within the benchmark process instead of re-executing it.",
    ),
    _help: bool = typer.Option(
        False,
        "-h",
        "-help",
        "--help",
        is_eager=True,
        expose_value=False,
        callback=_help_callback,
        help="Show usage and exit.",
    ),
) -> None:
    """Benchmark the initialization cost of Go packages.

    Examples:
        # Benchmark the package in the current directory
        benchinit .

        # Ten measurements, ready for benchstat
        benchinit -count=10 . > new.txt

        # Include the cost of every dependency
        benchinit -r ./cmd/tool
    """
    bench_ctx: BenchContext = ctx.obj
    controller = BenchController(bench_ctx.settings)
    controller.run(
        flags=bench_ctx.flags,
        patterns=packages or [],
        recursive=recursive,
        inprocess=inprocess,
    )
