# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import typer

from benchinit.cli.services.bench_service import BenchService
from benchinit.cli.ui import print_error, print_result, print_warning
from benchinit.config.settings import Settings
from benchinit.engine.harness import HarnessVariant
from benchinit.engine.packages import GoListPackageLister
from benchinit.engine.runner import GoTestRunner
from benchinit.engine.triage import FlagTriage
from benchinit.errors import BenchinitError


class BenchController:
    """Controller for the benchinit workflow."""

    def __init__(self, settings: Settings, service: BenchService | None = None):
        self.settings = settings
        self.service = service or BenchService(
            lister=GoListPackageLister(settings.go_command),
            runner=GoTestRunner(settings.go_command),
            emit=print_result,
        )

    def run(self, flags: FlagTriage, patterns: list[str], recursive: bool, inprocess: bool) -> None:
        """Benchmark the given packages, exiting with code 1 on any failure.

        Args:
            flags: Command-line flags, already routed to their destinations.
            patterns: Package patterns to benchmark.
            recursive: Whether to roll up dependency init costs.
            inprocess: Whether to re-run init functions within the benchmark process.
        """
        variant = HarnessVariant.INPROCESS if inprocess else HarnessVariant.EXEC
        if inprocess and not any("checklinkname=0" in flag for flag in flags.build):
            print_warning("-inprocess links to init tasks by name; Go 1.23 and later need -ldflags=-checklinkname=0")

        try:
            self.service.run(flags, patterns, recursive=recursive, variant=variant)
        except BenchinitError as e:
            print_error(str(e))
            raise typer.Exit(code=1)
