# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from benchinit.engine.extractor import ResultExtractor
from benchinit.engine.harness import HarnessSynthesizer, HarnessVariant, bench_workspace
from benchinit.engine.packages import PackageLister, resolve_targets
from benchinit.engine.runner import GoTestRunner, StreamingProcess
from benchinit.engine.triage import FlagTriage
from benchinit.errors import ProtocolError

logger = logging.getLogger(__name__)


class BenchService:
    """Business logic for benchmarking package initialization with 'go test'."""

    def __init__(self, lister: PackageLister, runner: GoTestRunner, emit: Callable[[str], None]):
        self.lister = lister
        self.runner = runner
        self.emit = emit

    def run(
        self,
        flags: FlagTriage,
        patterns: Sequence[str],
        recursive: bool = False,
        variant: HarnessVariant = HarnessVariant.EXEC,
    ) -> int:
        """Resolve, synthesize, run and extract; print results as they converge.

        Args:
            flags: Command-line flags, already routed to their destinations.
            patterns: Package patterns to benchmark.
            recursive: Whether to roll up dependency init costs.
            variant: How the harness re-triggers package initialization.

        Returns:
            Number of result groups printed.

        Raises:
            BenchinitError: On any resolution, synthesis, subprocess or protocol failure.
        """
        resolved = resolve_targets(self.lister, patterns, flags.build, recursive)
        logger.info("Benchmarking %d package(s), tallying %d", len(resolved.targets), len(resolved.all_import_paths))

        with bench_workspace() as workdir:
            harness = HarnessSynthesizer(workdir).synthesize(resolved, recursive=recursive, variant=variant)
            process = self.runner.start(harness, flags.build, flags.test)
            return self._extract(process, len(resolved.targets))

    def _extract(self, process: StreamingProcess, num_targets: int) -> int:
        extractor = ResultExtractor(num_targets, self.emit)
        try:
            self._drain(extractor, process)
        except ProtocolError as e:
            raise ProtocolError(f"{e}; output:\n{process.transcript.getvalue()}") from e
        returncode = process.wait()
        return extractor.finish(returncode, process.transcript.getvalue())

    def _drain(self, extractor: ResultExtractor, process: StreamingProcess) -> None:
        # Stop 'go test' if extraction ends before its output does.
        drained = False
        try:
            extractor.feed_all(process.lines())
            drained = True
        finally:
            if not drained:
                process.stop()
