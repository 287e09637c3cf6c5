# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Extraction of converged benchinit results from 'go test -bench' output.

'go test' often runs a benchmark function multiple times with increasing b.N
values, to estimate an N for e.g. -benchtime=1s. The harness prints its results on
every run, but we only want the last group: the one directly followed by the
continuation of the original BenchmarkGeneratedBenchinit line. For example:

    BenchmarkGeneratedBenchinit-16
    benchinit: BenchmarkGoBuild	1	7000 ns/op	5344 B/op	47 allocs/op
    continuation:
    benchinit: BenchmarkGoBuild	100	5880 ns/op	5080 B/op	45 allocs/op
    continuation:
    benchinit: BenchmarkGoBuild	1224	5803 ns/op	5059 B/op	45 allocs/op
    continuation: 1224	   961433 ns/op

With -benchtime=1x, the only run happens before the benchmark name is printed, so
the results are instead followed by the header and a bare result line:

    benchinit: BenchmarkGoBuild	1	7000 ns/op	5344 B/op	47 allocs/op
    continuation: goos: linux
    ...
    BenchmarkGeneratedBenchinit-16 	       1	    39534 ns/op
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum

from benchinit.config.base import ConfigBase
from benchinit.config.constants import (
    RX_BARE_FINAL_RESULT,
    RX_FINAL_RESULT,
    RX_PASSTHROUGH,
    RX_RESULT_FIELDS,
    RX_RESULT_LINE,
)
from benchinit.errors import ProtocolError, SubprocessError

logger = logging.getLogger(__name__)


class ExtractorState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    DONE = "done"


class ResultLine(ConfigBase):
    """One package's result, as printed by the harness after the "benchinit: " prefix."""

    text: str
    name: str
    iterations: int
    ns_per_op: int
    bytes_per_op: int
    allocs_per_op: int

    @classmethod
    def parse(cls, text: str) -> ResultLine:
        match = RX_RESULT_FIELDS.match(text)
        if match is None:
            raise ProtocolError(f"malformed benchinit result line: {text!r}")
        return cls(
            text=text,
            name=match["name"],
            iterations=int(match["iterations"]),
            ns_per_op=int(match["ns"]),
            bytes_per_op=int(match["bytes"]),
            allocs_per_op=int(match["allocs"]),
        )


class ResultGroup(ConfigBase):
    """Result lines from a single run of the harness, all sharing one b.N."""

    iterations: int
    lines: tuple[ResultLine, ...] = ()

    def append(self, line: ResultLine) -> ResultGroup:
        return self.model_copy(update={"lines": (*self.lines, line)})


class ResultExtractor:
    """Line-oriented state machine picking converged result groups out of 'go test' output.

    Args:
        num_targets: How many result lines the harness prints per run.
        emit: Called with every line meant for the user: converged results and
            passthrough lines such as "goos: linux".
    """

    def __init__(self, num_targets: int, emit: Callable[[str], None]):
        self.num_targets = num_targets
        self.emit = emit
        self.state = ExtractorState.IDLE
        self.group: ResultGroup | None = None
        self.groups_printed = 0

    def feed(self, line: str) -> None:
        if self.state == ExtractorState.DONE:
            raise ProtocolError("output received after the benchmark finished")

        if match := RX_RESULT_LINE.match(line):
            self._accumulate(ResultLine.parse(match[1]))
        elif RX_FINAL_RESULT.match(line) or RX_BARE_FINAL_RESULT.match(line):
            self._flush(line)
        elif match := RX_PASSTHROUGH.match(line):
            self.emit(match[2])

    def feed_all(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.feed(line)

    def _accumulate(self, result: ResultLine) -> None:
        if self.group is None or self.group.iterations != result.iterations:
            if self.group is not None:
                logger.debug("Discarding calibration run with N=%d", self.group.iterations)
            self.group = ResultGroup(iterations=result.iterations)
        self.group = self.group.append(result)
        self.state = ExtractorState.ACCUMULATING

    def _flush(self, line: str) -> None:
        results = self.group.lines if self.group is not None else ()
        if len(results) != self.num_targets:
            raise ProtocolError(f"expected {self.num_targets} benchinit results before {line!r}, got {len(results)}")
        for result in results:
            self.emit(result.text)
        logger.debug("Printed a group of %d results", len(results))
        self.groups_printed += 1
        self.group = None
        self.state = ExtractorState.IDLE

    def finish(self, returncode: int, transcript: str) -> int:
        """Check the outcome once the process has exited and its output is drained.

        Args:
            returncode: Exit status of the 'go test' process.
            transcript: Everything the process printed.

        Returns:
            The number of result groups printed.

        Raises:
            SubprocessError: If the process failed, even if results were printed.
            ProtocolError: If no results were printed at all.
        """
        self.state = ExtractorState.DONE
        if returncode != 0:
            raise SubprocessError(f"wait: exit status {returncode}; output:\n{transcript}")
        if self.groups_printed == 0:
            raise ProtocolError(f"got no results; output:\n{transcript}")
        return self.groups_printed
