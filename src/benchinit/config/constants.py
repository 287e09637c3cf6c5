# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re

# Name of the single benchmark function declared by the generated harness.
HARNESS_BENCHMARK_NAME = "BenchmarkGeneratedBenchinit"

# File name the harness takes inside the entry point's directory, via the overlay.
GENERATED_FILE_NAME = "benchinit_generated_test.go"

OVERLAY_FILE_NAME = "overlay.json"
REQUEST_FILE_NAME = "request.json"
WORKDIR_PREFIX = "benchinit"

# Environment variable through which the harness finds its measurement request.
REQUEST_ENV_VAR = "BENCHINIT_JSON_INPUT"

GO_COMMAND_ENV_VAR = "BENCHINIT_GO"
LOG_LEVEL_ENV_VAR = "BENCHINIT_LOG_LEVEL"
LOG_JSON_ENV_VAR = "BENCHINIT_LOG_JSON"

DEFAULT_GO_COMMAND = "go"
DEFAULT_LOG_LEVEL = "WARNING"

# Package kind marking an executable entry point.
COMMAND_PACKAGE_NAME = "main"

# Foundational packages whose init must never be re-run nor attributed to anyone:
# the runtime bootstrap, the test harness, signal handling and the clocks.
INIT_DENY_LIST = frozenset(
    {
        "runtime",
        "testing",
        "os/signal",
        "time",
    }
)

# Result protocol printed by the harness between the benchmark name and its results.
RESULT_LINE_PREFIX = "benchinit: "
CONTINUATION_PREFIX = "continuation: "

RX_RESULT_LINE = re.compile(rf"^{re.escape(RESULT_LINE_PREFIX)}(.*)")
RX_RESULT_FIELDS = re.compile(
    r"^Benchmark(?P<name>\S+)\t(?P<iterations>\d+)\t(?P<ns>\d+) ns/op\t(?P<bytes>\d+) B/op\t(?P<allocs>\d+) allocs/op$"
)
RX_FINAL_RESULT = re.compile(rf"^{re.escape(CONTINUATION_PREFIX)}.*\d\s")
# The very first run can print its results before the benchmark name, leaving the
# converged line of a single-iteration run without a continuation prefix.
RX_BARE_FINAL_RESULT = re.compile(rf"^{HARNESS_BENCHMARK_NAME}(-\d+)?\s+\d+\t")

# We don't pass through "FAIL", as the entire output is printed on any failure.
# Nor "ok" and "pkg:", as we only ever test one ad-hoc package.
RX_PASSTHROUGH = re.compile(rf"^({re.escape(CONTINUATION_PREFIX)})?((goos:|goarch:|cpu:|PASS$).*)")

# Recursion bound when walking type shapes for zero patches.
MAX_SHAPE_DEPTH = 50
