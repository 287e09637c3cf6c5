# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""End-to-end runs against a real Go toolchain and a throwaway module."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from benchinit.cli.main import main1
from benchinit.config.constants import RX_RESULT_FIELDS

pytestmark = pytest.mark.skipif(shutil.which("go") is None, reason="requires a Go toolchain")

GO_MOD = "module example.com/rollup\n\ngo 1.21\n"

# Package b does deterministic init work; a does a little of its own on top of b's.
PKG_B = """package b

import "strconv"

var Table = build()

func build() []string {
	var table []string
	for i := 0; i < 500; i++ {
		table = append(table, "b"+strconv.Itoa(i))
	}
	return table
}
"""

PKG_A = """package a

import "example.com/rollup/b"

var Names = collect()

func collect() []string {
	var names []string
	for i := 0; i < 50; i++ {
		names = append(names, b.Table[i]+"a")
	}
	return names
}
"""


@pytest.fixture
def stub_go_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "go.mod").write_text(GO_MOD)
    for name, source in (("a", PKG_A), ("b", PKG_B)):
        (tmp_path / name).mkdir()
        (tmp_path / name / f"{name}.go").write_text(source)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GOTOOLCHAIN", "local")
    for name in ("BENCHINIT_GO", "BENCHINIT_LOG_LEVEL", "BENCHINIT_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _results(args: list[str], capsys: pytest.CaptureFixture[str]) -> dict[str, tuple[int, int]]:
    """Run benchinit and return the B/op and allocs/op printed per benchmark name."""
    assert main1(args) == 0, capsys.readouterr().err
    results = {}
    for line in capsys.readouterr().out.splitlines():
        if match := RX_RESULT_FIELDS.match(line):
            results[match["name"]] = (int(match["bytes"]), int(match["allocs"]))
    return results


def test_rollup_adds_dependency_costs(stub_go_module: Path, capsys: pytest.CaptureFixture[str]) -> None:
    own = _results(["-benchtime=5x", "./a", "./b"], capsys)
    rolled = _results(["-r", "-benchtime=5x", "./a", "./b"], capsys)

    assert set(own) == {"ExampleComRollupA", "ExampleComRollupB"}
    a_bytes, a_allocs = own["ExampleComRollupA"]
    b_bytes, b_allocs = own["ExampleComRollupB"]
    rolled_a_bytes, rolled_a_allocs = rolled["ExampleComRollupA"]
    rolled_b_bytes, rolled_b_allocs = rolled["ExampleComRollupB"]
    assert b_allocs > 0
    assert rolled_b_bytes >= b_bytes
    assert rolled_b_allocs >= b_allocs
    # a's dependencies are b and b's dependencies, so the difference is a's own cost.
    assert (rolled_a_bytes - rolled_b_bytes, rolled_a_allocs - rolled_b_allocs) == (a_bytes, a_allocs)


def test_single_iteration(stub_go_module: Path, capsys: pytest.CaptureFixture[str]) -> None:
    results = _results(["-benchtime=1x", "./b"], capsys)

    assert list(results) == ["ExampleComRollupB"]
    assert results["ExampleComRollupB"][1] > 0
