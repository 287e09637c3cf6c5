# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import io
import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from benchinit.engine.packages import ResolvedTargets, Target


class FakePopen:
    """Stands in for subprocess.Popen, replaying canned output."""

    def __init__(self, cmd: list[str], output: str = "", returncode: int = 0, **kwargs):
        self.args = cmd
        self.kwargs = kwargs
        self.stdout = io.StringIO(output)
        self.returncode = returncode
        self.killed = False

    def wait(self) -> int:
        return self.returncode

    def kill(self) -> None:
        self.killed = True

    def __enter__(self) -> "FakePopen":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stdout.close()


class FakeLister:
    """In-memory package lister recording how it was called."""

    def __init__(self, packages: Sequence[Target]):
        self.packages = list(packages)
        self.calls: list[tuple[list[str], list[str], bool]] = []

    def list_packages(self, patterns, build_flags, deps=False) -> Iterator[Target]:
        self.calls.append((list(patterns), list(build_flags), deps))
        for pkg in self.packages:
            if deps or not pkg.dep_only:
                yield pkg


def go_list_json(*packages: dict) -> str:
    """Render packages the way 'go list -json' prints them."""
    return "".join(json.dumps(pkg, indent="\t") + "\n" for pkg in packages)


def make_target(import_path: str, name: str | None = None, **kwargs) -> Target:
    return Target(
        Dir=kwargs.pop("Dir", f"/src/{import_path}"),
        ImportPath=import_path,
        Name=name or import_path.rsplit("/", 1)[-1],
        **kwargs,
    )


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers installed by configure_logging, which may point at captured streams."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def stub_popen_factory() -> type[FakePopen]:
    return FakePopen


@pytest.fixture
def stub_lister_factory() -> type[FakeLister]:
    return FakeLister


@pytest.fixture
def stub_target_factory():
    return make_target


@pytest.fixture
def stub_go_list_json():
    return go_list_json


@pytest.fixture
def stub_foo_target() -> Target:
    return make_target("example.com/foo", GoFiles=["foo.go"], TestGoFiles=["foo_test.go"], Deps=["fmt", "runtime"])


@pytest.fixture
def stub_bar_target() -> Target:
    return make_target("example.com/bar", GoFiles=["bar.go"], Deps=["errors", "runtime"])


@pytest.fixture
def stub_main_target() -> Target:
    return make_target(
        "example.com/cmd/tool",
        name="main",
        GoFiles=["main.go"],
        TestGoFiles=["main_test.go"],
        XTestGoFiles=["example_test.go"],
        Deps=["example.com/foo", "fmt", "os", "runtime", "time"],
    )


@pytest.fixture
def stub_resolved(stub_foo_target: Target, stub_bar_target: Target) -> ResolvedTargets:
    return ResolvedTargets(
        targets=(stub_foo_target, stub_bar_target),
        all_import_paths=("example.com/foo", "example.com/bar"),
        entry_point=stub_foo_target,
    )


@pytest.fixture
def stub_bench_output() -> str:
    return (
        "goos: linux\n"
        "goarch: amd64\n"
        "pkg: example.com/foo\n"
        "cpu: AMD Ryzen 7 PRO 5850U with Radeon Graphics\n"
        "BenchmarkGeneratedBenchinit-16   \t\n"
        "benchinit: BenchmarkExampleComFoo\t1\t7000 ns/op\t5344 B/op\t47 allocs/op\n"
        "continuation: \n"
        "benchinit: BenchmarkExampleComBar\t1\t900 ns/op\t64 B/op\t2 allocs/op\n"
        "continuation: \n"
        "benchinit: BenchmarkExampleComFoo\t1224\t5803 ns/op\t5059 B/op\t45 allocs/op\n"
        "continuation: \n"
        "benchinit: BenchmarkExampleComBar\t1224\t812 ns/op\t64 B/op\t2 allocs/op\n"
        "continuation:     1224\t    961433 ns/op\n"
        "PASS\n"
        "ok  \texample.com/foo\t2.345s\n"
    )


@pytest.fixture
def stub_workdir(tmp_path: Path) -> Path:
    workdir = tmp_path / "work"
    workdir.mkdir()
    return workdir
