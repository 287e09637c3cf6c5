# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import typer

from benchinit.cli.controllers.bench_controller import BenchController
from benchinit.config.settings import Settings
from benchinit.engine.harness import HarnessVariant
from benchinit.engine.packages import GoListPackageLister
from benchinit.engine.runner import GoTestRunner
from benchinit.engine.triage import filter_flags
from benchinit.errors import AmbiguousEntryPointError


@pytest.fixture
def stub_service() -> MagicMock:
    return MagicMock()


def test_default_service_uses_configured_go_command() -> None:
    controller = BenchController(Settings(go_command="go1.22.0"))

    assert isinstance(controller.service.lister, GoListPackageLister)
    assert isinstance(controller.service.runner, GoTestRunner)
    assert controller.service.lister.go_command == "go1.22.0"
    assert controller.service.runner.go_command == "go1.22.0"


@pytest.mark.parametrize(
    "recursive,inprocess,variant",
    [
        pytest.param(False, False, HarnessVariant.EXEC, id="defaults"),
        pytest.param(True, False, HarnessVariant.EXEC, id="recursive"),
        pytest.param(False, True, HarnessVariant.INPROCESS, id="inprocess"),
    ],
)
def test_run_delegates_to_service(
    stub_service: MagicMock, recursive: bool, inprocess: bool, variant: HarnessVariant
) -> None:
    flags = filter_flags(["-count=3", "./..."])

    BenchController(Settings(), stub_service).run(flags, ["./..."], recursive=recursive, inprocess=inprocess)

    stub_service.run.assert_called_once_with(flags, ["./..."], recursive=recursive, variant=variant)


@patch("benchinit.cli.controllers.bench_controller.print_warning")
def test_run_inprocess_warns_about_linkname(mock_print_warning: MagicMock, stub_service: MagicMock) -> None:
    BenchController(Settings(), stub_service).run(filter_flags([]), [], recursive=False, inprocess=True)

    mock_print_warning.assert_called_once()
    assert "-checklinkname=0" in mock_print_warning.call_args.args[0]


@patch("benchinit.cli.controllers.bench_controller.print_warning")
def test_run_inprocess_no_warning_with_ldflags(mock_print_warning: MagicMock, stub_service: MagicMock) -> None:
    flags = filter_flags(["-ldflags=-checklinkname=0", "."])

    BenchController(Settings(), stub_service).run(flags, ["."], recursive=False, inprocess=True)

    mock_print_warning.assert_not_called()


@patch("benchinit.cli.controllers.bench_controller.print_error")
def test_run_failure_exits_with_code_1(mock_print_error: MagicMock, stub_service: MagicMock) -> None:
    stub_service.run.side_effect = AmbiguousEntryPointError(
        "can only benchmark up to one main package at a time; found example.com/a and example.com/b"
    )

    with pytest.raises(typer.Exit) as exc_info:
        BenchController(Settings(), stub_service).run(filter_flags([]), ["./..."], recursive=False, inprocess=False)

    assert exc_info.value.exit_code == 1
    mock_print_error.assert_called_once_with(
        "can only benchmark up to one main package at a time; found example.com/a and example.com/b"
    )
