# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined
from pydantic import ConfigDict, Field

from benchinit.config.base import ConfigBase
from benchinit.config.constants import (
    COMMAND_PACKAGE_NAME,
    CONTINUATION_PREFIX,
    GENERATED_FILE_NAME,
    HARNESS_BENCHMARK_NAME,
    OVERLAY_FILE_NAME,
    REQUEST_ENV_VAR,
    REQUEST_FILE_NAME,
    RESULT_LINE_PREFIX,
    WORKDIR_PREFIX,
)
from benchinit.engine.packages import ResolvedTargets
from benchinit.engine.rollup import allowed_deps, build_rollup_plan
from benchinit.engine.zeropatch import INIT_TASK_SHAPE, INIT_TASK_STATE_FIELD, compute_zero_patch
from benchinit.errors import SynthesisError

logger = logging.getLogger(__name__)

# Characters separating the words of an import path in benchmark names.
NAME_SEPARATORS = "/.~-_"


class HarnessVariant(str, Enum):
    """How the harness re-triggers package initialization.

    EXEC re-executes the test binary under GODEBUG=inittrace=1 and reads the trace.
    INPROCESS resets each package's init task and re-runs it within the benchmark.
    """

    EXEC = "exec"
    INPROCESS = "inprocess"


class BenchPackage(ConfigBase):
    model_config = ConfigDict(populate_by_name=True)

    import_path: str = Field(alias="ImportPath")
    deps: tuple[str, ...] = Field(default=(), alias="Deps")


class MeasurementRequest(ConfigBase):
    """Instructions for the harness, read from the file named by BENCHINIT_JSON_INPUT.

    Attributes:
        all_import_paths: Every package whose init costs get tallied.
        bench_pkgs: The packages to report on, in the order they were listed,
            each with the dependencies to roll up into it.
        recursive: Whether dependency costs get rolled up.
    """

    model_config = ConfigDict(populate_by_name=True)

    all_import_paths: tuple[str, ...] = Field(alias="AllImportPaths")
    bench_pkgs: tuple[BenchPackage, ...] = Field(alias="BenchPkgs")
    recursive: bool = Field(default=False, alias="Recursive")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class Overlay(ConfigBase):
    """A cmd/go -overlay file. Mapping a path to "" removes that file from the build."""

    model_config = ConfigDict(populate_by_name=True)

    replace: dict[str, str] = Field(default_factory=dict, alias="Replace")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class Harness(ConfigBase):
    """Everything needed to run 'go test' on a synthesized harness."""

    source: str
    overlay: Overlay
    overlay_path: Path
    request: MeasurementRequest
    request_path: Path
    entry_dir: Path
    env: dict[str, str]


def build_measurement_request(resolved: ResolvedTargets, recursive: bool) -> MeasurementRequest:
    plan = build_rollup_plan(resolved.targets, recursive)
    tallied = set(resolved.all_import_paths)
    bench_pkgs = tuple(
        BenchPackage(
            import_path=target.import_path,
            deps=tuple(dep for dep in plan.deps_of(target.import_path) if dep in tallied),
        )
        for target in resolved.targets
    )
    return MeasurementRequest(
        all_import_paths=resolved.all_import_paths,
        bench_pkgs=bench_pkgs,
        recursive=recursive,
    )


def create_template_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("benchinit.engine", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    # JSON strings are valid Go string literals for the import paths we deal with.
    env.filters["go_quote"] = json.dumps
    return env


@contextmanager
def bench_workspace() -> Iterator[Path]:
    """Private temporary directory for one invocation, always removed on exit."""
    try:
        tmp_dir = tempfile.TemporaryDirectory(prefix=WORKDIR_PREFIX)
    except OSError as e:
        raise SynthesisError(f"setup: {e}") from e
    with tmp_dir as path:
        yield Path(path)


class HarnessSynthesizer:
    """Writes the benchmark harness and its overlay without touching the source tree."""

    def __init__(self, workdir: Path, template_env: Environment | None = None):
        self.workdir = workdir
        self.template_env = template_env or create_template_environment()

    def render(self, resolved: ResolvedTargets, variant: HarnessVariant = HarnessVariant.EXEC) -> str:
        entry_point = resolved.entry_point
        # A main package can't be imported; it's linked into the test binary regardless.
        imports = [
            target.import_path
            for target in resolved.targets
            if not (target.is_command and target.import_path == entry_point.import_path)
        ]
        context = {
            "package_name": entry_point.name,
            "imports": imports,
            "benchmark_name": HARNESS_BENCHMARK_NAME,
            "request_env_var": REQUEST_ENV_VAR,
            "result_prefix": RESULT_LINE_PREFIX,
            "continuation_prefix": CONTINUATION_PREFIX,
            "name_separators": NAME_SEPARATORS,
        }
        if variant == HarnessVariant.INPROCESS:
            context["units"] = self._inprocess_units(resolved)
            template_name = "inprocess_test.go.j2"
        else:
            template_name = "benchmain_test.go.j2"
        return self.template_env.get_template(template_name).render(**context)

    def synthesize(
        self,
        resolved: ResolvedTargets,
        recursive: bool = False,
        variant: HarnessVariant = HarnessVariant.EXEC,
        base_env: Mapping[str, str] | None = None,
    ) -> Harness:
        """Write the harness, overlay and measurement request into the work directory.

        Args:
            resolved: The packages to benchmark.
            recursive: Whether dependency costs get rolled up.
            variant: How the harness re-triggers initialization.
            base_env: Environment for the 'go test' process. Defaults to os.environ.

        Returns:
            The harness, with the environment the 'go test' process must run with.

        Raises:
            SynthesisError: If any of the files cannot be written.
        """
        source = self.render(resolved, variant)
        request = build_measurement_request(resolved, recursive)

        harness_path = self.workdir / GENERATED_FILE_NAME
        request_path = self.workdir / REQUEST_FILE_NAME
        overlay_path = self.workdir / OVERLAY_FILE_NAME

        replace = {str(resolved.entry_dir / GENERATED_FILE_NAME): str(harness_path)}
        # Existing test files would add their own init work to the measurement.
        for test_file in resolved.entry_point.test_file_paths:
            replace[str(test_file)] = ""
        overlay = Overlay(replace=replace)

        self._write(harness_path, source)
        self._write(request_path, request.to_json())
        self._write(overlay_path, overlay.to_json())
        logger.debug("Overlay for %s: %s", resolved.entry_point.import_path, overlay.replace)

        env = dict(os.environ if base_env is None else base_env)
        env[REQUEST_ENV_VAR] = str(request_path)
        return Harness(
            source=source,
            overlay=overlay,
            overlay_path=overlay_path,
            request=request,
            request_path=request_path,
            entry_dir=resolved.entry_dir,
            env=env,
        )

    def _inprocess_units(self, resolved: ResolvedTargets) -> list[dict[str, str]]:
        patch = compute_zero_patch(INIT_TASK_SHAPE, INIT_TASK_STATE_FIELD)
        if patch is None:
            raise SynthesisError(f"setup: no {INIT_TASK_STATE_FIELD!r} field in the init task layout")
        entry_point = resolved.entry_point
        units = []
        for i, import_path in enumerate(allowed_deps(resolved.all_import_paths)):
            symbol = f"benchinitTask{i}"
            # The linker knows a main package by its name, not its import path.
            is_entry_command = entry_point.is_command and import_path == entry_point.import_path
            link_path = COMMAND_PACKAGE_NAME if is_entry_command else import_path
            units.append(
                {
                    "import_path": import_path,
                    "link_path": link_path,
                    "symbol": symbol,
                    "reset": patch.go_statement(symbol),
                }
            )
        return units

    @staticmethod
    def _write(path: Path, content: str) -> None:
        try:
            path.write_text(content)
        except OSError as e:
            raise SynthesisError(f"setup: {e}") from e
