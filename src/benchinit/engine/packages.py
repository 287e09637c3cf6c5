# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import IO, Protocol

from pydantic import ConfigDict, Field, ValidationError

from benchinit.config.base import ConfigBase
from benchinit.config.constants import COMMAND_PACKAGE_NAME, DEFAULT_GO_COMMAND, INIT_DENY_LIST
from benchinit.errors import AmbiguousEntryPointError, ListError

logger = logging.getLogger(__name__)


class Target(ConfigBase):
    """A Go package as reported by 'go list -json'."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    dir: str = Field(alias="Dir")
    import_path: str = Field(alias="ImportPath")
    name: str = Field(alias="Name")
    go_files: tuple[str, ...] = Field(default=(), alias="GoFiles")
    test_go_files: tuple[str, ...] = Field(default=(), alias="TestGoFiles")
    xtest_go_files: tuple[str, ...] = Field(default=(), alias="XTestGoFiles")
    deps: tuple[str, ...] = Field(default=(), alias="Deps")
    dep_only: bool = Field(default=False, alias="DepOnly")

    @property
    def is_command(self) -> bool:
        return self.name == COMMAND_PACKAGE_NAME

    @property
    def test_file_paths(self) -> list[Path]:
        """Absolute paths of the package's internal and external test files."""
        return [Path(self.dir) / name for name in (*self.test_go_files, *self.xtest_go_files)]


class ResolvedTargets(ConfigBase):
    """Packages named on the command line and everything derived from them.

    Attributes:
        targets: Packages named directly, in the order the lister reported them.
        all_import_paths: Every package whose init cost gets tallied: the targets,
            plus their non-denied transitive dependencies when rolling up.
        entry_point: The package hosting the harness; the only main package, if any.
    """

    targets: tuple[Target, ...]
    all_import_paths: tuple[str, ...]
    entry_point: Target

    @property
    def entry_dir(self) -> Path:
        return Path(self.entry_point.dir)


class PackageLister(Protocol):
    def list_packages(self, patterns: Sequence[str], build_flags: Sequence[str], deps: bool = False) -> Iterator[Target]: ...


class GoListPackageLister:
    """Lists packages via 'go list -json', decoding them as they are printed.

    We use cmd/go directly rather than a generic loader, as we need fields like
    Dir and Deps, and we are tightly coupled with 'go test' already.
    """

    def __init__(self, go_command: str = DEFAULT_GO_COMMAND):
        self.go_command = go_command

    def build_command(self, patterns: Sequence[str], build_flags: Sequence[str], deps: bool = False) -> list[str]:
        cmd = [self.go_command, "list", "-json"]
        if deps:
            cmd.append("-deps")
        cmd.extend(build_flags)
        cmd.extend(patterns)
        return cmd

    def list_packages(self, patterns: Sequence[str], build_flags: Sequence[str], deps: bool = False) -> Iterator[Target]:
        cmd = self.build_command(patterns, build_flags, deps)
        logger.debug("Running %s", " ".join(cmd))
        with tempfile.TemporaryFile(mode="w+") as stderr:
            try:
                proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=stderr, text=True)
            except OSError as e:
                raise ListError(f"list: {e}") from e
            with proc:
                try:
                    for raw in iter_json_objects(proc.stdout):
                        yield _parse_target(raw)
                except ListError:
                    proc.kill()
                    raise
                returncode = proc.wait()
            if returncode != 0:
                stderr.seek(0)
                raise ListError(f"list: exit status {returncode}:\n{stderr.read()}")


def iter_json_objects(stream: IO[str]) -> Iterator[dict]:
    """Decode a stream of concatenated JSON objects, yielding each as soon as it is complete.

    'go list -json' prints indented objects whose closing brace is the only
    character at the start of a line, so we only attempt a decode at those points.
    """
    decoder = json.JSONDecoder()
    buffer = ""
    for line in stream:
        buffer += line
        if not line.startswith("}"):
            continue
        try:
            obj, end = decoder.raw_decode(buffer.lstrip())
        except json.JSONDecodeError:
            continue
        if not isinstance(obj, dict):
            raise ListError(f"list: expected a JSON object, got {type(obj).__name__}")
        yield obj
        buffer = buffer.lstrip()[end:]
    if buffer.strip():
        raise ListError(f"list: truncated JSON output:\n{buffer}")


def _parse_target(raw: dict) -> Target:
    try:
        return Target.model_validate(raw)
    except ValidationError as e:
        raise ListError(f"list: unexpected package metadata: {e}") from e


def resolve_targets(
    lister: PackageLister,
    patterns: Sequence[str],
    build_flags: Sequence[str],
    recursive: bool = False,
) -> ResolvedTargets:
    """Load the packages to benchmark and pick the package to host the harness.

    Args:
        lister: Source of package metadata.
        patterns: Package patterns as given on the command line. Empty means ".".
        build_flags: Build flags, which may change the result (e.g. -tags).
        recursive: Whether dependency init costs get rolled up, in which case every
            transitive dependency is tallied too.

    Returns:
        The resolved targets.

    Raises:
        ListError: If the lister fails or no packages match.
        AmbiguousEntryPointError: If more than one main package is named.
    """
    patterns = list(patterns) or ["."]
    # With -deps, packages come in dependency order, which we keep.
    listed = list(lister.list_packages(patterns, build_flags, deps=recursive))
    targets = [pkg for pkg in listed if not pkg.dep_only]
    if not targets:
        raise ListError(f"list: no packages matched {' '.join(patterns)}")

    entry_point: Target | None = None
    for target in targets:
        if not target.is_command:
            continue
        if entry_point is not None:
            raise AmbiguousEntryPointError(
                "can only benchmark up to one main package at a time; "
                f"found {entry_point.import_path} and {target.import_path}"
            )
        entry_point = target
    if entry_point is None:
        # The harness still needs a directory to live in.
        entry_point = targets[0]
    logger.debug("Using %s as the entry point in %s", entry_point.import_path, entry_point.dir)

    all_import_paths = _unique(t.import_path for t in targets)
    if recursive:
        wanted = {dep for target in targets for dep in target.deps if dep not in INIT_DENY_LIST}
        wanted.update(all_import_paths)
        # Dependencies the lister didn't report still get tallied, after the rest.
        dep_order = [pkg.import_path for pkg in listed] + [dep for target in targets for dep in target.deps]
        all_import_paths = _unique(path for path in dep_order if path in wanted)

    return ResolvedTargets(
        targets=tuple(targets),
        all_import_paths=tuple(all_import_paths),
        entry_point=entry_point,
    )


def _unique(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(paths))
