# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Collection, Iterable

from benchinit.config.base import ConfigBase
from benchinit.config.constants import INIT_DENY_LIST
from benchinit.engine.packages import Target


class RollupPlan(ConfigBase):
    """Which dependencies get added into each benchmarked package's totals.

    Attributes:
        recursive: Whether rolling up was requested at all.
        deps: Per benchmarked import path, the dependency import paths to add.
    """

    recursive: bool = False
    deps: dict[str, tuple[str, ...]]

    def deps_of(self, import_path: str) -> tuple[str, ...]:
        if not self.recursive:
            return ()
        return self.deps.get(import_path, ())


def is_denied(import_path: str, deny_list: Collection[str] = INIT_DENY_LIST) -> bool:
    return import_path in deny_list


def allowed_deps(deps: Iterable[str], deny_list: Collection[str] = INIT_DENY_LIST) -> tuple[str, ...]:
    return tuple(dict.fromkeys(dep for dep in deps if not is_denied(dep, deny_list)))


def build_rollup_plan(
    targets: Iterable[Target],
    recursive: bool,
    deny_list: Collection[str] = INIT_DENY_LIST,
) -> RollupPlan:
    """Compute each target's roll-up set from its transitive dependencies.

    A target never rolls up into itself, and deny-listed packages are dropped.
    """
    deps: dict[str, tuple[str, ...]] = {}
    for target in targets:
        if recursive:
            deps[target.import_path] = tuple(
                dep for dep in allowed_deps(target.deps, deny_list) if dep != target.import_path
            )
        else:
            deps[target.import_path] = ()
    return RollupPlan(recursive=recursive, deps=deps)
