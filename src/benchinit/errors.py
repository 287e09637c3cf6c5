# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations


class BenchinitError(Exception):
    """Base exception for all benchinit errors."""


class ListError(BenchinitError): ...


class AmbiguousEntryPointError(ListError): ...


class SynthesisError(BenchinitError): ...


class SubprocessError(BenchinitError): ...


class ProtocolError(BenchinitError): ...
