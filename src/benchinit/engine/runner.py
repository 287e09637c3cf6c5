# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import io
import logging
import queue
import subprocess
import threading
from collections.abc import Iterator, Sequence

from benchinit.config.constants import DEFAULT_GO_COMMAND, HARNESS_BENCHMARK_NAME
from benchinit.engine.harness import Harness
from benchinit.errors import SubprocessError

logger = logging.getLogger(__name__)

_EOF = object()


class Transcript:
    """Thread-safe copy of everything a process printed, kept to report failures."""

    def __init__(self) -> None:
        self._buffer = io.StringIO()
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            self._buffer.write(text)

    def getvalue(self) -> str:
        with self._lock:
            return self._buffer.getvalue()


class StreamingProcess:
    """A running process whose combined output is drained by a reader thread.

    The reader keeps the pipe empty so the child never blocks on a full pipe,
    tees every line into the transcript, and hands lines to the consumer as
    they arrive.
    """

    def __init__(self, proc: subprocess.Popen, transcript: Transcript | None = None):
        self.proc = proc
        self.transcript = transcript or Transcript()
        self._lines: queue.Queue[object] = queue.Queue()
        self._reader = threading.Thread(target=self._drain, name="benchinit-reader", daemon=True)
        self._reader.start()

    def _drain(self) -> None:
        try:
            for line in self.proc.stdout:
                self.transcript.write(line)
                self._lines.put(line.rstrip("\r\n"))
        finally:
            self.proc.stdout.close()
            self._lines.put(_EOF)

    def lines(self) -> Iterator[str]:
        """Yield output lines as the process prints them, until its output ends."""
        while True:
            line = self._lines.get()
            if line is _EOF:
                return
            yield line

    def kill(self) -> None:
        self.proc.kill()

    def stop(self) -> int:
        """Kill the process and reap it, along with the reader thread."""
        self.kill()
        return self.wait()

    def wait(self) -> int:
        """Wait for the output to be fully drained, then for the process to exit."""
        self._reader.join()
        return self.proc.wait()


class GoTestRunner:
    """Runs 'go test' on a synthesized harness, only running the harness benchmark."""

    def __init__(self, go_command: str = DEFAULT_GO_COMMAND):
        self.go_command = go_command

    def build_command(self, harness: Harness, build_flags: Sequence[str], test_flags: Sequence[str]) -> list[str]:
        return [
            self.go_command,
            "test",
            "-run=^$",  # disable all tests
            "-vet=off",  # disable vet
            f"-bench=^{HARNESS_BENCHMARK_NAME}$",  # only run the one benchmark
            *build_flags,
            *test_flags,  # the user's test flags
            f"-overlay={harness.overlay_path}",
            str(harness.entry_dir),
        ]

    def start(self, harness: Harness, build_flags: Sequence[str], test_flags: Sequence[str]) -> StreamingProcess:
        cmd = self.build_command(harness, build_flags, test_flags)
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=harness.env,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise SubprocessError(f"start: {e}") from e
        return StreamingProcess(proc)
