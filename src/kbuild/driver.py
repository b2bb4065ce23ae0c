"""Runs the kernel build tool (``make``) against a source directory.

The child's stdout is bound to the write end of a pipe owned by the driver.
One thread drains the read end into an ``OutputSink`` while the caller blocks
on the child. The exit status is inspected only after the drain thread has
consumed everything, and both pipe ends are closed on every path.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import Optional, Sequence, Union

from common.logging_utils import extra_context, is_debug_enabled, Timer
from constants import Constants
from errors import BuildToolFailed
from .sinks import OutputSink, PassThroughSink

logger = logging.getLogger(__name__)

_READ_SIZE = 65536
# Conventional "command not found" status, used when make cannot be spawned.
SPAWN_FAILED = 127


class _DrainThread(threading.Thread):
    """Copies the pipe's read end into a sink until EOF."""

    def __init__(self, fd: int, sink: OutputSink):
        super().__init__(name="build-output-drain", daemon=True)
        self._fd = fd
        self._sink = sink
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        while True:
            try:
                chunk = os.read(self._fd, _READ_SIZE)
            except OSError as exc:
                self.error = self.error or exc
                break
            if not chunk:
                break
            if self.error is not None:
                # Keep the pipe empty so the child cannot block on a full pipe.
                continue
            try:
                self._sink.write(chunk)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                self.error = exc
        if self.error is None:
            try:
                self._sink.close()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                self.error = exc


class BuildDriver:
    """Spawns ``make -C DIR TARGET...`` and reports success or failure."""

    def __init__(self, make: str = Constants.MAKE):
        self.make = make

    def command(self, directory: Union[str, Path], targets: Sequence[str]) -> list:
        return [self.make, "-C", str(directory), *targets]

    def run(
        self,
        directory: Union[str, Path],
        targets: Sequence[str],
        sink: Optional[OutputSink] = None,
    ) -> None:
        """Run the build tool and wait for it.

        Args:
            directory: Source tree passed to ``make -C``.
            targets: Make arguments, in order.
            sink: Receives stdout; defaults to pass-through to our stdout.

        Raises:
            BuildToolFailed: Non-zero exit, death by signal, or spawn failure.
        """
        targets = tuple(targets)
        sink = sink if sink is not None else PassThroughSink()
        argv = self.command(directory, targets)
        rd, wr_fd = os.pipe()
        try:
            if is_debug_enabled(logger):
                logger.debug(
                    "Spawning build tool",
                    extra=extra_context(
                        event="spawn",
                        component="build_driver",
                        argv=" ".join(argv)
                    )
                )
            with Timer() as t:
                try:
                    proc = subprocess.Popen(argv, stdout=wr_fd)  # noqa: S603
                except OSError as exc:
                    logger.error("Cannot run %s: %s", self.make, exc)
                    raise BuildToolFailed(SPAWN_FAILED, targets) from exc
                # Only the child may hold the write end, or EOF never comes.
                os.close(wr_fd)
                wr_fd = None

                drain = _DrainThread(rd, sink)
                drain.start()
                try:
                    returncode = proc.wait()
                finally:
                    drain.join()

            if is_debug_enabled(logger):
                logger.debug(
                    "Build tool finished",
                    extra=extra_context(
                        event="exit",
                        component="build_driver",
                        returncode=returncode,
                        duration_ms=t.duration_ms()
                    )
                )
            if returncode != 0:
                if drain.error is not None:
                    logger.debug("Output sink failed as well: %r", drain.error)
                raise BuildToolFailed(returncode, targets)
            if drain.error is not None:
                raise drain.error
        finally:
            if wr_fd is not None:
                os.close(wr_fd)
            os.close(rd)
