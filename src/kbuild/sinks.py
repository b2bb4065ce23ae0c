"""Output sinks receiving the build tool's standard output."""

from __future__ import annotations

import sys
from typing import BinaryIO, List, Optional


class OutputSink:
    """Receives chunks of child output, in emission order."""

    def write(self, chunk: bytes) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Called once after the last chunk."""


class PassThroughSink(OutputSink):
    """Echo output live to a binary stream (the caller's stdout by default)."""

    def __init__(self, stream: Optional[BinaryIO] = None):
        self._stream = stream

    def _target(self) -> BinaryIO:
        if self._stream is not None:
            return self._stream
        return sys.stdout.buffer

    def write(self, chunk: bytes) -> None:
        target = self._target()
        target.write(chunk)
        target.flush()

    def close(self) -> None:
        self._target().flush()


class CaptureSink(OutputSink):
    """Accumulate output for parsing instead of echoing it."""

    def __init__(self) -> None:
        self._chunks: List[bytes] = []
        self.closed = False

    def write(self, chunk: bytes) -> None:
        self._chunks.append(chunk)

    def close(self) -> None:
        self.closed = True

    @property
    def data(self) -> bytes:
        return b"".join(self._chunks)

    def text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding, errors="replace")
