"""Build tool invocation: the make driver and its output sinks."""

from .driver import BuildDriver
from .sinks import CaptureSink, OutputSink, PassThroughSink

__all__ = [
    "BuildDriver",
    "CaptureSink",
    "OutputSink",
    "PassThroughSink",
]
