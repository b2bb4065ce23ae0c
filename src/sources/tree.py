"""One unpacked kernel source directory."""

from __future__ import annotations

import functools
import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

from kbuild.driver import BuildDriver
from kbuild.sinks import CaptureSink, OutputSink
from common.memo import Once
from constants import Constants
from errors import MissingConfiguration, ParseError
from versioning.models import SemanticVersion

logger = logging.getLogger(__name__)

ConfigSource = Union[BinaryIO, str, "os.PathLike[str]", "SourceTree"]


@functools.total_ordering
class SourceTree:
    """A kernel source tree on disk, ordered by its version.

    The directory is owned externally: this class reads it, writes the
    configuration file into it and runs make targets against it, but never
    creates or removes it. The version and the configured state are looked
    up lazily and cached; the configured state is invalidated by every
    operation that can create the configuration file.
    """

    def __init__(self, path: Union[str, Path], driver: Optional[BuildDriver] = None):
        self.path = Path(path)
        self.driver = driver or BuildDriver()
        self._version: Once[SemanticVersion] = Once(self._query_version)
        self._configured: Once[bool] = Once(self.config_path.exists)

    # -- lazy facts ---------------------------------------------------------

    def _query_version(self) -> SemanticVersion:
        sink = CaptureSink()
        self.driver.run(self.path, Constants.TARGETS_KERNELVERSION, sink)
        lines = [line.strip() for line in sink.text().splitlines() if line.strip()]
        if not lines:
            raise ParseError(f"make kernelversion printed nothing in {self.path}")
        return SemanticVersion(lines[-1])

    def version(self) -> SemanticVersion:
        """Kernel version as reported by ``make -s kernelversion``.

        Raises:
            BuildToolFailed: The version query exited non-zero.
        """
        return self._version.get()

    @property
    def config_path(self) -> Path:
        return self.path / Constants.CONFIG_FILE

    def is_configured(self) -> bool:
        return self._configured.get()

    def invalidate_configured(self) -> None:
        self._configured.invalidate()

    # -- configuration ------------------------------------------------------

    def open_config(self, mode: str = "rb"):
        return open(self.config_path, mode)  # pylint: disable=consider-using-with

    def _write_config_from(self, stream: BinaryIO) -> None:
        with self.open_config("wb") as dest:
            shutil.copyfileobj(stream, dest)

    def _is_own_config(self, path) -> bool:
        """Copying a file onto itself would truncate it first."""
        try:
            return self.config_path.exists() and os.path.samefile(path, self.config_path)
        except OSError:
            return False

    def import_configuration(self, source: ConfigSource) -> None:
        """Replace this tree's configuration with the content of ``source``.

        ``source`` may be a binary stream, a path, or another ``SourceTree``
        (whose configuration file is read). Existing content is overwritten.

        Raises:
            MissingConfiguration: ``source`` is a tree without configuration.
        """
        self.info(f"Import config {source}")
        try:
            if isinstance(source, SourceTree):
                if not source.config_path.exists():
                    raise MissingConfiguration(f"{source.path} has no {Constants.CONFIG_FILE}")
                if self._is_own_config(source.config_path):
                    return
                with source.open_config("rb") as stream:
                    self._write_config_from(stream)
            elif isinstance(source, (str, os.PathLike)):
                if self._is_own_config(source):
                    return
                with open(source, "rb") as stream:
                    self._write_config_from(stream)
            else:
                self._write_config_from(source)
        finally:
            self.invalidate_configured()

    # -- build stages -------------------------------------------------------

    def make(self, targets: Sequence[str], sink: Optional[OutputSink] = None) -> None:
        self.driver.run(self.path, targets, sink)

    def run_oldconfig(self) -> None:
        self.info("make oldconfig")
        try:
            self.make(Constants.TARGETS_OLDCONFIG)
        finally:
            self.invalidate_configured()

    def run_menuconfig(self) -> None:
        self.info("make menuconfig")
        try:
            self.make(Constants.TARGETS_MENUCONFIG)
        finally:
            self.invalidate_configured()

    def compile(self) -> None:
        self.info("make all")
        self.make(Constants.TARGETS_COMPILE)

    def install(self) -> None:
        """Install kernel and modules.

        The kernel's postinst hooks may rebuild third-party modules; that is
        a side effect of ``make install`` outside of this program.
        """
        self.info("make modules_install install (postinst hooks may rebuild third-party modules)")
        self.make(Constants.TARGETS_INSTALL)

    # -- presentation -------------------------------------------------------

    def info(self, text: str) -> None:
        logger.info("[%s] %s", self._label(), text)

    def _label(self) -> str:
        version = self._version.peek()
        return str(version) if version is not None else self.path.name

    def describe(self) -> str:
        """Listing line; only facts already looked up are shown."""
        text = str(self.path)
        version = self._version.peek()
        if version is not None:
            text += f" {version}"
        if self._configured.computed:
            text += " configured" if self.is_configured() else " not configured"
        return text

    # -- ordering -----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SourceTree):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __lt__(self, other: "SourceTree") -> bool:
        if not isinstance(other, SourceTree):
            return NotImplemented
        return self.version() < other.version()

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"SourceTree({str(self.path)!r})"
