"""Exception taxonomy for linux-update.

Every failure the core can report derives from ``LinuxUpdateError`` and
carries in ``exit_status`` the status the CLI should terminate with. Anything
else that escapes to the entry point is treated as unexpected.
"""

from __future__ import annotations

from typing import Sequence

from constants import ExitCodes


class LinuxUpdateError(Exception):
    """Base class for all known failure modes."""

    exit_status = ExitCodes.ERROR


class ConfigError(LinuxUpdateError):
    """Configuration file could not be read or has an invalid shape."""


class ParseError(LinuxUpdateError):
    """A version string could not be parsed."""


class ParseFailed(ParseError):
    """The release feed document is not the expected JSON shape."""


class FetchFailed(LinuxUpdateError):
    """The release feed could not be retrieved."""

    exit_status = ExitCodes.CONNECTION_ERROR


class DownloadFailed(LinuxUpdateError):
    """A release tarball could not be downloaded."""

    exit_status = ExitCodes.CONNECTION_ERROR

    def __init__(self, uri: str, reason: str = ""):
        self.uri = uri
        message = f"Download of {uri} failed."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnpackFailed(LinuxUpdateError):
    """A downloaded tarball could not be extracted."""

    def __init__(self, tarball: str, reason: str = ""):
        self.tarball = tarball
        message = f"Unpack of {tarball} failed."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class BuildToolFailed(LinuxUpdateError):
    """The build tool exited with a non-zero status or was killed."""

    exit_status = ExitCodes.BUILD_FAILED

    def __init__(self, exit_code: int, targets: Sequence[str]):
        self.exit_code = exit_code
        self.targets = tuple(targets)
        if exit_code < 0:
            detail = f"killed by signal {-exit_code}"
        else:
            detail = f"exit status {exit_code}"
        super().__init__(f"make {' '.join(self.targets)} failed ({detail})")


class InvalidReference(LinuxUpdateError):
    """A version reference of an unsupported kind was given."""


class NotFound(LinuxUpdateError):
    """No local source tree matches the requested version."""


class NoAvailableRelease(LinuxUpdateError):
    """A release selection turned out empty."""


class MissingConfiguration(LinuxUpdateError):
    """A source tree used as configuration source has no configuration file."""
