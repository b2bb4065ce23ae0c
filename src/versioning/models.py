"""Data models for kernel versions and catalog releases."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from packaging import version as pkg_version

from errors import ParseError


class Moniker(Enum):
    """Release channels published in the kernel.org release feed."""
    STABLE = "stable"
    MAINLINE = "mainline"
    LONGTERM = "longterm"
    LINUX_NEXT = "linux-next"
    OTHER = "other"

    @classmethod
    def of(cls, text: Optional[str]) -> "Moniker":
        """Map feed text to a channel; unknown values become OTHER."""
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER


# "5.15.3-custom" is not PEP 440. A leading "rcN" stays a pre-release, the
# rest of the suffix becomes a local segment so it still compares
# component-wise (numbers numerically, words lexically).
_KERNEL_VERSION = re.compile(
    r'^(?P<release>\d+(?:\.\d+)*)(?:[-_.]?rc(?P<pre>\d+))?[-_.+]?(?P<local>.*)$'
)


def _coerce(text: str) -> Tuple[pkg_version.Version, str]:
    """Sort key for ``text``: the packaging version plus the suffix as written.

    packaging folds case and separators in local segments, so the verbatim
    suffix breaks ties between ``-Custom`` and ``-custom``.
    """
    try:
        version = pkg_version.Version(text)
    except pkg_version.InvalidVersion:
        pass
    else:
        return version, text.partition("+")[2]
    m = _KERNEL_VERSION.match(text)
    if not m or not m.group("local"):
        raise ParseError(f"Malformed version string: {text!r}")
    candidate = m.group("release")
    if m.group("pre"):
        candidate += f"rc{m.group('pre')}"
    suffix = m.group("local")
    local = re.sub(r'[^0-9A-Za-z]+', '.', suffix).strip('.')
    try:
        return pkg_version.Version(f"{candidate}+{local}"), suffix
    except pkg_version.InvalidVersion as exc:
        raise ParseError(f"Malformed version string: {text!r}") from exc


@functools.total_ordering
class SemanticVersion:
    """Totally ordered kernel version.

    Release components compare numerically and trailing zeros are
    insignificant, so ``6.1`` (as the feed spells it) equals ``6.1.0`` (as
    ``make kernelversion`` prints it). Pre-releases such as ``6.2-rc1`` sort
    before ``6.2``.
    """

    __slots__ = ("raw", "_version", "_key")

    def __init__(self, text: str):
        if not isinstance(text, str):
            raise ParseError(f"Version must be a string, not {type(text).__name__}")
        raw = text.strip()
        if not raw:
            raise ParseError("Empty version string")
        self.raw = raw
        self._key = _coerce(raw)
        self._version = self._key[0]

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        return cls(text)

    @property
    def is_prerelease(self) -> bool:
        return self._version.is_prerelease

    @property
    def release(self):
        """Numeric release components, e.g. ``(5, 15, 3)``."""
        return self._version.release

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: "SemanticVersion") -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"SemanticVersion({self.raw!r})"


def compare(a: SemanticVersion, b: SemanticVersion) -> int:
    """Three-way comparison: -1, 0 or 1."""
    if a < b:
        return -1
    if a == b:
        return 0
    return 1


@dataclass(frozen=True)
class Release:
    """One entry of the release feed.

    Equality is structural, ordering looks at the version only: two channels'
    records of the same version are unequal yet each is <= the other.
    """
    version: SemanticVersion
    moniker: str
    source: Optional[str]
    pgp: Optional[str]
    released: Optional[datetime]
    gitweb: Optional[str]
    changelog: Optional[str]
    patch_full: Optional[str]
    patch_incremental: Optional[str]
    iseol: bool

    @property
    def channel(self) -> Moniker:
        return Moniker.of(self.moniker)

    @property
    def end_of_life(self) -> bool:
        return self.iseol

    def is_stable(self) -> bool:
        return self.channel is Moniker.STABLE

    def is_mainline(self) -> bool:
        return self.channel is Moniker.MAINLINE

    def is_longterm(self) -> bool:
        return self.channel is Moniker.LONGTERM

    def is_linux_next(self) -> bool:
        return self.channel is Moniker.LINUX_NEXT

    def __lt__(self, other: "Release") -> bool:
        if not isinstance(other, Release):
            return NotImplemented
        return self.version < other.version

    def __le__(self, other: "Release") -> bool:
        if not isinstance(other, Release):
            return NotImplemented
        return self.version <= other.version

    def __gt__(self, other: "Release") -> bool:
        if not isinstance(other, Release):
            return NotImplemented
        return self.version > other.version

    def __ge__(self, other: "Release") -> bool:
        if not isinstance(other, Release):
            return NotImplemented
        return self.version >= other.version

    def __str__(self) -> str:
        text = f"linux-{self.version} ({self.moniker})"
        if self.iseol:
            text += " (EOL)"
        return text
