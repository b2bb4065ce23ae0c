"""Resolution of version references to one concrete source tree.

Every build-stage command resolves its version argument here first, so one
invocation has a single notion of "the kernel version in question".
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from errors import InvalidReference, NotFound
from sources.registry import SourceRegistry
from sources.tree import SourceTree
from .models import Release, SemanticVersion

logger = logging.getLogger(__name__)


class RefKind(Enum):
    """Shapes a version reference can take."""
    LATEST = "latest"
    EXPLICIT = "explicit"
    NAMED = "named"
    TREE = "tree"
    RAW = "raw"


@dataclass(frozen=True)
class VersionRef:
    """Tagged version reference.

    ``value`` is None for LATEST, a ``SemanticVersion`` for EXPLICIT, a
    ``Release`` for NAMED, a ``SourceTree`` for TREE and a ``str`` for RAW.
    """
    kind: RefKind
    value: Any = None

    @classmethod
    def latest(cls) -> "VersionRef":
        return cls(RefKind.LATEST)

    @classmethod
    def of(cls, value: Any) -> "VersionRef":
        """Classify a plain value.

        Raises:
            InvalidReference: For values of any other type.
        """
        if isinstance(value, VersionRef):
            return value
        if value is None or value is False:
            return cls(RefKind.LATEST)
        if isinstance(value, SourceTree):
            return cls(RefKind.TREE, value)
        if isinstance(value, SemanticVersion):
            return cls(RefKind.EXPLICIT, value)
        if isinstance(value, Release):
            return cls(RefKind.NAMED, value)
        if isinstance(value, str):
            return cls(RefKind.RAW, value)
        raise InvalidReference(
            "I know SourceTree, SemanticVersion, Release and str, "
            f"but what is {type(value).__name__}?"
        )


def _find_version(version: SemanticVersion, registry: SourceRegistry) -> SourceTree:
    for tree in registry.scan():
        if tree.version() == version:
            return tree
    raise NotFound(f"No source tree for linux-{version} in {registry.base_dir}")


def resolve(ref: Any, registry: SourceRegistry) -> SourceTree:
    """Return the single source tree ``ref`` refers to.

    Raises:
        InvalidReference: ``ref`` is of an unsupported type.
        NotFound: No tree matches, or the registry is empty for LATEST.
        ParseError: A RAW reference is not a version string.
    """
    ref = VersionRef.of(ref)
    if ref.kind is RefKind.LATEST:
        tree = registry.latest()
        if tree is None:
            raise NotFound(f"No source trees in {registry.base_dir}")
        return tree
    if ref.kind is RefKind.TREE:
        return ref.value
    if ref.kind is RefKind.EXPLICIT:
        return _find_version(ref.value, registry)
    if ref.kind is RefKind.NAMED:
        return resolve(VersionRef(RefKind.EXPLICIT, ref.value.version), registry)
    if ref.kind is RefKind.RAW:
        return resolve(VersionRef(RefKind.EXPLICIT, SemanticVersion(ref.value)), registry)
    raise InvalidReference(f"Unhandled reference kind {ref.kind}")


ConfigRef = Union[None, bool, str, "os.PathLike[str]", SemanticVersion, Release, SourceTree]


def prepare_config_source(
    version_ref: Any,
    config_ref: ConfigRef,
    registry: SourceRegistry,
) -> Tuple[SourceTree, Optional[Union[Path, SourceTree]]]:
    """Pair the target tree with a source of prior configuration.

    ``config_ref`` may name an existing configuration file, or any version
    reference (whose tree's configuration is used). ``None`` selects the
    configuration of the newest configured tree, if there is one; ``False``
    selects no configuration at all.
    """
    tree = resolve(version_ref, registry)
    if config_ref is False:
        return tree, None
    if config_ref is None or config_ref is True:
        donor = max(registry.configured(), default=None)
        if donor is None:
            logger.debug("No configured source tree to take a configuration from")
            return tree, None
        return tree, donor.config_path
    if isinstance(config_ref, (str, os.PathLike)) and Path(config_ref).is_file():
        return tree, Path(config_ref)
    if isinstance(config_ref, os.PathLike):
        raise NotFound(f"Configuration file {config_ref} does not exist")
    return tree, resolve(config_ref, registry)
