"""Parsing of release feed entries into ``Release`` records."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from errors import ParseError
from .models import Release, SemanticVersion

NEXT_PREFIX = "next-"


def is_next_placeholder(raw_version: Any) -> bool:
    """True for linux-next snapshot entries such as ``next-20230101``."""
    return isinstance(raw_version, str) and raw_version.startswith(NEXT_PREFIX)


def _optional_uri(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _released_at(value: Any) -> Optional[datetime]:
    """Read ``released.timestamp`` (epoch seconds) as an aware datetime."""
    if not isinstance(value, dict):
        return None
    ts = value.get("timestamp")
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(int(ts), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise ParseError(f"Invalid release timestamp: {ts!r}") from exc


def parse_release(entry: Dict[str, Any]) -> Release:
    """Build a ``Release`` from one element of the feed's ``releases`` array.

    Raises:
        ParseError: For ``next-`` placeholders, missing or malformed versions,
            and entries that are not JSON objects.
    """
    if not isinstance(entry, dict):
        raise ParseError(f"Release entry is not an object: {entry!r}")
    raw_version = entry.get("version")
    if is_next_placeholder(raw_version):
        raise ParseError(f"Skipping linux-next placeholder {raw_version}")
    if not isinstance(raw_version, str):
        raise ParseError(f"Release entry without version: {entry!r}")

    return Release(
        version=SemanticVersion(raw_version),
        moniker=str(entry.get("moniker") or "other"),
        source=_optional_uri(entry.get("source")),
        pgp=_optional_uri(entry.get("pgp")),
        released=_released_at(entry.get("released")),
        gitweb=_optional_uri(entry.get("gitweb")),
        changelog=_optional_uri(entry.get("changelog")),
        patch_full=_optional_uri(entry.get("patch_full")),
        patch_incremental=_optional_uri(entry.get("patch_incremental")),
        iseol=bool(entry.get("iseol", False)),
    )
