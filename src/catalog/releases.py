"""Release catalog backed by the kernel.org ``releases.json`` feed."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from common.memo import Once
from errors import NoAvailableRelease, ParseError, ParseFailed
from versioning.models import Moniker, Release, SemanticVersion
from versioning.parser import parse_release

logger = logging.getLogger(__name__)


class ReleaseCatalog:
    """Fetches the release feed once and answers selection queries.

    The fetched list is kept for the lifetime of the instance and never
    refreshed.
    """

    def __init__(self, uri: str):
        self.uri = uri
        self._releases: Once[List[Release]] = Once(self._load)

    def _load(self) -> List[Release]:
        document = get_json(self.uri, context="releases")
        if not isinstance(document, dict) or not isinstance(document.get("releases"), list):
            raise ParseFailed(f"{safe_url(self.uri)} has no 'releases' array")

        releases = []
        for entry in document["releases"]:
            try:
                releases.append(parse_release(entry))
            except ParseError as exc:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Dropping release entry",
                        extra=extra_context(
                            event="parse",
                            component="catalog",
                            outcome="dropped",
                            reason=str(exc)
                        )
                    )
        logger.debug("Loaded %d releases from %s", len(releases), safe_url(self.uri))
        return releases

    def fetch(self) -> List[Release]:
        """Return all parsed releases, in feed order.

        Raises:
            FetchFailed: The feed could not be retrieved.
            ParseFailed: The feed is not a JSON object with a ``releases`` list.
        """
        return list(self._releases.get())

    def select_by_moniker(self, moniker: Union[str, Moniker, None] = None) -> List[Release]:
        """Releases of one channel, or all releases when ``moniker`` is empty."""
        releases = self.fetch()
        if not moniker:
            return releases
        wanted = moniker.value if isinstance(moniker, Moniker) else str(moniker)
        return [r for r in releases if r.moniker == wanted]

    def select_by_version(self, version: Union[str, SemanticVersion]) -> List[Release]:
        if not isinstance(version, SemanticVersion):
            version = SemanticVersion(version)
        return [r for r in self.fetch() if r.version == version]

    @staticmethod
    def max(selection: Iterable[Release]) -> Optional[Release]:
        """Greatest release by version, or None for an empty selection."""
        return max(selection, default=None)

    def latest(self, moniker: Union[str, Moniker, None] = None) -> Release:
        release = self.max(self.select_by_moniker(moniker))
        if release is None:
            raise NoAvailableRelease(
                "There is no available release which matches your wishes."
            )
        return release
