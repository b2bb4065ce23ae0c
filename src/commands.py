"""Top-level operations behind the CLI subcommands.

``LinuxUpdate`` wires the catalog, the source registry, the fetcher and the
build driver together from one ``Settings`` instance.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Iterable, List, Optional, TextIO, Union

from catalog.releases import ReleaseCatalog
from config import Settings
from errors import NoAvailableRelease
from fetch.fetcher import Fetcher, FetchResult
from kbuild.driver import BuildDriver
from sources.registry import SourceRegistry
from sources.tree import SourceTree
from versioning.models import Moniker, Release, SemanticVersion
from versioning.resolver import ConfigRef, prepare_config_source, resolve

logger = logging.getLogger(__name__)


class LinuxUpdate:
    """Operations on kernel releases and local source trees."""

    def __init__(self, settings: Optional[Settings] = None, out: Optional[TextIO] = None):
        self.settings = settings or Settings()
        self.out = out
        self.driver = BuildDriver(self.settings.make)
        self.catalog = ReleaseCatalog(self.settings.releases_uri)
        self.registry = SourceRegistry(self.settings.sources_base_dir, self.driver)
        self.fetcher = Fetcher(self.settings.cache_dir, self.settings.sources_base_dir)

    def _print(self, text: Any) -> None:
        print(text, file=self.out if self.out is not None else sys.stdout)

    def listing(self, items: Iterable[Any], latest: bool = False) -> List[Any]:
        """Print items newest first, or only the newest one."""
        items = list(items)
        if latest:
            newest = max(items, default=None)
            shown = [newest] if newest is not None else []
        else:
            shown = sorted(items, reverse=True)
        for item in shown:
            self._print(item)
        return shown

    # -- catalog ------------------------------------------------------------

    def releases(self, moniker: Optional[str] = None, latest: bool = False) -> List[Release]:
        return self.listing(self.catalog.select_by_moniker(moniker), latest)

    def select_release(
        self,
        version: Optional[str] = None,
        moniker: Union[str, Moniker, None] = Moniker.STABLE,
    ) -> Release:
        """Pick the release to download.

        An explicit version wins over the moniker; ``moniker=None`` means any
        channel.

        Raises:
            NoAvailableRelease: Nothing matches.
        """
        if version:
            selection = self.catalog.select_by_version(SemanticVersion(version))
        else:
            selection = self.catalog.select_by_moniker(moniker)
        release = self.catalog.max(selection)
        if release is None:
            raise NoAvailableRelease("There is no available release which matches your wishes.")
        return release

    def fetch(
        self,
        version: Optional[str] = None,
        moniker: Union[str, Moniker, None] = Moniker.STABLE,
        print_only: bool = False,
    ) -> Optional[FetchResult]:
        release = self.select_release(version, moniker)
        if print_only:
            self._print(release.source)
            return None
        result = self.fetcher.download(release)
        self.registry.register(result.directory)
        return result

    # -- source trees -------------------------------------------------------

    def fetched(self, latest: bool = False) -> List[SourceTree]:
        trees = self.registry.scan()
        for tree in trees:
            tree.version()
            tree.is_configured()
        return self.listing(trees, latest)

    def resolve(self, version: Any = None) -> SourceTree:
        return resolve(version, self.registry)

    def import_config(self, version: Any = None, config: ConfigRef = None) -> Optional[SourceTree]:
        tree, source = prepare_config_source(version, config, self.registry)
        if source is None:
            logger.warning("No configuration to import into %s", tree.path)
            return tree
        tree.import_configuration(source)
        return tree

    def _configure_source(self, version: Any, config: ConfigRef) -> SourceTree:
        """Give the target tree a configuration before a configure stage.

        An explicitly named configuration always replaces the existing one;
        the automatic choice is only copied into a tree without one.
        """
        tree, source = prepare_config_source(version, config, self.registry)
        explicit = config is not None and config is not False
        if source is not None and (explicit or not tree.config_path.exists()):
            tree.import_configuration(source)
        return tree

    def oldconfig(self, version: Any = None, config: ConfigRef = None) -> SourceTree:
        tree = self._configure_source(version, config)
        tree.run_oldconfig()
        return tree

    def menuconfig(self, version: Any = None, config: ConfigRef = None) -> SourceTree:
        tree = self._configure_source(version, config)
        tree.run_menuconfig()
        return tree

    def compile(self, version: Any = None) -> SourceTree:
        tree = self.resolve(version)
        tree.compile()
        return tree

    def install(self, version: Any = None) -> SourceTree:
        tree = self.resolve(version)
        tree.install()
        return tree

    def all(self, version: Any = None, config: ConfigRef = None) -> SourceTree:
        """oldconfig, compile and install one tree."""
        tree = self.oldconfig(version, config)
        tree.compile()
        tree.install()
        return tree

    def update(
        self,
        version: Optional[str] = None,
        moniker: Union[str, Moniker, None] = Moniker.STABLE,
        config: ConfigRef = None,
    ) -> SourceTree:
        """Download a release, then configure, compile and install it."""
        result = self.fetch(version, moniker)
        tree = self.registry.register(result.directory)
        return self.all(tree, config)
