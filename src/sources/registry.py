"""Discovery of the kernel source trees below the sources base directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from kbuild.driver import BuildDriver
from common.memo import Once
from constants import Constants
from .tree import SourceTree

logger = logging.getLogger(__name__)


class SourceRegistry:
    """The ``linux-*`` directories of one base directory.

    The directory is scanned once per instance; trees added or removed on
    disk afterwards are not noticed, except for trees handed to
    ``register`` (such as one just unpacked by the fetcher).
    """

    def __init__(self, base_dir: Union[str, Path], driver: Optional[BuildDriver] = None):
        self.base_dir = Path(base_dir)
        self.driver = driver or BuildDriver()
        self._trees: Once[List[SourceTree]] = Once(self._scan)

    def _scan(self) -> List[SourceTree]:
        if not self.base_dir.is_dir():
            logger.warning("Sources directory %s does not exist", self.base_dir)
            return []
        trees = [
            SourceTree(path, self.driver)
            for path in sorted(self.base_dir.glob(Constants.SOURCE_DIR_GLOB))
            if path.is_dir()
        ]
        logger.debug("Found %d source trees in %s", len(trees), self.base_dir)
        return trees

    def scan(self) -> List[SourceTree]:
        return list(self._trees.get())

    def __iter__(self):
        return iter(self.scan())

    def __len__(self) -> int:
        return len(self._trees.get())

    def register(self, path: Union[str, Path]) -> SourceTree:
        """Add a tree that appeared during this run, or return the known one."""
        path = Path(path)
        trees = self._trees.get()
        for tree in trees:
            if tree.path == path:
                return tree
        tree = SourceTree(path, self.driver)
        trees.append(tree)
        return tree

    def configured(self) -> List[SourceTree]:
        return [t for t in self.scan() if t.is_configured()]

    def unconfigured(self) -> List[SourceTree]:
        return [t for t in self.scan() if not t.is_configured()]

    def newest_first(self) -> List[SourceTree]:
        return sorted(self.scan(), reverse=True)

    def latest(self) -> Optional[SourceTree]:
        return max(self.scan(), default=None)
