"""Download and unpacking of release tarballs.

Tarballs are cached in the cache directory and never downloaded twice.
Partial downloads live next to their final name with a ``.download`` suffix
and are resumed with an HTTP range request.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Union
from urllib.parse import urlsplit

import requests

from common.http_client import safe_get
from common.logging_utils import safe_url, Timer
from constants import Constants
from errors import DownloadFailed, FetchFailed, UnpackFailed
from versioning.models import Release

logger = logging.getLogger(__name__)

_UNITS = ("KiB", "MiB", "GiB", "TiB")


def format_bytes(count: int) -> str:
    """Human-readable byte count, e.g. ``132MiB``."""
    if count < 1024:
        return f"{count}B"
    value = float(count)
    unit = "B"
    for unit in _UNITS:
        value /= 1024
        if value < 1024:
            break
    return f"{int(value)}{unit}"


def unpacked_name(tarball: Union[str, Path]) -> str:
    """Directory name a kernel tarball unpacks to: ``linux-6.1.tar.xz`` -> ``linux-6.1``."""
    name = Path(tarball).name
    for suffix in Constants.TARBALL_SUFFIXES:
        if name.endswith(suffix):
            return name[:-len(suffix)]
    return name


@dataclass
class FetchResult:
    """Where a release ended up on disk."""
    tarball: Path
    directory: Path
    downloaded: bool


class Fetcher:
    """Turns a release (or a tarball URI) into an unpacked source directory."""

    def __init__(self, cache_dir: Union[str, Path], sources_base_dir: Union[str, Path], tar: str = "tar"):
        self.cache_dir = Path(cache_dir)
        self.sources_base_dir = Path(sources_base_dir)
        self.tar = tar

    @staticmethod
    def source_uri(release_or_uri: Union[Release, str]) -> str:
        if isinstance(release_or_uri, Release):
            if not release_or_uri.source:
                raise DownloadFailed(str(release_or_uri), "release has no source tarball")
            return release_or_uri.source
        if isinstance(release_or_uri, str) and release_or_uri.strip():
            return release_or_uri.strip()
        raise DownloadFailed(repr(release_or_uri), "this is no URI, str or Release")

    def tarball_path(self, uri: str) -> Path:
        name = os.path.basename(urlsplit(uri).path)
        if not name:
            raise DownloadFailed(uri, "URI has no file name")
        return self.cache_dir / name

    def download(self, release_or_uri: Union[Release, str]) -> FetchResult:
        """Fetch the tarball (unless cached) and unpack it into the sources dir.

        Raises:
            DownloadFailed: Transport error or unexpected HTTP status.
            UnpackFailed: ``tar`` failed.
        """
        uri = self.source_uri(release_or_uri)
        self.cache_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        tarball = self.tarball_path(uri)
        downloaded = False
        if tarball.exists():
            logger.info("Using cached %s", tarball)
        else:
            self._download(uri, tarball)
            downloaded = True
        directory = self._unpack(tarball, self.sources_base_dir)
        return FetchResult(tarball=tarball, directory=directory, downloaded=downloaded)

    def _download(self, uri: str, tarball: Path) -> None:
        partial = tarball.with_name(tarball.name + Constants.DOWNLOAD_SUFFIX)
        offset = partial.stat().st_size if partial.exists() else 0
        headers = {"Range": f"bytes={offset}-"} if offset else None
        logger.info("Download %s => %s", safe_url(uri), tarball)

        with Timer() as t:
            try:
                res = safe_get(uri, context="download", headers=headers, stream=True)
            except FetchFailed as exc:
                raise DownloadFailed(uri, str(exc)) from exc
            try:
                if res.status_code == 416 and offset:
                    # Range starts at the end: the partial file is complete.
                    logger.debug("Partial download %s is already complete", partial)
                elif res.status_code in (200, 206):
                    mode = "ab" if res.status_code == 206 else "wb"
                    if offset and res.status_code == 200:
                        logger.debug("Server ignored range request; restarting %s", partial)
                    self._write_body(res, partial, mode, uri)
                else:
                    raise DownloadFailed(uri, f"HTTP {res.status_code}")
            finally:
                res.close()

        size = partial.stat().st_size
        logger.info("Downloaded %s in %.1fs", format_bytes(size), t.duration_ms() / 1000)
        partial.rename(tarball)

    @staticmethod
    def _write_body(res, partial: Path, mode: str, uri: str) -> None:
        try:
            with open(partial, mode) as fd:
                for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fd.write(chunk)
        except (OSError, requests.RequestException) as exc:
            raise DownloadFailed(uri, str(exc)) from exc

    def _unpack(self, tarball: Path, destdir: Path) -> Path:
        logger.info("Unpack %s => %s", tarball, destdir)
        destdir.mkdir(parents=True, exist_ok=True)
        argv = [self.tar, "-C", str(destdir), "-xf", str(tarball)]
        try:
            result = subprocess.run(argv, check=False)  # noqa: S603
        except OSError as exc:
            raise UnpackFailed(str(tarball), str(exc)) from exc
        if result.returncode != 0:
            raise UnpackFailed(str(tarball), f"tar exit status {result.returncode}")
        return destdir / unpacked_name(tarball)

