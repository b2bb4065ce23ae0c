"""Release tarball download and extraction."""

from .fetcher import Fetcher, FetchResult, format_bytes, unpacked_name

__all__ = [
    "Fetcher",
    "FetchResult",
    "format_bytes",
    "unpacked_name",
]
