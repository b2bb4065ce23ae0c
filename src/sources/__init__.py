"""Local kernel source trees and their discovery."""

from .tree import SourceTree
from .registry import SourceRegistry

__all__ = [
    "SourceTree",
    "SourceRegistry",
]
