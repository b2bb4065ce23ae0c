"""kernel.org release catalog."""

from .releases import ReleaseCatalog

__all__ = ["ReleaseCatalog"]
