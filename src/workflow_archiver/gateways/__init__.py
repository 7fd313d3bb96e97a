"""Gateway helpers for external services."""

from .dor import DEFAULT_VERSION, DorVersionResolver, VersionResolutionError

__all__ = [
    "DEFAULT_VERSION",
    "DorVersionResolver",
    "VersionResolutionError",
]
