"""Version and package metadata."""

from __future__ import annotations

__all__: list[str] = [
    "MAJOR",
    "MINOR",
    "PATCH",
    "__author__",
    "__description__",
    "__email__",
    "__license__",
    "__url__",
    "__version__",
    "__version_info__",
    "get_version",
    "get_version_info__",
    "is_development",
    "is_stable",
]

__version__: str = "0.3.0"
__version_info__: tuple[int, int, int] = (0, 3, 0)
__author__: str = "pywsclient contributors"
__email__: str = ""
__license__: str = "MIT"
__description__: str = "An asynchronous, queue-based WebSocket client."
__url__: str = ""

MAJOR, MINOR, PATCH = __version_info__


def get_version() -> str:
    """Return the package version string."""
    return __version__


def get_version_info__() -> tuple[int, int, int]:
    """Return the package version as a tuple."""
    return __version_info__


def is_development() -> bool:
    """Return True for the unreleased 0.0.0 development version."""
    return (MAJOR, MINOR, PATCH) == (0, 0, 0)


def is_stable() -> bool:
    """Return True once the public API is declared stable."""
    return MAJOR >= 1
