"""Extension filters deciding which files are signing candidates."""

from __future__ import annotations

import os
from collections.abc import Collection

SIGNABLE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".dll",
        ".exe",
        ".sys",
        ".vxd",
        ".msix",
        ".msixbundle",
        ".appx",
        ".appxbundle",
        ".msi",
        ".msp",
        ".msm",
        ".cab",
        ".ps1",
        ".psm1",
    }
)

# Surfaced by discovery for older configurations, but never signed directly.
PACKAGING_EXTENSIONS: frozenset[str] = frozenset({".nupkg"})


def get_extension(name: str) -> str:
    """Return the lowercase extension of ``name`` including the leading dot.

    Dotfiles such as ``.exe`` have no extension and return an empty string.
    """
    return os.path.splitext(name)[1].lower()


def is_signable_extension(
    extension: str,
    extensions: Collection[str] = SIGNABLE_EXTENSIONS,
) -> bool:
    """Return True when ``extension`` is in the signable allow-list."""
    return extension.lower() in extensions


def is_packaging_extension(extension: str) -> bool:
    """Return True for packaging formats that are surfaced but not signed."""
    return extension.lower() in PACKAGING_EXTENSIONS


def is_signable(name: str, extensions: Collection[str] = SIGNABLE_EXTENSIONS) -> bool:
    """Decide whether a file name should be surfaced as a signing candidate.

    Args:
        name: File name (a full path also works)
        extensions: Allow-list of signable extensions

    Returns:
        True for signable extensions and for legacy packaging extensions
    """
    extension = get_extension(name)
    if not extension:
        return False
    return is_signable_extension(extension, extensions) or is_packaging_extension(extension)
