"""Candidate discovery for signing."""

from bulksign.discovery.discover import discover_files
from bulksign.discovery.filters import (
    PACKAGING_EXTENSIONS,
    SIGNABLE_EXTENSIONS,
    get_extension,
    is_signable,
    is_signable_extension,
)

__all__ = [
    "PACKAGING_EXTENSIONS",
    "SIGNABLE_EXTENSIONS",
    "discover_files",
    "get_extension",
    "is_signable",
    "is_signable_extension",
]
