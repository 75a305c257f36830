"""Concrete adapters wiring application ports to built-in implementations."""

from __future__ import annotations

from .certificate import TempCertificateProvisioner
from .discovery import FileSystemDiscoveryAdapter
from .signtool import SignToolCommandRunner

__all__ = [
    "FileSystemDiscoveryAdapter",
    "SignToolCommandRunner",
    "TempCertificateProvisioner",
]
