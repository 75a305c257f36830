"""Certificate provisioning port."""

from __future__ import annotations

from contextlib import AbstractContextManager
from pathlib import Path
from typing import Protocol


class CertificateProvisionerPort(Protocol):
    """Port interface for materializing the signing certificate on disk.

    Side effects: Writes a PFX file that lives for the duration of the
    returned context.
    """

    def provision(
        self,
        certificate: str,
        *,
        password: str,
        expected_sha1: str | None = None,
    ) -> AbstractContextManager[Path]:
        """Decode ``certificate`` and persist it to a scoped temporary file.

        Args:
            certificate: Base64-encoded PFX blob
            password: PFX password (used when checking the thumbprint)
            expected_sha1: When set, the PFX thumbprint must match

        Returns:
            Context manager yielding the PFX path and removing it on exit

        Raises:
            ProvisioningError: If the blob cannot be decoded, checked, or written
        """
        ...
