"""Temporary-file certificate provisioner."""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from bulksign.app.ports import CertificateProvisionerPort
from bulksign.errors import ProvisioningError
from bulksign.utils.certificates import (
    decode_certificate,
    normalize_thumbprint,
    read_pfx_thumbprint,
    write_secure_file,
)

logger = logging.getLogger(__name__)


class TempCertificateProvisioner(CertificateProvisionerPort):
    """Write the decoded PFX into a private temp directory for one run."""

    def __init__(
        self,
        *,
        temp_dir: Path | None = None,
        filename: str = "certificate.pfx",
    ) -> None:
        self._temp_dir = temp_dir
        self._filename = filename

    @contextmanager
    def provision(
        self,
        certificate: str,
        *,
        password: str,
        expected_sha1: str | None = None,
    ) -> Iterator[Path]:
        try:
            data = decode_certificate(certificate)
        except ValueError as exc:
            raise ProvisioningError(f"Cannot decode certificate: {exc}") from exc

        if expected_sha1:
            self._check_thumbprint(data, password, expected_sha1)

        try:
            workdir = Path(tempfile.mkdtemp(prefix="bulksign-", dir=self._temp_dir))
        except OSError as exc:
            raise ProvisioningError(f"Cannot create temporary directory: {exc}") from exc

        try:
            certificate_path = workdir / self._filename
            logger.info("creating PFX certificate at path: %s", certificate_path)
            try:
                write_secure_file(certificate_path, data)
            except OSError as exc:
                raise ProvisioningError(
                    f"Cannot write certificate to {certificate_path}: {exc}"
                ) from exc
            yield certificate_path
        finally:
            shutil.rmtree(workdir, ignore_errors=True)
            logger.debug("removed temporary certificate directory %s", workdir)

    @staticmethod
    def _check_thumbprint(data: bytes, password: str, expected_sha1: str) -> None:
        try:
            actual = read_pfx_thumbprint(data, password)
        except ValueError as exc:
            raise ProvisioningError(f"Cannot open PFX certificate: {exc}") from exc

        if actual != normalize_thumbprint(expected_sha1):
            raise ProvisioningError(
                f"Certificate thumbprint {actual} does not match cert-sha1 "
                f"{normalize_thumbprint(expected_sha1)}"
            )
        logger.info("certificate thumbprint %s matches cert-sha1", actual)
