"""Certificate decoding, secure persistence, and PKCS#12 inspection."""

from __future__ import annotations

import base64
import binascii
import os
from pathlib import Path

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import pkcs12


def decode_certificate(blob: str) -> bytes:
    """Decode a base64 certificate blob, tolerating embedded whitespace.

    Raises:
        ValueError: If the blob is not valid base64 or decodes to nothing
    """
    compact = "".join(blob.split())
    try:
        data = base64.b64decode(compact, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"certificate is not valid base64: {exc}") from exc
    if not data:
        raise ValueError("certificate decodes to an empty payload")
    return data


def write_secure_file(path: Path, data: bytes, *, mode: int = 0o600) -> None:
    """Write ``data`` to ``path`` and restrict permissions.

    Args:
        path: Target file path
        data: Bytes to persist
        mode: File mode to apply (POSIX style)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    try:
        os.write(fd, data)
    finally:
        os.close(fd)

    try:
        os.chmod(path, mode)
    except PermissionError:
        # Windows may not support POSIX-style chmod; best effort only.
        pass


def normalize_thumbprint(value: str) -> str:
    """Uppercase a thumbprint and strip spaces and colons."""
    return "".join(value.split()).replace(":", "").upper()


def read_pfx_thumbprint(data: bytes, password: str) -> str:
    """Return the SHA-1 thumbprint of the leaf certificate in a PFX bundle.

    Raises:
        ValueError: If the bundle cannot be opened or holds no certificate
    """
    secret = password.encode("utf-8") if password else None
    _key, certificate, _additional = pkcs12.load_key_and_certificates(data, secret)
    if certificate is None:
        raise ValueError("PKCS#12 bundle does not contain a certificate")
    return certificate.fingerprint(hashes.SHA1()).hex().upper()
