"""Exception hierarchy separating fatal run errors from per-file failures.

Per-file signing failures are never raised; they travel as ``AttemptOutcome``
values. Everything below ``FatalSigningError`` aborts the run.
"""

from __future__ import annotations


class BulkSignError(Exception):
    """Base class for all bulksign errors."""

    pass


class FatalSigningError(BulkSignError):
    """Raised when the run must stop and the pipeline step must fail."""

    pass


class ConfigurationError(FatalSigningError):
    """Raised when required inputs are empty."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required inputs: {', '.join(self.missing)}")


class ProvisioningError(FatalSigningError):
    """Raised when the certificate cannot be decoded, written, or imported."""

    def __init__(self, message: str, *, output: str = "") -> None:
        self.output = output
        super().__init__(message if not output else f"{message}\n{output}")


class DiscoveryError(FatalSigningError):
    """Raised when a directory in the signing tree cannot be listed."""

    pass
