"""Command runner port for the external certificate and signing tools."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Captured result of one external tool invocation."""

    command: str = Field(..., description="Command line as run, with secrets masked")
    returncode: int | None = Field(
        None, description="Process exit code (None when the process could not run)"
    )
    stdout: str = Field("", description="Captured standard output")
    stderr: str = Field("", description="Captured standard error")

    @property
    def ok(self) -> bool:
        """True when the process ran and exited with status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined, trimmed stdout and stderr for logging."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


class CommandRunnerPort(Protocol):
    """Port interface for the external tools used during a signing run.

    Adapters must never raise for tool failures; a failed or missing tool is
    reported through ``CommandResult.returncode``.

    Side effects: Spawns processes, mutates the certificate store and files.
    """

    def import_certificate(self, certificate_path: Path, password: str) -> CommandResult:
        """Import a PFX file into the platform certificate store.

        Args:
            certificate_path: Path to the PFX file
            password: PFX password

        Returns:
            Captured command result
        """
        ...

    def sign(
        self,
        path: str,
        *,
        cert_sha1: str,
        timestamp_server: str,
        description: str = "",
        rfc3161: bool = False,
    ) -> CommandResult:
        """Sign ``path`` with the certificate identified by ``cert_sha1``."""
        ...

    def verify(self, path: str) -> CommandResult:
        """Verify the signature on ``path``."""
        ...
