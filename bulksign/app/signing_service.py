"""Single sign-and-verify attempt for one file."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

from bulksign.app.ports import CommandResult, CommandRunnerPort
from bulksign.config import SigningConfig
from bulksign.discovery.filters import get_extension, is_signable_extension

logger = logging.getLogger(__name__)

AttemptStage = Literal["precondition", "sign", "verify"]


class AttemptOutcome(BaseModel):
    """Result of one sign-and-verify try."""

    path: str = Field(..., description="File the attempt targeted")
    success: bool = Field(..., description="True when both signing and verification passed")
    retryable: bool = Field(
        True, description="False when retrying cannot change the result"
    )
    stage: AttemptStage = Field(..., description="Last stage reached by the attempt")
    output: str = Field("", description="Captured tool output for diagnostics")


class SignAndVerify:
    """Sign a file and verify the signature as one atomic attempt.

    Tool failures are reported as unsuccessful ``AttemptOutcome`` values so a
    ``RetryPolicy`` can try again; nothing here raises for a failed command.
    """

    def __init__(self, runner: CommandRunnerPort, config: SigningConfig) -> None:
        self._runner = runner
        self._config = config

    def attempt(self, path: str) -> AttemptOutcome:
        """Run signing then verification against ``path``."""

        extension = get_extension(path)
        if not is_signable_extension(extension, self._config.extensions):
            reason = f"{extension or 'extensionless'} files are not independently signable"
            logger.warning("Not signing %s: %s", path, reason)
            return AttemptOutcome(
                path=path,
                success=False,
                retryable=False,
                stage="precondition",
                output=reason,
            )

        signed = self._runner.sign(
            path,
            cert_sha1=self._config.cert_sha1,
            timestamp_server=self._config.timestamp_server,
            description=self._config.cert_description,
            rfc3161=self._config.timestamp_rfc3161,
        )
        _log_command(f"signing file: {path}", signed)
        if not signed.ok:
            return AttemptOutcome(path=path, success=False, stage="sign", output=signed.output)

        verified = self._runner.verify(path)
        _log_command(f"verifying signing for file: {path}", verified)
        if not verified.ok:
            return AttemptOutcome(
                path=path, success=False, stage="verify", output=verified.output
            )

        return AttemptOutcome(path=path, success=True, stage="verify", output=verified.output)


def _log_command(action: str, result: CommandResult) -> None:
    logger.info("%s\nCommand: %s", action, result.command)
    if result.ok:
        if result.output:
            logger.info(result.output)
    else:
        logger.error(
            "Command exited with %s\n%s",
            result.returncode if result.returncode is not None else "no status",
            result.output or "(no output)",
        )
