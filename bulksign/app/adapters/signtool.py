"""signtool/certutil adapter running the Windows signing tools as subprocesses."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from bulksign.app.ports import CommandResult, CommandRunnerPort
from bulksign.utils.commands import format_command, mask_secrets

logger = logging.getLogger(__name__)

DEFAULT_SIGNTOOL_PATH = (
    "C:/Program Files (x86)/Windows Kits/10/bin/10.0.17763.0/x86/signtool.exe"
)


def resolve_signtool(configured: str | None = None) -> str:
    """Pick the signtool executable: explicit setting, then PATH, then Windows Kits."""
    if configured:
        return configured
    return shutil.which("signtool") or DEFAULT_SIGNTOOL_PATH


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class SignToolCommandRunner(CommandRunnerPort):
    """Run certutil and signtool with captured output.

    Commands are executed without a shell. Output is decoded as UTF-8 with
    undecodable bytes replaced. A missing executable or a timeout is returned
    as a failed ``CommandResult`` instead of raising.
    """

    def __init__(
        self,
        *,
        signtool_path: str | None = None,
        certutil_path: str = "certutil",
        timeout_seconds: float | None = None,
    ) -> None:
        self.signtool_path = resolve_signtool(signtool_path)
        self.certutil_path = certutil_path
        self.timeout_seconds = timeout_seconds

    def import_certificate(self, certificate_path: Path, password: str) -> CommandResult:
        argv = [
            self.certutil_path,
            "-f",
            "-p",
            password,
            "-importpfx",
            str(certificate_path),
        ]
        return self._execute(argv, secrets=(password,))

    def sign(
        self,
        path: str,
        *,
        cert_sha1: str,
        timestamp_server: str,
        description: str = "",
        rfc3161: bool = False,
    ) -> CommandResult:
        argv = [self.signtool_path, "sign", "/sm"]
        if rfc3161:
            argv.extend(["/tr", timestamp_server, "/td", "sha256"])
        else:
            argv.extend(["/t", timestamp_server])
        argv.extend(["/sha1", cert_sha1])
        if description:
            argv.extend(["/d", description])
        argv.append(path)
        return self._execute(argv)

    def verify(self, path: str) -> CommandResult:
        return self._execute([self.signtool_path, "verify", "/pa", path])

    def _execute(self, argv: Sequence[str], *, secrets: Sequence[str] = ()) -> CommandResult:
        command = format_command(argv, secrets=secrets)
        logger.debug("running %s", command)

        try:
            completed = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                command=command,
                returncode=None,
                stdout=mask_secrets(_as_text(exc.stdout), secrets),
                stderr=f"timed out after {exc.timeout} seconds",
            )
        except OSError as exc:
            return CommandResult(command=command, returncode=None, stderr=str(exc))

        return CommandResult(
            command=command,
            returncode=completed.returncode,
            stdout=mask_secrets(_as_text(completed.stdout), secrets),
            stderr=mask_secrets(_as_text(completed.stderr), secrets),
        )
