"""Pytest configuration and fixtures."""

import base64
import gc
import logging
import shutil
import tempfile
import time
from collections.abc import Generator, Iterable
from pathlib import Path

import pytest
from pydantic import SecretStr

from bulksign.app.ports import CommandResult
from bulksign.config import Settings, SigningConfig

CERTIFICATE_BYTES = b"pfx-test-payload"
CERTIFICATE_B64 = base64.b64encode(CERTIFICATE_BYTES).decode("ascii")


class FakeCommandRunner:
    """Scripted ``CommandRunnerPort`` recording every invocation.

    ``sign_script`` / ``verify_script`` map a file name to the sequence of
    outcomes returned on successive calls; the last entry repeats. Files not
    listed always succeed.
    """

    def __init__(
        self,
        *,
        import_ok: bool = True,
        sign_script: dict[str, Iterable[bool]] | None = None,
        verify_script: dict[str, Iterable[bool]] | None = None,
    ) -> None:
        self.import_ok = import_ok
        self.sign_script = {name: list(seq) for name, seq in (sign_script or {}).items()}
        self.verify_script = {name: list(seq) for name, seq in (verify_script or {}).items()}
        self.calls: list[tuple[str, str]] = []
        self.sign_kwargs: list[dict[str, object]] = []
        self.imported_paths: list[Path] = []
        self.imported_existed: list[bool] = []

    @staticmethod
    def _next(script: dict[str, list[bool]], path: str) -> bool:
        sequence = script.get(Path(path).name)
        if not sequence:
            return True
        return sequence.pop(0) if len(sequence) > 1 else sequence[0]

    def import_certificate(self, certificate_path: Path, password: str) -> CommandResult:
        self.calls.append(("import", str(certificate_path)))
        self.imported_paths.append(certificate_path)
        self.imported_existed.append(certificate_path.exists())
        return CommandResult(
            command=f"certutil -f -p *** -importpfx {certificate_path}",
            returncode=0 if self.import_ok else 1,
            stdout="CertUtil: -importPFX command completed successfully." if self.import_ok else "",
            stderr="" if self.import_ok else "CertUtil: The password is incorrect.",
        )

    def sign(
        self,
        path: str,
        *,
        cert_sha1: str,
        timestamp_server: str,
        description: str = "",
        rfc3161: bool = False,
    ) -> CommandResult:
        self.calls.append(("sign", path))
        self.sign_kwargs.append(
            {
                "cert_sha1": cert_sha1,
                "timestamp_server": timestamp_server,
                "description": description,
                "rfc3161": rfc3161,
            }
        )
        ok = self._next(self.sign_script, path)
        return CommandResult(
            command=f"signtool sign {path}",
            returncode=0 if ok else 1,
            stdout="Successfully signed" if ok else "",
            stderr="" if ok else "SignTool Error: timestamp server unavailable",
        )

    def verify(self, path: str) -> CommandResult:
        self.calls.append(("verify", path))
        ok = self._next(self.verify_script, path)
        return CommandResult(
            command=f"signtool verify /pa {path}",
            returncode=0 if ok else 1,
            stdout="Successfully verified" if ok else "",
            stderr="" if ok else "SignTool Error: no signature found",
        )

    def paths_for(self, operation: str) -> list[str]:
        return [path for op, path in self.calls if op == operation]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        # Force garbage collection to release any file handles
        gc.collect()
        time.sleep(0.01)
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def fake_runner() -> FakeCommandRunner:
    """Command runner that succeeds for every file."""
    return FakeCommandRunner()


@pytest.fixture
def sleeps() -> list[float]:
    """Collects the delays requested by retry policies."""
    return []


@pytest.fixture
def signing_tree(temp_dir: Path) -> Path:
    """Tree with ``a.exe``, ``sub/b.dll`` and ``sub/c.txt``."""
    root = temp_dir / "artifacts"
    sub = root / "sub"
    sub.mkdir(parents=True)
    (root / "a.exe").write_bytes(b"MZ")
    (sub / "b.dll").write_bytes(b"MZ")
    (sub / "c.txt").write_text("not a binary")
    return root


def make_config(folder: Path, **overrides: object) -> SigningConfig:
    """Build a valid ``SigningConfig`` rooted at ``folder``."""
    values: dict[str, object] = {
        "folder": folder,
        "recursive": True,
        "certificate": SecretStr(CERTIFICATE_B64),
        "cert_password": SecretStr("hunter2"),
        "cert_sha1": "0123456789ABCDEF0123456789ABCDEF01234567",
        "timestamp_server": "http://timestamp.example.test",
    }
    values.update(overrides)
    return SigningConfig(**values)


@pytest.fixture
def signing_config(signing_tree: Path) -> SigningConfig:
    return make_config(signing_tree)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> pytest.MonkeyPatch:
    """Remove bulksign/GitHub inputs from the environment and leave any .env behind."""
    import os

    for key in list(os.environ):
        upper = key.upper()
        if upper.startswith(("BULKSIGN_", "INPUT_")) or upper == "GITHUB_ACTIONS":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(temp_dir)
    return monkeypatch


@pytest.fixture
def override_settings(clean_env: pytest.MonkeyPatch) -> Generator[Settings, None, None]:
    """Provide isolated bulksign settings scoped to tests."""

    import bulksign.config as config_module

    original_settings = getattr(config_module, "_settings", None)
    settings = config_module.Settings()
    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings


@pytest.fixture(autouse=True)
def _reset_bulksign_logging() -> Generator[None, None, None]:
    """Drop handlers installed by CLI invocations so they never outlive a test."""
    yield
    logger = logging.getLogger("bulksign")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_signing_config():
    """Factory building valid configs with per-test overrides."""
    return make_config


@pytest.fixture
def runner_factory():
    """Factory for scripted command runners."""
    return FakeCommandRunner
