"""Signing run orchestration built on application ports."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from bulksign.app.ports import (
    CandidatePath,
    CertificateProvisionerPort,
    CommandRunnerPort,
    DiscoveryPort,
)
from bulksign.app.signing_service import AttemptOutcome, AttemptStage, SignAndVerify
from bulksign.config import SigningConfig
from bulksign.errors import ProvisioningError
from bulksign.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

StageStatus = Literal["pending", "completed", "failed"]


class PipelineState(str, Enum):
    """Lifecycle of a signing run."""

    IDLE = "idle"
    CERT_PROVISIONED = "cert_provisioned"
    CERT_IMPORTED = "cert_imported"
    SIGNING = "signing"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class PipelineStage:
    """Represents the status of a pipeline phase."""

    name: str
    status: StageStatus = "pending"
    detail: str | None = None
    duration_seconds: float | None = None
    metrics: dict[str, Any] | None = None


class FileSigningResult(BaseModel):
    """Final result for one discovered file."""

    path: str
    success: bool
    attempts: int = Field(..., ge=0)
    stage: AttemptStage | None = None
    detail: str = ""

    @property
    def skipped(self) -> bool:
        """True when the file was surfaced but rejected before any tool ran."""
        return not self.success and self.stage == "precondition"


class SigningRunResult(BaseModel):
    """Summary of a completed signing run.

    ``failed`` counts files whose signing or verification never succeeded;
    packaging artifacts rejected up front are counted as ``skipped`` instead.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: PipelineState
    files: list[FileSigningResult] = Field(default_factory=list)
    stages: list[PipelineStage] = Field(default_factory=list)

    @property
    def discovered(self) -> int:
        return len(self.files)

    @property
    def signed(self) -> int:
        return sum(1 for item in self.files if item.success)

    @property
    def skipped(self) -> int:
        return sum(1 for item in self.files if item.skipped)

    @property
    def failed(self) -> int:
        return self.discovered - self.signed - self.skipped


class SigningPipeline:
    """Orchestrate provision → import → sign without direct I/O.

    Certificate provisioning and import must both succeed before the first
    file is signed. Per-file failures are recorded and never stop the run;
    any exception moves the pipeline to ``FAILED`` and is re-raised.
    """

    def __init__(
        self,
        *,
        command_runner: CommandRunnerPort,
        discovery_port: DiscoveryPort,
        certificate_provisioner: CertificateProvisionerPort,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._runner = command_runner
        self._discovery = discovery_port
        self._provisioner = certificate_provisioner
        self._sleep = sleep
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline state %s -> %s", self._state.value, state.value)
        self._state = state

    @contextmanager
    def _stage(
        self,
        stages: list[PipelineStage],
        name: str,
        *,
        reaches: PipelineState | None = None,
    ) -> Iterator[PipelineStage]:
        """Record one run phase and advance to ``reaches`` when it completes.

        A failing phase records the error together with any tool output the
        phase already stored in ``detail``, such as what certutil printed.
        """

        stage = PipelineStage(name=name)
        stages.append(stage)
        started = time.monotonic()
        try:
            yield stage
        except Exception as exc:
            stage.status = "failed"
            message = str(exc)
            if stage.detail and stage.detail not in message:
                message = f"{message}\n{stage.detail}"
            stage.detail = message
            logger.error("%s stage failed: %s", name, exc)
            raise
        finally:
            stage.duration_seconds = time.monotonic() - started

        stage.status = "completed"
        if reaches is not None:
            self._transition(reaches)

    def run(self, config: SigningConfig) -> SigningRunResult:
        """Execute the signing run described by ``config``."""

        self._state = PipelineState.IDLE
        stages: list[PipelineStage] = []
        files: list[FileSigningResult] = []
        password = config.cert_password.get_secret_value()

        try:
            with ExitStack() as stack:
                with self._stage(
                    stages, "provision", reaches=PipelineState.CERT_PROVISIONED
                ) as stage:
                    certificate_path = stack.enter_context(
                        self._provisioner.provision(
                            config.certificate.get_secret_value(),
                            password=password,
                            expected_sha1=config.cert_sha1 if config.check_thumbprint else None,
                        )
                    )
                    stage.metrics = {"thumbprint_checked": config.check_thumbprint}

                with self._stage(
                    stages, "import", reaches=PipelineState.CERT_IMPORTED
                ) as stage:
                    logger.info("adding certificate %s to the store", certificate_path)
                    imported = self._runner.import_certificate(certificate_path, password)
                    logger.info("Command: %s", imported.command)
                    stage.detail = imported.output or None
                    stage.metrics = {
                        "command": imported.command,
                        "returncode": imported.returncode,
                    }
                    if not imported.ok:
                        raise ProvisioningError(
                            "Certificate import failed", output=imported.output
                        )
                    if imported.output:
                        logger.info(imported.output)

                self._transition(PipelineState.SIGNING)
                with self._stage(stages, "sign") as stage:
                    operation = SignAndVerify(self._runner, config)
                    policy = RetryPolicy(
                        max_attempts=config.max_attempts,
                        delay_seconds=config.retry_delay_seconds,
                        sleep=self._sleep,
                    )
                    for candidate in self._discovery.discover(
                        config.folder,
                        recursive=config.recursive,
                        extensions=config.extensions,
                    ):
                        files.append(self._sign_candidate(candidate, operation, policy))

                    signed = sum(1 for item in files if item.success)
                    skipped = sum(1 for item in files if item.skipped)
                    stage.detail = f"signed {signed} of {len(files)} discovered files"
                    stage.metrics = {
                        "discovered_count": len(files),
                        "signed_count": signed,
                        "skipped_count": skipped,
                        "failed_count": len(files) - signed - skipped,
                    }
        except Exception:
            self._transition(PipelineState.FAILED)
            raise

        self._transition(PipelineState.DONE)
        result = SigningRunResult(state=self._state, files=files, stages=stages)
        logger.info(
            "Signed %d of %d discovered files (%d skipped)",
            result.signed,
            result.discovered,
            result.skipped,
        )
        return result

    def _sign_candidate(
        self,
        candidate: CandidatePath,
        operation: SignAndVerify,
        policy: RetryPolicy,
    ) -> FileSigningResult:
        retried = policy.run(lambda: operation.attempt(candidate.path), label=candidate.path)
        last: AttemptOutcome | None = retried.last_outcome

        if retried.success:
            detail = ""
        elif retried.errors and len(retried.errors) == retried.attempts:
            # every attempt raised; report the final exception
            detail = f"{type(retried.errors[-1]).__name__}: {retried.errors[-1]}"
        else:
            detail = last.output if last is not None else ""

        if not retried.success and not (last is not None and last.stage == "precondition"):
            logger.error(
                "Giving up on %s after %d attempt(s)", candidate.path, retried.attempts
            )

        return FileSigningResult(
            path=candidate.path,
            success=retried.success,
            attempts=retried.attempts,
            stage=last.stage if last is not None else None,
            detail=detail,
        )
