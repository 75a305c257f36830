"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from bulksign.app import SigningPipeline
from bulksign.app.adapters import (
    FileSystemDiscoveryAdapter,
    SignToolCommandRunner,
    TempCertificateProvisioner,
)
from bulksign.app.ports import (
    CertificateProvisionerPort,
    CommandRunnerPort,
    DiscoveryPort,
)
from bulksign.config import Settings, get_settings


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    pipeline: SigningPipeline
    command_runner: CommandRunnerPort
    discovery_port: DiscoveryPort
    certificate_provisioner: CertificateProvisionerPort


def bootstrap_application(
    settings: Settings | None = None,
    *,
    command_runner: CommandRunnerPort | None = None,
    discovery_port: DiscoveryPort | None = None,
    certificate_provisioner: CertificateProvisionerPort | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ApplicationContainer:
    """Create the application container, substituting any provided adapters."""

    active_settings = settings or get_settings()

    runner = command_runner or SignToolCommandRunner(
        signtool_path=active_settings.signtool_path,
        certutil_path=active_settings.certutil_path,
        timeout_seconds=active_settings.command_timeout_seconds,
    )
    discovery = discovery_port or FileSystemDiscoveryAdapter(
        follow_symlinks=active_settings.follow_symlinks
    )
    provisioner = certificate_provisioner or TempCertificateProvisioner(
        temp_dir=active_settings.temp_dir
    )

    pipeline = SigningPipeline(
        command_runner=runner,
        discovery_port=discovery,
        certificate_provisioner=provisioner,
        sleep=sleep,
    )

    return ApplicationContainer(
        settings=active_settings,
        pipeline=pipeline,
        command_runner=runner,
        discovery_port=discovery,
        certificate_provisioner=provisioner,
    )
