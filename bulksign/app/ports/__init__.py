"""Port interfaces for the bulksign application layer.

These protocol interfaces define contracts for adapters.
Orchestration depends on these ports, never on concrete implementations.
"""

__all__ = [
    "CandidatePath",
    "CertificateProvisionerPort",
    "CommandResult",
    "CommandRunnerPort",
    "DiscoveryPort",
]

from bulksign.app.ports.certificate import CertificateProvisionerPort
from bulksign.app.ports.command import CommandResult, CommandRunnerPort
from bulksign.app.ports.discovery import CandidatePath, DiscoveryPort
