"""Application layer for bulksign.

This layer orchestrates signing without direct filesystem or process I/O.
All side effects are delegated to adapters via port interfaces.
"""

__all__ = [
    "AttemptOutcome",
    "FileSigningResult",
    "PipelineState",
    "SignAndVerify",
    "SigningPipeline",
    "SigningRunResult",
]

from bulksign.app.signing_pipeline import (
    FileSigningResult,
    PipelineState,
    SigningPipeline,
    SigningRunResult,
)
from bulksign.app.signing_service import AttemptOutcome, SignAndVerify
