"""Discovery port interface and candidate DTO for signing runs."""

from __future__ import annotations

from collections.abc import Collection, Iterator
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, field_validator

from bulksign.discovery.filters import SIGNABLE_EXTENSIONS


class CandidatePath(BaseModel):
    """A discovered file that may be handed to the signing attempt."""

    path: str = Field(..., description="Absolute filesystem path to the file")
    extension: str = Field(..., description="Lowercase file extension including leading dot")
    signable: bool = Field(
        True, description="False for packaging artifacts that are surfaced but never signed"
    )

    @field_validator("path")
    def _validate_path(cls, value: str) -> str:
        resolved = Path(value)
        if not resolved.is_absolute():
            raise ValueError("CandidatePath.path must be an absolute path")
        return str(resolved)


class DiscoveryPort(Protocol):
    """Port interface for streaming candidate discovery."""

    def discover(
        self,
        root: Path,
        *,
        recursive: bool = False,
        extensions: Collection[str] = SIGNABLE_EXTENSIONS,
    ) -> Iterator[CandidatePath]:
        """Yield candidates under ``root`` lazily, depth-first."""
        ...
