"""Configuration management with Pydantic settings and GitHub Action inputs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from bulksign.discovery.filters import SIGNABLE_EXTENSIONS
from bulksign.errors import ConfigurationError

DEFAULT_TIMESTAMP_SERVER = "http://timestamp.digicert.com"

TRUTHY_VALUES = {"true", "1", "yes", "on"}

# Field name -> input name as the calling pipeline knows it.
REQUIRED_INPUTS: dict[str, str] = {
    "folder": "folder",
    "certificate": "certificate",
    "cert_password": "cert-password",
    "cert_sha1": "cert-sha1",
    "timestamp_server": "timestamp-server",
}


def _inputs(field_name: str, action_input: str) -> AliasChoices:
    """Accept both ``BULKSIGN_<FIELD>`` and the GitHub Action ``INPUT_<NAME>``."""
    return AliasChoices(f"bulksign_{field_name}", f"input_{action_input}")


class Settings(BaseSettings):
    """bulksign configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="BULKSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Signing inputs
    folder: str = Field(
        default="",
        validation_alias=_inputs("folder", "folder"),
        description="Directory containing the artifacts to sign",
    )

    recursive: bool = Field(
        default=False,
        validation_alias=_inputs("recursive", "recursive"),
        description="Descend into subdirectories of the folder",
    )

    certificate: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=_inputs("certificate", "certificate"),
        description="Base64-encoded PFX certificate",
    )

    cert_password: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=_inputs("cert_password", "cert-password"),
        description="Password protecting the PFX certificate",
    )

    cert_sha1: str = Field(
        default="",
        validation_alias=_inputs("cert_sha1", "cert-sha1"),
        description="SHA-1 thumbprint selecting the certificate in the store",
    )

    timestamp_server: str = Field(
        default=DEFAULT_TIMESTAMP_SERVER,
        validation_alias=_inputs("timestamp_server", "timestamp-server"),
        description="Timestamp authority URL",
    )

    cert_description: str = Field(
        default="",
        validation_alias=_inputs("cert_description", "cert-description"),
        description="Optional description embedded in the signature",
    )

    # Tooling
    signtool_path: str | None = Field(
        default=None,
        description="Override path to signtool.exe (defaults to PATH, then Windows Kits)",
    )

    certutil_path: str = Field(
        default="certutil",
        description="Executable used to import the certificate into the store",
    )

    command_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout applied to each external command (None = no timeout)",
    )

    # Retry behaviour
    max_attempts: int = Field(
        default=5,
        ge=1,
        description="Sign-and-verify attempts per file before giving up",
    )

    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay; attempt N waits N times this value",
    )

    # Optional hardening
    check_thumbprint: bool = Field(
        default=False,
        description="Parse the PFX and require its thumbprint to match cert_sha1",
    )

    timestamp_rfc3161: bool = Field(
        default=False,
        description="Use RFC 3161 timestamping (/tr /td sha256) instead of /t",
    )

    follow_symlinks: bool = Field(
        default=False,
        description="Descend into symlinked directories during discovery",
    )

    temp_dir: Path | None = Field(
        default=None,
        description="Directory for the temporary PFX file (defaults to system temp)",
    )

    github_actions: bool = Field(
        default=False,
        validation_alias=AliasChoices("github_actions"),
        description="Emit GitHub workflow annotations for warnings and errors",
    )

    @field_validator(
        "recursive",
        "check_thumbprint",
        "timestamp_rfc3161",
        "follow_symlinks",
        "github_actions",
        mode="before",
    )
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        # Action inputs arrive as strings and may be empty.
        if isinstance(value, str):
            return value.strip().lower() in TRUTHY_VALUES
        return value

    def missing_required(self) -> list[str]:
        """Return the input names of required settings that are empty."""
        missing: list[str] = []
        for field_name, input_name in REQUIRED_INPUTS.items():
            value = getattr(self, field_name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if not str(value).strip():
                missing.append(input_name)
        return missing


class SigningConfig(BaseModel):
    """Immutable configuration for one signing run.

    Built once at the entry point and passed explicitly to the pipeline.
    """

    model_config = ConfigDict(frozen=True)

    folder: Path
    recursive: bool = False
    certificate: SecretStr
    cert_password: SecretStr
    cert_sha1: str
    timestamp_server: str
    cert_description: str = ""
    extensions: frozenset[str] = SIGNABLE_EXTENSIONS
    max_attempts: int = Field(default=5, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    check_thumbprint: bool = False
    timestamp_rfc3161: bool = False

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> Any:
        if isinstance(value, (set, frozenset, list, tuple)):
            return frozenset(
                ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value
            )
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> SigningConfig:
        """Validate required inputs and freeze them into a ``SigningConfig``.

        Raises:
            ConfigurationError: If any required input is empty
        """
        missing = settings.missing_required()
        if missing:
            raise ConfigurationError(missing)

        return cls(
            folder=Path(settings.folder.strip()).expanduser(),
            recursive=settings.recursive,
            certificate=settings.certificate,
            cert_password=settings.cert_password,
            cert_sha1=settings.cert_sha1.strip(),
            timestamp_server=settings.timestamp_server.strip(),
            cert_description=settings.cert_description,
            max_attempts=settings.max_attempts,
            retry_delay_seconds=settings.retry_delay_seconds,
            check_thumbprint=settings.check_thumbprint,
            timestamp_rfc3161=settings.timestamp_rfc3161,
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
