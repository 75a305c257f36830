"""bulksign CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import SecretStr

from bulksign import __version__
from bulksign.app import SigningRunResult
from bulksign.bootstrap import bootstrap_application
from bulksign.config import Settings, SigningConfig, get_settings, set_settings
from bulksign.discovery.filters import SIGNABLE_EXTENSIONS
from bulksign.errors import ConfigurationError
from bulksign.utils.cli_output import json_response
from bulksign.utils.logging import configure_logging

logger = logging.getLogger("bulksign.cli")

app = typer.Typer(
    name="bulksign",
    help="Provision a code-signing certificate and sign every eligible artifact in a folder",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"bulksign version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Enable debug logging"),
    ] = False,
) -> None:
    """bulksign - resilient bulk code signing for build pipelines."""
    settings = get_settings()
    configure_logging(verbose=verbose, annotations=settings.github_actions)


def _apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Return a copy of ``settings`` with every non-None CLI override applied."""

    update: dict[str, Any] = {}
    for name, value in overrides.items():
        if value is None:
            continue
        if name in {"certificate", "cert_password"}:
            value = SecretStr(value)
        elif name == "folder":
            value = str(value)
        update[name] = value

    updated = settings.model_copy(update=update)
    set_settings(updated)
    return updated


def _report_missing(error: ConfigurationError) -> None:
    for name in error.missing:
        logger.error("%s input must have a value.", name)
        typer.secho(f"Error: {name} input must have a value.", fg=typer.colors.RED, err=True)


def _print_run(result: SigningRunResult) -> None:
    for item in result.files:
        if item.success:
            typer.secho(f"[signed] {item.path}", fg=typer.colors.GREEN)
        elif item.skipped:
            typer.echo(f"[skipped] {item.path} (packaging artifact, not signed)")
        else:
            typer.secho(
                f"[failed] {item.path} ({item.attempts} attempt(s), stage: {item.stage})",
                fg=typer.colors.YELLOW,
            )

    color = typer.colors.GREEN if result.failed == 0 else typer.colors.YELLOW
    typer.secho(f"Signed {result.signed} of {result.discovered} files", fg=color)
    if result.skipped:
        typer.echo(f"Skipped {result.skipped} packaging artifact(s)")
    if result.failed:
        typer.secho(
            f"NOTE: {result.failed} file(s) were not signed; see the log for details.",
            fg=typer.colors.YELLOW,
        )


@app.command("sign")
def sign(
    folder: Annotated[
        Path | None,
        typer.Argument(help="Folder containing the artifacts to sign"),
    ] = None,
    recursive: Annotated[
        bool | None,
        typer.Option("--recursive/--no-recursive", help="Descend into subdirectories"),
    ] = None,
    certificate: Annotated[
        str | None,
        typer.Option("--certificate", help="Base64-encoded PFX certificate"),
    ] = None,
    cert_password: Annotated[
        str | None,
        typer.Option("--cert-password", help="PFX password"),
    ] = None,
    cert_sha1: Annotated[
        str | None,
        typer.Option("--cert-sha1", help="SHA-1 thumbprint of the signing certificate"),
    ] = None,
    timestamp_server: Annotated[
        str | None,
        typer.Option("--timestamp-server", help="Timestamp authority URL"),
    ] = None,
    cert_description: Annotated[
        str | None,
        typer.Option("--cert-description", help="Description embedded in the signature"),
    ] = None,
    max_attempts: Annotated[
        int | None,
        typer.Option("--max-attempts", min=1, help="Sign-and-verify attempts per file"),
    ] = None,
    retry_delay: Annotated[
        float | None,
        typer.Option("--retry-delay", min=0.0, help="Seconds per backoff step"),
    ] = None,
    check_thumbprint: Annotated[
        bool | None,
        typer.Option(
            "--check-thumbprint/--no-check-thumbprint",
            help="Require the PFX thumbprint to match --cert-sha1",
        ),
    ] = None,
    rfc3161: Annotated[
        bool | None,
        typer.Option("--rfc3161/--legacy-timestamp", help="Use RFC 3161 timestamping"),
    ] = None,
    fail_on_unsigned: Annotated[
        bool,
        typer.Option(
            "--fail-on-unsigned",
            help="Exit non-zero when any signable file could not be signed",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Emit a JSON run summary"),
    ] = False,
) -> None:
    """Import the certificate, then sign and verify every eligible file."""

    settings = _apply_overrides(
        get_settings(),
        folder=folder,
        recursive=recursive,
        certificate=certificate,
        cert_password=cert_password,
        cert_sha1=cert_sha1,
        timestamp_server=timestamp_server,
        cert_description=cert_description,
        max_attempts=max_attempts,
        retry_delay_seconds=retry_delay,
        check_thumbprint=check_thumbprint,
        timestamp_rfc3161=rfc3161,
    )

    try:
        config = SigningConfig.from_settings(settings)
    except ConfigurationError as exc:
        _report_missing(exc)
        raise typer.Exit(code=2) from exc

    container = bootstrap_application(settings)
    if not json_output:
        typer.secho(f"Signing files in {config.folder}...", fg=typer.colors.BLUE)

    try:
        result = container.pipeline.run(config)
    except Exception as exc:
        logger.error("code signing failed: %s", exc)
        typer.secho(f"code signing failed\nError: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(
            json_response(
                "signing_run",
                1,
                state=result.state.value,
                discovered=result.discovered,
                signed=result.signed,
                skipped=result.skipped,
                failed=result.failed,
                files=[
                    {**item.model_dump(mode="json"), "skipped": item.skipped}
                    for item in result.files
                ],
            )
        )
    else:
        _print_run(result)

    if fail_on_unsigned and result.failed:
        raise typer.Exit(code=1)


@app.command("list")
def list_candidates(
    folder: Annotated[
        Path | None,
        typer.Argument(help="Folder to scan"),
    ] = None,
    recursive: Annotated[
        bool | None,
        typer.Option("--recursive/--no-recursive", help="Descend into subdirectories"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Emit candidates as JSON"),
    ] = False,
) -> None:
    """List the files a signing run would attempt, without signing anything."""

    settings = _apply_overrides(get_settings(), folder=folder, recursive=recursive)
    if not settings.folder.strip():
        typer.secho("Error: folder input must have a value.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    container = bootstrap_application(settings)
    root = Path(settings.folder).expanduser()
    try:
        candidates = list(
            container.discovery_port.discover(
                root, recursive=settings.recursive, extensions=SIGNABLE_EXTENSIONS
            )
        )
    except Exception as exc:
        typer.secho(f"Discovery failed\nError: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(
            json_response(
                "signing_candidates",
                1,
                root=str(root),
                recursive=settings.recursive,
                candidates=[candidate.model_dump() for candidate in candidates],
            )
        )
        return

    for candidate in candidates:
        marker = "" if candidate.signable else "  (packaging artifact, not signed)"
        typer.echo(f"{candidate.path}{marker}")
    typer.secho(f"Found {len(candidates)} candidate files", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
