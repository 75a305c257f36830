"""Logging setup with optional GitHub workflow annotations."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

ROOT_LOGGER = "bulksign"

_ANNOTATIONS = (
    (logging.ERROR, "error"),
    (logging.WARNING, "warning"),
)


class GitHubAnnotationFormatter(logging.Formatter):
    """Render warnings and errors as ``::warning::`` / ``::error::`` commands."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for level, command in _ANNOTATIONS:
            if record.levelno >= level:
                # Workflow commands are single-line; escape per the runner's rules.
                escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
                return f"::{command}::{escaped}"
        return message


def configure_logging(
    verbose: bool = False,
    *,
    annotations: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Attach a single stream handler to the ``bulksign`` logger.

    Calling this again replaces the previously installed handler.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_bulksign_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler._bulksign_handler = True  # type: ignore[attr-defined]
    if annotations:
        handler.setFormatter(GitHubAnnotationFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return handler
