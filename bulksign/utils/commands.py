"""Helpers for rendering external commands without leaking secrets."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable, Sequence

MASK = "***"


def format_command(argv: Sequence[str], *, secrets: Iterable[str] = ()) -> str:
    """Return a Windows-style command line with secret arguments masked.

    Rules:
    - Any argument equal to a secret is replaced by ``***``.
    - Quoting follows ``subprocess.list2cmdline`` (the rules signtool sees).
    """
    hidden = {secret for secret in secrets if secret}
    return subprocess.list2cmdline([MASK if arg in hidden else str(arg) for arg in argv])


def mask_secrets(text: str, secrets: Iterable[str] = ()) -> str:
    """Replace every occurrence of each secret inside ``text``."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text
