"""Lazy recursive discovery of signing candidates."""

from __future__ import annotations

import logging
import os
from collections.abc import Collection, Iterator

from bulksign.discovery.filters import SIGNABLE_EXTENSIONS, is_signable
from bulksign.errors import DiscoveryError

logger = logging.getLogger(__name__)


def discover_files(
    root: str | os.PathLike[str],
    recursive: bool = False,
    *,
    extensions: Collection[str] = SIGNABLE_EXTENSIONS,
    follow_symlinks: bool = False,
) -> Iterator[str]:
    """Yield absolute paths of candidate files under ``root``.

    Entries are visited in directory-listing order. Each matching file is
    yielded before the next entry is examined, so callers can start signing
    while discovery continues. Subdirectories are drained depth-first when
    ``recursive`` is set and skipped entirely otherwise.

    Args:
        root: Directory to scan
        recursive: Descend into subdirectories
        extensions: Allow-list of signable extensions
        follow_symlinks: Descend into symlinked directories

    Yields:
        Absolute file paths accepted by ``is_signable``

    Raises:
        DiscoveryError: If ``root`` or any visited subdirectory cannot be listed
    """
    directory = os.path.abspath(os.fspath(root))
    try:
        scanner = os.scandir(directory)
    except OSError as exc:
        raise DiscoveryError(f"Cannot list directory {directory}: {exc}") from exc

    with scanner:
        while True:
            try:
                entry = next(scanner, None)
                if entry is None:
                    break
                is_file = entry.is_file()
                descend = (
                    not is_file
                    and recursive
                    and entry.is_dir(follow_symlinks=follow_symlinks)
                )
            except OSError as exc:
                raise DiscoveryError(f"Cannot list directory {directory}: {exc}") from exc

            if is_file:
                if is_signable(entry.name, extensions):
                    logger.debug("Discovered candidate %s", entry.path)
                    yield entry.path
            elif descend:
                yield from discover_files(
                    entry.path,
                    recursive,
                    extensions=extensions,
                    follow_symlinks=follow_symlinks,
                )
