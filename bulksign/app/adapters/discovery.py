"""Discovery adapter that bridges filesystem scanning into candidate records."""

from __future__ import annotations

from collections.abc import Collection, Iterator
from pathlib import Path

from bulksign.app.ports import CandidatePath, DiscoveryPort
from bulksign.discovery.discover import discover_files
from bulksign.discovery.filters import (
    SIGNABLE_EXTENSIONS,
    get_extension,
    is_signable_extension,
)


class FileSystemDiscoveryAdapter(DiscoveryPort):
    """Adapter that streams ``CandidatePath`` instances from a directory tree."""

    def __init__(self, *, follow_symlinks: bool = False) -> None:
        self._follow_symlinks = follow_symlinks

    def discover(
        self,
        root: Path,
        *,
        recursive: bool = False,
        extensions: Collection[str] = SIGNABLE_EXTENSIONS,
    ) -> Iterator[CandidatePath]:
        for path in discover_files(
            root,
            recursive,
            extensions=extensions,
            follow_symlinks=self._follow_symlinks,
        ):
            extension = get_extension(path)
            yield CandidatePath(
                path=path,
                extension=extension,
                signable=is_signable_extension(extension, extensions),
            )
