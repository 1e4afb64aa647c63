"""
Byte Fetching
=============
The path-addressed, asynchronous byte source every load reads through.

Paths are POSIX-style and relative to the fetcher's root, the same way asset
paths are written inside OBJ and MTL files.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Protocol, Union

from wavefrontscene.model.errors import FetchError

logger = logging.getLogger(__name__)

AssetPathLike = Union[str, PurePosixPath]


class ByteFetch(Protocol):
    async def read_bytes(self, path: AssetPathLike) -> bytes:
        """Return the content of ``path`` or raise ``FetchError``."""
        ...


class FileSystemFetcher:
    """Reads asset bytes from a directory on disk without blocking the event loop."""

    def __init__(self, root: Union[str, Path] = ".") -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"FileSystemFetcher(root={str(self.root)!r})"

    async def read_bytes(self, path: AssetPathLike) -> bytes:
        full_path = self.root / PurePosixPath(path)
        logger.debug(f"Reading asset bytes: {full_path}")
        try:
            return await asyncio.to_thread(full_path.read_bytes)
        except FileNotFoundError:
            raise FetchError(str(path), "not found") from None
        except OSError as e:
            raise FetchError(str(path), e.strerror or str(e)) from e
