"""
Asset Registry & Load Context
=============================
Ownership of loaded assets, and the per-load staging area in front of it.

Why is this file needed?
------------------------
1. Ownership: the ``AssetRegistry`` owns every asset after a load has finished.
   Loaders never keep references to what they emitted.
2. Atomic visibility: a loader only ever writes into its ``LoadContext``. The
   context is committed to the registry in one step after the load succeeded, so
   a failed or cancelled load leaves the registry untouched.
"""
from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any, Dict, Iterator, List, Optional

from wavefrontscene.config import DuplicateLabelPolicy
from wavefrontscene.model.assets import Handle
from wavefrontscene.model.errors import DuplicateLabelError
from wavefrontscene.model.io import AssetPathLike, ByteFetch

logger = logging.getLogger(__name__)


class AssetRegistry:
    """In-memory store of labeled assets. Last write wins on a repeated handle."""

    def __init__(self) -> None:
        self._assets: Dict[Handle, Any] = {}

    def set_labeled(self, path: str, label: Optional[str], asset: Any) -> Handle:
        handle = Handle(path=path, label=label)
        if handle in self._assets:
            logger.debug(f"Replacing asset {handle}")
        self._assets[handle] = asset
        return handle

    def get(self, handle: Handle) -> Any:
        try:
            return self._assets[handle]
        except KeyError:
            raise KeyError(f"No asset registered for '{handle}'") from None

    def labels(self, path: str) -> List[str]:
        return [h.label for h in self._assets if h.path == path and h.label is not None]

    def __contains__(self, handle: object) -> bool:
        return handle in self._assets

    def __len__(self) -> int:
        return len(self._assets)

    def __iter__(self) -> Iterator[Handle]:
        return iter(self._assets)


class LoadContext:
    """
    Everything one loader invocation may touch.

    Reads go through the fetcher, writes are staged by label and only reach the
    registry through ``commit``.
    """

    def __init__(
        self,
        path: AssetPathLike,
        fetcher: ByteFetch,
        duplicate_labels: DuplicateLabelPolicy = DuplicateLabelPolicy.LAST_WINS,
    ) -> None:
        self.path = PurePosixPath(path)
        self.fetcher = fetcher
        self.duplicate_labels = duplicate_labels
        self._staged: Dict[str, Any] = {}
        self._committed = False

    @property
    def directory(self) -> PurePosixPath:
        return self.path.parent

    def resolve(self, relative: str) -> PurePosixPath:
        """Path of a file referenced from the source file, relative to its directory."""
        return self.directory / relative

    async def read_asset_bytes(self, path: AssetPathLike) -> bytes:
        return await self.fetcher.read_bytes(path)

    def get_handle(self, label: str) -> Handle:
        return Handle(path=str(self.path), label=label)

    def set_labeled_asset(self, label: str, asset: Any) -> Handle:
        if self._committed:
            raise RuntimeError(f"Load context for '{self.path}' was already committed.")
        if label in self._staged:
            if self.duplicate_labels == DuplicateLabelPolicy.ERROR:
                raise DuplicateLabelError(label)
            logger.warning(f"Label '{label}' staged twice for '{self.path}'; keeping the last one.")
        self._staged[label] = asset
        return self.get_handle(label)

    @property
    def labeled_assets(self) -> Dict[str, Any]:
        return dict(self._staged)

    def commit(self, registry: AssetRegistry) -> List[Handle]:
        """Hand every staged asset to the registry. A context commits at most once."""
        if self._committed:
            raise RuntimeError(f"Load context for '{self.path}' was already committed.")
        self._committed = True
        handles = [
            registry.set_labeled(str(self.path), label, asset)
            for label, asset in self._staged.items()
        ]
        logger.debug(f"Committed {len(handles)} assets for '{self.path}'.")
        return handles
