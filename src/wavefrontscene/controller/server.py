"""
Asset Server
============
Dispatches source files to the loader registered for their extension and commits
what the loader staged.

Usage:
    server = AssetServer(FileSystemFetcher("assets"))
    ObjPlugin().build(server)
    handles = await server.load("models/monu5.obj")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from wavefrontscene.config import LoaderSettings
from wavefrontscene.controller.loader import AssetLoader, ObjLoader
from wavefrontscene.model.assets import Handle
from wavefrontscene.model.io import AssetPathLike, ByteFetch
from wavefrontscene.model.registry import AssetRegistry, LoadContext

logger = logging.getLogger(__name__)


class AssetServer:
    def __init__(
        self,
        fetcher: ByteFetch,
        registry: Optional[AssetRegistry] = None,
        settings: Optional[LoaderSettings] = None,
    ) -> None:
        self.fetcher = fetcher
        self.registry = registry if registry is not None else AssetRegistry()
        self.settings = settings or LoaderSettings()
        self._loaders: Dict[str, AssetLoader] = {}

    def register_loader(self, loader: AssetLoader) -> AssetServer:
        for extension in loader.extensions():
            key = extension.lower()
            if key in self._loaders:
                logger.warning(f"Replacing loader for '.{key}' files.")
            self._loaders[key] = loader
        return self

    def loader_for(self, path: AssetPathLike) -> AssetLoader:
        extension = PurePosixPath(path).suffix[1:].lower()
        loader = self._loaders.get(extension)
        if loader is None:
            raise KeyError(f"No loader registered for extension '{extension}'")
        return loader

    async def load(self, path: AssetPathLike) -> List[Handle]:
        """
        Load ``path`` and register everything it produced.

        Returns:
            The handles committed to the registry. On any error nothing is committed
            and the error propagates.
        """
        loader = self.loader_for(path)
        data = await self.fetcher.read_bytes(path)

        context = LoadContext(path, self.fetcher, self.settings.duplicate_labels)
        await loader.load(data, context)
        return context.commit(self.registry)


@dataclass
class ObjPlugin:
    """Registers the OBJ loader with an asset server."""
    settings: Optional[LoaderSettings] = None

    def build(self, server: AssetServer) -> ObjLoader:
        loader = ObjLoader(settings=self.settings or server.settings)
        server.register_loader(loader)
        return loader
