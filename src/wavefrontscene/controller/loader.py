"""
OBJ Loader
==========
Orchestrates one OBJ load from raw bytes to staged assets.

Why is this file needed?
------------------------
1. Ordering: material libraries must be indexed before the geometry is parsed,
   and a material's textures must be resolved before the material is built.
   The stages below run strictly in that order.
2. All-or-nothing: every stage only stages assets in the ``LoadContext``. Any
   failure raises out of ``load`` and the context is never committed, so no
   partially loaded model ever becomes visible.

Stages:
    SCAN -> RESOLVE_MATERIAL_LIBS -> PARSE_GEOMETRY -> RESOLVE_TEXTURES
    -> BUILD_MATERIALS -> BUILD_MESHES -> ASSEMBLE_SCENE -> DONE
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Callable, List, Optional, Tuple

from wavefrontscene.config import OBJ_EXTENSIONS, LoaderSettings
from wavefrontscene.controller.buffers import build_mesh_data
from wavefrontscene.controller.libraries import MaterialLibraryResolver, MtlParser
from wavefrontscene.controller.materials import MaterialBuilder
from wavefrontscene.controller.scanner import scan_material_libraries
from wavefrontscene.controller.scene import SceneAssembler
from wavefrontscene.controller.textures import ImageDecoder, TextureResolver
from wavefrontscene.formats.image import decode_image
from wavefrontscene.formats.mtl import load_mtl_buf
from wavefrontscene.formats.obj import MaterialLoader, load_obj_buf
from wavefrontscene.model.descriptors import MaterialDescriptor, RawMesh
from wavefrontscene.model.errors import ObjLoadError
from wavefrontscene.model.registry import LoadContext

logger = logging.getLogger(__name__)

ObjParser = Callable[[bytes, MaterialLoader], Tuple[List[RawMesh], List[MaterialDescriptor]]]


class LoadStage(StrEnum):
    SCAN = "scan"
    RESOLVE_MATERIAL_LIBS = "resolve material libraries"
    PARSE_GEOMETRY = "parse geometry"
    RESOLVE_TEXTURES = "resolve textures"
    BUILD_MATERIALS = "build materials"
    BUILD_MESHES = "build meshes"
    ASSEMBLE_SCENE = "assemble scene"
    DONE = "done"
    FAILED = "failed"


class AssetLoader(ABC):
    """Turns the bytes of one source file into labeled assets staged in a context."""

    @abstractmethod
    def extensions(self) -> Tuple[str, ...]:
        pass

    @abstractmethod
    async def load(self, data: bytes, context: LoadContext) -> None:
        pass


class ObjLoader(AssetLoader):
    def __init__(
        self,
        settings: Optional[LoaderSettings] = None,
        obj_parser: ObjParser = load_obj_buf,
        mtl_parser: MtlParser = load_mtl_buf,
        image_decoder: ImageDecoder = decode_image,
    ) -> None:
        self.settings = settings or LoaderSettings()
        self.obj_parser = obj_parser
        self.mtl_parser = mtl_parser
        self.image_decoder = image_decoder

    def extensions(self) -> Tuple[str, ...]:
        return OBJ_EXTENSIONS

    def _enter(self, context: LoadContext, stage: LoadStage) -> LoadStage:
        logger.debug(f"[{context.path}] {stage}")
        return stage

    async def load(self, data: bytes, context: LoadContext) -> None:
        concurrent = self.settings.concurrent_fetches
        logger.info(f"Loading OBJ '{context.path}' ({len(data)} bytes).")

        stage = self._enter(context, LoadStage.SCAN)
        try:
            library_paths = scan_material_libraries(data)

            stage = self._enter(context, LoadStage.RESOLVE_MATERIAL_LIBS)
            resolver = MaterialLibraryResolver(context, self.mtl_parser, concurrent)
            library_index = await resolver.resolve(library_paths)

            stage = self._enter(context, LoadStage.PARSE_GEOMETRY)
            raw_meshes, descriptors = self.obj_parser(data, library_index.lookup)

            stage = self._enter(context, LoadStage.RESOLVE_TEXTURES)
            textures = TextureResolver(context, self.image_decoder, concurrent)
            await textures.resolve_all(
                reference for descriptor in descriptors for reference in descriptor.texture_references()
            )

            stage = self._enter(context, LoadStage.BUILD_MATERIALS)
            materials = MaterialBuilder(context, textures).build_all(descriptors)

            stage = self._enter(context, LoadStage.BUILD_MESHES)
            mesh_data = [build_mesh_data(raw) for raw in raw_meshes]

            stage = self._enter(context, LoadStage.ASSEMBLE_SCENE)
            SceneAssembler(context).assemble(raw_meshes, mesh_data, materials)

        except ObjLoadError as e:
            self._enter(context, LoadStage.FAILED)
            logger.error(f"Loading '{context.path}' failed during '{stage}': {e}")
            raise
        except asyncio.CancelledError:
            self._enter(context, LoadStage.FAILED)
            logger.info(f"Loading '{context.path}' was cancelled during '{stage}'.")
            raise

        self._enter(context, LoadStage.DONE)
        logger.info(
            f"Loaded '{context.path}': {len(raw_meshes)} mesh(es), {len(materials)} material(s), "
            f"{len(context.labeled_assets)} labeled asset(s)."
        )
