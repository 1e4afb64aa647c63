"""
wavefrontscene
==============
Loads Wavefront OBJ models, their MTL material libraries and texture images into
renderer-ready assets: meshes, materials, textures and a scene graph.
"""
from wavefrontscene.config import DuplicateLabelPolicy, LoaderSettings
from wavefrontscene.controller.loader import ObjLoader
from wavefrontscene.controller.server import AssetServer, ObjPlugin
from wavefrontscene.model.assets import (
    Handle, MeshData, ObjMesh, ObjScene, Scene, SceneNode, StandardMaterial, TextureAsset,
)
from wavefrontscene.model.errors import (
    ChunkError, DecodeError, DuplicateLabelError, FetchError, InvalidObjFormat,
    ObjLoadError, ParseError, UnresolvedReferenceError,
)
from wavefrontscene.model.io import ByteFetch, FileSystemFetcher
from wavefrontscene.model.registry import AssetRegistry, LoadContext

__all__ = [
    "AssetRegistry", "AssetServer", "ByteFetch", "ChunkError", "DecodeError",
    "DuplicateLabelError", "DuplicateLabelPolicy", "FetchError", "FileSystemFetcher",
    "Handle", "InvalidObjFormat", "LoadContext", "LoaderSettings", "MeshData",
    "ObjLoadError", "ObjLoader", "ObjMesh", "ObjPlugin", "ObjScene", "ParseError",
    "Scene", "SceneNode", "StandardMaterial", "TextureAsset", "UnresolvedReferenceError",
]
