"""
Asset Types
===========
Renderer-ready data structures emitted by one OBJ load.

Why is this file needed?
------------------------
1. Contract: these are the only objects handed to the ``AssetRegistry``. Once
   emitted they are never mutated again (dataclasses are frozen and numpy buffers
   are flagged read-only).
2. Decoupling: the controller layer builds them, hosts consume them. Neither
   side needs to know how the OBJ/MTL text looked.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional, Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

Rgba = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Handle:
    """Address of one labeled sub-asset: (source path, label)."""
    path: str
    label: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.path}#{self.label}" if self.label is not None else self.path


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class PrimitiveTopology(StrEnum):
    TRIANGLE_LIST = "triangle-list"


class FilterMode(StrEnum):
    NEAREST = "nearest"
    LINEAR = "linear"


class AddressMode(StrEnum):
    CLAMP_TO_EDGE = "clamp-to-edge"
    REPEAT = "repeat"
    MIRROR_REPEAT = "mirror-repeat"


class TextureFormat(StrEnum):
    RGBA8_UNORM_SRGB = "rgba8unorm-srgb"


# ------------------------------------------------------------------------------
# Geometry
# ------------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class MeshData:
    """
    Vertex attributes of one submesh.

    ``positions`` is (N, 3), ``normals`` is (N, 3) or (0, 3), ``uvs`` is (N, 2)
    or (0, 2) and ``indices`` is a flat uint32 array into the N vertices.
    """
    positions: npt.NDArray[np.float32]
    normals: npt.NDArray[np.float32]
    uvs: npt.NDArray[np.float32]
    indices: npt.NDArray[np.uint32]
    topology: PrimitiveTopology = PrimitiveTopology.TRIANGLE_LIST

    def __post_init__(self) -> None:
        # Own read-only copies; the caller's arrays stay writable.
        for name in ("positions", "normals", "uvs", "indices"):
            array = np.array(getattr(self, name))
            array.setflags(write=False)
            object.__setattr__(self, name, array)

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def index_count(self) -> int:
        return int(self.indices.shape[0])


# ------------------------------------------------------------------------------
# Textures & Materials
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class SamplerDescriptor:
    address_mode_u: AddressMode = AddressMode.CLAMP_TO_EDGE
    address_mode_v: AddressMode = AddressMode.CLAMP_TO_EDGE
    address_mode_w: AddressMode = AddressMode.CLAMP_TO_EDGE
    mag_filter: FilterMode = FilterMode.NEAREST
    min_filter: FilterMode = FilterMode.NEAREST
    mipmap_filter: FilterMode = FilterMode.NEAREST


@dataclass(frozen=True, eq=False)
class TextureAsset:
    """Decoded image, always 8-bit RGBA sampled as sRGB."""
    data: npt.NDArray[np.uint8]
    sampler: SamplerDescriptor
    format: TextureFormat = TextureFormat.RGBA8_UNORM_SRGB

    def __post_init__(self) -> None:
        self.data.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])


@dataclass(frozen=True)
class StandardMaterial:
    """Physically-based material record. Defaults are the engine defaults."""
    base_color: Rgba = (1.0, 1.0, 1.0, 1.0)
    base_color_texture: Optional[Handle] = None
    emissive: Rgba = (0.0, 0.0, 0.0, 1.0)
    perceptual_roughness: float = 0.089
    metallic: float = 0.01
    metallic_roughness_texture: Optional[Handle] = None
    reflectance: float = 0.5
    normal_map: Optional[Handle] = None
    occlusion_texture: Optional[Handle] = None
    double_sided: bool = False
    unlit: bool = False


# ------------------------------------------------------------------------------
# Scene
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ObjMesh:
    """One submesh: a mesh paired with its (optional) material."""
    mesh: Handle
    material: Optional[Handle] = None


@dataclass(frozen=True)
class ObjScene:
    """Aggregate of every material and submesh produced by one OBJ file."""
    materials: Tuple[Handle, ...] = ()
    meshes: Tuple[Handle, ...] = ()


def _identity() -> npt.NDArray[np.float64]:
    matrix = np.identity(4)
    matrix.setflags(write=False)
    return matrix


@dataclass(frozen=True, eq=False)
class SceneNode:
    transform: npt.NDArray[np.float64] = field(default_factory=_identity)
    mesh: Optional[Handle] = None
    material: Optional[Handle] = None
    children: Tuple[SceneNode, ...] = ()


@dataclass(frozen=True, eq=False)
class Scene:
    root: SceneNode
