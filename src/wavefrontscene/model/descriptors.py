"""
Parsed Records
==============
Raw, loosely-typed records produced by the OBJ and MTL grammars.

These hold the data exactly as it was read from the text files. Nothing here is
validated beyond what the grammar itself checks; the controller layer turns them
into renderer-ready assets.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from wavefrontscene.model.result import Result

Rgb = Tuple[float, float, float]


@dataclass
class MaterialDescriptor:
    """One ``newmtl`` block of an MTL file."""
    name: str
    ambient: Rgb = (0.0, 0.0, 0.0)
    diffuse: Rgb = (0.0, 0.0, 0.0)
    specular: Rgb = (0.0, 0.0, 0.0)
    shininess: float = 0.0
    optical_density: float = 1.0
    dissolve: float = 1.0
    illumination_model: Optional[int] = None

    # Texture references, relative to the OBJ file's directory. Empty = absent.
    ambient_texture: str = ""
    diffuse_texture: str = ""
    specular_texture: str = ""
    normal_texture: str = ""
    shininess_texture: str = ""
    dissolve_texture: str = ""

    unknown_param: Dict[str, str] = field(default_factory=dict)

    def texture_references(self) -> List[str]:
        """Non-empty texture references in the order the material builder uses them."""
        refs = [self.diffuse_texture, self.normal_texture, self.specular_texture, self.ambient_texture]
        return [ref for ref in refs if ref]


@dataclass
class RawMesh:
    """
    One object/group of an OBJ file with single-index vertex data.

    All arrays are flat: ``positions`` holds x, y, z triples back to back,
    ``texcoords`` holds u, v pairs. ``material_id`` indexes the flattened
    descriptor list returned alongside the meshes.
    """
    name: str
    positions: List[float] = field(default_factory=list)
    normals: List[float] = field(default_factory=list)
    texcoords: List[float] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    material_id: Optional[int] = None


# Outcome of parsing one material library: descriptors plus a name -> index map.
MaterialLibrary = Tuple[List[MaterialDescriptor], Dict[str, int]]
MtlLoadResult = Result[MaterialLibrary]
