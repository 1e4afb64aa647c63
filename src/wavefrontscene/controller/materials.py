"""
Material Builder
================
Turns parsed MTL descriptors into physically-based ``StandardMaterial`` records.

The MTL shading model (ambient/diffuse/specular, Phong exponent) has no exact
PBR equivalent. The mapping below is a compatibility heuristic, not a physically
correct conversion:

    Kd          -> base_color (alpha 1.0)
    Ns          -> reflectance (passed through unchanged)
    map_Kd      -> base_color_texture
    map_Bump    -> normal_map
    map_Ks      -> metallic_roughness_texture
    map_Ka      -> occlusion_texture

Everything else keeps the engine defaults.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from wavefrontscene.controller.textures import TextureResolver
from wavefrontscene.model.assets import Handle, StandardMaterial
from wavefrontscene.model.descriptors import MaterialDescriptor
from wavefrontscene.model.registry import LoadContext

logger = logging.getLogger(__name__)


def material_label(descriptor: MaterialDescriptor) -> str:
    return descriptor.name


def build_material(
    descriptor: MaterialDescriptor,
    base_color_texture: Optional[Handle] = None,
    normal_map: Optional[Handle] = None,
    metallic_roughness_texture: Optional[Handle] = None,
    occlusion_texture: Optional[Handle] = None,
) -> StandardMaterial:
    r, g, b = descriptor.diffuse
    return StandardMaterial(
        base_color=(float(r), float(g), float(b), 1.0),
        base_color_texture=base_color_texture,
        metallic_roughness_texture=metallic_roughness_texture,
        reflectance=descriptor.shininess,
        normal_map=normal_map,
        occlusion_texture=occlusion_texture,
    )


class MaterialBuilder:
    def __init__(self, context: LoadContext, textures: TextureResolver) -> None:
        self.context = context
        self.textures = textures

    def build(self, descriptor: MaterialDescriptor) -> Handle:
        """Build and stage one material. Its textures must already be resolved."""
        record = build_material(
            descriptor,
            base_color_texture=self.textures.handle_for(descriptor.diffuse_texture),
            normal_map=self.textures.handle_for(descriptor.normal_texture),
            metallic_roughness_texture=self.textures.handle_for(descriptor.specular_texture),
            occlusion_texture=self.textures.handle_for(descriptor.ambient_texture),
        )
        return self.context.set_labeled_asset(material_label(descriptor), record)

    def build_all(self, descriptors: List[MaterialDescriptor]) -> List[Handle]:
        """One handle per descriptor, in the same order as the flattened descriptor list."""
        handles = [self.build(descriptor) for descriptor in descriptors]
        logger.debug(f"Built {len(handles)} material(s).")
        return handles
