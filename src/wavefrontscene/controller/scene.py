"""
Scene Assembler
===============
Stages the mesh, submesh, aggregate and scene-graph assets of one load.

Labels produced:
    <mesh name>     MeshData of each record (two records with one name collide)
    ObjMesh<i>      ObjMesh pairing of the i-th record
    Obj             ObjScene aggregate
    Scene           Scene graph: identity root, one child per record
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from wavefrontscene.config import OBJ_LABEL, SCENE_LABEL, SUBMESH_LABEL_PREFIX
from wavefrontscene.model.assets import Handle, MeshData, ObjMesh, ObjScene, Scene, SceneNode
from wavefrontscene.model.descriptors import RawMesh
from wavefrontscene.model.registry import LoadContext

logger = logging.getLogger(__name__)


def mesh_label(raw: RawMesh) -> str:
    return raw.name


def submesh_label(position: int) -> str:
    return f"{SUBMESH_LABEL_PREFIX}{position}"


class SceneAssembler:
    def __init__(self, context: LoadContext) -> None:
        self.context = context

    def _material_for(self, raw: RawMesh, materials: Sequence[Handle]) -> Optional[Handle]:
        if raw.material_id is None:
            return None
        if not 0 <= raw.material_id < len(materials):
            logger.warning(f"Mesh '{raw.name}' refers to missing material #{raw.material_id}.")
            return None
        return materials[raw.material_id]

    def assemble(
        self,
        raw_meshes: Sequence[RawMesh],
        mesh_data: Sequence[MeshData],
        materials: Sequence[Handle],
    ) -> Tuple[Handle, Handle]:
        """
        Stage every per-record asset, then the aggregate and the scene graph.

        Returns:
            Handles of the ``Obj`` aggregate and of the ``Scene``.
        """
        submeshes: List[Handle] = []
        children: List[SceneNode] = []

        for position, (raw, data) in enumerate(zip(raw_meshes, mesh_data, strict=True)):
            mesh = self.context.set_labeled_asset(mesh_label(raw), data)
            material = self._material_for(raw, materials)

            submeshes.append(
                self.context.set_labeled_asset(submesh_label(position), ObjMesh(mesh=mesh, material=material))
            )
            children.append(SceneNode(mesh=mesh, material=material))

        obj = self.context.set_labeled_asset(
            OBJ_LABEL, ObjScene(materials=tuple(materials), meshes=tuple(submeshes))
        )
        scene = self.context.set_labeled_asset(SCENE_LABEL, Scene(root=SceneNode(children=tuple(children))))

        logger.debug(f"Assembled scene with {len(children)} node(s).")
        return obj, scene
