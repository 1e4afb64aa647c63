"""Vertex buffer builder: flat parser arrays -> validated fixed-width attributes."""
from __future__ import annotations

import logging

import numpy as np

from wavefrontscene.model.assets import MeshData
from wavefrontscene.model.descriptors import RawMesh
from wavefrontscene.model.errors import ChunkError
from wavefrontscene.utils import chunk_by

logger = logging.getLogger(__name__)


def build_mesh_data(raw: RawMesh) -> MeshData:
    """
    Chunk positions/normals by 3 and texcoords by 2, copy indices as uint32.

    Missing normals or texcoords (empty arrays) are fine and give (0, 3) / (0, 2)
    arrays.

    Raises:
        ChunkError: If an array length is not a multiple of its width, if present
            normals/texcoords do not match the vertex count, or if an index is out
            of range.
    """
    positions = chunk_by(raw.positions, 3, what=f"'{raw.name}' positions")
    normals = chunk_by(raw.normals, 3, what=f"'{raw.name}' normals")
    uvs = chunk_by(raw.texcoords, 2, what=f"'{raw.name}' texcoords")

    vertex_count = positions.shape[0]
    for name, attribute in (("normals", normals), ("texcoords", uvs)):
        if attribute.shape[0] not in (0, vertex_count):
            raise ChunkError(
                f"'{raw.name}' has {attribute.shape[0]} {name} for {vertex_count} positions"
            )

    indices = np.asarray(raw.indices, dtype=np.int64).reshape(-1)
    if indices.size and (indices.min() < 0 or indices.max() >= vertex_count):
        raise ChunkError(f"'{raw.name}' has indices outside 0..{vertex_count - 1}")

    logger.debug(f"Built mesh '{raw.name}': {vertex_count} vertices, {indices.size} indices.")
    return MeshData(
        positions=positions,
        normals=normals,
        uvs=uvs,
        indices=indices.astype(np.uint32),
    )
