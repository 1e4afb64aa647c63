"""
OBJ Grammar
===========
Parses Wavefront OBJ text into single-index ``RawMesh`` records.

Why is this file needed?
------------------------
1. Grouping: every ``o`` / ``g`` statement starts a new record, and so does a
   ``usemtl`` that changes material after faces were already emitted.
2. Single index: OBJ faces index positions, texcoords and normals separately.
   Renderers want one index buffer, so each distinct (v, vt, vn) corner becomes
   one output vertex.
3. Materials: ``mtllib`` statements are delegated to a caller-supplied loader.
   Their descriptors are appended to one flattened list that ``material_id``
   indexes into.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from wavefrontscene.config import DEFAULT_OBJECT_NAME
from wavefrontscene.model.descriptors import MaterialDescriptor, MtlLoadResult, RawMesh
from wavefrontscene.model.errors import ParseError
from wavefrontscene.utils import decode_text, statement_tokens

logger = logging.getLogger(__name__)

MaterialLoader = Callable[[str], MtlLoadResult]

# (position index, texcoord index, normal index), all zero-based
Corner = Tuple[int, Optional[int], Optional[int]]


def _floats(args: Sequence[str], minimum: int, line_no: int) -> List[float]:
    if len(args) < minimum:
        raise ParseError(f"expected at least {minimum} numbers", line_no)
    try:
        return [float(token) for token in args]
    except ValueError:
        raise ParseError(f"invalid number in '{' '.join(args)}'", line_no) from None


def _index(token: str, count: int, what: str, line_no: int) -> int:
    """Convert a one-based (or negative, relative) OBJ index into a zero-based one."""
    try:
        value = int(token)
    except ValueError:
        raise ParseError(f"invalid {what} index '{token}'", line_no) from None

    index = value - 1 if value > 0 else count + value
    if value == 0 or not 0 <= index < count:
        raise ParseError(f"{what} index {value} out of range (have {count})", line_no)
    return index


def parse_corner(token: str, counts: Tuple[int, int, int], line_no: int) -> Corner:
    """Parse one face corner: ``v``, ``v/vt``, ``v//vn`` or ``v/vt/vn``."""
    parts = token.split("/")
    if len(parts) > 3 or not parts[0]:
        raise ParseError(f"invalid face vertex '{token}'", line_no)

    n_positions, n_texcoords, n_normals = counts
    v = _index(parts[0], n_positions, "vertex", line_no)
    vt = _index(parts[1], n_texcoords, "texcoord", line_no) if len(parts) > 1 and parts[1] else None
    vn = _index(parts[2], n_normals, "normal", line_no) if len(parts) > 2 and parts[2] else None
    return v, vt, vn


class _MeshBuilder:
    """Collects the triangles of one object/group until it is closed."""

    def __init__(self, name: str, material_id: Optional[int]) -> None:
        self.name = name
        self.material_id = material_id
        self.corners: List[Corner] = []

    @property
    def has_faces(self) -> bool:
        return bool(self.corners)

    def add_face(self, corners: List[Corner], line_no: int) -> None:
        if len(corners) < 3:
            raise ParseError("a face needs at least three vertices", line_no)
        # Fan triangulation
        for i in range(1, len(corners) - 1):
            self.corners.extend((corners[0], corners[i], corners[i + 1]))

    def build(
        self,
        positions: List[Tuple[float, float, float]],
        texcoords: List[Tuple[float, float]],
        normals: List[Tuple[float, float, float]],
    ) -> RawMesh:
        has_texcoords = all(vt is not None for _, vt, _ in self.corners)
        has_normals = all(vn is not None for _, _, vn in self.corners)

        mesh = RawMesh(name=self.name, material_id=self.material_id)
        lookup: Dict[Corner, int] = {}
        for v, vt, vn in self.corners:
            key = (v, vt if has_texcoords else None, vn if has_normals else None)
            index = lookup.get(key)
            if index is None:
                index = len(lookup)
                lookup[key] = index
                mesh.positions.extend(positions[v])
                if has_texcoords:
                    mesh.texcoords.extend(texcoords[vt])
                if has_normals:
                    mesh.normals.extend(normals[vn])
            mesh.indices.append(index)
        return mesh


def load_obj_buf(
    data: bytes | str,
    material_loader: MaterialLoader,
) -> Tuple[List[RawMesh], List[MaterialDescriptor]]:
    """
    Parse OBJ text.

    Args:
        data: Raw OBJ bytes (UTF-8) or already decoded text.
        material_loader: Called with the literal path of every ``mtllib``
            statement. Must return the parse outcome of that library or raise.

    Returns:
        The mesh records in file order and the flattened material descriptors.

    Raises:
        ParseError: On undecodable text or malformed statements, or when a
            requested material library failed to parse.
    """
    try:
        text = decode_text(data)
    except UnicodeDecodeError as e:
        raise ParseError(f"obj file is not valid UTF-8 ({e.reason})") from None

    positions: List[Tuple[float, float, float]] = []
    texcoords: List[Tuple[float, float]] = []
    normals: List[Tuple[float, float, float]] = []

    meshes: List[RawMesh] = []
    materials: List[MaterialDescriptor] = []
    material_ids: Dict[str, int] = {}

    current = _MeshBuilder(DEFAULT_OBJECT_NAME, None)

    def close_current() -> None:
        if current.has_faces:
            meshes.append(current.build(positions, texcoords, normals))

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        tokens = statement_tokens(raw_line)
        if not tokens:
            continue

        keyword, *args = tokens

        if keyword == "v":
            x, y, z = _floats(args, 3, line_no)[:3]
            positions.append((x, y, z))
        elif keyword == "vt":
            values = _floats(args, 1, line_no)
            texcoords.append((values[0], values[1] if len(values) > 1 else 0.0))
        elif keyword == "vn":
            x, y, z = _floats(args, 3, line_no)[:3]
            normals.append((x, y, z))
        elif keyword == "f":
            counts = (len(positions), len(texcoords), len(normals))
            current.add_face([parse_corner(token, counts, line_no) for token in args], line_no)
        elif keyword in ("o", "g"):
            name = " ".join(args) or DEFAULT_OBJECT_NAME
            if current.has_faces:
                close_current()
                current = _MeshBuilder(name, current.material_id)
            else:
                current.name = name
        elif keyword == "usemtl":
            if not args:
                raise ParseError("usemtl without a material name", line_no)
            material_name = " ".join(args)
            material_id = material_ids.get(material_name)
            if material_id is None:
                logger.warning(f"usemtl '{material_name}' (line {line_no}) matches no loaded material.")
            if current.has_faces:
                close_current()
                current = _MeshBuilder(current.name, material_id)
            else:
                current.material_id = material_id
        elif keyword == "mtllib":
            if not args:
                raise ParseError("mtllib without a file name", line_no)
            library, names = material_loader(args[0]).unwrap()
            offset = len(materials)
            materials.extend(library)
            for material_name, position in names.items():
                material_ids[material_name] = position + offset
        else:
            # s, l, p, vp, curves, ... carry nothing the loader uses
            continue

    close_current()
    logger.debug(f"Parsed {len(meshes)} mesh record(s), {len(materials)} material(s).")
    return meshes, materials
