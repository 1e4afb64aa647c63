import pytest

from wavefrontscene.formats.obj import load_obj_buf
from wavefrontscene.model.descriptors import MaterialDescriptor
from wavefrontscene.model.errors import ParseError, UnresolvedReferenceError
from wavefrontscene.model.result import Err, Ok


def no_libraries(path):
    raise UnresolvedReferenceError(path)


def libraries(**libs):
    def lookup(path):
        try:
            return libs[path.replace(".", "_")]
        except KeyError:
            raise UnresolvedReferenceError(path) from None
    return lookup


def library(*names):
    materials = [MaterialDescriptor(name=name) for name in names]
    return Ok((materials, {name: i for i, name in enumerate(names)}))


def test_single_triangle_without_normals_or_uvs():
    meshes, materials = load_obj_buf(b"v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n", no_libraries)

    assert materials == []
    assert len(meshes) == 1
    mesh = meshes[0]
    assert mesh.name == "unnamed_object"
    assert mesh.positions == [0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0]
    assert mesh.normals == []
    assert mesh.texcoords == []
    assert mesh.indices == [0, 1, 2]
    assert mesh.material_id is None


def test_polygons_are_fan_triangulated():
    meshes, _ = load_obj_buf(b"v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n", no_libraries)
    assert meshes[0].indices == [0, 1, 2, 0, 2, 3]
    assert len(meshes[0].positions) == 12


def test_corners_are_unified_per_position_texcoord_normal():
    text = b"""
v 0 0 0
v 1 0 0
v 0 1 0
vt 0 0
vt 1 0
vt 0 1
vt 0.5 0.5
vn 0 0 1
f 1/1/1 2/2/1 3/3/1
f 1/4/1 3/3/1 2/2/1
"""
    meshes, _ = load_obj_buf(text, no_libraries)
    mesh = meshes[0]

    # corner 1/4/1 differs from 1/1/1 only by its texcoord
    assert mesh.indices == [0, 1, 2, 3, 2, 1]
    assert len(mesh.positions) == 4 * 3
    assert len(mesh.texcoords) == 4 * 2
    assert len(mesh.normals) == 4 * 3
    assert mesh.texcoords[6:8] == [0.5, 0.5]


def test_negative_indices_are_relative():
    meshes, _ = load_obj_buf(b"v 0 0 0\nv 1 0 0\nv 0 1 0\nf -3 -2 -1\n", no_libraries)
    assert meshes[0].positions[3:6] == [1.0, 0.0, 0.0]


def test_partial_texcoords_are_dropped():
    text = b"v 0 0 0\nv 1 0 0\nv 0 1 0\nvt 0 0\nf 1/1 2 3\n"
    meshes, _ = load_obj_buf(text, no_libraries)
    assert meshes[0].texcoords == []


def test_objects_groups_and_materials_split_records():
    text = b"""
mtllib a.mtl
mtllib b.mtl
v 0 0 0
v 1 0 0
v 0 1 0
o first
usemtl red
f 1 2 3
usemtl blue
f 1 2 3
g second group
f 3 2 1
"""
    meshes, materials = load_obj_buf(text, libraries(a_mtl=library("red"), b_mtl=library("blue")))

    assert [m.name for m in materials] == ["red", "blue"]
    assert [(m.name, m.material_id) for m in meshes] == [
        ("first", 0),
        ("first", 1),
        ("second group", 1),
    ]


def test_unknown_material_name_clears_material():
    text = b"mtllib a.mtl\nv 0 0 0\nv 1 0 0\nv 0 1 0\nusemtl missing\nf 1 2 3\n"
    meshes, _ = load_obj_buf(text, libraries(a_mtl=library("red")))
    assert meshes[0].material_id is None


def test_name_without_faces_renames_current_record():
    meshes, _ = load_obj_buf(b"o a\no b\nv 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n", no_libraries)
    assert [m.name for m in meshes] == ["b"]


def test_missing_library_propagates_reference_error():
    with pytest.raises(UnresolvedReferenceError):
        load_obj_buf(b"mtllib nowhere.mtl\n", no_libraries)


def test_failed_library_parse_is_raised():
    broken = Err(ParseError("bad", 3, "mtl"))
    with pytest.raises(ParseError, match="mtl line 3"):
        load_obj_buf(b"mtllib a.mtl\n", libraries(a_mtl=broken))


@pytest.mark.parametrize(
    "text",
    [
        b"v 0 0 0\nv 1 0 0\nf 1 2 3\n",
        b"v 0 0 0\nv 1 0 0\nv 0 1 0\nf 0 1 2\n",
        b"v 0 0 0\nv 1 0 0\nf 1 2\n",
        b"v 0 zero 0\n",
        b"v 0 0\n",
        b"v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1/a 2 3\n",
        b"usemtl\n",
        b"\xff\xfe",
    ],
)
def test_malformed_input_raises_parse_error(text):
    with pytest.raises(ParseError):
        load_obj_buf(text, no_libraries)
