import asyncio

import numpy as np
import pytest

from wavefrontscene.config import DuplicateLabelPolicy, LoaderSettings
from wavefrontscene.controller.loader import ObjLoader
from wavefrontscene.controller.server import AssetServer, ObjPlugin
from wavefrontscene.model.assets import (
    Handle, MeshData, ObjMesh, ObjScene, Scene, StandardMaterial, TextureAsset,
)
from wavefrontscene.model.descriptors import RawMesh
from wavefrontscene.model.errors import (
    ChunkError, DecodeError, DuplicateLabelError, FetchError, InvalidObjFormat,
    ParseError, UnresolvedReferenceError,
)
from wavefrontscene.model.registry import AssetRegistry

from conftest import CUBE_OBJ, TRIANGLE_OBJ, MemoryFetcher


def assets_of(server, handles):
    return {h.label: server.registry.get(h) for h in handles}


def test_single_triangle_scene(load_model):
    server, _, handles = load_model({"tri.obj": TRIANGLE_OBJ}, "tri.obj")
    assets = assets_of(server, handles)

    assert sorted(assets) == ["Obj", "ObjMesh0", "Scene", "unnamed_object"]
    assert len(server.registry) == 4

    mesh = assets["unnamed_object"]
    assert isinstance(mesh, MeshData)
    assert mesh.positions.shape == (3, 3)
    assert mesh.normals.shape == (0, 3)
    assert mesh.uvs.shape == (0, 2)
    assert mesh.indices.tolist() == [0, 1, 2]

    submesh = assets["ObjMesh0"]
    assert submesh == ObjMesh(mesh=Handle("tri.obj", "unnamed_object"), material=None)

    aggregate = assets["Obj"]
    assert isinstance(aggregate, ObjScene)
    assert aggregate.meshes == (Handle("tri.obj", "ObjMesh0"),)
    assert aggregate.materials == ()

    scene = assets["Scene"]
    assert isinstance(scene, Scene)
    assert np.array_equal(scene.root.transform, np.identity(4))
    assert len(scene.root.children) == 1
    assert scene.root.children[0].mesh == Handle("tri.obj", "unnamed_object")
    assert scene.root.children[0].material is None


def test_full_model_with_materials_and_textures(load_model, cube_files):
    server, fetcher, handles = load_model(cube_files, "models/cube.obj")
    assets = assets_of(server, handles)
    path = "models/cube.obj"

    red, blue = assets["red"], assets["blue"]
    assert isinstance(red, StandardMaterial)
    assert red.base_color == (1.0, 0.0, 0.0, 1.0)
    assert red.reflectance == 32.0
    assert red.base_color_texture == Handle(path, "textures/shared.png")
    assert red.normal_map == Handle(path, "textures/normal.png")
    assert red.metallic_roughness_texture == Handle(path, "textures/spec.png")
    assert red.occlusion_texture == Handle(path, "textures/ao.png")
    assert blue.reflectance == 8.0
    assert blue.normal_map is None

    textures = {label: a for label, a in assets.items() if isinstance(a, TextureAsset)}
    assert sorted(textures) == [
        "textures/ao.png", "textures/normal.png", "textures/shared.png", "textures/spec.png",
    ]
    assert all(t.data.shape == (2, 2, 4) for t in textures.values())

    front = assets["front"]
    assert front.vertex_count == 4
    assert front.uvs.shape == (4, 2)
    assert front.normals.shape == (4, 3)
    assert front.indices.tolist() == [0, 1, 2, 0, 2, 3]

    assert assets["ObjMesh0"].material == Handle(path, "red")
    assert assets["ObjMesh1"].material == Handle(path, "blue")
    assert assets["Obj"].materials == (Handle(path, "red"), Handle(path, "blue"))
    assert [c.material for c in assets["Scene"].root.children] == [Handle(path, "red"), Handle(path, "blue")]
    assert fetcher.reads["models/cube.mtl"] == 1


def test_shared_texture_is_decoded_once(load_model, cube_files):
    server, fetcher, handles = load_model(cube_files, "models/cube.obj")
    assets = assets_of(server, handles)

    assert fetcher.reads["models/textures/shared.png"] == 1
    assert assets["red"].base_color_texture == assets["blue"].base_color_texture
    assert sum(isinstance(a, TextureAsset) for a in assets.values()) == 4


def test_missing_material_library_registers_nothing(load_model):
    registry = AssetRegistry()
    obj = "mtllib missing.mtl\n" + TRIANGLE_OBJ

    with pytest.raises(FetchError):
        load_model({"m.obj": obj}, "m.obj", registry=registry)
    assert len(registry) == 0


def test_missing_texture_registers_nothing(load_model, cube_files):
    registry = AssetRegistry()
    del cube_files["models/textures/ao.png"]

    with pytest.raises(FetchError):
        load_model(cube_files, "models/cube.obj", registry=registry)
    assert len(registry) == 0


def test_corrupt_texture_is_decode_error(load_model, cube_files):
    registry = AssetRegistry()
    cube_files["models/textures/spec.png"] = b"garbage"

    with pytest.raises(DecodeError):
        load_model(cube_files, "models/cube.obj", registry=registry)
    assert len(registry) == 0


def test_broken_material_library_fails_as_parse_error(load_model):
    registry = AssetRegistry()
    files = {"m.obj": "mtllib m.mtl\n" + TRIANGLE_OBJ, "m.mtl": "newmtl a\nKd red green blue\n"}

    with pytest.raises(ParseError):
        load_model(files, "m.obj", registry=registry)
    assert len(registry) == 0


def test_bad_record_aborts_even_with_good_siblings(load_model):
    good = RawMesh(name="good", positions=[0, 0, 0, 1, 0, 0, 0, 1, 0], indices=[0, 1, 2])
    bad = RawMesh(name="bad", positions=[0, 0, 0, 1], indices=[0])
    loader = ObjLoader(obj_parser=lambda data, lookup: ([good, bad], []))
    registry = AssetRegistry()

    with pytest.raises(ChunkError) as info:
        load_model({"m.obj": TRIANGLE_OBJ}, "m.obj", loader=loader, registry=registry)
    assert isinstance(info.value, InvalidObjFormat)
    assert len(registry) == 0


def test_unknown_library_reference_is_reference_error(load_model):
    def parser(data, lookup):
        lookup("never-scanned.mtl")
        return [], []

    with pytest.raises(UnresolvedReferenceError):
        load_model({"m.obj": TRIANGLE_OBJ}, "m.obj", loader=ObjLoader(obj_parser=parser))


def test_invalid_utf8_source_is_invalid_format(load_model):
    with pytest.raises(InvalidObjFormat):
        load_model({"m.obj": b"v 0 0 0\n\xff\n"}, "m.obj")


def test_loading_twice_gives_equal_values(load_model, cube_files):
    first_server, _, first = load_model(cube_files, "models/cube.obj")
    second_server, _, second = load_model(cube_files, "models/cube.obj")
    a, b = assets_of(first_server, first), assets_of(second_server, second)

    assert a.keys() == b.keys()
    for label in ("front", "back"):
        assert np.array_equal(a[label].positions, b[label].positions)
        assert np.array_equal(a[label].indices, b[label].indices)
    assert a["red"].base_color == b["red"].base_color
    assert np.array_equal(a["textures/shared.png"].data, b["textures/shared.png"].data)


def test_sequential_fetching_gives_same_assets(load_model, cube_files):
    concurrent_server, _, concurrent = load_model(cube_files, "models/cube.obj")
    sequential_server, _, sequential = load_model(
        cube_files, "models/cube.obj", settings=LoaderSettings(concurrent_fetches=False)
    )
    assert [h.label for h in concurrent] == [h.label for h in sequential]


DUPLICATE_NAMES_OBJ = """\
v 0 0 0
v 1 0 0
v 0 1 0
v 1 1 0
o part
f 1 2 3
o part
f 2 4 3
"""


def test_duplicate_mesh_names_last_registration_wins(load_model):
    server, _, handles = load_model({"d.obj": DUPLICATE_NAMES_OBJ}, "d.obj")
    assets = assets_of(server, handles)

    meshes = [label for label, a in assets.items() if isinstance(a, MeshData)]
    assert meshes == ["part"]
    assert assets["part"].positions[0].tolist() == [1.0, 0.0, 0.0]
    assert assets["ObjMesh0"].mesh == assets["ObjMesh1"].mesh == Handle("d.obj", "part")
    assert len(assets["Obj"].meshes) == 2


def test_duplicate_mesh_names_can_be_rejected(load_model):
    registry = AssetRegistry()
    settings = LoaderSettings(duplicate_labels=DuplicateLabelPolicy.ERROR)

    with pytest.raises(DuplicateLabelError):
        load_model({"d.obj": DUPLICATE_NAMES_OBJ}, "d.obj", settings=settings, registry=registry)
    assert len(registry) == 0


class BlockingFetcher(MemoryFetcher):
    """Never answers for one path, so a load can be cancelled mid-flight."""

    def __init__(self, files, blocked_path):
        super().__init__(files)
        self.blocked_path = blocked_path
        self.started = asyncio.Event()

    async def read_bytes(self, path):
        if str(path) == self.blocked_path:
            self.started.set()
            await asyncio.Event().wait()
        return await super().read_bytes(path)


def test_cancelled_load_registers_nothing(cube_files):
    async def scenario():
        fetcher = BlockingFetcher(cube_files, "models/textures/ao.png")
        server = AssetServer(fetcher)
        ObjPlugin().build(server)

        task = asyncio.create_task(server.load("models/cube.obj"))
        await fetcher.started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return server.registry

    registry = asyncio.run(scenario())
    assert len(registry) == 0


def test_server_dispatches_by_extension():
    server = AssetServer(MemoryFetcher({}))
    loader = ObjPlugin().build(server)

    assert loader.extensions() == ("obj",)
    assert server.loader_for("Model.OBJ") is loader
    with pytest.raises(KeyError):
        server.loader_for("model.fbx")
