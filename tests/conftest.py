from __future__ import annotations

import asyncio
import io
from collections import Counter
from pathlib import PurePosixPath
from typing import Dict, Optional

import pytest
from PIL import Image

from wavefrontscene.config import LoaderSettings
from wavefrontscene.controller.loader import ObjLoader
from wavefrontscene.controller.server import AssetServer, ObjPlugin
from wavefrontscene.model.errors import FetchError
from wavefrontscene.model.registry import AssetRegistry


class MemoryFetcher:
    """Serves files from a dict and counts every read."""

    def __init__(self, files: Dict[str, bytes | str]) -> None:
        self.files = {
            str(PurePosixPath(path)): data.encode("utf-8") if isinstance(data, str) else data
            for path, data in files.items()
        }
        self.reads: Counter[str] = Counter()

    async def read_bytes(self, path) -> bytes:
        key = str(PurePosixPath(path))
        self.reads[key] += 1
        await asyncio.sleep(0)
        if key not in self.files:
            raise FetchError(key, "not found")
        return self.files[key]


def make_png(color=(255, 0, 0, 255), size=(2, 2), mode: str = "RGBA") -> bytes:
    if mode == "L":
        color = color[0]
    elif mode == "RGB":
        color = color[:3]
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


TRIANGLE_OBJ = """\
v 0.0 0.0 0.0
v 1.0 0.0 0.0
v 0.0 1.0 0.0
f 1 2 3
"""

CUBE_MTL = """\
newmtl red
Kd 1.0 0.0 0.0
Ns 32.0
map_Kd textures/shared.png
map_Bump -bm 0.5 textures/normal.png
map_Ks textures/spec.png
map_Ka textures/ao.png

newmtl blue
Kd 0.0 0.0 1.0
Ns 8
map_Kd textures/shared.png
"""

CUBE_OBJ = """\
# two quads with different materials
mtllib cube.mtl
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
v 0 0 1
v 1 0 1
vt 0 0
vt 1 0
vt 1 1
vt 0 1
vn 0 0 1
o front
usemtl red
f 1/1/1 2/2/1 3/3/1 4/4/1
o back
usemtl blue
f 5/1/1 6/2/1 3/3/1
"""


@pytest.fixture
def png_bytes():
    return make_png


@pytest.fixture
def cube_files(png_bytes) -> Dict[str, bytes | str]:
    return {
        "models/cube.obj": CUBE_OBJ,
        "models/cube.mtl": CUBE_MTL,
        "models/textures/shared.png": png_bytes((10, 20, 30, 255)),
        "models/textures/normal.png": png_bytes((128, 128, 255, 255)),
        "models/textures/spec.png": png_bytes((0, 0, 0, 255), mode="L"),
        "models/textures/ao.png": png_bytes((255, 255, 255, 255), mode="RGB"),
    }


@pytest.fixture
def load_model():
    """Run one load through an AssetServer and return (server, fetcher, handles)."""

    def _load(
        files: Dict[str, bytes | str],
        path: str,
        settings: Optional[LoaderSettings] = None,
        loader: Optional[ObjLoader] = None,
        registry: Optional[AssetRegistry] = None,
    ):
        fetcher = MemoryFetcher(files)
        server = AssetServer(fetcher, registry=registry, settings=settings)
        if loader is None:
            ObjPlugin().build(server)
        else:
            server.register_loader(loader)
        handles = asyncio.run(server.load(path))
        return server, fetcher, handles

    return _load


@pytest.fixture
def memory_fetcher():
    return MemoryFetcher
