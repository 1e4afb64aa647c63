"""Command-line interface."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from wavefrontscene.config import DuplicateLabelPolicy, LoaderSettings
from wavefrontscene.controller.server import AssetServer, ObjPlugin
from wavefrontscene.logging_config import setup_logging
from wavefrontscene.model.assets import (
    Handle, MeshData, ObjMesh, ObjScene, Scene, StandardMaterial, TextureAsset,
)
from wavefrontscene.model.errors import ObjLoadError
from wavefrontscene.model.io import FileSystemFetcher
from wavefrontscene.model.registry import AssetRegistry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavefrontscene",
        description="Load a Wavefront OBJ model with its materials and textures and list the resulting assets.",
    )
    parser.add_argument("model", type=Path, help="Path to the .obj file")
    parser.add_argument("--sequential", action="store_true", help="Fetch dependencies one at a time")
    parser.add_argument(
        "--strict-labels", action="store_true",
        help="Fail instead of overwriting when two assets share a label (e.g. duplicate mesh names)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    return parser


def describe(label: str, asset: object) -> str:
    if isinstance(asset, MeshData):
        return f"{label}: mesh, {asset.vertex_count} vertices, {asset.index_count} indices"
    if isinstance(asset, ObjMesh):
        material = asset.material.label if asset.material else "-"
        return f"{label}: submesh {asset.mesh.label} / {material}"
    if isinstance(asset, StandardMaterial):
        r, g, b, _ = asset.base_color
        return f"{label}: material, base color ({r:.3f}, {g:.3f}, {b:.3f})"
    if isinstance(asset, TextureAsset):
        return f"{label}: texture {asset.width}x{asset.height}"
    if isinstance(asset, ObjScene):
        return f"{label}: {len(asset.meshes)} submesh(es), {len(asset.materials)} material(s)"
    if isinstance(asset, Scene):
        return f"{label}: scene, {len(asset.root.children)} node(s)"
    return f"{label}: {type(asset).__name__}"


def summarize(registry: AssetRegistry, handles: Sequence[Handle]) -> List[str]:
    return [describe(handle.label or "", registry.get(handle)) for handle in handles]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING, log_file=args.log_file)

    settings = LoaderSettings.from_env()
    if args.sequential:
        settings = dataclasses.replace(settings, concurrent_fetches=False)
    if args.strict_labels:
        settings = dataclasses.replace(settings, duplicate_labels=DuplicateLabelPolicy.ERROR)

    model: Path = args.model
    server = AssetServer(FileSystemFetcher(model.parent), settings=settings)
    ObjPlugin().build(server)

    try:
        handles = asyncio.run(server.load(model.name))
    except KeyError as e:
        print(f"error: {e.args[0]}", file=sys.stderr)
        return 2
    except ObjLoadError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for line in summarize(server.registry, handles):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
