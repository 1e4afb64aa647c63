"""
Configuration & Constants
=========================
This module serves as the central registry for labels, file-type tables and
loader settings.

Why is this file needed?
------------------------
1. Abstraction: labels such as "Scene" or "ObjMesh0" are part of the public
   addressing scheme of loaded assets and must not be scattered through the code.
2. Policy: it holds the few knobs a host may turn (sequential fetching, what to do
   on duplicate labels), with an environment-variable override for the CLI.

Exports:
    OBJ_EXTENSIONS: File extensions handled by the OBJ loader.
    IMAGE_FORMATS: Image extension -> Pillow format name.
    LoaderSettings: Per-loader settings.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# File types
OBJ_EXTENSIONS: Tuple[str, ...] = ("obj",)

IMAGE_FORMATS: Dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "bmp": "BMP",
    "tga": "TGA",
    "dds": "DDS",
    "gif": "GIF",
    "tif": "TIFF",
    "tiff": "TIFF",
    "webp": "WEBP",
}

# Labels of the sub-assets produced by one load
OBJ_LABEL: str = "Obj"
SCENE_LABEL: str = "Scene"
SUBMESH_LABEL_PREFIX: str = "ObjMesh"

# Name given to geometry that appears before any 'o' / 'g' statement
DEFAULT_OBJECT_NAME: str = "unnamed_object"

ENV_SEQUENTIAL = "WAVEFRONTSCENE_SEQUENTIAL"
ENV_DUPLICATE_LABELS = "WAVEFRONTSCENE_DUPLICATE_LABELS"


class DuplicateLabelPolicy(StrEnum):
    """What happens when one load stages two assets under the same label."""
    LAST_WINS = "last-wins"
    ERROR = "error"


@dataclass(frozen=True)
class LoaderSettings:
    concurrent_fetches: bool = True
    duplicate_labels: DuplicateLabelPolicy = DuplicateLabelPolicy.LAST_WINS

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> LoaderSettings:
        """Build settings from WAVEFRONTSCENE_* environment variables."""
        env = os.environ if environ is None else environ

        sequential = env.get(ENV_SEQUENTIAL, "").strip().lower() in ("1", "true", "yes", "on")

        raw_policy = env.get(ENV_DUPLICATE_LABELS, DuplicateLabelPolicy.LAST_WINS.value)
        try:
            policy = DuplicateLabelPolicy(raw_policy.strip().lower())
        except ValueError:
            logger.warning(f"Ignoring unknown {ENV_DUPLICATE_LABELS}='{raw_policy}'.")
            policy = DuplicateLabelPolicy.LAST_WINS

        return LoaderSettings(concurrent_fetches=not sequential, duplicate_labels=policy)
