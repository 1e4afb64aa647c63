"""
MTL Grammar
===========
Parses Wavefront material libraries into ``MaterialDescriptor`` records.

Only the grammar lives here. Fetching the file and deciding what a descriptor
means for a renderer is done by the controller layer.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from wavefrontscene.model.descriptors import MaterialDescriptor, MaterialLibrary, Rgb
from wavefrontscene.model.errors import ParseError
from wavefrontscene.utils import decode_text, statement_tokens

logger = logging.getLogger(__name__)

# Texture statement -> descriptor field
TEXTURE_KEYWORDS: Dict[str, str] = {
    "map_Ka": "ambient_texture",
    "map_Kd": "diffuse_texture",
    "map_Ks": "specular_texture",
    "map_Ns": "shininess_texture",
    "map_d": "dissolve_texture",
    "map_Bump": "normal_texture",
    "map_bump": "normal_texture",
    "bump": "normal_texture",
    "norm": "normal_texture",
}

COLOR_KEYWORDS: Dict[str, str] = {
    "Ka": "ambient",
    "Kd": "diffuse",
    "Ks": "specular",
}

# Texture options and how many arguments follow them. None = one to three numbers.
TEXTURE_OPTIONS: Dict[str, Optional[int]] = {
    "blendu": 1,
    "blendv": 1,
    "bm": 1,
    "boost": 1,
    "cc": 1,
    "clamp": 1,
    "imfchan": 1,
    "mm": 2,
    "o": None,
    "s": None,
    "t": None,
    "texres": 1,
    "type": 1,
}


def _float(token: str, line_no: int) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParseError(f"expected a number, got '{token}'", line_no, "mtl") from None


def _rgb(args: Sequence[str], line_no: int) -> Rgb:
    if len(args) == 1:
        value = _float(args[0], line_no)
        return value, value, value
    if len(args) < 3:
        raise ParseError("expected three color components", line_no, "mtl")
    r, g, b = (_float(token, line_no) for token in args[:3])
    return r, g, b


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def texture_path(args: Sequence[str], line_no: int) -> str:
    """Strip texture options (``-bm 0.5``, ``-o 1 1 1``, ...) and return the file name."""
    i = 0
    while i < len(args) and args[i].startswith("-") and args[i][1:] in TEXTURE_OPTIONS:
        arity = TEXTURE_OPTIONS[args[i][1:]]
        i += 1
        if arity is None:
            taken = 0
            while taken < 3 and i < len(args) - 1 and _is_number(args[i]):
                i += 1
                taken += 1
        else:
            i += arity

    path = " ".join(args[i:])
    if not path:
        raise ParseError("texture statement without a file name", line_no, "mtl")
    return path


def load_mtl_buf(data: bytes | str) -> MaterialLibrary:
    """
    Parse MTL text.

    Returns:
        The descriptors in file order and a name -> position map. A repeated
        material name maps to its last definition.

    Raises:
        ParseError: On undecodable text or malformed statements.
    """
    try:
        text = decode_text(data)
    except UnicodeDecodeError as e:
        raise ParseError(f"material library is not valid UTF-8 ({e.reason})", source="mtl") from None

    materials: List[MaterialDescriptor] = []
    index: Dict[str, int] = {}
    current: Optional[MaterialDescriptor] = None

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        tokens = statement_tokens(raw_line)
        if not tokens:
            continue

        keyword, *args = tokens

        if keyword == "newmtl":
            if not args:
                raise ParseError("newmtl without a name", line_no, "mtl")
            current = MaterialDescriptor(name=" ".join(args))
            index[current.name] = len(materials)
            materials.append(current)
            continue

        if current is None:
            logger.debug(f"Ignoring '{keyword}' before the first newmtl (line {line_no}).")
            continue

        if keyword in COLOR_KEYWORDS:
            if args and args[0] in ("spectral", "xyz"):
                current.unknown_param[keyword] = " ".join(args)
            else:
                setattr(current, COLOR_KEYWORDS[keyword], _rgb(args, line_no))
        elif keyword in TEXTURE_KEYWORDS:
            setattr(current, TEXTURE_KEYWORDS[keyword], texture_path(args, line_no))
        elif keyword == "Ns":
            current.shininess = _float(args[0], line_no) if args else 0.0
        elif keyword == "Ni":
            current.optical_density = _float(args[0], line_no) if args else 1.0
        elif keyword == "d":
            current.dissolve = _float(args[-1], line_no) if args else 1.0
        elif keyword == "Tr":
            current.dissolve = 1.0 - _float(args[0], line_no) if args else 1.0
        elif keyword == "illum":
            if not args or not args[0].isdigit():
                raise ParseError("illum expects an integer", line_no, "mtl")
            current.illumination_model = int(args[0])
        else:
            current.unknown_param[keyword] = " ".join(args)

    logger.debug(f"Parsed {len(materials)} material(s).")
    return materials, index
