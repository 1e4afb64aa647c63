"""
Material Dependency Scanner
===========================
First pass over the OBJ text: which material libraries does it need?

The OBJ grammar resolves ``mtllib`` statements synchronously through a callback,
but fetching a library is asynchronous. So the references are collected up
front, fetched, and only then is the full file parsed.
"""
from __future__ import annotations

import logging
from typing import List

from wavefrontscene.model.errors import InvalidObjFormat
from wavefrontscene.utils import decode_text, statement_tokens

logger = logging.getLogger(__name__)


def scan_material_libraries(data: bytes) -> List[str]:
    """
    Return the path of every ``mtllib`` statement, in file order, duplicates kept.

    Raises:
        InvalidObjFormat: If the bytes are not UTF-8 text or an ``mtllib`` line has no path.
    """
    try:
        text = decode_text(data)
    except UnicodeDecodeError as e:
        raise InvalidObjFormat(f"obj file is not valid UTF-8 ({e.reason})") from None

    libraries: List[str] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        parts = statement_tokens(line)
        if not parts or parts[0] != "mtllib":
            continue
        if len(parts) < 2:
            raise InvalidObjFormat(f"invalid mtllib definition on line {line_no}")
        libraries.append(parts[1])

    logger.debug(f"Found {len(libraries)} material library reference(s).")
    return libraries
