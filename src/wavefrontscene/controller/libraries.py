"""
Material Library Resolver
=========================
Fetches and parses every material library an OBJ file references.

Why is this file needed?
------------------------
1. Ordering: the OBJ grammar asks for libraries synchronously while it parses.
   Every library therefore has to be fetched and parsed *before* that parse
   starts, and this module produces the complete, read-only index it reads from.
2. Strictness: a library that cannot be fetched aborts the whole load.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Sequence

from wavefrontscene.formats.mtl import load_mtl_buf
from wavefrontscene.model.descriptors import MaterialLibrary, MtlLoadResult
from wavefrontscene.model.errors import ParseError, UnresolvedReferenceError
from wavefrontscene.model.registry import LoadContext
from wavefrontscene.model.result import Err, Ok
from wavefrontscene.utils import join_all

logger = logging.getLogger(__name__)

MtlParser = Callable[[bytes], MaterialLibrary]


class MaterialLibraryIndex:
    """Parse outcome of each library, keyed by the literal path used in the OBJ file."""

    def __init__(self, entries: Mapping[str, MtlLoadResult]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def lookup(self, reference: str) -> MtlLoadResult:
        """Material-loader callback handed to the OBJ grammar."""
        try:
            return self._entries[reference]
        except KeyError:
            raise UnresolvedReferenceError(reference) from None

    def __contains__(self, reference: object) -> bool:
        return reference in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


class MaterialLibraryResolver:
    def __init__(
        self,
        context: LoadContext,
        parser: MtlParser = load_mtl_buf,
        concurrent: bool = True,
    ) -> None:
        self.context = context
        self.parser = parser
        self.concurrent = concurrent

    async def resolve(self, references: Sequence[str]) -> MaterialLibraryIndex:
        """
        Fetch and parse each distinct reference.

        Raises:
            FetchError: If any library cannot be read. Nothing is returned then.
        """
        distinct = list(dict.fromkeys(references))
        results = await join_all((self._resolve_one(ref) for ref in distinct), self.concurrent)

        entries: Dict[str, MtlLoadResult] = dict(zip(distinct, results))
        logger.debug(f"Resolved {len(entries)} material librar{'y' if len(entries) == 1 else 'ies'}.")
        return MaterialLibraryIndex(entries)

    async def _resolve_one(self, reference: str) -> MtlLoadResult:
        path = self.context.resolve(reference)
        logger.debug(f"Fetching material library '{reference}' ({path})")
        data = await self.context.read_asset_bytes(path)
        try:
            return Ok(self.parser(data))
        except ParseError as e:
            # Kept in the index: it only matters if the OBJ grammar asks for it.
            logger.warning(f"Material library '{reference}' could not be parsed: {e}")
            return Err(e)
