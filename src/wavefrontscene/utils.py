from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, List, Sequence, TypeVar, TYPE_CHECKING

import numpy as np

from wavefrontscene.model.errors import ChunkError

if TYPE_CHECKING:
    import numpy.typing as npt

T = TypeVar("T")


def decode_text(data: bytes | str) -> str:
    """Decode OBJ/MTL bytes as strict UTF-8, tolerating a leading BOM."""
    if isinstance(data, str):
        return data
    return data.decode("utf-8-sig")


def statement_tokens(line: str) -> List[str]:
    """Whitespace tokens of one OBJ/MTL line, with any trailing `#` comment removed."""
    return line.split("#", 1)[0].split()


def chunk_by(values: Sequence[float], width: int, dtype: type = np.float32, what: str = "array") -> npt.NDArray:
    """
    Split a flat sequence into rows of exactly ``width`` elements.

    Args:
        values: Flat numeric sequence, e.g. [x0, y0, z0, x1, y1, z1].
        width: Number of elements per row.
        dtype: Element type of the returned array.
        what: Name of the attribute, used in the error message.

    Returns:
        An array of shape (len(values) // width, width). An empty input gives
        an empty (0, width) array.

    Raises:
        ChunkError: If the length is not an exact multiple of ``width``.
    """
    flat = np.asarray(values, dtype=dtype).reshape(-1)
    if flat.size % width != 0:
        raise ChunkError(f"{what} has {flat.size} values, which is not a multiple of {width}")
    return flat.reshape(-1, width)


def _first_leaf(error: BaseException) -> BaseException:
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


async def join_all(awaitables: Iterable[Awaitable[T]], concurrent: bool = True) -> List[T]:
    """
    Await every item and return the results in input order.

    Concurrent mode runs them in one ``asyncio.TaskGroup``: the first failure
    cancels the siblings and is re-raised on its own, not wrapped in a group.
    """
    pending = list(awaitables)
    if not concurrent:
        results: List[T] = []
        try:
            for position, item in enumerate(pending):
                results.append(await item)
        except BaseException:
            for item in pending[position + 1:]:
                if asyncio.iscoroutine(item):
                    item.close()
            raise
        return results

    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(_as_coroutine(item)) for item in pending]
    except BaseExceptionGroup as errors:
        raise _first_leaf(errors) from None
    return [task.result() for task in tasks]


async def _as_coroutine(awaitable: Awaitable[T]) -> T:
    return await awaitable
