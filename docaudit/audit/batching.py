"""Bounded-size batching of store round-trips.

Large reads and writes are split into chunks of at most ``chunk_size``
items and issued one chunk at a time, so a single call never fans out an
unbounded request to the store.
"""

from collections.abc import Awaitable, Callable, Iterator, Sequence
from typing import TypeVar

from docaudit.observability.logging import get_logger
from docaudit.observability.metrics import BATCH_CHUNKS

logger = get_logger(__name__)

# Default number of keys or documents per store round-trip
MULTI_DOC_BATCH = 100

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive chunks of at most ``size`` items, in input order.

    Raises:
        ValueError: If size is not positive
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


async def run_batched(
    items: Sequence[T],
    chunk_size: int,
    operation: Callable[[list[T]], Awaitable[list[R]]],
    *,
    kind: str = "batch",
) -> list[R]:
    """Run ``operation`` over ``items`` chunk by chunk and concatenate results.

    Chunks are awaited sequentially. The first failing chunk stops the run:
    later chunks are never issued and the operation's exception propagates
    as-is, with no partial results returned.

    Args:
        items: Keys or documents to process (not modified)
        chunk_size: Maximum items per operation call
        operation: Async store call taking one chunk and returning a list
        kind: Label for logs and metrics ("read" or "write")

    Returns:
        Results of all chunks, in chunk order
    """
    results: list[R] = []
    for index, chunk in enumerate(chunked(items, chunk_size)):
        logger.debug(
            "batch_chunk_started",
            kind=kind,
            chunk_index=index,
            chunk_size=len(chunk),
        )
        BATCH_CHUNKS.labels(kind=kind).inc()
        try:
            chunk_results = await operation(chunk)
        except Exception as e:
            logger.error(
                "batch_chunk_failed",
                kind=kind,
                chunk_index=index,
                completed_chunks=index,
                error=str(e),
            )
            raise
        results.extend(chunk_results)
    return results
