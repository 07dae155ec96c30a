"""
Pagination collector.

Flattens the SDK's asynchronous pagers into complete in-memory lists.
"""

from typing import Any, AsyncIterable, Callable, List, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar('T')


async def collect_pages(
    pages: AsyncIterable[Any],
    convert: Callable[[Any], Optional[T]],
    scope: Optional[Callable[[T], bool]] = None,
) -> List[T]:
    """
    Drain an async page sequence into a list.

    Args:
        pages: Async iterable over backend records (an SDK ``AsyncPager``)
        convert: Converts one backend record, returning None for malformed records
        scope: Optional predicate; records for which it is false are skipped

    Returns:
        Converted records in backend iteration order

    Any exception raised while iterating propagates, so callers never see a
    partial listing.
    """
    records: List[T] = []
    dropped = 0
    out_of_scope = 0

    async for item in pages:
        record = convert(item)
        if record is None:
            dropped += 1
            continue
        if scope is not None and not scope(record):
            out_of_scope += 1
            continue
        records.append(record)

    if dropped:
        logger.debug("Dropped malformed records from listing", dropped=dropped)

    logger.debug(
        "Listing drained",
        collected=len(records),
        dropped=dropped,
        out_of_scope=out_of_scope
    )
    return records
