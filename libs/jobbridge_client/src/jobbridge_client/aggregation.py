from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Protocol

from jobbridge_client.errors import ApiResult

LOGGER = logging.getLogger("jobbridge.aggregation")


class HasPostingId(Protocol):
    @property
    def id(self) -> int: ...


CountFetcher = Callable[[int], Awaitable[ApiResult[int]]]


async def collect_counts(postings: Iterable[HasPostingId], fetch_count: CountFetcher) -> dict[int, int]:
    """Fetch one dependent count per posting, strictly one after another.

    A failed fetch records 0 for that posting and the loop moves on, so the
    result always has one entry per input posting. Running the fetches
    concurrently would need (id, result) pairs folded in order afterwards to
    keep that guarantee.
    """
    counts: dict[int, int] = {}
    for posting in postings:
        try:
            result = await fetch_count(posting.id)
        except Exception as exc:
            LOGGER.warning(
                json.dumps({"event": "count_failed", "posting_id": posting.id, "error": str(exc)})
            )
            counts[posting.id] = 0
            continue

        if result.ok:
            counts[posting.id] = result.value or 0
        else:
            LOGGER.warning(
                json.dumps(
                    {
                        "event": "count_failed",
                        "posting_id": posting.id,
                        "error": result.error.kind.value if result.error else None,
                    }
                )
            )
            counts[posting.id] = 0
    return counts
