from __future__ import annotations

from dataclasses import dataclass

import pytest
from jobbridge_client.aggregation import collect_counts
from jobbridge_client.errors import ApiResult, ErrorOutcome

pytestmark = pytest.mark.unit


@dataclass
class Posting:
    id: int


@pytest.mark.asyncio
async def test_failed_fetch_records_zero_and_continues() -> None:
    calls: list[int] = []
    responses = {
        10: ApiResult.success(3),
        11: ApiResult.failure(ErrorOutcome.server_error("500: boom")),
        12: ApiResult.success(0),
    }

    async def fetch(posting_id: int) -> ApiResult[int]:
        calls.append(posting_id)
        return responses[posting_id]

    counts = await collect_counts([Posting(10), Posting(11), Posting(12)], fetch)

    assert counts == {10: 3, 11: 0, 12: 0}
    assert calls == [10, 11, 12]
    assert sum(counts.values()) == 3


@pytest.mark.asyncio
async def test_raised_exception_is_treated_as_zero() -> None:
    async def fetch(posting_id: int) -> ApiResult[int]:
        if posting_id == 2:
            raise RuntimeError("connection dropped")
        return ApiResult.success(5)

    counts = await collect_counts([Posting(1), Posting(2), Posting(3)], fetch)

    assert counts == {1: 5, 2: 0, 3: 5}


@pytest.mark.asyncio
async def test_no_postings_means_no_fetches() -> None:
    async def fetch(posting_id: int) -> ApiResult[int]:
        raise AssertionError(f"unexpected fetch for {posting_id}")

    assert await collect_counts([], fetch) == {}
