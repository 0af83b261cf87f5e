from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel

HIGH_MATCH_THRESHOLD = 0.8
MEDIUM_MATCH_THRESHOLD = 0.6


class ScoredRecord(Protocol):
    @property
    def record_id(self) -> int: ...

    @property
    def score(self) -> float: ...


R = TypeVar("R", bound=ScoredRecord)


class MatchBucket(Enum):
    PERFECT = ("완벽 매치", "red", 0.90)
    HIGH = ("높은 적합도", "green", 0.80)
    GOOD = ("양호한 적합도", "orange", 0.70)
    BASIC = ("기본 적합도", "blue", 0.60)
    LOW = ("낮은 적합도", "gray", 0.0)

    def __init__(self, label: str, color: str, lower_bound: float) -> None:
        self.label = label
        self.color = color
        self.lower_bound = lower_bound


# Highest lower bound first; the first bucket whose bound is reached wins.
BUCKETS_HIGH_TO_LOW = tuple(sorted(MatchBucket, key=lambda bucket: bucket.lower_bound, reverse=True))


def clamp_score(score: float) -> float:
    return min(max(score, 0.0), 1.0)


def match_percentage(score: float) -> int:
    # Truncates: 0.599 is 59, never 60.
    return int(clamp_score(score) * 100)


def bucket_for_score(score: float) -> MatchBucket:
    clamped = clamp_score(score)
    for bucket in BUCKETS_HIGH_TO_LOW:
        if clamped >= bucket.lower_bound:
            return bucket
    return MatchBucket.LOW


@dataclass(frozen=True)
class RankedMatch(Generic[R]):
    rank: int
    record: R
    percentage: int
    bucket: MatchBucket

    @property
    def score(self) -> float:
        return self.record.score

    @property
    def label(self) -> str:
        return self.bucket.label

    @property
    def color(self) -> str:
        return self.bucket.color


def rank_matches(records: Iterable[R]) -> list[RankedMatch[R]]:
    """Order records by raw score, highest first, and attach rank and bucket.

    Equal scores keep their input order. Ranks start at 1 and are derived
    fresh on every call; nothing is written back to the records.
    """
    ordered = sorted(records, key=lambda record: record.score, reverse=True)
    return [
        RankedMatch(
            rank=index,
            record=record,
            percentage=match_percentage(record.score),
            bucket=bucket_for_score(record.score),
        )
        for index, record in enumerate(ordered, start=1)
    ]


def filter_by_threshold(ranked: Sequence[RankedMatch[R]], threshold: float) -> list[RankedMatch[R]]:
    return [item for item in ranked if item.score >= threshold]


class MatchSummary(BaseModel):
    total: int
    high_count: int
    medium_count: int
    low_count: int
    bucket_counts: dict[str, int]
    average_score: float
    top_score: float


def summarize_matches(ranked: Sequence[RankedMatch[R]]) -> MatchSummary:
    scores = [item.score for item in ranked]
    bucket_counts = {bucket.name: 0 for bucket in MatchBucket}
    for item in ranked:
        bucket_counts[item.bucket.name] += 1
    return MatchSummary(
        total=len(scores),
        high_count=sum(1 for score in scores if score >= HIGH_MATCH_THRESHOLD),
        medium_count=sum(
            1 for score in scores if MEDIUM_MATCH_THRESHOLD <= score < HIGH_MATCH_THRESHOLD
        ),
        low_count=sum(1 for score in scores if score < MEDIUM_MATCH_THRESHOLD),
        bucket_counts=bucket_counts,
        average_score=sum(scores) / len(scores) if scores else 0.0,
        top_score=max(scores, default=0.0),
    )
