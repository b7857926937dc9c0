"""Company rollups, histograms and numeric range stats"""

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

from .types import (
    CompanyRollup,
    DistributionEntry,
    FilterOptions,
    Question,
    RangeStats,
    RangeStatsSet,
    SnapshotStats,
    TopicCount,
)

TOPIC_SEPARATORS = re.compile(r"[,;|]")

# Keyword sets matched as case-insensitive substrings of a timeframe label.
# A label can land in more than one bucket.
TIMEFRAME_BUCKETS = {
    "thirty_days": ("1 month", "thirty"),
    "three_months": ("3 month", "three"),
    "six_months": ("6 month", "six"),
    "more_than_six_months": ("more than", "over"),
    "all": ("all",),
}

DIFFICULTY_COLORS = {
    "EASY": "#22c55e",
    "MEDIUM": "#f59e0b",
    "HARD": "#ef4444",
}
DEFAULT_DIFFICULTY_COLOR = "#6b7280"

TOP_TOPICS_LIMIT = 20
DEFAULT_RANGE = RangeStats(min=0, max=100)


def split_topics(topics: Optional[str]) -> List[str]:
    """'Array, Hash Table|DP' -> ['Array', 'Hash Table', 'DP']"""
    if not topics:
        return []
    return [topic.strip() for topic in TOPIC_SEPARATORS.split(topics) if topic.strip()]


def timeframe_buckets(timeframe: str) -> List[str]:
    """Names of the rollup buckets a timeframe label counts towards"""
    label = timeframe.lower()
    return [
        bucket for bucket, keywords in TIMEFRAME_BUCKETS.items()
        if any(keyword in label for keyword in keywords)
    ]


def compute_company_rollups(questions: Sequence[Question]) -> List[CompanyRollup]:
    """
    Count questions per company and per timeframe bucket.

    Buckets are evaluated against the timeframes that company actually
    reported for the question (its own original rows), and each bucket is
    counted at most once per question/company pair.
    """
    counts: Dict[str, Dict[str, int]] = {}

    for question in questions:
        for company in question.companies or []:
            company_counts = counts.setdefault(
                company, {"total_problems": 0, **{bucket: 0 for bucket in TIMEFRAME_BUCKETS}}
            )
            company_counts["total_problems"] += 1

            hit = set()
            for row in question.original_rows or []:
                if row.company == company:
                    hit.update(timeframe_buckets(row.timeframe))
            for bucket in hit:
                company_counts[bucket] += 1

    rollups = [CompanyRollup(name=name, **values) for name, values in counts.items()]
    rollups.sort(key=lambda rollup: rollup.total_problems, reverse=True)
    return rollups


def difficulty_color(difficulty: str) -> str:
    return DIFFICULTY_COLORS.get(difficulty.upper(), DEFAULT_DIFFICULTY_COLOR)


def difficulty_distribution(questions: Sequence[Question]) -> List[DistributionEntry]:
    counts = Counter(question.difficulty for question in questions)
    return [
        DistributionEntry(name=name, value=value, color=difficulty_color(name))
        for name, value in counts.items()
    ]


def timeframe_distribution(questions: Sequence[Question]) -> List[DistributionEntry]:
    """Number of questions that reference each timeframe"""
    counts = Counter(
        timeframe
        for question in questions
        for timeframe in question.timeframes or []
    )
    return [DistributionEntry(name=name, value=value) for name, value in counts.items()]


def top_topics(questions: Sequence[Question], limit: int = TOP_TOPICS_LIMIT) -> List[TopicCount]:
    counts = Counter(
        topic
        for question in questions
        for topic in split_topics(question.topics)
    )
    # most_common keeps first-seen order among equal counts
    return [TopicCount(name=name, count=count) for name, count in counts.most_common(limit)]


def _range(values: List[float]) -> RangeStats:
    if not values:
        return DEFAULT_RANGE
    return RangeStats(min=min(values), max=max(values))


def compute_range_stats(questions: Sequence[Question]) -> RangeStatsSet:
    """Global min/max for the range filters; 0-100 when there is nothing to measure"""
    return RangeStatsSet(
        occurrences=_range([len(q.original_rows or []) for q in questions]),
        frequency=_range([q.frequency or 0 for q in questions]),
        acceptance=_range([q.acceptance_rate or 0 for q in questions]),
    )


def collect_filter_options(questions: Sequence[Question]) -> FilterOptions:
    """Sorted distinct values for each multi-select filter"""
    companies, difficulties, timeframes, topics = set(), set(), set(), set()
    for question in questions:
        companies.update(question.companies or [])
        difficulties.add(question.difficulty)
        timeframes.update(question.timeframes or [])
        for row in question.original_rows or []:
            topics.update(split_topics(row.topics))

    return FilterOptions(
        companies=sorted(companies),
        difficulties=sorted(difficulties),
        timeframes=sorted(timeframes),
        topics=sorted(topics),
    )


def compute_stats(questions: Sequence[Question], rollups: Sequence[CompanyRollup]) -> SnapshotStats:
    return SnapshotStats(
        total_problems=len(questions),
        total_companies=len(rollups),
        difficulty_distribution=difficulty_distribution(questions),
        timeframe_distribution=timeframe_distribution(questions),
        top_topics=top_topics(questions),
    )
