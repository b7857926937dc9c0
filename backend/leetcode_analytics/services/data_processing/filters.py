"""
Filter and sort engine over an analytics snapshot.

Everything here is synchronous and side-effect free so results can be cached
per (filters, sort) pair. Missing numbers count as 0 and missing lists as
empty; an empty result is a normal outcome, never an error.
"""

from typing import List, Optional, Sequence

from .rollups import compute_range_stats, split_topics
from .types import FilterState, NormalizedRow, Question, RangeFilter, RangeStats, RangeStatsSet, SortState

DIFFICULTY_RANK = {"EASY": 1, "MEDIUM": 2, "HARD": 3}
UNKNOWN_DIFFICULTY_RANK = 2


def _has_row_filters(filters: FilterState) -> bool:
    return bool(
        filters.search_term
        or filters.selected_companies
        or filters.selected_difficulties
        or filters.selected_timeframes
        or filters.selected_topics
    )


def row_matches(row: NormalizedRow, question: Question, filters: FilterState) -> bool:
    """Whether one original row satisfies every active row-level filter"""
    if filters.search_term:
        needle = filters.search_term.lower()
        if needle not in (row.title or "").lower() and needle not in (row.topics or "").lower():
            return False

    if filters.selected_companies:
        if filters.company_filter_mode == "and":
            # Question-level superset check, identical for every row
            companies = set(question.companies or [])
            if not all(company in companies for company in filters.selected_companies):
                return False
        elif row.company not in filters.selected_companies:
            return False

    if filters.selected_difficulties and row.difficulty not in filters.selected_difficulties:
        return False

    if filters.selected_timeframes and row.timeframe not in filters.selected_timeframes:
        return False

    if filters.selected_topics:
        row_topics = split_topics(row.topics)
        if filters.topic_filter_mode == "and":
            if not all(topic in row_topics for topic in filters.selected_topics):
                return False
        elif not any(topic in row_topics for topic in filters.selected_topics):
            return False

    return True


def _in_range(value: float, bounds: RangeFilter, stats: RangeStats) -> bool:
    low = stats.min if bounds.min is None else bounds.min
    high = stats.max if bounds.max is None else bounds.max
    return low <= value <= high


def question_matches(
    question: Question,
    filters: FilterState,
    stats: RangeStatsSet,
    row_filters_active: Optional[bool] = None
) -> bool:
    if row_filters_active is None:
        row_filters_active = _has_row_filters(filters)

    if row_filters_active:
        rows = question.original_rows or []
        if not any(row_matches(row, question, filters) for row in rows):
            return False

    if not _in_range(len(question.original_rows or []), filters.occurrences_range, stats.occurrences):
        return False
    if not _in_range(question.frequency or 0, filters.frequency_range, stats.frequency):
        return False
    if not _in_range(question.acceptance_rate or 0, filters.acceptance_range, stats.acceptance):
        return False

    if filters.show_multi_company and len(question.companies or []) <= 1:
        return False

    return True


def filter_questions(
    questions: Optional[Sequence[Question]],
    filters: Optional[FilterState] = None,
    stats: Optional[RangeStatsSet] = None
) -> List[Question]:
    """
    Questions with at least one original row matching every row filter and
    whose numeric fields lie inside the requested ranges.

    Unset range bounds fall back to ``stats``, which defaults to the min/max
    of ``questions`` themselves.
    """
    questions = list(questions or [])
    filters = filters or FilterState()
    stats = stats or compute_range_stats(questions)
    row_filters_active = _has_row_filters(filters)

    return [q for q in questions if question_matches(q, filters, stats, row_filters_active)]


def filter_rows(
    rows: Sequence[NormalizedRow],
    company: Optional[str] = None,
    difficulty: Optional[str] = None,
    timeframe: Optional[str] = None,
    search: Optional[str] = None
) -> List[NormalizedRow]:
    """Exact-match row filter for query-string lookups; empty or 'all' means no filter"""
    def active(value: Optional[str]) -> bool:
        return bool(value) and value != "all"

    needle = search.lower() if search else ""
    matched = []
    for row in rows:
        if active(company) and row.company != company:
            continue
        if active(difficulty) and row.difficulty != difficulty:
            continue
        if active(timeframe) and row.timeframe != timeframe:
            continue
        if needle and needle not in row.title.lower() and needle not in row.topics.lower():
            continue
        matched.append(row)
    return matched


def _sort_key(field: str):
    if field == "difficulty":
        return lambda q: DIFFICULTY_RANK.get((q.difficulty or "").upper(), UNKNOWN_DIFFICULTY_RANK)
    if field == "frequency":
        return lambda q: q.frequency or 0
    if field == "acceptance_rate":
        return lambda q: q.acceptance_rate or 0
    if field == "timeframe":
        return lambda q: q.timeframes[0] if q.timeframes else ""
    if field == "occurrences":
        return lambda q: len(q.original_rows or [])
    return lambda q: (q.title or "").lower()


def sort_questions(questions: Sequence[Question], sort: Optional[SortState] = None) -> List[Question]:
    """Stable sort; equal keys keep their input order in both directions"""
    sort = sort or SortState()
    return sorted(questions, key=_sort_key(sort.field), reverse=sort.direction == "desc")


def query_questions(
    questions: Sequence[Question],
    filters: Optional[FilterState] = None,
    sort: Optional[SortState] = None,
    stats: Optional[RangeStatsSet] = None
) -> List[Question]:
    return sort_questions(filter_questions(questions, filters, stats), sort)
