"""Unit tests for the filter/sort engine."""

from __future__ import annotations

import pytest

from leetcode_analytics.services.data_processing import (
    FilterState,
    NormalizedRow,
    Question,
    RangeFilter,
    SortState,
    aggregate_questions,
    filter_questions,
    filter_rows,
    query_questions,
    sort_questions,
)


def row(title, company, timeframe="1 Month", difficulty="Easy", topics="Array", frequency=50.0, acceptance=50.0):
    return NormalizedRow(
        difficulty=difficulty,
        title=title,
        frequency=frequency,
        acceptance_rate=acceptance,
        link="",
        company=company,
        timeframe=timeframe,
        topics=topics,
    )


@pytest.fixture
def questions() -> list[Question]:
    return aggregate_questions([
        row("Two Sum", "A", topics="Array, Hash Table"),
        row("Two Sum", "B", timeframe="6 Months", topics="Array, Hash Table"),
        row("LRU Cache", "A", difficulty="Medium", topics="Design|Hash Table", frequency=80.0),
        row("Word Ladder", "C", difficulty="Hard", timeframe="All", topics="Graph;BFS", frequency=20.0),
    ])


def titles(result) -> list[str]:
    return [q.title for q in result]


def test_no_filters_keeps_everything(questions) -> None:
    assert titles(filter_questions(questions, FilterState())) == ["LRU Cache", "Two Sum", "Word Ladder"]


@pytest.mark.parametrize(
    ("selected", "mode", "included"),
    [
        (["A", "B"], "and", True),
        (["A", "C"], "and", False),
        (["A", "B"], "or", True),
        (["A", "C"], "or", True),
    ],
)
def test_company_and_or_duality(questions, selected, mode, included) -> None:
    filters = FilterState(selected_companies=selected, company_filter_mode=mode)

    assert ("Two Sum" in titles(filter_questions(questions, filters))) is included


def test_company_and_mode_combines_with_row_level_timeframe(questions) -> None:
    filters = FilterState(
        selected_companies=["A", "B"],
        company_filter_mode="and",
        selected_timeframes=["6 Months"],
    )

    assert titles(filter_questions(questions, filters)) == ["Two Sum"]


def test_company_or_uses_actual_row_cooccurrence(questions) -> None:
    # Two Sum has A/1 Month and B/6 Months but no A/6 Months row
    filters = FilterState(selected_companies=["A"], selected_timeframes=["6 Months"])

    assert filter_questions(questions, filters) == []


def test_topic_filter_modes(questions) -> None:
    any_of = FilterState(selected_topics=["Design", "Graph"], topic_filter_mode="or")
    all_of = FilterState(selected_topics=["Array", "Hash Table"], topic_filter_mode="and")
    none = FilterState(selected_topics=["Array", "Design"], topic_filter_mode="and")

    assert titles(filter_questions(questions, any_of)) == ["LRU Cache", "Word Ladder"]
    assert titles(filter_questions(questions, all_of)) == ["Two Sum"]
    assert filter_questions(questions, none) == []


def test_search_matches_title_or_topics_case_insensitively(questions) -> None:
    assert titles(filter_questions(questions, FilterState(search_term="lru"))) == ["LRU Cache"]
    assert titles(filter_questions(questions, FilterState(search_term="bfs"))) == ["Word Ladder"]


def test_difficulty_filter(questions) -> None:
    filters = FilterState(selected_difficulties=["Hard", "Medium"])

    assert titles(filter_questions(questions, filters)) == ["LRU Cache", "Word Ladder"]


def test_occurrence_range_upper_bound_is_inclusive(questions) -> None:
    at_max = FilterState(occurrences_range=RangeFilter(max=2))
    below_max = FilterState(occurrences_range=RangeFilter(max=1))

    assert "Two Sum" in titles(filter_questions(questions, at_max))
    assert "Two Sum" not in titles(filter_questions(questions, below_max))


def test_frequency_range_with_one_bound_set(questions) -> None:
    filters = FilterState(frequency_range=RangeFilter(min=50))

    assert titles(filter_questions(questions, filters)) == ["LRU Cache", "Two Sum"]


def test_blank_range_bounds_are_unset() -> None:
    bounds = RangeFilter.model_validate({"min": "", "max": " "})

    assert bounds.min is None and bounds.max is None


def test_multi_company_only(questions) -> None:
    assert titles(filter_questions(questions, FilterState(show_multi_company=True))) == ["Two Sum"]


def test_filter_state_accepts_camel_case_payload(questions) -> None:
    filters = FilterState.model_validate({
        "selectedCompanies": ["A", "B"],
        "companyFilterMode": "and",
        "occurrencesRange": {"min": "", "max": 5},
    })

    assert titles(filter_questions(questions, filters)) == ["Two Sum"]


def test_empty_input_is_not_an_error() -> None:
    assert filter_questions([], FilterState(search_term="x")) == []
    assert filter_questions(None) == []
    assert sort_questions([], SortState(field="frequency", direction="desc")) == []


def test_sort_by_frequency_is_stable() -> None:
    qs = aggregate_questions([
        row("b", "A", frequency=10.0),
        row("a", "A", frequency=10.0),
        row("c", "A", frequency=5.0),
    ])
    ordered = [qs[1], qs[0], qs[2]]  # b, a, c

    assert titles(sort_questions(ordered, SortState(field="frequency"))) == ["c", "b", "a"]
    assert titles(sort_questions(ordered, SortState(field="frequency", direction="desc"))) == ["b", "a", "c"]


def test_sort_by_difficulty_rank_treats_unknown_as_medium() -> None:
    qs = aggregate_questions([
        row("h", "A", difficulty="Hard"),
        row("u", "A", difficulty="Unrated"),
        row("e", "A", difficulty="easy"),
        row("m", "A", difficulty="Medium"),
    ])

    assert titles(sort_questions(qs, SortState(field="difficulty"))) == ["e", "m", "u", "h"]


def test_sort_by_title_is_case_insensitive() -> None:
    qs = aggregate_questions([row("beta", "A"), row("Alpha", "A"), row("gamma", "A")])

    result = sort_questions(qs, SortState(field="title", direction="desc"))

    assert titles(result) == ["gamma", "beta", "Alpha"]


def test_sort_by_occurrences_and_timeframe(questions) -> None:
    by_occurrences = sort_questions(questions, SortState(field="occurrences", direction="desc"))
    by_timeframe = sort_questions(questions, SortState(field="timeframe"))

    assert titles(by_occurrences)[0] == "Two Sum"
    assert titles(by_timeframe) == ["LRU Cache", "Two Sum", "Word Ladder"]


def test_query_questions_filters_then_sorts(questions) -> None:
    result = query_questions(
        questions,
        FilterState(selected_companies=["A"]),
        SortState(field="frequency", direction="desc"),
    )

    assert titles(result) == ["LRU Cache", "Two Sum"]


def test_filter_rows_ignores_all_and_blank_values() -> None:
    rows = [row("Two Sum", "A"), row("LRU Cache", "B", difficulty="Medium")]

    assert len(filter_rows(rows, company="all", difficulty="", timeframe=None)) == 2
    assert [r.title for r in filter_rows(rows, company="B")] == ["LRU Cache"]
    assert [r.title for r in filter_rows(rows, search="two")] == ["Two Sum"]
