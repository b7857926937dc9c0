"""
Data Processing Module

Turns the LeetCode company-questions CSV into an in-memory analytics snapshot
and answers filter/sort queries against it.

Components:
- types.py: pydantic models for rows, questions, rollups and filter state
- ingestor.py: remote/local CSV loading and quote-aware row splitting
- normalizer.py: typed rows with defaults and numeric coercion
- aggregator.py: title-keyed merge of rows into questions
- rollups.py: company rollups, histograms and range stats
- filters.py: filter and sort engine
- processor.py: orchestrator that builds a snapshot from CSV text
"""

from .types import (
    AnalyticsSnapshot,
    CommitInfo,
    CompanyRollup,
    FilterOptions,
    FilterState,
    NormalizedRow,
    Question,
    RangeFilter,
    RangeStatsSet,
    RowRejection,
    SortState,
)
from .ingestor import CSVIngestor, clean_field, parse_csv_text, split_csv_row, validate_upload
from .normalizer import normalize_row, normalize_rows, parse_acceptance_rate, parse_frequency
from .aggregator import aggregate_questions
from .rollups import (
    collect_filter_options,
    compute_company_rollups,
    compute_range_stats,
    compute_stats,
    split_topics,
)
from .filters import filter_questions, filter_rows, query_questions, sort_questions
from .processor import DataProcessor

__all__ = [
    # Orchestrator
    'DataProcessor',

    # Type definitions
    'AnalyticsSnapshot',
    'CommitInfo',
    'CompanyRollup',
    'FilterOptions',
    'FilterState',
    'NormalizedRow',
    'Question',
    'RangeFilter',
    'RangeStatsSet',
    'RowRejection',
    'SortState',

    # Ingestion
    'CSVIngestor',
    'clean_field',
    'parse_csv_text',
    'split_csv_row',
    'validate_upload',

    # Normalization and aggregation
    'normalize_row',
    'normalize_rows',
    'parse_acceptance_rate',
    'parse_frequency',
    'aggregate_questions',

    # Rollups
    'collect_filter_options',
    'compute_company_rollups',
    'compute_range_stats',
    'compute_stats',
    'split_topics',

    # Filter/sort engine
    'filter_questions',
    'filter_rows',
    'query_questions',
    'sort_questions',
]
