"""Main data processing orchestrator"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

import structlog

from leetcode_analytics.core.errors import AppError, DataProcessingError
from .aggregator import aggregate_questions
from .ingestor import parse_csv_text
from .normalizer import normalize_rows
from .rollups import compute_company_rollups, compute_range_stats, compute_stats
from .types import (
    AnalyticsSnapshot,
    CommitInfo,
    DataSource,
    NormalizedRow,
    RowRejection,
    SnapshotMetadata,
)


class DataProcessor:
    """Runs CSV text through normalize -> aggregate -> rollups"""

    def __init__(self, logger=None):
        self.logger = logger or structlog.get_logger(__name__)

    def normalize_text(self, text: str) -> Tuple[List[NormalizedRow], List[RowRejection]]:
        """Parse CSV text into normalized rows plus the rejected lines"""
        headers, lines = parse_csv_text(text)
        self.logger.info("Parsed CSV", columns=len(headers), lines=len(lines))
        return normalize_rows(headers, lines, logger=self.logger.bind(stage="normalize"))

    def build_snapshot(
        self,
        text: str,
        source: DataSource = "remote",
        commit: Optional[CommitInfo] = None
    ) -> AnalyticsSnapshot:
        """
        Build a complete AnalyticsSnapshot from CSV text.

        Identical input produces an identical snapshot apart from
        ``metadata.processed_at``.
        """
        log = self.logger.bind(source=source)
        try:
            rows, rejections = self.normalize_text(text)
            questions = aggregate_questions(rows, logger=log.bind(stage="aggregate"))
            companies = compute_company_rollups(questions)
            stats = compute_stats(questions, companies)
            ranges = compute_range_stats(questions)
        except AppError:
            raise
        except Exception as e:
            log.error("Snapshot build failed", error=str(e), exc_info=True)
            raise DataProcessingError(f"Failed to process CSV data: {e}") from e

        metadata = SnapshotMetadata(
            last_updated=commit.date if commit else None,
            last_commit_hash=commit.sha if commit else None,
            commit_url=commit.url if commit else None,
            commit_author=commit.author if commit else None,
            commit_message=commit.message if commit else None,
            source=source,
            processed_at=datetime.now(timezone.utc).isoformat(),
            rows_processed=len(rows),
            rows_rejected=len(rejections),
        )

        log.info(
            "Snapshot built",
            questions=len(questions),
            companies=len(companies),
            rows=len(rows),
            rejected=len(rejections),
        )
        return AnalyticsSnapshot(
            questions=questions,
            companies=companies,
            stats=stats,
            ranges=ranges,
            metadata=metadata,
        )
