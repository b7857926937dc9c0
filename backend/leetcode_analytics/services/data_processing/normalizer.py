"""Row normalization: typed records from split CSV values"""

import math
import re
from typing import Any, List, Optional, Sequence, Tuple

import structlog

from leetcode_analytics.core.errors import DataProcessingError
from .ingestor import NumberedLine, clean_field, split_csv_row
from .types import NormalizedRow, NormalizeResult, RawRow, RowRejection

DEFAULT_DIFFICULTY = "Medium"
DEFAULT_FREQUENCY = 50.0
DEFAULT_ACCEPTANCE_RATE = 50.0

_LEADING_FLOAT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_NON_NUMERIC = re.compile(r"[^\d.]", re.ASCII)


def parse_leading_float(value: Any) -> Optional[float]:
    """Parse the longest numeric prefix of a value, or None if there is none"""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    match = _LEADING_FLOAT.match(str(value).lstrip())
    if not match:
        return None
    parsed = float(match.group(0))
    # "1e400" and 400-digit strings overflow to inf
    return parsed if math.isfinite(parsed) else None


def round_half_up(value: float, digits: int = 2) -> float:
    factor = 10 ** digits
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled) / factor


def parse_frequency(value: Any) -> float:
    """'75%' -> 75.0; empty or non-numeric -> 50.0"""
    if value is None:
        return DEFAULT_FREQUENCY
    parsed = parse_leading_float(_NON_NUMERIC.sub("", str(value)))
    return DEFAULT_FREQUENCY if parsed is None else parsed


def parse_acceptance_rate(value: Any) -> float:
    """
    Acceptance rate as a percentage.

    Values <= 1 are fractions and are scaled by 100, so 1 becomes 100.0.
    Values above 100 are not clamped.
    """
    parsed = parse_leading_float(value)
    if parsed is None:
        return DEFAULT_ACCEPTANCE_RATE
    if parsed <= 1:
        parsed = parsed * 100
    return round_half_up(parsed, 2)


def normalize_row(headers: Sequence[str], values: Sequence[str], line_number: int = 0) -> NormalizeResult:
    """Build a NormalizedRow from one split line, or say why it was rejected"""
    raw = ",".join(values)
    if len(values) != len(headers):
        return RowRejection(line_number=line_number, reason="field_count_mismatch", raw=raw)

    row: RawRow = {header: clean_field(value) for header, value in zip(headers, values)}

    if not row.get("title"):
        return RowRejection(line_number=line_number, reason="missing_title", raw=raw)
    if not row.get("company"):
        return RowRejection(line_number=line_number, reason="missing_company", raw=raw)
    if not row.get("timeframe"):
        return RowRejection(line_number=line_number, reason="missing_timeframe", raw=raw)

    return NormalizedRow(
        difficulty=row.get("difficulty") or DEFAULT_DIFFICULTY,
        title=row["title"],
        frequency=parse_frequency(row.get("frequency")),
        acceptance_rate=parse_acceptance_rate(row.get("acceptance_rate")),
        link=row.get("link", ""),
        company=row["company"],
        timeframe=row["timeframe"],
        topics=row.get("topics", ""),
    )


def normalize_rows(
    headers: Sequence[str],
    lines: Sequence[NumberedLine],
    logger=None
) -> Tuple[List[NormalizedRow], List[RowRejection]]:
    """
    Normalize every data line, skipping malformed ones.

    Raises DataProcessingError if no valid row remains.
    """
    logger = logger or structlog.get_logger(__name__)
    rows: List[NormalizedRow] = []
    rejections: List[RowRejection] = []

    for line_number, line in lines:
        try:
            result = normalize_row(headers, split_csv_row(line), line_number)
        except (ValueError, ArithmeticError) as e:
            logger.warning("Row could not be parsed", line_number=line_number, error=str(e))
            result = RowRejection(line_number=line_number, reason="parse_error", raw=line)
        if isinstance(result, RowRejection):
            rejections.append(result)
            logger.debug("Skipping row", line_number=line_number, reason=result.reason)
        else:
            rows.append(result)

    if rejections:
        logger.warning(
            "Skipped malformed rows",
            rejected=len(rejections),
            accepted=len(rows),
        )

    if not rows:
        raise DataProcessingError(f"No valid rows found in CSV ({len(rejections)} rows rejected)")

    return rows, rejections
