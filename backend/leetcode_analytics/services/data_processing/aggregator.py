"""Question aggregation and deduplication"""

from typing import Dict, Iterable, List

import structlog

from .types import NormalizedRow, Question


def aggregate_questions(rows: Iterable[NormalizedRow], logger=None) -> List[Question]:
    """
    Merge rows sharing a title into one Question.

    The first row seen for a title fixes difficulty, frequency, acceptance
    rate, link and topics; later rows only contribute their company and
    timeframe and are appended to ``original_rows``.
    """
    logger = logger or structlog.get_logger(__name__)
    grouped: Dict[str, Dict] = {}

    for row in rows:
        title = row.title.strip()
        if not title:
            continue

        entry = grouped.get(title)
        if entry is None:
            entry = {
                "first": row,
                "companies": set(),
                "timeframes": set(),
                "original_rows": [],
            }
            grouped[title] = entry

        if row.company.strip():
            entry["companies"].add(row.company.strip())
        if row.timeframe.strip():
            entry["timeframes"].add(row.timeframe.strip())
        entry["original_rows"].append(row)

    questions = []
    for title, entry in grouped.items():
        if not entry["companies"]:
            logger.debug("Dropping question without companies", title=title)
            continue

        first = entry["first"]
        companies = sorted(entry["companies"])
        timeframes = sorted(entry["timeframes"])
        questions.append(Question(
            title=title,
            difficulty=first.difficulty,
            frequency=first.frequency,
            acceptance_rate=first.acceptance_rate,
            link=first.link.strip(),
            topics=first.topics.strip(),
            company=companies[0],
            timeframe=timeframes[0] if timeframes else "",
            companies=companies,
            timeframes=timeframes,
            original_rows=entry["original_rows"],
        ))

    questions.sort(key=lambda q: (q.title.casefold(), q.title))
    logger.info("Aggregated questions", rows=sum(q.occurrences for q in questions), questions=len(questions))
    return questions
