"""
Analytics API Routes

Serves the current snapshot and runs the filter/sort engine against it.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import Optional
import structlog

from leetcode_analytics.core.errors import error_response
from leetcode_analytics.services.data_processing import (
    FilterState,
    SortState,
    collect_filter_options,
    query_questions,
)
from leetcode_analytics.services.store import AnalyticsStore, get_store

logger = structlog.get_logger()
router = APIRouter()


class QuestionQuery(BaseModel):
    filters: FilterState = Field(default_factory=FilterState)
    sort: SortState = Field(default_factory=SortState)
    offset: int = Field(0, ge=0)
    limit: Optional[int] = Field(None, ge=1)


@router.get("")
async def get_analytics(store: AnalyticsStore = Depends(get_store)):
    """Current analytics snapshot, loading it if none exists yet"""
    try:
        snapshot = await store.get_snapshot()
        return {"success": True, "data": snapshot}
    except Exception as e:
        return error_response(e, "Get analytics")


@router.post("/refresh")
async def refresh_analytics(store: AnalyticsStore = Depends(get_store)):
    """Rebuild the snapshot from source"""
    try:
        snapshot = await store.refresh()
        return {"success": True, "data": snapshot}
    except Exception as e:
        return error_response(e, "Refresh analytics")


@router.get("/options")
async def get_filter_options(store: AnalyticsStore = Depends(get_store)):
    """Distinct values and numeric bounds for the filter controls"""
    try:
        snapshot = await store.get_snapshot()
        return {
            "success": True,
            "data": {
                "options": collect_filter_options(snapshot.questions),
                "ranges": snapshot.ranges
            }
        }
    except Exception as e:
        return error_response(e, "Filter options")


@router.post("/questions")
async def search_questions(query: QuestionQuery, store: AnalyticsStore = Depends(get_store)):
    """Filtered and sorted questions from the current snapshot"""
    try:
        snapshot = await store.get_snapshot()
        results = query_questions(snapshot.questions, query.filters, query.sort, snapshot.ranges)

        end = query.offset + query.limit if query.limit else None
        page = results[query.offset:end]

        logger.info(
            "Questions query",
            total=len(results),
            returned=len(page),
            sort_field=query.sort.field,
            sort_direction=query.sort.direction
        )

        return {
            "success": True,
            "data": {
                "questions": page,
                "total": len(results),
                "ranges": snapshot.ranges
            }
        }
    except Exception as e:
        return error_response(e, "Questions query")
