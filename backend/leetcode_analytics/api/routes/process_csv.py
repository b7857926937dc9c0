"""
Process CSV API Routes

Row-level filtering straight from the source CSV, and snapshot builds from an
uploaded file or the local copy.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from leetcode_analytics.core.config import settings
from leetcode_analytics.core.errors import DataUnavailableError, ValidationError, error_response, handle_error
from leetcode_analytics.services.data_processing import aggregate_questions, filter_rows, validate_upload
from leetcode_analytics.services.store import AnalyticsStore, get_store

logger = structlog.get_logger()
router = APIRouter()


@router.get("")
async def filter_csv_data(
    company: Optional[str] = None,
    difficulty: Optional[str] = None,
    timeframe: Optional[str] = None,
    search: Optional[str] = None,
    offset: int = Query(0, ge=0),
    store: AnalyticsStore = Depends(get_store)
):
    """Filter the raw CSV rows, then aggregate the survivors into questions"""

    logger.info(
        "Filtering CSV data",
        filters={
            "company": company,
            "difficulty": difficulty,
            "timeframe": timeframe,
            "search": search,
            "offset": offset
        }
    )

    try:
        text, source = await store.ingestor.load()
        rows, _ = store.processor.normalize_text(text)
        matched = filter_rows(rows, company=company, difficulty=difficulty, timeframe=timeframe, search=search)
        questions = aggregate_questions(matched)
        page = questions[offset:]

        logger.info(f"Filtered to {len(questions)} questions, showing {len(page)}", source=source)

        return {
            "success": True,
            "data": {
                "questions": page,
                "totalQuestions": len(questions)
            }
        }

    except DataUnavailableError as e:
        return JSONResponse(status_code=404, content={"success": False, "error": e.message})
    except Exception as e:
        app_error = handle_error(e, "CSV data filtering")
        return JSONResponse(status_code=500, content={"success": False, "error": app_error.message})


@router.post("")
async def process_csv(
    csvFile: Optional[UploadFile] = File(None),
    useLocalFile: Optional[str] = Form(None),
    store: AnalyticsStore = Depends(get_store)
):
    """Build and install a snapshot from an uploaded CSV or the local copy"""
    try:
        if csvFile is not None:
            content = await csvFile.read()
            text = validate_upload(csvFile.filename, content, settings.MAX_FILE_SIZE)
            snapshot = store.build_from_text(text, source="upload")
            logger.info("Processed uploaded CSV", filename=csvFile.filename, questions=len(snapshot.questions))
        elif (useLocalFile or "").lower() == "true":
            text = store.ingestor.read_local()
            snapshot = store.build_from_text(text, source="local")
            logger.info("Processed local CSV", questions=len(snapshot.questions))
        else:
            raise ValidationError("No CSV file provided")

        return {"success": True, "data": snapshot}

    except Exception as e:
        return error_response(e, "CSV processing")
