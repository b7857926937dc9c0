"""
Error taxonomy for the analytics pipeline.

Every expected failure is an ``AppError`` carrying a machine-readable code and
the HTTP status the API should answer with. ``is_operational`` separates
user-recoverable conditions (bad upload, GitHub down) from genuine bugs.
"""

from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger()


class AppError(Exception):
    """Base class for errors surfaced to API clients"""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        status_code: int = 500,
        is_operational: bool = True
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.is_operational = is_operational
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the API error payload"""
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(AppError):
    """Raised when CSV structure or an upload is malformed"""
    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR", 400)


class NetworkError(AppError):
    """Raised when a remote fetch fails or returns a non-2xx status"""
    def __init__(self, message: str):
        super().__init__(message, "NETWORK_ERROR", 503)


class DataProcessingError(AppError):
    """Raised when parsing or aggregation cannot produce a snapshot"""
    def __init__(self, message: str):
        super().__init__(message, "DATA_PROCESSING_ERROR", 422)


class FileError(AppError):
    """Raised when a local file cannot be read"""
    def __init__(self, message: str):
        super().__init__(message, "FILE_ERROR", 400)


class DataUnavailableError(AppError):
    """Raised when neither the remote source nor the local copy can be read"""
    def __init__(self, message: str = "No data available. Please upload a CSV file first."):
        super().__init__(message, "NO_DATA_AVAILABLE", 404)


def handle_error(error: BaseException, context: str = "Unknown") -> AppError:
    """
    Map any exception onto the AppError taxonomy and log it.

    Known AppErrors pass through unchanged. Other exceptions are classified by
    their message; anything unrecognised becomes a non-operational
    UNKNOWN_ERROR.
    """
    logger.error(f"Error in {context}", error=str(error), error_type=type(error).__name__)

    if isinstance(error, AppError):
        return error

    message = str(error)
    lowered = message.lower()

    if "fetch" in lowered or "network" in lowered or "connect" in lowered:
        return NetworkError(f"Network error: {message}")

    if "file" in lowered or "upload" in lowered:
        return FileError(f"File error: {message}")

    if "json" in lowered or "parse" in lowered:
        return DataProcessingError(f"Data parsing error: {message}")

    return AppError(message or "An unexpected error occurred", "UNKNOWN_ERROR", 500, False)


def error_response(error: BaseException, context: str = "Unknown") -> JSONResponse:
    """JSON error payload carrying the status code of the mapped AppError"""
    app_error = handle_error(error, context)
    return JSONResponse(status_code=app_error.status_code, content=app_error.to_dict())
