"""CSV loading and quote-aware row splitting"""

from pathlib import Path
from typing import List, Optional, Tuple
import httpx
import structlog

from leetcode_analytics.core.config import Settings, settings as default_settings
from leetcode_analytics.core.errors import (
    DataUnavailableError,
    FileError,
    NetworkError,
    ValidationError,
)
from .types import REQUIRED_COLUMNS, DataSource

logger = structlog.get_logger()

NumberedLine = Tuple[int, str]


def split_csv_row(line: str) -> List[str]:
    """
    Split one CSV line into stripped field values.

    A double quote toggles the quoted state unless the character before it is
    a backslash; such an escaped quote is kept as a literal character. This is
    not RFC 4180: the published data set depends on exactly this behaviour,
    e.g. ``a,\\"b,d`` splits into ``['a', '\\"b', 'd']``.
    """
    values = []
    in_quote = False
    current = []

    for i, char in enumerate(line):
        if char == '"' and (i == 0 or line[i - 1] != "\\"):
            in_quote = not in_quote
        elif char == "," and not in_quote:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    values.append("".join(current).strip())
    return values


def clean_field(value: Optional[str]) -> str:
    """Trim a field and drop any literal double quotes left by the splitter"""
    if value is None:
        return ""
    return value.strip().replace('"', "").strip()


def parse_csv_text(text: str) -> Tuple[List[str], List[NumberedLine]]:
    """
    Split CSV text into cleaned headers and numbered data lines.

    Raises ValidationError when the text is empty or a required column is
    missing. Extra columns are allowed and ignored downstream.
    """
    if not text or not text.strip():
        raise ValidationError("CSV file is empty")

    lines = text.strip().split("\n")
    headers = [clean_field(header) for header in lines[0].split(",")]

    missing = [column for column in REQUIRED_COLUMNS if column not in headers]
    if missing:
        raise ValidationError(f"CSV is missing required columns: {', '.join(missing)}")

    # Line numbers are 1-based and count the header
    data_lines = [(number, line) for number, line in enumerate(lines[1:], start=2)]
    return headers, data_lines


def validate_upload(filename: Optional[str], content: bytes, max_size: int) -> str:
    """Check an uploaded CSV file and return its decoded text"""
    if not filename:
        raise ValidationError("No file selected")

    extension = Path(filename).suffix.lower()
    if extension != ".csv":
        raise ValidationError(
            f"Invalid file type. Please upload a CSV file (.csv extension). Got: {extension or 'none'}"
        )

    if len(content) > max_size:
        size_mb = len(content) / 1024 / 1024
        raise ValidationError(
            f"File too large. Maximum size is {max_size / 1024 / 1024:.0f}MB, got {size_mb:.1f}MB"
        )

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileError(f"CSV file is not valid UTF-8: {e}") from e

    if not text.strip():
        raise ValidationError("CSV file is empty")

    if len(text.strip().split("\n")) < 2:
        raise ValidationError("CSV file must have at least a header and one data row")

    logger.info("Upload validation passed", filename=filename, size=len(content))
    return text


class CSVIngestor:
    """Loads the questions CSV from the remote source, falling back to a local copy"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or default_settings
        self.transport = transport

    async def fetch_remote(self) -> str:
        """Single GET against the configured raw-file URL"""
        url = self.settings.CSV_SOURCE_URL
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to fetch CSV data: {e}") from e

        if not response.is_success:
            raise NetworkError(f"Failed to fetch CSV data: HTTP {response.status_code}")

        logger.info("Fetched remote CSV", url=url, size=len(response.content))
        return response.text

    def read_local(self) -> str:
        """Read the local fallback copy"""
        path = Path(self.settings.LOCAL_CSV_PATH)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileError(f"Failed to read local CSV file {path}: {e}") from e

        logger.info("Read local CSV", path=str(path), size=len(text))
        return text

    async def load(self) -> Tuple[str, DataSource]:
        """
        Return CSV text and where it came from.

        The remote source is tried once; any failure falls back to the local
        file. If that fails too, DataUnavailableError is raised so callers can
        tell "nothing to show" apart from a transient network problem.
        """
        try:
            return await self.fetch_remote(), "remote"
        except NetworkError as e:
            logger.warning("Remote CSV unavailable, falling back to local copy", error=e.message)

        try:
            return self.read_local(), "local"
        except FileError as e:
            logger.error("Local CSV unavailable", error=e.message)
            raise DataUnavailableError() from e
