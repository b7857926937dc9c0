"""Type definitions for data processing"""

from typing import Dict, List, Optional, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

SortField = Literal["title", "difficulty", "frequency", "acceptance_rate", "timeframe", "occurrences"]
SortDirection = Literal["asc", "desc"]
FilterMode = Literal["and", "or"]
DataSource = Literal["remote", "local", "upload"]

REQUIRED_COLUMNS = (
    "difficulty",
    "title",
    "frequency",
    "acceptance_rate",
    "link",
    "company",
    "timeframe",
    "topics",
)


class SnapshotModel(BaseModel):
    """Base for snapshot records: fields cannot be reassigned, list fields are shared as-is"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class NormalizedRow(SnapshotModel):
    """One CSV line with defaults applied and numeric fields coerced"""
    difficulty: str
    title: str
    frequency: float
    acceptance_rate: float
    link: str = ""
    company: str
    timeframe: str
    topics: str = ""


class RowRejection(SnapshotModel):
    """Why a CSV line did not become a NormalizedRow"""
    line_number: int = Field(alias="lineNumber")
    reason: Literal["field_count_mismatch", "missing_title", "missing_company", "missing_timeframe", "parse_error"]
    raw: str = ""


class Question(SnapshotModel):
    """A problem aggregated across every company/timeframe row sharing its title"""
    title: str
    difficulty: str
    frequency: float
    acceptance_rate: float
    link: str = ""
    topics: str = ""
    company: str = ""
    timeframe: str = ""
    companies: List[str] = Field(default_factory=list)
    timeframes: List[str] = Field(default_factory=list)
    original_rows: List[NormalizedRow] = Field(default_factory=list, alias="originalRows")

    @computed_field
    @property
    def occurrences(self) -> int:
        return len(self.original_rows or [])


class CompanyRollup(SnapshotModel):
    """Per-company question counts bucketed by timeframe"""
    name: str
    total_problems: int = Field(0, alias="totalProblems")
    thirty_days: int = Field(0, alias="thirtyDays")
    three_months: int = Field(0, alias="threeMonths")
    six_months: int = Field(0, alias="sixMonths")
    more_than_six_months: int = Field(0, alias="moreThanSixMonths")
    all: int = 0


class DistributionEntry(SnapshotModel):
    name: str
    value: int
    color: Optional[str] = None


class TopicCount(SnapshotModel):
    name: str
    count: int


class RangeStats(SnapshotModel):
    min: float
    max: float


class RangeStatsSet(SnapshotModel):
    occurrences: RangeStats
    frequency: RangeStats
    acceptance: RangeStats


class SnapshotStats(SnapshotModel):
    total_problems: int = Field(alias="totalProblems")
    total_companies: int = Field(alias="totalCompanies")
    difficulty_distribution: List[DistributionEntry] = Field(alias="difficultyDistribution")
    timeframe_distribution: List[DistributionEntry] = Field(alias="timeframeDistribution")
    top_topics: List[TopicCount] = Field(alias="topTopics")


class CommitInfo(SnapshotModel):
    """Last commit touching the CSV file in its source repository"""
    sha: str
    author: str = "Unknown"
    date: str
    message: str = ""
    url: str = ""


class SnapshotMetadata(SnapshotModel):
    last_updated: Optional[str] = Field(None, alias="lastUpdated")
    last_commit_hash: Optional[str] = Field(None, alias="lastCommitHash")
    commit_url: Optional[str] = Field(None, alias="commitUrl")
    commit_author: Optional[str] = Field(None, alias="commitAuthor")
    commit_message: Optional[str] = Field(None, alias="commitMessage")
    source: DataSource = "remote"
    processed_at: str = Field(alias="processedAt")
    rows_processed: int = Field(0, alias="rowsProcessed")
    rows_rejected: int = Field(0, alias="rowsRejected")


class AnalyticsSnapshot(SnapshotModel):
    """Everything derived from one ingestion cycle"""
    questions: List[Question]
    companies: List[CompanyRollup]
    stats: SnapshotStats
    ranges: RangeStatsSet
    metadata: SnapshotMetadata


class FilterOptions(SnapshotModel):
    companies: List[str]
    difficulties: List[str]
    timeframes: List[str]
    topics: List[str]


class RangeFilter(BaseModel):
    """Inclusive numeric bounds; None leaves that side at the global stat"""
    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class FilterState(BaseModel):
    """User-controlled filter selections"""
    model_config = ConfigDict(populate_by_name=True)

    search_term: str = Field("", alias="searchTerm")
    selected_companies: List[str] = Field(default_factory=list, alias="selectedCompanies")
    selected_difficulties: List[str] = Field(default_factory=list, alias="selectedDifficulties")
    selected_timeframes: List[str] = Field(default_factory=list, alias="selectedTimeframes")
    selected_topics: List[str] = Field(default_factory=list, alias="selectedTopics")
    show_multi_company: bool = Field(False, alias="showMultiCompany")
    company_filter_mode: FilterMode = Field("or", alias="companyFilterMode")
    topic_filter_mode: FilterMode = Field("or", alias="topicFilterMode")
    occurrences_range: RangeFilter = Field(default_factory=RangeFilter, alias="occurrencesRange")
    frequency_range: RangeFilter = Field(default_factory=RangeFilter, alias="frequencyRange")
    acceptance_range: RangeFilter = Field(default_factory=RangeFilter, alias="acceptanceRange")


class SortState(BaseModel):
    field: SortField = "title"
    direction: SortDirection = "asc"


NormalizeResult = Union[NormalizedRow, RowRejection]
RawRow = Dict[str, str]
