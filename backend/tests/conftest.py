"""Shared fixtures: sample CSV text, faked HTTP, and an isolated store."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx
import pytest

from leetcode_analytics.core.config import Settings
from leetcode_analytics.services.data_processing import CSVIngestor, DataProcessor
from leetcode_analytics.services.github import GitHubClient
from leetcode_analytics.services.store import AnalyticsStore

HEADER = "difficulty,title,frequency,acceptance_rate,link,company,timeframe,topics"

SCENARIO_CSV = "\n".join([
    HEADER,
    'Easy,Q1,80%,0.5,https://leetcode.com/q1,Google,1 Month,Array',
    'Easy,Q1,70%,0.5,https://leetcode.com/q1,Meta,3 Months,"Array,Hash"',
    'Hard,Q2,40%,0.3,https://leetcode.com/q2,Google,1 Month,DP',
])

COMMITS_PAYLOAD = [
    {
        "sha": "abc1234def5678",
        "commit": {
            "author": {"name": "Octo Cat", "email": "octo@example.com", "date": "2024-05-01T12:00:00Z"},
            "message": "Update codedata.csv",
        },
        "html_url": "https://github.com/AlliterationofA/PublicFiles/commit/abc1234def5678",
    }
]


@pytest.fixture
def scenario_csv() -> str:
    return SCENARIO_CSV


@pytest.fixture
def local_csv(tmp_path: Path) -> Path:
    path = tmp_path / "codedata.csv"
    path.write_text(SCENARIO_CSV, encoding="utf-8")
    return path


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    def _make(**overrides) -> Settings:
        values = {
            "CSV_SOURCE_URL": "https://example.test/codedata.csv",
            "LOCAL_CSV_PATH": str(tmp_path / "missing.csv"),
            "GITHUB_API_URL": "https://api.github.test",
        }
        values.update(overrides)
        return Settings(**values)

    return _make


def csv_transport(
    csv_text: str | None = SCENARIO_CSV,
    status_code: int = 200,
    calls: list | None = None,
) -> httpx.MockTransport:
    """Transport answering the CSV URL and the GitHub commits endpoint"""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        if "/commits" in request.url.path:
            return httpx.Response(200, json=COMMITS_PAYLOAD)
        if csv_text is None:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(status_code, text=csv_text)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_store(make_settings) -> Callable[..., AnalyticsStore]:
    def _make(transport: httpx.MockTransport | None = None, **overrides) -> AnalyticsStore:
        settings = make_settings(**overrides)
        transport = transport or csv_transport()
        return AnalyticsStore(
            ingestor=CSVIngestor(settings, transport=transport),
            github=GitHubClient(settings, transport=transport),
            processor=DataProcessor(),
        )

    return _make
