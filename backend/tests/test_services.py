"""Tests for the snapshot store and the GitHub commit client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import csv_transport
from leetcode_analytics.core.errors import DataUnavailableError
from leetcode_analytics.services.data_processing import CSVIngestor, DataProcessor
from leetcode_analytics.services.github import GitHubClient
from leetcode_analytics.services.store import AnalyticsStore


def test_refresh_builds_snapshot_with_commit_metadata(make_store) -> None:
    store = make_store()

    snapshot = asyncio.run(store.refresh())

    assert store.snapshot is snapshot
    assert snapshot.metadata.source == "remote"
    assert snapshot.metadata.last_commit_hash == "abc1234def5678"
    assert snapshot.metadata.last_updated == "2024-05-01T12:00:00Z"
    assert len(snapshot.questions) == 2


def test_concurrent_refreshes_share_one_fetch(make_store) -> None:
    calls: list[str] = []
    store = make_store(transport=csv_transport(calls=calls))

    async def run_both():
        return await asyncio.gather(store.refresh(), store.refresh())

    first, second = asyncio.run(run_both())

    assert first is second
    assert store.refresh_count == 1
    assert len([url for url in calls if url.endswith("codedata.csv")]) == 1


def test_sequential_refreshes_fetch_again(make_store) -> None:
    store = make_store()

    asyncio.run(store.refresh())
    asyncio.run(store.refresh())

    assert store.refresh_count == 2


def test_failed_refresh_keeps_previous_snapshot(make_store) -> None:
    store = make_store()
    previous = asyncio.run(store.refresh())
    store.ingestor.transport = csv_transport(None)

    with pytest.raises(DataUnavailableError):
        asyncio.run(store.refresh())

    assert store.snapshot is previous


def test_local_fallback_skips_commit_lookup(make_store, local_csv) -> None:
    calls: list[str] = []
    store = make_store(transport=csv_transport(None, calls=calls), LOCAL_CSV_PATH=str(local_csv))

    snapshot = asyncio.run(store.get_snapshot())

    assert snapshot.metadata.source == "local"
    assert snapshot.metadata.last_commit_hash is None
    assert not any("/commits" in url for url in calls)


def test_commit_info_parsed_from_api(make_settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{
            "sha": "deadbeef",
            "commit": {"author": {"name": "Dev", "date": "2024-01-02T00:00:00Z"}, "message": "Refresh data"},
            "html_url": "https://github.com/o/r/commit/deadbeef",
        }])

    client = GitHubClient(make_settings(), transport=httpx.MockTransport(handler))

    info = asyncio.run(client.get_last_commit_info())

    assert (info.sha, info.author, info.message) == ("deadbeef", "Dev", "Refresh data")
    assert seen[0].url.params["path"] == "codedata.csv"
    assert seen[0].url.params["per_page"] == "1"
    assert seen[0].headers["Accept"] == "application/vnd.github.v3+json"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(403, json={"message": "rate limited"}),
        httpx.Response(500),
        httpx.Response(200, json=[]),
        httpx.Response(200, text="not json"),
    ],
)
def test_commit_info_falls_back_instead_of_raising(make_settings, response) -> None:
    client = GitHubClient(make_settings(), transport=httpx.MockTransport(lambda request: response))

    info = asyncio.run(client.get_last_commit_info())

    assert info.sha == "unknown"
    assert info.url == "https://github.com/AlliterationofA/PublicFiles/commits"


def test_commit_info_falls_back_on_connection_error(make_settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    client = GitHubClient(make_settings(), transport=httpx.MockTransport(handler))

    assert asyncio.run(client.get_last_commit_info()).sha == "unknown"


class GatedIngestor(CSVIngestor):
    """Ingestor whose load waits until the test opens the gate"""

    def __init__(self, settings, transport):
        super().__init__(settings, transport=transport)
        self.gate = asyncio.Event()

    async def load(self):
        await self.gate.wait()
        return await super().load()


def gated_store(settings) -> AnalyticsStore:
    transport = csv_transport()
    return AnalyticsStore(
        ingestor=GatedIngestor(settings, transport),
        github=GitHubClient(settings, transport=transport),
        processor=DataProcessor(),
    )


def test_cancelled_caller_does_not_cancel_shared_refresh(make_settings) -> None:
    async def scenario():
        store = gated_store(make_settings())
        first = asyncio.ensure_future(store.refresh())
        await asyncio.sleep(0)
        second = asyncio.ensure_future(store.refresh())
        await asyncio.sleep(0)

        first.cancel()
        await asyncio.sleep(0)
        store.ingestor.gate.set()
        return store, first, await second

    store, first, snapshot = asyncio.run(scenario())

    assert first.cancelled()
    assert store.snapshot is snapshot
    assert store.refresh_count == 1


def test_upload_during_refresh_stays_current(make_settings, scenario_csv) -> None:
    async def scenario():
        store = gated_store(make_settings())
        pending = asyncio.ensure_future(store.refresh())
        await asyncio.sleep(0)

        uploaded = store.build_from_text(scenario_csv)
        store.ingestor.gate.set()
        await pending
        return store, uploaded

    store, uploaded = asyncio.run(scenario())

    assert store.snapshot is uploaded
    assert store.snapshot.metadata.source == "upload"


def test_refresh_after_upload_replaces_it(make_store, scenario_csv) -> None:
    store = make_store()
    store.build_from_text(scenario_csv)

    snapshot = asyncio.run(store.refresh())

    assert store.snapshot is snapshot
    assert snapshot.metadata.source == "remote"
