"""
GitHub commit metadata for the questions CSV.

Used only to label a snapshot with when its source file last changed, so every
failure degrades to placeholder commit info instead of raising.
"""

from datetime import datetime, timezone
from typing import Optional
import httpx
import structlog

from leetcode_analytics.core.config import Settings, settings as default_settings
from leetcode_analytics.services.data_processing.types import CommitInfo

logger = structlog.get_logger()


class GitHubClient:
    """Minimal client for the GitHub commits API"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or default_settings
        self.transport = transport

    @property
    def commits_page_url(self) -> str:
        return f"https://github.com/{self.settings.GITHUB_OWNER}/{self.settings.GITHUB_REPO}/commits"

    def fallback_commit_info(self, message: str = "Unable to fetch commit info") -> CommitInfo:
        return CommitInfo(
            sha="unknown",
            author="Unknown",
            date=datetime.now(timezone.utc).isoformat(),
            message=message,
            url=self.commits_page_url,
        )

    async def get_last_commit_info(self, file_path: Optional[str] = None) -> CommitInfo:
        """Latest commit touching ``file_path`` (defaults to the configured CSV path)"""
        s = self.settings
        url = f"{s.GITHUB_API_URL}/repos/{s.GITHUB_OWNER}/{s.GITHUB_REPO}/commits"
        params = {"path": file_path or s.GITHUB_CSV_PATH, "per_page": 1}
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": s.GITHUB_USER_AGENT,
        }

        logger.info("Fetching last commit info", owner=s.GITHUB_OWNER, repo=s.GITHUB_REPO, path=params["path"])

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Failed to fetch GitHub commit info", error=str(e))
            return self.fallback_commit_info()

        if response.status_code == 403:
            logger.warning("GitHub API rate limit exceeded, using fallback")
            return self.fallback_commit_info("Unable to fetch commit info (rate limited)")

        if not response.is_success:
            logger.error("GitHub API error", status_code=response.status_code)
            return self.fallback_commit_info()

        try:
            commits = response.json()
            last = commits[0]
            info = CommitInfo(
                sha=last["sha"],
                author=last["commit"]["author"]["name"],
                date=last["commit"]["author"]["date"],
                message=last["commit"]["message"],
                url=last["html_url"],
            )
        except (ValueError, LookupError, TypeError) as e:
            logger.error("Unexpected GitHub commits payload", error=str(e))
            return self.fallback_commit_info()

        logger.info(
            "Successfully fetched last commit info",
            sha=info.sha[:7],
            date=info.date,
            message=info.message[:50],
        )
        return info
