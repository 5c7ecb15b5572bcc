from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from alert_issues.config import Settings
from alert_issues.errors import TransportError
from alert_issues.fetcher import AsyncFetcher, github_headers
from alert_issues.models import TrackedIssue


class IssueDirectory(Protocol):
    async def list_open_issues(self) -> list[TrackedIssue]: ...

    async def create_issue(self, title: str, body: str) -> TrackedIssue: ...

    async def close_issue(self, issue: TrackedIssue) -> None: ...


def parse_issue(item: Any) -> TrackedIssue:
    if not isinstance(item, dict):
        raise TransportError("Issue payload is not a JSON object")
    try:
        return TrackedIssue.model_validate(item)
    except ValidationError as exc:
        raise TransportError(f"Malformed issue payload: {exc.errors()[0]['msg']}") from exc


class GitHubIssueDirectory:
    """Issues of one GitHub repository. Every call goes to the API; nothing is cached."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        labels: list[str] | None = None,
        timeout_seconds: float = 10.0,
        max_pages: int = 50,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.labels = labels or []
        self._fetcher = AsyncFetcher(
            base_url=api_url,
            headers=github_headers(token),
            timeout_seconds=timeout_seconds,
            max_pages=max_pages,
            transport=transport,
        )
        self._log = structlog.get_logger().bind(component="issues", repository=f"{owner}/{repo}")

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> GitHubIssueDirectory:
        return cls(
            owner=settings.github_owner,
            repo=settings.github_repo,
            token=settings.github_token,
            api_url=settings.github_api_url,
            labels=settings.issue_labels,
            timeout_seconds=settings.request_timeout_seconds,
            max_pages=settings.max_pages,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubIssueDirectory:
        await self._fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self._fetcher.__aexit__(exc_type, exc, tb)

    @property
    def _issues_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/issues"

    async def list_open_issues(self) -> list[TrackedIssue]:
        items = await self._fetcher.get_json_pages(self._issues_path, params={"state": "open", "per_page": "100"})
        issues: list[TrackedIssue] = []
        for item in items:
            # The issues endpoint also returns pull requests.
            if isinstance(item, dict) and "pull_request" in item:
                continue
            issues.append(parse_issue(item))
        self._log.debug("open_issues_listed", count=len(issues))
        return issues

    async def create_issue(self, title: str, body: str) -> TrackedIssue:
        request_body: dict[str, Any] = {"title": title, "body": body}
        if self.labels:
            request_body["labels"] = self.labels
        payload = await self._fetcher.post_json(self._issues_path, request_body)
        issue = parse_issue(payload)
        self._log.info("issue_created", number=issue.number, title=issue.title)
        return issue

    async def close_issue(self, issue: TrackedIssue) -> None:
        await self._fetcher.patch_json(f"{self._issues_path}/{issue.number}", {"state": "closed"})
        self._log.info("issue_closed", number=issue.number, title=issue.title)
