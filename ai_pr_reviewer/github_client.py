"""GitHub REST helpers for pull request files and issue comments."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from ai_pr_reviewer.http_client import HTTPClient, TransportError
from ai_pr_reviewer.models.review import PullRequestRef
from ai_pr_reviewer.pagination import PAGE_SIZE, collect_pages


class GitHubAPIError(TransportError):
    """Raised when a GitHub API request fails."""


DEFAULT_ACCEPT_HEADER = "application/vnd.github+json"
DEFAULT_API_VERSION = "2022-11-28"
USER_AGENT = "ai-pr-reviewer"


class GitHubClient(HTTPClient):
    """Token-authenticated client for the endpoints a review run touches."""

    error_class = GitHubAPIError
    service_name = "GitHub API"

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": DEFAULT_ACCEPT_HEADER,
                "Authorization": f"Bearer {token}",
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": DEFAULT_API_VERSION,
            },
        )

    async def _get_page(
        self, url: str, page: int, *, what: str, required_keys: tuple[str, ...] = ()
    ) -> List[Dict[str, Any]]:
        response = await self.send("GET", url, params={"per_page": PAGE_SIZE, "page": page})
        batch = self.decode(response)
        if not isinstance(batch, list):
            raise GitHubAPIError(
                f"Unexpected response while listing {what}.",
                response.status_code,
                batch,
            )
        for item in batch:
            if not isinstance(item, dict) or any(key not in item for key in required_keys):
                raise GitHubAPIError(
                    f"Malformed entry while listing {what}: {item!r}",
                    response.status_code,
                    batch,
                )
        return batch

    async def list_pull_request_files(self, pull_request: PullRequestRef) -> List[Dict[str, Any]]:
        url = (
            f"/repos/{pull_request.owner}/{pull_request.repository_name}"
            f"/pulls/{pull_request.pull_number}/files"
        )

        async def fetch_page(page: int) -> List[Dict[str, Any]]:
            return await self._get_page(url, page, what="pull request files")

        return await collect_pages(fetch_page)

    async def list_issue_comments(self, pull_request: PullRequestRef) -> List[Dict[str, Any]]:
        url = (
            f"/repos/{pull_request.owner}/{pull_request.repository_name}"
            f"/issues/{pull_request.pull_number}/comments"
        )

        async def fetch_page(page: int) -> List[Dict[str, Any]]:
            return await self._get_page(url, page, what="issue comments", required_keys=("id",))

        return await collect_pages(fetch_page)

    async def create_issue_comment(self, pull_request: PullRequestRef, body: str) -> Dict[str, Any]:
        return await self.request(
            "POST",
            f"/repos/{pull_request.owner}/{pull_request.repository_name}"
            f"/issues/{pull_request.pull_number}/comments",
            json={"body": body},
        )

    async def update_issue_comment(
        self, pull_request: PullRequestRef, comment_id: int, body: str
    ) -> Dict[str, Any]:
        return await self.request(
            "PATCH",
            f"/repos/{pull_request.owner}/{pull_request.repository_name}/issues/comments/{comment_id}",
            json={"body": body},
        )
