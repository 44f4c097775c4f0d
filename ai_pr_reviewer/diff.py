"""Build the review diff from GitHub's per-file patch listing."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from ai_pr_reviewer.github_client import GitHubClient
from ai_pr_reviewer.logger import get_logger, log_with_context
from ai_pr_reviewer.models.review import FilePatch, PullRequestRef

logger = get_logger()

PATCH_SEPARATOR = "\n\n"


def serialize_files(files: List[Dict[str, Any]]) -> List[FilePatch]:
    serialized: List[FilePatch] = []
    for file in files:
        # GitHub API may return "filename" or "path" depending on endpoint
        path = file.get("filename") or file.get("path") or ""
        if not path:
            logger.warning(f"File entry missing filename/path: {file}")
        patch = file.get("patch")
        serialized.append(FilePatch(path=path, patch=patch if isinstance(patch, str) else None))
    return serialized


def aggregate_diff(files: Iterable[FilePatch]) -> str:
    """Join every present patch, in listing order, with a blank line between them.

    Files without a patch (binary or too large for GitHub to inline) are
    skipped. Returns an empty string when nothing is left.
    """

    return PATCH_SEPARATOR.join(file.patch for file in files if isinstance(file.patch, str))


async def fetch_pull_request_diff(client: GitHubClient, pull_request: PullRequestRef) -> str:
    ctx_logger = log_with_context(logger, repository=pull_request.full_name, pull_number=pull_request.pull_number)

    raw_files = await client.list_pull_request_files(pull_request)
    files = serialize_files(raw_files)
    without_patch = sum(1 for file in files if file.patch is None)
    ctx_logger.debug(f"PR files fetched: {len(files)} file(s), {without_patch} without patch")

    return aggregate_diff(files)
