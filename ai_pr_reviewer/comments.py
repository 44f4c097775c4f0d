"""Single marker-tagged review comment per pull request."""

from __future__ import annotations

from typing import Any, Dict, Iterable

from ai_pr_reviewer.github_client import GitHubClient
from ai_pr_reviewer.logger import get_logger, log_with_context
from ai_pr_reviewer.models.review import CommentPublication, ExistingComment, PullRequestRef

logger = get_logger()

MARKER = "<!-- ai-pr-reviewer -->"
SECTION_LABEL = "Найденные проблемы:"
TRAILING_NOTE = "Обновлено автоматически после последнего push."


def build_comment_body(model: str, message: str) -> str:
    return "\n".join(
        [
            MARKER,
            f"AI Code Review (model: {model})",
            SECTION_LABEL,
            message,
            TRAILING_NOTE,
        ]
    )


def find_marker_comment(comments: Iterable[Dict[str, Any]]) -> ExistingComment | None:
    """Return the first comment whose body carries the marker, in listing order."""

    for comment in comments:
        if not isinstance(comment, dict):
            continue
        body = comment.get("body")
        if isinstance(body, str) and MARKER in body:
            return ExistingComment(id=comment["id"], body=body)
    return None


async def upsert_review_comment(
    client: GitHubClient, pull_request: PullRequestRef, body: str
) -> CommentPublication:
    """Replace the existing marker comment, or create one if there is none.

    Older duplicates (left behind by concurrent runs) are never touched;
    only the first match is updated.
    """

    ctx_logger = log_with_context(logger, repository=pull_request.full_name, pull_number=pull_request.pull_number)

    comments = await client.list_issue_comments(pull_request)
    existing = find_marker_comment(comments)
    ctx_logger.debug(f"Scanned {len(comments)} comment(s), marker comment: {existing.id if existing else 'none'}")

    if existing is not None:
        result = await client.update_issue_comment(pull_request, existing.id, body)
        created = False
    else:
        result = await client.create_issue_comment(pull_request, body)
        created = True

    comment_id = result.get("id") if isinstance(result, dict) else None
    if comment_id is None and existing is not None:
        comment_id = existing.id
    return CommentPublication(comment_id=comment_id, created=created)
