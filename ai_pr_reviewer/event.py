"""Read the workflow event payload and derive the pull request under review."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from ai_pr_reviewer.config import ConfigurationError
from ai_pr_reviewer.models.review import PullRequestRef


class NotApplicableEvent(RuntimeError):
    """Raised when the triggering event carries no pull request to review."""


def load_event_payload(event_path: str) -> Dict[str, Any]:
    path = Path(event_path)
    if not path.is_file():
        raise ConfigurationError(f"GitHub event payload not found: {event_path}")

    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Unable to read GitHub event payload {event_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"GitHub event payload {event_path} is not a JSON object.")
    return payload


def split_full_name(full_name: str) -> tuple[str, str]:
    owner, _, repo = full_name.partition("/")
    if not owner or not repo:
        raise ConfigurationError(f"Repository full name '{full_name}' is invalid.")
    return owner, repo


def pull_request_from_event(payload: Dict[str, Any], repository: str | None = None) -> PullRequestRef:
    """Build a :class:`PullRequestRef` from a ``pull_request`` event payload.

    ``repository`` (``owner/name``) wins over the payload's own
    ``repository.full_name``.
    """

    pr_info = payload.get("pull_request")
    if not pr_info:
        raise NotApplicableEvent("Event is not pull_request; exiting.")

    full_name = repository or (payload.get("repository") or {}).get("full_name")
    if not full_name:
        raise ConfigurationError("Repository information missing.")
    owner, repo = split_full_name(full_name)

    number = pr_info.get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        raise ConfigurationError(f"Pull request payload has no usable number: {number!r}")

    return PullRequestRef(
        owner=owner,
        repository_name=repo,
        pull_number=number,
        base_sha=(pr_info.get("base") or {}).get("sha"),
        head_sha=(pr_info.get("head") or {}).get("sha"),
    )
