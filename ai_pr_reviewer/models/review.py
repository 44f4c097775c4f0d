"""Shared data structures for one review run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PullRequestRef:
    owner: str
    repository_name: str
    pull_number: int
    base_sha: str | None = None
    head_sha: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository_name}"


@dataclass(slots=True)
class FilePatch:
    path: str
    patch: str | None = None


@dataclass(frozen=True, slots=True)
class ReviewSuccess:
    text: str


@dataclass(frozen=True, slots=True)
class ReviewFailure:
    error_message: str


ReviewResult = ReviewSuccess | ReviewFailure


@dataclass(frozen=True, slots=True)
class ExistingComment:
    id: int
    body: str


@dataclass(frozen=True, slots=True)
class CommentPublication:
    comment_id: int | None
    created: bool
