"""Sequences one review run: diff, review, comment."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import httpx

from ai_pr_reviewer.comments import build_comment_body, upsert_review_comment
from ai_pr_reviewer.config import Settings
from ai_pr_reviewer.diff import fetch_pull_request_diff
from ai_pr_reviewer.event import NotApplicableEvent, load_event_payload, pull_request_from_event
from ai_pr_reviewer.github_client import GitHubClient
from ai_pr_reviewer.llm_client import OpenRouterClient, generate_review
from ai_pr_reviewer.logger import get_logger, log_success, log_timing, log_with_context
from ai_pr_reviewer.models.review import (
    CommentPublication,
    PullRequestRef,
    ReviewFailure,
    ReviewResult,
    ReviewSuccess,
)

logger = get_logger()

EMPTY_DIFF_NOTICE = "Diff пуст"
GENERATION_FAILURE_PREFIX = "Не удалось получить ответ от OpenRouter: "


class RunState(str, Enum):
    INIT = "init"
    DIFF_FETCHED = "diff_fetched"
    REVIEW_GENERATED = "review_generated"
    REVIEW_FAILED = "review_failed"
    COMMENT_PUBLISHED = "comment_published"
    DONE = "done"
    NOT_APPLICABLE = "not_applicable"
    CONFIG_INVALID = "config_invalid"
    FAILED = "failed"


@dataclass
class RunResult:
    state: RunState
    pull_request: PullRequestRef | None = None
    review: ReviewResult | None = None
    review_text: str | None = None
    publication: CommentPublication | None = None


def review_text_for(result: ReviewResult) -> str:
    if isinstance(result, ReviewSuccess):
        return result.text
    return f"{GENERATION_FAILURE_PREFIX}{result.error_message}"


class ReviewRunner:
    """Runs the review for the pull request named by the event payload.

    Configuration and GitHub transport errors propagate to the caller.
    Generation failures do not: their message becomes the comment text.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        github_transport: httpx.AsyncBaseTransport | None = None,
        llm_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._github_transport = github_transport
        self._llm_transport = llm_transport
        self.state = RunState.INIT

    def _transition(self, state: RunState, ctx_logger=logger) -> None:
        ctx_logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state

    async def __call__(self) -> RunResult:
        settings = self._settings
        payload = load_event_payload(settings.event_path)
        try:
            pull_request = pull_request_from_event(payload, settings.repository)
        except NotApplicableEvent as exc:
            logger.info(str(exc))
            self._transition(RunState.NOT_APPLICABLE)
            return RunResult(state=self.state)

        ctx_logger = log_with_context(
            logger, repository=pull_request.full_name, pull_number=pull_request.pull_number
        )
        ctx_logger.info(
            f"Starting AI review for PR #{pull_request.pull_number} "
            f"({pull_request.base_sha} -> {pull_request.head_sha})"
        )
        ctx_logger.info(f"Using model: {settings.model}")

        github_client = GitHubClient(
            base_url=settings.normalized_github_api_url,
            token=settings.github_token,
            timeout=settings.github_timeout_seconds,
            transport=self._github_transport,
        )
        try:
            with log_timing(ctx_logger, "fetch_diff"):
                diff = await fetch_pull_request_diff(github_client, pull_request)
            self._transition(RunState.DIFF_FETCHED, ctx_logger)
            ctx_logger.info(f"Diff size (chars): {len(diff)}")

            review: ReviewResult | None = None
            if not diff:
                review_text = EMPTY_DIFF_NOTICE
                ctx_logger.info("No diff content; posting empty diff notice.")
            else:
                review = await self._generate(pull_request, diff)
                review_text = review_text_for(review)
                if isinstance(review, ReviewFailure):
                    self._transition(RunState.REVIEW_FAILED, ctx_logger)
                    ctx_logger.error(f"OpenRouter request failed: {review.error_message}")
                    ctx_logger.warning("Posting error message instead of analysis.")
                else:
                    self._transition(RunState.REVIEW_GENERATED, ctx_logger)

            body = build_comment_body(settings.model, review_text)
            with log_timing(ctx_logger, "publish_comment"):
                publication = await upsert_review_comment(github_client, pull_request, body)
            self._transition(RunState.COMMENT_PUBLISHED, ctx_logger)
            ctx_logger.info(
                f"Comment {'created' if publication.created else 'updated'} with ID: {publication.comment_id}"
            )
        finally:
            await github_client.aclose()

        self._transition(RunState.DONE, ctx_logger)
        log_success(logger, f"Review published for PR #{pull_request.pull_number}",
                    repository=pull_request.full_name)
        return RunResult(
            state=self.state,
            pull_request=pull_request,
            review=review,
            review_text=review_text,
            publication=publication,
        )

    async def _generate(self, pull_request: PullRequestRef, diff: str) -> ReviewResult:
        llm_client = OpenRouterClient.from_settings(
            self._settings,
            repository=pull_request.full_name,
            transport=self._llm_transport,
        )
        try:
            return await generate_review(llm_client, self._settings.prompt_template, diff)
        finally:
            await llm_client.aclose()
