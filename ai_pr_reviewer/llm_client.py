"""OpenRouter chat-completions client and the review generation step."""

from __future__ import annotations

from typing import Any, Dict

import httpx

from ai_pr_reviewer.config import DIFF_PLACEHOLDER, Settings, ensure_prompt_template
from ai_pr_reviewer.http_client import HTTPClient, TransportError
from ai_pr_reviewer.logger import get_logger, log_timing
from ai_pr_reviewer.models.review import ReviewFailure, ReviewResult, ReviewSuccess

logger = get_logger()

DEFAULT_TITLE = "ai-pr-reviewer"


class GenerationError(TransportError):
    """Raised when the text-generation backend fails or returns no usable text."""


def render_prompt(template: str, diff: str) -> str:
    """Substitute ``diff`` into every placeholder occurrence, verbatim."""

    return template.replace(DIFF_PLACEHOLDER, diff)


def build_openrouter_headers(
    api_key: str, *, repository: str | None = None, server_url: str | None = None
) -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
        "X-Title": repository or DEFAULT_TITLE,
    }
    if server_url and repository:
        headers["HTTP-Referer"] = f"{server_url}/{repository}"
    return headers


def _content_text(content: Any) -> str | None:
    if isinstance(content, str):
        return content
    # some providers answer with a list of typed content parts
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text" and isinstance(part.get("text"), str):
                parts.append(part["text"])
            else:
                return None
        return "".join(parts)
    return None


def extract_message_content(data: Any, status_code: int = 200) -> str:
    """Pull ``choices[0].message.content`` out of a chat-completions response."""

    if not isinstance(data, dict):
        raise GenerationError("OpenRouter response is not a JSON object.", status_code, data)
    choices = data.get("choices")
    content = None
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict):
            content = message.get("content")
    if content is None:
        raise GenerationError("OpenRouter response missing message content.", status_code, data)
    text = _content_text(content)
    if text is None:
        raise GenerationError(f"OpenRouter message content has unsupported type: {content!r}", status_code, data)
    text = text.strip()
    if not text:
        raise GenerationError("OpenRouter response missing message content.", status_code, data)
    return text


class OpenRouterClient(HTTPClient):
    error_class = GenerationError
    service_name = "OpenRouter"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        repository: str | None = None,
        server_url: str | None = None,
        timeout: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers=build_openrouter_headers(api_key, repository=repository, server_url=server_url),
        )
        self.model = model

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        repository: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OpenRouterClient":
        return cls(
            api_key=settings.openrouter_api_key,
            model=settings.model,
            base_url=settings.normalized_llm_api_base_url,
            repository=repository or settings.repository,
            server_url=settings.normalized_github_server_url,
            timeout=settings.llm_timeout_seconds,
            transport=transport,
        )

    async def complete(self, prompt: str) -> str:
        """Send a single-message chat completion and return the reply text."""

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        response = await self.send("POST", "/chat/completions", json=payload)
        logger.info(f"OpenRouter responded with status: {response.status_code}")
        return extract_message_content(self.decode(response), response.status_code)


async def generate_review(client: OpenRouterClient, template: str, diff: str) -> ReviewResult:
    """Run the review prompt through ``client`` and capture the outcome as data.

    Backend failures never escape: they come back as :class:`ReviewFailure`
    so the caller can still publish a comment. A template without the
    placeholder is a configuration problem and does raise.
    """

    ensure_prompt_template(template)
    prompt = render_prompt(template, diff)
    logger.debug(f"Prompt built: {len(prompt)} characters")

    try:
        with log_timing(logger, "openrouter_completion", model=client.model):
            text = await client.complete(prompt)
    except GenerationError as exc:
        if exc.status_code:
            logger.warning(f"OpenRouter responded with status: {exc.status_code}")
        return ReviewFailure(error_message=str(exc))
    return ReviewSuccess(text=text)
