"""
Pytest configuration and shared fixtures

In-memory fakes for the GitHub and OpenRouter HTTP APIs, served through
``httpx.MockTransport`` so no test touches the network.
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest


# ============================================================================
# Fake HTTP backends
# ============================================================================

class FakeGitHub:
    """Serves pull request files and issue comments the way the REST API pages them."""

    def __init__(self, files: List[Dict[str, Any]] | None = None, comments: List[Dict[str, Any]] | None = None):
        self.files = list(files or [])
        self.comments = list(comments or [])
        self.requests: List[httpx.Request] = []
        self.fail_with: Dict[str, int] = {}
        self._next_id = 5000

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @staticmethod
    def _page(items: List[Dict[str, Any]], request: httpx.Request) -> List[Dict[str, Any]]:
        page = int(request.url.params.get("page", "1"))
        per_page = int(request.url.params.get("per_page", "30"))
        start = (page - 1) * per_page
        return items[start:start + per_page]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for fragment, status in self.fail_with.items():
            if fragment in path:
                return httpx.Response(status, json={"message": "Server Error"})

        if request.method == "GET" and path.endswith("/files"):
            return httpx.Response(200, json=self._page(self.files, request))
        if request.method == "GET" and path.endswith("/comments"):
            return httpx.Response(200, json=self._page(self.comments, request))
        if request.method == "POST" and path.endswith("/comments"):
            self._next_id += 1
            comment = {"id": self._next_id, "body": json.loads(request.content)["body"]}
            self.comments.append(comment)
            return httpx.Response(201, json=comment)
        if request.method == "PATCH" and "/issues/comments/" in path:
            comment_id = int(path.rsplit("/", 1)[1])
            for comment in self.comments:
                if comment["id"] == comment_id:
                    comment["body"] = json.loads(request.content)["body"]
                    return httpx.Response(200, json=comment)
        return httpx.Response(404, json={"message": "Not Found"})

    def calls(self, method: str, suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(suffix)]

    def marker_comments(self, marker: str) -> List[Dict[str, Any]]:
        return [c for c in self.comments if marker in (c.get("body") or "")]


class FakeOpenRouter:
    """Answers chat-completion requests with a canned response."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: List[httpx.Request] = []
        self._responder = responder or (lambda request: completion_response("Looks good."))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def prompts(self) -> List[str]:
        return [json.loads(r.content)["messages"][0]["content"] for r in self.requests]


def completion_response(text: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"id": "gen-1", "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}]},
    )


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def fake_openrouter():
    return FakeOpenRouter()


# ============================================================================
# Event payload and environment fixtures
# ============================================================================

@pytest.fixture
def pull_request_event():
    """Minimal ``pull_request`` event payload as written by the Actions runner."""
    return {
        "action": "synchronize",
        "number": 7,
        "pull_request": {
            "number": 7,
            "base": {"sha": "base111", "ref": "main"},
            "head": {"sha": "head222", "ref": "feature"},
        },
        "repository": {"full_name": "octo/widgets"},
    }


@pytest.fixture
def write_event(tmp_path):
    def _write(payload: Dict[str, Any]) -> str:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def action_env(write_event, pull_request_event):
    """Environment mapping equivalent to a pull_request workflow run."""
    return {
        "INPUT_OPENROUTER_API_KEY": "or-test-key",
        "INPUT_MODEL": "test/model-1",
        "INPUT_PROMPT_TEMPLATE": "Review this diff:\n{{DIFF}}",
        "GITHUB_TOKEN": "gh-test-token",
        "GITHUB_EVENT_PATH": write_event(pull_request_event),
        "GITHUB_REPOSITORY": "octo/widgets",
        "GITHUB_SERVER_URL": "https://github.com",
    }
