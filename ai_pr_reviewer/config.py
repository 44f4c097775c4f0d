"""Run configuration built once from the action environment."""

from __future__ import annotations

from typing import Final, Mapping

from pydantic import AnyHttpUrl, BaseModel, ValidationError

DIFF_PLACEHOLDER: Final[str] = "{{DIFF}}"
DEFAULT_GITHUB_API_URL: Final[str] = "https://api.github.com"
DEFAULT_OPENROUTER_API_URL: Final[str] = "https://openrouter.ai/api/v1"


class ConfigurationError(RuntimeError):
    """Raised when the run configuration is invalid or incomplete."""


class Settings(BaseModel):
    """Everything one review run needs, resolved before any network call."""

    openrouter_api_key: str
    model: str
    prompt_template: str
    github_token: str
    event_path: str
    repository: str | None = None
    github_api_url: AnyHttpUrl = DEFAULT_GITHUB_API_URL
    github_server_url: AnyHttpUrl | None = None
    llm_api_base_url: AnyHttpUrl = DEFAULT_OPENROUTER_API_URL
    github_timeout_seconds: float = 30.0
    llm_timeout_seconds: float = 300.0
    log_level: str = "INFO"
    log_dir: str | None = None

    @property
    def normalized_github_api_url(self) -> str:
        """Return the GitHub API base URL without a trailing slash."""
        return str(self.github_api_url).rstrip("/")

    @property
    def normalized_llm_api_base_url(self) -> str:
        """Return the OpenRouter API base URL without a trailing slash."""
        return str(self.llm_api_base_url).rstrip("/")

    @property
    def normalized_github_server_url(self) -> str | None:
        if self.github_server_url is None:
            return None
        return str(self.github_server_url).rstrip("/")


def get_input(environ: Mapping[str, str], name: str, *, required: bool = False) -> str:
    """Read an action input the way the Actions runner exposes it (``INPUT_<NAME>``)."""

    key = f"INPUT_{name.upper().replace(' ', '_')}"
    value = environ.get(key)
    if (value is None or not value.strip()) and required:
        raise ConfigurationError(f"Missing required input: {name}")
    return value.strip() if value else ""


def _optional(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_seconds(environ: Mapping[str, str], key: str, default: float) -> float:
    raw_value = _optional(environ, key)
    if raw_value is None:
        return default
    try:
        seconds = float(raw_value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {key}. It must be a number of seconds.") from exc
    if seconds <= 0:
        raise ConfigurationError(f"Invalid value for {key}. It must be positive.")
    return seconds


def ensure_prompt_template(template: str) -> None:
    """Reject templates that would never receive the diff."""

    if DIFF_PLACEHOLDER not in template:
        raise ConfigurationError(f"prompt_template must include {DIFF_PLACEHOLDER} placeholder.")


def load_settings(environ: Mapping[str, str], *, event_path: str | None = None) -> Settings:
    """Build and validate :class:`Settings` from an environment mapping.

    ``event_path`` overrides ``GITHUB_EVENT_PATH`` (used by the CLI flag).
    """

    openrouter_api_key = get_input(environ, "openrouter_api_key", required=True)
    model = get_input(environ, "model", required=True)
    prompt_template = get_input(environ, "prompt_template", required=True)

    github_token = _optional(environ, "GITHUB_TOKEN")
    if not github_token:
        raise ConfigurationError("GITHUB_TOKEN is required to call GitHub API.")

    ensure_prompt_template(prompt_template)

    resolved_event_path = event_path or _optional(environ, "GITHUB_EVENT_PATH")
    if not resolved_event_path:
        raise ConfigurationError("GITHUB_EVENT_PATH is not set. This action must run on GitHub Actions.")

    github_timeout = _parse_seconds(environ, "GITHUB_TIMEOUT_SECONDS", 30.0)
    llm_timeout = _parse_seconds(environ, "LLM_TIMEOUT_SECONDS", 300.0)

    try:
        return Settings(
            openrouter_api_key=openrouter_api_key,
            model=model,
            prompt_template=prompt_template,
            github_token=github_token,
            event_path=resolved_event_path,
            repository=_optional(environ, "GITHUB_REPOSITORY"),
            github_api_url=_optional(environ, "GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
            github_server_url=_optional(environ, "GITHUB_SERVER_URL"),
            llm_api_base_url=_optional(environ, "OPENROUTER_API_URL") or DEFAULT_OPENROUTER_API_URL,
            github_timeout_seconds=github_timeout,
            llm_timeout_seconds=llm_timeout,
            log_level=(_optional(environ, "APP_LOG_LEVEL") or "INFO").upper(),
            log_dir=_optional(environ, "APP_LOG_DIR"),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid action configuration: {exc}") from exc
