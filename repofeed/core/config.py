"""Configuration management for repofeed.

Settings are merged from several sources, highest priority first:
1. Command-line flags (applied by the CLI)
2. Environment variables (a `.env` file is loaded through python-dotenv)
3. TOML configuration file
4. Default values

Example config.toml:
    ```toml
    [github]
    username = "moses-y"
    include_forks = true
    exclude_pattern = ".github.io"

    [generator]
    models = ["openai/gpt-4o-mini", "openai/gpt-4.1-mini"]

    [batch]
    size = 10
    delay_seconds = 0.5

    [output]
    path = "repos.json"
    ```

Environment Variables:
    GITHUB_TOKEN: Token for both the GitHub API and GitHub Models.
    REPOFEED_USERNAME: Override the account whose repositories are listed.
    REPOFEED_MODELS: Comma-separated model names, tried in rotation.
    REPOFEED_ENDPOINT: Override the chat-completions URL.
    REPOFEED_BATCH_SIZE: Override the per-run generation cap.
    REPOFEED_DELAY: Override the delay between generation calls (seconds).
    REPOFEED_OUTPUT: Override the feed path.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import os
import tomllib  # Python 3.11+

from dotenv import load_dotenv

DEFAULT_MODELS = [
    "openai/gpt-4o-mini",
    "openai/gpt-4.1-mini",
    "openai/gpt-4.1-nano",
]
DEFAULT_ENDPOINT = "https://models.github.ai/inference/chat/completions"


@dataclass
class Settings:
    """Runtime configuration derived from `config.toml` and environment.

    Attributes:
        username: Account whose repositories are published.
        github_token: Bearer token; None disables all generation calls.
        include_forks: Whether forked repositories are part of the feed.
        exclude_pattern: Name fragment of site-hosting repos to skip.
        max_repos: Optional cap on how many repositories the feed shows.
        models: Completion model names, rotated when rate-limited.
        endpoint: Chat-completions URL.
        max_tokens: Completion length limit.
        temperature: Sampling temperature.
        min_summary_chars: Shortest completion accepted from the model.
        include_context: Send README excerpt and file list with the prompt.
        batch_size: Maximum repositories regenerated per run.
        delay_seconds: Pause between consecutive completion calls.
        min_article_chars: Shortest existing article carried forward.
        output: Feed file path.
    """

    # github
    username: str = "moses-y"
    github_token: str | None = None
    include_forks: bool = True
    exclude_pattern: str = ".github.io"
    max_repos: int | None = None

    # generator
    models: list[str] = field(default_factory=lambda: list(DEFAULT_MODELS))
    endpoint: str = DEFAULT_ENDPOINT
    max_tokens: int = 220
    temperature: float = 0.7
    min_summary_chars: int = 20
    include_context: bool = True

    # batch
    batch_size: int = 10
    delay_seconds: float = 0.5
    min_article_chars: int = 50

    # output
    output: str = "repos.json"

    @property
    def generation_enabled(self) -> bool:
        return bool(self.github_token)


def load_config(path: str = "config.toml") -> dict:
    """Load a TOML config file into a dictionary, or `{}` if it is missing."""
    p = Path(path)
    if not p.exists():
        return {}
    with p.open("rb") as f:
        return tomllib.load(f)


def _split_models(value: str) -> list[str]:
    return [m.strip() for m in value.split(",") if m.strip()]


def load_settings(config_path: str | None = None) -> Settings:
    """Create a `Settings` object from config file and environment variables.

    Args:
        config_path: Path to TOML config file. Defaults to "config.toml".

    Returns:
        Settings object with merged configuration from all sources.
    """
    load_dotenv()
    cfg = load_config(config_path or "config.toml")

    s = Settings()

    # github section
    gh = cfg.get("github", {})
    s.username = os.getenv("REPOFEED_USERNAME", gh.get("username", s.username))
    s.github_token = os.getenv("GITHUB_TOKEN") or None
    s.include_forks = gh.get("include_forks", s.include_forks)
    s.exclude_pattern = gh.get("exclude_pattern", s.exclude_pattern)
    s.max_repos = gh.get("max_repos", s.max_repos)

    # generator section
    gen = cfg.get("generator", {})
    env_models = os.getenv("REPOFEED_MODELS")
    s.models = _split_models(env_models) if env_models else list(gen.get("models", s.models))
    s.endpoint = os.getenv("REPOFEED_ENDPOINT", gen.get("endpoint", s.endpoint))
    s.max_tokens = int(gen.get("max_tokens", s.max_tokens))
    s.temperature = float(gen.get("temperature", s.temperature))
    s.min_summary_chars = int(gen.get("min_chars", s.min_summary_chars))
    s.include_context = gen.get("include_context", s.include_context)

    # batch section
    b = cfg.get("batch", {})
    s.batch_size = int(os.getenv("REPOFEED_BATCH_SIZE", b.get("size", s.batch_size)))
    s.delay_seconds = float(os.getenv("REPOFEED_DELAY", b.get("delay_seconds", s.delay_seconds)))
    s.min_article_chars = int(b.get("min_article_chars", s.min_article_chars))

    # output section
    out = cfg.get("output", {})
    s.output = os.getenv("REPOFEED_OUTPUT", out.get("path", s.output))

    return s
