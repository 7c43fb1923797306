"""Article generation for repositories.

Two strategies produce the text shown next to each repository:
- Remote: a chat completion from GitHub Models, rotating across several
  model names as each one hits its rate limit.
- Fallback: local templating from the name, description and language.

Example:
    ```python
    from repofeed.core.generator import ArticleGenerator, ModelRotation, write_article

    generator = ArticleGenerator(token=os.getenv("GITHUB_TOKEN"))
    rotation = ModelRotation(["openai/gpt-4o-mini", "openai/gpt-4.1-mini"])
    article = write_article(generator, repo, rotation)
    ```
"""
from __future__ import annotations
from typing import List, Optional, Sequence
from pathlib import Path
import logging
import random
import re
import httpx
from langchain_core.prompts import PromptTemplate

from .config import DEFAULT_ENDPOINT
from .models import GeneratedArticle, RepositoryRecord

logger = logging.getLogger(__name__)

PROMPT_PATH = Path(__file__).resolve().parents[1] / "prompts" / "repo_article.txt"

# Corporate-sounding phrases the model is told to avoid.
BANNED_PHRASES = [
    "delve",
    "game-changer",
    "game changer",
    "cutting-edge",
    "seamless",
    "leverage",
    "robust solution",
    "in today's fast-paced",
    "unlock the power",
    "revolutionize",
    "elevate your",
    "look no further",
    "a testament to",
]

# Each fallback template carries one of these, so a later run can spot it.
FALLBACK_MARKERS = [
    "worth diving into",
    "offers an interesting approach",
    "caught my attention",
]

FALLBACK_TEMPLATES = [
    "A compelling {lang} project that explores {name}. Worth diving into for developers "
    "interested in modern software patterns and clean implementations.",
    "{name} offers an interesting approach built with {lang}. The codebase demonstrates "
    "practical solutions that could accelerate your next project.",
    "Exploring {name}, a {lang} repository that caught my attention. It showcases "
    "techniques worth understanding for any serious developer.",
]


def display_name(name: str) -> str:
    return name.replace("-", " ").replace("_", " ")


def _clean_markdown(text: str) -> str:
    """Remove common markdown noise but keep the full text."""
    lines = [ln for ln in text.splitlines() if not re.search(r"!\[.*\]\(.*\)", ln)]
    raw = "\n".join(lines)
    # [text](url) -> text
    raw = re.sub(r"\[(.*?)\]\(.*?\)", r"\1", raw)
    raw = re.sub(r"`{3}.*?`{3}", "", raw, flags=re.S)
    raw = re.sub(r"`([^`]+)`", r"\1", raw)
    raw = re.sub(r"^\s*#+\s*", "", raw, flags=re.M)
    raw = re.sub(r"<[^>]+>", "", raw)
    return raw.strip()


def _cap(s: str, max_chars: int = 2000) -> str:
    return s if len(s) <= max_chars else s[:max_chars] + "\n[...truncated...]"


def load_prompt_template(path: str | Path = PROMPT_PATH) -> PromptTemplate:
    """Load a single-block PromptTemplate from a .txt file."""
    return PromptTemplate.from_template(Path(path).read_text(encoding="utf-8"))


def build_prompt(
        repo: RepositoryRecord,
        readme: Optional[str] = None,
        files: Optional[Sequence[str]] = None,
        max_files: int = 40) -> str:
    """Render the article prompt for `repo`.

    Args:
        repo: Repository record, ideally already enriched.
        readme: Raw README text; cleaned and capped before use.
        files: File paths from the repository tree; truncated to `max_files`.

    Returns:
        Prompt string for the completion endpoint.
    """
    if repo.parent:
        parent = f"{repo.parent.name} ({repo.parent.stars} stars)"
    else:
        parent = "None"
    file_list = list(files or [])[:max_files]
    return load_prompt_template().format(
        banned=", ".join(f'"{p}"' for p in BANNED_PHRASES),
        name=repo.name,
        kind=repo.kind,
        parent=parent,
        description=repo.description or "No description provided",
        language=repo.language or "Not specified",
        topics=", ".join(repo.topics) or "None",
        readme=_cap(_clean_markdown(readme)) if readme else "Not available",
        files="\n".join(file_list) if file_list else "Not available",
    ).strip()


class ModelRotation:
    """Round-robin over completion models for a single run.

    A model that answers 429 is marked exhausted and skipped for the rest
    of the run. Build a fresh rotation per run.
    """

    def __init__(self, models: Sequence[str]):
        self.models = list(models)
        self._exhausted: set[str] = set()
        self._cursor = 0

    def __len__(self) -> int:
        return len(self.models)

    @property
    def exhausted(self) -> bool:
        return all(m in self._exhausted for m in self.models)

    def mark_exhausted(self, model: str) -> None:
        logger.info("model %s is rate-limited, dropping it for this run", model)
        self._exhausted.add(model)

    def next_model(self) -> Optional[str]:
        """Return the next usable model, or None when every model is exhausted."""
        for offset in range(len(self.models)):
            idx = (self._cursor + offset) % len(self.models)
            model = self.models[idx]
            if model not in self._exhausted:
                self._cursor = idx + 1
                return model
        return None


class ArticleGenerator:
    """Client for a chat-completions endpoint that writes repository articles.

    Attributes:
        token: Bearer token; without one no request is ever sent.
        endpoint: Chat-completions URL.
        max_tokens: Completion length limit.
        temperature: Sampling temperature.
        min_chars: Completions this short or shorter are discarded.
    """

    def __init__(self, token: Optional[str] = None,
                 endpoint: str = DEFAULT_ENDPOINT,
                 max_tokens: int = 220,
                 temperature: float = 0.7,
                 min_chars: int = 20,
                 timeout: float = 60.0):
        self.token = token
        self.endpoint = endpoint
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.min_chars = min_chars
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def generate(self, repo: RepositoryRecord, rotation: ModelRotation,
                 readme: Optional[str] = None,
                 files: Optional[Sequence[str]] = None) -> Optional[str]:
        """Ask the endpoint for an article, or return None so the caller falls back.

        Walks the rotation: a 429 exhausts the current model and the next one
        is tried. Any other failure, or an answer of `min_chars` characters
        or fewer, gives None.
        """
        if not self.enabled:
            return None

        prompt = build_prompt(repo, readme, files)
        while True:
            model = rotation.next_model()
            if model is None:
                logger.info("no completion model left, falling back for %s", repo.name)
                return None
            payload = {
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
            }
            try:
                with httpx.Client(timeout=self.timeout, headers=self._headers()) as client:
                    r = client.post(self.endpoint, json=payload)
                    if r.status_code == 429:
                        rotation.mark_exhausted(model)
                        continue
                    r.raise_for_status()
                    data = r.json()
            except httpx.HTTPStatusError as e:
                logger.warning("completion API returned %s for %s, using fallback",
                               e.response.status_code, repo.name)
                return None
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("completion failed for %s: %s", repo.name, e)
                return None

            text = _completion_text(data)
            if len(text) > self.min_chars:
                logger.debug("%s wrote %d chars for %s", model, len(text), repo.name)
                return text
            logger.info("completion for %s too short (%d chars), discarding", repo.name, len(text))
            return None


def _completion_text(data: dict) -> str:
    try:
        return (data["choices"][0]["message"]["content"] or "").strip()
    except (KeyError, IndexError, TypeError):
        return ""


def fallback_article(repo: RepositoryRecord, rng: random.Random | None = None) -> str:
    """Synthesize an article locally.

    A description longer than 50 characters is used as-is; otherwise one of
    the fixed templates is picked at random.
    """
    desc = repo.description or ""
    if len(desc) > 50:
        return desc
    template = (rng or random).choice(FALLBACK_TEMPLATES)
    return template.format(
        lang=repo.language or "various technologies",
        name=display_name(repo.name),
    )


def write_article(generator: ArticleGenerator, repo: RepositoryRecord,
                  rotation: ModelRotation,
                  readme: Optional[str] = None,
                  files: Optional[List[str]] = None,
                  rng: random.Random | None = None) -> GeneratedArticle:
    """Return a remote article when one is available, else a fallback."""
    text = generator.generate(repo, rotation, readme=readme, files=files)
    if text:
        return GeneratedArticle(text=text, source="ai")
    return GeneratedArticle(text=fallback_article(repo, rng), source="fallback")
