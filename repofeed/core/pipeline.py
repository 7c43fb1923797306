"""One full feed refresh: list, enrich, plan, generate, write."""
from __future__ import annotations
from datetime import datetime
from typing import Callable, List, Optional
import logging
import random
import time

from .batch import load_existing, plan_batch
from .config import Settings
from .feed import AI_LABEL, FALLBACK_LABEL, build_feed, make_entry, write_feed
from .generator import ArticleGenerator, ModelRotation, write_article
from .github import get_file_tree, get_readme, get_repo_details, list_user_repos
from .models import FeedDocument, FeedEntry

logger = logging.getLogger(__name__)


def run(settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None) -> FeedDocument:
    """Refresh the feed at `settings.output` and return what was written.

    Listing errors propagate and leave the previous feed untouched.
    """
    token = settings.github_token
    owner = settings.username

    logger.info("fetching repositories for %s", owner)
    repos = list_user_repos(
        owner,
        token=token,
        include_forks=settings.include_forks,
        exclude_pattern=settings.exclude_pattern,
    )
    logger.info("found %d repositories", len(repos))
    if settings.max_repos is not None:
        repos = repos[:settings.max_repos]

    repos = [get_repo_details(owner, r, token=token) for r in repos]

    existing = load_existing(settings.output)
    plan = plan_batch(repos, existing, settings.batch_size,
                      min_chars=settings.min_article_chars)

    entries: List[FeedEntry] = []
    for repo, prev in plan.carried:
        source = prev.summary_source if prev.summary_source != "pending" else "ai"
        entries.append(make_entry(repo, prev.summary, source))

    generator = ArticleGenerator(
        token=token,
        endpoint=settings.endpoint,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        min_chars=settings.min_summary_chars,
    )
    rotation = ModelRotation(settings.models)
    if not generator.enabled:
        logger.info("no GITHUB_TOKEN set, using fallback articles")

    for i, repo in enumerate(plan.queued):
        logger.info("processing %d/%d: %s", i + 1, len(plan.queued), repo.name)
        remote = generator.enabled and not rotation.exhausted
        if remote and i > 0:
            sleep(settings.delay_seconds)
        readme, files = None, None
        if remote and settings.include_context:
            readme = get_readme(owner, repo.name, token=token)
            files = get_file_tree(owner, repo.name, repo.default_branch, token=token)
        article = write_article(generator, repo, rotation, readme=readme, files=files, rng=rng)
        entries.append(make_entry(repo, article.text, article.source))

    for repo in plan.deferred:
        prev = plan.previous.get(repo.id)
        if prev is not None:
            source = prev.summary_source if prev.summary_source != "pending" else "fallback"
            entries.append(make_entry(repo, prev.summary, source))
        else:
            entries.append(make_entry(repo, None, "pending"))

    label = AI_LABEL if generator.enabled else FALLBACK_LABEL
    doc = build_feed(entries, label, now=now)
    write_feed(doc, settings.output)
    return doc
