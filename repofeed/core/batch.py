"""Incremental batch bookkeeping across runs.

The previous feed is the only state. An article that passes `is_acceptable`
is carried forward forever; everything else is queued for regeneration, at
most `batch_size` per run. Whatever does not fit is simply found again by
the next run, so no cursor is stored.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence
import json
import logging

from pydantic import ValidationError

from .generator import BANNED_PHRASES, FALLBACK_MARKERS
from .models import FeedEntry, RepositoryRecord

logger = logging.getLogger(__name__)

DENYLIST = FALLBACK_MARKERS + BANNED_PHRASES
MIN_ARTICLE_CHARS = 50


def is_acceptable(text: Optional[str], min_chars: int = MIN_ARTICLE_CHARS,
                  denylist: Iterable[str] = DENYLIST) -> bool:
    """True when `text` is long enough and free of fallback or cliché phrases."""
    if not text or len(text.strip()) <= min_chars:
        return False
    lowered = text.lower()
    return not any(phrase.lower() in lowered for phrase in denylist)


def load_existing(path: str | Path) -> Dict[int, FeedEntry]:
    """Read the previous feed and index its entries by repository id."""
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable feed %s: %s", p, e)
        return {}

    repos = data.get("repos") if isinstance(data, dict) else None
    if not isinstance(repos, list):
        logger.warning("ignoring feed %s without a repos list", p)
        return {}

    entries: Dict[int, FeedEntry] = {}
    for raw in repos:
        try:
            entry = FeedEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning("skipping malformed feed entry %r: %s", raw.get("name") if isinstance(raw, dict) else raw, e)
            continue
        entries[entry.id] = entry
    logger.info("loaded %d existing entries from %s", len(entries), p)
    return entries


@dataclass
class BatchPlan:
    """Per-run decision for every selected repository.

    Attributes:
        carried: (fresh record, previous entry) pairs whose article is kept.
        queued: Records to regenerate in this run, at most `batch_size`.
        deferred: Records that need regeneration but exceed the cap.
        previous: Prior entries of queued and deferred records, by id.
    """

    carried: List[tuple[RepositoryRecord, FeedEntry]] = field(default_factory=list)
    queued: List[RepositoryRecord] = field(default_factory=list)
    deferred: List[RepositoryRecord] = field(default_factory=list)
    previous: Dict[int, FeedEntry] = field(default_factory=dict)

    @property
    def needing(self) -> int:
        return len(self.queued) + len(self.deferred)


def plan_batch(repos: Sequence[RepositoryRecord], existing: Dict[int, FeedEntry],
               batch_size: int, min_chars: int = MIN_ARTICLE_CHARS,
               denylist: Iterable[str] = DENYLIST) -> BatchPlan:
    """Split `repos` into carried, queued and deferred.

    Repositories that never got an article go first, then those with a
    rejected one; both keep the incoming (update-recency) order.
    """
    denylist = list(denylist)
    plan = BatchPlan()
    fresh: List[RepositoryRecord] = []
    stale: List[RepositoryRecord] = []
    for repo in repos:
        prev = existing.get(repo.id)
        if prev is not None and is_acceptable(prev.summary, min_chars, denylist):
            plan.carried.append((repo, prev))
            continue
        if prev is not None and prev.summary:
            plan.previous[repo.id] = prev
            stale.append(repo)
        else:
            fresh.append(repo)

    todo = fresh + stale
    cap = max(batch_size, 0)
    plan.queued = todo[:cap]
    plan.deferred = todo[cap:]
    logger.info("batch plan: %d carried, %d queued, %d deferred",
                len(plan.carried), len(plan.queued), len(plan.deferred))
    return plan
