"""Feed assembly and serialization."""
from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional
import json
import logging
import math

from .generator import display_name
from .models import FeedDocument, FeedEntry, Progress, RepositoryRecord

logger = logging.getLogger(__name__)

AI_LABEL = "GitHub Models API"
FALLBACK_LABEL = "Fallback templates"

# Curated Unsplash photo ids for tech/coding themes, assigned by position.
UNSPLASH_PHOTOS = [
    "1461749280684-dccba630e2f6",  # code on screen
    "1555066931-4365d14bab8c",  # laptop code
    "1504639725590-34d0984388bd",  # programming
    "1526374965328-7f61d4dc18c5",  # abstract tech
    "1518770660439-4636190af475",  # circuit board
    "1451187580459-43490279c0fa",  # earth from space
    "1550751827-4bd374c3f58b",  # server room
    "1558494949-ef010cbdcc31",  # AI brain
    "1485827404703-89b55fcc595e",  # robot
    "1531482615713-2afd69097998",  # coding workspace
    "1542831371-29b0f74f9713",  # code syntax
    "1607799279861-4dd421887fb3",  # dark code
]


def image_url(index: int) -> str:
    photo_id = UNSPLASH_PHOTOS[index % len(UNSPLASH_PHOTOS)]
    return f"https://images.unsplash.com/photo-{photo_id}?w=800&h=400&fit=crop&q=80"


def format_date(value: str) -> str:
    """Render an ISO timestamp as e.g. `March 4, 2025`; '' if unparseable."""
    if not value:
        return ""
    try:
        d = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def estimate_read_time(text: Optional[str]) -> int:
    words = len((text or "").split())
    return max(2, math.ceil(words / 200))


def make_entry(record: RepositoryRecord, summary: Optional[str], source: str) -> FeedEntry:
    """Combine fresh repository metadata with an article."""
    return FeedEntry(
        **record.model_dump(),
        summary=summary,
        summary_source=source if summary else "pending",
        display_name=display_name(record.name),
        read_time=estimate_read_time(summary),
        created_date=format_date(record.created_at),
        updated_date=format_date(record.updated_at),
    )


def build_feed(entries: Iterable[FeedEntry], generated_with: str,
               now: Optional[datetime] = None) -> FeedDocument:
    """Order entries by update time, number their images, count progress."""
    ordered: List[FeedEntry] = sorted(entries, key=lambda e: e.updated_at, reverse=True)
    ordered = [e.model_copy(update={"image": image_url(i)}) for i, e in enumerate(ordered)]

    progress = Progress(
        ai_generated=sum(1 for e in ordered if e.summary_source == "ai"),
        fallback=sum(1 for e in ordered if e.summary_source == "fallback"),
        pending=sum(1 for e in ordered if e.summary_source == "pending"),
    )
    progress.complete = progress.pending == 0

    now = now or datetime.now(timezone.utc)
    # naive datetimes are taken as UTC
    now = now.replace(tzinfo=timezone.utc) if now.tzinfo is None else now.astimezone(timezone.utc)
    stamp = now.isoformat().replace("+00:00", "Z")
    return FeedDocument(
        last_updated=stamp,
        generated_with=generated_with,
        repos=ordered,
        progress=progress,
    )


def write_feed(doc: FeedDocument, path: str | Path) -> Path:
    """Serialize `doc` to `path` as one JSON document."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(doc.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)
    p.write_text(payload + "\n", encoding="utf-8")
    logger.info("wrote %s with %d repos (%d pending)", p, len(doc.repos), doc.progress.pending)
    return p
