"""Pydantic models for repository records and the published feed.

Field names are snake_case in Python and camelCase in the JSON feed, so the
static site can keep reading `updatedAt`, `displayName` and friends.
"""
from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FeedModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParentRef(FeedModel):
    """Upstream repository of a fork."""

    name: str
    url: Optional[str] = None
    stars: int = 0


class RepositoryRecord(FeedModel):
    """One repository as reported by the hosting API."""

    id: int
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    topics: List[str] = Field(default_factory=list)
    parent: Optional[ParentRef] = None
    kind: Literal["fork", "original"] = "original"
    url: Optional[str] = None
    default_branch: Optional[str] = None
    updated_at: str = ""
    created_at: str = ""

    @field_validator("topics")
    @classmethod
    def unique_topics(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    @classmethod
    def from_api(cls, item: dict) -> "RepositoryRecord":
        """Build a record from a `/users/{user}/repos` list item."""
        return cls(
            id=item["id"],
            name=item["name"],
            description=item.get("description"),
            language=item.get("language"),
            stars=item.get("stargazers_count") or 0,
            forks=item.get("forks_count") or 0,
            topics=item.get("topics") or [],
            kind="fork" if item.get("fork") else "original",
            url=item.get("html_url"),
            default_branch=item.get("default_branch"),
            updated_at=item.get("updated_at") or "",
            created_at=item.get("created_at") or "",
        )


class GeneratedArticle(FeedModel):
    text: str
    source: Literal["ai", "fallback"]


class FeedEntry(RepositoryRecord):
    """A repository record plus its article and presentation fields."""

    summary: Optional[str] = None
    summary_source: Literal["ai", "fallback", "pending"] = "pending"
    display_name: str = ""
    image: Optional[str] = None
    read_time: int = 2
    created_date: str = ""
    updated_date: str = ""


class Progress(FeedModel):
    ai_generated: int = 0
    fallback: int = 0
    pending: int = 0
    complete: bool = True


class FeedDocument(FeedModel):
    """The whole JSON feed: run metadata and ordered entries."""

    last_updated: str
    generated_with: str
    repos: List[FeedEntry] = Field(default_factory=list)
    progress: Progress = Field(default_factory=Progress)
