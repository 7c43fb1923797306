"""Shared fixtures for repofeed tests."""

import pytest
from repofeed.core.models import RepositoryRecord


@pytest.fixture
def make_repo():
    """Factory for repository records with sensible defaults."""
    def _make(id, name=None, description="tiny tool", language="Python",
              updated_at=None, **kwargs):
        return RepositoryRecord(
            id=id,
            name=name or f"repo-{id}",
            description=description,
            language=language,
            updated_at=updated_at or f"2025-01-{id:02d}T10:00:00Z",
            created_at="2024-06-01T08:00:00Z",
            url=f"https://github.com/moses-y/{name or f'repo-{id}'}",
            default_branch="main",
            **kwargs,
        )
    return _make
