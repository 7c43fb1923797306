"""Core functionality for building the repository feed.

This module contains the core business logic for:
- GitHub API interactions
- Article generation and model rotation
- Incremental batch bookkeeping
- Feed assembly and configuration
"""

from .github import list_user_repos, get_repo_details, get_readme, get_file_tree
from .generator import ArticleGenerator, ModelRotation, fallback_article, write_article
from .batch import is_acceptable, load_existing, plan_batch, BatchPlan
from .feed import build_feed, write_feed
from .config import load_settings, Settings
from .pipeline import run

__all__ = [
    "list_user_repos",
    "get_repo_details",
    "get_readme",
    "get_file_tree",
    "ArticleGenerator",
    "ModelRotation",
    "fallback_article",
    "write_article",
    "is_acceptable",
    "load_existing",
    "plan_batch",
    "BatchPlan",
    "build_feed",
    "write_feed",
    "load_settings",
    "Settings",
    "run",
]
