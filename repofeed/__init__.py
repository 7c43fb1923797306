"""GitHub repository feed builder.

Lists an account's repositories, writes a short article for each one with
GitHub Models (or a local template when that is unavailable), and publishes
the result as a JSON feed for a static site. Articles are generated a few at
a time across runs; ones that pass the quality check are never rewritten.

Quick Start:
    ```python
    import repofeed

    settings = repofeed.load_settings()
    doc = repofeed.run(settings)
    print(doc.progress)
    ```

CLI Usage:
    ```bash
    repofeed moses-y --out forks.json
    repofeed moses-y --batch-size 5 --delay 2
    ```
"""

__version__ = "0.1.0"

from .core import (
    list_user_repos,
    get_repo_details,
    ArticleGenerator,
    ModelRotation,
    fallback_article,
    is_acceptable,
    load_settings,
    Settings,
    run,
)

__all__ = [
    "list_user_repos",
    "get_repo_details",
    "ArticleGenerator",
    "ModelRotation",
    "fallback_article",
    "is_acceptable",
    "load_settings",
    "Settings",
    "run",
]
