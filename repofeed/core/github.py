"""GitHub API client utilities for repository data retrieval.

Synchronous helpers for listing an account's repositories and enriching a
single repository with topics, upstream-fork metadata, README text and a
file listing. Listing failures propagate to the caller; enrichment failures
are logged and degrade to "no data" so one broken repository never aborts a
run.

Rate Limits:
    - Unauthenticated: 60 requests/hour per IP
    - Authenticated: 5,000 requests/hour per token

Example:
    ```python
    from repofeed.core.github import list_user_repos, get_repo_details

    repos = list_user_repos("octocat", token=os.getenv("GITHUB_TOKEN"))
    detailed = get_repo_details("octocat", repos[0])
    ```
"""
from typing import Any, Dict, List, Optional
import base64
import logging
import httpx

from .models import ParentRef, RepositoryRecord

logger = logging.getLogger(__name__)

GH_API = "https://api.github.com"
USER_AGENT = "repofeed"


def _headers(token: Optional[str] = None) -> Dict[str, str]:
    """Construct HTTP headers for GitHub API requests.

    Returns:
        Headers including Accept, API version, and Authorization if a
        token is given.
    """
    h = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": USER_AGENT,
    }
    if token:
        h["Authorization"] = f"Bearer {token}"
    return h


def _keep(item: Dict[str, Any], include_forks: bool, exclude_pattern: str) -> bool:
    if item.get("archived"):
        return False
    if not include_forks and item.get("fork"):
        return False
    if exclude_pattern and exclude_pattern.lower() in item.get("name", "").lower():
        return False
    return True


def list_user_repos(
        username: str,
        token: Optional[str] = None,
        include_forks: bool = True,
        exclude_pattern: str = ".github.io",
        per_page: int = 100) -> List[RepositoryRecord]:
    """Return repositories owned by `username`, most recently updated first.

    Pages through the listing until a page comes back shorter than
    `per_page`. Archived repositories and names containing `exclude_pattern`
    are dropped; each record is tagged `fork` or `original`.

    Args:
        username: GitHub username.
        token: Optional bearer token.
        include_forks: If False, exclude forked repositories.
        exclude_pattern: Case-insensitive name fragment to exclude.
        per_page: Page size requested from the API.

    Returns:
        List of repository records.

    Raises:
        httpx.HTTPError: On transport failure or a non-success response.
    """
    results: List[RepositoryRecord] = []
    page = 1
    with httpx.Client(timeout=20.0, headers=_headers(token)) as client:
        while True:
            r = client.get(
                f"{GH_API}/users/{username}/repos",
                params={"per_page": per_page, "page": page, "type": "owner", "sort": "updated"},
            )
            r.raise_for_status()
            batch = r.json()
            for item in batch:
                if _keep(item, include_forks, exclude_pattern):
                    results.append(RepositoryRecord.from_api(item))
            if len(batch) < per_page:
                break
            page += 1
    logger.debug("listed %d repositories for %s over %d page(s)", len(results), username, page)
    results.sort(key=lambda rec: rec.updated_at, reverse=True)
    return results


def get_repo_details(owner: str, repo: RepositoryRecord, token: Optional[str] = None) -> RepositoryRecord:
    """Merge topics and upstream-fork metadata into `repo`.

    Returns the record unchanged when the detail call fails.
    """
    try:
        with httpx.Client(timeout=20.0, headers=_headers(token)) as client:
            r = client.get(f"{GH_API}/repos/{owner}/{repo.name}")
            r.raise_for_status()
            data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("could not fetch details for %s: %s", repo.name, e)
        return repo

    parent = data.get("parent")
    return repo.model_copy(update={
        "topics": list(dict.fromkeys(data.get("topics") or repo.topics)),
        "parent": ParentRef(
            name=parent.get("full_name") or parent.get("name", ""),
            url=parent.get("html_url"),
            stars=parent.get("stargazers_count") or 0,
        ) if parent else None,
    })


def get_readme(owner: str, repo: str, token: Optional[str] = None) -> Optional[str]:
    """Retrieve the README content for a repository as a UTF-8 string.

    Returns:
        README content, or None if there is none or the call failed.
    """
    try:
        with httpx.Client(timeout=20.0, headers=_headers(token)) as client:
            r = client.get(f"{GH_API}/repos/{owner}/{repo}/readme")
            if r.status_code == 404:
                return None
            r.raise_for_status()
            data = r.json()
        if data.get("encoding") == "base64" and "content" in data:
            return base64.b64decode(data["content"]).decode("utf-8", errors="ignore")
    except (httpx.HTTPError, ValueError) as e:
        # binascii.Error is a ValueError
        logger.warning("could not fetch README for %s: %s", repo, e)
        return None
    return None


def get_file_tree(
        owner: str,
        repo: str,
        branch: Optional[str],
        token: Optional[str] = None,
        limit: int = 40) -> List[str]:
    """Return up to `limit` file paths from the repository's default branch."""
    try:
        with httpx.Client(timeout=20.0, headers=_headers(token)) as client:
            r = client.get(
                f"{GH_API}/repos/{owner}/{repo}/git/trees/{branch or 'HEAD'}",
                params={"recursive": 1},
            )
            r.raise_for_status()
            tree = r.json().get("tree", [])
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("could not fetch file tree for %s: %s", repo, e)
        return []
    return [t["path"] for t in tree if t.get("type") == "blob"][:limit]
