"""Command-line interface for repofeed.

Refreshes the JSON feed for one GitHub account: lists repositories, writes
articles for a capped batch of them, and rewrites the feed file once at the
end.

Usage:
    ```bash
    # Defaults from config.toml / environment
    repofeed

    # Explicit account and output file
    repofeed moses-y --out public/repos.json

    # Smaller batches, slower pace
    repofeed moses-y --batch-size 3 --delay 5
    ```

Exit status is 0 on success and 1 on any error, which is printed.
"""
from __future__ import annotations
from typing import List, Optional
import argparse
import logging
import sys

from ..core.config import load_settings
from ..core import pipeline


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="repofeed", description="Build a JSON feed of a GitHub account's repos.")
    p.add_argument("username", nargs="?", help="GitHub username (defaults to config)")
    p.add_argument("--out", help="Feed file to read and rewrite")
    p.add_argument("--batch-size", type=int, help="Max articles generated this run")
    p.add_argument("--delay", type=float, help="Seconds to wait between generation calls")
    p.add_argument("--max-repos", type=int, help="Only publish the N most recently updated repos")
    p.add_argument("--no-forks", action="store_true", help="Exclude forked repos")
    p.add_argument("--no-context", action="store_true", help="Do not send README and file list to the model")
    p.add_argument("--model", action="append", dest="models",
                   help="Completion model; repeat to set the rotation order")
    p.add_argument("--config", help="Path to config.toml (defaults to ./config.toml if present)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    s = load_settings(args.config or "config.toml")

    # Effective settings (CLI > env/config > code defaults)
    if args.username:
        s.username = args.username
    if args.out:
        s.output = args.out
    if args.batch_size is not None:
        s.batch_size = args.batch_size
    if args.delay is not None:
        s.delay_seconds = args.delay
    if args.max_repos is not None:
        s.max_repos = args.max_repos
    if args.no_forks:
        s.include_forks = False
    if args.no_context:
        s.include_context = False
    if args.models:
        s.models = args.models

    try:
        doc = pipeline.run(s)
    except Exception as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    pr = doc.progress
    print(f"wrote {s.output} ({len(doc.repos)} repos: {pr.ai_generated} ai, "
          f"{pr.fallback} fallback, {pr.pending} pending)")


if __name__ == "__main__":
    main()
