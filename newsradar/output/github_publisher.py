from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

from github import Github, GithubException

from ..utils.logging import get_logger

logger = get_logger("nr.output.github")


def _resolve_repo_name(repo_name: Optional[str]) -> str:
    # explicit -> FEED_REPOSITORY -> GITHUB_REPOSITORY
    name = repo_name or os.environ.get("FEED_REPOSITORY") or os.environ.get("GITHUB_REPOSITORY")
    if not name:
        raise RuntimeError("Target repository is not configured (FEED_REPOSITORY/GITHUB_REPOSITORY)")
    return name


def publish_feed_files(
    files: Dict[str, Path],
    *,
    repo_name: Optional[str] = None,
    branch: Optional[str] = None,
    token: Optional[str] = None,
    path_prefix: str = "public",
    dry_run: bool = False,
) -> List[str]:
    """Create or update the generated feed files in a GitHub repository.

    Returns the repository paths that were written.
    """
    if dry_run:
        for name in sorted(files):
            logger.info("[DRY-RUN] Would commit %s/%s", path_prefix, name)
        return []

    token = token or os.environ.get("GITHUB_TOKEN") or os.environ.get("GITHUB_API_KEY")
    if not token:
        raise RuntimeError("GITHUB_TOKEN/GITHUB_API_KEY is required to commit feed files")
    repo = Github(token).get_repo(_resolve_repo_name(repo_name))
    if branch is None:
        branch = repo.default_branch or "main"

    committed: List[str] = []
    for name, local_path in sorted(files.items()):
        repo_path = f"{path_prefix.rstrip('/')}/{name}" if path_prefix else name
        content = Path(local_path).read_text(encoding="utf-8")
        message = f"chore(feeds): update {name}"
        try:
            existing = repo.get_contents(repo_path, ref=branch)
            if getattr(existing, "decoded_content", b"").decode("utf-8", "replace") == content:
                logger.info("Unchanged %s@%s, skipping", repo_path, branch)
                continue
            repo.update_file(repo_path, message, content, existing.sha, branch=branch)
            logger.info("Updated feed file at %s@%s", repo_path, branch)
        except GithubException as exc:
            if getattr(exc, "status", None) == 404:
                repo.create_file(repo_path, message, content, branch=branch)
                logger.info("Created feed file at %s@%s", repo_path, branch)
            else:
                logger.error("GitHub API error writing %s: %s", repo_path, exc)
                raise
        committed.append(repo_path)
    return committed
