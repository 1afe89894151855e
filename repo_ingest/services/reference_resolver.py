"""
Repository Reference Resolver

Turns a user supplied GitHub URL and optional branch into a RepoReference.
"""

import re
from typing import Optional

from repo_ingest.config import DEFAULT_BRANCH
from repo_ingest.errors import InvalidRequestError
from repo_ingest.models.schemas import RepoReference

GITHUB_REPO_PATTERN = re.compile(r'github\.com/([^/]+)/([^/]+)')


def resolve_reference(repo_url: Optional[str], branch: Optional[str] = None,
                      default_branch: str = DEFAULT_BRANCH) -> RepoReference:
    """
    Resolve a repository reference.

    Args:
        repo_url: URL containing ``github.com/<owner>/<name>``
        branch: Branch to ingest; missing or blank falls back to ``default_branch``
        default_branch: Configured default branch name

    Returns:
        RepoReference with the ``.git`` suffix stripped from the name

    Raises:
        InvalidRequestError: if the URL is missing or does not match
    """
    if not repo_url:
        raise InvalidRequestError("repo_url is required")

    match = GITHUB_REPO_PATTERN.search(repo_url)
    if not match:
        raise InvalidRequestError("Invalid GitHub repository URL")

    owner, name = match.groups()
    if name.endswith(".git"):
        name = name[:-len(".git")]
    if not name:
        raise InvalidRequestError("Invalid GitHub repository URL")

    if branch is None or not branch.strip():
        branch = default_branch

    return RepoReference(owner=owner, name=name, branch=branch)
