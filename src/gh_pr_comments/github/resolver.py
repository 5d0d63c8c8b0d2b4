"""
PR Reference Resolver

Turns the user's PR argument (URL, ``owner/repo/pull/N`` shorthand, or a
bare number) plus an optional ``--repo`` override into a PullRequestRef.
Falls back to the working directory's git remote for bare numbers.
"""

import re
import logging
import subprocess
from typing import Callable, Optional, Tuple
from urllib.parse import urlparse

from ..errors import InvalidReference, MissingRepository
from ..models.comment import PullRequestRef


logger = logging.getLogger(__name__)

GITHUB_HOSTS = {"github.com", "www.github.com"}

_PULL_PATH_PATTERN = re.compile(r'^/?([^/\s]+)/([^/\s]+)/pull/(\d+)(?:/.*)?$')
_REPO_PATTERN = re.compile(r'^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$')
_NUMBER_PATTERN = re.compile(r'^#?(\d+)$')
_REMOTE_PATTERN = re.compile(r'github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$')


RemoteUrlProvider = Callable[[], Optional[str]]


def git_remote_url(remote: str = "origin") -> Optional[str]:
    """Return the URL configured for ``remote`` in the current directory, if any."""
    try:
        result = subprocess.run(
            ["git", "config", "--get", f"remote.{remote}.url"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug(f"Cannot run git: {e}")
        return None

    url = result.stdout.strip()
    if result.returncode != 0 or not url:
        logger.debug(f"No '{remote}' remote configured")
        return None
    return url


def parse_repo_string(repo: str) -> Tuple[str, str]:
    """Parse ``owner/name`` into its two parts."""
    match = _REPO_PATTERN.match(repo.strip())
    if not match:
        raise InvalidReference(f"Invalid repo format '{repo}'. Expected 'owner/repo'")
    owner, name = match.group(1), match.group(2)
    if name.endswith(".git"):
        name = name[:-len(".git")]
    return owner, name


def parse_pull_request_url(url: str) -> PullRequestRef:
    """Parse ``https://github.com/{owner}/{repo}/pull/{n}[/...]``."""
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidReference(f"Invalid URL '{url}': {e}") from e
    if parsed.scheme not in ("http", "https") or parsed.netloc.lower() not in GITHUB_HOSTS:
        raise InvalidReference(f"Not a GitHub pull request URL: {url}")

    match = _PULL_PATH_PATTERN.match(parsed.path)
    if not match:
        raise InvalidReference(f"Invalid GitHub PR URL format: {url}")

    return _make_ref(match.group(1), match.group(2), match.group(3), url)


def parse_remote_url(url: str) -> Tuple[str, str]:
    """
    Parse a git remote URL pointing at GitHub.

    Accepts HTTPS, SCP-style (``git@github.com:owner/repo.git``) and
    ``ssh://`` forms.
    """
    match = _REMOTE_PATTERN.search(url.strip())
    if not match:
        raise MissingRepository(f"Could not parse GitHub repo from git remote: {url}")
    return match.group(1), match.group(2)


def resolve_reference(
    pr_input: str,
    repo: Optional[str] = None,
    remote_url_provider: Optional[RemoteUrlProvider] = None,
) -> PullRequestRef:
    """
    Resolve a PR argument into a fully-qualified reference.

    Args:
        pr_input: PR number, PR URL, or ``owner/repo/pull/N``
        repo: Optional ``owner/name`` override, used for bare numbers only
        remote_url_provider: Supplies the git remote URL when ``repo`` is absent
            (default: the working directory's origin remote)

    Returns:
        PullRequestRef

    Raises:
        InvalidReference: When the argument matches no known form
        MissingRepository: When a bare number has no repository to go with it
    """
    pr_input = pr_input.strip()

    if "://" in pr_input:
        ref = parse_pull_request_url(pr_input)
        _warn_ignored_repo(ref, repo)
        return ref

    shorthand = _PULL_PATH_PATTERN.match(pr_input)
    if shorthand:
        ref = _make_ref(shorthand.group(1), shorthand.group(2), shorthand.group(3), pr_input)
        _warn_ignored_repo(ref, repo)
        return ref

    if _REPO_PATTERN.match(pr_input):
        raise InvalidReference(f"PR number not specified in '{pr_input}'")

    number_match = _NUMBER_PATTERN.match(pr_input)
    if not number_match:
        raise InvalidReference(f"Could not parse PR input: {pr_input}")

    if repo:
        owner, name = parse_repo_string(repo)
    else:
        remote_url = (remote_url_provider or git_remote_url)()
        if not remote_url:
            raise MissingRepository(
                f"Cannot determine repository for PR {pr_input}: "
                "pass --repo owner/name or run inside a clone with a GitHub 'origin' remote"
            )
        owner, name = parse_remote_url(remote_url)
        logger.info(f"Using repository {owner}/{name} from git remote")

    return _make_ref(owner, name, number_match.group(1), pr_input)


def _make_ref(owner: str, name: str, number: str, source: str) -> PullRequestRef:
    try:
        return PullRequestRef(owner=owner, repo=name, number=int(number))
    except ValueError as e:
        raise InvalidReference(f"Invalid PR reference '{source}': {e}") from e


def _warn_ignored_repo(ref: PullRequestRef, repo: Optional[str]) -> None:
    if repo and repo.strip().lower() != ref.full_name.lower():
        logger.warning(f"Ignoring --repo {repo}: the PR reference names {ref.full_name}")
