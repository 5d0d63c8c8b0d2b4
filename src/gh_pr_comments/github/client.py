"""
GitHub API Client

Handles GitHub API authentication, retries, and pagination.
Provides methods for fetching PR metadata, review comments, issue comments,
and the resolved state of review threads.
"""

import logging
from typing import Any, Dict, List, Optional, Set
from datetime import datetime
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import DEFAULT_API_URL, GitHubConfig, graphql_url_for
from ..errors import ApiError, RenderError
from ..models.comment import PullRequestRef


logger = logging.getLogger(__name__)

USER_AGENT = "gh-pr-comments/1.0"
RETRY_STATUS_CODES = (500, 502, 503, 504)

REVIEW_THREADS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      reviewThreads(first: 100, after: $cursor) {
        pageInfo { hasNextPage endCursor }
        nodes {
          isResolved
          comments(first: 100) { nodes { databaseId } }
        }
      }
    }
  }
}
"""


class GitHubClient:
    """
    GitHub API client with authentication, bounded retries, and pagination.

    Provides methods for:
    - PR metadata retrieval
    - Review comment and issue comment collection across all pages
    - Resolved review thread lookup through GraphQL
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = DEFAULT_API_URL,
        graphql_url: Optional[str] = None,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        per_page: int = 100,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token; requests are unauthenticated when None
            base_url: GitHub API base URL (default: https://api.github.com)
            graphql_url: GraphQL endpoint (default: derived from base_url)
            timeout_seconds: Per-request timeout
            max_retries: Retry bound for connection errors and 5xx responses
            per_page: Page size for list endpoints
        """
        self.token = token
        self.base_url = base_url.rstrip('/')
        self.graphql_url = graphql_url or graphql_url_for(self.base_url)
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.per_page = per_page
        self.rate_limit_remaining: Optional[int] = None
        self.rate_limit_reset: Optional[datetime] = None
        self.session = self._create_session()

        if not token:
            logger.warning("No GitHub token found; using unauthenticated requests (public repositories only)")

    @classmethod
    def from_config(cls, config: GitHubConfig) -> "GitHubClient":
        return cls(
            token=config.token,
            base_url=config.api_base_url,
            graphql_url=config.resolved_graphql_url,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            per_page=config.per_page,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.session.headers)

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()

        # 4xx responses are never retried
        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=0.5,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=frozenset({"GET", "POST"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': USER_AGENT,
        })
        if self.token:
            session.headers['Authorization'] = f'token {self.token}'

        return session

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

    def _make_request(self, method: str, endpoint: str, context: str, **kwargs) -> requests.Response:
        """
        Make a request to the GitHub API.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint relative to the base URL, or an absolute URL
            context: What the request is for, used in error messages
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            ApiError: For network failures and non-2xx responses
        """
        if endpoint.startswith(("http://", "https://")):
            url = endpoint
        else:
            url = f"{self.base_url}/{endpoint.lstrip('/')}"

        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise ApiError(f"Request for {context} failed: {e}") from e

        self._update_rate_limit(response)

        if not response.ok:
            error_data = self._error_data(response)
            message = error_data.get('message', 'Unknown error')
            if response.status_code in (403, 429) and self.rate_limit_remaining == 0:
                message = f"Rate limit exceeded. Resets at {self.rate_limit_reset}"
            raise ApiError(
                f"GitHub API error for {context}: {response.status_code} - {message}",
                status_code=response.status_code,
                response_data=error_data,
            )

        return response

    @staticmethod
    def _error_data(response: requests.Response) -> Dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _json(response: requests.Response, context: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RenderError(f"GitHub returned invalid JSON for {context}") from e

    def _get_paginated(self, endpoint: str, context: str) -> List[Dict]:
        """
        Collect every item of a list endpoint by following ``Link: rel="next"``.
        """
        items: List[Dict] = []
        next_url: Optional[str] = endpoint
        params: Optional[Dict] = {'per_page': self.per_page}
        page = 0

        while next_url:
            page += 1
            response = self._make_request('GET', next_url, context, params=params)
            page_items = self._json(response, context)
            if not isinstance(page_items, list):
                raise RenderError(f"Expected a list from {endpoint} for {context}")

            items.extend(page_items)
            logger.debug(f"Page {page} of {endpoint}: {len(page_items)} items")

            # next 링크에 쿼리 파라미터가 이미 포함됨
            next_url = response.links.get('next', {}).get('url')
            params = None

        return items

    def get_pull_request(self, ref: PullRequestRef) -> Dict:
        """
        Get pull request information.

        Args:
            ref: Pull request reference

        Returns:
            Pull request data
        """
        logger.info(f"Fetching PR {ref}")

        response = self._make_request('GET', f'/repos/{ref.owner}/{ref.repo}/pulls/{ref.number}', f"PR {ref}")
        data = self._json(response, f"PR {ref}")
        if not isinstance(data, dict):
            raise RenderError(f"Expected an object for PR {ref}")
        return data

    def get_review_comments(self, ref: PullRequestRef) -> List[Dict]:
        """Get every inline review comment on a pull request."""
        logger.info(f"Fetching review comments for {ref}")

        comments = self._get_paginated(
            f'/repos/{ref.owner}/{ref.repo}/pulls/{ref.number}/comments',
            f"review comments of PR {ref}",
        )
        logger.info(f"Found {len(comments)} review comments")
        return comments

    def get_issue_comments(self, ref: PullRequestRef) -> List[Dict]:
        """Get every general conversation comment on a pull request."""
        logger.info(f"Fetching conversation comments for {ref}")

        comments = self._get_paginated(
            f'/repos/{ref.owner}/{ref.repo}/issues/{ref.number}/comments',
            f"conversation comments of PR {ref}",
        )
        logger.info(f"Found {len(comments)} conversation comments")
        return comments

    def get_resolved_comment_ids(self, ref: PullRequestRef) -> Set[int]:
        """
        Get the ids of all review comments that sit in resolved threads.

        The REST API does not expose thread resolution, so this walks the
        GraphQL ``reviewThreads`` connection. GraphQL requires a token; without
        one no comment is reported as resolved.

        Args:
            ref: Pull request reference

        Returns:
            Set of comment database ids
        """
        if not self.token:
            logger.warning("Skipping resolved-thread lookup: GraphQL requires a GitHub token")
            return set()

        logger.info(f"Fetching review thread states for {ref}")
        context = f"review threads of PR {ref}"

        resolved: Set[int] = set()
        cursor: Optional[str] = None

        while True:
            payload = {
                'query': REVIEW_THREADS_QUERY,
                'variables': {
                    'owner': ref.owner,
                    'repo': ref.repo,
                    'number': ref.number,
                    'cursor': cursor,
                },
            }
            response = self._make_request('POST', self.graphql_url, context, json=payload)
            data = self._json(response, context)
            if not isinstance(data, dict):
                raise RenderError(f"Expected an object for {context}")

            if data.get('errors'):
                message = '; '.join(e.get('message', 'Unknown error') for e in data['errors'])
                raise ApiError(f"GitHub GraphQL error for {context}: {message}", status_code=response.status_code)

            try:
                threads = data['data']['repository']['pullRequest']['reviewThreads']
                nodes = threads['nodes']
                page_info = threads['pageInfo']
            except (KeyError, TypeError) as e:
                raise RenderError(f"Unexpected GraphQL response shape for {context}") from e

            for thread in nodes:
                if not thread.get('isResolved'):
                    continue
                for comment in (thread.get('comments') or {}).get('nodes') or []:
                    if comment.get('databaseId') is not None:
                        resolved.add(comment['databaseId'])

            if not page_info.get('hasNextPage'):
                break
            cursor = page_info.get('endCursor')

        logger.info(f"Found {len(resolved)} comments in resolved threads")
        return resolved
