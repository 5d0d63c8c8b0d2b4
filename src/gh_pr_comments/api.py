"""
PR Comments API

Main interface that runs the pipeline from a resolved PR reference to the
rendered markdown document.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .config import AppConfig
from .github.client import GitHubClient
from .github.parser import CommentParser
from .formatting.markdown import MarkdownRenderer
from .models.comment import Comment, PullRequest, PullRequestRef


logger = logging.getLogger(__name__)


@dataclass
class CommentsRequest:
    """Request for a PR comment transcript."""
    ref: PullRequestRef
    include_resolved: bool = False


@dataclass
class CommentsResult:
    """Fetched and parsed PR comments."""
    ref: PullRequestRef
    pull_request: PullRequest
    general_comments: List[Comment]
    review_comments: List[Comment]
    hidden_resolved: int = 0


class PRCommentsAPI:
    """
    PR comments interface.

    Orchestrates one run:
    1. Fetch PR metadata, review comments and conversation comments
    2. Look up resolved review threads
    3. Render everything as markdown
    """

    def __init__(self, client: GitHubClient, renderer: Optional[MarkdownRenderer] = None):
        """
        Initialize the API.

        Args:
            client: GitHub client owning the HTTP session
            renderer: Optional markdown renderer
        """
        self.client = client
        self.parser = CommentParser()
        self.renderer = renderer or MarkdownRenderer()

    @classmethod
    def from_config(cls, config: AppConfig) -> "PRCommentsAPI":
        return cls(GitHubClient.from_config(config.github))

    def fetch_comments(self, request: CommentsRequest) -> CommentsResult:
        """
        Fetch and parse every comment on the PR.

        Args:
            request: Which PR, and whether to keep resolved threads

        Returns:
            CommentsResult
        """
        ref = request.ref

        pull_request = self.parser.parse_pull_request(self.client.get_pull_request(ref))
        review_data = self.client.get_review_comments(ref)
        issue_data = self.client.get_issue_comments(ref)

        resolved_ids = self.client.get_resolved_comment_ids(ref) if review_data else set()

        review_comments = self.parser.parse_review_comments(review_data, resolved_ids)
        general_comments = self.parser.parse_issue_comments(issue_data)

        hidden = 0
        if not request.include_resolved:
            kept = [c for c in review_comments if not c.resolved]
            hidden = len(review_comments) - len(kept)
            review_comments = kept
            if hidden:
                logger.info(f"Hiding {hidden} comments in resolved threads")

        return CommentsResult(
            ref=ref,
            pull_request=pull_request,
            general_comments=general_comments,
            review_comments=review_comments,
            hidden_resolved=hidden,
        )

    def render(self, result: CommentsResult) -> str:
        return self.renderer.render(
            result.pull_request,
            result.general_comments,
            result.review_comments,
            ref=result.ref,
            hidden_resolved=result.hidden_resolved,
        )

    def generate_markdown(self, request: CommentsRequest) -> str:
        """Fetch and render in one step."""
        return self.render(self.fetch_comments(request))

    def close(self) -> None:
        self.client.close()
