"""
Comment Payload Parser

Parses GitHub API responses into Comment and PullRequest objects.
Validates payload shape and links review replies to their thread roots.
"""

import logging
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..errors import RenderError
from ..models.comment import Comment, PullRequest
from ..models.payload import (
    GHOST_LOGIN,
    IssueCommentPayload,
    PullRequestPayload,
    ReviewCommentPayload,
)


logger = logging.getLogger(__name__)


class CommentParser:
    """
    Parser for GitHub comment payloads.

    Converts raw JSON dictionaries into immutable domain objects. Any payload
    missing a required field raises RenderError.
    """

    def parse_pull_request(self, pr_data: Dict) -> PullRequest:
        """
        Parse PR metadata.

        Args:
            pr_data: PR information from GitHub API

        Returns:
            PullRequest object
        """
        payload = self._validate(PullRequestPayload, pr_data, "pull request")
        return PullRequest(
            number=payload.number,
            title=payload.title,
            html_url=payload.html_url,
            state=payload.state,
            author=payload.user.login if payload.user else GHOST_LOGIN,
        )

    def parse_issue_comments(self, items: Iterable[Dict]) -> List[Comment]:
        """Parse general conversation comments."""
        comments = []
        for item in items:
            payload = self._validate(IssueCommentPayload, item, "conversation comment")
            comments.append(Comment(
                id=payload.id,
                author=payload.user.login if payload.user else GHOST_LOGIN,
                body=payload.body or "",
                created_at=payload.created_at,
                html_url=payload.html_url,
            ))
        return comments

    def parse_review_comments(self, items: Iterable[Dict], resolved_ids: Iterable[int] = ()) -> List[Comment]:
        """
        Parse inline review comments.

        Args:
            items: Review comments from GitHub API
            resolved_ids: Ids of comments that sit in resolved threads

        Returns:
            List of Comment objects with ``thread_id`` set to the root comment id
        """
        payloads = [self._validate(ReviewCommentPayload, item, "review comment") for item in items]
        parents = {p.id: p.in_reply_to_id for p in payloads}
        resolved = set(resolved_ids)

        comments = []
        for payload in payloads:
            thread_id = self._find_root(payload.id, parents)
            comments.append(Comment(
                id=payload.id,
                author=payload.user.login if payload.user else GHOST_LOGIN,
                body=payload.body or "",
                created_at=payload.created_at,
                html_url=payload.html_url,
                path=payload.path,
                # outdated comments only carry original_line
                line=payload.line if payload.line is not None else payload.original_line,
                diff_hunk=payload.diff_hunk or None,
                thread_id=thread_id,
                in_reply_to_id=payload.in_reply_to_id,
                resolved=payload.id in resolved or thread_id in resolved,
            ))

        logger.debug(f"Parsed {len(comments)} review comments in {len({c.thread_id for c in comments})} threads")
        return comments

    @staticmethod
    def _find_root(comment_id: int, parents: Dict[int, Optional[int]]) -> int:
        """Walk reply links up to the first comment whose parent is absent."""
        current = comment_id
        seen = {current}
        while True:
            parent = parents.get(current)
            if parent is None or parent not in parents or parent in seen:
                return current
            seen.add(parent)
            current = parent

    @staticmethod
    def _validate(model, data, what: str):
        if not isinstance(data, dict):
            raise RenderError(f"Malformed {what} payload: expected an object, got {type(data).__name__}")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise RenderError(f"Malformed {what} payload (id={data.get('id')}): invalid or missing {fields}") from e
