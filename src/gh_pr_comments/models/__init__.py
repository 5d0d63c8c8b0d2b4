"""
Data Models

gh-pr-comments의 핵심 데이터 모델들
"""

from .comment import PullRequestRef, PullRequest, Comment, CommentThread, RenderedDocument
from .payload import PullRequestPayload, IssueCommentPayload, ReviewCommentPayload

__all__ = [
    "PullRequestRef",
    "PullRequest",
    "Comment",
    "CommentThread",
    "RenderedDocument",
    "PullRequestPayload",
    "IssueCommentPayload",
    "ReviewCommentPayload",
]
