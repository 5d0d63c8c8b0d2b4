"""
Comment Data Models

PR 코멘트 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class PullRequestRef:
    """완전히 해석된 PR 참조 (owner, repo, number)"""
    owner: str
    repo: str
    number: int

    def __post_init__(self):
        """데이터 검증"""
        if not self.owner or not self.repo:
            raise ValueError("Owner and repo must be non-empty")
        if self.number <= 0:
            raise ValueError("PR number must be positive")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


@dataclass(frozen=True)
class PullRequest:
    """PR 메타데이터"""
    number: int
    title: str
    html_url: str
    state: str
    author: str


@dataclass(frozen=True)
class Comment:
    """일반 코멘트 또는 인라인 리뷰 코멘트"""
    id: int
    author: str
    body: str
    created_at: datetime
    html_url: str = ""
    path: Optional[str] = None
    line: Optional[int] = None
    diff_hunk: Optional[str] = None
    thread_id: Optional[int] = None
    in_reply_to_id: Optional[int] = None
    resolved: bool = False

    def __post_init__(self):
        """데이터 검증"""
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")
        if self.line is not None and self.line <= 0:
            raise ValueError("Line numbers must be positive")

    @property
    def is_inline(self) -> bool:
        """diff 라인에 연결된 코멘트인지 확인"""
        return self.path is not None

    @property
    def is_reply(self) -> bool:
        return self.in_reply_to_id is not None

    @property
    def sort_key(self):
        return (self.created_at, self.id)


@dataclass(frozen=True)
class CommentThread:
    """루트 코멘트와 그 답글들"""
    thread_id: int
    path: str
    comments: List[Comment]

    def __post_init__(self):
        """데이터 검증"""
        if not self.comments:
            raise ValueError("A thread must contain at least one comment")

    @property
    def root(self) -> Comment:
        return self.comments[0]

    @property
    def resolved(self) -> bool:
        return any(c.resolved for c in self.comments)


@dataclass(frozen=True)
class RenderedDocument:
    """렌더링된 마크다운 블록들의 순서 있는 목록"""
    blocks: List[str] = field(default_factory=list)

    def to_markdown(self) -> str:
        return "\n\n".join(block.rstrip("\n") for block in self.blocks) + "\n"
