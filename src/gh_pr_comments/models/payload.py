"""
GitHub API Payload Models

GitHub REST 응답 검증용 Pydantic 모델들
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator


GHOST_LOGIN = "ghost"


class UserPayload(BaseModel):
    """GitHub 사용자"""
    login: str


class PullRequestPayload(BaseModel):
    """GET /pulls/{n} 응답"""
    number: int
    title: str
    html_url: str
    state: str
    user: Optional[UserPayload] = None

    @field_validator('number')
    @classmethod
    def validate_number(cls, v):
        if v <= 0:
            raise ValueError('PR number must be positive')
        return v


class IssueCommentPayload(BaseModel):
    """GET /issues/{n}/comments 항목"""
    id: int
    user: Optional[UserPayload] = None
    body: Optional[str] = None
    created_at: datetime
    html_url: str = ""

    @field_validator('created_at')
    @classmethod
    def validate_timezone(cls, v):
        if v.tzinfo is None:
            raise ValueError('created_at must include a timezone')
        return v


class ReviewCommentPayload(IssueCommentPayload):
    """GET /pulls/{n}/comments 항목"""
    path: str
    line: Optional[int] = None
    original_line: Optional[int] = None
    diff_hunk: Optional[str] = None
    in_reply_to_id: Optional[int] = None

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        if not v.strip():
            raise ValueError('path cannot be empty')
        return v

    @field_validator('line', 'original_line')
    @classmethod
    def validate_line(cls, v):
        if v is not None and v <= 0:
            raise ValueError('Line numbers must be positive')
        return v
