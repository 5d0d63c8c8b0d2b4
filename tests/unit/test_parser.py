"""
Unit tests for payload parsing.
"""

import pytest
from datetime import datetime, timezone

from gh_pr_comments.errors import RenderError
from gh_pr_comments.github.parser import CommentParser

from conftest import issue_comment, pr_payload, review_comment


class TestCommentParser:
    """Unit tests for CommentParser class."""

    def setup_method(self):
        self.parser = CommentParser()

    def test_parse_pull_request(self):
        pr = self.parser.parse_pull_request(pr_payload())
        assert pr.number == 435
        assert pr.title == "Fix overflow in box parser"
        assert pr.author == "kinetiknz"

    def test_parse_pull_request_missing_title(self):
        data = pr_payload()
        del data["title"]
        with pytest.raises(RenderError, match="title"):
            self.parser.parse_pull_request(data)

    def test_parse_issue_comments(self):
        comments = self.parser.parse_issue_comments([
            issue_comment(7, "alice", "LGTM", "2024-03-01T12:00:00Z"),
        ])
        assert len(comments) == 1
        comment = comments[0]
        assert comment.author == "alice"
        assert comment.created_at == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert not comment.is_inline

    def test_deleted_user_becomes_ghost(self):
        data = issue_comment(7, "alice", "hi", "2024-03-01T12:00:00Z")
        data["user"] = None
        assert self.parser.parse_issue_comments([data])[0].author == "ghost"

    def test_null_body_becomes_empty(self):
        data = issue_comment(7, "alice", None, "2024-03-01T12:00:00Z")
        assert self.parser.parse_issue_comments([data])[0].body == ""

    def test_missing_created_at(self):
        data = issue_comment(7, "alice", "hi", "2024-03-01T12:00:00Z")
        del data["created_at"]
        with pytest.raises(RenderError):
            self.parser.parse_issue_comments([data])

    def test_non_object_item(self):
        with pytest.raises(RenderError):
            self.parser.parse_issue_comments(["not a comment"])

    def test_review_threads_are_linked(self):
        comments = self.parser.parse_review_comments([
            review_comment(1, "bob", "Why?", "2024-03-01T10:00:00Z"),
            review_comment(2, "alice", "Because.", "2024-03-01T11:00:00Z", in_reply_to_id=1),
            review_comment(3, "bob", "Ok", "2024-03-01T12:00:00Z", in_reply_to_id=2),
        ])
        assert [c.thread_id for c in comments] == [1, 1, 1]
        assert comments[1].is_reply

    def test_orphan_reply_starts_own_thread(self):
        comments = self.parser.parse_review_comments([
            review_comment(5, "bob", "reply", "2024-03-01T10:00:00Z", in_reply_to_id=999),
        ])
        assert comments[0].thread_id == 5

    def test_outdated_comment_uses_original_line(self):
        data = review_comment(1, "bob", "old", "2024-03-01T10:00:00Z", line=None)
        data["original_line"] = 17
        assert self.parser.parse_review_comments([data])[0].line == 17

    def test_resolved_flag_covers_whole_thread(self):
        comments = self.parser.parse_review_comments([
            review_comment(1, "bob", "Why?", "2024-03-01T10:00:00Z"),
            review_comment(2, "alice", "Fixed", "2024-03-01T11:00:00Z", in_reply_to_id=1),
            review_comment(3, "bob", "Other", "2024-03-01T12:00:00Z", line=40),
        ], resolved_ids={1})
        assert [c.resolved for c in comments] == [True, True, False]

    def test_review_comment_requires_path(self):
        data = review_comment(1, "bob", "x", "2024-03-01T10:00:00Z")
        del data["path"]
        with pytest.raises(RenderError, match="path"):
            self.parser.parse_review_comments([data])

    def test_naive_timestamp_rejected(self):
        data = review_comment(1, "bob", "x", "2024-03-01T10:00:00")
        with pytest.raises(RenderError):
            self.parser.parse_review_comments([data])
