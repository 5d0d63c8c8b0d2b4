"""
Unit tests for the PRCommentsAPI pipeline with a mocked client.
"""

import pytest
from unittest.mock import Mock

from gh_pr_comments.api import CommentsRequest, PRCommentsAPI
from gh_pr_comments.errors import RenderError
from gh_pr_comments.models.comment import PullRequestRef

from conftest import issue_comment, pr_payload, review_comment


REF = PullRequestRef("mozilla", "mp4parse-rust", 435)


def mock_client(review=None, issues=None, resolved=None):
    client = Mock()
    client.get_pull_request.return_value = pr_payload()
    client.get_review_comments.return_value = review or []
    client.get_issue_comments.return_value = issues or []
    client.get_resolved_comment_ids.return_value = resolved or set()
    return client


class TestPRCommentsAPI:
    """Unit tests for PRCommentsAPI class."""

    def test_fetch_comments(self):
        client = mock_client(
            review=[review_comment(1, "bob", "nit", "2024-02-01T10:00:00Z")],
            issues=[issue_comment(2, "alice", "ok", "2024-02-01T11:00:00Z")],
        )
        result = PRCommentsAPI(client).fetch_comments(CommentsRequest(ref=REF))

        assert result.pull_request.number == 435
        assert [c.id for c in result.review_comments] == [1]
        assert [c.id for c in result.general_comments] == [2]
        client.get_resolved_comment_ids.assert_called_once_with(REF)

    def test_resolved_lookup_skipped_without_review_comments(self):
        client = mock_client()
        PRCommentsAPI(client).fetch_comments(CommentsRequest(ref=REF))
        client.get_resolved_comment_ids.assert_not_called()

    def test_resolved_comments_filtered(self):
        client = mock_client(
            review=[
                review_comment(1, "bob", "done", "2024-02-01T10:00:00Z"),
                review_comment(2, "bob", "open", "2024-02-01T11:00:00Z", line=30),
            ],
            resolved={1},
        )
        api = PRCommentsAPI(client)

        hidden = api.fetch_comments(CommentsRequest(ref=REF))
        assert [c.id for c in hidden.review_comments] == [2]
        assert hidden.hidden_resolved == 1

        shown = api.fetch_comments(CommentsRequest(ref=REF, include_resolved=True))
        assert [c.id for c in shown.review_comments] == [1, 2]
        assert shown.hidden_resolved == 0

    def test_hidden_resolved_count_rendered(self):
        client = mock_client(
            review=[review_comment(1, "bob", "done", "2024-02-01T10:00:00Z")],
            resolved={1},
        )
        output = PRCommentsAPI(client).generate_markdown(CommentsRequest(ref=REF))
        assert "done" not in output
        assert "_No review comments._" in output
        assert "_1 comment in resolved threads hidden (use --include-resolved)._" in output

    def test_generate_markdown(self):
        client = mock_client(issues=[issue_comment(2, "alice", "Looks good", "2024-02-01T11:00:00Z")])
        output = PRCommentsAPI(client).generate_markdown(CommentsRequest(ref=REF))
        assert "- **Repository:** mozilla/mp4parse-rust" in output
        assert "Looks good" in output

    def test_malformed_payload(self):
        client = mock_client()
        client.get_pull_request.return_value = {"number": 435}
        with pytest.raises(RenderError):
            PRCommentsAPI(client).generate_markdown(CommentsRequest(ref=REF))

    def test_close_releases_client(self):
        client = mock_client()
        PRCommentsAPI(client).close()
        client.close.assert_called_once()
