"""
Shared fixtures: fake GitHub responses and payload builders.
"""

import json
from unittest.mock import Mock

import pytest


def make_response(status_code=200, json_data=None, links=None, headers=None):
    """Build a stand-in for requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.headers = headers or {}
    response.links = links or {}
    if json_data is None:
        response.content = b""
        response.json.side_effect = ValueError("No JSON")
    else:
        response.content = json.dumps(json_data).encode()
        response.json.return_value = json_data
    return response


def user(login):
    return {"login": login}


def pr_payload(number=435, title="Fix overflow in box parser", login="kinetiknz"):
    return {
        "number": number,
        "title": title,
        "html_url": f"https://github.com/mozilla/mp4parse-rust/pull/{number}",
        "state": "open",
        "user": user(login),
    }


def issue_comment(comment_id, login, body, created_at):
    return {
        "id": comment_id,
        "user": user(login),
        "body": body,
        "created_at": created_at,
        "html_url": f"https://github.com/mozilla/mp4parse-rust/pull/435#issuecomment-{comment_id}",
    }


def review_comment(comment_id, login, body, created_at, path="lib.rs", line=10,
                   diff_hunk="@@ -1,3 +1,4 @@\n fn parse() {\n+    check();\n }", in_reply_to_id=None):
    data = {
        "id": comment_id,
        "user": user(login),
        "body": body,
        "created_at": created_at,
        "html_url": f"https://github.com/mozilla/mp4parse-rust/pull/435#discussion_r{comment_id}",
        "path": path,
        "line": line,
        "original_line": line,
        "diff_hunk": diff_hunk,
    }
    if in_reply_to_id is not None:
        data["in_reply_to_id"] = in_reply_to_id
    return data


@pytest.fixture
def github_env(monkeypatch):
    """Isolate tests from the caller's GitHub environment."""
    for name in ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_API_URL", "GITHUB_GRAPHQL_URL",
                 "GITHUB_TIMEOUT", "GITHUB_MAX_RETRIES", "GITHUB_PER_PAGE",
                 "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
