"""
Markdown Comment Renderer

Renders PR comments as a single markdown document: general comments first,
then inline review comments grouped by file and thread.
"""

import re
import logging
from typing import Dict, Iterable, List, Optional
from datetime import timezone

from ..errors import RenderError
from ..models.comment import Comment, CommentThread, PullRequest, PullRequestRef, RenderedDocument


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
_BACKTICK_RUN = re.compile(r'`+')


def group_review_comments(comments: Iterable[Comment]) -> Dict[str, List[CommentThread]]:
    """
    Group inline review comments by file path, then by thread.

    Files come back in lexicographic order. Threads within a file are ordered
    by their root comment's creation time; comments within a thread start
    with the root, followed by replies in creation order. Ties break on id,
    so the result never depends on input order.

    Args:
        comments: Inline review comments

    Returns:
        Mapping of file path to its ordered threads
    """
    by_thread: Dict[int, List[Comment]] = {}
    for comment in comments:
        if not comment.is_inline:
            raise RenderError(f"Review comment {comment.id} has no file path")
        thread_id = comment.thread_id if comment.thread_id is not None else comment.id
        by_thread.setdefault(thread_id, []).append(comment)

    files: Dict[str, List[CommentThread]] = {}
    for thread_id, members in by_thread.items():
        members = sorted(members, key=lambda c: c.sort_key)
        root = next((c for c in members if c.id == thread_id), members[0])
        ordered = [root] + [c for c in members if c is not root]
        files.setdefault(root.path, []).append(CommentThread(thread_id=thread_id, path=root.path, comments=ordered))

    return {
        path: sorted(files[path], key=lambda t: (t.root.created_at, t.root.id))
        for path in sorted(files)
    }


def format_timestamp(comment: Comment) -> str:
    return comment.created_at.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def hidden_resolved_note(count: int) -> str:
    noun = "comment" if count == 1 else "comments"
    return f"_{count} {noun} in resolved threads hidden (use --include-resolved)._"


def fenced(content: str, language: str = "") -> str:
    """Wrap content in a code fence longer than any backtick run inside it."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    fence = "`" * max(3, longest + 1)
    content = content.rstrip("\n")
    return f"{fence}{language}\n{content}\n{fence}"


class MarkdownRenderer:
    """
    Renders PR comments as markdown.

    Rendering is a pure function of its input: the same comments always
    produce the same string.
    """

    def __init__(self, include_links: bool = True):
        """
        Initialize markdown renderer.

        Args:
            include_links: Add a "View on GitHub" link under each comment
        """
        self.include_links = include_links

    def render(
        self,
        pull_request: Optional[PullRequest],
        general_comments: Iterable[Comment],
        review_comments: Iterable[Comment],
        ref: Optional[PullRequestRef] = None,
        hidden_resolved: int = 0,
    ) -> str:
        """
        Render the full document.

        Args:
            pull_request: PR metadata for the header, if available
            general_comments: Conversation comments
            review_comments: Inline review comments
            ref: Reference used for the header's repository line
            hidden_resolved: Number of resolved-thread comments left out

        Returns:
            Markdown text ending in a newline
        """
        document = self.build_document(pull_request, general_comments, review_comments, ref, hidden_resolved)
        return document.to_markdown()

    def build_document(
        self,
        pull_request: Optional[PullRequest],
        general_comments: Iterable[Comment],
        review_comments: Iterable[Comment],
        ref: Optional[PullRequestRef] = None,
        hidden_resolved: int = 0,
    ) -> RenderedDocument:
        general = list(general_comments)
        review = list(review_comments)
        logger.info(f"Rendering {len(general)} general and {len(review)} review comments")

        blocks: List[str] = []
        if pull_request is not None:
            blocks.append(self._render_header(pull_request, ref))

        blocks.extend(self._render_general(general))
        blocks.extend(self._render_review(review, hidden_resolved))

        return RenderedDocument(blocks=blocks)

    def _render_header(self, pull_request: PullRequest, ref: Optional[PullRequestRef]) -> str:
        lines = [f"# PR #{pull_request.number}: {pull_request.title}", ""]
        if ref is not None:
            lines.append(f"- **Repository:** {ref.full_name}")
        lines.append(f"- **URL:** {pull_request.html_url}")
        lines.append(f"- **State:** {pull_request.state}")
        lines.append(f"- **Author:** @{pull_request.author}")
        return "\n".join(lines)

    def _render_general(self, comments: List[Comment]) -> List[str]:
        blocks = ["## General Comments"]
        if not comments:
            blocks.append("_No general comments._")
            return blocks

        for comment in sorted(comments, key=lambda c: c.sort_key):
            self._check_required(comment)
            blocks.append(f"### @{comment.author} ({format_timestamp(comment)})")
            blocks.extend(self._body_blocks(comment))
        return blocks

    def _render_review(self, comments: List[Comment], hidden_resolved: int = 0) -> List[str]:
        if not comments:
            blocks = ["## Review Comments", "_No review comments._"]
            if hidden_resolved:
                blocks.append(hidden_resolved_note(hidden_resolved))
            return blocks

        blocks = []
        if hidden_resolved:
            blocks.append(hidden_resolved_note(hidden_resolved))
        for path, threads in group_review_comments(comments).items():
            blocks.append(f"## `{path}`")
            for index, thread in enumerate(threads):
                if index:
                    blocks.append("---")
                blocks.extend(self._render_thread(thread))
        return blocks

    def _render_thread(self, thread: CommentThread) -> List[str]:
        root = thread.root
        self._check_required(root)

        heading = f"### @{root.author} ({format_timestamp(root)})"
        if thread.resolved:
            heading += " [resolved]"

        location = [f"**File:** `{root.path}`"]
        if root.line is not None:
            location.append(f"**Line:** {root.line}")

        blocks = [heading, "  \n".join(location)]
        if root.diff_hunk:
            blocks.append(fenced(root.diff_hunk, "diff"))
        blocks.extend(self._body_blocks(root))

        for reply in thread.comments[1:]:
            self._check_required(reply)
            blocks.append(f"#### Reply from @{reply.author} ({format_timestamp(reply)})")
            blocks.extend(self._body_blocks(reply))
        return blocks

    def _body_blocks(self, comment: Comment) -> List[str]:
        body = comment.body.strip() or "_(empty comment)_"
        blocks = [body]
        if self.include_links and comment.html_url:
            blocks.append(f"[View on GitHub]({comment.html_url})")
        return blocks

    @staticmethod
    def _check_required(comment: Comment) -> None:
        if not comment.author:
            raise RenderError(f"Comment {comment.id} has no author")
        if comment.body is None:
            raise RenderError(f"Comment {comment.id} has no body")
