"""
Output Formatting

Renders fetched PR comments as markdown.
"""

from .markdown import MarkdownRenderer, group_review_comments

__all__ = ['MarkdownRenderer', 'group_review_comments']
