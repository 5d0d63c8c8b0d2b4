"""
GitHub Integration Layer

This module provides GitHub API access, PR reference resolution,
and payload parsing for PR comments.
"""

from .client import GitHubClient
from .parser import CommentParser
from .resolver import resolve_reference

__all__ = ['GitHubClient', 'CommentParser', 'resolve_reference']
