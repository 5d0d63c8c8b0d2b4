"""
gh-pr-comments

GitHub Pull Request 코멘트를 마크다운 문서로 추출하는 CLI
"""

__version__ = "1.0.0"

from .api import PRCommentsAPI, CommentsRequest

__all__ = ["PRCommentsAPI", "CommentsRequest", "__version__"]
