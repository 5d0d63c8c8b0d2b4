"""
Error Types

All failures that end a run. Every error carries a ``kind`` tag so the CLI
can report it uniformly.
"""

from typing import Optional


class PRCommentsError(Exception):
    """Base error for gh-pr-comments"""
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidReference(PRCommentsError):
    """The PR argument or --repo value could not be parsed."""
    kind = "invalid_reference"


class MissingRepository(PRCommentsError):
    """No owner/repo was given and none could be inferred from git."""
    kind = "missing_repository"


class ApiError(PRCommentsError):
    """GitHub API request failed (HTTP, network or authorization)."""
    kind = "api_error"

    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RenderError(PRCommentsError):
    """An API payload did not have the shape the renderer needs."""
    kind = "render_error"


class ConfigError(PRCommentsError):
    """Configuration could not be loaded or failed validation."""
    kind = "config_error"
