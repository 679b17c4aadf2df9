"""
Git input models for container-mediated git operations

Pydantic models validating every value that is interpolated into a shell
command run inside a git container.

Security:
    - Repository URLs may use any scheme git accepts, but no whitespace,
      quotes, shell metacharacters or leading - (the URL is embedded
      verbatim in the command)
    - Values are never trimmed: surrounding whitespace is rejected so the
      checked value and the interpolated value are the same string
    - Repo paths cannot traverse out of the workspace
    - Branch names follow git ref rules and a conservative character set
    - Commit messages are bounded and shell-quoted by the command builder
"""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Shared Validation Helpers
# =============================================================================

_DANGEROUS_URL_CHARS = (';', '|', '&', '$', '`', '\n', '\r', "'", '"', '\\', '<', '>', '(', ')')
_DANGEROUS_PATH_CHARS = _DANGEROUS_URL_CHARS + (' ', '*', '?', '~')


def _validate_url(v: Optional[str], required: bool = True) -> Optional[str]:
    """Validate git repository URL."""
    if v is None:
        if required:
            raise ValueError('Repository URL cannot be empty')
        return None
    if not v.strip():
        if required:
            raise ValueError('Repository URL cannot be empty')
        return None
    if any(c.isspace() for c in v):
        raise ValueError('Repository URL cannot contain whitespace')
    if v.startswith('-'):
        raise ValueError('Repository URL cannot start with -')
    if any(c in v for c in _DANGEROUS_URL_CHARS):
        raise ValueError('Repository URL contains invalid characters')
    return v


def _validate_repo_path(v: Optional[str]) -> str:
    """Validate repo subpath inside the workspace."""
    if v is None:
        return ""
    if not v:
        return ""
    if any(c.isspace() for c in v):
        raise ValueError('Repo path cannot contain whitespace')
    if any(c in v for c in _DANGEROUS_PATH_CHARS):
        raise ValueError('Repo path contains invalid characters')
    if '..' in v.split('/'):
        raise ValueError('Repo path cannot contain ..')
    if v.lstrip('/').startswith('-'):
        raise ValueError('Repo path cannot start with -')
    return v


def _validate_branch(v: Optional[str], required: bool = True) -> Optional[str]:
    """Validate git branch name."""
    if v is None:
        if required:
            raise ValueError('Branch name cannot be empty')
        return None
    if not v.strip():
        if required:
            raise ValueError('Branch name cannot be empty')
        return None
    v = v.strip()
    if v.startswith('-') or v.startswith('.'):
        raise ValueError('Branch name cannot start with - or .')
    if '..' in v:
        raise ValueError('Branch name cannot contain ..')
    if v.endswith('.lock'):
        raise ValueError('Branch name cannot end with .lock')
    if v.endswith('/') or '//' in v:
        raise ValueError('Branch name cannot contain empty path components')
    if not re.match(r'^[a-zA-Z0-9/_.-]+$', v):
        raise ValueError('Branch name contains invalid characters')
    return v


def _validate_commit_message(v: str) -> str:
    """Validate commit message."""
    if not v or not v.strip():
        raise ValueError('Commit message cannot be empty')
    if '\x00' in v:
        raise ValueError('Commit message cannot contain NUL bytes')
    return v


# =============================================================================
# Git Operation Input Models
# =============================================================================


class RepositoryTarget(BaseModel):
    """Repository URL and workspace subpath a git container operates on."""
    url: str = Field(..., min_length=1, max_length=500)
    repo_path: str = Field(default='', max_length=255)

    @field_validator('url', mode='before')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url(v, required=True)

    @field_validator('repo_path', mode='before')
    @classmethod
    def validate_repo_path(cls, v: Optional[str]) -> str:
        return _validate_repo_path(v)


class PushRequest(BaseModel):
    """Branch and commit message for a push operation."""
    branch: str = Field(..., min_length=1, max_length=100)
    commit_message: str = Field(..., min_length=1, max_length=500)

    @field_validator('branch', mode='before')
    @classmethod
    def validate_branch(cls, v: Optional[str]) -> Optional[str]:
        return _validate_branch(v, required=True)

    @field_validator('commit_message')
    @classmethod
    def validate_commit_message(cls, v: str) -> str:
        return _validate_commit_message(v)
