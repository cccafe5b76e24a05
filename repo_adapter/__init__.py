# Imports
from repo_adapter.config import GitSettings, load_settings
from repo_adapter.adapter import RepositoryContentAdapter, sanitize_log
from repo_adapter.models import (
    CommitIdentity,
    ContentDecoding,
    FileKind,
    FileNode,
    ScaffoldOutcome,
    ScaffoldPolicy,
)
from repo_adapter.exceptions import (
    RepoAdapterError,
    ConfigurationError,
    InvalidFileError,
    ScaffoldError,
    ProviderError,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    RateLimitError,
)
from repo_adapter.interfaces import RepositoryContentInterface


# Exports
__all__ = [
    "GitSettings",
    "load_settings",
    "RepositoryContentAdapter",
    "RepositoryContentInterface",
    "CommitIdentity",
    "ContentDecoding",
    "FileKind",
    "FileNode",
    "ScaffoldOutcome",
    "ScaffoldPolicy",
    "RepoAdapterError",
    "ConfigurationError",
    "InvalidFileError",
    "ScaffoldError",
    "ProviderError",
    "NotFoundError",
    "ConflictError",
    "AuthenticationError",
    "RateLimitError",
    "sanitize_log",
]
