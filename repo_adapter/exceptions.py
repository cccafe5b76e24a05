from typing import List, Optional


# Base Exception
class RepoAdapterError(Exception):
    # Base exception for repository adapter errors
    pass


# Local Exceptions
class ConfigurationError(RepoAdapterError):
    # Raised when required settings are missing or invalid at startup
    pass


class InvalidFileError(RepoAdapterError):
    # Raised when a caller-supplied file node cannot be committed

    def __init__(self, path: str, reason: str = "Invalid file"):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ScaffoldError(RepoAdapterError):
    # Raised by fail-fast scaffolding on the first failed file

    def __init__(self, path: str, outcomes: List, cause: Exception):
        self.path = path
        self.outcomes = outcomes
        self.cause = cause
        super().__init__(f"Scaffold aborted at {path}: {cause}")


# Provider Exceptions
class ProviderError(RepoAdapterError):
    # Raised when the hosting API call fails

    def __init__(
        self,
        operation: str,
        target: str,
        detail: str = "",
        status: Optional[int] = None,
    ):
        self.operation = operation
        self.target = target
        self.detail = detail
        self.status = status
        code = f" [{status}]" if status is not None else ""
        message = f"{operation} failed for {target}{code}"
        super().__init__(f"{message}: {detail}" if detail else message)


class NotFoundError(ProviderError):
    # Raised when the path, branch, repository or owner does not exist
    pass


class ConflictError(ProviderError):
    # Raised when the provider rejects a write on a stale sha or an existing name
    pass


class AuthenticationError(ProviderError):
    # Raised when the provider rejects the access token
    pass


class RateLimitError(ProviderError):
    # Raised when the provider API rate limit is exhausted
    pass
