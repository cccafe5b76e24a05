import base64
import binascii
import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar, Union
from uuid import UUID

import requests
from github import Auth, Github, GithubException, InputGitAuthor
from github import BadCredentialsException, RateLimitExceededException, UnknownObjectException

from repo_adapter.config import GitSettings
from repo_adapter.constants import (
    AUTH_STATUSES,
    BASE64_ENCODING,
    CONFLICT_HINTS,
    CONFLICT_STATUSES,
    MAX_LOG_CHARS,
    MAX_LOG_DICT_CHARS,
    PROVIDER_TYPE_DIR,
    PROVIDER_TYPE_FILE,
    PROVIDER_TYPE_SYMLINK,
    RATE_LIMIT_HINT,
    SCAFFOLD_MESSAGE,
    SECRET_PATTERNS,
    VALIDATION_STATUS,
)
from repo_adapter.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidFileError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    RepoAdapterError,
    ScaffoldError,
)
from repo_adapter.models import (
    ContentDecoding,
    FileKind,
    FileNode,
    ScaffoldOutcome,
    ScaffoldPolicy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

KIND_BY_PROVIDER_TYPE = {
    PROVIDER_TYPE_FILE: FileKind.FILE,
    PROVIDER_TYPE_DIR: FileKind.DIR,
    PROVIDER_TYPE_SYMLINK: FileKind.SYMLINK,
}


# Utilities
def sanitize_log(data) -> str:
    """Extract useful fields from a provider error, hide tokens."""
    if isinstance(data, dict):
        useful = {k: data[k] for k in ("message", "errors", "documentation_url") if k in data}
        text = str(useful) if useful else str(data)[:MAX_LOG_DICT_CHARS]
    else:
        text = str(data)[:MAX_LOG_CHARS]

    for pattern in SECRET_PATTERNS:
        text = re.sub(pattern, "***", text, flags=re.IGNORECASE)
    return text


def translate_error(error: GithubException, operation: str, target: str) -> ProviderError:
    """Map a PyGithub exception onto the adapter's error taxonomy."""
    status = error.status
    detail = sanitize_log(error.data)

    if isinstance(error, UnknownObjectException) or status == 404:
        return NotFoundError(operation, target, detail, status)
    if isinstance(error, RateLimitExceededException) or RATE_LIMIT_HINT in detail.lower():
        return RateLimitError(operation, target, detail, status)
    if isinstance(error, BadCredentialsException) or status in AUTH_STATUSES:
        return AuthenticationError(operation, target, detail, status)
    if status in CONFLICT_STATUSES:
        return ConflictError(operation, target, detail, status)
    if status == VALIDATION_STATUS and any(hint in detail.lower() for hint in CONFLICT_HINTS):
        return ConflictError(operation, target, detail, status)
    return ProviderError(operation, target, detail, status)


def decode_content(raw: Optional[str], encoding: Optional[str]) -> Tuple[str, ContentDecoding]:
    """Best-effort decode of a provider file body."""
    raw = raw or ""
    if encoding != BASE64_ENCODING:
        return raw, ContentDecoding.RAW
    try:
        return base64.b64decode(raw).decode("utf-8"), ContentDecoding.DECODED
    except (binascii.Error, UnicodeDecodeError):
        logger.debug("Content is not valid base64/UTF-8, returning raw body")
        return raw, ContentDecoding.RAW


def listing_target(entry) -> Optional[str]:
    """Symlink target from a directory listing payload."""
    # listing entries are not completed; attribute access on a missing key refetches the entry
    payload = getattr(entry, "_rawData", None)
    if isinstance(payload, dict):
        return payload.get("target")
    return getattr(entry, "target", None)


def as_repository_id(repository_id: Union[UUID, str]) -> UUID:
    return repository_id if isinstance(repository_id, UUID) else UUID(str(repository_id))


# Adapter Implementation
class RepositoryContentAdapter:
    """Per-project repository content operations against a GitHub-compatible API.

    Each project owns one repository named after its UUID under the configured
    owner namespace. All reads and writes target the configured branch and every
    write is authored by the configured bot identity.
    """

    def __init__(self, settings: GitSettings, github: Optional[Github] = None):
        self._settings = settings
        self._github: Optional[Github] = github
        identity = settings.identity
        self._identity = InputGitAuthor(identity.name, identity.email)
        if self._github is None:
            self._connect()

    def _connect(self) -> None:
        """Build the provider client, retries disabled."""
        self._github = Github(
            base_url=self._settings.base_url,
            auth=Auth.Token(self._settings.token.get_secret_value()),
            timeout=self._settings.request_timeout,
            retry=None,
        )
        logger.info(f"Git provider client ready: {self._settings.base_url} "
                    f"(owner={self._settings.owner_name}, branch={self._settings.branch_name})")

    @property
    def settings(self) -> GitSettings:
        return self._settings

    # Internal helpers
    def _call(self, operation: str, target: str, action: Callable[[], T]) -> T:
        try:
            return action()
        except GithubException as e:
            error = translate_error(e, operation, target)
            logger.debug(f"{operation} error at {target}: {error}")
            raise error from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(operation, target, sanitize_log(e)) from e

    def _repo(self, repository_id: UUID):
        # lazy: no request until the first contents call
        return self._github.get_repo(self._settings.full_name(repository_id), lazy=True)

    def _target(self, repository_id: UUID, path: str) -> str:
        return f"{self._settings.full_name(repository_id)}:{path or '/'}"

    def _fetch(self, repo, path: str, operation: str, target: str):
        return self._call(
            operation, target,
            lambda: repo.get_contents(path, ref=self._settings.branch_name),
        )

    def _fetch_file(self, repo, path: str, operation: str, target: str):
        contents = self._fetch(repo, path, operation, target)
        if isinstance(contents, list):
            raise ProviderError(operation, target, "Path is a directory")
        if contents.type != PROVIDER_TYPE_FILE:
            raise ProviderError(operation, target, f"Path is not a file (type={contents.type})")
        return contents

    # Reads
    def get_file(self, repository_id: Union[UUID, str], path: str) -> FileNode:
        """Fetch a single file with its body decoded when possible."""
        repository_id = as_repository_id(repository_id)
        logger.info(f"GetFile project:{repository_id} path:{path}")
        target = self._target(repository_id, path)

        contents = self._fetch_file(self._repo(repository_id), path, "get_file", target)
        content, decoding = decode_content(contents.content, contents.encoding)
        if decoding == ContentDecoding.RAW:
            logger.warning(f"Returning undecoded content for {target} (encoding={contents.encoding})")

        return FileNode(
            name=contents.name,
            path=contents.path,
            kind=FileKind.FILE,
            content_hash=contents.sha,
            size=contents.size or 0,
            content=content,
            decoding=decoding,
        )

    def list_files(self, repository_id: Union[UUID, str], path: str = "") -> List[FileNode]:
        """List the immediate children of a directory; empty path lists the root."""
        repository_id = as_repository_id(repository_id)
        logger.info(f"ListFiles project:{repository_id} path:{path}")
        target = self._target(repository_id, path)

        contents = self._fetch(self._repo(repository_id), path, "list_files", target)
        entries = contents if isinstance(contents, list) else [contents]
        return [self._to_node(entry, target) for entry in entries]

    def _to_node(self, entry, target: str) -> FileNode:
        kind = KIND_BY_PROVIDER_TYPE.get(entry.type, FileKind.UNKNOWN)
        if kind == FileKind.UNKNOWN:
            logger.warning(f"Unknown entry type '{entry.type}' for {entry.path} in {target}")

        return FileNode(
            name=entry.name,
            path=entry.path,
            kind=kind,
            target=listing_target(entry) if kind == FileKind.SYMLINK else None,
            content_hash=entry.sha,
            size=entry.size or 0,
        )

    # Writes
    def commit_file(
        self,
        repository_id: Union[UUID, str],
        path: str,
        content: str,
        message: str,
    ) -> None:
        """Create or update a file, using the observed sha for updates."""
        repository_id = as_repository_id(repository_id)
        logger.info(f"CommitFile project:{repository_id} path:{path} message:{message}")
        target = self._target(repository_id, path)
        repo = self._repo(repository_id)
        # PyGithub base64-encodes the body on the wire
        body = content.encode("utf-8")
        branch = self._settings.branch_name

        try:
            existing = self._fetch_file(repo, path, "commit_file", target)
        except NotFoundError:
            existing = None

        if existing is not None:
            logger.debug(f"Updating {target} at sha {existing.sha}")
            self._call("commit_file", target, lambda: repo.update_file(
                path, message, body, existing.sha,
                branch=branch, committer=self._identity, author=self._identity,
            ))
            return

        logger.debug(f"Creating {target}")
        self._call("commit_file", target, lambda: repo.create_file(
            path, message, body,
            branch=branch, committer=self._identity, author=self._identity,
        ))

    def delete_file(self, repository_id: Union[UUID, str], path: str, message: str) -> None:
        """Delete a file; the provider requires its current sha."""
        repository_id = as_repository_id(repository_id)
        logger.info(f"DeleteFile project:{repository_id} path:{path} message:{message}")
        target = self._target(repository_id, path)
        repo = self._repo(repository_id)

        existing = self._fetch_file(repo, path, "delete_file", target)
        options = {"branch": self._settings.branch_name}
        if self._settings.sign_deletes:
            options.update(committer=self._identity, author=self._identity)

        self._call("delete_file", target, lambda: repo.delete_file(
            path, message, existing.sha, **options
        ))

    # Repositories
    def create_repository(self, repository_id: Union[UUID, str]) -> str:
        """Create the project repository and return its full name."""
        repository_id = as_repository_id(repository_id)
        logger.info(f"Creating repository: {repository_id}")
        target = self._settings.full_name(repository_id)
        owner = self._resolve_owner(target)

        # always private and initialized; repo_private and repo_init are not consulted
        repo = self._call("create_repository", target, lambda: owner.create_repo(
            str(repository_id),
            description=self._settings.repo_description,
            private=True,
            auto_init=True,
        ))
        self._ensure_branch(repo, target)

        logger.info(f"Created repository {repo.full_name}")
        return repo.full_name

    def _resolve_owner(self, target: str):
        """Organization named owner_name, else the authenticated user with that login."""
        owner_name = self._settings.owner_name
        try:
            return self._call(
                "create_repository", target,
                lambda: self._github.get_organization(owner_name),
            )
        except NotFoundError:
            logger.debug(f"No organization '{owner_name}', trying authenticated user")

        user = self._github.get_user()
        login = self._call("create_repository", target, lambda: user.login)
        if login != owner_name:
            raise NotFoundError(
                "create_repository", target,
                f"Owner namespace not found: {owner_name}",
            )
        return user

    def _ensure_branch(self, repo, target: str) -> None:
        """Make the configured branch the default branch of a fresh repository."""
        branch = self._settings.branch_name
        if repo.default_branch == branch:
            return

        logger.info(f"Switching default branch of {target}: {repo.default_branch} -> {branch}")

        def switch():
            head = repo.get_branch(repo.default_branch)
            repo.create_git_ref(ref=f"refs/heads/{branch}", sha=head.commit.sha)
            repo.edit(default_branch=branch)

        self._call("create_repository", target, switch)

    # Bulk
    def scaffold_project_files(
        self,
        repository_id: Union[UUID, str],
        files: Sequence[FileNode],
        policy: Optional[ScaffoldPolicy] = None,
    ) -> List[ScaffoldOutcome]:
        """Commit files one at a time, in order, returning one outcome per file."""
        repository_id = as_repository_id(repository_id)
        policy = ScaffoldPolicy(policy or self._settings.scaffold_policy)
        total = len(files)
        logger.info(f"Starting serial scaffold for {repository_id} ({total} files, {policy.value})")

        outcomes: List[ScaffoldOutcome] = []
        for index, node in enumerate(files, start=1):
            logger.info(f"[{index}/{total}] Committing {node.path}...")
            try:
                if node.content is None:
                    raise InvalidFileError(node.path, "No content to commit")
                self.commit_file(
                    repository_id, node.path, node.content,
                    SCAFFOLD_MESSAGE.format(path=node.path),
                )
            except RepoAdapterError as e:
                logger.error(f"Scaffold project:{repository_id} path:{node.path} err: {e}")
                outcomes.append(ScaffoldOutcome(node.path, e))
                if policy == ScaffoldPolicy.FAIL_FAST:
                    raise ScaffoldError(node.path, outcomes, e) from e
                continue
            outcomes.append(ScaffoldOutcome(node.path))

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        if failed:
            logger.warning(f"Scaffold finished for {repository_id}: {failed}/{total} files failed")
        else:
            logger.info(f"Scaffold completed successfully for {repository_id}")
        return outcomes

    def close(self) -> None:
        if self._github is not None:
            self._github.close()
            self._github = None
            logger.debug("Git provider connection closed")

    def __enter__(self) -> "RepositoryContentAdapter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
