# Test Fixtures
import base64
import hashlib
import uuid
from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from github import GithubException, UnknownObjectException

from repo_adapter.adapter import RepositoryContentAdapter
from repo_adapter.config import GitSettings


ENV_VARS = (
    "ORCHESTRATOR_GIT_BASE_URL",
    "ORCHESTRATOR_GIT_TOKEN",
    "ORCHESTRATOR_GIT_OWNER_NAME",
    "ORCHESTRATOR_GIT_BRANCH_NAME",
    "ORCHESTRATOR_GIT_SCAFFOLD_POLICY",
)


def not_found():
    return UnknownObjectException(404, {"message": "Not Found"}, {})


def blob_sha(data: bytes) -> str:
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


# Fake Provider
class FakeRepo:
    """In-memory repository speaking the PyGithub calls the adapter makes."""

    def __init__(self, full_name: str, default_branch: str = "main"):
        self.full_name = full_name
        self.name = full_name.split("/", 1)[1]
        self.default_branch = default_branch
        self.files: Dict[str, bytes] = {}
        self.symlinks: Dict[str, str] = {}
        self.commits: List[dict] = []
        self.fail_writes: set = set()
        self.read_errors: Dict[str, int] = {}
        self.refs: Dict[str, str] = {}

    # Helpers
    def sha(self, path: str) -> str:
        return blob_sha(self.files[path])

    def _file_entry(self, path: str, with_content: bool):
        data = self.files[path]
        return SimpleNamespace(
            name=path.rsplit("/", 1)[-1],
            path=path,
            type="file",
            sha=blob_sha(data),
            size=len(data),
            content=base64.encodebytes(data).decode("ascii") if with_content else None,
            encoding="base64" if with_content else None,
        )

    def _children(self, path: str):
        prefix = f"{path}/" if path else ""
        seen = {}
        for full in sorted(list(self.files) + list(self.symlinks)):
            if not full.startswith(prefix):
                continue
            rest = full[len(prefix):]
            head = rest.split("/", 1)[0]
            child = prefix + head
            if head in seen:
                continue
            if "/" in rest:
                seen[head] = SimpleNamespace(name=head, path=child, type="dir", sha=blob_sha(child.encode()), size=0)
            elif full in self.symlinks:
                seen[head] = SimpleNamespace(name=head, path=child, type="symlink",
                                             sha=blob_sha(child.encode()), size=0, target=self.symlinks[full])
            else:
                seen[head] = self._file_entry(child, with_content=False)
        return list(seen.values())

    def _check_branch(self, branch):
        if branch is not None and branch != self.default_branch and branch not in self.refs:
            raise not_found()

    # PyGithub surface
    def get_contents(self, path: str, ref: Optional[str] = None):
        self._check_branch(ref)
        path = path.strip("/")
        if path in self.read_errors:
            raise GithubException(self.read_errors[path], {"message": "Server Error"}, {})
        if path in self.files:
            return self._file_entry(path, with_content=True)
        children = self._children(path)
        if not children and path:
            raise not_found()
        return children

    def create_file(self, path, message, content, branch=None, committer=None, author=None):
        self._check_branch(branch)
        if path in self.fail_writes:
            raise GithubException(500, {"message": "Internal Server Error"}, {})
        if path in self.files:
            raise GithubException(422, {"message": "Invalid request.\n\n\"sha\" wasn't supplied."}, {})
        self.files[path] = content
        self.commits.append(dict(op="create", path=path, message=message, branch=branch,
                                 committer=committer, author=author))
        return {"content": self._file_entry(path, False), "commit": MagicMock()}

    def update_file(self, path, message, content, sha, branch=None, committer=None, author=None):
        self._check_branch(branch)
        if path in self.fail_writes:
            raise GithubException(500, {"message": "Internal Server Error"}, {})
        if path not in self.files:
            raise not_found()
        if sha != self.sha(path):
            raise GithubException(409, {"message": f"{path} does not match {sha}"}, {})
        self.files[path] = content
        self.commits.append(dict(op="update", path=path, message=message, branch=branch,
                                 committer=committer, author=author, sha=sha))
        return {"content": self._file_entry(path, False), "commit": MagicMock()}

    def delete_file(self, path, message, sha, branch=None, committer=None, author=None):
        self._check_branch(branch)
        if path not in self.files:
            raise not_found()
        if sha != self.sha(path):
            raise GithubException(409, {"message": f"{path} does not match {sha}"}, {})
        del self.files[path]
        self.commits.append(dict(op="delete", path=path, message=message, branch=branch,
                                 committer=committer, author=author, sha=sha))
        return {"commit": MagicMock()}

    def get_branch(self, branch):
        return SimpleNamespace(name=branch, commit=SimpleNamespace(sha="0" * 40))

    def create_git_ref(self, ref, sha):
        self.refs[ref.replace("refs/heads/", "")] = sha

    def edit(self, default_branch=None, **kwargs):
        if default_branch is not None:
            self.default_branch = default_branch


class MissingRepo:
    """Lazy handle to a repository that does not exist."""

    def __getattr__(self, name):
        def missing(*args, **kwargs):
            raise not_found()
        return missing


class FakeOwner:
    def __init__(self, github: "FakeGithub", login: str):
        self._github = github
        self.login = login

    def create_repo(self, name, description=None, private=False, auto_init=False, **kwargs):
        full_name = f"{self.login}/{name}"
        if full_name in self._github.repos:
            raise GithubException(422, {
                "message": "Repository creation failed.",
                "errors": [{"resource": "Repository", "field": "name",
                            "message": "name already exists on this account"}],
            }, {})
        repo = FakeRepo(full_name, default_branch=self._github.initial_branch)
        repo.private = private
        repo.description = description
        repo.auto_init = auto_init
        if auto_init:
            repo.files["README.md"] = f"# {name}\n".encode()
        self._github.repos[full_name] = repo
        return repo


class FakeGithub:
    def __init__(self, orgs=("zaminebazi",), user_login: str = "bot", initial_branch: str = "main"):
        self.repos: Dict[str, FakeRepo] = {}
        self.orgs = set(orgs)
        self.user_login = user_login
        self.initial_branch = initial_branch
        self.closed = False

    def add_repo(self, full_name: str) -> FakeRepo:
        self.repos[full_name] = FakeRepo(full_name)
        return self.repos[full_name]

    def get_repo(self, full_name, lazy=False):
        return self.repos.get(full_name) or MissingRepo()

    def get_organization(self, login):
        if login not in self.orgs:
            raise not_found()
        return FakeOwner(self, login)

    def get_user(self):
        return FakeOwner(self, self.user_login)

    def close(self):
        self.closed = True


# Fixtures
@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("ORCHESTRATOR_GIT_BASE_URL", "https://git.example.com/api/v3/")
    monkeypatch.setenv("ORCHESTRATOR_GIT_TOKEN", "ghp_test_12345")


@pytest.fixture
def settings():
    return GitSettings(
        base_url="https://git.example.com/api/v3",
        token="ghp_test_12345",
        _env_file=None,
    )


@pytest.fixture
def project_id():
    return uuid.UUID("6f1c2a9e-3b7d-4c1e-9a55-2d8e0b4f7a10")


@pytest.fixture
def fake_github():
    return FakeGithub()


@pytest.fixture
def repo(fake_github, project_id):
    return fake_github.add_repo(f"zaminebazi/{project_id}")


@pytest.fixture
def adapter(settings, fake_github):
    return RepositoryContentAdapter(settings, github=fake_github)


@pytest.fixture
def mock_content_file():
    def _make(name: str, file_type: str = "file", size: int = 10, **attrs):
        m = MagicMock()
        m.name = name
        m.path = name
        m.type = file_type
        m.size = size
        m.sha = f"sha-{name}"
        for key, value in attrs.items():
            setattr(m, key, value)
        return m
    return _make


@pytest.fixture
def make_github():
    return FakeGithub
