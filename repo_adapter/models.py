from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


# Enums
class FileKind(str, Enum):
    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    UNKNOWN = "unknown"


class ContentDecoding(str, Enum):
    """How GetFile produced the returned body."""

    DECODED = "decoded"
    RAW = "raw"


class ScaffoldPolicy(str, Enum):
    """What scaffolding does when a single file fails."""

    BEST_EFFORT = "best_effort"
    FAIL_FAST = "fail_fast"


# Models
class CommitIdentity(BaseModel):
    """Author and committer attached to every write."""

    name: str
    email: str

    model_config = {"frozen": True}


class FileNode(BaseModel):
    """A file, directory or symlink inside a project repository."""

    name: str
    path: str
    kind: FileKind = FileKind.FILE
    target: Optional[str] = None
    content_hash: Optional[str] = None
    size: int = 0
    content: Optional[str] = None
    decoding: Optional[ContentDecoding] = None
    children: List["FileNode"] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_kind_fields(self) -> "FileNode":
        if self.target is not None and self.kind != FileKind.SYMLINK:
            raise ValueError("target is only allowed on symlinks")
        if self.content is not None and self.kind != FileKind.FILE:
            raise ValueError("content is only allowed on files")
        if self.decoding is not None and self.content is None:
            raise ValueError("decoding requires content")
        return self

    @classmethod
    def for_upload(cls, path: str, content: str) -> "FileNode":
        path = path.strip("/")
        return cls(name=path.rsplit("/", 1)[-1], path=path, content=content)


@dataclass(frozen=True)
class ScaffoldOutcome:
    path: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
