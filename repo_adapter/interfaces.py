from typing import List, Optional, Protocol, Sequence, Union, runtime_checkable
from uuid import UUID

from repo_adapter.models import FileNode, ScaffoldOutcome, ScaffoldPolicy


# Interfaces
@runtime_checkable
class RepositoryContentInterface(Protocol):
    # Protocol for per-project repository content access

    def get_file(self, repository_id: Union[UUID, str], path: str) -> FileNode:
        # Single file with its decoded body
        ...

    def list_files(self, repository_id: Union[UUID, str], path: str = "") -> List[FileNode]:
        # Immediate children of a directory, root when path is empty
        ...

    def commit_file(
        self, repository_id: Union[UUID, str], path: str, content: str, message: str
    ) -> None:
        # Create or update a file as the bot identity
        ...

    def delete_file(self, repository_id: Union[UUID, str], path: str, message: str) -> None:
        # Delete an existing file
        ...

    def create_repository(self, repository_id: Union[UUID, str]) -> str:
        # Create the project repository, returns owner/name
        ...

    def scaffold_project_files(
        self,
        repository_id: Union[UUID, str],
        files: Sequence[FileNode],
        policy: Optional[ScaffoldPolicy] = None,
    ) -> List[ScaffoldOutcome]:
        # Commit files one by one in order
        ...

    def close(self) -> None:
        # Close any open connections
        ...
