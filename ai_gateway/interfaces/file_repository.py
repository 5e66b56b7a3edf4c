"""Abstract base class for the supporting-file lookup collaborator."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ai_gateway.models.project import ProjectFile


class IProjectFileRepository(ABC):
    """Read-only access to a project's uploaded supporting files."""

    @abstractmethod
    async def get_project_files(self, project_id: str) -> list[ProjectFile]:
        """Return the files attached to *project_id* (empty if none).

        Raises
        ------
        ai_gateway.utils.errors.FileContextError
            If the backing store cannot be queried.
        """
