"""Supporting-file lookup adapters (IProjectFileRepository)."""

from ai_gateway.providers.files.rest_file_repository import RestProjectFileRepository

__all__ = ["RestProjectFileRepository"]
