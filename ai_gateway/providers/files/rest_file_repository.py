"""Supporting-file lookup over a PostgREST-style table endpoint.

Reads rows from the hosted database's ``project_files`` table, e.g.

    GET {files_api_url}/project_files?project_id=eq.<id>&select=*

with the service key sent both as ``apikey`` and as a bearer token.  Only
listing is supported; uploads and storage live outside the gateway.
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from ai_gateway.config.settings import Settings
from ai_gateway.interfaces.file_repository import IProjectFileRepository
from ai_gateway.models.project import ProjectFile
from ai_gateway.utils.errors import FileContextError
from ai_gateway.utils.logging import get_logger

_PROVIDER_NAME = "files-api"
_TABLE = "project_files"


class RestProjectFileRepository(IProjectFileRepository):
    """Lists a project's files through an injected ``httpx.AsyncClient``."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._base_url = settings.files_api_url.rstrip("/")
        self._api_key = settings.files_api_key
        self._logger = get_logger(__name__)

    async def get_project_files(self, project_id: str) -> list[ProjectFile]:
        if not self._base_url:
            raise FileContextError("files_api_url is not configured", provider_name=_PROVIDER_NAME)

        try:
            response = await self._http.get(
                f"{self._base_url}/{_TABLE}",
                params={
                    "project_id": f"eq.{project_id}",
                    "select": "*",
                    "order": "created_at.desc",
                },
                headers=self._headers(),
                timeout=10.0,
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as exc:
            raise FileContextError(
                f"File listing failed with status {exc.response.status_code}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise FileContextError(f"File listing request failed: {exc}", provider_name=_PROVIDER_NAME) from exc
        except ValueError as exc:
            raise FileContextError("File listing returned a non-JSON body", provider_name=_PROVIDER_NAME) from exc

        if not isinstance(rows, list):
            raise FileContextError("File listing did not return a list", provider_name=_PROVIDER_NAME)

        files: list[ProjectFile] = []
        for row in rows:
            try:
                files.append(ProjectFile.model_validate(row))
            except ValidationError:
                self._logger.warning("project_file_row_skipped", project_id=project_id, row_id=_row_id(row))
        return files

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers


def _row_id(row: object) -> object:
    return row.get("id") if isinstance(row, dict) else None
