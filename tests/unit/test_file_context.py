"""Unit tests for supporting-file lookup and document context building."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from ai_gateway.models.project import DocumentContext, ProjectFile
from ai_gateway.providers.cache.memory_cache import MemoryCacheProvider
from ai_gateway.providers.files.rest_file_repository import RestProjectFileRepository
from ai_gateway.services.file_context_service import FileContextService, to_document_context
from ai_gateway.utils.errors import FileContextError

_FILES_URL = "http://files.test/rest/v1"


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", f"{_FILES_URL}/project_files"), **kwargs)


def _row(**overrides) -> dict:
    row = {
        "id": "f1",
        "project_id": "p1",
        "name": "brief.pdf",
        "file_type": "pdf",
        "mime_type": "application/pdf",
        "file_size": 2048,
        "storage_path": "p1/brief.pdf",
        "content_preview": "Executive brief",
        "created_at": "2024-05-01T10:00:00Z",
    }
    row.update(overrides)
    return row


# ======================================================================
# RestProjectFileRepository
# ======================================================================


class TestRestProjectFileRepository:
    @pytest.fixture()
    def http_client(self) -> AsyncMock:
        return AsyncMock(spec=httpx.AsyncClient)

    @pytest.fixture()
    def repository(self, http_client: AsyncMock, settings) -> RestProjectFileRepository:
        return RestProjectFileRepository(http_client=http_client, settings=settings)

    @pytest.mark.asyncio
    async def test_lists_project_files(self, repository, http_client: AsyncMock) -> None:
        http_client.get.return_value = _response(200, json=[_row(), _row(id="f2", name="b.txt")])

        files = await repository.get_project_files("p1")

        assert [f.id for f in files] == ["f1", "f2"]
        call = http_client.get.call_args
        assert call.args[0] == f"{_FILES_URL}/project_files"
        assert call.kwargs["params"]["project_id"] == "eq.p1"
        assert call.kwargs["headers"]["apikey"] == "service-key"

    @pytest.mark.asyncio
    async def test_invalid_rows_are_skipped(self, repository, http_client: AsyncMock) -> None:
        http_client.get.return_value = _response(200, json=[_row(), {"id": "broken"}])

        files = await repository.get_project_files("p1")

        assert len(files) == 1

    @pytest.mark.asyncio
    async def test_http_status_error(self, repository, http_client: AsyncMock) -> None:
        http_client.get.return_value = _response(500)

        with pytest.raises(FileContextError):
            await repository.get_project_files("p1")

    @pytest.mark.asyncio
    async def test_non_list_body(self, repository, http_client: AsyncMock) -> None:
        http_client.get.return_value = _response(200, json={"message": "nope"})

        with pytest.raises(FileContextError):
            await repository.get_project_files("p1")


    @pytest.mark.asyncio
    async def test_transport_error(self, repository, http_client: AsyncMock) -> None:
        http_client.get.side_effect = httpx.ConnectError("refused")

        with pytest.raises(FileContextError):
            await repository.get_project_files("p1")

    @pytest.mark.asyncio
    async def test_unconfigured_url(self, http_client: AsyncMock, settings_factory) -> None:
        repository = RestProjectFileRepository(
            http_client=http_client, settings=settings_factory(files_api_url="")
        )

        with pytest.raises(FileContextError):
            await repository.get_project_files("p1")
        http_client.get.assert_not_called()


# ======================================================================
# Document context
# ======================================================================


class TestToDocumentContext:
    def test_text_preview_used_as_content(self, sample_files: list[ProjectFile]) -> None:
        document = to_document_context(sample_files[0])
        assert document.content == "Target market: small agencies"
        assert document.file_size is None

    def test_media_file_gets_label(self, sample_files: list[ProjectFile]) -> None:
        document = to_document_context(sample_files[1])
        assert document.content == "Image file: mock.png (12KB)"
        assert document.file_size == 12288

    @pytest.mark.parametrize(
        ("mime_type", "label"),
        [("video/mp4", "Video"), ("audio/mpeg", "Audio"), ("application/zip", "File")],
    )
    def test_labels_by_mime_type(self, mime_type: str, label: str) -> None:
        project_file = ProjectFile(
            id="x", project_id="p1", name="clip", mime_type=mime_type, file_size=1536, content_preview="  "
        )
        assert to_document_context(project_file).content == f"{label} file: clip (2KB)"


class TestFileContextService:
    @pytest.fixture()
    def repository(self, sample_files: list[ProjectFile]) -> AsyncMock:
        repository = AsyncMock()
        repository.get_project_files = AsyncMock(return_value=sample_files)
        return repository

    @pytest.fixture()
    def service(self, repository: AsyncMock) -> FileContextService:
        return FileContextService(repository=repository, listing_cache=MemoryCacheProvider())

    @pytest.mark.asyncio
    async def test_builds_context_and_memoises_listing(
        self, service: FileContextService, repository: AsyncMock
    ) -> None:
        first = await service.build_document_context("p1")
        second = await service.build_document_context("p1")

        assert [d.name for d in first] == ["brief.pdf", "mock.png"]
        assert second == first
        repository.get_project_files.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_no_project_id_skips_lookup(
        self, service: FileContextService, repository: AsyncMock
    ) -> None:
        assert await service.build_document_context(None) == []
        repository.get_project_files.assert_not_called()

    @pytest.mark.asyncio
    async def test_lookup_failure_yields_empty_context(
        self, service: FileContextService, repository: AsyncMock
    ) -> None:
        repository.get_project_files.side_effect = FileContextError("down", provider_name="files-api")

        assert await service.build_document_context("p1") == []

    def test_attachment_signals(self) -> None:
        documents = [
            DocumentContext(name="a", type="pdf", mime_type="application/pdf", content="x", storage_path="a"),
            DocumentContext(name="b", type="video", mime_type="video/mp4", content="y", storage_path="b"),
        ]

        signals = FileContextService.attachment_signals(documents)

        assert signals.has_files is True
        assert signals.has_images is False
        assert signals.has_audio is True
        assert signals.document_count == 2

    def test_attachment_signals_empty(self) -> None:
        signals = FileContextService.attachment_signals([])
        assert signals.has_files is False
        assert signals.document_count == 0
