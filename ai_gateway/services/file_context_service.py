"""Supporting-file context for generation prompts.

Turns a project's uploaded files into :class:`DocumentContext` items that can
be embedded in a prompt, and into the attachment flags the model router
uses.  Text files contribute their stored preview; binary media contribute a
one-line label such as ``"Image file: moodboard.png (12KB)"``.

File listings are memoised per project in a short-lived key-value cache, so
insights and risk requests for the same project arriving back to back do
not each hit the files API.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import structlog

from ai_gateway.interfaces.cache_provider import ICacheProvider
from ai_gateway.interfaces.file_repository import IProjectFileRepository
from ai_gateway.models.project import AttachmentSignals, DocumentContext, ProjectFile
from ai_gateway.utils.errors import FileContextError

logger = structlog.get_logger(logger_name=__name__)

_MEDIA_LABELS: tuple[tuple[str, str], ...] = (
    ("image/", "Image"),
    ("video/", "Video"),
    ("audio/", "Audio"),
)


def _media_label(mime_type: str) -> str:
    for prefix, label in _MEDIA_LABELS:
        if mime_type.startswith(prefix):
            return label
    return "File"


def to_document_context(project_file: ProjectFile) -> DocumentContext:
    """Reduce one file row to its prompt form."""
    preview = (project_file.content_preview or "").strip()
    if preview:
        return DocumentContext(
            name=project_file.name,
            type=project_file.file_type,
            mime_type=project_file.mime_type,
            content=project_file.content_preview,
            storage_path=project_file.storage_path,
        )
    size_kb = math.floor(project_file.file_size / 1024 + 0.5)
    return DocumentContext(
        name=project_file.name,
        type=project_file.file_type,
        mime_type=project_file.mime_type,
        content=f"{_media_label(project_file.mime_type)} file: {project_file.name} ({size_kb}KB)",
        storage_path=project_file.storage_path,
        file_size=project_file.file_size,
    )


class FileContextService:
    """Builds document context and attachment signals for a project."""

    def __init__(
        self,
        repository: IProjectFileRepository,
        listing_cache: ICacheProvider,
    ) -> None:
        self._repository = repository
        self._listing_cache = listing_cache

    async def build_document_context(self, project_id: str | None) -> list[DocumentContext]:
        """Return prompt-ready context for every file of *project_id*.

        Lookup failures are logged and produce an empty list: generation
        proceeds without supporting documents.
        """
        if not project_id:
            return []

        cache_key = f"project_files:{project_id}"
        documents = await self._listing_cache.get(cache_key)
        if documents is not None:
            return documents

        try:
            files = await self._repository.get_project_files(project_id)
        except FileContextError as exc:
            logger.warning("project_files_unavailable", project_id=project_id, error=str(exc))
            return []

        documents = [to_document_context(f) for f in files]
        await self._listing_cache.set(cache_key, documents)

        signals = self.attachment_signals(documents)
        logger.debug(
            "project_files_loaded",
            project_id=project_id,
            total=signals.document_count,
            has_images=signals.has_images,
            has_audio=signals.has_audio,
        )
        return documents

    @staticmethod
    def attachment_signals(documents: Sequence[DocumentContext]) -> AttachmentSignals:
        """Derive router flags; video counts as audio since it carries a soundtrack."""
        has_images = any(d.mime_type.startswith("image/") for d in documents)
        has_audio = any(d.mime_type.startswith(("audio/", "video/")) for d in documents)
        return AttachmentSignals(
            has_files=bool(documents),
            has_images=has_images,
            has_audio=has_audio,
            document_count=len(documents),
        )
