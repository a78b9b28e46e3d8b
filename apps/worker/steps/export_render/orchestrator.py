"""
Orchestrator for report rendering.

Coordinates dataset loading, grouping, image acquisition, and the renderer
that matches the requested report kind. Every request builds its own case
collection and image cache.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from apps.worker.lib.grouping import group_records
from apps.worker.lib.image_policy import acquire_shared_image, acquire_unique_images
from apps.worker.lib.image_provider import ImageProvider, report_image_provider, spreadsheet_image_provider
from apps.worker.steps.export_render.cursor_pdf import generate_cursor_pdf
from apps.worker.steps.export_render.html_pdf import ChromiumPdfRenderer, DocumentRenderer
from apps.worker.steps.export_render.markup_render import generate_markup
from apps.worker.steps.export_render.xlsx_render import generate_xlsx
from packages.shared.artifacts import report_filename, report_media_type
from packages.shared.dataset import DatasetSource, JsonFileDatasetSource, Record
from packages.shared.models import ImageMode, ReportArtifact, ReportKind, TitleVariant

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportService:
    def __init__(
        self,
        dataset: DatasetSource,
        image_provider: ImageProvider,
        thumbnail_provider: ImageProvider,
        document_renderer: DocumentRenderer,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.dataset = dataset
        self.image_provider = image_provider
        self.thumbnail_provider = thumbnail_provider
        self.document_renderer = document_renderer
        self.clock = clock

    def generate(self, kind: ReportKind) -> ReportArtifact:
        """Build one report artifact. Dataset and rendering failures propagate."""
        kind = ReportKind(kind)
        generated_at = self.clock()
        logger.info(f"Starting {kind.value} report generation...")

        records = self.dataset.load()

        if kind == ReportKind.EXCEL:
            content = self.render_excel(records)
        elif kind == ReportKind.PDF:
            content = self.render_pdf(records)
        elif kind == ReportKind.STYLED_PDF:
            content = self.render_styled_pdf(records, ImageMode.SHARED, generated_at)
        else:
            content = self.render_styled_pdf(records, ImageMode.UNIQUE, generated_at)

        artifact = ReportArtifact(
            kind=kind,
            filename=report_filename(kind, generated_at),
            media_type=report_media_type(kind),
            content=content,
            generated_at=generated_at,
        )
        logger.info(f"Report generated: {artifact.filename} ({artifact.size} bytes)")
        return artifact

    def close(self) -> None:
        """Release the HTTP sessions held by the image providers."""
        self.image_provider.close()
        self.thumbnail_provider.close()

    def render_excel(self, records: Sequence[Record]) -> bytes:
        images = acquire_shared_image(self.thumbnail_provider, key="spreadsheet")
        return generate_xlsx(records, images.shared_image())

    def render_pdf(self, records: Sequence[Record]) -> bytes:
        cases = group_records(records)
        images = acquire_shared_image(self.image_provider)
        return generate_cursor_pdf(cases, images.shared_image())

    def render_styled_pdf(self, records: Sequence[Record], mode: ImageMode, generated_at: datetime) -> bytes:
        cases = group_records(records)
        if mode == ImageMode.UNIQUE:
            images = acquire_unique_images(cases, self.image_provider)
            variant = TitleVariant.UNIQUE
        else:
            images = acquire_shared_image(self.image_provider)
            variant = TitleVariant.SHARED
        markup = generate_markup(cases, records, images, variant=variant, generated_at=generated_at.astimezone())
        return self.document_renderer.render_markup_to_pdf(markup)


def build_report_service(dataset_path: Path | str | None = None) -> ReportService:
    """Service wired to the JSON dataset, picsum images, and headless Chromium."""
    return ReportService(
        dataset=JsonFileDatasetSource(dataset_path),
        image_provider=report_image_provider(),
        thumbnail_provider=spreadsheet_image_provider(),
        document_renderer=ChromiumPdfRenderer(),
    )
