"""
Case export: PDF report, ZIP photo archives and single photo download.

The PDF lists metadata only (log type, time, note, photo counts and names);
it does not embed images.
"""

import io
import re
import zipfile
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple
from uuid import UUID

import requests
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from homerecall.core.exceptions import DownloadError, ExportError, StorageError
from homerecall.models.recall_case import RecallCase
from homerecall.models.recall_log import RecallLog
from homerecall.models.recall_photo import RecallPhoto
from homerecall.services.storage.object_store import ObjectStoreGateway

logger = logging.getLogger(__name__)

FOOTER_TEXT = "Recall - Case Management System"

# Page geometry, in millimetres from the top-left corner
PAGE_TOP = 20
PAGE_BREAK_AT = 250
MARGIN_LEFT = 20
TEXT_WIDTH = 170
LINE_HEIGHT = 7
BLOCK_GAP = 5

DOWNLOAD_TIMEOUT = 30


@dataclass
class ExportArtifact:
    filename: str
    content: bytes
    media_type: str


def slugify_title(title: str) -> str:
    return re.sub(r'[^a-z0-9]', '_', title, flags=re.IGNORECASE).lower()


def _format_date(value: datetime) -> str:
    return value.strftime('%m/%d/%Y')


def _format_datetime(value: datetime) -> str:
    return value.strftime('%m/%d/%Y, %I:%M:%S %p')


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def log_folder_name(log: RecallLog) -> str:
    """Archive folder for one log: {YYYY-MM-DD}_{HHMM}_{type}."""
    return f"{log.created_at.strftime('%Y-%m-%d')}_{log.created_at.strftime('%H%M')}_{log.log_type}"


def _sorted_logs(logs: Iterable[RecallLog]) -> List[RecallLog]:
    return sorted(logs, key=lambda log: log.created_at)


def _renderable(photos: Iterable[RecallPhoto], selected_ids: Optional[Set[UUID]] = None) -> List[RecallPhoto]:
    return [
        p for p in photos
        if not p.is_orphaned and (selected_ids is None or p.id in selected_ids)
    ]


def _archive_name(name: str, used: Set[str]) -> str:
    """Flatten path separators and make the name unique inside its folder."""
    name = name.replace('/', '_').replace('\\', '_') or 'photo.jpg'
    if name not in used:
        used.add(name)
        return name

    stem, dot, ext = name.rpartition('.')
    if not dot:
        stem, ext = name, ''
    counter = 2
    while True:
        candidate = f"{stem} ({counter}).{ext}" if ext else f"{stem} ({counter})"
        if candidate not in used:
            used.add(candidate)
            return candidate
        counter += 1


def build_case_summary(
    case: RecallCase,
    logs: Iterable[RecallLog],
    generated_at: Optional[datetime] = None
) -> str:
    """Plain-text summary placed at the root of a case archive."""
    logs = _sorted_logs(logs)
    lines = [f"Case: {case.title}"]
    if case.client_name:
        lines.append(f"Client: {case.client_name}")
    if case.location_text:
        lines.append(f"Location: {case.location_text}")
    lines.append(f"Created: {_format_datetime(case.created_at)}")
    lines.append(f"Last Updated: {_format_datetime(case.updated_at)}")
    lines.append("")
    lines.append(f"=== LOGS ({len(logs)}) ===")
    lines.append("")

    for index, log in enumerate(logs, start=1):
        lines.append(f"{index}. {log.log_type} - {_format_datetime(log.created_at)}")
        if log.note and log.note.strip():
            lines.append(f"   {log.note}")
        photo_count = len(_renderable(log.photos))
        if photo_count > 0:
            lines.append(f"   {_plural(photo_count, 'photo')}")
        lines.append("")

    lines.append(f"Generated: {_format_datetime(generated_at or datetime.utcnow())}")
    lines.append(FOOTER_TEXT)
    return "\n".join(lines)


class _PdfCursor:
    """Top-down text layout on a reportlab canvas with a fixed page break line."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.page_height = A4[1]
        self.y = PAGE_TOP
        self.font = 'Helvetica'
        self.size = 12

    def break_if_needed(self) -> None:
        if self.y > PAGE_BREAK_AT:
            self.pdf.showPage()
            self.y = PAGE_TOP

    def set_font(self, size: int, bold: bool = False) -> None:
        self.font = 'Helvetica-Bold' if bold else 'Helvetica'
        self.size = size
        self.pdf.setFont(self.font, size)

    def draw_line(self, text: str, x: float) -> None:
        self.pdf.drawString(x * mm, self.page_height - self.y * mm, text)

    def add_text(self, text: str, x: float = MARGIN_LEFT) -> None:
        lines = []
        for paragraph in text.splitlines() or ['']:
            lines.extend(simpleSplit(paragraph, self.font, self.size, (TEXT_WIDTH - (x - MARGIN_LEFT)) * mm) or [''])
        for i, line in enumerate(lines):
            self.pdf.drawString(x * mm, self.page_height - (self.y + i * LINE_HEIGHT) * mm, line)
        self.y += len(lines) * LINE_HEIGHT + BLOCK_GAP


class ExportService:
    """Builds downloadable artifacts from a case, its logs and their photos."""

    def __init__(self, gateway: ObjectStoreGateway):
        self.gateway = gateway

    def export_pdf(self, case: RecallCase, logs: Iterable[RecallLog]) -> ExportArtifact:
        """
        Render the case report.

        Layout: header (title, client, location, created date), one section
        per log in creation order, then a footer.

        Raises:
            ExportError: If rendering fails
        """
        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(buffer, pagesize=A4)
            pdf.setTitle(case.title)
            cursor = _PdfCursor(pdf)

            cursor.set_font(18, bold=True)
            cursor.add_text(case.title)

            cursor.set_font(12)
            if case.client_name:
                cursor.add_text(f"Client: {case.client_name}")
            if case.location_text:
                cursor.add_text(f"Location: {case.location_text}")
            cursor.add_text(f"Created: {_format_date(case.created_at)}")
            cursor.y += 10

            for log in _sorted_logs(logs):
                cursor.break_if_needed()

                cursor.set_font(12, bold=True)
                cursor.add_text(f"{log.log_type} - {_format_datetime(log.created_at)}")

                cursor.set_font(12)
                if log.note and log.note.strip():
                    cursor.add_text(log.note)

                photos = _renderable(log.photos)
                if photos:
                    cursor.add_text(f"{_plural(len(photos), 'photo')} attached")
                    names = ', '.join(p.original_filename or 'photo' for p in photos[:3])
                    more = f" +{len(photos) - 3} more" if len(photos) > 3 else ''
                    cursor.add_text(f"Files: {names}{more}", x=MARGIN_LEFT + 5)

                cursor.y += 10

            cursor.break_if_needed()
            cursor.set_font(10)
            cursor.y += 10
            cursor.draw_line(f"Generated on {_format_datetime(datetime.utcnow())}", MARGIN_LEFT)
            cursor.y += 10
            cursor.draw_line(FOOTER_TEXT, MARGIN_LEFT)

            pdf.save()
        except Exception as e:
            logger.exception(f"Failed to render PDF for case {case.id}: {e}")
            raise ExportError("Failed to generate PDF report")

        logger.info(f"Exported PDF for case {case.id}")
        return ExportArtifact(
            filename=f"{slugify_title(case.title)}_case_report.pdf",
            content=buffer.getvalue(),
            media_type='application/pdf',
        )

    def _download_into(self, archive: zipfile.ZipFile, photos: List[RecallPhoto], folder: str = '') -> int:
        """Add photos to an archive, skipping any that fail to download."""
        used: Set[str] = set()
        added = 0
        for index, photo in enumerate(photos, start=1):
            try:
                data = self.gateway.download(photo.storage_path)
            except StorageError as e:
                logger.warning(f"Skipping photo {photo.id} in export: {e.message}")
                continue

            name = _archive_name(photo.original_filename or f"photo_{index}.jpg", used)
            archive.writestr(f"{folder}/{name}" if folder else name, data)
            added += 1
        return added

    def export_case_zip(
        self,
        case: RecallCase,
        logs: Iterable[RecallLog],
        selected_ids: Optional[Iterable[UUID]] = None
    ) -> ExportArtifact:
        """
        Archive a case's photos, one folder per log, with case_summary.txt at the root.

        Args:
            case: Case being exported
            logs: Its logs with photos loaded
            selected_ids: Restrict to these photo ids; all photos when None

        Raises:
            ExportError: No photos resolved, or the archive could not be built
        """
        logs = _sorted_logs(logs)
        selected = set(selected_ids) if selected_ids is not None else None

        groups: List[Tuple[str, List[RecallPhoto]]] = []
        folders: Set[str] = set()
        for log in logs:
            photos = _renderable(log.photos, selected)
            if not photos:
                continue
            groups.append((_archive_name(log_folder_name(log), folders), photos))

        if not groups:
            raise ExportError("No photos found", status_code=404)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
                archive.writestr('case_summary.txt', build_case_summary(case, logs))
                added = sum(self._download_into(archive, photos, folder) for folder, photos in groups)
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            logger.error(f"Failed to build archive for case {case.id}: {e}")
            raise ExportError("Failed to create photo archive")

        total = sum(len(photos) for _, photos in groups)
        logger.info(f"Exported {added}/{total} photo(s) for case {case.id}")
        return ExportArtifact(
            filename=f"{slugify_title(case.title)}_photos.zip",
            content=buffer.getvalue(),
            media_type='application/zip',
        )

    def export_log_zip(
        self,
        log: RecallLog,
        case_name: Optional[str] = None,
        selected_ids: Optional[Iterable[UUID]] = None
    ) -> ExportArtifact:
        """
        Archive one log's photos in a flat ZIP.

        Raises:
            ExportError: No photos to export, or the archive could not be built
        """
        selected = set(selected_ids) if selected_ids is not None else None
        photos = _renderable(log.photos, selected)
        if not photos:
            raise ExportError("No photos to export", status_code=404)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
                added = self._download_into(archive, photos)
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            logger.error(f"Failed to build archive for log {log.id}: {e}")
            raise ExportError("Failed to create photo archive")

        filename = f"{case_name + '_' if case_name else ''}{log.log_type}_{log.created_at.strftime('%Y-%m-%d')}_photos.zip"
        logger.info(f"Exported {added}/{len(photos)} photo(s) for log {log.id}")
        return ExportArtifact(
            filename=re.sub(r'[^a-z0-9_.]', '_', filename, flags=re.IGNORECASE).lower(),
            content=buffer.getvalue(),
            media_type='application/zip',
        )

    def download_single_photo(self, photo: RecallPhoto) -> ExportArtifact:
        """
        Fetch one photo through a signed URL.

        Raises:
            InvalidPathError: Photo is orphaned
            DownloadError: The signed URL could not be fetched
        """
        url = self.gateway.get_signed_url(photo.storage_path)

        try:
            response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error downloading photo {photo.id}: {e}")
            raise DownloadError("Failed to download photo", cause=e)

        media_type = photo.mime_type or response.headers.get('Content-Type', 'application/octet-stream')
        return ExportArtifact(
            filename=photo.original_filename or 'photo.jpg',
            content=response.content,
            media_type=media_type,
        )
