"""PowerPoint template source.

Reads slide shapes with python-pptx and renders the remaining slides to
PDF with a headless LibreOffice conversion.
"""

import asyncio
import logging
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from pptx import Presentation
from pptx.util import Emu

from slideforms.interfaces.errors import StorageError
from slideforms.interfaces.template import (
    BaseTemplateSession,
    BaseTemplateSource,
    TemplateShape,
)

logger = logging.getLogger(__name__)


def shape_title(shape: Any) -> str:
    """Return the alt-text title of a shape, falling back to its name."""
    title = shape._element._nvXxPr.cNvPr.get("title")
    return title if title else shape.name


def _points(length: int | None) -> float:
    return Emu(length or 0).pt


def _load_presentation(path: Path) -> Any:
    try:
        return Presentation(str(path))
    except Exception as e:
        raise StorageError(f"Could not read template: {e}") from e


class PptxTemplateSession(BaseTemplateSession):
    """An open copy of a .pptx template inside a private directory."""

    def __init__(
        self,
        presentation: Any,
        path: Path,
        libreoffice_path: str | None,
        conversion_timeout: float,
    ) -> None:
        self._presentation = presentation
        self._path = path
        self._libreoffice_path = libreoffice_path
        self._conversion_timeout = conversion_timeout

    def pages(self) -> list[list[TemplateShape]]:
        pages = []
        for slide in self._presentation.slides:
            pages.append(
                [
                    TemplateShape(
                        title=shape_title(shape),
                        top=_points(shape.top),
                        left=_points(shape.left),
                        width=_points(shape.width),
                        height=_points(shape.height),
                        ref=shape,
                    )
                    for shape in slide.shapes
                ]
            )
        return pages

    def remove_shape(self, shape: TemplateShape) -> None:
        element = shape.ref._element
        parent = element.getparent()
        if parent is None:
            logger.debug(f"Shape '{shape.title}' was already removed")
            return
        parent.remove(element)

    async def save(self) -> None:
        try:
            await asyncio.to_thread(self._presentation.save, str(self._path))
        except Exception as e:
            logger.error(f"Saving template copy failed: {e}", exc_info=True)
            raise StorageError(f"Saving template copy failed: {e}") from e

    async def render_pdf(self) -> bytes:
        """Convert the saved copy to PDF with LibreOffice.

        Each conversion uses its own LibreOffice profile inside the session
        directory so concurrent sessions do not contend for one profile.
        """
        if not self._libreoffice_path:
            raise StorageError("LibreOffice is not available; cannot render the template to PDF.")

        out_dir = self._path.parent
        profile = (out_dir / "profile").as_uri()
        try:
            process = await asyncio.create_subprocess_exec(
                self._libreoffice_path,
                f"-env:UserInstallation={profile}",
                "--headless",
                "--convert-to",
                "pdf",
                "--outdir",
                str(out_dir),
                str(self._path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise StorageError(f"Could not start LibreOffice: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), self._conversion_timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise StorageError(
                f"Template conversion timed out after {self._conversion_timeout}s"
            ) from e

        pdf_path = self._path.with_suffix(".pdf")
        if process.returncode != 0 or not pdf_path.is_file():
            detail = stderr.decode(errors="replace").strip()
            logger.error(f"Template conversion failed (exit {process.returncode}): {detail}")
            raise StorageError(f"Template conversion failed: {detail or 'no PDF produced'}")

        pdf = await asyncio.to_thread(pdf_path.read_bytes)
        logger.info(f"Rendered template to PDF: {len(pdf)} bytes")
        return pdf


class PptxTemplateSource(BaseTemplateSource):
    """Template source for PowerPoint (.pptx) slide decks.

    Every session works on a copy written to a fresh directory under
    ``work_dir``; the directory is removed when the session closes.
    """

    def __init__(
        self,
        work_dir: Path,
        libreoffice_path: str | None = None,
        conversion_timeout: float = 120.0,
    ) -> None:
        self._work_dir = Path(work_dir)
        self._libreoffice_path = libreoffice_path
        self._conversion_timeout = conversion_timeout

    @property
    def supported_extensions(self) -> set[str]:
        return {".pptx"}

    @asynccontextmanager
    async def open(self, template_bytes: bytes) -> AsyncIterator[PptxTemplateSession]:
        self._work_dir.mkdir(parents=True, exist_ok=True)
        session_dir = Path(tempfile.mkdtemp(prefix="template-", dir=self._work_dir))
        try:
            path = session_dir / "template.pptx"
            await asyncio.to_thread(path.write_bytes, template_bytes)
            presentation = await asyncio.to_thread(_load_presentation, path)
            logger.debug(f"Opened template copy in {session_dir}")
            yield PptxTemplateSession(
                presentation,
                path,
                self._libreoffice_path,
                self._conversion_timeout,
            )
        finally:
            await asyncio.to_thread(shutil.rmtree, session_dir, True)
            logger.debug(f"Removed template copy {session_dir}")
