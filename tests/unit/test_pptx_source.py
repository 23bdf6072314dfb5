"""Unit tests for the PowerPoint template source."""

import asyncio
import io

import pytest
from pptx import Presentation
from pptx.util import Pt

from slideforms.interfaces.errors import StorageError
from slideforms.strategies.template_sources import PptxTemplateSource


def make_pptx() -> bytes:
    """Build a two-slide deck with titled and untitled shapes."""
    prs = Presentation()
    first = prs.slides.add_slide(prs.slide_layouts[6])
    named = first.shapes.add_textbox(Pt(50), Pt(100), Pt(200), Pt(20))
    named.name = "textbox.g1.name"
    titled = first.shapes.add_textbox(Pt(50), Pt(150), Pt(12), Pt(12))
    titled.name = "TextBox 7"
    titled._element._nvXxPr.cNvPr.set("title", "checkbox.g1.agree")

    second = prs.slides.add_slide(prs.slide_layouts[6])
    second.shapes.add_textbox(Pt(10), Pt(10), Pt(100), Pt(30)).name = "Logo"

    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


class TestPptxTemplateSource:
    """Test suite for PptxTemplateSource."""

    @pytest.fixture
    def work_dir(self, tmp_path):
        return tmp_path / "work"

    @pytest.fixture
    def source(self, work_dir):
        return PptxTemplateSource(work_dir=work_dir, libreoffice_path=None)

    def test_supported_extensions(self, source):
        """Test that only .pptx templates are supported."""
        assert source.supported_extensions == {".pptx"}

    def test_pages_expose_titles_and_geometry(self, source):
        """Test shape titles, fallbacks and point geometry per slide."""

        async def run_test():
            async with source.open(make_pptx()) as session:
                return session.pages()

        pages = asyncio.run(run_test())

        assert len(pages) == 2
        first = {shape.title: shape for shape in pages[0]}
        assert set(first) == {"textbox.g1.name", "checkbox.g1.agree"}
        name = first["textbox.g1.name"]
        assert (name.left, name.top, name.width, name.height) == pytest.approx((50, 100, 200, 20))
        assert [shape.title for shape in pages[1]] == ["Logo"]

    def test_remove_shape(self, source):
        """Test that removed shapes disappear from the session."""

        async def run_test():
            async with source.open(make_pptx()) as session:
                target = next(s for s in session.pages()[0] if s.title == "textbox.g1.name")
                session.remove_shape(target)
                session.remove_shape(target)
                await session.save()
                return session.pages()

        pages = asyncio.run(run_test())

        assert [shape.title for shape in pages[0]] == ["checkbox.g1.agree"]

    def test_session_directory_is_removed(self, source, work_dir):
        """Test that the template copy is deleted when the session closes."""

        async def run_test():
            async with source.open(make_pptx()) as session:
                assert any(work_dir.iterdir())
                await session.save()

        asyncio.run(run_test())

        assert list(work_dir.iterdir()) == []

    def test_session_directory_is_removed_on_failure(self, source, work_dir):
        """Test cleanup when the caller fails inside the session."""

        async def run_test():
            async with source.open(make_pptx()):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            asyncio.run(run_test())

        assert list(work_dir.iterdir()) == []

    def test_invalid_template(self, source, work_dir):
        """Test that unreadable bytes raise StorageError and leave nothing behind."""

        async def run_test():
            async with source.open(b"not a zip"):
                pass

        with pytest.raises(StorageError):
            asyncio.run(run_test())

        assert list(work_dir.iterdir()) == []

    def test_render_without_libreoffice(self, source):
        """Test that rendering fails cleanly without a converter."""

        async def run_test():
            async with source.open(make_pptx()) as session:
                await session.save()
                await session.render_pdf()

        with pytest.raises(StorageError, match="LibreOffice"):
            asyncio.run(run_test())

    def test_render_with_missing_binary(self, work_dir):
        """Test that a configured but missing binary raises StorageError."""
        source = PptxTemplateSource(work_dir=work_dir, libreoffice_path="/nonexistent/soffice")

        async def run_test():
            async with source.open(make_pptx()) as session:
                await session.save()
                await session.render_pdf()

        with pytest.raises(StorageError):
            asyncio.run(run_test())
