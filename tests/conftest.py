"""Shared fixtures and in-memory fakes for the unit tests."""

from contextlib import asynccontextmanager
from typing import Any

import fitz  # PyMuPDF
import pytest

from slideforms.core.config import Settings
from slideforms.engine.service import FormService
from slideforms.interfaces.document import (
    BaseDocumentEngine,
    BaseOutputDocument,
    CheckBoxField,
    DropdownField,
    FieldRect,
    FontSpec,
    FormField,
    PageCanvas,
    RadioGroupField,
    TextAlignment,
    TextField,
)
from slideforms.interfaces.errors import StorageError, ValidationError
from slideforms.interfaces.template import (
    BaseTemplateSession,
    BaseTemplateSource,
    TemplateShape,
)

LETTER = PageCanvas(width=612.0, height=792.0)


# =============================================================================
# Fake Fields
# =============================================================================


class _FakeFieldMixin:
    """Records every setter call as plain attributes."""

    def __init__(self, name: str, page_index: int | None = None, rect: FieldRect | None = None):
        self._name = name
        self.page_index = page_index
        self.rect = rect
        self.read_only = False
        self.required = False
        self.border_width = 1.0
        self.border_color = None
        self.background_color = None
        self.text_color = None

    @property
    def name(self) -> str:
        return self._name

    def set_read_only(self, enabled: bool) -> None:
        self.read_only = enabled

    def set_required(self, enabled: bool) -> None:
        self.required = enabled

    def set_border_width(self, width: float) -> None:
        self.border_width = width

    def set_border_color(self, rgb):
        self.border_color = rgb

    def set_background_color(self, rgb):
        self.background_color = rgb

    def set_text_color(self, rgb):
        self.text_color = rgb


class FakeTextField(_FakeFieldMixin, TextField):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.text = ""
        self.alignment: TextAlignment | None = None
        self.font_size: float | None = None
        self.max_length: int | None = None
        self.multiline = True
        self.scrolling = True

    def get_value(self) -> str:
        return self.text

    def set_text(self, text: str) -> None:
        self.text = text

    def set_alignment(self, alignment: TextAlignment) -> None:
        self.alignment = alignment

    def set_font_size(self, size: float) -> None:
        self.font_size = size

    def set_max_length(self, length):
        self.max_length = length

    def set_multiline(self, enabled: bool) -> None:
        self.multiline = enabled

    def set_scrolling(self, enabled: bool) -> None:
        self.scrolling = enabled


class FakeCheckBox(_FakeFieldMixin, CheckBoxField):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.checked = False

    def get_value(self) -> bool:
        return self.checked

    def set_checked(self, checked: bool) -> None:
        self.checked = checked


class FakeDropdown(_FakeFieldMixin, DropdownField):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.option_list: list[str] = []
        self.selected: str | None = None
        self.font_size: float | None = None

    @property
    def options(self) -> list[str]:
        return list(self.option_list)

    def get_value(self):
        return self.selected

    def set_options(self, options):
        self.option_list = options

    def add_options(self, options):
        self.option_list.extend(options)

    def select(self, option: str) -> None:
        if option not in self.option_list:
            raise ValidationError(f"'{option}' is not an option")
        self.selected = option

    def set_font_size(self, size: float) -> None:
        self.font_size = size


class FakeRadioGroup(_FakeFieldMixin, RadioGroupField):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.placements: list[tuple[str, int, FieldRect]] = []
        self.selected: str | None = None

    @property
    def options(self) -> list[str]:
        return [option for option, _, _ in self.placements]

    def get_value(self):
        return self.selected

    def add_option(self, option: str, page_index: int, rect: FieldRect) -> None:
        self.placements.append((option, page_index, rect))

    def select(self, option: str) -> None:
        self.selected = option


# =============================================================================
# Fake Document Engine
# =============================================================================


class FakeDocument(BaseOutputDocument):
    def __init__(self, canvases: list[PageCanvas], fields: list[FormField] | None = None):
        self.canvases = canvases
        self._fields: dict[str, FormField] = {field.name: field for field in fields or []}
        self.saved = False
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.canvases)

    def page_canvas(self, page_index: int) -> PageCanvas:
        return self.canvases[page_index]

    def _add(self, field):
        if field.name in self._fields:
            raise ValidationError(f"A field named '{field.name}' already exists.")
        self._fields[field.name] = field
        return field

    def create_text_field(self, name, page_index, rect):
        return self._add(FakeTextField(name, page_index, rect))

    def create_check_box(self, name, page_index, rect):
        return self._add(FakeCheckBox(name, page_index, rect))

    def create_dropdown(self, name, page_index, rect):
        return self._add(FakeDropdown(name, page_index, rect))

    def create_radio_group(self, name):
        return self._add(FakeRadioGroup(name))

    def fields(self):
        return list(self._fields.values())

    def get_field(self, name):
        try:
            return self._fields[name]
        except KeyError:
            raise ValidationError(f"No field named '{name}' in the document.") from None

    def save(self) -> bytes:
        self.saved = True
        return b"%PDF-fake " + ",".join(self._fields).encode()

    def close(self) -> None:
        self.closed = True


class FakeEngine(BaseDocumentEngine):
    """Hands out FakeDocuments and remembers every open call."""

    def __init__(self, canvases: list[PageCanvas] | None = None, existing: list[FormField] | None = None):
        self.canvases = [LETTER, LETTER] if canvases is None else canvases
        self.existing = existing or []
        self.documents: list[FakeDocument] = []
        self.calls: list[dict[str, Any]] = []

    def open(self, pdf_bytes: bytes, font: FontSpec | None = None, reconstruct: bool = True):
        if not pdf_bytes.startswith(b"%PDF"):
            raise StorageError("Could not read PDF")
        self.calls.append({"pdf": pdf_bytes, "font": font, "reconstruct": reconstruct})
        document = FakeDocument(self.canvases, [] if reconstruct else self.existing)
        self.documents.append(document)
        return document


# =============================================================================
# Fake Template Source
# =============================================================================


def shape(title: str, top: float = 100, left: float = 50, width: float = 200, height: float = 20) -> TemplateShape:
    """Build a template shape whose ref is a unique marker."""
    return TemplateShape(title=title, top=top, left=left, width=width, height=height, ref=object())


class FakeTemplateSession(BaseTemplateSession):
    def __init__(self, slides: list[list[TemplateShape]], rendered: bytes, fail_render: bool = False):
        self.slides = [list(slide) for slide in slides]
        self.rendered = rendered
        self.fail_render = fail_render
        self.removed: list[TemplateShape] = []
        self.saved = False

    def pages(self):
        return [list(slide) for slide in self.slides]

    def remove_shape(self, shape):
        for slide in self.slides:
            slide[:] = [candidate for candidate in slide if candidate.ref is not shape.ref]
        self.removed.append(shape)

    async def save(self):
        self.saved = True

    async def render_pdf(self):
        if self.fail_render:
            raise StorageError("Template conversion failed")
        return self.rendered


class FakeTemplateSource(BaseTemplateSource):
    """Template source over pre-built slides; tracks session cleanup."""

    def __init__(self, slides: list[list[TemplateShape]] | None = None, rendered: bytes = b"%PDF-template", fail_render: bool = False):
        self.slides = slides or []
        self.rendered = rendered
        self.fail_render = fail_render
        self.sessions: list[FakeTemplateSession] = []
        self.opened = 0
        self.closed = 0
        self.received: list[bytes] = []

    @property
    def supported_extensions(self) -> set[str]:
        return {".pptx"}

    @asynccontextmanager
    async def open(self, template_bytes: bytes):
        self.opened += 1
        self.received.append(template_bytes)
        session = FakeTemplateSession(self.slides, self.rendered, self.fail_render)
        self.sessions.append(session)
        try:
            yield session
        finally:
            self.closed += 1


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temporary work directory."""
    return Settings(work_dir=tmp_path / "work", _env_file=None)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def fake_source():
    return FakeTemplateSource()


@pytest.fixture
def service(fake_engine, fake_source):
    return FormService(engine=fake_engine, template_source=fake_source)


def make_pdf(pages: int = 2, width: float = 612, height: float = 792) -> bytes:
    """Return a blank PDF with the given number of pages."""
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page(width=width, height=height)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf()
