"""PyMuPDF document engine.

Stages form fields in memory and writes them as AcroForm widgets when the
document is saved, so every appearance created in one call is generated
with the same font.
"""

import logging
from typing import Any

import fitz  # PyMuPDF

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
from slideforms.interfaces.errors import FontError, FormEngineError, StorageError, ValidationError

logger = logging.getLogger(__name__)

# PyMuPDF draws widget appearances with these base-14 fonts only.
STANDARD_FONTS = {
    "Courier": "Cour",
    "CourierBold": "Cour",
    "CourierOblique": "Cour",
    "CourierBoldOblique": "Cour",
    "Helvetica": "Helv",
    "HelveticaBold": "Helv",
    "HelveticaOblique": "Helv",
    "HelveticaBoldOblique": "Helv",
    "TimesRoman": "TiRo",
    "TimesRomanBold": "TiRo",
    "TimesRomanItalic": "TiRo",
    "TimesRomanBoldItalic": "TiRo",
    "Symbol": "Symb",
    "ZapfDingbats": "ZaDb",
}
DEFAULT_FONT = "Helv"
CUSTOM_FONT_NAME = "SFCustom"

_QUADDING = {
    TextAlignment.LEFT: 0,
    TextAlignment.CENTER: 1,
    TextAlignment.RIGHT: 2,
}
_OFF_VALUES = (None, False, "", "Off")


def to_page_rect(page_height: float, rect: FieldRect) -> fitz.Rect:
    """Convert a PDF user-space rectangle into PyMuPDF page coordinates."""
    top = page_height - rect.y - rect.height
    return fitz.Rect(rect.x, top, rect.x + rect.width, top + rect.height)


def _color(rgb: list[float] | None) -> tuple[float, ...] | None:
    return tuple(rgb) if rgb else None


class _WidgetField:
    """State shared by every PyMuPDF field variant.

    New fields keep their placements until :meth:`flush`; fields read from
    an existing form are bound to their live widgets instead.
    """

    widget_type: int
    draws_text = False

    def __init__(self, name: str) -> None:
        self._name = name
        self._flags = 0
        self._border_width = 1.0
        self._border_color: list[float] | None = None
        self._fill_color: list[float] | None = None
        self._text_color: list[float] | None = [0.0, 0.0, 0.0]
        self._font_size = 0.0
        self._placements: list[tuple[int, FieldRect, str | None]] = []
        self._widgets: list[Any] = []
        self._widget_options: list[str | None] = []
        self._dirty = False

    @property
    def name(self) -> str:
        return self._name

    def _set_flag(self, flag: int, enabled: bool) -> None:
        self._flags = self._flags | flag if enabled else self._flags & ~flag

    def set_read_only(self, enabled: bool) -> None:
        self._set_flag(fitz.PDF_FIELD_IS_READ_ONLY, enabled)

    def set_required(self, enabled: bool) -> None:
        self._set_flag(fitz.PDF_FIELD_IS_REQUIRED, enabled)

    def set_border_width(self, width: float) -> None:
        self._border_width = width

    def set_border_color(self, rgb: list[float] | None) -> None:
        self._border_color = rgb

    def set_background_color(self, rgb: list[float] | None) -> None:
        self._fill_color = rgb

    def set_text_color(self, rgb: list[float] | None) -> None:
        self._text_color = rgb

    def place(self, page_index: int, rect: FieldRect, option: str | None = None) -> None:
        self._placements.append((page_index, rect, option))

    def bind(self, widgets: list[Any]) -> None:
        """Attach the live widgets of a field from an existing form."""
        self._widgets = list(widgets)
        self._flags = widgets[0].field_flags or 0
        self._load_value(self._widgets)

    def _load_value(self, widgets: list[Any]) -> None:
        raise NotImplementedError

    def _write_value(self, widget: Any, option: str | None) -> None:
        raise NotImplementedError

    def _update_existing(self, widget: Any, option: str | None) -> None:
        self._write_value(widget, option)

    def _check(self) -> None:
        """Reject inconsistent state before anything is written."""

    def flush(self, document: "PyMuPDFDocument") -> None:
        """Write the field into the document."""
        self._check()
        if self._widgets:
            if self._dirty:
                for widget, option in zip(self._widgets, self._widget_options or [None] * len(self._widgets)):
                    self._update_existing(widget, option)
                    widget.update()
            return

        for page_index, rect, option in self._placements:
            page = document.page(page_index)
            widget = fitz.Widget()
            widget.field_type = self.widget_type
            widget.field_name = self._name
            widget.rect = to_page_rect(page.rect.height, rect)
            widget.field_flags = self._flags
            widget.border_width = self._border_width
            widget.border_color = _color(self._border_color)
            widget.fill_color = _color(self._fill_color)
            widget.text_color = _color(self._text_color) or (0, 0, 0)
            widget.text_font = document.font_name
            widget.text_fontsize = self._font_size
            self._write_value(widget, option)
            created = page.add_widget(widget)
            if self.draws_text:
                document.apply_custom_font(created, self._font_size, self._text_color)
            self._after_create(document, created, option)

    def _after_create(self, document: "PyMuPDFDocument", widget: Any, option: str | None) -> None:
        pass


class PyMuPDFTextField(_WidgetField, TextField):
    widget_type = fitz.PDF_WIDGET_TYPE_TEXT
    draws_text = True

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._text = ""
        self._alignment: TextAlignment | None = None
        self._max_length: int | None = None

    def get_value(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text
        self._dirty = True

    def set_alignment(self, alignment: TextAlignment) -> None:
        self._alignment = alignment

    def set_font_size(self, size: float) -> None:
        self._font_size = size

    def set_max_length(self, length: int | None) -> None:
        self._max_length = length

    def set_multiline(self, enabled: bool) -> None:
        self._set_flag(fitz.PDF_TX_FIELD_IS_MULTILINE, enabled)

    def set_scrolling(self, enabled: bool) -> None:
        self._set_flag(fitz.PDF_TX_FIELD_IS_DO_NOT_SCROLL, not enabled)

    def _load_value(self, widgets: list[Any]) -> None:
        self._text = widgets[0].field_value or ""

    def _write_value(self, widget: Any, option: str | None) -> None:
        widget.field_value = self._text
        if self._max_length:
            widget.text_maxlen = self._max_length

    def _after_create(self, document: "PyMuPDFDocument", widget: Any, option: str | None) -> None:
        if self._alignment is not None:
            document.set_quadding(widget, self._alignment)


class PyMuPDFCheckBox(_WidgetField, CheckBoxField):
    widget_type = fitz.PDF_WIDGET_TYPE_CHECKBOX

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._checked = False

    def get_value(self) -> bool:
        return self._checked

    def set_checked(self, checked: bool) -> None:
        self._checked = checked
        self._dirty = True

    def _load_value(self, widgets: list[Any]) -> None:
        self._checked = widgets[0].field_value not in _OFF_VALUES

    def _write_value(self, widget: Any, option: str | None) -> None:
        widget.field_value = self._checked


class PyMuPDFDropdown(_WidgetField, DropdownField):
    widget_type = fitz.PDF_WIDGET_TYPE_COMBOBOX
    draws_text = True

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._options: list[str] = []
        self._selected: str | None = None

    @property
    def options(self) -> list[str]:
        return list(self._options)

    def get_value(self) -> str | None:
        return self._selected

    def set_options(self, options: list[str]) -> None:
        self._options = list(options)
        if self._selected not in self._options:
            self._selected = None

    def add_options(self, options: list[str]) -> None:
        self._options.extend(option for option in options if option not in self._options)

    def select(self, option: str) -> None:
        if option not in self._options:
            raise ValidationError(
                f"'{option}' is not an option of dropdown '{self._name}'. "
                f"Options: {self._options}"
            )
        self._selected = option
        self._dirty = True

    def set_font_size(self, size: float) -> None:
        self._font_size = size

    def _load_value(self, widgets: list[Any]) -> None:
        choices = widgets[0].choice_values or []
        self._options = [choice if isinstance(choice, str) else choice[0] for choice in choices]
        self._selected = widgets[0].field_value or None

    def _write_value(self, widget: Any, option: str | None) -> None:
        widget.choice_values = list(self._options)
        widget.field_value = self._selected or ""

    def _update_existing(self, widget: Any, option: str | None) -> None:
        widget.field_value = self._selected or ""


class PyMuPDFRadioGroup(_WidgetField, RadioGroupField):
    """Radio group; each option is a widget sharing the group name.

    The option name is stored as the widget's alternate field name.
    """

    widget_type = fitz.PDF_WIDGET_TYPE_RADIOBUTTON

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._options: list[str] = []
        self._selected: str | None = None

    @property
    def options(self) -> list[str]:
        return list(self._options)

    def get_value(self) -> str | None:
        return self._selected

    def add_option(self, option: str, page_index: int, rect: FieldRect) -> None:
        if option in self._options:
            raise ValidationError(f"Option '{option}' already exists in radio group '{self._name}'.")
        self._options.append(option)
        self.place(page_index, rect, option)

    def select(self, option: str) -> None:
        self._selected = option
        self._dirty = True

    def _check(self) -> None:
        # Options may be added after a select, so membership is checked last.
        if self._selected is not None and self._selected not in self._options:
            raise ValidationError(
                f"'{self._selected}' is not an option of radio group '{self._name}'. "
                f"Options: {self._options}"
            )

    def _load_value(self, widgets: list[Any]) -> None:
        self._widget_options = [widget.field_label or widget.on_state() for widget in widgets]
        self._options = [option for option in self._widget_options if option]
        self._selected = next(
            (
                option
                for widget, option in zip(widgets, self._widget_options)
                if widget.field_value not in _OFF_VALUES
            ),
            None,
        )

    def _is_selected(self, option: str | None) -> bool:
        return option is not None and option == self._selected

    def _write_value(self, widget: Any, option: str | None) -> None:
        # Turning an option on consults its siblings, which needs an xref.
        widget.field_label = option
        widget.field_value = "Off"

    def _update_existing(self, widget: Any, option: str | None) -> None:
        widget.field_value = self._is_selected(option)

    def _after_create(self, document: "PyMuPDFDocument", widget: Any, option: str | None) -> None:
        if self._is_selected(option):
            widget.field_value = True
            widget.update()


_FIELD_CLASSES: dict[int, type[_WidgetField]] = {
    fitz.PDF_WIDGET_TYPE_TEXT: PyMuPDFTextField,
    fitz.PDF_WIDGET_TYPE_CHECKBOX: PyMuPDFCheckBox,
    fitz.PDF_WIDGET_TYPE_COMBOBOX: PyMuPDFDropdown,
    fitz.PDF_WIDGET_TYPE_LISTBOX: PyMuPDFDropdown,
    fitz.PDF_WIDGET_TYPE_RADIOBUTTON: PyMuPDFRadioGroup,
}


def resolve_font(font: FontSpec | None) -> tuple[str, bytes | None]:
    """Return the widget font name and the custom font bytes, if any.

    Raises:
        FontError: If the standard font is unknown or the custom payload
            is not a readable font.
    """
    if font is None or not font.is_set:
        return DEFAULT_FONT, None
    if font.standard:
        code = STANDARD_FONTS.get(font.standard)
        if code is None:
            raise FontError(
                f"Unknown standard font '{font.standard}'. "
                f"Valid options: {', '.join(STANDARD_FONTS)}"
            )
        return code, None
    try:
        fitz.Font(fontbuffer=font.custom)
    except Exception as e:
        raise FontError(f"Invalid custom font payload: {e}") from e
    return DEFAULT_FONT, font.custom


class PyMuPDFDocument(BaseOutputDocument):
    """Output document backed by a PyMuPDF ``Document``."""

    def __init__(self, doc: fitz.Document, font: FontSpec | None = None) -> None:
        self._doc = doc
        self.font_name, self._custom_font = resolve_font(font)
        self._fields: dict[str, _WidgetField] = {}
        self._pages: dict[int, Any] = {}
        self._needs_appearances = False
        self._custom_font_used = False

    def load_existing_fields(self) -> None:
        """Bind every widget of the source form, grouped by field name."""
        grouped: dict[str, list[Any]] = {}
        for page_index in range(self._doc.page_count):
            for widget in self.page(page_index).widgets():
                grouped.setdefault(widget.field_name, []).append(widget)

        for name, widgets in grouped.items():
            field_class = _FIELD_CLASSES.get(widgets[0].field_type)
            if field_class is None:
                logger.debug(f"Skipping unsupported field '{name}' ({widgets[0].field_type_string})")
                continue
            field = field_class(name)
            field.bind(widgets)
            self._fields[name] = field
        logger.info(f"Loaded {len(self._fields)} existing fields")

    def page(self, page_index: int) -> Any:
        if not 0 <= page_index < self._doc.page_count:
            raise ValidationError(
                f"Page {page_index + 1} does not exist; the document has "
                f"{self._doc.page_count} pages."
            )
        # Pages stay referenced so their widgets remain valid until save.
        if page_index not in self._pages:
            self._pages[page_index] = self._doc[page_index]
        return self._pages[page_index]

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def page_canvas(self, page_index: int) -> PageCanvas:
        rect = self.page(page_index).rect
        return PageCanvas(width=rect.width, height=rect.height)

    def _register(self, field: _WidgetField, page_index: int | None = None, rect: FieldRect | None = None) -> Any:
        if field.name in self._fields:
            raise ValidationError(f"A field named '{field.name}' already exists.")
        if page_index is not None:
            self.page(page_index)
            field.place(page_index, rect)
        self._fields[field.name] = field
        return field

    def create_text_field(self, name: str, page_index: int, rect: FieldRect) -> TextField:
        return self._register(PyMuPDFTextField(name), page_index, rect)

    def create_check_box(self, name: str, page_index: int, rect: FieldRect) -> CheckBoxField:
        return self._register(PyMuPDFCheckBox(name), page_index, rect)

    def create_dropdown(self, name: str, page_index: int, rect: FieldRect) -> DropdownField:
        return self._register(PyMuPDFDropdown(name), page_index, rect)

    def create_radio_group(self, name: str) -> RadioGroupField:
        return self._register(PyMuPDFRadioGroup(name))

    def fields(self) -> list[FormField]:
        return list(self._fields.values())

    def get_field(self, name: str) -> FormField:
        try:
            return self._fields[name]
        except KeyError:
            raise ValidationError(f"No field named '{name}' in the document.") from None

    def set_quadding(self, widget: Any, alignment: TextAlignment) -> None:
        self._doc.xref_set_key(widget.xref, "Q", str(_QUADDING[alignment]))
        self._needs_appearances = True

    def apply_custom_font(self, widget: Any, size: float, rgb: list[float] | None) -> None:
        """Point a widget's default appearance at the custom font."""
        if self._custom_font is None:
            return
        r, g, b = rgb or (0.0, 0.0, 0.0)
        self._doc.xref_set_key(
            widget.xref,
            "DA",
            f"(/{CUSTOM_FONT_NAME} {size:g} Tf {r:g} {g:g} {b:g} rg)",
        )
        self._custom_font_used = True
        self._needs_appearances = True

    def _register_custom_font(self) -> None:
        font_xref = self.page(0).insert_font(fontname=CUSTOM_FONT_NAME, fontbuffer=self._custom_font)
        self._doc.xref_set_key(
            self._doc.pdf_catalog(),
            f"AcroForm/DR/Font/{CUSTOM_FONT_NAME}",
            f"{font_xref} 0 R",
        )

    def save(self) -> bytes:
        try:
            for field in self._fields.values():
                field.flush(self)
            if self._custom_font_used:
                self._register_custom_font()
            if self._needs_appearances:
                self._doc.need_appearances(True)
            data = self._doc.tobytes(garbage=3, deflate=True)
            logger.debug(f"Saved document: {len(self._fields)} fields, {len(data)} bytes")
            return data
        except FormEngineError:
            raise
        except Exception as e:
            logger.error(f"Saving the document failed: {e}", exc_info=True)
            raise StorageError(f"Saving the document failed: {e}") from e

    def close(self) -> None:
        self._pages.clear()
        self._doc.close()


def _drop_widgets(doc: fitz.Document) -> None:
    """Remove form widgets carried over from the source pages."""
    for page in doc:
        for widget in list(page.widgets()):
            page.delete_widget(widget)


class PyMuPDFEngine(BaseDocumentEngine):
    """Document engine strategy backed by PyMuPDF."""

    def open(
        self,
        pdf_bytes: bytes,
        font: FontSpec | None = None,
        reconstruct: bool = True,
    ) -> PyMuPDFDocument:
        try:
            source = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"Could not read PDF: {e}")
            raise StorageError(f"Could not read PDF: {e}") from e

        doc = source
        try:
            if reconstruct:
                doc = fitz.open()
                doc.insert_pdf(source)
                source.close()
                _drop_widgets(doc)
            document = PyMuPDFDocument(doc, font)
            if not reconstruct:
                document.load_existing_fields()
        except Exception as e:
            doc.close()
            if not source.is_closed:
                source.close()
            if isinstance(e, FormEngineError):
                raise
            raise StorageError(f"Could not prepare PDF: {e}") from e

        logger.debug(f"Opened document with {doc.page_count} pages (reconstruct={reconstruct})")
        return document
