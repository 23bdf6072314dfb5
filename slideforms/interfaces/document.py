"""Document engine interfaces.

Defines the closed set of interactive field variants and the in-flight
output document they are created on. Concrete engines implement these
contracts; the synthesis code never probes runtime types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from slideforms.interfaces.errors import FontError


class FieldType(str, Enum):
    """Field kinds a placeholder title may declare."""

    TEXTBOX = "textbox"
    CHECKBOX = "checkbox"
    RADIOBUTTON = "radiobutton"
    DROPDOWNLIST = "dropdownlist"


class TextAlignment(str, Enum):
    """Horizontal text alignment of a text field."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class FieldRect:
    """Field rectangle in PDF user space (origin bottom-left, y upward)."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PageCanvas:
    """Size of a destination page in points."""

    width: float
    height: float


@dataclass(frozen=True)
class FontSpec:
    """Font used to regenerate the appearance of every field in one call.

    Attributes:
        standard: Name of a built-in standard font (e.g. "Helvetica").
        custom: Raw TTF/OTF bytes of a custom font.
    """

    standard: str | None = None
    custom: bytes | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.standard and self.custom:
            raise FontError("Use either a standard font or a custom font, not both.")

    @property
    def is_set(self) -> bool:
        return bool(self.standard or self.custom)


class FormField(ABC):
    """A materialized interactive field on the output document."""

    kind: ClassVar[FieldType]

    @property
    @abstractmethod
    def name(self) -> str:
        """Fully qualified field name."""

    @abstractmethod
    def get_value(self) -> Any:
        """Return the current value of the field."""

    @abstractmethod
    def set_read_only(self, enabled: bool) -> None: ...

    @abstractmethod
    def set_required(self, enabled: bool) -> None: ...

    @abstractmethod
    def set_border_width(self, width: float) -> None: ...

    @abstractmethod
    def set_border_color(self, rgb: list[float] | None) -> None: ...

    @abstractmethod
    def set_background_color(self, rgb: list[float] | None) -> None: ...

    @abstractmethod
    def set_text_color(self, rgb: list[float] | None) -> None: ...


class TextField(FormField):
    """Single text input or label."""

    kind = FieldType.TEXTBOX

    @abstractmethod
    def set_text(self, text: str) -> None: ...

    @abstractmethod
    def set_alignment(self, alignment: TextAlignment) -> None: ...

    @abstractmethod
    def set_font_size(self, size: float) -> None: ...

    @abstractmethod
    def set_max_length(self, length: int | None) -> None: ...

    @abstractmethod
    def set_multiline(self, enabled: bool) -> None: ...

    @abstractmethod
    def set_scrolling(self, enabled: bool) -> None: ...


class CheckBoxField(FormField):
    """Independent boolean field."""

    kind = FieldType.CHECKBOX

    @abstractmethod
    def set_checked(self, checked: bool) -> None: ...


class DropdownField(FormField):
    """Single-select combo box."""

    kind = FieldType.DROPDOWNLIST

    @property
    @abstractmethod
    def options(self) -> list[str]: ...

    @abstractmethod
    def set_options(self, options: list[str]) -> None: ...

    @abstractmethod
    def add_options(self, options: list[str]) -> None: ...

    @abstractmethod
    def select(self, option: str) -> None: ...

    @abstractmethod
    def set_font_size(self, size: float) -> None: ...


class RadioGroupField(FormField):
    """Exclusive-choice group whose options may sit at separate rectangles."""

    kind = FieldType.RADIOBUTTON

    @property
    @abstractmethod
    def options(self) -> list[str]: ...

    @abstractmethod
    def add_option(self, option: str, page_index: int, rect: FieldRect) -> None: ...

    @abstractmethod
    def select(self, option: str) -> None: ...


class BaseOutputDocument(ABC):
    """An in-flight output document.

    Field creation and value changes are staged on the document and written
    when :meth:`save` is called. Use it as a context manager so the
    underlying engine resources are released on every path.
    """

    @property
    @abstractmethod
    def page_count(self) -> int: ...

    @abstractmethod
    def page_canvas(self, page_index: int) -> PageCanvas:
        """Return the size of the zero-based page."""

    @abstractmethod
    def create_text_field(self, name: str, page_index: int, rect: FieldRect) -> TextField: ...

    @abstractmethod
    def create_check_box(self, name: str, page_index: int, rect: FieldRect) -> CheckBoxField: ...

    @abstractmethod
    def create_dropdown(self, name: str, page_index: int, rect: FieldRect) -> DropdownField: ...

    @abstractmethod
    def create_radio_group(self, name: str) -> RadioGroupField: ...

    @abstractmethod
    def fields(self) -> list[FormField]:
        """Return every field known to the document, in creation order."""

    @abstractmethod
    def get_field(self, name: str) -> FormField:
        """Return the field with the given name.

        Raises:
            ValidationError: If no field carries that name.
        """

    @abstractmethod
    def save(self) -> bytes:
        """Write staged fields and return the document bytes."""

    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self) -> "BaseOutputDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BaseDocumentEngine(ABC):
    """Abstract base class for document engine strategies."""

    @abstractmethod
    def open(
        self,
        pdf_bytes: bytes,
        font: FontSpec | None = None,
        reconstruct: bool = True,
    ) -> BaseOutputDocument:
        """Open a PDF as an output document.

        Args:
            pdf_bytes: Source PDF.
            font: Font used for every field appearance created in this call.
            reconstruct: Copy the pages into a fresh document (dropping any
                existing form) instead of editing the source in place.

        Raises:
            StorageError: If the bytes are not a readable PDF.
            FontError: If the font is invalid.
        """
