"""Form synthesis domain models.

Pydantic models describe the wire-facing field and zone specs; frozen
dataclasses carry the per-call records built from them.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slideforms.interfaces.document import FieldType, PageCanvas, TextAlignment

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

Color = Annotated[list[Annotated[float, Field(ge=0, le=1)]], Field(min_length=3, max_length=3)]


class StyleOperation(str, Enum):
    """Closed set of operations a style command may name."""

    SET_TEXT = "set_text"
    SET_ALIGNMENT = "set_alignment"
    SET_FONT_SIZE = "set_font_size"
    SET_MAX_LENGTH = "set_max_length"
    ENABLE_MULTILINE = "enable_multiline"
    DISABLE_MULTILINE = "disable_multiline"
    ENABLE_SCROLLING = "enable_scrolling"
    DISABLE_SCROLLING = "disable_scrolling"
    ENABLE_READ_ONLY = "enable_read_only"
    DISABLE_READ_ONLY = "disable_read_only"
    ENABLE_REQUIRED = "enable_required"
    DISABLE_REQUIRED = "disable_required"
    CHECK = "check"
    UNCHECK = "uncheck"
    SELECT = "select"
    ADD_OPTIONS = "add_options"
    SET_OPTIONS = "set_options"
    SET_BORDER_WIDTH = "set_border_width"
    SET_BORDER_COLOR = "set_border_color"
    SET_BACKGROUND_COLOR = "set_background_color"
    SET_TEXT_COLOR = "set_text_color"


class StyleCommand(BaseModel):
    """An ordered instruction applied to a materialized field.

    Accepts the wire key ``method`` and camelCase operation names
    (``enableReadOnly`` is read as ``enable_read_only``).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    operation: StyleOperation = Field(alias="method")
    value: Any = None

    @field_validator("operation", mode="before")
    @classmethod
    def normalize_operation(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _CAMEL_BOUNDARY.sub("_", v.strip()).lower()
        return v


class FieldSpec(BaseModel):
    """Requested field for one placeholder title."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    shape_title: str | None = Field(default=None, alias="shapeTitle")
    type: FieldType | None = None
    group: str | None = None
    name: str | None = None
    methods: list[StyleCommand] = Field(default_factory=list)


class ZoneSpec(BaseModel):
    """Declarative content and style of one header/footer zone."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    alignment: Literal["left", "center", "right"] | None = None
    text: str | None = None
    y_offset: float | None = Field(default=None, alias="yOffset")
    height: float | None = Field(default=None, gt=0)
    border_width: float | None = Field(default=None, ge=0, alias="borderWidth")
    border_color: Color | None = Field(default=None, alias="borderColor")
    background_color: Color | None = Field(default=None, alias="backgroundColor")
    text_color: Color | None = Field(default=None, alias="textColor")
    font_size: float | None = Field(default=None, ge=0, alias="fontSize")

    @field_validator("alignment", mode="before")
    @classmethod
    def normalize_alignment(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class FieldValue(BaseModel):
    """Value of one field of an existing form."""

    name: str
    type: FieldType
    value: Any = None
    options: list[str] | None = None


@dataclass(frozen=True)
class PlaceholderTitle:
    """Decoded ``type.group.name`` placeholder title."""

    field_type: FieldType
    group: str
    name: str

    def __str__(self) -> str:
        return f"{self.field_type.value}.{self.group}.{self.name}"


@dataclass(frozen=True)
class Geometry:
    """Placeholder geometry in template points, top-left origin."""

    top: float
    left: float
    width: float
    height: float


@dataclass(frozen=True)
class FieldDescriptor:
    """Page-qualified record produced for each consumed placeholder."""

    qualified_title: str
    page: int
    field_type: FieldType
    group: str
    name: str
    geometry: Geometry
    style_commands: tuple[StyleCommand, ...] = ()
    source_ref: Any = field(default=None, compare=False, repr=False)

    def to_summary(self) -> dict[str, Any]:
        """Return the diagnostic view of the descriptor."""
        return {
            "qualified_title": self.qualified_title,
            "page": self.page,
            "type": self.field_type.value,
            "group": self.group,
            "name": self.name,
            "geometry": {
                "top": self.geometry.top,
                "left": self.geometry.left,
                "width": self.geometry.width,
                "height": self.geometry.height,
            },
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Descriptors taken from a template plus the rendered base layout."""

    descriptors: list[FieldDescriptor]
    template_pdf: bytes = field(repr=False)


@dataclass(frozen=True)
class FormBuildResult:
    """Output of a template-to-form synthesis call."""

    pdf: bytes = field(repr=False)
    descriptors: list[FieldDescriptor] = field(default_factory=list)


class ZonePosition(int, Enum):
    """Zone classification; the value is the layout priority."""

    LEFT = 0
    CENTER = 1
    RIGHT = 2
    UNCLASSIFIED = 3


@dataclass(frozen=True)
class Zone:
    """A named header/footer slot."""

    name: str
    spec: ZoneSpec
    position: ZonePosition


DEFAULT_ALIGNMENTS: Mapping[str, TextAlignment] = MappingProxyType(
    {alignment.value: alignment for alignment in TextAlignment}
)


@dataclass(frozen=True)
class SynthesisContext:
    """Immutable per-page values handed to the synthesis and layout functions."""

    page_number: int
    canvas: PageCanvas
    alignments: Mapping[str, TextAlignment] = field(default_factory=lambda: DEFAULT_ALIGNMENTS, compare=False)

    @property
    def page_index(self) -> int:
        return self.page_number - 1
