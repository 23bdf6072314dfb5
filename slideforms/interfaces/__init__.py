"""Abstract base classes for form synthesis strategies."""

from slideforms.interfaces.document import (
    BaseDocumentEngine,
    BaseOutputDocument,
    FieldRect,
    FieldType,
    FontSpec,
    FormField,
    PageCanvas,
    TextAlignment,
)
from slideforms.interfaces.errors import (
    DuplicateTitleError,
    FetchError,
    FontError,
    FormEngineError,
    StorageError,
    ValidationError,
)
from slideforms.interfaces.fetcher import BaseFetcher
from slideforms.interfaces.template import BaseTemplateSession, BaseTemplateSource, TemplateShape

__all__ = [
    "BaseDocumentEngine",
    "BaseOutputDocument",
    "FieldRect",
    "FieldType",
    "FontSpec",
    "FormField",
    "PageCanvas",
    "TextAlignment",
    "FormEngineError",
    "ValidationError",
    "DuplicateTitleError",
    "FetchError",
    "StorageError",
    "FontError",
    "BaseFetcher",
    "BaseTemplateSession",
    "BaseTemplateSource",
    "TemplateShape",
]
