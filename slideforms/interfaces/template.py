"""Template source interfaces.

A template source opens a disposable copy of a slide template, exposes its
shapes per slide, and renders whatever remains after extraction to PDF.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TemplateShape:
    """A shape on a template slide.

    Geometry is in points with the origin at the top-left corner of the
    slide and y growing downward.

    Attributes:
        title: The shape title (alt-text title, or the shape name).
        top: Distance from the top edge of the slide.
        left: Distance from the left edge of the slide.
        width: Shape width.
        height: Shape height.
        ref: Engine-specific handle used to remove the shape.
    """

    title: str
    top: float
    left: float
    width: float
    height: float
    ref: Any = field(default=None, compare=False, repr=False)


class BaseTemplateSession(ABC):
    """An open, disposable template copy."""

    @abstractmethod
    def pages(self) -> list[list[TemplateShape]]:
        """Return the shapes of every slide, in slide order."""

    @abstractmethod
    def remove_shape(self, shape: TemplateShape) -> None:
        """Remove a shape from the template copy."""

    @abstractmethod
    async def save(self) -> None:
        """Persist the template copy. Irreversible for this session."""

    @abstractmethod
    async def render_pdf(self) -> bytes:
        """Render the saved template copy to PDF bytes.

        Raises:
            StorageError: If rendering fails.
        """


class BaseTemplateSource(ABC):
    """Abstract base class for template source strategies."""

    @abstractmethod
    def open(self, template_bytes: bytes) -> AbstractAsyncContextManager[BaseTemplateSession]:
        """Open a disposable copy of a template.

        Every transient artifact created for the session is released when
        the context exits, whether extraction succeeded or failed. The
        caller's bytes are never modified.

        Raises:
            StorageError: If the template cannot be read.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
