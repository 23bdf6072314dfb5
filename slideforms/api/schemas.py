"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from typing import Any

from pydantic import BaseModel, Field, HttpUrl

from slideforms.engine.models import FieldSpec, FieldValue, ZoneSpec


# =============================================================================
# Form Schemas
# =============================================================================


class FormFromTemplateUrlRequest(BaseModel):
    """Request for building a form from a template referenced by URL."""

    template_url: HttpUrl = Field(description="URL of the .pptx template")
    fields: list[FieldSpec] = Field(min_length=1, description="Requested placeholder fields")
    standard_font: str | None = Field(default=None, description="Standard font name, e.g. 'Helvetica'")
    font_url: HttpUrl | None = Field(default=None, description="URL of a custom TTF/OTF font")


class HeaderFooterLayout(BaseModel):
    """Header and footer zones keyed by zone name."""

    header: dict[str, ZoneSpec] | None = None
    footer: dict[str, ZoneSpec] | None = None


class FieldValueList(BaseModel):
    """Values to write into an existing form."""

    values: list[FieldValue] = Field(min_length=1)


class FieldValuesResponse(BaseModel):
    """Every field of a form with its current value."""

    fields: list[FieldValue]
    total: int


# =============================================================================
# Common Schemas
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    service: str = "slideforms-api"
    version: str = "0.1.0"
    libreoffice: bool = Field(description="Whether a LibreOffice binary is available")


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")
