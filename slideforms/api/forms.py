"""Form synthesis API routes.

Handles template-to-form conversion, header/footer insertion and reading or
writing the values of existing forms. Engine errors propagate to the
application's exception handlers.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from slideforms.api.deps import get_fetcher, get_form_service, read_upload
from slideforms.api.schemas import (
    FieldValuesResponse,
    FormFromTemplateUrlRequest,
    HeaderFooterLayout,
)
from slideforms.core.config import Settings, get_settings
from slideforms.engine.models import FieldValue
from slideforms.engine.service import FormService
from slideforms.interfaces.document import FontSpec
from slideforms.interfaces.errors import ValidationError
from slideforms.interfaces.fetcher import BaseFetcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["forms"])

_FIELD_VALUES = TypeAdapter(list[FieldValue])


# =============================================================================
# Helper Functions
# =============================================================================


def _parse_json(raw: str, label: str) -> Any:
    """Decode a JSON form part."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"'{label}' is not valid JSON: {e}") from e


def _pdf_response(pdf: bytes, filename: str, headers: dict[str, str] | None = None) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"', **(headers or {})},
    )


def _font_spec(standard_font: str | None, custom_font: bytes | None) -> FontSpec | None:
    if not standard_font and not custom_font:
        return None
    return FontSpec(standard=standard_font or None, custom=custom_font)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/forms/from-template", status_code=status.HTTP_200_OK)
async def create_form_from_template(
    template: UploadFile = File(description="The .pptx template"),
    fields: str = Form(description="JSON list of field specs"),
    standard_font: str | None = Form(default=None),
    font: UploadFile | None = File(default=None, description="Optional TTF/OTF font"),
    service: FormService = Depends(get_form_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Convert the placeholder shapes of a slide template into form fields.

    Returns:
        The generated PDF form.
    """
    logger.info(f"Form request for template: {template.filename}")

    template_bytes = await read_upload(template, settings, {".pptx"})
    specs = _parse_json(fields, "fields")
    if not isinstance(specs, list):
        raise ValidationError("'fields' must be a JSON list of field specs.")
    custom_font = await read_upload(font, settings) if font is not None else None

    result = await service.create_form_from_template(
        template_bytes,
        specs,
        font=_font_spec(standard_font, custom_font),
    )
    return _pdf_response(
        result.pdf,
        "form.pdf",
        headers={"X-Field-Count": str(len(result.descriptors))},
    )


@router.post("/forms/from-template-url", status_code=status.HTTP_200_OK)
async def create_form_from_template_url(
    request: FormFromTemplateUrlRequest,
    service: FormService = Depends(get_form_service),
    fetcher: BaseFetcher = Depends(get_fetcher),
) -> Response:
    """Fetch a template (and optional font) by URL and convert it into a form.

    Returns:
        The generated PDF form.
    """
    template_bytes = await fetcher.fetch(str(request.template_url))
    custom_font = await fetcher.fetch(str(request.font_url)) if request.font_url else None

    result = await service.create_form_from_template(
        template_bytes,
        request.fields,
        font=_font_spec(request.standard_font, custom_font),
    )
    return _pdf_response(
        result.pdf,
        "form.pdf",
        headers={"X-Field-Count": str(len(result.descriptors))},
    )


@router.post("/documents/header-footer", status_code=status.HTTP_200_OK)
async def insert_header_footer(
    document: UploadFile = File(description="The source PDF"),
    layout: str = Form(description="JSON object with optional 'header' and 'footer' zones"),
    standard_font: str | None = Form(default=None),
    service: FormService = Depends(get_form_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Add header and footer text fields to every page of a PDF."""
    pdf_bytes = await read_upload(document, settings, {".pdf"})
    try:
        parsed = HeaderFooterLayout.model_validate(_parse_json(layout, "layout"))
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid header/footer layout: {e}") from e

    pdf = await service.insert_header_footer(
        pdf_bytes,
        header=parsed.header,
        footer=parsed.footer,
        font=_font_spec(standard_font, None),
    )
    return _pdf_response(pdf, "document.pdf")


@router.post(
    "/forms/values/read",
    response_model=FieldValuesResponse,
    status_code=status.HTTP_200_OK,
)
async def read_form_values(
    document: UploadFile = File(description="A PDF form"),
    service: FormService = Depends(get_form_service),
    settings: Settings = Depends(get_settings),
) -> FieldValuesResponse:
    """List every field of a PDF form with its current value."""
    pdf_bytes = await read_upload(document, settings, {".pdf"})
    values = await service.get_form_values(pdf_bytes)
    return FieldValuesResponse(fields=values, total=len(values))


@router.post("/forms/values/write", status_code=status.HTTP_200_OK)
async def write_form_values(
    document: UploadFile = File(description="A PDF form"),
    values: str = Form(description="JSON list of {name, type, value}"),
    standard_font: str | None = Form(default=None),
    service: FormService = Depends(get_form_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Write values into the fields of an existing PDF form."""
    pdf_bytes = await read_upload(document, settings, {".pdf"})
    try:
        entries = _FIELD_VALUES.validate_python(_parse_json(values, "values"))
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid field values: {e}") from e

    pdf = await service.set_form_values(
        pdf_bytes,
        entries,
        font=_font_spec(standard_font, None),
    )
    return _pdf_response(pdf, "form.pdf")
