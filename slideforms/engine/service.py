"""Form service.

Wires the template source, extractor, synthesizer, header/footer engine and
document engine into the calls exposed by the API.
"""

import asyncio
import logging
from typing import Any, Iterable, Mapping

from slideforms.engine.extractor import TemplateExtractor, prepare_requested_fields
from slideforms.engine.header_footer import HeaderFooterEngine, ZoneSpecs
from slideforms.engine.models import (
    ExtractionResult,
    FieldSpec,
    FieldValue,
    FormBuildResult,
)
from slideforms.engine.synthesizer import FieldSynthesizer
from slideforms.interfaces.document import (
    BaseDocumentEngine,
    FieldType,
    FontSpec,
    FormField,
)
from slideforms.interfaces.errors import ValidationError
from slideforms.interfaces.template import BaseTemplateSource

logger = logging.getLogger(__name__)

_CHOICE_KINDS = (FieldType.DROPDOWNLIST, FieldType.RADIOBUTTON)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1", "on"}
    return bool(value)


def read_field_value(field: FormField) -> FieldValue:
    """Describe the current value of a field."""
    options = field.options if field.kind in _CHOICE_KINDS else None
    return FieldValue(name=field.name, type=field.kind, value=field.get_value(), options=options)


def write_field_value(field: FormField, value: Any) -> None:
    """Set the value of an existing field according to its variant."""
    match field.kind:
        case FieldType.TEXTBOX:
            field.set_text("" if value is None else str(value))
        case FieldType.CHECKBOX:
            field.set_checked(_parse_bool(value))
        case FieldType.DROPDOWNLIST | FieldType.RADIOBUTTON:
            field.select(str(value))


class FormService:
    """Entry point for template synthesis, header/footer layout and value I/O.

    Example:
        ```python
        factory = get_factory()
        service = factory.get_form_service()

        result = await service.create_form_from_template(
            template_bytes,
            [{"shapeTitle": "textbox.g1.name1", "methods": [{"method": "setText", "value": "Name"}]}],
        )
        ```
    """

    def __init__(
        self,
        engine: BaseDocumentEngine,
        template_source: BaseTemplateSource,
        extractor: TemplateExtractor | None = None,
        synthesizer: FieldSynthesizer | None = None,
        header_footer: HeaderFooterEngine | None = None,
    ) -> None:
        self._engine = engine
        self._template_source = template_source
        self._extractor = extractor or TemplateExtractor()
        self._synthesizer = synthesizer or FieldSynthesizer()
        self._header_footer = header_footer or HeaderFooterEngine()

    async def create_form_from_template(
        self,
        template_bytes: bytes,
        fields: Iterable[FieldSpec | Mapping[str, Any]] | Mapping[str, FieldSpec | Mapping[str, Any]],
        font: FontSpec | None = None,
    ) -> FormBuildResult:
        """Create a PDF form from a slide template.

        Args:
            template_bytes: The template. A disposable copy is consumed; the
                given bytes are left untouched.
            fields: Requested field specs, as a list carrying ``shapeTitle``
                or a mapping keyed by raw title.
            font: Font used for every field appearance.

        Returns:
            FormBuildResult with the PDF bytes and the extracted descriptors.

        Raises:
            ValidationError: On malformed specs or duplicate titles.
            StorageError: If the template cannot be read or rendered.
            FontError: If the font is invalid.
        """
        requested = prepare_requested_fields(fields)

        async with self._template_source.open(template_bytes) as session:
            extraction = await self._extractor.extract(session, requested)

        pdf = await asyncio.to_thread(self._build_form, extraction, font)
        logger.info(
            f"Form created: {len(extraction.descriptors)} fields, {len(pdf)} bytes"
        )
        return FormBuildResult(pdf=pdf, descriptors=extraction.descriptors)

    def _build_form(self, extraction: ExtractionResult, font: FontSpec | None) -> bytes:
        with self._engine.open(extraction.template_pdf, font=font) as document:
            self._synthesizer.synthesize(document, extraction.descriptors)
            return document.save()

    async def insert_header_footer(
        self,
        pdf_bytes: bytes,
        header: ZoneSpecs | None = None,
        footer: ZoneSpecs | None = None,
        font: FontSpec | None = None,
    ) -> bytes:
        """Add header and/or footer zones to every page of a PDF.

        Raises:
            ValidationError: If no zone is given or a zone spec is malformed.
            StorageError: If the PDF cannot be read.
            FontError: If the font is invalid.
        """
        if not header and not footer:
            raise ValidationError("A header or a footer spec is required.")
        return await asyncio.to_thread(self._build_header_footer, pdf_bytes, header, footer, font)

    def _build_header_footer(
        self,
        pdf_bytes: bytes,
        header: ZoneSpecs | None,
        footer: ZoneSpecs | None,
        font: FontSpec | None,
    ) -> bytes:
        with self._engine.open(pdf_bytes, font=font, reconstruct=False) as document:
            self._header_footer.apply(document, header=header, footer=footer)
            return document.save()

    async def get_form_values(self, pdf_bytes: bytes) -> list[FieldValue]:
        """Read the value of every field of an existing form."""
        return await asyncio.to_thread(self._read_values, pdf_bytes)

    def _read_values(self, pdf_bytes: bytes) -> list[FieldValue]:
        with self._engine.open(pdf_bytes, reconstruct=False) as document:
            values = [read_field_value(field) for field in document.fields()]
        logger.info(f"Read {len(values)} form values")
        return values

    async def set_form_values(
        self,
        pdf_bytes: bytes,
        values: Iterable[FieldValue | Mapping[str, Any]],
        font: FontSpec | None = None,
    ) -> bytes:
        """Write values into the fields of an existing form.

        Raises:
            ValidationError: If a field name is unknown or a choice is not
                among the field's options.
        """
        return await asyncio.to_thread(self._write_values, pdf_bytes, list(values), font)

    def _write_values(
        self,
        pdf_bytes: bytes,
        values: list[FieldValue | Mapping[str, Any]],
        font: FontSpec | None,
    ) -> bytes:
        with self._engine.open(pdf_bytes, font=font, reconstruct=False) as document:
            for entry in values:
                name = entry.name if isinstance(entry, FieldValue) else entry.get("name")
                value = entry.value if isinstance(entry, FieldValue) else entry.get("value")
                if not name:
                    raise ValidationError("Every value entry needs a field name.")
                write_field_value(document.get_field(name), value)
            logger.info(f"Wrote {len(values)} form values")
            return document.save()
