"""Field synthesizer.

Creates concrete form fields on an output document from grouped field
descriptors. Dispatch is keyed by the descriptor's field type.
"""

import logging
from collections.abc import Callable, Iterable

from slideforms.engine.coordinates import to_document_space
from slideforms.engine.grouping import group_descriptors
from slideforms.engine.models import FieldDescriptor, SynthesisContext
from slideforms.engine.styles import apply_commands
from slideforms.interfaces.document import BaseOutputDocument, FieldType, FormField
from slideforms.interfaces.errors import StorageError

logger = logging.getLogger(__name__)


def radio_group_name(group: str, page: int) -> str:
    """Return the name of the exclusive radio group for one page."""
    return f"radiobutton.{group}.page{page}"


class FieldSynthesizer:
    """Materializes field descriptors as interactive fields."""

    def __init__(self) -> None:
        self._builders: dict[
            FieldType,
            Callable[[BaseOutputDocument, SynthesisContext, str, list[FieldDescriptor]], list[FormField]],
        ] = {
            FieldType.TEXTBOX: self._build_text_fields,
            FieldType.CHECKBOX: self._build_check_boxes,
            FieldType.DROPDOWNLIST: self._build_dropdowns,
            FieldType.RADIOBUTTON: self._build_radio_group,
        }

    def synthesize(
        self,
        document: BaseOutputDocument,
        descriptors: Iterable[FieldDescriptor],
    ) -> list[FormField]:
        """Create every field described by ``descriptors`` on ``document``.

        Pages are processed in ascending order; within a page, fields follow
        the first-seen order of the type and group buckets.

        Returns:
            The created fields, in creation order.

        Raises:
            StorageError: If a descriptor points past the last page.
            ValidationError: If a style command payload is rejected.
        """
        groups = group_descriptors(descriptors)
        created: list[FormField] = []

        for page in sorted(groups):
            if page > document.page_count:
                raise StorageError(
                    f"Placeholder found on page {page} but the rendered template "
                    f"has {document.page_count} pages."
                )
            context = SynthesisContext(
                page_number=page,
                canvas=document.page_canvas(page - 1),
            )
            for field_type, by_group in groups[page].items():
                build = self._builders[field_type]
                for group, items in by_group.items():
                    created.extend(build(document, context, group, items))

        logger.info(f"Synthesized {len(created)} fields across {len(groups)} pages")
        return created

    def _build_text_fields(
        self,
        document: BaseOutputDocument,
        context: SynthesisContext,
        group: str,
        items: list[FieldDescriptor],
    ) -> list[FormField]:
        fields = []
        for descriptor in items:
            rect = to_document_space(context.canvas.height, descriptor.geometry)
            text_field = document.create_text_field(descriptor.qualified_title, context.page_index, rect)
            # Label defaults; requested commands run afterwards and may lift them.
            text_field.set_multiline(False)
            text_field.set_scrolling(False)
            text_field.set_read_only(True)
            apply_commands(text_field, descriptor.style_commands)
            fields.append(text_field)
        return fields

    def _build_check_boxes(
        self,
        document: BaseOutputDocument,
        context: SynthesisContext,
        group: str,
        items: list[FieldDescriptor],
    ) -> list[FormField]:
        fields = []
        for descriptor in items:
            rect = to_document_space(context.canvas.height, descriptor.geometry)
            check_box = document.create_check_box(descriptor.qualified_title, context.page_index, rect)
            apply_commands(check_box, descriptor.style_commands)
            fields.append(check_box)
        return fields

    def _build_dropdowns(
        self,
        document: BaseOutputDocument,
        context: SynthesisContext,
        group: str,
        items: list[FieldDescriptor],
    ) -> list[FormField]:
        fields = []
        for descriptor in items:
            rect = to_document_space(context.canvas.height, descriptor.geometry)
            dropdown = document.create_dropdown(descriptor.qualified_title, context.page_index, rect)
            apply_commands(dropdown, descriptor.style_commands)
            fields.append(dropdown)
        return fields

    def _build_radio_group(
        self,
        document: BaseOutputDocument,
        context: SynthesisContext,
        group: str,
        items: list[FieldDescriptor],
    ) -> list[FormField]:
        radio = document.create_radio_group(radio_group_name(group, context.page_number))
        for descriptor in items:
            rect = to_document_space(context.canvas.height, descriptor.geometry)
            radio.add_option(descriptor.qualified_title, context.page_index, rect)
            apply_commands(radio, descriptor.style_commands)
        return [radio]
