"""Template extractor.

Walks an open template session and turns every requested placeholder shape
into a page-qualified field descriptor, then consumes those shapes and
renders what is left as the base page layout.
"""

import logging
from collections import Counter
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from slideforms.engine.models import (
    ExtractionResult,
    FieldDescriptor,
    FieldSpec,
    Geometry,
    StyleCommand,
    StyleOperation,
)
from slideforms.engine.styles import validate_commands
from slideforms.engine.titles import parse_title
from slideforms.interfaces.document import FieldType
from slideforms.interfaces.errors import DuplicateTitleError, ValidationError
from slideforms.interfaces.template import BaseTemplateSession

logger = logging.getLogger(__name__)


def qualify_title(title: str, page: int) -> str:
    """Return the page-qualified title of a placeholder."""
    return f"{title}.page{page}"


def prepare_requested_fields(
    fields: Iterable[FieldSpec | Mapping[str, Any]] | Mapping[str, FieldSpec | Mapping[str, Any]],
) -> dict[str, FieldSpec]:
    """Validate requested field specs and key them by trimmed title.

    Accepts either a mapping of raw title to spec, or a list of specs that
    carry ``shape_title``. Titles, declared type/group/name and style
    commands are all checked here, before any template is opened.

    Raises:
        ValidationError: If any spec is malformed.
    """
    if isinstance(fields, Mapping):
        items = [(str(title), spec) for title, spec in fields.items()]
    else:
        items = []
        for spec in fields:
            if isinstance(spec, FieldSpec):
                title = spec.shape_title
            else:
                spec = spec or {}
                if not isinstance(spec, Mapping):
                    raise ValidationError(
                        f"Each field spec must be an object with a shapeTitle, got {type(spec).__name__}."
                    )
                title = spec.get("shapeTitle", spec.get("shape_title"))
            items.append((title or "", spec))

    if not items:
        raise ValidationError("At least one field spec is required.")

    requested: dict[str, FieldSpec] = {}
    for raw_title, raw_spec in items:
        try:
            spec = raw_spec if isinstance(raw_spec, FieldSpec) else FieldSpec.model_validate(raw_spec or {})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid field spec for '{raw_title}': {e}") from e

        title = raw_title.strip()
        placeholder = parse_title(title)
        declared = (
            ("type", spec.type, placeholder.field_type),
            ("group", spec.group, placeholder.group),
            ("name", spec.name, placeholder.name),
        )
        for label, given, parsed in declared:
            if given is not None and given != parsed:
                raise ValidationError(
                    f"Field spec for '{title}' declares {label} '{getattr(given, 'value', given)}' "
                    f"but the title encodes '{getattr(parsed, 'value', parsed)}'."
                )
        validate_commands(placeholder.field_type, spec.methods)

        if title in requested:
            raise ValidationError(f"Field spec for '{title}' was given more than once.")
        requested[title] = spec

    logger.info(f"Validated {len(requested)} requested field specs")
    return requested


def _page_commands(field_type: FieldType, spec: FieldSpec, page: int) -> tuple[StyleCommand, ...]:
    """Return the commands of a spec as seen from one page.

    Radio options on different pages select independently, so their
    ``select`` targets are page-qualified on a copy of the commands.
    """
    if field_type is not FieldType.RADIOBUTTON:
        return tuple(spec.methods)
    return tuple(
        command.model_copy(update={"value": qualify_title(command.value, page)})
        if command.operation is StyleOperation.SELECT
        else command.model_copy(deep=True)
        for command in spec.methods
    )


class TemplateExtractor:
    """Builds field descriptors from the placeholder shapes of a template."""

    def collect(
        self,
        session: BaseTemplateSession,
        requested_fields: Mapping[str, FieldSpec],
    ) -> list[FieldDescriptor]:
        """Build descriptors for every requested shape without modifying the template.

        Raises:
            DuplicateTitleError: If two shapes share a qualified title.
        """
        descriptors: list[FieldDescriptor] = []
        for page_index, shapes in enumerate(session.pages()):
            page = page_index + 1
            for shape in shapes:
                title = (shape.title or "").strip()
                spec = requested_fields.get(title)
                if spec is None:
                    continue

                placeholder = parse_title(title)
                descriptor = FieldDescriptor(
                    qualified_title=qualify_title(title, page),
                    page=page,
                    field_type=placeholder.field_type,
                    group=placeholder.group,
                    name=placeholder.name,
                    geometry=Geometry(
                        top=shape.top,
                        left=shape.left,
                        width=shape.width,
                        height=shape.height,
                    ),
                    style_commands=_page_commands(placeholder.field_type, spec, page),
                    source_ref=shape,
                )
                descriptors.append(descriptor)
                logger.debug(f"Found placeholder {descriptor.qualified_title}")

        counts = Counter(descriptor.qualified_title for descriptor in descriptors)
        duplicates = [title for title, count in counts.items() if count > 1]
        if duplicates:
            logger.warning(f"Duplicate placeholder titles: {duplicates}")
            raise DuplicateTitleError(duplicates)

        return descriptors

    async def extract(
        self,
        session: BaseTemplateSession,
        requested_fields: Mapping[str, FieldSpec],
    ) -> ExtractionResult:
        """Collect descriptors, then consume the shapes and render the template.

        Shapes are removed and the session saved only after every page was
        scanned and titles were found unique.

        Args:
            session: An open, disposable template session.
            requested_fields: Validated specs keyed by raw title.

        Returns:
            ExtractionResult with the descriptors and the rendered base PDF.

        Raises:
            DuplicateTitleError: If two shapes share a qualified title.
            StorageError: If saving or rendering the template fails.
        """
        descriptors = self.collect(session, requested_fields)
        logger.info(
            f"Collected {len(descriptors)} placeholders for "
            f"{len(requested_fields)} requested titles"
        )

        for descriptor in descriptors:
            session.remove_shape(descriptor.source_ref)
        await session.save()
        template_pdf = await session.render_pdf()

        return ExtractionResult(descriptors=descriptors, template_pdf=template_pdf)
