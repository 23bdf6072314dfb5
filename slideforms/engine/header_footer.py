"""Header/footer layout engine.

Splits each strip into equal columns and places one read-only, single-line
text field per zone on every page, in source page order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from slideforms.engine.models import (
    StyleCommand,
    StyleOperation,
    SynthesisContext,
    Zone,
    ZoneSpec,
)
from slideforms.engine.styles import apply_commands
from slideforms.engine.titles import build_zones
from slideforms.interfaces.document import BaseOutputDocument, FieldRect, PageCanvas, TextField

logger = logging.getLogger(__name__)

DEFAULT_ZONE_HEIGHT = 30.0
DEFAULT_BORDER_WIDTH = 0.0

ZoneSpecs = Mapping[str, ZoneSpec | Mapping[str, Any]]


@dataclass(frozen=True)
class ZonePlacement:
    """A zone and the rectangle it occupies on one page."""

    zone: Zone
    rect: FieldRect


def layout_strip(strip: str, zones: list[Zone], canvas: PageCanvas) -> list[ZonePlacement]:
    """Compute the rectangle of every zone in one strip of one page.

    Columns split the page width equally regardless of content. The header
    hangs from the top edge and the footer rests on the bottom edge; both
    are shifted by the zone's ``y_offset``.
    """
    if not zones:
        return []

    column_width = canvas.width / len(zones)
    placements = []
    for index, zone in enumerate(zones):
        height = zone.spec.height or DEFAULT_ZONE_HEIGHT
        offset = zone.spec.y_offset or 0
        if strip == "header":
            y = canvas.height - (offset + height)
        else:
            y = offset
        placements.append(
            ZonePlacement(
                zone=zone,
                rect=FieldRect(x=index * column_width, y=y, width=column_width, height=height),
            )
        )
    return placements


def zone_commands(spec: ZoneSpec, context: SynthesisContext) -> list[StyleCommand]:
    """Translate a zone spec into style commands for its text field."""
    commands = [
        StyleCommand(
            operation=StyleOperation.SET_BORDER_WIDTH,
            value=spec.border_width if spec.border_width is not None else DEFAULT_BORDER_WIDTH,
        )
    ]
    if spec.text:
        commands.append(StyleCommand(operation=StyleOperation.SET_TEXT, value=spec.text))
    if spec.alignment:
        commands.append(
            StyleCommand(
                operation=StyleOperation.SET_ALIGNMENT,
                value=context.alignments[spec.alignment].value,
            )
        )
    if spec.font_size is not None:
        commands.append(StyleCommand(operation=StyleOperation.SET_FONT_SIZE, value=spec.font_size))
    for operation, color in (
        (StyleOperation.SET_BORDER_COLOR, spec.border_color),
        (StyleOperation.SET_BACKGROUND_COLOR, spec.background_color),
        (StyleOperation.SET_TEXT_COLOR, spec.text_color),
    ):
        if color is not None:
            commands.append(StyleCommand(operation=operation, value=color))
    return commands


class HeaderFooterEngine:
    """Places header and footer zones on every page of a document."""

    def apply(
        self,
        document: BaseOutputDocument,
        header: ZoneSpecs | None = None,
        footer: ZoneSpecs | None = None,
    ) -> list[TextField]:
        """Create the header and footer fields of every page.

        Pages are handled one after another so output order matches the
        source. Any failure propagates and no fields are saved.

        Returns:
            The created text fields, in creation order.

        Raises:
            ValidationError: If a zone spec is malformed.
        """
        strips = [
            ("header", build_zones("header", header)),
            ("footer", build_zones("footer", footer)),
        ]
        created: list[TextField] = []

        for page_index in range(document.page_count):
            context = SynthesisContext(
                page_number=page_index + 1,
                canvas=document.page_canvas(page_index),
            )
            for strip, zones in strips:
                for placement in layout_strip(strip, zones, context.canvas):
                    created.append(self._place_zone(document, context, placement))

        logger.info(
            f"Placed {len(created)} header/footer fields on {document.page_count} pages"
        )
        return created

    def _place_zone(
        self,
        document: BaseOutputDocument,
        context: SynthesisContext,
        placement: ZonePlacement,
    ) -> TextField:
        name = f"{placement.zone.name}.{context.page_number}"
        text_field = document.create_text_field(name, context.page_index, placement.rect)
        text_field.set_multiline(False)
        text_field.set_scrolling(False)
        text_field.set_read_only(True)
        apply_commands(text_field, zone_commands(placement.zone.spec, context))
        return text_field
