"""Conversion from template geometry to PDF user space."""

from slideforms.engine.models import Geometry
from slideforms.interfaces.document import FieldRect

# Offsets the field stroke against the placeholder it replaces.
X_AXIS_OFFSET = 0.5
Y_AXIS_OFFSET = 0.5


def to_document_space(page_height: float, geometry: Geometry) -> FieldRect:
    """Convert a top-left, y-down geometry into a bottom-left, y-up rectangle."""
    return FieldRect(
        x=geometry.left - X_AXIS_OFFSET,
        y=page_height - geometry.top - geometry.height + Y_AXIS_OFFSET,
        width=geometry.width,
        height=geometry.height,
    )
