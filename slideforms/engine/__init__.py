"""Template-to-form synthesis and header/footer layout."""

from slideforms.engine.extractor import TemplateExtractor, prepare_requested_fields, qualify_title
from slideforms.engine.header_footer import HeaderFooterEngine, layout_strip
from slideforms.engine.models import (
    FieldDescriptor,
    FieldSpec,
    FieldValue,
    FormBuildResult,
    StyleCommand,
    StyleOperation,
    ZoneSpec,
)
from slideforms.engine.service import FormService
from slideforms.engine.synthesizer import FieldSynthesizer

__all__ = [
    "TemplateExtractor",
    "prepare_requested_fields",
    "qualify_title",
    "HeaderFooterEngine",
    "layout_strip",
    "FieldDescriptor",
    "FieldSpec",
    "FieldValue",
    "FormBuildResult",
    "StyleCommand",
    "StyleOperation",
    "ZoneSpec",
    "FormService",
    "FieldSynthesizer",
]
