"""Concrete template source implementations."""

from slideforms.strategies.template_sources.pptx import PptxTemplateSource

__all__ = [
    "PptxTemplateSource",
]
