"""Concrete strategy implementations."""

from slideforms.strategies.document_engines import (
    PyMuPDFEngine,
)
from slideforms.strategies.fetchers import (
    HttpFetcher,
)
from slideforms.strategies.template_sources import (
    PptxTemplateSource,
)

__all__ = [
    "PyMuPDFEngine",
    "HttpFetcher",
    "PptxTemplateSource",
]
