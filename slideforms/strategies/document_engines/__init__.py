"""Concrete document engine implementations."""

from slideforms.strategies.document_engines.pymupdf_engine import PyMuPDFEngine

__all__ = [
    "PyMuPDFEngine",
]
