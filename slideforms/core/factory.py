"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from slideforms.core.config import Settings, get_settings
from slideforms.engine.service import FormService
from slideforms.interfaces.document import BaseDocumentEngine
from slideforms.interfaces.fetcher import BaseFetcher
from slideforms.interfaces.template import BaseTemplateSource
from slideforms.strategies.document_engines import PyMuPDFEngine
from slideforms.strategies.fetchers import HttpFetcher
from slideforms.strategies.template_sources import PptxTemplateSource

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        engine = factory.get_document_engine()
        source = factory.get_template_source()
        service = factory.get_form_service()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._document_engine_cache: BaseDocumentEngine | None = None
        self._template_source_cache: BaseTemplateSource | None = None
        self._fetcher_cache: BaseFetcher | None = None
        self._form_service_cache: FormService | None = None

    def get_document_engine(self, engine_type: str | None = None) -> BaseDocumentEngine:
        """Get a document engine instance based on the specified type.

        Args:
            engine_type: The engine type to instantiate. If None, uses settings.

        Returns:
            A BaseDocumentEngine implementation instance.

        Raises:
            ValueError: If the engine type is unknown.
        """
        if self._document_engine_cache is None or engine_type is not None:
            engine_type = engine_type or self._settings.document_engine

            logger.info(f"Instantiating document engine: {engine_type}")

            match engine_type:
                case "pymupdf":
                    self._document_engine_cache = PyMuPDFEngine()
                case _:
                    raise ValueError(
                        f"Unknown document engine: {engine_type}. "
                        f"Valid options: 'pymupdf'"
                    )

        return self._document_engine_cache

    def get_template_source(self, source_type: str | None = None) -> BaseTemplateSource:
        """Get a template source instance based on the specified type.

        Args:
            source_type: The template source to instantiate. If None, uses settings.

        Returns:
            A BaseTemplateSource implementation instance.

        Raises:
            ValueError: If the template source type is unknown.
        """
        if self._template_source_cache is None or source_type is not None:
            source_type = source_type or self._settings.template_source

            logger.info(f"Instantiating template source: {source_type}")

            match source_type:
                case "pptx":
                    libreoffice = self._settings.resolve_libreoffice()
                    if libreoffice is None:
                        logger.warning("LibreOffice not found; template rendering will fail")
                    self._template_source_cache = PptxTemplateSource(
                        work_dir=self._settings.work_dir,
                        libreoffice_path=libreoffice,
                        conversion_timeout=self._settings.conversion_timeout,
                    )
                case _:
                    raise ValueError(
                        f"Unknown template source: {source_type}. "
                        f"Valid options: 'pptx'"
                    )

        return self._template_source_cache

    def get_fetcher(self) -> BaseFetcher:
        """Get the fetcher used for URL-referenced payloads.

        Returns:
            A BaseFetcher implementation instance.
        """
        if self._fetcher_cache is None:
            logger.info("Instantiating HTTP fetcher")

            self._fetcher_cache = HttpFetcher(
                timeout=self._settings.fetch_timeout,
                max_bytes=self._settings.max_upload_bytes,
            )

        return self._fetcher_cache

    def get_form_service(self) -> FormService:
        """Get the form service wired with the configured strategies.

        Returns:
            A FormService instance.
        """
        if self._form_service_cache is None:
            logger.info("Instantiating form service")

            self._form_service_cache = FormService(
                engine=self.get_document_engine(),
                template_source=self.get_template_source(),
            )

        return self._form_service_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._document_engine_cache = None
        self._template_source_cache = None
        self._fetcher_cache = None
        self._form_service_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
