"""Abstract base class for remote payload fetchers."""

from abc import ABC, abstractmethod


class BaseFetcher(ABC):
    """Downloads templates, documents and fonts referenced by URL."""

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        """Fetch the payload at ``url``.

        Raises:
            FetchError: On transport failure or a non-success response.
        """
        ...
