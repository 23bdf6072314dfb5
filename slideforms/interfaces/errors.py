"""Exceptions raised across the form synthesis pipeline."""


class FormEngineError(Exception):
    """Base class for every error surfaced by the engine."""

    pass


class ValidationError(FormEngineError):
    """Raised when a title, field spec, style command or zone spec is invalid."""

    pass


class DuplicateTitleError(ValidationError):
    """Raised when qualified titles collide within one template.

    Attributes:
        duplicates: Every colliding qualified title, each listed once.
    """

    def __init__(self, duplicates: list[str]) -> None:
        self.duplicates = duplicates
        super().__init__(
            f"Duplicate titles were found. The duplicated titles are "
            f"\"{','.join(duplicates)}\"."
        )


class FetchError(FormEngineError):
    """Raised when a remote fetch fails or returns a non-success status."""

    pass


class StorageError(FormEngineError):
    """Raised when a template or document cannot be read, saved or rendered."""

    pass


class FontError(FormEngineError):
    """Raised when a font payload or standard font name is invalid."""

    pass
