"""FastAPI routers and dependencies."""

from slideforms.api.deps import (
    get_fetcher,
    get_form_service,
    read_upload,
)
from slideforms.api.forms import router as forms_router

__all__ = [
    "get_fetcher",
    "get_form_service",
    "read_upload",
    "forms_router",
]
