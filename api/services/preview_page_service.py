"""Registry of open certificate preview pages.

Each browser page that loads the editor gets its own ``PreviewPage``,
which owns the form state store and the metrics projector for that page.
Routes look the page up by id and pass it explicitly to the services
that mutate it.

This is intentionally in-process. Pages expire from the TTLCache when
idle; a user whose page expired reloads and starts from an empty form,
which is fine since nothing here is meant to be persisted.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from dataclasses import dataclass, field

from cachetools import TTLCache

from core.config import get_settings
from rendering.metrics import MetricsProjector
from rendering.preview import build_preview, generate_preview_svg
from schemas import EncodeResult, PreviewData
from services.form_state_service import FormStateStore

logger = logging.getLogger(__name__)


class PreviewPageNotFoundError(Exception):
    """Raised when a page id is unknown or has expired."""

    def __init__(self, page_id: str):
        self.page_id = page_id
        super().__init__(f"Preview page not found: {page_id}")


@dataclass
class PreviewPage:
    """One open editor page and the state it owns."""

    page_id: str
    store: FormStateStore = field(default_factory=FormStateStore)
    projector: MetricsProjector = field(default_factory=MetricsProjector)
    # Latest avatar encode started for this page, if any
    pending_avatar: asyncio.Task[EncodeResult] | None = None

    def preview(self) -> PreviewData:
        state = self.store.snapshot()
        return build_preview(state, self.projector.project(state))

    def render_svg(self) -> str:
        return generate_preview_svg(self.preview())


def _build_registry() -> TTLCache[str, PreviewPage]:
    settings = get_settings()
    return TTLCache(
        maxsize=settings.preview_page_max_open,
        ttl=settings.preview_page_ttl_seconds,
    )


_pages: TTLCache[str, PreviewPage] = _build_registry()


def open_page() -> PreviewPage:
    """Register a new page with an empty form."""
    page = PreviewPage(page_id=secrets.token_urlsafe(16))
    _pages[page.page_id] = page
    logger.info("preview.page.opened", extra={"page_id": page.page_id})
    return page


def get_page(page_id: str) -> PreviewPage | None:
    """Get an open page, or None if not found / expired.

    A successful lookup restarts the page's expiry clock.
    """
    page = _pages.get(page_id)
    if page is not None:
        _pages[page_id] = page
    return page


def require_page(page_id: str) -> PreviewPage:
    page = get_page(page_id)
    if page is None:
        raise PreviewPageNotFoundError(page_id)
    return page


def clear_pages() -> None:
    """For testing."""
    _pages.clear()
