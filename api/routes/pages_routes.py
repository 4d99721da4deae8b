"""Page routes — server-side rendered HTML pages."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from core.templates import templates
from rendering.form_fields import AVATAR_UPLOAD_FIELD, FORM_SECTIONS, SUBMIT_LABEL
from services.preview_page_service import open_page

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def editor_page(request: Request) -> HTMLResponse:
    """Certificate editor: the form on one side, live preview on the other.

    Every load starts a fresh page with an empty form.
    """
    page = open_page()

    return templates.TemplateResponse(
        request,
        "pages/editor.html",
        {
            "page_id": page.page_id,
            "sections": FORM_SECTIONS,
            "avatar_field": AVATAR_UPLOAD_FIELD,
            "submit_label": SUBMIT_LABEL,
            "state": page.store.snapshot(),
            "preview_svg": page.render_svg(),
        },
    )
