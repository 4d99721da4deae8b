"""HTMX routes — return HTML fragments for live preview updates.

Field edits post the whole form on every ``change`` event and get the
re-rendered certificate preview back.

Avatar selection uses a background task + SSE pattern:
1. POST /htmx/preview/{page_id}/avatar — pre-checks the file, starts the
   encode task and returns a status fragment immediately
2. The encode task merges the data URI into the page state when done
3. GET /htmx/preview/{page_id}/avatar/stream — SSE endpoint that pushes
   the re-rendered preview once the encode task finishes
"""

import asyncio
import io
import logging

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import HTMLResponse
from starlette.responses import StreamingResponse

from core.ratelimit import AVATAR_UPLOAD_LIMIT, PREVIEW_UPDATE_LIMIT, limiter
from core.templates import templates
from rendering.form_fields import editable_field_names
from schemas import EncodeFailure, EncodeResult
from services.avatar_service import (
    ENCODE_FAILURE_MESSAGE,
    check_upload,
    rejection_warnings,
    start_avatar_ingestion,
)
from services.form_state_service import coerce_form_values
from services.preview_page_service import PreviewPage, get_page, require_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/htmx", tags=["htmx"], include_in_schema=False)


def _render_preview(request: Request, page: PreviewPage) -> str:
    return templates.get_template("partials/preview.html").render(
        request=request,
        preview_svg=page.render_svg(),
    )


def _render_upload_status(
    request: Request,
    page: PreviewPage,
    *,
    warnings: list[str] | None = None,
    encoding: bool = False,
    oob: bool = False,
) -> str:
    return templates.get_template("partials/upload_status.html").render(
        request=request,
        page_id=page.page_id,
        state=page.store.snapshot(),
        warnings=warnings or [],
        encoding=encoding,
        oob=oob,
    )


def _sse_event(event: str, html: str) -> str:
    # SSE data lines: replace newlines with \ndata: for multi-line HTML
    data_lines = html.replace("\n", "\ndata: ")
    return f"event: {event}\ndata: {data_lines}\n\n"


@router.get("/preview/{page_id}", response_class=HTMLResponse)
async def htmx_preview(request: Request, page_id: str) -> HTMLResponse:
    """Return the current preview without changing anything."""
    page = require_page(page_id)
    return HTMLResponse(_render_preview(request, page))


@router.post("/preview/{page_id}/fields", response_class=HTMLResponse)
@limiter.limit(PREVIEW_UPDATE_LIMIT)
async def htmx_update_fields(request: Request, page_id: str) -> HTMLResponse:
    """Merge the posted form fields and return the re-rendered preview."""
    page = require_page(page_id)

    form = await request.form()
    # The avatar only ever comes from the encode task
    editable = editable_field_names()
    raw = {
        key: value
        for key, value in form.items()
        if key in editable and isinstance(value, str)
    }

    before = page.store.snapshot()
    after = page.store.merge(coerce_form_values(raw))

    changed = sorted(
        name
        for name in type(after).model_fields
        if getattr(before, name) != getattr(after, name)
    )
    logger.debug(
        "preview.fields.merged",
        extra={"page_id": page_id, "changed": changed},
    )

    return HTMLResponse(_render_preview(request, page))


@router.post("/preview/{page_id}/avatar", response_class=HTMLResponse)
@limiter.limit(AVATAR_UPLOAD_LIMIT)
async def htmx_select_avatar(
    request: Request,
    page_id: str,
    trainee_avatar_upload: UploadFile = File(...),
) -> HTMLResponse:
    """Pre-check a selected avatar and start encoding it in the background.

    Rejected files get their warnings back and leave the state untouched.
    Accepted files return an "encoding" status that connects to the SSE
    stream for the result.
    """
    page = require_page(page_id)

    contents: bytes | None = None
    size = trainee_avatar_upload.size
    if size is None:
        contents = await trainee_avatar_upload.read()
        size = len(contents)

    candidate = check_upload(
        trainee_avatar_upload.filename,
        trainee_avatar_upload.content_type,
        size,
    )

    if not candidate.accepted:
        logger.info(
            "avatar.upload.rejected",
            extra={
                "page_id": page_id,
                "content_type": candidate.content_type,
                "size": candidate.size,
                "reasons": [reason.value for reason in candidate.reasons],
            },
        )
        return HTMLResponse(
            _render_upload_status(
                request, page, warnings=rejection_warnings(candidate)
            )
        )

    # The upload is closed once this request ends, so hand the encode task
    # its own copy of the bytes.
    if contents is None:
        contents = await trainee_avatar_upload.read()
    start_avatar_ingestion(page, candidate, io.BytesIO(contents))

    return HTMLResponse(_render_upload_status(request, page, encoding=True))


@router.get("/preview/{page_id}/avatar/stream")
async def htmx_avatar_stream(request: Request, page_id: str) -> StreamingResponse:
    """SSE stream that pushes the preview once the latest avatar encode finishes.

    Sends a single ``avatar-result`` event, then closes. The encode task is
    shielded: a client disconnect does not cancel it, and the result still
    lands in the page state.
    """
    page = get_page(page_id)

    async def event_generator():
        if page is None:
            yield _sse_event(
                "avatar-result",
                "<div class='text-red-600 text-sm p-2'>"
                "页面已过期，请刷新后重试。</div>",
            )
            return

        warnings: list[str] = []
        task = page.pending_avatar
        if task is not None:
            try:
                result: EncodeResult = await asyncio.shield(task)
            except Exception:
                logger.exception(
                    "avatar.stream.encode_error", extra={"page_id": page.page_id}
                )
                warnings.append(ENCODE_FAILURE_MESSAGE)
            else:
                if isinstance(result, EncodeFailure):
                    warnings.append(result.reason)

        html = _render_preview(request, page) + _render_upload_status(
            request, page, warnings=warnings, oob=True
        )
        yield _sse_event("avatar-result", html)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
