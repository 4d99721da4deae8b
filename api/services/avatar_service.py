"""Avatar ingestion: pre-check a selected image, then encode it off the request.

The flow for one file selection:
1. ``check_upload`` runs both pre-check rules (type and size) and records
   every failed rule. A candidate is accepted only if no rule failed.
2. ``start_avatar_ingestion`` schedules ``encode_avatar`` as a one-shot
   asyncio task and returns immediately.
3. When the task finishes, its completion callback merges the data URI
   into the page's form state. A failed encode leaves the state as it was.

Nothing is uploaded anywhere: "upload" means select and preview locally.
If the user picks a second file before the first finishes encoding, both
tasks run and whichever completes last sets the avatar.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from functools import partial
from typing import TYPE_CHECKING, BinaryIO

from schemas import (
    EncodeFailure,
    EncodeResult,
    EncodeSuccess,
    RejectionReason,
    UploadCandidate,
)

if TYPE_CHECKING:
    from services.preview_page_service import PreviewPage

logger = logging.getLogger(__name__)

ACCEPTED_CONTENT_TYPES: frozenset[str] = frozenset({"image/jpeg", "image/png"})
MAX_AVATAR_BYTES = 2 * 1024 * 1024

REJECTION_WARNINGS: dict[RejectionReason, str] = {
    RejectionReason.UNSUPPORTED_TYPE: "只能上传 JPG/PNG 类型的图片",
    RejectionReason.TOO_LARGE: "图片不能超过 2MB",
}

ENCODE_FAILURE_MESSAGE = "图片读取失败，请重新选择"


class UploadRejectedError(Exception):
    """Raised when encoding is requested for a candidate that failed pre-check."""

    def __init__(self, candidate: UploadCandidate):
        self.candidate = candidate
        reasons = ", ".join(reason.value for reason in candidate.reasons)
        super().__init__(f"Upload rejected: {reasons}")


def check_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
) -> UploadCandidate:
    """Run the pre-check rules on a selected file.

    Both rules are always evaluated so the user sees every problem at once.
    """
    reasons: list[RejectionReason] = []
    if content_type not in ACCEPTED_CONTENT_TYPES:
        reasons.append(RejectionReason.UNSUPPORTED_TYPE)
    if size >= MAX_AVATAR_BYTES:
        reasons.append(RejectionReason.TOO_LARGE)

    return UploadCandidate(
        filename=filename or "",
        content_type=content_type or "",
        size=size,
        reasons=tuple(reasons),
    )


def rejection_warnings(candidate: UploadCandidate) -> list[str]:
    return [REJECTION_WARNINGS[reason] for reason in candidate.reasons]


def encode_data_uri(data: bytes, content_type: str) -> str:
    """Encode image bytes as a data URI usable directly as an image source."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def _read_as_data_uri(stream: BinaryIO, content_type: str) -> str:
    data = stream.read()
    if not data:
        raise ValueError("empty image file")
    return encode_data_uri(data, content_type)


async def encode_avatar(candidate: UploadCandidate, stream: BinaryIO) -> EncodeResult:
    """Read and encode an accepted image in a worker thread.

    Read errors are reported as ``EncodeFailure`` rather than raised.
    """
    try:
        data_uri = await asyncio.to_thread(
            _read_as_data_uri, stream, candidate.content_type
        )
    except (OSError, ValueError) as e:
        logger.warning(
            "avatar.encode.failed",
            extra={"upload_filename": candidate.filename, "error": str(e)},
        )
        return EncodeFailure(reason=ENCODE_FAILURE_MESSAGE)

    return EncodeSuccess(data_uri=data_uri)


def _on_encode_done(
    page: PreviewPage,
    candidate: UploadCandidate,
    task: asyncio.Task[EncodeResult],
) -> None:
    """Completion callback: merge a successful encode into the page state."""
    if task.cancelled():
        logger.info("avatar.encode.cancelled", extra={"page_id": page.page_id})
        return

    exc = task.exception()
    if exc is not None:
        logger.error(
            "avatar.encode.crashed",
            extra={"page_id": page.page_id, "upload_filename": candidate.filename},
            exc_info=exc,
        )
        return

    result = task.result()
    if isinstance(result, EncodeSuccess):
        page.store.merge({"trainee_avatar": result.data_uri})
        logger.info(
            "avatar.encode.merged",
            extra={
                "page_id": page.page_id,
                "upload_filename": candidate.filename,
                "size": candidate.size,
            },
        )


def start_avatar_ingestion(
    page: PreviewPage,
    candidate: UploadCandidate,
    stream: BinaryIO,
) -> asyncio.Task[EncodeResult]:
    """Start encoding an accepted candidate without waiting for it.

    Must be called from a running event loop. The returned task resolves to
    the encode result; the page state is updated by the time any awaiter of
    the task resumes.

    Raises:
        UploadRejectedError: If the candidate failed pre-check
    """
    if not candidate.accepted:
        raise UploadRejectedError(candidate)

    task = asyncio.create_task(encode_avatar(candidate, stream))
    task.add_done_callback(partial(_on_encode_done, page, candidate))
    page.pending_avatar = task

    logger.info(
        "avatar.encode.started",
        extra={
            "page_id": page.page_id,
            "upload_filename": candidate.filename,
            "content_type": candidate.content_type,
            "size": candidate.size,
        },
    )
    return task
