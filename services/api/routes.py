from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from core.exceptions import (
    MalformedUploadError,
    StorageError,
    UnsupportedContentTypeError,
    TranscriptExistsError,
    UploadReadError,
)
from core.identifiers import new_transcript_id, transcript_key
from core.settings import Settings
from core.storage import TranscriptStorage
from services.api.dependencies import get_app_settings, get_storage, require_token
from services.api.schemas import MessageResponse, TranscriptCreated


router = APIRouter(prefix="/transcripts", tags=["transcripts"])

HTML_CONTENT_TYPE = "text/html"
UPLOAD_FIELD = "file"
UPLOAD_ERROR_MESSAGE = "Error Uploading File"
# Fresh ids drawn before giving up when every candidate is already taken.
MAX_ID_ATTEMPTS = 5


async def _read_upload(request: Request) -> UploadFile:
    try:
        form = await request.form()
    except Exception as exc:
        logger.warning("Unparsable upload form: {exc}", exc=exc)
        raise MalformedUploadError(UPLOAD_ERROR_MESSAGE) from exc

    uploads = [item for item in form.getlist(UPLOAD_FIELD) if isinstance(item, UploadFile)]
    if not uploads:
        logger.warning("Upload form has no {field!r} file", field=UPLOAD_FIELD)
        raise MalformedUploadError(UPLOAD_ERROR_MESSAGE)
    return uploads[0]


async def _store_new(storage: TranscriptStorage, payload: bytes) -> tuple[str, str]:
    """Write under a fresh id; the backend refuses keys that are already taken."""
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = new_transcript_id()
        try:
            uri = await run_in_threadpool(storage.put_bytes, transcript_key(candidate), payload, HTML_CONTENT_TYPE)
        except TranscriptExistsError:
            logger.warning("Transcript id {id} already taken, drawing another", id=candidate)
            continue
        return candidate, uri
    raise StorageError("No free transcript id", {"attempts": str(MAX_ID_ATTEMPTS)})


@router.get(
    "/{transcript_id}",
    response_class=Response,
    responses={200: {"content": {HTML_CONTENT_TYPE: {}}}},
)
async def get_transcript(
    transcript_id: str,
    storage: Annotated[TranscriptStorage, Depends(get_storage)],
) -> Response:
    content = await run_in_threadpool(storage.get_bytes, transcript_key(transcript_id))
    return Response(content=content, media_type=HTML_CONTENT_TYPE, status_code=status.HTTP_200_OK)


@router.post(
    "",
    response_model=TranscriptCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_token)],
)
async def post_transcript(
    request: Request,
    storage: Annotated[TranscriptStorage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> TranscriptCreated:
    upload = await _read_upload(request)

    declared = upload.content_type or ""
    if not declared.startswith(HTML_CONTENT_TYPE):
        raise UnsupportedContentTypeError(
            "File must be of type text/html",
            {"content_type": declared, "filename": upload.filename or ""},
        )

    try:
        payload = await upload.read()
    except OSError as exc:
        logger.error("Reading upload {name} failed: {exc}", name=upload.filename, exc=exc)
        raise UploadReadError(UPLOAD_ERROR_MESSAGE) from exc
    finally:
        await upload.close()

    try:
        transcript_id, uri = await _store_new(storage, payload)
    except StorageError as exc:
        logger.error("Storing upload failed: {type} {message}", type=type(exc).__name__, message=exc.message)
        raise StorageError(UPLOAD_ERROR_MESSAGE) from exc

    logger.info(
        "Stored transcript {id} ({size} bytes) at {uri}",
        id=transcript_id,
        size=len(payload),
        uri=uri,
    )
    return TranscriptCreated(id=transcript_id, url=f"{settings.public.base_uri}/{transcript_id}")


@router.delete(
    "/{transcript_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_token)],
)
async def delete_transcript(transcript_id: str) -> MessageResponse:
    # Transcripts are immutable and never removed; the route only acknowledges.
    logger.info("Delete requested for transcript {id}; nothing removed", id=transcript_id)
    return MessageResponse(message="Success")
