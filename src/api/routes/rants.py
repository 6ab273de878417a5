"""
Rant REST endpoints.

Create (multipart with optional audio), list public / own rants, view a
rant (counting the view), stream its audio, and delete it.  Creating a rant
with audio schedules transcription as a background task.
"""

import logging
import mimetypes
from pathlib import PurePath

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from src.api.middleware.auth import CurrentUser, optional_user, require_user
from src.core.config import get_settings
from src.core.exceptions import AudioNotFoundError, ForbiddenError, InvalidRequestError
from src.core.models import (
    DeleteRantResponse,
    RantResponse,
    RantSort,
    TimeRange,
    TranscriptStatus,
)
from src.services.speech import transcribe_in_background
from src.services.storage.blob import BlobStore
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rants", tags=["rants"])

_ALLOWED_SUFFIXES = {"wav", "mp3", "m4a", "ogg", "webm", "flac"}


def to_rant_response(rant, viewer_id: str | None = None) -> RantResponse:
    """Convert an ORM Rant to its API model, masking anonymous owners."""
    is_owner = viewer_id is not None and rant.owner_id == viewer_id
    return RantResponse(
        id=rant.id,
        owner_id=rant.owner_id if (not rant.anonymous or is_owner) else None,
        owner_name="Anonymous" if rant.anonymous else rant.owner.username,
        title=rant.title,
        transcript=rant.transcript,
        transcript_status=TranscriptStatus(rant.transcript_status),
        is_private=rant.is_private,
        anonymous=rant.anonymous,
        audio_url=rant.audio_url,
        views=rant.views,
        created_at=rant.created_at,
    )


def _audio_suffix(filename: str | None) -> str:
    suffix = PurePath(filename or "").suffix.lstrip(".").lower()
    return suffix if suffix in _ALLOWED_SUFFIXES else "wav"


@router.post("", response_model=RantResponse, status_code=201)
async def create_rant(
    background_tasks: BackgroundTasks,
    title: str = Form(..., min_length=1, max_length=255),
    is_private: bool = Form(False),
    anonymous: bool = Form(False),
    audio: UploadFile | None = File(None),
    user: CurrentUser = Depends(require_user),
):
    """Create a rant; with audio attached, transcription starts in the background."""
    data = await audio.read() if audio is not None else b""
    if audio is not None and not data:
        raise InvalidRequestError("Uploaded audio is empty")
    if len(data) > get_settings().max_upload_bytes:
        raise InvalidRequestError("Uploaded audio is too large")

    blob_store = BlobStore()
    key: str | None = None
    try:
        async with get_session() as session:
            repo = RantRepository(session)
            rant = await repo.create_rant(
                owner_id=user.id,
                title=title.strip(),
                is_private=is_private,
                anonymous=anonymous,
            )
            if data:
                # Only reference the blob once the write has succeeded
                key = blob_store.save(f"{rant.id}.{_audio_suffix(audio.filename)}", data)
                rant = await repo.update_audio_url(rant.id, key)
            response = to_rant_response(rant, user.id)
    except Exception:
        if key is not None:
            blob_store.delete(key)
        raise

    if data:
        background_tasks.add_task(transcribe_in_background, rant.id, user.id)
    logger.info("Rant %s created by %s (audio=%s)", rant.id, user.id, bool(data))
    return response


@router.get("", response_model=list[RantResponse])
async def list_rants(
    sort: RantSort = Query(RantSort.latest),
    time_range: TimeRange = Query(TimeRange.all, alias="range"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    viewer: CurrentUser | None = Depends(optional_user),
):
    """List public rants (latest, or top by views within a time range)."""
    async with get_session() as session:
        repo = RantRepository(session)
        rants = await repo.list_public_rants(
            sort=sort, time_range=time_range, limit=limit, offset=offset
        )
    viewer_id = viewer.id if viewer else None
    return [to_rant_response(r, viewer_id) for r in rants]


@router.get("/mine", response_model=list[RantResponse])
async def list_my_rants(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(require_user),
):
    """List every rant owned by the signed-in user."""
    async with get_session() as session:
        repo = RantRepository(session)
        rants = await repo.list_user_rants(user.id, limit=limit, offset=offset)
    return [to_rant_response(r, user.id) for r in rants]


@router.get("/{rant_id}", response_model=RantResponse)
async def get_rant(rant_id: str, viewer: CurrentUser | None = Depends(optional_user)):
    """Return a rant and count the view."""
    viewer_id = viewer.id if viewer else None
    async with get_session() as session:
        repo = RantRepository(session)
        await repo.get_visible_rant(rant_id, viewer_id)
        rant = await repo.increment_views(rant_id)
        return to_rant_response(rant, viewer_id)


@router.get("/{rant_id}/audio")
async def get_rant_audio(rant_id: str, viewer: CurrentUser | None = Depends(optional_user)):
    """Stream the rant's stored audio."""
    async with get_session() as session:
        rant = await RantRepository(session).get_visible_rant(
            rant_id, viewer.id if viewer else None
        )
        audio_url = rant.audio_url
    if not audio_url:
        raise AudioNotFoundError(f"Rant {rant_id} has no audio")
    data = BlobStore().read(audio_url)
    media_type = mimetypes.guess_type(audio_url)[0] or "application/octet-stream"
    return Response(content=data, media_type=media_type)


@router.delete("/{rant_id}", response_model=DeleteRantResponse)
async def delete_rant(rant_id: str, user: CurrentUser = Depends(require_user)):
    """Delete an owned rant together with its comments, likes and audio."""
    async with get_session() as session:
        repo = RantRepository(session)
        rant = await repo.get_visible_rant(rant_id, user.id)
        if rant.owner_id != user.id:
            raise ForbiddenError("Only the owner can delete this rant")
        audio_url = await repo.delete_rant(rant_id)

    audio_deleted = BlobStore().delete(audio_url) if audio_url else False
    logger.info("Rant %s deleted (audio_deleted=%s)", rant_id, audio_deleted)
    return DeleteRantResponse(rant_id=rant_id, db_deleted=True, audio_deleted=audio_deleted)
