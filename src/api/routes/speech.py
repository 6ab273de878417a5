"""
Speech endpoints: trigger transcription and proxy speech synthesis.

Both require a bearer session.  Provider failures surface as 502 after
the rant's ``error`` status has been committed.
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from src.api.middleware.auth import CurrentUser, require_user
from src.core.exceptions import VoiceProviderError
from src.core.models import TranscribeRequest, TranscribeResponse, TranscriptStatus
from src.services import speech
from src.services.storage.blob import BlobStore
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/speech", tags=["speech"])


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(body: TranscribeRequest, user: CurrentUser = Depends(require_user)):
    """Transcribe a rant's audio (no-op if the transcript is already complete)."""
    async with get_session() as session:
        result = await speech.transcribe_rant(
            body.rant_id, RantRepository(session), BlobStore(), viewer_id=user.id
        )
    if result.transcript_status == TranscriptStatus.error:
        raise VoiceProviderError(result.message)
    return result


@router.get("/tts")
async def text_to_speech(
    rant_id: str | None = Query(None, alias="id"),
    user: CurrentUser = Depends(require_user),
):
    """Return synthesized speech (MPEG) for a rant's transcript."""
    async with get_session() as session:
        result = await speech.synthesize_rant(rant_id, RantRepository(session), viewer_id=user.id)
    return Response(
        content=result.audio,
        media_type=result.media_type,
        headers={"Cache-Control": result.cache_control},
    )
