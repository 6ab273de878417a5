"""WebSocket endpoint for recording a rant.

The client streams raw PCM audio bytes (16-bit, 16 kHz, mono) and sends the
text frame ``"stop"`` to finish; disconnecting abandons the recording.  The
server responds with JSON ``WebSocketMessage`` objects (countdown ticks, the
saved rant, errors).

Pipeline: PCM -> VoiceRecorder -> WAV blob -> Rant (DB) -> (async) transcription
"""

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from src.api.middleware.auth import CurrentUser, resolve_user
from src.api.routes.rants import to_rant_response
from src.core.config import get_settings
from src.core.models import WebSocketMessage, WebSocketMessageType
from src.core.utils import format_countdown
from src.services.audio.processor import AudioProcessor
from src.services.audio.recorder import RecordingResult, VoiceRecorder
from src.services.speech import transcribe_in_background
from src.services.storage.blob import BlobStore
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository

logger = logging.getLogger(__name__)

router = APIRouter()

_TICK_SECONDS = 1.0
_background_tasks: set[asyncio.Task] = set()


async def _send(websocket: WebSocket, kind: WebSocketMessageType, **data) -> None:
    msg = WebSocketMessage(type=kind, data=data)
    await websocket.send_json(msg.model_dump(mode="json"))


async def _save_recording(
    result: RecordingResult,
    user: CurrentUser,
    title: str,
    is_private: bool,
    anonymous: bool,
) -> dict:
    """Store the WAV blob, create the rant, and schedule transcription."""
    wav = AudioProcessor().to_wav_bytes(result.pcm)
    blob_store = BlobStore()
    key: str | None = None
    try:
        async with get_session() as session:
            repo = RantRepository(session)
            rant = await repo.create_rant(
                owner_id=user.id, title=title, is_private=is_private, anonymous=anonymous
            )
            key = blob_store.save(f"{rant.id}.wav", wav)
            rant = await repo.update_audio_url(rant.id, key)
            payload = to_rant_response(rant, user.id).model_dump(mode="json")
    except Exception:
        # The rant row was rolled back; drop the now unreferenced blob
        if key is not None:
            blob_store.delete(key)
        raise

    task = asyncio.create_task(transcribe_in_background(rant.id, user.id))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return payload


@router.websocket("/ws/record")
async def record_ws(
    websocket: WebSocket,
    token: str = Query(""),
    title: str = Query("Untitled rant"),
    is_private: bool = Query(False),
    anonymous: bool = Query(False),
) -> None:
    """Record a rant over a WebSocket, with a hard countdown.

    Query params:
        token: Bearer session token.
        title: Rant title.
        is_private / anonymous: Visibility flags for the new rant.

    Protocol:
        - Client sends: raw PCM bytes, then the text frame ``"stop"``.
        - Server sends: ``recording`` on start, ``countdown`` once per second,
          ``saved`` with the created rant, or ``error``.
    """
    await websocket.accept()

    user = await resolve_user(token) if token else None
    if user is None:
        await _send(websocket, WebSocketMessageType.error, detail="Authentication required")
        await websocket.close(code=4401)
        return

    settings = get_settings()
    recorder = VoiceRecorder(max_seconds=settings.max_recording_seconds)
    logger.info("Recording WebSocket opened by %s", user.id)

    with recorder:
        recorder.start()
        await _send(
            websocket,
            WebSocketMessageType.recording,
            max_seconds=recorder.max_seconds,
            remaining=format_countdown(recorder.remaining_seconds()),
        )

        result: RecordingResult | None = None
        try:
            while result is None:
                try:
                    message = await asyncio.wait_for(websocket.receive(), timeout=_TICK_SECONDS)
                except TimeoutError:
                    result = recorder.poll()
                    if result is None:
                        await _send(
                            websocket,
                            WebSocketMessageType.countdown,
                            remaining=format_countdown(recorder.remaining_seconds()),
                        )
                    continue

                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                if message.get("bytes"):
                    result = recorder.feed(message["bytes"])
                elif (message.get("text") or "").strip().lower() == "stop":
                    result = recorder.stop()
        except WebSocketDisconnect:
            logger.info("Recording WebSocket closed by client; recording discarded")
            return

    if not result.pcm:
        await _send(websocket, WebSocketMessageType.error, detail="No audio captured")
        await websocket.close()
        return

    try:
        rant = await _save_recording(
            result, user, title.strip() or "Untitled rant", is_private, anonymous
        )
    except Exception:
        logger.exception("Failed to save recording for %s", user.id)
        await _send(websocket, WebSocketMessageType.error, detail="Failed to save recording")
        await websocket.close()
        return

    logger.info(
        "Recording saved as rant %s (%.1fs, %s)", rant["id"], result.duration, result.reason
    )
    await _send(
        websocket,
        WebSocketMessageType.saved,
        rant=rant,
        duration=result.duration,
        reason=result.reason.value,
    )
    await websocket.close()
