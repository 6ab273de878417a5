"""Integration tests for the /ws/record recording endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from starlette.testclient import TestClient


def _signup(test_client: TestClient, email: str = "ws@example.com") -> dict:
    resp = test_client.post(
        "/api/v1/auth/signup", json={"email": email, "password": "hunter22"}
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _receive_until(ws, *types: str) -> dict:
    """Skip countdown ticks until a message of one of *types* arrives."""
    while True:
        msg = ws.receive_json()
        if msg["type"] in types:
            return msg
        assert msg["type"] == "countdown"


@pytest.fixture
def background_transcription():
    with patch("src.api.websocket.transcribe_in_background", new_callable=AsyncMock) as task:
        yield task


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def test_rejects_missing_token(test_client: TestClient):
    with test_client.websocket_connect("/ws/record") as ws:
        msg = ws.receive_json()
        assert msg["type"] == "error"
        assert msg["data"]["detail"] == "Authentication required"


def test_rejects_invalid_token(test_client: TestClient):
    with test_client.websocket_connect("/ws/record?token=bogus") as ws:
        assert ws.receive_json()["type"] == "error"


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


def test_record_and_stop(test_client: TestClient, sample_pcm_bytes, background_transcription):
    """Stream PCM, send 'stop', receive the saved rant."""
    session = _signup(test_client)
    token = session["token"]

    with test_client.websocket_connect(f"/ws/record?token={token}&title=Commute") as ws:
        started = ws.receive_json()
        assert started["type"] == "recording"
        assert started["data"]["max_seconds"] == 180
        assert started["data"]["remaining"] == "03:00"

        ws.send_bytes(sample_pcm_bytes)
        ws.send_text("stop")
        saved = _receive_until(ws, "saved", "error")

    assert saved["type"] == "saved", saved
    rant = saved["data"]["rant"]
    assert rant["title"] == "Commute"
    assert rant["audio_url"] == f"{rant['id']}.wav"
    assert rant["transcript_status"] == "pending"
    assert saved["data"]["duration"] == pytest.approx(1.0)
    assert saved["data"]["reason"] == "manual"
    background_transcription.assert_awaited_once_with(rant["id"], session["user"]["id"])

    resp = test_client.get(f"/api/v1/rants/{rant['id']}/audio")
    assert resp.status_code == 200
    assert resp.content[:4] == b"RIFF"


def test_stop_without_audio(test_client: TestClient, background_transcription):
    token = _signup(test_client)["token"]
    with test_client.websocket_connect(f"/ws/record?token={token}") as ws:
        assert ws.receive_json()["type"] == "recording"
        ws.send_text("stop")
        msg = _receive_until(ws, "saved", "error")
    assert msg["type"] == "error"
    assert msg["data"]["detail"] == "No audio captured"
    background_transcription.assert_not_called()


def test_countdown_expiry_saves(
    test_client: TestClient, sample_pcm_bytes, background_transcription, monkeypatch
):
    """With a one-second budget the recording stops itself."""
    from src.core.config import get_settings

    token = _signup(test_client)["token"]
    monkeypatch.setenv("MAX_RECORDING_SECONDS", "1")
    get_settings.cache_clear()

    with test_client.websocket_connect(f"/ws/record?token={token}&is_private=true") as ws:
        started = ws.receive_json()
        assert started["data"]["remaining"] == "00:01"
        ws.send_bytes(sample_pcm_bytes)
        saved = _receive_until(ws, "saved", "error")

    assert saved["type"] == "saved", saved
    assert saved["data"]["reason"] == "timeout"
    assert saved["data"]["rant"]["is_private"] is True


def test_failed_save_removes_blob(
    test_client: TestClient, sample_pcm_bytes, background_transcription
):
    """When the rant cannot be stored, its WAV blob is deleted again."""
    from pathlib import Path

    from src.core.config import get_settings

    token = _signup(test_client)["token"]
    failing = AsyncMock(side_effect=RuntimeError("database unavailable"))

    with patch("src.services.storage.repository.RantRepository.update_audio_url", failing):
        with test_client.websocket_connect(f"/ws/record?token={token}") as ws:
            assert ws.receive_json()["type"] == "recording"
            ws.send_bytes(sample_pcm_bytes)
            ws.send_text("stop")
            msg = _receive_until(ws, "saved", "error")

    assert msg["type"] == "error"
    assert msg["data"]["detail"] == "Failed to save recording"
    failing.assert_awaited_once()
    background_transcription.assert_not_called()
    audio_dir = Path(get_settings().audio_dir)
    assert not audio_dir.exists() or list(audio_dir.iterdir()) == []
