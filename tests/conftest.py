"""Shared pytest fixtures for the Rant to Reflection test suite.

Provides common test fixtures used across unit and integration tests,
including mock STT/TTS providers, audio samples and database setup helpers.
"""

import struct
from unittest.mock import AsyncMock

import pytest

# ---------------------------------------------------------------------------
# Settings Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point storage at tmp_path and drop any provider key from the env.

    ``get_settings()`` is cached, so the cache is cleared around each test.
    """
    from src.core.config import get_settings

    monkeypatch.setenv("AUDIO_DIR", str(tmp_path / "audio"))
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("ELEVENLABS_API_KEY", "")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Voice provider Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_stt():
    """Create a mock STT provider for unit testing.

    Returns:
        AsyncMock: A mock implementing the BaseSTT interface with a
        default transcribe response.
    """
    from src.services.voice.base import BaseSTT

    stt = AsyncMock(spec=BaseSTT)
    stt.transcribe.return_value = "I am so tired of my neighbour's leaf blower."
    return stt


@pytest.fixture
def mock_tts():
    """Create a mock TTS provider with plenty of quota left."""
    from src.services.voice.base import BaseTTS

    tts = AsyncMock(spec=BaseTTS)
    tts.get_remaining_characters.return_value = 10_000
    tts.synthesize.return_value = b"ID3fake-mpeg-bytes"
    return tts


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono).

    Returns:
        bytes: Raw PCM audio data.
    """
    import math

    sample_rate = 16000
    duration = 1.0
    frequency = 440.0
    amplitude = 16000  # ~50% of max int16

    samples = []
    for i in range(int(sample_rate * duration)):
        value = int(amplitude * math.sin(2 * math.pi * frequency * i / sample_rate))
        samples.append(struct.pack("<h", value))
    return b"".join(samples)


@pytest.fixture
def silent_pcm_bytes():
    """Generate 1 second of silence as PCM audio (16kHz, 16-bit, mono)."""
    sample_rate = 16000
    return b"\x00\x00" * sample_rate


@pytest.fixture
def sample_wav_bytes(sample_pcm_bytes):
    """The sine-wave PCM wrapped in an in-memory WAV container."""
    import io
    import wave

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(sample_pcm_bytes)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from src.services.storage import models_db  # noqa: F401
    from src.services.storage.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker

    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return a RantRepository bound to the test session."""
    from src.services.storage.repository import RantRepository

    return RantRepository(db_session)


@pytest.fixture
def blob_store(isolated_settings):
    """BlobStore rooted in the per-test audio directory."""
    from src.services.storage.blob import BlobStore

    return BlobStore(isolated_settings.audio_dir)


@pytest.fixture
async def user(repository):
    """A registered user."""
    return await repository.create_user("ranter@example.com", "hunter22")


@pytest.fixture
async def other_user(repository):
    """A second registered user."""
    return await repository.create_user("listener@example.com", "hunter22")
