"""Tests for the filesystem BlobStore."""

import pytest

from src.core.exceptions import AudioNotFoundError, InvalidRequestError


def test_save_and_read(blob_store):
    key = blob_store.save("abc123.wav", b"RIFF")
    assert key == "abc123.wav"
    assert blob_store.exists(key)
    assert blob_store.read(key) == b"RIFF"


def test_save_leaves_no_partial_file(blob_store):
    blob_store.save("abc.wav", b"data")
    assert [p.name for p in blob_store.root.iterdir()] == ["abc.wav"]


def test_empty_data_rejected(blob_store):
    with pytest.raises(InvalidRequestError):
        blob_store.save("abc.wav", b"")


@pytest.mark.parametrize("key", ["../escape.wav", "nested/key.wav", "noext", "x.toolongext"])
def test_invalid_keys_rejected(blob_store, key):
    with pytest.raises(InvalidRequestError):
        blob_store.path_for(key)


def test_read_missing(blob_store):
    with pytest.raises(AudioNotFoundError):
        blob_store.read("missing.wav")


def test_delete(blob_store):
    blob_store.save("gone.wav", b"data")
    assert blob_store.delete("gone.wav") is True
    assert not blob_store.exists("gone.wav")
    assert blob_store.delete("gone.wav") is False
