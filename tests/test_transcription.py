"""
Finalizer: handoff, provider failures and scratch file cleanup.
"""
import os

import pytest

import config
from adapters.deepgram_adapter import extract_transcript
from services import transcription
from services.recording import ingest_chunk
from services.sessions import SESSIONS, TRANSCRIPTS, read_transcript
from services.transcription import finalize

from conftest import RATE, pcm


def scratch_files():
    return [f for f in os.listdir(config.RECORDINGS_DIR) if f.endswith(".wav")]


def test_finalize_unknown_session_is_noop(fake_deepgram):
    assert finalize("missing") is None
    assert fake_deepgram.calls == []
    assert TRANSCRIPTS == {}


def test_finalize_twice_writes_once(fake_deepgram, scheduled):
    ingest_chunk("a", pcm(300, 8000), RATE, now=0)

    assert finalize("a") == "hello world"
    assert finalize("a") is None

    assert len(fake_deepgram.calls) == 1
    assert len(scheduled) == 1
    assert read_transcript("a") == {"text": "hello world", "ready": True}


def test_finalize_passes_model_and_language(fake_deepgram):
    ingest_chunk("a", pcm(300, 8000), RATE, now=0)
    finalize("a")

    call = fake_deepgram.calls[0]
    assert call["model"] == config.DEEPGRAM_MODEL
    assert call["language"] == config.DEEPGRAM_LANGUAGE


def test_empty_session_produces_no_transcript(fake_deepgram):
    ingest_chunk("a", pcm(2000, 8000), RATE, now=0)
    SESSIONS["a"]["chunks"].clear()

    assert finalize("a") is None
    assert fake_deepgram.calls == []
    assert "a" not in SESSIONS
    assert read_transcript("a") == {"text": "", "ready": False}


def test_silence_only_session_is_still_transcribed(fake_deepgram):
    fake_deepgram.response = {"results": {"channels": [{"alternatives": [{"transcript": ""}]}]}}
    for i in range(5):
        result = ingest_chunk("s2", pcm(200, 0), RATE, now=i * 5000)
        assert result["finalized"] is False

    assert finalize("s2") == ""
    assert len(fake_deepgram.calls) == 1
    assert "s2" not in SESSIONS
    assert read_transcript("s2") == {"text": "", "ready": True}


def test_provider_error_loses_utterance(fake_deepgram):
    fake_deepgram.error = RuntimeError("503 from provider")
    ingest_chunk("a", pcm(300, 8000), RATE, now=0)

    assert finalize("a") is None
    assert "a" not in SESSIONS
    assert TRANSCRIPTS == {}
    assert scratch_files() == []


def test_scratch_file_removed_after_success():
    ingest_chunk("a", pcm(300, 8000), RATE, now=0)
    finalize("a")
    assert scratch_files() == []


def test_cleanup_failure_is_swallowed(monkeypatch):
    real_remove = os.remove

    def broken_remove(path):
        raise OSError("busy")

    monkeypatch.setattr(transcription.os, "remove", broken_remove)
    ingest_chunk("a", pcm(300, 8000), RATE, now=0)

    assert finalize("a") == "hello world"

    for name in scratch_files():
        real_remove(os.path.join(config.RECORDINGS_DIR, name))


def test_extract_transcript_shapes():
    class Alt:
        transcript = "from model"

    class Channel:
        alternatives = [Alt()]

    class Results:
        channels = [Channel()]

    class Response:
        results = Results()

    assert extract_transcript(Response()) == "from model"
    assert extract_transcript({"results": {"channels": [{"alternatives": [{"transcript": "x"}]}]}}) == "x"
    assert extract_transcript(None) == ""
    assert extract_transcript({}) == ""
    assert extract_transcript({"results": {"channels": []}}) == ""
    assert extract_transcript({"results": {"channels": [{"alternatives": [{}]}]}}) == ""


@pytest.mark.parametrize("session_id", ["tenant/a", "../x", "../../escape", "x" * 400])
def test_any_session_id_finalizes_without_raising(session_id, fake_deepgram):
    ingest_chunk(session_id, pcm(2200, 8000), RATE, now=0)

    result = ingest_chunk(session_id, pcm(100, 0), RATE, now=config.SILENCE_MS + 1)

    assert result["finalized"] is True
    assert result["text"] == "hello world"
    assert len(fake_deepgram.calls) == 1
    assert session_id not in SESSIONS
    assert scratch_files() == []
    parent = os.path.dirname(os.path.abspath(config.RECORDINGS_DIR))
    assert not [f for f in os.listdir(parent) if f.startswith(("x_", "escape_"))]


def test_scratch_file_failure_is_swallowed(monkeypatch, fake_deepgram):
    def no_space(*args, **kwargs):
        raise OSError("no space left on device")

    monkeypatch.setattr(transcription.tempfile, "mkstemp", no_space)
    ingest_chunk("a", pcm(300, 8000), RATE, now=0)

    assert finalize("a") is None
    assert fake_deepgram.calls == []
    assert "a" not in SESSIONS
    assert TRANSCRIPTS == {}
