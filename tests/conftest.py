"""
Shared fixtures: isolated scratch dir, empty stores, fake Deepgram and scheduler.
"""
import os
import tempfile

os.environ.setdefault("RECORDINGS_DIR", tempfile.mkdtemp(prefix="vat-recordings-"))

import eventlet
import numpy as np
import pytest

from adapters import deepgram_adapter
from services.sessions import SESSIONS, TRANSCRIPTS

RATE = 16000


def pcm(ms, amplitude, rate=RATE):
    """Constant-amplitude 16-bit PCM lasting ms milliseconds."""
    n = int(rate * ms / 1000)
    return np.full(n, amplitude, dtype="<i2").tobytes()


def dg_response(text):
    return {"results": {"channels": [{"alternatives": [{"transcript": text}]}]}}


class FakeDeepgram:
    def __init__(self):
        self.calls = []
        self.response = dg_response("hello world")
        self.error = None
        self.on_call = None

    def __call__(self, audio_bytes, model=None, language=None):
        self.calls.append({"audio": audio_bytes, "model": model, "language": language})
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def clean_stores():
    SESSIONS.clear()
    TRANSCRIPTS.clear()
    yield
    SESSIONS.clear()
    TRANSCRIPTS.clear()


@pytest.fixture(autouse=True)
def scheduled(monkeypatch):
    """Capture deferred transcript deletions instead of running them."""
    calls = []

    def spawn_after(seconds, func, *args):
        calls.append((seconds, func, args))

    monkeypatch.setattr(eventlet, "spawn_after", spawn_after)
    return calls


@pytest.fixture(autouse=True)
def fake_deepgram(monkeypatch):
    fake = FakeDeepgram()
    monkeypatch.setattr(deepgram_adapter, "transcribe_file", fake)
    return fake
