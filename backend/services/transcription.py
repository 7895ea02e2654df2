"""
Transcription service - closes out a session and transcribes its audio via Deepgram.
"""
import os
import tempfile
import traceback
import wave

from adapters import deepgram_adapter
from config import RECORDINGS_DIR, DEEPGRAM_MODEL, DEEPGRAM_LANGUAGE
from services.sessions import pop_session, put_transcript


def finalize(session_id):
    """
    Finalize a session by id. A second call for the same id is a no-op.
    Returns the transcript text, or None when nothing was published.
    """
    sess = pop_session(session_id)
    if sess is None:
        print(f"[FINALIZE] no session for {session_id}, nothing to do")
        return None
    return finalize_session(session_id, sess)


def finalize_session(session_id, sess):
    """
    Transcribe a session that has already been removed from the store and
    publish the result. Never raises on provider errors.
    """
    chunks = sess["chunks"]
    if not chunks:
        print(f"[FINALIZE] session={session_id} has no audio, skipping transcription")
        return None

    audio_bytes = b"".join(chunks)
    print(
        f"[FINALIZE] session={session_id} chunks={len(chunks)} "
        f"bytes={len(audio_bytes)} rate={sess['sample_rate']}"
    )

    text = transcribe_pcm(session_id, audio_bytes, sess["sample_rate"])
    if text is None:
        return None

    put_transcript(session_id, text)
    print(f"[TX] session={session_id} transcript ready: {text!r}")
    return text


def write_wav(path, audio_bytes, sample_rate):
    """Wrap mono 16-bit PCM in a WAV container."""
    with wave.open(path, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(audio_bytes)


def transcribe_pcm(session_id, audio_bytes, sample_rate,
                   model=DEEPGRAM_MODEL, language=DEEPGRAM_LANGUAGE):
    """
    Stage PCM as a scratch WAV file, send it to Deepgram and return the text.
    Returns None if the request failed. The scratch file is always removed.
    """
    path = None
    try:
        # Session ids are caller-supplied, so they never appear in the file name.
        fd, path = tempfile.mkstemp(prefix="utterance_", suffix=".wav", dir=RECORDINGS_DIR)
        os.close(fd)
        print(f"[DG] staging session {session_id} in {path}")

        # Deepgram gets the WAV container, not raw PCM, so the file on disk is the payload.
        write_wav(path, audio_bytes, sample_rate)
        with open(path, "rb") as f:
            payload = f.read()

        print(f"[DG] Sending {len(payload)} bytes for session {session_id}")
        response = deepgram_adapter.transcribe_file(payload, model=model, language=language)
        return deepgram_adapter.extract_transcript(response)
    except Exception as e:
        print(f"[DG] Transcription failed for session {session_id}: {e}")
        traceback.print_exc()
        return None
    finally:
        if path is not None:
            try:
                os.remove(path)
            except OSError as e:
                print(f"[CLEANUP] could not remove scratch file {path}: {e}")
