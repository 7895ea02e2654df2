"""
Session and transcript in-memory stores.

Both maps are process-wide. Access to a given session id is serialized by
one of a fixed set of lock shards, so chunks for different ids rarely
contend with each other.
"""
import threading
import time

import eventlet

from config import TRANSCRIPT_TTL_MS

# sessionId -> { sample_rate, chunks, last_activity_at, has_spoken_enough, active_ms }
SESSIONS = {}

# sessionId -> { text, created_at }
TRANSCRIPTS = {}

LOCK_SHARDS = 64
_LOCKS = [threading.Lock() for _ in range(LOCK_SHARDS)]
_transcripts_lock = threading.Lock()


def now_ms():
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000


def session_lock(session_id):
    """Lock guarding every read-modify-write of this session id."""
    return _LOCKS[hash(session_id) % LOCK_SHARDS]


def get_session(session_id):
    """Get session data."""
    return SESSIONS.get(session_id)


def create_session(session_id, sample_rate, now=None):
    """Create a new session. Caller must hold session_lock(session_id)."""
    SESSIONS[session_id] = {
        "sample_rate": sample_rate,
        "chunks": [],
        "last_activity_at": now_ms() if now is None else now,
        "has_spoken_enough": False,
        "active_ms": 0.0,
    }
    return SESSIONS[session_id]


def pop_session(session_id):
    """Remove and return a session; None when it is not in the store."""
    with session_lock(session_id):
        return SESSIONS.pop(session_id, None)


def put_transcript(session_id, text, now=None):
    """Store a transcript and schedule its removal after the TTL."""
    created_at = now_ms() if now is None else now
    entry = {"text": text, "created_at": created_at}
    with _transcripts_lock:
        TRANSCRIPTS[session_id] = entry
    eventlet.spawn_after(TRANSCRIPT_TTL_MS / 1000.0, expire_transcript, session_id, created_at)
    return entry


def expire_transcript(session_id, created_at):
    """Drop the transcript written at created_at, leaving any newer one alone."""
    with _transcripts_lock:
        entry = TRANSCRIPTS.get(session_id)
        if entry and entry["created_at"] == created_at:
            del TRANSCRIPTS[session_id]
            print(f"[CLEANUP] transcript expired session={session_id}")


def get_transcript(session_id, now=None):
    """Get transcript data, or None if missing or past its TTL."""
    now = now_ms() if now is None else now
    with _transcripts_lock:
        entry = TRANSCRIPTS.get(session_id)
        if not entry:
            return None
        if now - entry["created_at"] >= TRANSCRIPT_TTL_MS:
            del TRANSCRIPTS[session_id]
            return None
        return dict(entry)


def read_transcript(session_id, now=None):
    """Reader-facing view: {text, ready}."""
    entry = get_transcript(session_id, now=now)
    if entry is None:
        return {"text": "", "ready": False}
    return {"text": entry["text"], "ready": True}
