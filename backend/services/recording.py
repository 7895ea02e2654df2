"""
Recording service - accumulates audio chunks per session and decides when
the speaker has finished.
"""
from config import DEFAULT_SAMPLE_RATE, SILENCE_MS, SILENCE_SWEEP_MS, WARMUP_MS
from services.activity import compute_rms, is_active, chunk_duration_ms
from services.sessions import SESSIONS, create_session, now_ms, session_lock
from services.transcription import finalize_session


def parse_sample_rate(raw, default=DEFAULT_SAMPLE_RATE):
    """Caller-declared sample rate; missing means default. Raises ValueError if not a positive int."""
    if raw is None or raw == "":
        return default
    rate = int(raw)
    if rate <= 0:
        raise ValueError(f"sample rate must be positive, got {rate}")
    return rate


def silence_expired(sess, now):
    """True once a warmed-up session has been quiet for longer than SILENCE_MS."""
    return sess["has_spoken_enough"] and now - sess["last_activity_at"] > SILENCE_MS


def ingest_chunk(session_id, chunk_bytes, sample_rate=DEFAULT_SAMPLE_RATE, now=None):
    """
    Feed one chunk into a session, creating it on first use.

    Returns { rms, active, finalized, text }. When the chunk pushes the
    session past the silence timeout the session is finalized before this
    returns; text is the published transcript (or None).
    """
    now = now_ms() if now is None else now
    rms = compute_rms(chunk_bytes)
    active = is_active(rms)
    expired = None

    with session_lock(session_id):
        sess = SESSIONS.get(session_id)
        if sess is None:
            sess = create_session(session_id, sample_rate, now=now)
            print(f"[AUDIO] new session={session_id} rate={sample_rate}")
        elif sample_rate != sess["sample_rate"]:
            # Rate is fixed at creation; durations keep using the original one.
            print(
                f"[AUDIO] session={session_id} chunk rate={sample_rate} "
                f"differs from session rate={sess['sample_rate']}"
            )

        if active:
            sess["chunks"].append(chunk_bytes)
            sess["last_activity_at"] = now
            sess["active_ms"] += chunk_duration_ms(chunk_bytes, sess["sample_rate"])
            if sess["active_ms"] >= WARMUP_MS:
                sess["has_spoken_enough"] = True
        elif not sess["has_spoken_enough"]:
            # Leading and early silence is kept so short pauses survive.
            sess["chunks"].append(chunk_bytes)
            sess["last_activity_at"] = now

        print(
            f"[AUDIO] session={session_id} bytes={len(chunk_bytes)} rms={rms:.4f} "
            f"active={active} active_ms={sess['active_ms']:.0f} chunks={len(sess['chunks'])}"
        )

        if silence_expired(sess, now):
            expired = SESSIONS.pop(session_id)
            print(f"[VAD] silence timeout session={session_id}")

    text = None
    if expired is not None:
        text = finalize_session(session_id, expired)

    return {
        "rms": rms,
        "active": active,
        "finalized": expired is not None,
        "text": text,
    }


def sweep_silent_sessions(now=None):
    """
    Finalize every session whose silence timeout elapsed without a new chunk.
    Returns a list of (session_id, text) for the sessions closed.
    """
    now = now_ms() if now is None else now
    closed = []

    for session_id in list(SESSIONS.keys()):
        with session_lock(session_id):
            sess = SESSIONS.get(session_id)
            if sess is None or not silence_expired(sess, now):
                continue
            SESSIONS.pop(session_id)
        print(f"[VAD] silence timeout (sweep) session={session_id}")
        closed.append((session_id, finalize_session(session_id, sess)))

    return closed


def run_silence_watcher(socketio):
    """
    Background loop closing sessions whose callers stopped sending.
    Should be called via socketio.start_background_task().
    """
    print(f"[VAD] silence watcher started (every {SILENCE_SWEEP_MS} ms)")
    while True:
        try:
            for session_id, text in sweep_silent_sessions():
                socketio.emit(
                    "transcript_final",
                    {"sessionId": session_id, "text": text or "", "ready": text is not None},
                )
        except Exception as e:
            print(f"[VAD] silence sweep failed: {e}")
        socketio.sleep(SILENCE_SWEEP_MS / 1000.0)
