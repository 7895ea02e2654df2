"""
Socket.IO event handlers.
"""
import base64
from flask_socketio import emit

from config import DEFAULT_SESSION_ID
from services.recording import ingest_chunk, parse_sample_rate
from services.sessions import pop_session, read_transcript
from services.transcription import finalize_session


def _final_payload(session_id, text):
    return {"sessionId": session_id, "text": text or "", "ready": text is not None}


def register_socket_handlers(socketio):
    """Register all Socket.IO event handlers."""

    @socketio.on("connect")
    def on_connect():
        print("[WS] client connected")

    @socketio.on("disconnect")
    def on_disconnect():
        # Open sessions are left to the silence watcher or a manual finalize.
        print("[WS] client disconnected")

    @socketio.on("audio_chunk")
    def on_audio_chunk(data):
        session_id = data.get("sessionId") or DEFAULT_SESSION_ID
        seq = data.get("seq")
        try:
            sample_rate = parse_sample_rate(data.get("sampleRate"))
        except (TypeError, ValueError) as e:
            print(f"[WS] rejected chunk seq={seq} session={session_id}: {e}")
            emit("audio_ack", {"seq": seq, "error": f"bad sample rate: {e}"})
            return
        b64 = data.get("bytes", "")

        raw = base64.b64decode(b64) if b64 else b""
        if not raw:
            emit("audio_ack", {"seq": seq, "rms": 0.0, "active": False})
            return

        result = ingest_chunk(session_id, raw, sample_rate)

        emit("audio_ack", {"seq": seq, "rms": result["rms"], "active": result["active"]})
        if result["finalized"]:
            emit("transcript_final", _final_payload(session_id, result["text"]))

    @socketio.on("finalize")
    def on_finalize(data):
        session_id = data.get("sessionId") or DEFAULT_SESSION_ID

        print(f"[WS] finalize received session={session_id}")

        sess = pop_session(session_id)
        if sess is None:
            emit("finalize_result", {"ok": False, "sessionId": session_id, "error": "unknown session"})
            return

        emit("finalize_result", {"ok": True, "sessionId": session_id})
        text = finalize_session(session_id, sess)
        emit("transcript_final", _final_payload(session_id, text))

    @socketio.on("get_transcript")
    def on_get_transcript(data):
        session_id = data.get("sessionId") or DEFAULT_SESSION_ID
        emit("transcript", {"sessionId": session_id, **read_transcript(session_id)})
