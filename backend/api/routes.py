"""
HTTP API routes.
"""
from flask import jsonify, request

from adapters.deepgram_adapter import is_available
from config import DEFAULT_SESSION_ID
from services.recording import ingest_chunk, parse_sample_rate
from services.sessions import SESSIONS, TRANSCRIPTS, pop_session, read_transcript
from services.transcription import finalize_session


def _client_id():
    return (
        request.headers.get("X-Client-Id")
        or request.args.get("clientId")
        or request.args.get("sessionId")
        or DEFAULT_SESSION_ID
    )


def _sample_rate():
    return parse_sample_rate(request.headers.get("X-Sample-Rate") or request.args.get("sampleRate"))


def register_routes(app):
    """Register all HTTP routes on the Flask app."""

    @app.get("/health")
    def health():
        return jsonify({
            "ok": True,
            "sessions": len(SESSIONS),
            "transcripts": len(TRANSCRIPTS),
            "deepgram": is_available(),
        })

    @app.post("/stream")
    def stream():
        client_id = _client_id()
        try:
            sample_rate = _sample_rate()
        except ValueError as e:
            return jsonify({"error": f"bad sample rate: {e}"}), 400

        body = request.get_data()
        if not body:
            print("[HTTP] /stream received empty body")
            return jsonify({"error": "empty body"}), 400

        print(f"[HTTP] /stream received {len(body)} bytes for clientId={client_id}")

        result = ingest_chunk(client_id, body, sample_rate)
        return jsonify({
            "ok": True,
            "bytes": len(body),
            "clientId": client_id,
            "rms": result["rms"],
            "active": result["active"],
            "finalized": result["finalized"],
        })

    @app.post("/sessions/<session_id>/finalize")
    def finalize(session_id):
        sess = pop_session(session_id)
        if sess is None:
            return jsonify({"error": "not found"}), 404

        print(f"[HTTP] manual finalize session={session_id}")
        text = finalize_session(session_id, sess)
        return jsonify({
            "ok": True,
            "sessionId": session_id,
            "text": text or "",
            "ready": text is not None,
        })

    @app.get("/transcript")
    def transcript_by_query():
        return _transcript_response(_client_id())

    @app.get("/sessions/<session_id>/transcript")
    def transcript(session_id):
        return _transcript_response(session_id)

    def _transcript_response(session_id):
        resp = jsonify({"sessionId": session_id, **read_transcript(session_id)})
        resp.headers["Cache-Control"] = "no-store"
        return resp
