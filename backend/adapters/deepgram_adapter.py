"""
Deepgram adapter - handles Deepgram client creation and pre-recorded requests.
"""
from deepgram import DeepgramClient
from config import DEEPGRAM_API_KEY, DEEPGRAM_MODEL, DEEPGRAM_LANGUAGE


def create_client():
    """
    Create a new Deepgram client.
    Returns DeepgramClient instance.
    """
    return DeepgramClient()


def is_available():
    """Check if Deepgram is configured."""
    return bool(DEEPGRAM_API_KEY)


def transcribe_file(audio_bytes, model=DEEPGRAM_MODEL, language=DEEPGRAM_LANGUAGE):
    """
    Send a complete audio file (WAV) to Deepgram and return the raw response.
    Raises whatever the SDK raises on transport or API errors.
    """
    deepgram = create_client()
    return deepgram.listen.v1.media.transcribe_file(
        request=audio_bytes,
        model=model,
        language=language,
        punctuate=True,
        smart_format=True,
    )


def _field(obj, name):
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_transcript(response):
    """
    Pull results.channels[0].alternatives[0].transcript out of a response.
    Works on SDK models and plain dicts; anything missing gives "".
    """
    results = _field(response, "results")
    channels = _field(results, "channels") or []
    if not channels:
        return ""
    alternatives = _field(channels[0], "alternatives") or []
    if not alternatives:
        return ""
    transcript = _field(alternatives[0], "transcript")
    return transcript if isinstance(transcript, str) else ""
