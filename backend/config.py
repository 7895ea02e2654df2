"""
Configuration and constants for the backend.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
RECORDINGS_DIR = os.getenv("RECORDINGS_DIR", os.path.join(BASE_DIR, "recordings"))
os.makedirs(RECORDINGS_DIR, exist_ok=True)

# Server configuration
PORT = int(os.getenv("PORT", 3000))
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-in-production")

# Sessions
DEFAULT_SESSION_ID = "global"
DEFAULT_SAMPLE_RATE = int(os.getenv("DEFAULT_SAMPLE_RATE", 16000))

# Voice activity
ACTIVITY_THRESHOLD = 0.02
WARMUP_MS = 2000
SILENCE_MS = int(os.getenv("SILENCE_MS", 1200))
SILENCE_SWEEP_MS = int(os.getenv("SILENCE_SWEEP_MS", 250))

# Transcripts are dropped from memory after this long
TRANSCRIPT_TTL_MS = 5000

# Deepgram
DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-2")
DEEPGRAM_LANGUAGE = os.getenv("DEEPGRAM_LANGUAGE", "en")

# Boot logging
print(f"[BOOT] RECORDINGS_DIR={RECORDINGS_DIR}")
print(f"[BOOT] PORT={PORT} SILENCE_MS={SILENCE_MS}")
print(f"[BOOT] DEEPGRAM_MODEL={DEEPGRAM_MODEL} DEEPGRAM_LANGUAGE={DEEPGRAM_LANGUAGE}")
if not DEEPGRAM_API_KEY:
    print("[WARN] DEEPGRAM_API_KEY not found in .env - transcription will not work!")
else:
    print(f"[BOOT] DEEPGRAM_API_KEY loaded (length={len(DEEPGRAM_API_KEY)})")
