"""
Energy-based voice activity detection on raw 16-bit PCM.
"""
import numpy as np

from config import ACTIVITY_THRESHOLD

# Full scale of a signed 16-bit sample
FULL_SCALE = 32768.0


def compute_rms(chunk_bytes):
    """
    Normalized RMS loudness of a chunk of signed 16-bit little-endian samples.

    A trailing odd byte is dropped. Returns a float in [0, 1]; an empty
    chunk is silent (0.0).
    """
    usable = len(chunk_bytes) - (len(chunk_bytes) % 2)
    if usable <= 0:
        return 0.0

    samples = np.frombuffer(chunk_bytes[:usable], dtype="<i2").astype(np.float64)
    rms = float(np.sqrt(np.mean(np.square(samples / FULL_SCALE))))
    return min(rms, 1.0)


def is_active(rms, threshold=ACTIVITY_THRESHOLD):
    """True when the loudness counts as speech."""
    return rms > threshold


def chunk_duration_ms(chunk_bytes, sample_rate):
    """Audio duration implied by the byte length at the given rate."""
    if sample_rate <= 0:
        return 0.0
    return len(chunk_bytes) / (2 * sample_rate) * 1000
