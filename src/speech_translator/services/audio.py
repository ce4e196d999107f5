"""Upload decoding: any libsndfile container to 16 kHz mono 16-bit PCM."""

import io

import librosa
import numpy as np
import soundfile as sf
import structlog

logger = structlog.get_logger()

TARGET_SAMPLE_RATE = 16000


class AudioDecodeError(ValueError):
    """The uploaded bytes are not audio we can decode."""


def to_pcm16(audio_data: bytes, target_sr: int = TARGET_SAMPLE_RATE) -> bytes:
    """Decode an uploaded clip into raw little-endian 16-bit mono PCM at ``target_sr``."""
    try:
        audio, sample_rate = sf.read(io.BytesIO(audio_data), dtype="float32", always_2d=False)
    except RuntimeError as e:
        raise AudioDecodeError(f"unsupported or corrupt audio: {e}") from e

    if audio.size == 0:
        raise AudioDecodeError("audio contains no samples")

    # soundfile is (frames, channels), librosa wants (channels, frames)
    if audio.ndim > 1:
        audio = librosa.to_mono(audio.T)

    if sample_rate != target_sr:
        audio = librosa.resample(audio, orig_sr=sample_rate, target_sr=target_sr)

    logger.debug(
        "Audio normalized for recognition",
        source_sample_rate=sample_rate,
        duration=round(len(audio) / target_sr, 2),
    )

    pcm = np.clip(audio, -1.0, 1.0) * 32767
    return pcm.astype("<i2").tobytes()
