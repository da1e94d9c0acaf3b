"""Raw PCM handling for speech providers that answer with headerless audio."""

import io
import wave

DEFAULT_SAMPLE_RATE = 24000
DEFAULT_BITS_PER_SAMPLE = 16


def parse_audio_mime_type(mime_type: str) -> dict[str, int]:
    """Read sample width and rate from a MIME type such as ``audio/L16;codec=pcm;rate=24000``."""
    bits_per_sample = DEFAULT_BITS_PER_SAMPLE
    rate = DEFAULT_SAMPLE_RATE

    main_type, *params = mime_type.split(";")
    main_type = main_type.strip().lower()
    if main_type.startswith("audio/l"):
        try:
            bits_per_sample = int(main_type[len("audio/l") :])
        except ValueError:
            pass

    for param in params:
        key, _, value = param.strip().partition("=")
        if key.lower() == "rate":
            try:
                rate = int(value)
            except ValueError:
                pass

    return {"bits_per_sample": bits_per_sample, "rate": rate}


def is_raw_pcm(mime_type: str | None) -> bool:
    if not mime_type:
        return False
    lowered = mime_type.lower()
    return lowered.startswith("audio/l16") or "pcm" in lowered


def pcm_to_wav(pcm: bytes, mime_type: str = "audio/L16;rate=24000", channels: int = 1) -> bytes:
    """Wrap little-endian PCM samples in a WAV container."""
    info = parse_audio_mime_type(mime_type)
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(info["bits_per_sample"] // 8)
        wav_file.setframerate(info["rate"])
        wav_file.writeframes(pcm)
    return buffer.getvalue()
