"""
Gemini text-to-speech service.

Reads a veterinary report aloud with a calm prebuilt voice.

 Gemini TTS answers with raw 16-bit PCM; it is wrapped into a WAV
 container so the browser can play it from a data URI.
"""

import base64
import io
import re
import time
import wave
from dataclasses import dataclass

import mlflow
from google import genai
from google.genai import types

from app.common.mlflow_control import mlflow_context, mlflow_safe
from app.core.errors import SpeechSynthesisUnavailable, ValidationError
from app.vet_service.config import get_settings
from app.vet_service.services.prompts import SPEECH_PREAMBLE
from app.vet_service.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SAMPLE_RATE = 24000
DEFAULT_AUDIO_MIME = "audio/mpeg"
_RAW_PCM_MIME_PREFIXES = ("audio/l16", "audio/pcm")


@dataclass(frozen=True)
class SpeechAudio:
    """Base64-encoded audio plus the MIME type to play it with."""

    audio_base64: str
    mime_type: str

    def as_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.audio_base64}"


def _load_gemini() -> genai.Client:
    """Build a Gemini client from settings."""
    settings = get_settings()
    return genai.Client(api_key=settings.GEMINI_API_KEY)


def build_speech_config(voice_name: str) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_modalities=["AUDIO"],
        speech_config=types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(
                    voice_name=voice_name,
                )
            )
        ),
    )


def synthesize_speech(text: str) -> SpeechAudio:
    """
    Convert a (markup-free, length-capped) report into speech.

    Args:
        text: Plain prose to read aloud.

    Returns:
        SpeechAudio: Base64 audio and its MIME type.

    Raises:
        ValidationError: If text is blank.
        ConfigurationError: Missing API credential.
        SpeechSynthesisUnavailable: Transport failure or no audio returned.
    """
    if not text or not text.strip():
        raise ValidationError("Seslendirilecek metin boş.")

    settings = get_settings()
    client = _load_gemini()

    logger.info("TTS started | chars=%s voice=%s", len(text), settings.VOICE_NAME)
    start_time = time.time()

    with mlflow_context(run_name="report_speech"):
        mlflow_safe(mlflow.set_tag, "service", "speech_tts")
        mlflow_safe(mlflow.set_tag, "llm_provider", "gemini")
        mlflow_safe(mlflow.set_tag, "voice", settings.VOICE_NAME)

        try:
            response = client.models.generate_content(
                model=settings.SPEECH_MODEL,
                contents=[
                    types.Content(parts=[types.Part(text=f"{SPEECH_PREAMBLE}{text}")])
                ],
                config=build_speech_config(settings.VOICE_NAME),
            )
        except Exception as exc:
            logger.exception("TTS request failed", extra={"model": settings.SPEECH_MODEL})
            raise SpeechSynthesisUnavailable() from exc

        inline_data = _extract_inline_audio(response)
        if inline_data is None or not getattr(inline_data, "data", None):
            logger.error("TTS response contained no audio")
            raise SpeechSynthesisUnavailable()

        audio = _encode_audio(inline_data.data, getattr(inline_data, "mime_type", None))

        mlflow_safe(mlflow.log_metric, "tts_latency_sec", time.time() - start_time)

    logger.info("TTS completed | mime=%s", audio.mime_type)
    return audio


def _extract_inline_audio(response):
    """Return ``candidates[0].content.parts[0].inline_data`` or None."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None)
    if not parts:
        return None

    return getattr(parts[0], "inline_data", None)


def _encode_audio(data, mime_type: str | None) -> SpeechAudio:
    """
    Normalize the inline payload into base64 text.

    The SDK hands back decoded bytes; a base64 string is accepted as well.
    Raw PCM is converted to WAV.
    """
    raw = base64.b64decode(data) if isinstance(data, str) else bytes(data)
    mime = (mime_type or DEFAULT_AUDIO_MIME).strip()

    if mime.lower().startswith(_RAW_PCM_MIME_PREFIXES):
        raw = _convert_raw_to_wav(raw, sample_rate=_sample_rate(mime))
        mime = "audio/wav"

    return SpeechAudio(
        audio_base64=base64.b64encode(raw).decode("ascii"),
        mime_type=mime.split(";")[0],
    )


def _sample_rate(mime_type: str) -> int:
    """Parse ``rate=<hz>`` from a PCM MIME type such as ``audio/L16;rate=24000``."""
    match = re.search(r"rate=(\d+)", mime_type)
    return int(match.group(1)) if match else DEFAULT_SAMPLE_RATE


def _convert_raw_to_wav(
    raw_pcm: bytes,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    """
    Convert raw PCM audio to WAV format.

    Args:
        raw_pcm: Raw PCM audio bytes (16-bit signed little-endian)
        sample_rate: Audio sample rate (Gemini TTS: 24000 Hz)
        channels: Number of audio channels (1 = mono)
        sample_width: Bytes per sample (2 = 16-bit)

    Returns:
        bytes: WAV file with RIFF header
    """
    wav_buffer = io.BytesIO()

    with wave.open(wav_buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(raw_pcm)

    wav_bytes = wav_buffer.getvalue()
    logger.debug(f"Converted {len(raw_pcm)} bytes PCM → {len(wav_bytes)} bytes WAV")

    return wav_bytes
