"""Application-level speech synthesis: single requests, whole decks and audio bundles."""

from __future__ import annotations

import asyncio
import base64
import io
import time
import zipfile
from collections.abc import Sequence
from datetime import datetime

from shared.config import config
from shared.models import (
    AudioSettings,
    Slide,
    SlideAudio,
    SlideAudioBatch,
    SlideAudioError,
    TTSRequest,
    TTSResponse,
)
from shared.utils import setup_logging, slugify_title

from .drivers import GeminiTTSEngine, LocalTTSEngine, OpenAITTSEngine, TTSEngine
from .errors import TTSProviderError
from .fallback import TTSFallbackManager

logger = setup_logging("tts-service")

MAX_TEXT_LENGTH = 5000

ENGINE_LABELS = {
    "gemini": "Gemini AI TTS",
    "openai": "OpenAI TTS",
    "local": "Local speech engine",
}


def build_default_drivers() -> dict[str, TTSEngine]:
    """Instantiate every driver whose credentials are configured."""
    drivers: dict[str, TTSEngine] = {}
    factories = {
        "gemini": lambda: GeminiTTSEngine(
            model=config.get_pipeline_value("tts.models.gemini", "gemini-2.5-flash-preview-tts")
        ),
        "openai": lambda: OpenAITTSEngine(model=config.get_pipeline_value("tts.models.openai", "tts-1")),
        "local": LocalTTSEngine,
    }
    for name, factory in factories.items():
        try:
            drivers[name] = factory()
        except ValueError as e:
            logger.warning(f"TTS driver '{name}' not registered: {e}")
    return drivers


def audio_file_name(slide_number: int, title: str, output_format: str = "wav") -> str:
    return f"Slide_{slide_number:02d}_{slugify_title(title)}.{output_format}"


def bundle_file_name(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"Presentation_Audio_{now.strftime('%Y-%m-%d_%H-%M')}.zip"


class NarrationAudioService:
    """Speech synthesis on top of the fallback manager."""

    def __init__(self, fallback_manager: TTSFallbackManager, sleep=asyncio.sleep) -> None:
        self.fallback_manager = fallback_manager
        self._sleep = sleep

    @staticmethod
    def _validate_text(text: str) -> str:
        text = text.strip()
        if not text:
            raise ValueError("Text is required for speech synthesis")
        if len(text) > MAX_TEXT_LENGTH:
            raise ValueError(f"Text too long for speech synthesis (max {MAX_TEXT_LENGTH} characters)")
        return text

    async def synthesize(self, request: TTSRequest) -> TTSResponse:
        """Synthesize one text; raises ``ValueError`` for empty text and ``TTSProviderError`` on failure."""
        text = self._validate_text(request.text)
        start_time = time.time()
        result = await self.fallback_manager.synthesize_with_fallback(
            text=text,
            voice=request.voice,
            speed=request.speed,
            pitch=request.pitch,
            output_format=request.output_format,
            language=request.language,
            preferred_driver=request.driver,
            emotion=request.emotion.value,
        )
        return TTSResponse(
            audio_base64=base64.b64encode(result["audio_data"]).decode("ascii"),
            mime_type=result.get("mime_type", "audio/wav"),
            voice_used=result.get("voice_used", request.voice or ""),
            output_format=result.get("output_format", request.output_format),
            provider_used=result["provider_used"],
            fallback_used=result.get("fallback_used", False),
            emotion=request.emotion,
            text_length=len(text),
            processing_time=time.time() - start_time,
        )

    async def synthesize_slides(self, slides: Sequence[Slide], settings: AudioSettings) -> SlideAudioBatch:
        """Synthesize every scripted slide in order, one provider call at a time.

        Slides without a script are skipped. A failing slide is recorded in
        ``errors`` and the remaining slides are still processed.
        """
        pacing = settings.pacing_seconds
        if pacing is None:
            pacing = float(config.get_pipeline_value("tts.pacing_seconds", 1.0))

        batch = SlideAudioBatch()
        calls_made = 0
        for slide in sorted(slides, key=lambda s: s.slide_number):
            script = (slide.script or "").strip()
            if not script:
                logger.warning(f"Slide {slide.slide_number} has no script, skipping")
                batch.skipped.append(slide.slide_number)
                continue
            if len(script) > MAX_TEXT_LENGTH:
                batch.errors.append(
                    SlideAudioError(
                        slide_number=slide.slide_number,
                        message=f"Script too long for speech synthesis (max {MAX_TEXT_LENGTH} characters)",
                    )
                )
                continue

            if calls_made and pacing > 0:
                await self._sleep(pacing)
            calls_made += 1

            logger.info(f"Generating audio for slide {slide.slide_number}")
            try:
                result = await self.fallback_manager.synthesize_with_fallback(
                    text=script,
                    voice=settings.voice,
                    speed=settings.speed,
                    output_format=settings.output_format,
                    language=settings.language,
                    preferred_driver=settings.driver,
                    emotion=settings.emotion.value,
                )
            except TTSProviderError as e:
                logger.error(f"Audio for slide {slide.slide_number} failed: {e.message}")
                batch.errors.append(
                    SlideAudioError(
                        slide_number=slide.slide_number,
                        message=e.message,
                        provider=e.provider,
                        quota_exceeded=e.quota_exceeded,
                    )
                )
                continue

            batch.results.append(
                SlideAudio(
                    slide_number=slide.slide_number,
                    title=slide.title,
                    audio_data=result["audio_data"],
                    mime_type=result.get("mime_type", "audio/wav"),
                    output_format=result.get("output_format", settings.output_format),
                    provider_used=result["provider_used"],
                    voice_used=result.get("voice_used", settings.voice or ""),
                )
            )

        logger.info(
            f"Audio generation complete: {len(batch.results)}/{len(slides)} slides "
            f"({len(batch.errors)} failed, {len(batch.skipped)} skipped)"
        )
        return batch

    def build_audio_bundle(
        self, batch: SlideAudioBatch, settings: AudioSettings, generated_at: datetime | None = None
    ) -> bytes:
        """Zip the slide audio files together with a README listing them."""
        generated_at = generated_at or datetime.now()
        file_names = [
            audio_file_name(audio.slide_number, audio.title, audio.output_format) for audio in batch.results
        ]

        providers = sorted({audio.provider_used for audio in batch.results})
        voices = sorted({audio.voice_used for audio in batch.results if audio.voice_used})
        engine = ", ".join(ENGINE_LABELS.get(p, p) for p in providers) or "-"
        lines = [
            "Presentation Audio Files",
            "========================",
            "",
            f"Generated at: {generated_at.strftime('%Y-%m-%d %H:%M')}",
            f"Number of slides: {len(batch.results)}",
            f"TTS engine: {engine}",
        ]
        if voices:
            lines.append(f"Voice: {', '.join(voices)}")
        if "gemini" in providers:
            lines.append(f"Emotion: {settings.emotion.value}")
        else:
            lines.append(f"Speed: {settings.speed}x")
        lines += ["", "Files:"]
        lines += [f"- {name}" for name in file_names]
        lines += [
            "",
            "Instructions:",
            "- Play the files in order for the complete presentation",
            "- Each file holds the narration of one slide",
            "",
        ]

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
            for name, audio in zip(file_names, batch.results):
                archive.writestr(name, audio.audio_data)
            archive.writestr("README.txt", "\n".join(lines))
        return buffer.getvalue()
