from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from services.tts_service.errors import TTSProviderError
from services.tts_service.fallback import TTSFallbackManager
from services.tts_service.service import NarrationAudioService, build_default_drivers, bundle_file_name
from shared.models import AudioBundleRequest, TTSRequest, TTSResponse
from shared.response_models import APIResponse, ErrorResponse
from shared.utils import config, content_disposition, setup_logging

logger = setup_logging("tts-service")

TTS_DRIVERS = build_default_drivers()

DEFAULT_DRIVER = config.get("tts_default_driver", "gemini")

# Initialize fallback manager
fallback_manager = TTSFallbackManager(TTS_DRIVERS, DEFAULT_DRIVER)
audio_service = NarrationAudioService(fallback_manager)

app = FastAPI(
    title="TTS Service",
    description="Text-to-Speech service for slide narration with provider fallback",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _provider_error(e: TTSProviderError) -> HTTPException:
    return HTTPException(
        status_code=502,
        detail=ErrorResponse(
            message=e.message,
            error_code="tts_failed",
            provider=e.provider,
            quota_exceeded=e.quota_exceeded,
            suggestion=e.suggestion,
        ).model_dump(),
    )


@app.get("/health")
async def health_check():
    return APIResponse(message="TTS Service is healthy")


@app.post("/synthesize", response_model=TTSResponse)
async def synthesize_tts(req: TTSRequest):
    """Synthesize speech with automatic provider fallback."""
    try:
        return await audio_service.synthesize(req)
    except TTSProviderError as e:
        logger.error(f"TTS synthesis failed: {e.message}")
        raise _provider_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.error(f"TTS synthesis error: {e!s}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.post("/synthesize-bundle")
async def synthesize_bundle(req: AudioBundleRequest):
    """Narrate every scripted slide and return the audio files as one zip."""
    try:
        batch = await audio_service.synthesize_slides(req.slides, req.settings)
        if batch.is_empty:
            if batch.errors:
                first = batch.errors[0]
                raise _provider_error(
                    TTSProviderError(
                        f"No audio could be generated: {first.message}",
                        provider=first.provider,
                        quota_exceeded=any(error.quota_exceeded for error in batch.errors),
                        suggestion="Switch to another TTS provider",
                    )
                )
            raise HTTPException(status_code=400, detail="No slide has a script to narrate")

        archive = audio_service.build_audio_bundle(batch, req.settings)
        headers = {"Content-Disposition": content_disposition(bundle_file_name())}
        if batch.errors:
            headers["X-Failed-Slides"] = ",".join(str(error.slide_number) for error in batch.errors)
        if batch.skipped:
            headers["X-Skipped-Slides"] = ",".join(str(number) for number in batch.skipped)
        return Response(content=archive, media_type="application/zip", headers=headers)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Audio bundle error: {e!s}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/voices")
async def get_supported_voices(provider: str = DEFAULT_DRIVER):
    """Return supported voices for a given provider."""
    driver = TTS_DRIVERS.get(provider)
    if not driver:
        raise HTTPException(status_code=404, detail=f"Provider '{provider}' not found")
    return {
        "provider": provider,
        "voices": driver.SUPPORTED_VOICES,
        "default_voice": driver.DEFAULT_VOICE,
        "emotions": getattr(driver, "SUPPORTED_EMOTIONS", []),
    }


@app.get("/drivers")
async def get_available_drivers():
    """Get list of available TTS drivers and their capabilities."""
    drivers_info = {}
    for driver_name, driver in TTS_DRIVERS.items():
        drivers_info[driver_name] = {
            "name": driver_name,
            "available": fallback_manager.is_driver_available(driver_name),
            "supported_voices": driver.SUPPORTED_VOICES,
            "supported_formats": driver.SUPPORTED_FORMATS,
        }

    return {
        "drivers": drivers_info,
        "default": DEFAULT_DRIVER,
        "fallback_chain": fallback_manager.fallback_chain,
        "currently_available": fallback_manager.get_available_drivers(),
    }


@app.get("/fallback/status")
async def get_fallback_status():
    """Get current fallback manager status and health."""
    return {
        "available_drivers": fallback_manager.get_available_drivers(),
        "disabled_drivers": sorted(fallback_manager.disabled_drivers | fallback_manager.manually_disabled),
        "fallback_chain": fallback_manager.fallback_chain,
        "total_drivers": len(TTS_DRIVERS),
        "default_driver": DEFAULT_DRIVER,
        "last_failures": fallback_manager.last_failure_time,
    }


@app.post("/fallback/drivers/{driver_name}/disable")
async def disable_driver(driver_name: str, reason: str = "manual"):
    """Manually disable a TTS driver (for maintenance, etc.)."""
    if driver_name not in TTS_DRIVERS:
        raise HTTPException(status_code=404, detail=f"TTS driver '{driver_name}' not found.")

    fallback_manager.manually_disable_driver(driver_name, reason)
    return {"message": f"Driver '{driver_name}' disabled successfully", "reason": reason}


@app.post("/fallback/drivers/{driver_name}/enable")
async def enable_driver(driver_name: str):
    """Manually re-enable a disabled TTS driver."""
    if driver_name not in TTS_DRIVERS:
        raise HTTPException(status_code=404, detail=f"TTS driver '{driver_name}' not found.")

    fallback_manager.manually_enable_driver(driver_name)
    return {"message": f"Driver '{driver_name}' enabled successfully"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8003)
