from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from services.script_generation.errors import ScriptGenerationError
from services.script_generation.service import ScriptGenerationService
from services.script_generation.transcript import (
    assign_scripts,
    compose_full_script,
    count_words,
    decode_transcript,
    split_transcript,
)
from shared.models import (
    ScriptGenerationRequest,
    ScriptGenerationResponse,
    TranscriptParseResponse,
    parse_slides_json,
)
from shared.response_models import APIResponse, ErrorResponse
from shared.utils import config, setup_logging

logger = setup_logging("script-generation-service")

app = FastAPI(
    title="Script Generation Service",
    description="Narration script generation and transcript import for presentation slides",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

script_service = ScriptGenerationService()


@app.get("/health")
async def health_check():
    return APIResponse(message="Script Generation Service is healthy")


@app.get("/drivers")
async def get_drivers():
    return {"drivers": script_service.available_drivers, "default": script_service.default_driver}


@app.post("/generate", response_model=ScriptGenerationResponse)
async def generate_scripts(request: ScriptGenerationRequest):
    """Generate one narration script per slide; a single slide regenerates just that script."""
    try:
        return await script_service.generate(request)
    except HTTPException:
        raise
    except ScriptGenerationError as e:
        logger.error(f"Script generation failed ({e.provider}): {e.message}")
        raise HTTPException(
            status_code=502,
            detail=ErrorResponse(
                message=e.message,
                error_code="script_generation_failed",
                provider=e.provider,
                quota_exceeded=e.quota_exceeded,
                suggestion=e.suggestion,
            ).model_dump(),
        ) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Script generation error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Script generation failed: {e!s}") from e


@app.post("/parse-transcript", response_model=TranscriptParseResponse)
async def parse_transcript(
    file: UploadFile = File(...),
    slides: str = Form(..., description="JSON array of the extracted slides"),
):
    """Split an uploaded .txt transcript across the given slides."""
    try:
        if not (file.filename or "").lower().endswith(".txt"):
            raise HTTPException(status_code=400, detail="Only .txt transcripts are supported")
        try:
            slide_list = parse_slides_json(slides)
            text = decode_transcript(await file.read())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if not slide_list:
            raise HTTPException(status_code=400, detail="No slides provided")
        if not text.strip():
            raise HTTPException(status_code=400, detail="Transcript is empty")

        ordered = sorted(slide_list, key=lambda slide: slide.slide_number)
        sections = split_transcript(text, len(ordered))
        updated = assign_scripts(ordered, sections)
        logger.info(f"Assigned transcript of {count_words(text)} words to {len(updated)} slides")
        return TranscriptParseResponse(
            slides=updated,
            full_script=compose_full_script(updated),
            word_count=count_words(text),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Transcript parsing error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Transcript parsing failed: {e!s}") from e


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8002)
