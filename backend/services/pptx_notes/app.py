import asyncio

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from services.pptx_notes.errors import PackageSerializationError, PresentationPackageError
from services.pptx_notes.service import PresentationNotesService
from shared.models import SlideExtractionResponse, parse_slides_json
from shared.response_models import APIResponse, ErrorResponse
from shared.utils import config, content_disposition, derive_download_name, setup_logging

logger = setup_logging("pptx-notes-service")

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

app = FastAPI(
    title="Presentation Notes Service",
    description="Slide extraction and speaker-notes embedding for PowerPoint decks",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

notes_service = PresentationNotesService()


async def _read_pptx_upload(file: UploadFile) -> bytes:
    if not (file.filename or "").lower().endswith(".pptx"):
        raise HTTPException(status_code=400, detail="Only .pptx files are supported")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    return data


@app.get("/health")
async def health_check():
    return APIResponse(message="Presentation Notes Service is healthy")


@app.post("/extract-slides", response_model=SlideExtractionResponse)
async def extract_slides(file: UploadFile = File(...)):
    """Read title, body text and existing notes from every slide of an uploaded deck."""
    try:
        data = await _read_pptx_upload(file)
        slides = await asyncio.to_thread(notes_service.extract_slides, data)
        if not slides:
            raise HTTPException(status_code=400, detail="No slides found in presentation")
        return SlideExtractionResponse(slides=slides, total_slides=len(slides), file_name=file.filename)
    except HTTPException:
        raise
    except PresentationPackageError as e:
        raise HTTPException(
            status_code=400, detail=ErrorResponse(message=str(e), error_code="invalid_presentation").model_dump()
        ) from e
    except Exception as e:
        logger.error(f"Slide extraction error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Failed to process PowerPoint file: {e!s}") from e


@app.post("/add-notes")
async def add_notes(
    file: UploadFile = File(...),
    slides: str = Form(..., description="JSON array of slides with their scripts"),
    cross_reference: bool | None = Form(default=None),
):
    """Return the uploaded deck with each slide's script embedded as speaker notes."""
    try:
        data = await _read_pptx_upload(file)
        try:
            slide_list = parse_slides_json(slides)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if not slide_list:
            raise HTTPException(status_code=400, detail="No slides provided")

        output, result = await asyncio.to_thread(
            notes_service.add_notes, data, slide_list, cross_reference=cross_reference
        )
        download_name = derive_download_name(file.filename, "_with_notes.pptx", "presentation_with_notes.pptx")
        logger.info(f"Embedded notes for {len(result.notes_parts)} slides into {download_name}")
        return Response(
            content=output,
            media_type=PPTX_MEDIA_TYPE,
            headers={"Content-Disposition": content_disposition(download_name)},
        )
    except HTTPException:
        raise
    except PresentationPackageError as e:
        raise HTTPException(
            status_code=400, detail=ErrorResponse(message=str(e), error_code="invalid_presentation").model_dump()
        ) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PackageSerializationError as e:
        logger.error(f"Package serialization error: {e!s}")
        raise HTTPException(
            status_code=500, detail=ErrorResponse(message=str(e), error_code="serialization_failed").model_dump()
        ) from e
    except Exception as e:
        logger.error(f"Add notes error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Failed to add notes to PowerPoint: {e!s}") from e


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
