import asyncio

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from services.exports.service import DOWNLOAD_SUFFIXES, MEDIA_TYPES, render_export
from shared.enums import ExportFormat
from shared.models import ExportRequest
from shared.response_models import APIResponse
from shared.utils import config, content_disposition, derive_download_name, setup_logging

logger = setup_logging("export-service")

app = FastAPI(
    title="Script Export Service",
    description="Download slide scripts as text, Excel or Word documents",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    return APIResponse(message="Script Export Service is healthy")


@app.get("/formats")
async def get_formats():
    return {"formats": [export_format.value for export_format in ExportFormat]}


@app.post("/{export_format}")
async def export_scripts(export_format: ExportFormat, request: ExportRequest):
    """Render the scripts of all slides in the requested format."""
    try:
        content = await asyncio.to_thread(render_export, export_format, request.slides)
        suffix = DOWNLOAD_SUFFIXES[export_format]
        download_name = derive_download_name(request.file_name, suffix, f"presentation{suffix}")
        logger.info(f"Exported {len(request.slides)} scripts as {download_name}")
        return Response(
            content=content,
            media_type=MEDIA_TYPES[export_format],
            headers={"Content-Disposition": content_disposition(download_name)},
        )
    except Exception as e:
        logger.error(f"Export error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Export failed: {e!s}") from e


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8004)
