"""
SlideScript Backend - Unified Application Entry Point
Mounts all services under a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.exports import app as exports_module
from services.pptx_notes import app as pptx_notes_module
from services.script_generation import app as script_generation_module
from services.tts_service import app as tts_module
from shared.utils import config, setup_logging

logger = setup_logging("slidescript-backend")

# (url prefix, service app, tag, route name prefix)
SERVICE_MOUNTS = [
    ("/api/v1/pptx", pptx_notes_module.app, "Presentations", "pptx"),
    ("/api/v1/scripts", script_generation_module.app, "Scripts", "scripts"),
    ("/api/v1/tts", tts_module.app, "Text-to-Speech", "tts"),
    ("/api/v1/exports", exports_module.app, "Exports", "exports"),
]

app = FastAPI(
    title="SlideScript Backend API",
    description="""
    Unified API for narrating PowerPoint presentations: slide extraction,
    script generation, speech synthesis, speaker-notes embedding and exports.

    All endpoints are documented below. Service routes are organized by tag.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Presentations",
            "description": "Slide extraction and speaker-notes embedding - mounted at /api/v1/pptx",
        },
        {
            "name": "Scripts",
            "description": "Narration script generation and transcript import - mounted at /api/v1/scripts",
        },
        {
            "name": "Text-to-Speech",
            "description": "TTS service - mounted at /api/v1/tts",
        },
        {
            "name": "Exports",
            "description": "Script downloads as txt, xlsx or docx - mounted at /api/v1/exports",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes to exclude (internal FastAPI docs routes)
EXCLUDED_PATHS = {"/openapi.json", "/docs", "/docs/oauth2-redirect", "/redoc"}

for prefix, service_app, tag, name_prefix in SERVICE_MOUNTS:
    for route in service_app.routes:
        if not (hasattr(route, "path") and hasattr(route, "endpoint")):
            continue
        # Skip internal documentation routes
        if route.path in EXCLUDED_PATHS:
            continue
        route_kwargs = {
            "path": f"{prefix}{route.path}",
            "endpoint": route.endpoint,
            "methods": route.methods,
            "tags": [tag],
        }
        if hasattr(route, "name"):
            route_kwargs["name"] = f"{name_prefix}_{route.name}"
        if hasattr(route, "response_model"):
            route_kwargs["response_model"] = route.response_model
        app.add_api_route(**route_kwargs)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "SlideScript Backend API",
        "version": "1.0.0",
        "services": {
            name_prefix: {
                "base_url": prefix,
                "health": f"{prefix}/health",
            }
            for prefix, _, _, name_prefix in SERVICE_MOUNTS
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "services": {
            "api_gateway": "operational",
            **{name_prefix: "operational" for _, _, _, name_prefix in SERVICE_MOUNTS},
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting SlideScript Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
