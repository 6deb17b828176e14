"""
HTTP API adapter for the imagestudio image front end.

Architectural role:
- Expose the browser-facing JSON endpoints.
- Enforce adapter-level input validation (prompt, upload type and size,
  credential presence).
- Delegate generation to `imagestudio.image.service`.
- Convert every failure into a structured JSON error body.

Endpoint responsibilities (each also served under the `/api` prefix):
- `GET /health`: static status and configured model identifier.
- `POST /generate-image`: JSON `{prompt}` -> text-to-image results.
- `POST /manipulate-image`: multipart `image` + `prompt` -> edited image results.
- `GET /generated/<file>`: saved images, only when disk delivery is enabled.

API request lifecycle (`POST /generate-image`):
1. Parse request JSON and require `prompt`.
2. Require a configured credential.
3. Stream the model response and normalize it into ordered results.
4. Return `{success, prompt, results}`.

Input validation behavior:
- Missing `prompt` -> HTTP 400.
- Missing `image` upload -> HTTP 400.
- Non-image or oversized upload -> HTTP 400.
- Missing credential -> HTTP 500.
The model client is never invoked when validation fails.

Error handling strategy:
- Upstream failures are classified by `imagestudio.api.errors`
  (429 / 401 / 400 / 500). Nothing is retried.
- An empty result list is reported as HTTP 500 "No content generated".

Side effects:
- Disk delivery mode writes image files under the configured output directory.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from imagestudio.api.errors import classify_error
from imagestudio.api.uploads import UploadRejected, read_upload, validate_upload
from imagestudio.image.service import NoContentGenerated, generate_image, manipulate_image
from imagestudio.image.storage import PUBLIC_URL_PREFIX, make_persister
from imagestudio.llm.client import GeminiImageClient, ModelClient
from imagestudio.llm.provider_config import ProviderConfig


logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_CREDENTIAL = "GEMINI_API_KEY not configured"


# ============================================================
# Request-scoped helpers
# ============================================================

def _config(request: Request) -> ProviderConfig:
    return request.app.state.config


def _model_client(request: Request) -> ModelClient:
    """Return the injected model client, creating the Gemini client on first use."""
    client = request.app.state.model_client
    if client is None:
        client = GeminiImageClient(_config(request))
        request.app.state.model_client = client
    return client


def _persister(config: ProviderConfig):
    if config.writes_to_disk:
        return make_persister(config.output_dir)
    return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _failure_response(exc: Exception, failure_label: str) -> JSONResponse:
    if isinstance(exc, NoContentGenerated):
        return _error(500, str(exc))
    status_code, body = classify_error(exc, failure_label)
    return JSONResponse(status_code=status_code, content=body)


# ============================================================
# Health
# ============================================================

@router.get("/health")
def health(request: Request):
    """Static status payload; never touches the model client."""
    return {
        "status": "OK",
        "message": "Google AI Image Generation Server is running",
        "model": _config(request).model_id,
    }


# ============================================================
# Text to image
# ============================================================

@router.post("/generate-image")
async def generate_image_route(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    prompt = body.get("prompt")
    if not prompt:
        return _error(400, "Prompt is required")

    config = _config(request)
    if not config.has_credential:
        return _error(500, MISSING_CREDENTIAL)

    try:
        results = await generate_image(
            prompt,
            _model_client(request),
            persist=_persister(config),
        )
    except Exception as exc:
        logger.exception("Error generating image")
        return _failure_response(exc, "Failed to generate image")

    return {
        "success": True,
        "prompt": prompt,
        "results": [result.to_dict() for result in results],
    }


# ============================================================
# Image manipulation
# ============================================================

@router.post("/manipulate-image")
async def manipulate_image_route(request: Request):
    """
    Edit an uploaded image with a text instruction.

    The form is parsed here rather than through FastAPI parameters, so a
    wrongly typed part (text where a file is expected, or a file sent as
    `prompt`) is reported as missing with a 400 instead of a 422.

    Validation order mirrors the text-to-image route: prompt, upload,
    credential. At most `max_upload_bytes + 1` bytes of the upload are read.
    """
    config = _config(request)
    try:
        form = await request.form()
    except StarletteHTTPException as exc:
        return _error(400, str(exc.detail))

    try:
        prompt = form.get("prompt")
        image = form.get("image")

        if not isinstance(prompt, str) or not prompt:
            return _error(400, "Prompt is required")

        if not isinstance(image, UploadFile):
            return _error(400, "Image file is required")

        image_name = image.filename
        try:
            data = await read_upload(image, config.max_upload_bytes)
            mime_type = validate_upload(data, image.content_type, config.max_upload_bytes)
        except UploadRejected as exc:
            return _error(400, str(exc))
    finally:
        await form.close()

    if not config.has_credential:
        return _error(500, MISSING_CREDENTIAL)

    try:
        results = await manipulate_image(
            prompt,
            data,
            mime_type,
            _model_client(request),
            persist=_persister(config),
        )
    except Exception as exc:
        logger.exception("Error manipulating image")
        return _failure_response(exc, "Failed to manipulate image")

    return {
        "success": True,
        "prompt": prompt,
        "originalImage": {
            "name": image_name,
            "size": len(data),
            "mimeType": mime_type,
        },
        "results": [result.to_dict() for result in results],
    }


# ============================================================
# Application factory
# ============================================================

def create_app(
    config: Optional[ProviderConfig] = None,
    client: Optional[ModelClient] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Explicit configuration; defaults to `ProviderConfig.from_env()`.
        client: Model client to use for every request. When omitted, a
            `GeminiImageClient` is created lazily on the first model call.
    """
    config = config or ProviderConfig.from_env()

    application = FastAPI(title="imagestudio")
    application.state.config = config
    application.state.model_client = client

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    application.include_router(router, prefix="/api", include_in_schema=False)

    if config.writes_to_disk:
        os.makedirs(config.output_dir, exist_ok=True)
        application.mount(
            PUBLIC_URL_PREFIX,
            StaticFiles(directory=config.output_dir),
            name="generated",
        )

    if not config.has_credential:
        logger.warning("GEMINI_API_KEY not found in environment variables")

    return application


app = create_app()
