import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from spritegen.generators import GENERATORS, capabilities, generate
from spritegen.generators.tilesheet import GridDivisorError
from spritegen.raster.output import encode_png_async

from .models import Capabilities, GenerateRequest
from .security import require_api_key

logger = logging.getLogger(__name__)

router = APIRouter()

# metadata key -> response header
RESULT_HEADERS = {
    "emotion": "X-Emotion",
    "accessory": "X-Accessory",
    "theme": "X-Theme",
    "character": "X-Character",
}


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def missing_fields(method: str, args: Dict[str, Any]):
    fields = GENERATORS[method].fields
    return [name for name, spec in fields.items() if spec.get("required") and name not in args]


@router.get("", response_model=Capabilities)
async def get_capabilities(client: str = Depends(require_api_key)):
    """List the registered generation methods"""
    return Capabilities(
        status="operational",
        last_check_at=datetime.now(timezone.utc).isoformat(),
        methods=capabilities(),
    )


@router.post("")
async def run_generation(request: Request, client: str = Depends(require_api_key)):
    """Run one generator and return the PNG"""
    available = list(GENERATORS)
    try:
        raw = await request.json()
        body = GenerateRequest.model_validate(raw if raw is not None else {})
    except json.JSONDecodeError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON in request body",
                              message=str(e))
    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body",
                              message=str(e))

    if not body.method:
        return error_response(status.HTTP_400_BAD_REQUEST, "Missing required field: method",
                              available_methods=available)

    if body.method not in GENERATORS:
        return error_response(status.HTTP_400_BAD_REQUEST,
                              f"Unknown generation method: {body.method}",
                              available_methods=available)

    missing = missing_fields(body.method, body.args)
    if missing:
        return error_response(status.HTTP_400_BAD_REQUEST,
                              f"Missing required arguments: {', '.join(missing)}",
                              method=body.method, missing_fields=missing)

    try:
        result = await asyncio.to_thread(generate, body.method, body.args, encode=False)
        buffer = await encode_png_async(result.pixels)
    except (GridDivisorError, ValidationError) as e:
        logger.warning(f"[api] {body.method} rejected arguments: {e}")
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid arguments",
                              method=body.method, message=str(e))
    except Exception as e:
        logger.error(f"[api] {body.method} failed: {e}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR,
                              "Failed to generate image", message=str(e))

    if not buffer:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR,
                              "Generator did not return an image buffer", method=body.method)

    headers = {
        "Cache-Control": "no-cache",
        "X-Image-Width": str(result.width),
        "X-Image-Height": str(result.height),
    }
    if result.seed is not None:
        headers["X-Seed"] = str(result.seed)
    for key, header in RESULT_HEADERS.items():
        value = result.metadata.get(key)
        if value:
            headers[header] = str(value)

    logger.info(f"[api] {body.method} -> {result.width}x{result.height} seed={result.seed}")
    return Response(content=buffer, media_type="image/png", headers=headers)
