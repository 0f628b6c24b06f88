from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from spritegen import __version__
from spritegen.core import configure_logging
from spritegen.generators import GENERATORS

from .routes import router
from .config import api_config
from .security import get_api_key

# Configure logging
logging.basicConfig(
    level=getattr(logging, str(api_config.get("server.log_level", "INFO")).upper(), logging.INFO),
    format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    configure_logging()
    logger.info(f"[api] Starting Spritegen API with {len(GENERATORS)} methods")
    if get_api_key() is None:
        logger.warning(
            f"[api] {api_config.get('security.api_key_env')} is not set; every /api request will be rejected"
        )

    yield

    logger.info("[api] Shutting down Spritegen API")


# Create FastAPI app
app = FastAPI(
    title="Spritegen API",
    description="Procedural pixel-art generators behind a single dispatch endpoint",
    version=__version__,
    lifespan=lifespan
)


# Error bodies built as dicts (auth failures) are returned flat: {"error", "message"}
@app.exception_handler(StarletteHTTPException)
async def flat_http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail,
                            headers=getattr(exc, "headers", None))
    return await http_exception_handler(request, exc)


# Include routes
app.include_router(router, prefix="/api")


# Add health endpoint at root level (no authentication required)
@app.get("/healthz")
async def health_check():
    """Health check endpoint (no authentication required)"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
