from fastapi import FastAPI, HTTPException, Request, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from typing import Optional
from contextlib import asynccontextmanager
import os
import logging
import traceback

from app.config import Capabilities, Settings, get_env_presence
from app.job_import import ImportRequest, InMemoryJobRepository, JobImportService
from app.rate_limit import limiter, RATE_LIMIT_IMPORT
from core.errors import ExtractionError, FetchError
from core.net import HTTPClient
from pipeline.ai_fallback import LLMClient
from pipeline.extractor import JobContentParser
from pipeline.resolver import JobUrlResolver
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_import_service(settings: Settings) -> JobImportService:
    """Wire the pipeline from settings."""
    llm_client = LLMClient.from_settings(settings)
    parser = JobContentParser(llm_client, default_language=settings.default_language)
    resolver = JobUrlResolver(
        parser,
        http_client=HTTPClient(),
        scraper_url=settings.scraper_url,
        allow_local_fallback=settings.scraper_local_fallback
    )
    return JobImportService(parser, resolver, repository=InMemoryJobRepository())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifecycle events."""
    settings = Settings.from_env()
    logger.info(f"[jobparse] env: JOBPARSE_ENV={settings.env}")

    if settings.scraper_url:
        logger.info(f"[jobparse] Delegating URL fetches to scrape worker: {settings.scraper_url}")
    else:
        logger.info("[jobparse] No SCRAPER_API_URL configured, fetching pages locally")

    if getattr(app.state, "import_service", None) is None:
        app.state.import_service = build_import_service(settings)

    yield


app = FastAPI(title="Job Import API", version="0.1.0", lifespan=lifespan)

# Add rate limiter state
app.state.limiter = limiter

# Rate limit exceeded handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# Error masking middleware
@app.middleware("http")
async def error_masking_middleware(request: Request, call_next):
    """Mask detailed errors in production; show full errors in dev."""
    try:
        response = await call_next(request)
        return response
    except HTTPException:
        raise
    except Exception as e:
        is_dev = os.getenv("JOBPARSE_ENV", "").lower() == "dev"

        logger.error(f"Unhandled error: {str(e)}")
        if is_dev:
            logger.error(traceback.format_exc())
            return JSONResponse(
                status_code=500,
                content={
                    "status": "error",
                    "error": str(e),
                    "traceback": traceback.format_exc()
                }
            )
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": "An internal error occurred. Please try again later."
            }
        )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "chrome-extension://*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def get_import_service(request: Request) -> JobImportService:
    service = getattr(request.app.state, "import_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Import service not initialised")
    return service


@app.get("/api/healthz")
async def healthz():
    return Capabilities.get_status()


@app.get("/api/capabilities")
async def capabilities():
    return Capabilities.get_capabilities()


@app.get("/admin/config/env")
async def env_presence():
    if os.getenv("JOBPARSE_ENV", "").lower() != "dev":
        raise HTTPException(status_code=403, detail="Only available in dev mode")
    return get_env_presence()


@app.post("/api/jobs/import")
@limiter.limit(RATE_LIMIT_IMPORT)
async def import_jobs(
    request: Request,
    body: ImportRequest,
    x_user_id: Optional[str] = Header(None)
):
    """
    Import jobs from a URL, a list of URLs, or pasted content.

    Authentication happens upstream; the caller's user id arrives in X-User-Id
    and is only needed when save_immediately is set.
    """
    service = get_import_service(request)
    try:
        return await service.import_jobs(body, user_id=x_user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/jobs/{job_id}/rescrape")
async def rescrape_job(
    job_id: str,
    request: Request,
    x_user_id: Optional[str] = Header(None)
):
    """Re-parse a stored job from its source URL."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id")

    service = get_import_service(request)
    try:
        return await service.rescrape_job(job_id, x_user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FetchError as e:
        logger.warning(f"[api/rescrape] Fetch failed for job {job_id}: {e}")
        raise HTTPException(status_code=502, detail=f"fetch failed: {e}")
    except ExtractionError as e:
        logger.warning(f"[api/rescrape] Extraction failed for job {job_id}: {e}")
        return JSONResponse(
            status_code=422,
            content={"error": f"extraction failed ({e.stage}): {e}", "parsed_data": e.partial_data}
        )
