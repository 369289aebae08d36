"""
Remote scrape worker.

GET /?url=<job url>&language=<zh|en> renders the page in a fresh headless
browser, runs the content parser on the rendered HTML and returns
ParsedJobData JSON.
"""
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from app.config import Settings
from crawler.browser_crawler import BrowserCrawler
from pipeline.ai_fallback import LLMClient
from pipeline.extractor import JobContentParser

logger = logging.getLogger(__name__)


def create_app(
    parser: Optional[JobContentParser] = None,
    browser: Optional[BrowserCrawler] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """
    Build the worker application.

    Args:
        parser: Content parser (built from settings when omitted)
        browser: Browser crawler (built from settings when omitted)
        settings: Process settings (read from the environment when omitted)
    """
    settings = settings or Settings.from_env()
    parser = parser or JobContentParser(
        LLMClient.from_settings(settings),
        default_language=settings.default_language
    )
    browser = browser or BrowserCrawler(timeout_ms=settings.browser_nav_timeout_ms)
    default_language = settings.default_language

    worker = FastAPI(title="Job Scrape Worker", version="0.1.0")

    @worker.get("/")
    async def scrape(
        url: Optional[str] = Query(None, description="Job posting URL"),
        language: Optional[str] = Query(None, description="Output language hint (zh or en)")
    ):
        if not url:
            return PlainTextResponse("Missing url parameter", status_code=400)

        language = language or default_language
        logger.info(f"[worker] Scraping {url} (language={language})")

        try:
            html = await browser.fetch_html(url)
            data = await parser.parse_job_content(html, url=url, language=language)
        except Exception as e:
            logger.error(f"[worker] Scraping failed for {url}: {e}")
            return PlainTextResponse(f"Scraping failed: {e}", status_code=500)

        return JSONResponse(content=data.to_dict())

    @worker.get("/healthz")
    async def healthz():
        return {"status": "ok", "llm": bool(parser.llm_client and parser.llm_client.enabled)}

    return worker


def build_default_app() -> FastAPI:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    return create_app()
