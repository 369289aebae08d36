import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    """Process configuration read from the environment."""
    env: str = "production"
    llm_api_key: Optional[str] = None
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "anthropic/claude-3-haiku"
    llm_timeout_seconds: float = 60.0
    scraper_url: Optional[str] = None
    scraper_local_fallback: bool = False
    default_language: str = "zh"
    browser_nav_timeout_ms: int = 30000

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            env=os.getenv("JOBPARSE_ENV", "production").lower(),
            llm_api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENROUTER_API_KEY"),
            llm_base_url=os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
            llm_model=os.getenv("LLM_MODEL", "anthropic/claude-3-haiku"),
            llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
            scraper_url=os.getenv("SCRAPER_API_URL") or None,
            scraper_local_fallback=_env_flag("SCRAPER_LOCAL_FALLBACK"),
            default_language=os.getenv("JOBPARSE_DEFAULT_LANGUAGE", "zh"),
            browser_nav_timeout_ms=int(os.getenv("BROWSER_NAV_TIMEOUT_MS", "30000")),
        )


class Capabilities:
    @staticmethod
    def is_ai_enabled() -> bool:
        return bool(os.getenv("LLM_API_KEY") or os.getenv("OPENROUTER_API_KEY"))

    @staticmethod
    def is_worker_enabled() -> bool:
        return bool(os.getenv("SCRAPER_API_URL"))

    @staticmethod
    def is_local_fallback_enabled() -> bool:
        return _env_flag("SCRAPER_LOCAL_FALLBACK")

    @classmethod
    def get_status(cls) -> dict:
        ai = cls.is_ai_enabled()
        worker = cls.is_worker_enabled()

        # Plugins work without any configuration; the LLM is what makes arbitrary pages parseable
        status = "green" if ai else "amber"

        return {
            "status": status,
            "components": {
                "ai": ai,
                "worker": worker,
            },
        }

    @classmethod
    def get_capabilities(cls) -> dict:
        return {
            "ai_extraction": cls.is_ai_enabled(),
            "worker_delegation": cls.is_worker_enabled(),
            "local_fallback": cls.is_local_fallback_enabled(),
        }


def get_env_presence() -> dict:
    required_vars = [
        "JOBPARSE_ENV",
        "LLM_API_KEY",
        "OPENROUTER_API_KEY",
        "LLM_BASE_URL",
        "LLM_MODEL",
        "LLM_TIMEOUT_SECONDS",
        "SCRAPER_API_URL",
        "SCRAPER_LOCAL_FALLBACK",
        "JOBPARSE_CRAWLER_UA",
        "JOBPARSE_DEFAULT_LANGUAGE",
        "RATE_LIMIT_IMPORT",
        "BROWSER_NAV_TIMEOUT_MS",
    ]

    return {var: bool(os.getenv(var)) for var in required_vars}
