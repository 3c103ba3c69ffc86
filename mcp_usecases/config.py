import os
from dotenv import load_dotenv
import json
from pathlib import Path

# Load environment variables from .env file in project root
_project_root = Path(__file__).resolve().parent.parent
load_dotenv(_project_root / ".env")


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


class Config:
    """Configuration management for the MCP use-case servers."""

    # Travel planner providers
    AVIATIONSTACK_API_KEY = os.getenv("AVIATIONSTACK_API_KEY")
    RAPIDAPI_KEY = os.getenv("RAPIDAPI_KEY")
    GOOGLE_ACCESS_TOKEN = os.getenv("GOOGLE_ACCESS_TOKEN")  # OAuth token for Google Calendar

    # Restaurant reservation provider
    YELP_API_KEY = os.getenv("YELP_API_KEY")

    # Meeting summary providers
    JIRA_BASE_URL = os.getenv("JIRA_BASE_URL")
    JIRA_EMAIL = os.getenv("JIRA_EMAIL")
    JIRA_API_TOKEN = os.getenv("JIRA_API_TOKEN")

    # Hosted text-generation model used by the summarizer
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "cloudflare")
    CLOUDFLARE_ACCOUNT_ID = os.getenv("CLOUDFLARE_ACCOUNT_ID")
    CLOUDFLARE_API_TOKEN = os.getenv("CLOUDFLARE_API_TOKEN")
    CLOUDFLARE_AI_MODEL = os.getenv("CLOUDFLARE_AI_MODEL", "@cf/meta/llama-2-7b-chat-int8")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")

    # Langfuse tracing for model calls
    LANGFUSE_SECRET_KEY = os.getenv("LANGFUSE_SECRET_KEY")
    LANGFUSE_PUBLIC_KEY = os.getenv("LANGFUSE_PUBLIC_KEY")
    LANGFUSE_HOST = os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")

    # Runtime
    HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS", 15.0)
    CACHE_TTL_SECONDS = _float_env("CACHE_TTL_SECONDS", 300.0)
    BOOKING_DELAY_SECONDS = _float_env("BOOKING_DELAY_SECONDS", 2.0)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def llm_api_key(cls):
        """Return the credential for the configured LLM provider, if any."""
        provider = (cls.LLM_PROVIDER or "").lower()
        if provider == "cloudflare":
            if cls.CLOUDFLARE_ACCOUNT_ID and cls.CLOUDFLARE_API_TOKEN:
                return cls.CLOUDFLARE_API_TOKEN
            return None
        if provider == "openai":
            return cls.OPENAI_API_KEY
        if provider == "anthropic":
            return cls.ANTHROPIC_API_KEY
        return None

    @classmethod
    def validate(cls, use_case: str) -> bool:
        """Check for keys a use case cannot run without, and warn about degraded ones."""
        import logging
        logger = logging.getLogger(__name__)

        missing = []
        degraded = []

        if use_case == "restaurant-reservation":
            if not cls.YELP_API_KEY:
                missing.append("YELP_API_KEY")
        elif use_case == "travel-planner":
            if not cls.AVIATIONSTACK_API_KEY:
                degraded.append("AVIATIONSTACK_API_KEY (mock flights)")
            if not cls.RAPIDAPI_KEY:
                degraded.append("RAPIDAPI_KEY (mock hotels)")
            if not cls.GOOGLE_ACCESS_TOKEN:
                degraded.append("GOOGLE_ACCESS_TOKEN (mock calendar)")
        elif use_case == "meeting-summary":
            if not cls.llm_api_key():
                degraded.append("LLM credentials (extractive summaries only)")
            if not (cls.JIRA_BASE_URL and cls.JIRA_EMAIL and cls.JIRA_API_TOKEN):
                degraded.append("JIRA_BASE_URL/JIRA_EMAIL/JIRA_API_TOKEN (Jira tools disabled)")

        if degraded:
            logger.warning(f"Missing optional keys: {', '.join(degraded)}")

        if missing:
            logger.error(f"Missing keys: {', '.join(missing)}")
            logger.error("Please create a .env file based on .env.example")
            return False
        return True


def setup_logging(level="INFO"):
    """Configure structured JSON logging."""
    import logging
    import sys

    # stdout carries tool output, so logs go to stderr
    handler = logging.StreamHandler(sys.stderr)

    # Use a custom formatter for JSON output
    class JsonFormatter(logging.Formatter):
        def format(self, record):
            log_record = {
                "timestamp": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "message": record.getMessage(),
                "module": record.module,
                "function": record.funcName,
            }
            if hasattr(record, "tool"):
                log_record["tool"] = record.tool
            if record.exc_info:
                log_record["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_record)

    handler.setFormatter(JsonFormatter())

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplication
    if root.handlers:
        for h in list(root.handlers):
            root.removeHandler(h)
    root.addHandler(handler)

    # Reduce noise from HTTP clients
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
