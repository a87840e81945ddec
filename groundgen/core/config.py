"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. The generation client never reads these directly; it receives a
ClientConfig built by load_client_config().
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from groundgen.core.errors import ServiceUnavailableError

load_dotenv()

# Gemini generateContent endpoint
DEFAULT_GEMINI_MODEL: str = "gemini-2.5-flash-preview-09-2025"
DEFAULT_GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

# API timeouts (seconds)
LLM_API_TIMEOUT: float = float(os.getenv("LLM_API_TIMEOUT", "60") or 60)

# Retry schedule: attempt i waits 2**i * RETRY_BASE_DELAY + uniform(0, RETRY_MAX_JITTER)
GENERATION_MAX_ATTEMPTS: int = int(os.getenv("GENERATION_MAX_ATTEMPTS", "5") or 5)
RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", "1.0") or 1.0)
RETRY_MAX_JITTER: float = float(os.getenv("RETRY_MAX_JITTER", "1.0") or 1.0)

MISSING_KEY_MESSAGE = "Server configuration error: Gemini API key missing."


@dataclass(frozen=True)
class ClientConfig:
    """Everything the generation client needs to reach the upstream API."""

    api_key: str
    model: str = DEFAULT_GEMINI_MODEL
    base_url: str = DEFAULT_GEMINI_BASE_URL
    timeout: float = LLM_API_TIMEOUT
    max_attempts: int = GENERATION_MAX_ATTEMPTS
    base_delay: float = RETRY_BASE_DELAY
    max_jitter: float = RETRY_MAX_JITTER

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"


def load_client_config() -> ClientConfig:
    """
    Build ClientConfig from the environment at call time.
    Raises ServiceUnavailableError when GEMINI_API_KEY is not set.
    """
    api_key = os.getenv("GEMINI_API_KEY", "").strip()
    if not api_key:
        raise ServiceUnavailableError(MISSING_KEY_MESSAGE)
    model = os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL).strip() or DEFAULT_GEMINI_MODEL
    base_url = os.getenv("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL).strip() or DEFAULT_GEMINI_BASE_URL
    return ClientConfig(api_key=api_key, model=model, base_url=base_url)
