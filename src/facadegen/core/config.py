"""
Configuration for facadegen.

Holds the service credential, endpoint, model names and request settings. A
Config is a plain value: build one explicitly or with Config.from_env() and hand
it to GenerationClient. Nothing here is shared process-wide.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from facadegen.logging_config import get_logger
from facadegen.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_API_VERSION = "v1beta"
DEFAULT_MULTIMODAL_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_REQUEST_TIMEOUT = 180


@dataclass(frozen=True)
class Config:
    """Settings for the generation service."""

    # excluded from repr so the key never lands in logs
    gemini_api_key: str = field(default="", repr=False)
    gemini_base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION

    # image + text in one response (redesign, logo reinvention)
    multimodal_model: str = DEFAULT_MULTIMODAL_MODEL
    # text only (prompt enhancement, placement refinement)
    text_model: str = DEFAULT_TEXT_MODEL
    # pure image synthesis (logo, pattern, cover)
    image_model: str = DEFAULT_IMAGE_MODEL

    request_timeout: int = DEFAULT_REQUEST_TIMEOUT  # seconds

    # Log request payloads and responses with image data truncated
    debug_api: bool = False

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Config":
        """
        Create a Config from environment variables.

        Environment variables:
            GEMINI_API_KEY: Service credential (API_KEY is accepted as a fallback)
            FACADEGEN_BASE_URL: Service base URL
            FACADEGEN_API_VERSION: Service API version segment (e.g. v1beta)
            FACADEGEN_MULTIMODAL_MODEL / FACADEGEN_TEXT_MODEL / FACADEGEN_IMAGE_MODEL
            FACADEGEN_REQUEST_TIMEOUT: Request timeout in seconds
            FACADEGEN_DEBUG_API: 1/true/yes to log truncated payloads

        Args:
            dotenv: Load a .env file from the working directory first

        Returns:
            Config populated from the environment

        Raises:
            ConfigurationError: If FACADEGEN_REQUEST_TIMEOUT is not an integer
        """
        if dotenv:
            load_dotenv()

        timeout_raw = os.getenv("FACADEGEN_REQUEST_TIMEOUT", "").strip()
        try:
            timeout = int(timeout_raw) if timeout_raw else DEFAULT_REQUEST_TIMEOUT
        except ValueError as e:
            raise ConfigurationError(
                f"FACADEGEN_REQUEST_TIMEOUT must be an integer, got {timeout_raw!r}."
            ) from e

        debug_api = os.getenv("FACADEGEN_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
            gemini_base_url=os.getenv("FACADEGEN_BASE_URL", DEFAULT_BASE_URL),
            api_version=os.getenv("FACADEGEN_API_VERSION", DEFAULT_API_VERSION),
            multimodal_model=os.getenv("FACADEGEN_MULTIMODAL_MODEL", DEFAULT_MULTIMODAL_MODEL),
            text_model=os.getenv("FACADEGEN_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            image_model=os.getenv("FACADEGEN_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            request_timeout=timeout,
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Check the configuration before making calls.

        Raises:
            ConfigurationError: If the key, base URL or a model id is empty, or the
                timeout is not positive
        """
        logger.debug("Validating config")

        if not self.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key is required. Set GEMINI_API_KEY or pass it explicitly."
            )
        if not self.gemini_base_url.strip():
            raise ConfigurationError("Service base URL cannot be empty.")
        for name in ("multimodal_model", "text_model", "image_model"):
            if not getattr(self, name).strip():
                raise ConfigurationError(f"{name} cannot be empty.")
        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}."
            )

    @property
    def api_root(self) -> str:
        """Base URL joined with the API version, without a trailing slash."""
        return f"{self.gemini_base_url.rstrip('/')}/{self.api_version.strip('/')}"
