"""
facadegen - client for AI facade and sign redesign generation

Builds multimodal requests (facade photo, logo, banner art, patterns and
instructions), sends them to Gemini / Imagen, and parses the responses into
redesigned images, logos, patterns and technical plans.

Library usage:
- Create a client with an explicit credential: GenerationClient(api_key, config=Config()).
  Config.from_env() reads GEMINI_API_KEY and FACADEGEN_* variables (and a .env file).
- Strict operations raise a GenerationError subclass (PromptBlockedError,
  IncompleteResponseError, InvalidPlanFormatError, ImageGenerationFailedError).
  enhance_prompt, refine_placement_prompt and generate_pdf_cover_image never raise.
- Logging: set_verbosity(0|1|2) or configure_logging(verbose_level, quiet).
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("facadegen")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from facadegen.core.client import GenerationClient
from facadegen.core.config import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_MULTIMODAL_MODEL,
    DEFAULT_TEXT_MODEL,
    Config,
)
from facadegen.core.data_url import build_data_url, image_file_to_data_url, parse_data_url
from facadegen.core.models import (
    BannerDetails,
    DetailedRequest,
    ImageRef,
    Logo,
    RedesignResult,
    Sticker,
    TechnicalPlanItem,
)
from facadegen.core.plan import parse_technical_plan
from facadegen.logging_config import configure_logging, set_verbosity
from facadegen.utils.exceptions import (
    APIError,
    ConfigurationError,
    FacadegenError,
    GenerationError,
    ImageGenerationFailedError,
    ImageProcessingError,
    IncompleteResponseError,
    InvalidPlanFormatError,
    NetworkError,
    PromptBlockedError,
    RequestTimeoutError,
    ValidationError,
)

__all__ = [
    "APIError",
    "BannerDetails",
    "Config",
    "ConfigurationError",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_MULTIMODAL_MODEL",
    "DEFAULT_TEXT_MODEL",
    "DetailedRequest",
    "FacadegenError",
    "GenerationClient",
    "GenerationError",
    "ImageGenerationFailedError",
    "ImageProcessingError",
    "ImageRef",
    "IncompleteResponseError",
    "InvalidPlanFormatError",
    "Logo",
    "NetworkError",
    "PromptBlockedError",
    "RedesignResult",
    "RequestTimeoutError",
    "Sticker",
    "TechnicalPlanItem",
    "ValidationError",
    "build_data_url",
    "configure_logging",
    "image_file_to_data_url",
    "parse_data_url",
    "parse_technical_plan",
    "set_verbosity",
]
