"""
Generation client for facade redesigns.

GenerationClient wraps the remote multimodal service with seven independent,
stateless operations. Each issues exactly one remote call.

Two error policies apply:
- strict (generate_redesign, generate_logo, reinvent_logo, generate_pattern):
  failures surface as a GenerationError subclass;
- lenient (enhance_prompt, refine_placement_prompt, generate_pdf_cover_image):
  failures are logged and a fallback value is returned.
"""

import time
from typing import Any

from facadegen.core.config import Config
from facadegen.core.data_url import decoded_mime_type, is_png, parse_data_url
from facadegen.core.models import (
    DetailedRequest,
    ImageRef,
    Logo,
    RedesignResult,
)
from facadegen.core.plan import parse_technical_plan
from facadegen.core.prompts_loader import get_system_instruction, render_prompt
from facadegen.core.transport import ContentResponse, GeminiTransport, image_part, text_part
from facadegen.logging_config import get_logger
from facadegen.utils.exceptions import (
    APIError,
    FacadegenError,
    ImageGenerationFailedError,
    ImageProcessingError,
    IncompleteResponseError,
    NetworkError,
    PromptBlockedError,
    RequestTimeoutError,
    ValidationError,
)

logger = get_logger(__name__)

MODALITIES_IMAGE_TEXT = ["IMAGE", "TEXT"]
BLOCKING_FINISH_REASONS = frozenset({"SAFETY", "RECITATION"})
# Lower-cased fragments that identify a content-policy block in an error body
_SAFETY_MARKERS = (
    "prompt was blocked",
    "blockreason",
    "blocked due to safety",
    '"finishreason": "safety"',
)

ENHANCE_TEMPERATURE = 0.7
PLACEMENT_TEMPERATURE = 0.4


def _require_text(value: str, field: str) -> None:
    if not value or not value.strip():
        label = field.replace("_", " ").capitalize()
        raise ValidationError(f"{label} cannot be empty", field=field)


def _mentions_safety_block(error: APIError) -> bool:
    text = f"{error} {error.response}".lower()
    return any(marker in text for marker in _SAFETY_MARKERS)


def _check_not_blocked(response: ContentResponse) -> None:
    """Raise PromptBlockedError when the service reports a content-policy rejection."""
    if response.block_reason:
        logger.error("AI prompt blocked due to safety settings. Reason: %s", response.block_reason)
        raise PromptBlockedError("AI prompt blocked.", reason=response.block_reason)
    finish = (response.finish_reason or "").upper()
    if finish in BLOCKING_FINISH_REASONS:
        logger.error("AI prompt blocked, finish reason: %s", finish)
        raise PromptBlockedError("AI prompt blocked.", reason=finish)


class GenerationClient:
    """Client for redesign, logo, pattern and prompt operations.

    The credential is given explicitly; the client keeps no state between calls
    and may be shared across threads.
    """

    def __init__(
        self,
        api_key: str,
        config: Config | None = None,
        transport: GeminiTransport | None = None,
    ) -> None:
        self.config = config or Config()
        self.transport = transport or GeminiTransport(api_key, self.config)

    @classmethod
    def from_config(cls, config: Config) -> "GenerationClient":
        """Build a client using config.gemini_api_key as the credential."""
        return cls(config.gemini_api_key, config=config)

    # -- redesign -----------------------------------------------------------

    def build_redesign_parts(
        self,
        original_image: str,
        prompt: str,
        request_data: DetailedRequest,
    ) -> list[dict[str, Any]]:
        """
        Assemble the ordered request parts for generate_redesign.

        Order: facade image, logo, banner art, first pattern sticker, instructions.

        Raises:
            ValidationError: If any supplied image is not a valid data URL
        """
        parts = [image_part(ImageRef.from_data_url(original_image, "image/jpeg"))]

        if request_data.logo_file is not None:
            parts.append(image_part(request_data.logo_file.image))

        art = request_data.banner.art_file
        if art:
            _mime, payload = parse_data_url(art)
            art_mime = "image/png" if is_png(payload) else "image/jpeg"
            parts.append(image_part(ImageRef(mime_type=art_mime, data=payload)))

        sticker = request_data.pattern_sticker()
        if sticker is not None and sticker.generated_pattern is not None:
            parts.append(
                image_part(ImageRef.from_data_url(sticker.generated_pattern.data_url, "image/jpeg"))
            )

        parts.append(text_part(render_prompt("redesign", prompt=prompt)))
        return parts

    def generate_redesign(
        self,
        original_image: str,
        prompt: str,
        request_data: DetailedRequest | dict[str, Any] | None = None,
    ) -> RedesignResult:
        """
        Generate a redesigned facade image and its technical plan.

        Args:
            original_image: Facade photo as a data URL
            prompt: Redesign instructions
            request_data: Optional attachments (logo, banner art, pattern stickers)

        Returns:
            RedesignResult with a JPEG data URL, the caller's logo, and the plan

        Raises:
            ValidationError: If an input image is not a valid data URL
            PromptBlockedError: If the service rejected the request on safety grounds
            IncompleteResponseError: If the image or plan part is missing
            InvalidPlanFormatError: If the plan text is not a JSON array of plan items
            ImageGenerationFailedError: If the remote call itself failed
        """
        if request_data is None:
            request_data = DetailedRequest()
        elif isinstance(request_data, dict):
            request_data = DetailedRequest.from_dict(request_data)

        parts = self.build_redesign_parts(original_image, prompt, request_data)
        model = self.config.multimodal_model
        logger.info("Generating redesign model=%s image_parts=%d", model, len(parts) - 1)

        start_time = time.time()
        try:
            response = self.transport.generate_content(
                model, parts, response_modalities=MODALITIES_IMAGE_TEXT
            )
        except APIError as e:
            logger.error("Error generating redesign: %s", e)
            if _mentions_safety_block(e):
                raise PromptBlockedError("AI prompt blocked.", reason="SAFETY") from e
            raise ImageGenerationFailedError("AI image generation failed.", original_error=e) from e
        except (NetworkError, RequestTimeoutError) as e:
            logger.error("Error generating redesign: %s", e)
            raise ImageGenerationFailedError("AI image generation failed.", original_error=e) from e

        _check_not_blocked(response)

        if len(response.parts) < 2:
            logger.error(
                "Redesign response had %d part(s), expected image and plan", len(response.parts)
            )
            raise IncompleteResponseError(
                "AI response did not contain both an image and a technical plan."
            )
        image = response.first_image()
        plan_text = response.first_text()
        if image is None or not plan_text:
            logger.error(
                "Redesign response missing part image=%s text=%s",
                image is not None,
                bool(plan_text),
            )
            raise IncompleteResponseError(
                "AI response is missing the image or the technical plan part."
            )

        plan = parse_technical_plan(plan_text)
        logger.info(
            "Generated redesign in %.1fs plan_items=%d", time.time() - start_time, len(plan)
        )
        return RedesignResult(
            redesigned_image=ImageRef(mime_type="image/jpeg", data=image.data).to_data_url(),
            final_logo=request_data.logo_file,
            technical_plan=plan,
        )

    # -- text refinement (lenient) -------------------------------------------

    def enhance_prompt(self, original_prompt: str) -> str:
        """
        Rewrite a redesign request as a detailed, technical English prompt.

        Returns the original prompt on any failure or empty result; never raises.
        """
        if not original_prompt or not original_prompt.strip():
            return original_prompt
        try:
            response = self.transport.generate_content(
                self.config.text_model,
                [text_part(render_prompt("enhance", prompt=original_prompt))],
                system_instruction=get_system_instruction("enhance"),
                temperature=ENHANCE_TEMPERATURE,
            )
            enhanced = response.text.strip()
        except Exception as e:
            logger.warning("Error enhancing prompt, using original: %s", e, exc_info=True)
            return original_prompt
        return enhanced or original_prompt

    def refine_placement_prompt(self, original_image: str, placement: str) -> str:
        """
        Turn a rough placement phrase into a precise location grounded in the image.

        Returns the original placement on any failure or empty result; never raises.
        """
        if not placement or not placement.strip():
            return placement
        try:
            parts = [
                image_part(ImageRef.from_data_url(original_image, "image/jpeg")),
                text_part(render_prompt("placement", placement=placement)),
            ]
            response = self.transport.generate_content(
                self.config.text_model, parts, temperature=PLACEMENT_TEMPERATURE
            )
            refined = response.text.strip()
        except Exception as e:
            logger.warning("Error refining placement prompt, using original: %s", e, exc_info=True)
            return placement
        return refined or placement

    # -- image generation (strict) -----------------------------------------

    def _generate_single_image(
        self, prompt: str, mime_type: str, aspect_ratio: str, what: str
    ) -> ImageRef:
        """Request one image from the image model; raise ImageGenerationFailedError on any miss."""
        try:
            images = self.transport.generate_images(
                self.config.image_model,
                prompt,
                number_of_images=1,
                output_mime_type=mime_type,
                aspect_ratio=aspect_ratio,
            )
        except FacadegenError as e:
            logger.error("Error generating %s: %s", what, e)
            raise ImageGenerationFailedError("AI image generation failed.", original_error=e) from e
        if not images:
            logger.error("AI did not return a valid %s image.", what)
            raise ImageGenerationFailedError(f"AI did not return a valid {what} image.")
        return _ensure_decodable(images[0], what)

    def generate_logo(self, prompt: str) -> Logo:
        """
        Generate a minimalist, transparent-background logo.

        Raises:
            ValidationError: If prompt is empty
            ImageGenerationFailedError: If no usable image was returned
        """
        _require_text(prompt, "prompt")
        image = self._generate_single_image(
            render_prompt("logo", prompt=prompt), "image/png", "1:1", "logo"
        )
        return Logo(data_url=image.to_data_url(), prompt=prompt)

    def reinvent_logo(self, original_image: str, company_name: str) -> Logo:
        """
        Modernize the logo found in a storefront photo.

        Raises:
            ValidationError: If the image is not a data URL or company_name is empty
            ImageGenerationFailedError: If no image part was returned
        """
        _require_text(company_name, "company_name")
        parts = [
            image_part(ImageRef.from_data_url(original_image, "image/jpeg")),
            text_part(render_prompt("reinvent_logo", company_name=company_name)),
        ]
        try:
            response = self.transport.generate_content(
                self.config.multimodal_model, parts, response_modalities=MODALITIES_IMAGE_TEXT
            )
        except FacadegenError as e:
            logger.error("Error reinventing logo: %s", e)
            raise ImageGenerationFailedError("AI image generation failed.", original_error=e) from e

        image = response.first_image()
        if image is None:
            logger.error(
                "AI did not return a valid image for the reinvented logo. finish_reason=%s",
                response.finish_reason,
            )
            raise ImageGenerationFailedError(
                "AI did not return a valid image for the reinvented logo."
            )
        image = _ensure_decodable(image, "reinvented logo")
        return Logo(data_url=image.to_data_url(), prompt=f"Reinvented logo for {company_name}")

    def generate_pattern(self, prompt: str) -> Logo:
        """
        Generate a seamless, tileable decorative pattern.

        Raises:
            ValidationError: If prompt is empty
            ImageGenerationFailedError: If no usable image was returned
        """
        _require_text(prompt, "prompt")
        image = self._generate_single_image(
            render_prompt("pattern", prompt=prompt), "image/jpeg", "1:1", "pattern"
        )
        return Logo(data_url=image.to_data_url(), prompt=f"Pattern: {prompt}")

    # -- cover (lenient) ----------------------------------------------------

    def generate_pdf_cover_image(
        self,
        logo: Logo | None,
        company_name: str,
        prompt: str,
        original_image: str,
    ) -> str:
        """
        Generate an abstract 16:9 cover image for the presentation PDF.

        logo and company_name are accepted for the presentation flow but do not
        shape the request: the cover must not contain text or logos.

        Returns original_image unchanged on any failure; never raises.
        """
        try:
            image = self._generate_single_image(
                render_prompt("pdf_cover", prompt=prompt), "image/jpeg", "16:9", "PDF cover"
            )
        except Exception as e:
            logger.warning(
                "Error generating PDF cover image for %r, using original image: %s",
                company_name,
                e,
            )
            return original_image
        return image.to_data_url()


def _ensure_decodable(image: ImageRef, what: str) -> ImageRef:
    """Return image tagged with the mime type its bytes actually decode as."""
    try:
        actual = decoded_mime_type(image.data)
    except ImageProcessingError as e:
        logger.error("Returned %s image is not decodable: %s", what, e)
        raise ImageGenerationFailedError(
            f"AI returned an unreadable {what} image.", original_error=e
        ) from e
    if actual != image.mime_type:
        logger.debug("Retagging %s image %s -> %s", what, image.mime_type, actual)
        return ImageRef(mime_type=actual, data=image.data)
    return image
