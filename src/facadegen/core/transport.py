"""
HTTP transport for the Gemini / Imagen REST API.

This is the only module that knows the service's wire schema. It builds
``generateContent`` and ``predict`` requests, maps HTTP and network failures to
facadegen exceptions, and turns response bodies into ContentResponse / ImageRef
values. The schema is versioned through Config.api_version.
"""

import json
import time
from dataclasses import dataclass
from typing import Any

import requests

from facadegen.core.config import Config
from facadegen.core.models import ImageRef
from facadegen.logging_config import get_logger, log_prompts
from facadegen.utils.exceptions import (
    APIError,
    NetworkError,
    RequestTimeoutError,
    ValidationError,
)

logger = get_logger(__name__)

_PROMPT_LOG_MAX = 50_000
_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "message", "prompt"})


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64 strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        return f"<string, {len(obj)} chars>"
    return obj


def text_part(text: str) -> dict[str, Any]:
    """Request part carrying text."""
    return {"text": text}


def image_part(image: ImageRef) -> dict[str, Any]:
    """Request part carrying an inline image."""
    return {"inlineData": {"mimeType": image.mime_type, "data": image.b64}}


def _inline_data(raw: dict[str, Any]) -> dict[str, Any] | None:
    inline = raw.get("inlineData") or raw.get("inline_data")
    return inline if isinstance(inline, dict) else None


@dataclass(frozen=True)
class ResponsePart:
    """One part of a candidate's content: text, an image, or neither."""

    text: str | None = None
    inline_data: ImageRef | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ResponsePart":
        text = raw.get("text")
        inline = _inline_data(raw)
        image = None
        if inline and inline.get("data"):
            mime = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            image = ImageRef.from_base64(inline["data"], mime)
        return cls(text=text if isinstance(text, str) else None, inline_data=image)


@dataclass(frozen=True)
class ContentResponse:
    """Parsed ``generateContent`` response (first candidate only)."""

    parts: list[ResponsePart]
    block_reason: str | None = None
    finish_reason: str | None = None

    @classmethod
    def from_json(cls, body: dict[str, Any]) -> "ContentResponse":
        """
        Parse a response body.

        Raises:
            APIError: If an inline image payload is not valid base64
        """
        feedback = body.get("promptFeedback") or {}
        candidates = body.get("candidates") or []
        first = candidates[0] if candidates and isinstance(candidates[0], dict) else {}
        raw_parts = (first.get("content") or {}).get("parts") or []
        try:
            parts = [ResponsePart.from_dict(p) for p in raw_parts if isinstance(p, dict)]
        except ValidationError as e:
            raise APIError(f"Invalid inline image in response: {e}", response=str(body)) from e
        return cls(
            parts=parts,
            block_reason=feedback.get("blockReason"),
            finish_reason=first.get("finishReason"),
        )

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if p.text)

    def first_image(self) -> ImageRef | None:
        return next((p.inline_data for p in self.parts if p.inline_data), None)

    def first_text(self) -> str | None:
        return next((p.text for p in self.parts if p.text), None)


class GeminiTransport:
    """Performs requests against the generation service for one credential."""

    def __init__(self, api_key: str, config: Config | None = None) -> None:
        self._api_key = api_key
        self.config = config or Config()

    def _url(self, model: str, method: str) -> str:
        return f"{self.config.api_root}/models/{model}:{method}"

    def _raise_for_status(self, response: requests.Response, model: str) -> None:
        """Map non-200 responses to APIError."""
        status = response.status_code
        if status == 200:
            return
        if status in (401, 403):
            raise APIError(
                "Authentication failed. Please check your Gemini API key.",
                status_code=status,
                response=response.text,
            )
        if status == 404:
            raise APIError(
                f"Model not found or endpoint unavailable: {model}",
                status_code=404,
                response=response.text,
            )
        if status == 429:
            raise APIError(
                "Rate limit exceeded. Please wait before making more requests.",
                status_code=429,
                response=response.text,
            )
        if status >= 500:
            raise APIError(
                f"Generation service error: {status}",
                status_code=status,
                response=response.text,
            )
        raise APIError(
            f"API request failed with status {status}: {response.text}",
            status_code=status,
            response=response.text,
        )

    def _post(self, model: str, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST payload and return the decoded JSON body."""
        url = self._url(model, method)
        timeout = self.config.request_timeout
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        logger.debug("API request url=%s timeout=%s", url, timeout)
        if self.config.debug_api:
            logger.info(
                "API request payload (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(payload), indent=2, default=str),
            )

        start_time = time.time()
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request timed out after {timeout} seconds. "
                "The generation may be taking longer than expected."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to the generation service. "
                "Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e
        elapsed = time.time() - start_time
        logger.debug("API response status=%s time=%.2fs", response.status_code, elapsed)

        self._raise_for_status(response, model)
        try:
            body = response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to parse API response as JSON: {str(e)}",
                response=response.text,
            ) from e
        if not isinstance(body, dict):
            raise APIError("Unexpected API response shape", response=response.text)
        if self.config.debug_api:
            logger.info(
                "API response (image data truncated): %s",
                json.dumps(_truncate_image_data_for_log(body), indent=2, default=str),
            )
        return body

    def generate_content(
        self,
        model: str,
        parts: list[dict[str, Any]],
        *,
        system_instruction: str | None = None,
        temperature: float | None = None,
        response_modalities: list[str] | None = None,
    ) -> ContentResponse:
        """
        Call ``generateContent`` with one user turn made of parts.

        Raises:
            APIError, NetworkError, RequestTimeoutError
        """
        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [text_part(system_instruction)]}
        generation_config: dict[str, Any] = {}
        if temperature is not None:
            generation_config["temperature"] = temperature
        if response_modalities:
            generation_config["responseModalities"] = response_modalities
        if generation_config:
            payload["generationConfig"] = generation_config

        logger.info("generateContent model=%s parts=%d", model, len(parts))
        if log_prompts():
            for part in parts:
                if "text" in part:
                    logger.info("Prompt (used): %s", part["text"][:_PROMPT_LOG_MAX])

        body = self._post(model, "generateContent", payload)
        result = ContentResponse.from_json(body)
        logger.debug(
            "generateContent returned parts=%d finish_reason=%s block_reason=%s",
            len(result.parts),
            result.finish_reason,
            result.block_reason,
        )
        return result

    def generate_images(
        self,
        model: str,
        prompt: str,
        *,
        number_of_images: int = 1,
        output_mime_type: str = "image/png",
        aspect_ratio: str = "1:1",
    ) -> list[ImageRef]:
        """
        Call ``predict`` on an image model.

        Returns:
            Generated images; empty when the service returned none

        Raises:
            APIError, NetworkError, RequestTimeoutError
        """
        payload = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": number_of_images,
                "aspectRatio": aspect_ratio,
                "outputOptions": {"mimeType": output_mime_type},
            },
        }
        logger.info(
            "predict model=%s images=%d mime=%s aspect=%s",
            model,
            number_of_images,
            output_mime_type,
            aspect_ratio,
        )
        if log_prompts():
            logger.info("Prompt (used): %s", prompt[:_PROMPT_LOG_MAX])

        body = self._post(model, "predict", payload)
        images: list[ImageRef] = []
        for prediction in body.get("predictions") or []:
            if not isinstance(prediction, dict):
                continue
            encoded = prediction.get("bytesBase64Encoded")
            if not encoded:
                continue
            mime = prediction.get("mimeType") or output_mime_type
            try:
                images.append(ImageRef.from_base64(encoded, mime))
            except ValidationError as e:
                raise APIError(f"Invalid image in response: {e}", response=str(body)) from e
        logger.debug("predict returned images=%d", len(images))
        return images
