"""
Domain value objects exchanged with the generation client.

All of these are transient: built per call from caller data or from a service
response, and never mutated by the client afterwards.
"""

import base64
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from facadegen.core.data_url import build_data_url, parse_data_url
from facadegen.utils.exceptions import ValidationError

@dataclass(frozen=True)
class ImageRef:
    """An image payload paired with its mime type."""

    mime_type: str
    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not self.mime_type.startswith("image/"):
            raise ValidationError(f"Not an image mime type: {self.mime_type!r}", field="mime_type")
        if not self.data:
            raise ValidationError("Image payload is empty", field="data")

    @classmethod
    def from_data_url(cls, data_url: str, default_mime: str = "image/jpeg") -> "ImageRef":
        """
        Parse a data URL. default_mime is used when the URL does not declare an image type.

        Raises:
            ValidationError: If data_url is not a valid base64 data URL
        """
        mime, payload = parse_data_url(data_url)
        if not mime.startswith("image/"):
            mime = default_mime
        return cls(mime_type=mime, data=payload)

    @classmethod
    def from_base64(cls, encoded: str, mime_type: str) -> "ImageRef":
        """Build from base64 text as returned by the service."""
        try:
            data = base64.b64decode(encoded, validate=True)
        except ValueError as e:
            raise ValidationError(f"Invalid base64 image data: {e}", field="data") from e
        return cls(mime_type=mime_type, data=data)

    @property
    def b64(self) -> str:
        """Payload as base64 text."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return build_data_url(self.data, self.mime_type)


@dataclass(frozen=True)
class Logo:
    """A generated or uploaded image plus the prompt that describes it.

    Also used for generated patterns, where ``prompt`` holds the pattern theme.
    """

    data_url: str
    prompt: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Logo":
        """Build from a mapping with ``base64``/``data_url`` and optional ``prompt``."""
        data_url = raw.get("data_url") or raw.get("base64")
        if not data_url:
            raise ValidationError("Logo requires a data URL", field="logo")
        return cls(data_url=data_url, prompt=raw.get("prompt", "") or "")

    @property
    def image(self) -> ImageRef:
        return ImageRef.from_data_url(self.data_url, default_mime="image/png")


class TechnicalPlanItem(BaseModel):
    """One physical element of a redesign (sign, paneling, lighting, ...)."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    item: str
    material: str
    dimensions: str
    details: str


@dataclass(frozen=True)
class Sticker:
    """A decorative attachment. Pattern stickers may carry a generated pattern image."""

    type: str
    generated_pattern: Logo | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Sticker":
        data = dict(raw.get("data") or {})
        pattern = (
            raw.get("generated_pattern")
            or data.pop("generatedPattern", None)
            or data.pop("generated_pattern", None)
        )
        return cls(
            type=str(raw.get("type", "")),
            generated_pattern=Logo.from_dict(pattern) if pattern else None,
            data=data,
        )

    @property
    def is_pattern(self) -> bool:
        return self.type == "pattern" and self.generated_pattern is not None


@dataclass(frozen=True)
class BannerDetails:
    """Banner (faixa) options: optional art image and free-text notes."""

    art_file: str | None = None
    text: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "BannerDetails":
        art = raw.get("art_file") or raw.get("artFile")
        if isinstance(art, dict):
            art = art.get("base64") or art.get("data_url")
        return cls(art_file=art or None, text=raw.get("text", "") or "")


@dataclass(frozen=True)
class DetailedRequest:
    """Attachments and notes that accompany a redesign prompt."""

    logo_file: Logo | None = None
    banner: BannerDetails = field(default_factory=BannerDetails)
    stickers: tuple[Sticker, ...] = ()
    notes: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DetailedRequest":
        """
        Build from a plain mapping. Both snake_case keys (logo_file, banner,
        stickers) and the web app's camelCase keys (logoFile, bannerFaixaDetails,
        stickerDetails) are accepted.
        """
        logo = raw.get("logo_file") or raw.get("logoFile")
        banner = raw.get("banner") or raw.get("bannerFaixaDetails") or {}
        stickers = raw.get("stickers") or raw.get("stickerDetails") or []
        return cls(
            logo_file=Logo.from_dict(logo) if logo else None,
            banner=BannerDetails.from_dict(banner),
            stickers=tuple(Sticker.from_dict(s) for s in stickers),
            notes=raw.get("notes", "") or "",
        )

    def pattern_sticker(self) -> Sticker | None:
        """First pattern sticker that carries a generated pattern, if any."""
        return next((s for s in self.stickers if s.is_pattern), None)


@dataclass(frozen=True)
class RedesignResult:
    """Outcome of generate_redesign."""

    redesigned_image: str  # JPEG data URL
    final_logo: Logo | None
    technical_plan: list[TechnicalPlanItem]
