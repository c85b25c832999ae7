"""Unit tests for the domain value objects."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from facadegen.core.models import (
    BannerDetails,
    DetailedRequest,
    ImageRef,
    Logo,
    Sticker,
    TechnicalPlanItem,
)
from facadegen.utils.exceptions import ValidationError


@pytest.mark.unit
class TestImageRef:
    def test_from_data_url_keeps_declared_mime(self, png_data_url, png_bytes):
        ref = ImageRef.from_data_url(png_data_url)
        assert ref.mime_type == "image/png"
        assert ref.data == png_bytes

    def test_from_data_url_uses_default_when_undeclared(self):
        ref = ImageRef.from_data_url("data:;base64,YWJj", default_mime="image/png")
        assert ref.mime_type == "image/png"

    def test_non_image_mime_replaced_by_default(self):
        ref = ImageRef.from_data_url("data:text/plain;base64,YWJj")
        assert ref.mime_type == "image/jpeg"

    def test_rejects_empty_payload(self):
        with pytest.raises(ValidationError):
            ImageRef(mime_type="image/png", data=b"")

    def test_rejects_non_image_mime(self):
        with pytest.raises(ValidationError):
            ImageRef(mime_type="text/plain", data=b"abc")

    def test_from_base64_and_back(self):
        ref = ImageRef.from_base64("YWJj", "image/jpeg")
        assert ref.data == b"abc"
        assert ref.b64 == "YWJj"
        assert ref.to_data_url() == "data:image/jpeg;base64,YWJj"

    def test_from_base64_invalid(self):
        with pytest.raises(ValidationError):
            ImageRef.from_base64("@@@", "image/png")

    def test_repr_hides_bytes(self):
        assert "abc" not in repr(ImageRef(mime_type="image/png", data=b"abc"))


@pytest.mark.unit
class TestLogo:
    def test_from_dict_accepts_base64_key(self, png_data_url):
        logo = Logo.from_dict({"base64": png_data_url, "prompt": "bakery"})
        assert logo.data_url == png_data_url
        assert logo.prompt == "bakery"

    def test_from_dict_requires_image(self):
        with pytest.raises(ValidationError):
            Logo.from_dict({"prompt": "x"})

    def test_image_defaults_to_png(self):
        assert Logo(data_url="data:;base64,YWJj").image.mime_type == "image/png"


@pytest.mark.unit
class TestTechnicalPlanItem:
    def test_valid(self):
        item = TechnicalPlanItem(item="Sign", material="ACM", dimensions="4m x 1m", details="Lit")
        assert item.model_dump() == {
            "item": "Sign",
            "material": "ACM",
            "dimensions": "4m x 1m",
            "details": "Lit",
        }

    def test_extra_keys_ignored(self):
        item = TechnicalPlanItem.model_validate(
            {"item": "a", "material": "b", "dimensions": "c", "details": "d", "cost": 10}
        )
        assert "cost" not in item.model_dump()

    def test_non_string_rejected(self):
        with pytest.raises(PydanticValidationError):
            TechnicalPlanItem.model_validate(
                {"item": "a", "material": "b", "dimensions": 4, "details": "d"}
            )

    def test_missing_field_rejected(self):
        with pytest.raises(PydanticValidationError):
            TechnicalPlanItem.model_validate({"item": "a", "material": "b", "dimensions": "c"})


@pytest.mark.unit
class TestDetailedRequest:
    def test_empty(self):
        request = DetailedRequest.from_dict({})
        assert request.logo_file is None
        assert request.banner.art_file is None
        assert request.stickers == ()
        assert request.pattern_sticker() is None

    def test_camel_case_keys(self, png_data_url, jpeg_data_url):
        request = DetailedRequest.from_dict(
            {
                "logoFile": {"base64": png_data_url, "prompt": "logo"},
                "bannerFaixaDetails": {"artFile": {"base64": jpeg_data_url}, "text": "Sale"},
                "stickerDetails": [
                    {"type": "text", "data": {"text": "Open"}},
                    {"type": "pattern", "data": {"generatedPattern": {"base64": jpeg_data_url}}},
                ],
            }
        )
        assert request.logo_file == Logo(data_url=png_data_url, prompt="logo")
        assert request.banner == BannerDetails(art_file=jpeg_data_url, text="Sale")
        assert len(request.stickers) == 2
        sticker = request.pattern_sticker()
        assert sticker is not None
        assert sticker.generated_pattern.data_url == jpeg_data_url
        assert "generatedPattern" not in sticker.data

    def test_banner_art_as_string(self, jpeg_data_url):
        banner = BannerDetails.from_dict({"art_file": jpeg_data_url})
        assert banner.art_file == jpeg_data_url

    def test_pattern_sticker_requires_generated_image(self):
        request = DetailedRequest(stickers=(Sticker(type="pattern"),))
        assert request.pattern_sticker() is None

    def test_first_pattern_sticker_wins(self):
        first = Sticker(type="pattern", generated_pattern=Logo(data_url="data:;base64,AA=="))
        second = Sticker(type="pattern", generated_pattern=Logo(data_url="data:;base64,AQ=="))
        request = DetailedRequest(stickers=(Sticker(type="text"), first, second))
        assert request.pattern_sticker() is first
