"""
Pytest configuration and shared fixtures.

Default runs skip slow tests; use --run-slow to include them.
"""

import base64
import io

import pytest
from PIL import Image


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (large image re-encoding). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def _encode(mode: str, fmt: str, size: tuple[int, int] = (8, 8)) -> bytes:
    color = (10, 20, 30, 128) if mode == "RGBA" else (10, 20, 30)
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return _encode("RGBA", "PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _encode("RGB", "JPEG")


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def jpeg_data_url(jpeg_bytes: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")


@pytest.fixture
def encode_image():
    """Factory fixture: encode_image(mode, fmt, size) -> bytes."""
    return _encode
