from io import BytesIO

import pytest
from PIL import Image

from barcode_qr.options import RenderOptions


@pytest.fixture
def logo_bytes() -> bytes:
    """A small opaque red PNG."""
    buffer = BytesIO()
    Image.new("RGBA", (40, 40), (200, 0, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def qr_options() -> RenderOptions:
    return RenderOptions(size=210, margin=4)


@pytest.fixture
def barcode_options() -> RenderOptions:
    return RenderOptions(module_width=2, height=30, padding=10)
