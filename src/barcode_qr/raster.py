"""PNG and JPEG output through Pillow."""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .geometry import Layout, Rect
from .options import RenderOptions

logger = logging.getLogger(__name__)


def render_image(layout: Layout, logo: Optional[bytes] = None) -> Image.Image:
    image = Image.new("RGB", (layout.width, layout.height), layout.background)
    draw = ImageDraw.Draw(image)
    radius = max(0.0, min(layout.corner_radius, layout.block_size / 2.0))

    for rect in layout.rects:
        box = (rect.x, rect.y, rect.right - 1, rect.bottom - 1)
        if radius <= 0:
            draw.rectangle(box, fill=layout.foreground)
        else:
            draw.rounded_rectangle(box, radius=radius, fill=layout.foreground)

    if layout.text is not None:
        font = ImageFont.load_default(size=layout.text.size)
        text_width = draw.textlength(layout.text.text, font=font)
        draw.text(
            (layout.text.center_x - text_width / 2, layout.text.top),
            layout.text.text,
            fill=layout.foreground,
            font=font,
        )

    if layout.logo is not None and logo:
        image = add_logo_to_image(image, logo, layout.logo, layout.background)
    return image


def add_logo_to_image(
    image: Image.Image, logo_bytes: bytes, region: Rect, background: tuple
) -> Image.Image:
    """Knock out ``region`` in the background colour and paste the logo centred in it."""
    try:
        icon = Image.open(io.BytesIO(logo_bytes))
        icon = icon.convert("RGBA")
    except (OSError, ValueError):
        logger.warning("Logo image could not be read; rendering without it")
        return image

    icon.thumbnail((region.width, region.height), Image.LANCZOS)
    ImageDraw.Draw(image).rectangle(
        [(region.x, region.y), (region.right - 1, region.bottom - 1)], fill=background
    )
    icon_w, icon_h = icon.size
    position = (region.x + (region.width - icon_w) // 2, region.y + (region.height - icon_h) // 2)
    image.paste(icon, position, mask=icon)
    return image


def logo_png(logo_bytes: bytes, region: Rect) -> Optional[bytes]:
    """Scale a logo to ``region`` and re-encode it as PNG for embedding in markup."""
    try:
        icon = Image.open(io.BytesIO(logo_bytes))
        icon = icon.convert("RGBA")
    except (OSError, ValueError):
        logger.warning("Logo image could not be read; rendering without it")
        return None
    icon.thumbnail((region.width, region.height), Image.LANCZOS)
    buffer = io.BytesIO()
    icon.save(buffer, format="PNG")
    return buffer.getvalue()


def to_png(layout: Layout, options: RenderOptions) -> bytes:
    buffer = io.BytesIO()
    render_image(layout, _logo_for(layout, options)).save(buffer, format="PNG")
    return buffer.getvalue()


def to_jpeg(layout: Layout, options: RenderOptions) -> bytes:
    buffer = io.BytesIO()
    render_image(layout, _logo_for(layout, options)).save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _logo_for(layout: Layout, options: RenderOptions) -> Optional[bytes]:
    return options.load_logo() if layout.logo is not None else None
