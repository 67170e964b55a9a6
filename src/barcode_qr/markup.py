"""SVG (vector markup) and HTML (positioned block grid) output."""

from __future__ import annotations

import base64
from html import escape
from typing import List, Optional

from .geometry import Layout
from .options import RGB, RenderOptions
from .raster import logo_png


def _rgb(color: RGB) -> str:
    return f"rgb({color[0]},{color[1]},{color[2]})"


def _logo_data_uri(layout: Layout, options: RenderOptions) -> Optional[str]:
    if layout.logo is None:
        return None
    logo = options.load_logo()
    if not logo:
        return None
    png = logo_png(logo, layout.logo)
    if png is None:
        return None
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def to_svg(layout: Layout, options: RenderOptions) -> bytes:
    fg = _rgb(layout.foreground)
    bg = _rgb(layout.background)
    radius = min(layout.corner_radius, layout.block_size / 2.0)
    rounding = f' rx="{radius:g}" ry="{radius:g}"' if radius > 0 else ""
    lines: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{layout.width}" height="{layout.height}" '
        f'viewBox="0 0 {layout.width} {layout.height}">',
        f'<rect x="0" y="0" width="{layout.width}" height="{layout.height}" fill="{bg}"/>',
    ]
    for rect in layout.rects:
        lines.append(
            f'<rect x="{rect.x}" y="{rect.y}" width="{rect.width}" height="{rect.height}"{rounding} fill="{fg}"/>'
        )
    if layout.text is not None:
        lines.append(
            f'<text x="{layout.text.center_x}" y="{layout.text.top}" font-family="monospace" '
            f'font-size="{layout.text.size}" text-anchor="middle" dominant-baseline="hanging" '
            f'fill="{fg}">{escape(layout.text.text)}</text>'
        )
    logo_uri = _logo_data_uri(layout, options)
    if layout.logo is not None and logo_uri is not None:
        logo = layout.logo
        lines.append(
            f'<rect x="{logo.x}" y="{logo.y}" width="{logo.width}" height="{logo.height}" fill="{bg}"/>'
        )
        lines.append(
            f'<image x="{logo.x}" y="{logo.y}" width="{logo.width}" height="{logo.height}" '
            f'href="{logo_uri}"/>'
        )
    lines.append("</svg>")
    return ("\n".join(lines) + "\n").encode("utf-8")


def to_html(layout: Layout, options: RenderOptions) -> bytes:
    fg = _rgb(layout.foreground)
    bg = _rgb(layout.background)
    radius = min(layout.corner_radius, layout.block_size / 2.0)
    rounding = f"border-radius:{radius:g}px;" if radius > 0 else ""
    parts: List[str] = [
        f'<div style="position:relative;width:{layout.width}px;height:{layout.height}px;'
        f'background-color:{bg};">'
    ]
    for rect in layout.rects:
        parts.append(
            f'<div style="position:absolute;left:{rect.x}px;top:{rect.y}px;'
            f'width:{rect.width}px;height:{rect.height}px;{rounding}background-color:{fg};"></div>'
        )
    if layout.text is not None:
        parts.append(
            f'<div style="position:relative;top:{layout.text.top}px;width:100%;text-align:center;'
            f'font-family:monospace;font-size:{layout.text.size}px;line-height:{layout.text.size}px;'
            f'color:{fg};">{escape(layout.text.text)}</div>'
        )
    logo_uri = _logo_data_uri(layout, options)
    if layout.logo is not None and logo_uri is not None:
        logo = layout.logo
        parts.append(
            f'<img src="{logo_uri}" alt="" style="position:relative;display:block;left:{logo.x}px;'
            f'top:{logo.y}px;width:{logo.width}px;height:{logo.height}px;'
            f'object-fit:contain;background-color:{bg};">'
        )
    parts.append("</div>")
    return "".join(parts).encode("utf-8")
