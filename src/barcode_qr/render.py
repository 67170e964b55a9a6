"""Rendering entry point: one intermediate, any output format."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from . import dxf, markup, pdf, raster
from .geometry import Layout, linear_layout, matrix_layout
from .linear import EncodedSymbol
from .options import OutputFormat, RenderOptions
from .qrcodegen import QRMatrix

logger = logging.getLogger(__name__)

Intermediate = Union[EncodedSymbol, QRMatrix]


@dataclass(frozen=True)
class Artifact:
    format: OutputFormat
    data: bytes

    @property
    def mimetype(self) -> str:
        return self.format.mimetype

    @property
    def extension(self) -> str:
        return self.format.extension

    @property
    def text(self) -> str:
        if not self.format.is_text:
            raise ValueError(f"{self.format.value} output is binary")
        return self.data.decode("utf-8")

    @property
    def content(self) -> Union[bytes, str]:
        """``str`` for text formats, ``bytes`` otherwise."""
        return self.text if self.format.is_text else self.data

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mimetype};base64,{encoded}"


_ADAPTERS: Dict[OutputFormat, Callable[[Layout, RenderOptions], bytes]] = {
    OutputFormat.PNG: raster.to_png,
    OutputFormat.JPG: raster.to_jpeg,
    OutputFormat.SVG: markup.to_svg,
    OutputFormat.HTML: markup.to_html,
    OutputFormat.PDF: pdf.to_pdf,
    OutputFormat.DXF: dxf.to_dxf,
}


def layout_for(intermediate: Intermediate, options: RenderOptions) -> Layout:
    if isinstance(intermediate, EncodedSymbol):
        return linear_layout(intermediate, options)
    if isinstance(intermediate, QRMatrix):
        return matrix_layout(intermediate, options)
    raise TypeError(f"Cannot render {type(intermediate).__name__}")


def render(
    intermediate: Intermediate,
    fmt: Union[str, OutputFormat] = OutputFormat.PNG,
    options: Optional[RenderOptions] = None,
) -> Artifact:
    output_format = OutputFormat.parse(fmt)
    options = options or RenderOptions()
    layout = layout_for(intermediate, options)
    data = _ADAPTERS[output_format](layout, options)
    logger.debug(
        "Rendered %s as %s: %dx%d px, %d blocks, %d bytes",
        type(intermediate).__name__, output_format.value,
        layout.width, layout.height, len(layout.rects), len(data),
    )
    return Artifact(output_format, data)
