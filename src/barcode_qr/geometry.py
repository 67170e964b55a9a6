"""Pixel geometry shared by every output format.

Adapters never look at an ``EncodedSymbol`` or ``QRMatrix`` directly: they draw
the :class:`Layout` computed here, so all formats agree on block positions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .linear import EncodedSymbol
from .options import RGB, RenderOptions, RoundBlockSizeMode
from .qrcodegen import QRMatrix

logger = logging.getLogger(__name__)

# Space between the bars and the human-readable text.
TEXT_GAP = 2


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(frozen=True)
class TextBox:
    """Text centred on ``center_x`` with its top edge at ``top``."""

    text: str
    center_x: int
    top: int
    size: int


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    rects: Tuple[Rect, ...]
    foreground: RGB
    background: RGB
    block_size: int
    corner_radius: float = 0.0
    text: Optional[TextBox] = None
    logo: Optional[Rect] = None


def linear_layout(symbol: EncodedSymbol, options: RenderOptions) -> Layout:
    unit = options.module_width
    pad = options.padding
    band = options.text_size + 2 * TEXT_GAP if options.show_text and symbol.text else 0
    bars_top = pad + band if options.text_position == "top" else pad
    tracks = symbol.tracks

    rects: List[Rect] = []
    x = pad
    for element in symbol.elements:
        width = element.width * unit
        if element.is_bar:
            top = options.height * element.offset // tracks
            bottom = options.height * (element.offset + element.height) // tracks
            rects.append(Rect(x, bars_top + top, width, bottom - top))
        x += width

    canvas_width = symbol.module_count * unit + 2 * pad
    canvas_height = options.height + 2 * pad + band
    text = None
    if band:
        if options.text_position == "top":
            text_top = pad + TEXT_GAP
        else:
            text_top = pad + options.height + TEXT_GAP
        text = TextBox(symbol.text, canvas_width // 2, text_top, options.text_size)
    return Layout(
        width=canvas_width,
        height=canvas_height,
        rects=tuple(rects),
        foreground=options.foreground,
        background=options.background,
        block_size=unit,
        text=text,
    )


def block_size_for(modules: int, options: RenderOptions) -> Tuple[int, int, int]:
    """Return ``(block, canvas, offset)`` in pixels for a QR symbol of ``modules``."""
    span = modules + 2 * options.margin
    mode = options.round_block_size_mode
    if mode is RoundBlockSizeMode.ENLARGE:
        block = max(1, -(-options.size // span))
    else:
        block = max(1, options.size // span)
    if mode is RoundBlockSizeMode.MARGIN:
        canvas = max(options.size, span * block)
        offset = (canvas - modules * block) // 2
    else:
        canvas = span * block
        offset = options.margin * block
    return block, canvas, offset


def matrix_layout(matrix: QRMatrix, options: RenderOptions) -> Layout:
    block, canvas, offset = block_size_for(matrix.size, options)
    rects = tuple(
        Rect(offset + x * block, offset + y * block, block, block)
        for y, row in enumerate(matrix.modules)
        for x, dark in enumerate(row)
        if dark
    )
    logo = None
    if options.has_logo:
        side = min(options.logo_size, canvas)
        start = (canvas - side) // 2
        logo = Rect(start, start, side, side)
    logger.debug(
        "QR layout: %d modules, block %dpx, canvas %dpx (%s)",
        matrix.size, block, canvas, options.round_block_size_mode.value,
    )
    return Layout(
        width=canvas,
        height=canvas,
        rects=rects,
        foreground=options.foreground,
        background=options.background,
        block_size=block,
        corner_radius=options.corner_radius * block,
        logo=logo,
    )
