"""Functional boundary used by the web app, the CLI and template helpers."""

from __future__ import annotations

import logging
from html import escape
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from . import symbologies
from .linear import EncodedSymbol, encode
from .options import OutputFormat, RenderOptions, RoundBlockSizeMode
from .qrcodegen import MAX_PAYLOAD_BYTES, ErrorCorrectionLevel, QRMatrix, synthesize
from .render import Artifact, render

logger = logging.getLogger(__name__)

OptionsLike = Union[RenderOptions, Mapping[str, Any], None]

__all__ = [
    "Artifact",
    "EncodedSymbol",
    "QRMatrix",
    "barcode",
    "encode",
    "img_tag",
    "is_valid_qr_payload",
    "is_valid_symbology",
    "list_error_correction_levels",
    "list_output_formats",
    "list_round_block_size_modes",
    "list_supported_symbologies",
    "qr_code",
    "save",
    "save_barcode",
    "save_qr_code",
    "synthesize",
    "synthesize_and_render",
    "to_markup_grid",
    "to_paginated_document",
    "to_raster",
    "to_vector_markup",
]


def _options(options: OptionsLike) -> RenderOptions:
    if options is None:
        return RenderOptions()
    if isinstance(options, RenderOptions):
        return options
    return RenderOptions.from_payload(options)


def barcode(
    symbology: str,
    payload: str,
    fmt: Union[str, OutputFormat] = OutputFormat.PNG,
    options: OptionsLike = None,
) -> Artifact:
    output_format = OutputFormat.parse(fmt)
    return render(encode(symbology, payload), output_format, _options(options))


def to_raster(symbology: str, payload: str, options: OptionsLike = None, fmt: str = "PNG") -> bytes:
    output_format = OutputFormat.parse(fmt)
    if output_format not in (OutputFormat.PNG, OutputFormat.JPG):
        raise ValueError(f"{output_format.value} is not a raster format")
    return barcode(symbology, payload, output_format, options).data


def to_vector_markup(symbology: str, payload: str, options: OptionsLike = None) -> str:
    return barcode(symbology, payload, OutputFormat.SVG, options).text


def to_markup_grid(symbology: str, payload: str, options: OptionsLike = None) -> str:
    return barcode(symbology, payload, OutputFormat.HTML, options).text


def to_paginated_document(symbology: str, payload: str, options: OptionsLike = None) -> bytes:
    return barcode(symbology, payload, OutputFormat.PDF, options).data


def qr_code(
    payload: Union[str, bytes],
    fmt: Union[str, OutputFormat] = OutputFormat.PNG,
    options: OptionsLike = None,
) -> Artifact:
    output_format = OutputFormat.parse(fmt)
    render_options = _options(options)
    matrix = synthesize(payload, render_options.error_correction)
    return render(matrix, output_format, render_options)


def synthesize_and_render(
    payload: Union[str, bytes],
    fmt: Union[str, OutputFormat] = OutputFormat.PNG,
    options: OptionsLike = None,
) -> bytes:
    return qr_code(payload, fmt, options).data


def save(artifact: Artifact, path: Union[str, Path]) -> bool:
    """Write ``artifact`` to ``path``; I/O problems are logged and reported as False."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(artifact.data)
    except OSError:
        logger.exception("Could not write %s to %s", artifact.format.value, target)
        return False
    logger.info("Saved %s (%d bytes) to %s", artifact.format.value, len(artifact.data), target)
    return True


def save_barcode(
    symbology: str,
    payload: str,
    path: Union[str, Path],
    fmt: Union[str, OutputFormat] = OutputFormat.PNG,
    options: OptionsLike = None,
) -> bool:
    return save(barcode(symbology, payload, fmt, options), path)


def save_qr_code(
    payload: Union[str, bytes],
    path: Union[str, Path],
    fmt: Union[str, OutputFormat] = OutputFormat.PNG,
    options: OptionsLike = None,
) -> bool:
    return save(qr_code(payload, fmt, options), path)


def list_supported_symbologies() -> Dict[str, str]:
    return {symbology.value: name for symbology, name in symbologies.list_supported()}


def is_valid_symbology(symbology: Any) -> bool:
    return symbologies.is_supported(symbology)


def is_valid_qr_payload(payload: Union[str, bytes, None]) -> bool:
    if not payload:
        return False
    data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    return len(data) <= MAX_PAYLOAD_BYTES


def list_error_correction_levels() -> Dict[str, str]:
    order = (
        ErrorCorrectionLevel.LOW,
        ErrorCorrectionLevel.MEDIUM,
        ErrorCorrectionLevel.HIGH,
        ErrorCorrectionLevel.QUARTILE,
    )
    return {level.value: level.label for level in order}


def list_round_block_size_modes() -> Dict[str, str]:
    return {mode.value: mode.label for mode in RoundBlockSizeMode}


def list_output_formats() -> Dict[str, str]:
    return {fmt.value: fmt.mimetype for fmt in OutputFormat}


def img_tag(artifact: Artifact, alt: str = "") -> str:
    """``<img>`` snippet with the artifact inlined as a data URI."""
    return f'<img src="{artifact.to_data_uri()}" alt="{escape(alt)}">'
