"""Linear barcode and QR code generation toolkit."""

from .api import (
    barcode,
    img_tag,
    is_valid_qr_payload,
    is_valid_symbology,
    list_error_correction_levels,
    list_output_formats,
    list_round_block_size_modes,
    list_supported_symbologies,
    qr_code,
    save,
    save_barcode,
    save_qr_code,
    synthesize_and_render,
    to_markup_grid,
    to_paginated_document,
    to_raster,
    to_vector_markup,
)
from .errors import (
    BarcodeQRError,
    InternalEncodingInvariantViolation,
    InvalidPayload,
    PayloadTooLarge,
    UnsupportedOutputFormat,
    UnsupportedSymbology,
)
from .linear import EncodedSymbol, encode
from .options import OutputFormat, RenderOptions, RoundBlockSizeMode
from .payloads import build_vcard_payload, build_wifi_payload
from .qrcodegen import ErrorCorrectionLevel, QRMatrix, synthesize
from .render import Artifact, render

__all__ = [
    "Artifact",
    "BarcodeQRError",
    "EncodedSymbol",
    "ErrorCorrectionLevel",
    "InternalEncodingInvariantViolation",
    "InvalidPayload",
    "OutputFormat",
    "PayloadTooLarge",
    "QRMatrix",
    "RenderOptions",
    "RoundBlockSizeMode",
    "UnsupportedOutputFormat",
    "UnsupportedSymbology",
    "barcode",
    "build_vcard_payload",
    "build_wifi_payload",
    "encode",
    "img_tag",
    "is_valid_qr_payload",
    "is_valid_symbology",
    "list_error_correction_levels",
    "list_output_formats",
    "list_round_block_size_modes",
    "list_supported_symbologies",
    "qr_code",
    "render",
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
