"""Flask application serving barcodes and QR codes over HTTP."""

from __future__ import annotations

import io
import logging
import re
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, jsonify, request, send_file

from . import api
from .cache import RenderCache
from .config import Settings, load_settings
from .options import OutputFormat, RenderOptions
from .payloads import build_wifi_payload
from .render import Artifact

logger = logging.getLogger(__name__)

# Server-side files must never be reachable from a request.
_PRIVATE_KEYS = ("logo_path", "logoPath")


def _request_payload() -> Dict[str, Any]:
    if request.method == "GET":
        payload: Any = {key: value for key, value in request.args.items()}
    else:
        payload = request.get_json(silent=True)
        if payload is None:
            payload = {key: value for key, value in request.form.items()}
    if not isinstance(payload, dict):
        payload = {}
    return {key: value for key, value in payload.items() if key not in _PRIVATE_KEYS}


def _parse_flag(payload: Dict[str, Any], key: str) -> bool:
    value = payload.get(key, False)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _download_name(prefix: str, data: str, fmt: OutputFormat) -> str:
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", data[:20]).strip("_") or "code"
    return f"{prefix}_{stem}.{fmt.extension}"


def _send(artifact: Artifact, ttl: int, download_name: Optional[str]) -> Response:
    buffer = io.BytesIO(artifact.data)
    buffer.seek(0)
    response = send_file(
        buffer,
        mimetype=artifact.mimetype,
        as_attachment=download_name is not None,
        download_name=download_name,
    )
    response.headers["Cache-Control"] = f"public, max-age={ttl}"
    return response


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_settings()
    cache = RenderCache(ttl=settings.cache_ttl, prefix=settings.cache_prefix) if settings.cache_enabled else None

    app = Flask(__name__)
    app.config["BARCODE_QR_SETTINGS"] = settings
    app.extensions["barcode_qr_cache"] = cache

    def _render(kind: str, target: str, data: str, fmt: OutputFormat, options: RenderOptions, factory) -> Artifact:
        if cache is None:
            return factory()
        key = cache.fingerprint(kind, target, data, fmt, options)
        return cache.get_or_create(key, factory)

    @app.errorhandler(ValueError)
    def invalid_request(exc: ValueError) -> Tuple[Response, int]:
        logger.info("Rejected %s %s: %s", request.method, request.path, exc)
        return jsonify({"message": str(exc)}), 400

    @app.get("/")
    def index() -> Response:
        return jsonify(
            {
                "symbologies": api.list_supported_symbologies(),
                "errorCorrectionLevels": api.list_error_correction_levels(),
                "roundBlockSizeModes": api.list_round_block_size_modes(),
                "formats": api.list_output_formats(),
                "defaults": {
                    "type": settings.default_symbology,
                    "format": settings.default_format.value,
                    "barcode": settings.barcode_options.to_dict(),
                    "qrcode": settings.qr_options.to_dict(),
                },
            }
        )

    @app.route("/api/barcode", methods=["GET", "POST"])
    def barcode():
        payload = _request_payload()
        data = str(payload.get("data") or "").strip()
        if not data:
            raise ValueError("data must not be empty")
        symbology = str(payload.get("type") or settings.default_symbology)
        fmt = OutputFormat.parse(payload.get("format") or settings.default_format)
        options = RenderOptions.from_payload(payload, base=settings.barcode_options)

        artifact = _render(
            "barcode", symbology, data, fmt, options,
            lambda: api.barcode(symbology, data, fmt, options),
        )
        logger.info("Served %s barcode as %s (%d bytes)", symbology, fmt.value, len(artifact.data))
        download_name = _download_name("barcode", data, fmt) if _parse_flag(payload, "download") else None
        return _send(artifact, settings.cache_ttl, download_name)

    @app.route("/api/qrcode", methods=["GET", "POST"])
    def qrcode():
        payload = _request_payload()
        if payload.get("ssid"):
            data = build_wifi_payload(
                str(payload["ssid"]),
                password=str(payload.get("password") or ""),
                auth=str(payload.get("auth") or "WPA"),
                hidden=_parse_flag(payload, "hidden"),
            )
        else:
            data = str(payload.get("data") or "")
            if not data.strip():
                raise ValueError("data must not be empty")
        fmt = OutputFormat.parse(payload.get("format") or settings.default_format)
        options = RenderOptions.from_payload(payload, base=settings.qr_options)

        artifact = _render(
            "qrcode", options.error_correction.value, data, fmt, options,
            lambda: api.qr_code(data, fmt, options),
        )
        logger.info("Served QR code as %s (%d bytes)", fmt.value, len(artifact.data))
        download_name = _download_name("qr", data, fmt) if _parse_flag(payload, "download") else None
        return _send(artifact, settings.cache_ttl, download_name)

    return app
