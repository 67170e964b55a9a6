"""Host settings: default options, output location and cache policy.

Settings are read once by the web app or CLI and handed to the encoders as
``RenderOptions``; the encoders never read them.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from . import symbologies
from .options import OutputFormat, RenderOptions

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BARCODE_QR_CONFIG"


@dataclass(frozen=True)
class Settings:
    barcode_options: RenderOptions = field(default_factory=RenderOptions)
    qr_options: RenderOptions = field(default_factory=RenderOptions)
    default_symbology: str = "C128"
    default_format: OutputFormat = OutputFormat.PNG
    storage_path: Path = Path("barcodes")
    url_prefix: str = "/barcodes"
    cache_enabled: bool = True
    cache_ttl: int = 3600
    cache_prefix: str = "barcode_qrcode_"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a mapping shaped like the JSON configuration file."""
        barcode = _section(data, "barcode")
        qrcode = _section(data, "qrcode")
        output = _section(data, "output")
        cache = _section(data, "cache")

        default_symbology = str(barcode.get("default_type", "C128"))
        # Resolve aliases and reject unknown ids early.
        default_symbology = symbologies.lookup(default_symbology).id.value

        try:
            cache_ttl = int(cache.get("ttl", 3600))
        except (TypeError, ValueError) as exc:
            raise ValueError("cache.ttl must be an integer") from exc
        if cache_ttl <= 0:
            raise ValueError("cache.ttl must be positive")

        return cls(
            barcode_options=RenderOptions.from_payload(_section(barcode, "default_options")),
            qr_options=RenderOptions.from_payload(_section(qrcode, "default_options")),
            default_symbology=default_symbology,
            default_format=OutputFormat.parse(output.get("default_format", "PNG")),
            storage_path=Path(output.get("storage_path", "barcodes")),
            url_prefix=str(output.get("url_prefix", "/barcodes")),
            cache_enabled=bool(cache.get("enabled", True)),
            cache_ttl=cache_ttl,
            cache_prefix=str(cache.get("prefix", "barcode_qrcode_")),
        )


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"configuration section '{name}' must be an object")
    return value


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from ``path``, else from ``$BARCODE_QR_CONFIG``, else defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return Settings()
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{config_path}: invalid JSON ({exc})") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"{config_path}: configuration must be a JSON object")
    settings = Settings.from_mapping(data)
    logger.info("Loaded settings from %s", config_path)
    return settings
