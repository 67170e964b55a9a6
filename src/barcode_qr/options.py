"""Output formats and the validated option set shared by every renderer."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import UnsupportedOutputFormat
from .qrcodegen import ErrorCorrectionLevel

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


class RenderKind(str, Enum):
    RASTER = "raster"
    VECTOR_MARKUP = "vector-markup"
    MARKUP_GRID = "markup-grid"
    PAGINATED_DOCUMENT = "paginated-document"
    CAD = "cad"


class OutputFormat(str, Enum):
    PNG = "PNG"
    JPG = "JPG"
    SVG = "SVG"
    HTML = "HTML"
    PDF = "PDF"
    DXF = "DXF"

    @property
    def kind(self) -> RenderKind:
        return _FORMAT_INFO[self][0]

    @property
    def mimetype(self) -> str:
        return _FORMAT_INFO[self][1]

    @property
    def extension(self) -> str:
        return self.value.lower()

    @property
    def is_text(self) -> bool:
        return self in (OutputFormat.SVG, OutputFormat.HTML, OutputFormat.DXF)

    @classmethod
    def parse(cls, value: Any) -> "OutputFormat":
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        if key == "JPEG":
            key = "JPG"
        try:
            return cls(key)
        except ValueError as exc:
            raise UnsupportedOutputFormat(value) from exc


_FORMAT_INFO = {
    OutputFormat.PNG: (RenderKind.RASTER, "image/png"),
    OutputFormat.JPG: (RenderKind.RASTER, "image/jpeg"),
    OutputFormat.SVG: (RenderKind.VECTOR_MARKUP, "image/svg+xml"),
    OutputFormat.HTML: (RenderKind.MARKUP_GRID, "text/html"),
    OutputFormat.PDF: (RenderKind.PAGINATED_DOCUMENT, "application/pdf"),
    OutputFormat.DXF: (RenderKind.CAD, "image/vnd.dxf"),
}


class RoundBlockSizeMode(str, Enum):
    MARGIN = "margin"
    ENLARGE = "enlarge"
    SHRINK = "shrink"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Any) -> "RoundBlockSizeMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"round_block_size_mode must be one of margin, enlarge, shrink: {value!r}") from exc


def parse_color(value: Any, name: str = "color") -> RGB:
    """Accept ``(r, g, b)``, ``"#rrggbb"`` or ``"r,g,b"``."""
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("#") and len(text) == 7:
            try:
                return (int(text[1:3], 16), int(text[3:5], 16), int(text[5:7], 16))
            except ValueError as exc:
                raise ValueError(f"{name} is not a valid hex colour: {value!r}") from exc
        value = text.split(",")
    try:
        channels = tuple(int(channel) for channel in value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be three integers between 0 and 255") from exc
    if len(channels) != 3 or not all(0 <= channel <= 255 for channel in channels):
        raise ValueError(f"{name} must be three integers between 0 and 255")
    return channels  # type: ignore[return-value]


def decode_data_url(data_url: str) -> Optional[bytes]:
    if not data_url:
        return None

    if not data_url.startswith("data:"):
        return None

    try:
        header, encoded = data_url.split(",", 1)
    except ValueError:
        return None

    if "base64" not in header:
        return None

    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None


@dataclass(frozen=True)
class RenderOptions:
    """Everything a renderer needs besides the encoded symbol.

    Linear barcodes use ``module_width``, ``height``, ``padding`` and the text
    settings; QR codes use ``size``, ``margin`` (in modules), the rounding mode
    and the logo settings. Colours apply to both.
    """

    module_width: int = 2
    height: int = 30
    padding: int = 10
    foreground: RGB = (0, 0, 0)
    background: RGB = (255, 255, 255)
    show_text: bool = True
    text_size: int = 12
    text_position: str = "bottom"
    size: int = 300
    margin: int = 10
    error_correction: ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM
    round_block_size_mode: RoundBlockSizeMode = RoundBlockSizeMode.MARGIN
    corner_radius: float = 0.0
    logo_path: Optional[str] = None
    logo_data: Optional[bytes] = None
    logo_size: int = 100
    logo_position: str = "center"

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "foreground", parse_color(self.foreground, "foreground"))
        set_(self, "background", parse_color(self.background, "background"))
        set_(self, "error_correction", ErrorCorrectionLevel.parse(self.error_correction))
        set_(self, "round_block_size_mode", RoundBlockSizeMode.parse(self.round_block_size_mode))

        for name, minimum in (
            ("module_width", 1),
            ("height", 1),
            ("padding", 0),
            ("text_size", 1),
            ("size", 1),
            ("margin", 0),
            ("logo_size", 1),
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
            if value < minimum:
                raise ValueError(f"{name} must be at least {minimum}")
        if not 0.0 <= float(self.corner_radius) <= 0.5:
            raise ValueError("corner_radius must be between 0 and 0.5")
        set_(self, "corner_radius", float(self.corner_radius))
        if self.text_position not in ("bottom", "top"):
            raise ValueError("text_position must be 'bottom' or 'top'")
        if self.logo_position != "center":
            raise ValueError("logo_position: only 'center' is supported")

    @property
    def has_logo(self) -> bool:
        return self.logo_data is not None or self.logo_path is not None

    def load_logo(self) -> Optional[bytes]:
        if self.logo_data is not None:
            return self.logo_data
        if self.logo_path is not None:
            try:
                return Path(self.logo_path).read_bytes()
            except OSError as exc:
                logger.warning("Logo file %s could not be read (%s); rendering without it", self.logo_path, exc)
        return None

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], base: Optional["RenderOptions"] = None
    ) -> "RenderOptions":
        """Build options from a loose mapping (JSON body, query string, config file).

        Both the configuration keys (``foreground_color``, ``text``) and the
        camelCase request keys (``moduleWidth``, ``errorCorrection``) are
        understood; unknown keys are ignored.
        """
        changes: Dict[str, Any] = {}
        for key, raw_value in payload.items():
            name = _KEY_ALIASES.get(key)
            if name is None or raw_value is None or raw_value == "":
                continue
            changes[name] = _FIELD_PARSERS[name](raw_value, name)
        return replace(base or cls(), **changes)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if item.name == "logo_data":
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            result[item.name] = value
        return result


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer") from exc


def _parse_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number") from exc


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean")


def _parse_str(value: Any, name: str) -> str:
    return str(value).strip().lower()


def _parse_path(value: Any, name: str) -> str:
    return str(value)


def _parse_logo_data(value: Any, name: str) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    decoded = decode_data_url(str(value))
    if decoded is None:
        raise ValueError(f"{name} must be a base64 data URL")
    return decoded


_FIELD_PARSERS = {
    "module_width": _parse_int,
    "height": _parse_int,
    "padding": _parse_int,
    "foreground": parse_color,
    "background": parse_color,
    "show_text": _parse_bool,
    "text_size": _parse_int,
    "text_position": _parse_str,
    "size": _parse_int,
    "margin": _parse_int,
    "error_correction": lambda value, name: ErrorCorrectionLevel.parse(value),
    "round_block_size_mode": lambda value, name: RoundBlockSizeMode.parse(value),
    "corner_radius": _parse_float,
    "logo_path": _parse_path,
    "logo_data": _parse_logo_data,
    "logo_size": _parse_int,
    "logo_position": _parse_str,
}

_KEY_ALIASES = {name: name for name in _FIELD_PARSERS}
_KEY_ALIASES.update(
    {
        "width": "module_width",
        "moduleWidth": "module_width",
        "foreground_color": "foreground",
        "foregroundColor": "foreground",
        "background_color": "background",
        "backgroundColor": "background",
        "text": "show_text",
        "showText": "show_text",
        "textSize": "text_size",
        "textPosition": "text_position",
        "error_correction_level": "error_correction",
        "errorCorrection": "error_correction",
        "errorCorrectionLevel": "error_correction",
        "roundBlockSizeMode": "round_block_size_mode",
        "cornerRadius": "corner_radius",
        "logoPath": "logo_path",
        "logoData": "logo_data",
        "logoSize": "logo_size",
        "logoPosition": "logo_position",
    }
)
