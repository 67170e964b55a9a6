import base64
import logging

import pytest

from barcode_qr.errors import UnsupportedOutputFormat
from barcode_qr.options import (
    OutputFormat,
    RenderKind,
    RenderOptions,
    RoundBlockSizeMode,
    decode_data_url,
    parse_color,
)
from barcode_qr.qrcodegen import ErrorCorrectionLevel


class TestOutputFormat:
    @pytest.mark.parametrize(
        "value,expected",
        [("png", OutputFormat.PNG), ("JPEG", OutputFormat.JPG), (" svg ", OutputFormat.SVG), (OutputFormat.DXF, OutputFormat.DXF)],
    )
    def test_parse(self, value: str, expected: OutputFormat) -> None:
        assert OutputFormat.parse(value) is expected

    def test_parse_unknown(self) -> None:
        with pytest.raises(UnsupportedOutputFormat):
            OutputFormat.parse("gif")

    def test_kinds_and_mimetypes(self) -> None:
        assert OutputFormat.PNG.kind is RenderKind.RASTER
        assert OutputFormat.HTML.kind is RenderKind.MARKUP_GRID
        assert OutputFormat.PDF.mimetype == "application/pdf"
        assert OutputFormat.JPG.extension == "jpg"
        assert [f for f in OutputFormat if f.is_text] == [OutputFormat.SVG, OutputFormat.HTML, OutputFormat.DXF]


class TestParseColor:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("#00ff7f", (0, 255, 127)),
            ("10, 20, 30", (10, 20, 30)),
            ((1, 2, 3), (1, 2, 3)),
            ([255, 255, 255], (255, 255, 255)),
        ],
    )
    def test_accepted_forms(self, value, expected) -> None:
        assert parse_color(value) == expected

    @pytest.mark.parametrize("value", ["#12345", "#gg0000", "1,2", (0, 0, 256), "red", None])
    def test_rejected_forms(self, value) -> None:
        with pytest.raises(ValueError):
            parse_color(value, "foreground")


class TestDecodeDataUrl:
    def test_base64_data_url(self) -> None:
        url = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
        assert decode_data_url(url) == b"\x89PNG"

    @pytest.mark.parametrize("value", ["", "http://example.com/logo.png", "data:text/plain,hello", "data:image/png;base64,***"])
    def test_invalid(self, value: str) -> None:
        assert decode_data_url(value) is None


class TestRoundBlockSizeMode:
    @pytest.mark.parametrize(
        "value,expected",
        [("margin", RoundBlockSizeMode.MARGIN), (" Shrink ", RoundBlockSizeMode.SHRINK), (RoundBlockSizeMode.ENLARGE, RoundBlockSizeMode.ENLARGE)],
    )
    def test_parse(self, value, expected: RoundBlockSizeMode) -> None:
        assert RoundBlockSizeMode.parse(value) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="round_block_size_mode"):
            RoundBlockSizeMode.parse("stretch")


class TestRenderOptions:
    def test_defaults(self) -> None:
        options = RenderOptions()
        assert options.module_width == 2
        assert options.size == 300
        assert options.error_correction is ErrorCorrectionLevel.MEDIUM
        assert options.round_block_size_mode is RoundBlockSizeMode.MARGIN
        assert not options.has_logo

    def test_coerces_strings(self) -> None:
        options = RenderOptions(foreground="#112233", error_correction="Q", round_block_size_mode="Enlarge")
        assert options.foreground == (17, 34, 51)
        assert options.error_correction is ErrorCorrectionLevel.QUARTILE
        assert options.round_block_size_mode is RoundBlockSizeMode.ENLARGE

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("module_width", 0, "module_width"),
            ("height", -1, "height"),
            ("size", "big", "size"),
            ("margin", True, "margin"),
            ("corner_radius", 0.6, "corner_radius"),
            ("text_position", "left", "text_position"),
            ("logo_position", "top-left", "logo_position"),
            ("round_block_size_mode", "stretch", "round_block_size_mode"),
            ("error_correction", "ultra", "error correction"),
        ],
    )
    def test_invalid_values_name_the_field(self, field: str, value, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            RenderOptions(**{field: value})

    def test_from_payload_understands_request_keys(self) -> None:
        options = RenderOptions.from_payload(
            {
                "moduleWidth": "3",
                "showText": "false",
                "foregroundColor": "#ff0000",
                "errorCorrection": "H",
                "roundBlockSizeMode": "shrink",
                "cornerRadius": "0.25",
                "unknown": "ignored",
                "size": "",
            }
        )
        assert options.module_width == 3
        assert options.show_text is False
        assert options.foreground == (255, 0, 0)
        assert options.error_correction is ErrorCorrectionLevel.HIGH
        assert options.round_block_size_mode is RoundBlockSizeMode.SHRINK
        assert options.corner_radius == 0.25
        assert options.size == 300

    def test_from_payload_understands_config_keys(self) -> None:
        options = RenderOptions.from_payload(
            {"width": 4, "height": 50, "text": False, "foreground_color": [0, 0, 128], "error_correction_level": "low"}
        )
        assert options.module_width == 4
        assert options.height == 50
        assert options.show_text is False
        assert options.foreground == (0, 0, 128)
        assert options.error_correction is ErrorCorrectionLevel.LOW

    def test_from_payload_layers_over_base(self) -> None:
        base = RenderOptions(height=80, padding=0)
        options = RenderOptions.from_payload({"padding": 5}, base=base)
        assert options.height == 80
        assert options.padding == 5
        assert base.padding == 0

    def test_from_payload_keeps_enum_members_of_base(self) -> None:
        base = RenderOptions(round_block_size_mode=RoundBlockSizeMode.SHRINK, error_correction=ErrorCorrectionLevel.HIGH)
        options = RenderOptions.from_payload({}, base=base)
        assert options.round_block_size_mode is RoundBlockSizeMode.SHRINK
        assert options.error_correction is ErrorCorrectionLevel.HIGH
        assert RenderOptions.from_payload({}, base=RenderOptions()) == RenderOptions()

    def test_from_payload_accepts_enum_values(self) -> None:
        options = RenderOptions.from_payload({"roundBlockSizeMode": RoundBlockSizeMode.ENLARGE})
        assert options.round_block_size_mode is RoundBlockSizeMode.ENLARGE

    @pytest.mark.parametrize("payload", [{"moduleWidth": "wide"}, {"showText": "maybe"}, {"logoData": "not-a-data-url"}])
    def test_from_payload_rejects_bad_values(self, payload) -> None:
        with pytest.raises(ValueError):
            RenderOptions.from_payload(payload)

    def test_logo_from_data_url(self, logo_bytes: bytes) -> None:
        url = "data:image/png;base64," + base64.b64encode(logo_bytes).decode()
        options = RenderOptions.from_payload({"logoData": url})
        assert options.has_logo
        assert options.load_logo() == logo_bytes

    def test_logo_from_path(self, tmp_path, logo_bytes: bytes) -> None:
        path = tmp_path / "logo.png"
        path.write_bytes(logo_bytes)
        options = RenderOptions(logo_path=str(path))
        assert options.load_logo() == logo_bytes

    def test_missing_logo_file_is_skipped(self, tmp_path, caplog: pytest.LogCaptureFixture) -> None:
        options = RenderOptions(logo_path=str(tmp_path / "missing.png"))
        with caplog.at_level(logging.WARNING, logger="barcode_qr"):
            assert options.load_logo() is None
        assert "could not be read" in caplog.text

    def test_to_dict_is_json_friendly(self, logo_bytes: bytes) -> None:
        data = RenderOptions(logo_data=logo_bytes).to_dict()
        assert "logo_data" not in data
        assert data["foreground"] == [0, 0, 0]
        assert data["error_correction"] == "medium"
        assert data["round_block_size_mode"] == "margin"

    def test_options_are_immutable(self) -> None:
        with pytest.raises(AttributeError):
            RenderOptions().size = 10  # type: ignore[misc]
