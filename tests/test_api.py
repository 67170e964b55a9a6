import logging
from io import BytesIO

import pytest
from PIL import Image

from barcode_qr import api
from barcode_qr.errors import InvalidPayload, PayloadTooLarge, UnsupportedOutputFormat, UnsupportedSymbology
from barcode_qr.options import OutputFormat, RenderOptions


class TestBarcodeOperations:
    def test_barcode_defaults_to_png(self) -> None:
        artifact = api.barcode("C128", "ABC-123")
        assert artifact.format is OutputFormat.PNG
        assert artifact.data.startswith(b"\x89PNG")

    def test_options_may_be_a_mapping(self) -> None:
        artifact = api.barcode("C39", "A", "PNG", {"moduleWidth": 4, "padding": 0, "showText": False, "height": 10})
        image = Image.open(BytesIO(artifact.data))
        symbol = api.encode("C39", "A")
        assert image.size == (symbol.module_count * 4, 10)

    def test_to_raster(self) -> None:
        assert api.to_raster("EAN13", "400638133393").startswith(b"\x89PNG")
        assert api.to_raster("EAN13", "400638133393", fmt="JPG")[:2] == b"\xff\xd8"

    def test_to_raster_refuses_vector_formats(self) -> None:
        with pytest.raises(ValueError, match="not a raster format"):
            api.to_raster("C39", "A", fmt="SVG")

    def test_to_vector_markup(self) -> None:
        assert api.to_vector_markup("UPCA", "03600029145").startswith("<?xml")

    def test_to_markup_grid(self) -> None:
        assert api.to_markup_grid("C39", "A").startswith("<div")

    def test_to_paginated_document(self) -> None:
        assert api.to_paginated_document("I25", "1234").startswith(b"%PDF")

    def test_errors_surface_as_value_errors(self) -> None:
        with pytest.raises(UnsupportedSymbology):
            api.barcode("NOPE", "1")
        with pytest.raises(InvalidPayload):
            api.barcode("EAN8", "abc")
        with pytest.raises(UnsupportedOutputFormat):
            api.barcode("C39", "A", "TIFF")


class TestQrOperations:
    def test_qr_code_formats(self) -> None:
        for fmt in OutputFormat:
            artifact = api.qr_code("https://example.com", fmt)
            assert artifact.format is fmt
            assert artifact.data

    def test_error_correction_from_options(self) -> None:
        low = api.qr_code("x" * 40, "SVG", {"errorCorrection": "L"})
        high = api.qr_code("x" * 40, "SVG", {"errorCorrection": "H"})
        assert low.text.count("<rect") - 1 == api.synthesize("x" * 40, "low").dark_count
        assert high.text.count("<rect") - 1 == api.synthesize("x" * 40, "high").dark_count

    def test_synthesize_and_render(self) -> None:
        data = api.synthesize_and_render("hello", "PNG", RenderOptions(size=100, margin=0, round_block_size_mode="shrink"))
        image = Image.open(BytesIO(data))
        assert image.size == (84, 84)

    def test_payload_too_large(self) -> None:
        with pytest.raises(PayloadTooLarge):
            api.qr_code(b"a" * 2954, "SVG", {"errorCorrection": "low"})

    @pytest.mark.parametrize(
        "payload,expected",
        [("hello", True), ("", False), (None, False), (b"a" * 2953, True), (b"a" * 2954, False), ("é" * 1477, False)],
    )
    def test_is_valid_qr_payload(self, payload, expected: bool) -> None:
        assert api.is_valid_qr_payload(payload) is expected


class TestSave:
    def test_save_creates_parent_directories(self, tmp_path) -> None:
        target = tmp_path / "nested" / "code.svg"
        assert api.save_barcode("C39", "SAVE", target, "SVG") is True
        assert target.read_text(encoding="utf-8").startswith("<?xml")

    def test_save_qr_code(self, tmp_path) -> None:
        target = tmp_path / "qr.png"
        assert api.save_qr_code("saved", target) is True
        assert target.read_bytes().startswith(b"\x89PNG")

    def test_save_failure_returns_false(self, tmp_path, caplog: pytest.LogCaptureFixture) -> None:
        artifact = api.barcode("C39", "A", "SVG")
        with caplog.at_level(logging.ERROR, logger="barcode_qr"):
            assert api.save(artifact, tmp_path) is False
        assert "Could not write SVG" in caplog.text

    def test_save_below_a_file_returns_false(self, tmp_path) -> None:
        blocker = tmp_path / "file.txt"
        blocker.write_text("x")
        assert api.save(api.barcode("C39", "A", "SVG"), blocker / "code.svg") is False

    def test_save_qr_code_with_missing_logo_file(self, tmp_path) -> None:
        target = tmp_path / "qr.png"
        options = RenderOptions(logo_path=str(tmp_path / "nope.png"))
        assert api.save_qr_code("hello", target, "PNG", options) is True
        assert target.read_bytes().startswith(b"\x89PNG")


class TestCatalog:
    def test_list_supported_symbologies(self) -> None:
        catalog = api.list_supported_symbologies()
        assert len(catalog) == 30
        assert catalog["C128"] == "Code 128"
        assert list(catalog)[0] == "C39"

    def test_is_valid_symbology(self) -> None:
        assert api.is_valid_symbology("code128")
        assert not api.is_valid_symbology("DATAMATRIX")

    def test_error_correction_levels_in_catalog_order(self) -> None:
        assert api.list_error_correction_levels() == {
            "low": "Low (7%)",
            "medium": "Medium (15%)",
            "high": "High (25%)",
            "quartile": "Quartile (30%)",
        }

    def test_round_block_size_modes(self) -> None:
        assert api.list_round_block_size_modes() == {"margin": "Margin", "enlarge": "Enlarge", "shrink": "Shrink"}

    def test_output_formats(self) -> None:
        formats = api.list_output_formats()
        assert list(formats) == ["PNG", "JPG", "SVG", "HTML", "PDF", "DXF"]
        assert formats["SVG"] == "image/svg+xml"

    def test_img_tag(self) -> None:
        tag = api.img_tag(api.barcode("C39", "A"), alt='Code "A"')
        assert tag.startswith('<img src="data:image/png;base64,')
        assert tag.endswith('alt="Code &quot;A&quot;">')
