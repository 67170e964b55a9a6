import json
import logging
from pathlib import Path
from typing import List

import pytest

from barcode_qr.__main__ import build_parser, main


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("barcode_qr")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as info:
        main(argv)
    return info.value.code


class TestBarcodeCommand:
    def test_writes_requested_format(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        target = tmp_path / "code.svg"
        assert run(["barcode", "C128", "HELLO", "-f", "svg", "-o", str(target)]) == 0
        assert target.read_text(encoding="utf-8").startswith("<?xml")
        assert f"Saved SVG to {target}" in capsys.readouterr().err

    def test_barcode_options(self, tmp_path: Path) -> None:
        target = tmp_path / "code.svg"
        run(["barcode", "EAN13", "400638133393", "-f", "SVG", "-o", str(target),
             "--module-width", "3", "--height", "40", "--padding", "0", "--no-text"])
        svg = target.read_text(encoding="utf-8")
        assert 'width="285" height="40"' in svg
        assert "<text" not in svg

    def test_default_output_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("BARCODE_QR_CONFIG", raising=False)
        assert run(["barcode", "C39", "ABC"]) == 0
        assert (tmp_path / "barcodes" / "barcode.png").read_bytes().startswith(b"\x89PNG")

    def test_invalid_payload_exits_with_2(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        assert run(["barcode", "EAN13", "abc", "-o", str(tmp_path / "x.png")]) == 2
        assert "error: EAN13" in capsys.readouterr().err
        assert not (tmp_path / "x.png").exists()

    def test_unknown_symbology(self, capsys: pytest.CaptureFixture) -> None:
        assert run(["barcode", "NOPE", "1"]) == 2
        assert "Unsupported barcode type: NOPE" in capsys.readouterr().err

    def test_unwritable_output_exits_with_1(self, tmp_path: Path) -> None:
        assert run(["barcode", "C39", "A", "-o", str(tmp_path)]) == 1

    def test_settings_file(self, tmp_path: Path) -> None:
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"output": {"default_format": "pdf", "storage_path": str(tmp_path / "out")}}))
        assert run(["--config", str(config), "barcode", "C39", "CFG"]) == 0
        assert (tmp_path / "out" / "barcode.pdf").read_bytes().startswith(b"%PDF")


class TestQrCommand:
    def test_text(self, tmp_path: Path) -> None:
        target = tmp_path / "qr.png"
        assert run(["qr", "--text", "https://example.com", "-o", str(target), "--ecc", "high", "--size", "200"]) == 0
        assert target.read_bytes().startswith(b"\x89PNG")

    def test_wifi(self, tmp_path: Path) -> None:
        target = tmp_path / "wifi.svg"
        assert run(["qr", "--wifi", "--ssid", "Home", "--password", "pw", "-f", "SVG", "-o", str(target)]) == 0
        assert target.exists()

    def test_wifi_requires_ssid(self) -> None:
        with pytest.raises(SystemExit, match="--ssid is required"):
            main(["qr", "--wifi", "-o", "unused.png"])

    def test_vcard(self, tmp_path: Path) -> None:
        target = tmp_path / "card.dxf"
        assert run(["qr", "--vcard", "--name", "Ada", "--email", "ada@example.com", "-f", "DXF", "-o", str(target)]) == 0
        assert "LWPOLYLINE" in target.read_text(encoding="utf-8")

    def test_file_payload(self, tmp_path: Path) -> None:
        source = tmp_path / "payload.txt"
        source.write_text("from a file", encoding="utf-8")
        target = tmp_path / "file.html"
        assert run(["qr", "--file", str(source), "-f", "HTML", "-o", str(target)]) == 0
        assert target.read_text(encoding="utf-8").startswith("<div")

    def test_rounded_style(self, tmp_path: Path) -> None:
        target = tmp_path / "round.svg"
        run(["qr", "--text", "round", "--rounded", "--size", "290", "--margin", "4", "-f", "SVG", "-o", str(target)])
        assert 'rx="2.5"' in target.read_text(encoding="utf-8")

    def test_logo(self, tmp_path: Path, logo_bytes: bytes) -> None:
        logo = tmp_path / "logo.png"
        logo.write_bytes(logo_bytes)
        target = tmp_path / "logo.svg"
        run(["qr", "--text", "logo", "--ecc", "high", "--logo", str(logo), "--logo-size", "50", "-f", "SVG", "-o", str(target)])
        assert "<image" in target.read_text(encoding="utf-8")

    def test_payload_source_is_required(self) -> None:
        with pytest.raises(SystemExit) as info:
            build_parser().parse_args(["qr"])
        assert info.value.code == 2


class TestListCommand:
    def test_prints_catalog(self, capsys: pytest.CaptureFixture) -> None:
        main(["list"])
        out = capsys.readouterr().out
        assert "Symbologies:" in out
        assert "PHARMA2T" in out
        assert "quartile" in out
        assert "image/vnd.dxf" in out
