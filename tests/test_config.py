import json
from pathlib import Path

import pytest

from barcode_qr.config import CONFIG_ENV_VAR, Settings, load_settings
from barcode_qr.errors import UnsupportedSymbology
from barcode_qr.options import OutputFormat
from barcode_qr.qrcodegen import ErrorCorrectionLevel

SAMPLE = {
    "barcode": {"default_type": "code128", "default_options": {"width": 3, "height": 60, "text": False}},
    "qrcode": {"default_options": {"error_correction_level": "high", "size": 400, "margin": 2}},
    "output": {"default_format": "svg", "storage_path": "out/codes", "url_prefix": "/codes"},
    "cache": {"enabled": False, "ttl": 10, "prefix": "bq_"},
}


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(SAMPLE), encoding="utf-8")
    return path


class TestLoadSettings:
    def test_defaults_without_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        settings = load_settings()
        assert settings == Settings()
        assert settings.default_symbology == "C128"
        assert settings.default_format is OutputFormat.PNG
        assert settings.cache_ttl == 3600
        assert settings.cache_prefix == "barcode_qrcode_"

    def test_from_file(self, config_file: Path) -> None:
        settings = load_settings(config_file)
        assert settings.default_symbology == "C128"
        assert settings.barcode_options.module_width == 3
        assert settings.barcode_options.height == 60
        assert settings.barcode_options.show_text is False
        assert settings.qr_options.error_correction is ErrorCorrectionLevel.HIGH
        assert settings.qr_options.size == 400
        assert settings.default_format is OutputFormat.SVG
        assert settings.storage_path == Path("out/codes")
        assert settings.url_prefix == "/codes"
        assert settings.cache_enabled is False
        assert settings.cache_ttl == 10
        assert settings.cache_prefix == "bq_"

    def test_from_environment(self, config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert load_settings().default_format is OutputFormat.SVG

    def test_explicit_path_wins_over_environment(self, config_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = tmp_path / "other.json"
        other.write_text(json.dumps({"output": {"default_format": "pdf"}}), encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert load_settings(other).default_format is OutputFormat.PDF

    def test_partial_file_keeps_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"cache": {"ttl": 5}}), encoding="utf-8")
        settings = load_settings(path)
        assert settings.cache_ttl == 5
        assert settings.barcode_options == Settings().barcode_options

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="invalid JSON"):
            load_settings(path)

    def test_top_level_must_be_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_settings(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.json")


class TestFromMapping:
    @pytest.mark.parametrize("ttl", [0, -1, "soon"])
    def test_invalid_ttl(self, ttl) -> None:
        with pytest.raises(ValueError, match="cache.ttl"):
            Settings.from_mapping({"cache": {"ttl": ttl}})

    def test_unknown_default_type(self) -> None:
        with pytest.raises(UnsupportedSymbology):
            Settings.from_mapping({"barcode": {"default_type": "QR"}})

    def test_section_must_be_an_object(self) -> None:
        with pytest.raises(ValueError, match="section 'output'"):
            Settings.from_mapping({"output": "png"})

    def test_invalid_default_option(self) -> None:
        with pytest.raises(ValueError, match="module_width"):
            Settings.from_mapping({"barcode": {"default_options": {"width": 0}}})
