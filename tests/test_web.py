import json

import pytest
from flask import Flask
from flask.testing import FlaskClient

from barcode_qr.config import Settings
from barcode_qr.web import create_app


@pytest.fixture
def app() -> Flask:
    app = create_app(Settings())
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


class TestIndex:
    def test_catalog(self, client: FlaskClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        data = response.get_json()
        assert set(data) == {"symbologies", "errorCorrectionLevels", "roundBlockSizeModes", "formats", "defaults"}
        assert data["symbologies"]["EAN13"] == "EAN 13"
        assert data["formats"]["DXF"] == "image/vnd.dxf"
        assert data["defaults"]["type"] == "C128"
        assert data["defaults"]["qrcode"]["size"] == 300


class TestBarcodeEndpoint:
    def test_svg(self, client: FlaskClient) -> None:
        response = client.get("/api/barcode?type=EAN13&data=400638133393&format=SVG")
        assert response.status_code == 200
        assert response.mimetype == "image/svg+xml"
        assert response.headers["Cache-Control"] == "public, max-age=3600"
        assert b"4006381333931" in response.data

    def test_default_type_and_format(self, client: FlaskClient) -> None:
        response = client.get("/api/barcode?data=HELLO")
        assert response.status_code == 200
        assert response.mimetype == "image/png"
        assert response.data.startswith(b"\x89PNG")

    def test_download(self, client: FlaskClient) -> None:
        response = client.get(
            "/api/barcode", query_string={"type": "C39", "data": "ABC 1", "format": "pdf", "download": "1"}
        )
        assert response.status_code == 200
        disposition = response.headers["Content-Disposition"]
        assert disposition.startswith("attachment")
        assert "barcode_ABC_1.pdf" in disposition

    def test_post_json_with_options(self, client: FlaskClient) -> None:
        response = client.post(
            "/api/barcode",
            json={"type": "C128", "data": "JSON", "format": "HTML", "moduleWidth": 1, "showText": False},
        )
        assert response.status_code == 200
        assert response.mimetype == "text/html"
        assert b"JSON" not in response.data

    def test_post_form(self, client: FlaskClient) -> None:
        response = client.post("/api/barcode", data={"type": "I25", "data": "1234", "format": "DXF"})
        assert response.status_code == 200
        assert b"LWPOLYLINE" in response.data

    @pytest.mark.parametrize(
        "query,message",
        [
            ("type=NOPE&data=1", "Unsupported barcode type: NOPE"),
            ("type=EAN8&data=abc", "EAN8"),
            ("type=C39&data=A&format=GIF", "Unsupported format: GIF"),
            ("type=C39", "data must not be empty"),
            ("type=C39&data=A&moduleWidth=0", "module_width"),
        ],
    )
    def test_bad_requests(self, client: FlaskClient, query: str, message: str) -> None:
        response = client.get(f"/api/barcode?{query}")
        assert response.status_code == 400
        assert message in response.get_json()["message"]


class TestQrEndpoint:
    def test_png(self, client: FlaskClient) -> None:
        response = client.get("/api/qrcode?data=https://example.com&size=120&margin=2")
        assert response.status_code == 200
        assert response.mimetype == "image/png"

    def test_post_json(self, client: FlaskClient) -> None:
        response = client.post(
            "/api/qrcode",
            json={"data": "hello", "format": "SVG", "errorCorrection": "H", "cornerRadius": 0.5},
        )
        assert response.status_code == 200
        assert b"rx=" in response.data

    def test_wifi(self, client: FlaskClient) -> None:
        response = client.get("/api/qrcode?ssid=Home&password=secret&format=SVG&download=true")
        assert response.status_code == 200
        assert "qr_WIFI_T_WPA_S_Home_P.svg" in response.headers["Content-Disposition"]

    def test_empty_data(self, client: FlaskClient) -> None:
        response = client.get("/api/qrcode?data=%20")
        assert response.status_code == 400

    def test_too_large(self, client: FlaskClient) -> None:
        response = client.post("/api/qrcode", json={"data": "a" * 3000, "format": "SVG"})
        assert response.status_code == 400
        assert "Data too long" in response.get_json()["message"]

    def test_logo_path_cannot_be_requested(self, client: FlaskClient) -> None:
        response = client.post(
            "/api/qrcode",
            json={"data": "x", "format": "SVG", "logoPath": "/etc/passwd", "logo_path": "/etc/hostname"},
        )
        assert response.status_code == 200
        assert b"<image" not in response.data


class TestCaching:
    def test_identical_requests_share_one_entry(self, app: Flask, client: FlaskClient) -> None:
        cache = app.extensions["barcode_qr_cache"]
        first = client.get("/api/qrcode?data=cached&format=SVG")
        second = client.get("/api/qrcode?data=cached&format=SVG")
        assert first.data == second.data
        assert len(cache) == 1
        client.get("/api/qrcode?data=cached&format=PNG")
        assert len(cache) == 2

    def test_cache_can_be_disabled(self) -> None:
        app = create_app(Settings(cache_enabled=False, cache_ttl=30))
        assert app.extensions["barcode_qr_cache"] is None
        response = app.test_client().get("/api/barcode?data=X&format=SVG")
        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "public, max-age=30"

    def test_default_options_from_settings(self) -> None:
        settings = Settings.from_mapping({"barcode": {"default_options": {"text": False}}})
        response = create_app(settings).test_client().get("/api/barcode?data=HIDDEN&format=SVG")
        assert b"HIDDEN" not in response.data
        assert json.loads(create_app(settings).test_client().get("/").data)["defaults"]["barcode"]["show_text"] is False
