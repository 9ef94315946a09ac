import base64
import io

import pytest
from PIL import Image

from app import QRRequest, create_app, decode_data_url
from qr_grid.tables import CorrectionLevel


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


def icon_data_url():
    buffer = io.BytesIO()
    Image.new("RGBA", (32, 32), "blue").save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


class TestMatrixEndpoint:

    def test_get(self, client):
        response = client.get("/api/qr-matrix", query_string={"data": "HELLO WORLD", "correctionLevel": "Q"})
        assert response.status_code == 200
        body = response.get_json()
        assert body["version"] == 1
        assert body["size"] == 21
        assert body["correctionLevel"] == "Q"
        assert body["mask"] == 0
        assert body["maxBitsData"] == 208
        assert len(body["grid"]) == 21
        assert body["grid"][0][:8] == [1, 1, 1, 1, 1, 1, 1, 0]

    def test_post(self, client):
        response = client.post("/api/qr-matrix", json={"data": "hello", "mask": 3, "minVersion": 4})
        body = response.get_json()
        assert (body["version"], body["mask"], body["size"]) == (4, 3, 33)

    def test_icon_raises_level(self, client):
        response = client.post("/api/qr-matrix", json={"data": "hello", "iconData": icon_data_url()})
        body = response.get_json()
        assert body["correctionLevel"] == "Q"
        assert body["version"] == 2

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"data": ""},
            {"data": "x", "mask": 9},
            {"data": "x", "mask": "nine"},
            {"data": "x", "correctionLevel": "Z"},
            {"data": "x", "minVersion": 41},
            {"data": "x" * 3000},
        ],
    )
    def test_bad_request(self, client, payload):
        response = client.post("/api/qr-matrix", json=payload)
        assert response.status_code == 400
        assert response.get_json()["message"]


class TestPreviewEndpoint:
    """PNG rendering over HTTP; invalid options are reported as 400."""

    def test_png(self, client):
        response = client.get("/api/qr-preview", query_string={"data": "HELLO WORLD", "size": "210"})
        assert response.status_code == 200
        assert response.mimetype == "image/png"
        assert Image.open(io.BytesIO(response.data)).size == (210, 210)

    def test_with_icon(self, client):
        response = client.post("/api/qr-preview", json={"data": "hello", "iconData": icon_data_url(), "size": 250})
        image = Image.open(io.BytesIO(response.data)).convert("RGB")
        assert image.getpixel((125, 125)) == (0, 0, 255)

    @pytest.mark.parametrize(
        "payload",
        [
            {"data": "x", "size": 0},
            {"data": "x", "size": 5000},
            {"data": "x", "size": "wide"},
            {"data": "x", "size": 10},
            {"data": "x", "radius": "round"},
            {"data": "x", "iconData": "data:image/png;base64,@@@"},
            {"data": "x", "iconData": "data:image/png;base64," + base64.b64encode(b"text").decode()},
        ],
    )
    def test_bad_request(self, client, payload):
        response = client.post("/api/qr-preview", json=payload)
        assert response.status_code == 400


class TestQRRequest:

    def test_defaults(self):
        qr_request = QRRequest.from_payload({"data": "abc"})
        assert qr_request.options.correction_level is CorrectionLevel.L
        assert qr_request.render.image_size is None
        assert qr_request.icon is None
        assert not qr_request.render.debug

    def test_debug_flag(self):
        assert QRRequest.from_payload({"data": "abc", "debug": "true"}).render.debug


class TestDecodeDataUrl:

    def test_valid(self):
        assert decode_data_url("data:text/plain;base64,aGk=") == b"hi"

    @pytest.mark.parametrize("value", ["aGk=", "data:text/plain,hi", "data:text/plain;base64", "data:;base64,!!"])
    def test_invalid(self, value):
        assert decode_data_url(value) is None
