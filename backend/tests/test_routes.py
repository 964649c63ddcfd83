"""
Tests for the catalog extraction API routes.
"""

import base64
import io
from unittest.mock import patch

import fitz
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image

from catalog_extraction.renditions import DataRendition
from routes.catalog_extraction import router


def png_data_url(size=(6, 6)):
    img_buffer = io.BytesIO()
    Image.new("RGB", size, color="blue").save(img_buffer, format="PNG")
    return f"data:image/png;base64,{base64.b64encode(img_buffer.getvalue()).decode('utf-8')}"


def pdf_data_url():
    doc = fitz.open()
    doc.new_page(width=30, height=40).insert_text((5, 15), "pdf")
    data = doc.tobytes()
    doc.close()
    return f"data:application/pdf;base64,{base64.b64encode(data).decode('utf-8')}"


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router, prefix="/catalog")
    return TestClient(app)


class TestExtractRoute:
    """Test cases for POST /extract."""

    def test_extract_nested_groups(self, client, tmp_path):
        response = client.post("/catalog/extract", json={
            "output_path": str(tmp_path / "out"),
            "groups": [
                {
                    "name": "devices/mix/d_iphone_ipad_mac",
                    "assets": [{"name": "d_iphone_ipad_mac@2x.png", "data_url": png_data_url()}]
                },
                {
                    "name": "Shortcuts/SavedMessages",
                    "assets": [{"name": "SavedMessages.pdf", "data_url": pdf_data_url()}]
                },
                {
                    "name": "Broken",
                    "assets": [{"name": "broken.png", "data_url": "data:image/png;base64,AAAA"}]
                }
            ]
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["stats"]["extracted"] == 2
        assert body["stats"]["failed"] == 1
        assert (tmp_path / "out" / "devices" / "mix" / "d_iphone_ipad_mac@2x.png").is_file()
        assert (tmp_path / "out" / "Shortcuts" / "SavedMessages.pdf").is_file()

        failed = [asset for asset in body["assets"] if not asset["ok"]]
        assert failed[0]["error"] == "RenditionMissingData"

    def test_output_path_is_file(self, client, tmp_path):
        target = tmp_path / "file"
        target.write_text("x")
        response = client.post("/catalog/extract", json={"output_path": str(target), "groups": []})

        assert response.status_code == 400
        assert "not a directory" in response.json()["detail"]

    def test_invalid_data_url(self, client, tmp_path):
        response = client.post("/catalog/extract", json={
            "output_path": str(tmp_path),
            "groups": [{"name": "g", "assets": [{"name": "a.png", "data_url": "nope"}]}]
        })

        assert response.status_code == 400

    def test_invalid_data_url_closes_decoded_documents(self, client, tmp_path):
        with patch.object(DataRendition, "close", autospec=True) as close:
            response = client.post("/catalog/extract", json={
                "output_path": str(tmp_path),
                "groups": [
                    {"name": "g", "assets": [{"name": "a.pdf", "data_url": pdf_data_url()}]},
                    {"name": "h", "assets": [{"name": "b.png", "data_url": "nope"}]}
                ]
            })

        assert response.status_code == 400
        assert close.call_count == 1
        assert close.call_args.args[0].kind == "vector"
        assert not list(tmp_path.iterdir())

    def test_config_overrides(self, client, tmp_path):
        response = client.post("/catalog/extract", json={
            "output_path": str(tmp_path),
            "groups": [{"name": "g", "assets": [{"name": "a.tiff", "data_url": png_data_url()}]}],
            "config": {"image_format": "tiff", "unknown_option": 1}
        })

        assert response.status_code == 200
        assert (tmp_path / "a.tiff").read_bytes()[:2] in (b"II", b"MM")

    def test_lossy_config_rejected(self, client, tmp_path):
        response = client.post("/catalog/extract", json={
            "output_path": str(tmp_path),
            "groups": [],
            "config": {"image_format": "JPEG"}
        })

        assert response.status_code == 400


class TestInfoRoutes:

    def test_default_config(self, client):
        response = client.get("/catalog/config/defaults")

        assert response.status_code == 200
        config = response.json()["config"]
        assert config["image_format"]["value"] == "PNG"
        assert config["png_compress_level"]["value"] == 6

    def test_health(self, client):
        response = client.get("/catalog/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
