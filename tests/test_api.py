import io

import pytest

import config
from db import get_session, Product
from main import create_app

MAPPING_YAML = """\
column_mapping:
  Id: 0
  Name: 1
  Master Price: 2
  SKU: 3
field_delimiter: ","
header_rows_to_skip: 1
default_shipping_category: Default
image_root_path: {images}
log_file_path: {log}
"""


@pytest.fixture
def app(tmp_path, monkeypatch):
    mappings = tmp_path / "mappings"
    mappings.mkdir()
    (mappings / "shop.yaml").write_text(
        MAPPING_YAML.format(log=tmp_path / "api.log", images=tmp_path / "images"),
        encoding="utf-8",
    )
    monkeypatch.setattr(config, "MAPPINGS_DIR", mappings)
    monkeypatch.setattr(config, "IMPORT_SETTINGS", mappings / "shop.yaml")
    monkeypatch.setattr(config, "DATA_FILES_DIR", tmp_path / "staged")

    app = create_app("sqlite://")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


CSV = b"id,name,price,sku\nX1,Shirt,20.00,SH-1\nX1,Shirt,21.00,SH-2\nX2,,3,HAT\n"


def test_multipart_upload_imports_file(client, tmp_path):
    resp = client.post(
        "/api/v1/import",
        data={"data_file": (io.BytesIO(CSV), "products.csv")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "notice"
    assert (body["created"], body["updated"]) == (2, 1)
    assert [o["status"] for o in body["outcomes"]] == ["created", "updated", "created"]
    # the staged copy is removed afterwards
    assert list((tmp_path / "staged").iterdir()) == []

    session = get_session()
    try:
        names = sorted(p.name for p in session.query(Product))
    finally:
        session.close()
    assert names == ["No-name product 0", "Shirt"]


def test_raw_body_upload_with_named_mapping(client):
    resp = client.post("/api/v1/import?mapping=shop", data=CSV, content_type="text/csv")
    assert resp.status_code == 200
    assert resp.get_json()["total_rows"] == 3


def test_listing_products(client):
    client.post("/api/v1/import", data=CSV, content_type="text/csv")

    resp = client.get("/api/v1/products?q=shirt")
    body = resp.get_json()
    assert body["total"] == 1
    shirt = body["products"][0]
    assert shirt["properties"] == {"XmlImportId": "X1"}
    assert [v["sku"] for v in shirt["variants"]] == ["SH-1", "SH-2"]

    one = client.get(f"/api/v1/products/{shirt['id']}")
    assert one.get_json()["name"] == "Shirt"
    assert client.get("/api/v1/products/9999").status_code == 404


def test_unreadable_upload_reports_error(client):
    resp = client.post("/api/v1/import", data=b"id,name\n1,x\n", content_type="text/csv")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["status"] == "error"
    assert "beyond" in body["detail"]


@pytest.mark.parametrize("query, message", [
    ("?mapping=../etc", "bad mapping name"),
    ("?mapping=missing", "unknown mapping"),
])
def test_bad_mapping_is_rejected(client, query, message):
    resp = client.post(f"/api/v1/import{query}", data=CSV, content_type="text/csv")
    assert resp.status_code == 400
    assert message in resp.get_json()["error"]


def test_missing_upload(client):
    resp = client.post("/api/v1/import", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    resp = client.post("/api/v1/import", data=b"", content_type="text/csv")
    assert resp.status_code == 400


def test_destroy_flag(client):
    client.post("/api/v1/import", data=CSV, content_type="text/csv")
    resp = client.post(
        "/api/v1/import?destroy=1",
        data=b"id,name,price,sku\nX9,Fresh,1,F\n",
        content_type="text/csv",
    )
    assert resp.get_json()["destroyed"] == 2
    listing = client.get("/api/v1/products").get_json()
    assert [p["name"] for p in listing["products"]] == ["Fresh"]
