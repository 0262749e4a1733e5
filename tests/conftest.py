import csv
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from db.models import Base
from import_engine.settings import ImportSettings
from services.catalog_service import CatalogService

# Id, Name, Master Price, SKU, Description, Category, Color, Size, Image Main
MAPPING = {
    "Id": 0,
    "Name": 1,
    "Master Price": 2,
    "SKU": 3,
    "Description": 4,
    "Category": 5,
    "Color": 6,
    "Size": 7,
    "Image Main": 8,
}
HEADER = ["id", "name", "price", "sku", "description", "category", "color", "size", "image"]


@pytest.fixture
def session():
    """In-memory SQLite session, fresh per test."""
    engine = create_engine("sqlite://", poolclass=StaticPool, future=True)
    Base.metadata.create_all(engine)
    s = Session(bind=engine, expire_on_commit=False)
    yield s
    s.close()
    engine.dispose()


@pytest.fixture
def catalog(session):
    return CatalogService(session)


@pytest.fixture
def image_dir(tmp_path):
    d = tmp_path / "images"
    d.mkdir()
    return d


@pytest.fixture
def make_settings(tmp_path, image_dir):
    """Build ImportSettings pointing logs and images into tmp_path."""
    def _make(**overrides):
        values = {
            "column_mapping": dict(MAPPING),
            "header_rows_to_skip": 1,
            "default_shipping_category": "Default",
            "default_tax_category": "Standard",
            "image_root_path": image_dir,
            "image_fields": ["Image Main"],
            "log_file_path": tmp_path / "log" / "import.log",
            "taxonomies": {"Category": "Category"},
        }
        values.update(overrides)
        return ImportSettings(**values)
    return _make


@pytest.fixture
def write_csv(tmp_path):
    """Write rows (header first) to a delimited file and return its path."""
    counter = {"n": 0}

    def _write(rows, header=HEADER, delimiter=","):
        counter["n"] += 1
        path = tmp_path / f"data_{counter['n']}.csv"
        with open(path, "w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh, delimiter=delimiter)
            if header is not None:
                writer.writerow(header)
            writer.writerows(rows)
        return path
    return _write


@pytest.fixture
def existing_product(catalog):
    """A product imported by an earlier run, identified as 'OLD1'."""
    def _make(name="Existing", external_id="OLD1", price="5.00"):
        product = catalog.save_product(
            catalog.create_product({"name": name, "price": Decimal(price)})
        )
        catalog.create_variant(product, sku=f"{external_id}-M", price=Decimal(price), is_master=True)
        if external_id:
            prop = catalog.create_property("XmlImportId")
            catalog.set_product_property(product, prop, external_id)
        catalog.commit()
        return product
    return _make
