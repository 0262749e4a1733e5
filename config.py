"""
Catalog importer - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.  Per-file column layouts live
in the YAML files under mappings/ (see import_engine.settings).
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR          = Path(__file__).resolve().parent
MAPPINGS_DIR      = Path(os.environ.get("CATALOG_MAPPINGS_DIR", BASE_DIR / "mappings"))
IMPORT_SETTINGS   = Path(os.environ.get("CATALOG_IMPORT_SETTINGS", MAPPINGS_DIR / "default.yaml"))
PRODUCT_IMAGE_DIR = Path(os.environ.get("CATALOG_IMAGE_DIR", BASE_DIR / "product_data" / "product-images"))
DATA_FILES_DIR    = Path(os.environ.get("CATALOG_DATA_FILES_DIR", BASE_DIR / "product_data" / "data-files"))

# ── Logging ────────────────────────────────────────────────────────────
ENV      = os.environ.get("CATALOG_ENV", "development")
LOG_DIR  = Path(os.environ.get("CATALOG_LOG_DIR", BASE_DIR / "log"))
LOG_FILE = Path(os.environ.get("CATALOG_LOG_FILE", LOG_DIR / f"import_products_{ENV}.log"))

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("CATALOG_DB", f"sqlite:///{BASE_DIR / 'catalog.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("CATALOG_HOST", "0.0.0.0")
PORT   = int(os.environ.get("CATALOG_PORT", "5000"))
DEBUG  = os.environ.get("CATALOG_DEBUG", "0") == "1"
SECRET = os.environ.get("CATALOG_SECRET", "catalog-dev-key-change-in-prod")

# ── Uploads / listing ──────────────────────────────────────────────────
MAX_UPLOAD_BYTES  = int(os.environ.get("CATALOG_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
API_MAX_LIMIT     = 1000
API_DEFAULT_LIMIT = 100
