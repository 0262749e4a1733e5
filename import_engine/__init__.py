"""
import_engine - Delimited-file product import pipeline.

Public API:
    run_import(file_path, settings=None) → ImportReport
    load_settings(yaml_path)             → ImportSettings
    ProductImportEngine                  → run rows against a CatalogService
"""

from import_engine.importer import ProductImportEngine, run_import    # noqa: F401
from import_engine.report import ImportOutcome, ImportReport          # noqa: F401
from import_engine.settings import ImportSettings, load_settings      # noqa: F401
