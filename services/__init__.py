"""
services - Business-logic layer sitting between the import engine / API and DB.
"""

from services.catalog_service import CatalogService     # noqa: F401
from services.lookup_service import find_or_create      # noqa: F401
