"""
import_engine.taxonomy - Attach a product to a taxon, creating it if needed.
"""

from __future__ import annotations

import logging

from db.models import Product, Taxon
from services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class TaxonomyResolver:

    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    def ensure_taxon(self, taxonomy_name: str, taxon_value: str, product: Product) -> list[Taxon]:
        """
        Associate *product* with the taxon(s) named *taxon_value*.

        Taxons are looked up by name alone, across every taxonomy, and
        all matches are attached.  Only when nothing matches is the
        taxonomy resolved (created with a warning if missing) and a
        taxon created under its root.  A blank value does nothing.
        """
        taxon_value = (taxon_value or "").strip()
        if not taxon_value:
            return []

        existing = self.catalog.find_taxons_by_value(taxon_value)
        if existing:
            for taxon in existing:
                self.catalog.add_taxon(product, taxon)
            return existing

        taxonomy, created = self.catalog.find_or_create_taxonomy(taxonomy_name)
        if created:
            logger.warning(f"Could not find {taxonomy_name} taxonomy, so it was created.")

        taxon = self.catalog.create_taxon(taxonomy, taxon_value)
        self.catalog.add_taxon(product, taxon)
        return [taxon]
