"""
import_engine.variants - Build a purchasable variant (SKU, price, options) for a product.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence

from db.models import Product, Variant
from import_engine.errors import RowError
from import_engine.field_map import ABSENT, ColumnMap, parse_decimal
from import_engine.settings import OptionAxis
from services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class VariantBuilder:
    """
    Every call adds one new variant: a product may carry many SKUs, so
    repeated rows for the same product are expected to pile up variants.
    """

    def __init__(self, catalog: CatalogService, columns: ColumnMap,
                 option_axes: Sequence[OptionAxis]):
        self.catalog = catalog
        self.columns = columns
        self.option_axes = list(option_axes)

    def ensure_variant(self, product: Product, row: Sequence[str],
                       is_master: bool = False) -> Variant:
        sku = self.columns.text(row, "SKU")
        price = self._decimal(row, "Master Price")
        cost_price = self._decimal(row, "Cost Price")

        variant = self.catalog.create_variant(
            product,
            sku="" if sku is ABSENT else sku,
            price=product.price if price is None else price,
            cost_price=cost_price,
            is_master=is_master,
        )

        for axis in self.option_axes:
            value = self.columns.text(row, axis.field)
            if not value:
                continue
            logger.info(f"Variant option: {axis.name} - value: {value}")
            option_type = self.catalog.find_or_create_option_type(axis.name, axis.presentation)
            option_value = self.catalog.find_or_create_option_value(option_type, value, value)
            if option_value not in variant.option_values:
                variant.option_values.append(option_value)

        self.catalog.session.flush()
        return variant

    def _decimal(self, row: Sequence[str], field: str) -> Decimal | None:
        """None when unmapped; RowError when mapped but not a number."""
        raw = self.columns.value(row, field)
        if raw is ABSENT:
            return None
        val = parse_decimal(raw)
        if val is None:
            raise RowError(f"'{field}' is not a number: {raw!r}")
        return val
