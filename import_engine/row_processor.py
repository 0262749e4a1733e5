"""
import_engine.row_processor - Turn one spreadsheet row into catalog records.

Single-responsibility: given a raw row and the run context, either add a
variant to the product the row identifies, or create a complete new
product (fields, properties, taxons, master variant, images).  Returns
an ImportOutcome; raises only for unexpected problems, which the
importer contains at the row boundary.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Sequence

from db.models import Product
from import_engine.field_map import ABSENT, parse_decimal
from import_engine.images import ImageAttacher
from import_engine.report import CREATED, SKIPPED_INVALID, UPDATED, ImportOutcome
from import_engine.settings import ImportSettings
from import_engine.taxonomy import TaxonomyResolver
from import_engine.variants import VariantBuilder
from services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

# logical field → Product attribute
NUMERIC_PRODUCT_FIELDS = (
    ("Master Price", "price"),
    ("Weight", "weight"),
    ("Height", "height"),
    ("Width", "width"),
    ("Depth", "depth"),
)
TEXT_PRODUCT_FIELDS = (
    ("Meta Description", "meta_description"),
    ("Meta Keywords", "meta_keywords"),
)


@dataclass
class RunContext:
    """State carried from row to row within a single import run."""
    preexisting_ids: frozenset[int] = frozenset()
    nameless_count: int = 0
    matched_ids: set[int] = field(default_factory=set)   # pre-existing products a row updated

    def next_nameless_name(self) -> str:
        name = f"No-name product {self.nameless_count}"
        self.nameless_count += 1
        return name


class RowProcessor:

    def __init__(self, catalog: CatalogService, settings: ImportSettings):
        self.catalog = catalog
        self.settings = settings
        self.columns = settings.columns
        self.taxonomies = TaxonomyResolver(catalog)
        self.variants = VariantBuilder(catalog, self.columns, settings.option_axes)
        self.images = ImageAttacher(catalog, settings.image_root_path)

    def process(self, ctx: RunContext, line_no: int, row: Sequence[str]) -> ImportOutcome:
        if not any((cell or "").strip() for cell in row):
            return ImportOutcome(line_no, SKIPPED_INVALID, "blank row")

        external_id = ""
        if self.settings.uses_external_id:
            external_id = self.columns.text(row, self.settings.identity_field) or ""
            if external_id:
                existing = self.catalog.find_product_by_external_id(
                    self.settings.identity_property, external_id,
                )
                if existing is not None:
                    return self._add_variant(line_no, row, existing)
            else:
                logger.info(f"Row {line_no} has no {self.settings.identity_field}; "
                            f"importing it as a new product")

        return self._create_product(ctx, line_no, row, external_id)

    # ── Existing product ───────────────────────────────────────────────

    def _add_variant(self, line_no: int, row: Sequence[str],
                     product: Product) -> ImportOutcome:
        variant = self.variants.ensure_variant(product, row)
        logger.info(f"Variant saved for {variant.sku}")
        return ImportOutcome(
            line_no, UPDATED,
            f"Variant {variant.sku or variant.id} added to {product.name}",
            product.id,
        )

    # ── New product ────────────────────────────────────────────────────

    def _create_product(self, ctx: RunContext, line_no: int, row: Sequence[str],
                        external_id: str) -> ImportOutcome:
        fields, problems = self._base_fields(ctx, row)
        product = self.catalog.create_product(fields)

        if self.settings.default_shipping_category:
            product.shipping_category = self.catalog.find_or_create_shipping_category(
                self.settings.default_shipping_category)
        if self.settings.default_tax_category:
            product.tax_category = self.catalog.find_or_create_tax_category(
                self.settings.default_tax_category)

        errors = problems + self.catalog.validate_product(product)
        if errors:
            logger.error(
                f"A product could not be imported - here is the information we have:\n"
                f" {fields!r}\n Errors: {'; '.join(errors)}"
            )
            return ImportOutcome(line_no, SKIPPED_INVALID, "; ".join(errors))

        # Save before creating associated objects
        self.catalog.save_product(product)

        self._stamp_properties(product, row, external_id)

        for taxonomy_name, column in self.settings.taxonomies.items():
            value = self.columns.text(row, column)
            if value is ABSENT:
                continue
            self.taxonomies.ensure_taxon(taxonomy_name, value, product)

        master = self.variants.ensure_variant(product, row, is_master=True)
        logger.info(f"Master Variant saved for {master.sku}")

        for column in self.settings.image_fields:
            self._attach_image(row, column, product)

        logger.info(f"[{product.sku}] {product.name}(${product.price}) successfully imported.")
        return ImportOutcome(line_no, CREATED, f"Created {product.name}", product.id)

    def _base_fields(self, ctx: RunContext, row: Sequence[str]) -> tuple[dict, list[str]]:
        """Product attributes from the row, plus any unparseable-number problems."""
        fields: dict = {
            # Yesterday, so the product shows up straight away
            "available_on": datetime.now(timezone.utc) - timedelta(days=1),
        }
        problems: list[str] = []

        description = self.columns.text(row, "Description")
        if description is not ABSENT:
            if self.settings.decode_html_in_descriptions:
                description = html.unescape(description)
            fields["description"] = description

        name = self.columns.text(row, "Name")
        if not name:
            fields["name"] = ctx.next_nameless_name()
            logger.info(f"Product with no name: {fields.get('description', '')}")
        elif self.settings.decode_html_in_names:
            fields["name"] = html.unescape(name)
        else:
            fields["name"] = name

        for column, attr in NUMERIC_PRODUCT_FIELDS:
            raw = self.columns.value(row, column)
            if raw is ABSENT:
                continue
            val = parse_decimal(raw)
            if val is None:
                problems.append(f"{attr} is not a number: {raw.strip()!r}")
            else:
                fields[attr] = val

        for column, attr in TEXT_PRODUCT_FIELDS:
            val = self.columns.text(row, column)
            if val is not ABSENT:
                fields[attr] = val

        return fields, problems

    def _stamp_properties(self, product: Product, row: Sequence[str], external_id: str) -> None:
        if self.settings.uses_external_id and external_id:
            name = self.settings.identity_property
            prop = self.catalog.create_property(name, name)
            self.catalog.set_product_property(product, prop, external_id)

        for name, column in self.settings.properties.items():
            value = self.columns.text(row, column)
            if not value:
                continue
            prop = self.catalog.create_property(name, name)
            self.catalog.set_product_property(product, prop, value)

    def _attach_image(self, row: Sequence[str], column: str, product: Product) -> None:
        if column not in self.columns:
            return
        context = self.columns.values(row)
        if column not in context:
            logger.warning(
                f"Row has no column {self.columns.index(column)} for {column}, "
                f"so no image was imported from it."
            )
            return
        filename = context[column]
        if not filename:
            return
        context["filename"] = filename
        try:
            relative = self.settings.image_path_template.format_map(context)
        except (KeyError, IndexError, ValueError) as exc:
            logger.warning(
                f"Image path template {self.settings.image_path_template!r} "
                f"cannot be filled for {filename} ({exc!r}), so this image was not imported."
            )
            return
        self.images.attach(relative, product)
