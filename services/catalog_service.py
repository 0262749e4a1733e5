"""
services.catalog_service - Catalog reads/writes used by the import engine.

All session management is the caller's responsibility, except for
row_scope(), which the import engine uses to give every CSV row its
own commit/rollback boundary.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

from sqlalchemy.orm import Session

from db.models import (
    Image, OptionType, OptionValue, Product, ProductProperty, Property,
    ShippingCategory, TaxCategory, Taxon, Taxonomy, Variant,
)
from services.lookup_service import find_or_create


NAME_MAX_LENGTH = 255
_DIMENSIONS = ("weight", "height", "width", "depth")


class CatalogService:

    def __init__(self, session: Session):
        self.session = session

    # ── Transactions ───────────────────────────────────────────────────

    @contextmanager
    def row_scope(self) -> Iterator[None]:
        """Commit everything done inside the block, or roll all of it back."""
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    # ── Products ───────────────────────────────────────────────────────

    def product_ids(self) -> list[int]:
        return [pid for (pid,) in self.session.query(Product.id).order_by(Product.id)]

    def find_product_by_external_id(self, property_name: str, value: str) -> Product | None:
        """Return the product whose *property_name* property equals *value*."""
        return (
            self.session.query(Product)
            .join(ProductProperty, ProductProperty.product_id == Product.id)
            .join(Property, Property.id == ProductProperty.property_id)
            .filter(Property.name == property_name, ProductProperty.value == value)
            .order_by(Product.id)
            .first()
        )

    @staticmethod
    def create_product(fields: dict) -> Product:
        """Build an unsaved Product; call save_product() once it validates."""
        return Product(**fields)

    @staticmethod
    def validate_product(product: Product) -> list[str]:
        """Return human-readable constraint violations (empty = valid)."""
        errors: list[str] = []
        name = (product.name or "").strip()
        if not name:
            errors.append("name can't be blank")
        elif len(name) > NAME_MAX_LENGTH:
            errors.append(f"name is too long (maximum is {NAME_MAX_LENGTH} characters)")

        if product.price is None:
            errors.append("price can't be blank")
        elif Decimal(product.price) < 0:
            errors.append("price must be greater than or equal to 0")

        for dim in _DIMENSIONS:
            val = getattr(product, dim)
            if val is not None and Decimal(val) < 0:
                errors.append(f"{dim} must be greater than or equal to 0")
        return errors

    def save_product(self, product: Product) -> Product:
        self.session.add(product)
        self.session.flush()
        return product

    def delete_product(self, product: Product) -> None:
        self.session.delete(product)
        self.session.flush()

    def get_product(self, product_id: int) -> Product | None:
        return self.session.get(Product, product_id)

    # ── Categories ─────────────────────────────────────────────────────

    def find_or_create_shipping_category(self, name: str) -> ShippingCategory:
        return find_or_create(self.session, ShippingCategory, name=name)[0]

    def find_or_create_tax_category(self, name: str) -> TaxCategory:
        return find_or_create(self.session, TaxCategory, name=name)[0]

    # ── Taxonomy ───────────────────────────────────────────────────────

    def find_or_create_taxonomy(self, name: str) -> tuple[Taxonomy, bool]:
        """
        Return ``(taxonomy, created)``.  A taxonomy always comes with a
        root taxon of the same name; one is added if missing.
        """
        taxonomy, created = find_or_create(self.session, Taxonomy, name=name)
        if taxonomy.root is None:
            self.session.add(Taxon(name=name, taxonomy=taxonomy))
            self.session.flush()
        return taxonomy, created

    def find_taxons_by_value(self, value: str) -> list[Taxon]:
        """All taxons named *value*, whatever taxonomy they belong to."""
        return self.session.query(Taxon).filter(Taxon.name == value).order_by(Taxon.id).all()

    def create_taxon(self, taxonomy: Taxonomy, value: str) -> Taxon:
        """Resolve-or-create the taxon *value* directly under the taxonomy root."""
        root = taxonomy.root
        return find_or_create(
            self.session, Taxon,
            name=value, parent_id=root.id, taxonomy_id=taxonomy.id,
        )[0]

    def add_taxon(self, product: Product, taxon: Taxon) -> None:
        if taxon not in product.taxons:
            product.taxons.append(taxon)
            self.session.flush()

    # ── Options / variants ─────────────────────────────────────────────

    def find_or_create_option_type(self, name: str, presentation: str) -> OptionType:
        return find_or_create(self.session, OptionType, name=name, presentation=presentation)[0]

    def find_or_create_option_value(
        self, option_type: OptionType, name: str, presentation: str | None = None,
    ) -> OptionValue:
        return find_or_create(
            self.session, OptionValue,
            defaults={"presentation": presentation or name},
            option_type_id=option_type.id, name=name,
        )[0]

    def create_variant(
        self,
        product: Product,
        sku: str,
        price: Decimal,
        *,
        cost_price: Decimal | None = None,
        is_master: bool = False,
    ) -> Variant:
        variant = Variant(sku=sku, price=price, cost_price=cost_price, is_master=is_master)
        product.variants.append(variant)
        self.session.flush()
        return variant

    # ── Properties ─────────────────────────────────────────────────────

    def create_property(self, name: str, presentation: str | None = None) -> Property:
        return find_or_create(
            self.session, Property,
            defaults={"presentation": presentation or name}, name=name,
        )[0]

    def set_product_property(self, product: Product, prop: Property, value: str) -> ProductProperty:
        """Set (or overwrite) the value of *prop* on *product*."""
        for pp in product.product_properties:
            if pp.property_id == prop.id:
                pp.value = value
                self.session.flush()
                return pp
        pp = ProductProperty(property=prop, value=value)
        product.product_properties.append(pp)
        self.session.flush()
        return pp

    # ── Images ─────────────────────────────────────────────────────────

    def attach_image(
        self,
        product: Product,
        file_name: str,
        data: bytes,
        position: int,
        content_type: str = "",
    ) -> Image:
        image = Image(
            attachment_file_name=file_name,
            attachment_content_type=content_type,
            attachment_size=len(data),
            data=data,
            position=position,
        )
        product.images.append(image)
        self.session.flush()
        return image
