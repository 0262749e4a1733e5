"""
db.models - SQLAlchemy ORM declarations for the product catalog.

Tables
------
products            - one row per imported product.  Owns its variants,
                      property values and images (deleted with it).
variants            - purchasable SKUs; exactly one per product is the master.
option_types        - global axes of variation ("Brand", "Color" …).
option_values       - concrete values scoped to one option type.
taxonomies / taxons - classification trees; each taxonomy has one root taxon.
properties          - global metadata field definitions.
product_properties  - EAV store of per-product property values.  Lets an
                      import stamp arbitrary metadata (external ids, brand
                      ids …) without ALTER TABLE.
images              - attachments, ordered by position within a product.
shipping_categories / tax_categories - named lookup tables.

Taxonomies, taxons, option types/values and properties are shared
reference data: deleting a product never deletes them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, LargeBinary,
    Numeric, String, Table, Text, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


# ── Association tables ─────────────────────────────────────────────────

product_taxons = Table(
    "product_taxons", Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"),
           primary_key=True),
    Column("taxon_id", Integer, ForeignKey("taxons.id", ondelete="CASCADE"),
           primary_key=True),
)

variant_option_values = Table(
    "variant_option_values", Base.metadata,
    Column("variant_id", Integer, ForeignKey("variants.id", ondelete="CASCADE"),
           primary_key=True),
    Column("option_value_id", Integer, ForeignKey("option_values.id", ondelete="CASCADE"),
           primary_key=True),
)


# ── Lookup tables ──────────────────────────────────────────────────────

class ShippingCategory(Base):
    __tablename__ = "shipping_categories"

    id   = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)


class TaxCategory(Base):
    __tablename__ = "tax_categories"

    id   = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)


# ── Products ───────────────────────────────────────────────────────────

class Product(Base):
    __tablename__ = "products"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    name        = Column(String(255), nullable=False, index=True)
    description = Column(Text, default="")
    price       = Column(Numeric(10, 2), nullable=False)

    # ── Dimensions ─────────────────────────────────────────────────────
    weight = Column(Numeric(8, 2), default=0)
    height = Column(Numeric(8, 2), default=0)
    width  = Column(Numeric(8, 2), default=0)
    depth  = Column(Numeric(8, 2), default=0)

    available_on     = Column(DateTime, nullable=True)
    meta_description = Column(Text, default="")
    meta_keywords    = Column(Text, default="")

    shipping_category_id = Column(Integer, ForeignKey("shipping_categories.id"), nullable=True)
    tax_category_id      = Column(Integer, ForeignKey("tax_categories.id"), nullable=True)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    shipping_category = relationship("ShippingCategory")
    tax_category      = relationship("TaxCategory")

    variants = relationship(
        "Variant", back_populates="product",
        cascade="all, delete-orphan", order_by="Variant.id",
    )
    product_properties = relationship(
        "ProductProperty", back_populates="product",
        cascade="all, delete-orphan", lazy="selectin",
    )
    images = relationship(
        "Image", back_populates="product",
        cascade="all, delete-orphan", order_by="Image.position",
    )
    taxons = relationship("Taxon", secondary=product_taxons, back_populates="products")

    @property
    def master(self) -> "Variant | None":
        for v in self.variants:
            if v.is_master:
                return v
        return None

    @property
    def sku(self) -> str:
        master = self.master
        return master.sku if master is not None else ""

    def property_value(self, name: str) -> str | None:
        for pp in self.product_properties:
            if pp.property.name == name:
                return pp.value
        return None

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "price": str(self.price) if self.price is not None else None,
            "weight": str(self.weight or 0),
            "height": str(self.height or 0),
            "width": str(self.width or 0),
            "depth": str(self.depth or 0),
            "available_on": self.available_on.isoformat() if self.available_on else None,
            "shipping_category": self.shipping_category.name if self.shipping_category else None,
            "tax_category": self.tax_category.name if self.tax_category else None,
            "properties": {pp.property.name: pp.value for pp in self.product_properties},
            "taxons": [t.pretty_name for t in self.taxons],
            "variants": [v.to_dict() for v in self.variants],
            "images": [img.attachment_file_name for img in self.images],
        }


class Variant(Base):
    __tablename__ = "variants"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    sku        = Column(String(255), default="", index=True)
    price      = Column(Numeric(10, 2), nullable=False)
    cost_price = Column(Numeric(10, 2), nullable=True)
    is_master  = Column(Boolean, default=False, nullable=False)

    product       = relationship("Product", back_populates="variants")
    option_values = relationship("OptionValue", secondary=variant_option_values)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku or "",
            "price": str(self.price),
            "cost_price": str(self.cost_price) if self.cost_price is not None else None,
            "is_master": bool(self.is_master),
            "options": {ov.option_type.name: ov.name for ov in self.option_values},
        }


# ── Options ────────────────────────────────────────────────────────────

class OptionType(Base):
    __tablename__ = "option_types"

    id           = Column(Integer, primary_key=True, autoincrement=True)
    name         = Column(String(100), nullable=False)
    presentation = Column(String(100), nullable=False)

    option_values = relationship("OptionValue", back_populates="option_type")

    __table_args__ = (
        UniqueConstraint("name", "presentation", name="uq_option_type_name_presentation"),
    )


class OptionValue(Base):
    __tablename__ = "option_values"

    id             = Column(Integer, primary_key=True, autoincrement=True)
    option_type_id = Column(Integer, ForeignKey("option_types.id"), nullable=False, index=True)
    name           = Column(String(255), nullable=False)
    presentation   = Column(String(255), nullable=False)

    option_type = relationship("OptionType", back_populates="option_values")

    __table_args__ = (
        UniqueConstraint("option_type_id", "name", name="uq_option_value_type_name"),
    )


# ── Taxonomy ───────────────────────────────────────────────────────────

class Taxonomy(Base):
    __tablename__ = "taxonomies"

    id   = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)

    taxons = relationship(
        "Taxon", back_populates="taxonomy",
        foreign_keys="Taxon.taxonomy_id", cascade="all, delete-orphan",
    )

    @property
    def root(self) -> "Taxon | None":
        for t in self.taxons:
            if t.parent_id is None and t.parent is None:
                return t
        return None


class Taxon(Base):
    __tablename__ = "taxons"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    taxonomy_id = Column(Integer, ForeignKey("taxonomies.id"), nullable=False, index=True)
    parent_id   = Column(Integer, ForeignKey("taxons.id"), nullable=True)
    name        = Column(String(255), nullable=False, index=True)

    taxonomy = relationship("Taxonomy", back_populates="taxons", foreign_keys=[taxonomy_id])
    parent   = relationship("Taxon", remote_side=[id], backref="children")
    products = relationship("Product", secondary=product_taxons, back_populates="taxons")

    @property
    def pretty_name(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.pretty_name} -> {self.name}"


# ── Properties (EAV) ───────────────────────────────────────────────────

class Property(Base):
    __tablename__ = "properties"

    id           = Column(Integer, primary_key=True, autoincrement=True)
    name         = Column(String(255), unique=True, nullable=False)
    presentation = Column(String(255), nullable=False)


class ProductProperty(Base):
    __tablename__ = "product_properties"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    product_id  = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"),
                         nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    value       = Column(Text, nullable=False, default="")

    product  = relationship("Product", back_populates="product_properties")
    property = relationship("Property", lazy="joined")

    __table_args__ = (
        Index("ix_property_value_lookup", "property_id", "value"),
    )


# ── Images ─────────────────────────────────────────────────────────────

class Image(Base):
    __tablename__ = "images"

    id                      = Column(Integer, primary_key=True, autoincrement=True)
    product_id              = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"),
                                     nullable=False, index=True)
    position                = Column(Integer, nullable=False, default=0)
    attachment_file_name    = Column(String(500), nullable=False)
    attachment_content_type = Column(String(100), default="")
    attachment_size         = Column(Integer, default=0)
    data                    = Column(LargeBinary, nullable=False)
    created_at              = Column(DateTime, default=_utcnow)

    product = relationship("Product", back_populates="images")
