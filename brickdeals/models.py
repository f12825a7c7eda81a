# brickdeals/models.py
"""SQLAlchemy ORM models for persisted entities.

Three logical collections, each keyed by a deterministic string id:
`catalog_items` (set number), `prices` and `deals` (set number + retailer).
"""
from sqlalchemy import Column, Integer, Text, Numeric, Boolean, DateTime, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB
from .db import Base

JSONType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class CatalogItem(Base):
    __tablename__ = "catalog_items"
    key_column = "set_id"

    id = Column(Integer, primary_key=True, index=True)
    set_id = Column(Text, nullable=False, unique=True, index=True)
    name = Column(Text)
    image_url = Column(Text)
    url = Column(Text)
    theme = Column(Text)
    theme_id = Column(Integer)
    pieces = Column(Integer)
    year = Column(Integer)
    price = Column(Numeric(10, 2, asdecimal=False))
    availability = Column(Text, index=True)
    raw_json = Column(JSONType)
    last_updated = Column(DateTime)


class _ObservationColumns:
    """Columns shared by a price observation and the deal derived from it."""
    key_column = "doc_id"

    id = Column(Integer, primary_key=True, index=True)
    doc_id = Column(Text, nullable=False, unique=True, index=True)
    set_id = Column(Text, nullable=False, index=True)
    retailer = Column(Text, nullable=False)
    set_name = Column(Text)
    current_price = Column(Numeric(10, 2, asdecimal=False))
    original_price = Column(Numeric(10, 2, asdecimal=False))
    url = Column(Text)
    in_stock = Column(Boolean)
    theme = Column(Text)
    image_url = Column(Text)
    pieces = Column(Integer)
    last_updated = Column(DateTime, index=True)


class PriceObservation(_ObservationColumns, Base):
    __tablename__ = "prices"


class Deal(_ObservationColumns, Base):
    __tablename__ = "deals"

    percent_off = Column(Integer)
    savings = Column(Numeric(10, 2, asdecimal=False))

Index("idx_deals_percent_off", Deal.percent_off)
