# brickdeals/crud.py
"""Storage operations for catalog items, price observations and deals.

Every write is a keyed merge-upsert committed in chunks no larger than the
backend batch limit. A failing chunk is rolled back and the error propagates;
chunks committed before it stay committed.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .catalog import DEFAULT_THEME
from .models import CatalogItem, Deal, PriceObservation
from .schemas import CatalogItemData, DealData, PriceObservationData
from .utils import chunked, logger, utc_now

QUERYABLE_AVAILABILITY = ("available", "retiring_soon")


def _insert_for(db: Session, table):
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert(table)
    return sqlite_insert(table)


def _dedupe(rows: Sequence[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    # a single statement may not touch the same key twice; the last write wins
    latest = {}
    for row in rows:
        latest[row[key]] = row
    return list(latest.values())


def upsert_batch(db: Session, model, rows: Sequence[Dict[str, Any]], chunk_size: int = config.WRITE_CHUNK_SIZE) -> int:
    """Merge-upsert ``rows`` into ``model``'s table, one commit per chunk.

    A column left as None in a new row keeps whatever is stored. Returns the
    number of chunks committed.
    """
    table = model.__table__
    key = model.key_column
    rows = _dedupe(rows, key)
    committed = 0
    for chunk in chunked(rows, chunk_size):
        columns = sorted({c for row in chunk for c in row})
        values = [{c: row.get(c) for c in columns} for row in chunk]
        stmt = _insert_for(db, table).values(values)
        merged = {
            c: func.coalesce(stmt.excluded[c], table.c[c])
            for c in columns if c not in ("id", key)
        }
        stmt = stmt.on_conflict_do_update(index_elements=[key], set_=merged)
        try:
            db.execute(stmt)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Batch %d of %s failed; %d earlier batch(es) stay committed",
                         committed + 1, table.name, committed)
            raise
        committed += 1
        logger.debug("Saved batch %d (%d rows) to %s", committed, len(chunk), table.name)
    return committed


def upsert_catalog(db: Session, items: Sequence[CatalogItemData], now: Optional[datetime] = None) -> int:
    stamp = now or utc_now()
    rows = [dict(item.model_dump(), last_updated=stamp) for item in items]
    chunks = upsert_batch(db, CatalogItem, rows)
    logger.info("Saved %d sets to catalog in %d batch(es)", len(rows), chunks)
    return chunks


def _observation_row(observation: PriceObservationData) -> Dict[str, Any]:
    return dict(observation.model_dump(), doc_id=observation.doc_id)


def upsert_prices(db: Session, observations: Sequence[PriceObservationData]) -> int:
    return upsert_batch(db, PriceObservation, [_observation_row(o) for o in observations])


def upsert_deals(db: Session, deals: Sequence[DealData]) -> int:
    return upsert_batch(db, Deal, [_observation_row(d) for d in deals])


def upsert_price(db: Session, observation: PriceObservationData):
    upsert_prices(db, [observation])


def upsert_deal(db: Session, deal: DealData):
    upsert_deals(db, [deal])


def _to_catalog_data(row: CatalogItem) -> CatalogItemData:
    return CatalogItemData(
        set_id=row.set_id,
        name=row.name or row.set_id,
        image_url=row.image_url or "",
        url=row.url or "",
        theme=row.theme or DEFAULT_THEME,
        theme_id=row.theme_id,
        pieces=row.pieces,
        year=row.year,
        price=row.price or 0,
        availability=row.availability,
    )


def query_available(db: Session, limit: int = config.AVAILABLE_QUERY_LIMIT) -> List[CatalogItemData]:
    stmt = (
        select(CatalogItem)
        .where(CatalogItem.availability.in_(QUERYABLE_AVAILABILITY))
        .order_by(CatalogItem.year.desc(), CatalogItem.set_id)
        .limit(limit)
    )
    return [_to_catalog_data(row) for row in db.scalars(stmt)]


def get_catalog_item(db: Session, set_id: str):
    return db.query(CatalogItem).filter(CatalogItem.set_id == set_id).first()


def get_deal(db: Session, doc_id: str):
    return db.query(Deal).filter(Deal.doc_id == doc_id).first()


def get_price(db: Session, doc_id: str):
    return db.query(PriceObservation).filter(PriceObservation.doc_id == doc_id).first()


def count_catalog(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(CatalogItem))


def count_deals(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Deal))


def list_deals(db: Session, skip: int = 0, limit: int = 50, filters: Dict = None):
    q = db.query(Deal)
    if filters:
        if filters.get("min_discount") is not None:
            q = q.filter(Deal.percent_off >= filters["min_discount"])
        if filters.get("max_discount") is not None:
            q = q.filter(Deal.percent_off <= filters["max_discount"])
        if filters.get("retailer"):
            q = q.filter(Deal.retailer == filters["retailer"])
        if filters.get("theme"):
            q = q.filter(Deal.theme.ilike(f"%{filters['theme']}%"))
        if filters.get("min_price") is not None:
            q = q.filter(Deal.current_price >= filters["min_price"])
        if filters.get("max_price") is not None:
            q = q.filter(Deal.current_price <= filters["max_price"])
        if filters.get("in_stock_only"):
            q = q.filter(Deal.in_stock.is_(True))
    total = q.count()
    items = q.order_by(Deal.percent_off.desc(), Deal.doc_id).offset(skip).limit(limit).all()
    return {"total": total, "items": items}
