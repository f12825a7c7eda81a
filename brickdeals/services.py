# brickdeals/services.py
"""The two sync jobs and the health query.

Each job runs its steps strictly in order inside one session and either
completes or fails as a whole; nothing committed before a failure is undone.
"""
import time
from collections import Counter
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from . import config, crud
from .catalog import CatalogFetcher
from .deals import evaluate
from .pricing import RETAILERS, generate_observation
from .retention import sweep_stale_deals
from .schemas import (
    CatalogItemData,
    CatalogItemSummary,
    CatalogSyncResult,
    DealData,
    DealSummary,
    HealthResult,
    PriceSyncResult,
    ThemeCount,
)
from .utils import logger

TOP_THEMES = 15
SAMPLE_ITEMS = 10
SAMPLE_DEALS = 5


class SyncJobError(RuntimeError):
    """A sync job failed; whatever it committed before failing stays in place."""

    def __init__(self, job: str, cause: BaseException):
        super().__init__(f"{job} failed: {cause}")
        self.job = job
        self.cause = cause


def _top_themes(items: Sequence[CatalogItemData]) -> List[ThemeCount]:
    counts = Counter(item.theme or "Other" for item in items)
    return [ThemeCount(name=name, count=n) for name, n in counts.most_common(TOP_THEMES)]


def _summarize_item(item: CatalogItemData) -> CatalogItemSummary:
    return CatalogItemSummary(
        set_id=item.set_id,
        name=item.name,
        price=item.price,
        theme=item.theme,
        pieces=item.pieces,
        year=item.year,
        image_url=item.image_url,
    )


def _summarize_deal(deal: DealData) -> DealSummary:
    return DealSummary(
        set_id=deal.set_id,
        set_name=deal.set_name,
        retailer=deal.retailer,
        original_price=deal.original_price,
        current_price=deal.current_price,
        percent_off=deal.percent_off,
        savings=deal.savings,
    )


def run_catalog_sync(db: Session, fetcher: Optional[CatalogFetcher] = None) -> CatalogSyncResult:
    logger.info("job=catalog status=running")
    try:
        result = (fetcher or CatalogFetcher()).fetch_catalog()
        crud.upsert_catalog(db, result.items)
    except Exception as e:
        logger.exception("job=catalog status=failed: %s", e)
        raise SyncJobError("catalog sync", e) from e

    if not result.complete:
        logger.warning("Catalog fetch was truncated; %d sets saved from a partial walk", len(result.items))
    logger.info("job=catalog status=completed items=%d", len(result.items))
    return CatalogSyncResult(
        item_count=len(result.items),
        complete=result.complete,
        top_themes=_top_themes(result.items),
        sample_items=[_summarize_item(i) for i in result.items[:SAMPLE_ITEMS]],
    )


def _load_price_candidates(db: Session, fetcher: Optional[CatalogFetcher]) -> List[CatalogItemData]:
    items = crud.query_available(db)
    logger.info("Found %d sets in catalog", len(items))
    if not items:
        logger.info("Catalog empty, fetching from Rebrickable...")
        fetched = (fetcher or CatalogFetcher()).fetch_catalog()
        crud.upsert_catalog(db, fetched.items)
        items = fetched.items
    return items


def run_price_sync(
    db: Session,
    *,
    item_limit: int = config.PRICE_SYNC_ITEM_LIMIT,
    throttle: float = config.PRICE_SYNC_THROTTLE,
    fetcher: Optional[CatalogFetcher] = None,
    generate: Callable = generate_observation,
    rng=None,
    retailers: Sequence[str] = RETAILERS,
    sleep: Callable[[float], None] = time.sleep,
) -> PriceSyncResult:
    """Price every retailer for the first ``item_limit`` available sets.

    Writes one observation per (set, retailer), a deal for each one that
    qualifies, then sweeps stale deals. ``throttle`` seconds are slept after
    every retailer when positive.
    """
    logger.info("job=prices status=running")
    deals_found = 0
    sample_deals: List[DealSummary] = []
    try:
        items = _load_price_candidates(db, fetcher)
        batch = items[:item_limit]
        logger.info("Processing %d of %d sets across %d retailers", len(batch), len(items), len(retailers))

        for item in batch:
            for retailer in retailers:
                observation = generate(item, retailer, rng=rng)
                crud.upsert_price(db, observation)
                deal = evaluate(observation)
                if deal is not None:
                    crud.upsert_deal(db, deal)
                    deals_found += 1
                    if len(sample_deals) < SAMPLE_DEALS:
                        sample_deals.append(_summarize_deal(deal))
                if throttle > 0:
                    sleep(throttle)

        removed = sweep_stale_deals(db)
    except Exception as e:
        logger.exception("job=prices status=failed after %d deals: %s", deals_found, e)
        raise SyncJobError("price sync", e) from e

    logger.info("job=prices status=completed deals=%d removed=%d", deals_found, removed)
    return PriceSyncResult(
        catalog_size=len(items),
        items_processed=len(batch),
        deals_found=deals_found,
        deals_removed=removed,
        sample_deals=sample_deals,
    )


def health_check(db: Session) -> HealthResult:
    return HealthResult(catalog_size=crud.count_catalog(db), deals_count=crud.count_deals(db))
