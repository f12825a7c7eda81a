# brickdeals/api/routes.py
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
from .. import config, crud, schemas
from ..db import get_db
from ..services import SyncJobError, health_check, run_catalog_sync, run_price_sync
from ..utils import logger

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        counts = health_check(db)
    except SQLAlchemyError as e:
        logger.exception("Health check failed: %s", e)
        return JSONResponse(status_code=500, content={"status": "error", "error": str(e)})
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.SERVICE_VERSION,
        "catalog": {"size": counts.catalog_size, "source": "Rebrickable API"},
        "deals": {"count": counts.deals_count},
    }


@router.post("/sync/catalog")
def trigger_catalog_sync(db: Session = Depends(get_db)):
    logger.info("Manual catalog update triggered")
    try:
        result = run_catalog_sync(db)
    except SyncJobError as e:
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    if result.item_count == 0:
        return JSONResponse(
            status_code=502,
            content={"success": False, "error": "No sets fetched from Rebrickable API"},
        )
    return {
        "success": True,
        "message": f"Catalog updated with {result.item_count} sets from Rebrickable",
        **result.model_dump(),
    }


@router.post("/sync/prices")
def trigger_price_sync(db: Session = Depends(get_db)):
    logger.info("Manual price update triggered")
    try:
        result = run_price_sync(db, item_limit=config.MANUAL_PRICE_SYNC_ITEM_LIMIT, throttle=0)
    except SyncJobError as e:
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {
        "success": True,
        "message": f"Updated prices for {result.items_processed} sets. Found {result.deals_found} deals.",
        **result.model_dump(),
    }


@router.get("/deals", response_model=List[schemas.DealOut])
def deals(
    skip: int = 0,
    limit: int = Query(50, le=500),
    min_discount: int | None = Query(None),
    max_discount: int | None = Query(None),
    retailer: str | None = Query(None),
    theme: str | None = Query(None),
    min_price: float | None = Query(None),
    max_price: float | None = Query(None),
    in_stock_only: bool = False,
    db: Session = Depends(get_db)
):
    filters = schemas.DealFilter(
        min_discount=min_discount,
        max_discount=max_discount,
        retailer=retailer,
        theme=theme,
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock_only,
    )
    res = crud.list_deals(db, skip=skip, limit=limit, filters=filters.model_dump())
    return res["items"]


@router.get("/catalog/{set_id}", response_model=schemas.CatalogItemOut)
def get_catalog_item(set_id: str, db: Session = Depends(get_db)):
    obj = crud.get_catalog_item(db, set_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Set not found")
    return obj


@router.get("/deals/{doc_id}", response_model=schemas.DealOut)
def get_deal(doc_id: str, db: Session = Depends(get_db)):
    obj = crud.get_deal(db, doc_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Deal not found")
    return obj


@router.get("/prices/{doc_id}", response_model=schemas.PriceObservationOut)
def get_price(doc_id: str, db: Session = Depends(get_db)):
    obj = crud.get_price(db, doc_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Price not found")
    return obj
