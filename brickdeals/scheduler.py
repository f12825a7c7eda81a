# brickdeals/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from . import config
from .db import session_scope
from .services import SyncJobError, run_catalog_sync, run_price_sync
from .utils import logger


def scheduled_catalog_sync():
    with session_scope() as db:
        try:
            run_catalog_sync(db)
        except SyncJobError as e:
            logger.error("Scheduled catalog sync failed, waiting for next tick: %s", e)


def scheduled_price_sync():
    with session_scope() as db:
        try:
            run_price_sync(db, item_limit=config.PRICE_SYNC_ITEM_LIMIT, throttle=config.PRICE_SYNC_THROTTLE)
        except SyncJobError as e:
            logger.error("Scheduled price sync failed, waiting for next tick: %s", e)


def create_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="America/New_York")
    # max_instances=1 keeps a slow run from overlapping its own next tick
    scheduler.add_job(scheduled_catalog_sync, 'interval', hours=config.CATALOG_SYNC_HOURS,
                      id="catalog_sync", max_instances=1, coalesce=True)
    scheduler.add_job(scheduled_price_sync, 'interval', minutes=config.PRICE_SYNC_MINUTES,
                      id="price_sync", max_instances=1, coalesce=True)
    return scheduler


scheduler = create_scheduler()


def start_scheduler():
    if scheduler.running:
        return
    scheduler.start()
    logger.info("Scheduler started")


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
