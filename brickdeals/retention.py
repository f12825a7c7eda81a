# brickdeals/retention.py
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .models import Deal
from .utils import chunked, logger, utc_now

DEFAULT_HORIZON = timedelta(hours=config.DEAL_RETENTION_HOURS)


def sweep_stale_deals(
    db: Session,
    horizon: timedelta = DEFAULT_HORIZON,
    now: Optional[datetime] = None,
    chunk_size: int = config.WRITE_CHUNK_SIZE,
) -> int:
    """Delete deals whose last update is older than ``now - horizon``.

    Deletes go out in chunks, one commit each. Returns how many were removed.
    """
    cutoff = (now or utc_now()) - horizon
    stale_ids = list(db.scalars(select(Deal.id).where(Deal.last_updated < cutoff)))
    if not stale_ids:
        logger.info("No old deals to clean")
        return 0

    removed = 0
    for chunk in chunked(stale_ids, chunk_size):
        try:
            db.execute(delete(Deal).where(Deal.id.in_(chunk)))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Deal cleanup failed after removing %d of %d", removed, len(stale_ids))
            raise
        removed += len(chunk)

    logger.info("Cleaned %d old deals", removed)
    return removed
