# brickdeals/deals.py
from typing import Optional

from . import config
from .schemas import DealData, PriceObservationData
from .utils import round_half_up


def percent_off(original_price: float, current_price: float) -> int:
    if original_price <= 0:
        return 0
    return round_half_up((original_price - current_price) / original_price * 100)


def evaluate(observation: PriceObservationData) -> Optional[DealData]:
    """Return the deal for an observation, or None when it doesn't qualify.

    A deal needs at least DEAL_MIN_PERCENT_OFF off the reference price and
    the retailer must have it in stock.
    """
    pct = percent_off(observation.original_price, observation.current_price)
    if pct < config.DEAL_MIN_PERCENT_OFF or not observation.in_stock:
        return None
    return DealData(
        **observation.model_dump(),
        percent_off=pct,
        savings=round_half_up(observation.original_price - observation.current_price, 2),
    )
