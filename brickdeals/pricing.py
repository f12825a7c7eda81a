# brickdeals/pricing.py
"""Simulated per-retailer price observations.

Stands in for a real retailer scraper: one catalog item and one retailer in,
one observation out. Randomness comes from an injectable ``random.Random``.
"""
import random
from datetime import datetime
from typing import Optional

from .catalog import clean_set_number
from .schemas import CatalogItemData, PriceObservationData
from .utils import round_half_up, utc_now

MSRP_RETAILER = "lego"

RETAILER_URLS = {
    "lego": "https://www.lego.com/en-us/product/{set_num}",
    "amazon": "https://www.amazon.com/s?k=LEGO+{set_num}",
    "walmart": "https://www.walmart.com/search?q=LEGO+{set_num}",
    "target": "https://www.target.com/s?searchTerm=LEGO+{set_num}",
    "best_buy": "https://www.bestbuy.com/site/searchpage.jsp?st=LEGO+{set_num}",
    "kohls": "https://www.kohls.com/search.jsp?search=LEGO+{set_num}",
    "meijer": "https://www.meijer.com/search.html?searchTerm=LEGO+{set_num}",
    "fred_meyer": "https://www.fredmeyer.com/search?query=LEGO+{set_num}",
    "gamestop": "https://www.gamestop.com/search/?q=LEGO+{set_num}",
    "entertainment_earth": "https://www.entertainmentearth.com/s/?query1=LEGO+{set_num}",
    "shop_disney": "https://www.shopdisney.com/search?q=LEGO+{set_num}",
    "toys_r_us": "https://www.toysrus.com/search?q=LEGO+{set_num}",
    "barnes_noble": "https://www.barnesandnoble.com/s/LEGO+{set_num}",
    "sams_club": "https://www.samsclub.com/s/LEGO+{set_num}",
    "costco": "https://www.costco.com/CatalogSearch?dept=All&keyword=LEGO+{set_num}",
    "walgreens": "https://www.walgreens.com/search/results.jsp?Ntt=LEGO+{set_num}",
}

RETAILERS = tuple(RETAILER_URLS)

DISCOUNT_CHANCE = 0.7
DISCOUNT_RANGE = (10, 40)
DEEP_DISCOUNT_CHANCE = 0.1
DEEP_DISCOUNT_RANGE = (40, 60)
OUT_OF_STOCK_CHANCE = 0.15

_rng = random.Random()


def retailer_url(retailer: str, set_id: str) -> str:
    template = RETAILER_URLS.get(retailer)
    if template is None:
        return ""
    return template.format(set_num=clean_set_number(set_id))


def draw_discount(retailer: str, rng: random.Random) -> int:
    if retailer == MSRP_RETAILER:
        return 0
    discount = 0
    if rng.random() < DISCOUNT_CHANCE:
        discount = rng.randint(*DISCOUNT_RANGE)
    # drawn independently of the first roll; wins when it fires
    if rng.random() < DEEP_DISCOUNT_CHANCE:
        discount = rng.randint(*DEEP_DISCOUNT_RANGE)
    return discount


def generate_observation(
    item: CatalogItemData,
    retailer: str,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> PriceObservationData:
    rng = rng or _rng
    reference = item.price
    discount = draw_discount(retailer, rng)
    current = round_half_up(reference * (1 - discount / 100), 2)
    in_stock = item.availability == "available" and rng.random() > OUT_OF_STOCK_CHANCE

    return PriceObservationData(
        set_id=item.set_id,
        retailer=retailer,
        set_name=item.name,
        current_price=current,
        original_price=reference,
        url=retailer_url(retailer, item.set_id),
        in_stock=in_stock,
        last_updated=now or utc_now(),
        theme=item.theme,
        image_url=item.image_url,
        pieces=item.pieces,
    )
