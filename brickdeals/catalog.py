# brickdeals/catalog.py
"""Paginated client for the Rebrickable set catalog.

Pagination is best effort: a failed page stops the walk and whatever was
collected so far is returned with ``complete=False``. There is no retry.
"""
import time
from datetime import date
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import ValidationError

from . import config
from .schemas import CatalogFetchResult, CatalogItemData
from .utils import logger, round_half_up

THEME_NAMES = MappingProxyType({
    158: "Star Wars",
    1: "Technic",
    252: "Ideas",
    435: "Architecture",
    52: "City",
    577: "Marvel Super Heroes",
    494: "Friends",
    246: "Creator",
    576: "DC Super Heroes",
    504: "Harry Potter",
    592: "Ninjago",
    610: "Speed Champions",
    209: "Disney",
    720: "Icons",
    667: "Botanical Collection",
    608: "Super Mario",
    573: "Minecraft",
    697: "Art",
    503: "Duplo",
})
DEFAULT_THEME = "LEGO"

MIN_PIECES = 20
MINIFIG_MAX_PIECES = 50
PRICE_PER_PIECE = 0.11
MIN_REFERENCE_PRICE = 20


def clean_set_number(set_id: str) -> str:
    """'10300-1' -> '10300'; retailer search pages don't know the variant suffix."""
    return set_id[:-2] if set_id.endswith("-1") else set_id


def estimate_price(pieces: int) -> int:
    return max(round_half_up(pieces * PRICE_PER_PIECE), MIN_REFERENCE_PRICE)


def theme_label(theme_id: Optional[int]) -> str:
    return THEME_NAMES.get(theme_id, DEFAULT_THEME)


def normalize_set(raw: Dict[str, Any]) -> Optional[CatalogItemData]:
    """Map one raw Rebrickable entry to a catalog item, or None if it is filtered out."""
    if not isinstance(raw, dict):
        logger.warning("Skipping malformed catalog entry: %r", raw)
        return None
    image_url = raw.get("set_img_url")
    pieces = raw.get("num_parts") or 0
    name = raw.get("name") or ""
    set_id = raw.get("set_num")

    if not isinstance(pieces, int) or not isinstance(name, str):
        logger.warning("Skipping malformed catalog entry: %r", raw)
        return None
    if not image_url or pieces < MIN_PIECES:
        return None
    # minifigure packs, gear and books come through with few parts
    if pieces < MINIFIG_MAX_PIECES and "minifig" in name.lower():
        return None
    if not set_id or not name:
        logger.warning("Skipping malformed catalog entry: %r", raw)
        return None

    theme_id = raw.get("theme_id")
    try:
        return CatalogItemData(
            set_id=set_id,
            name=name,
            image_url=image_url,
            url=f"https://www.lego.com/en-us/product/{clean_set_number(str(set_id))}",
            theme=theme_label(theme_id) if isinstance(theme_id, int) else DEFAULT_THEME,
            theme_id=theme_id,
            pieces=pieces,
            year=raw.get("year"),
            price=estimate_price(pieces),
            availability="available",
            raw_json=raw,
        )
    except ValidationError as e:
        logger.warning("Skipping malformed catalog entry %r: %s", raw, e)
        return None


class CatalogFetcher:
    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        max_pages: int = None,
        page_size: int = None,
        page_delay: float = None,
        timeout: float = None,
        session: requests.Session = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ):
        self.api_key = config.REBRICKABLE_API_KEY if api_key is None else api_key
        self.base_url = (base_url or config.REBRICKABLE_BASE_URL).rstrip("/")
        self.max_pages = max_pages or config.CATALOG_MAX_PAGES
        self.page_size = page_size or config.CATALOG_PAGE_SIZE
        self.page_delay = config.CATALOG_PAGE_DELAY if page_delay is None else page_delay
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"key {self.api_key}",
            "Accept": "application/json",
        })
        self._sleep = sleep
        self._today = today

    def year_window(self):
        current_year = self._today().year
        return current_year - 3, current_year + 1

    def page_params(self, page: int) -> Dict[str, Any]:
        min_year, max_year = self.year_window()
        return {
            "min_year": min_year,
            "max_year": max_year,
            "page": page,
            "page_size": self.page_size,
            "ordering": "-year",
        }

    def fetch_catalog(self) -> CatalogFetchResult:
        logger.info("Fetching sets from Rebrickable API...")
        url = f"{self.base_url}/lego/sets/"
        items: List[CatalogItemData] = []
        complete = False
        pages_fetched = 0
        page = 1

        while page <= self.max_pages:
            logger.info("Fetching Rebrickable page %d...", page)
            try:
                resp = self.session.get(url, params=self.page_params(page), timeout=self.timeout)
            except requests.RequestException as e:
                logger.error("Rebrickable page %d failed: %s", page, e)
                break
            if not resp.ok:
                logger.error("Rebrickable API error on page %d: %s", page, resp.status_code)
                break
            try:
                data = resp.json()
            except ValueError as e:
                logger.error("Rebrickable page %d returned invalid JSON: %s", page, e)
                break

            if not isinstance(data, dict) or not isinstance(data.get("results") or [], list):
                logger.error("Rebrickable page %d returned an unexpected body: %.200r", page, data)
                break

            pages_fetched += 1
            results = data.get("results") or []
            if not results:
                logger.info("No more results from Rebrickable")
                complete = True
                break

            for raw in results:
                item = normalize_set(raw)
                if item is not None:
                    items.append(item)
            logger.info("Page %d: fetched %d sets, total so far: %d", page, len(results), len(items))

            if not data.get("next"):
                logger.info("Reached last page of Rebrickable results")
                complete = True
                break

            if page == self.max_pages:
                logger.warning("Stopped at page ceiling (%d) with more pages upstream", self.max_pages)
                break
            page += 1
            # stay under the upstream's implicit rate limit
            self._sleep(self.page_delay)

        logger.info("Total sets fetched from Rebrickable: %d (complete=%s)", len(items), complete)
        return CatalogFetchResult(items=items, complete=complete, pages_fetched=pages_fetched)
