# brickdeals/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime

Availability = Literal["available", "coming_soon", "sold_out", "retiring_soon"]


class CatalogItemData(BaseModel):
    set_id: str = Field(..., max_length=255)
    name: str
    image_url: str
    url: str
    theme: str = "LEGO"
    theme_id: Optional[int] = None
    pieces: Optional[int] = None
    year: Optional[int] = None
    price: float = Field(..., ge=0)
    availability: Availability = "available"
    raw_json: Optional[dict] = None


class PriceObservationData(BaseModel):
    set_id: str
    retailer: str
    set_name: Optional[str] = None
    current_price: float
    original_price: float = Field(..., ge=0)
    url: str = ""
    in_stock: bool
    last_updated: datetime
    theme: Optional[str] = None
    image_url: Optional[str] = None
    pieces: Optional[int] = None

    @property
    def doc_id(self) -> str:
        return f"{self.set_id}_{self.retailer}"


class DealData(PriceObservationData):
    percent_off: int
    savings: float


class CatalogFetchResult(BaseModel):
    items: List[CatalogItemData] = Field(default_factory=list)
    # False when pagination stopped on an error or at the page ceiling
    complete: bool = True
    pages_fetched: int = 0


class ThemeCount(BaseModel):
    name: str
    count: int


class CatalogItemSummary(BaseModel):
    set_id: str
    name: str
    price: float
    theme: Optional[str]
    pieces: Optional[int]
    year: Optional[int]
    image_url: Optional[str]


class CatalogSyncResult(BaseModel):
    item_count: int
    complete: bool
    top_themes: List[ThemeCount]
    sample_items: List[CatalogItemSummary]


class DealSummary(BaseModel):
    set_id: str
    set_name: Optional[str]
    retailer: str
    original_price: float
    current_price: float
    percent_off: int
    savings: float


class PriceSyncResult(BaseModel):
    catalog_size: int
    items_processed: int
    deals_found: int
    deals_removed: int
    sample_deals: List[DealSummary]


class HealthResult(BaseModel):
    catalog_size: int
    deals_count: int


class CatalogItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    set_id: str
    name: Optional[str]
    image_url: Optional[str]
    url: Optional[str]
    theme: Optional[str]
    theme_id: Optional[int]
    pieces: Optional[int]
    year: Optional[int]
    price: Optional[float]
    availability: Optional[str]
    last_updated: Optional[datetime]


class PriceObservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    doc_id: str
    set_id: str
    retailer: str
    set_name: Optional[str]
    current_price: Optional[float]
    original_price: Optional[float]
    url: Optional[str]
    in_stock: Optional[bool]
    theme: Optional[str]
    image_url: Optional[str]
    pieces: Optional[int]
    last_updated: Optional[datetime]


class DealOut(PriceObservationOut):
    percent_off: Optional[int]
    savings: Optional[float]


class DealFilter(BaseModel):
    min_discount: Optional[int] = None
    max_discount: Optional[int] = None
    retailer: Optional[str] = None
    theme: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock_only: bool = False
