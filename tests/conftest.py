# tests/conftest.py
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from brickdeals import models  # noqa: F401 register tables
from brickdeals.db import Base
from brickdeals.schemas import CatalogItemData, PriceObservationData


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


def make_item(set_id="10300-1", **overrides):
    data = {
        "set_id": set_id,
        "name": f"Set {set_id}",
        "image_url": f"https://cdn.rebrickable.com/media/sets/{set_id}.jpg",
        "url": f"https://www.lego.com/en-us/product/{set_id}",
        "theme": "Icons",
        "theme_id": 720,
        "pieces": 1000,
        "year": 2024,
        "price": 110,
        "availability": "available",
    }
    data.update(overrides)
    return CatalogItemData(**data)


def make_observation(set_id="10300-1", retailer="amazon", **overrides):
    data = {
        "set_id": set_id,
        "retailer": retailer,
        "set_name": f"Set {set_id}",
        "current_price": 80.0,
        "original_price": 100.0,
        "url": "",
        "in_stock": True,
        "last_updated": datetime(2026, 10, 19, 12, 0, 0),
        "theme": "Icons",
        "image_url": "https://img",
        "pieces": 900,
    }
    data.update(overrides)
    return PriceObservationData(**data)


def raw_set(set_num="10300-1", num_parts=1000, **overrides):
    data = {
        "set_num": set_num,
        "name": f"Set {set_num}",
        "year": 2025,
        "theme_id": 158,
        "num_parts": num_parts,
        "set_img_url": f"https://cdn.rebrickable.com/media/sets/{set_num}.jpg",
    }
    data.update(overrides)
    return data


def page_response(results, next_url="https://rebrickable.com/api/v3/lego/sets/?page=2", ok=True, status=200):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status
    resp.json.return_value = {"results": results, "next": next_url}
    return resp
