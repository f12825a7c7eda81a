# tests/test_catalog.py
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from brickdeals.catalog import (
    CatalogFetcher,
    clean_set_number,
    estimate_price,
    normalize_set,
    theme_label,
)
from conftest import page_response, raw_set


def make_fetcher(session, **kwargs):
    kwargs.setdefault("api_key", "test-key")
    kwargs.setdefault("base_url", "https://rebrickable.test/api/v3")
    kwargs.setdefault("sleep", MagicMock())
    kwargs.setdefault("today", lambda: date(2026, 10, 19))
    return CatalogFetcher(session=session, **kwargs)


@pytest.mark.parametrize("raw", [
    raw_set(num_parts=19),
    raw_set(num_parts=None),
    raw_set(set_img_url=None),
    raw_set(set_img_url=""),
    raw_set(num_parts=40, name="Collectible Minifigures Series 25"),
    raw_set(num_parts=30, name="MINIFIG pack"),
    raw_set(year="unknown"),
    raw_set(theme_id="star-wars"),
    raw_set(num_parts="lots"),
    raw_set(set_num=10300),
    "10300-1",
])
def test_normalize_drops_filtered_entries(raw):
    assert normalize_set(raw) is None


def test_normalize_keeps_large_minifig_sets():
    item = normalize_set(raw_set(num_parts=120, name="Minifigure Display Frame"))
    assert item is not None
    assert item.pieces == 120


def test_normalize_skips_entries_without_set_number():
    assert normalize_set(raw_set(set_num=None)) is None


def test_normalize_maps_fields():
    raw = raw_set("75313-1", num_parts=6785, theme_id=158, year=2025)
    item = normalize_set(raw)
    assert item.set_id == "75313-1"
    assert item.theme == "Star Wars"
    assert item.theme_id == 158
    assert item.price == 746
    assert item.url == "https://www.lego.com/en-us/product/75313"
    assert item.availability == "available"
    assert item.raw_json == raw


def test_unknown_theme_gets_default_label():
    assert theme_label(99999) == "LEGO"
    assert theme_label(None) == "LEGO"
    assert normalize_set(raw_set(theme_id=None)).theme == "LEGO"


@pytest.mark.parametrize("pieces", [20, 50, 181, 182, 500, 10000])
def test_estimated_price_never_below_minimum(pieces):
    assert estimate_price(pieces) >= 20


def test_estimated_price_rounds_half_up():
    # 250 * 0.11 == 27.5
    assert estimate_price(250) == 28
    assert estimate_price(1000) == 110


def test_clean_set_number():
    assert clean_set_number("10300-1") == "10300"
    assert clean_set_number("21-100-1") == "21-100"
    assert clean_set_number("10300-2") == "10300-2"


def test_request_carries_year_window_and_auth():
    session = MagicMock()
    session.headers = {}
    session.get.return_value = page_response([raw_set()], next_url=None)
    fetcher = make_fetcher(session)

    fetcher.fetch_catalog()

    assert session.headers["Authorization"] == "key test-key"
    args, kwargs = session.get.call_args
    assert args[0] == "https://rebrickable.test/api/v3/lego/sets/"
    assert kwargs["params"] == {
        "min_year": 2023,
        "max_year": 2027,
        "page": 1,
        "page_size": 100,
        "ordering": "-year",
    }


def test_pagination_stops_when_upstream_has_no_next_page():
    session = MagicMock()
    session.get.side_effect = [
        page_response([raw_set("1-1"), raw_set("2-1")]),
        page_response([raw_set("3-1")], next_url=None),
    ]
    sleep = MagicMock()
    fetcher = make_fetcher(session, sleep=sleep)

    result = fetcher.fetch_catalog()

    assert [i.set_id for i in result.items] == ["1-1", "2-1", "3-1"]
    assert result.complete is True
    assert result.pages_fetched == 2
    sleep.assert_called_once_with(0.3)


def test_pagination_stops_on_empty_page():
    session = MagicMock()
    session.get.side_effect = [
        page_response([raw_set("1-1")]),
        page_response([]),
    ]
    result = make_fetcher(session).fetch_catalog()
    assert len(result.items) == 1
    assert result.complete is True


def test_pagination_respects_page_ceiling():
    session = MagicMock()
    session.get.side_effect = lambda *a, **kw: page_response([raw_set(f"{kw['params']['page']}-1")])
    fetcher = make_fetcher(session, max_pages=10)

    result = fetcher.fetch_catalog()

    assert session.get.call_count == 10
    assert len(result.items) == 10
    assert result.complete is False
    assert result.pages_fetched == 10


def test_http_error_truncates_and_flags_partial_result():
    session = MagicMock()
    session.get.side_effect = [
        page_response([raw_set("1-1")]),
        page_response([], ok=False, status=503),
    ]
    result = make_fetcher(session).fetch_catalog()

    assert [i.set_id for i in result.items] == ["1-1"]
    assert result.complete is False
    assert result.pages_fetched == 1
    assert session.get.call_count == 2


@pytest.mark.parametrize("body", [None, [], ["1-1"], "oops", {"results": "nope", "next": None}])
def test_unexpected_body_truncates_and_flags_partial_result(body):
    bad = MagicMock()
    bad.ok = True
    bad.status_code = 200
    bad.json.return_value = body
    session = MagicMock()
    session.get.side_effect = [page_response([raw_set("1-1")]), bad]

    result = make_fetcher(session).fetch_catalog()

    assert [i.set_id for i in result.items] == ["1-1"]
    assert result.complete is False
    assert result.pages_fetched == 1


def test_malformed_entry_does_not_stop_the_page():
    entries = [raw_set("1-1"), raw_set("2-1", year="unknown"), raw_set("3-1")]
    session = MagicMock()
    session.get.side_effect = [
        page_response(entries),
        page_response([raw_set("4-1", theme_id="x"), raw_set("5-1")], next_url=None),
    ]

    result = make_fetcher(session).fetch_catalog()

    assert [i.set_id for i in result.items] == ["1-1", "3-1", "5-1"]
    assert result.complete is True


def test_transport_error_truncates_without_raising():
    session = MagicMock()
    session.get.side_effect = [
        page_response([raw_set("1-1"), raw_set("2-1")]),
        requests.ConnectionError("connection reset"),
    ]
    result = make_fetcher(session).fetch_catalog()

    assert len(result.items) == 2
    assert result.complete is False


def test_first_page_failure_yields_empty_partial_result():
    session = MagicMock()
    session.get.side_effect = requests.Timeout("slow")
    result = make_fetcher(session).fetch_catalog()
    assert result.items == []
    assert result.complete is False
    assert result.pages_fetched == 0


def test_fetched_items_satisfy_piece_and_image_rules():
    entries = [
        raw_set("1-1", num_parts=5),
        raw_set("2-1", num_parts=25),
        raw_set("3-1", set_img_url=None),
        raw_set("4-1", num_parts=45, name="Minifig Bundle"),
        raw_set("5-1", num_parts=300),
    ]
    session = MagicMock()
    session.get.return_value = page_response(entries, next_url=None)

    result = make_fetcher(session).fetch_catalog()

    assert [i.set_id for i in result.items] == ["2-1", "5-1"]
    assert all(i.pieces >= 20 and i.image_url for i in result.items)
    assert all(i.price >= 20 for i in result.items)
