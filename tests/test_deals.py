# tests/test_deals.py
import pytest

from brickdeals.deals import evaluate, percent_off
from conftest import make_observation


@pytest.mark.parametrize("original,current,in_stock,qualifies", [
    (100.0, 90.0, True, True),
    (100.0, 90.5, True, True),    # 9.5% rounds up to 10
    (100.0, 90.6, True, False),   # 9.4% rounds down to 9
    (100.0, 50.0, False, False),
    (100.0, 100.0, True, False),
    (100.0, 110.0, True, False),  # listed above reference
    (0.0, 0.0, True, False),
])
def test_deal_iff_discount_and_stock(original, current, in_stock, qualifies):
    obs = make_observation(original_price=original, current_price=current, in_stock=in_stock)
    assert (evaluate(obs) is not None) is qualifies


def test_deal_fields_are_consistent():
    obs = make_observation(original_price=119.0, current_price=83.3)
    deal = evaluate(obs)
    assert deal.percent_off == 30
    assert deal.savings == 35.7
    assert deal.doc_id == obs.doc_id
    assert deal.last_updated == obs.last_updated
    assert deal.retailer == obs.retailer


def test_percent_off_guards_zero_reference():
    assert percent_off(0, 0) == 0
