# brickdeals/utils.py
"""Shared utilities: logging, rounding, chunking and clock helpers."""
import os
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, List, Sequence, TypeVar
from dotenv import load_dotenv

load_dotenv()

T = TypeVar("T")


def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("brick-deals")


def round_half_up(value: float, ndigits: int = 0):
    """Round like a cash register: halves go away from zero.

    Returns an int when ``ndigits`` is 0, otherwise a float.
    """
    exp = Decimal(1).scaleb(-ndigits)
    rounded = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    return int(rounded) if ndigits == 0 else float(rounded)


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def utc_now() -> datetime:
    # naive UTC so comparisons behave the same on SQLite and PostgreSQL
    return datetime.now(timezone.utc).replace(tzinfo=None)
