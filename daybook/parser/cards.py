"""
Media card parsing.

A card block is a flat ``key: value`` list inside a ``card-<kind>`` fence.
"""

import logging
import math
import re
from typing import Any, Dict, Optional, Union


CARD_KINDS = ("movie", "tv", "book", "music")

CARD_FIELDS = {
    "movie": (
        "id", "title", "release_date", "region", "rating", "runtime",
        "genres", "overview", "poster", "source", "external_url",
    ),
    "tv": (
        "id", "title", "release_date", "region", "rating",
        "genres", "overview", "poster", "source", "external_url",
    ),
    "book": (
        "id", "title", "release_date", "author", "publisher", "isbn", "pages",
        "rating", "genres", "overview", "poster", "external_url",
    ),
    "music": (
        "title", "author", "album", "duration", "genres", "poster", "url",
    ),
}

NUMERIC_FIELDS = ("id", "rating", "runtime", "duration", "pages")

LEADING_NUMBER_PATTERN = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')


def parse_number(value: str) -> Optional[Union[int, float]]:
    """
    Parse the leading number of a string ("8.5/10" -> 8.5).

    Integral values are returned as int. Returns None when the string does
    not start with a finite number.
    """
    match = LEADING_NUMBER_PATTERN.match(value.strip())
    if not match:
        return None
    number = float(match.group(0))
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def parse_key_values(content: str) -> Dict[str, str]:
    """
    Parse ``key: value`` lines; the first occurrence of a key wins.
    """
    fields: Dict[str, str] = {}
    for line in content.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key, value = key.strip(), value.strip()
        if key and value and key not in fields:
            fields[key] = value
    return fields


def parse_card(content: str, kind: str) -> Optional[Dict[str, Any]]:
    """
    Parse the body of a ``card-<kind>`` block.

    Args:
        content: Text inside the fence
        kind: One of ``CARD_KINDS``

    Returns:
        Field dictionary limited to the kind's keys, or None when the card
        has no title
    """
    raw = parse_key_values(content)
    if not raw.get("title"):
        logging.debug(f"Dropping card-{kind} block without a title")
        return None

    card: Dict[str, Any] = {}
    for name in CARD_FIELDS[kind]:
        value = raw.get(name)
        if value is None:
            continue
        if name in NUMERIC_FIELDS:
            number = parse_number(value)
            if number is not None:
                card[name] = number
            elif name == "id":
                card[name] = value
        else:
            card[name] = value
    return card
