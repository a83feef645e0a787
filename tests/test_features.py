from __future__ import annotations

import pytest

from kenyaprop.core.normalizer import parse_number, parse_size
from kenyaprop.core.schema import Size


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3", 3),
        ("3 bedrooms", 3),
        (" 4", 4),
        (2, 2),
        (2.7, 2),
        ("beds: 3", None),
        ("three", None),
        ("", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected


@pytest.mark.parametrize(
    "text, value, unit",
    [
        ("1,200 sqft", 1200.0, "sqft"),
        ("950 sq ft", 950.0, "sqft"),
        ("120 sq. m", 120.0, "sqm"),
        ("120SQM", 120.0, "sqm"),
        ("0.5 Acres", 0.5, "acres"),
        ("Plot size: 1 acre", 1.0, "acre"),
        ("2 hectares", 2.0, "hectares"),
    ],
)
def test_parse_size(text, value, unit):
    s = parse_size(text)
    assert s.value == value
    assert s.unit == unit


@pytest.mark.parametrize("text", [None, "", "spacious", "50 x 100", "sqm"])
def test_parse_size_no_match(text):
    assert parse_size(text) == Size(value=None, unit=None)
