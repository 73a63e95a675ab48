from __future__ import annotations

from sheetflow.core.results import Err, ErrorKind, Ok
from sheetflow.services.epics import build_row_object, map_row


def test_map_row_zips_headers_and_values() -> None:
    assert map_row(["A", "B", "C"], ["x", 1, False]) == {"A": "x", "B": 1, "C": False}


def test_map_row_short_row_maps_to_none() -> None:
    result = map_row(["A", "B"], ["x"])
    assert result == {"A": "x", "B": None}
    assert "B" in result


def test_map_row_ignores_extra_values() -> None:
    assert map_row(["A"], ["x", "y", "z"]) == {"A": "x"}


def test_map_row_keeps_header_order_and_last_duplicate() -> None:
    result = map_row(["B", "A", "B"], [1, 2, 3])
    assert result == {"B": 3, "A": 2}
    assert list(result) == ["B", "A"]


def test_map_row_renders_non_text_headers() -> None:
    assert map_row([2024.0, True], ["a", "b"]) == {"2024": "a", "true": "b"}


def test_map_row_empty_headers() -> None:
    assert map_row([], ["x"]) == {}


def test_map_row_fails_soft() -> None:
    assert map_row(None, ["x"]) == {}
    assert map_row(["A"], None) == {}
    assert map_row(["A", "B"], 5) == {}


def test_build_row_object_results() -> None:
    assert build_row_object(["A"], ["x"]) == Ok({"A": "x"})
    missing = build_row_object(None, None)
    assert isinstance(missing, Err) and missing.kind is ErrorKind.MISSING_INPUT
    invalid = build_row_object(["A"], 5)
    assert isinstance(invalid, Err) and invalid.kind is ErrorKind.INVALID_INPUT
