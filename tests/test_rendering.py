"""
Dashboard Tests - Rendering Helper Tests.
"""

from datetime import date
from types import SimpleNamespace

import pytest
from starlette.requests import Request

from medinventory_ui.metrics_middleware import PrometheusMiddleware
from medinventory_ui.rendering import (
    DEFAULT_TAB,
    dashboard_url,
    long_date,
    month_label,
    month_name,
    parse_day,
    parse_period,
    resolve_tab,
    year_options,
)

TODAY = date(2024, 5, 15)


@pytest.mark.parametrize("tab", ["medicines", "stock-in", "dispense", "reports", "month-close", "analytics"])
def test_resolve_known_tabs(tab: str) -> None:
    assert resolve_tab(tab) == tab


@pytest.mark.parametrize("tab", [None, "", "settings", "DASHBOARD"])
def test_resolve_unknown_tab_falls_back(tab) -> None:
    assert resolve_tab(tab) == DEFAULT_TAB


def test_dashboard_url() -> None:
    assert dashboard_url("reports", report="monthly", year=2024, month=None) == (
        "/dashboard?tab=reports&report=monthly&year=2024"
    )


def test_filters() -> None:
    assert month_name(2) == "February"
    assert month_name(13) == ""
    assert month_label(2024, 12) == "December 2024"
    assert long_date("2024-05-03T10:00:00") == "May 3, 2024"
    assert long_date("") == ""
    assert long_date("yesterday") == "yesterday"


def test_parse_day() -> None:
    assert parse_day("2024-02-29", TODAY) == "2024-02-29"
    assert parse_day("2024-02-30", TODAY) == "2024-05-15"
    assert parse_day(None, TODAY) == "2024-05-15"


@pytest.mark.parametrize(
    "params,expected",
    [
        ({}, (2024, 5)),
        ({"year": "2023", "month": "12"}, (2023, 12)),
        ({"year": "2023", "month": "13"}, (2024, 5)),
        ({"year": "abc", "month": "1"}, (2024, 5)),
    ],
)
def test_parse_period(params, expected) -> None:
    assert parse_period(params, TODAY) == expected


def test_year_options_span_to_current_year() -> None:
    years = year_options(TODAY)

    assert years[0] == 2020
    assert years[-1] == 2024


def make_request(path: str, route=None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("test", 80),
        "path": path,
        "query_string": b"",
        "headers": [],
    }
    if route is not None:
        scope["route"] = route
    return Request(scope)


def test_metrics_endpoint_label_uses_route_template() -> None:
    route = SimpleNamespace(path_format="/medicines/{medicine_id}/delete")

    label = PrometheusMiddleware.endpoint_label(make_request("/medicines/abc-1/delete", route))

    assert label == "/medicines/{medicine_id}/delete"


def test_metrics_endpoint_label_without_route_collapses_ids() -> None:
    assert PrometheusMiddleware.endpoint_label(make_request("/unknown/17")) == "/unknown/{id}"
    assert PrometheusMiddleware.collapse_ids("/dashboard") == "/dashboard"
