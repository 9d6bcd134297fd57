"""Render comparison rows as terminal tables, JSON payloads and a bar chart."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import plotly.graph_objects as go

from .model import format_currency
from .schemas import INDEX_FACTORS, ComparisonRow

BASELINE_MARK = " (baseline)"
MISSING = "N/A"

BASELINE_COLOR = "rgba(54, 162, 235, 0.8)"
BASELINE_BORDER = "rgba(54, 162, 235, 1)"
TARGET_COLOR = "rgba(75, 192, 192, 0.6)"
TARGET_BORDER = "rgba(75, 192, 192, 1)"


def results_table(rows: Sequence[ComparisonRow], baseline_code: str) -> str:
    headers = ["Location"] + [f.capitalize() for f in INDEX_FACTORS] + ["Comparable Salary"]
    body = [
        [_label(row, baseline_code)]
        + [_number(row.indices.get(f)) for f in INDEX_FACTORS]
        + [format_currency(row.comparable_overall)]
        for row in rows
    ]
    return _render(headers, body)


def factor_table(rows: Sequence[ComparisonRow], baseline_code: str) -> str:
    by_factor = [row.comparable_by_factor.to_dict() for row in rows]
    headers = ["Location"] + [f.capitalize() for f in INDEX_FACTORS]
    body = [
        [_label(row, baseline_code)] + [format_currency(values[f]) for f in INDEX_FACTORS]
        for row, values in zip(rows, by_factor)
    ]
    return _render(headers, body)


def indicators_table(
    rows: Sequence[ComparisonRow], baseline_code: str, location_type: str = "state"
) -> str:
    label = "State" if location_type == "state" else "City"
    has_tax_data = any(row.additional_data.taxes for row in rows)
    if has_tax_data:
        headers = [
            label,
            "Income Tax Rate",
            "Property Tax Rate",
            "Sales Tax Rate",
            "Median Income",
            "Unemployment Rate",
        ]
    else:
        headers = [label, "Purchasing Power Index", "Cost + Rent Index"]

    body: List[List[str]] = []
    for row in rows:
        extra = row.additional_data
        if has_tax_data:
            taxes = extra.taxes
            body.append(
                [
                    _label(row, baseline_code),
                    _percent(taxes.income_tax if taxes else None),
                    _percent(taxes.property_tax if taxes else None),
                    _percent(taxes.sales_tax if taxes else None),
                    format_currency(extra.median_income) if extra.median_income else MISSING,
                    _percent(extra.unemployment_rate),
                ]
            )
        else:
            body.append(
                [
                    _label(row, baseline_code),
                    _number(extra.purchasing_power) if extra.purchasing_power else MISSING,
                    _number(extra.cost_plus_rent) if extra.cost_plus_rent else MISSING,
                ]
            )
    return _render(headers, body)


def rows_to_json(rows: Sequence[ComparisonRow]) -> List[Dict[str, Any]]:
    return [
        {
            "code": row.code,
            "name": row.name,
            "indices": row.indices.to_dict(),
            "additionalData": row.additional_data.to_dict(),
            "comparableOverall": row.comparable_overall,
            "comparableByFactor": row.comparable_by_factor.to_dict(),
        }
        for row in rows
    ]


def salary_chart(rows: Sequence[ComparisonRow], baseline_code: str) -> go.Figure:
    is_baseline = [row.code == baseline_code for row in rows]
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=[row.name for row in rows],
            y=[row.comparable_overall for row in rows],
            name="Comparable Salary",
            marker=dict(
                color=[BASELINE_COLOR if b else TARGET_COLOR for b in is_baseline],
                line=dict(
                    color=[BASELINE_BORDER if b else TARGET_BORDER for b in is_baseline],
                    width=1,
                ),
            ),
            text=[format_currency(row.comparable_overall) for row in rows],
            hovertemplate="%{x}<br>%{text}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Comparable Salary Comparison",
        showlegend=False,
        yaxis=dict(rangemode="tozero", tickprefix="$", tickformat=",.0f"),
        template="plotly_white",
    )
    return fig


def write_chart(fig: go.Figure, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(path), include_plotlyjs="cdn")
    return path


def _label(row: ComparisonRow, baseline_code: str) -> str:
    return row.name + (BASELINE_MARK if row.code == baseline_code else "")


def _number(value: float) -> str:
    return f"{value:g}"


def _percent(value: Optional[float]) -> str:
    # zero means not reported
    return f"{value:g}%" if value else MISSING


def _render(headers: List[str], body: List[List[str]]) -> str:
    widths = [len(h) for h in headers]
    for line in body:
        widths = [max(w, len(cell)) for w, cell in zip(widths, line)]

    def fmt(cells: List[str]) -> str:
        first, *rest = cells
        parts = [first.ljust(widths[0])] + [c.rjust(w) for c, w in zip(rest, widths[1:])]
        return "  ".join(parts).rstrip()

    rule = "  ".join("-" * w for w in widths)
    return "\n".join([fmt(headers), rule] + [fmt(line) for line in body])
