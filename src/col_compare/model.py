from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from .schemas import (
    INDEX_FACTORS,
    ComparableByFactor,
    ComparisonRow,
    Dataset,
    LocationData,
)

logger = logging.getLogger(__name__)


def compute_comparable_salary(
    income: float, baseline_index: float, target_index: float
) -> float:
    """Scale income by target_index / baseline_index.

    A zero baseline index leaves the income unchanged.
    """
    if baseline_index == 0:
        return income
    return income * target_index / baseline_index


def generate_comparison_data(
    selected_locations: Sequence[LocationData],
    baseline_code: str,
    income: float,
) -> List[ComparisonRow]:
    baseline = next(
        (
            loc
            for loc in selected_locations
            if loc.code == baseline_code or loc.name == baseline_code
        ),
        None,
    )
    if baseline is None:
        logger.debug("baseline %r not among selected locations", baseline_code)
        return []

    rows: List[ComparisonRow] = []
    for location in selected_locations:
        by_factor = ComparableByFactor(
            **{
                factor: compute_comparable_salary(
                    income,
                    baseline.indices.get(factor),
                    location.indices.get(factor),
                )
                for factor in INDEX_FACTORS
            }
        )
        rows.append(
            ComparisonRow(
                code=location.identifier,
                name=location.name,
                indices=location.indices,
                additional_data=location.additional_data,
                comparable_overall=by_factor.overall,
                comparable_by_factor=by_factor,
            )
        )
    return rows


def select_locations(
    dataset: Dataset, identifiers: Iterable[str], location_type: str = "state"
) -> List[LocationData]:
    selected: List[LocationData] = []
    seen = set()
    for identifier in identifiers:
        location = dataset.find(identifier, location_type)
        if location is None:
            logger.warning("unknown %s '%s' ignored", location_type, identifier)
            continue
        if location.identifier in seen:
            continue
        seen.add(location.identifier)
        selected.append(location)
    return selected


def ensure_baseline(identifiers: Sequence[str], baseline: Optional[str]) -> Optional[str]:
    if baseline in identifiers:
        return baseline
    return identifiers[0] if identifiers else None


def format_currency(amount: float) -> str:
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded.is_signed() else ""
    return f"{sign}${abs(rounded):,.0f}"
