"""Tests for col_compare.model — comparable salary arithmetic and row building."""

from __future__ import annotations

import pytest

from col_compare.model import (
    compute_comparable_salary,
    ensure_baseline,
    format_currency,
    generate_comparison_data,
    select_locations,
)
from col_compare.schemas import INDEX_FACTORS


class TestComputeComparableSalary:
    def test_scales_by_index_ratio(self) -> None:
        assert compute_comparable_salary(100000, 100, 150) == pytest.approx(150000)

    def test_cheaper_target_lowers_salary(self) -> None:
        result = compute_comparable_salary(100000, 138.5, 92.1)
        assert result == pytest.approx(100000 * 92.1 / 138.5)
        assert result < 100000

    def test_zero_baseline_returns_income(self) -> None:
        assert compute_comparable_salary(85000, 0, 120) == 85000

    def test_zero_income(self) -> None:
        assert compute_comparable_salary(0, 100, 150) == 0


class TestGenerateComparisonData:
    def test_rows_follow_selection_order(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["NY", "CA", "TX"])
        rows = generate_comparison_data(selected, "CA", 100000)
        assert [row.code for row in rows] == ["NY", "CA", "TX"]

    def test_baseline_row_keeps_income(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["CA", "TX"])
        rows = generate_comparison_data(selected, "CA", 100000)
        assert rows[0].comparable_overall == pytest.approx(100000)

    def test_each_factor_uses_its_own_index(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["CA", "TX"])
        texas = generate_comparison_data(selected, "CA", 100000)[1]
        assert texas.comparable_by_factor.housing == pytest.approx(100000 * 81.7 / 202.6)
        assert texas.comparable_by_factor.groceries == pytest.approx(100000 * 92.1 / 138.5)
        assert texas.comparable_overall == texas.comparable_by_factor.overall
        assert set(texas.comparable_by_factor.to_dict()) == set(INDEX_FACTORS)

    def test_baseline_matched_by_name(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["CA", "TX"])
        rows = generate_comparison_data(selected, "Texas", 50000)
        assert rows[1].comparable_overall == pytest.approx(50000)

    def test_missing_baseline_yields_no_rows(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["CA", "TX"])
        assert generate_comparison_data(selected, "NY", 100000) == []

    def test_zero_baseline_index_passes_income_through(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["ZZ", "CA"])
        rows = generate_comparison_data(selected, "ZZ", 70000)
        assert [row.comparable_overall for row in rows] == [70000, 70000]

    def test_city_rows_use_name_as_code(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["Seattle, WA", "Austin, TX"], "city")
        rows = generate_comparison_data(selected, "Seattle, WA", 100000)
        assert rows[1].code == "Austin, TX"
        assert rows[1].comparable_overall == pytest.approx(100000 * 67.8 / 86.2)

    def test_rows_carry_location_data(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["CA", "TX"])
        rows = generate_comparison_data(selected, "CA", 100000)
        assert rows[1].name == "Texas"
        assert rows[1].indices is selected[1].indices
        assert rows[1].additional_data.taxes.income_tax == 0.0


class TestSelectLocations:
    def test_unknown_identifiers_skipped(self, sample_dataset, caplog) -> None:
        selected = select_locations(sample_dataset, ["CA", "QQ", "TX"])
        assert [loc.code for loc in selected] == ["CA", "TX"]
        assert "QQ" in caplog.text

    def test_duplicates_dropped(self, sample_dataset) -> None:
        selected = select_locations(sample_dataset, ["CA", "California", "TX"])
        assert [loc.code for loc in selected] == ["CA", "TX"]

    def test_type_scopes_lookup(self, sample_dataset) -> None:
        assert select_locations(sample_dataset, ["CA"], "city") == []


class TestEnsureBaseline:
    def test_keeps_selected_baseline(self) -> None:
        assert ensure_baseline(["CA", "TX"], "TX") == "TX"

    def test_falls_back_to_first(self) -> None:
        assert ensure_baseline(["CA", "TX"], "NY") == "CA"
        assert ensure_baseline(["CA", "TX"], None) == "CA"

    def test_empty_selection(self) -> None:
        assert ensure_baseline([], "CA") is None


class TestFormatCurrency:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, "$0"),
            (1234.4, "$1,234"),
            (1234.5, "$1,235"),
            (2.5, "$3"),
            (1_000_000, "$1,000,000"),
            (-1234.4, "-$1,234"),
            (-0.4, "-$0"),
            (66498.19, "$66,498"),
        ],
    )
    def test_whole_dollars(self, amount, expected) -> None:
        assert format_currency(amount) == expected
