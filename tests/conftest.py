from __future__ import annotations

import pytest

from col_compare.data_sources import save_dataset
from col_compare.schemas import (
    AdditionalData,
    Dataset,
    DatasetMeta,
    Indices,
    LocationData,
    TaxRates,
)


def make_indices(overall: float, **overrides: float) -> Indices:
    values = dict(
        overall=overall,
        housing=overall,
        utilities=overall,
        groceries=overall,
        transportation=overall,
        healthcare=overall,
        miscellaneous=overall,
    )
    values.update(overrides)
    return Indices(**values)


def make_state(code: str, name: str, overall: float, income_tax: float = 5.0, **overrides: float) -> LocationData:
    return LocationData(
        code=code,
        name=name,
        type="state",
        indices=make_indices(overall, **overrides),
        additional_data=AdditionalData(
            taxes=TaxRates(income_tax=income_tax, property_tax=1.0, sales_tax=6.0),
            median_income=70000.0,
            unemployment_rate=3.5,
        ),
    )


def make_city(name: str, overall: float, **overrides: float) -> LocationData:
    return LocationData(
        name=name,
        type="city",
        state=name.split(",")[1].strip(),
        indices=make_indices(overall, **overrides),
        additional_data=AdditionalData(purchasing_power=120.0, cost_plus_rent=70.0),
    )


@pytest.fixture
def sample_dataset() -> Dataset:
    return Dataset(
        meta=DatasetMeta(source="Test Source", last_updated="2024-01-01"),
        states=[
            make_state("CA", "California", 138.5, income_tax=13.3, housing=202.6),
            make_state("TX", "Texas", 92.1, income_tax=0.0, housing=81.7),
            make_state("NY", "New York", 123.3, income_tax=10.9, housing=148.5),
            make_state("ZZ", "Zero Land", 0.0),
        ],
        cities=[
            make_city("Seattle, WA", 86.2),
            make_city("Austin, TX", 67.8),
        ],
    )


@pytest.fixture
def dataset_file(tmp_path, sample_dataset):
    path = tmp_path / "coli.json"
    save_dataset(sample_dataset, path)
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("COL_DATASET_PATH", "COL_SHARE_BASE_URL", "COL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
