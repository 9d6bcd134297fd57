from __future__ import annotations

import json
import logging
import math
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import requests
from bs4 import BeautifulSoup

from .schemas import AdditionalData, Dataset, DatasetMeta, Indices, LocationData

logger = logging.getLogger(__name__)

BUNDLED_DATASET = Path(__file__).resolve().parent / "data" / "combined_coli.json"

MAJOR_CITIES = [
    "New York, NY", "Los Angeles, CA", "Chicago, IL", "Houston, TX",
    "Phoenix, AZ", "Philadelphia, PA", "San Antonio, TX", "San Diego, CA",
    "Dallas, TX", "San Jose, CA", "Austin, TX", "Jacksonville, FL",
    "Fort Worth, TX", "Columbus, OH", "Charlotte, NC", "San Francisco, CA",
    "Indianapolis, IN", "Seattle, WA", "Denver, CO", "Boston, MA",
    "El Paso, TX", "Detroit, MI", "Nashville, TN", "Portland, OR",
    "Memphis, TN", "Oklahoma City, OK", "Las Vegas, NV", "Louisville, KY",
    "Baltimore, MD", "Milwaukee, WI", "Albuquerque, NM", "Tucson, AZ",
    "Fresno, CA", "Sacramento, CA", "Mesa, AZ", "Kansas City, MO",
    "Atlanta, GA", "Long Beach, CA", "Colorado Springs, CO", "Raleigh, NC",
    "Miami, FL", "Virginia Beach, VA", "Omaha, NE", "Oakland, CA",
    "Minneapolis, MN", "Tulsa, OK", "Arlington, TX", "Tampa, FL",
    "New Orleans, LA", "Wichita, KS",
]


class DatasetError(ValueError):
    """The dataset file exists but cannot be read as a location dataset."""


def load_dataset(path: Optional[Union[str, Path]] = None) -> Dataset:
    path = Path(path) if path else BUNDLED_DATASET
    try:
        with path.open(encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Invalid JSON in dataset file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DatasetError(f"Dataset file {path} is not UTF-8: {exc}") from exc

    try:
        dataset = Dataset(
            meta=DatasetMeta.from_dict(raw.get("meta", {})),
            states=[LocationData.from_dict(item, "state") for item in raw.get("states", [])],
            cities=[LocationData.from_dict(item, "city") for item in raw.get("cities") or []],
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise DatasetError(f"Malformed dataset file {path}: {exc}") from exc

    logger.info(
        "loaded %d states and %d cities from %s",
        len(dataset.states),
        len(dataset.cities),
        path,
    )
    return dataset


def save_dataset(dataset: Dataset, path: Union[str, Path]) -> None:
    payload = {
        "meta": dataset.meta.to_dict(),
        "states": [loc.to_dict() for loc in dataset.states],
        "cities": [loc.to_dict() for loc in dataset.cities],
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    logger.info("wrote dataset to %s", path)


def search_locations(locations: Sequence[LocationData], term: str) -> List[LocationData]:
    """Case-insensitive substring search over name, code and state."""
    q = term.lower()
    return [
        loc
        for loc in locations
        if q in loc.name.lower()
        or (loc.code and q in loc.code.lower())
        or (loc.state and q in loc.state.lower())
    ]


def merge_cities(dataset: Dataset, cities: List[LocationData], source: str) -> Dataset:
    """Replace the dataset's cities, stamping the metadata with the refresh."""
    meta = replace(
        dataset.meta,
        source=f"{dataset.meta.source}; cities: {source}",
        last_updated=datetime.now(timezone.utc).date().isoformat(),
    )
    return Dataset(meta=meta, states=list(dataset.states), cities=list(cities))


class NumbeoClient:
    """Scrape US city indices from Numbeo's current cost-of-living rankings."""

    RANKINGS_URL = "https://www.numbeo.com/cost-of-living/rankings_current.jsp"
    SOURCE = "Numbeo"

    # Ratios of the overall index used where Numbeo publishes no category index
    DERIVED_FACTORS: Dict[str, float] = {
        "utilities": 0.95,
        "transportation": 0.90,
        "healthcare": 0.85,
        "miscellaneous": 0.88,
    }

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        target_cities: Optional[Sequence[str]] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.target_cities = list(target_cities or MAJOR_CITIES)

    def fetch_cities(self) -> List[LocationData]:
        response = self.session.get(
            self.RANKINGS_URL,
            headers={"User-Agent": "col-compare/0.1 (cost-of-living research)"},
            timeout=30,
        )
        response.raise_for_status()
        cities = self.parse_rankings(response.text)
        logger.info("parsed %d target cities from Numbeo rankings", len(cities))
        return cities

    def parse_rankings(self, html: str) -> List[LocationData]:
        soup = BeautifulSoup(html, "html.parser")
        cities: List[LocationData] = []
        for cell in soup.find_all("td", class_="cityOrCountryInIndicesTable"):
            label = cell.get_text(strip=True)
            if not label.endswith(", United States"):
                continue
            city_name = label[: -len(", United States")].strip()
            values = [_to_float(td.get_text(strip=True)) for td in cell.find_next_siblings("td")[:6]]
            if len(values) < 6 or any(v is None for v in values):
                logger.debug("skipping %s: incomplete index row", city_name)
                continue
            if not self._is_target(city_name):
                continue
            cities.append(self._build_city(city_name, values))
        return cities

    def _is_target(self, city_name: str) -> bool:
        numbeo_base = _base_name(city_name)
        for target in self.target_cities:
            target_base = _base_name(target)
            if (
                target_base == numbeo_base
                or target_base in numbeo_base
                or numbeo_base in target_base
            ):
                return True
        return False

    def _build_city(self, city_name: str, values: List[float]) -> LocationData:
        overall, rent, cost_plus_rent, groceries, _restaurant, purchasing_power = values
        derived = {
            factor: float(_round_half_up(overall * ratio))
            for factor, ratio in self.DERIVED_FACTORS.items()
        }
        parts = city_name.split(",")
        state = parts[1].strip() if len(parts) > 1 else "Unknown"
        return LocationData(
            name=city_name,
            type="city",
            state=state,
            indices=Indices(
                overall=overall,
                housing=rent,
                groceries=groceries,
                **derived,
            ),
            additional_data=AdditionalData(
                purchasing_power=purchasing_power,
                cost_plus_rent=cost_plus_rent,
            ),
        )


def _base_name(name: str) -> str:
    return name.lower().split(",")[0].strip()


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _to_float(value: Optional[str]) -> Optional[float]:
    if value in (None, "", "-"):
        return None
    try:
        return float(value.replace(",", ""))
    except ValueError:
        return None
