from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

INDEX_FACTORS = (
    "overall",
    "housing",
    "utilities",
    "groceries",
    "transportation",
    "healthcare",
    "miscellaneous",
)

LOCATION_TYPES = ("state", "city")


@dataclass
class Indices:
    """Cost-of-living indices, 100 = national average."""

    overall: float
    housing: float
    utilities: float
    groceries: float
    transportation: float
    healthcare: float
    miscellaneous: float

    def get(self, factor: str) -> float:
        if factor not in INDEX_FACTORS:
            raise ValueError(f"unknown index factor '{factor}'")
        return getattr(self, factor)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Indices":
        missing = [name for name in INDEX_FACTORS if name not in raw]
        if missing:
            raise ValueError(f"indices missing factors: {', '.join(missing)}")
        return cls(**{name: float(raw[name]) for name in INDEX_FACTORS})

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in INDEX_FACTORS}


@dataclass
class TaxRates:
    income_tax: float  # top marginal state rate, percent
    property_tax: float  # average effective rate, percent
    sales_tax: float  # percent

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TaxRates":
        return cls(
            income_tax=float(raw.get("incomeTax", 0.0)),
            property_tax=float(raw.get("propertyTax", 0.0)),
            sales_tax=float(raw.get("salesTax", 0.0)),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "incomeTax": self.income_tax,
            "propertyTax": self.property_tax,
            "salesTax": self.sales_tax,
        }


@dataclass
class AdditionalData:
    """Secondary indicators; tax and income fields exist for states only."""

    taxes: Optional[TaxRates] = None
    median_income: Optional[float] = None
    unemployment_rate: Optional[float] = None
    purchasing_power: Optional[float] = None
    cost_plus_rent: Optional[float] = None

    _KEYS = {
        "median_income": "medianIncome",
        "unemployment_rate": "unemploymentRate",
        "purchasing_power": "purchasingPower",
        "cost_plus_rent": "costPlusRent",
    }

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "AdditionalData":
        raw = raw or {}
        taxes = TaxRates.from_dict(raw["taxes"]) if raw.get("taxes") else None
        values = {
            attr: _optional_float(raw.get(key)) for attr, key in cls._KEYS.items()
        }
        return cls(taxes=taxes, **values)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.taxes is not None:
            payload["taxes"] = self.taxes.to_dict()
        for attr, key in self._KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        return payload


@dataclass
class LocationData:
    name: str
    type: str
    indices: Indices
    additional_data: AdditionalData = field(default_factory=AdditionalData)
    code: Optional[str] = None  # states only
    state: Optional[str] = None  # cities only

    def __post_init__(self) -> None:
        if self.type not in LOCATION_TYPES:
            raise ValueError(f"location type must be one of {LOCATION_TYPES}")
        if not self.name:
            raise ValueError("location name must not be empty")

    @property
    def identifier(self) -> str:
        return self.code or self.name

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], default_type: str = "state") -> "LocationData":
        try:
            return cls(
                name=raw["name"],
                type=raw.get("type", default_type),
                indices=Indices.from_dict(raw["indices"]),
                additional_data=AdditionalData.from_dict(raw.get("additionalData")),
                code=raw.get("code"),
                state=raw.get("state"),
            )
        except KeyError as exc:
            raise ValueError(f"location entry missing field {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.code is not None:
            payload["code"] = self.code
        if self.state is not None:
            payload["state"] = self.state
        payload["indices"] = self.indices.to_dict()
        payload["additionalData"] = self.additional_data.to_dict()
        return payload


@dataclass
class DatasetMeta:
    source: str
    last_updated: str
    note: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DatasetMeta":
        return cls(
            source=raw.get("source", "unknown"),
            last_updated=raw.get("lastUpdated", ""),
            note=raw.get("note"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {"source": self.source, "lastUpdated": self.last_updated}
        if self.note:
            payload["note"] = self.note
        return payload


@dataclass
class Dataset:
    meta: DatasetMeta
    states: List[LocationData] = field(default_factory=list)
    cities: List[LocationData] = field(default_factory=list)

    def locations(self, location_type: str = "state") -> List[LocationData]:
        if location_type == "state":
            return self.states
        if location_type == "city":
            return self.cities
        raise ValueError(f"location type must be one of {LOCATION_TYPES}")

    def valid_identifiers(self, location_type: str = "state") -> List[str]:
        return [loc.identifier for loc in self.locations(location_type)]

    def find(self, identifier: str, location_type: str = "state") -> Optional[LocationData]:
        for location in self.locations(location_type):
            if location.code == identifier or location.name == identifier:
                return location
        return None


@dataclass
class ComparableByFactor:
    overall: float
    housing: float
    utilities: float
    groceries: float
    transportation: float
    healthcare: float
    miscellaneous: float

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ComparisonRow:
    code: str
    name: str
    indices: Indices
    additional_data: AdditionalData
    comparable_overall: float
    comparable_by_factor: ComparableByFactor


@dataclass
class QueryParams:
    """Configuration restored from a shared link."""

    locations: List[str]
    income: float
    base: str
    location_type: str = "state"


def _optional_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    return float(value)
