"""Read and write the query parameters of a shareable comparison link."""

from __future__ import annotations

import logging
import math
import re
from typing import Iterable, List, Optional, Sequence, Set
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from .schemas import LOCATION_TYPES, QueryParams

logger = logging.getLogger(__name__)

MAX_INCOME = 10_000_000
MIN_LOCATIONS = 2

# Leading decimal literal, the way a browser's parseFloat reads "90000abc".
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_query_params(query: str, valid_codes: Iterable[str]) -> Optional[QueryParams]:
    """Restore a comparison from a query string or full URL.

    Returns None when a required parameter is missing, fewer than two
    locations are valid, or the income is unreadable or out of range.
    """
    params = _query_dict(query)
    states_param = params.get("states")
    income_param = params.get("income")
    base_param = params.get("base")
    if not states_param or not income_param or not base_param:
        return None

    locations = _split_locations(states_param, set(valid_codes))
    if len(locations) < MIN_LOCATIONS:
        logger.debug("query has %d valid locations, need %d", len(locations), MIN_LOCATIONS)
        return None

    income = _parse_leading_float(income_param)
    if income is None or income < 0 or income > MAX_INCOME:
        logger.debug("query income %r rejected", income_param)
        return None

    base = base_param if base_param in locations else locations[0]
    return QueryParams(
        locations=locations,
        income=income,
        base=base,
        location_type=_location_type(params.get("type")),
    )


def location_type_from_query(query: str) -> str:
    return _location_type(_query_dict(query).get("type"))


def generate_share_url(
    selected_codes: Sequence[str],
    income: float,
    baseline_code: str,
    location_type: str = "state",
    base_url: str = "",
) -> str:
    query = urlencode(
        [
            ("states", ",".join(selected_codes)),
            ("income", _format_number(income)),
            ("base", baseline_code),
            ("type", location_type),
        ]
    )
    scheme, netloc, path, _, fragment = urlsplit(base_url)
    return urlunsplit((scheme, netloc, path, query, fragment))


def _query_dict(query: str) -> dict:
    """First value of each parameter; accepts '?a=b', 'a=b' or a full URL."""
    query = query.strip()
    if "://" in query or query.startswith("/"):
        query = urlsplit(query).query
    query = query.lstrip("?")
    parsed = parse_qs(query, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}


def _split_locations(value: str, valid: Set[str]) -> List[str]:
    """Comma-split identifiers, keeping only valid ones in order.

    City names carry their own comma ("Austin, TX"), so fragments that are
    not valid alone are held and rejoined with the following ones.
    """
    locations: List[str] = []
    pending: List[str] = []
    for part in value.split(","):
        pending.append(part)
        for start in range(len(pending)):
            candidate = ",".join(pending[start:]).strip()
            if candidate in valid:
                locations.append(candidate)
                pending = []
                break
    return locations


def _parse_leading_float(text: str) -> Optional[float]:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _location_type(value: Optional[str]) -> str:
    return value if value in LOCATION_TYPES else "state"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
