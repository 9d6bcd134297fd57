"""
Cost-of-living comparison toolkit.

This package reads cost-of-living indices for US states and cities and
computes the salary needed in each location to keep the purchasing power
of an income earned in a baseline location.
"""

from .schemas import (
    ComparisonRow,
    Dataset,
    Indices,
    LocationData,
    QueryParams,
)
from .model import compute_comparable_salary, generate_comparison_data
from .query_state import generate_share_url, parse_query_params

__all__ = [
    "ComparisonRow",
    "Dataset",
    "Indices",
    "LocationData",
    "QueryParams",
    "compute_comparable_salary",
    "generate_comparison_data",
    "generate_share_url",
    "parse_query_params",
]
