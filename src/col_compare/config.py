from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SHARE_BASE_URL = "https://col-compare.example/"
DEFAULT_INCOME = 100_000.0
DEFAULT_SCRAPE_OUTPUT = "combined_coli.json"
DEFAULT_SELECTIONS = {
    "state": ["CA", "TX"],
    "city": ["New York, NY", "Los Angeles, CA"],
}


def _default_dataset_path() -> Optional[str]:
    return os.environ.get("COL_DATASET_PATH") or None


def _default_share_base_url() -> str:
    return os.environ.get("COL_SHARE_BASE_URL", DEFAULT_SHARE_BASE_URL)


def _default_log_level() -> str:
    return os.environ.get("COL_LOG_LEVEL", "WARNING").upper()


@dataclass
class Settings:
    dataset_path: Optional[str] = None
    share_base_url: str = DEFAULT_SHARE_BASE_URL
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"unknown log level '{self.log_level}'")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            dataset_path=_default_dataset_path(),
            share_base_url=_default_share_base_url(),
            log_level=_default_log_level(),
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
