"""Tunable constants for duplicate matching and tree layout.

Defaults can be overridden with ``LINEAGE_*`` environment variables or a
``.env`` file.
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger("lineage.config")

load_dotenv()


class MatchingConfig(BaseModel):
    """Weights and thresholds for the three duplicate tiers."""

    # HIGH tier
    high_name_threshold: float = 0.90
    high_name_weight: float = 0.4
    high_date_weight: float = 0.3
    high_parents_weight: float = 0.3
    high_score_threshold: float = 0.85
    high_min_tolerance_days: int = 365
    high_date_min_proximity: float = 0.7
    high_parents_min_fraction: float = 0.5

    # MEDIUM tier (generic detector)
    medium_threshold: float = 0.75
    name_weight: float = 0.40
    birth_date_weight: float = 0.25
    parents_weight: float = 0.20
    birth_place_weight: float = 0.10
    death_date_weight: float = 0.05
    reason_threshold: float = 0.7  # signal strength needed to be listed as a reason


class LayoutConfig(BaseModel):
    node_width: float = 160.0
    spouse_width: float = 100.0
    level_spacing: float = 200.0


def _env_overrides(model: type[BaseModel], prefix: str) -> dict[str, str]:
    overrides = {}
    for field_name in model.model_fields:
        value = os.getenv(f"{prefix}{field_name.upper()}")
        if value is not None:
            overrides[field_name] = value
    if overrides:
        logger.info(f"Loaded {len(overrides)} {model.__name__} override(s) from environment")
    return overrides


def load_matching_config() -> MatchingConfig:
    """Build a MatchingConfig from defaults plus LINEAGE_MATCH_* variables."""
    return MatchingConfig(**_env_overrides(MatchingConfig, "LINEAGE_MATCH_"))


def load_layout_config() -> LayoutConfig:
    """Build a LayoutConfig from defaults plus LINEAGE_LAYOUT_* variables."""
    return LayoutConfig(**_env_overrides(LayoutConfig, "LINEAGE_LAYOUT_"))
