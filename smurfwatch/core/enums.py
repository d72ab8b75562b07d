"""Shared enums used across the analysis pipeline.

This module provides a single source of truth for enums used in both
algorithms and schemas.
"""

from enum import Enum


class Tier(str, Enum):
    """League of Legends rank tiers."""

    IRON = "IRON"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    EMERALD = "EMERALD"
    DIAMOND = "DIAMOND"
    MASTER = "MASTER"
    GRANDMASTER = "GRANDMASTER"
    CHALLENGER = "CHALLENGER"


class FlagType(str, Enum):
    """Kinds of per-game outlier flags."""

    HIGH_KDA = "HIGH_KDA"
    PERFECT_CS = "PERFECT_CS"
    DAMAGE_CARRY = "DAMAGE_CARRY"
    VISION_CONTROL = "VISION_CONTROL"
    GOLD_LEAD = "GOLD_LEAD"
    KILL_PRESSURE = "KILL_PRESSURE"


class Severity(str, Enum):
    """Outlier flag severity."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    MINOR = "MINOR"


class SuspicionLevel(str, Enum):
    """Three-band label derived from the smurf probability."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RiskLevel(str, Enum):
    """Four-band risk level used by the unified analysis view."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IndicatorType(str, Enum):
    """Categories of supporting evidence attached to an analysis."""

    CHAMPION_MASTERY = "CHAMPION_MASTERY"
    PERFORMANCE_OUTLIER = "PERFORMANCE_OUTLIER"
    GAP_ANALYSIS = "GAP_ANALYSIS"
    BEHAVIORAL_PATTERN = "BEHAVIORAL_PATTERN"
    HIGH_ELO_ASSOCIATION = "HIGH_ELO_ASSOCIATION"
