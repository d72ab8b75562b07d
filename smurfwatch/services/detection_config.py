"""
Configuration for smurf detection.

This module contains the thresholds, weights, rank benchmarks and cache TTLs
used by the analyzers and the orchestrator. They are empirically tuned
values, kept here as named fields so a caller (or a test) can override any of
them by building a new ``DetectionConfig``.
"""

from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.enums import Severity, SuspicionLevel, Tier

MINUTE_MS = 60 * 1000


class TierBenchmark(BaseModel):
    """Typical per-game numbers for a rank tier."""

    kda: float = Field(..., gt=0)
    cs_per_min: float = Field(..., gt=0)
    damage_share: float = Field(..., gt=0, description="Percent of team damage")
    vision_score: float = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)


TIER_BENCHMARKS: Dict[Tier, TierBenchmark] = {
    Tier.IRON: TierBenchmark(kda=1.2, cs_per_min=4.0, damage_share=15, vision_score=12),
    Tier.BRONZE: TierBenchmark(kda=1.5, cs_per_min=5.0, damage_share=18, vision_score=15),
    Tier.SILVER: TierBenchmark(kda=1.8, cs_per_min=5.5, damage_share=20, vision_score=18),
    Tier.GOLD: TierBenchmark(kda=2.1, cs_per_min=6.0, damage_share=22, vision_score=20),
    Tier.PLATINUM: TierBenchmark(kda=2.4, cs_per_min=6.5, damage_share=24, vision_score=22),
    Tier.DIAMOND: TierBenchmark(kda=2.7, cs_per_min=7.0, damage_share=26, vision_score=25),
    Tier.MASTER: TierBenchmark(kda=3.0, cs_per_min=7.5, damage_share=28, vision_score=28),
    Tier.GRANDMASTER: TierBenchmark(kda=3.2, cs_per_min=8.0, damage_share=30, vision_score=30),
    Tier.CHALLENGER: TierBenchmark(kda=3.5, cs_per_min=8.5, damage_share=32, vision_score=32),
}

# Tiers without their own row borrow a neighbour's
TIER_ALIASES: Dict[Tier, Tier] = {Tier.EMERALD: Tier.PLATINUM}
FALLBACK_TIER = Tier.GOLD


class DetectionConfig(BaseModel):
    """All tunable detection parameters, passed into every analyzer."""

    # Gap analysis
    suspicious_gap_hours: float = Field(168.0, gt=0)

    # First-time champion analysis
    first_time_win_rate: float = Field(0.7, ge=0, le=1)
    first_time_win_rate_weight: float = Field(0.4, ge=0)
    first_time_kda: float = Field(3.0, ge=0)
    first_time_kda_weight: float = Field(0.3, ge=0)
    first_time_cs_per_min: float = Field(8.0, ge=0)
    first_time_cs_per_min_weight: float = Field(0.3, ge=0)

    # Outlier flags: multipliers are relative to the tier benchmark
    tier_benchmarks: Dict[Tier, TierBenchmark] = Field(
        default_factory=lambda: dict(TIER_BENCHMARKS)
    )
    kda_high_multiplier: float = 2.0
    kda_critical_multiplier: float = 3.0
    cs_high_multiplier: float = 1.3
    cs_critical_multiplier: float = 1.5
    damage_share_high: float = 35.0
    damage_share_critical: float = 45.0
    vision_moderate_multiplier: float = 1.5
    vision_high_multiplier: float = 2.0
    gold_per_min_moderate: float = 450.0
    gold_per_min_high: float = 550.0
    kill_participation_moderate: float = 80.0
    kill_participation_high: float = 90.0

    # Outlier scoring
    severity_weights: Dict[Severity, float] = Field(
        default_factory=lambda: {
            Severity.CRITICAL: 25,
            Severity.HIGH: 15,
            Severity.MODERATE: 8,
            Severity.MINOR: 3,
        }
    )
    deathless_bonus: float = 20.0
    deathless_min_takedowns: int = 10
    flag_diversity_bonus: float = 10.0
    flag_diversity_min_types: int = 3
    outlier_score_threshold: float = Field(60.0, ge=0, le=100)
    max_outlier_score: float = 100.0

    # Outlier summary
    top_flag_combinations: int = 5
    consistently_high_min_outliers: int = 5
    consistently_high_min_score: float = 75.0
    rapid_improvement_min_games: int = 3
    rapid_improvement_margin: float = 15.0
    first_game_expertise_score: float = 70.0
    first_game_expertise_min_champions: int = 2

    # Smurf probability
    champion_weight: float = Field(0.75, ge=0)
    spell_usage_weight: float = Field(0.05, ge=0)
    gap_weight: float = Field(0.15, ge=0)
    association_weight: float = Field(0.05, ge=0)
    probability_multiplier: float = Field(1.2, gt=0)

    # Suspicion label on probability * 100
    suspicion_high_threshold: float = 70.0
    suspicion_medium_threshold: float = 40.0

    # Unified risk
    suspicion_risk_points: Dict[SuspicionLevel, float] = Field(
        default_factory=lambda: {
            SuspicionLevel.HIGH: 40,
            SuspicionLevel.MEDIUM: 25,
            SuspicionLevel.LOW: 10,
        }
    )
    outlier_risk_points: float = 3.0
    outlier_risk_points_cap: float = 30.0
    low_consistency_threshold: float = 0.3
    low_consistency_risk_points: float = 20.0
    risk_critical_threshold: float = 80.0
    risk_high_threshold: float = 70.0
    risk_medium_threshold: float = 40.0

    # Performance consistency
    min_games_for_consistency: int = Field(10, ge=2)

    # Confidence
    normal_mode_confidence: float = Field(75.0, ge=0, le=100)
    fast_mode_confidence: float = Field(65.0, ge=0, le=100)
    min_games_for_full_confidence: int = Field(10, ge=1)

    # Associations
    association_min_shared_games: int = Field(2, ge=1)
    association_saturation: int = Field(3, ge=1)

    # Orchestration
    default_match_count: int = Field(200, ge=1)
    normal_mode_max_matches: int = Field(200, ge=1)
    fast_mode_max_matches: int = Field(50, ge=1)
    normal_analysis_ttl_ms: int = Field(30 * MINUTE_MS, ge=0)
    fast_analysis_ttl_ms: int = Field(15 * MINUTE_MS, ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_configuration(self) -> "DetectionConfig":
        """Reject weights and threshold pairs that can't produce sane scores."""
        weights = {
            "champion_weight": self.champion_weight,
            "spell_usage_weight": self.spell_usage_weight,
            "gap_weight": self.gap_weight,
            "association_weight": self.association_weight,
        }
        for name, weight in weights.items():
            if weight < 0:
                raise ValueError(f"Weight {name} must be non-negative")

        pairs = [
            ("kda_high_multiplier", "kda_critical_multiplier"),
            ("cs_high_multiplier", "cs_critical_multiplier"),
            ("damage_share_high", "damage_share_critical"),
            ("vision_moderate_multiplier", "vision_high_multiplier"),
            ("gold_per_min_moderate", "gold_per_min_high"),
            ("kill_participation_moderate", "kill_participation_high"),
            ("suspicion_medium_threshold", "suspicion_high_threshold"),
            ("risk_medium_threshold", "risk_high_threshold"),
            ("risk_high_threshold", "risk_critical_threshold"),
        ]
        for lower, upper in pairs:
            if getattr(self, lower) > getattr(self, upper):
                raise ValueError(f"{lower} must not exceed {upper}")

        missing = [s.value for s in Severity if s not in self.severity_weights]
        if missing:
            raise ValueError(f"Missing severity weights: {missing}")

        return self

    def benchmark_for(self, tier: Optional[Union[Tier, str]]) -> TierBenchmark:
        """
        Benchmark row for a tier.

        EMERALD uses the PLATINUM row; unknown or missing tiers use GOLD.
        """
        resolved = resolve_tier(tier)
        resolved = TIER_ALIASES.get(resolved, resolved)
        return self.tier_benchmarks.get(
            resolved, self.tier_benchmarks.get(FALLBACK_TIER, TIER_BENCHMARKS[FALLBACK_TIER])
        )


def resolve_tier(tier: Optional[Union[Tier, str]]) -> Tier:
    """Parse a tier name (any case), defaulting to GOLD."""
    if isinstance(tier, Tier):
        return tier
    if tier:
        try:
            return Tier(str(tier).strip().upper())
        except ValueError:
            pass
    return FALLBACK_TIER


def get_detection_config(**overrides) -> DetectionConfig:
    """
    Build a detection config, applying any field overrides.

    Returns:
        Validated, immutable DetectionConfig
    """
    return DetectionConfig(**overrides)
