"""
Pydantic schemas for analysis results.

Every analyzer returns one of these models. AnalysisResult bundles them and
is what the orchestrator caches (serialized with ``model_dump(mode="json")``)
and returns.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import (
    FlagType,
    IndicatorType,
    RiskLevel,
    Severity,
    SuspicionLevel,
    Tier,
)
from .matches import PlayerIdentity


class GameMetrics(BaseModel):
    """Normalized per-game metrics for the target player."""

    kills: int = 0
    deaths: int = 0
    assists: int = 0
    kda: float = Field(0.0, description="(kills + assists) / max(1, deaths)")
    cs_per_minute: float = 0.0
    gold_per_minute: float = 0.0
    damage_per_minute: float = 0.0
    kill_participation: float = Field(0.0, description="Percent of team kills")
    damage_share: float = Field(0.0, description="Percent of team damage")
    vision_score: float = 0.0
    win: bool = False
    duration_minutes: float = 0.0

    model_config = ConfigDict(frozen=True)


class GapRecord(BaseModel):
    """An inactivity gap longer than the configured threshold."""

    start_time: datetime
    end_time: datetime
    duration_hours: float
    suspicion_level: float = Field(..., ge=0.0, le=1.0)


class GapAnalysis(BaseModel):
    gaps: List[GapRecord] = Field(default_factory=list)
    total_gap_score: float = 0.0
    average_gap_hours: float = 0.0


class ChampionFirstTimeRecord(BaseModel):
    """Performance on a champion played exactly once in the window."""

    champion_id: int
    champion_name: str = ""
    win_rate: float
    kda: float
    cs_per_minute: float
    suspicion_level: float = Field(..., ge=0.0, le=1.0)


class ChampionAnalysis(BaseModel):
    first_time_performances: List[ChampionFirstTimeRecord] = Field(default_factory=list)
    overall_performance_score: float = Field(0.0, ge=0.0, le=1.0)


class SpellPlacementChange(BaseModel):
    """Flash moving between summoner-spell slots from one game to the next."""

    match_id: str
    timestamp: datetime
    previous_slot: int
    new_slot: int


class SpellUsageAnalysis(BaseModel):
    spell_placement_changes: List[SpellPlacementChange] = Field(default_factory=list)
    pattern_change_score: float = Field(0.0, ge=0.0, le=1.0)


class PlayerAssociation(BaseModel):
    """A repeat teammate found on the challenger ladder."""

    puuid: str
    games_together: int
    tier: Tier = Tier.CHALLENGER


class AssociationAnalysis(BaseModel):
    high_elo_associations: List[PlayerAssociation] = Field(default_factory=list)
    association_score: float = Field(0.0, ge=0.0, le=1.0)


class OutlierFlag(BaseModel):
    type: FlagType
    severity: Severity
    value: float
    percentile: float = Field(..., ge=0, le=100)
    description: str = ""


class OutlierGame(BaseModel):
    match_id: str
    champion_id: int
    champion_name: str = ""
    game_timestamp_ms: int
    metrics: GameMetrics
    outlier_score: float = Field(..., ge=0, le=100)
    flags: List[OutlierFlag] = Field(default_factory=list)
    team_mvp: bool = False
    game_carried: bool = False
    perfect_game: bool = False


class FlagFrequency(BaseModel):
    type: FlagType
    severity: Severity
    count: int


class OutlierSummary(BaseModel):
    total_games_analyzed: int = 0
    outlier_games: List[OutlierGame] = Field(default_factory=list)
    outlier_rate: float = 0.0
    average_outlier_score: float = 0.0
    most_common_flags: List[FlagFrequency] = Field(default_factory=list)
    mvp_frequency: float = 0.0
    consistently_high_performance: bool = False
    rapid_improvement: bool = False
    multi_champion_expertise: bool = False

    @property
    def outlier_count(self) -> int:
        return len(self.outlier_games)


class PerformanceConsistency(BaseModel):
    """1 - coefficient of variation of KDA and CS, blended 0.7 / 0.3."""

    avg_kda: float = 0.0
    kda_std_dev: float = 0.0
    avg_cs_per_min: float = 0.0
    cs_std_dev: float = 0.0
    consistency_score: Optional[float] = Field(
        None, description="None when there were too few games"
    )
    games: int = 0


class FactorScores(BaseModel):
    gaps: float = 0.0
    champion_performance: float = 0.0
    spell_usage: float = 0.0
    associations: float = 0.0


class Indicator(BaseModel):
    """A piece of supporting evidence surfaced with the result."""

    type: IndicatorType
    severity: Severity
    description: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    evidence: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Complete smurf analysis for one player."""

    player: PlayerIdentity
    factor_scores: FactorScores
    gap_analysis: GapAnalysis
    champion_analysis: ChampionAnalysis
    spell_usage_analysis: SpellUsageAnalysis
    association_analysis: AssociationAnalysis
    outlier_summary: OutlierSummary
    performance_consistency: PerformanceConsistency
    smurf_probability: float = Field(..., ge=0.0, le=1.0)
    suspicion_level: SuspicionLevel
    overall_risk_score: float = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    confidence: float = Field(..., ge=0, le=100)
    indicators: List[Indicator] = Field(default_factory=list)
    matches_analyzed: int
    estimated_tier: Tier = Tier.GOLD
    fast_mode: bool = False
    generated_at: datetime
    cache_expiry: datetime
