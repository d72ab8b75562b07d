"""
Score aggregation.

Combines the factor scores into a smurf probability, a three-band suspicion
label, a 0-100 risk score with a four-band risk level, a confidence value and
a list of supporting indicators.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import structlog

from ..core.enums import IndicatorType, RiskLevel, Severity, SuspicionLevel
from ..schemas.analysis import (
    ChampionAnalysis,
    FactorScores,
    GapAnalysis,
    AssociationAnalysis,
    Indicator,
    OutlierSummary,
    SpellUsageAnalysis,
)
from ..services.detection_config import DetectionConfig
from ..utils.statistics import clamp01

logger = structlog.get_logger(__name__)


@dataclass
class AggregateScore:
    """Result of score aggregation."""

    factor_scores: FactorScores
    smurf_probability: float
    suspicion_level: SuspicionLevel
    overall_risk_score: float
    risk_level: RiskLevel
    confidence: float
    indicators: List[Indicator] = field(default_factory=list)


class ScoreAggregator:
    """Turns factor scores into probability, risk and confidence."""

    def __init__(self, config: DetectionConfig):
        self.config = config

    def smurf_probability(self, factors: FactorScores) -> float:
        """
        Weighted sum of factors times the boost multiplier, clamped to [0, 1].

        The gap factor is a sum over gaps and can exceed 1, so the weighted sum
        may too; only the final value is bounded.
        """
        cfg = self.config
        weighted = (
            factors.champion_performance * cfg.champion_weight
            + factors.spell_usage * cfg.spell_usage_weight
            + factors.gaps * cfg.gap_weight
            + factors.associations * cfg.association_weight
        )
        return clamp01(weighted * cfg.probability_multiplier)

    def suspicion_level(self, probability: float) -> SuspicionLevel:
        score = probability * 100
        if score >= self.config.suspicion_high_threshold:
            return SuspicionLevel.HIGH
        if score >= self.config.suspicion_medium_threshold:
            return SuspicionLevel.MEDIUM
        return SuspicionLevel.LOW

    def risk_score(
        self,
        suspicion: SuspicionLevel,
        outlier_count: int,
        consistency: Optional[float],
    ) -> float:
        """
        Label points, plus capped points per outlier game, plus a bonus for
        erratic performance; capped at 100.

        ``consistency`` is None when there were too few games to measure it,
        in which case no consistency points are added.
        """
        cfg = self.config
        score = cfg.suspicion_risk_points.get(suspicion, 0)
        score += min(outlier_count * cfg.outlier_risk_points, cfg.outlier_risk_points_cap)
        if consistency is not None and consistency < cfg.low_consistency_threshold:
            score += cfg.low_consistency_risk_points
        return min(100.0, float(score))

    def risk_level(self, risk_score: float) -> RiskLevel:
        cfg = self.config
        if risk_score >= cfg.risk_critical_threshold:
            return RiskLevel.CRITICAL
        if risk_score >= cfg.risk_high_threshold:
            return RiskLevel.HIGH
        if risk_score >= cfg.risk_medium_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def confidence(self, games: int, fast_mode: bool) -> float:
        """Mode base confidence scaled down when there are few games."""
        cfg = self.config
        base = cfg.fast_mode_confidence if fast_mode else cfg.normal_mode_confidence
        return base * min(1.0, games / cfg.min_games_for_full_confidence)

    def build_indicators(
        self,
        suspicion: SuspicionLevel,
        gap_analysis: GapAnalysis,
        champion_analysis: ChampionAnalysis,
        spell_usage: SpellUsageAnalysis,
        associations: AssociationAnalysis,
        outlier_summary: OutlierSummary,
    ) -> List[Indicator]:
        """Supporting evidence, strongest signals first."""
        indicators: List[Indicator] = []

        if suspicion == SuspicionLevel.HIGH:
            indicators.append(
                Indicator(
                    type=IndicatorType.BEHAVIORAL_PATTERN,
                    severity=Severity.HIGH,
                    description="High smurf probability detected",
                    confidence=0.8,
                    evidence=[
                        "High performance on new champions",
                        "Unusual gameplay patterns",
                    ],
                )
            )

        outliers = outlier_summary.outlier_count
        if outliers:
            evidence = [f"{outliers} games with exceptional performance"]
            if outlier_summary.rapid_improvement:
                evidence.append("Sharp rise in performance over recent games")
            if outlier_summary.multi_champion_expertise:
                evidence.append("Several champions mastered from their first game")
            indicators.append(
                Indicator(
                    type=IndicatorType.PERFORMANCE_OUTLIER,
                    severity=Severity.HIGH if outliers > 5 else Severity.MODERATE,
                    description=f"{outliers} outlier games detected",
                    confidence=0.7,
                    evidence=evidence,
                )
            )

        strong_debuts = [
            r for r in champion_analysis.first_time_performances if r.suspicion_level >= 0.7
        ]
        if strong_debuts:
            indicators.append(
                Indicator(
                    type=IndicatorType.CHAMPION_MASTERY,
                    severity=Severity.HIGH if len(strong_debuts) >= 3 else Severity.MODERATE,
                    description=f"Strong first-time play on {len(strong_debuts)} champions",
                    confidence=min(1.0, champion_analysis.overall_performance_score + 0.3),
                    evidence=[
                        f"{r.champion_name or r.champion_id}: {r.kda:.1f} KDA, "
                        f"{r.cs_per_minute:.1f} CS/min"
                        for r in strong_debuts[:5]
                    ],
                )
            )

        if gap_analysis.gaps:
            indicators.append(
                Indicator(
                    type=IndicatorType.GAP_ANALYSIS,
                    severity=Severity.MODERATE if gap_analysis.total_gap_score >= 1 else Severity.MINOR,
                    description=f"{len(gap_analysis.gaps)} long breaks between games",
                    confidence=0.5,
                    evidence=[
                        f"Average break of {gap_analysis.average_gap_hours / 24:.0f} days"
                    ],
                )
            )

        if spell_usage.spell_placement_changes:
            changes = len(spell_usage.spell_placement_changes)
            indicators.append(
                Indicator(
                    type=IndicatorType.BEHAVIORAL_PATTERN,
                    severity=Severity.MODERATE if spell_usage.pattern_change_score >= 0.3 else Severity.MINOR,
                    description=f"Flash changed keys {changes} times",
                    confidence=0.4,
                    evidence=["Summoner spell placement is inconsistent"],
                )
            )

        if associations.high_elo_associations:
            count = len(associations.high_elo_associations)
            indicators.append(
                Indicator(
                    type=IndicatorType.HIGH_ELO_ASSOCIATION,
                    severity=Severity.HIGH if count >= 2 else Severity.MODERATE,
                    description=f"Repeatedly queued with {count} challenger players",
                    confidence=0.6,
                    evidence=[
                        f"{a.games_together} games with a challenger player"
                        for a in associations.high_elo_associations[:5]
                    ],
                )
            )

        return indicators

    def aggregate(
        self,
        gap_analysis: GapAnalysis,
        champion_analysis: ChampionAnalysis,
        spell_usage: SpellUsageAnalysis,
        associations: AssociationAnalysis,
        outlier_summary: OutlierSummary,
        consistency: Optional[float],
        games: int,
        fast_mode: bool = False,
    ) -> AggregateScore:
        """
        Combine every analyzer's output.

        Args:
            gap_analysis: Gap analyzer output
            champion_analysis: First-time champion analyzer output
            spell_usage: Spell placement analyzer output
            associations: Association analyzer output
            outlier_summary: Outlier detector output
            consistency: Performance consistency score, None if unmeasured
            games: Number of matches analyzed
            fast_mode: Whether the fast pipeline produced the inputs

        Returns:
            AggregateScore
        """
        factors = FactorScores(
            gaps=gap_analysis.total_gap_score,
            champion_performance=champion_analysis.overall_performance_score,
            spell_usage=spell_usage.pattern_change_score,
            associations=associations.association_score,
        )

        probability = self.smurf_probability(factors)
        suspicion = self.suspicion_level(probability)
        risk = self.risk_score(suspicion, outlier_summary.outlier_count, consistency)

        result = AggregateScore(
            factor_scores=factors,
            smurf_probability=probability,
            suspicion_level=suspicion,
            overall_risk_score=risk,
            risk_level=self.risk_level(risk),
            confidence=self.confidence(games, fast_mode),
            indicators=self.build_indicators(
                suspicion,
                gap_analysis,
                champion_analysis,
                spell_usage,
                associations,
                outlier_summary,
            ),
        )

        logger.info(
            "Scores aggregated",
            smurf_probability=probability,
            suspicion_level=suspicion.value,
            overall_risk_score=risk,
            risk_level=result.risk_level.value,
        )
        return result
