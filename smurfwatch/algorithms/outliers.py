"""
Outlier game detection against rank-tier benchmarks.

Every game the player appears in is scored: each metric that beats the tier
benchmark by a fixed margin raises a flag, flags add severity weights, and a
deathless high-takedown game or a wide spread of flag types earn bonuses.
Only games scoring at or above ``outlier_score_threshold`` count as outliers.
"""

from collections import Counter
from typing import Dict, List, Optional, Tuple, Union
import structlog

from ..core.enums import FlagType, Severity, Tier
from ..schemas.analysis import (
    FlagFrequency,
    GameMetrics,
    OutlierFlag,
    OutlierGame,
    OutlierSummary,
)
from ..schemas.matches import MatchRecord, ParticipantStat
from ..services.detection_config import DetectionConfig, TierBenchmark
from ..utils.statistics import safe_divide, safe_mean, thirds
from .features import FeatureExtractor

logger = structlog.get_logger(__name__)


class OutlierGameDetector:
    """Flags individual games that far exceed the player's tier norms."""

    def __init__(
        self,
        config: DetectionConfig,
        feature_extractor: Optional[FeatureExtractor] = None,
    ):
        self.config = config
        self.features = feature_extractor or FeatureExtractor()

    # Flags

    def detect_flags(
        self, metrics: GameMetrics, benchmark: TierBenchmark
    ) -> List[OutlierFlag]:
        """
        Compare a game's metrics to a tier benchmark.

        Args:
            metrics: Per-game metrics
            benchmark: Tier baseline

        Returns:
            Flags in a fixed order (KDA, CS, damage, vision, gold, kill
            participation)
        """
        cfg = self.config
        flags: List[OutlierFlag] = []

        kda_ratio = safe_divide(metrics.kda, benchmark.kda)
        severity = self._grade(
            kda_ratio,
            (cfg.kda_critical_multiplier, Severity.CRITICAL),
            (cfg.kda_high_multiplier, Severity.HIGH),
        )
        if severity:
            flags.append(
                OutlierFlag(
                    type=FlagType.HIGH_KDA,
                    severity=severity,
                    value=metrics.kda,
                    percentile=self._percentile(75 + (kda_ratio - 1) * 20, 99),
                    description=f"{metrics.kda:.1f} KDA vs {benchmark.kda} tier average",
                )
            )

        cs_ratio = safe_divide(metrics.cs_per_minute, benchmark.cs_per_min)
        severity = self._grade(
            cs_ratio,
            (cfg.cs_critical_multiplier, Severity.CRITICAL),
            (cfg.cs_high_multiplier, Severity.HIGH),
        )
        if severity:
            flags.append(
                OutlierFlag(
                    type=FlagType.PERFECT_CS,
                    severity=severity,
                    value=metrics.cs_per_minute,
                    percentile=self._percentile(80 + (cs_ratio - 1) * 15, 99),
                    description=(
                        f"{metrics.cs_per_minute:.1f} CS/min vs "
                        f"{benchmark.cs_per_min} tier average"
                    ),
                )
            )

        severity = self._grade(
            metrics.damage_share,
            (cfg.damage_share_critical, Severity.CRITICAL),
            (cfg.damage_share_high, Severity.HIGH),
        )
        if severity:
            flags.append(
                OutlierFlag(
                    type=FlagType.DAMAGE_CARRY,
                    severity=severity,
                    value=metrics.damage_share,
                    percentile=self._percentile(70 + metrics.damage_share, 99),
                    description=f"{metrics.damage_share:.0f}% of team damage",
                )
            )

        vision_ratio = safe_divide(metrics.vision_score, benchmark.vision_score)
        severity = self._grade(
            vision_ratio,
            (cfg.vision_high_multiplier, Severity.HIGH),
            (cfg.vision_moderate_multiplier, Severity.MODERATE),
        )
        if severity:
            flags.append(
                OutlierFlag(
                    type=FlagType.VISION_CONTROL,
                    severity=severity,
                    value=metrics.vision_score,
                    percentile=self._percentile(75 + (vision_ratio - 1) * 10, 95),
                    description=(
                        f"{metrics.vision_score:.0f} vision score vs "
                        f"{benchmark.vision_score} tier average"
                    ),
                )
            )

        severity = self._grade(
            metrics.gold_per_minute,
            (cfg.gold_per_min_high, Severity.HIGH),
            (cfg.gold_per_min_moderate, Severity.MODERATE),
        )
        if severity:
            flags.append(
                OutlierFlag(
                    type=FlagType.GOLD_LEAD,
                    severity=severity,
                    value=metrics.gold_per_minute,
                    percentile=self._percentile(70 + (metrics.gold_per_minute - 350) / 10, 95),
                    description=f"{metrics.gold_per_minute:.0f} gold/min",
                )
            )

        severity = self._grade(
            metrics.kill_participation,
            (cfg.kill_participation_high, Severity.HIGH),
            (cfg.kill_participation_moderate, Severity.MODERATE),
        )
        if severity:
            flags.append(
                OutlierFlag(
                    type=FlagType.KILL_PRESSURE,
                    severity=severity,
                    value=metrics.kill_participation,
                    percentile=self._percentile(60 + metrics.kill_participation / 2, 95),
                    description=f"{metrics.kill_participation:.0f}% kill participation",
                )
            )

        return flags

    @staticmethod
    def _grade(
        value: float, *levels: Tuple[float, Severity]
    ) -> Optional[Severity]:
        """First severity whose threshold ``value`` reaches; levels go high to low."""
        for threshold, severity in levels:
            if value >= threshold:
                return severity
        return None

    @staticmethod
    def _percentile(raw: float, ceiling: float) -> float:
        return max(0.0, min(ceiling, raw))

    # Scoring

    def score_game(self, metrics: GameMetrics, flags: List[OutlierFlag]) -> float:
        """Severity weights plus deathless and flag-diversity bonuses, capped."""
        cfg = self.config
        score = sum(cfg.severity_weights[flag.severity] for flag in flags)

        if (
            metrics.deaths == 0
            and metrics.kills + metrics.assists >= cfg.deathless_min_takedowns
        ):
            score += cfg.deathless_bonus

        if len({flag.type for flag in flags}) >= cfg.flag_diversity_min_types:
            score += cfg.flag_diversity_bonus

        return min(cfg.max_outlier_score, score)

    def is_outlier(self, game: OutlierGame) -> bool:
        return game.outlier_score >= self.config.outlier_score_threshold

    @staticmethod
    def _mvp_score(p: ParticipantStat) -> float:
        return (
            p.kills * 2
            + p.assists
            + p.total_damage_dealt_to_champions / 1000
            + p.gold_earned / 1000
        )

    def _is_team_mvp(self, match: MatchRecord, player: ParticipantStat) -> bool:
        team_best = max(self._mvp_score(p) for p in match.teammates_of(player))
        return self._mvp_score(player) >= team_best

    def analyze_game(
        self, match: MatchRecord, puuid: str, benchmark: TierBenchmark
    ) -> Optional[OutlierGame]:
        """
        Score one game for the player.

        Returns:
            OutlierGame (whether or not it qualifies as an outlier), or None
            if the player isn't in the match
        """
        player = match.participant(puuid)
        if player is None:
            return None
        return self._score(match, player, self.features.metrics_for(match, player), benchmark)

    def _score(
        self,
        match: MatchRecord,
        player: ParticipantStat,
        metrics: GameMetrics,
        benchmark: TierBenchmark,
    ) -> OutlierGame:
        flags = self.detect_flags(metrics, benchmark)
        return OutlierGame(
            match_id=match.match_id,
            champion_id=player.champion_id,
            champion_name=player.champion_name,
            game_timestamp_ms=match.creation_timestamp_ms,
            metrics=metrics,
            outlier_score=self.score_game(metrics, flags),
            flags=flags,
            team_mvp=self._is_team_mvp(match, player),
            game_carried=(
                metrics.damage_share > 35
                and metrics.kill_participation > 70
                and metrics.win
            ),
            perfect_game=(
                metrics.deaths == 0
                and metrics.kda >= 3
                and metrics.kill_participation > 50
            ),
        )

    # Summary

    def analyze(
        self,
        matches: List[MatchRecord],
        puuid: str,
        tier: Optional[Union[Tier, str]] = None,
    ) -> OutlierSummary:
        """
        Score every game and summarize the player's outliers.

        Args:
            matches: Player's matches, any order
            puuid: Target player
            tier: Rank tier for benchmarks (GOLD if unknown)

        Returns:
            OutlierSummary
        """
        benchmark = self.config.benchmark_for(tier)
        ordered = sorted(matches, key=lambda m: m.creation_timestamp_ms)

        scored = [
            self._score(match, player, metrics, benchmark)
            for match, player, metrics in self.features.extract_all(ordered, puuid)
        ]
        if not scored:
            return OutlierSummary()

        outliers = [game for game in scored if self.is_outlier(game)]
        average_score = safe_mean([game.outlier_score for game in outliers])

        summary = OutlierSummary(
            total_games_analyzed=len(scored),
            outlier_games=sorted(outliers, key=lambda g: g.outlier_score, reverse=True),
            outlier_rate=len(outliers) / len(scored),
            average_outlier_score=average_score,
            most_common_flags=self._most_common_flags(outliers),
            mvp_frequency=sum(1 for game in outliers if game.team_mvp) / len(scored),
            consistently_high_performance=(
                len(outliers) >= self.config.consistently_high_min_outliers
                and average_score >= self.config.consistently_high_min_score
            ),
            rapid_improvement=self._rapid_improvement(scored),
            multi_champion_expertise=self._multi_champion_expertise(scored),
        )

        logger.info(
            "Outlier analysis completed",
            tier=getattr(tier, "value", tier),
            games=len(scored),
            outliers=len(outliers),
            average_outlier_score=average_score,
        )
        return summary

    def _most_common_flags(self, outliers: List[OutlierGame]) -> List[FlagFrequency]:
        # Counter keeps first-seen order for ties
        counts: Counter = Counter()
        for game in sorted(outliers, key=lambda g: g.game_timestamp_ms):
            for flag in game.flags:
                counts[(flag.type, flag.severity)] += 1

        return [
            FlagFrequency(type=flag_type, severity=severity, count=count)
            for (flag_type, severity), count in counts.most_common(
                self.config.top_flag_combinations
            )
        ]

    def _rapid_improvement(self, chronological: List[OutlierGame]) -> bool:
        if len(chronological) < self.config.rapid_improvement_min_games:
            return False
        earliest, latest = thirds([g.outlier_score for g in chronological])
        return safe_mean(latest) - safe_mean(earliest) >= self.config.rapid_improvement_margin

    def _multi_champion_expertise(self, chronological: List[OutlierGame]) -> bool:
        first_games: Dict[int, OutlierGame] = {}
        for game in chronological:
            first_games.setdefault(game.champion_id, game)

        strong_debuts = sum(
            1
            for game in first_games.values()
            if game.outlier_score >= self.config.first_game_expertise_score
        )
        return strong_debuts >= self.config.first_game_expertise_min_champions
