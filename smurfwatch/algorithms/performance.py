"""
Performance consistency analysis.

Scores how steady a player's KDA and CS/min are across games. A low score
(erratic results) feeds the unified risk score.
"""

from typing import List
import structlog

from ..schemas.analysis import GameMetrics, PerformanceConsistency
from ..utils.statistics import safe_mean, safe_stdev, safe_divide

logger = structlog.get_logger(__name__)


class PerformanceAnalyzer:
    """Analyzes performance consistency across games."""

    def __init__(self, min_games_for_analysis: int = 10):
        """
        Initialize the performance analyzer.

        Args:
            min_games_for_analysis: Minimum games for a consistency score
        """
        self.min_games_for_analysis = min_games_for_analysis

    def analyze(self, games: List[GameMetrics]) -> PerformanceConsistency:
        """
        Analyze performance consistency.

        Args:
            games: Per-game metrics for the player

        Returns:
            PerformanceConsistency; ``consistency_score`` is None below the
            minimum game count
        """
        kda_values = [g.kda for g in games if g.kda > 0]
        cs_values = [g.cs_per_minute for g in games if g.cs_per_minute > 0]

        avg_kda = safe_mean(kda_values)
        kda_std_dev = safe_stdev(kda_values)
        avg_cs = safe_mean(cs_values)
        cs_std_dev = safe_stdev(cs_values)

        result = PerformanceConsistency(
            avg_kda=avg_kda,
            kda_std_dev=kda_std_dev,
            avg_cs_per_min=avg_cs,
            cs_std_dev=cs_std_dev,
            games=len(games),
        )

        if len(games) < self.min_games_for_analysis or not kda_values:
            return result

        kda_consistency = self._calculate_consistency(avg_kda, kda_std_dev)
        cs_consistency = (
            self._calculate_consistency(avg_cs, cs_std_dev) if cs_values else 0.0
        )

        # Overall consistency score (weighted average)
        consistency_score = kda_consistency * 0.7 + cs_consistency * 0.3

        logger.debug(
            "Performance consistency computed",
            avg_kda=avg_kda,
            kda_std_dev=kda_std_dev,
            consistency_score=consistency_score,
        )
        return result.model_copy(update={"consistency_score": consistency_score})

    def _calculate_consistency(self, mean: float, std_dev: float) -> float:
        """Calculate consistency score (0.0-1.0, where 1.0 is most consistent)."""
        # Coefficient of variation (lower = more consistent)
        cv = safe_divide(std_dev, mean, default=0.0)
        return max(0.0, 1.0 - cv)
