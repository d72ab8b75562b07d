"""
First-time champion analysis.

A champion that appears exactly once in the analyzed window is treated as a
first pick. Strong results on such picks (a win, a high KDA, high CS/min)
suggest experience the account history doesn't show.
"""

from dataclasses import dataclass
from typing import Dict, List
import structlog

from ..schemas.analysis import ChampionAnalysis, ChampionFirstTimeRecord
from ..schemas.matches import MatchRecord
from ..services.detection_config import DetectionConfig
from ..utils.statistics import safe_divide, safe_mean
from .features import calculate_kda

logger = structlog.get_logger(__name__)


@dataclass
class _ChampionTotals:
    champion_name: str
    games: int = 0
    wins: int = 0
    kda_sum: float = 0.0
    cs_per_min_sum: float = 0.0


class ChampionFirstTimeAnalyzer:
    """Scores performance on champions the player has played once."""

    def __init__(self, config: DetectionConfig):
        self.config = config

    def suspicion_for(self, win_rate: float, kda: float, cs_per_minute: float) -> float:
        """Sum of independent threshold weights (0.4 / 0.3 / 0.3 by default)."""
        cfg = self.config
        level = 0.0
        if win_rate >= cfg.first_time_win_rate:
            level += cfg.first_time_win_rate_weight
        if kda >= cfg.first_time_kda:
            level += cfg.first_time_kda_weight
        if cs_per_minute >= cfg.first_time_cs_per_min:
            level += cfg.first_time_cs_per_min_weight
        return min(1.0, level)

    def analyze(self, matches: List[MatchRecord], puuid: str) -> ChampionAnalysis:
        """
        Evaluate every champion with exactly one game in ``matches``.

        Args:
            matches: Player's matches
            puuid: Target player

        Returns:
            ChampionAnalysis with the mean suspicion as the overall score
        """
        totals: Dict[int, _ChampionTotals] = {}

        for match in matches:
            player = match.participant(puuid)
            if player is None:
                continue

            entry = totals.setdefault(
                player.champion_id, _ChampionTotals(champion_name=player.champion_name)
            )
            entry.games += 1
            entry.wins += 1 if player.win else 0
            entry.kda_sum += calculate_kda(player.kills, player.deaths, player.assists)
            entry.cs_per_min_sum += safe_divide(player.total_cs, match.duration_minutes)

        records: List[ChampionFirstTimeRecord] = []
        for champion_id, entry in totals.items():
            if entry.games != 1:
                continue

            win_rate = entry.wins / entry.games
            kda = entry.kda_sum / entry.games
            cs_per_minute = entry.cs_per_min_sum / entry.games
            records.append(
                ChampionFirstTimeRecord(
                    champion_id=champion_id,
                    champion_name=entry.champion_name,
                    win_rate=win_rate,
                    kda=kda,
                    cs_per_minute=cs_per_minute,
                    suspicion_level=self.suspicion_for(win_rate, kda, cs_per_minute),
                )
            )

        overall = safe_mean([r.suspicion_level for r in records])

        logger.debug(
            "Champion first-time analysis completed",
            champions_played=len(totals),
            first_time_champions=len(records),
            overall_performance_score=overall,
        )

        return ChampionAnalysis(
            first_time_performances=records,
            overall_performance_score=overall,
        )
