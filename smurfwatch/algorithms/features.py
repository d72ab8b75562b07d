"""
Per-game feature extraction.

Turns a match plus the target player's PUUID into normalized metrics. Team
totals (kills, damage) only count participants on the player's own team.
"""

from typing import List, Optional, Tuple

from ..schemas.analysis import GameMetrics
from ..schemas.matches import MatchRecord, ParticipantStat
from ..utils.statistics import safe_divide


def calculate_kda(kills: int, deaths: int, assists: int) -> float:
    """(kills + assists) / max(1, deaths)."""
    return (kills + assists) / max(1, deaths)


class FeatureExtractor:
    """Computes GameMetrics for one player in one match."""

    def extract(self, match: MatchRecord, puuid: str) -> Optional[GameMetrics]:
        """
        Extract metrics for the player.

        Args:
            match: Completed match
            puuid: Target player

        Returns:
            GameMetrics, or None if the player isn't in the match
        """
        player = match.participant(puuid)
        if player is None:
            return None

        return self.metrics_for(match, player)

    def metrics_for(self, match: MatchRecord, player: ParticipantStat) -> GameMetrics:
        minutes = match.duration_minutes
        team_kills, team_damage = self.team_totals(match, player)

        return GameMetrics(
            kills=player.kills,
            deaths=player.deaths,
            assists=player.assists,
            kda=calculate_kda(player.kills, player.deaths, player.assists),
            cs_per_minute=safe_divide(player.total_cs, minutes),
            gold_per_minute=safe_divide(player.gold_earned, minutes),
            damage_per_minute=safe_divide(player.total_damage_dealt_to_champions, minutes),
            kill_participation=safe_divide(player.kills + player.assists, team_kills) * 100,
            damage_share=safe_divide(player.total_damage_dealt_to_champions, team_damage) * 100,
            vision_score=player.vision_score,
            win=player.win,
            duration_minutes=minutes,
        )

    @staticmethod
    def team_totals(match: MatchRecord, player: ParticipantStat) -> Tuple[int, int]:
        """Kills and champion damage summed over the player's team."""
        team = match.teammates_of(player)
        return (
            sum(p.kills for p in team),
            sum(p.total_damage_dealt_to_champions for p in team),
        )

    def extract_all(
        self, matches: List[MatchRecord], puuid: str
    ) -> List[Tuple[MatchRecord, ParticipantStat, GameMetrics]]:
        """Metrics for every match the player appears in, input order preserved."""
        rows = []
        for match in matches:
            player = match.participant(puuid)
            if player is None:
                continue
            rows.append((match, player, self.metrics_for(match, player)))
        return rows
