"""Data transformation utilities for Riot API match data."""

from typing import Optional

from ...schemas.matches import MatchRecord, ParticipantStat, PlayerIdentity
from .models import AccountDTO, MatchDTO, ParticipantDTO, SummonerDTO


class MatchTransformer:
    """Transform Riot API DTOs into the records the analyzers consume."""

    def to_match_record(self, match: MatchDTO) -> MatchRecord:
        """
        Transform a match-v5 payload into a MatchRecord.

        Args:
            match: Validated match DTO

        Returns:
            Immutable match record
        """
        info = match.info
        return MatchRecord(
            match_id=match.match_id,
            creation_timestamp_ms=info.game_creation,
            duration_seconds=self._duration_seconds(info.game_duration),
            queue_id=info.queue_id,
            platform_id=info.platform_id,
            participants=[self._to_participant(p) for p in info.participants],
        )

    def _to_participant(self, participant: ParticipantDTO) -> ParticipantStat:
        return ParticipantStat(
            puuid=participant.puuid,
            champion_id=participant.champion_id,
            champion_name=participant.champion_name,
            team_id=participant.team_id,
            kills=participant.kills,
            deaths=participant.deaths,
            assists=participant.assists,
            total_cs=participant.total_cs,
            gold_earned=participant.gold_earned,
            total_damage_dealt_to_champions=participant.total_damage_dealt_to_champions,
            vision_score=participant.vision_score,
            win=participant.win,
            role=participant.team_position or participant.individual_position or participant.role,
            summoner_spell1_id=participant.summoner1_id,
            summoner_spell2_id=participant.summoner2_id,
        )

    @staticmethod
    def _duration_seconds(game_duration: int) -> int:
        # Matches before patch 11.20 report gameDuration in milliseconds
        if game_duration > 100_000:
            return game_duration // 1000
        return game_duration

    def to_player_identity(
        self,
        summoner: SummonerDTO,
        region: str,
        account: Optional[AccountDTO] = None,
    ) -> PlayerIdentity:
        """
        Build a PlayerIdentity from summoner data and, when known, the account.

        Legacy summoner names stand in for the display name when there is no
        Riot ID.
        """
        return PlayerIdentity(
            puuid=summoner.puuid,
            display_name=(account.game_name if account else None) or summoner.name,
            tag_line=account.tag_line if account else None,
            account_level=summoner.summoner_level,
            region=region,
            summoner_id=summoner.id,
        )
