"""Pydantic schemas for players and matches as consumed by the analyzers."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlayerIdentity(BaseModel):
    """Resolved player identity."""

    puuid: str = Field(..., description="Stable player identifier")
    display_name: Optional[str] = Field(None, description="Riot ID game name")
    tag_line: Optional[str] = Field(None, description="Riot ID tag line")
    account_level: int = Field(0, ge=0, description="Summoner level")
    region: str = Field(..., description="Platform the player was resolved on")
    summoner_id: Optional[str] = Field(None, description="Encrypted summoner ID")

    model_config = ConfigDict(frozen=True)

    @property
    def riot_id(self) -> Optional[str]:
        """``gameName#tagLine`` when both parts are known."""
        if self.display_name and self.tag_line:
            return f"{self.display_name}#{self.tag_line}"
        return None


class ParticipantStat(BaseModel):
    """One participant's end-of-game statistics."""

    puuid: str
    champion_id: int
    champion_name: str = ""
    team_id: int
    kills: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    total_cs: int = Field(0, ge=0)
    gold_earned: int = Field(0, ge=0)
    total_damage_dealt_to_champions: int = Field(0, ge=0)
    vision_score: float = Field(0, ge=0)
    win: bool = False
    role: Optional[str] = None
    summoner_spell1_id: int = 0
    summoner_spell2_id: int = 0

    model_config = ConfigDict(frozen=True)


class MatchRecord(BaseModel):
    """A completed match; immutable once fetched."""

    match_id: str
    creation_timestamp_ms: int = Field(..., description="Game creation, ms since epoch")
    duration_seconds: int = Field(..., ge=0)
    queue_id: int = 0
    platform_id: str = ""
    participants: List[ParticipantStat] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60

    def participant(self, puuid: str) -> Optional[ParticipantStat]:
        """The participant with this PUUID, if they played in the match."""
        for p in self.participants:
            if p.puuid == puuid:
                return p
        return None

    def teammates_of(self, player: ParticipantStat) -> List[ParticipantStat]:
        """Participants on the same team, the player included."""
        return [p for p in self.participants if p.team_id == player.team_id]
