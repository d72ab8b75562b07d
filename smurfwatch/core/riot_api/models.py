"""Pydantic models for Riot API response data."""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class AccountDTO(BaseModel):
    """Riot Account information."""

    puuid: str
    game_name: Optional[str] = Field(None, alias="gameName")
    tag_line: Optional[str] = Field(None, alias="tagLine")

    model_config = ConfigDict(populate_by_name=True)


class SummonerDTO(BaseModel):
    """League of Legends Summoner information."""

    id: Optional[str] = None
    account_id: Optional[str] = Field(None, alias="accountId")
    puuid: str
    name: Optional[str] = None
    profile_icon_id: int = Field(0, alias="profileIconId")
    summoner_level: int = Field(0, alias="summonerLevel")
    revision_date: Optional[int] = Field(None, alias="revisionDate")

    model_config = ConfigDict(populate_by_name=True)


class ParticipantDTO(BaseModel):
    """Match participant information."""

    puuid: str
    summoner_name: Optional[str] = Field(None, alias="summonerName")
    summoner_id: Optional[str] = Field(None, alias="summonerId")
    riot_id_game_name: Optional[str] = Field(None, alias="riotIdGameName")
    riot_id_tagline: Optional[str] = Field(None, alias="riotIdTagline")

    team_id: int = Field(..., alias="teamId")
    win: bool
    champion_id: int = Field(..., alias="championId")
    champion_name: str = Field("", alias="championName")
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    vision_score: float = Field(0, alias="visionScore")
    gold_earned: int = Field(0, alias="goldEarned")
    total_minions_killed: int = Field(0, alias="totalMinionsKilled")
    neutral_minions_killed: int = Field(0, alias="neutralMinionsKilled")
    total_damage_dealt_to_champions: int = Field(
        0, alias="totalDamageDealtToChampions"
    )
    summoner1_id: int = Field(0, alias="summoner1Id")
    summoner2_id: int = Field(0, alias="summoner2Id")

    role: Optional[str] = None
    individual_position: Optional[str] = Field(None, alias="individualPosition")
    team_position: Optional[str] = Field(None, alias="teamPosition")

    @property
    def total_cs(self) -> int:
        """Lane minions plus jungle monsters."""
        return self.total_minions_killed + self.neutral_minions_killed

    model_config = ConfigDict(populate_by_name=True)


class MatchInfoDTO(BaseModel):
    """Match information."""

    game_creation: int = Field(..., alias="gameCreation")
    game_duration: int = Field(..., alias="gameDuration")
    queue_id: int = Field(0, alias="queueId")
    map_id: Optional[int] = Field(None, alias="mapId")
    game_version: Optional[str] = Field(None, alias="gameVersion")
    game_mode: Optional[str] = Field(None, alias="gameMode")
    platform_id: str = Field("", alias="platformId")
    participants: List[ParticipantDTO]

    model_config = ConfigDict(populate_by_name=True)


class MatchMetadataDTO(BaseModel):
    """Match metadata."""

    match_id: str = Field(..., alias="matchId")
    participants: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class MatchDTO(BaseModel):
    """Complete match data."""

    metadata: MatchMetadataDTO
    info: MatchInfoDTO

    @property
    def match_id(self) -> str:
        """Get match ID from metadata."""
        return self.metadata.match_id

    model_config = ConfigDict(populate_by_name=True)


class LeagueEntryDTO(BaseModel):
    """League entry information."""

    league_id: Optional[str] = Field(None, alias="leagueId")
    summoner_id: Optional[str] = Field(None, alias="summonerId")
    puuid: Optional[str] = None
    queue_type: str = Field(..., alias="queueType")
    tier: str
    rank: str
    league_points: int = Field(0, alias="leaguePoints")
    wins: int = 0
    losses: int = 0
    veteran: bool = False
    inactive: bool = False
    fresh_blood: bool = Field(False, alias="freshBlood")
    hot_streak: bool = Field(False, alias="hotStreak")

    @property
    def win_rate(self) -> float:
        """Calculate win rate."""
        total_games = self.wins + self.losses
        if total_games == 0:
            return 0
        return (self.wins / total_games) * 100

    model_config = ConfigDict(populate_by_name=True)


class LeagueItemDTO(BaseModel):
    """One ladder entry of an apex league."""

    summoner_id: Optional[str] = Field(None, alias="summonerId")
    puuid: Optional[str] = None
    league_points: int = Field(0, alias="leaguePoints")
    rank: Optional[str] = None
    wins: int = 0
    losses: int = 0

    model_config = ConfigDict(populate_by_name=True)


class LeagueListDTO(BaseModel):
    """Apex league (challenger, grandmaster, master) ladder."""

    league_id: Optional[str] = Field(None, alias="leagueId")
    tier: str
    name: Optional[str] = None
    queue: Optional[str] = None
    entries: List[LeagueItemDTO] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ChampionMasteryDTO(BaseModel):
    """Champion mastery for one champion."""

    puuid: Optional[str] = None
    champion_id: int = Field(..., alias="championId")
    champion_level: int = Field(0, alias="championLevel")
    champion_points: int = Field(0, alias="championPoints")
    last_play_time: Optional[int] = Field(None, alias="lastPlayTime")

    model_config = ConfigDict(populate_by_name=True)


class ChampionInfoDTO(BaseModel):
    """Free champion rotation."""

    free_champion_ids: List[int] = Field(default_factory=list, alias="freeChampionIds")
    free_champion_ids_for_new_players: List[int] = Field(
        default_factory=list, alias="freeChampionIdsForNewPlayers"
    )
    max_new_player_level: int = Field(0, alias="maxNewPlayerLevel")

    model_config = ConfigDict(populate_by_name=True)


class PlatformStatusDTO(BaseModel):
    """Platform status summary; incident details are kept raw."""

    id: str
    name: str
    locales: List[str] = Field(default_factory=list)
    maintenances: List[dict] = Field(default_factory=list)
    incidents: List[dict] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
