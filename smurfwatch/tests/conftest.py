"""
Shared fixtures for the test suite.

Matches are built as ten-player games: the target player and four teammates
on team 100, five opponents on team 200.
"""

import pytest

from smurfwatch.schemas.matches import MatchRecord, ParticipantStat
from smurfwatch.services.detection_config import DetectionConfig

PLAYER_PUUID = "target-puuid"
BASE_TIMESTAMP_MS = 1_700_000_000_000


@pytest.fixture
def player_puuid():
    """PUUID of the analyzed player in match factories."""
    return PLAYER_PUUID


@pytest.fixture
def config():
    """Default detection configuration."""
    return DetectionConfig()


@pytest.fixture
def make_participant():
    """Factory for ParticipantStat with average mid-elo numbers."""

    def _make(puuid=PLAYER_PUUID, **overrides):
        data = {
            "puuid": puuid,
            "champion_id": 1,
            "champion_name": "Annie",
            "team_id": 100,
            "kills": 5,
            "deaths": 5,
            "assists": 5,
            "total_cs": 180,
            "gold_earned": 9000,
            "total_damage_dealt_to_champions": 15000,
            "vision_score": 20,
            "win": False,
            "role": "MIDDLE",
            "summoner_spell1_id": 4,
            "summoner_spell2_id": 14,
        }
        data.update(overrides)
        return ParticipantStat(**data)

    return _make


@pytest.fixture
def make_match(make_participant):
    """
    Factory for a ten-player MatchRecord.

    ``player`` overrides the target's stats, ``teammate`` overrides all four
    teammates, and ``teammate_puuids`` names them.
    """

    def _make(
        match_id="NA1_1",
        creation_timestamp_ms=BASE_TIMESTAMP_MS,
        duration_seconds=1800,
        player=None,
        teammate=None,
        teammate_puuids=None,
        include_player=True,
    ):
        teammate_puuids = teammate_puuids or [f"mate-{i}" for i in range(1, 5)]
        teammate_stats = {"kills": 3, "total_damage_dealt_to_champions": 10000}
        teammate_stats.update(teammate or {})

        participants = []
        if include_player:
            participants.append(make_participant(**(player or {})))
        participants.extend(
            make_participant(puuid, champion_id=100 + i, **teammate_stats)
            for i, puuid in enumerate(teammate_puuids)
        )
        participants.extend(
            make_participant(f"enemy-{i}", champion_id=200 + i, team_id=200, win=True)
            for i in range(1, 6)
        )

        return MatchRecord(
            match_id=match_id,
            creation_timestamp_ms=creation_timestamp_ms,
            duration_seconds=duration_seconds,
            queue_id=420,
            platform_id="NA1",
            participants=participants,
        )

    return _make


@pytest.fixture
def sample_match_payload():
    """Raw match-v5 payload as returned by the Riot API."""
    return {
        "metadata": {
            "matchId": "NA1_4800000001",
            "dataVersion": "2",
            "participants": [PLAYER_PUUID, "mate-1"],
        },
        "info": {
            "gameCreation": BASE_TIMESTAMP_MS,
            "gameDuration": 1800,
            "queueId": 420,
            "mapId": 11,
            "gameVersion": "14.20.555.5555",
            "gameMode": "CLASSIC",
            "platformId": "NA1",
            "participants": [
                {
                    "puuid": PLAYER_PUUID,
                    "summonerName": "TestPlayer",
                    "riotIdGameName": "TestPlayer",
                    "riotIdTagline": "NA1",
                    "teamId": 100,
                    "win": True,
                    "championId": 238,
                    "championName": "Zed",
                    "kills": 12,
                    "deaths": 2,
                    "assists": 6,
                    "visionScore": 25,
                    "goldEarned": 15000,
                    "totalMinionsKilled": 200,
                    "neutralMinionsKilled": 40,
                    "totalDamageDealtToChampions": 30000,
                    "summoner1Id": 4,
                    "summoner2Id": 14,
                    "role": "SOLO",
                    "individualPosition": "MIDDLE",
                    "teamPosition": "MIDDLE",
                },
                {
                    "puuid": "mate-1",
                    "teamId": 100,
                    "win": True,
                    "championId": 64,
                    "championName": "LeeSin",
                    "kills": 4,
                    "deaths": 3,
                    "assists": 10,
                    "totalDamageDealtToChampions": 12000,
                    "summoner1Id": 11,
                    "summoner2Id": 4,
                    "teamPosition": "",
                    "individualPosition": "JUNGLE",
                },
            ],
        },
    }
