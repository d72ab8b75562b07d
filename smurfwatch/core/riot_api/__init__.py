"""
Riot API client package for League of Legends API integration.

This package provides the rate-limited, cache-backed HTTP gateway to the
Riot API, its typed response models and error classes.
"""

from .client import RiotAPIClient
from .rate_limiter import RateLimiter
from .errors import (
    RiotAPIError,
    BadRequestError,
    UpstreamAuthError,
    NotFoundError,
    RateLimitError,
    UpstreamUnavailableError,
)
from .models import (
    AccountDTO,
    SummonerDTO,
    MatchDTO,
    ParticipantDTO,
    LeagueEntryDTO,
    LeagueListDTO,
    ChampionMasteryDTO,
    ChampionInfoDTO,
    PlatformStatusDTO,
)
from .endpoints import Endpoint, RiotAPIEndpoints, parse_riot_id
from .constants import Platform, Region
from .transformers import MatchTransformer

__all__ = [
    "RiotAPIClient",
    "RateLimiter",
    "RiotAPIError",
    "BadRequestError",
    "UpstreamAuthError",
    "NotFoundError",
    "RateLimitError",
    "UpstreamUnavailableError",
    "AccountDTO",
    "SummonerDTO",
    "MatchDTO",
    "ParticipantDTO",
    "LeagueEntryDTO",
    "LeagueListDTO",
    "ChampionMasteryDTO",
    "ChampionInfoDTO",
    "PlatformStatusDTO",
    "Endpoint",
    "RiotAPIEndpoints",
    "parse_riot_id",
    "Platform",
    "Region",
    "MatchTransformer",
]
