"""Riot API endpoint definitions and routing information."""

import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode

from ..cache import CacheNamespace, DAY_MS, HOUR_MS
from .constants import Platform, Region, region_for_platform


class Routing(str, Enum):
    """Which host family an endpoint is served from."""

    REGIONAL = "regional"
    PLATFORM = "platform"


@dataclass(frozen=True)
class Endpoint:
    """
    A single Riot API route.

    ``path`` is a ``str.format`` template; any request parameter named in it
    is substituted (URL-quoted) and the remaining parameters become the query
    string.
    """

    name: str
    path: str
    routing: Routing
    namespace: CacheNamespace
    ttl_ms: int

    @property
    def path_fields(self) -> List[str]:
        return [
            field_name
            for _, field_name, _, _ in string.Formatter().parse(self.path)
            if field_name
        ]

    def split_params(
        self, params: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Separate path parameters from query parameters."""
        fields = set(self.path_fields)
        missing = fields - params.keys()
        if missing:
            raise ValueError(
                f"Missing path parameters for {self.name}: {sorted(missing)}"
            )
        path_params = {k: v for k, v in params.items() if k in fields}
        query = {
            k: v for k, v in params.items() if k not in fields and v is not None
        }
        return path_params, query

    def render_path(self, params: Dict[str, Any]) -> str:
        """Path plus sorted query string, also used as the cache key."""
        path_params, query = self.split_params(params)
        path = self.path.format(
            **{k: quote(str(v), safe="") for k, v in path_params.items()}
        )
        if query:
            path = f"{path}?{urlencode(sorted(query.items()))}"
        return path


MINUTE_MS = 60 * 1000


class RiotAPIEndpoints:
    """Riot API endpoint catalogue used by the gateway."""

    ACCOUNT_BY_RIOT_ID = Endpoint(
        name="account_by_riot_id",
        path="/riot/account/v1/accounts/by-riot-id/{game_name}/{tag_line}",
        routing=Routing.REGIONAL,
        namespace=CacheNamespace.SUMMONERS,
        ttl_ms=DAY_MS,
    )
    ACCOUNT_BY_PUUID = Endpoint(
        name="account_by_puuid",
        path="/riot/account/v1/accounts/by-puuid/{puuid}",
        routing=Routing.REGIONAL,
        namespace=CacheNamespace.SUMMONERS,
        ttl_ms=DAY_MS,
    )
    SUMMONER_BY_PUUID = Endpoint(
        name="summoner_by_puuid",
        path="/lol/summoner/v4/summoners/by-puuid/{puuid}",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.SUMMONERS,
        ttl_ms=DAY_MS,
    )
    SUMMONER_BY_NAME = Endpoint(
        name="summoner_by_name",
        path="/lol/summoner/v4/summoners/by-name/{summoner_name}",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.SUMMONERS,
        ttl_ms=DAY_MS,
    )
    MATCH_IDS_BY_PUUID = Endpoint(
        name="match_ids_by_puuid",
        path="/lol/match/v5/matches/by-puuid/{puuid}/ids",
        routing=Routing.REGIONAL,
        namespace=CacheNamespace.MATCH_HISTORIES,
        ttl_ms=12 * HOUR_MS,
    )
    MATCH_BY_ID = Endpoint(
        name="match_by_id",
        path="/lol/match/v5/matches/{match_id}",
        routing=Routing.REGIONAL,
        namespace=CacheNamespace.MATCH_DETAILS,
        ttl_ms=7 * DAY_MS,
    )
    CHAMPION_MASTERIES_BY_PUUID = Endpoint(
        name="champion_masteries_by_puuid",
        path="/lol/champion-mastery/v4/champion-masteries/by-puuid/{puuid}",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.MASTERIES,
        ttl_ms=6 * HOUR_MS,
    )
    LEAGUE_ENTRIES_BY_PUUID = Endpoint(
        name="league_entries_by_puuid",
        path="/lol/league/v4/entries/by-puuid/{puuid}",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.LEAGUES,
        ttl_ms=HOUR_MS,
    )
    LEAGUE_ENTRIES_BY_SUMMONER = Endpoint(
        name="league_entries_by_summoner",
        path="/lol/league/v4/entries/by-summoner/{summoner_id}",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.LEAGUES,
        ttl_ms=HOUR_MS,
    )
    CHALLENGER_LEAGUE = Endpoint(
        name="challenger_league",
        path="/lol/league/v4/challengerleagues/by-queue/{queue}",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.LEAGUES,
        ttl_ms=HOUR_MS,
    )
    CHAMPION_ROTATION = Endpoint(
        name="champion_rotation",
        path="/lol/platform/v3/champion-rotations",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.PLATFORM,
        ttl_ms=6 * HOUR_MS,
    )
    PLATFORM_STATUS = Endpoint(
        name="platform_status",
        path="/lol/status/v4/platform-data",
        routing=Routing.PLATFORM,
        namespace=CacheNamespace.PLATFORM,
        ttl_ms=5 * MINUTE_MS,
    )

    def __init__(self, platform: Platform = Platform.NA1):
        """
        Initialize endpoint routing.

        Args:
            platform: Default platform; the regional host is derived from it
        """
        self.platform = platform

    def host_for(
        self, endpoint: Endpoint, platform: Optional[Platform] = None
    ) -> str:
        """Routing value (regional cluster or platform) for an endpoint."""
        platform = platform or self.platform
        if endpoint.routing == Routing.REGIONAL:
            return region_for_platform(platform).value
        return platform.value

    def url_for(
        self,
        endpoint: Endpoint,
        params: Dict[str, Any],
        platform: Optional[Platform] = None,
    ) -> str:
        """Absolute URL for an endpoint call."""
        host = self.host_for(endpoint, platform)
        return f"https://{host}.api.riotgames.com{endpoint.render_path(params)}"

    def cache_key(
        self,
        endpoint: Endpoint,
        params: Dict[str, Any],
        platform: Optional[Platform] = None,
    ) -> str:
        """Cache key: routing host plus path and query."""
        return f"{self.host_for(endpoint, platform)}{endpoint.render_path(params)}"


def parse_riot_id(riot_id: str) -> Tuple[str, str]:
    """
    Split a Riot ID of the form ``gameName#tagLine``.

    Example: "Faker#KR1" -> ("Faker", "KR1")

    Raises:
        ValueError: If the ID doesn't have exactly one ``#`` or a side is empty
    """
    parts = [part.strip() for part in (riot_id or "").split("#")]
    if len(parts) != 2 or not all(parts):
        raise ValueError(
            f"Invalid Riot ID format: {riot_id!r}. Expected format: gameName#tagLine"
        )
    return parts[0], parts[1]


def resolve_platform(value: Optional[str], default: Platform = Platform.NA1) -> Platform:
    """Coerce a platform string (any case) to :class:`Platform`."""
    if not value:
        return default
    if isinstance(value, Platform):
        return value
    try:
        return Platform(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown platform: {value}") from None
