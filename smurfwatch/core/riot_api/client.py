"""Riot API HTTP client with request pacing, caching, and typed errors."""

import asyncio
from typing import Optional, Dict, Any, List, Union
import aiohttp
import structlog

from ..cache import TieredCache
from .rate_limiter import RateLimiter
from .errors import RiotAPIError, UpstreamUnavailableError, error_for_status
from .models import (
    AccountDTO,
    SummonerDTO,
    MatchDTO,
    LeagueEntryDTO,
    LeagueListDTO,
    ChampionMasteryDTO,
    ChampionInfoDTO,
    PlatformStatusDTO,
)
from .endpoints import Endpoint, RiotAPIEndpoints
from .constants import Platform, QueueType, RANKED_SOLO_QUEUE

logger = structlog.get_logger(__name__)


class RiotAPIClient:
    """Rate-limited, cache-backed Riot API gateway."""

    def __init__(
        self,
        api_key: str = "",
        platform: Platform = Platform.NA1,
        cache: Optional[TieredCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        request_timeout: float = 30.0,
    ):
        """
        Initialize Riot API client.

        Args:
            api_key: Static Riot API key sent as ``X-Riot-Token``
            platform: Default platform for platform and regional routing
            cache: Response cache; responses aren't cached when None
            rate_limiter: Shared request queue (a 20 req/s one if None)
            request_timeout: Total per-request timeout in seconds
        """
        self.api_key = api_key
        self.platform = platform
        self.cache = cache
        self.rate_limiter = rate_limiter or RateLimiter()
        self.request_timeout = request_timeout
        self.endpoints = RiotAPIEndpoints(platform)

        # HTTP session
        self.session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def start_session(self) -> None:
        """Start the aiohttp session."""
        if self.session is None or self.session.closed:
            async with self._session_lock:
                if self.session is None or self.session.closed:
                    headers = {
                        "X-Riot-Token": self.api_key,
                        "Content-Type": "application/json",
                        "User-Agent": "smurfwatch/0.1",
                    }

                    timeout = aiohttp.ClientTimeout(total=self.request_timeout)
                    connector = aiohttp.TCPConnector(
                        limit=20,
                        limit_per_host=5,
                        ttl_dns_cache=300,
                        use_dns_cache=True,
                    )

                    self.session = aiohttp.ClientSession(
                        headers=headers, timeout=timeout, connector=connector
                    )

                    logger.info(
                        "Riot API client session started",
                        platform=self.platform.value,
                        api_key_prefix="[REDACTED]" if self.api_key else "None",
                    )

    async def close(self) -> None:
        """Close the aiohttp session and stop the request queue."""
        await self.rate_limiter.close()
        if self.session and not self.session.closed:
            await self.session.close()
            logger.info("Riot API client session closed")

    async def _make_request(self, url: str, endpoint_name: str) -> Any:
        """
        Perform one GET request.

        Args:
            url: Absolute request URL
            endpoint_name: Endpoint name for logs and errors

        Returns:
            Decoded JSON body

        Raises:
            RiotAPIError: Typed by status code; network failures and timeouts
                raise UpstreamUnavailableError
        """
        await self.start_session()

        if self.session is None:
            raise RiotAPIError("Session not initialized")

        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise await self._error_from_response(response, endpoint_name)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    logger.warning(
                        "Riot API returned an undecodable body",
                        endpoint=endpoint_name,
                        error=str(e),
                    )
                    raise UpstreamUnavailableError(
                        f"Invalid JSON body: {e}",
                        endpoint=endpoint_name,
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "Riot API request failed", endpoint=endpoint_name, error=str(e)
            )
            raise UpstreamUnavailableError(
                f"Request failed: {str(e) or e.__class__.__name__}",
                endpoint=endpoint_name,
            ) from e

    async def _error_from_response(
        self, response: aiohttp.ClientResponse, endpoint_name: str
    ) -> RiotAPIError:
        retry_after = self._parse_retry_after(response.headers.get("Retry-After"))
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            body = None

        error = error_for_status(
            response.status,
            endpoint=endpoint_name,
            retry_after=retry_after,
            response_data=body if isinstance(body, dict) else None,
        )
        logger.warning(
            "Riot API error response",
            endpoint=endpoint_name,
            status_code=response.status,
            retry_after=retry_after,
        )
        return error

    @staticmethod
    def _parse_retry_after(value: Optional[str]) -> Optional[float]:
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    async def fetch(
        self,
        endpoint: Endpoint,
        params: Optional[Dict[str, Any]] = None,
        use_cache: bool = True,
        platform: Optional[Platform] = None,
    ) -> Any:
        """
        Fetch an endpoint through the cache and the request queue.

        Cache hits return immediately without entering the queue. Misses are
        queued, and successful responses are written back with the
        endpoint's TTL from a worker thread.

        Args:
            endpoint: Endpoint definition
            params: Path and query parameters
            use_cache: Consult the cache before requesting
            platform: Platform override for routing

        Returns:
            Decoded JSON body
        """
        params = params or {}
        cache_key = self.endpoints.cache_key(endpoint, params, platform)

        if use_cache and self.cache is not None:
            cached = self.cache.get(endpoint.namespace, cache_key)
            if cached is not None:
                logger.debug("Cache hit", endpoint=endpoint.name, key=cache_key)
                return cached

        url = self.endpoints.url_for(endpoint, params, platform)
        data = await self.rate_limiter.submit(
            lambda: self._make_request(url, endpoint.name)
        )

        if self.cache is not None:
            # Disk write-through runs off the event loop
            await asyncio.to_thread(
                self.cache.set, endpoint.namespace, cache_key, data, endpoint.ttl_ms
            )

        return data

    # Account endpoints
    async def get_account_by_riot_id(
        self,
        game_name: str,
        tag_line: str,
        platform: Optional[Platform] = None,
        use_cache: bool = True,
    ) -> AccountDTO:
        """Get account by Riot ID (gameName#tagLine)."""
        response = await self.fetch(
            RiotAPIEndpoints.ACCOUNT_BY_RIOT_ID,
            {"game_name": game_name, "tag_line": tag_line},
            platform=platform,
            use_cache=use_cache,
        )
        return AccountDTO(**response)

    async def get_account_by_puuid(
        self, puuid: str, platform: Optional[Platform] = None, use_cache: bool = True
    ) -> AccountDTO:
        """Get account by PUUID."""
        response = await self.fetch(
            RiotAPIEndpoints.ACCOUNT_BY_PUUID,
            {"puuid": puuid},
            use_cache=use_cache,
            platform=platform,
        )
        return AccountDTO(**response)

    # Summoner endpoints
    async def get_summoner_by_puuid(
        self, puuid: str, platform: Optional[Platform] = None, use_cache: bool = True
    ) -> SummonerDTO:
        """Get summoner by PUUID."""
        response = await self.fetch(
            RiotAPIEndpoints.SUMMONER_BY_PUUID,
            {"puuid": puuid},
            use_cache=use_cache,
            platform=platform,
        )
        return SummonerDTO(**response)

    async def get_summoner_by_name(
        self, summoner_name: str, platform: Optional[Platform] = None, use_cache: bool = True
    ) -> SummonerDTO:
        """Get summoner by legacy summoner name."""
        response = await self.fetch(
            RiotAPIEndpoints.SUMMONER_BY_NAME,
            {"summoner_name": summoner_name},
            platform=platform,
            use_cache=use_cache,
        )
        return SummonerDTO(**response)

    # Match endpoints
    async def get_match_ids(
        self,
        puuid: str,
        start: int = 0,
        count: int = 20,
        queue: Optional[Union[int, QueueType]] = None,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        platform: Optional[Platform] = None,
        use_cache: bool = True,
    ) -> List[str]:
        """Get one page of match IDs by PUUID, newest first."""
        params: Dict[str, Any] = {
            "puuid": puuid,
            "start": start,
            "count": count,
            "queue": int(queue) if queue is not None else None,
            "startTime": start_time,
            "endTime": end_time,
        }
        response = await self.fetch(
            RiotAPIEndpoints.MATCH_IDS_BY_PUUID, params, use_cache=use_cache, platform=platform
        )

        if isinstance(response, list):
            return [str(match_id) for match_id in response]
        return list(response.get("matchIds", []))

    async def get_match(
        self, match_id: str, platform: Optional[Platform] = None
    ) -> MatchDTO:
        """Get match details by match ID."""
        response = await self.fetch(
            RiotAPIEndpoints.MATCH_BY_ID, {"match_id": match_id}, platform=platform
        )
        return MatchDTO(**response)

    # Champion mastery endpoints
    async def get_champion_masteries(
        self, puuid: str, platform: Optional[Platform] = None
    ) -> List[ChampionMasteryDTO]:
        """Get all champion masteries by PUUID."""
        response = await self.fetch(
            RiotAPIEndpoints.CHAMPION_MASTERIES_BY_PUUID,
            {"puuid": puuid},
            platform=platform,
        )
        return [ChampionMasteryDTO(**entry) for entry in self._expect_list(response)]

    # League endpoints
    async def get_league_entries_by_puuid(
        self, puuid: str, platform: Optional[Platform] = None
    ) -> List[LeagueEntryDTO]:
        """Get league entries by PUUID."""
        response = await self.fetch(
            RiotAPIEndpoints.LEAGUE_ENTRIES_BY_PUUID,
            {"puuid": puuid},
            platform=platform,
        )
        return [LeagueEntryDTO(**entry) for entry in self._expect_list(response)]

    async def get_league_entries_by_summoner(
        self, summoner_id: str, platform: Optional[Platform] = None
    ) -> List[LeagueEntryDTO]:
        """Get league entries by encrypted summoner ID."""
        response = await self.fetch(
            RiotAPIEndpoints.LEAGUE_ENTRIES_BY_SUMMONER,
            {"summoner_id": summoner_id},
            platform=platform,
        )
        return [LeagueEntryDTO(**entry) for entry in self._expect_list(response)]

    async def get_challenger_league(
        self, queue: str = RANKED_SOLO_QUEUE, platform: Optional[Platform] = None
    ) -> LeagueListDTO:
        """Get the challenger ladder for a ranked queue."""
        response = await self.fetch(
            RiotAPIEndpoints.CHALLENGER_LEAGUE, {"queue": queue}, platform=platform
        )
        return LeagueListDTO(**response)

    # Platform endpoints
    async def get_champion_rotation(
        self, platform: Optional[Platform] = None
    ) -> ChampionInfoDTO:
        """Get the current free champion rotation."""
        response = await self.fetch(
            RiotAPIEndpoints.CHAMPION_ROTATION, {}, platform=platform
        )
        return ChampionInfoDTO(**response)

    async def get_platform_status(
        self, platform: Optional[Platform] = None
    ) -> PlatformStatusDTO:
        """Get platform status (maintenances and incidents)."""
        response = await self.fetch(
            RiotAPIEndpoints.PLATFORM_STATUS, {}, platform=platform
        )
        return PlatformStatusDTO(**response)

    # Utility methods

    @staticmethod
    def _expect_list(response: Any) -> List[Dict[str, Any]]:
        if not isinstance(response, list):
            raise RiotAPIError(
                f"Expected list response, got {type(response).__name__}"
            )
        return response
