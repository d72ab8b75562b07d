"""Wiring for the analysis core."""

from typing import Optional

from ..core.cache import TieredCache
from ..core.config import Settings, get_global_settings
from ..core.riot_api import RiotAPIClient, RateLimiter
from ..core.riot_api.endpoints import resolve_platform
from .analysis import AnalysisOrchestrator
from .detection_config import DetectionConfig


def create_riot_client(
    settings: Settings, cache: Optional[TieredCache] = None
) -> RiotAPIClient:
    """Get a Riot API client configured from settings."""
    rate_limiter = RateLimiter(
        requests_per_second=settings.max_requests_per_second,
        max_queue_size=settings.max_queue_size,
    )
    return RiotAPIClient(
        api_key=settings.riot_api_key,
        platform=resolve_platform(settings.riot_platform),
        cache=cache,
        rate_limiter=rate_limiter,
        request_timeout=settings.request_timeout_seconds,
    )


def create_orchestrator(
    settings: Optional[Settings] = None,
    config: Optional[DetectionConfig] = None,
) -> AnalysisOrchestrator:
    """
    Build an orchestrator with one shared cache for API responses and results.

    The caller owns the returned orchestrator's client and should close it
    (``await orchestrator.client.close()``) when done.
    """
    settings = settings or get_global_settings()
    cache = TieredCache(
        base_dir=settings.cache_dir, max_memory_items=settings.memory_cache_size
    )
    client = create_riot_client(settings, cache)

    return AnalysisOrchestrator(
        client=client,
        cache=cache,
        config=config,
        default_platform=client.platform,
        normal_mode_concurrency=settings.normal_mode_concurrency,
        fast_mode_batch_size=settings.fast_mode_batch_size,
        fast_mode_batch_pause=settings.fast_mode_batch_pause_seconds,
    )
