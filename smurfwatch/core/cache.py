"""
Tiered memory + disk cache for Riot API responses and analysis results.

Entries live in a bounded in-memory map and in one JSON document per
namespace on disk. Reads check memory first and fall back to disk, promoting
disk hits back into memory. Writes go to both tiers. Each namespace document is
parsed once and kept in memory; the process is assumed to own its cache
directory.
"""

import copy
import json
import threading
import time
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import structlog

logger = structlog.get_logger(__name__)


class CacheNamespace(str, Enum):
    """On-disk namespaces, one JSON document each."""

    SUMMONERS = "summoners"
    MATCH_HISTORIES = "match_histories"
    MATCH_DETAILS = "match_details"
    ANALYSES = "analyses"
    MASTERIES = "masteries"
    LEAGUES = "leagues"
    PLATFORM = "platform"


# TTL values in milliseconds
HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


@dataclass
class CacheEntry:
    """A cached value with its write and expiry timestamps (epoch ms)."""

    data: Any
    timestamp: int
    expiry: int

    def is_expired(self, now_ms: int) -> bool:
        """An entry is unusable once its expiry time has been reached."""
        return now_ms >= self.expiry

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CacheEntry":
        return cls(
            data=raw["data"],
            timestamp=int(raw["timestamp"]),
            expiry=int(raw["expiry"]),
        )


NamespaceLike = Union[CacheNamespace, str]


class TieredCache:
    """Memory-first cache with write-through JSON persistence per namespace."""

    def __init__(
        self,
        base_dir: Union[str, Path] = "storage",
        max_memory_items: int = 1000,
        default_ttl_ms: int = DAY_MS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            base_dir: Directory holding one ``<namespace>.json`` per namespace
            max_memory_items: Maximum number of entries kept in memory
            default_ttl_ms: TTL used when ``set`` is called without one
            clock: Time source in seconds, injectable for tests
        """
        self.base_dir = Path(base_dir)
        self.max_memory_items = max_memory_items
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._memory: Dict[str, CacheEntry] = {}
        self._documents: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._disk_hits = 0

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                "Failed to initialize cache directory",
                base_dir=str(self.base_dir),
                error=str(e),
            )

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @staticmethod
    def _ns(namespace: NamespaceLike) -> str:
        return namespace.value if isinstance(namespace, CacheNamespace) else namespace

    @staticmethod
    def _memory_key(namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    def _file_path(self, namespace: str) -> Path:
        return self.base_dir / f"{namespace}.json"

    def _read_file(self, namespace: str) -> Dict[str, Dict[str, Any]]:
        """The parsed namespace document, loaded from disk on first use."""
        document = self._documents.get(namespace)
        if document is None:
            document = self._load_file(namespace)
            self._documents[namespace] = document
        return document

    def _load_file(self, namespace: str) -> Dict[str, Dict[str, Any]]:
        """Read a namespace document; unreadable files behave as empty."""
        path = self._file_path(namespace)
        if not path.exists():
            return {}
        try:
            with path.open("r", encoding="utf-8") as f:
                content = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error reading cache file", namespace=namespace, error=str(e))
            return {}
        if not isinstance(content, dict):
            logger.warning("Ignoring malformed cache file", namespace=namespace)
            return {}
        return content

    def _write_file(self, namespace: str, content: Dict[str, Dict[str, Any]]) -> None:
        self._documents[namespace] = content
        path = self._file_path(namespace)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(content, f, indent=2)
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error writing cache file", namespace=namespace, error=str(e))
            # Next read reloads the last persisted document
            self._documents.pop(namespace, None)

    def _prune_memory(self, now_ms: int) -> None:
        """Drop expired entries, then the oldest ones until under capacity."""
        if len(self._memory) <= self.max_memory_items:
            return

        expired = [k for k, entry in self._memory.items() if entry.is_expired(now_ms)]
        for k in expired:
            del self._memory[k]

        overflow = len(self._memory) - self.max_memory_items
        if overflow > 0:
            oldest = sorted(self._memory.items(), key=lambda item: item[1].timestamp)
            for k, _ in oldest[:overflow]:
                del self._memory[k]
            logger.debug("Cache eviction", evicted=overflow, reason="full")

    def get(self, namespace: NamespaceLike, key: str) -> Optional[Any]:
        """
        Get a value if present and unexpired in either tier.

        Args:
            namespace: Cache namespace
            key: Key within the namespace

        Returns:
            A copy of the cached value, or None on miss
        """
        ns = self._ns(namespace)
        memory_key = self._memory_key(ns, key)

        with self.lock:
            now = self._now_ms()

            entry = self._memory.get(memory_key)
            if entry is not None:
                if not entry.is_expired(now):
                    self._hits += 1
                    return copy.deepcopy(entry.data)
                del self._memory[memory_key]
                self._evict_from_disk(ns, key)
                logger.debug("Cache expired", namespace=ns, key=key, tier="memory")

            content = self._read_file(ns)
            raw = content.get(key)
            if raw is not None:
                try:
                    disk_entry = CacheEntry.from_dict(raw)
                except (KeyError, TypeError, ValueError):
                    logger.warning("Dropping malformed cache entry", namespace=ns, key=key)
                    disk_entry = None

                if disk_entry is not None and not disk_entry.is_expired(now):
                    self._memory[memory_key] = disk_entry
                    self._prune_memory(now)
                    self._hits += 1
                    self._disk_hits += 1
                    return copy.deepcopy(disk_entry.data)

                del content[key]
                self._write_file(ns, content)
                logger.debug("Cache expired", namespace=ns, key=key, tier="disk")

            self._misses += 1
            return None

    def _evict_from_disk(self, ns: str, key: str) -> None:
        content = self._read_file(ns)
        if key in content:
            del content[key]
            self._write_file(ns, content)

    def set(
        self,
        namespace: NamespaceLike,
        key: str,
        value: Any,
        ttl_ms: Optional[int] = None,
    ) -> None:
        """
        Store a value in both tiers, replacing any previous entry.

        Args:
            namespace: Cache namespace
            key: Key within the namespace
            value: JSON-serializable value
            ttl_ms: Time to live in milliseconds (default TTL if None)
        """
        ns = self._ns(namespace)
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        if ttl < 0:
            raise ValueError("ttl_ms must be non-negative")

        with self.lock:
            now = self._now_ms()
            entry = CacheEntry(data=copy.deepcopy(value), timestamp=now, expiry=now + ttl)

            self._memory[self._memory_key(ns, key)] = entry
            self._prune_memory(now)

            content = self._read_file(ns)
            content[key] = entry.to_dict()
            self._write_file(ns, content)

        logger.debug("Cache set", namespace=ns, key=key, ttl_ms=ttl)

    def delete(self, namespace: NamespaceLike, key: str) -> None:
        """Remove a key from both tiers."""
        ns = self._ns(namespace)
        with self.lock:
            self._memory.pop(self._memory_key(ns, key), None)
            self._evict_from_disk(ns, key)

    def clear_namespace(self, namespace: NamespaceLike) -> None:
        """Remove every entry of a namespace from both tiers."""
        ns = self._ns(namespace)
        prefix = f"{ns}:"
        with self.lock:
            for memory_key in [k for k in self._memory if k.startswith(prefix)]:
                del self._memory[memory_key]
            self._write_file(ns, {})
        logger.info("Cache namespace cleared", namespace=ns)

    def list_keys(self, namespace: NamespaceLike) -> List[str]:
        """Keys currently persisted for a namespace (expired ones included)."""
        with self.lock:
            return list(self._read_file(self._ns(namespace)).keys())

    def purge_expired(self, namespace: NamespaceLike) -> int:
        """Remove expired entries from a namespace; returns how many were dropped."""
        ns = self._ns(namespace)
        with self.lock:
            now = self._now_ms()
            content = self._read_file(ns)
            expired = [k for k, raw in content.items() if self._unusable(raw, now)]
            for k in expired:
                del content[k]
                self._memory.pop(self._memory_key(ns, k), None)
            if expired:
                self._write_file(ns, content)
        return len(expired)

    @staticmethod
    def _unusable(raw: Any, now_ms: int) -> bool:
        try:
            return CacheEntry.from_dict(raw).is_expired(now_ms)
        except (KeyError, TypeError, ValueError):
            return True

    def get_stats(self) -> Dict[str, Any]:
        """Memory size, hit ratio and per-namespace disk usage."""
        with self.lock:
            total = self._hits + self._misses
            namespaces = []
            for path in sorted(self.base_dir.glob("*.json")):
                namespaces.append(
                    {
                        "namespace": path.stem,
                        "keys": len(self._read_file(path.stem)),
                        "size": path.stat().st_size,
                    }
                )
            return {
                "memory_size": len(self._memory),
                "max_memory_items": self.max_memory_items,
                "hits": self._hits,
                "disk_hits": self._disk_hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total > 0 else 0.0,
                "namespaces": namespaces,
            }

    def __len__(self) -> int:
        """Number of entries held in memory."""
        return len(self._memory)
