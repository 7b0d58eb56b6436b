"""Time-bounded in-memory cache for pricing results.

Entries expire after a fixed TTL: passively on read, and actively through a
removal callback scheduled on the running event loop when one exists. There
is no size bound or LRU policy.
"""

import asyncio
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime

from tripcost.models.pricing import PricingUpdate
from tripcost.models.selection import SelectedItems, TripContext


@dataclass
class CacheEntry:
    """Cached pricing result with metadata."""

    value: PricingUpdate
    cached_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        """Check if cache entry is still valid."""
        return (now - self.cached_at).total_seconds() < self.ttl_seconds


class PricingCache:
    """In-memory pricing cache owned by one calculator."""

    def __init__(self, ttl_seconds: int) -> None:
        self._ttl_seconds = ttl_seconds
        self._cache: dict[str, CacheEntry] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def make_key(
        self,
        selected_items: SelectedItems,
        trip_context: TripContext,
        currency: str,
    ) -> str:
        """Generate deterministic cache key from selection content."""
        accommodation_ids, activity_ids, transportation_ids = selected_items.sorted_ids()
        data = {
            "accommodations": accommodation_ids,
            "activities": activity_ids,
            "transportation": transportation_ids,
            "start_date": trip_context.start_date.isoformat(),
            "end_date": trip_context.end_date.isoformat(),
            "travelers": [
                trip_context.travelers.adults,
                trip_context.travelers.children,
                trip_context.travelers.infants,
            ],
            "currency": currency,
        }
        sorted_json = json.dumps(data, sort_keys=True)
        hash_digest = hashlib.sha256(sorted_json.encode()).hexdigest()
        return f"pricing:{hash_digest}"

    def get(self, key: str, now: datetime) -> PricingUpdate | None:
        """Get cached value if fresh, None otherwise."""
        entry = self._cache.get(key)
        if entry and entry.is_fresh(now):
            return entry.value
        elif entry:
            # Expired - remove
            self._remove(key)
        return None

    def set(self, key: str, value: PricingUpdate, now: datetime) -> None:
        """Store value and schedule its removal after the TTL."""
        self._cancel_timer(key)
        self._cache[key] = CacheEntry(value=value, cached_at=now, ttl_seconds=self._ttl_seconds)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timers[key] = loop.call_later(self._ttl_seconds, self._remove, key)

    def purge_expired(self, now: datetime) -> int:
        """Drop every expired entry. Returns number removed."""
        expired = [k for k, e in self._cache.items() if not e.is_fresh(now)]
        for key in expired:
            self._remove(key)
        return len(expired)

    def clear(self) -> None:
        """Drop all entries and pending removal callbacks."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def _remove(self, key: str) -> None:
        self._cancel_timer(key)
        self._cache.pop(key, None)

    def _cancel_timer(self, key: str) -> None:
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()
