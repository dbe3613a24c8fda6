"""Geocode cache — normalized address → coordinates, 24-hour TTL.

The whole cache is one JSON blob in the state store:

    {"rua pedrália 417 - são paulo": {"result": {...} | null, "timestamp": 1704067200000}}

Business Rules:
- Keys are normalize_address() forms, so "Rua A, 10" and "rua a 10" share an entry
- A null result is a remembered failed lookup; it is a hit until it expires
- Expired entries are purged lazily on the next lookup, never by a timer
- Missing or malformed JSON is an empty cache
- Every mutation writes the blob back to the store

Called by: services/geocode_service.py, context.py
Depends on: cache/state_store.py, utils/normalization.py
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from ..constants import GEOCODE_CACHE_KEY
from ..utils import epoch_millis
from ..utils.normalization import normalize_address

log = logging.getLogger("visita360.cache")

DEFAULT_TTL_HOURS = 24


@dataclass
class GeocodeCacheEntry:
    result: dict | None
    timestamp: int  # epoch millis


def _now_ms(now: datetime | None) -> int:
    return epoch_millis(now or datetime.now(timezone.utc))


class GeocodeCache:
    def __init__(self, store=None, ttl_hours: float = DEFAULT_TTL_HOURS, key: str = GEOCODE_CACHE_KEY):
        self._store = store
        self._key = key
        self.ttl_ms = int(ttl_hours * 3600 * 1000)
        self._entries: dict[str, dict] | None = None

    # ── Persistence ──────────────────────────────────────────────────

    def _load(self) -> dict[str, dict]:
        if self._entries is None:
            raw = self._store.get(self._key) if self._store else None
            self._entries = self._parse(raw)
        return self._entries

    @staticmethod
    def _parse(raw: str | None) -> dict[str, dict]:
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            log.warning("Geocode cache blob is malformed, starting empty: %s", e)
            return {}
        if not isinstance(data, dict):
            log.warning("Geocode cache blob is not an object, starting empty")
            return {}

        entries = {}
        for key, value in data.items():
            if not isinstance(value, dict):
                continue
            ts = value.get("timestamp")
            result = value.get("result")
            if not isinstance(ts, (int, float)) or isinstance(ts, bool):
                continue
            if result is not None and not isinstance(result, dict):
                continue
            entries[key] = {"result": result, "timestamp": int(ts)}
        return entries

    def _persist(self) -> None:
        if self._store is None or self._entries is None:
            return
        self._store.set(self._key, json.dumps(self._entries, ensure_ascii=False))

    def flush(self) -> None:
        """Write the in-memory cache back to the store (shutdown hook)."""
        self._persist()

    # ── Cache operations ─────────────────────────────────────────────

    def _is_expired(self, entry: dict, now_ms: int) -> bool:
        return now_ms - entry["timestamp"] >= self.ttl_ms

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop every entry older than the TTL. Returns count removed."""
        entries = self._load()
        now_ms = _now_ms(now)
        expired = [k for k, v in entries.items() if self._is_expired(v, now_ms)]
        for k in expired:
            del entries[k]
        if expired:
            log.debug("Geocode cache: purged %d expired entries", len(expired))
            self._persist()
        return len(expired)

    def lookup(self, address: str, now: datetime | None = None) -> GeocodeCacheEntry | None:
        """Return the unexpired entry for an address, or None on a miss."""
        key = normalize_address(address)
        self.purge_expired(now)
        entry = self._load().get(key)
        if entry is None:
            return None
        return GeocodeCacheEntry(result=entry["result"], timestamp=entry["timestamp"])

    def store(self, address: str, result: dict | None, now: datetime | None = None) -> None:
        key = normalize_address(address)
        if not key:
            return
        self._load()[key] = {"result": result, "timestamp": _now_ms(now)}
        self._persist()

    def remember(
        self,
        address: str,
        lat: float,
        lng: float,
        display_name: str = "",
        now: datetime | None = None,
    ) -> None:
        """Store coordinates the caller already knows (e.g. typed on the visit form)."""
        self.store(
            address,
            {
                "lat": float(lat),
                "lng": float(lng),
                "display_name": display_name or address.strip(),
                "boundingbox": [],
                "class": "manual",
                "type": "manual",
            },
            now=now,
        )

    def stats(self, now: datetime | None = None) -> dict:
        entries = self._load()
        now_ms = _now_ms(now)
        expired = sum(1 for v in entries.values() if self._is_expired(v, now_ms))
        return {"total": len(entries), "active": len(entries) - expired, "expired": expired}

    def clear(self) -> None:
        self._entries = {}
        if self._store is not None:
            self._store.delete(self._key)

    def __len__(self) -> int:
        return len(self._load())
