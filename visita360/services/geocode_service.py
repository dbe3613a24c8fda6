"""
geocode_service.py — Address ↔ coordinates via Nominatim, cached.

Forward geocoding goes through the 24h GeocodeCache; reverse geocoding is
always a fresh request. Used by the visit registration flow to fill lat/lng
from a typed address.

Business Rules:
- Never raises: failures return None and set `error` (human-readable, pt-BR)
- A 2xx answer is cached even when nothing was found (null result), so a bad
  address is not re-queried until the entry expires
- Transport errors and non-2xx statuses are NOT cached (transient)
- Non-numeric or out-of-range coordinates from the provider count as not found
- Concurrent lookups of the same normalized address share one request
- No retries

Called by: routers/geocode.py, context.py
Depends on: cache/geocode_cache.py, http_client.py, config.py
"""

import asyncio
import logging
from datetime import datetime

import httpx

from ..http_client import http
from ..utils import safe_float
from ..utils.normalization import normalize_address, validate_coordinates

log = logging.getLogger("visita360.geocode")

ERR_EMPTY_ADDRESS = "Endereço não pode estar vazio"
ERR_NOT_FOUND = "Não foi possível encontrar as coordenadas para este endereço"
ERR_INVALID_COORDS = "Coordenadas inválidas"
ERR_REVERSE_NOT_FOUND = "Nenhum endereço encontrado para estas coordenadas"


class GeocodeService:
    def __init__(
        self,
        cache,
        base_url: str | None = None,
        user_agent: str | None = None,
        country: str | None = None,
        timeout: float | None = None,
    ):
        from ..config import settings

        self.cache = cache
        self.base_url = (base_url or settings.geocode_base_url).rstrip("/")
        self.user_agent = user_agent or settings.geocode_user_agent
        self.country = country if country is not None else settings.geocode_country
        self.timeout = timeout or settings.geocode_timeout_seconds

        self.is_loading = False
        self.error: str | None = None
        self._inflight: dict[str, asyncio.Task] = {}

    validate_coordinates = staticmethod(validate_coordinates)

    @property
    def _headers(self) -> dict:
        return {"User-Agent": self.user_agent}

    # ── Forward geocoding ────────────────────────────────────────────

    async def geocode(self, address: str, now: datetime | None = None) -> dict | None:
        """Resolve a free-text address to {lat, lng, display_name, ...} or None."""
        if not address or not address.strip():
            self.error = ERR_EMPTY_ADDRESS
            return None

        self.error = None
        key = normalize_address(address)

        cached = self.cache.lookup(address, now=now)
        if cached is not None:
            log.debug("Geocode cache HIT: %s", key)
            if cached.result is None:
                self.error = ERR_NOT_FOUND
            return cached.result

        log.debug("Geocode cache MISS: %s", key)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch(address, now))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._finish(k))
        self.is_loading = True

        # shield: a caller going away must not cancel the lookup others await
        result, error = await asyncio.shield(task)
        self.error = error
        return result

    def _finish(self, key: str) -> None:
        self._inflight.pop(key, None)
        self.is_loading = bool(self._inflight)

    async def _fetch(self, address: str, now: datetime | None) -> tuple[dict | None, str | None]:
        params = {
            "format": "json",
            "addressdetails": 1,
            "limit": 1,
            "q": f"{address.strip()}, {self.country}" if self.country else address.strip(),
        }
        try:
            r = await http.get(
                f"{self.base_url}/search",
                params=params,
                headers=self._headers,
                timeout=self.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("Geocode request failed for %r: %s", address, e)
            return None, f"Erro na geocodificação: {e}"

        if not r.is_success:
            log.warning("Geocode HTTP %s for %r", r.status_code, address)
            return None, f"Erro na geocodificação: {r.status_code}"

        try:
            data = r.json()
        except ValueError:
            log.warning("Geocode response is not JSON for %r", address)
            data = None

        result = self._parse_search(data)
        self.cache.store(address, result, now=now)
        if result is None:
            return None, ERR_NOT_FOUND
        return result, None

    @staticmethod
    def _parse_search(data) -> dict | None:
        if not isinstance(data, list) or not data:
            return None
        location = data[0]
        if not isinstance(location, dict):
            return None

        lat = safe_float(location.get("lat"))
        lng = safe_float(location.get("lon"))
        if lat is None or lng is None or not validate_coordinates(lat, lng):
            return None

        return {
            "lat": lat,
            "lng": lng,
            "display_name": location.get("display_name") or "",
            "boundingbox": location.get("boundingbox") or [],
            "class": location.get("class") or "",
            "type": location.get("type") or "",
        }

    # ── Reverse geocoding ────────────────────────────────────────────

    async def reverse_geocode(self, lat, lng) -> str | None:
        """Coordinates → display address. Never cached."""
        self.error = None
        if not validate_coordinates(lat, lng):
            self.error = ERR_INVALID_COORDS
            return None

        self.is_loading = True
        try:
            r = await http.get(
                f"{self.base_url}/reverse",
                params={"format": "json", "lat": safe_float(lat), "lon": safe_float(lng)},
                headers=self._headers,
                timeout=self.timeout,
            )
            if not r.is_success:
                log.warning("Reverse geocode HTTP %s for %s,%s", r.status_code, lat, lng)
                self.error = f"Erro no reverse geocoding: {r.status_code}"
                return None
            data = r.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            log.warning("Reverse geocode failed for %s,%s: %s", lat, lng, e)
            self.error = f"Erro no reverse geocoding: {e}"
            return None
        finally:
            self.is_loading = bool(self._inflight)

        display_name = data.get("display_name") if isinstance(data, dict) else None
        if not display_name:
            self.error = ERR_REVERSE_NOT_FOUND
            return None
        return display_name
