# Overview: Forward/reverse geocoding against a Nominatim-compatible map search provider.

from __future__ import annotations

import httpx
from flask import current_app


class GeocodingError(Exception):
    """Upstream provider failed or returned something unusable (502)."""


class Geocoder:
    """
    Thin httpx client for /search and /reverse.

    transport is injectable so tests can use httpx.MockTransport.
    """

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport

    def _get(self, path: str, params: dict):
        params = {**params, "format": "jsonv2"}
        try:
            with httpx.Client(
                base_url=self.base_url,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                resp = client.get(path, params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoding provider error: {exc}") from exc
        except ValueError as exc:
            raise GeocodingError("Geocoding provider returned invalid JSON") from exc

    @staticmethod
    def _normalise(place: dict) -> dict:
        try:
            return {
                "display_name": place.get("display_name"),
                "latitude": float(place["lat"]),
                "longitude": float(place["lon"]),
            }
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError("Geocoding provider returned an incomplete place") from exc

    def search(self, query: str, limit: int = 5) -> list[dict]:
        places = self._get("/search", {"q": query, "limit": limit, "countrycodes": "in"})
        if not isinstance(places, list):
            raise GeocodingError("Unexpected search response")
        return [self._normalise(p) for p in places]

    def reverse(self, latitude: float, longitude: float) -> dict | None:
        place = self._get("/reverse", {"lat": latitude, "lon": longitude})
        if not isinstance(place, dict):
            raise GeocodingError("Unexpected reverse response")
        if "error" in place:
            return None
        return self._normalise(place)


def get_geocoder() -> Geocoder:
    return current_app.extensions["geocoder"]
