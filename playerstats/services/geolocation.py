from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
import pycountry
from loguru import logger

from playerstats.core.config import GeoSettings
from playerstats.core.errors import UpstreamError


@dataclass(frozen=True)
class GeoRecord:
    country_name: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    postal: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None


class GeoLookup(Protocol):
    async def lookup(self, ip: str) -> Optional[GeoRecord]:
        ...


class IpInfoClient:
    """ipinfo.io lookups keyed by the API token stored in plugin settings."""

    # Status reported when the provider rejects a token on save.
    TOKEN_REJECTED_STATUS = 216

    def __init__(
        self,
        api_key: Optional[str],
        settings: Optional[GeoSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or GeoSettings()
        self.api_key = api_key
        self.base_url = str(self.settings.ipinfo_url).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=self.settings.ipinfo_timeout)

    async def lookup(self, ip: str) -> Optional[GeoRecord]:
        if not self.api_key:
            return None

        try:
            response = await self.client.get(
                f"{self.base_url}/{ip}",
                params={"token": self.api_key},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Geolocation lookup failed for {ip}: {e}")
            raise UpstreamError(f"Geolocation lookup failed: {e}", status_code=500)

        if response.status_code != 200:
            logger.error(f"Geolocation error for {ip}: {response.status_code} - {response.text}")
            raise UpstreamError(
                _error_message(response),
                code=str(response.status_code),
                status_code=response.status_code,
            )

        data = response.json()
        if data.get("bogon"):
            return None

        latitude = longitude = None
        if data.get("loc"):
            latitude, _, longitude = data["loc"].partition(",")

        return GeoRecord(
            country_name=data.get("country_name") or country_name(data.get("country")),
            country=data.get("country"),
            region=data.get("region"),
            city=data.get("city"),
            postal=data.get("postal"),
            latitude=latitude,
            longitude=longitude,
        )

    async def verify_token(self) -> None:
        try:
            response = await self.client.get(
                self.base_url,
                params={"token": self.api_key},
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Could not reach geolocation provider: {e}")
            raise UpstreamError(str(e), status_code=500)

        if response.status_code != 200:
            logger.warning(f"Geolocation token rejected: {response.status_code}")
            raise UpstreamError(
                _error_message(response),
                code=str(response.status_code),
                status_code=self.TOKEN_REJECTED_STATUS,
            )

    async def close(self):
        await self.client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or error.get("title") or str(error)
    if isinstance(error, str):
        return error
    return response.text


def country_name(code: Optional[str]) -> Optional[str]:
    """Human-readable name for an ISO 3166 alpha-2 code, or the code itself if unknown."""
    if not code:
        return code
    country = pycountry.countries.get(alpha_2=code.upper())
    if country is None:
        logger.warning(f"Unknown country code from geolocation provider: {code}")
        return code
    return country.name
