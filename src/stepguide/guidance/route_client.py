# route_client.py
# HTTP client for the indoor routing service.
# Fetches the POI catalogue and the waypoint list for (origin, POI, floor).

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .models import GeoPoint, Route, make_route
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


class RouteServiceError(Exception):
    """The routing service answered with a payload we cannot use."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class POI:
    """A point of interest a route can be requested to."""
    puid: str
    name: str
    description: str
    latitude: float
    longitude: float
    floor_number: str

    @property
    def coord(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    @property
    def is_connector(self) -> bool:
        return self.description == "Connector"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "POI":
        return POI(
            puid=d["puid"],
            name=d.get("name", ""),
            description=d.get("description", ""),
            latitude=float(d["coordinates_lat"]),
            longitude=float(d["coordinates_lon"]),
            floor_number=str(d.get("floor_number", "0")),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.puid}, floor {self.floor_number})"


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def _is_retryable_error(e: requests.exceptions.HTTPError) -> bool:
    """Rate limiting and server errors are worth another attempt."""
    if e.response is not None:
        return e.response.status_code == 429 or e.response.status_code >= 500
    return False


class RouteClient:
    """
    Talks to the routing service.

    Args:
        config:  NavConfig with the base URL, building id and retry settings.
        session: Optional requests.Session (shared connection pool, tests).
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or NavConfig()
        self._http = session or requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _post(self, url: str, payload: Dict[str, Any], params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        POST JSON and return the decoded body.

        Retries 429 and 5xx with exponential backoff.

        Raises:
            requests.exceptions.RequestException: On network or HTTP errors after retries.
            RouteServiceError: If the body is not a JSON object.
        """
        attempt = 0
        while True:
            try:
                response = self._http.post(
                    url,
                    json=payload,
                    params=params,
                    headers={"Content-Type": "application/json"},
                    timeout=self.config.request_timeout_s,
                )
                response.raise_for_status()
                break
            except requests.exceptions.HTTPError as e:
                if _is_retryable_error(e) and attempt < self.config.max_retries:
                    delay = self.config.retry_base_delay_s * (2 ** attempt)
                    logger.warning(
                        f"Route service returned {e.response.status_code}, retrying in "
                        f"{delay:.1f}s (attempt {attempt + 1} of {self.config.max_retries + 1})"
                    )
                    time.sleep(delay)
                    attempt += 1
                    continue
                raise

        try:
            data = response.json()
        except ValueError as e:
            raise RouteServiceError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise RouteServiceError(f"Unexpected response type from {url}: {type(data).__name__}")
        return data

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch_pois(
        self,
        floor_number: Optional[str] = None,
        exclude_connectors: bool = True,
    ) -> List[POI]:
        """
        Download the POI catalogue for one floor of the configured building.

        Args:
            floor_number:       Floor to list; config default if omitted.
            exclude_connectors: Drop stairs/elevator "Connector" entries.

        Returns:
            List of POI.

        Raises:
            RouteServiceError: If the payload has no POI list.
        """
        floor = floor_number if floor_number is not None else self.config.floor_number
        data = self._post(
            self.config.pois_url,
            {"buid": self.config.building_id, "floor_number": floor},
        )
        raw = data.get("pois")
        if not isinstance(raw, list):
            raise RouteServiceError("Invalid POIs data format")

        pois = []
        for entry in raw:
            try:
                pois.append(POI.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed POI {entry!r}: {e}")

        if exclude_connectors:
            pois = [p for p in pois if not p.is_connector]
        logger.info(f"Loaded {len(pois)} POIs for floor {floor}.")
        return pois

    def get_route(self, origin: GeoPoint, poi: POI) -> Route:
        """
        Request the fastest route from origin to poi.

        The origin is prepended so index 0 is the user's position when the
        route was requested.

        Raises:
            RouteServiceError: If the payload has no usable coordinate list.
        """
        data = self._post(
            self.config.route_url,
            {
                "coordinates_lon": str(origin.longitude),
                "coordinates_lat": str(origin.latitude),
                "floor_number": poi.floor_number,
                "pois_to": poi.puid,
            },
            # cache buster
            params={"nocache": int(time.time() * 1000)},
        )
        raw = data.get("pois")
        if not isinstance(raw, list):
            raise RouteServiceError("Invalid route data format")

        try:
            points = [GeoPoint(float(p["lat"]), float(p["lon"])) for p in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise RouteServiceError(f"Invalid route coordinate: {e}") from e

        route = make_route([origin] + points)
        logger.info(f"Route to {poi.name}: {len(route)} points.")
        return route
