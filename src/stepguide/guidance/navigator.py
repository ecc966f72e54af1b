# navigator.py
# Public entry point for a navigation session.
# Owns the active route and segment index; all geometry and instruction
# logic lives in the stateless modules it delegates to.

import logging
import threading
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

import requests

from .geo_utils import distance
from .instruction_generator import countdown_message, get_next_instruction
from .map_overlay import MapOverlay
from .models import GeoPoint, InstructionKind, LocationSample, NavigationInstruction, Route, make_route
from .nav_config import NavConfig
from .progress_tracker import get_user_progress
from .route_client import POI, RouteClient, RouteServiceError

if TYPE_CHECKING:
    from ..speech.tts import SpeechOutput

logger = logging.getLogger(__name__)

InstructionListener = Callable[[LocationSample, NavigationInstruction], None]


class NavigationSession:
    """
    High-level navigation facade.

    Typical lifecycle:
        session = NavigationSession(config, speech=SpeechOutput(config))
        session.navigate_to(GeoPoint(lat, lon), poi)

        # Location/heading loop:
        instruction = session.update(LocationSample(lat, lon, heading))

    Args:
        config:       Optional NavConfig; defaults to NavConfig().
        speech:       Shared speech sink; instructions are only returned if omitted.
        route_client: RouteClient used by navigate_to(); created lazily if omitted.
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        speech: Optional["SpeechOutput"] = None,
        route_client: Optional[RouteClient] = None,
    ) -> None:
        self.config = config or NavConfig()
        self._speech = speech
        self._route_client = route_client
        self._listeners: List[InstructionListener] = []

        # Route and segment are swapped together under the lock
        self._lock = threading.Lock()
        self._route: Route = ()
        self._segment: int = 0
        self._last_instruction: Optional[NavigationInstruction] = None
        self._last_timestamp: Optional[float] = None

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def set_route(self, route: Sequence[GeoPoint]) -> None:
        """
        Install a new route and restart from segment 0.

        The newest sample timestamp is kept, so a delayed sample taken before
        the swap is still dropped afterwards.
        """
        frozen = make_route(route)
        with self._lock:
            self._route = frozen
            self._segment = 0
            self._last_instruction = None
        if self._speech is not None:
            self._speech.reset()
        logger.info(f"Route installed, {len(frozen)} points.")

    def clear_route(self) -> None:
        with self._lock:
            self._route = ()
            self._segment = 0
            self._last_instruction = None
            self._last_timestamp = None

    def stop_navigation(self) -> None:
        """Forcibly end the current navigation session."""
        self.clear_route()
        if self._speech is not None:
            self._speech.stop()
        logger.info("Navigation stopped by user.")

    def navigate_to(self, origin: GeoPoint, poi: POI) -> Tuple[bool, str]:
        """
        Fetch a route to poi and begin tracking.

        Args:
            origin: Current user position.
            poi:    Destination point of interest.

        Returns:
            (success, message)
        """
        if self._route_client is None:
            self._route_client = RouteClient(self.config)

        logger.info(f"Requesting route: {origin} → {poi}")
        try:
            route = self._route_client.get_route(origin, poi)
        except (RouteServiceError, requests.exceptions.RequestException) as e:
            logger.warning(f"Route request failed: {e}")
            return False, "Failed to calculate route"

        if len(route) < 2:
            logger.warning("Route service returned no waypoints.")
            return False, "No route found"

        self.set_route(route)
        return True, f"Route ready. {len(route) - 1} waypoints to {poi.name}."

    def add_listener(self, listener: InstructionListener) -> None:
        """Call listener(sample, instruction) for every produced instruction."""
        self._listeners.append(listener)

    def remove_listener(self, listener: InstructionListener) -> None:
        self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Location update: call this on every position/heading fix
    # ------------------------------------------------------------------

    def update(self, sample: LocationSample) -> Optional[NavigationInstruction]:
        """
        Process a new location sample and return the current instruction.

        Args:
            sample: Current position and heading.

        Returns:
            NavigationInstruction, or None when no route is active or the
            sample is older than one already processed.
        """
        with self._lock:
            route = self._route
            if not route:
                return None
            if (
                sample.timestamp is not None
                and self._last_timestamp is not None
                and sample.timestamp < self._last_timestamp
            ):
                logger.debug(f"Dropping stale sample at t={sample.timestamp}")
                return None

            segment = get_user_progress(sample, route)
            instruction = get_next_instruction(sample, route, segment, self.config)

            self._segment = segment
            self._last_instruction = instruction
            if sample.timestamp is not None:
                self._last_timestamp = sample.timestamp

        logger.debug(f"Segment {segment}: [{instruction.kind.name}] {instruction.message}")
        self._announce(instruction)
        for listener in list(self._listeners):
            listener(sample, instruction)
        return instruction

    def _announce(self, instruction: NavigationInstruction) -> None:
        if self._speech is None:
            return
        text = instruction.message
        if (
            self.config.announce_countdown
            and instruction.kind == InstructionKind.DESTINATION
            and instruction.distance_meters <= self.config.countdown_threshold_m
        ):
            text = countdown_message(instruction.distance_meters, self.config)
        self._speech.speak(text)

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return len(self._route) >= 2

    @property
    def route(self) -> Route:
        return self._route

    @property
    def current_segment(self) -> int:
        return self._segment

    @property
    def last_instruction(self) -> Optional[NavigationInstruction]:
        return self._last_instruction

    def distance_to_next(self, location: GeoPoint) -> Optional[float]:
        """Metres from location to the waypoint after the current segment."""
        with self._lock:
            route, segment = self._route, self._segment
        if segment >= len(route) - 1:
            return None
        return distance(location, route[segment + 1])

    def overlay(self, sample: LocationSample) -> MapOverlay:
        with self._lock:
            return MapOverlay(
                location=sample,
                waypoints=list(self._route),
                instruction=self._last_instruction,
            )
