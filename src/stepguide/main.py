# main.py
# Entry point: simulates a location/heading loop feeding a NavigationSession.
# In production, replace the simulated walk with your real location provider.
#
#   python -m stepguide.main                 # built-in demo route
#   python -m stepguide.main --poi <puid>    # route from the routing service
#   python -m stepguide.main --speak         # also announce through pyttsx3

import argparse
import logging
import sys
import time
from typing import List, Optional

from .guidance.geo_utils import bearing
from .guidance.models import GeoPoint, InstructionKind, LocationSample
from .guidance.nav_config import NavConfig
from .guidance.navigator import NavigationSession
from .guidance.route_client import RouteClient
from .speech.tts import SpeechOutput

logger = logging.getLogger("stepguide")

# ------------------------------------------------------------------
# Demo route (a short indoor corridor with two turns)
# ------------------------------------------------------------------
DEMO_ROUTE: List[GeoPoint] = [
    GeoPoint(35.144780, 33.411220),   # Origin
    GeoPoint(35.144780, 33.411720),   # East along the corridor
    GeoPoint(35.145180, 33.411720),   # Turn left, north
    GeoPoint(35.145180, 33.412120),   # Turn right, destination
]


def simulate_walk(route: List[GeoPoint], samples_per_leg: int = 6) -> List[LocationSample]:
    """Evenly spaced samples along each leg, facing the leg's bearing."""
    samples = []
    t = 0.0
    for start, end in zip(route, route[1:]):
        heading = bearing(start, end)
        for i in range(samples_per_leg):
            f = i / samples_per_leg
            samples.append(LocationSample(
                latitude=start.latitude + (end.latitude - start.latitude) * f,
                longitude=start.longitude + (end.longitude - start.longitude) * f,
                heading=heading,
                timestamp=t,
            ))
            t += 1.0
    last = route[-1]
    samples.append(LocationSample(last.latitude, last.longitude, samples[-1].heading, timestamp=t))
    return samples


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a walk and print guidance instructions.")
    parser.add_argument("--poi", help="Destination POI puid; fetch the route from the routing service")
    parser.add_argument("--floor", default="0", help="Floor number for the routing service (default: 0)")
    parser.add_argument("--api-url", default=None, help="Routing service base URL")
    parser.add_argument("--speak", action="store_true", help="Announce instructions through text-to-speech")
    parser.add_argument("--interval", type=float, default=0.05, help="Seconds between simulated samples")
    parser.add_argument("--debug", action="store_true", help="Log per-tick geometry")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    # ------------------------------------------------------------------
    # Logging setup: configure once here, all modules inherit
    # ------------------------------------------------------------------
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = NavConfig(floor_number=args.floor)
    if args.api_url:
        config.api_base_url = args.api_url

    speech = SpeechOutput(config) if args.speak else None
    session = NavigationSession(config, speech=speech)

    origin = DEMO_ROUTE[0]
    if args.poi:
        client = RouteClient(config)
        pois = {p.puid: p for p in client.fetch_pois(args.floor)}
        poi = pois.get(args.poi)
        if poi is None:
            logger.error(f"Unknown POI: {args.poi}")
            return 1
        success, msg = session.navigate_to(origin, poi)
        if not success:
            logger.error(f"Could not start navigation: {msg}")
            return 1
    else:
        session.set_route(DEMO_ROUTE)

    print("\n--- Location Loop Active ---")
    try:
        for sample in simulate_walk(list(session.route)):
            instruction = session.update(sample)
            if instruction is None:
                continue
            print(
                f"  ({sample.latitude:.6f}, {sample.longitude:.6f}) hdg {sample.heading:5.1f} "
                f"→ [{instruction.kind.name}] {instruction.message}"
            )
            if instruction.kind == InstructionKind.DESTINATION and instruction.distance_meters == 0:
                print("  ✓  Destination reached. Navigation ended.")
                break
            time.sleep(args.interval)
    finally:
        if speech is not None:
            speech.close()

    print("\n--- Session complete ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
