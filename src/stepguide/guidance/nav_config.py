# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

from dataclasses import dataclass, field
from typing import Tuple


# ---------------------------------------------------------------------------
# Guidance thresholds (metres / degrees)
# ---------------------------------------------------------------------------

DIRECTION_THRESHOLD_DEG: float = 30.0    # heading error that turns a lookahead into a TURN
TURN_THRESHOLD_M: float = 15.0           # switch to "next turn" lookahead below this
ARRIVAL_THRESHOLD_M: float = 10.0        # waypoint counts as reached below this
HEADING_TOLERANCE_DEG: float = 20.0      # "straight ahead" window
COUNTDOWN_THRESHOLD_M: float = 20.0      # graded arrival announcements start here
AVERAGE_STRIDE_LENGTH_M: float = 0.7


# ---------------------------------------------------------------------------
# Route service
# ---------------------------------------------------------------------------

API_BASE_URL: str = "https://ap.cs.ucy.ac.cy:44/api"
DEFAULT_BUILDING_ID: str = "building_7bf70569-257e-412d-a4be-9d1d85296a14_1731512504566"
DEFAULT_API_TIMEOUT_S: float = 15.0

PREFERRED_VOICES: Tuple[str, ...] = (
    "Samantha", "Victoria", "Ava", "Moira", "Karen", "Tessa", "Kathy",
)


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Guidance
    direction_threshold_deg: float = DIRECTION_THRESHOLD_DEG
    turn_threshold_m: float = TURN_THRESHOLD_M
    arrival_threshold_m: float = ARRIVAL_THRESHOLD_M
    heading_tolerance_deg: float = HEADING_TOLERANCE_DEG
    countdown_threshold_m: float = COUNTDOWN_THRESHOLD_M
    stride_length_m: float = AVERAGE_STRIDE_LENGTH_M

    # Session
    announce_countdown: bool = True        # speak graded arrival phrases near the destination

    # Route service
    api_base_url: str = API_BASE_URL
    building_id: str = DEFAULT_BUILDING_ID
    floor_number: str = "0"
    request_timeout_s: float = DEFAULT_API_TIMEOUT_S
    max_retries: int = 3
    retry_base_delay_s: float = 1.0

    # Speech
    speech_rate: int = 150                 # words per minute (pyttsx3 'rate')
    speech_volume: float = 1.0
    speech_pitch: float = 0.7              # applied only by drivers that support it
    preferred_voices: Tuple[str, ...] = field(default=PREFERRED_VOICES)

    @property
    def pois_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/mapping/pois/floor/all"

    @property
    def route_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/navigation/route/coordinates"
