# Guidance engine: geodesy, progress tracking and instruction generation.

from .geo_utils import bearing, distance
from .instruction_generator import get_next_instruction, get_next_turn
from .models import GeoPoint, InstructionKind, LocationSample, NavigationInstruction, Route
from .nav_config import NavConfig
from .navigator import NavigationSession
from .progress_tracker import get_user_progress

__all__ = [
    "GeoPoint",
    "LocationSample",
    "Route",
    "InstructionKind",
    "NavigationInstruction",
    "NavConfig",
    "NavigationSession",
    "bearing",
    "distance",
    "get_next_instruction",
    "get_next_turn",
    "get_user_progress",
]
