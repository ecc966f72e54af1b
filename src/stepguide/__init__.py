"""
stepguide - turn-by-turn walking guidance for indoor and outdoor routes.

Feed it location/heading samples and a waypoint route; it tells the user
where the next waypoint is and how many steps it takes to get there.
"""

__version__ = "0.1.0"
