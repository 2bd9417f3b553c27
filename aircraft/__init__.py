"""
Simulated delivery aircraft.

Flies delivery flight plans received from the fleet-coordination service and
reports Remote ID identity and position to the network identity service.
"""

from aircraft.models import AircraftState, FlightPlan, Position, Waypoint, Activity
from aircraft.simulator import AircraftSimulator

__all__ = [
    "AircraftState",
    "FlightPlan",
    "Position",
    "Waypoint",
    "Activity",
    "AircraftSimulator",
]
