"""Core entity definitions for the simulation.

This module contains enums and basic types that are used across
the codebase, placed here to avoid circular imports.
"""

from enum import Enum, IntEnum


class AgeCategory(Enum):
    """Survivor age bracket. Children are under 18."""
    CHILD = "child"
    ADULT = "adult"


class HealthCondition(Enum):
    """Survivor health on arrival at the camp."""
    HEALTHY = "healthy"
    INJURED = "injured"


class StationId(IntEnum):
    """Service stations in the camp.

    The integer value fixes the order in which stations are polled
    during the C-phase, so simultaneous service starts are reproducible.
    """
    MEDICAL = 1
    REGISTRATION = 2
    COMMUNICATION = 3
    SUPPLIES = 4
    ACCOMMODATION = 5
    CHILD_SHELTER = 6
    ADULT_SHELTER = 7


class EventType(IntEnum):
    """Closed set of event tags handled by the camp model.

    One arrival tag plus one completion tag per station.
    """
    ARRIVAL = 0
    MEDICAL_COMPLETE = 1
    REGISTRATION_COMPLETE = 2
    COMMUNICATION_COMPLETE = 3
    SUPPLIES_COMPLETE = 4
    ACCOMMODATION_COMPLETE = 5
    CHILD_SHELTER_COMPLETE = 6
    ADULT_SHELTER_COMPLETE = 7


# Completion tag scheduled by each station
COMPLETION_EVENTS = {
    StationId.MEDICAL: EventType.MEDICAL_COMPLETE,
    StationId.REGISTRATION: EventType.REGISTRATION_COMPLETE,
    StationId.COMMUNICATION: EventType.COMMUNICATION_COMPLETE,
    StationId.SUPPLIES: EventType.SUPPLIES_COMPLETE,
    StationId.ACCOMMODATION: EventType.ACCOMMODATION_COMPLETE,
    StationId.CHILD_SHELTER: EventType.CHILD_SHELTER_COMPLETE,
    StationId.ADULT_SHELTER: EventType.ADULT_SHELTER_COMPLETE,
}

# Display names used in logs, observer callbacks and exports
STATION_NAMES = {
    StationId.MEDICAL: "Medical Treatment Station",
    StationId.REGISTRATION: "Registration Desk",
    StationId.COMMUNICATION: "Communication Center",
    StationId.SUPPLIES: "Supplies Distribution Point",
    StationId.ACCOMMODATION: "Accommodation Center",
    StationId.CHILD_SHELTER: "Child Shelter Assignment",
    StationId.ADULT_SHELTER: "Adult Shelter Assignment",
}


class StationState(Enum):
    """Station server state."""
    IDLE = "idle"
    BUSY = "busy"


class DurationPolicy(Enum):
    """How a station obtains its base service duration.

    - SAMPLED: draw from the station's generator
    - FIXED: use the configured fixed duration instead of the draw
    """
    SAMPLED = "sampled"
    FIXED = "fixed"


class EngineState(Enum):
    """Lifecycle of a three-phase engine run."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"
