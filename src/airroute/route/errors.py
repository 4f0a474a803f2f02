"""Route expansion errors.

Two layers:

- ``RouteExpansionError`` and subclasses are raised by the pure expander
  functions when an airway or procedure cannot be expanded.
- ``RouteError`` records are what callers see. The resolver converts every
  failure into one and carries on with the next node.
"""

from dataclasses import dataclass
from enum import Enum


class RouteErrorKind(Enum):
    """Category of a recorded route error."""

    WAYPOINT_NOT_FOUND = "WaypointNotFound"
    AIRWAY_NOT_FOUND = "AirwayNotFound"
    FIX_NOT_ON_AIRWAY = "FixNotOnAirway"
    PROCEDURE_NOT_FOUND = "ProcedureNotFound"
    PROCEDURE_EXPANSION_FAILED = "ProcedureExpansionFailed"
    TRANSITION_NOT_FOUND = "TransitionNotFound"
    INVALID_COORDINATE_FORMAT = "InvalidCoordinateFormat"


@dataclass(frozen=True)
class RouteError:
    """One failure recorded during expansion.

    Attributes:
        kind: Error category
        token: Offending token text
        index: Token position in the route
        message: Human-readable description
    """

    kind: RouteErrorKind
    token: str
    index: int
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value} [{self.index}] {self.token}: {self.message}"


class RouteExpansionError(Exception):
    """Base class for expander failures."""


class FixNotOnAirwayError(RouteExpansionError):
    """Raised when a segment endpoint is not part of the airway."""

    def __init__(self, fix: str, airway_id: str) -> None:
        super().__init__(f"{fix} not found on airway {airway_id}")
        self.fix = fix
        self.airway_id = airway_id


class TransitionNotFoundError(RouteExpansionError):
    """Raised when an explicitly requested transition does not exist."""

    def __init__(self, transition: str, procedure: str) -> None:
        super().__init__(f"Transition {transition} not found for {procedure}")
        self.transition = transition
        self.procedure = procedure
