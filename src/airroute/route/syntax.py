"""Syntax nodes produced by the route parser.

Nodes describe the shape of the route only. Whether an identifier exists,
or whether a procedure-shaped word really is a procedure, is decided later
by the resolver.
"""

from dataclasses import dataclass

from airroute.route.lexer import Token


@dataclass(frozen=True)
class WaypointNode:
    """Airport, navaid or fix identifier."""

    token: Token


@dataclass(frozen=True)
class CoordinateNode:
    """Latitude/longitude waypoint such as ``4814N/06848W``."""

    token: Token


@dataclass(frozen=True)
class DirectNode:
    """The ``DCT`` keyword. Never appears in the expanded route."""

    token: Token


@dataclass(frozen=True)
class AirwaySegmentNode:
    """``FROM AIRWAY TO`` triple.

    The ``to_token`` is shared with the next node, so chained segments
    ``A V1 B V2 C`` become two overlapping segments.
    """

    from_token: Token
    airway: Token
    to_token: Token

    @property
    def token(self) -> Token:
        return self.from_token


@dataclass(frozen=True)
class ProcedureNode:
    """DP or STAR reference.

    Attributes:
        token: Source token (e.g. ``MTHEW.CHPPR1``)
        procedure: Procedure part (``CHPPR1``)
        transition: Requested transition, None for automatic selection
        explicit: True when the transition was written in chart notation
    """

    token: Token
    procedure: str
    transition: str | None = None
    explicit: bool = False


@dataclass(frozen=True)
class ProcedureOrWaypointNode:
    """Word shaped like a procedure (``WYNDE3``) whose type needs data to decide.

    Attributes:
        token: Source token
        base_name: Letters before the number (``WYNDE``)
        number_suffix: Trailing digits (``3``)
    """

    token: Token
    base_name: str
    number_suffix: str


SyntaxNode = (
    WaypointNode
    | CoordinateNode
    | DirectNode
    | AirwaySegmentNode
    | ProcedureNode
    | ProcedureOrWaypointNode
)
