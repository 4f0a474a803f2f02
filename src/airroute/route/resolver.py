"""Semantic resolution of parsed routes.

The resolver walks the syntax nodes in order, looks each one up through a
``NavDataProvider``, expands airways and procedures, and splices the
result into the output fix list. A failing node never stops the walk: the
failure is recorded as a ``RouteError`` and the original token is written
to the output so the caller can see what did not expand.

Position in the route matters for procedures. Nodes near the start prefer
departure procedures and the departure airport; later nodes prefer
arrivals and the destination airport. The other kind is tried as a fallback.

Expansions are spliced so a fix shared with the previous output appears
once, and a waypoint written right after an expansion that ends on it is
dropped. A waypoint repeating another waypoint is kept. The fix an airway
segment stops on belongs to that segment and is not looked up again.

Typical usage:
    resolver = RouteResolver(tables)
    result = resolver.resolve(parse_result.tree, RouteContext("KALB", "KORD"))
    result.expanded   # ['KALB', 'PAYGE', ..., 'KORD']
    result.errors     # [] when everything resolved
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from airroute.core.config import RouteSettings
from airroute.navigation.geodesy import (
    CoordinateFormatError,
    Coordinates,
    great_circle_distance_nm,
    parse_coordinate,
)
from airroute.navigation.navdata import NavDataProvider, Procedure, ProcedureKind, TokenType
from airroute.route.errors import (
    FixNotOnAirwayError,
    RouteError,
    RouteErrorKind,
    TransitionNotFoundError,
)
from airroute.route.expander import (
    DistanceFunction,
    ProcedureExpansion,
    expand_airway,
    expand_procedure,
    splice,
)
from airroute.route.lexer import Token
from airroute.route.syntax import (
    AirwaySegmentNode,
    CoordinateNode,
    DirectNode,
    ProcedureNode,
    ProcedureOrWaypointNode,
    SyntaxNode,
    WaypointNode,
)

logger = logging.getLogger(__name__)

_BASE_NAME_PATTERN = re.compile(r"^([A-Z]+?)\d*$")


class ResolvedType(Enum):
    """What a node turned out to be."""

    AIRPORT = "AIRPORT"
    NAVAID = "NAVAID"
    FIX = "FIX"
    AIRWAY = "AIRWAY"
    DP = "DP"
    STAR = "STAR"
    COORDINATE = "COORDINATE"
    DIRECT = "DIRECT"


@dataclass(frozen=True)
class RouteContext:
    """Airports that frame a route.

    Attributes:
        departure_airport: First token of the route
        destination_airport: Last token of the route (when there are 2+)
    """

    departure_airport: str | None = None
    destination_airport: str | None = None

    @classmethod
    def from_tokens(cls, tokens: list[Token]) -> "RouteContext":
        """Derive the context from the first and last tokens."""
        return cls(
            departure_airport=tokens[0].text if tokens else None,
            destination_airport=tokens[-1].text if len(tokens) > 1 else None,
        )


@dataclass(frozen=True)
class ResolvedNode:
    """A syntax node after resolution.

    Attributes:
        node: Original syntax node
        resolved_type: What the node resolved to, None when unresolved
        source_entity: Entity from the navigation data (read-only)
        fixes: Fixes this node contributed before duplicate elision
        transition: Transition name for procedures
        coordinates: Position for waypoints and coordinates
    """

    node: SyntaxNode
    resolved_type: ResolvedType | None = None
    source_entity: Any = None
    fixes: tuple[str, ...] = ()
    transition: str | None = None
    coordinates: Coordinates | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_type is not None


@dataclass
class ResolutionResult:
    """Output of one ``resolve`` call."""

    resolved: list[ResolvedNode] = field(default_factory=list)
    expanded: list[str] = field(default_factory=list)
    errors: list[RouteError] = field(default_factory=list)

    @property
    def last_fix(self) -> str | None:
        return self.expanded[-1] if self.expanded else None

    def emit(self, fixes: list[str] | tuple[str, ...]) -> None:
        """Append an expansion, dropping its first fix if it repeats the last output fix."""
        self.expanded[:] = splice(self.expanded, fixes)

    def append(self, ident: str) -> None:
        """Append a token as written. Repeats are kept."""
        self.expanded.append(ident)

    def record(self, kind: RouteErrorKind, token: Token | str, index: int, message: str) -> None:
        text = token.text if isinstance(token, Token) else token
        self.errors.append(RouteError(kind, text, index, message))
        logger.debug("Route error %s at %d (%s): %s", kind.value, index, text, message)


_POINT_TYPES = (TokenType.AIRPORT, TokenType.NAVAID, TokenType.FIX)
_EXPANSION_TYPES = (ResolvedType.AIRWAY, ResolvedType.DP, ResolvedType.STAR)


class RouteResolver:
    """Resolves syntax nodes against navigation data.

    The resolver holds no per-route state; every ``resolve`` call builds its
    own result, so one instance can serve many routes.

    Examples:
        >>> resolver = RouteResolver(tables, RouteSettings(departure_window=1))
        >>> result = resolver.resolve(nodes, RouteContext("KALB", "KORD"))
    """

    def __init__(
        self,
        provider: NavDataProvider,
        settings: RouteSettings | None = None,
        distance: DistanceFunction = great_circle_distance_nm,
    ) -> None:
        self.provider = provider
        self.settings = settings or RouteSettings()
        self.distance = distance

    def resolve(self, nodes: list[SyntaxNode], context: RouteContext) -> ResolutionResult:
        """Resolve every node and build the expanded fix list.

        Args:
            nodes: Parser output
            context: Departure and destination airports

        Returns:
            Resolved nodes, expanded fixes and recorded errors
        """
        result = ResolutionResult()
        for index, node in enumerate(nodes):
            result.resolved.append(self._resolve_node(node, index, nodes, context, result))
        return result

    def _resolve_node(
        self,
        node: SyntaxNode,
        index: int,
        nodes: list[SyntaxNode],
        context: RouteContext,
        result: ResolutionResult,
    ) -> ResolvedNode:
        if isinstance(node, DirectNode):
            return ResolvedNode(node, ResolvedType.DIRECT)
        if isinstance(node, WaypointNode):
            if index and _ends_segment(nodes[index - 1], node):
                return self._resolve_segment_exit(node, result)
            return self._resolve_waypoint(node, node.token, result)
        if isinstance(node, CoordinateNode):
            return self._resolve_coordinate(node, result)
        if isinstance(node, AirwaySegmentNode):
            return self._resolve_airway_segment(node, result)
        if isinstance(node, ProcedureNode):
            return self._resolve_procedure(node, node, index, nodes, context, result)
        if isinstance(node, ProcedureOrWaypointNode):
            return self._resolve_procedure_or_waypoint(node, index, nodes, context, result)
        raise TypeError(f"Unknown syntax node: {node!r}")

    # Waypoints and coordinates

    def _resolve_waypoint(
        self, node: SyntaxNode, token: Token, result: ResolutionResult
    ) -> ResolvedNode:
        ident = token.text
        lookups: dict[TokenType, Callable[[str], Any]] = {
            TokenType.AIRPORT: self.provider.lookup_airport,
            TokenType.NAVAID: self.provider.lookup_navaid,
            TokenType.FIX: self.provider.lookup_fix,
        }

        token_type = self.provider.classify_token(ident)
        order = list(_POINT_TYPES)
        if token_type in lookups:
            order.remove(token_type)
            order.insert(0, token_type)

        if _follows_expansion(result):
            result.emit([ident])
        else:
            result.append(ident)

        for candidate_type in order:
            entity = lookups[candidate_type](ident)
            if entity is not None:
                return ResolvedNode(
                    node,
                    ResolvedType(candidate_type.value),
                    entity,
                    fixes=(ident,),
                    coordinates=entity.coordinates,
                )

        result.record(
            RouteErrorKind.WAYPOINT_NOT_FOUND, token, token.index, f"Waypoint not found: {ident}"
        )
        return ResolvedNode(node, fixes=(ident,))

    def _resolve_coordinate(self, node: CoordinateNode, result: ResolutionResult) -> ResolvedNode:
        token = node.token
        result.append(token.text)
        try:
            coordinates = parse_coordinate(
                token.text,
                self.settings.default_latitude_hemisphere,
                self.settings.default_longitude_hemisphere,
            )
        except CoordinateFormatError as e:
            result.record(RouteErrorKind.INVALID_COORDINATE_FORMAT, token, token.index, str(e))
            return ResolvedNode(node, fixes=(token.text,))

        return ResolvedNode(
            node, ResolvedType.COORDINATE, fixes=(token.text,), coordinates=coordinates
        )

    # Airways

    def _resolve_airway_segment(
        self, node: AirwaySegmentNode, result: ResolutionResult
    ) -> ResolvedNode:
        verbatim = [node.from_token.text, node.airway.text, node.to_token.text]
        airway = self.provider.lookup_airway(node.airway.text)

        if airway is None:
            result.record(
                RouteErrorKind.AIRWAY_NOT_FOUND,
                node.airway,
                node.airway.index,
                f"Airway not found: {node.airway.text}",
            )
            result.emit(verbatim)
            return ResolvedNode(node, fixes=tuple(verbatim))

        try:
            fixes = expand_airway(airway, node.from_token.text, node.to_token.text)
        except FixNotOnAirwayError as e:
            missing = node.from_token if e.fix == node.from_token.text else node.to_token
            result.record(RouteErrorKind.FIX_NOT_ON_AIRWAY, missing, missing.index, str(e))
            result.emit(verbatim)
            return ResolvedNode(node, source_entity=airway, fixes=tuple(verbatim))

        logger.debug(
            "Expanded airway %s: %s -> %s (%d fixes)",
            airway.id,
            node.from_token.text,
            node.to_token.text,
            len(fixes),
        )
        result.emit(fixes)
        return ResolvedNode(node, ResolvedType.AIRWAY, airway, fixes=tuple(fixes))

    def _resolve_segment_exit(self, node: WaypointNode, result: ResolutionResult) -> ResolvedNode:
        # The segment already emitted and reported this fix; only elide it.
        segment = result.resolved[-1]
        ident = node.token.text
        result.emit([ident])
        return ResolvedNode(
            node, segment.resolved_type, segment.source_entity, fixes=(ident,)
        )

    # Procedures

    def _resolve_procedure_or_waypoint(
        self,
        node: ProcedureOrWaypointNode,
        index: int,
        nodes: list[SyntaxNode],
        context: RouteContext,
        result: ResolutionResult,
    ) -> ResolvedNode:
        if self.provider.classify_token(node.token.text) is TokenType.PROCEDURE:
            procedure_node = ProcedureNode(node.token, node.token.text)
            return self._resolve_procedure(procedure_node, node, index, nodes, context, result)
        return self._resolve_waypoint(node, node.token, result)

    def _resolve_procedure(
        self,
        procedure_node: ProcedureNode,
        source_node: SyntaxNode,
        index: int,
        nodes: list[SyntaxNode],
        context: RouteContext,
        result: ResolutionResult,
    ) -> ResolvedNode:
        token = procedure_node.token
        if index <= self.settings.departure_window:
            kinds = [ProcedureKind.DP, ProcedureKind.STAR]
            airport = context.departure_airport
        else:
            kinds = [ProcedureKind.STAR, ProcedureKind.DP]
            airport = context.destination_airport

        patterns = candidate_patterns(procedure_node.procedure, airport)
        candidates = self._find_candidates(
            patterns, kinds, by_kind=procedure_node.explicit
        )

        if procedure_node.explicit:
            expansion = self._expand_explicit(procedure_node, candidates, result)
        else:
            expansion = self._expand_implicit(
                procedure_node, candidates, self._next_fix(nodes, index), result
            )

        if expansion is None:
            result.append(token.text)
            return ResolvedNode(source_node, fixes=(token.text,))

        procedure = expansion.procedure
        logger.debug(
            "Expanded %s %s (transition %s): %d fixes",
            procedure.kind.value,
            procedure.computer_code,
            expansion.transition.name if expansion.transition else "none",
            len(expansion.fixes),
        )
        result.emit(expansion.fixes)
        return ResolvedNode(
            source_node,
            ResolvedType(procedure.kind.value),
            procedure,
            fixes=expansion.fixes,
            transition=expansion.transition.name if expansion.transition else None,
        )

    def _expand_explicit(
        self,
        node: ProcedureNode,
        candidates: list[Procedure],
        result: ResolutionResult,
    ) -> ProcedureExpansion | None:
        token = node.token
        if not candidates:
            result.record(
                RouteErrorKind.PROCEDURE_NOT_FOUND,
                token,
                token.index,
                f"Procedure not found: {node.procedure}",
            )
            return None

        transition = node.transition or ""
        # Prefer a candidate that actually publishes the requested transition.
        procedure = next(
            (p for p in candidates if p.find_transition(transition) is not None), candidates[0]
        )
        try:
            return expand_procedure(
                procedure,
                transition_name=transition,
                strip_labels=self.settings.strip_dp_transition_labels,
            )
        except TransitionNotFoundError as e:
            result.record(RouteErrorKind.TRANSITION_NOT_FOUND, token, token.index, str(e))
            return None

    def _expand_implicit(
        self,
        node: ProcedureNode,
        candidates: list[Procedure],
        next_fix: str | None,
        result: ResolutionResult,
    ) -> ProcedureExpansion | None:
        token = node.token
        if not candidates:
            result.record(
                RouteErrorKind.PROCEDURE_EXPANSION_FAILED,
                token,
                token.index,
                f"Procedure {node.procedure} found in database but failed to expand",
            )
            return None

        expansions = [
            expand_procedure(
                procedure,
                previous_fix=result.last_fix,
                next_fix=next_fix,
                coordinates=self.provider.get_coordinates,
                distance=self.distance,
            )
            for procedure in candidates
        ]

        # A candidate that lands on the next written fix wins; otherwise the
        # first one in pattern order. Distance never ranks candidates.
        if next_fix:
            for expansion in expansions:
                if expansion.fixes and expansion.fixes[-1] == next_fix:
                    return expansion
        return expansions[0]

    def _find_candidates(
        self, patterns: list[str], kinds: list[ProcedureKind], by_kind: bool = False
    ) -> list[Procedure]:
        """Distinct procedures matching any pattern.

        With ``by_kind`` every pattern is tried for the preferred kind before
        the fallback kind; otherwise both kinds are tried for each pattern.
        """
        if by_kind:
            probes = [(kind, pattern) for kind in kinds for pattern in patterns]
        else:
            probes = [(kind, pattern) for pattern in patterns for kind in kinds]

        candidates: list[Procedure] = []
        seen: set[tuple[ProcedureKind, str]] = set()
        for kind, pattern in probes:
            procedure = self.provider.lookup_procedure(kind, pattern)
            if procedure is None:
                continue
            key = (procedure.kind, procedure.computer_code)
            if key not in seen:
                seen.add(key)
                candidates.append(procedure)

        return candidates

    @staticmethod
    def _next_fix(nodes: list[SyntaxNode], index: int) -> str | None:
        for node in nodes[index + 1 :]:
            if not isinstance(node, DirectNode):
                return node.token.text
        return None


def _follows_expansion(result: ResolutionResult) -> bool:
    """Whether the last node before this one, ignoring DCT, was an airway or procedure."""
    for previous in reversed(result.resolved):
        if previous.resolved_type is not ResolvedType.DIRECT:
            return previous.resolved_type in _EXPANSION_TYPES
    return False


def _ends_segment(previous: SyntaxNode, node: WaypointNode) -> bool:
    """Whether ``node`` is the exit fix the previous airway segment stopped on."""
    return isinstance(previous, AirwaySegmentNode) and previous.to_token is node.token


def candidate_patterns(name: str, airport: str | None = None) -> list[str]:
    """Computer codes a procedure name may be stored under, most specific last.

    Examples:
        >>> candidate_patterns("WYNDE3")
        ['WYNDE3', 'WYNDE.WYNDE3', 'WYNDE3.WYNDE']
        >>> candidate_patterns("WYNDE3", "KORD")[3:]
        ['KORD.WYNDE3', 'KORD.WYNDE.WYNDE3', 'KORD.WYNDE3.WYNDE']
    """
    match = _BASE_NAME_PATTERN.match(name)
    base = match.group(1) if match else name

    patterns = [name, f"{base}.{name}", f"{name}.{base}"]
    if airport:
        patterns += [
            f"{airport}.{name}",
            f"{airport}.{base}.{name}",
            f"{airport}.{name}.{base}",
        ]
    return list(dict.fromkeys(patterns))
