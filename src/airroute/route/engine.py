"""Route expansion engine.

Runs the whole pipeline on a route string: tokenize, parse, resolve. The
engine is the entry point most callers need.

Typical usage:
    from airroute.navigation import NavDatabase
    from airroute.route import RouteEngine

    db = NavDatabase()
    db.load_from_yaml("data/navigation/sample.yaml")
    engine = RouteEngine(db.snapshot())

    result = engine.expand("KALB HIDEY1 PAYGE Q822 FNT WYNDE3 KORD")
    print(result.expanded_string)
    for error in result.errors or []:
        print(error)
"""

import logging
import re
from dataclasses import dataclass, field

from airroute.core.config import RouteSettings
from airroute.navigation.geodesy import great_circle_distance_nm
from airroute.navigation.navdata import NavDataProvider
from airroute.route.errors import RouteError
from airroute.route.expander import DistanceFunction
from airroute.route.lexer import Token, tokenize
from airroute.route.parser import parse
from airroute.route.resolver import ResolvedNode, RouteContext, RouteResolver
from airroute.route.syntax import SyntaxNode

logger = logging.getLogger(__name__)


@dataclass
class ExpansionResult:
    """Result of expanding one route.

    Attributes:
        original: Route string as given
        expanded: Fix identifiers in flight order
        errors: Recorded errors, None when there were none
        tokens: Lexer output
        tree: Parser output
        resolved: Resolver output, one entry per syntax node
    """

    original: str
    expanded: list[str]
    errors: list[RouteError] | None = None
    tokens: list[Token] = field(default_factory=list)
    tree: list[SyntaxNode] = field(default_factory=list)
    resolved: list[ResolvedNode] = field(default_factory=list)

    @property
    def expanded_string(self) -> str:
        """Expanded route as a space-separated string."""
        return " ".join(self.expanded)

    @property
    def is_hard_failure(self) -> bool:
        """True when not a single waypoint was produced."""
        return not self.expanded


@dataclass
class ValidationResult:
    """Outcome of ``RouteEngine.validate``."""

    valid: bool
    errors: list[RouteError] = field(default_factory=list)
    token_count: int = 0


class RouteEngine:
    """Expands route strings against one navigation data snapshot.

    The engine keeps no state between calls.

    Examples:
        >>> engine = RouteEngine(tables)
        >>> engine.expand("KALB PAYGE Q822 FNT").expanded
        ['KALB', 'PAYGE', 'SIKBO', 'GONZZ', 'FNT']
    """

    def __init__(
        self,
        provider: NavDataProvider,
        settings: RouteSettings | None = None,
        distance: DistanceFunction = great_circle_distance_nm,
    ) -> None:
        self.provider = provider
        self.settings = settings or RouteSettings()
        self.resolver = RouteResolver(provider, self.settings, distance)
        self._airway_pattern = re.compile(self.settings.airway_designator_pattern)

    def expand(
        self,
        route: str,
        departure: str | None = None,
        destination: str | None = None,
    ) -> ExpansionResult:
        """Expand a route string into fixes.

        Args:
            route: Route string, e.g. ``"KALB HIDEY1 PAYGE Q822 FNT"``
            departure: Departure airport, defaults to the first token
            destination: Destination airport, defaults to the last token

        Returns:
            Expansion result. ``errors`` is None when nothing failed.
        """
        tokens = tokenize(route)
        if not tokens:
            return ExpansionResult(original=route if isinstance(route, str) else "", expanded=[])

        tree = parse(tokens, self.provider.classify_token, self._airway_pattern).tree

        derived = RouteContext.from_tokens(tokens)
        context = RouteContext(
            departure_airport=departure.upper() if departure else derived.departure_airport,
            destination_airport=(
                destination.upper() if destination else derived.destination_airport
            ),
        )

        resolution = self.resolver.resolve(tree, context)

        logger.debug(
            "Expanded route (%d tokens, %d nodes) to %d fixes with %d errors",
            len(tokens),
            len(tree),
            len(resolution.expanded),
            len(resolution.errors),
        )

        return ExpansionResult(
            original=route,
            expanded=resolution.expanded,
            errors=resolution.errors or None,
            tokens=tokens,
            tree=tree,
            resolved=resolution.resolved,
        )

    def validate(self, route: str) -> ValidationResult:
        """Check a route without using its expansion.

        An empty route is not valid.
        """
        result = self.expand(route)
        errors = result.errors or []
        return ValidationResult(
            valid=bool(result.tokens) and not errors,
            errors=errors,
            token_count=len(result.tokens),
        )


def expand_route(
    route: str,
    provider: NavDataProvider,
    settings: RouteSettings | None = None,
) -> ExpansionResult:
    """Expand a route with a one-off engine."""
    return RouteEngine(provider, settings).expand(route)
