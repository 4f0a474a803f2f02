"""Route string expansion.

This package turns ICAO/FAA style route strings into ordered fix lists:
lexer, parser, resolver and expander, tied together by ``RouteEngine``.

Typical usage:
    from airroute.route import RouteEngine

    engine = RouteEngine(tables)
    result = engine.expand("KALB HIDEY1 PAYGE Q822 FNT WYNDE3 KORD")
    result.expanded
    result.errors
"""

from airroute.route.engine import ExpansionResult, RouteEngine, ValidationResult, expand_route
from airroute.route.errors import (
    FixNotOnAirwayError,
    RouteError,
    RouteErrorKind,
    RouteExpansionError,
    TransitionNotFoundError,
)
from airroute.route.expander import (
    ProcedureExpansion,
    compose_procedure,
    expand_airway,
    expand_procedure,
    select_transition,
    splice,
)
from airroute.route.lexer import Token, tokenize
from airroute.route.parser import ParseResult, parse
from airroute.route.resolver import (
    ResolutionResult,
    ResolvedNode,
    ResolvedType,
    RouteContext,
    RouteResolver,
)

__all__ = [
    "ExpansionResult",
    "FixNotOnAirwayError",
    "ParseResult",
    "ProcedureExpansion",
    "ResolutionResult",
    "ResolvedNode",
    "ResolvedType",
    "RouteContext",
    "RouteEngine",
    "RouteError",
    "RouteErrorKind",
    "RouteExpansionError",
    "RouteResolver",
    "Token",
    "TransitionNotFoundError",
    "ValidationResult",
    "compose_procedure",
    "expand_airway",
    "expand_procedure",
    "expand_route",
    "parse",
    "select_transition",
    "splice",
    "tokenize",
]
