"""Route parser: groups tokens into syntax nodes by shape.

The parser is a single left-to-right scan. At each position the rules in
``PARSE_RULES`` are tried in order and the first match wins, so the table
order is the precedence order:

    coordinate > DCT > explicit procedure > procedure shape
    > airway triple > waypoint

Only the airway rule looks at data (through the token classifier) and only
to tell an airway designator from an ordinary word. Everything else is
decided by the resolver.

Typical usage:
    from airroute.route.lexer import tokenize
    from airroute.route.parser import parse

    result = parse(tokenize("KALB PAYGE Q822 FNT"), classify=tables.classify_token)
    for node in result.tree:
        print(node)
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from airroute.navigation.geodesy import COORDINATE_PATTERN
from airroute.navigation.navdata import TokenType
from airroute.route.errors import RouteError
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

DIRECT_KEYWORD = "DCT"

# Chart notation, e.g. MTHEW.CHPPR1
TRANSITION_FIRST_PATTERN = re.compile(r"^([A-Z]+)\.([A-Z]{3,}\d*)$")
# Computer-code notation, e.g. CHPPR1.MTHEW
PROCEDURE_FIRST_PATTERN = re.compile(r"^([A-Z]{3,}\d+)\.([A-Z]+)$")
# Generic SID/STAR shape, e.g. WYNDE3
PROCEDURE_SHAPE_PATTERN = re.compile(r"^([A-Z]{3,})(\d+)$")
# Published airway designators, e.g. V1, J146, Q822
AIRWAY_DESIGNATOR_PATTERN = re.compile(r"^[JVQTABGR]\d+$")

Classifier = Callable[[str], TokenType | None]


@dataclass
class ParseResult:
    """Output of the parser.

    Attributes:
        tree: Syntax nodes in route order
        errors: Always empty: every token sequence has a parse
    """

    tree: list[SyntaxNode] = field(default_factory=list)
    errors: list[RouteError] = field(default_factory=list)


class RouteParser:
    """Cursor over a token list with bounded lookahead.

    Examples:
        >>> parser = RouteParser(tokens, classify=tables.classify_token)
        >>> result = parser.parse()
    """

    def __init__(
        self,
        tokens: list[Token],
        classify: Classifier | None = None,
        airway_pattern: re.Pattern[str] = AIRWAY_DESIGNATOR_PATTERN,
    ) -> None:
        self.tokens = tokens
        self.cursor = 0
        self._classify = classify
        self._airway_pattern = airway_pattern

    def parse(self) -> ParseResult:
        """Scan all tokens and build the syntax tree."""
        result = ParseResult()

        while self.cursor < len(self.tokens):
            node, advance = self._apply_rules()
            result.tree.append(node)
            self.cursor += advance

        logger.debug(
            "Parsed %d tokens into %d nodes", len(self.tokens), len(result.tree)
        )
        return result

    def _apply_rules(self) -> tuple[SyntaxNode, int]:
        for rule in PARSE_RULES:
            matched = rule.match(self)
            if matched is not None:
                return matched
        raise AssertionError("waypoint rule must always match")

    def peek(self, offset: int = 0) -> Token | None:
        """Token ``offset`` positions after the cursor, or None."""
        index = self.cursor + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def is_airway(self, token: Token) -> bool:
        """Whether a token names an airway.

        The classifier decides when it knows the token; otherwise the
        designator shape does.
        """
        token_type = self._classify(token.text) if self._classify else None
        if token_type is not None:
            return token_type is TokenType.AIRWAY
        return bool(self._airway_pattern.match(token.text))


@dataclass(frozen=True)
class ParseRule:
    """One entry of the precedence table.

    ``match`` returns the node and how many tokens to advance, or None.
    """

    name: str
    match: Callable[[RouteParser], tuple[SyntaxNode, int] | None]


def _match_coordinate(parser: RouteParser) -> tuple[SyntaxNode, int] | None:
    current = parser.peek()
    if current and COORDINATE_PATTERN.match(current.text):
        return CoordinateNode(current), 1
    return None


def _match_direct(parser: RouteParser) -> tuple[SyntaxNode, int] | None:
    current = parser.peek()
    if current and current.text == DIRECT_KEYWORD:
        return DirectNode(current), 1
    return None


def _match_explicit_procedure(parser: RouteParser) -> tuple[SyntaxNode, int] | None:
    current = parser.peek()
    if current is None:
        return None

    match = TRANSITION_FIRST_PATTERN.match(current.text)
    if match:
        transition, procedure = match.groups()
        return ProcedureNode(current, procedure, transition, explicit=True), 1

    match = PROCEDURE_FIRST_PATTERN.match(current.text)
    if match:
        procedure, transition = match.groups()
        return ProcedureNode(current, procedure, transition, explicit=True), 1

    return None


def _match_procedure_shape(parser: RouteParser) -> tuple[SyntaxNode, int] | None:
    current = parser.peek()
    if current is None:
        return None

    match = PROCEDURE_SHAPE_PATTERN.match(current.text)
    if match:
        base_name, number = match.groups()
        return ProcedureOrWaypointNode(current, base_name, number), 1
    return None


def _match_airway_segment(parser: RouteParser) -> tuple[SyntaxNode, int] | None:
    current, airway, to_token = parser.peek(), parser.peek(1), parser.peek(2)
    if current is None or airway is None or to_token is None:
        return None

    if parser.is_airway(airway):
        # Stop on the 'to' fix so it can start a chained segment.
        return AirwaySegmentNode(current, airway, to_token), 2
    return None


def _match_waypoint(parser: RouteParser) -> tuple[SyntaxNode, int] | None:
    current = parser.peek()
    return (WaypointNode(current), 1) if current else None


PARSE_RULES: tuple[ParseRule, ...] = (
    ParseRule("coordinate", _match_coordinate),
    ParseRule("direct", _match_direct),
    ParseRule("explicit_procedure", _match_explicit_procedure),
    ParseRule("procedure_shape", _match_procedure_shape),
    ParseRule("airway_segment", _match_airway_segment),
    ParseRule("waypoint", _match_waypoint),
)


def parse(
    tokens: list[Token],
    classify: Classifier | None = None,
    airway_pattern: str | re.Pattern[str] | None = None,
) -> ParseResult:
    """Parse tokens into a syntax tree.

    Args:
        tokens: Output of ``tokenize``
        classify: Token classifier, used to recognise airway designators
        airway_pattern: Airway designator shape used when the classifier has
            no entry for a token

    Returns:
        Parse result with the node list
    """
    if airway_pattern is None:
        pattern = AIRWAY_DESIGNATOR_PATTERN
    elif isinstance(airway_pattern, str):
        pattern = re.compile(airway_pattern)
    else:
        pattern = airway_pattern
    return RouteParser(tokens, classify, pattern).parse()
