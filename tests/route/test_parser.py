"""Tests for the route parser."""

import re

import pytest

from airroute.navigation.navdata import TokenType
from airroute.route.lexer import tokenize
from airroute.route.parser import PARSE_RULES, RouteParser, parse
from airroute.route.syntax import (
    AirwaySegmentNode,
    CoordinateNode,
    DirectNode,
    ProcedureNode,
    ProcedureOrWaypointNode,
    WaypointNode,
)


def classifier(mapping):
    """Build a classifier from a plain dict."""
    return lambda text: mapping.get(text)


class TestRuleTable:
    """Test the precedence table itself."""

    def test_rule_order(self):
        """Test rules are tried in precedence order."""
        assert [rule.name for rule in PARSE_RULES] == [
            "coordinate",
            "direct",
            "explicit_procedure",
            "procedure_shape",
            "airway_segment",
            "waypoint",
        ]


class TestParseShapes:
    """Test single-token shapes."""

    def test_waypoint(self):
        """Test a plain identifier is a waypoint."""
        tree = parse(tokenize("KALB")).tree
        assert tree == [WaypointNode(tokenize("KALB")[0])]

    def test_direct(self):
        """Test DCT becomes a direct node."""
        tree = parse(tokenize("A DCT B")).tree
        assert isinstance(tree[1], DirectNode)

    def test_coordinate(self):
        """Test coordinate tokens with and without hemispheres."""
        tree = parse(tokenize("4814N/06848W 4814/06848")).tree
        assert all(isinstance(node, CoordinateNode) for node in tree)

    def test_transition_first_notation(self):
        """Test chart notation TRANSITION.PROCEDURE."""
        node = parse(tokenize("MTHEW.CHPPR1")).tree[0]

        assert isinstance(node, ProcedureNode)
        assert node.procedure == "CHPPR1"
        assert node.transition == "MTHEW"
        assert node.explicit is True

    def test_procedure_first_notation(self):
        """Test computer-code notation PROCEDURE.TRANSITION."""
        node = parse(tokenize("CHPPR1.MTHEW")).tree[0]

        assert isinstance(node, ProcedureNode)
        assert node.procedure == "CHPPR1"
        assert node.transition == "MTHEW"

    def test_procedure_shape(self):
        """Test letters followed by digits is ambiguous."""
        node = parse(tokenize("WYNDE3")).tree[0]

        assert node == ProcedureOrWaypointNode(tokenize("WYNDE3")[0], "WYNDE", "3")

    def test_short_prefix_is_not_procedure_shape(self):
        """Test fewer than three letters does not look like a procedure."""
        node = parse(tokenize("AB1")).tree[0]
        assert isinstance(node, WaypointNode)


class TestAirwaySegments:
    """Test airway triples."""

    def test_segment_from_classifier(self):
        """Test classifier-confirmed airway in the middle of three tokens."""
        classify = classifier({"Q822": TokenType.AIRWAY})
        tree = parse(tokenize("PAYGE Q822 FNT"), classify).tree

        assert len(tree) == 2
        segment, tail = tree
        assert isinstance(segment, AirwaySegmentNode)
        assert (segment.from_token.text, segment.airway.text, segment.to_token.text) == (
            "PAYGE",
            "Q822",
            "FNT",
        )
        assert segment.token.text == "PAYGE"
        assert isinstance(tail, WaypointNode)
        assert tail.token.text == "FNT"

    def test_chained_segments_share_fix(self):
        """Test A V1 B V2 C gives two overlapping segments."""
        tree = parse(tokenize("A V1 B V2 C")).tree

        segments = [n for n in tree if isinstance(n, AirwaySegmentNode)]
        assert len(segments) == 2
        assert segments[0].to_token == segments[1].from_token

    def test_designator_shape_used_when_unknown(self):
        """Test unknown middle token falls back to the designator pattern."""
        tree = parse(tokenize("A J146 B")).tree
        assert isinstance(tree[0], AirwaySegmentNode)

    def test_classifier_overrides_shape(self):
        """Test a known non-airway token is never an airway."""
        classify = classifier({"V1": TokenType.FIX})
        tree = parse(tokenize("A V1 B"), classify).tree

        assert [type(n) for n in tree] == [WaypointNode, WaypointNode, WaypointNode]

    def test_classifier_marks_odd_designator(self):
        """Test the classifier can declare any token an airway."""
        classify = classifier({"UNKN123": TokenType.AIRWAY})
        tree = parse(tokenize("A UNKN123 B"), classify).tree

        assert isinstance(tree[0], AirwaySegmentNode)

    def test_custom_airway_pattern(self):
        """Test a configured designator pattern."""
        tree = parse(tokenize("A UL9 B"), airway_pattern=r"^U[A-Z]\d+$").tree
        assert isinstance(tree[0], AirwaySegmentNode)

        compiled = re.compile(r"^U[A-Z]\d+$")
        tree = parse(tokenize("A UL9 B"), airway_pattern=compiled).tree
        assert isinstance(tree[0], AirwaySegmentNode)

    @pytest.mark.parametrize("route", ["A V1", "V1 B"])
    def test_incomplete_triple(self, route):
        """Test no segment without both neighbours."""
        tree = parse(tokenize(route)).tree
        assert not any(isinstance(n, AirwaySegmentNode) for n in tree)


class TestPrecedence:
    """Test shape precedence."""

    def test_procedure_shape_beats_airway(self):
        """Test a procedure-shaped first token never starts an airway triple."""
        tree = parse(tokenize("WYNDE3 Q822 FNT")).tree

        assert isinstance(tree[0], ProcedureOrWaypointNode)
        assert not any(isinstance(n, AirwaySegmentNode) for n in tree)

    def test_direct_beats_airway_triple(self):
        """Test DCT at the cursor is a direct node even before an airway."""
        tree = parse(tokenize("DCT V1 B")).tree
        assert isinstance(tree[0], DirectNode)

    def test_coordinate_beats_airway_triple(self):
        """Test a coordinate at the cursor is never an airway start."""
        tree = parse(tokenize("4814N/06848W V1 B")).tree
        assert isinstance(tree[0], CoordinateNode)


class TestRouteParser:
    """Test RouteParser cursor helpers."""

    def test_peek(self):
        """Test lookahead relative to the cursor."""
        parser = RouteParser(tokenize("A B C"))
        assert parser.peek().text == "A"
        assert parser.peek(2).text == "C"
        assert parser.peek(3) is None

    def test_parse_never_reports_errors(self):
        """Test every input has a parse."""
        result = parse(tokenize("?? ... 12 A.B.C"))
        assert result.errors == []
        assert len(result.tree) == 4

    def test_empty(self):
        """Test no tokens give an empty tree."""
        assert parse([]).tree == []
