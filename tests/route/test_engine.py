"""Tests for the route expansion engine."""

import pytest

from airroute.core.config import RouteSettings
from airroute.navigation.geodesy import Coordinates
from airroute.navigation.navdata import (
    Airway,
    Fix,
    NavDatabase,
    Procedure,
    ProcedureBody,
    ProcedureKind,
    TokenType,
)
from airroute.route import RouteEngine, RouteErrorKind, expand_route


class TestExpand:
    """Test RouteEngine.expand."""

    def test_full_route(self, engine):
        """Test the sample route end to end."""
        result = engine.expand("KALB HIDEY1 PAYGE Q822 FNT WYNDE3 KORD")

        assert result.errors is None
        assert result.expanded_string == "KALB HIDEY PAYGE SIKBO GONZZ FNT DROPA WYNDE ERMIN KORD"
        assert result.original == "KALB HIDEY1 PAYGE Q822 FNT WYNDE3 KORD"
        assert len(result.tokens) == 7
        assert len(result.tree) == 6
        assert len(result.resolved) == 6
        assert not result.is_hard_failure

    def test_lowercase_input(self, engine):
        """Test routes are case-insensitive."""
        result = engine.expand("kalb payge q822 fnt")
        assert result.expanded == ["KALB", "PAYGE", "SIKBO", "GONZZ", "FNT"]

    @pytest.mark.parametrize("ident", ["KALB", "FNT", "PAYGE"])
    def test_single_token_passthrough(self, engine, ident):
        """Test a single plain identifier expands to itself."""
        result = engine.expand(ident)

        assert result.expanded == [ident]
        assert result.errors is None

    def test_chained_airway_elision(self, engine):
        """Test the fix shared by chained segments appears exactly once."""
        result = engine.expand("PAYGE Q822 GONZZ Q822 FNT")
        assert result.expanded.count("GONZZ") == 1

    @pytest.mark.parametrize(
        "route",
        [
            "MTHEW.CHPPR1",
            "KALB MTHEW.CHPPR1",
            "KALB PAYGE Q822 FNT J146 BAGEL MTHEW.CHPPR1 KORD",
        ],
    )
    def test_explicit_transition_is_deterministic(self, engine, route):
        """Test MTHEW.CHPPR1 always flies the MTHEW transition."""
        result = engine.expand(route)
        fixes = result.expanded

        start = fixes.index("MTHEW")
        assert fixes[start : start + 4] == ["MTHEW", "KUBBS", "CHPPR", "TEDDI"]

    def test_unknown_airway_mid_route(self):
        """Test unknown airway keeps every token and reports one error."""
        db = NavDatabase()
        db.add_fix(Fix("A", Coordinates(40.0, -80.0)))
        db.add_fix(Fix("B", Coordinates(40.0, -79.0)))
        db.set_token_type("UNKN123", TokenType.AIRWAY)

        result = RouteEngine(db.snapshot()).expand("A UNKN123 B")

        assert result.expanded == ["A", "UNKN123", "B"]
        assert len(result.errors) == 1
        assert result.errors[0].kind is RouteErrorKind.AIRWAY_NOT_FOUND

    def test_partial_failure_is_not_hard(self, engine):
        """Test unresolved tokens still produce output."""
        result = engine.expand("KALB XYZZY KORD")

        assert result.expanded == ["KALB", "XYZZY", "KORD"]
        assert len(result.errors) == 1
        assert not result.is_hard_failure

    def test_repeated_waypoint_is_kept(self, engine):
        """Test a waypoint written twice is emitted twice."""
        result = engine.expand("ABC ABC")

        assert result.expanded == ["ABC", "ABC"]
        assert [e.index for e in result.errors] == [0, 1]

    def test_airway_exit_fix_reported_once(self):
        """Test airway fixes unknown to the point tables raise no error."""
        db = NavDatabase()
        db.add_airway(Airway("Q822", ("PAYGE", "SIKBO", "GONZZ", "FNT")))

        result = RouteEngine(db.snapshot()).expand("PAYGE Q822 FNT")

        assert result.expanded == ["PAYGE", "SIKBO", "GONZZ", "FNT"]
        assert result.errors is None

    @pytest.mark.parametrize("route", ["", "   ", None])
    def test_empty_route_is_hard_failure(self, engine, route):
        """Test nothing to expand."""
        result = engine.expand(route)

        assert result.expanded == []
        assert result.errors is None
        assert result.is_hard_failure
        assert result.expanded_string == ""

    def test_only_dct_is_hard_failure(self, engine):
        """Test a route of DCT keywords produces no waypoints."""
        assert engine.expand("DCT DCT").is_hard_failure

    def test_explicit_context_airports(self):
        """Test departure/destination arguments override the route ends."""
        db = NavDatabase()
        for offset, ident in enumerate(("PAYGE", "SIKBO", "FOXXY", "LAKES")):
            db.add_fix(Fix(ident, Coordinates(42.0, -80.0 + offset)))
        db.add_procedure(
            Procedure(
                computer_code="KORD.FOXXY4.FOXXY",
                name="FOXXY",
                kind=ProcedureKind.STAR,
                body=ProcedureBody("FOXXY", ("FOXXY", "LAKES")),
            )
        )
        engine = RouteEngine(db.snapshot())

        without = engine.expand("PAYGE SIKBO LAKES FOXXY4")
        with_destination = engine.expand("PAYGE SIKBO LAKES FOXXY4", destination="kord")

        assert without.errors is not None
        assert with_destination.errors is None
        assert with_destination.expanded == ["PAYGE", "SIKBO", "LAKES", "FOXXY", "LAKES"]

    def test_settings_airway_pattern(self, tables):
        """Test the configured designator pattern reaches the parser."""
        settings = RouteSettings(airway_designator_pattern=r"^Z\d+$")
        result = RouteEngine(tables, settings).expand("PAYGE Z99 FNT")

        assert [e.kind for e in result.errors] == [RouteErrorKind.AIRWAY_NOT_FOUND]


class TestValidate:
    """Test RouteEngine.validate."""

    def test_valid_route(self, engine):
        """Test a fully resolvable route."""
        validation = engine.validate("KALB HIDEY1 PAYGE Q822 FNT WYNDE3 KORD")

        assert validation.valid
        assert validation.errors == []
        assert validation.token_count == 7

    def test_invalid_route(self, engine):
        """Test a route with unresolved tokens."""
        validation = engine.validate("KALB NOPE.CHPPR1 KORD")

        assert not validation.valid
        assert validation.errors[0].kind is RouteErrorKind.TRANSITION_NOT_FOUND

    def test_empty_route(self, engine):
        """Test an empty route is not valid."""
        assert not engine.validate("").valid


class TestExpandRoute:
    """Test expand_route helper."""

    def test_one_off_expansion(self, tables):
        """Test module-level helper matches the engine."""
        result = expand_route("FNT Q822 PAYGE", tables)
        assert result.expanded == ["FNT", "GONZZ", "SIKBO", "PAYGE"]
