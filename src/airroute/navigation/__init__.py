"""Navigation data and geodesy for route expansion.

Typical usage:
    from airroute.navigation import NavDatabase

    db = NavDatabase()
    db.load_from_yaml("data/navigation/sample.yaml")
    tables = db.snapshot()

    tables.lookup_airway("Q822")
    tables.get_coordinates("FNT")
"""

from airroute.navigation.geodesy import (
    CoordinateFormatError,
    Coordinates,
    great_circle_distance_nm,
    parse_coordinate,
)
from airroute.navigation.navdata import (
    Airport,
    Airway,
    DataTables,
    Fix,
    Navaid,
    NavaidType,
    NavDatabase,
    NavDataError,
    NavDataProvider,
    Procedure,
    ProcedureBody,
    ProcedureKind,
    TokenType,
    Transition,
)

__all__ = [
    "Airport",
    "Airway",
    "CoordinateFormatError",
    "Coordinates",
    "DataTables",
    "Fix",
    "Navaid",
    "NavaidType",
    "NavDatabase",
    "NavDataError",
    "NavDataProvider",
    "Procedure",
    "ProcedureBody",
    "ProcedureKind",
    "TokenType",
    "Transition",
    "great_circle_distance_nm",
    "parse_coordinate",
]
