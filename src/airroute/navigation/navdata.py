"""Navigation database for the route expansion engine.

This module holds the entities a route is resolved against (airports,
navaids, fixes, airways, departure and arrival procedures), the abstract
provider interface the resolver consumes, and a mutable builder that loads
data from YAML or CSV files and freezes it into an immutable snapshot.

Typical usage:
    db = NavDatabase()
    db.load_from_yaml("data/navigation/sample.yaml")
    tables = db.snapshot()

    tables.classify_token("Q822")      # TokenType.AIRWAY
    tables.lookup_airway("Q822").fixes
"""

import csv
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from airroute.navigation.geodesy import Coordinates

logger = logging.getLogger(__name__)

_BASE_NAME_PATTERN = re.compile(r"^([A-Z]+?)\d*$")


class NavDataError(Exception):
    """Raised when navigation data cannot be loaded."""


class TokenType(Enum):
    """What a route token refers to in the navigation data.

    Attributes:
        AIRPORT: Airport identifier (e.g. KORD)
        NAVAID: VOR/NDB/DME identifier (e.g. FNT)
        FIX: Named intersection / RNAV waypoint (e.g. PAYGE)
        AIRWAY: Airway designator (e.g. Q822)
        PROCEDURE: DP or STAR name or computer code (e.g. WYNDE3)
    """

    AIRPORT = "AIRPORT"
    NAVAID = "NAVAID"
    FIX = "FIX"
    AIRWAY = "AIRWAY"
    PROCEDURE = "PROCEDURE"


class ProcedureKind(Enum):
    """Published procedure type.

    Attributes:
        DP: Departure procedure (SID)
        STAR: Standard terminal arrival route
    """

    DP = "DP"
    STAR = "STAR"


class NavaidType(Enum):
    """Navigation aid type classification."""

    VOR = "VOR"
    VORTAC = "VORTAC"
    VOR_DME = "VOR/DME"
    NDB = "NDB"
    DME = "DME"
    TACAN = "TACAN"


@dataclass(frozen=True)
class Airport:
    """Airport reference point.

    Attributes:
        identifier: ICAO or FAA identifier (e.g. "KORD")
        name: Airport name
        coordinates: Reference point position
        elevation_ft: Field elevation in feet MSL
    """

    identifier: str
    name: str
    coordinates: Coordinates
    elevation_ft: float = 0.0


@dataclass(frozen=True)
class Navaid:
    """Radio navigation aid.

    Examples:
        >>> vor = Navaid("FNT", "Flint", NavaidType.VOR, Coordinates(42.97, -83.74), 116.9)
    """

    identifier: str
    name: str
    type: NavaidType
    coordinates: Coordinates
    frequency: float | None = None

    def __str__(self) -> str:
        if self.frequency:
            return f"{self.identifier} ({self.type.value} {self.frequency:.2f})"
        return f"{self.identifier} ({self.type.value})"


@dataclass(frozen=True)
class Fix:
    """Named intersection or RNAV waypoint."""

    identifier: str
    coordinates: Coordinates
    name: str = ""


@dataclass(frozen=True)
class Airway:
    """Published airway.

    Attributes:
        id: Designator (e.g. "Q822", "V1", "J146")
        fixes: Fix identifiers in published order
    """

    id: str
    fixes: tuple[str, ...]


@dataclass(frozen=True)
class ProcedureBody:
    """Common route shared by every transition of a procedure."""

    name: str
    fixes: tuple[str, ...]


@dataclass(frozen=True)
class Transition:
    """Named variant connecting an outer fix to the procedure body.

    Attributes:
        name: Transition name (e.g. "MTHEW")
        entry_fix: Fix where the transition meets the en-route structure
        fixes: Fix identifiers in the direction of travel
    """

    name: str
    entry_fix: str
    fixes: tuple[str, ...]


@dataclass(frozen=True)
class Procedure:
    """Departure or arrival procedure.

    Fixes are stored in the direction of travel: a DP runs from the airport
    outwards, a STAR from its entry towards the airport.

    Attributes:
        computer_code: Database key (e.g. "WYNDE.WYNDE3" or "HIDEY1.HIDEY")
        name: Charted name (e.g. "WYNDE3")
        kind: DP or STAR
        body: Shared body route
        transitions: Available transitions
    """

    computer_code: str
    name: str
    kind: ProcedureKind
    body: ProcedureBody
    transitions: tuple[Transition, ...] = field(default_factory=tuple)

    @property
    def base_name(self) -> str:
        """Procedure name without its revision number (``WYNDE3`` -> ``WYNDE``)."""
        match = _BASE_NAME_PATTERN.match(self.name)
        return match.group(1) if match else self.name

    def find_transition(self, name: str) -> Transition | None:
        """Find a transition by exact name."""
        for transition in self.transitions:
            if transition.name == name:
                return transition
        return None


PointEntity = Airport | Navaid | Fix


class NavDataProvider(ABC):
    """Read-only view of navigation data consumed by the route resolver.

    Implementations must not change while an expansion is running; the
    resolver treats everything they return as immutable.
    """

    @abstractmethod
    def classify_token(self, text: str) -> TokenType | None:
        """Report what a token refers to, or None if it is unknown."""

    @abstractmethod
    def lookup_airport(self, ident: str) -> Airport | None:
        """Find an airport by identifier."""

    @abstractmethod
    def lookup_navaid(self, ident: str) -> Navaid | None:
        """Find a navaid by identifier."""

    @abstractmethod
    def lookup_fix(self, ident: str) -> Fix | None:
        """Find a fix by identifier."""

    @abstractmethod
    def lookup_airway(self, airway_id: str) -> Airway | None:
        """Find an airway by designator."""

    @abstractmethod
    def lookup_procedure(self, kind: ProcedureKind, code: str) -> Procedure | None:
        """Find a procedure by computer code or charted name."""

    @abstractmethod
    def get_coordinates(self, ident: str) -> Coordinates | None:
        """Position of any point entity (fix, navaid or airport)."""


class DataTables(NavDataProvider):
    """Immutable snapshot of navigation data.

    Built by ``NavDatabase.snapshot()``. All tables are exposed as read-only
    mappings, so a snapshot can be shared by concurrent expansions.

    Examples:
        >>> tables = db.snapshot()
        >>> tables.lookup_procedure(ProcedureKind.STAR, "WYNDE3")
    """

    def __init__(
        self,
        airports: Mapping[str, Airport],
        navaids: Mapping[str, Navaid],
        fixes: Mapping[str, Fix],
        airways: Mapping[str, Airway],
        dps: Mapping[str, Procedure],
        stars: Mapping[str, Procedure],
        token_types: Mapping[str, TokenType],
    ) -> None:
        self.airports = MappingProxyType(dict(airports))
        self.navaids = MappingProxyType(dict(navaids))
        self.fixes = MappingProxyType(dict(fixes))
        self.airways = MappingProxyType(dict(airways))
        self.dps = MappingProxyType(dict(dps))
        self.stars = MappingProxyType(dict(stars))
        self.token_types = MappingProxyType(dict(token_types))
        self._procedures_by_name = {
            ProcedureKind.DP: MappingProxyType(_index_by_name(self.dps)),
            ProcedureKind.STAR: MappingProxyType(_index_by_name(self.stars)),
        }

    def classify_token(self, text: str) -> TokenType | None:
        return self.token_types.get(text.upper())

    def lookup_airport(self, ident: str) -> Airport | None:
        return self.airports.get(ident)

    def lookup_navaid(self, ident: str) -> Navaid | None:
        return self.navaids.get(ident)

    def lookup_fix(self, ident: str) -> Fix | None:
        return self.fixes.get(ident)

    def lookup_airway(self, airway_id: str) -> Airway | None:
        return self.airways.get(airway_id)

    def lookup_procedure(self, kind: ProcedureKind, code: str) -> Procedure | None:
        table = self.dps if kind is ProcedureKind.DP else self.stars
        procedure = table.get(code)
        if procedure is None:
            procedure = self._procedures_by_name[kind].get(code)
        return procedure

    def get_coordinates(self, ident: str) -> Coordinates | None:
        entity: PointEntity | None = (
            self.fixes.get(ident) or self.navaids.get(ident) or self.airports.get(ident)
        )
        return entity.coordinates if entity else None

    def procedure_transitions(self, name: str) -> list[tuple[ProcedureKind, str]]:
        """List the transitions available for a procedure, DPs first.

        Args:
            name: Procedure name or computer code

        Returns:
            (kind, transition name) pairs
        """
        result = []
        for kind in (ProcedureKind.DP, ProcedureKind.STAR):
            procedure = self.lookup_procedure(kind, name.upper())
            if procedure:
                result.extend((kind, t.name) for t in procedure.transitions)
        return result

    def stats(self) -> dict[str, int]:
        """Table sizes, keyed by table name."""
        return {
            "airports": len(self.airports),
            "navaids": len(self.navaids),
            "fixes": len(self.fixes),
            "airways": len(self.airways),
            "dps": len(self.dps),
            "stars": len(self.stars),
        }


def _index_by_name(procedures: Mapping[str, Procedure]) -> dict[str, Procedure]:
    index: dict[str, Procedure] = {}
    for procedure in procedures.values():
        index.setdefault(procedure.name, procedure)
    return index


class NavDatabase:
    """Mutable builder for navigation data.

    Entities are added one by one or loaded from files, then frozen with
    ``snapshot()``. The builder itself is never handed to the resolver.

    Examples:
        >>> db = NavDatabase()
        >>> db.load_from_yaml("data/navigation/sample.yaml")
        >>> tables = db.snapshot()
    """

    def __init__(self) -> None:
        """Initialize empty navigation database."""
        self.airports: dict[str, Airport] = {}
        self.navaids: dict[str, Navaid] = {}
        self.fixes: dict[str, Fix] = {}
        self.airways: dict[str, Airway] = {}
        self.dps: dict[str, Procedure] = {}
        self.stars: dict[str, Procedure] = {}
        self._token_overrides: dict[str, TokenType] = {}

    def add_airport(self, airport: Airport) -> None:
        self.airports[airport.identifier] = airport

    def add_navaid(self, navaid: Navaid) -> None:
        self.navaids[navaid.identifier] = navaid

    def add_fix(self, fix: Fix) -> None:
        self.fixes[fix.identifier] = fix

    def add_airway(self, airway: Airway) -> None:
        self.airways[airway.id] = airway

    def add_procedure(self, procedure: Procedure) -> None:
        """Add a DP or STAR, keyed by its computer code.

        Note:
            A procedure with the same code and kind is replaced.
        """
        table = self.dps if procedure.kind is ProcedureKind.DP else self.stars
        table[procedure.computer_code] = procedure

    def set_token_type(self, ident: str, token_type: TokenType) -> None:
        """Force the classification of an identifier.

        Overrides whatever the tables imply. Useful when the classifier
        comes from a different source than the tables themselves.
        """
        self._token_overrides[ident.upper()] = token_type

    def load_from_yaml(self, yaml_path: str | Path) -> int:
        """Load navigation data from a YAML document.

        Expected top-level sections (all optional)::

            airports: [{ident, name, lat, lon, elevation_ft}]
            navaids:  [{ident, name, type, lat, lon, frequency}]
            fixes:    [{ident, lat, lon, name}]
            airways:  {Q822: [PAYGE, GONZZ, FNT]}
            dps:      [{code, name, body: {name, fixes}, transitions: [...]}]
            stars:    [{code, name, body: {name, fixes}, transitions: [...]}]

        A transition is ``{name, fixes, entry_fix}``; ``entry_fix`` defaults
        to the first fix of the transition.

        Args:
            yaml_path: Path to YAML file

        Returns:
            Number of entities loaded

        Raises:
            NavDataError: If the file doesn't exist or isn't valid YAML
        """
        path = Path(yaml_path)
        if not path.exists():
            raise NavDataError(f"Navigation data not found: {yaml_path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                document = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise NavDataError(f"Failed to read navigation data {yaml_path}: {e}") from e

        if not isinstance(document, dict):
            raise NavDataError(f"Navigation data root must be a mapping: {yaml_path}")

        count = 0
        for entry in document.get("airports") or []:
            count += self._load_entry("airport", entry, self._airport_from_dict)
        for entry in document.get("navaids") or []:
            count += self._load_entry("navaid", entry, self._navaid_from_dict)
        for entry in document.get("fixes") or []:
            count += self._load_entry("fix", entry, self._fix_from_dict)
        for airway_id, fixes in (document.get("airways") or {}).items():
            count += self._load_entry(
                "airway", {"id": airway_id, "fixes": fixes}, self._airway_from_dict
            )
        for kind, section in ((ProcedureKind.DP, "dps"), (ProcedureKind.STAR, "stars")):
            for entry in document.get(section) or []:
                count += self._load_entry(
                    section[:-1], entry, lambda e, k=kind: self._procedure_from_dict(e, k)
                )

        logger.info("Loaded %d navigation entities from %s", count, yaml_path)
        return count

    def _load_entry(self, label: str, entry: Any, build) -> int:
        try:
            build(entry)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping invalid %s entry %r: %s", label, entry, e)
            return 0
        return 1

    def _airport_from_dict(self, entry: dict[str, Any]) -> None:
        self.add_airport(
            Airport(
                identifier=str(entry["ident"]).upper(),
                name=str(entry.get("name", "")),
                coordinates=Coordinates(float(entry["lat"]), float(entry["lon"])),
                elevation_ft=float(entry.get("elevation_ft", 0.0)),
            )
        )

    def _navaid_from_dict(self, entry: dict[str, Any]) -> None:
        frequency = entry.get("frequency")
        self.add_navaid(
            Navaid(
                identifier=str(entry["ident"]).upper(),
                name=str(entry.get("name", "")),
                type=NavaidType(str(entry.get("type", "VOR")).upper()),
                coordinates=Coordinates(float(entry["lat"]), float(entry["lon"])),
                frequency=float(frequency) if frequency is not None else None,
            )
        )

    def _fix_from_dict(self, entry: dict[str, Any]) -> None:
        self.add_fix(
            Fix(
                identifier=str(entry["ident"]).upper(),
                coordinates=Coordinates(float(entry["lat"]), float(entry["lon"])),
                name=str(entry.get("name", "")),
            )
        )

    def _airway_from_dict(self, entry: dict[str, Any]) -> None:
        fixes = entry["fixes"]
        if isinstance(fixes, str) or not fixes:
            raise ValueError("airway fixes must be a non-empty list")
        self.add_airway(
            Airway(id=str(entry["id"]).upper(), fixes=tuple(str(f).upper() for f in fixes))
        )

    def _procedure_from_dict(self, entry: dict[str, Any], kind: ProcedureKind) -> None:
        code = str(entry["code"]).upper()
        name = str(entry.get("name") or code.split(".")[-1]).upper()

        body = entry.get("body") or {}
        if isinstance(body, list):
            body = {"name": name, "fixes": body}
        body_fixes = tuple(str(f).upper() for f in body.get("fixes", ()))
        if not body_fixes:
            raise ValueError("procedure body has no fixes")

        transitions = []
        for trans in entry.get("transitions") or []:
            fixes = tuple(str(f).upper() for f in trans["fixes"])
            if not fixes:
                raise ValueError(f"transition {trans.get('name')} has no fixes")
            transitions.append(
                Transition(
                    name=str(trans["name"]).upper(),
                    entry_fix=str(trans.get("entry_fix") or fixes[0]).upper(),
                    fixes=fixes,
                )
            )

        self.add_procedure(
            Procedure(
                computer_code=code,
                name=name,
                kind=kind,
                body=ProcedureBody(name=str(body.get("name", name)).upper(), fixes=body_fixes),
                transitions=tuple(transitions),
            )
        )

    def load_points_from_csv(self, csv_path: str | Path) -> int:
        """Load airports, navaids and fixes from a CSV file.

        Expected CSV format:
            identifier,name,type,latitude,longitude[,frequency]

        ``type`` is AIRPORT, FIX (or WAYPOINT) or one of the navaid types.

        Args:
            csv_path: Path to CSV file

        Returns:
            Number of points loaded

        Raises:
            NavDataError: If CSV file doesn't exist
        """
        path = Path(csv_path)
        if not path.exists():
            raise NavDataError(f"Point CSV not found: {csv_path}")

        count = 0
        with open(path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)

            for row in reader:
                try:
                    ident = row["identifier"].strip().upper()
                    point_type = row["type"].strip().upper()
                    coordinates = Coordinates(float(row["latitude"]), float(row["longitude"]))
                    name = (row.get("name") or "").strip()

                    if point_type == "AIRPORT":
                        self.add_airport(Airport(ident, name, coordinates))
                    elif point_type in ("FIX", "WAYPOINT"):
                        self.add_fix(Fix(ident, coordinates, name))
                    else:
                        frequency = row.get("frequency")
                        self.add_navaid(
                            Navaid(
                                identifier=ident,
                                name=name,
                                type=NavaidType(point_type),
                                coordinates=coordinates,
                                frequency=float(frequency) if frequency else None,
                            )
                        )
                    count += 1

                except (KeyError, ValueError, AttributeError) as e:
                    logger.warning("Skipping invalid point row: %s", e)
                    continue

        logger.info("Loaded %d points from %s", count, csv_path)
        return count

    def snapshot(self) -> DataTables:
        """Freeze the current contents into an immutable ``DataTables``."""
        tables = DataTables(
            airports=self.airports,
            navaids=self.navaids,
            fixes=self.fixes,
            airways=self.airways,
            dps=self.dps,
            stars=self.stars,
            token_types=self._build_token_types(),
        )
        logger.debug("Navigation snapshot: %s", tables.stats())
        return tables

    def _build_token_types(self) -> dict[str, TokenType]:
        # Later tables win: a procedure name shadows a fix with the same ident.
        token_types: dict[str, TokenType] = {}
        for ident in self.fixes:
            token_types[ident] = TokenType.FIX
        for ident in self.navaids:
            token_types[ident] = TokenType.NAVAID
        for ident in self.airports:
            token_types[ident] = TokenType.AIRPORT
        for ident in self.airways:
            token_types[ident] = TokenType.AIRWAY
        for procedure in (*self.dps.values(), *self.stars.values()):
            token_types[procedure.computer_code] = TokenType.PROCEDURE
            token_types[procedure.name] = TokenType.PROCEDURE
            # WYNDE.WYNDE3 also answers to WYNDE3
            for part in procedure.computer_code.split("."):
                if any(ch.isdigit() for ch in part) and any(ch.isalpha() for ch in part):
                    token_types[part] = TokenType.PROCEDURE
        token_types.update(self._token_overrides)
        return token_types
