"""Airway and procedure expansion.

Pure functions over a single airway or procedure. Nothing here touches the
route being built or any shared state; coordinates and distances come in
as callables so the functions can be tested with plain dictionaries.

Typical usage:
    fixes = expand_airway(tables.lookup_airway("Q822"), "PAYGE", "FNT")

    expansion = expand_procedure(
        star,
        previous_fix="FNT",
        coordinates=tables.get_coordinates,
    )
    expansion.fixes       # transition + body
    expansion.transition  # the transition picked by proximity
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from airroute.navigation.geodesy import Coordinates, great_circle_distance_nm
from airroute.navigation.navdata import Airway, Procedure, ProcedureKind, Transition
from airroute.route.errors import FixNotOnAirwayError, TransitionNotFoundError

logger = logging.getLogger(__name__)

CoordinateLookup = Callable[[str], Coordinates | None]
DistanceFunction = Callable[[Coordinates, Coordinates], float]


@dataclass(frozen=True)
class ProcedureExpansion:
    """Fix sequence of a procedure with the transition that produced it.

    Attributes:
        procedure: Expanded procedure
        fixes: Fixes in the direction of travel
        transition: Transition used, None when only the body was flown
    """

    procedure: Procedure
    fixes: tuple[str, ...]
    transition: Transition | None = None


def splice(head: list[str] | tuple[str, ...], tail: list[str] | tuple[str, ...]) -> list[str]:
    """Concatenate two fix lists, dropping the repeated fix at the seam.

    Examples:
        >>> splice(["A", "B"], ["B", "C"])
        ['A', 'B', 'C']
    """
    if head and tail and head[-1] == tail[0]:
        return [*head, *tail[1:]]
    return [*head, *tail]


def expand_airway(airway: Airway, from_ident: str, to_ident: str) -> list[str]:
    """Fixes flown along an airway between two of its fixes, both included.

    Airways can be flown either way: when ``from_ident`` comes after
    ``to_ident`` in published order the slice is reversed.

    Args:
        airway: Airway to follow
        from_ident: Entry fix
        to_ident: Exit fix

    Returns:
        Fixes from entry to exit

    Raises:
        FixNotOnAirwayError: If either fix is not on the airway

    Examples:
        >>> expand_airway(Airway("V1", ("A", "B", "C")), "C", "A")
        ['C', 'B', 'A']
    """
    try:
        from_idx = airway.fixes.index(from_ident)
    except ValueError:
        raise FixNotOnAirwayError(from_ident, airway.id) from None
    try:
        to_idx = airway.fixes.index(to_ident)
    except ValueError:
        raise FixNotOnAirwayError(to_ident, airway.id) from None

    if from_idx < to_idx:
        return list(airway.fixes[from_idx : to_idx + 1])
    return list(reversed(airway.fixes[to_idx : from_idx + 1]))


def compose_procedure(procedure: Procedure, transition: Transition | None = None) -> list[str]:
    """Join the body and a transition in the direction of travel.

    A DP flies the body first and the transition outwards; a STAR flies the
    transition first and the body inwards.
    """
    body = procedure.body.fixes
    if transition is None:
        return list(body)
    if procedure.kind is ProcedureKind.DP:
        return splice(body, transition.fixes)
    return splice(transition.fixes, body)


def select_transition(
    procedure: Procedure,
    previous_fix: str | None = None,
    next_fix: str | None = None,
    coordinates: CoordinateLookup | None = None,
    distance: DistanceFunction = great_circle_distance_nm,
) -> Transition | None:
    """Pick a transition when none was requested.

    Rules, in order:

    1. No transitions: body only.
    2. A DP transition that ends at ``next_fix`` is taken.
    3. No ``previous_fix``, or ``previous_fix`` already starts the body:
       body only.
    4. The transition whose entry fix is nearest to ``previous_fix`` wins,
       the first one found on ties. Without coordinates for
       ``previous_fix``: body only.

    Args:
        procedure: Procedure to pick from
        previous_fix: Last fix flown before the procedure
        next_fix: Fix written right after the procedure
        coordinates: Position lookup for fix identifiers
        distance: Distance function in nautical miles

    Returns:
        Chosen transition, or None to fly the body alone
    """
    if not procedure.transitions:
        return None

    if next_fix and procedure.kind is ProcedureKind.DP:
        for transition in procedure.transitions:
            if compose_procedure(procedure, transition)[-1] == next_fix:
                return transition

    if previous_fix is None or previous_fix == procedure.body.fixes[0]:
        return None

    if coordinates is None:
        return None
    origin = coordinates(previous_fix)
    if origin is None:
        logger.debug("No coordinates for %s, flying %s body only", previous_fix, procedure.name)
        return None

    best: Transition | None = None
    best_distance = float("inf")
    for transition in procedure.transitions:
        entry = coordinates(transition.entry_fix)
        if entry is None:
            continue
        d = distance(origin, entry)
        if d < best_distance:
            best, best_distance = transition, d

    if best is not None:
        logger.debug(
            "Selected %s transition %s (%.1f nm from %s)",
            procedure.name,
            best.name,
            best_distance,
            previous_fix,
        )
    return best


def strip_transition_labels(
    fixes: list[str], procedure: Procedure, transition: Transition
) -> list[str]:
    """Drop leading entries that only repeat the procedure or transition name.

    Some sources key DP transitions with a label fix at the front (the
    procedure base name or the transition name). The route should start at
    the first real fix, so those labels are removed. At least one fix is
    always kept.
    """
    labels = {procedure.base_name, procedure.name, transition.name}
    start = 0
    while start < len(fixes) - 1 and fixes[start] in labels:
        start += 1
    return fixes[start:]


def expand_procedure(
    procedure: Procedure,
    transition_name: str | None = None,
    previous_fix: str | None = None,
    next_fix: str | None = None,
    coordinates: CoordinateLookup | None = None,
    distance: DistanceFunction = great_circle_distance_nm,
    strip_labels: bool = True,
) -> ProcedureExpansion:
    """Expand a procedure into its fix sequence.

    With ``transition_name`` the named transition is used as is; otherwise
    one is selected by ``select_transition``.

    Raises:
        TransitionNotFoundError: If ``transition_name`` is not a transition
            of the procedure
    """
    if transition_name is None:
        transition = select_transition(procedure, previous_fix, next_fix, coordinates, distance)
        return ProcedureExpansion(
            procedure, tuple(compose_procedure(procedure, transition)), transition
        )

    transition = procedure.find_transition(transition_name)
    if transition is None:
        raise TransitionNotFoundError(transition_name, procedure.name)

    if strip_labels and procedure.kind is ProcedureKind.DP:
        cleaned = Transition(
            name=transition.name,
            entry_fix=transition.entry_fix,
            fixes=tuple(strip_transition_labels(list(transition.fixes), procedure, transition)),
        )
        fixes = strip_transition_labels(compose_procedure(procedure, cleaned), procedure, transition)
    else:
        fixes = compose_procedure(procedure, transition)

    return ProcedureExpansion(procedure, tuple(fixes), transition)
