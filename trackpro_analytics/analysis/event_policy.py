"""Per-event metric policy: direction, unit and display formatting.

The table below is the single source of truth for whether a lower or a
higher number is the better performance. Every other component compares
values through :func:`is_better` rather than guessing from event names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from ..errors import UnknownEventError


class Direction(Enum):
    """Which way a metric improves."""

    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"


class Unit(Enum):
    """Measurement unit of an event result."""

    SECONDS = "seconds"
    METERS = "meters"


class EventCategory(Enum):
    """Event groups as shown in the event selector."""

    SPRINTS = "Sprints"
    JUMPS = "Jumps"
    THROWS = "Throws"
    DISTANCE = "Distance"


@dataclass(frozen=True)
class WorldRecord:
    """Reference world record for an event."""
    value: float
    holder: str
    date: str


@dataclass(frozen=True)
class EventPolicy:
    """Static rules for one event."""
    event_id: str
    name: str
    category: EventCategory
    direction: Direction
    unit: Unit
    display_precision: int = 2
    world_record_men: Optional[WorldRecord] = None
    world_record_women: Optional[WorldRecord] = None


def _timed(event_id, name, category, men=None, women=None):
    return EventPolicy(
        event_id=event_id,
        name=name,
        category=category,
        direction=Direction.LOWER_IS_BETTER,
        unit=Unit.SECONDS,
        display_precision=2,
        world_record_men=WorldRecord(*men) if men else None,
        world_record_women=WorldRecord(*women) if women else None,
    )


def _measured(event_id, name, category, men=None, women=None):
    return EventPolicy(
        event_id=event_id,
        name=name,
        category=category,
        direction=Direction.HIGHER_IS_BETTER,
        unit=Unit.METERS,
        display_precision=2,
        world_record_men=WorldRecord(*men) if men else None,
        world_record_women=WorldRecord(*women) if women else None,
    )


EVENT_POLICIES = (
    # Sprints
    _timed("100m", "100m", EventCategory.SPRINTS,
           (9.58, "Usain Bolt", "2009-08-16"), (10.49, "Florence Griffith-Joyner", "1988-07-16")),
    _timed("200m", "200m", EventCategory.SPRINTS,
           (19.19, "Usain Bolt", "2009-08-20"), (21.34, "Florence Griffith-Joyner", "1988-09-29")),
    _timed("400m", "400m", EventCategory.SPRINTS,
           (43.03, "Wayde van Niekerk", "2016-08-14"), (47.60, "Marita Koch", "1985-10-06")),
    _timed("100h", "100m Hurdles", EventCategory.SPRINTS,
           women=(12.20, "Kendra Harrison", "2016-07-22")),
    _timed("110h", "110m Hurdles", EventCategory.SPRINTS,
           men=(12.80, "Aries Merritt", "2012-09-07")),
    _timed("4x100", "4x100m Relay", EventCategory.SPRINTS,
           (36.84, "Jamaica", "2012-08-11"), (40.82, "USA", "2012-08-10")),
    _timed("4x400", "4x400m Relay", EventCategory.SPRINTS,
           (174.29, "USA", "1993-08-22"), (195.17, "Soviet Union", "1988-10-01")),

    # Jumps
    _measured("lj", "Long Jump", EventCategory.JUMPS,
              (8.95, "Mike Powell", "1991-08-30"), (7.52, "Galina Chistyakova", "1988-06-11")),
    _measured("tj", "Triple Jump", EventCategory.JUMPS,
              (18.29, "Jonathan Edwards", "1995-08-07"), (15.50, "Inessa Kravets", "1995-08-10")),
    _measured("hj", "High Jump", EventCategory.JUMPS,
              (2.45, "Javier Sotomayor", "1993-07-27"), (2.09, "Stefka Kostadinova", "1987-08-30")),
    _measured("pv", "Pole Vault", EventCategory.JUMPS,
              (6.23, "Mondo Duplantis", "2024-08-05"), (5.06, "Yelena Isinbayeva", "2009-08-28")),

    # Throws
    _measured("sp", "Shot Put", EventCategory.THROWS,
              (23.37, "Randy Barnes", "1990-05-20"), (22.63, "Natalya Lisovskaya", "1987-06-07")),
    _measured("dt", "Discus", EventCategory.THROWS,
              (74.08, "Jürgen Schult", "1986-06-06"), (76.80, "Gabriele Reinsch", "1988-07-09")),
    _measured("ht", "Hammer", EventCategory.THROWS,
              (86.74, "Yuriy Sedykh", "1986-08-30"), (82.98, "Anita Włodarczyk", "2016-08-28")),
    _measured("jt", "Javelin", EventCategory.THROWS,
              (98.48, "Jan Železný", "1996-05-25"), (72.28, "Barbora Špotáková", "2008-09-13")),

    # Distance
    _timed("800m", "800m", EventCategory.DISTANCE,
           (100.91, "David Rudisha", "2012-08-09"), (113.28, "Jarmila Kratochvílová", "1983-07-26")),
    _timed("1500m", "1500m", EventCategory.DISTANCE,
           (206.00, "Hicham El Guerrouj", "1998-07-14"), (230.07, "Genzebe Dibaba", "2015-07-17")),
    _timed("3000sc", "3000m Steeplechase", EventCategory.DISTANCE,
           (476.47, "Lamecha Girma", "2023-06-09"), (508.44, "Beatrice Chepkoech", "2018-07-20")),
    _timed("5000m", "5000m", EventCategory.DISTANCE,
           (757.35, "Joshua Cheptegei", "2020-08-14"), (851.15, "Letesenbet Gidey", "2020-10-07")),
    _timed("10000m", "10000m", EventCategory.DISTANCE,
           (1577.53, "Joshua Cheptegei", "2020-10-07"), (1751.15, "Letesenbet Gidey", "2021-06-08")),
)


def _build_index() -> Dict[str, EventPolicy]:
    index: Dict[str, EventPolicy] = {}
    for policy in EVENT_POLICIES:
        for key in {policy.event_id.lower(), policy.name.lower()}:
            existing = index.get(key)
            if existing is not None and existing is not policy:
                raise ValueError(f"Event alias {key!r} maps to both {existing.name} and {policy.name}")
            index[key] = policy
    return index


_INDEX = _build_index()


def resolve(event: str) -> EventPolicy:
    """Look up the policy for an event id or display name.

    Lookup is case-insensitive and ignores surrounding whitespace.

    Raises:
        UnknownEventError: if the event is not in the table
    """
    if not isinstance(event, str):
        raise UnknownEventError(str(event))
    policy = _INDEX.get(event.strip().lower())
    if policy is None:
        raise UnknownEventError(event)
    return policy


def all_policies() -> List[EventPolicy]:
    """Get every known event policy in table order."""
    return list(EVENT_POLICIES)


def events_by_category(category: Union[EventCategory, str]) -> List[EventPolicy]:
    """Get the events of one category ("Sprints", "Jumps", ...)."""
    if isinstance(category, str):
        category = EventCategory(category)
    return [policy for policy in EVENT_POLICIES if policy.category is category]


def is_better(direction: Union[Direction, EventPolicy, str], candidate: float, reference: float) -> bool:
    """Return True if ``candidate`` is strictly better than ``reference``.

    ``direction`` may be a :class:`Direction`, a policy, or an event name.
    """
    if isinstance(direction, str):
        direction = resolve(direction).direction
    elif isinstance(direction, EventPolicy):
        direction = direction.direction

    if direction is Direction.LOWER_IS_BETTER:
        return candidate < reference
    return candidate > reference


def format_value(event: Union[str, EventPolicy], value: float) -> str:
    """Format a result for display, e.g. ``10.85s``, ``1:45.50`` or ``7.25m``."""
    policy = resolve(event) if isinstance(event, str) else event
    precision = policy.display_precision

    if policy.unit is Unit.METERS:
        return f"{value:.{precision}f}m"

    total = round(value, precision)
    if total < 60:
        return f"{total:.{precision}f}s"

    minutes = int(total // 60)
    seconds = total - minutes * 60
    width = 2 + (precision + 1 if precision else 0)
    return f"{minutes}:{seconds:0{width}.{precision}f}"
