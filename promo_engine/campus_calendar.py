"""
Campus calendar context: curated events and seasonal demand patterns.

The catalog is a versioned JSON table so it can be updated without a release.
Declaration order matters: it is the order events are cited in and the
tie-break for overlapping seasons (first declared pattern wins).
"""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

from promo_engine.errors import CatalogError
from promo_engine.models import (
    CalendarCatalog,
    CalendarContext,
    CampusEvent,
    EventKind,
    ImpactTier,
    PromotionCategory,
    SeasonalPattern,
)
from promo_engine.settings import get_calendar_path

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "campus_calendar.json"

# Events starting within this many days are reported as upcoming.
UPCOMING_WINDOW_DAYS = 7


def to_calendar_date(now: Union[date, datetime]) -> date:
    """
    Reduce a timestamp to the calendar date used for all comparisons.

    Aware datetimes are converted to UTC first; naive datetimes and dates
    are taken as given.

    Example:
        >>> to_calendar_date(datetime(2026, 1, 12, 23, 30))
        datetime.date(2026, 1, 12)
    """
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date()
    return now


def _parse_categories(raw: Any, where: str) -> frozenset:
    try:
        return frozenset(PromotionCategory(c) for c in raw or [])
    except ValueError as exc:
        raise CatalogError(f"{where}: unknown category ({exc})") from exc


def _parse_event(raw: dict) -> CampusEvent:
    where = f"event {raw.get('id', '?')!r}"
    try:
        start = date.fromisoformat(raw["start"])
        end = date.fromisoformat(raw["end"])
        event = CampusEvent(
            id=str(raw["id"]),
            name=str(raw["name"]),
            kind=EventKind(raw["kind"]),
            start=start,
            end=end,
            impact=ImpactTier(raw.get("impact", "medium")),
            category_affinity=_parse_categories(raw.get("category_affinity"), where),
            description=raw.get("description", ""),
            order_behavior=raw.get("order_behavior", ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"{where}: {exc}") from exc
    if event.end < event.start:
        raise CatalogError(f"{where}: end date {event.end} precedes start date {event.start}")
    return event


def _parse_season(raw: dict) -> SeasonalPattern:
    where = f"season {raw.get('name', '?')!r}"
    try:
        months = frozenset(int(m) for m in raw["months"])
        season = SeasonalPattern(
            name=str(raw["name"]),
            months=months,
            avg_order_increase=float(raw.get("avg_order_increase", 0)),
            peak_days=tuple(raw.get("peak_days", [])),
            category_affinity=_parse_categories(raw.get("category_affinity"), where),
            description=raw.get("description", ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"{where}: {exc}") from exc
    if not months or any(m < 1 or m > 12 for m in months):
        raise CatalogError(f"{where}: months must be within 1-12")
    return season


def parse_catalog(data: dict) -> CalendarCatalog:
    """Build a CalendarCatalog from its JSON table form."""
    if not isinstance(data, dict):
        raise CatalogError("Calendar catalog must be a JSON object")
    return CalendarCatalog(
        version=str(data.get("version", "unversioned")),
        events=tuple(_parse_event(e) for e in data.get("events", [])),
        seasons=tuple(_parse_season(s) for s in data.get("seasons", [])),
    )


def load_catalog(path: Optional[Union[str, Path]] = None) -> CalendarCatalog:
    """
    Load the calendar catalog from disk.

    Resolution order: explicit path, PROMO_CALENDAR_PATH, packaged default.

    Raises:
        CatalogError: If the file is missing, not JSON, or has invalid entries
    """
    resolved = Path(path or get_calendar_path() or DEFAULT_CATALOG_PATH)
    try:
        with open(resolved, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise CatalogError(f"Cannot read calendar catalog {resolved}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Calendar catalog {resolved} is not valid JSON: {exc}") from exc

    catalog = parse_catalog(data)
    logger.info(
        "Loaded calendar catalog %s (version %s): %d events, %d seasons",
        resolved, catalog.version, len(catalog.events), len(catalog.seasons),
    )
    return catalog


@lru_cache(maxsize=1)
def get_default_catalog() -> CalendarCatalog:
    """Process-wide catalog, loaded once."""
    return load_catalog()


def get_context(
    now: Union[date, datetime],
    catalog: Optional[CalendarCatalog] = None,
) -> CalendarContext:
    """
    Return the calendar signals that apply on the date of `now`.

    - active_events: start <= today <= end (both ends inclusive)
    - upcoming_events: today < start <= today + 7 days
    - current_season: first pattern in declaration order containing today's month

    Example:
        >>> ctx = get_context(date(2026, 1, 12))
        >>> [e.name for e in ctx.active_events]
        ['New Student Orientation']
    """
    if catalog is None:
        catalog = get_default_catalog()

    today = to_calendar_date(now)
    horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    active = tuple(e for e in catalog.events if e.start <= today <= e.end)
    upcoming = tuple(e for e in catalog.events if today < e.start <= horizon)
    season = next((s for s in catalog.seasons if today.month in s.months), None)

    return CalendarContext(
        today=today,
        active_events=active,
        upcoming_events=upcoming,
        current_season=season,
    )
