"""
Command-line interface for the Campaign Effectiveness & Recommendation Engine.
Reads promotion snapshots exported as JSON and prints metrics or a ranked shortlist.
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from promo_engine.campus_calendar import get_context, load_catalog
from promo_engine.errors import CatalogError
from promo_engine.metrics import compute_portfolio_metrics
from promo_engine.models import (
    CampaignGoal,
    DiscountKind,
    PromotionCategory,
    PromotionRecord,
)
from promo_engine.recommender import build_report


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _optional_float(value) -> Optional[float]:
    return None if value is None or value == "" else float(value)


def _optional_int(value) -> Optional[int]:
    return None if value is None or value == "" else int(value)


def _parse_bool(value, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "y"):
            return True
        if lowered in ("false", "0", "no", "n"):
            return False
        raise ValueError(f"Cannot read {value!r} as a boolean")
    return bool(value)


def record_from_dict(row: dict) -> PromotionRecord:
    """
    Convert one exported promo code / template row into a PromotionRecord.

    Accepts the storage column names (`used_count`, `times_used`, `name`)
    as aliases so code and template exports load the same way.
    """
    kind = row.get("discount_type") or row.get("discount_kind")
    times = row.get("times_redeemed", row.get("times_used", row.get("used_count", 0)))

    return PromotionRecord(
        id=str(row["id"]),
        code=str(row.get("code") or row.get("name") or row["id"]),
        description=row.get("description") or "",
        category=PromotionCategory(row.get("category", "seasonal")),
        discount_kind=DiscountKind(kind) if kind else None,
        discount_value=float(row.get("discount_value", 0)),
        min_order_amount=float(row.get("min_order_amount") or 0),
        max_discount_amount=_optional_float(row.get("max_discount_amount")),
        usage_limit=_optional_int(row.get("usage_limit")),
        duration_days=_optional_int(row.get("duration_days")),
        applicable_order_types=tuple(row.get("applicable_order_types") or ("food", "store")),
        times_redeemed=int(times or 0),
        roi_score=_optional_float(row.get("roi_score")),
        redemption_rate=_optional_float(row.get("redemption_rate")),
        revenue_generated=_optional_float(row.get("revenue_generated")),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
        is_active=_parse_bool(row.get("is_active")),
        expires_at=_parse_timestamp(row.get("expires_at")),
    )


def load_records(path: Path) -> List[PromotionRecord]:
    """
    Load promotion records from a JSON file (a list, or {"records": [...]}).

    Returns:
        List of PromotionRecord objects
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    rows = data.get("records", []) if isinstance(data, dict) else data
    return [record_from_dict(row) for row in rows]


def _fail(message: str):
    print(f"Error: {message}")
    sys.exit(1)


def _resolve_date(raw: Optional[str]) -> date:
    if not raw:
        return datetime.now(timezone.utc).date()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        _fail(f"Invalid date format '{raw}'. Expected YYYY-MM-DD.")


def _load_records_or_fail(raw_path: str) -> List[PromotionRecord]:
    path = Path(raw_path)
    if not path.exists():
        _fail(f"Records file '{path}' not found.")
    try:
        return load_records(path)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        _fail(f"Could not read records from '{path}': {exc}")


def _load_catalog_or_fail(raw_path: Optional[str]):
    try:
        return load_catalog(raw_path)
    except CatalogError as exc:
        _fail(str(exc))


def cmd_context(args):
    """
    Show the campus calendar context for a date.

    Args:
        args: Parsed command-line arguments with fields:
            - date: optional YYYY-MM-DD (defaults to today)
            - catalog: optional catalog JSON path
    """
    today = _resolve_date(args.date)
    context = get_context(today, _load_catalog_or_fail(args.catalog))

    print(f"\n=== Campus Context for {today.isoformat()} ===\n")

    print("Active Events:")
    if context.active_events:
        for event in context.active_events:
            print(f"  {event.name} ({event.start} to {event.end}, {event.impact.value} impact)")
            print(f"    {event.order_behavior}")
    else:
        print("  (None)")

    print("\nUpcoming Events (next 7 days):")
    if context.upcoming_events:
        for event in context.upcoming_events:
            days = (event.start - today).days
            print(f"  {event.name} in {days} day(s) ({event.start})")
    else:
        print("  (None)")

    print("\nCurrent Season:")
    if context.current_season:
        season = context.current_season
        print(f"  {season.name}: +{season.avg_order_increase:g}% avg orders, "
              f"peaks on {', '.join(season.peak_days)}")
    else:
        print("  (No seasonal pattern matches this month)")
    print()


def cmd_metrics(args):
    """
    Show portfolio and per-record effectiveness metrics.

    Args:
        args: Parsed command-line arguments with fields:
            - file: records JSON path
            - date: optional YYYY-MM-DD used for the expiry check
    """
    records = _load_records_or_fail(args.file)
    as_of = datetime.combine(_resolve_date(args.date), datetime.min.time())
    portfolio = compute_portfolio_metrics(records, now=as_of)
    codes = {r.id: r.code for r in records}

    print("\n=== Portfolio Metrics ===\n")
    print(f"Records scored: {portfolio.record_count} ({portfolio.active_count} active)")
    print(f"Total redemptions: {portfolio.total_redemptions}")
    print(f"Discount given: {portfolio.total_discount_given}")
    print(f"Revenue influenced: {portfolio.total_revenue_influenced}")
    print(f"ROI: {portfolio.roi}%")
    print(f"Cost per acquisition: {portfolio.cost_per_acquisition}")
    print(f"Effectiveness score: {portfolio.effectiveness_score}/100")

    if portfolio.records:
        print("\n--- Per Record ---\n")
        for m in portfolio.records:
            print(f"{codes[m.record_id]}: discount {m.discount_given}, revenue {m.revenue_influenced}, "
                  f"ROI {m.roi}%, cost/redemption {m.cost_per_redemption}, "
                  f"score {m.effectiveness_score}")

    if portfolio.excluded_ids:
        print(f"\nExcluded (malformed): {', '.join(codes[i] for i in portfolio.excluded_ids)}")
    print()


def cmd_recommend(args):
    """
    Rank promotion templates for a campaign goal.

    Args:
        args: Parsed command-line arguments with fields:
            - file: records JSON path
            - goal: 'roi' | 'redemption_rate' | 'revenue'
            - top: shortlist length
            - date: optional YYYY-MM-DD
            - catalog: optional catalog JSON path
    """
    valid_goals = [g.value for g in CampaignGoal]
    if args.goal not in valid_goals:
        _fail(f"Invalid goal '{args.goal}'. Must be one of: {', '.join(valid_goals)}")
    if args.top < 1:
        _fail(f"--top must be at least 1. Got: {args.top}")

    records = _load_records_or_fail(args.file)
    today = _resolve_date(args.date)
    result = build_report(
        records,
        args.goal,
        now=today,
        catalog=_load_catalog_or_fail(args.catalog),
        top_n=args.top,
    )

    goal = CampaignGoal(args.goal)
    print(f"\n=== Template Recommendations ({goal.label}) ===\n")

    if not result.recommendations:
        print("Not enough data yet: no template has redemption history to rank.")
        print()
        return

    print(result.headline)
    print()
    for item in result.recommendations:
        print(f"#{item.rank} {item.record.code} - {goal.label}: {item.display_value}")
        for reason in item.rationale:
            print(f"   • {reason}")
        print()

    if result.excluded_ids:
        print(f"Skipped malformed records: {', '.join(result.excluded_ids)}")
        print()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Campaign Effectiveness & Recommendation Engine CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine warnings and details")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_context = subparsers.add_parser("context", help="Show campus calendar context")
    parser_context.add_argument("--date", help="Reference date (YYYY-MM-DD), defaults to today")
    parser_context.add_argument("--catalog", help="Calendar catalog JSON (optional)")

    parser_metrics = subparsers.add_parser("metrics", help="Show effectiveness metrics")
    parser_metrics.add_argument("--file", required=True, help="Promotion records JSON")
    parser_metrics.add_argument("--date", help="Reference date (YYYY-MM-DD), defaults to today")

    parser_recommend = subparsers.add_parser("recommend", help="Rank templates for a goal")
    parser_recommend.add_argument("--file", required=True, help="Promotion records JSON")
    parser_recommend.add_argument("--goal", required=True, help="Goal (roi | redemption_rate | revenue)")
    parser_recommend.add_argument("--top", type=int, default=3, help="Shortlist length (default 3)")
    parser_recommend.add_argument("--date", help="Reference date (YYYY-MM-DD), defaults to today")
    parser_recommend.add_argument("--catalog", help="Calendar catalog JSON (optional)")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "context":
        cmd_context(args)
    elif args.command == "metrics":
        cmd_metrics(args)
    elif args.command == "recommend":
        cmd_recommend(args)


if __name__ == "__main__":
    main()
