"""
Pasture Pickup CLI entrypoint.

This CLI is intended for quick local checks and debugging without the web frontend.
It delegates discovery to `pasturepickup.discovery.engine.DiscoveryEngine` and reads
vendors through the configured repository backend.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
from typing import Any

from pasturepickup.catalog.locations import DEFAULT_CATALOG
from pasturepickup.config.settings import get_settings
from pasturepickup.core.errors import NotFoundError
from pasturepickup.core.geo import GeoPoint
from pasturepickup.core.logging import configure_logging
from pasturepickup.discovery.engine import DiscoveryEngine, paginate
from pasturepickup.ingestion.geocoding import GoogleGeocoder
from pasturepickup.quality.report import build_quality_report
from pasturepickup.storage.repository import build_repository


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _cmd_search(args: argparse.Namespace) -> int:
    """Handle the `search` subcommand."""
    settings = get_settings()
    engine = DiscoveryEngine.from_settings(settings)
    service = DEFAULT_CATALOG.require_service(args.service) if args.service else None

    vendors = build_repository(settings).fetch(status="Active")
    ranked = engine.find_by_radius(
        vendors, GeoPoint(lat=float(args.lat), lng=float(args.lng)), args.radius, service=service
    )
    pages = paginate(ranked, int(args.page_size or settings.discovery.page_size))
    items = pages.page(int(args.page) - 1)

    if args.json:
        _print_json(
            {
                "total": pages.total_items,
                "page": int(args.page),
                "page_count": pages.page_count,
                "items": [v.model_dump(mode="json") for v in items],
            }
        )
        return 0

    print(f"{pages.total_items} vendors (page {args.page}/{max(1, pages.page_count)})")
    for i, v in enumerate(items, start=1 + (int(args.page) - 1) * pages.page_size):
        print(f"{i:>3}. {v.name} ({v.city}, {v.state_code})  {v.distance_miles:.1f} mi  id={v.id}")
    return 0


def _cmd_region(args: argparse.Namespace) -> int:
    """Handle the `region` subcommand (same resolution rules as the region pages)."""
    settings = get_settings()
    catalog = DEFAULT_CATALOG
    state = catalog.require_state(args.state)

    city = None
    service = None
    if args.segment and catalog.is_service_slug(args.segment):
        service = catalog.require_service(args.segment)
    elif args.segment:
        city = catalog.require_city(args.state, args.segment).city
    if args.service:
        service = catalog.require_service(args.service)

    engine = DiscoveryEngine.from_settings(settings)
    match = engine.find_by_region(build_repository(settings).fetch(status="Active"), state, city, service)

    if args.json:
        _print_json(match.model_dump(mode="json"))
        return 0

    label = ", ".join(s for s in [city, state.name, service.display_name if service else None] if s)
    print(f"{label}: {len(match.local)} local, {len(match.nearby)} nearby")
    for v in match.local:
        print(f"  - {v.name} ({v.city})  id={v.id}")
    if match.nearby:
        print("Nearby:")
        for v in match.nearby:
            print(f"  - {v.name} ({v.city})  id={v.id}")
    return 0


def _cmd_paths(args: argparse.Namespace) -> int:
    paths = DEFAULT_CATALOG.enumerate_all_paths()
    if args.json:
        _print_json(paths)
    else:
        print("\n".join(paths))
    return 0


def _cmd_geocode(args: argparse.Namespace) -> int:
    geocoder = GoogleGeocoder(get_settings())
    if args.reverse:
        result = geocoder.reverse_geocode(float(args.reverse[0]), float(args.reverse[1]))
    else:
        result = geocoder.geocode(" ".join(args.address))
    if result is None:
        print("No results.")
        return 1

    if args.json:
        _print_json(dataclasses.asdict(result))
        return 0
    print(f"{result.normalized_address}")
    print(f"  lat={result.latitude:.6f} lng={result.longitude:.6f} city={result.city} state={result.state_code}")
    return 0


def _cmd_quality_report(_: argparse.Namespace) -> int:
    vendors = build_repository(get_settings()).fetch()
    _print_json(build_quality_report(vendors, DEFAULT_CATALOG))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the Pasture Pickup CLI."""
    parser = argparse.ArgumentParser(prog="pasturepickup")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override PASTUREPICKUP_LOG_LEVEL (JSON output defaults to WARNING to keep stderr quiet).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="Find vendors whose service area covers a point.")
    s.add_argument("--lat", required=True, type=float)
    s.add_argument("--lng", required=True, type=float)
    s.add_argument("--radius", type=float, default=None, help="Miles (default from config).")
    s.add_argument("--service", type=str, default=None, help="Service slug, e.g. dead-cattle-removal")
    s.add_argument("--page", type=int, default=1)
    s.add_argument("--page-size", type=int, default=None)
    s.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    s.set_defaults(func=_cmd_search)

    r = sub.add_parser("region", help="List vendors for a state / city / service page.")
    r.add_argument("state", help="State slug, e.g. texas or new-york")
    r.add_argument("segment", nargs="?", default=None, help="City slug or service slug")
    r.add_argument("--service", type=str, default=None, help="Service slug (combined with a city)")
    r.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    r.set_defaults(func=_cmd_region)

    p = sub.add_parser("paths", help="Print every programmatic SEO path.")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=_cmd_paths)

    g = sub.add_parser("geocode", help="Geocode an address (requires GOOGLE_MAPS_API_KEY).")
    g.add_argument("address", nargs="*")
    g.add_argument("--reverse", nargs=2, metavar=("LAT", "LNG"), default=None)
    g.add_argument("--json", action="store_true")
    g.set_defaults(func=_cmd_geocode)

    q = sub.add_parser("quality-report", help="Vendor data quality report (JSON).")
    q.set_defaults(func=_cmd_quality_report, json=True)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m pasturepickup.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level or ("WARNING" if getattr(args, "json", False) else None))
    except ValueError as e:
        parser.error(str(e))
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except NotFoundError as e:
        parser.error(str(e))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
