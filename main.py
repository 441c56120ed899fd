"""
Salon scheduler entry point.

Inspects the seeded demo salon from the command line, or hands off to the
scripted console demo.

Usage:
    Day grid:        python main.py day [YYYY-MM-DD]
    Month overview:  python main.py month [YYYY-MM]
    Free slots:      python main.py free [--days 7] [--limit 10]
    Services:        python main.py services
    Console demo:    python main.py console
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime

from salon_scheduler.config import settings

logger = logging.getLogger(__name__)


def _repository():
    from salon_scheduler.backend.memory import InMemoryBackend
    from salon_scheduler.backend.repository import SalonRepository
    from salon_scheduler.backend.seed import seed_demo_data

    backend = InMemoryBackend()
    day = seed_demo_data(backend)
    return SalonRepository(backend), day


async def _show_day(day_arg: str) -> None:
    from salon_scheduler.booking import DaySchedule
    from salon_scheduler.schemas.slot_schema import SlotKind
    from salon_scheduler.scheduling.slot_grid import cells_spanned

    repo, demo_day = _repository()
    day = date.fromisoformat(day_arg) if day_arg else demo_day
    view = DaySchedule(repo, day)
    await view.refresh()
    if not view.grid:
        print(f"{day.isoformat()}: closed")
        return
    for slot in view.grid:
        if slot.is_free:
            status = "free"
        elif slot.kind == SlotKind.START:
            span = cells_spanned(slot.appointment)
            status = f"{slot.appointment.id} ({slot.appointment.time_range}, {span:g} cells)"
        else:
            status = f"  ... {slot.appointment.id}"
        if slot.is_anomaly:
            status += " (overlap)"
        print(f"{slot.time}  {status}")


async def _show_month(month_arg: str) -> None:
    from salon_scheduler.booking import load_month_availability

    repo, demo_day = _repository()
    month = datetime.strptime(month_arg, "%Y-%m").date() if month_arg else demo_day
    availability = await load_month_availability(repo, month.year, month.month)
    for iso, available in availability.items():
        print(f"{iso}  {'open' if available else '-'}")


async def _show_free(days: int, limit: int) -> None:
    from salon_scheduler.booking import find_free_slots

    repo, _ = _repository()
    for slot in await find_free_slots(repo, horizon_days=days, limit=limit):
        print(f"{slot.appointment_date.isoformat()}  {slot.start_time}-{slot.end_time}")


async def _show_services() -> None:
    repo, _ = _repository()
    for service in await repo.list_services():
        print(f"{service.id:<14} {service.name:<20} {service.duration_minutes:>3} min  {service.price:>7.2f}")


def _run_console_mode() -> int:
    """Start the offline console demo."""
    from console_demo import main as console_main

    return console_main([])


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=f"{settings.salon_name} scheduler")
    sub = parser.add_subparsers(dest="command", required=True)
    day = sub.add_parser("day", help="Show the slot grid for a day")
    day.add_argument("date", nargs="?", default="")
    month = sub.add_parser("month", help="Show which days of a month have free time")
    month.add_argument("month", nargs="?", default="")
    free = sub.add_parser("free", help="List the next free intervals")
    free.add_argument("--days", type=int, default=settings.scheduling.search_horizon_days)
    free.add_argument("--limit", type=int, default=settings.scheduling.max_search_results)
    sub.add_parser("services", help="List the bookable services")
    sub.add_parser("console", help="Play the scripted console demo")
    args = parser.parse_args(argv)

    if args.command == "console":
        return _run_console_mode()
    try:
        if args.command == "day":
            asyncio.run(_show_day(args.date))
        elif args.command == "month":
            asyncio.run(_show_month(args.month))
        elif args.command == "services":
            asyncio.run(_show_services())
        else:
            asyncio.run(_show_free(args.days, args.limit))
    except ValueError as exc:
        logger.error("Invalid argument: %s", exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
