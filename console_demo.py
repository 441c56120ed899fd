"""
Offline console demo: runs booking scenarios against the in-memory backend.

Uses the real orchestrator, calculators and state machine on seeded demo
data. No database, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario conflict
    python console_demo.py --scenario month
"""

import argparse
import asyncio
import sys
from datetime import date
from typing import Optional

from salon_scheduler.backend.memory import InMemoryBackend
from salon_scheduler.backend.repository import SalonRepository
from salon_scheduler.backend.seed import STAFF_USER_ID, seed_demo_data
from salon_scheduler.booking import (
    BookingOrchestrator,
    DaySchedule,
    find_free_slots,
    load_month_availability,
)
from salon_scheduler.config import settings
from salon_scheduler.schemas.booking_schema import BookingRequest, BookingResponse
from salon_scheduler.schemas.client_schema import ClientSelection
from salon_scheduler.schemas.slot_schema import Occupancy, SlotKind

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Plays scripted staff actions against a freshly seeded salon."""

    SCENARIOS = ("booking", "conflict", "edit", "cancel", "month", "search")

    def __init__(self, today: Optional[date] = None) -> None:
        self.today = today or date.today()
        self.backend = InMemoryBackend()
        self.day = seed_demo_data(self.backend, self.today)
        self.repo = SalonRepository(self.backend)
        self.orchestrator = BookingOrchestrator(self.repo)

    def staff_say(self, text: str) -> None:
        print(f"{BLUE}[Staff]{RESET} {text}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_result(self, result: BookingResponse) -> None:
        colour = GREEN if result.success else RED
        print(f"{colour}{BOLD}[{result.booking_ref}]{RESET} {colour}{result.message}{RESET}")
        for warning in result.warnings:
            print(f"{YELLOW}  ! {warning}{RESET}")
        self.system_log(f"State trace: {' -> '.join(result.state_trace)}")
        if result.error_code:
            self.system_log(f"Error code: {result.error_code}")

    async def show_day(self) -> None:
        view = DaySchedule(self.repo, self.day)
        await view.refresh()
        print(f"\n{BOLD}  {self.day.isoformat()} ({self.day.strftime('%A')}){RESET}")
        for slot in view.grid:
            if slot.is_free:
                print(f"  {slot.time}  {GREEN}free{RESET}")
                continue
            detail = await self.repo.describe_appointment(slot.appointment)
            label = (
                f"{detail.client_name}, {detail.service_name}"
                if slot.kind == SlotKind.START
                else "..."
            )
            marker = f" {RED}(overlap){RESET}" if slot.occupancy == Occupancy.MULTIPLE else ""
            print(f"  {slot.time}  {YELLOW}{label}{RESET}{marker}")
        gaps = ", ".join(f"{i.start_time}-{i.end_time}" for i in view.free_intervals)
        self.system_log(f"Free intervals: {gaps or 'none'}")
        print()

    def _request(self, start: str, end: str, **overrides) -> BookingRequest:
        fields = {
            "service_id": "svc-haircut",
            "client": ClientSelection.registered("client-maria"),
            "appointment_date": self.day,
            "start_time": start,
            "end_time": end,
            "created_by": STAFF_USER_ID,
        }
        fields.update(overrides)
        return BookingRequest(**fields)

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    async def scenario_booking(self) -> None:
        self.staff_say("Book a haircut for Maria at 10:00-10:30.")
        self.show_result(await self.orchestrator.submit(self._request("10:00", "10:30")))
        self.staff_say("Book a manicure for a walk-in, Ana (phone 0888 555 111), at 13:30-14:15.")
        self.show_result(await self.orchestrator.submit(self._request(
            "13:30", "14:15",
            service_id="svc-manicure",
            client=ClientSelection.new("  Ana Koleva ", "0888 555 111"),
        )))

    async def scenario_conflict(self) -> None:
        self.staff_say("Book a blow dry for Elena at 12:00-12:30 (over the colouring).")
        self.show_result(await self.orchestrator.submit(self._request(
            "12:00", "12:30",
            service_id="svc-blowdry",
            client=ClientSelection.registered("client-elena"),
        )))
        self.staff_say("Try a 10-minute slot at 14:00-14:10.")
        self.show_result(await self.orchestrator.submit(self._request("14:00", "14:10")))

    async def scenario_edit(self) -> None:
        self.staff_say("Move Maria's pedicure (apt-1) to 16:00-17:00.")
        self.show_result(await self.orchestrator.submit(self._request(
            "16:00", "17:00",
            service_id="svc-pedicure",
            editing_appointment_id="apt-1",
        )))

    async def scenario_cancel(self) -> None:
        self.staff_say("Cancel Elena's haircut (apt-3): stylist is ill.")
        result = await self.orchestrator.cancel("apt-3", reason="Your stylist is ill today.")
        colour = GREEN if result.success else RED
        print(f"{colour}{result.message}{RESET}")

    async def scenario_month(self) -> None:
        availability = await load_month_availability(
            self.repo, self.day.year, self.day.month, today=self.today
        )
        print(f"\n{BOLD}  {self.day.strftime('%B %Y')}{RESET}")
        for iso, available in availability.items():
            mark = f"{GREEN}open{RESET}" if available else f"{DIM}-{RESET}"
            print(f"  {iso}  {mark}")

    async def scenario_search(self) -> None:
        slots = await find_free_slots(self.repo, start_date=self.day, horizon_days=3, limit=6)
        print(f"\n{BOLD}  Next free slots{RESET}")
        for slot in slots:
            print(f"  {slot.appointment_date.isoformat()}  {slot.start_time}-{slot.end_time}"
                  f"  {DIM}({slot.duration_minutes} min){RESET}")

    async def run_scenario(self, scenario: str) -> None:
        handler = getattr(self, f"scenario_{scenario}", None)
        if handler is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SALON SCHEDULER - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Salon: {settings.salon_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        await self.show_day()
        await handler()
        if scenario not in ("month", "search"):
            await self.show_day()

        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Salon scheduler console demo")
    parser.add_argument(
        "--scenario",
        choices=ConsoleSession.SCENARIOS + ("all",),
        default="all",
        help="Scenario to play (default: all, each on fresh data)",
    )
    args = parser.parse_args(argv)

    scenarios = ConsoleSession.SCENARIOS if args.scenario == "all" else (args.scenario,)
    for scenario in scenarios:
        asyncio.run(ConsoleSession().run_scenario(scenario))
    return 0


if __name__ == "__main__":
    sys.exit(main())
