"""
Offline console demo: drives the booking store from a terminal.

Uses the real services, lifecycle engine and an in-memory store. The
customer, admin and technician roles are played by typed commands, or
by a pre-scripted scenario.

Usage:
    python console_demo.py
    python console_demo.py --scenario lifecycle
    python console_demo.py --scenario rejections
"""

import argparse
import shlex
from typing import Callable, Optional

from fieldservice.config import settings
from fieldservice.errors import BookingStoreError
from fieldservice.schemas.booking_schema import Booking
from fieldservice.services import ServiceDesk, build_desk
from fieldservice.store import InMemoryStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

HELP = """Commands:
  book <name> <phone> <address> [service type]
  confirm <booking>            assign <booking> <technician>
  otw <booking>                start <booking>
  complete <booking> <amount>  cancel <booking> [reason]
  search [text]                unassigned
  techs                        addtech <name> <phone> [skills]
  deactivate <technician>      earnings <technician>
  history <booking>            quit"""


class ConsoleSession:
    """Plays customer, admin and technician against one ServiceDesk."""

    SCENARIOS: dict[str, list[str]] = {
        "lifecycle": [
            'book "Asha Rao" 9876500000 "12 MG Road" "Gas Filling"',
            "confirm #1",
            "assign #1 Rahul Kumar",
            "otw #1",
            "start #1",
            "complete #1 1200",
            "history #1",
            "earnings Rahul Kumar",
        ],
        "rejections": [
            'book "Vikram Das" 9876511111 "Sector 62, Noida" "Water Leakage"',
            "complete #1 900",
            "deactivate Akash Singh",
            "assign #1 Akash Singh",
            "assign #1 Rahul Kumar",
            "assign #1 Rahul Kumar",
            "start #1",
            "complete #1 lots",
            "cancel #1 customer unreachable",
            "start #1",
            "history #1",
        ],
    }

    def __init__(self, desk: Optional[ServiceDesk] = None) -> None:
        self.desk = desk or build_desk(InMemoryStore(), seed=True)
        self._created: list[str] = []
        self._commands: dict[str, Callable[[list[str]], None]] = {
            "book": self._book,
            "confirm": lambda a: self._show(self.desk.bookings.confirm(self._booking_id(a[0]))),
            "assign": self._assign,
            "otw": lambda a: self._show(self.desk.bookings.mark_on_the_way(self._booking_id(a[0]))),
            "start": lambda a: self._show(self.desk.bookings.start(self._booking_id(a[0]))),
            "complete": lambda a: self._show(
                self.desk.bookings.complete(self._booking_id(a[0]), a[1] if len(a) > 1 else None)
            ),
            "cancel": lambda a: self._show(
                self.desk.bookings.cancel(self._booking_id(a[0]), " ".join(a[1:]) or None)
            ),
            "search": lambda a: self._list(self.desk.search.search(" ".join(a))),
            "unassigned": lambda a: self._list(self.desk.assignment.list_unassigned()),
            "techs": self._techs,
            "addtech": self._add_tech,
            "deactivate": self._deactivate,
            "earnings": self._earnings,
            "history": self._history,
        }

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.business.name.upper()} - {title}{RESET}")
        print(f"{BOLD}  Service area: {settings.business.service_area}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self.banner(f"Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[operator] {RESET}{step}")
            self.execute(step)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Status counts: {self.desk.reporting.summary().by_status}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run(self) -> None:
        self.banner("Console Demo")
        print(HELP)
        while True:
            line = input(f"\n{BLUE}[operator] {RESET}").strip()
            if not line:
                continue
            if line.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            self.execute(line)

    def execute(self, line: str) -> None:
        try:
            name, *args = shlex.split(line)
        except ValueError as exc:
            print(f"{RED}Could not parse command: {exc}{RESET}")
            return
        handler = self._commands.get(name.lower())
        if handler is None:
            print(HELP)
            return
        try:
            handler(args)
        except BookingStoreError as exc:
            print(f"{YELLOW}Rejected ({exc.kind}): {exc.message}{RESET}")
        except IndexError:
            print(f"{RED}Missing arguments for '{name}'.{RESET}")

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def _booking_id(self, ref: str) -> str:
        """Accept ``#n`` for the n-th booking created in this session."""
        if ref.startswith("#") and ref[1:].isdigit():
            index = int(ref[1:]) - 1
            if 0 <= index < len(self._created):
                return self._created[index]
        return ref

    def _technician_id(self, ref: str) -> str:
        for tech in self.desk.bookings.list_technicians():
            if ref in (tech.id, tech.name):
                return tech.id
        return ref

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def _book(self, args: list[str]) -> None:
        fields = {"name": args[0], "phone": args[1], "address": args[2]}
        if len(args) > 3:
            fields["service_type"] = args[3]
        booking = self.desk.bookings.create_booking(fields)
        self._created.append(booking.id)
        self.system_log(f"Created #{len(self._created)} = {booking.id}")
        self._show(booking)

    def _assign(self, args: list[str]) -> None:
        booking_id = self._booking_id(args[0])
        technician_id = self._technician_id(" ".join(args[1:]))
        self._show(self.desk.assignment.assign(booking_id, technician_id))

    def _techs(self, args: list[str]) -> None:
        for tech in self.desk.bookings.list_technicians():
            state = "active" if tech.active else "inactive"
            self.say(f"{tech.id}  {tech.name} • {tech.phone}  [{', '.join(tech.skills)}]  {state}")

    def _add_tech(self, args: list[str]) -> None:
        fields = {"name": args[0], "phone": args[1]}
        if len(args) > 2:
            fields["skills"] = " ".join(args[2:])
        tech = self.desk.bookings.create_technician(fields)
        self.say(f"Added {tech.name} ({tech.id})")

    def _deactivate(self, args: list[str]) -> None:
        tech = self.desk.bookings.set_technician_active(self._technician_id(" ".join(args)), False)
        self.say(f"{tech.name} is now inactive")

    def _earnings(self, args: list[str]) -> None:
        e = self.desk.reporting.technician_earnings(self._technician_id(" ".join(args)))
        symbol = settings.business.currency_symbol
        self.say(
            f"{e.technician_name}: {e.completed_jobs}/{e.assigned_jobs} jobs completed, "
            f"billed {symbol}{e.billed_total:.2f}, payout {symbol}{e.payout:.2f}"
        )

    def _history(self, args: list[str]) -> None:
        booking = self.desk.bookings.get_booking(self._booking_id(args[0]))
        for entry in booking.history:
            self.say(f"{entry.at:%Y-%m-%d %H:%M:%S}  {entry.text}")

    def _show(self, booking: Booking) -> None:
        line = f"{booking.id}  {booking.service_type} • {booking.name}  [{booking.status.value}]"
        if booking.technician_name:
            line += f"  Tech: {booking.technician_name} ({booking.technician_phone})"
        if booking.amount is not None:
            line += f"  Bill: {settings.business.currency_symbol}{booking.amount:g}"
        self.say(line)

    def _list(self, bookings: list[Booking]) -> None:
        if not bookings:
            self.say("No bookings.")
        for booking in bookings:
            self._show(booking)
        self.system_log(f"Total: {len(bookings)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline booking store console")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
