"""
In-memory backend for local runs, the console demo, and tests.

Rows are stored as plain dicts keyed by id, exactly as the hosted datastore
returns them. The ``appointments`` table carries an exclusion constraint:
two non-cancelled appointments on the same date may not overlap. This is
the datastore-level safety net behind the in-process conflict check.
"""

import copy
import logging
import uuid
from collections import defaultdict
from typing import Callable, Optional

from salon_scheduler.backend.base import (
    Backend,
    ChangeCallback,
    ChangeEvent,
    ChangeKind,
    ConstraintViolationError,
    Filter,
    Row,
    RowNotFoundError,
)
from salon_scheduler.scheduling.conflicts import intervals_overlap
from salon_scheduler.scheduling.timeutils import time_to_minutes

logger = logging.getLogger(__name__)

APPOINTMENTS_TABLE = "appointments"


def _sort_key(value):
    # NULLs last
    return (value is None, "" if value is None else value)


class InMemoryBackend(Backend):
    """Dict-backed implementation of the Backend contract."""

    def __init__(self, enforce_appointment_exclusion: bool = True) -> None:
        self._tables: dict[str, dict[str, Row]] = defaultdict(dict)
        self._listeners: dict[str, list[ChangeCallback]] = defaultdict(list)
        self.enforce_appointment_exclusion = enforce_appointment_exclusion

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    async def select(
        self,
        table: str,
        filters: Optional[list[Filter]] = None,
        order_by: Optional[list[str]] = None,
        limit: Optional[int] = None,
    ) -> list[Row]:
        rows = [
            copy.deepcopy(row)
            for row in self._tables[table].values()
            if all(f.matches(row) for f in filters or [])
        ]
        for column in reversed(order_by or []):
            rows.sort(key=lambda r: _sort_key(r.get(column)))
        if limit is not None:
            rows = rows[:limit]
        return rows

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    async def insert(self, table: str, row: Row) -> Row:
        stored = self._prepare_insert(table, row, pending=[])
        self._tables[table][stored["id"]] = stored
        self._emit(ChangeEvent(table, ChangeKind.INSERT, copy.deepcopy(stored)))
        return copy.deepcopy(stored)

    async def insert_many(self, table: str, rows: list[Row]) -> list[Row]:
        pending: list[Row] = []
        for row in rows:
            pending.append(self._prepare_insert(table, row, pending=pending))
        for stored in pending:
            self._tables[table][stored["id"]] = stored
            self._emit(ChangeEvent(table, ChangeKind.INSERT, copy.deepcopy(stored)))
        return [copy.deepcopy(r) for r in pending]

    async def update(self, table: str, row_id: str, changes: Row) -> Row:
        current = self._tables[table].get(row_id)
        if current is None:
            raise RowNotFoundError(f"{table}: no row with id {row_id}")
        updated = {**current, **copy.deepcopy(changes), "id": row_id}
        if table == APPOINTMENTS_TABLE:
            self._check_appointment_exclusion(updated, others=self._tables[table].values())
        self._tables[table][row_id] = updated
        self._emit(
            ChangeEvent(table, ChangeKind.UPDATE, copy.deepcopy(updated), copy.deepcopy(current))
        )
        return copy.deepcopy(updated)

    async def delete(self, table: str, row_id: str) -> Row:
        removed = self._tables[table].pop(row_id, None)
        if removed is None:
            raise RowNotFoundError(f"{table}: no row with id {row_id}")
        self._emit(ChangeEvent(table, ChangeKind.DELETE, copy.deepcopy(removed)))
        return copy.deepcopy(removed)

    def seed(self, table: str, rows: list[Row]) -> list[Row]:
        """Load rows synchronously without constraints or change events."""
        stored = []
        for row in rows:
            item = copy.deepcopy(row)
            item.setdefault("id", uuid.uuid4().hex)
            self._tables[table][item["id"]] = item
            stored.append(copy.deepcopy(item))
        return stored

    # ------------------------------------------------------------------ #
    # Realtime
    # ------------------------------------------------------------------ #

    def subscribe(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        self._listeners[table].append(callback)
        logger.debug("Listener subscribed to %s", table)

        def unsubscribe() -> None:
            if callback in self._listeners[table]:
                self._listeners[table].remove(callback)

        return unsubscribe

    def _emit(self, event: ChangeEvent) -> None:
        for callback in list(self._listeners[event.table]):
            try:
                callback(event)
            except Exception:
                logger.exception("Change listener failed for %s %s", event.table, event.kind.value)

    # ------------------------------------------------------------------ #
    # Constraints
    # ------------------------------------------------------------------ #

    def _prepare_insert(self, table: str, row: Row, pending: list[Row]) -> Row:
        stored = copy.deepcopy(row)
        stored.setdefault("id", uuid.uuid4().hex)
        if stored["id"] in self._tables[table] or any(p["id"] == stored["id"] for p in pending):
            raise ConstraintViolationError(f"{table}: duplicate id {stored['id']}")
        if table == APPOINTMENTS_TABLE:
            others = list(self._tables[table].values()) + pending
            self._check_appointment_exclusion(stored, others=others)
        return stored

    def _check_appointment_exclusion(self, row: Row, others) -> None:
        if not self.enforce_appointment_exclusion or row.get("status") == "cancelled":
            return
        start = time_to_minutes(row["start_time"])
        end = time_to_minutes(row["end_time"])
        for other in others:
            if other["id"] == row["id"] or other.get("status") == "cancelled":
                continue
            if str(other["appointment_date"]) != str(row["appointment_date"]):
                continue
            if intervals_overlap(
                start, end, time_to_minutes(other["start_time"]), time_to_minutes(other["end_time"])
            ):
                raise ConstraintViolationError(
                    f"appointments: {row['appointment_date']} {row['start_time']}-{row['end_time']} "
                    f"overlaps appointment {other['id']}"
                )
