"""
Generic datastore interface consumed by the scheduling core.

The hosted backend exposes table-level query/insert/update/delete plus a
realtime change feed; this module pins that contract down so the booking
workflow can run against any implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

Row = dict[str, Any]


class BackendError(Exception):
    """Raised when a datastore call fails."""


class RowNotFoundError(BackendError):
    """Raised when an update or delete targets a missing row."""


class ConstraintViolationError(BackendError):
    """Raised when a write would break a table constraint."""


class FilterOp(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True)
class Filter:
    """Single column predicate applied by ``select``."""
    column: str
    op: FilterOp
    value: Any

    def matches(self, row: Row) -> bool:
        actual = row.get(self.column)
        if self.op == FilterOp.EQ:
            return actual == self.value
        if self.op == FilterOp.NEQ:
            return actual != self.value
        if actual is None:
            return False
        if self.op == FilterOp.GTE:
            return actual >= self.value
        return actual <= self.value


def eq(column: str, value: Any) -> Filter:
    return Filter(column, FilterOp.EQ, value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, FilterOp.NEQ, value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, FilterOp.GTE, value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, FilterOp.LTE, value)


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """Realtime notification of a committed row change."""
    table: str
    kind: ChangeKind
    row: Row
    old_row: Optional[Row] = None


ChangeCallback = Callable[[ChangeEvent], None]


class Backend(ABC):
    """Table-oriented async datastore with a realtime change feed."""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[list[Filter]] = None,
        order_by: Optional[list[str]] = None,
        limit: Optional[int] = None,
    ) -> list[Row]:
        """Return copies of all rows matching every filter."""

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row (assigning ``id`` if absent) and return the stored copy."""

    @abstractmethod
    async def insert_many(self, table: str, rows: list[Row]) -> list[Row]:
        """Insert several rows as one call; all or nothing."""

    @abstractmethod
    async def update(self, table: str, row_id: str, changes: Row) -> Row:
        """Apply ``changes`` to the row with ``row_id`` and return it."""

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> Row:
        """Delete the row with ``row_id`` and return what was removed."""

    @abstractmethod
    def subscribe(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes it."""
