"""services.stores

Collaborator interfaces the recipe-modification service depends on, plus
in-memory implementations for tests and local runs.

The real application backs both with its relational store; this package only
needs the two narrow protocols below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from recipe_bridge.core.types import PreferencesRecord

if TYPE_CHECKING:
    from collections.abc import Mapping

MODIFICATION_ERRORS_TABLE = 'recipe_modification_errors'


@runtime_checkable
class PreferencesRepository(Protocol):
    async def get_user_preferences(self, user_id: str) -> PreferencesRecord | None:
        """Return the user's preferences, or None when none are stored."""


@runtime_checkable
class AuditLog(Protocol):
    async def insert(self, table: str, row: Mapping[str, Any]) -> None:
        """Append *row* to *table*."""


class InMemoryPreferencesRepository:
    """Preferences keyed by user id."""

    def __init__(self, records: Mapping[str, PreferencesRecord | Mapping[str, Any]] | None = None) -> None:
        self._records: dict[str, PreferencesRecord] = {}
        for user_id, record in (records or {}).items():
            self.save(user_id, record)

    def save(self, user_id: str, record: PreferencesRecord | Mapping[str, Any]) -> PreferencesRecord:
        if not isinstance(record, PreferencesRecord):
            record = PreferencesRecord.from_row({**record, 'user_id': user_id})
        self._records[user_id] = record
        return record

    async def get_user_preferences(self, user_id: str) -> PreferencesRecord | None:
        return self._records.get(user_id)


class InMemoryAuditLog:
    """Append-only list of rows per table."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}

    async def insert(self, table: str, row: Mapping[str, Any]) -> None:
        self.tables.setdefault(table, []).append(dict(row))

    def rows(self, table: str = MODIFICATION_ERRORS_TABLE) -> list[dict[str, Any]]:
        return list(self.tables.get(table, []))
