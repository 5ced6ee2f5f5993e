"""Shared pieces of the vocabulary repositories."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import IntEnum
from typing import Any, Protocol, runtime_checkable

from linguaevo.entity import NoRowsError
from linguaevo.runtime import EMPTY_STRING

SEARCH_FILTER = (
    "(v.\"name\" LIKE '%' || $3 || '%' OR v.\"description\" LIKE '%' || $3 || '%')"
)


@runtime_checkable
class Executor(Protocol):
    """Database access used by the repositories.

    Queries use PostgreSQL-style ``$n`` placeholders.
    """

    def execute(self, query: str, *args: Any) -> int:
        """Run a statement and return the number of affected rows."""

    def fetch_one(self, query: str, *args: Any) -> Sequence[Any] | None:
        """Return the first row of a query, or None when there is none."""

    def fetch_all(self, query: str, *args: Any) -> list[Sequence[Any]]:
        """Return every row of a query."""


class SortType(IntEnum):
    CREATED = 0
    UPDATED = 1
    ABC = 2


class SortOrder(IntEnum):
    ASC = 0
    DESC = 1

    def __str__(self) -> str:
        return self.name


_SORT_COLUMNS = {
    SortType.CREATED: "v.created_at",
    SortType.UPDATED: "v.updated_at",
    SortType.ABC: "v.name",
}


def get_sorted(type_sorted: int, order: int) -> str:
    """Return an ORDER BY clause, or an empty string for an unknown sort type."""
    try:
        sort_type = SortType(type_sorted)
    except ValueError:
        return EMPTY_STRING
    return f"ORDER BY {_SORT_COLUMNS[sort_type]} {SortOrder(order)}"


def get_equal_language(field: str, lang: str) -> str:
    """Return a language filter, or nothing when any language is accepted."""
    if lang == "any":
        return EMPTY_STRING
    escaped = lang.replace("'", "''")
    return f"AND {field}='{escaped}'"


def get_dict_table(lang_code: str) -> str:
    return f"dictionary_{lang_code}" if lang_code else "dictionary"


def get_exam_table(lang_code: str) -> str:
    return f"example_{lang_code}" if lang_code else "example"


def access_ids(access_types: Iterable[int]) -> list[int]:
    """Turn access levels into plain integers for a query parameter."""
    return [int(access) for access in access_types]


class RepoBase:
    """Holds the executor that every repository part works through."""

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    def _execute(self, query: str, *args: Any) -> int:
        return self._executor.execute(query, *args)

    def _fetch_one(self, query: str, *args: Any) -> Sequence[Any]:
        row = self._executor.fetch_one(query, *args)
        if row is None:
            raise NoRowsError()
        return row

    def _fetch_all(self, query: str, *args: Any) -> list[Sequence[Any]]:
        return list(self._executor.fetch_all(query, *args))