"""Generic data access interface over the fraud-case backend tables"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Tuple

# Filter operators understood by every backend
EQ = "eq"
IN = "in"
GTE = "gte"
NOT_NULL = "not_null"


@dataclass(frozen=True)
class Query:
    """Immutable select description: table, columns and AND-ed filters"""

    table: str
    columns: Tuple[str, ...] = ("*",)
    filters: Tuple[Tuple[str, str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def select(cls, table: str, *columns: str) -> "Query":
        return cls(table=table, columns=tuple(columns) or ("*",))

    def _with(self, op: str, column: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + ((op, column, value),))

    def eq(self, column: str, value: Any) -> "Query":
        return self._with(EQ, column, value)

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        return self._with(IN, column, tuple(values))

    def gte(self, column: str, value: Any) -> "Query":
        return self._with(GTE, column, value)

    def not_null(self, column: str) -> "Query":
        return self._with(NOT_NULL, column, None)

    @property
    def matches_nothing(self) -> bool:
        """True when an empty IN filter makes the result necessarily empty"""
        return any(op == IN and not value for op, _, value in self.filters)


class DataAccess(ABC):
    """
    Backend collaborator used by every service.

    Implementations raise DataAccessError subclasses only; callers never see
    transport or driver exceptions.
    """

    @abstractmethod
    async def select(self, query: Query) -> List[Dict[str, Any]]:
        """Return raw rows matching the query"""

    @abstractmethod
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored"""

    @abstractmethod
    async def delete(self, table: str, column: str, value: Any) -> int:
        """Delete rows where column == value; return how many were removed"""

    async def aclose(self) -> None:
        return None
