"""
Encoded query construction for the ServiceNow Table API.

Filters are kept as ``(field, operator, value)`` clauses and rendered into
the escaped ``sysparm_query`` grammar only when a request is built:

    >>> str(TableQueryFilter.where("email", "abel.tuter@example.com"))
    'email%3Dabel.tuter%40example.com'
    >>> encode_query(TableQueryFilter.where("number", "INC0010165"), limit=1)
    'sysparm_query=number%3DINC0010165&sysparm_limit=1'
"""
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote

EQUALS = "="
LIKE = "LIKE"
AND = "^"

# Operator literals as they appear in the rendered filter
_OPERATOR_TOKENS = {
    EQUALS: "%3D",
    LIKE: LIKE,
}


@dataclass(frozen=True)
class Clause:
    """A single ``field<operator>value`` condition."""

    field: str
    operator: str
    value: str

    def render(self) -> str:
        try:
            token = _OPERATOR_TOKENS[self.operator]
        except KeyError:
            raise ValueError(f"Unsupported query operator: {self.operator!r}") from None
        return f"{self.field}{token}{quote(self.value, safe='')}"


@dataclass(frozen=True)
class TableQueryFilter:
    """Clauses joined with AND, rendered by ``str()``."""

    clauses: Tuple[Clause, ...]

    @classmethod
    def where(cls, field: str, value: str, operator: str = EQUALS) -> "TableQueryFilter":
        return cls((Clause(field, operator, value),))

    def and_where(self, field: str, value: str, operator: str = EQUALS) -> "TableQueryFilter":
        return TableQueryFilter(self.clauses + (Clause(field, operator, value),))

    def __str__(self) -> str:
        return AND.join(clause.render() for clause in self.clauses)


def encode_query(query_filter: TableQueryFilter, limit: Optional[int] = None) -> str:
    """
    Build the query string for a table GET.

    Args:
        query_filter: Resolved filter
        limit: Optional maximum number of records

    Returns:
        ``sysparm_query=<filter>`` with ``&sysparm_limit=<limit>`` when a
        limit is given
    """
    if not query_filter.clauses:
        raise ValueError("A table query needs at least one clause")
    query = f"sysparm_query={query_filter}"
    if limit is not None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"sysparm_limit must be a positive integer, got {limit!r}")
        query += f"&sysparm_limit={limit}"
    return query
