"""
Parameterized SQL construction.

Builds the dynamic parts of Jobly's statements:
- SET clauses for partial updates from a sparse set of field changes.
- SELECT statements with optional, AND-joined search predicates.

Values are only ever bound through SqlParams; statement text contains
placeholders and trusted column names, nothing else.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidArgumentError

NUMERIC_DOLLAR = "numeric_dollar"
NAMED = "named"
PARAMSTYLES = (NUMERIC_DOLLAR, NAMED)

TEXT_MATCH_OPERATORS = ("ILIKE", "LIKE")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FieldUpdates = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]
BindParams = Union[List[Any], Dict[str, Any]]


class SqlParams:
    """
    Ordered collection of bound values.

    Every value gets a placeholder numbered by its 1-based position, so the
    placeholders in a statement always line up with the value list.
    """

    def __init__(self, paramstyle: str = NUMERIC_DOLLAR):
        if paramstyle not in PARAMSTYLES:
            raise ValueError(f"Unsupported paramstyle: {paramstyle}")
        self.paramstyle = paramstyle
        self._values: List[Any] = []

    def bind(self, value: Any) -> str:
        """Append a value and return the placeholder that refers to it."""
        self._values.append(value)
        return self.placeholder(len(self._values))

    def placeholder(self, position: int) -> str:
        if self.paramstyle == NAMED:
            return f":p{position}"
        return f"${position}"

    @property
    def values(self) -> List[Any]:
        return list(self._values)

    @property
    def bind_params(self) -> BindParams:
        """Values shaped for the driver: a list, or a dict for named style."""
        if self.paramstyle == NAMED:
            return {f"p{i}": v for i, v in enumerate(self._values, start=1)}
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)


@dataclass(frozen=True)
class PartialUpdate:
    """SET clause body and the values bound to its placeholders."""

    set_cols: str
    values: List[Any]


def _as_field_list(updates: FieldUpdates) -> List[Tuple[str, Any]]:
    if isinstance(updates, Mapping):
        return list(updates.items())
    fields = []
    for item in updates:
        try:
            name, value = item
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"Expected (field, value) pair, got {item!r}") from None
        fields.append((name, value))
    return fields


def sql_for_partial_update(
    updates: FieldUpdates,
    aliases: Optional[Mapping[str, str]] = None,
    params: Optional[SqlParams] = None,
) -> PartialUpdate:
    """
    Build the SET clause for a partial update.

    Args:
        updates: Field changes, as a mapping or ordered (field, value) pairs.
            Placeholders are numbered in this order.
        aliases: Field name -> column name for fields stored under another
            name, e.g. {"numEmployees": "num_employees"}.
        params: Accumulator to bind into. Pass one to keep numbering going
            for placeholders the caller appends afterwards (the WHERE key).

    Returns:
        PartialUpdate, e.g. set_cols 'name = $1, num_employees = $2'.

    Raises:
        InvalidArgumentError: No fields given, a field given twice, or a
            column name that is not a plain identifier.
    """
    fields = _as_field_list(updates)
    if not fields:
        raise InvalidArgumentError("No data")

    aliases = aliases or {}
    columns = []
    for name, _ in fields:
        column = aliases.get(name, name)
        if not isinstance(column, str) or not _IDENTIFIER_RE.match(column):
            raise InvalidArgumentError(f"Invalid column name: {column!r}")
        if column in columns:
            raise InvalidArgumentError(f"Column updated more than once: {column}")
        columns.append(column)

    params = params if params is not None else SqlParams()
    start = len(params)
    set_cols = ", ".join(
        f"{column} = {params.bind(value)}" for column, (_, value) in zip(columns, fields)
    )
    return PartialUpdate(set_cols=set_cols, values=params.values[start:])


# Predicate kinds
CONTAINS = "contains"
MINIMUM = "min"
MAXIMUM = "max"
FLAG = "flag"


@dataclass(frozen=True)
class Predicate:
    """
    One optional search criterion.

    `field` is the attribute read from the criteria object; `column` the
    column it filters. FLAG predicates emit `sql` verbatim when the
    criterion is True and bind nothing.
    """

    field: str
    column: str
    kind: str
    sql: str = ""

    @classmethod
    def contains(cls, field: str, column: str) -> "Predicate":
        return cls(field, column, CONTAINS)

    @classmethod
    def minimum(cls, field: str, column: str) -> "Predicate":
        return cls(field, column, MINIMUM)

    @classmethod
    def maximum(cls, field: str, column: str) -> "Predicate":
        return cls(field, column, MAXIMUM)

    @classmethod
    def flag(cls, field: str, column: str, sql: str) -> "Predicate":
        return cls(field, column, FLAG, sql)

    def render(self, value: Any, params: SqlParams, text_match_op: str) -> Optional[str]:
        """Return the SQL for a present value, or None if it adds nothing."""
        if self.kind == FLAG:
            return self.sql if value is True else None
        if self.kind == CONTAINS:
            return f"{self.column} {text_match_op} {params.bind(f'%{value}%')}"
        if self.kind == MINIMUM:
            return f"{self.column} >= {params.bind(value)}"
        if self.kind == MAXIMUM:
            return f"{self.column} <= {params.bind(value)}"
        raise ValueError(f"Unknown predicate kind: {self.kind}")


@dataclass(frozen=True)
class ComposedQuery:
    """Statement text with the values for its placeholders."""

    statement: str
    values: List[Any]
    bind_params: BindParams


class FilterComposer:
    """
    Appends search predicates to a base SELECT for one entity.

    Predicates are always visited in the order given here, so the same
    criteria always produce the same statement.
    """

    def __init__(self, predicates: Iterable[Predicate], order_by: str):
        self.predicates = tuple(predicates)
        self.order_by = order_by

    def compose(
        self,
        base_select: str,
        criteria: Any,
        paramstyle: str = NUMERIC_DOLLAR,
        text_match_op: str = "ILIKE",
    ) -> ComposedQuery:
        """
        Build the filtered, ordered statement for `criteria`.

        Criteria attributes that are None are absent and add no predicate.

        Raises:
            BadRequestError: From criteria.validate(), before anything is bound.
        """
        if text_match_op not in TEXT_MATCH_OPERATORS:
            raise ValueError(f"Unsupported text match operator: {text_match_op}")
        criteria.validate()

        params = SqlParams(paramstyle)
        where = []
        for predicate in self.predicates:
            value = getattr(criteria, predicate.field, None)
            if value is None:
                continue
            clause = predicate.render(value, params, text_match_op)
            if clause:
                where.append(clause)

        statement = base_select
        if where:
            statement += " WHERE " + " AND ".join(where)
        statement += f" ORDER BY {self.order_by}"

        return ComposedQuery(
            statement=statement,
            values=params.values,
            bind_params=params.bind_params,
        )
