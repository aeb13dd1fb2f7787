"""
OData ``$filter`` predicate builder for the ShipStation data API.

Predicates are built from a field name, an operator and a typed literal, and
literals are rendered by type, so hub-supplied values are never interpolated
into the filter text unescaped.

    >>> str(Predicate("OrderNumber", "eq", "R123'4"))
    "OrderNumber eq 'R123''4'"
    >>> str(Predicate("ModifyDate", "ge", datetime(2023, 1, 1)) & Predicate("ShipDate", "ne", None))
    "ModifyDate ge datetime'2023-01-01T00:00:00' and ShipDate ne null"
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Union

OPERATORS = frozenset({"eq", "ne", "ge", "gt", "le", "lt"})

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(/[A-Za-z_][A-Za-z0-9_]*)*$")


def render_literal(value: Any) -> str:
    """
    Render a Python value as an OData v2 literal.

    Raises:
        TypeError: If the value has no OData literal form
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return f"datetime'{value.isoformat(timespec='seconds')}'"
    if isinstance(value, date):
        return f"datetime'{value.isoformat()}T00:00:00'"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    raise TypeError(f"Unsupported OData literal type: {type(value).__name__}")


@dataclass(frozen=True)
class Predicate:
    """A single ``<field> <op> <literal>`` comparison."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if not _FIELD_NAME.match(self.field):
            raise ValueError(f"Invalid OData field name: {self.field!r}")
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported OData operator: {self.op!r}")
        # Fail at construction time rather than when the request is built
        render_literal(self.value)

    def render(self) -> str:
        return f"{self.field} {self.op} {render_literal(self.value)}"

    def __and__(self, other: "Filter") -> "AllOf":
        return AllOf((self,)) & other

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class AllOf:
    """Conjunction of predicates joined with ``and``."""

    predicates: tuple[Predicate, ...]

    def render(self) -> str:
        return " and ".join(predicate.render() for predicate in self.predicates)

    def __and__(self, other: "Filter") -> "AllOf":
        if isinstance(other, AllOf):
            return AllOf(self.predicates + other.predicates)
        return AllOf(self.predicates + (other,))

    def __str__(self) -> str:
        return self.render()


Filter = Union[Predicate, AllOf]


def field_eq(field: str, value: Any) -> Predicate:
    return Predicate(field, "eq", value)
