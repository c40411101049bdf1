"""Declarative record filters.

Predicates are immutable value objects. They can be evaluated against an
in-memory record, rendered as a JSON filter document, or compiled to a
parameterised SQL fragment for asyncpg (``$1``, ``$2``, ...).
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def quote_identifier(name: str) -> str:
    """Quote a column name after validating it as a plain identifier."""
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"Invalid field name: {name!r}")
    return f'"{name}"'


class Predicate(ABC):
    """Base class for record filters."""

    @abstractmethod
    def matches(self, record: Mapping[str, Any]) -> bool:
        ...

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def to_sql(self, start_index: int = 1) -> Tuple[str, List[Any]]:
        """Compile to ``(clause, params)`` with placeholders starting at ``start_index``."""
        ...

    def __and__(self, other: "Predicate") -> "Predicate":
        return AllOf.of(self, other)

    def __or__(self, other: "Predicate") -> "Predicate":
        return AnyOf.of(self, other)

    @staticmethod
    def from_filters(filters: Optional[Union["Predicate", Mapping[str, Any]]]) -> "Predicate":
        """Normalize caller filters: None, a predicate, or a ``{field: value}`` mapping."""
        if filters is None:
            return MATCH_ALL
        if isinstance(filters, Predicate):
            return filters
        if not filters:
            return MATCH_ALL
        return AllOf.of(*(FieldEquals(field, value) for field, value in filters.items()))


@dataclass(frozen=True)
class MatchAll(Predicate):
    """No restriction."""

    def matches(self, record: Mapping[str, Any]) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {}

    def to_sql(self, start_index: int = 1) -> Tuple[str, List[Any]]:
        return "TRUE", []


@dataclass(frozen=True)
class MatchNone(Predicate):
    """Matches zero rows."""

    def matches(self, record: Mapping[str, Any]) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        # An AND over an empty OR list is unsatisfiable in Prisma-style filters
        return {"OR": []}

    def to_sql(self, start_index: int = 1) -> Tuple[str, List[Any]]:
        return "FALSE", []


MATCH_ALL = MatchAll()
MATCH_NONE = MatchNone()


@dataclass(frozen=True)
class FieldEquals(Predicate):
    """``field = value``."""

    field: str
    value: Any

    def __post_init__(self):
        quote_identifier(self.field)

    def matches(self, record: Mapping[str, Any]) -> bool:
        return self.field in record and record[self.field] == self.value

    def to_dict(self) -> Dict[str, Any]:
        return {self.field: self.value}

    def to_sql(self, start_index: int = 1) -> Tuple[str, List[Any]]:
        if self.value is None:
            return f"{quote_identifier(self.field)} IS NULL", []
        return f"{quote_identifier(self.field)} = ${start_index}", [self.value]


@dataclass(frozen=True)
class _Compound(Predicate):
    operands: Tuple[Predicate, ...] = ()

    _keyword = ""
    _joiner = ""

    def to_dict(self) -> Dict[str, Any]:
        return {self._keyword: [operand.to_dict() for operand in self.operands]}

    def to_sql(self, start_index: int = 1) -> Tuple[str, List[Any]]:
        clauses = []
        params: List[Any] = []
        for operand in self.operands:
            clause, operand_params = operand.to_sql(start_index + len(params))
            clauses.append(f"({clause})")
            params.extend(operand_params)
        return self._joiner.join(clauses), params


@dataclass(frozen=True)
class AllOf(_Compound):
    """Conjunction of predicates."""

    _keyword = "AND"
    _joiner = " AND "

    @classmethod
    def of(cls, *operands: Predicate) -> Predicate:
        flattened: List[Predicate] = []
        for operand in operands:
            if isinstance(operand, MatchNone):
                return MATCH_NONE
            if isinstance(operand, MatchAll):
                continue
            if isinstance(operand, AllOf):
                flattened.extend(operand.operands)
            else:
                flattened.append(operand)
        if not flattened:
            return MATCH_ALL
        if len(flattened) == 1:
            return flattened[0]
        return cls(tuple(flattened))

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(operand.matches(record) for operand in self.operands)


@dataclass(frozen=True)
class AnyOf(_Compound):
    """Disjunction of predicates."""

    _keyword = "OR"
    _joiner = " OR "

    @classmethod
    def of(cls, *operands: Predicate) -> Predicate:
        flattened: List[Predicate] = []
        for operand in operands:
            if isinstance(operand, MatchAll):
                return MATCH_ALL
            if isinstance(operand, MatchNone):
                continue
            if isinstance(operand, AnyOf):
                flattened.extend(operand.operands)
            else:
                flattened.append(operand)
        if not flattened:
            return MATCH_NONE
        if len(flattened) == 1:
            return flattened[0]
        return cls(tuple(flattened))

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(operand.matches(record) for operand in self.operands)
