# File: clientgen/typeexpr.py
"""
clientgen - Type Expressions
=============================
Small immutable algebra of TypeScript type expressions.

Emitters build these structures first and render them to text last, so the
field wrapping rules and the projection algebra can be asserted on
structure instead of on rendered documents.

Rendering rules:
    - ``ListType`` of a plain name renders ``T[]``; of anything else
      ``Array<T>``.
    - Unions flatten nested unions and drop exact duplicates, keeping the
      first occurrence.
    - ``ObjectType`` renders one ``name: T`` member per line.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from clientgen.utils import indent, wrap_comment

logger: logging.Logger = logging.getLogger("clientgen.typeexpr")


@dataclass(frozen=True, slots=True)
class TypeRef:
    """A named type: a scalar such as ``string`` or a declared identifier."""

    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class LiteralType:
    """A string literal type."""

    value: str

    def render(self) -> str:
        return json.dumps(self.value)


@dataclass(frozen=True, slots=True)
class NullType:
    def render(self) -> str:
        return "null"


@dataclass(frozen=True, slots=True)
class NeverType:
    """The unreachable type; what an invalid selector resolves to."""

    def render(self) -> str:
        return "never"


@dataclass(frozen=True, slots=True)
class ListType:
    """Sequence-of-T."""

    item: "TypeExpr"

    def render(self) -> str:
        if isinstance(self.item, TypeRef):
            return f"{self.item.render()}[]"
        return f"Array<{self.item.render()}>"


@dataclass(frozen=True, slots=True)
class GenericType:
    """Application of a generic, e.g. ``Enumerable<T>`` or ``UserGetPayload<S>``."""

    name: str
    args: Tuple["TypeExpr", ...] = ()

    def render(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(a.render() for a in self.args)}>"


@dataclass(frozen=True, slots=True)
class UnionType:
    members: Tuple["TypeExpr", ...]

    def render(self) -> str:
        return " | ".join(m.render() for m in self.members)


@dataclass(frozen=True, slots=True)
class Member:
    """One ``name?: T`` entry of an object type."""

    name: str
    type: "TypeExpr"
    optional: bool = False
    comment: Optional[str] = None

    def render(self) -> str:
        doc: str = wrap_comment(self.comment) + "\n" if self.comment else ""
        mark: str = "?" if self.optional else ""
        return f"{doc}{self.name}{mark}: {self.type.render()}"


@dataclass(frozen=True, slots=True)
class ObjectType:
    """
    An object shape.

    ``name`` is informational: it records which entity the shape was
    projected from and never changes how the members render.
    """

    members: Tuple[Member, ...] = ()
    name: Optional[str] = field(default=None, compare=False)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self.members)

    def get(self, key: str) -> Optional["TypeExpr"]:
        for m in self.members:
            if m.name == key:
                return m.type
        return None

    def __getitem__(self, key: str) -> "TypeExpr":
        found: Optional[TypeExpr] = self.get(key)
        if found is None:
            raise KeyError(key)
        return found

    def __iter__(self) -> Iterator[Member]:
        return iter(self.members)

    def as_dict(self) -> Dict[str, str]:
        """Member name → rendered type; handy for assertions and debugging."""
        return {m.name: m.type.render() for m in self.members}

    def render(self) -> str:
        if not self.members:
            return "{}"
        body: str = "\n".join(m.render() for m in self.members)
        return "{\n" + indent(body) + "\n}"


TypeExpr = Union[
    TypeRef,
    LiteralType,
    NullType,
    NeverType,
    ListType,
    GenericType,
    UnionType,
    ObjectType,
]

NULL: NullType = NullType()
NEVER: NeverType = NeverType()


def union(*members: TypeExpr) -> TypeExpr:
    """
    Build a flattened union.

    A single surviving member is returned as-is rather than wrapped.
    """
    flat: List[TypeExpr] = []
    for member in members:
        parts = member.members if isinstance(member, UnionType) else (member,)
        for part in parts:
            if part not in flat:
                flat.append(part)
    if len(flat) == 1:
        return flat[0]
    return UnionType(tuple(flat))


def nullable(inner: TypeExpr) -> TypeExpr:
    """``T | null``."""
    return union(inner, NULL)


def is_nullable(expr: TypeExpr) -> bool:
    return isinstance(expr, UnionType) and NULL in expr.members


__all__: List[str] = [
    "TypeRef",
    "LiteralType",
    "NullType",
    "NeverType",
    "ListType",
    "GenericType",
    "UnionType",
    "Member",
    "ObjectType",
    "TypeExpr",
    "NULL",
    "NEVER",
    "union",
    "nullable",
    "is_nullable",
]
