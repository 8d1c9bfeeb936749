# File: clientgen/enums.py
"""Enum emitter: a closed value set plus the literal union derived from it."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import List, Tuple

from clientgen.models import EnumDefinition
from clientgen.typeexpr import LiteralType, TypeExpr, union
from clientgen.utils import indent

logger: logging.Logger = logging.getLogger("clientgen.enums")


@dataclass(frozen=True, slots=True)
class EnumDeclaration:
    name: str
    values: Tuple[str, ...]

    @classmethod
    def from_definition(cls, definition: EnumDefinition) -> "EnumDeclaration":
        return cls(definition.name, tuple(definition.values))

    @property
    def value_set(self) -> Tuple[Tuple[str, str], ...]:
        """Ordered ``(member, value)`` pairs; members are their own values."""
        return tuple((v, v) for v in self.values)

    @property
    def union(self) -> TypeExpr:
        """Union of the value set's members, never listed by hand."""
        return union(*(LiteralType(value) for _, value in self.value_set))

    def _object_body(self) -> str:
        entries: str = ",\n".join(
            f"{member if member.isidentifier() else json.dumps(member)}: {json.dumps(value)}"
            for member, value in self.value_set
        )
        return "{\n" + indent(entries) + "\n}"

    def to_ts(self) -> str:
        # The type is computed from the const, so the two cannot drift apart.
        return (
            f"export declare const {self.name}: {self._object_body()};\n\n"
            f"export declare type {self.name} = "
            f"(typeof {self.name})[keyof typeof {self.name}]\n"
        )

    def to_js(self) -> str:
        return f"exports.{self.name} = makeEnum({self._object_body()});"


__all__: List[str] = ["EnumDeclaration"]
