# File: clientgen/projection.py
"""
clientgen - Projection Algebra
===============================
Computes what a ``select`` / ``include`` selector makes of an entity.

Two renditions of the same rules live here:

``PayloadDeclaration``
    The named, recursive ``<Entity>GetPayload<S>`` conditional type.
    Relations refer to the target's payload type by name, so cyclic
    relation graphs produce forward references instead of unrolling.

``resolve_payload``
    Evaluates the rules on a concrete Python selector and returns the
    resulting ``ObjectType`` (or ``NEVER``).  Used by tests and by tooling
    that wants to know a query's result shape without a type checker.

Selector rules, in order:

    1. ``True``                     → the plain value type.
    2. ``None`` (undefined)         → never.
    3. both ``select`` and ``include`` → never (rejected).
    4. ``include``                  → value type, with every truthy
                                      relation key overridden by its
                                      recursive payload.
    5. ``select``                   → only the truthy keys: scalars pass
                                      through, relations recurse, unknown
                                      keys become never.
    6. anything else                → the plain value type.

List relations wrap the child payload in a sequence; optional relations
add ``| null``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from clientgen.fields import value_type
from clientgen.models import Entity, OutputType
from clientgen.naming import (
    ModelAction,
    Projection,
    get_field_arg_name,
    get_include_name,
    get_model_arg_name,
    get_payload_name,
    get_select_name,
)
from clientgen.schema_index import SchemaIndex
from clientgen.typeexpr import (
    NEVER,
    GenericType,
    ListType,
    Member,
    ObjectType,
    TypeExpr,
    TypeRef,
    nullable,
    union,
)
from clientgen.utils import indent
from clientgen.validators import SelectorConflictError

logger: logging.Logger = logging.getLogger("clientgen.projection")

_BOOLEAN = TypeRef("boolean")


# ---------------------------------------------------------------------------
# Relation branches
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RelationBranch:
    """One relation field of an output type, as the payload sees it."""

    name: str
    target: str
    is_list: bool
    is_required: bool

    def wrap(self, inner: TypeExpr) -> TypeExpr:
        if self.is_list:
            return ListType(inner)
        if not self.is_required:
            return nullable(inner)
        return inner

    def payload_ref(self, projection: Projection) -> TypeExpr:
        """``Target GetPayload<S['<projection>'][P]>``, wrapped for multiplicity."""
        selector = TypeRef(f"S['{projection.value}'][P]")
        return self.wrap(GenericType(get_payload_name(self.target), (selector,)))


def relation_branches(output_type: OutputType) -> Tuple[RelationBranch, ...]:
    return tuple(
        RelationBranch(
            name=f.name,
            target=f.output_type.type,
            is_list=f.output_type.is_list,
            is_required=f.output_type.is_required,
        )
        for f in output_type.relation_fields
    )


# ---------------------------------------------------------------------------
# Select / Include shapes
# ---------------------------------------------------------------------------


def select_shape(output_type: OutputType) -> ObjectType:
    """``<Entity>Select``: every output field, relations also accept args."""
    members: List[Member] = []
    for f in output_type.fields:
        field_type: TypeExpr = _BOOLEAN
        if f.is_relation:
            field_type = union(_BOOLEAN, TypeRef(get_field_arg_name(f)))
        members.append(Member(f.name, field_type, optional=True))
    return ObjectType(tuple(members), name=output_type.name)


def include_shape(output_type: OutputType) -> Optional[ObjectType]:
    """``<Entity>Include``: relation fields only; ``None`` without relations."""
    relations = output_type.relation_fields
    if not relations:
        return None
    return ObjectType(
        tuple(
            Member(f.name, union(_BOOLEAN, TypeRef(get_field_arg_name(f))), optional=True)
            for f in relations
        ),
        name=output_type.name,
    )


def render_select(output_type: OutputType) -> str:
    return f"export type {get_select_name(output_type.name)} = {select_shape(output_type).render()}\n"


def render_include(output_type: OutputType) -> str:
    shape: Optional[ObjectType] = include_shape(output_type)
    if shape is None:
        return ""
    return f"export type {get_include_name(output_type.name)} = {shape.render()}\n"


# ---------------------------------------------------------------------------
# Payload declaration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PayloadDeclaration:
    """The recursive payload type of one entity, before rendering."""

    entity: str
    relations: Tuple[RelationBranch, ...] = ()

    @classmethod
    def from_output_type(cls, output_type: OutputType) -> "PayloadDeclaration":
        return cls(output_type.name, relation_branches(output_type))

    @property
    def name(self) -> str:
        return get_payload_name(self.entity)

    @property
    def args_name(self) -> str:
        return get_model_arg_name(self.entity)

    @property
    def find_many_args_name(self) -> str:
        return get_model_arg_name(self.entity, ModelAction.FIND_MANY)

    def get_relation(self, name: str) -> Optional[RelationBranch]:
        for branch in self.relations:
            if branch.name == name:
                return branch
        return None

    def _relation_chain(self, projection: Projection) -> List[str]:
        lines: List[str] = []
        for branch in self.relations:
            lines.append(f": P extends '{branch.name}'")
            lines.append(f"? {branch.payload_ref(projection).render()}")
        lines.append(": never")
        return lines

    def render_mapping(self, projection: Projection) -> str:
        """
        The mapped type applied to ``S['select']`` or ``S['include']``.

        Empty for ``include`` on an entity without relations.
        """
        if projection == Projection.INCLUDE and not self.relations:
            return ""
        key: str = projection.value
        if projection == Projection.SELECT:
            head: List[str] = [
                f"[P in TrueKeys<S['{key}']>]: P extends keyof {self.entity}",
                f"  ? {self.entity}[P]",
            ]
            chain: List[str] = ["  " + line for line in self._relation_chain(projection)]
        else:
            first, *rest = self._relation_chain(projection)
            head = [f"[P in TrueKeys<S['{key}']>]: {first[2:]}"]
            chain = ["  " + line for line in rest]
        return "{\n" + indent("\n".join(head + chain)) + "\n}"

    def to_ts(self) -> str:
        entity: str = self.entity
        include: str = self.render_mapping(Projection.INCLUDE)
        select: str = self.render_mapping(Projection.SELECT)
        include_type: str = f"{entity} & {indent(include, 6).lstrip()}" if include else entity
        return (
            f"export type {self.name}<\n"
            f"  S extends boolean | null | undefined | {self.args_name},\n"
            f"  U = keyof S\n"
            f"> = S extends true\n"
            f"  ? {entity}\n"
            f"  : S extends undefined\n"
            f"  ? never\n"
            f"  : S extends {self.args_name} | {self.find_many_args_name}\n"
            f"  ? 'select' extends U\n"
            f"    ? 'include' extends U\n"
            f"      ? never\n"
            f"      : {indent(select, 6).lstrip()}\n"
            f"    : 'include' extends U\n"
            f"    ? {include_type}\n"
            f"    : {entity}\n"
            f"  : {entity}\n"
        )


# ---------------------------------------------------------------------------
# Selector evaluation
# ---------------------------------------------------------------------------


def true_keys(selection: Any) -> List[str]:
    """Keys whose value is neither ``False`` nor ``None``, in selector order."""
    if not isinstance(selection, Mapping):
        return []
    return [k for k, v in selection.items() if v is not False and v is not None]


def resolve_payload(index: SchemaIndex, entity_name: str, selector: Any) -> TypeExpr:
    """
    Concrete result shape of *selector* applied to *entity_name*.

    Raises ``SelectorConflictError`` when a selector (at any depth) carries
    both ``select`` and ``include``.
    """
    entity: Entity = index.entity(entity_name)
    plain: ObjectType = value_type(entity.fields, entity.name)

    if selector is True:
        return plain
    if selector is None:
        return NEVER
    if not isinstance(selector, Mapping):
        return plain

    has_select: bool = Projection.SELECT.value in selector
    has_include: bool = Projection.INCLUDE.value in selector
    if has_select and has_include:
        raise SelectorConflictError(
            f"Selector on '{entity_name}' has both 'select' and 'include'; choose one."
        )
    if not has_select and not has_include:
        return plain

    declaration = PayloadDeclaration.from_output_type(index.output_type(entity_name))

    if has_include:
        selection = selector[Projection.INCLUDE.value]
        members: Dict[str, Member] = {m.name: m for m in plain.members}
        for key in true_keys(selection):
            branch: Optional[RelationBranch] = declaration.get_relation(key)
            if branch is None:
                members[key] = Member(key, NEVER)
                continue
            child: TypeExpr = resolve_payload(index, branch.target, selection[key])
            members[key] = Member(key, branch.wrap(child))
        return ObjectType(tuple(members.values()), name=entity.name)

    selection = selector[Projection.SELECT.value]
    selected: List[Member] = []
    for key in true_keys(selection):
        scalar: Optional[TypeExpr] = plain.get(key)
        if scalar is not None:
            selected.append(Member(key, scalar))
            continue
        branch = declaration.get_relation(key)
        if branch is None:
            logger.debug("Unknown select key '%s' on '%s' resolves to never.", key, entity_name)
            selected.append(Member(key, NEVER))
            continue
        child = resolve_payload(index, branch.target, selection[key])
        selected.append(Member(key, branch.wrap(child)))
    return ObjectType(tuple(selected), name=entity.name)


__all__: List[str] = [
    "RelationBranch",
    "relation_branches",
    "select_shape",
    "include_shape",
    "render_select",
    "render_include",
    "PayloadDeclaration",
    "true_keys",
    "resolve_payload",
]
