# File: clientgen/fields.py
"""
clientgen - Leaf Field & Input Type Emitters
=============================================
Renders single fields to ``name: Type`` members.

Output (leaf) fields:
    - scalar names go through ``SCALAR_TYPE_TABLE``; enum names pass through;
    - lists become ``T[]``;
    - a field that is neither required nor a list gains ``| null``.

Input (argument) fields:
    - every candidate shape contributes to one flattened union;
    - ``?`` when the first candidate is optional;
    - ``Enumerable<...>`` when the first candidate is a list;
    - ``| null`` only when optional, nullable and no candidate is already
      ``null``.

Input types keep the first of several same-named fields.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from clientgen.models import EntityField, FieldKind, InputType, SchemaArg
from clientgen.typeexpr import (
    NULL,
    GenericType,
    ListType,
    Member,
    ObjectType,
    TypeExpr,
    TypeRef,
    nullable,
    union,
)
from clientgen.utils import unique_by

logger: logging.Logger = logging.getLogger("clientgen.fields")

# Scalar name → target types.  Output fields use the first entry; inputs
# accept all of them.
SCALAR_TYPE_TABLE: Dict[str, Tuple[str, ...]] = {
    "String": ("string",),
    "Int": ("number",),
    "Float": ("number",),
    "Boolean": ("boolean",),
    "Long": ("number",),
    "DateTime": ("Date", "string"),
    "ID": ("string",),
    "UUID": ("string",),
    "Json": ("JsonValue",),
}


def map_scalar(type_name: str) -> Tuple[str, ...]:
    """Target types for *type_name*; unmapped names pass through unchanged."""
    return SCALAR_TYPE_TABLE.get(type_name, (type_name,))


# ---------------------------------------------------------------------------
# Leaf (output) fields
# ---------------------------------------------------------------------------


def output_field_type(field: EntityField) -> TypeExpr:
    """Type of a scalar or enum field in the entity's plain value type."""
    if field.kind == FieldKind.SCALAR:
        base: TypeExpr = TypeRef(map_scalar(field.type)[0])
    else:
        base = TypeRef(field.type)
    if field.is_list:
        return ListType(base)
    if not field.is_required:
        return nullable(base)
    return base


def output_field_member(field: EntityField) -> Member:
    return Member(field.name, output_field_type(field), comment=field.documentation)


def render_output_field(field: EntityField) -> str:
    return output_field_member(field).render()


def value_type(fields: List[EntityField], name: str) -> ObjectType:
    """The plain value type of an entity: its non-relation fields only."""
    return ObjectType(
        tuple(output_field_member(f) for f in fields if f.kind != FieldKind.OBJECT),
        name=name,
    )


# ---------------------------------------------------------------------------
# Input (argument) fields
# ---------------------------------------------------------------------------


def input_field_type(arg: SchemaArg) -> TypeExpr:
    """
    Flatten every candidate of *arg* into one type.

    Whether ``null`` is already a candidate is computed once and decides
    the optional ``| null`` suffix.
    """
    candidates: List[TypeExpr] = []
    has_null: bool = False
    for ref in arg.input_type:
        names: Tuple[str, ...] = map_scalar(ref.type) if ref.kind == FieldKind.SCALAR else (ref.type,)
        for name in names:
            if name == "null":
                has_null = True
                candidates.append(NULL)
            else:
                candidates.append(TypeRef(name))

    field_type: TypeExpr = union(*candidates)
    if arg.is_list:
        field_type = GenericType("Enumerable", (field_type,))
    if not arg.is_required and not has_null and arg.is_nullable:
        field_type = nullable(field_type)
    return field_type


def input_field_member(arg: SchemaArg) -> Member:
    return Member(
        arg.name,
        input_field_type(arg),
        optional=not arg.is_required,
        comment=arg.comment,
    )


def render_input_field(arg: SchemaArg) -> str:
    return input_field_member(arg).render()


# ---------------------------------------------------------------------------
# Input types
# ---------------------------------------------------------------------------


def dedupe_fields(fields: List[SchemaArg]) -> List[SchemaArg]:
    """Keep the first field of each name."""
    survivors: List[SchemaArg] = unique_by(fields, lambda f: f.name)
    if len(survivors) != len(fields):
        logger.debug(
            "Dropped %d duplicate input field(s).", len(fields) - len(survivors)
        )
    return survivors


def input_type_shape(input_type: InputType) -> ObjectType:
    return ObjectType(
        tuple(input_field_member(arg) for arg in dedupe_fields(input_type.fields)),
        name=input_type.name,
    )


def render_input_type(input_type: InputType) -> str:
    return f"export type {input_type.name} = {input_type_shape(input_type).render()}"


__all__: List[str] = [
    "SCALAR_TYPE_TABLE",
    "map_scalar",
    "output_field_type",
    "output_field_member",
    "render_output_field",
    "value_type",
    "input_field_type",
    "input_field_member",
    "render_input_field",
    "dedupe_fields",
    "input_type_shape",
    "render_input_type",
]
