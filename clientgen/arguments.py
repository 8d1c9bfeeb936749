# File: clientgen/arguments.py
"""
clientgen - Argument-Set Emitter
=================================
One argument type per mapped (entity, action) pair, plus the bare
``<Entity>Args`` bound.

Member order is fixed: ``select``, then ``include`` (only for entities
with relations), then the root field's declared arguments exactly as
declared.  The bulk actions return a count, so their argument types carry
the declared arguments only.

Top-level arguments receive a description from ``ARGUMENT_DESCRIPTIONS``
when the (action, argument) pair is listed there.  Descriptions are set
on copies; the schema's own ``SchemaArg`` objects are never touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from clientgen.fields import input_field_member
from clientgen.models import Entity, FieldKind, InputTypeRef, SchemaArg, SchemaField
from clientgen.naming import (
    BULK_ACTIONS,
    ModelAction,
    get_include_name,
    get_model_arg_name,
    get_select_name,
)
from clientgen.schema_index import SchemaIndex
from clientgen.typeexpr import ObjectType
from clientgen.utils import to_plural, wrap_comment
from clientgen.validators import SchemaInconsistencyError

logger: logging.Logger = logging.getLogger("clientgen.arguments")

# (action, argument name) → description template.  ``{singular}`` is the
# entity name, ``{plural}`` its plural.
ARGUMENT_DESCRIPTIONS: Dict[ModelAction, Dict[str, str]] = {
    ModelAction.FIND_ONE: {
        "where": "Filter, which {singular} to fetch.",
    },
    ModelAction.FIND_MANY: {
        "where": "Filter, which {plural} to fetch.",
        "orderBy": "Determine the order of the {plural} to fetch.",
        "skip": "Skip the first `n` {plural}.",
        "cursor": "Sets the position for listing {plural}.",
        "take": (
            "Get all {plural} that come after or before the {singular} "
            "you provide with the current order."
        ),
    },
    ModelAction.CREATE: {
        "data": "The data needed to create a {singular}.",
    },
    ModelAction.UPDATE: {
        "data": "The data needed to update a {singular}.",
        "where": "Choose, which {singular} to update.",
    },
    ModelAction.UPSERT: {
        "where": "The filter to search for the {singular} to update in case it exists.",
        "create": (
            "In case the {singular} found by the `where` argument doesn't exist, "
            "create a new {singular} with this data."
        ),
        "update": (
            "In case the {singular} was found with the provided `where` argument, "
            "update it with this data."
        ),
    },
    ModelAction.DELETE: {
        "where": "Filter which {singular} to delete.",
    },
}


def describe_argument(entity_name: str, action: Optional[ModelAction], arg_name: str) -> Optional[str]:
    """Description for *arg_name* of *action*, or ``None`` when none is listed."""
    if action is None:
        return None
    template: Optional[str] = ARGUMENT_DESCRIPTIONS.get(ModelAction(action), {}).get(arg_name)
    if template is None:
        return None
    return template.format(singular=entity_name, plural=to_plural(entity_name))


def _projection_arg(name: str, type_name: str, comment: str) -> SchemaArg:
    return SchemaArg(
        name=name,
        input_type=[
            InputTypeRef(
                type=type_name,
                kind=FieldKind.OBJECT,
                is_list=False,
                is_required=False,
                is_nullable=True,
            )
        ],
        comment=comment,
    )


def select_arg(entity_name: str) -> SchemaArg:
    return _projection_arg(
        "select",
        get_select_name(entity_name),
        f"Select specific fields to fetch from the {entity_name}",
    )


def include_arg(entity_name: str) -> SchemaArg:
    return _projection_arg(
        "include",
        get_include_name(entity_name),
        "Choose, which related nodes to fetch as well.",
    )


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArgsDeclaration:
    """An argument type before rendering."""

    entity: str
    action: Optional[ModelAction]
    args: Tuple[SchemaArg, ...]

    @property
    def name(self) -> str:
        return get_model_arg_name(self.entity, self.action)

    @property
    def arg_names(self) -> Tuple[str, ...]:
        return tuple(a.name for a in self.args)

    def shape(self) -> ObjectType:
        return ObjectType(tuple(input_field_member(a) for a in self.args), name=self.entity)

    def to_ts(self) -> str:
        label: str = self.action.value if self.action else "without action"
        return (
            f"{wrap_comment(f'{self.entity} {label}')}\n"
            f"export type {self.name} = {self.shape().render()}\n"
        )


def _describe(entity_name: str, action: Optional[ModelAction], args: List[SchemaArg]) -> List[SchemaArg]:
    described: List[SchemaArg] = []
    for arg in args:
        comment: Optional[str] = describe_argument(entity_name, action, arg.name)
        if comment is not None:
            arg = arg.model_copy(update={"comment": comment})
        described.append(arg)
    return described


def build_args_declaration(
    entity: Entity,
    action: Optional[ModelAction],
    declared: List[SchemaArg],
) -> ArgsDeclaration:
    """
    Assemble the argument type of *action* (``None`` for the bare type).
    """
    if action is not None and ModelAction(action) in BULK_ACTIONS:
        return ArgsDeclaration(entity.name, action, tuple(declared))

    args: List[SchemaArg] = [select_arg(entity.name)]
    if entity.has_relations:
        args.append(include_arg(entity.name))
    args.extend(_describe(entity.name, action, declared))
    return ArgsDeclaration(entity.name, action, tuple(args))


def build_entity_args(index: SchemaIndex, entity: Entity) -> List[ArgsDeclaration]:
    """Every argument type of *entity*: mapped actions in action order, then the bare type."""
    declarations: List[ArgsDeclaration] = []
    mapping = index.mapping(entity.name)
    if mapping is not None:
        for action, _ in mapping.mapped_actions():
            root: Optional[SchemaField] = index.root_field(entity.name, action)
            if root is None:
                raise SchemaInconsistencyError(
                    f"Action '{action.value}' of entity '{entity.name}' has no root field."
                )
            declarations.append(build_args_declaration(entity, action, list(root.args)))
    declarations.append(build_args_declaration(entity, None, []))
    logger.debug("Entity '%s': %d argument type(s).", entity.name, len(declarations))
    return declarations


__all__: List[str] = [
    "ARGUMENT_DESCRIPTIONS",
    "describe_argument",
    "select_arg",
    "include_arg",
    "ArgsDeclaration",
    "build_args_declaration",
    "build_entity_args",
]
