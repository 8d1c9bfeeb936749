# File: clientgen/naming.py
"""
clientgen - Name Derivation
============================
Pure, deterministic functions mapping (entity, action, role) to the
identifier of a generated declaration.

Every identifier embeds both the entity name and a fixed action/role
affix, so two triples can only collide when an entity name itself looks
like another entity plus an affix (``FindManyUser`` vs ``User``).  Such
schemas are rejected up front by ``find_collisions``.

``ModelAction`` is the closed set of action kinds.  Every table keyed by
action is checked for exhaustiveness when this module is imported, so a
new action cannot be added without deciding how each table handles it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from clientgen.models import SchemaField

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen.naming")


class ModelAction(str, Enum):
    """Action kinds an entity mapping can expose."""

    FIND_ONE = "findOne"
    FIND_MANY = "findMany"
    CREATE = "create"
    UPDATE = "update"
    UPDATE_MANY = "updateMany"
    UPSERT = "upsert"
    DELETE = "delete"
    DELETE_MANY = "deleteMany"
    AGGREGATE = "aggregate"


class Projection(str, Enum):
    """The two mutually exclusive selector modes."""

    SELECT = "select"
    INCLUDE = "include"


# Actions that return a count instead of entities.
BULK_ACTIONS: Tuple[ModelAction, ...] = (ModelAction.UPDATE_MANY, ModelAction.DELETE_MANY)

# (prefix, suffix) wrapped around the entity name for each action's args type.
_ARGS_AFFIXES: Dict[ModelAction, Tuple[str, str]] = {
    ModelAction.FIND_ONE: ("FindOne", "Args"),
    ModelAction.FIND_MANY: ("FindMany", "Args"),
    ModelAction.CREATE: ("", "CreateArgs"),
    ModelAction.UPDATE: ("", "UpdateArgs"),
    ModelAction.UPDATE_MANY: ("", "UpdateManyArgs"),
    ModelAction.UPSERT: ("", "UpsertArgs"),
    ModelAction.DELETE: ("", "DeleteArgs"),
    ModelAction.DELETE_MANY: ("", "DeleteManyArgs"),
    ModelAction.AGGREGATE: ("Aggregate", "Args"),
}


def check_exhaustive(
    table: Mapping[ModelAction, object],
    table_name: str,
    actions: Iterable[ModelAction] = tuple(ModelAction),
) -> None:
    """Raise when *table* has no entry for one of *actions*."""
    missing: List[str] = [a.value for a in actions if a not in table]
    if missing:
        raise RuntimeError(f"{table_name} does not handle actions: {missing}")


check_exhaustive(_ARGS_AFFIXES, "_ARGS_AFFIXES")


# ---------------------------------------------------------------------------
# Per-role identifiers
# ---------------------------------------------------------------------------


def get_payload_name(entity_name: str) -> str:
    return f"{entity_name}GetPayload"


def get_select_name(entity_name: str) -> str:
    return f"{entity_name}Select"


def get_include_name(entity_name: str) -> str:
    return f"{entity_name}Include"


def get_delegate_name(entity_name: str) -> str:
    return f"{entity_name}Delegate"


def get_client_name(entity_name: str) -> str:
    return f"{entity_name}Client"


def get_model_arg_name(entity_name: str, action: Optional[ModelAction] = None) -> str:
    """
    Name of the argument type of *action* on *entity_name*.

    Without an action this is the bare ``<Entity>Args`` bound used for
    generic constraints and relation sub-selections.
    """
    if action is None:
        return f"{entity_name}Args"
    prefix, suffix = _ARGS_AFFIXES[ModelAction(action)]
    return f"{prefix}{entity_name}{suffix}"


def get_arg_name(type_name: str, is_list: bool) -> str:
    """Args type accepted by a relation pointing at *type_name*."""
    if is_list:
        return get_model_arg_name(type_name, ModelAction.FIND_MANY)
    return get_model_arg_name(type_name)


def get_field_arg_name(field: SchemaField) -> str:
    return get_arg_name(field.output_type.type, field.output_type.is_list)


def get_select_return_type(
    name: str,
    action: ModelAction,
    *,
    nullable: Optional[bool] = None,
) -> str:
    """
    Return type of a delegate method or relation accessor.

    ``CheckSelect`` picks the payload projection when the caller passed
    ``select`` or ``include`` and the plain value type otherwise; passing
    both resolves to an error string instead of a usable type.

    ``nullable`` defaults to True for ``findOne`` only.
    """
    action = ModelAction(action)
    if action in BULK_ACTIONS:
        return "Promise<BatchPayload>"

    is_list: bool = action == ModelAction.FIND_MANY
    if nullable is None:
        nullable = action == ModelAction.FIND_ONE
    null_str: str = " | null" if nullable else ""

    plain: str = f"{name}{null_str}"
    projected: str = f"{get_payload_name(name)}<T>{null_str}"

    if is_list:
        return (
            f"CheckSelect<T, Promise<Array<{plain}>>, "
            f"Promise<Array<{projected}>>>"
        )
    client: str = get_client_name(name)
    return f"CheckSelect<T, {client}<{plain}>, {client}<{projected}>>"


# ---------------------------------------------------------------------------
# Injectivity check
# ---------------------------------------------------------------------------

Triple = Tuple[str, Optional[str], str]

_ROLE_FUNCTIONS = (
    ("payload", get_payload_name),
    ("select", get_select_name),
    ("include", get_include_name),
    ("delegate", get_delegate_name),
    ("client", get_client_name),
)


def derive_identifiers(entity_names: Iterable[str]) -> List[Tuple[Triple, str]]:
    """
    Every (entity, action, role) triple a run can emit, with its identifier.

    The entity value type itself is listed with role ``model``.
    """
    derived: List[Tuple[Triple, str]] = []
    for entity in entity_names:
        derived.append(((entity, None, "model"), entity))
        for role, fn in _ROLE_FUNCTIONS:
            derived.append(((entity, None, role), fn(entity)))
        derived.append(((entity, None, "args"), get_model_arg_name(entity)))
        for action in ModelAction:
            derived.append(((entity, action.value, "args"), get_model_arg_name(entity, action)))
    return derived


def find_collisions(
    entity_names: Iterable[str],
    reserved: Iterable[str] = (),
) -> Dict[str, List[str]]:
    """
    Identifiers claimed more than once.

    *reserved* holds names declared by the document itself (enums, input
    types, fixed boilerplate); a derived identifier equal to one of them is
    a collision too.  Returns identifier → human-readable claimants.
    """
    claims: Dict[str, List[str]] = defaultdict(list)
    for name in reserved:
        claims[name].append(f"declared type '{name}'")
    for (entity, action, role), ident in derive_identifiers(entity_names):
        label: str = f"{entity}/{action or '-'}/{role}"
        claims[ident].append(label)
    return {ident: owners for ident, owners in claims.items() if len(owners) > 1}


__all__: List[str] = [
    "ModelAction",
    "Projection",
    "BULK_ACTIONS",
    "check_exhaustive",
    "get_payload_name",
    "get_select_name",
    "get_include_name",
    "get_delegate_name",
    "get_client_name",
    "get_model_arg_name",
    "get_arg_name",
    "get_field_arg_name",
    "get_select_return_type",
    "derive_identifiers",
    "find_collisions",
]

logger.debug("clientgen.naming loaded: %d actions.", len(ModelAction))
