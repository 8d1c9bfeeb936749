# File: clientgen/schema_index.py
"""
clientgen - Schema Index
=========================
Read-only lookup tables built once over a ``SchemaDocument``.

Every emitter receives the same ``SchemaIndex`` and resolves entities,
output types, mappings and root fields by name in O(1) instead of
scanning the document lists.  Lookups of names the index does not know
raise ``SchemaInconsistencyError`` naming the offender.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from clientgen.models import (
    ActionMapping,
    Entity,
    EnumDefinition,
    InputType,
    OutputType,
    SchemaDocument,
    SchemaField,
)
from clientgen.naming import ModelAction
from clientgen.utils import unique_by
from clientgen.validators import ROOT_TYPE_NAMES, SchemaInconsistencyError

logger: logging.Logger = logging.getLogger("clientgen.schema_index")


class SchemaIndex:
    """Name-keyed views over one schema document."""

    __slots__ = (
        "document",
        "_entities",
        "_output_types",
        "_mappings",
        "_root_fields",
    )

    def __init__(self, document: SchemaDocument) -> None:
        self.document: SchemaDocument = document
        self._entities: Dict[str, Entity] = {m.name: m for m in document.datamodel.models}
        self._output_types: Dict[str, OutputType] = {
            t.name: t for t in document.query_schema.output_types
        }
        self._mappings: Dict[str, ActionMapping] = {}
        for mapping in document.mappings:
            # First mapping of an entity wins.
            self._mappings.setdefault(mapping.model, mapping)

        self._root_fields: Dict[str, SchemaField] = {}
        for root in ROOT_TYPE_NAMES:
            root_type: Optional[OutputType] = self._output_types.get(root)
            if root_type is None:
                continue
            for f in root_type.fields:
                self._root_fields.setdefault(f.name, f)

        logger.debug(
            "Indexed %d entities, %d output types, %d mappings, %d root fields.",
            len(self._entities),
            len(self._output_types),
            len(self._mappings),
            len(self._root_fields),
        )

    # -- entities -----------------------------------------------------------

    @property
    def entities(self) -> List[Entity]:
        return list(self.document.datamodel.models)

    def entity(self, name: str) -> Entity:
        try:
            return self._entities[name]
        except KeyError:
            raise SchemaInconsistencyError(f"Unknown entity '{name}'.") from None

    def has_entity(self, name: str) -> bool:
        return name in self._entities

    # -- output types -------------------------------------------------------

    def output_type(self, name: str) -> OutputType:
        try:
            return self._output_types[name]
        except KeyError:
            raise SchemaInconsistencyError(f"Entity '{name}' has no output type.") from None

    # -- mappings -----------------------------------------------------------

    def mapping(self, entity_name: str) -> Optional[ActionMapping]:
        return self._mappings.get(entity_name)

    @property
    def mappings(self) -> List[ActionMapping]:
        return list(self._mappings.values())

    def root_field(self, entity_name: str, action: ModelAction) -> Optional[SchemaField]:
        """
        The ``Query``/``Mutation`` field serving *action* on *entity_name*.

        ``None`` when the action is unmapped; a mapped action whose field is
        missing from both root types is a schema inconsistency.
        """
        mapping: Optional[ActionMapping] = self.mapping(entity_name)
        if mapping is None:
            return None
        field_name: Optional[str] = mapping.field_for(action)
        if not field_name:
            return None
        try:
            return self._root_fields[field_name]
        except KeyError:
            raise SchemaInconsistencyError(
                f"Action '{ModelAction(action).value}' of entity '{entity_name}' maps to "
                f"'{field_name}', which exists on neither Query nor Mutation."
            ) from None

    # -- enums & input types ------------------------------------------------

    @property
    def enums(self) -> List[EnumDefinition]:
        """Query-schema enums first, then datamodel enums not already listed."""
        return unique_by(
            [*self.document.query_schema.enums, *self.document.datamodel.enums],
            lambda e: e.name,
        )

    @property
    def input_types(self) -> List[InputType]:
        return list(self.document.query_schema.input_types)

    def __repr__(self) -> str:
        return f"<SchemaIndex {len(self._entities)} entities>"


__all__: List[str] = ["SchemaIndex"]
