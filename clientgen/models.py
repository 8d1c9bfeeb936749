# File: clientgen/models.py
"""
clientgen - Core Data Models
=============================
Pydantic V2 models representing the normalized schema document consumed by
the generator, plus the generator configuration and the generation result.

The schema models mirror the document emitted by the schema compiler:
camelCase keys (``isList``, ``inputType``, ``findMany``) validate directly
thanks to the shared alias generator, while Python code uses snake_case
attribute names.

Every schema model is frozen.  The generator still takes one deep copy of
the document at its boundary so no run ever shares objects with the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel, to_snake

from clientgen.naming import ModelAction
from clientgen.utils import count_lines, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen.models")

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class FieldKind(str, Enum):
    """What a field or type reference points at."""

    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SCHEMA_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    alias_generator=to_camel,
    frozen=True,
    extra="ignore",
)

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Datamodel: enums, fields, entities
# ---------------------------------------------------------------------------


class EnumDefinition(BaseModel):
    """A named, ordered set of distinct string values."""

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1, description="Enum type name.")
    values: List[str] = Field(..., min_length=1, description="Allowed values, in order.")

    @field_validator("values", mode="before")
    @classmethod
    def _normalise_values(cls, v: Any) -> Any:
        # The datamodel flavour lists values as {"name": ..., "dbName": ...}.
        if not isinstance(v, list):
            return v
        values: List[Any] = []
        for item in v:
            if isinstance(item, dict):
                if "name" not in item:
                    raise ValueError("enum value mapping requires 'name'")
                item = item["name"]
            values.append(item)
        return values

    @field_validator("values")
    @classmethod
    def _unique_values(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            dupes: List[str] = sorted({x for x in v if v.count(x) > 1})
            raise ValueError(f"Duplicate enum values detected: {dupes}")
        return v

    def __repr__(self) -> str:
        return f"<Enum {self.name} ({len(self.values)} values)>"


class EntityField(BaseModel):
    """
    One field of an entity.

    ``type`` holds the scalar name for scalar fields, the enum name for enum
    fields and the related entity name for relation (``object``) fields.
    """

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    kind: FieldKind = Field(..., description="scalar, enum or object (relation).")
    type: str = Field(..., min_length=1, description="Scalar, enum or entity name.")
    is_list: bool = Field(default=False, description="Multiplicity is a list.")
    is_required: bool = Field(default=True, description="Value may not be null.")
    is_unique: bool = Field(default=False, description="Carries a unique constraint.")
    is_id: bool = Field(default=False, description="Part of the primary key.")
    relation_name: Optional[str] = Field(default=None, description="Relation name.")
    documentation: Optional[str] = Field(default=None, description="Field doc comment.")

    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.OBJECT

    @model_validator(mode="after")
    def _relation_name_only_on_relations(self) -> "EntityField":
        if self.relation_name is not None and self.kind != FieldKind.OBJECT:
            raise ValueError(
                f"Field '{self.name}' has relationName but is of kind '{self.kind.value}'."
            )
        return self

    def __repr__(self) -> str:
        suffix: str = "[]" if self.is_list else ("" if self.is_required else "?")
        return f"<Field {self.name}: {self.type}{suffix} ({self.kind.value})>"


class Entity(BaseModel):
    """
    A modeled record kind.

    This is the central model consumed by the emitters: one ``Entity``
    drives its value type, select/include shapes, payload type, delegate
    and argument types.
    """

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1, description="Entity name (identifier-safe).")
    fields: List[EntityField] = Field(..., min_length=1, description="Ordered fields.")
    id_fields: List[str] = Field(
        default_factory=list, description="Composite primary key field names."
    )
    unique_fields: List[List[str]] = Field(
        default_factory=list, description="Composite unique constraints."
    )
    documentation: Optional[str] = Field(default=None, description="Entity doc comment.")

    @model_validator(mode="after")
    def _validate_unique_field_names(self) -> "Entity":
        names: List[str] = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Entity '{self.name}' has duplicate fields: {dupes}")
        return self

    @model_validator(mode="after")
    def _validate_composite_keys_exist(self) -> "Entity":
        names: Set[str] = {f.name for f in self.fields}
        for group in [self.id_fields, *self.unique_fields]:
            missing: List[str] = [n for n in group if n not in names]
            if missing:
                raise ValueError(
                    f"Entity '{self.name}' composite key references "
                    f"non-existent fields: {missing}"
                )
        return self

    @property
    def relation_fields(self) -> List[EntityField]:
        return [f for f in self.fields if f.kind == FieldKind.OBJECT]

    @property
    def scalar_fields(self) -> List[EntityField]:
        """Scalar and enum fields, everything that is not a relation."""
        return [f for f in self.fields if f.kind != FieldKind.OBJECT]

    @property
    def has_relations(self) -> bool:
        return any(f.kind == FieldKind.OBJECT for f in self.fields)

    def get_field(self, name: str) -> Optional[EntityField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __repr__(self) -> str:
        return f"<Entity {self.name} ({len(self.fields)} fields)>"


class Datamodel(BaseModel):
    """Entities and enums as declared by the user."""

    model_config = _SCHEMA_CONFIG

    models: List[Entity] = Field(default_factory=list, description="All entities.")
    enums: List[EnumDefinition] = Field(default_factory=list, description="All enums.")


# ---------------------------------------------------------------------------
# Query schema: input / output types and arguments
# ---------------------------------------------------------------------------


class InputTypeRef(BaseModel):
    """One candidate shape an argument accepts."""

    model_config = _SCHEMA_CONFIG

    type: str = Field(..., min_length=1, description="Scalar, enum or input type name.")
    kind: FieldKind = Field(default=FieldKind.SCALAR, description="Reference kind.")
    is_list: bool = Field(default=False)
    is_required: bool = Field(default=False)
    is_nullable: bool = Field(default=False)


class SchemaArg(BaseModel):
    """
    Argument descriptor.

    An argument may legally accept several candidate shapes; the flags of
    the first candidate decide optionality, list-ness and nullability.
    """

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1, description="Argument name.")
    input_type: List[InputTypeRef] = Field(
        ..., min_length=1, description="Candidate input shapes."
    )
    comment: Optional[str] = Field(default=None, description="Human-readable description.")

    @field_validator("input_type", mode="before")
    @classmethod
    def _wrap_single_candidate(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return [v]
        return v

    @property
    def is_required(self) -> bool:
        return self.input_type[0].is_required

    @property
    def is_list(self) -> bool:
        return self.input_type[0].is_list

    @property
    def is_nullable(self) -> bool:
        return self.input_type[0].is_nullable

    def __repr__(self) -> str:
        types: str = " | ".join(t.type for t in self.input_type)
        return f"<Arg {self.name}: {types}>"


class OutputTypeRef(BaseModel):
    """Type of an output field."""

    model_config = _SCHEMA_CONFIG

    type: str = Field(..., min_length=1, description="Scalar, enum or output type name.")
    kind: FieldKind = Field(default=FieldKind.SCALAR)
    is_list: bool = Field(default=False)
    is_required: bool = Field(default=True)


class SchemaField(BaseModel):
    """A field of an output type, with the arguments it accepts."""

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1)
    output_type: OutputTypeRef
    args: List[SchemaArg] = Field(default_factory=list)

    @property
    def is_relation(self) -> bool:
        return self.output_type.kind == FieldKind.OBJECT


class InputType(BaseModel):
    """A named bag of argument fields (filters, create/update data...)."""

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1)
    fields: List[SchemaArg] = Field(default_factory=list)


class OutputType(BaseModel):
    """
    The full server-computable shape of an entity (or of a root type such
    as ``Query``/``Mutation``).
    """

    model_config = _SCHEMA_CONFIG

    name: str = Field(..., min_length=1)
    fields: List[SchemaField] = Field(default_factory=list)

    @property
    def relation_fields(self) -> List[SchemaField]:
        return [f for f in self.fields if f.output_type.kind == FieldKind.OBJECT]

    def get_field(self, name: str) -> Optional[SchemaField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


class QuerySchema(BaseModel):
    """Input types, output types and enums of the query schema."""

    model_config = _SCHEMA_CONFIG

    input_types: List[InputType] = Field(default_factory=list)
    output_types: List[OutputType] = Field(default_factory=list)
    enums: List[EnumDefinition] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Mappings & document root
# ---------------------------------------------------------------------------


_NON_ACTION_KEYS: Set[str] = {"model", "plural"}


class ActionMapping(BaseModel):
    """
    Per-entity association from action kind to the root field serving it.

    A ``None`` entry means the action is unsupported for the entity and is
    left out of the generated output.
    """

    model_config = _SCHEMA_CONFIG

    model: str = Field(..., min_length=1, description="Entity name.")
    plural: str = Field(..., min_length=1, description="Plural entity name.")
    find_one: Optional[str] = None
    find_many: Optional[str] = None
    create: Optional[str] = None
    update: Optional[str] = None
    update_many: Optional[str] = None
    upsert: Optional[str] = None
    delete: Optional[str] = None
    delete_many: Optional[str] = None
    aggregate: Optional[str] = None

    def field_for(self, action: Any) -> Optional[str]:
        """Root field name mapped for *action* (a ``ModelAction`` or its value)."""
        key: str = getattr(action, "value", action)
        attr: str = to_snake(key)
        if attr in _NON_ACTION_KEYS or attr not in type(self).model_fields:
            raise KeyError(f"Unknown action kind: {key!r}")
        return getattr(self, attr)

    def mapped_actions(self) -> List[Tuple[ModelAction, str]]:
        """``(action, root field)`` pairs of every supported action, in action order."""
        pairs: List[Tuple[ModelAction, str]] = []
        for action in ModelAction:
            field_name: Optional[str] = self.field_for(action)
            if field_name:
                pairs.append((action, field_name))
        return pairs

    def __repr__(self) -> str:
        return f"<Mapping {self.model}>"


class SchemaDocument(BaseModel):
    """
    The root model: the complete, pre-resolved schema handed to the
    generator.

    Invariants checked at load time: unique entity names, every relation
    field resolves to an entity, every mapping names an entity.
    """

    model_config = _SCHEMA_CONFIG

    datamodel: Datamodel = Field(default_factory=Datamodel)
    query_schema: QuerySchema = Field(default_factory=QuerySchema, alias="schema")
    mappings: List[ActionMapping] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_entity_names(self) -> "SchemaDocument":
        names: List[str] = [m.name for m in self.datamodel.models]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate entity names: {dupes}")
        return self

    @model_validator(mode="after")
    def _validate_relation_targets_exist(self) -> "SchemaDocument":
        entity_names: Set[str] = {m.name for m in self.datamodel.models}
        for entity in self.datamodel.models:
            for f in entity.relation_fields:
                if f.type not in entity_names:
                    raise ValueError(
                        f"Entity '{entity.name}' has relation '{f.name}' to "
                        f"'{f.type}' which is not defined in the schema."
                    )
        return self

    @model_validator(mode="after")
    def _validate_mapping_targets_exist(self) -> "SchemaDocument":
        entity_names: Set[str] = {m.name for m in self.datamodel.models}
        for mapping in self.mappings:
            if mapping.model not in entity_names:
                raise ValueError(
                    f"Mapping references entity '{mapping.model}' "
                    f"which is not defined in the schema."
                )
        return self

    @property
    def entity_names(self) -> List[str]:
        return [m.name for m in self.datamodel.models]

    def __repr__(self) -> str:
        return (
            f"<SchemaDocument {len(self.datamodel.models)} entities, "
            f"{len(self.query_schema.input_types)} input types, "
            f"{len(self.mappings)} mappings>"
        )


# ---------------------------------------------------------------------------
# Generator Configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Settings that shape the fixed header templates and the output files.

    None of these settings changes the projection algebra or the naming
    scheme; two runs with equal config and document produce identical bytes.
    """

    model_config = _SHARED_CONFIG

    client_name: str = Field(
        default="DataClient",
        pattern=r"^[A-Za-z_$][A-Za-z0-9_$]*$",
        description="Name of the generated root client class.",
    )
    runtime_path: str = Field(
        default="./runtime", min_length=1, description="Import path of the client runtime."
    )
    client_version: str = Field(default="0.0.0", description="Stamped client version.")
    engine_version: str = Field(default="unknown", description="Stamped engine version.")
    datasources: List[str] = Field(
        default_factory=lambda: ["db"], description="Datasource names the client can override."
    )
    platforms: List[str] = Field(
        default_factory=list, description="Engine binary platforms to annotate for bundlers."
    )
    emit_js: bool = Field(default=True, description="Also emit the data-only JS document.")
    ts_filename: str = Field(default="index.d.ts", min_length=1)
    js_filename: str = Field(default="index.js", min_length=1)
    output_dir: str = Field(default="./generated", description="Output directory.")
    schema_dir: str = Field(default=".", description="Directory holding the schema file.")

    @model_validator(mode="after")
    def _validate_distinct_filenames(self) -> "GeneratorConfig":
        if self.ts_filename == self.js_filename:
            raise ValueError(
                f"ts_filename and js_filename must differ (both '{self.ts_filename}')."
            )
        return self


# ---------------------------------------------------------------------------
# Generation Result: output manifest
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """Represents a single document produced by the generator."""

    model_config = _SHARED_CONFIG

    path: str = Field(..., min_length=1, description="Relative file path.")
    content: str = Field(..., description="Full file content.")

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        return count_lines(self.content)

    @computed_field  # type: ignore[misc]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))

    @computed_field  # type: ignore[misc]
    @property
    def checksum(self) -> str:
        return sha256_hex(self.content)


class GenerationResult(BaseModel):
    """
    Documents returned by the generator after a full run.

    Consumed by the exporter to write files and by the CLI to print a
    summary.
    """

    model_config = _SHARED_CONFIG

    files: List[GeneratedFile] = Field(default_factory=list, description="All documents.")
    entity_count: int = Field(default=0, ge=0)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = Field(default=None)

    @computed_field  # type: ignore[misc]
    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    @computed_field  # type: ignore[misc]
    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def add_file(self, path: str, content: str) -> None:
        self.files.append(GeneratedFile(path=path, content=content))

    def as_mapping(self) -> Dict[str, str]:
        return {f.path: f.content for f in self.files}

    def get(self, path: str) -> Optional[str]:
        for f in self.files:
            if f.path == path:
                return f.content
        return None

    def __repr__(self) -> str:
        return (
            f"<GenerationResult {len(self.files)} files, "
            f"{self.total_lines} lines, {self.entity_count} entities>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FieldKind",
    "EnumDefinition",
    "EntityField",
    "Entity",
    "Datamodel",
    "InputTypeRef",
    "SchemaArg",
    "OutputTypeRef",
    "SchemaField",
    "InputType",
    "OutputType",
    "QuerySchema",
    "ActionMapping",
    "SchemaDocument",
    "GeneratorConfig",
    "GeneratedFile",
    "GenerationResult",
]

logger.debug("clientgen.models loaded: %d public symbols.", len(__all__))
