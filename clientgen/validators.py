# File: clientgen/validators.py
"""
clientgen - Schema Validators & Error Taxonomy
===============================================
Pydantic's validators in ``clientgen.models`` handle structural
correctness at load time (duplicate entities, dangling relations, unknown
mapping targets).  This module adds the **cross-entity semantic checks**
the generator needs before it emits anything:

    - every entity has an output type, and every relation of that output
      type points at an entity;
    - every datamodel relation is also a relation of the output type;
    - every mapped action resolves to a root field on ``Query`` or
      ``Mutation``;
    - enum fields reference a declared enum;
    - derived identifiers never collide with each other or with declared
      type names.

Errors abort generation (``SchemaInconsistencyError``); warnings are
logged and reported but never block.

Usage by downstream modules:
    from clientgen.validators import ensure_valid
    ensure_valid(document, config)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from clientgen.models import FieldKind, GeneratorConfig, SchemaDocument
from clientgen.naming import ModelAction, find_collisions

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen.validators")

ROOT_TYPE_NAMES = ("Query", "Mutation")

# Identifiers declared by the fixed document boilerplate.
BOILERPLATE_IDENTIFIERS = (
    "BatchPayload",
    "CheckSelect",
    "ClientFetcher",
    "ClientValidationError",
    "ClientVersion",
    "DMMF",
    "DMMFClass",
    "Datasources",
    "Engine",
    "EnginePanicError",
    "Enumerable",
    "ErrorFormat",
    "GetEvents",
    "GetLogType",
    "HasInclude",
    "HasSelect",
    "Hooks",
    "InitializationError",
    "JsonArray",
    "JsonObject",
    "JsonValue",
    "KnownRequestError",
    "LogDefinition",
    "LogEvent",
    "LogLevel",
    "PromiseReturnType",
    "PromiseType",
    "QueryEvent",
    "SelectAndInclude",
    "Subset",
    "TrueKeys",
    "UnknownRequestError",
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GenerationError(Exception):
    """Base class for failures that abort a generation run."""


class SchemaInconsistencyError(GenerationError):
    """
    The schema contradicts itself (a mapping names a missing root field,
    an entity lacks its output type, two identifiers collide...).
    """

    def __init__(self, message: str, issues: Optional[List["ValidationIssue"]] = None) -> None:
        super().__init__(message)
        self.issues: List[ValidationIssue] = issues or []


class SelectorConflictError(GenerationError):
    """A selector carries both ``select`` and ``include``."""


# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    def add_error(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def is_valid(self) -> bool:
        return not any(e.is_error for e in self._items)

    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {"error": "✗", "warning": "⚠", "info": "ℹ"}.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_output_types(document: SchemaDocument) -> ValidationResult:
    """Every entity needs an output type; its relations must point at entities."""
    result = ValidationResult()
    entity_names: Set[str] = set(document.entity_names)
    output_types = {t.name: t for t in document.query_schema.output_types}

    for entity in document.datamodel.models:
        output_type = output_types.get(entity.name)
        if output_type is None:
            result.add_error(
                "OUTPUT_TYPE_MISSING",
                f"Entity '{entity.name}' has no output type.",
                {"entity": entity.name},
            )
            continue
        for f in output_type.relation_fields:
            if f.output_type.type not in entity_names:
                result.add_error(
                    "RELATION_TARGET_UNKNOWN",
                    f"Output field '{entity.name}.{f.name}' points at "
                    f"'{f.output_type.type}', which is not an entity.",
                    {"entity": entity.name, "field": f.name},
                )
    return result


def validate_relation_fields(document: SchemaDocument) -> ValidationResult:
    """Every datamodel relation must also be a relation field of the output type."""
    result = ValidationResult()
    output_types = {t.name: t for t in document.query_schema.output_types}

    for entity in document.datamodel.models:
        output_type = output_types.get(entity.name)
        if output_type is None:
            continue
        for f in entity.relation_fields:
            schema_field = output_type.get_field(f.name)
            if schema_field is None or not schema_field.is_relation:
                result.add_error(
                    "RELATION_FIELD_MISSING",
                    f"Relation '{entity.name}.{f.name}' is not a relation field "
                    f"of output type '{entity.name}'.",
                    {"entity": entity.name, "field": f.name},
                )
    return result


def validate_mappings(document: SchemaDocument) -> ValidationResult:
    """Every mapped action must resolve to a field of a root type."""
    result = ValidationResult()
    root_fields: Set[str] = set()
    for output_type in document.query_schema.output_types:
        if output_type.name in ROOT_TYPE_NAMES:
            root_fields.update(f.name for f in output_type.fields)

    seen: Set[str] = set()
    for mapping in document.mappings:
        if mapping.model in seen:
            result.add_warning(
                "DUPLICATE_MAPPING",
                f"Entity '{mapping.model}' is mapped more than once; "
                f"only the first mapping is used.",
                {"entity": mapping.model},
            )
            continue
        seen.add(mapping.model)

        for action in ModelAction:
            field_name: Optional[str] = mapping.field_for(action)
            if field_name and field_name not in root_fields:
                result.add_error(
                    "MAPPING_FIELD_MISSING",
                    f"Action '{action.value}' of entity '{mapping.model}' maps to "
                    f"'{field_name}', which exists on neither Query nor Mutation.",
                    {"entity": mapping.model, "action": action.value, "field": field_name},
                )

    for name in document.entity_names:
        if name not in seen:
            result.add_info(
                "ENTITY_UNMAPPED",
                f"Entity '{name}' has no mapping; it gets types but no delegate.",
                {"entity": name},
            )
    return result


def validate_enum_references(document: SchemaDocument) -> ValidationResult:
    result = ValidationResult()
    enum_names: Set[str] = {e.name for e in document.datamodel.enums}
    enum_names.update(e.name for e in document.query_schema.enums)
    for entity in document.datamodel.models:
        for f in entity.fields:
            if f.kind == FieldKind.ENUM and f.type not in enum_names:
                result.add_warning(
                    "ENUM_UNKNOWN",
                    f"Field '{entity.name}.{f.name}' references undeclared enum '{f.type}'.",
                    {"entity": entity.name, "field": f.name},
                )
    return result


def validate_identifiers(
    document: SchemaDocument,
    extra_reserved: Iterable[str] = (),
) -> ValidationResult:
    """Derived identifiers must be unique across the whole document."""
    result = ValidationResult()
    # An enum may be listed by both the query schema and the datamodel; it is
    # emitted once.
    reserved: List[str] = list(
        dict.fromkeys(
            [e.name for e in document.query_schema.enums]
            + [e.name for e in document.datamodel.enums]
        )
    )
    reserved.extend(t.name for t in document.query_schema.input_types)
    reserved.extend(BOILERPLATE_IDENTIFIERS)
    reserved.extend(extra_reserved)

    for ident, owners in sorted(find_collisions(document.entity_names, reserved).items()):
        result.add_error(
            "NAME_COLLISION",
            f"Identifier '{ident}' would be declared more than once: {', '.join(owners)}.",
            {"identifier": ident},
        )
    return result


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def validate_full(
    document: SchemaDocument,
    config: Optional[GeneratorConfig] = None,
) -> ValidationResult:
    """Run every check and merge the results."""
    result = ValidationResult()
    result.merge(validate_output_types(document))
    result.merge(validate_relation_fields(document))
    result.merge(validate_mappings(document))
    result.merge(validate_enum_references(document))
    extra: List[str] = []
    if config is not None:
        extra = [config.client_name, f"{config.client_name}Options"]
    result.merge(validate_identifiers(document, extra))

    logger.debug("%s", result.summary())
    return result


def ensure_valid(
    document: SchemaDocument,
    config: Optional[GeneratorConfig] = None,
) -> ValidationResult:
    """
    Like ``validate_full`` but raises ``SchemaInconsistencyError`` when any
    error was found.  Warnings are logged and returned.
    """
    result: ValidationResult = validate_full(document, config)
    for warning in result.warnings:
        logger.warning("%s", warning)
    if not result.is_valid:
        raise SchemaInconsistencyError(result.format_report(), result.errors)
    return result


__all__: List[str] = [
    "GenerationError",
    "SchemaInconsistencyError",
    "SelectorConflictError",
    "ValidationIssue",
    "ValidationResult",
    "validate_output_types",
    "validate_relation_fields",
    "validate_mappings",
    "validate_enum_references",
    "validate_identifiers",
    "validate_full",
    "ensure_valid",
    "ROOT_TYPE_NAMES",
    "BOILERPLATE_IDENTIFIERS",
]

logger.debug("clientgen.validators loaded.")
