# File: clientgen/__init__.py
"""
clientgen: Typed Data-Access Client Generator
==============================================

Turns a schema document (datamodel, query schema and action mappings)
into a TypeScript declaration document and a data-only JavaScript module
for a generic client runtime.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ClientGenerator │────▶│  ClientDocument  │
    │   (cli.py)   │     │ (generator.py)  │     │  (generator.py)  │
    └──────────────┘     └────────┬────────┘     └────────┬─────────┘
                                  │                       │
                    ┌─────────────┼──────────┐   ┌────────┼──────────┐
                    ▼             ▼          ▼   ▼        ▼          ▼
             ┌──────────┐  ┌───────────┐ ┌─────────┐ ┌──────────┐ ┌───────────┐
             │validators│  │ exporters │ │ fields  │ │projection│ │ delegates │
             └──────────┘  └───────────┘ │  enums  │ │arguments │ │ templates │
                                         └─────────┘ └──────────┘ └───────────┘

Usage::

    # As a library
    from clientgen import ClientGenerator, GeneratorConfig, SchemaDocument
    result = ClientGenerator().render(document, GeneratorConfig())
    print(result.get("index.d.ts"))

    # From the command line
    python -m clientgen --schema schema.json --output ./generated -v

Public API:
    - ClientGenerator    Pipeline orchestrator
    - ClientDocument     Renders both documents from one schema snapshot
    - SchemaDocument     Input schema model
    - GeneratorConfig    Generation settings model
    - resolve_payload    Evaluates the payload shape of a selector
    - validate_full      Schema validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from clientgen.models import (
    ActionMapping,
    Datamodel,
    Entity,
    EntityField,
    EnumDefinition,
    FieldKind,
    GeneratedFile,
    GenerationResult,
    GeneratorConfig,
    InputType,
    OutputType,
    QuerySchema,
    SchemaDocument,
    SchemaField,
)
from clientgen.naming import ModelAction, Projection, derive_identifiers
from clientgen.projection import resolve_payload
from clientgen.schema_index import SchemaIndex
from clientgen.validators import (
    GenerationError,
    SchemaInconsistencyError,
    SelectorConflictError,
    ValidationResult,
    validate_full,
)
from clientgen.exporters import ClientExporter, ExportManifest, ExportResult
from clientgen.generator import ClientDocument, ClientGenerator, GenerationReport

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "ClientGenerator",
    "ClientDocument",
    "GenerationReport",
    # Models
    "ActionMapping",
    "Datamodel",
    "Entity",
    "EntityField",
    "EnumDefinition",
    "FieldKind",
    "GeneratedFile",
    "GenerationResult",
    "GeneratorConfig",
    "InputType",
    "OutputType",
    "QuerySchema",
    "SchemaDocument",
    "SchemaField",
    # Naming & projection
    "ModelAction",
    "Projection",
    "derive_identifiers",
    "resolve_payload",
    "SchemaIndex",
    # Validation
    "validate_full",
    "ValidationResult",
    "GenerationError",
    "SchemaInconsistencyError",
    "SelectorConflictError",
    # Exporters
    "ClientExporter",
    "ExportManifest",
    "ExportResult",
]
