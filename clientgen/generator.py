# File: clientgen/generator.py
"""
clientgen - Document Assembler & Generation Pipeline
=====================================================

Connects every phase together:

    Schema Input → Validation → Document Assembly → File Export

``ClientDocument`` assembles the two output documents from one schema
snapshot.  Declaration order in the TypeScript document:

    1. header (runtime imports, version stamp, utility types)
    2. root client (datasources, options, client class)
    3. enums
    4. per entity: value type, Select, Include, payload, delegate,
       entity client class, argument types
    5. input types
    6. ``BatchPayload``
    7. the ``dmmf`` declaration

The JS document carries runtime enum objects, the serialized schema and
the client bootstrap configuration.

``ClientGenerator`` is the pipeline: it validates, renders and exports,
and records timing and failures of every step in a ``GenerationReport``.
Rendering is all-or-nothing; export only starts once every document has
rendered.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from clientgen.arguments import build_entity_args
from clientgen.delegates import (
    build_delegate,
    render_datasources,
    render_entity_client,
    render_root_client,
)
from clientgen.enums import EnumDeclaration
from clientgen.exporters import ClientExporter, ExportManifest, ExportResult
from clientgen.fields import render_input_type, value_type
from clientgen.models import Entity, GenerationResult, GeneratorConfig, OutputType, SchemaDocument
from clientgen.projection import PayloadDeclaration, render_include, render_select
from clientgen.schema_index import SchemaIndex
from clientgen.templates import BoilerplateTemplates
from clientgen.utils import Timer, wrap_comment
from clientgen.validators import (
    GenerationError,
    ValidationResult,
    ensure_valid,
    validate_full,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen.generator")

_CONFIG_KEYS: Tuple[str, ...] = ("generator", "config")


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------


class ClientDocument:
    """
    Both generated documents for one schema snapshot.

    The document is deep-copied on construction; nothing downstream ever
    sees the caller's objects.
    """

    def __init__(self, document: SchemaDocument, config: Optional[GeneratorConfig] = None) -> None:
        self.config: GeneratorConfig = config or GeneratorConfig()
        self.document: SchemaDocument = document.model_copy(deep=True)
        self.index: SchemaIndex = SchemaIndex(self.document)
        self.templates: BoilerplateTemplates = BoilerplateTemplates(self.config)

    # -- TypeScript ---------------------------------------------------------

    def render_entity(self, entity: Entity) -> str:
        output_type: OutputType = self.index.output_type(entity.name)
        doc: str = f"Model {entity.name}"
        if entity.documentation:
            doc = f"{doc}\n{entity.documentation}"

        blocks: List[str] = [
            wrap_comment(doc),
            f"export type {entity.name} = {value_type(entity.fields, entity.name).render()}\n",
            render_select(output_type),
        ]
        include: str = render_include(output_type)
        if include:
            blocks.append(include)
        blocks.append(PayloadDeclaration.from_output_type(output_type).to_ts())

        delegate = build_delegate(self.index, entity)
        if delegate is not None:
            blocks.append(delegate.to_ts())
        blocks.append(render_entity_client(output_type))

        blocks.append("// Custom InputTypes\n")
        blocks.extend(args.to_ts() for args in build_entity_args(self.index, entity))
        return "\n".join(blocks)

    def to_ts(self) -> str:
        t: BoilerplateTemplates = self.templates
        sections: List[str] = [
            t.header_ts(),
            "/**\n * Client\n**/",
            render_datasources(self.config),
            t.client_options_ts(),
            render_root_client(self.index, self.config),
            "/**\n * Enums\n */",
        ]
        sections.extend(EnumDeclaration.from_definition(e).to_ts() for e in self.index.enums)
        sections.extend(self.render_entity(entity) for entity in self.index.entities)
        sections.append("/**\n * Deep Input Types\n */")
        sections.extend(render_input_type(input_type) for input_type in self.index.input_types)
        sections.append(t.batch_payload_ts())
        sections.append(t.dmmf_declaration_ts())
        return "\n\n".join(sections)

    # -- JavaScript ---------------------------------------------------------

    def dmmf_string(self) -> str:
        dumped: Dict[str, Any] = self.document.model_dump(by_alias=True, mode="json")
        return json.dumps(dumped, separators=(",", ":"), ensure_ascii=False)

    def client_config(self) -> Dict[str, Any]:
        cfg = self.config
        relative: str = Path(os.path.relpath(cfg.schema_dir, cfg.output_dir)).as_posix()
        return {
            "clientName": cfg.client_name,
            "relativePath": relative,
            "internalDatasources": [{"name": name} for name in cfg.datasources],
            "clientVersion": cfg.client_version,
            "engineVersion": cfg.engine_version,
        }

    def to_js(self) -> str:
        t: BoilerplateTemplates = self.templates
        sections: List[str] = [
            t.header_js(),
            t.build_annotations_js(),
            t.enum_prelude_js(),
        ]
        sections.extend(EnumDeclaration.from_definition(e).to_js() for e in self.index.enums)
        sections.append(
            t.bootstrap_js(self.dmmf_string(), json.dumps(self.client_config(), indent=2))
        )
        return "\n\n".join(sections)


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ClientGenerator.generate()``.

    Failures are sorted by phase so the CLI can map them to exit codes.
    """

    success: bool = False
    client_name: str = ""
    output_directory: str = ""

    # Metrics
    entity_count: int = 0
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    result: Optional[GenerationResult] = None
    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'=' * 60}")
        lines.append("  clientgen: Generation Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Client:           {self.client_name}")
        lines.append(f"  Output:           {self.output_directory or '(not written)'}")
        lines.append(f"  Entities:         {self.entity_count}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─' * 60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        for title, items, icon in (
            ("Input Errors", self.input_errors, "✗"),
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
        ):
            if items:
                lines.append(f"{'─' * 60}")
                lines.append(f"  {title} ({len(items)}):")
                for item in items:
                    lines.append(f"    {icon} {item}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Schema loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema document file (JSON or YAML), dispatching on the file
    extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_raw_document(
    raw: Dict[str, Any],
    config_overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[SchemaDocument, GeneratorConfig]:
    """
    Split a raw mapping into the schema document and the generator config.

    The config lives under ``generator`` (or ``config``); the document is
    either under ``document`` or is the rest of the mapping.  Overrides win
    over file values.

    Raises:
        ValueError: If either part fails validation.
    """
    config_data: Dict[str, Any] = {}
    for key in _CONFIG_KEYS:
        if isinstance(raw.get(key), dict):
            config_data = dict(raw[key])
            break
    else:
        logger.info("No generator config found in input, using defaults.")
    if config_overrides:
        config_data.update(config_overrides)

    if isinstance(raw.get("document"), dict):
        document_data: Dict[str, Any] = raw["document"]
    else:
        document_data = {k: v for k, v in raw.items() if k not in _CONFIG_KEYS}

    try:
        document: SchemaDocument = SchemaDocument.model_validate(document_data)
    except PydanticValidationError as exc:
        raise ValueError(f"Schema validation failed: {exc}") from exc

    try:
        config: GeneratorConfig = GeneratorConfig.model_validate(config_data)
    except PydanticValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return document, config


# ---------------------------------------------------------------------------
# ClientGenerator: pipeline orchestrator
# ---------------------------------------------------------------------------


class ClientGenerator:
    """
    Pipeline orchestrator.

    Usage::

        generator = ClientGenerator()

        # In memory, raising on failure
        result = generator.render(document, config)

        # Full pipeline with a report
        report = generator.generate_from_file(
            Path("schema.yaml"), output_dir=Path("./generated")
        )
        print(report.summary())

    The generator keeps no state between runs.
    """

    def __init__(self, *, fail_on_warnings: bool = False) -> None:
        self._fail_on_warnings: bool = fail_on_warnings
        logger.debug("ClientGenerator initialised: fail_on_warnings=%s.", fail_on_warnings)

    # -----------------------------------------------------------------
    # Public: in-memory rendering
    # -----------------------------------------------------------------

    def validate(self, document: SchemaDocument, config: GeneratorConfig) -> ValidationResult:
        return validate_full(document, config)

    def render(self, document: SchemaDocument, config: Optional[GeneratorConfig] = None) -> GenerationResult:
        """
        Validate and render both documents.

        Raises:
            SchemaInconsistencyError: when validation finds an error.
        """
        config = config or GeneratorConfig()
        ensure_valid(document, config)
        return self._render_documents(document, config)

    def _render_documents(self, document: SchemaDocument, config: GeneratorConfig) -> GenerationResult:
        generated = GenerationResult(entity_count=len(document.datamodel.models))
        client = ClientDocument(document, config)
        files: List[Tuple[str, str]] = [(config.ts_filename, client.to_ts())]
        if config.emit_js:
            files.append((config.js_filename, client.to_js()))
        for path, content in files:
            generated.add_file(path, content)
        generated.finished_at = datetime.now(timezone.utc)
        return generated

    # -----------------------------------------------------------------
    # Public: full pipeline
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        schema_path: Path,
        output_dir: Optional[Path] = None,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """
        Load file → validate → render → export.

        With ``output_dir=None`` nothing is written (dry run); the rendered
        documents are available on ``report.result``.
        """
        report: GenerationReport = GenerationReport()
        start: float = time.perf_counter()

        with Timer("load_schema") as t_load:
            try:
                raw: Dict[str, Any] = load_schema_file(schema_path)
                overrides: Dict[str, Any] = dict(config_overrides or {})
                overrides.setdefault("schema_dir", str(schema_path.resolve().parent))
                if output_dir is not None:
                    overrides.setdefault("output_dir", str(output_dir.resolve()))
                document, config = parse_raw_document(raw, overrides)
            except (FileNotFoundError, ValueError) as exc:
                report.input_errors.append(str(exc))
                report.step_metrics.append(
                    GenerationStepMetric("Load Schema File", False, t_load.elapsed, str(exc))
                )
                return self._finalise_report(report, time.perf_counter() - start)

        report.step_metrics.append(
            GenerationStepMetric(
                "Load Schema File",
                True,
                t_load.elapsed,
                f"{len(document.datamodel.models)} entities from {schema_path.name}",
            )
        )
        return self._run_pipeline(document, config, output_dir, report, start)

    def generate(
        self,
        document: SchemaDocument,
        config: GeneratorConfig,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """Full pipeline from pre-parsed objects."""
        return self._run_pipeline(
            document, config, output_dir, GenerationReport(), time.perf_counter()
        )

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        document: SchemaDocument,
        config: GeneratorConfig,
        output_dir: Optional[Path],
        report: GenerationReport,
        start: float,
    ) -> GenerationReport:
        report.client_name = config.client_name
        report.entity_count = len(document.datamodel.models)

        if not self._step_validate(document, config, report):
            return self._finalise_report(report, time.perf_counter() - start)

        generated: Optional[GenerationResult] = self._step_render(document, config, report)
        if generated is None:
            return self._finalise_report(report, time.perf_counter() - start)

        if output_dir is not None:
            self._step_export(generated, config, output_dir, report)

        return self._finalise_report(report, time.perf_counter() - start)

    def _step_validate(
        self,
        document: SchemaDocument,
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> bool:
        with Timer("validation") as t:
            result: ValidationResult = self.validate(document, config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.errors:
            detail: str = f"{len(result.errors)} error(s)"
        elif result.warnings:
            detail = f"{len(result.warnings)} warning(s)"
        else:
            detail = "all checks passed"
        report.step_metrics.append(
            GenerationStepMetric("Validate Schema", result.is_valid, t.elapsed, detail)
        )

        if result.errors:
            logger.error("Validation failed with %d error(s) in %.3fs.", len(result.errors), t.elapsed)
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        if result.warnings:
            logger.warning(
                "Validation passed with %d warning(s) in %.3fs.", len(result.warnings), t.elapsed
            )
            for warn in result.warnings:
                logger.warning("  ⚠ %s", warn)
            if self._fail_on_warnings:
                return False
        else:
            logger.info(
                "Validation passed: %d entities validated in %.3fs.",
                len(document.datamodel.models),
                t.elapsed,
            )
        return True

    def _step_render(
        self,
        document: SchemaDocument,
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> Optional[GenerationResult]:
        with Timer("render") as t:
            try:
                generated: GenerationResult = self._render_documents(document, config)
            except GenerationError as exc:
                error_msg: str = f"{type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg)
                report.step_metrics.append(
                    GenerationStepMetric("Render Documents", False, t.elapsed, error_msg)
                )
                return None

        report.result = generated
        report.total_files = len(generated.files)
        report.total_lines = generated.total_lines
        report.total_bytes = generated.total_bytes
        detail: str = f"{len(generated.files)} files, ~{generated.total_lines:,} lines"
        report.step_metrics.append(GenerationStepMetric("Render Documents", True, t.elapsed, detail))
        logger.info("Rendering complete: %s in %.3fs.", detail, t.elapsed)
        return generated

    def _step_export(
        self,
        generated: GenerationResult,
        config: GeneratorConfig,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        exporter: ClientExporter = ClientExporter(config, output_dir)
        export_result: ExportResult = exporter.export(generated)

        report.output_directory = str(exporter.output_dir)
        report.export_errors.extend(export_result.errors)
        report.manifest = export_result.manifest
        report.step_metrics.append(
            GenerationStepMetric(
                "Export to Filesystem",
                export_result.success,
                export_result.elapsed_seconds,
                f"{export_result.manifest.total_files} files, "
                f"{export_result.manifest.total_bytes:,} bytes",
            )
        )

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors
            or report.validation_errors
            or report.generation_errors
            or report.export_errors
            or (self._fail_on_warnings and report.validation_warnings)
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ClientDocument",
    "ClientGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_schema_file",
    "parse_raw_document",
]

logger.debug("clientgen.generator loaded.")
