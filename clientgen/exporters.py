# File: clientgen/exporters.py
"""
clientgen - Client Exporter (File-System Manager)
==================================================

Responsible for:
    1. Creating the output directory safely.
    2. Writing the generated documents all-or-nothing: every file is
       staged to a temporary sibling first and only renamed into place
       once every file of the batch staged successfully.
    3. Producing an export manifest with checksums for reproducibility.
    4. Idempotent operation: re-running on the same path is always safe.

Complexity: O(F) where F = total number of output files.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from clientgen.models import GenerationResult, GeneratorConfig
from clientgen.utils import Timer, count_lines, ensure_directory, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen.exporters")

MANIFEST_FILENAME = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """
    Complete manifest of all exported files.

    Serialisable to JSON for build reproducibility verification.
    """

    client_name: str = ""
    client_version: str = ""
    engine_version: str = ""
    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert manifest to a JSON-serialisable dictionary."""
        return {
            "client_name": self.client_name,
            "client_version": self.client_version,
            "engine_version": self.engine_version,
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "absolute_path": f.absolute_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """
    Final result returned by ``ClientExporter.export()``.

    Includes success flag, manifest, and any errors encountered.
    """

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# ClientExporter class
# ---------------------------------------------------------------------------


class ClientExporter:
    """
    Writes a ``GenerationResult`` to the filesystem.

    Usage::

        exporter = ClientExporter(config, output_dir=Path("./generated"))
        result = exporter.export(generation_result)
        print(result.manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        output_dir: Path,
        *,
        generate_manifest: bool = True,
    ) -> None:
        self._config: GeneratorConfig = config
        self._output_dir: Path = output_dir.resolve()
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug("ClientExporter initialised: output_dir=%s.", self._output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, generated: GenerationResult) -> ExportResult:
        """
        Write every document of *generated*, then the manifest.

        A failure while staging leaves the output directory untouched; a
        failure while moving files into place discards the staged files that
        remain.
        """
        with Timer("export") as timer:
            try:
                ensure_directory(self._output_dir)
                self._write_batch(generated.as_mapping())
                if self._generate_manifest:
                    self._write_manifest_file()
            except OSError as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest()
        success: bool = len(self._errors) == 0

        result: ExportResult = ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

        if success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )

        return result

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_batch(self, files: Dict[str, str]) -> None:
        """Stage every file, then move them all into place."""
        staged: List[Tuple[str, Path, str]] = []
        try:
            for rel_path, content in files.items():
                target: Path = self._output_dir / rel_path
                staged.append((rel_path, target, self._stage(target, content)))
        except OSError:
            for _, _, tmp_path in staged:
                _discard(tmp_path)
            raise

        pending: List[Tuple[str, Path, str]] = list(staged)
        try:
            while pending:
                rel_path, target, tmp_path = pending[0]
                os.replace(tmp_path, str(target))
                pending.pop(0)
                self._file_records.append(self._record(rel_path, target, files[rel_path]))
                logger.debug("Wrote file: %s.", rel_path)
        finally:
            for _, _, tmp_path in pending:
                _discard(tmp_path)

        logger.info("Wrote %d generated files to %s.", len(staged), self._output_dir)

    @staticmethod
    def _stage(target_path: Path, content: str) -> str:
        """Write *content* to a temporary file next to *target_path*; return its path."""
        target_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target_path.parent),
            prefix=f".{target_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content.encode("utf-8"))
                handle.flush()
                os.fsync(handle.fileno())
        except OSError:
            _discard(tmp_path)
            raise
        return tmp_path

    @staticmethod
    def _record(rel_path: str, full_path: Path, content: str) -> FileRecord:
        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=len(content.encode("utf-8")),
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self) -> ExportManifest:
        """Build the export manifest from collected file records."""
        from clientgen import __version__

        total_bytes: int = sum(r.size_bytes for r in self._file_records)
        total_lines: int = sum(r.line_count for r in self._file_records)

        return ExportManifest(
            client_name=self._config.client_name,
            client_version=self._config.client_version,
            engine_version=self._config.engine_version,
            generator_version=__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            total_files=len(self._file_records),
            total_bytes=total_bytes,
            total_lines=total_lines,
            files=list(self._file_records),
        )

    def _write_manifest_file(self) -> None:
        """Write manifest.json to the output directory."""
        manifest_path: Path = self._output_dir / MANIFEST_FILENAME
        content: str = self._build_manifest().to_json()
        try:
            tmp_path: str = self._stage(manifest_path, content)
            os.replace(tmp_path, str(manifest_path))
            logger.debug("Wrote manifest to %s.", manifest_path)
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)


def _discard(tmp_path: str) -> None:
    try:
        os.unlink(tmp_path)
    except FileNotFoundError:
        logger.debug("Temporary file already gone: %s", tmp_path)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ClientExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "MANIFEST_FILENAME",
]

logger.debug("clientgen.exporters loaded.")
