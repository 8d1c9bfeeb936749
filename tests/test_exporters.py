"""
tests/test_exporters.py
Filesystem tests for clientgen.exporters.ClientExporter.
"""

from __future__ import annotations

import json
import pathlib

from clientgen import __version__
from clientgen.exporters import MANIFEST_FILENAME, ClientExporter
from clientgen.models import GenerationResult, GeneratorConfig
from clientgen.utils import sha256_hex


def _result(**files: str) -> GenerationResult:
    generated = GenerationResult(entity_count=1)
    for path, content in files.items():
        generated.add_file(path, content)
    return generated


class TestExport:
    def test_writes_files_and_manifest(self, config: GeneratorConfig, tmp_path: pathlib.Path) -> None:
        generated = GenerationResult(entity_count=3)
        generated.add_file("index.d.ts", "export type A = {}\n")
        generated.add_file("index.js", "exports.a = 1\n")

        result = ClientExporter(config, tmp_path / "out").export(generated)

        assert result.success, result.errors
        out = tmp_path / "out"
        assert (out / "index.d.ts").read_text(encoding="utf-8") == "export type A = {}\n"
        assert (out / "index.js").read_text(encoding="utf-8") == "exports.a = 1\n"

        manifest = json.loads((out / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        assert manifest["client_name"] == "BlogClient"
        assert manifest["generator_version"] == __version__
        assert manifest["total_files"] == 2
        assert [f["relative_path"] for f in manifest["files"]] == ["index.d.ts", "index.js"]
        assert manifest["files"][1]["sha256"] == sha256_hex("exports.a = 1\n")
        assert result.manifest.total_bytes == len("export type A = {}\n") + len("exports.a = 1\n")

    def test_rerun_is_idempotent(self, config: GeneratorConfig, tmp_path: pathlib.Path) -> None:
        generated = _result(**{"index.d.ts": "x"})
        first = ClientExporter(config, tmp_path).export(generated)
        second = ClientExporter(config, tmp_path).export(generated)
        assert first.success and second.success
        assert first.manifest.files == second.manifest.files
        assert (tmp_path / "index.d.ts").read_text(encoding="utf-8") == "x"

    def test_overwrites_previous_output(self, config: GeneratorConfig, tmp_path: pathlib.Path) -> None:
        (tmp_path / "index.d.ts").write_text("stale", encoding="utf-8")
        ClientExporter(config, tmp_path).export(_result(**{"index.d.ts": "fresh"}))
        assert (tmp_path / "index.d.ts").read_text(encoding="utf-8") == "fresh"

    def test_without_manifest(self, config: GeneratorConfig, tmp_path: pathlib.Path) -> None:
        result = ClientExporter(config, tmp_path, generate_manifest=False).export(
            _result(**{"index.d.ts": "x"})
        )
        assert result.success
        assert not (tmp_path / MANIFEST_FILENAME).exists()

    def test_staging_failure_writes_nothing(self, config: GeneratorConfig, tmp_path: pathlib.Path) -> None:
        # A regular file where a directory is needed makes the second file fail to stage.
        (tmp_path / "sub").write_text("not a directory", encoding="utf-8")
        generated = _result(**{"index.d.ts": "a"})
        generated.add_file("sub/index.js", "b")

        result = ClientExporter(config, tmp_path).export(generated)

        assert not result.success
        assert result.errors[0].startswith("Fatal export error:")
        assert result.manifest.total_files == 0
        assert sorted(p.name for p in tmp_path.iterdir()) == ["sub"]
        assert not list(tmp_path.glob("*.tmp"))
        assert not list(tmp_path.glob(".*"))

    def test_move_failure_leaves_no_temp_files(self, config: GeneratorConfig, tmp_path: pathlib.Path) -> None:
        # A directory sitting at the second target makes its rename fail after staging.
        out = tmp_path / "out"
        (out / "index.js").mkdir(parents=True)

        result = ClientExporter(config, out).export(
            _result(**{"index.d.ts": "a", "index.js": "b"})
        )

        assert not result.success
        assert result.errors[0].startswith("Fatal export error:")
        assert result.manifest.total_files == 1
        assert (out / "index.d.ts").read_text(encoding="utf-8") == "a"
        assert (out / "index.js").is_dir()
        assert not list(out.glob(".*.tmp"))
