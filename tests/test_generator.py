"""
tests/test_generator.py
Tests for document assembly and the generation pipeline.

Tests cover:
- Declaration order and single emission of shared declarations
- Determinism and isolation from the caller's document
- The data-only JS document (enums, embedded schema, bootstrap config)
- Schema loading (YAML / JSON / fallbacks) and config overrides
- ClientGenerator.render / generate / generate_from_file reports
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict

import pytest

from clientgen.generator import (
    ClientDocument,
    ClientGenerator,
    load_schema_file,
    parse_raw_document,
)
from clientgen.models import GeneratorConfig, SchemaDocument
from clientgen.validators import SchemaInconsistencyError


def _embedded_dmmf(js: str) -> Any:
    line = next(l for l in js.splitlines() if l.startswith("const dmmfString = "))
    literal: str = line[len("const dmmfString = ") :]
    return json.loads(json.loads(literal))


# ===========================================================================
# TypeScript document
# ===========================================================================


class TestDeclarationDocument:
    def test_section_order(self, rendered_ts: str) -> None:
        markers = [
            "} from \"./runtime\";",
            "export declare type TrueKeys<T>",
            "export type Datasources = {",
            "export interface BlogClientOptions {",
            "export declare class BlogClient<",
            "export declare const OrderByArg:",
            "export declare const Role:",
            "export type User = {",
            "export type UserSelect = {",
            "export type UserInclude = {",
            "export type UserGetPayload<",
            "export interface UserDelegate {",
            "export declare class UserClient<T>",
            "export type FindOneUserArgs = {",
            "export type Post = {",
            "export type Team = {",
            "export type UserWhereUniqueInput = {",
            "export type BatchPayload = {",
            "export declare const dmmf: DMMF.Document;",
        ]
        positions = [rendered_ts.index(m) for m in markers]
        assert positions == sorted(positions)

    def test_shared_enum_declared_once(self, rendered_ts: str) -> None:
        assert rendered_ts.count("export declare const Role:") == 1
        assert rendered_ts.count("export declare type Role =") == 1

    def test_every_entity_gets_its_declarations(self, rendered_ts: str) -> None:
        for name in ("User", "Post", "Team"):
            assert f"export type {name}GetPayload<" in rendered_ts
            assert f"export declare class {name}Client<T>" in rendered_ts
            assert f"export type {name}Args = {{" in rendered_ts

    def test_unmapped_actions_leave_no_trace(self, rendered_ts: str) -> None:
        assert "TeamDeleteArgs" not in rendered_ts
        assert "PostUpsertArgs" not in rendered_ts
        assert "export type AggregateUserArgs = {" in rendered_ts

    def test_entity_documentation(self, rendered_ts: str) -> None:
        assert "/**\n * Model User\n * A registered author.\n**/\nexport type User = {" in rendered_ts
        assert "/**\n * Model Team\n**/\nexport type Team = {" in rendered_ts

    def test_documentation_cannot_close_the_comment(self, schema_dict: Dict[str, Any]) -> None:
        schema_dict["datamodel"]["models"][0]["documentation"] = "Matches src/*/users."
        document, config = parse_raw_document(schema_dict)
        ts = ClientDocument(document, config).to_ts()
        assert " * Matches src/*\\/users.\n**/\nexport type User = {" in ts
        assert "src/*/users" not in ts

    def test_header_uses_config(self, rendered_ts: str) -> None:
        assert " * Client version: 1.0.0" in rendered_ts
        assert " * Query engine version: e1a2b3c" in rendered_ts
        assert "constructor(client: BlogClient<any, any>" in rendered_ts

    def test_ends_with_module_marker(self, rendered_ts: str) -> None:
        assert rendered_ts.endswith("export {};\n")


class TestDeterminism:
    def test_equal_inputs_give_identical_bytes(
        self, document: SchemaDocument, config: GeneratorConfig
    ) -> None:
        first = ClientDocument(document, config)
        second = ClientDocument(document, config)
        assert first.to_ts() == second.to_ts()
        assert first.to_js() == second.to_js()

    def test_caller_document_is_not_mutated(
        self, document: SchemaDocument, config: GeneratorConfig
    ) -> None:
        before = document.model_dump()
        client = ClientDocument(document, config)
        client.to_ts()
        client.to_js()
        assert document.model_dump() == before
        assert client.document is not document


# ===========================================================================
# JavaScript document
# ===========================================================================


class TestDataDocument:
    def test_runtime_enums(self, client_document: ClientDocument) -> None:
        js = client_document.to_js()
        assert "function makeEnum(x) { return x; }" in js
        assert 'exports.Role = makeEnum({\n  ADMIN: "ADMIN",\n  USER: "USER"\n});' in js
        assert js.count("exports.Role = ") == 1

    def test_build_annotations(self, client_document: ClientDocument) -> None:
        js = client_document.to_js()
        assert 'path.join(__dirname, "query-engine-native");' in js
        assert "path.join(__dirname, 'schema');" in js

    def test_bootstrap(self, client_document: ClientDocument) -> None:
        js = client_document.to_js()
        assert 'require("./runtime")' in js
        assert "const BlogClient = getClient(config)" in js
        assert "exports.BlogClient = BlogClient" in js
        assert '"clientName": "BlogClient"' in js

    def test_embedded_schema_round_trips(self, client_document: ClientDocument) -> None:
        parsed = _embedded_dmmf(client_document.to_js())
        assert parsed == client_document.document.model_dump(by_alias=True, mode="json")
        assert "schema" in parsed
        assert parsed["datamodel"]["models"][0]["name"] == "User"

    def test_embedded_schema_keeps_newlines(self, schema_dict: Dict[str, Any]) -> None:
        raw = copy.deepcopy(schema_dict)
        raw["datamodel"]["models"][0]["documentation"] = 'Line one.\nLine "two".'
        document, config = parse_raw_document(raw)
        parsed = _embedded_dmmf(ClientDocument(document, config).to_js())
        assert parsed["datamodel"]["models"][0]["documentation"] == 'Line one.\nLine "two".'

    def test_client_config_relative_path(self, document: SchemaDocument, tmp_path: pathlib.Path) -> None:
        config = GeneratorConfig(
            schema_dir=str(tmp_path),
            output_dir=str(tmp_path / "generated"),
            datasources=["db", "replica"],
        )
        cfg = ClientDocument(document, config).client_config()
        assert cfg["relativePath"] == ".."
        assert cfg["internalDatasources"] == [{"name": "db"}, {"name": "replica"}]


# ===========================================================================
# Schema loading
# ===========================================================================


class TestLoadSchemaFile:
    def test_yaml_and_json_agree(
        self, schema_yaml_path: pathlib.Path, schema_json_path: pathlib.Path
    ) -> None:
        assert load_schema_file(schema_yaml_path) == load_schema_file(schema_json_path)

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_schema_file(tmp_path / "absent.yaml")

    def test_directory_is_rejected(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            load_schema_file(tmp_path)

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_schema_file(path)

    def test_top_level_must_be_a_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_schema_file(path)

    def test_unknown_extension_falls_back_to_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.txt"
        path.write_text("mappings: []\n", encoding="utf-8")
        assert load_schema_file(path) == {"mappings": []}


class TestParseRawDocument:
    def test_overrides_win(self, schema_dict: Dict[str, Any]) -> None:
        _, config = parse_raw_document(schema_dict, {"client_name": "Other"})
        assert config.client_name == "Other"
        assert config.engine_version == "e1a2b3c"

    def test_defaults_without_config(self, schema_dict: Dict[str, Any]) -> None:
        schema_dict.pop("generator")
        _, config = parse_raw_document(schema_dict)
        assert config == GeneratorConfig()

    def test_nested_document_key(self, schema_dict: Dict[str, Any]) -> None:
        generator = schema_dict.pop("generator")
        document, config = parse_raw_document({"config": generator, "document": schema_dict})
        assert document.entity_names == ["User", "Post", "Team"]
        assert config.client_name == "BlogClient"

    def test_invalid_document(self, schema_dict: Dict[str, Any]) -> None:
        schema_dict["mappings"].append({"model": "Comment", "plural": "comments"})
        with pytest.raises(ValueError, match="Schema validation failed"):
            parse_raw_document(schema_dict)

    def test_nameless_enum_value(self, schema_dict: Dict[str, Any]) -> None:
        schema_dict["datamodel"]["enums"][0]["values"].append({"dbName": None})
        with pytest.raises(ValueError, match="Schema validation failed"):
            parse_raw_document(schema_dict)

    def test_invalid_config(self, schema_dict: Dict[str, Any]) -> None:
        with pytest.raises(ValueError, match="Config validation failed"):
            parse_raw_document(schema_dict, {"client_name": "not valid"})


# ===========================================================================
# Pipeline
# ===========================================================================


class TestClientGenerator:
    def test_render_both_documents(self, document: SchemaDocument, config: GeneratorConfig) -> None:
        result = ClientGenerator().render(document, config)
        assert [f.path for f in result.files] == ["index.d.ts", "index.js"]
        assert result.entity_count == 3
        assert result.finished_at is not None

    def test_render_without_js(self, document: SchemaDocument, config: GeneratorConfig) -> None:
        config = config.model_copy(update={"emit_js": False})
        result = ClientGenerator().render(document, config)
        assert [f.path for f in result.files] == ["index.d.ts"]

    def test_render_rejects_collisions(self, schema_dict: Dict[str, Any]) -> None:
        schema_dict["datamodel"]["enums"].append({"name": "PostSelect", "values": ["A"]})
        document, config = parse_raw_document(schema_dict)
        with pytest.raises(SchemaInconsistencyError, match="PostSelect"):
            ClientGenerator().render(document, config)

    def test_dry_run_writes_nothing(self, schema_yaml_path: pathlib.Path) -> None:
        report = ClientGenerator().generate_from_file(schema_yaml_path)
        assert report.success, report.summary()
        assert report.output_directory == ""
        assert report.total_files == 2
        assert report.result is not None
        assert report.result.get("index.d.ts") is not None
        assert sorted(p.name for p in schema_yaml_path.parent.iterdir()) == ["schema.yaml"]

    def test_generate_writes_files(self, schema_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "generated"
        report = ClientGenerator().generate_from_file(schema_yaml_path, out)
        assert report.success, report.summary()
        assert sorted(p.name for p in out.iterdir()) == ["index.d.ts", "index.js", "manifest.json"]
        assert report.manifest is not None and report.manifest.total_files == 2
        assert '"relativePath": ".."' in (out / "index.js").read_text(encoding="utf-8")

    def test_summary(self, schema_yaml_path: pathlib.Path) -> None:
        summary = ClientGenerator().generate_from_file(schema_yaml_path).summary()
        assert "SUCCESS" in summary
        assert "BlogClient" in summary
        assert "Render Documents" in summary

    def test_missing_file_is_an_input_error(self, tmp_path: pathlib.Path) -> None:
        report = ClientGenerator().generate_from_file(tmp_path / "absent.yaml")
        assert not report.success
        assert len(report.input_errors) == 1
        assert report.result is None

    def test_validation_errors_stop_the_pipeline(
        self, schema_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        schema_dict["mappings"][1]["delete"] = "removePost"
        document, config = parse_raw_document(schema_dict)
        report = ClientGenerator().generate(document, config, tmp_path / "out")
        assert not report.success
        assert any("MAPPING_FIELD_MISSING" in e for e in report.validation_errors)
        assert report.result is None
        assert not (tmp_path / "out").exists()

    def test_fail_on_warnings(self, schema_dict: Dict[str, Any]) -> None:
        schema_dict["mappings"].append(copy.deepcopy(schema_dict["mappings"][0]))
        document, config = parse_raw_document(schema_dict)
        assert ClientGenerator().generate(document, config).success
        strict = ClientGenerator(fail_on_warnings=True).generate(document, config)
        assert not strict.success
        assert strict.validation_warnings
        assert strict.result is None
