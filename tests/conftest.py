"""
tests/conftest.py
Shared fixtures for the clientgen test suite.

The reference document is ``schema_example.yaml`` in the project root: a
small blog with ``User``, ``Post`` and ``Team`` (bidirectional relations,
one optional relation, one enum, a mapping without ``delete``).

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import json
import logging
import pathlib
from typing import Any, Dict, Iterator, Tuple

import pytest
import yaml

from clientgen.generator import ClientDocument, parse_raw_document
from clientgen.models import GeneratorConfig, SchemaDocument
from clientgen.schema_index import SchemaIndex


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_clientgen_logger() -> Iterator[None]:
    """The CLI reconfigures the ``clientgen`` logger; undo it after each test."""
    yield
    root_logger = logging.getLogger("clientgen")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference schema not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


@pytest.fixture()
def schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the schema dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(schema_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def schema_json_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the schema dict to a temporary JSON file and return its path."""
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(schema_dict, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parsed model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def parsed(schema_dict: Dict[str, Any]) -> Tuple[SchemaDocument, GeneratorConfig]:
    return parse_raw_document(schema_dict)


@pytest.fixture()
def document(parsed: Tuple[SchemaDocument, GeneratorConfig]) -> SchemaDocument:
    return parsed[0]


@pytest.fixture()
def config(parsed: Tuple[SchemaDocument, GeneratorConfig]) -> GeneratorConfig:
    return parsed[1]


@pytest.fixture()
def index(document: SchemaDocument) -> SchemaIndex:
    return SchemaIndex(document)


@pytest.fixture()
def client_document(document: SchemaDocument, config: GeneratorConfig) -> ClientDocument:
    return ClientDocument(document, config)


@pytest.fixture(scope="session")
def rendered_ts(raw_schema_dict: Dict[str, Any]) -> str:
    """The declaration document of the reference schema, rendered once."""
    document, config = parse_raw_document(copy.deepcopy(raw_schema_dict))
    return ClientDocument(document, config).to_ts()


# ---------------------------------------------------------------------------
# Minimal / edge-case schema fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_schema_dict() -> Dict[str, Any]:
    """Smallest useful document: one entity, no relations, only ``findMany`` mapped."""
    return {
        "datamodel": {
            "models": [
                {
                    "name": "Tag",
                    "fields": [
                        {"name": "id", "kind": "scalar", "type": "Int", "isId": True},
                        {"name": "label", "kind": "scalar", "type": "String"},
                    ],
                }
            ]
        },
        "schema": {
            "outputTypes": [
                {
                    "name": "Tag",
                    "fields": [
                        {"name": "id", "outputType": {"type": "Int"}},
                        {"name": "label", "outputType": {"type": "String"}},
                    ],
                },
                {
                    "name": "Query",
                    "fields": [
                        {
                            "name": "findManyTag",
                            "outputType": {"type": "Tag", "kind": "object", "isList": True},
                            "args": [{"name": "take", "inputType": {"type": "Int"}}],
                        }
                    ],
                },
            ]
        },
        "mappings": [{"model": "Tag", "plural": "tags", "findMany": "findManyTag"}],
    }


@pytest.fixture()
def minimal_document(minimal_schema_dict: Dict[str, Any]) -> SchemaDocument:
    return SchemaDocument.model_validate(minimal_schema_dict)


@pytest.fixture()
def minimal_index(minimal_document: SchemaDocument) -> SchemaIndex:
    return SchemaIndex(minimal_document)
