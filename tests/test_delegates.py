"""
tests/test_delegates.py
Unit tests for delegate interfaces, entity client classes and the root
client class.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from clientgen.delegates import (
    DELEGATE_ACTIONS,
    build_delegate,
    method_doc,
    relation_accessors,
    render_datasources,
    render_entity_client,
    render_root_client,
)
from clientgen.models import GeneratorConfig, SchemaDocument
from clientgen.naming import ModelAction
from clientgen.schema_index import SchemaIndex
from clientgen.validators import SchemaInconsistencyError


class TestDelegateMethods:
    def test_full_mapping_has_every_method_but_aggregate(self, index: SchemaIndex) -> None:
        delegate = build_delegate(index, index.entity("User"))
        assert delegate is not None
        assert delegate.action_names == (
            "findOne",
            "findMany",
            "create",
            "update",
            "updateMany",
            "upsert",
            "delete",
            "deleteMany",
            "count",
        )
        assert ModelAction.AGGREGATE not in DELEGATE_ACTIONS

    def test_unmapped_action_is_absent(self, index: SchemaIndex) -> None:
        delegate = build_delegate(index, index.entity("Team"))
        assert delegate is not None
        assert delegate.action_names == ("findOne", "findMany", "create", "update", "count")
        text = delegate.to_ts()
        assert "delete<" not in text
        assert "deleteMany<" not in text
        assert "TeamDeleteArgs" not in text

    def test_find_many_args_are_optional(self, index: SchemaIndex) -> None:
        text = build_delegate(index, index.entity("User")).to_ts()  # type: ignore[union-attr]
        assert "findMany<T extends FindManyUserArgs>(\n    args?: Subset<T, FindManyUserArgs>\n" in text
        assert "findOne<T extends FindOneUserArgs>(\n    args: Subset<T, FindOneUserArgs>\n" in text

    def test_return_types(self, index: SchemaIndex) -> None:
        delegate = build_delegate(index, index.entity("User"))
        assert delegate is not None
        returns = {m.action: m.return_type for m in delegate.methods}
        assert returns[ModelAction.DELETE_MANY] == "Promise<BatchPayload>"
        assert returns[ModelAction.FIND_ONE].startswith("CheckSelect<T, UserClient<User | null>")

    def test_count_uses_find_many_args(self, index: SchemaIndex) -> None:
        delegate = build_delegate(index, index.entity("Post"))
        assert delegate is not None
        assert delegate.count_args_name == "FindManyPostArgs"
        assert (
            "count(args?: Omit<FindManyPostArgs, 'select' | 'include'>): Promise<number>"
            in delegate.to_ts()
        )

    def test_count_falls_back_to_bare_args(self, schema_dict: Dict[str, Any]) -> None:
        raw = copy.deepcopy(schema_dict)
        raw.pop("generator")
        raw["mappings"][2].pop("findMany")
        index = SchemaIndex(SchemaDocument.model_validate(raw))
        delegate = build_delegate(index, index.entity("Team"))
        assert delegate is not None
        assert delegate.count_args_name == "TeamArgs"

    def test_no_mapping_no_delegate(self, schema_dict: Dict[str, Any]) -> None:
        raw = copy.deepcopy(schema_dict)
        raw.pop("generator")
        raw["mappings"] = [m for m in raw["mappings"] if m["model"] != "Team"]
        index = SchemaIndex(SchemaDocument.model_validate(raw))
        assert build_delegate(index, index.entity("Team")) is None

    def test_dangling_mapping_raises(self, schema_dict: Dict[str, Any]) -> None:
        raw = copy.deepcopy(schema_dict)
        raw.pop("generator")
        raw["mappings"][1]["delete"] = "removePost"
        index = SchemaIndex(SchemaDocument.model_validate(raw))
        with pytest.raises(SchemaInconsistencyError, match="removePost"):
            build_delegate(index, index.entity("Post"))


class TestMethodDocs:
    def test_find_many_mentions_first_scalar(self, document: SchemaDocument) -> None:
        user = document.datamodel.models[0]
        text = method_doc(ModelAction.FIND_MANY, document.mappings[0], user)
        assert text.startswith("Find zero or more Users.")
        assert "@param {FindManyUserArgs=} args" in text
        assert "const userWithIdOnly = await client.user.findMany({ select: { id: true } })" in text
        assert not text.endswith("\n")

    def test_upsert_doc(self, document: SchemaDocument) -> None:
        user = document.datamodel.models[0]
        text = method_doc(ModelAction.UPSERT, document.mappings[0], user)
        assert "const user = await client.user.upsert({" in text


class TestEntityClient:
    def test_relation_accessors(self, index: SchemaIndex) -> None:
        assert relation_accessors(index.output_type("User")) == [
            "posts<T extends FindManyPostArgs = {}>(args?: Subset<T, FindManyPostArgs>): "
            "CheckSelect<T, Promise<Array<Post>>, Promise<Array<PostGetPayload<T>>>>;",
            "team<T extends TeamArgs = {}>(args?: Subset<T, TeamArgs>): "
            "CheckSelect<T, TeamClient<Team | null>, TeamClient<TeamGetPayload<T> | null>>;",
        ]

    def test_required_single_relation_is_not_nullable(self, index: SchemaIndex) -> None:
        (author,) = relation_accessors(index.output_type("Post"))
        assert "UserClient<User>" in author
        assert "null" not in author

    def test_client_class_is_emitted_without_relations(self, minimal_index: SchemaIndex) -> None:
        text = render_entity_client(minimal_index.output_type("Tag"))
        assert text.startswith("export declare class TagClient<T> implements Promise<T> {\n")
        assert "then<TResult1 = T" in text
        assert text.endswith("}\n")


class TestRootClient:
    def test_one_getter_per_find_many_mapping(
        self, index: SchemaIndex, config: GeneratorConfig
    ) -> None:
        text = render_root_client(index, config)
        for name in ("user", "post", "team"):
            assert f"get {name}(): {name.capitalize()}Delegate;" in text
        assert "export declare class BlogClient<T extends BlogClientOptions = {}" in text
        assert "const users = await client.user.findMany()" in text

    def test_mapping_without_find_many_has_no_getter(
        self, schema_dict: Dict[str, Any], config: GeneratorConfig
    ) -> None:
        raw = copy.deepcopy(schema_dict)
        raw.pop("generator")
        raw["mappings"][2].pop("findMany")
        index = SchemaIndex(SchemaDocument.model_validate(raw))
        assert "get team()" not in render_root_client(index, config)

    def test_datasources(self, config: GeneratorConfig) -> None:
        assert render_datasources(config) == "export type Datasources = {\n  db?: string\n}"
        assert render_datasources(GeneratorConfig(datasources=[])) == "export type Datasources = {}"
