"""
tests/test_arguments.py
Unit tests for the per-action argument types.
"""

from __future__ import annotations

from typing import Dict, List

import pytest

from clientgen.arguments import (
    ArgsDeclaration,
    build_args_declaration,
    build_entity_args,
    describe_argument,
)
from clientgen.naming import BULK_ACTIONS, ModelAction
from clientgen.schema_index import SchemaIndex
from clientgen.validators import SchemaInconsistencyError


def _by_name(declarations: List[ArgsDeclaration]) -> Dict[str, ArgsDeclaration]:
    return {d.name: d for d in declarations}


class TestMemberOrder:
    def test_select_include_then_declared(self, index: SchemaIndex) -> None:
        decls = _by_name(build_entity_args(index, index.entity("User")))
        assert decls["FindManyUserArgs"].arg_names == (
            "select",
            "include",
            "where",
            "orderBy",
            "skip",
            "cursor",
            "take",
        )
        assert decls["UserUpsertArgs"].arg_names == (
            "select",
            "include",
            "where",
            "create",
            "update",
        )

    def test_no_include_without_relations(self, minimal_index: SchemaIndex) -> None:
        decls = _by_name(build_entity_args(minimal_index, minimal_index.entity("Tag")))
        assert decls["FindManyTagArgs"].arg_names == ("select", "take")
        assert decls["TagArgs"].arg_names == ("select",)

    @pytest.mark.parametrize("action", BULK_ACTIONS)
    def test_bulk_actions_carry_declared_args_only(
        self, index: SchemaIndex, action: ModelAction
    ) -> None:
        decls = {d.action: d for d in build_entity_args(index, index.entity("User"))}
        assert "select" not in decls[action].arg_names
        assert "include" not in decls[action].arg_names
        assert "where" in decls[action].arg_names


class TestEntityArgs:
    def test_mapped_actions_in_order_then_bare(self, index: SchemaIndex) -> None:
        names = [d.name for d in build_entity_args(index, index.entity("Team"))]
        assert names == [
            "FindOneTeamArgs",
            "FindManyTeamArgs",
            "TeamCreateArgs",
            "TeamUpdateArgs",
            "TeamArgs",
        ]

    def test_bare_args_always_present(self, index: SchemaIndex) -> None:
        for entity in index.entities:
            names = [d.name for d in build_entity_args(index, entity)]
            assert names[-1] == f"{entity.name}Args"

    def test_aggregate_without_declared_args(self, index: SchemaIndex) -> None:
        decls = _by_name(build_entity_args(index, index.entity("User")))
        assert decls["AggregateUserArgs"].arg_names == ("select", "include")

    def test_source_args_are_not_mutated(self, index: SchemaIndex) -> None:
        root = index.root_field("User", ModelAction.FIND_MANY)
        assert root is not None
        build_entity_args(index, index.entity("User"))
        assert all(a.comment is None for a in root.args)

    def test_mapped_action_without_root_field(self, index: SchemaIndex) -> None:
        class _NoRootFields(SchemaIndex):
            def root_field(self, entity_name, action):
                return None

        stripped = _NoRootFields(index.document)
        with pytest.raises(SchemaInconsistencyError, match="findOne"):
            build_entity_args(stripped, stripped.entity("Team"))


class TestDescriptions:
    def test_known_pairs(self) -> None:
        assert describe_argument("User", ModelAction.FIND_MANY, "where") == (
            "Filter, which Users to fetch."
        )
        assert describe_argument("Category", ModelAction.FIND_MANY, "skip") == (
            "Skip the first `n` Categories."
        )
        assert describe_argument("User", ModelAction.CREATE, "data") == (
            "The data needed to create a User."
        )

    def test_unknown_pairs(self) -> None:
        assert describe_argument("User", ModelAction.FIND_MANY, "distinct") is None
        assert describe_argument("User", ModelAction.DELETE_MANY, "where") is None
        assert describe_argument("User", None, "where") is None

    def test_descriptions_render_as_comments(self, index: SchemaIndex) -> None:
        decls = _by_name(build_entity_args(index, index.entity("User")))
        text = decls["FindOneUserArgs"].to_ts()
        assert text == (
            "/**\n * User findOne\n**/\n"
            "export type FindOneUserArgs = {\n"
            "  /**\n"
            "   * Select specific fields to fetch from the User\n"
            "  **/\n"
            "  select?: UserSelect | null\n"
            "  /**\n"
            "   * Choose, which related nodes to fetch as well.\n"
            "  **/\n"
            "  include?: UserInclude | null\n"
            "  /**\n"
            "   * Filter, which User to fetch.\n"
            "  **/\n"
            "  where: UserWhereUniqueInput\n"
            "}\n"
        )

    def test_bare_args_label(self, index: SchemaIndex) -> None:
        decl = build_args_declaration(index.entity("Post"), None, [])
        assert decl.to_ts().startswith("/**\n * Post without action\n**/\nexport type PostArgs = {")
