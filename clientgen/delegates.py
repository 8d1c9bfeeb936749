# File: clientgen/delegates.py
"""
clientgen - Delegate Emitter
=============================
The public operation surface of the generated client:

``<Entity>Delegate``
    One documented method per mapped action (``aggregate`` excepted) plus
    ``count``.  Unmapped actions are simply absent.

``<Entity>Client<T>``
    The promise-like value every single-entity method returns; one accessor
    per relation field allows chained projections.

root client class
    One getter per entity whose mapping supports ``findMany``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from clientgen.models import ActionMapping, Entity, FieldKind, GeneratorConfig, OutputType
from clientgen.naming import (
    ModelAction,
    check_exhaustive,
    get_client_name,
    get_delegate_name,
    get_field_arg_name,
    get_model_arg_name,
    get_select_return_type,
)
from clientgen.schema_index import SchemaIndex
from clientgen.utils import capitalize, indent, lower_case, wrap_comment

logger: logging.Logger = logging.getLogger("clientgen.delegates")

# Actions that become delegate methods, in method order.
DELEGATE_ACTIONS: Tuple[ModelAction, ...] = tuple(
    a for a in ModelAction if a != ModelAction.AGGREGATE
)

# ---------------------------------------------------------------------------
# Method documentation
# ---------------------------------------------------------------------------

_METHOD_DOCS: Dict[ModelAction, str] = {
    ModelAction.FIND_ONE: """\
Find zero or one {singular}.
@param {{{args_name}}} args - Arguments to find a {singular}
@example
// Get one {singular}
const {var} = await {method}({{
  where: {{
    // ... provide filter here
  }}
}})""",
    ModelAction.FIND_MANY: """\
Find zero or more {plural}.
@param {{{args_name}=}} args - Arguments to filter and select certain fields only.
@example
// Get all {plural}
const {plural_var} = await {method}()

// Get first 10 {plural}
const {plural_var} = await {method}({{ take: 10 }})
{only_select}""",
    ModelAction.CREATE: """\
Create a {singular}.
@param {{{args_name}}} args - Arguments to create a {singular}.
@example
// Create one {singular}
const {var} = await {method}({{
  data: {{
    // ... data to create a {singular}
  }}
}})
""",
    ModelAction.UPDATE: """\
Update one {singular}.
@param {{{args_name}}} args - Arguments to update one {singular}.
@example
// Update one {singular}
const {var} = await {method}({{
  where: {{
    // ... provide filter here
  }},
  data: {{
    // ... provide data here
  }}
}})
""",
    ModelAction.UPDATE_MANY: """\
Update zero or more {plural}.
@param {{{args_name}}} args - Arguments to update one or more rows.
@example
// Update many {plural}
const {{ count }} = await {method}({{
  where: {{
    // ... provide filter here
  }},
  data: {{
    // ... provide data here
  }}
}})
""",
    ModelAction.UPSERT: """\
Create or update one {singular}.
@param {{{args_name}}} args - Arguments to update or create a {singular}.
@example
// Update or create a {singular}
const {var} = await {method}({{
  create: {{
    // ... data to create a {singular}
  }},
  update: {{
    // ... in case it already exists, update
  }},
  where: {{
    // ... the filter for the {singular} we want to update
  }}
}})""",
    ModelAction.DELETE: """\
Delete a {singular}.
@param {{{args_name}}} args - Arguments to delete one {singular}.
@example
// Delete one {singular}
const {var} = await {method}({{
  where: {{
    // ... filter to delete one {singular}
  }}
}})
""",
    ModelAction.DELETE_MANY: """\
Delete zero or more {plural}.
@param {{{args_name}}} args - Arguments to filter {plural} to delete.
@example
// Delete a few {plural}
const {{ count }} = await {method}({{
  where: {{
    // ... provide filter here
  }}
}})
""",
}

check_exhaustive(_METHOD_DOCS, "_METHOD_DOCS", DELEGATE_ACTIONS)


def method_doc(action: ModelAction, mapping: ActionMapping, entity: Entity) -> str:
    """Usage documentation of one delegate method (without comment markers)."""
    singular: str = capitalize(mapping.model)
    plural: str = capitalize(mapping.plural)
    method: str = f"client.{lower_case(mapping.model)}.{action.value}"

    only_select: str = ""
    first_scalar = next((f for f in entity.fields if f.kind == FieldKind.SCALAR), None)
    if first_scalar is not None:
        only_select = (
            f"\n// Only select the `{first_scalar.name}`\n"
            f"const {lower_case(mapping.model)}With{capitalize(first_scalar.name)}Only = "
            f"await {method}({{ select: {{ {first_scalar.name}: true }} }})\n"
        )

    text: str = _METHOD_DOCS[action].format(
        singular=singular,
        plural=plural,
        args_name=get_model_arg_name(entity.name, action),
        method=method,
        var=lower_case(mapping.model),
        plural_var=lower_case(mapping.plural),
        only_select=only_select,
    )
    return text.rstrip("\n")


# ---------------------------------------------------------------------------
# Delegate interface
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DelegateMethod:
    action: ModelAction
    args_name: str
    args_optional: bool
    return_type: str
    doc: str

    def render(self) -> str:
        mark: str = "?" if self.args_optional else ""
        return (
            f"{wrap_comment(self.doc)}\n"
            f"{self.action.value}<T extends {self.args_name}>(\n"
            f"  args{mark}: Subset<T, {self.args_name}>\n"
            f"): {self.return_type}"
        )


@dataclass(frozen=True, slots=True)
class DelegateDeclaration:
    entity: str
    methods: Tuple[DelegateMethod, ...]
    count_args_name: str

    @property
    def name(self) -> str:
        return get_delegate_name(self.entity)

    @property
    def action_names(self) -> Tuple[str, ...]:
        """Method names in emission order, ``count`` included."""
        return tuple(m.action.value for m in self.methods) + ("count",)

    def to_ts(self) -> str:
        body: List[str] = [m.render() for m in self.methods]
        body.append(
            "/**\n"
            f" * Count the number of {self.entity} records matching the filter.\n"
            "**/\n"
            f"count(args?: Omit<{self.count_args_name}, 'select' | 'include'>): Promise<number>"
        )
        members: str = "\n".join(body)
        return f"export interface {self.name} {{\n{indent(members)}\n}}\n"


def build_delegate(index: SchemaIndex, entity: Entity) -> Optional[DelegateDeclaration]:
    """
    The delegate of *entity*, or ``None`` when it has no mapped action.
    """
    mapping: Optional[ActionMapping] = index.mapping(entity.name)
    if mapping is None or not mapping.mapped_actions():
        return None

    methods: List[DelegateMethod] = []
    for action in DELEGATE_ACTIONS:
        if not mapping.field_for(action):
            continue
        # Resolving the root field surfaces a dangling mapping here too.
        index.root_field(entity.name, action)
        args_name: str = get_model_arg_name(entity.name, action)
        methods.append(
            DelegateMethod(
                action=action,
                args_name=args_name,
                args_optional=action == ModelAction.FIND_MANY,
                return_type=get_select_return_type(entity.name, action),
                doc=method_doc(action, mapping, entity),
            )
        )

    if mapping.find_many:
        count_args: str = get_model_arg_name(entity.name, ModelAction.FIND_MANY)
    else:
        count_args = get_model_arg_name(entity.name)

    logger.debug("Delegate '%s': %d method(s).", entity.name, len(methods))
    return DelegateDeclaration(entity.name, tuple(methods), count_args)


# ---------------------------------------------------------------------------
# Entity client class
# ---------------------------------------------------------------------------

_PROMISE_METHODS: str = """\
/**
 * Attaches callbacks for the resolution and/or rejection of the Promise.
 * @param onfulfilled The callback to execute when the Promise is resolved.
 * @param onrejected The callback to execute when the Promise is rejected.
 * @returns A Promise for the completion of which ever callback is executed.
 */
then<TResult1 = T, TResult2 = never>(onfulfilled?: ((value: T) => TResult1 | Promise<TResult1>) | undefined | null, onrejected?: ((reason: any) => TResult2 | Promise<TResult2>) | undefined | null): Promise<TResult1 | TResult2>;
/**
 * Attaches a callback for only the rejection of the Promise.
 * @param onrejected The callback to execute when the Promise is rejected.
 * @returns A Promise for the completion of the callback.
 */
catch<TResult = never>(onrejected?: ((reason: any) => TResult | Promise<TResult>) | undefined | null): Promise<T | TResult>;
/**
 * Attaches a callback that is invoked when the Promise is settled (fulfilled or rejected). The
 * resolved value cannot be modified from the callback.
 * @param onfinally The callback to execute when the Promise is settled (fulfilled or rejected).
 * @returns A Promise for the completion of the callback.
 */
finally(onfinally?: (() => void) | undefined | null): Promise<T>;"""

_CLIENT_MEMBERS: str = """\
private readonly _dmmf;
private readonly _fetcher;
private readonly _queryType;
private readonly _rootField;
private readonly _clientMethod;
private readonly _args;
private readonly _dataPath;
private readonly _errorFormat;
private readonly _measurePerformance?;
private _isList;
private _callsite;
private _requestPromise?;
constructor(_dmmf: DMMFClass, _fetcher: ClientFetcher, _queryType: 'query' | 'mutation', _rootField: string, _clientMethod: string, _args: any, _dataPath: string[], _errorFormat: ErrorFormat, _measurePerformance?: boolean | undefined, _isList?: boolean);
readonly [Symbol.toStringTag]: 'ClientPromise';"""


def relation_accessors(output_type: OutputType) -> List[str]:
    """One chained-projection accessor per relation field."""
    accessors: List[str] = []
    for f in output_type.relation_fields:
        arg_name: str = get_field_arg_name(f)
        if f.output_type.is_list:
            return_type: str = get_select_return_type(f.output_type.type, ModelAction.FIND_MANY)
        else:
            return_type = get_select_return_type(
                f.output_type.type,
                ModelAction.FIND_ONE,
                nullable=not f.output_type.is_required,
            )
        accessors.append(
            f"{f.name}<T extends {arg_name} = {{}}>(args?: Subset<T, {arg_name}>): {return_type};"
        )
    return accessors


def render_entity_client(output_type: OutputType) -> str:
    name: str = get_client_name(output_type.name)
    body: List[str] = [_CLIENT_MEMBERS]
    body.extend(relation_accessors(output_type))
    body.append("private get _document();")
    body.append(_PROMISE_METHODS)
    members: str = "\n".join(body)
    return (
        f"export declare class {name}<T> implements Promise<T> {{\n"
        f"{indent(members)}\n"
        "}\n"
    )


# ---------------------------------------------------------------------------
# Root client class
# ---------------------------------------------------------------------------


def render_datasources(config: GeneratorConfig) -> str:
    members: str = "\n".join(f"{name}?: string" for name in config.datasources)
    if not members:
        return "export type Datasources = {}"
    return f"export type Datasources = {{\n{indent(members)}\n}}"


def _client_getter(mapping: ActionMapping) -> str:
    method: str = lower_case(mapping.model)
    return (
        "/**\n"
        f" * `client.{method}`: Exposes CRUD operations for the **{mapping.model}** model.\n"
        " * Example usage:\n"
        " * ```ts\n"
        f" * // Fetch zero or more {capitalize(mapping.plural)}\n"
        f" * const {lower_case(mapping.plural)} = await client.{method}.findMany()\n"
        " * ```\n"
        " */\n"
        f"get {method}(): {get_delegate_name(mapping.model)};"
    )


def render_root_client(index: SchemaIndex, config: GeneratorConfig) -> str:
    """The root client class with one getter per entity that supports ``findMany``."""
    name: str = config.client_name
    options: str = f"{name}Options"
    getters: List[str] = [_client_getter(m) for m in index.mappings if m.find_many]

    doc: List[str] = ["/**", f" * ##  {name}", " *", " * Type-safe database client."]
    if index.mappings:
        example: ActionMapping = index.mappings[0]
        doc.extend(
            [
                " * @example",
                " * ```",
                f" * const client = new {name}()",
                f" * // Fetch zero or more {capitalize(example.plural)}",
                f" * const {lower_case(example.plural)} = "
                f"await client.{lower_case(example.model)}.findMany()",
                " * ```",
            ]
        )
    doc.append(" */")
    jsdoc: str = "\n".join(doc)

    members: List[str] = [
        "/**\n * @private\n */\nprivate fetcher;",
        "/**\n * @private\n */\nprivate readonly dmmf;",
        "/**\n * @private\n */\nprivate engine: Engine;",
        "/**\n * @private\n */\nprivate errorFormat: ErrorFormat;",
        jsdoc,
        "constructor(optionsArg?: T);",
        "on<V extends U>(eventType: V, callback: V extends never ? never : "
        "(event: V extends 'query' ? QueryEvent : LogEvent) => void): void;",
        "/**\n * Connect with the database\n */\nconnect(): Promise<void>;",
        "/**\n * Disconnect from the database\n */\ndisconnect(): Promise<any>;",
        "/**\n * Makes a raw query\n */\n"
        "raw<T = any>(query: string | TemplateStringsArray, ...values: any[]): Promise<T>;",
    ]
    members.extend(getters)

    header: str = (
        f"export declare class {name}<T extends {options} = {{}}, "
        f"U = keyof T extends 'log' ? T['log'] extends Array<LogLevel | LogDefinition> "
        f"? GetEvents<T['log']> : never : never> {{"
    )
    body: str = "\n".join(members)
    return f"{jsdoc}\n{header}\n{indent(body)}\n}}"


__all__: List[str] = [
    "DELEGATE_ACTIONS",
    "method_doc",
    "DelegateMethod",
    "DelegateDeclaration",
    "build_delegate",
    "relation_accessors",
    "render_entity_client",
    "render_datasources",
    "render_root_client",
]
