# File: clientgen/templates.py
"""
clientgen - Boilerplate Templates
==================================
The fixed parts of both generated documents: runtime imports, version
stamps, utility types, client option types, the batch result shape and the
build-tool annotations of the JS document.

Nothing here depends on the schema, only on ``GeneratorConfig``.  All
string assembly uses the ``List[str]`` + ``"\\n".join()`` pattern and the
methods are stateless.
"""

from __future__ import annotations

import json
import logging
from typing import List, Tuple

from clientgen.models import GeneratorConfig

logger: logging.Logger = logging.getLogger("clientgen.templates")

# Error classes exported by the client runtime.
RUNTIME_ERRORS: Tuple[str, ...] = (
    "KnownRequestError",
    "UnknownRequestError",
    "EnginePanicError",
    "InitializationError",
    "ClientValidationError",
)

# Raw-query helpers re-exported from the runtime's sql tag.
SQL_HELPERS: Tuple[str, ...] = ("sql", "empty", "join", "raw")


class BoilerplateTemplates:
    """Renders the schema-independent sections of both documents."""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config: GeneratorConfig = config

    # ------------------------------------------------------------------
    # TypeScript
    # ------------------------------------------------------------------

    def header_ts(self) -> str:
        cfg = self.config
        lines: List[str] = ["import {", "  DMMF,", "  DMMFClass,", "  Engine,"]
        lines.extend(f"  {name}," for name in RUNTIME_ERRORS)
        lines.extend(["  sqltag as sql,", "  empty,", "  join,", "  raw,"])
        lines.append(f"}} from {json.dumps(cfg.runtime_path)};")
        lines.append("")
        lines.extend(f"export {{ {name} }}" for name in RUNTIME_ERRORS)
        lines.append("")
        lines.append("/**")
        lines.append(" * Re-export of sql-template-tag")
        lines.append(" */")
        lines.append(f"export {{ {', '.join(SQL_HELPERS)} }}")
        lines.append("")
        lines.append("/**")
        lines.append(f" * Client version: {cfg.client_version}")
        lines.append(f" * Query engine version: {cfg.engine_version}")
        lines.append(" */")
        lines.append("export declare type ClientVersion = {")
        lines.append("  client: string")
        lines.append("  engine: string")
        lines.append("}")
        lines.append("")
        lines.append("export declare const clientVersion: ClientVersion")
        lines.append("")
        lines.append(self.utility_types_ts())
        return "\n".join(lines)

    def utility_types_ts(self) -> str:
        lines: List[str] = [
            "/**",
            " * Utility Types",
            " */",
            "",
            "/**",
            " * Matches a JSON object.",
            " */",
            "declare type JsonObject = {[Key in string]?: JsonValue}",
            "",
            "/**",
            " * Matches a JSON array.",
            " */",
            "declare interface JsonArray extends Array<JsonValue> {}",
            "",
            "/**",
            " * Matches any valid JSON value.",
            " */",
            "declare type JsonValue = string | number | boolean | null | Date | JsonObject | JsonArray",
            "",
            "declare type SelectAndInclude = {",
            "  select: any",
            "  include: any",
            "}",
            "",
            "declare type HasSelect = {",
            "  select: any",
            "}",
            "",
            "declare type HasInclude = {",
            "  include: any",
            "}",
            "",
            "declare type CheckSelect<T, S, U> = T extends SelectAndInclude",
            "  ? 'Please either choose `select` or `include`'",
            "  : T extends HasSelect",
            "  ? U",
            "  : T extends HasInclude",
            "  ? U",
            "  : S",
            "",
            "/**",
            " * Get the type of the value, that the Promise holds.",
            " */",
            "export declare type PromiseType<T extends PromiseLike<any>> = "
            "T extends PromiseLike<infer U> ? U : T;",
            "",
            "/**",
            " * Get the return type of a function which returns a Promise.",
            " */",
            "export declare type PromiseReturnType<T extends (...args: any) => Promise<any>> = "
            "PromiseType<ReturnType<T>>",
            "",
            "export declare type Enumerable<T> = T | Array<T>;",
            "",
            "export declare type TrueKeys<T> = {",
            "  [key in keyof T]: T[key] extends false | undefined | null ? never : key",
            "}[keyof T]",
            "",
            "/**",
            " * Subset",
            " * @desc From `T` pick properties that exist in `U`. Simple version of Intersection",
            " */",
            "export declare type Subset<T, U> = {",
            "  [key in keyof T]: key extends keyof U ? T[key] : never;",
            "};",
            "",
            "declare class ClientFetcher {",
            "  private readonly client;",
            "  private readonly debug;",
            "  private readonly hooks?;",
            f"  constructor(client: {self.config.client_name}<any, any>, debug?: boolean, "
            "hooks?: Hooks | undefined);",
            "  request<T>(document: any, dataPath?: string[], rootField?: string, "
            "typeName?: string, isList?: boolean, callsite?: string): Promise<T>;",
            "  sanitizeMessage(message: string): string;",
            "  protected unpack(document: any, data: any, path: string[], "
            "rootField?: string, isList?: boolean): any;",
            "}",
        ]
        return "\n".join(lines)

    def client_options_ts(self) -> str:
        """Option, hook and logging types accepted by the root client."""
        name: str = self.config.client_name
        lines: List[str] = [
            "export type ErrorFormat = 'pretty' | 'colorless' | 'minimal'",
            "",
            f"export interface {name}Options {{",
            "  /**",
            "   * Overwrites the datasource url from your schema file",
            "   */",
            "  datasources?: Datasources",
            "",
            "  /**",
            '   * @default "colorless"',
            "   */",
            "  errorFormat?: ErrorFormat",
            "",
            "  /**",
            "   * @example",
            "   * ```",
            "   * // Defaults to stdout",
            "   * log: ['query', 'info', 'warn']",
            "   *",
            "   * // Emit as events",
            "   * log: [",
            "   *  { emit: 'stdout', level: 'query' },",
            "   *  { emit: 'stdout', level: 'info' },",
            "   *  { emit: 'stdout', level: 'warn' }",
            "   * ]",
            "   * ```",
            "   */",
            "  log?: Array<LogLevel | LogDefinition>",
            "",
            "  /**",
            "   * You probably don't want to use this. `__internal` is used by internal tooling.",
            "   */",
            "  __internal?: {",
            "    debug?: boolean",
            "    hooks?: Hooks",
            "    engine?: {",
            "      cwd?: string",
            "      binaryPath?: string",
            "    }",
            "    measurePerformance?: boolean",
            "  }",
            "}",
            "",
            "export type Hooks = {",
            "  beforeRequest?: (options: {query: string, path: string[], rootField?: string, "
            "typeName?: string, document: any}) => any",
            "}",
            "",
            "/* Types for Logging */",
            "export type LogLevel = 'info' | 'query' | 'warn'",
            "export type LogDefinition = {",
            "  level: LogLevel",
            "  emit: 'stdout' | 'event'",
            "}",
            "",
            "export type GetLogType<T extends LogLevel | LogDefinition> = T extends LogDefinition "
            "? T['emit'] extends 'event' ? T['level'] : never : never",
            "export type GetEvents<T extends Array<LogLevel | LogDefinition>> = "
            "GetLogType<T[0]> | GetLogType<T[1]> | GetLogType<T[2]>",
            "",
            "export type QueryEvent = {",
            "  timestamp: Date",
            "  query: string",
            "  params: string",
            "  duration: number",
            "  target: string",
            "}",
            "",
            "export type LogEvent = {",
            "  timestamp: Date",
            "  message: string",
            "  target: string",
            "}",
            "/* End Types for Logging */",
            "",
            "export declare function getLogLevel(log: Array<LogLevel | LogDefinition>): "
            "LogLevel | undefined;",
        ]
        return "\n".join(lines)

    def batch_payload_ts(self) -> str:
        return "\n".join(
            [
                "/**",
                " * Batch Payload for updateMany & deleteMany",
                " */",
                "",
                "export type BatchPayload = {",
                "  count: number",
                "}",
            ]
        )

    def dmmf_declaration_ts(self) -> str:
        return "\n".join(
            [
                "/**",
                " * DMMF",
                " */",
                "export declare const dmmf: DMMF.Document;",
                "export {};",
                "",
            ]
        )

    # ------------------------------------------------------------------
    # JavaScript
    # ------------------------------------------------------------------

    def header_js(self) -> str:
        cfg = self.config
        client_version: str = json.dumps(cfg.client_version)
        engine_version: str = json.dumps(cfg.engine_version)
        lines: List[str] = [
            'Object.defineProperty(exports, "__esModule", { value: true });',
            "",
            "const {",
        ]
        lines.extend(f"  {name}," for name in RUNTIME_ERRORS)
        lines.extend(["  getClient,", "  debugLib,", "  sqltag"])
        lines.append(f"}} = require({json.dumps(cfg.runtime_path)})")
        lines.append("")
        lines.append("const path = require('path')")
        lines.append(f"const debug = debugLib({json.dumps(cfg.client_name)})")
        lines.append("")
        lines.append(f'debug("Client Version " + {client_version})')
        lines.append(f'debug("Engine Version " + {engine_version})')
        lines.append("")
        lines.append("exports.clientVersion = {")
        lines.append(f"  client: {client_version},")
        lines.append(f"  engine: {engine_version}")
        lines.append("}")
        lines.append("")
        lines.extend(f"exports.{name} = {name};" for name in RUNTIME_ERRORS)
        lines.append("")
        lines.append("/**")
        lines.append(" * Re-export of sql-template-tag")
        lines.append(" */")
        lines.extend(f"exports.{name} = sqltag.{'sqltag' if name == 'sql' else name}" for name in SQL_HELPERS)
        return "\n".join(lines)

    def build_annotations_js(self) -> str:
        """Path references that make bundlers keep the engine binaries."""
        lines: List[str] = [
            "/**",
            " * Build tool annotations",
            " * Keep the engine binaries and the schema file next to the client.",
            "**/",
            "",
        ]
        lines.extend(
            f"path.join(__dirname, {json.dumps('query-engine-' + p)});"
            for p in self.config.platforms
        )
        lines.append("path.join(__dirname, 'schema');")
        return "\n".join(lines)

    def enum_prelude_js(self) -> str:
        return "\n".join(
            [
                "/**",
                " * Enums",
                " */",
                "function makeEnum(x) { return x; }",
            ]
        )

    def bootstrap_js(self, dmmf_string: str, client_config: str) -> str:
        """
        Embed the serialized document and create the client constructor.

        *dmmf_string* is parsed twice so ``dmmf`` and ``exports.dmmf`` are
        independent objects.
        """
        name: str = self.config.client_name
        return "\n".join(
            [
                "/**",
                " * DMMF",
                " */",
                f"const dmmfString = {json.dumps(dmmf_string)}",
                "",
                "const dmmf = JSON.parse(dmmfString)",
                "exports.dmmf = JSON.parse(dmmfString)",
                "",
                "/**",
                " * Create the Client",
                " */",
                "",
                f"const config = {client_config}",
                "config.document = dmmf",
                "config.dirname = __dirname",
                "",
                f"const {name} = getClient(config)",
                f"exports.{name} = {name}",
                "",
            ]
        )


__all__: List[str] = ["BoilerplateTemplates", "RUNTIME_ERRORS", "SQL_HELPERS"]
