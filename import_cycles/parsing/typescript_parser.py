"""tree-sitter adapter producing ParsedFile objects for TypeScript sources."""

from __future__ import annotations

import logging
import re
import threading

from import_cycles.errors import SourceParseError
from import_cycles.models import (
    ClassProperty,
    Declaration,
    DeclarationKind,
    FunctionScope,
    ImportSpecifier,
    ImportStatement,
    LocalVariable,
    ParsedFile,
    SourceFile,
    Span,
)
from import_cycles.parsing.language_map import grammar_for

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

logger = logging.getLogger(__name__)

_CLASS_TYPES = {"class_declaration", "abstract_class_declaration"}
_FUNCTION_TYPES = {"function_declaration", "generator_function_declaration"}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}
_FIELD_TYPES = {"public_field_definition", "field_definition"}
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}

# Erased at compile time wherever they appear
_TYPE_POSITION_TYPES = {
    "type_annotation",
    "type_arguments",
    "type_parameters",
    "type_predicate_annotation",
    "asserts_annotation",
    "omitting_type_annotation",
    "opting_type_annotation",
}

_IMPORT_TEXT_RE = re.compile(r"\bimport\b|\bfrom\s*['\"]|\brequire\s*\(")

# Node type -> kind for declarations that carry nothing but a name
_SIMPLE_DECLARATIONS: dict[str, DeclarationKind] = {
    "interface_declaration": DeclarationKind.INTERFACE,
    "type_alias_declaration": DeclarationKind.TYPE_ALIAS,
    # Enums and namespaces exist at runtime
    "enum_declaration": DeclarationKind.VARIABLE,
    "internal_module": DeclarationKind.VARIABLE,
    "module": DeclarationKind.VARIABLE,
}


class TypeScriptParser:
    """Parses TypeScript/TSX into imports and top-level declarations.

    tree-sitter parsers are not safe to share between threads, so one parser
    per grammar is cached per thread.
    """

    def __init__(self):
        self._local = threading.local()

    def parse(self, source: SourceFile) -> ParsedFile:
        grammar_name = grammar_for(source.path.suffix) or "typescript"
        tree = self._get_parser(grammar_name).parse(source.data)
        root = tree.root_node
        if root.has_error:
            broken = _import_errors(root)
            if broken:
                raise SourceParseError(source.path, broken[0].start_point[0] + 1)
            # Newer syntax the grammar lacks: the imports are intact
            logger.warning(
                "%s: syntax error at line %s outside imports, analyzing the rest",
                source.path, _first_error_line(root),
            )

        parsed = ParsedFile(
            path=source.path,
            source=source.data,
            type_spans=_type_spans(root),
        )
        for child in root.named_children:
            self._visit_statement(child, parsed, exported=False)

        logger.debug(
            "parsed %s: %d import(s), %d declaration(s)",
            source.path, len(parsed.imports), len(parsed.declarations),
        )
        return parsed

    def _get_parser(self, grammar_name: str):
        cache = getattr(self._local, "parsers", None)
        if cache is None:
            cache = self._local.parsers = {}
        if grammar_name not in cache:
            cache[grammar_name] = get_parser(grammar_name)
        return cache[grammar_name]

    # ── Statements ────────────────────────────────────────────

    def _visit_statement(self, node, parsed: ParsedFile, exported: bool):
        node_type = node.type
        if node_type == "import_statement":
            stmt = self._parse_import(node, parsed)
            if stmt is not None:
                parsed.imports.append(stmt)
        elif node_type == "export_statement":
            self._visit_export(node, parsed)
        elif node_type in _CLASS_TYPES:
            parsed.declarations.append(self._parse_class(node, exported))
        elif node_type in _FUNCTION_TYPES:
            scope = self._parse_function_scope(node)
            parsed.declarations.append(Declaration(
                name=scope.name or "default",
                kind=DeclarationKind.FUNCTION,
                span=_span(node),
                is_exported=exported,
                scope=scope,
            ))
        elif node_type in _VARIABLE_TYPES:
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                value = declarator.child_by_field_name("value")
                parsed.declarations.append(Declaration(
                    name=_text(declarator.child_by_field_name("name")),
                    kind=DeclarationKind.VARIABLE,
                    span=_span(declarator),
                    is_exported=exported,
                    value_span=_span(value) if value is not None else None,
                ))
        elif node_type in _SIMPLE_DECLARATIONS:
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                parsed.declarations.append(Declaration(
                    name=_text(name_node),
                    kind=_SIMPLE_DECLARATIONS[node_type],
                    span=_span(node),
                    is_exported=exported,
                ))
        elif node_type == "expression_statement":
            # `namespace X {}` is wrapped in an expression statement
            for child in node.named_children:
                if child.type in ("internal_module", "module"):
                    self._visit_statement(child, parsed, exported)

    def _parse_import(self, node, parsed: ParsedFile) -> ImportStatement | None:
        stmt = ImportStatement(
            importing_file=parsed.path,
            module_path="",
            is_type_only=_has_token(node, "type"),
            span=_span(node),
        )

        require = _first_child_of_type(node, "import_require_clause")
        source_node = _source_of(require if require is not None else node)
        if source_node is None:
            return None
        stmt.module_path = _string_value(source_node)

        if require is not None:
            # import x = require("./x")
            stmt.is_namespace_or_default = True
            return stmt

        clause = _first_child_of_type(node, "import_clause")
        if clause is None:
            stmt.is_side_effect = True
            return stmt

        for child in clause.named_children:
            if child.type in ("identifier", "namespace_import"):
                stmt.is_namespace_or_default = True
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type == "import_specifier":
                        stmt.specifiers.append(_specifier(spec))
        return stmt

    def _visit_export(self, node, parsed: ParsedFile):
        source_node = node.child_by_field_name("source")
        clause = _first_child_of_type(node, "export_clause")
        type_only = _has_token(node, "type")

        if source_node is not None:
            # export { a } from "./a" / export * from "./a"
            stmt = ImportStatement(
                importing_file=parsed.path,
                module_path=_string_value(source_node),
                is_type_only=type_only,
                is_reexport=True,
                span=_span(node),
            )
            if clause is not None:
                stmt.specifiers = [
                    _specifier(spec) for spec in clause.named_children
                    if spec.type == "export_specifier"
                ]
            else:
                stmt.is_namespace_or_default = True
                namespace = _first_child_of_type(node, "namespace_export")
                if namespace is not None and namespace.named_children:
                    # export * as ns from "./a"
                    stmt.specifiers = [ImportSpecifier(
                        imported_name="*",
                        local_name=_string_value(namespace.named_children[-1])
                        if namespace.named_children[-1].type == "string"
                        else _text(namespace.named_children[-1]),
                    )]
            parsed.imports.append(stmt)
            return

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._visit_statement(declaration, parsed, exported=True)
            return

        if clause is not None and not type_only:
            # export { a, b as c }
            for spec in clause.named_children:
                if spec.type != "export_specifier" or _has_token(spec, "type"):
                    continue
                local = _text(spec.child_by_field_name("name"))
                alias = spec.child_by_field_name("alias")
                parsed.export_aliases[_text(alias) if alias is not None else local] = local
            return

        value = node.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            # export default Foo
            parsed.export_aliases["default"] = _text(value)

    # ── Classes and functions ─────────────────────────────────

    def _parse_class(self, node, exported: bool) -> Declaration:
        name_node = node.child_by_field_name("name")
        decl = Declaration(
            name=_text(name_node) if name_node is not None else "default",
            kind=DeclarationKind.CLASS,
            span=_span(node),
            is_exported=exported,
        )

        heritage = _first_child_of_type(node, "class_heritage")
        if heritage is not None:
            for clause in heritage.named_children:
                if clause.type != "extends_clause":
                    continue
                values = clause.children_by_field_name("value") or [
                    c for c in clause.named_children if c.type != "type_arguments"
                ]
                decl.extends.extend(_text(v) for v in values)

        body = node.child_by_field_name("body")
        if body is None:
            return decl
        for member in body.named_children:
            if member.type == "method_definition":
                scope = self._parse_function_scope(member)
                if scope.name == "constructor":
                    decl.constructor = scope
                else:
                    decl.methods.append(scope)
            elif member.type in _FIELD_TYPES:
                type_node = member.child_by_field_name("type")
                value = member.child_by_field_name("value")
                decl.properties.append(ClassProperty(
                    name=_text(member.child_by_field_name("name")),
                    span=_span(member),
                    type_span=_span(type_node) if type_node is not None else None,
                    value_span=_span(value) if value is not None else None,
                ))
        return decl

    def _parse_function_scope(self, node) -> FunctionScope:
        name_node = node.child_by_field_name("name")
        scope = FunctionScope(
            name=_text(name_node) if name_node is not None else "",
            span=_span(node),
        )

        params = node.child_by_field_name("parameters")
        if params is not None:
            for param in params.named_children:
                if param.type not in _PARAMETER_TYPES:
                    continue
                pattern = param.child_by_field_name("pattern")
                type_node = param.child_by_field_name("type")
                value = param.child_by_field_name("value")
                scope.parameters.append(LocalVariable(
                    name=_text(pattern) if pattern is not None else "",
                    type_span=_span(type_node) if type_node is not None else None,
                    value_span=_span(value) if value is not None else None,
                ))

        body = node.child_by_field_name("body")
        if body is not None:
            scope.body = _span(body)
            scope.variables = _collect_variables(body)
        return scope


# ── Node helpers ──────────────────────────────────────────────

def _span(node) -> Span:
    return Span(node.start_byte, node.end_byte)


def _text(node) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _has_token(node, token: str) -> bool:
    """Check for an anonymous keyword child such as ``type``."""
    return any(child.type == token and not child.is_named for child in node.children)


def _first_child_of_type(node, node_type: str):
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _source_of(node):
    source = node.child_by_field_name("source")
    if source is not None:
        return source
    return _first_child_of_type(node, "string")


def _string_value(node) -> str:
    fragments = [_text(c) for c in node.named_children if c.type == "string_fragment"]
    if fragments:
        return "".join(fragments)
    return _text(node)[1:-1]


def _specifier(node) -> ImportSpecifier:
    name = _text(node.child_by_field_name("name"))
    if name[:1] in ("'", '"'):
        name = name[1:-1]
    alias = node.child_by_field_name("alias")
    return ImportSpecifier(
        imported_name=name,
        local_name=_text(alias) if alias is not None else name,
        is_type_only=_has_token(node, "type"),
    )


def _collect_variables(body) -> list[LocalVariable]:
    """All variable declarators inside a function body, in source order."""
    variables: list[LocalVariable] = []
    stack = [body]
    while stack:
        node = stack.pop()
        if node.type == "variable_declarator":
            type_node = node.child_by_field_name("type")
            value = node.child_by_field_name("value")
            variables.append(LocalVariable(
                name=_text(node.child_by_field_name("name")),
                type_span=_span(type_node) if type_node is not None else None,
                value_span=_span(value) if value is not None else None,
            ))
        stack.extend(reversed(node.named_children))
    return variables


def _first_error_line(node) -> int | None:
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error or child.is_missing:
            return _first_error_line(child)
    return None


def _type_spans(root) -> list[Span]:
    """Spans of all type positions, outermost only, in source order."""
    spans: list[Span] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _TYPE_POSITION_TYPES:
            spans.append(_span(node))
            continue
        stack.extend(reversed(node.named_children))
    return spans


def _import_errors(root) -> list:
    """Error nodes that break an import or re-export, in source order."""
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            if _breaks_import(node):
                found.append(node)
            continue
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return found


def _breaks_import(node) -> bool:
    parent = node.parent
    while parent is not None:
        if parent.type in ("import_statement", "export_clause", "namespace_export"):
            return True
        if parent.type == "export_statement" and parent.child_by_field_name("source") is not None:
            return True
        parent = parent.parent
    return _IMPORT_TEXT_RE.search(_text(node)) is not None
