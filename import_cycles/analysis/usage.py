"""Decide whether an imported class survives type erasure.

The checks are textual heuristics over comment-stripped slices of the
importing file, guided by the declaration spans the parser reports. They
favour missing a value use over inventing one: when no rule matches, the
class is treated as used only as a type and its import is erased.
Type annotations, type arguments and type parameters are blanked out
before the initializer and return checks read the code.

Rules, first match wins:

1. a class in the file extends the import
2. a module-level variable initializer references it
3. a class property initializer references it
4. a constructor references it beyond type annotations and ``this.X``
5. a method returns it or assigns it to a local
6. a top-level function returns it or assigns it to a local
"""

from __future__ import annotations

import logging

from import_cycles.cleaner import (
    count_name,
    member_pattern,
    mentions,
    return_expressions,
    strip_comments,
    strip_type_assertions,
)
from import_cycles.models import (
    Declaration,
    DeclarationKind,
    FunctionScope,
    LocalVariable,
    ParsedFile,
)

logger = logging.getLogger(__name__)


def is_class_used_as_value(name: str, importing: ParsedFile) -> bool:
    """Return True when ``name`` is used at runtime in ``importing``.

    ``name`` is the local binding (the alias, for ``import {X as Y}``).
    """
    classes = [d for d in importing.declarations if d.kind == DeclarationKind.CLASS]
    variables = [d for d in importing.declarations if d.kind == DeclarationKind.VARIABLE]
    functions = [d for d in importing.declarations if d.kind == DeclarationKind.FUNCTION]

    checks = (
        ("extends", lambda: any(_extends(cls, name) for cls in classes)),
        ("variable", lambda: any(_variable_uses(importing, var, name) for var in variables)),
        ("property", lambda: any(_property_uses(importing, cls, name) for cls in classes)),
        ("constructor", lambda: any(
            _constructor_uses(importing, cls.constructor, name)
            for cls in classes if cls.constructor is not None
        )),
        ("method", lambda: any(
            _scope_uses(importing, method, name)
            for cls in classes for method in cls.methods
        )),
        ("function", lambda: any(
            _scope_uses(importing, fn.scope, name)
            for fn in functions if fn.scope is not None
        )),
    )
    for rule, check in checks:
        if check():
            logger.debug("%s: %s used as value (%s)", importing.path, name, rule)
            return True
    return False


def _extends(cls: Declaration, name: str) -> bool:
    for parent in cls.extends:
        parent = parent.strip()
        if parent == name or parent.startswith((name + ".", name + "(", name + "<")):
            return True
    return False


def _variable_uses(importing: ParsedFile, var: Declaration, name: str) -> bool:
    if var.value_span is None:
        return False
    code = strip_type_assertions(strip_comments(importing.value_text(var.value_span)))
    return mentions(code, name)


def _property_uses(importing: ParsedFile, cls: Declaration, name: str) -> bool:
    for prop in cls.properties:
        if prop.value_span is None:
            continue
        if mentions(strip_comments(importing.value_text(prop.value_span)), name):
            return True
    return False


def _constructor_uses(importing: ParsedFile, ctor: FunctionScope, name: str) -> bool:
    code = strip_comments(importing.text(ctor.span))
    usage_count = count_name(code, name)
    if not usage_count:
        return False

    for var in (*ctor.parameters, *ctor.variables):
        if var.type_span is not None:
            usage_count -= count_name(strip_comments(importing.text(var.type_span)), name)
        if var.name == name:
            usage_count -= 1
    usage_count -= len(member_pattern(name).findall(code))
    return usage_count > 0


def _scope_uses(importing: ParsedFile, scope: FunctionScope, name: str) -> bool:
    if scope.body is not None:
        body = strip_comments(importing.value_text(scope.body))
        for expression in return_expressions(body):
            if mentions(strip_type_assertions(expression), name):
                return True
    return any(_initializer_uses(importing, var, name)
               for var in (*scope.parameters, *scope.variables))


def _initializer_uses(importing: ParsedFile, var: LocalVariable, name: str) -> bool:
    if var.value_span is None:
        return False
    code = strip_type_assertions(strip_comments(importing.value_text(var.value_span)))
    return mentions(code, name)
