from typing import Dict, FrozenSet, List

from dtsgen.errors import UnsupportedTypeGrammar
from dtsgen.jsdoc import (
    AllLiteral,
    NameExpression,
    NonNullableType,
    NullableType,
    OptionalType,
    RestType,
    TypeApplication,
    TypeExpr,
    UnionType,
)
from dtsgen.models import TypeRef

BUILTIN_TYPES: FrozenSet[str] = frozenset(
    {
        "string",
        "String",
        "object",
        "Object",
        "number",
        "Number",
        "boolean",
        "Boolean",
        "Function",
        "any",
        "any[]",
        "void",
        "null",
        "undefined",
        "Array",
        "Record",
        "Date",
        "RegExp",
        "Error",
        "Promise",
        "symbol",
        "Symbol",
        "unknown",
        "never",
    }
)

# Documented names that have a concrete declaration-file spelling.
TYPE_ALIASES: Dict[str, str] = {
    "Array": "any[]",
    "*": "any",
}


def split_name(raw: str) -> TypeRef:
    """Split `ns:Name` into a namespaced `TypeRef` and apply the alias table."""
    namespace, sep, name = raw.partition(":")
    if not sep:
        namespace, name = None, raw
    return TypeRef(namespace=namespace, name=TYPE_ALIASES.get(name, name))


def to_types(expr: TypeExpr) -> List[TypeRef]:
    """
    Expand a JSDoc type expression into a flat list of alternative types.
    Productions without a declaration-file counterpart raise
    `UnsupportedTypeGrammar`.
    """
    if isinstance(expr, UnionType):
        out: List[TypeRef] = []
        for element in expr.elements:
            out.extend(to_types(element))
        return out

    if isinstance(expr, NameExpression):
        return [split_name(expr.name)]

    if isinstance(expr, TypeApplication):
        return [_application(expr)]

    if isinstance(expr, (OptionalType, NonNullableType)):
        return to_types(expr.expression)

    if isinstance(expr, NullableType):
        return to_types(expr.expression) + [TypeRef(name="null")]

    if isinstance(expr, RestType):
        if expr.expression is None:
            return [TypeRef.any_type()]
        return to_types(expr.expression)

    if isinstance(expr, AllLiteral):
        return [TypeRef.any_type()]

    raise UnsupportedTypeGrammar(expr.tag)


def _application(expr: TypeApplication) -> TypeRef:
    if not isinstance(expr.expression, NameExpression):
        raise UnsupportedTypeGrammar(expr.expression.tag)

    namespace, sep, name = expr.expression.name.partition(":")
    if not sep:
        namespace, name = None, expr.expression.name

    params: List[TypeRef] = []
    for application in expr.applications:
        expanded = to_types(application)
        if len(expanded) != 1:
            # Alternatives inside generic arguments have no flat representation.
            raise UnsupportedTypeGrammar(application.tag)
        params.append(expanded[0])

    if namespace is None and name == "Object" and len(params) == 2:
        name = "Record"
    return TypeRef(namespace=namespace, name=name, parameters=params)
