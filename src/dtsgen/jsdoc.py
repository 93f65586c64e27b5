"""
JSDoc comment reader.

Splits a raw block comment into a free-text description and a list of tags,
and parses tag type expressions (``{Array.<string>|null}``) into a small tree
of `TypeExpr` nodes with a lark grammar.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple

from lark import Lark, Transformer
from lark.exceptions import LarkError

from dtsgen.logger import logger

# ---------------------------------------------------------------------------
# Type expression tree
# ---------------------------------------------------------------------------


@dataclass
class TypeExpr:
    tag: ClassVar[str] = "TypeExpr"


@dataclass
class NameExpression(TypeExpr):
    tag: ClassVar[str] = "NameExpression"
    name: str


@dataclass
class UnionType(TypeExpr):
    tag: ClassVar[str] = "UnionType"
    elements: List[TypeExpr]


@dataclass
class TypeApplication(TypeExpr):
    tag: ClassVar[str] = "TypeApplication"
    expression: TypeExpr
    applications: List[TypeExpr]


@dataclass
class OptionalType(TypeExpr):
    tag: ClassVar[str] = "OptionalType"
    expression: TypeExpr


@dataclass
class NullableType(TypeExpr):
    tag: ClassVar[str] = "NullableType"
    expression: TypeExpr
    prefix: bool = True


@dataclass
class NonNullableType(TypeExpr):
    tag: ClassVar[str] = "NonNullableType"
    expression: TypeExpr
    prefix: bool = True


@dataclass
class RestType(TypeExpr):
    tag: ClassVar[str] = "RestType"
    expression: Optional[TypeExpr] = None


@dataclass
class AllLiteral(TypeExpr):
    tag: ClassVar[str] = "AllLiteral"


@dataclass
class NullableLiteral(TypeExpr):
    tag: ClassVar[str] = "NullableLiteral"


@dataclass
class FieldType(TypeExpr):
    tag: ClassVar[str] = "FieldType"
    key: str
    value: Optional[TypeExpr] = None


@dataclass
class RecordType(TypeExpr):
    tag: ClassVar[str] = "RecordType"
    fields: List[FieldType] = field(default_factory=list)


@dataclass
class FunctionType(TypeExpr):
    tag: ClassVar[str] = "FunctionType"
    params: List[TypeExpr] = field(default_factory=list)
    result: Optional[TypeExpr] = None


_TYPE_GRAMMAR = r"""
?start: top

?top: "..." union                    -> rest_type
    | "..."                          -> rest_all
    | union "="                      -> optional_type
    | union

?union: unary
      | unary ("|" unary)+           -> union_type

?unary: "?" postfix                  -> nullable_prefix
      | "!" postfix                  -> non_nullable_prefix
      | postfix "?"                  -> nullable_postfix
      | postfix "!"                  -> non_nullable_postfix
      | postfix

?postfix: primary
        | postfix "[" "]"            -> array_type

?primary: NAME                       -> name_expr
        | NAME ".<" type_list ">"    -> type_application
        | NAME "<" type_list ">"     -> type_application
        | "(" union ")"
        | "*"                        -> all_literal
        | "?"                        -> nullable_literal
        | "{" [record_field ("," record_field)*] "}"      -> record_type
        | "function" "(" [fn_params] ")" [":" union]      -> function_type

type_list: union ("," union)*
record_field: FIELD_KEY [":" union]
fn_params: top ("," top)*

NAME: /[A-Za-z_$][\w$]*(?:[.:#~\/-][A-Za-z_$][\w$]*)*/
FIELD_KEY: /[A-Za-z_$][\w$]*/ | ESCAPED_STRING

%import common.ESCAPED_STRING
%import common.WS
%ignore WS
"""


class _TypeBuilder(Transformer):
    def name_expr(self, children):
        return NameExpression(name=str(children[0]))

    def type_application(self, children):
        return TypeApplication(
            expression=NameExpression(name=str(children[0])),
            applications=children[1],
        )

    def type_list(self, children):
        return list(children)

    def union_type(self, children):
        return UnionType(elements=list(children))

    def array_type(self, children):
        return TypeApplication(
            expression=NameExpression(name="Array"), applications=[children[0]]
        )

    def nullable_prefix(self, children):
        return NullableType(expression=children[0], prefix=True)

    def nullable_postfix(self, children):
        return NullableType(expression=children[0], prefix=False)

    def non_nullable_prefix(self, children):
        return NonNullableType(expression=children[0], prefix=True)

    def non_nullable_postfix(self, children):
        return NonNullableType(expression=children[0], prefix=False)

    def optional_type(self, children):
        return OptionalType(expression=children[0])

    def rest_type(self, children):
        return RestType(expression=children[0])

    def rest_all(self, children):
        return RestType()

    def all_literal(self, children):
        return AllLiteral()

    def nullable_literal(self, children):
        return NullableLiteral()

    def record_field(self, children):
        key = str(children[0]).strip("\"'")
        return FieldType(key=key, value=children[1] if len(children) > 1 else None)

    def record_type(self, children):
        return RecordType(fields=list(children))

    def fn_params(self, children):
        return list(children)

    def function_type(self, children):
        params = next((c for c in children if isinstance(c, list)), [])
        result = next((c for c in children if isinstance(c, TypeExpr)), None)
        return FunctionType(params=params, result=result)


_TYPE_PARSER = Lark(_TYPE_GRAMMAR, parser="earley", maybe_placeholders=False)


def parse_type(text: str) -> TypeExpr:
    """
    Parse a JSDoc type expression (without the surrounding braces).
    Raises `lark.exceptions.LarkError` on malformed input.
    """
    tree = _TYPE_PARSER.parse(text.strip())
    return _TypeBuilder().transform(tree)


# ---------------------------------------------------------------------------
# Comments and tags
# ---------------------------------------------------------------------------

_TITLE_ALIASES = {
    "returns": "return",
    "arg": "param",
    "argument": "param",
    "prop": "property",
    "constructor": "class",
    "extends": "augments",
    "desc": "description",
    "func": "function",
    "method": "function",
}

# Tags that may carry a `{type}` expression.
_TYPED_TAGS = {"param", "property", "return", "type", "typedef", "throws", "enum"}
# Tags followed by a name and then a description.
_NAMED_TAGS = {"param", "property", "typedef"}
# Tags whose whole first word is a name (no type).
_NAME_ONLY_TAGS = {
    "class",
    "function",
    "external",
    "module",
    "alias",
    "memberof",
    "augments",
    "lends",
    "namespace",
    "callback",
}

_TAG_SPLIT = re.compile(r"(?m)^(?=@\w)")
_TAG_HEAD = re.compile(r"@(\w+)!?[ \t]*")


@dataclass
class DocTag:
    title: str
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[TypeExpr] = None
    raw_type: Optional[str] = None
    optional: bool = False
    default: Optional[str] = None


@dataclass
class DocComment:
    description: str = ""
    tags: List[DocTag] = field(default_factory=list)

    def find(self, title: str) -> List[DocTag]:
        return [t for t in self.tags if t.title == title]

    def first(self, title: str) -> Optional[DocTag]:
        return next((t for t in self.tags if t.title == title), None)

    def has(self, title: str) -> bool:
        return any(t.title == title for t in self.tags)

    @property
    def params(self) -> Dict[str, DocTag]:
        # Later tags win for duplicate names.
        return {t.name: t for t in self.find("param") if t.name}


def unwrap_comment(raw: str) -> str:
    """
    Strip comment delimiters and the leading `*` gutter from every line.
    """
    text = raw.strip()
    if text.startswith("/*"):
        text = text[2:]
    if text.endswith("*/"):
        text = text[:-2]
    lines = []
    for line in text.splitlines():
        line = re.sub(r"^\s*\*+", "", line)
        lines.append(line.strip())
    return "\n".join(lines).strip()


def parse_comment(raw: str) -> DocComment:
    text = unwrap_comment(raw)
    chunks = _TAG_SPLIT.split(text)
    doc = DocComment()
    for chunk in chunks:
        if not chunk.strip():
            continue
        tag = _parse_tag(chunk.strip())
        if tag is None or tag.title == "description":
            # a lone `@` or text before the first tag reads as description
            extra = chunk.strip() if tag is None else (tag.description or "").strip()
            if extra:
                doc.description = (
                    f"{doc.description}\n{extra}" if doc.description else extra
                )
            continue
        doc.tags.append(tag)
    return doc


def _parse_tag(chunk: str) -> Optional[DocTag]:
    m = _TAG_HEAD.match(chunk)
    if m is None:
        return None
    raw_title = m.group(1)
    tag = DocTag(title=_TITLE_ALIASES.get(raw_title, raw_title))
    rest = chunk[m.end() :]

    if tag.title in _TYPED_TAGS and rest.lstrip().startswith("{"):
        type_text, rest = _read_braced(rest.lstrip())
        tag.raw_type = type_text
        tag.type = _parse_tag_type(type_text, tag.title)

    if tag.title in _NAMED_TAGS:
        tag.name, tag.optional, tag.default, rest = _read_name(rest)
    elif tag.title in _NAME_ONLY_TAGS:
        first, _, rest = rest.strip().partition(" ")
        first_line, _, tail = first.partition("\n")
        tag.name = first_line or None
        rest = f"{tail}\n{rest}" if tail else rest

    desc = rest.strip()
    if desc.startswith("-"):
        desc = desc[1:].strip()
    tag.description = desc or None
    return tag


def _parse_tag_type(text: str, title: str) -> Optional[TypeExpr]:
    try:
        return parse_type(text)
    except LarkError as ex:
        logger.warning(
            "Unparsable JSDoc type expression; tag left untyped",
            tag=title,
            type=text,
            error=str(ex).splitlines()[0] if str(ex) else type(ex).__name__,
        )
        return None


def _read_braced(text: str) -> Tuple[str, str]:
    depth = 0
    for idx, ch in enumerate(text):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[1:idx], text[idx + 1 :]
    return text[1:], ""


def _read_name(text: str) -> Tuple[Optional[str], bool, Optional[str], str]:
    text = text.lstrip()
    if text.startswith("["):
        depth = 0
        for idx, ch in enumerate(text):
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    inner = text[1:idx]
                    name, sep, default = inner.partition("=")
                    return (
                        name.strip() or None,
                        True,
                        default.strip() if sep else None,
                        text[idx + 1 :],
                    )
    m = re.match(r"\S+", text)
    if m is None:
        return None, False, None, text
    return m.group(0), False, None, text[m.end() :]
