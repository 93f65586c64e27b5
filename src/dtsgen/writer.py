import json
import re
from typing import Callable, Dict, Iterable, List, Optional

import click

from dtsgen.models import (
    DEFAULT_EXPORT,
    WILDCARD_EXPORT,
    ClassDecl,
    ConstantDecl,
    Declaration,
    DeclarationKind,
    FunctionDecl,
    IdentifierDecl,
    ImportDecl,
    Module,
    ObjectDecl,
    Parameter,
    TypeDefDecl,
    TypeRef,
    VariableDecl,
)
from dtsgen.settings import EmitterSettings

# Namespaces that only mark a type as defined elsewhere.
_DROPPED_NAMESPACES = {"external"}
_MODULE_NAMESPACE = "module"
_IDENTIFIER = re.compile(r"^[A-Za-z_\$][\w\$]*$")
_NAME_SEPARATORS = re.compile(r"[^\w\$]+")

Renderer = Callable[[str, Declaration, int, bool], List[str]]


def _member_name(name: str) -> str:
    if _IDENTIFIER.match(name) or name.isdigit():
        return name
    return json.dumps(name)


def _qualified(name: str) -> str:
    return ".".join(part for part in _NAME_SEPARATORS.split(name) if part)


def _module_type(name: str) -> str:
    """`module:path.Member` as an import type; a bare path names the module."""
    path, dot, member = name.rpartition(".")
    if not dot or "/" in member:
        return f"typeof import({json.dumps(name)})"
    return f"import({json.dumps(path)}).{_qualified(member)}"


class Formatter:
    """
    Renders a validated `Module` into declaration-file text. The module is only
    read; formatting the same module twice gives the same text.
    """

    def __init__(self, settings: Optional[EmitterSettings] = None) -> None:
        self.settings = settings or EmitterSettings()
        self._renderers: Dict[DeclarationKind, Renderer] = {
            DeclarationKind.VARIABLE: self._variable,
            DeclarationKind.CONSTANT: self._constant,
            DeclarationKind.IMPORT: self._import,
            DeclarationKind.FUNCTION: self._function,
            DeclarationKind.CLASS: self._class,
            DeclarationKind.OBJECT: self._object,
            DeclarationKind.IDENTIFIER: self._identifier,
            DeclarationKind.TYPEDEF: self._typedef,
        }

    # --- styling ------------------------------------------------------
    def _style(self, text: str, fg: str) -> str:
        if not self.settings.colors:
            return text
        return click.style(text, fg=fg)

    def _ident(self, text: str) -> str:
        return self._style(text, "magenta")

    def _comment(self, text: str) -> str:
        return self._style(text, "green")

    def _warning(self, text: str) -> str:
        return self._style(text, "red")

    def _indent(self, level: int) -> str:
        return " " * (self.settings.indent * level)

    # --- types --------------------------------------------------------
    def format_type(self, t: TypeRef) -> str:
        name = t.name
        if t.namespace == _MODULE_NAMESPACE:
            name = _module_type(name)
        elif t.namespace and t.namespace not in _DROPPED_NAMESPACES:
            name = _qualified(f"{t.namespace}.{name}")
        if t.parameters:
            name = f"{name}<{', '.join(self.format_type(p) for p in t.parameters)}>"
        return name

    def format_types(self, types: List[TypeRef], empty: str = "any") -> str:
        if not types:
            return empty
        return " | ".join(self.format_type(t) for t in types)

    def format_param(self, param: Parameter) -> str:
        types = self.format_types(param.types)
        if param.rest:
            if len(param.types) > 1:
                types = f"({types})"
            return f"...{param.name}: {types}[]"
        mark = "?" if param.optional else ""
        return f"{param.name}{mark}: {types}"

    def _signature(self, fn: FunctionDecl) -> str:
        return ", ".join(self.format_param(p) for p in fn.params)

    # --- blocks -------------------------------------------------------
    def _doc_block(
        self, ind: str, description: str, params: Iterable[Parameter] = ()
    ) -> List[str]:
        body: List[str] = []
        if description:
            body.extend(description.splitlines())
        tagged = [p for p in params if p.description]
        if tagged:
            if body:
                body.append("")
            for p in tagged:
                body.append(f"@param {p.name} {p.description}")
        if not body:
            return []

        lines = [f"{ind}/**"]
        lines.extend(f"{ind} * {ln}".rstrip() for ln in body)
        lines.append(f"{ind} */")
        return [self._comment(ln) for ln in lines]

    def _warnings(self, ind: str, decl: Declaration) -> List[str]:
        if not self.settings.warnings:
            return []
        return [self._warning(f"{ind}// WARN: {e.message}") for e in decl.errors]

    def declaration(
        self, name: str, decl: Declaration, level: int, nested: bool = False
    ) -> List[str]:
        """Documentation, declaration text and diagnostics of one member."""
        renderer = self._renderers.get(decl.kind)
        if renderer is None:
            raise ValueError(f"No renderer for declaration kind {decl.kind!r}")

        ind = self._indent(level)
        params = decl.params if isinstance(decl, FunctionDecl) else ()
        lines = self._doc_block(ind, decl.description, params)

        body = renderer(name, decl, level, nested)
        if (
            not nested
            and decl.exported
            and not isinstance(decl, (ImportDecl, IdentifierDecl))
        ):
            body[0] = f"{ind}export {body[0][len(ind):]}"
        lines.extend(body)
        lines.extend(self._warnings(ind, decl))
        return lines

    def _members(self, members: Dict[str, Declaration], level: int) -> List[str]:
        lines: List[str] = []
        for name, member in members.items():
            lines.extend(
                self.declaration(_member_name(name), member, level, nested=True)
            )
        return lines

    # --- renderers ----------------------------------------------------
    def _function(
        self, name: str, decl: FunctionDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        head = f"{ind}static " if nested and decl.is_static else ind
        keyword = "" if nested else "function "
        result = self.format_types(decl.result, empty="void")
        return [
            f"{head}{keyword}{self._ident(name)} ({self._signature(decl)}) : {result};"
        ]

    def _class(
        self, name: str, decl: ClassDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        if nested:
            args = self._signature(decl.ctor) if decl.ctor is not None else ""
            return [f"{ind}{self._ident(name)}: new ({args}) => any;"]

        inner = self._indent(level + 1)
        extends = f" extends {decl.extends}" if decl.extends else ""
        lines = [f"{ind}class {self._ident(name)}{extends} {{"]
        ctor = decl.ctor
        if ctor is not None and ctor.params:
            lines.extend(self._doc_block(inner, ctor.description, ctor.params))
            lines.append(f"{inner}constructor ({self._signature(ctor)});")
        if ctor is not None:
            lines.extend(self._warnings(inner, ctor))
        lines.extend(self._members(decl.members, level + 1))
        lines.append(f"{ind}}}")
        return lines

    def _variable(
        self, name: str, decl: VariableDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        keyword = "" if nested else f"{decl.keyword} "
        return [f"{ind}{keyword}{self._ident(name)}: {self.format_types(decl.types)};"]

    def _constant(
        self, name: str, decl: ConstantDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        if nested:
            return [f"{ind}{self._ident(name)}: {decl.value or 'any'};"]
        if decl.value is None:
            return [f"{ind}const {self._ident(name)}: any;"]
        return [f"{ind}const {self._ident(name)} = {decl.value};"]

    def _object(
        self, name: str, decl: ObjectDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        keyword = "" if nested else "const "
        head = f"{ind}{keyword}{self._ident(name)}"
        if not decl.members:
            return [f"{head}: {{}};"]
        lines = [f"{head}: {{"]
        lines.extend(self._members(decl.members, level + 1))
        lines.append(f"{ind}}};")
        return lines

    def _import(
        self, name: str, decl: ImportDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        path = f'"{decl.module_path}"'
        if nested:
            member = f".{decl.imported_name}" if decl.imported_name else ""
            return [f"{ind}{self._ident(name)}: typeof import({path}){member};"]

        if decl.imported_name is None:
            if decl.exported and name.startswith(WILDCARD_EXPORT):
                return [f"{ind}export * from {path};"]
            keyword = "export" if decl.exported else "import"
            return [f"{ind}{keyword} * as {self._ident(name)} from {path};"]

        if decl.imported_name == name:
            binding = self._ident(name)
        else:
            binding = f"{decl.imported_name} as {self._ident(name)}"
        if decl.exported:
            return [f"{ind}export {{ {binding} }} from {path};"]
        if decl.imported_name == DEFAULT_EXPORT:
            return [f"{ind}import {self._ident(name)} from {path};"]
        return [f"{ind}import {{ {binding} }} from {path};"]

    def _identifier(
        self, name: str, decl: IdentifierDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        if nested:
            return [f"{ind}{self._ident(name)}: typeof {decl.target};"]
        if decl.exported:
            return [f"{ind}export {{ {decl.target} as {self._ident(name)} }};"]
        return [f"{ind}const {self._ident(name)}: typeof {decl.target};"]

    def _typedef(
        self, name: str, decl: TypeDefDecl, level: int, nested: bool
    ) -> List[str]:
        ind = self._indent(level)
        if nested:
            return [f"{ind}{self._ident(name)}: {self.format_types(decl.types)};"]
        return [f"{ind}type {self._ident(name)} = {self.format_types(decl.types)};"]

    # --- module -------------------------------------------------------
    def _default_export(self, decl: Declaration, ind: str) -> List[str]:
        if isinstance(decl, IdentifierDecl):
            lines = self._doc_block(ind, decl.description)
            lines.append(f"{ind}export default {decl.target};")
            lines.extend(self._warnings(ind, decl))
            return lines
        local = decl.model_copy(update={"exported": False})
        lines = self.declaration("_default", local, 1)
        lines.append(f"{ind}export default _default;")
        return lines

    def _whole_module_export(self, module: Module, ind: str) -> List[str]:
        exports = module.exports
        if isinstance(exports, IdentifierDecl) and exports.target in module.items:
            lines = self._doc_block(ind, exports.description)
            lines.append(f"{ind}export = {exports.target};")
            lines.extend(self._warnings(ind, exports))
            return lines
        local = exports.model_copy(update={"exported": False})
        lines = self.declaration("_exports", local, 1)
        lines.append(f"{ind}export = _exports;")
        return lines

    def format_module(self, module: Module) -> str:
        ind = self._indent(1)
        lines = self._doc_block("", module.description)
        lines.append(f'declare module "{module.name}" {{')

        for name, decl in module.items.items():
            lines.append("")
            if name == DEFAULT_EXPORT and not isinstance(decl, ImportDecl):
                lines.extend(self._default_export(decl, ind))
            else:
                lines.extend(self.declaration(name, decl, 1))

        if module.exports is not None:
            lines.append("")
            lines.extend(self._whole_module_export(module, ind))

        lines.append("}")
        return "\n".join(lines) + "\n"


def format_module(module: Module, settings: Optional[EmitterSettings] = None) -> str:
    return Formatter(settings).format_module(module)


def format_modules(
    modules: Iterable[Module], settings: Optional[EmitterSettings] = None
) -> str:
    formatter = Formatter(settings)
    return "\n".join(formatter.format_module(m) for m in modules)
