import re
from typing import Dict, List, Optional

import tree_sitter as ts
import tree_sitter_javascript as tsjs

from dtsgen.errors import SourceSyntaxError
from dtsgen.helpers import (
    code_children,
    first_code_child,
    get_node_line,
    get_node_text,
    iter_errors,
    string_value,
)
from dtsgen.jsdoc import DocComment, DocTag, OptionalType, parse_comment
from dtsgen.logger import logger
from dtsgen.models import (
    DEFAULT_EXPORT,
    ClassDecl,
    ConstantDecl,
    Declaration,
    FunctionDecl,
    IdentifierDecl,
    ImportDecl,
    Module,
    ObjectDecl,
    Parameter,
    TypeDefDecl,
    TypeRef,
    VariableDecl,
    wildcard_key,
)
from dtsgen.settings import ResolverSettings
from dtsgen.typemap import to_types
from dtsgen.validate import validate_module
from dtsgen.walk import Handler, WalkPath, walk

JS_LANGUAGE = ts.Language(tsjs.language())
_parser: Optional[ts.Parser] = None


def _get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(JS_LANGUAGE)
    return _parser


# Containers whose direct children carry their own documentation comments.
_DOC_SCOPES = ("program", "class_body", "object")
# Comments describing the file or external types rather than the next statement.
_DETACHED_DOC = re.compile(r"@(typedef|module|file|fileoverview|external)\b")
_MODULE_DOC = re.compile(r"@(module|file|fileoverview)\b")
# Nodes opening a new function scope; their returns belong to them.
_SCOPE_KINDS = {
    "function_expression",
    "function",
    "function_declaration",
    "generator_function",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
    "class",
    "class_declaration",
}
_CONST_LITERALS = {"string", "number", "true", "false"}
_PROTOTYPE = ".prototype"
_EXPORT_OBJECTS = ("exports", "module.exports")


def _noop(node: ts.Node, path: WalkPath) -> None:
    return None


def _is_literal(node: ts.Node) -> bool:
    if node.type == "unary_expression":
        operator = node.child_by_field_name("operator")
        argument = node.child_by_field_name("argument")
        return (
            operator is not None
            and operator.type == "-"
            and argument is not None
            and argument.type == "number"
        )
    return node.type in _CONST_LITERALS


class ModuleParser:
    """
    Builds the declaration model of one JavaScript module.

    Every top-level statement is classified through the node-kind dispatcher;
    recognised idioms populate `Module.items`, anything else fails loudly with
    the traversal path. After the pass the module is validated in place.
    """

    def __init__(
        self, module_name: str, settings: Optional[ResolverSettings] = None
    ) -> None:
        self.settings = settings or ResolverSettings()
        self.module = Module(name=module_name)
        self._docs: Dict[int, DocComment] = {}

        self._statement_handlers: Dict[str, Handler] = {
            "comment": self._handle_comment,
            "expression_statement": self._handle_expression_statement,
            "variable_declaration": self._handle_variables,
            "lexical_declaration": self._handle_variables,
            "function_declaration": self._handle_function_declaration,
            "generator_function_declaration": self._handle_function_declaration,
            "class_declaration": self._handle_class_declaration,
            "export_statement": self._handle_export,
            "import_statement": self._handle_import,
            "empty_statement": _noop,
            "hash_bang_line": _noop,
        }
        self._declaration_handlers: Dict[str, Handler[List[str]]] = {
            "variable_declaration": self._handle_variables,
            "lexical_declaration": self._handle_variables,
            "function_declaration": self._handle_function_declaration,
            "generator_function_declaration": self._handle_function_declaration,
            "class_declaration": self._handle_class_declaration,
        }
        self._expression_handlers: Dict[str, Handler] = {
            "assignment_expression": self._handle_assignment,
            # 'use strict' and other directives
            "string": _noop,
            "call_expression": self._handle_call_statement,
        }
        self._chain_handlers: Dict[str, Handler[str]] = {
            "identifier": self._chain_name,
            "property_identifier": self._chain_name,
            "this": self._chain_name,
            "member_expression": self._chain_member,
        }
        self._value_handlers: Dict[str, Handler[Declaration]] = {
            "function_expression": self._value_function,
            "function": self._value_function,
            "generator_function": self._value_function,
            "arrow_function": self._value_function,
            "class": self._value_class,
            "object": self._value_object,
            "identifier": self._value_identifier,
            "call_expression": self._value_call,
            "new_expression": self._value_new,
            "assignment_expression": self._value_assignment,
            "parenthesized_expression": self._value_parenthesized,
            "string": self._literal("string"),
            "template_string": self._literal("string"),
            "number": self._literal("number"),
            "true": self._literal("boolean"),
            "false": self._literal("boolean"),
            "regex": self._literal("RegExp"),
            "array": self._literal("any[]"),
            "null": self._literal("any"),
            "undefined": self._literal("any"),
            "this": self._literal("any"),
            "member_expression": self._literal("any"),
            "subscript_expression": self._literal("any"),
            "binary_expression": self._literal("any"),
            "unary_expression": self._literal("any"),
            "ternary_expression": self._literal("any"),
            "await_expression": self._literal("any"),
            "update_expression": self._literal("any"),
        }
        self._param_handlers: Dict[str, Handler[Parameter]] = {
            "identifier": self._param_identifier,
            "assignment_pattern": self._param_default,
            "rest_pattern": self._param_rest,
            "object_pattern": self._param_pattern,
            "array_pattern": self._param_pattern,
        }

    # --- entry point --------------------------------------------------
    def parse(self, code: str) -> Module:
        tree = _get_parser().parse(code.encode("utf-8"))
        root_node = tree.root_node
        if root_node.has_error:
            bad = next(iter_errors(root_node), root_node)
            lines = get_node_text(bad).splitlines()
            raise SourceSyntaxError(get_node_line(bad), lines[0][:80] if lines else "")

        for child in root_node.named_children:
            walk(child, WalkPath(), self._statement_handlers)

        validate_module(self.module, extra_types=self.settings.extra_types)
        return self.module

    # --- documentation --------------------------------------------------
    def _doc_for(self, node: ts.Node) -> DocComment:
        """
        Documentation of *node*: the nearest block comment preceding the
        statement, class member or object property that contains it.
        """
        anchor = node
        while anchor.parent is not None and anchor.parent.type not in _DOC_SCOPES:
            anchor = anchor.parent

        sib = anchor.prev_sibling
        while sib is not None:
            if sib.type in (";", ","):
                sib = sib.prev_sibling
                continue
            if sib.type != "comment":
                break
            raw = get_node_text(sib)
            if raw.startswith("/*") and not _DETACHED_DOC.search(raw):
                return self._parse_doc(sib)
            sib = sib.prev_sibling
        return DocComment()

    def _parse_doc(self, comment: ts.Node) -> DocComment:
        doc = self._docs.get(comment.id)
        if doc is None:
            doc = parse_comment(get_node_text(comment))
            self._docs[comment.id] = doc
        return doc

    # --- statements ---------------------------------------------------
    def _handle_comment(self, node: ts.Node, path: WalkPath) -> None:
        raw = get_node_text(node)
        if not raw.startswith("/*") or not _DETACHED_DOC.search(raw):
            return
        doc = self._parse_doc(node)
        if _MODULE_DOC.search(raw) and not self.module.description:
            self.module.description = doc.description
        for tag in doc.find("typedef"):
            self._add_typedef(tag, doc)

    def _add_typedef(self, tag: DocTag, doc: DocComment) -> None:
        if not tag.name:
            logger.warning("Skipping @typedef without a name", type=tag.raw_type)
            return
        expr = tag.type
        if expr is None:
            type_tag = doc.first("type")
            expr = type_tag.type if type_tag else None
        types = to_types(expr) if expr is not None else [TypeRef(name="object")]
        self.module.add(
            tag.name, TypeDefDecl(types=types, description=doc.description)
        )

    def _handle_expression_statement(self, node: ts.Node, path: WalkPath) -> None:
        expr = first_code_child(node)
        if expr is not None:
            walk(expr, path, self._expression_handlers)

    def _handle_call_statement(self, node: ts.Node, path: WalkPath) -> None:
        logger.info(
            "Call statement skipped",
            callee=get_node_text(node.child_by_field_name("function")),
            line=get_node_line(node),
        )

    def _handle_variables(self, node: ts.Node, path: WalkPath) -> List[str]:
        keyword = get_node_text(node.children[0]) if node.children else "var"
        names: List[str] = []
        handlers: Dict[str, Handler[List[str]]] = {
            "variable_declarator": lambda n, p: self._handle_declarator(n, p, keyword)
        }
        for declarator in code_children(node):
            names.extend(walk(declarator, path, handlers))
        return names

    def _handle_declarator(
        self, node: ts.Node, path: WalkPath, keyword: str
    ) -> List[str]:
        value = node.child_by_field_name("value")

        def bind(name_node: ts.Node, p: WalkPath) -> List[str]:
            name = get_node_text(name_node)
            self.module.add(name, self._binding_value(node, value, keyword, p))
            return [name]

        def destructure(pattern: ts.Node, p: WalkPath) -> List[str]:
            return self._bind_pattern(node, pattern, value, p)

        return walk(
            node.child_by_field_name("name"),
            path,
            {"identifier": bind, "object_pattern": destructure},
        )

    def _binding_value(
        self,
        declarator: ts.Node,
        value: Optional[ts.Node],
        keyword: str,
        path: WalkPath,
    ) -> Declaration:
        if value is None:
            return self._variable(declarator, [TypeRef.any_type()], keyword)

        doc = self._doc_for(declarator)
        if keyword == "const" and _is_literal(value) and not doc.has("type"):
            return ConstantDecl(value=get_node_text(value), description=doc.description)

        decl = walk(value, path, self._value_handlers)
        if isinstance(decl, VariableDecl):
            decl.keyword = keyword
        return decl

    def _bind_pattern(
        self,
        declarator: ts.Node,
        pattern: ts.Node,
        value: Optional[ts.Node],
        path: WalkPath,
    ) -> List[str]:
        module_path = self._loaded_module(value) if value is not None else None
        names: List[str] = []

        def add(local: str, imported: str) -> None:
            if module_path is not None:
                decl: Declaration = ImportDecl(
                    module_path=module_path, imported_name=imported
                )
            else:
                decl = self._variable(declarator, [TypeRef.any_type()])
            self.module.add(local, decl)
            names.append(local)

        def shorthand(n: ts.Node, p: WalkPath) -> None:
            add(get_node_text(n), get_node_text(n))

        def renamed(n: ts.Node, p: WalkPath) -> None:
            local = n.child_by_field_name("value")
            walk(
                local,
                p,
                {
                    "identifier": lambda i, _: add(
                        get_node_text(i), get_node_text(n.child_by_field_name("key"))
                    )
                },
            )

        handlers: Dict[str, Handler[None]] = {
            "shorthand_property_identifier_pattern": shorthand,
            "pair_pattern": renamed,
        }
        for child in code_children(pattern):
            walk(child, path, handlers)
        return names

    def _handle_function_declaration(
        self, node: ts.Node, path: WalkPath
    ) -> List[str]:
        name = get_node_text(node.child_by_field_name("name"))
        self.module.add(name, self._value_function(node, path))
        return [name]

    def _handle_class_declaration(self, node: ts.Node, path: WalkPath) -> List[str]:
        name = get_node_text(node.child_by_field_name("name"))
        self.module.add(name, self._value_class(node, path))
        return [name]

    # --- assignments --------------------------------------------------
    def _chain_name(self, node: ts.Node, path: WalkPath) -> str:
        return get_node_text(node)

    def _chain_member(self, node: ts.Node, path: WalkPath) -> str:
        obj = walk(node.child_by_field_name("object"), path, self._chain_handlers)
        prop = walk(node.child_by_field_name("property"), path, self._chain_handlers)
        return f"{obj}.{prop}"

    def _handle_assignment(self, node: ts.Node, path: WalkPath) -> None:
        target = walk(node.child_by_field_name("left"), path, self._chain_handlers)
        right = node.child_by_field_name("right")
        owner, _, member = target.rpartition(".")

        if target == "module.exports":
            self.module.set_exports(walk(right, path, self._value_handlers))
        elif owner in _EXPORT_OBJECTS:
            self._export_member(member, right, path)
        elif target.endswith(_PROTOTYPE) and owner and "." not in owner:
            self._assign_prototype(owner, right, path)
        elif owner.endswith(_PROTOTYPE):
            self._assign_prototype_member(
                owner[: -len(_PROTOTYPE)], member, right, path
            )
        else:
            logger.info("Assignment skipped", target=target, line=get_node_line(node))
            if right.type == "assignment_expression":
                walk(right, path, self._value_handlers)

    def _export_member(self, name: str, right: ts.Node, path: WalkPath) -> None:
        self.module.exports = None
        if right.type == "identifier" and get_node_text(right) == name:
            existing = self.module.items.get(name)
            if existing is not None and not isinstance(existing, IdentifierDecl):
                existing.exported = True
                return
        decl = walk(right, path, self._value_handlers)
        decl.exported = True
        self.module.add(name, decl)

    def _promote(self, name: str) -> Optional[ClassDecl]:
        """
        Class registered under *name*. A plain function is replaced in its slot
        by a class whose constructor is that function.
        """
        existing = self.module.items.get(name)
        if isinstance(existing, ClassDecl):
            return existing
        if isinstance(existing, FunctionDecl):
            cls = self._class_from_function(existing)
            self.module.items[name] = cls
            return cls
        return None

    def _assign_prototype(self, name: str, right: ts.Node, path: WalkPath) -> None:
        cls = self._promote(name)
        if cls is None:
            logger.info(
                "Prototype assignment skipped; no constructor function",
                name=name,
                line=get_node_line(right),
            )
            return
        decl = walk(right, path, self._value_handlers)
        if isinstance(decl, ObjectDecl):
            cls.members.update(decl.members)
        else:
            logger.info(
                "Prototype replaced with a non-object value; skipped",
                name=name,
                line=get_node_line(right),
            )

    def _assign_prototype_member(
        self, name: str, member: str, right: ts.Node, path: WalkPath
    ) -> None:
        cls = self._promote(name)
        if cls is None:
            logger.info(
                "Prototype member skipped; no constructor function",
                name=name,
                member=member,
                line=get_node_line(right),
            )
            return
        cls.members[member] = walk(right, path, self._value_handlers)

    # --- modules ------------------------------------------------------
    def _handle_export(self, node: ts.Node, path: WalkPath) -> None:
        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        source = node.child_by_field_name("source")

        if any(c.type == "default" for c in node.children):
            self._export_default(declaration, value, path)
            return

        if declaration is not None:
            for name in walk(declaration, path, self._declaration_handlers):
                self.module.items[name].exported = True
            return

        module_path = string_value(source) if source is not None else None
        handlers: Dict[str, Handler[None]] = {
            "export_clause": lambda n, p: self._export_clause(n, p, module_path),
            "namespace_export": lambda n, p: self._export_namespace(n, module_path),
            "string": _noop,
        }
        clauses = [c for c in code_children(node) if c.type != "decorator"]
        for clause in clauses:
            walk(clause, path, handlers)

        if module_path is not None and not any(
            c.type in ("export_clause", "namespace_export") for c in clauses
        ):
            self.module.add(
                wildcard_key(module_path),
                ImportDecl(module_path=module_path, exported=True),
            )

    def _export_default(
        self, declaration: Optional[ts.Node], value: Optional[ts.Node], path: WalkPath
    ) -> None:
        if declaration is not None:
            names = walk(declaration, path, self._declaration_handlers)
            decl: Declaration = IdentifierDecl(target=names[0])
        else:
            decl = walk(value, path, self._value_handlers)
        decl.exported = True
        self.module.add(DEFAULT_EXPORT, decl)

    def _export_clause(
        self, node: ts.Node, path: WalkPath, module_path: Optional[str]
    ) -> None:
        def specifier(spec: ts.Node, p: WalkPath) -> None:
            name = get_node_text(spec.child_by_field_name("name"))
            alias_node = spec.child_by_field_name("alias")
            alias = get_node_text(alias_node) if alias_node is not None else name

            if module_path is not None:
                decl: Declaration = ImportDecl(
                    module_path=module_path, imported_name=name, exported=True
                )
            else:
                existing = self.module.items.get(name)
                if alias == name and existing is not None and not isinstance(
                    existing, IdentifierDecl
                ):
                    existing.exported = True
                    return
                decl = IdentifierDecl(target=name, exported=True)
            self.module.add(alias, decl)

        for spec in code_children(node):
            walk(spec, path, {"export_specifier": specifier})

    def _export_namespace(self, node: ts.Node, module_path: Optional[str]) -> None:
        name_node = first_code_child(node)
        name = get_node_text(name_node).strip("\"'")
        self.module.add(
            name,
            ImportDecl(module_path=module_path or "", imported_name=None, exported=True),
        )

    def _handle_import(self, node: ts.Node, path: WalkPath) -> None:
        module_path = string_value(node.child_by_field_name("source"))
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        if clause is None:
            logger.info("Side-effect import skipped", module=module_path)
            return

        def default(n: ts.Node, p: WalkPath) -> None:
            self.module.add(
                get_node_text(n),
                ImportDecl(module_path=module_path, imported_name=DEFAULT_EXPORT),
            )

        def namespace(n: ts.Node, p: WalkPath) -> None:
            local = first_code_child(n)
            self.module.add(get_node_text(local), ImportDecl(module_path=module_path))

        def specifier(n: ts.Node, p: WalkPath) -> None:
            name = get_node_text(n.child_by_field_name("name"))
            alias_node = n.child_by_field_name("alias")
            local = get_node_text(alias_node) if alias_node is not None else name
            self.module.add(
                local, ImportDecl(module_path=module_path, imported_name=name)
            )

        def named(n: ts.Node, p: WalkPath) -> None:
            for spec in code_children(n):
                walk(spec, p, {"import_specifier": specifier})

        handlers: Dict[str, Handler[None]] = {
            "identifier": default,
            "namespace_import": namespace,
            "named_imports": named,
        }
        for child in code_children(clause):
            walk(child, path, handlers)

    # --- values -------------------------------------------------------
    def _literal(self, type_name: str) -> Handler[Declaration]:
        def _h(node: ts.Node, path: WalkPath) -> Declaration:
            return self._variable(node, [TypeRef(name=type_name)])

        return _h

    def _variable(
        self, node: ts.Node, types: List[TypeRef], keyword: str = "var"
    ) -> VariableDecl:
        """Variable typed from `@type` when documented, else from *types*."""
        doc = self._doc_for(node)
        type_tag = doc.first("type")
        if type_tag is not None and type_tag.type is not None:
            types = to_types(type_tag.type)
        return VariableDecl(types=types, keyword=keyword, description=doc.description)

    def _value_identifier(self, node: ts.Node, path: WalkPath) -> Declaration:
        doc = self._doc_for(node)
        return IdentifierDecl(target=get_node_text(node), description=doc.description)

    def _value_parenthesized(self, node: ts.Node, path: WalkPath) -> Declaration:
        return walk(first_code_child(node), path, self._value_handlers)

    def _value_assignment(self, node: ts.Node, path: WalkPath) -> Declaration:
        # `module.exports = exports = value`: the inner assignment is applied too.
        self._handle_assignment(node, path)
        return walk(node.child_by_field_name("right"), path, self._value_handlers)

    def _loaded_module(self, node: ts.Node) -> Optional[str]:
        """Path loaded by `require("path")`-like calls, else None."""
        if node.type != "call_expression":
            return None
        callee = node.child_by_field_name("function")
        args = node.child_by_field_name("arguments")
        arg_nodes = code_children(args) if args is not None else []
        if (
            callee is not None
            and callee.type == "identifier"
            and get_node_text(callee) in self.settings.module_loaders
            and len(arg_nodes) == 1
            and arg_nodes[0].type == "string"
        ):
            return string_value(arg_nodes[0])
        return None

    def _value_call(self, node: ts.Node, path: WalkPath) -> Declaration:
        module_path = self._loaded_module(node)
        if module_path is not None:
            doc = self._doc_for(node)
            return ImportDecl(module_path=module_path, description=doc.description)
        return self._variable(node, [TypeRef.any_type()])

    def _value_new(self, node: ts.Node, path: WalkPath) -> Declaration:
        ctor = node.child_by_field_name("constructor")
        if ctor is not None and ctor.type == "identifier":
            return self._variable(node, [TypeRef(name=get_node_text(ctor))])
        return self._variable(node, [TypeRef.any_type()])

    def _value_object(self, node: ts.Node, path: WalkPath) -> Declaration:
        doc = self._doc_for(node)
        obj = ObjectDecl(description=doc.description)

        def pair(n: ts.Node, p: WalkPath) -> None:
            key = n.child_by_field_name("key")
            if key.type == "computed_property_name":
                logger.info("Computed property skipped", line=get_node_line(key))
                return
            name = string_value(key) if key.type == "string" else get_node_text(key)
            obj.members[name] = walk(
                n.child_by_field_name("value"), p, self._value_handlers
            )

        def shorthand(n: ts.Node, p: WalkPath) -> None:
            obj.members[get_node_text(n)] = self._value_identifier(n, p)

        def method(n: ts.Node, p: WalkPath) -> None:
            self._add_method(obj.members, n, p)

        def spread(n: ts.Node, p: WalkPath) -> None:
            logger.info("Spread element skipped", line=get_node_line(n))

        handlers: Dict[str, Handler[None]] = {
            "pair": pair,
            "shorthand_property_identifier": shorthand,
            "method_definition": method,
            "spread_element": spread,
        }
        for child in code_children(node):
            walk(child, path, handlers)
        return obj

    # --- functions ----------------------------------------------------
    def _value_function(self, node: ts.Node, path: WalkPath) -> Declaration:
        doc = self._doc_for(node)
        fn = self._build_function(node, path, doc)
        if doc.has("class") or doc.has("augments"):
            return self._class_from_function(fn, doc)
        return fn

    def _build_function(
        self, node: ts.Node, path: WalkPath, doc: Optional[DocComment] = None
    ) -> FunctionDecl:
        doc = doc if doc is not None else self._doc_for(node)
        fn = FunctionDecl(description=doc.description)
        tags = doc.params
        positional = [t for t in doc.find("param") if t.name and "." not in t.name]

        params_node = node.child_by_field_name("parameters")
        if params_node is not None:
            param_nodes = code_children(params_node)
        else:
            # `x => ...`
            single = node.child_by_field_name("parameter")
            param_nodes = [single] if single is not None else []

        for index, param_node in enumerate(param_nodes):
            param = walk(param_node, path, self._param_handlers)
            if not param.name:
                param.name = (
                    positional[index].name
                    if index < len(positional)
                    else f"arg{index}"
                )
            tag = tags.get(param.name)
            if tag is not None:
                param.description = tag.description
                param.optional = param.optional or tag.optional
            if tag is not None and tag.type is not None:
                param.types = to_types(tag.type)
                param.optional = param.optional or isinstance(tag.type, OptionalType)
            else:
                param.types = [TypeRef.any_type()]
                fn.warn(f'Parameter "{param.name}" type is not specified')
            fn.params.append(param)

        if _has_value_return(node):
            returns = doc.first("return")
            if returns is not None and returns.type is not None:
                fn.result = to_types(returns.type)
            else:
                fn.result = [TypeRef.any_type()]
                fn.warn("Return type is not specified")
        else:
            fn.result = [TypeRef(name="void")]
        return fn

    def _param_identifier(self, node: ts.Node, path: WalkPath) -> Parameter:
        return Parameter(name=get_node_text(node))

    def _param_default(self, node: ts.Node, path: WalkPath) -> Parameter:
        param = walk(node.child_by_field_name("left"), path, self._param_handlers)
        param.optional = True
        return param

    def _param_rest(self, node: ts.Node, path: WalkPath) -> Parameter:
        param = walk(first_code_child(node), path, self._param_handlers)
        param.rest = True
        return param

    def _param_pattern(self, node: ts.Node, path: WalkPath) -> Parameter:
        # Destructured parameters take their name from the positional @param tag.
        return Parameter(name="")

    # --- classes ------------------------------------------------------
    def _class_from_function(
        self, fn: FunctionDecl, doc: Optional[DocComment] = None
    ) -> ClassDecl:
        description = fn.description
        if doc is not None:
            classdesc = doc.first("classdesc")
            if classdesc is not None and classdesc.description:
                description = classdesc.description
        augments = doc.first("augments") if doc is not None else None
        cls = ClassDecl(
            ctor=fn,
            description=description,
            exported=fn.exported,
            extends=augments.name if augments is not None else None,
        )
        fn.exported = False
        if description == fn.description:
            fn.description = ""
        return cls

    def _value_class(self, node: ts.Node, path: WalkPath) -> Declaration:
        doc = self._doc_for(node)
        classdesc = doc.first("classdesc")
        cls = ClassDecl(
            description=(
                classdesc.description
                if classdesc is not None and classdesc.description
                else doc.description
            )
        )
        heritage = next(
            (c for c in node.named_children if c.type == "class_heritage"), None
        )
        if heritage is not None:
            base = first_code_child(heritage)
            if base is not None and base.type in ("identifier", "member_expression"):
                cls.extends = get_node_text(base)

        def method(n: ts.Node, p: WalkPath) -> None:
            name = get_node_text(n.child_by_field_name("name"))
            if name == "constructor":
                cls.ctor = self._build_function(n, p)
            else:
                self._add_method(cls.members, n, p)

        def field(n: ts.Node, p: WalkPath) -> None:
            prop = n.child_by_field_name("property")
            name = get_node_text(prop)
            if prop.type == "private_property_identifier":
                return
            value = n.child_by_field_name("value")
            if value is None:
                cls.members[name] = self._variable(n, [TypeRef.any_type()])
            else:
                cls.members[name] = walk(value, p, self._value_handlers)

        handlers: Dict[str, Handler[None]] = {
            "method_definition": method,
            "field_definition": field,
            "class_static_block": _noop,
        }
        body = node.child_by_field_name("body")
        for member in code_children(body):
            walk(member, path, handlers)
        return cls

    def _add_method(
        self, members: Dict[str, Declaration], node: ts.Node, path: WalkPath
    ) -> None:
        name_node = node.child_by_field_name("name")
        if name_node.type in ("private_property_identifier", "computed_property_name"):
            return
        name = (
            string_value(name_node)
            if name_node.type == "string"
            else get_node_text(name_node)
        )
        # `static get` is lexed as a single token
        modifiers = set()
        for c in node.children:
            if not c.is_named:
                modifiers.update(c.type.split())
        fn = self._build_function(node, path)

        if "get" in modifiers:
            members[name] = VariableDecl(
                types=fn.result, description=fn.description, errors=fn.errors
            )
        elif "set" in modifiers:
            if name not in members:
                types = fn.params[0].types if fn.params else [TypeRef.any_type()]
                members[name] = VariableDecl(
                    types=types, description=fn.description, errors=fn.errors
                )
        else:
            fn.is_static = "static" in modifiers
            members[name] = fn


def _has_value_return(node: ts.Node) -> bool:
    """
    True when the body of function *node* returns a value. Returns inside
    nested functions and classes do not count; an expression body does.
    """
    body = node.child_by_field_name("body")
    if body is None:
        return False
    if body.type != "statement_block":
        return True

    stack: List[ts.Node] = list(body.named_children)
    while stack:
        cur = stack.pop()
        if cur.type in _SCOPE_KINDS:
            continue
        if cur.type == "return_statement":
            if code_children(cur):
                return True
            continue
        stack.extend(cur.named_children)
    return False


def parse_code(
    code: str, module_name: str, settings: Optional[ResolverSettings] = None
) -> Module:
    """Parse and validate the declaration model of one JavaScript module."""
    return ModuleParser(module_name, settings).parse(code)
