from dtsgen.generator import generate
from dtsgen.models import (
    DEFAULT_EXPORT,
    ClassDecl,
    ConstantDecl,
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
from dtsgen.settings import EmitterSettings
from dtsgen.writer import Formatter, format_module, format_modules


def _module(name="demo"):
    return Module(name=name)


def test_function_with_docs_and_rest_parameter():
    module = _module()
    module.add(
        "add",
        FunctionDecl(
            exported=True,
            description="Adds numbers.",
            params=[
                Parameter(
                    name="a", description="first", types=[TypeRef(name="number")]
                ),
                Parameter(
                    name="rest",
                    types=[TypeRef(name="number"), TypeRef(name="string")],
                    rest=True,
                ),
            ],
            result=[TypeRef(name="number")],
        ),
    )
    module.add("LIMIT", ConstantDecl(value="10"))

    expected = "\n".join(
        [
            'declare module "demo" {',
            "",
            "    /**",
            "     * Adds numbers.",
            "     *",
            "     * @param a first",
            "     */",
            "    export function add (a: number, ...rest: (number | string)[]) : number;",
            "",
            "    const LIMIT = 10;",
            "}",
            "",
        ]
    )
    assert format_module(module) == expected


def test_type_rendering():
    fmt = Formatter()
    assert fmt.format_type(TypeRef(namespace="external", name="String")) == "String"
    assert (
        fmt.format_type(TypeRef(namespace="module", name="my/lib.Thing"))
        == 'import("my/lib").Thing'
    )
    assert (
        fmt.format_type(TypeRef(namespace="module", name="my/lib"))
        == 'typeof import("my/lib")'
    )
    assert fmt.format_type(TypeRef(namespace="event", name="Widget#open")) == (
        "event.Widget.open"
    )
    assert (
        fmt.format_type(
            TypeRef(
                name="Record",
                parameters=[TypeRef(name="string"), TypeRef(name="number")],
            )
        )
        == "Record<string, number>"
    )
    assert fmt.format_types([], empty="void") == "void"
    assert fmt.format_param(
        Parameter(name="b", types=[TypeRef(name="string")], optional=True)
    ) == "b?: string"


def test_class_rendering():
    module = _module()
    module.add(
        "Circle",
        ClassDecl(
            exported=True,
            extends="Shape",
            ctor=FunctionDecl(
                params=[
                    Parameter(name="r", description="radius", types=[TypeRef(name="number")])
                ]
            ),
            members={
                "area": FunctionDecl(result=[TypeRef(name="number")]),
                "unit": FunctionDecl(is_static=True, result=[TypeRef(name="Circle")]),
                "label": VariableDecl(types=[TypeRef(name="string")]),
            },
        ),
    )

    expected = "\n".join(
        [
            'declare module "demo" {',
            "",
            "    export class Circle extends Shape {",
            "        /**",
            "         * @param r radius",
            "         */",
            "        constructor (r: number);",
            "        area () : number;",
            "        static unit () : Circle;",
            "        label: string;",
            "    }",
            "}",
            "",
        ]
    )
    assert format_module(module) == expected


def test_declaration_forms():
    module = _module()
    module.add("count", VariableDecl(types=[TypeRef(name="number")], keyword="let"))
    module.add("placeholder", ConstantDecl(exported=True))
    module.add(
        "config",
        ObjectDecl(
            members={
                "debug": VariableDecl(types=[TypeRef(name="boolean")]),
                "fs": ImportDecl(module_path="fs"),
                "read": ImportDecl(module_path="fs", imported_name="readFile"),
                "count": IdentifierDecl(target="count"),
            }
        ),
    )
    module.add("Options", TypeDefDecl(types=[TypeRef(name="Object")]))
    module.add("total", IdentifierDecl(target="count"))
    module.add("sum", IdentifierDecl(target="count", exported=True))
    module.add("path", ImportDecl(module_path="path"))
    module.add(wildcard_key("./all"), ImportDecl(module_path="./all", exported=True))
    module.add(wildcard_key("./more"), ImportDecl(module_path="./more", exported=True))
    module.add("ns", ImportDecl(module_path="./ns", exported=True))

    lines = format_module(module).splitlines()

    assert "    let count: number;" in lines
    assert "    export const placeholder: any;" in lines
    assert "    const config: {" in lines
    assert "        debug: boolean;" in lines
    assert '        fs: typeof import("fs");' in lines
    assert '        read: typeof import("fs").readFile;' in lines
    assert "        count: typeof count;" in lines
    assert "    };" in lines
    assert "    type Options = Object;" in lines
    assert "    const total: typeof count;" in lines
    assert "    export { count as sum };" in lines
    assert '    import * as path from "path";' in lines
    assert '    export * from "./all";' in lines
    assert '    export * from "./more";' in lines
    assert '    export * as ns from "./ns";' in lines


def test_member_names_that_are_not_identifiers_are_quoted():
    module = _module()
    module.add(
        "headers",
        ObjectDecl(
            members={
                "content-type": VariableDecl(types=[TypeRef(name="string")]),
                "x y": FunctionDecl(),
                "$ok": ConstantDecl(value="1"),
                "404": VariableDecl(types=[TypeRef(name="number")]),
            }
        ),
    )

    lines = format_module(module).splitlines()
    assert '        "content-type": string;' in lines
    assert '        "x y" () : void;' in lines
    assert "        $ok: 1;" in lines
    assert "        404: number;" in lines


def test_string_keyed_members_from_source_are_quoted():
    code = "module.exports = {'content-type': 'json', 'x y'() {}};"
    lines = generate(code, "m").splitlines()

    assert '        "content-type": string;' in lines
    assert '        "x y" () : void;' in lines


def test_module_namespaced_parameter_renders_as_import_type():
    code = """
/**
 * @param {module:my/lib.Thing} x
 */
exports.f = function (x) {};
"""
    out = generate(code, "m")
    assert 'export function f (x: import("my/lib").Thing) : void;' in out


def test_default_export_forms():
    module = _module()
    module.add("main", FunctionDecl())
    module.add(DEFAULT_EXPORT, IdentifierDecl(target="main", exported=True))
    assert "    export default main;" in format_module(module).splitlines()

    module = _module()
    module.add(
        DEFAULT_EXPORT,
        ObjectDecl(exported=True, members={"a": VariableDecl(types=[TypeRef(name="number")])}),
    )
    lines = format_module(module).splitlines()
    assert "    const _default: {" in lines
    assert "    export default _default;" in lines
    assert not any(ln.strip().startswith("export const") for ln in lines)


def test_whole_module_export_forms():
    module = _module()
    module.add("Widget", ClassDecl())
    module.set_exports(IdentifierDecl(target="Widget"))
    assert format_module(module).splitlines()[-2:] == ["    export = Widget;", "}"]

    module = _module()
    module.set_exports(FunctionDecl(result=[TypeRef(name="string")]))
    lines = format_module(module).splitlines()
    assert "    function _exports () : string;" in lines
    assert "    export = _exports;" in lines


def test_diagnostics_follow_their_declaration():
    fn = FunctionDecl(params=[Parameter(name="x", types=[TypeRef(name="any")])])
    fn.warn('Parameter "x" type is not specified')
    cls = ClassDecl(members={"m": fn})
    module = _module()
    module.add("f", fn)
    module.add("C", cls)

    lines = format_module(module).splitlines()
    assert lines[2:4] == [
        "    function f (x: any) : void;",
        '    // WARN: Parameter "x" type is not specified',
    ]
    assert '        // WARN: Parameter "x" type is not specified' in lines

    quiet = format_module(module, EmitterSettings(warnings=False))
    assert "WARN" not in quiet


def test_module_description_and_indent():
    module = _module()
    module.description = "Utilities."
    module.add("x", VariableDecl(types=[TypeRef(name="number")]))

    out = format_module(module, EmitterSettings(indent=2))
    assert out.splitlines() == [
        "/**",
        " * Utilities.",
        " */",
        'declare module "demo" {',
        "",
        "  var x: number;",
        "}",
    ]


def test_colors():
    module = _module()
    module.add("x", VariableDecl(types=[TypeRef(name="number")], description="X."))
    fn = FunctionDecl()
    fn.warn("careful")
    module.add("f", fn)

    out = format_module(module, EmitterSettings(colors=True))
    assert "\x1b[35mx\x1b[0m" in out
    assert "\x1b[32m" in out
    assert "\x1b[31m" in out
    assert "\x1b[" not in format_module(module)


def test_formatting_does_not_mutate_and_is_deterministic():
    code = """
/**
 * @param {Sprocket} x
 */
exports.spin = function (x) { return x; };
module.exports.size = 3;
"""
    assert generate(code, "m") == generate(code, "m")

    module = _module()
    module.add("a", ObjectDecl(exported=True))
    before = module.model_dump()
    format_module(module)
    assert module.model_dump() == before


def test_format_modules_joins_outputs():
    out = format_modules([_module("a"), _module("b")])
    assert out == 'declare module "a" {\n}\n\ndeclare module "b" {\n}\n'


def test_exported_members_appear_once():
    code = """
exports.a = function () {};
exports.b = 1;
/** @type {string} */
exports.c = make();
"""
    out = generate(code, "m")
    for name in ("a", "b", "c"):
        tops = [
            ln
            for ln in out.splitlines()
            if ln.startswith("    export ") and f" {name}" in ln
        ]
        assert len(tops) == 1
