from dtsgen.models import (
    ClassDecl,
    ConstantDecl,
    FunctionDecl,
    IdentifierDecl,
    Module,
    ObjectDecl,
    Parameter,
    TypeDefDecl,
    TypeRef,
    VariableDecl,
)
from dtsgen.validate import known_types, validate_module


def _messages(decl):
    return [e.message for e in decl.errors]


def test_unknown_types_are_downgraded_with_diagnostics():
    module = Module(name="m")
    module.add("gadget", VariableDecl(types=[TypeRef(name="Gadget")]))
    module.add(
        "make",
        FunctionDecl(
            params=[Parameter(name="x", types=[TypeRef(name="Sprocket")])],
            result=[TypeRef(name="Cog")],
        ),
    )

    validate_module(module)

    gadget = module.items["gadget"]
    assert gadget.types == [TypeRef(name="any")]
    assert _messages(gadget) == ['Type "Gadget" was not found']

    make = module.items["make"]
    assert make.params[0].types == [TypeRef(name="any")]
    assert make.result == [TypeRef(name="any")]
    assert _messages(make) == [
        'Parameter "x" type "Sprocket" was not found',
        'Result type "Cog" was not found',
    ]


def test_namespaced_and_generic_types():
    module = Module(name="m")
    module.add("ext", VariableDecl(types=[TypeRef(namespace="external", name="Thing")]))
    module.add(
        "list",
        VariableDecl(
            types=[TypeRef(name="Array", parameters=[TypeRef(name="Gizmo")])]
        ),
    )

    validate_module(module)

    assert module.items["ext"].errors == []
    assert module.items["ext"].types[0].name == "Thing"
    assert module.items["list"].types == [
        TypeRef(name="Array", parameters=[TypeRef(name="any")])
    ]
    assert _messages(module.items["list"]) == ['Type "Gizmo" was not found']


def test_recognised_type_sources():
    module = Module(name="m")
    module.add("Options", TypeDefDecl(types=[TypeRef(name="Object")]))
    module.add("Shape", ClassDecl())
    module.add(
        "v",
        VariableDecl(
            types=[
                TypeRef(name="Options"),
                TypeRef(name="Shape"),
                TypeRef(name="Gadget"),
            ]
        ),
    )

    assert {"Options", "Shape", "Gadget"} <= known_types(module, {"Gadget"})

    validate_module(module, extra_types={"Gadget"})
    assert module.items["v"].errors == []


def test_class_members_and_base_are_checked():
    module = Module(name="m")
    cls = ClassDecl(
        ctor=FunctionDecl(params=[Parameter(name="opts", types=[TypeRef(name="Opts")])]),
        extends="Missing",
        members={"size": VariableDecl(types=[TypeRef(name="Size")])},
    )
    module.add("Box", cls)

    validate_module(module)

    assert cls.extends is None
    assert _messages(cls) == ['Base class "Missing" was not found']
    assert _messages(cls.ctor) == ['Parameter "opts" type "Opts" was not found']
    assert _messages(cls.members["size"]) == ['Type "Size" was not found']


def test_unresolved_alias_becomes_placeholder():
    module = Module(name="m")
    module.add("flag", IdentifierDecl(target="missing", exported=True, description="A flag."))
    module.add("self", IdentifierDecl(target="self"))
    module.add("value", VariableDecl(types=[TypeRef(name="number")]))
    module.add("ok", IdentifierDecl(target="value"))

    validate_module(module)

    flag = module.items["flag"]
    assert isinstance(flag, ConstantDecl)
    assert flag.value is None
    assert flag.exported
    assert flag.description == "A flag."
    assert _messages(flag) == ['Alias target "missing" was not found']
    assert isinstance(module.items["self"], ConstantDecl)
    assert isinstance(module.items["ok"], IdentifierDecl)
    assert list(module.items) == ["flag", "self", "value", "ok"]


def test_aggregate_export_is_checked():
    module = Module(name="m")
    module.set_exports(
        ObjectDecl(members={"port": VariableDecl(types=[TypeRef(name="Port")])})
    )
    validate_module(module)
    assert _messages(module.exports.members["port"]) == ['Type "Port" was not found']

    module.set_exports(IdentifierDecl(target="nothing"))
    validate_module(module)
    assert isinstance(module.exports, ConstantDecl)
    assert _messages(module.exports) == ['Alias target "nothing" was not found']
