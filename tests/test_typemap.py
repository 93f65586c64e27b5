import pytest

from dtsgen.errors import UnsupportedTypeGrammar
from dtsgen.jsdoc import parse_type
from dtsgen.models import TypeRef
from dtsgen.typemap import split_name, to_types


def _types(text):
    return to_types(parse_type(text))


def test_union_keeps_order_and_duplicates():
    assert _types("string|number|string") == [
        TypeRef(name="string"),
        TypeRef(name="number"),
        TypeRef(name="string"),
    ]


def test_name_with_namespace_is_split():
    assert split_name("external:String") == TypeRef(namespace="external", name="String")
    assert _types("module:foo/bar.Baz") == [
        TypeRef(namespace="module", name="foo/bar.Baz")
    ]


def test_alias_table():
    assert _types("Array") == [TypeRef(name="any[]")]
    assert _types("*") == [TypeRef(name="any")]


def test_type_applications():
    assert _types("Array.<string>") == [
        TypeRef(name="Array", parameters=[TypeRef(name="string")])
    ]
    assert _types("string[]") == [
        TypeRef(name="Array", parameters=[TypeRef(name="string")])
    ]
    assert _types("Object.<string, number>") == [
        TypeRef(
            name="Record",
            parameters=[TypeRef(name="string"), TypeRef(name="number")],
        )
    ]


def test_wrappers_unwrap():
    assert _types("number=") == [TypeRef(name="number")]
    assert _types("!Date") == [TypeRef(name="Date")]
    assert _types("?number") == [TypeRef(name="number"), TypeRef(name="null")]
    assert _types("...string") == [TypeRef(name="string")]


@pytest.mark.parametrize(
    "text, tag",
    [
        ("function(string): number", "FunctionType"),
        ("{a: number}", "RecordType"),
        ("Array.<string|number>", "UnionType"),
    ],
)
def test_unsupported_productions_raise(text, tag):
    with pytest.raises(UnsupportedTypeGrammar) as exc:
        _types(text)
    assert exc.value.tag == tag


def test_type_ref_name_must_not_be_empty():
    with pytest.raises(ValueError):
        TypeRef(name="")
