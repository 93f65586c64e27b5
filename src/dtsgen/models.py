from enum import Enum
from typing import Annotated, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DeclarationKind(str, Enum):
    VARIABLE = "variable"
    CONSTANT = "constant"
    IMPORT = "import"
    FUNCTION = "function"
    CLASS = "class"
    OBJECT = "object"
    IDENTIFIER = "identifier"
    TYPEDEF = "typedef"


# Reserved member names
DEFAULT_EXPORT = "default"
WILDCARD_EXPORT = "*"


def wildcard_key(module_path: str) -> str:
    """Member name of an `export * from module_path` entry; one per path."""
    return f"{WILDCARD_EXPORT}{module_path}"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TypeRef(BaseModel):
    namespace: Optional[str] = None  # eg. "external" for `external:String`
    name: str
    parameters: List["TypeRef"] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("type name must not be empty")
        return value

    @classmethod
    def any_type(cls) -> "TypeRef":
        return cls(name="any")

    def downgrade(self) -> None:
        """Rewrite this type in place to the universal `any`."""
        self.namespace = None
        self.name = "any"
        self.parameters = []


class Diagnostic(BaseModel):
    message: str


class Parameter(BaseModel):
    name: str
    description: Optional[str] = None
    types: List[TypeRef] = Field(default_factory=list)
    optional: bool = False
    rest: bool = False


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class DeclarationBase(BaseModel):
    exported: bool = False
    description: str = ""
    errors: List[Diagnostic] = Field(default_factory=list)

    def warn(self, message: str) -> None:
        self.errors.append(Diagnostic(message=message))


class VariableDecl(DeclarationBase):
    kind: Literal[DeclarationKind.VARIABLE] = DeclarationKind.VARIABLE
    types: List[TypeRef] = Field(default_factory=list)
    keyword: str = "var"  # var | let | const


class ConstantDecl(DeclarationBase):
    kind: Literal[DeclarationKind.CONSTANT] = DeclarationKind.CONSTANT
    value: Optional[str] = None  # literal source text; None is a placeholder


class ImportDecl(DeclarationBase):
    kind: Literal[DeclarationKind.IMPORT] = DeclarationKind.IMPORT
    module_path: str
    # Name inside the source module. None imports the whole namespace.
    imported_name: Optional[str] = None


class FunctionDecl(DeclarationBase):
    kind: Literal[DeclarationKind.FUNCTION] = DeclarationKind.FUNCTION
    params: List[Parameter] = Field(default_factory=list)
    result: List[TypeRef] = Field(default_factory=list)
    is_static: bool = False


class ClassDecl(DeclarationBase):
    kind: Literal[DeclarationKind.CLASS] = DeclarationKind.CLASS
    ctor: Optional[FunctionDecl] = None
    members: Dict[str, "Declaration"] = Field(default_factory=dict)
    extends: Optional[str] = None


class ObjectDecl(DeclarationBase):
    kind: Literal[DeclarationKind.OBJECT] = DeclarationKind.OBJECT
    members: Dict[str, "Declaration"] = Field(default_factory=dict)


class IdentifierDecl(DeclarationBase):
    kind: Literal[DeclarationKind.IDENTIFIER] = DeclarationKind.IDENTIFIER
    target: str


class TypeDefDecl(DeclarationBase):
    kind: Literal[DeclarationKind.TYPEDEF] = DeclarationKind.TYPEDEF
    types: List[TypeRef] = Field(default_factory=list)


Declaration = Annotated[
    Union[
        VariableDecl,
        ConstantDecl,
        ImportDecl,
        FunctionDecl,
        ClassDecl,
        ObjectDecl,
        IdentifierDecl,
        TypeDefDecl,
    ],
    Field(discriminator="kind"),
]

ClassDecl.model_rebuild()
ObjectDecl.model_rebuild()


# ---------------------------------------------------------------------------
# Module
# ---------------------------------------------------------------------------


class Module(BaseModel):
    name: str
    description: str = ""
    items: Dict[str, Declaration] = Field(default_factory=dict)
    # Whole-module replacement export (`module.exports = ...`). None means that
    # members are exported individually through their `exported` flag.
    exports: Optional[Declaration] = None

    def add(self, name: str, decl: Declaration) -> None:
        """
        Register *decl* under *name*, replacing any previous slot in place.
        A pending `exports.foo = foo` alias hands its export flag over to the
        declaration that fills the slot.
        """
        existing = self.items.get(name)
        if (
            isinstance(existing, IdentifierDecl)
            and existing.target == name
            and existing.exported
        ):
            decl.exported = True
            if not decl.description:
                decl.description = existing.description
        self.items[name] = decl

    def exported_items(self) -> Iterator[Tuple[str, Declaration]]:
        for name, decl in self.items.items():
            if decl.exported:
                yield name, decl

    def set_exports(self, decl: Declaration) -> None:
        """Switch to whole-module replacement mode; the last write wins."""
        for item in self.items.values():
            item.exported = False
        self.exports = decl
