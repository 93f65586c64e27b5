from typing import Dict, Iterable, List, Optional, Set

from dtsgen.logger import logger
from dtsgen.models import (
    ClassDecl,
    ConstantDecl,
    Declaration,
    DeclarationBase,
    FunctionDecl,
    IdentifierDecl,
    Module,
    ObjectDecl,
    TypeDefDecl,
    TypeRef,
    VariableDecl,
)
from dtsgen.typemap import BUILTIN_TYPES


def known_types(module: Module, extra_types: Iterable[str] = ()) -> Set[str]:
    """Built-ins, configured names, `@typedef` names and classes of *module*."""
    known = set(BUILTIN_TYPES)
    known.update(extra_types)
    for name, decl in module.items.items():
        if isinstance(decl, (TypeDefDecl, ClassDecl)):
            known.add(name)
    return known


def _unknown(types: List[TypeRef], known: Set[str]) -> List[TypeRef]:
    out: List[TypeRef] = []
    for t in types:
        if t.namespace is not None:
            continue
        if t.name not in known:
            out.append(t)
        else:
            out.extend(_unknown(t.parameters, known))
    return out


class _Validator:
    def __init__(self, module: Module, known: Set[str]) -> None:
        self.module = module
        self.known = known

    def run(self) -> None:
        self._check_slots(self.module.items, top_level=True)
        if self.module.exports is not None:
            holder = {"": self.module.exports}
            self._check_slots(holder, top_level=True)
            self.module.exports = holder[""]

    def _check_slots(self, slots: Dict[str, Declaration], top_level: bool) -> None:
        for name in list(slots):
            decl = slots[name]
            if isinstance(decl, IdentifierDecl):
                replacement = self._check_alias(name, decl, top_level)
                if replacement is not None:
                    slots[name] = replacement
                continue
            self._check(decl)

    def _check(self, decl: Declaration) -> None:
        if isinstance(decl, (VariableDecl, TypeDefDecl)):
            for t in _unknown(decl.types, self.known):
                self._downgrade(decl, t, f'Type "{t.name}" was not found')
        elif isinstance(decl, FunctionDecl):
            self._check_function(decl)
        elif isinstance(decl, ClassDecl):
            if decl.extends is not None and decl.extends not in self.known:
                if "." not in decl.extends:
                    decl.warn(f'Base class "{decl.extends}" was not found')
                    decl.extends = None
            if decl.ctor is not None:
                self._check_function(decl.ctor)
            self._check_slots(decl.members, top_level=False)
        elif isinstance(decl, ObjectDecl):
            self._check_slots(decl.members, top_level=False)

    def _check_function(self, fn: FunctionDecl) -> None:
        for param in fn.params:
            for t in _unknown(param.types, self.known):
                self._downgrade(
                    fn, t, f'Parameter "{param.name}" type "{t.name}" was not found'
                )
        for t in _unknown(fn.result, self.known):
            self._downgrade(fn, t, f'Result type "{t.name}" was not found')

    def _check_alias(
        self, name: str, decl: IdentifierDecl, top_level: bool
    ) -> Optional[ConstantDecl]:
        target = self.module.items.get(decl.target)
        # A nested alias may point at any module member; a top-level one must
        # not point at itself.
        if target is not None and (not top_level or target is not decl):
            return None

        logger.info("Unresolved alias replaced", name=name, target=decl.target)
        placeholder = ConstantDecl(
            exported=decl.exported,
            description=decl.description,
            errors=list(decl.errors),
        )
        placeholder.warn(f'Alias target "{decl.target}" was not found')
        return placeholder

    def _downgrade(self, owner: DeclarationBase, t: TypeRef, message: str) -> None:
        logger.debug("Unknown type downgraded", type=t.name)
        owner.warn(message)
        t.downgrade()


def validate_module(module: Module, extra_types: Iterable[str] = ()) -> Module:
    """
    Check every type of *module* against the recognised-type set, in place.
    Unknown types become `any` with a diagnostic on the owning declaration;
    unresolved aliases become placeholder constants. Never raises.
    """
    _Validator(module, known_types(module, extra_types)).run()
    return module
