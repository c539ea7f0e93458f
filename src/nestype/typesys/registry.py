"""
Type System Collaborator

The inference engine consumes a type system for explicit types, categorical
types and typedefs. TypeSystem is the interface; TypeRegistry is the
in-process implementation: descriptors are Type objects, scalar kind names
or registered typedef names.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Union

from ..shared.errors import (
    CategoricalError, InstantiationError, TypeSystemError, UndefinedTypeError,
)
from ..shared.types import (
    Type, TypeKind, OptionType, FixedDimType, SymbolicDimType, CategoricalType,
    TypeVar, NominalType, SCALAR_TYPES,
)
from ..utils.config import OPTION_PREFIX

logger = logging.getLogger(__name__)

Descriptor = Union[Type, str]

_LABEL_TYPES = (bool, int, float, str)


class TypeSystem(ABC):
    """Operations the inference driver needs from a type system."""

    @abstractmethod
    def parse(self, descriptor: Descriptor) -> Type:
        """Turn a descriptor into a type handle."""
        raise NotImplementedError

    @abstractmethod
    def resolve(self, name: str) -> Type:
        """Look up a typedef by name."""
        raise NotImplementedError

    @abstractmethod
    def typedef(self, name: str, descriptor: Descriptor) -> None:
        raise NotImplementedError

    @abstractmethod
    def categorical(self, labels: Iterable[Any]) -> CategoricalType:
        raise NotImplementedError

    @abstractmethod
    def is_abstract(self, ty: Type) -> bool:
        raise NotImplementedError

    @abstractmethod
    def hidden_dtype(self, ty: Type) -> Type:
        """The dtype slot of an abstract type."""
        raise NotImplementedError

    @abstractmethod
    def instantiate(self, name: str, ty: Type) -> Type:
        """Bind a typedef to a concrete type matching its definition."""
        raise NotImplementedError


class TypeRegistry(TypeSystem):
    """
    Typedef table plus the constructors the driver uses.

    Each registry owns its table; nothing is shared between instances.
    """

    def __init__(self):
        self._typedefs: Dict[str, Type] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._typedefs

    # ------------------------------------------------------------------
    # Descriptors and typedefs
    # ------------------------------------------------------------------

    def parse(self, descriptor: Descriptor) -> Type:
        if isinstance(descriptor, Type):
            return descriptor
        if not isinstance(descriptor, str):
            raise TypeSystemError(f"invalid type descriptor: {descriptor!r}")
        name = descriptor.strip()
        if name.startswith(OPTION_PREFIX):
            return OptionType(self.parse(name[len(OPTION_PREFIX):]))
        if name in SCALAR_TYPES:
            return SCALAR_TYPES[name]
        return self.resolve(name)

    def resolve(self, name: str) -> Type:
        if name not in self._typedefs:
            raise UndefinedTypeError(name)
        return NominalType(name, self._typedefs[name])

    def typedef(self, name: str, descriptor: Descriptor) -> None:
        if not name.isidentifier():
            raise TypeSystemError(f"invalid typedef name: '{name}'")
        if name in SCALAR_TYPES or name in self._typedefs:
            raise TypeSystemError(f"'{name}' is already defined")
        definition = self.parse(descriptor)
        self._typedefs[name] = definition
        logger.debug(f"[TypeRegistry] typedef {name} = {definition}")

    def definition(self, name: str) -> Type:
        if name not in self._typedefs:
            raise UndefinedTypeError(name)
        return self._typedefs[name]

    # ------------------------------------------------------------------
    # Categorical types
    # ------------------------------------------------------------------

    def categorical(self, labels: Iterable[Any]) -> CategoricalType:
        labels = list(labels)
        seen = set()
        for label in labels:
            if label is not None and not isinstance(label, _LABEL_TYPES):
                raise CategoricalError(f"invalid categorical label: {label!r}")
            key = (type(label), label)
            if key in seen:
                raise CategoricalError(f"duplicate categorical label: {label!r}")
            seen.add(key)
        return CategoricalType(labels)

    # ------------------------------------------------------------------
    # Abstract types
    # ------------------------------------------------------------------

    def is_abstract(self, ty: Type) -> bool:
        return ty.is_abstract()

    def hidden_dtype(self, ty: Type) -> Type:
        if isinstance(ty, NominalType):
            ty = ty.definition
        return ty.dtype

    def instantiate(self, name: str, ty: Type) -> Type:
        pattern = self.definition(name)
        if not _match(pattern, ty, {}):
            raise InstantiationError(name, pattern, ty)
        return NominalType(name, ty)


def _match(pattern: Type, concrete: Type, bindings: Dict[str, Any]) -> bool:
    """
    Match an abstract pattern against a concrete type.

    Type variables and symbolic dimensions bind on first use and must bind
    to the same thing everywhere else.
    """
    if isinstance(pattern, TypeVar):
        return _bind(bindings, pattern.name, concrete)
    if isinstance(pattern, SymbolicDimType):
        return (isinstance(concrete, FixedDimType)
                and _bind(bindings, pattern.name, concrete.length)
                and _match(pattern.element_type, concrete.element_type, bindings))
    if isinstance(pattern, NominalType):
        if isinstance(concrete, NominalType):
            return pattern.name == concrete.name
        return _match(pattern.definition, concrete, bindings)
    if pattern.kind != concrete.kind:
        return False

    if pattern.kind == TypeKind.VAR_DIM:
        if pattern.offsets is not None and pattern.offsets != concrete.offsets:
            return False
        if pattern.optional != concrete.optional:
            return False
        return _match(pattern.element_type, concrete.element_type, bindings)
    if pattern.kind == TypeKind.FIXED_DIM:
        return (pattern.length == concrete.length
                and pattern.optional == concrete.optional
                and _match(pattern.element_type, concrete.element_type, bindings))
    if pattern.kind == TypeKind.OPTION:
        return _match(pattern.element_type, concrete.element_type, bindings)
    if pattern.kind == TypeKind.RECORD:
        return (pattern.names == concrete.names
                and all(_match(p, c, bindings)
                        for (_, p), (_, c) in zip(pattern.fields, concrete.fields)))
    if pattern.kind == TypeKind.TUPLE:
        return (len(pattern.element_types) == len(concrete.element_types)
                and all(_match(p, c, bindings)
                        for p, c in zip(pattern.element_types, concrete.element_types)))
    return pattern == concrete


def _bind(bindings: Dict[str, Any], name: str, value: Any) -> bool:
    if name in bindings:
        return bindings[name] == value
    bindings[name] = value
    return True
