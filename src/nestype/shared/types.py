"""
Type System

Structural type descriptors produced by inference and consumed by the
typed storage engine.

Convention: descriptors are immutable and compare structurally. A dimension
type wraps its element type, so "2 * 3 * int64" is
FixedDimType(2, FixedDimType(3, INT64)). str() renders the canonical
descriptor string.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, Optional, Tuple, TypeVar as TypingTypeVar, Union
from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from ..utils.config import (
    BOOL_TYPE_NAME, INT_TYPE_NAME, FLOAT_TYPE_NAME, COMPLEX_TYPE_NAME,
    BYTES_TYPE_NAME, STRING_TYPE_NAME, DEFAULT_DTYPE_NAME, NA_LABEL, OPTION_PREFIX,
)


class TypeKind(Enum):
    """Type kind"""
    SCALAR = "scalar"            # bool, int64, float64, string, ...
    OPTION = "option"            # ?T
    RECORD = "record"            # {a : T, b : U}
    TUPLE = "tuple"              # (T, U)
    FIXED_DIM = "fixed_dim"      # N * T
    VAR_DIM = "var_dim"          # var(offsets=[...]) * T
    SYMBOLIC_DIM = "symbolic_dim"  # N * T with N unbound (abstract)
    CATEGORICAL = "categorical"  # categorical('a', 'b', NA)
    TYPEVAR = "typevar"          # T (abstract)
    NOMINAL = "nominal"          # instantiated typedef


DIMENSION_KINDS = frozenset({TypeKind.FIXED_DIM, TypeKind.VAR_DIM, TypeKind.SYMBOLIC_DIM})

R = TypingTypeVar('R')


@dataclass(frozen=True, repr=False)
class Type:
    """
    Type descriptor base.

    - Immutable (frozen dataclass)
    - Structural equality and hashing
    - Visitor pattern support (accept method for type matching)
    """
    kind: TypeKind

    def accept(self, visitor: 'TypeVisitor[R]') -> R:
        """Dispatch to the visitor method for this kind."""
        _type_visitor_dispatch = {
            TypeKind.SCALAR: visitor.visit_scalar_type,
            TypeKind.OPTION: visitor.visit_option_type,
            TypeKind.RECORD: visitor.visit_record_type,
            TypeKind.TUPLE: visitor.visit_tuple_type,
            TypeKind.FIXED_DIM: visitor.visit_fixed_dim_type,
            TypeKind.VAR_DIM: visitor.visit_var_dim_type,
            TypeKind.SYMBOLIC_DIM: visitor.visit_symbolic_dim_type,
            TypeKind.CATEGORICAL: visitor.visit_categorical_type,
            TypeKind.TYPEVAR: visitor.visit_typevar,
            TypeKind.NOMINAL: visitor.visit_nominal_type,
        }
        return _type_visitor_dispatch[self.kind](self)  # type: ignore

    def children(self) -> Tuple['Type', ...]:
        return ()

    def is_dimension(self) -> bool:
        return self.kind in DIMENSION_KINDS

    @property
    def ndim(self) -> int:
        """Number of leading dimensions."""
        n = 0
        t: Type = self
        while t.is_dimension():
            n += 1
            t = t.element_type  # type: ignore[attr-defined]
        return n

    @property
    def dtype(self) -> 'Type':
        """Element type below all leading dimensions."""
        t: Type = self
        while t.is_dimension():
            t = t.element_type  # type: ignore[attr-defined]
        return t

    def is_abstract(self) -> bool:
        """True if the type contains type variables or symbolic dimensions."""
        if self.kind in (TypeKind.TYPEVAR, TypeKind.SYMBOLIC_DIM):
            return True
        return any(child.is_abstract() for child in self.children())

    def is_optional(self) -> bool:
        return self.kind == TypeKind.OPTION

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self}')"


@dataclass(frozen=True, repr=False)
class ScalarType(Type):
    """Scalar type (bool, int64, float64, string, ...)"""
    name: str

    def __init__(self, name: str):
        if name not in SCALAR_NAMES:
            raise ValueError(f"unknown scalar kind: '{name}'")
        super().__init__(kind=TypeKind.SCALAR)
        object.__setattr__(self, 'name', name)

    @property
    def numpy_dtype(self) -> np.dtype:
        """NumPy dtype used by the storage engine for this scalar kind."""
        if self.name in (BYTES_TYPE_NAME, STRING_TYPE_NAME):
            return np.dtype(object)
        return np.dtype(self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, repr=False)
class OptionType(Type):
    """Optional type: ?T (value may be missing)"""
    element_type: Type

    def __init__(self, element_type: Type):
        super().__init__(kind=TypeKind.OPTION)
        object.__setattr__(self, 'element_type', element_type)

    def children(self) -> Tuple[Type, ...]:
        return (self.element_type,)

    def __str__(self) -> str:
        return f"{OPTION_PREFIX}{self.element_type}"


def _field_name(name: str) -> str:
    return name if name.isidentifier() else f"'{name}'"


@dataclass(frozen=True, repr=False)
class RecordType(Type):
    """Record type: ordered (name, type) fields"""
    fields: Tuple[Tuple[str, Type], ...]

    def __init__(self, fields: Union[Iterable[Tuple[str, Type]], Dict[str, Type]]):
        super().__init__(kind=TypeKind.RECORD)
        items = fields.items() if isinstance(fields, dict) else fields
        object.__setattr__(self, 'fields', tuple((name, t) for name, t in items))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def field(self, name: str) -> Type:
        for field_name, t in self.fields:
            if field_name == name:
                return t
        raise KeyError(name)

    def children(self) -> Tuple[Type, ...]:
        return tuple(t for _, t in self.fields)

    def __str__(self) -> str:
        body = ", ".join(f"{_field_name(name)} : {t}" for name, t in self.fields)
        return "{" + body + "}"


@dataclass(frozen=True, repr=False)
class TupleType(Type):
    """Tuple (product) type"""
    element_types: Tuple[Type, ...]

    def __init__(self, element_types: Iterable[Type]):
        super().__init__(kind=TypeKind.TUPLE)
        object.__setattr__(self, 'element_types', tuple(element_types))

    def children(self) -> Tuple[Type, ...]:
        return self.element_types

    def __str__(self) -> str:
        return "(" + ", ".join(str(t) for t in self.element_types) + ")"


@dataclass(frozen=True, repr=False)
class FixedDimType(Type):
    """
    Fixed dimension: every branch at this level has the same length.

    Access pattern: A[i] for 0 <= i < length
    """
    length: int
    element_type: Type
    optional: bool = False

    def __init__(self, length: int, element_type: Type, optional: bool = False):
        super().__init__(kind=TypeKind.FIXED_DIM)
        object.__setattr__(self, 'length', int(length))
        object.__setattr__(self, 'element_type', element_type)
        object.__setattr__(self, 'optional', bool(optional))

    def children(self) -> Tuple[Type, ...]:
        return (self.element_type,)

    def __str__(self) -> str:
        prefix = OPTION_PREFIX if self.optional else ""
        return f"{prefix}{self.length} * {self.element_type}"


@dataclass(frozen=True, repr=False)
class VarDimType(Type):
    """
    Variable (ragged) dimension.

    offsets are prefix sums over all branches at this level:
    branch i has length offsets[i+1] - offsets[i]. None means any lengths.
    """
    element_type: Type
    offsets: Optional[Tuple[int, ...]] = None
    optional: bool = False

    def __init__(self, element_type: Type,
                 offsets: Optional[Iterable[int]] = None,
                 optional: bool = False):
        super().__init__(kind=TypeKind.VAR_DIM)
        object.__setattr__(self, 'element_type', element_type)
        object.__setattr__(self, 'offsets',
                           None if offsets is None else tuple(int(o) for o in offsets))
        object.__setattr__(self, 'optional', bool(optional))

    @property
    def nbranches(self) -> Optional[int]:
        return None if self.offsets is None else len(self.offsets) - 1

    def branch_length(self, index: int) -> int:
        return self.offsets[index + 1] - self.offsets[index]

    def children(self) -> Tuple[Type, ...]:
        return (self.element_type,)

    def __str__(self) -> str:
        prefix = OPTION_PREFIX if self.optional else ""
        if self.offsets is None:
            return f"{prefix}var * {self.element_type}"
        offsets = ", ".join(str(o) for o in self.offsets)
        return f"{prefix}var(offsets=[{offsets}]) * {self.element_type}"


@dataclass(frozen=True, repr=False)
class SymbolicDimType(Type):
    """Symbolic dimension (abstract): N * T"""
    name: str
    element_type: Type

    def __init__(self, name: str, element_type: Type):
        super().__init__(kind=TypeKind.SYMBOLIC_DIM)
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'element_type', element_type)

    def children(self) -> Tuple[Type, ...]:
        return (self.element_type,)

    def __str__(self) -> str:
        return f"{self.name} * {self.element_type}"


def _label(label: Any) -> str:
    if label is None:
        return NA_LABEL
    if isinstance(label, str):
        return f"'{label}'"
    return repr(label)


@dataclass(frozen=True, repr=False)
class CategoricalType(Type):
    """Categorical scalar: values are drawn from a fixed, ordered label list"""
    labels: Tuple[Any, ...]

    def __init__(self, labels: Iterable[Any]):
        super().__init__(kind=TypeKind.CATEGORICAL)
        object.__setattr__(self, 'labels', tuple(labels))

    def __str__(self) -> str:
        return "categorical(" + ", ".join(_label(l) for l in self.labels) + ")"


@dataclass(frozen=True, repr=False)
class TypeVar(Type):
    """Type variable (abstract)"""
    name: str

    def __init__(self, name: str):
        super().__init__(kind=TypeKind.TYPEVAR)
        object.__setattr__(self, 'name', name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, repr=False)
class NominalType(Type):
    """Named type: a typedef together with its concrete definition"""
    name: str
    definition: Type

    def __init__(self, name: str, definition: Type):
        super().__init__(kind=TypeKind.NOMINAL)
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'definition', definition)

    def children(self) -> Tuple[Type, ...]:
        return (self.definition,)

    def __str__(self) -> str:
        return self.name


class TypeVisitor(ABC, Generic[R]):
    """
    Type visitor pattern.

    Visitor pattern for type matching: type-safe dispatch by kind,
    new operations are added without touching the descriptors.
    """

    @abstractmethod
    def visit_scalar_type(self, ty: ScalarType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_option_type(self, ty: OptionType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_record_type(self, ty: RecordType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_tuple_type(self, ty: TupleType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_fixed_dim_type(self, ty: FixedDimType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_var_dim_type(self, ty: VarDimType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_symbolic_dim_type(self, ty: SymbolicDimType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_categorical_type(self, ty: CategoricalType) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_typevar(self, ty: TypeVar) -> R:
        raise NotImplementedError

    @abstractmethod
    def visit_nominal_type(self, ty: NominalType) -> R:
        raise NotImplementedError


# Scalar kinds known to the type system
SCALAR_NAMES = (
    "bool",
    "int8", "int16", "int32", "int64",
    "uint8", "uint16", "uint32", "uint64",
    "float16", "float32", "float64",
    "complex64", "complex128",
    "bytes", "string",
)

SCALAR_TYPES: Dict[str, ScalarType] = {name: ScalarType(name) for name in SCALAR_NAMES}

# Scalar types produced by inference
BOOL = SCALAR_TYPES[BOOL_TYPE_NAME]
INT64 = SCALAR_TYPES[INT_TYPE_NAME]
FLOAT64 = SCALAR_TYPES[FLOAT_TYPE_NAME]
COMPLEX128 = SCALAR_TYPES[COMPLEX_TYPE_NAME]
BYTES = SCALAR_TYPES[BYTES_TYPE_NAME]
STRING = SCALAR_TYPES[STRING_TYPE_NAME]

# Fallback dtype for empty or all-missing data
DEFAULT_DTYPE = SCALAR_TYPES[DEFAULT_DTYPE_NAME]

INTEGER_NAMES = frozenset(n for n in SCALAR_NAMES if n.startswith(("int", "uint")))
FLOAT_NAMES = frozenset(n for n in SCALAR_NAMES if n.startswith("float"))
COMPLEX_NAMES = frozenset(n for n in SCALAR_NAMES if n.startswith("complex"))
