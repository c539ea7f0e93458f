"""
nestype: type and shape inference for nested Python values.

Infers a structural type descriptor ("2 * 3 * int64",
"var(offsets=[0, 2]) * ?float64", "{a : string, b : 3 * int64}") for lists,
dicts, tuples and scalars, and returns the value normalized to mirror it.

    >>> from nestype import infer
    >>> infer([[1, 2], [3, 4]]).type
    FixedDimType('2 * 2 * int64')
"""

from .shared import (
    Type, TypeKind, ScalarType, OptionType, RecordType, TupleType,
    FixedDimType, VarDimType, SymbolicDimType, CategoricalType, TypeVar, NominalType,
    NestypeError, InferenceError, TypeSystemError, ValuePath,
)
from .inference import (
    infer, try_infer, typeof, classify_leaf, data_shapes,
    InferenceDriver, Inferred,
    Hint, ExplicitType, ExplicitDtype, Categories, Alias, DtypeAlias,
)
from .typesys import TypeRegistry, TypeSystem

__version__ = "0.1.0"
