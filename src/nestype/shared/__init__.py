"""
Shared components: type descriptors, value paths and the error taxonomy.
"""

from .value_path import ValuePath, ROOT
from .errors import (
    NestypeError, InferenceError, UnbalancedShapeError, TooManyDimensionsError,
    InvalidKeyError, UnsupportedValueError, HintNotApplicableError,
    DtypeMismatchError, ConflictingHintsError, ShapeMismatchError,
    TypeSystemError, UndefinedTypeError, AbstractTypeError, CategoricalError,
    InstantiationError, NestypeImplementationError, format_diagnostic,
)
from .types import (
    Type, TypeKind, TypeVisitor, ScalarType, OptionType, RecordType, TupleType,
    FixedDimType, VarDimType, SymbolicDimType, CategoricalType, TypeVar, NominalType,
    SCALAR_NAMES, SCALAR_TYPES, BOOL, INT64, FLOAT64, COMPLEX128, BYTES, STRING,
    DEFAULT_DTYPE,
)
