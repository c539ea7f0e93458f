"""
Conformance Checker

Validates a value against a concrete type descriptor and returns the
normalized value (tuples and arrays as lists, NumPy scalars as Python
scalars, missing values in place). Used for explicit types and dtypes and to
normalize inferred values before they are handed to the storage engine.
"""

import logging
from typing import Any, FrozenSet, List, Optional

import numpy as np

from ..shared.errors import (
    AbstractTypeError, CategoricalError, DtypeMismatchError, ShapeMismatchError,
)
from ..shared.types import (
    Type, TypeVisitor, ScalarType, OptionType, RecordType, TupleType,
    FixedDimType, VarDimType, SymbolicDimType, CategoricalType, TypeVar, NominalType,
    INTEGER_NAMES, FLOAT_NAMES, COMPLEX_NAMES,
)
from ..shared.value_path import ROOT, ValuePath
from .classifier import LEAF_TYPES, ValueKind, check_mapping_keys, unwrap_scalar_array, value_kind

logger = logging.getLogger(__name__)

_NUMERIC = {
    "integer": frozenset({ValueKind.INTEGER}),
    "float": frozenset({ValueKind.INTEGER, ValueKind.FLOAT}),
    "complex": frozenset({ValueKind.INTEGER, ValueKind.FLOAT, ValueKind.COMPLEX}),
}


def _accepted_kinds(ty: ScalarType) -> FrozenSet[ValueKind]:
    if ty.name in INTEGER_NAMES:
        return _NUMERIC["integer"]
    if ty.name in FLOAT_NAMES:
        return _NUMERIC["float"]
    if ty.name in COMPLEX_NAMES:
        return _NUMERIC["complex"]
    if ty.name == "bool":
        return frozenset({ValueKind.BOOLEAN})
    if ty.name == "bytes":
        return frozenset({ValueKind.BYTES})
    return frozenset({ValueKind.STRING})


def _found(value: Any, kind: ValueKind) -> Any:
    if value is None:
        return "missing"
    return LEAF_TYPES.get(kind, kind.value)


def to_python(value: Any) -> Any:
    """NumPy scalars become the equivalent Python scalar."""
    if isinstance(value, np.generic):
        return value.item()
    return value


class ValueConformer(TypeVisitor[Any]):
    """
    Type visitor that checks the current value against each type node.

    The value and path being checked live on the visitor; conform() swaps
    them around each nested visit.
    """

    def __init__(self):
        self.position = 0
        self._next_position = 0
        self._value: Any = None
        self._path: ValuePath = ROOT

    def conform(self, value: Any, ty: Type, path: ValuePath) -> Any:
        saved = (self._value, self._path)
        self._value, self._path = unwrap_scalar_array(value), path
        try:
            return ty.accept(self)
        finally:
            self._value, self._path = saved

    def conform_leaf(self, value: Any, ty: Type, path: ValuePath, position: int) -> Any:
        """Conform one element of flattened array data."""
        self.position = position
        return self.conform(value, ty, path)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def visit_scalar_type(self, ty: ScalarType) -> Any:
        value = self._value
        if value is None:
            raise DtypeMismatchError(ty, "missing", self.position, path=self._path)
        kind = value_kind(value, self._path)
        if kind not in _accepted_kinds(ty):
            raise DtypeMismatchError(ty, _found(value, kind), self.position, path=self._path)
        return to_python(value)

    def visit_option_type(self, ty: OptionType) -> Any:
        if self._value is None:
            return None
        return self.conform(self._value, ty.element_type, self._path)

    def visit_categorical_type(self, ty: CategoricalType) -> Any:
        value = to_python(self._value)
        for label in ty.labels:
            if label is None and value is None:
                return None
            if label is not None and type(label) is type(value) and label == value:
                return value
        raise CategoricalError(f"{value!r} is not a label of {ty}", path=self._path)

    # ------------------------------------------------------------------
    # Records and tuples
    # ------------------------------------------------------------------

    def visit_record_type(self, ty: RecordType) -> Any:
        value = self._value
        kind = value_kind(value, self._path)
        if kind is not ValueKind.MAPPING:
            raise ShapeMismatchError(ty, _found(value, kind), path=self._path)
        check_mapping_keys(value, self._path)
        if set(value) != set(ty.names):
            raise ShapeMismatchError(ty, "fields " + ", ".join(value), path=self._path)
        return {
            name: self.conform(value[name], field_type, self._path.child(name))
            for name, field_type in ty.fields
        }

    def visit_tuple_type(self, ty: TupleType) -> Any:
        value = self._value
        if not isinstance(value, (tuple, list)):
            raise ShapeMismatchError(ty, _found(value, value_kind(value, self._path)), path=self._path)
        if len(value) != len(ty.element_types):
            raise ShapeMismatchError(ty, f"{len(value)} elements", path=self._path)
        return [
            self.conform(item, item_type, self._path.child(index))
            for index, (item, item_type) in enumerate(zip(value, ty.element_types))
        ]

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------

    def visit_fixed_dim_type(self, ty: FixedDimType) -> Any:
        return self._conform_chain(ty)

    def visit_var_dim_type(self, ty: VarDimType) -> Any:
        return self._conform_chain(ty)

    def visit_symbolic_dim_type(self, ty: SymbolicDimType) -> Any:
        raise AbstractTypeError(ty)

    def _conform_chain(self, ty: Type) -> Any:
        # Var offsets index branches across a whole level, so each chain gets
        # its own branch cursors.
        cursors = [0] * ty.ndim
        saved = (self.position, self._next_position)
        self._next_position = 0
        try:
            result = self._conform_dim(self._value, ty, self._path, 0, cursors)
        finally:
            self.position, self._next_position = saved
        level_type = ty
        for depth in range(ty.ndim):
            if isinstance(level_type, VarDimType) and level_type.offsets is not None:
                if cursors[depth] != level_type.nbranches:
                    raise ShapeMismatchError(
                        level_type, f"{cursors[depth]} branches at depth {depth}", path=self._path)
            level_type = level_type.element_type  # type: ignore[attr-defined]
        return result

    def _conform_dim(self, value: Any, ty: Type, path: ValuePath, depth: int,
                     cursors: List[int]) -> Any:
        if not ty.is_dimension():
            self.position = self._next_position
            self._next_position += 1
            return self.conform(value, ty, path)

        value = unwrap_scalar_array(value)
        expected = self._expected_length(ty, depth, cursors, path)
        if value is None:
            if not ty.optional:  # type: ignore[attr-defined]
                raise ShapeMismatchError(ty, "missing", path=path)
            if expected:
                raise ShapeMismatchError(ty, "missing branch with nonzero length", path=path)
            return None

        kind = value_kind(value, path)
        if kind is not ValueKind.SEQUENCE:
            raise ShapeMismatchError(ty, _found(value, kind), path=path)
        if expected is not None and len(value) != expected:
            raise ShapeMismatchError(ty, f"length {len(value)}", path=path)

        element_type = ty.element_type  # type: ignore[attr-defined]
        return [
            self._conform_dim(item, element_type, path.child(index), depth + 1, cursors)
            for index, item in enumerate(value)
        ]

    def _expected_length(self, ty: Type, depth: int, cursors: List[int],
                         path: ValuePath) -> Optional[int]:
        if isinstance(ty, FixedDimType):
            return ty.length
        if isinstance(ty, VarDimType):
            if ty.offsets is None:
                return None
            branch = cursors[depth]
            if branch >= ty.nbranches:
                raise ShapeMismatchError(ty, f"more than {ty.nbranches} branches", path=path)
            cursors[depth] += 1
            return ty.branch_length(branch)
        raise AbstractTypeError(ty)

    # ------------------------------------------------------------------
    # Abstract and named types
    # ------------------------------------------------------------------

    def visit_typevar(self, ty: TypeVar) -> Any:
        raise AbstractTypeError(ty)

    def visit_nominal_type(self, ty: NominalType) -> Any:
        return self.conform(self._value, ty.definition, self._path)


def conform(value: Any, ty: Type, path: ValuePath = ROOT) -> Any:
    """
    Validate value against a concrete type and return the normalized value.

    Raises DtypeMismatchError for scalar mismatches, ShapeMismatchError for
    structural ones and AbstractTypeError for types that are not concrete.
    """
    if ty.is_abstract():
        raise AbstractTypeError(ty)
    logger.debug(f"[Conform] {path} against {ty}")
    return ValueConformer().conform(value, ty, path)
