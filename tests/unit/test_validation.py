"""
Tests for the conformance checker: validation of values against concrete
types and the normalized value it returns.
"""

import numpy as np
import pytest

from nestype.inference.validation import ValueConformer, conform, to_python
from nestype.shared.errors import (
    AbstractTypeError, CategoricalError, DtypeMismatchError, ShapeMismatchError,
)
from nestype.shared.types import (
    CategoricalType, FixedDimType, NominalType, OptionType, RecordType, SymbolicDimType,
    TupleType, TypeVar, VarDimType, COMPLEX128, FLOAT64, INT64, SCALAR_TYPES, STRING,
)
from nestype.shared.value_path import ROOT


class TestScalars:

    @pytest.mark.parametrize("value,ty", [
        (1, INT64),
        (1, SCALAR_TYPES["uint8"]),
        (1, FLOAT64),
        (1.5, FLOAT64),
        (1, COMPLEX128),
        (2j, COMPLEX128),
        (True, SCALAR_TYPES["bool"]),
        (b"x", SCALAR_TYPES["bytes"]),
        ("x", STRING),
    ])
    def test_accepted(self, value, ty):
        assert conform(value, ty) == value

    @pytest.mark.parametrize("value,ty", [
        (True, INT64),
        (1.5, INT64),
        (1j, FLOAT64),
        (1, SCALAR_TYPES["bool"]),
        ("x", SCALAR_TYPES["bytes"]),
        (b"x", STRING),
        ([1], INT64),
    ])
    def test_rejected(self, value, ty):
        with pytest.raises(DtypeMismatchError):
            conform(value, ty)

    def test_missing_needs_option(self):
        with pytest.raises(DtypeMismatchError, match="have int64 and missing"):
            conform(None, INT64)
        assert conform(None, OptionType(INT64)) is None

    def test_numpy_scalars_become_python(self):
        result = conform(np.int16(3), INT64)
        assert result == 3 and type(result) is int
        assert type(to_python(np.float32(1.0))) is float
        assert to_python("x") == "x"


class TestDimensions:

    def test_fixed(self):
        assert conform([1, 2], FixedDimType(2, INT64)) == [1, 2]

    def test_fixed_wrong_length(self):
        with pytest.raises(ShapeMismatchError) as exc_info:
            conform([1, 2, 3], FixedDimType(2, INT64))
        assert exc_info.value.found == "length 3"

    def test_not_a_list(self):
        with pytest.raises(ShapeMismatchError):
            conform(5, FixedDimType(1, INT64))

    def test_ndarray_becomes_list(self):
        result = conform(np.array([[1, 2], [3, 4]]), FixedDimType(2, FixedDimType(2, INT64)))
        assert result == [[1, 2], [3, 4]]
        assert type(result[0]) is list and type(result[0][0]) is int

    def test_var_with_offsets(self):
        ty = VarDimType(VarDimType(INT64, (0, 1, 3)), (0, 2))
        assert conform([[1], [2, 3]], ty) == [[1], [2, 3]]

    def test_var_wrong_branch_length(self):
        ty = VarDimType(VarDimType(INT64, (0, 2, 3)), (0, 2))
        with pytest.raises(ShapeMismatchError):
            conform([[1], [2, 3]], ty)

    def test_var_unconsumed_branches(self):
        ty = VarDimType(VarDimType(INT64, (0, 1, 3)), (0, 1))
        with pytest.raises(ShapeMismatchError, match="1 branches at depth 1"):
            conform([[1]], ty)

    def test_var_without_offsets(self):
        ty = VarDimType(VarDimType(INT64))
        assert conform([[1], [2, 3], []], ty) == [[1], [2, 3], []]

    def test_optional_dim_accepts_missing_branch(self):
        ty = VarDimType(VarDimType(OptionType(FLOAT64), (0, 0, 1), optional=True), (0, 2))
        assert conform([None, [None]], ty) == [None, [None]]

    def test_missing_branch_needs_optional_dim(self):
        with pytest.raises(ShapeMismatchError, match="missing"):
            conform([None], FixedDimType(1, FixedDimType(0, INT64)))

    def test_error_path_and_position(self):
        with pytest.raises(DtypeMismatchError) as exc_info:
            conform([[1, "x"]], FixedDimType(1, FixedDimType(2, INT64)))
        assert str(exc_info.value.path) == "value[0][1]"
        assert exc_info.value.position == 1

    def test_nested_chains_count_positions_separately(self):
        ty = FixedDimType(2, TupleType([FixedDimType(2, INT64), STRING]))
        with pytest.raises(DtypeMismatchError) as exc_info:
            conform([([1, 2], "a"), ([3, 4], 5)], ty)
        assert str(exc_info.value.path) == "value[1][1]"
        assert exc_info.value.position == 1


class TestRecordsAndTuples:

    def test_record_field_order(self):
        ty = RecordType([("a", INT64), ("b", INT64)])
        result = conform({"b": 2, "a": 1}, ty)
        assert result == {"a": 1, "b": 2}
        assert list(result) == ["a", "b"]

    def test_record_missing_field(self):
        with pytest.raises(ShapeMismatchError):
            conform({"a": 1}, RecordType([("a", INT64), ("b", INT64)]))

    def test_record_not_a_mapping(self):
        with pytest.raises(ShapeMismatchError):
            conform([1], RecordType([("a", INT64)]))

    def test_tuple_becomes_list(self):
        assert conform((1, "x"), TupleType([INT64, STRING])) == [1, "x"]

    def test_tuple_arity(self):
        with pytest.raises(ShapeMismatchError, match="3 elements"):
            conform((1, 2, 3), TupleType([INT64, INT64]))


class TestCategorical:

    def test_labels(self):
        ty = CategoricalType(["a", "b", None])
        assert conform("a", ty) == "a"
        assert conform(None, ty) is None

    def test_unknown_label(self):
        with pytest.raises(CategoricalError):
            conform("c", CategoricalType(["a", "b"]))

    def test_label_types_are_strict(self):
        with pytest.raises(CategoricalError):
            conform(1, CategoricalType([True]))
        with pytest.raises(CategoricalError):
            conform(True, CategoricalType([1]))

    def test_missing_without_na(self):
        with pytest.raises(CategoricalError):
            conform(None, CategoricalType(["a"]))


class TestAbstractAndNominal:

    def test_symbolic_dim(self):
        with pytest.raises(AbstractTypeError):
            conform([1], SymbolicDimType("N", INT64))

    def test_typevar(self):
        with pytest.raises(AbstractTypeError):
            conform(1, TypeVar("T"))

    def test_typevar_reached_by_visitor(self):
        with pytest.raises(AbstractTypeError):
            ValueConformer().conform(1, TypeVar("T"), ROOT)

    def test_nominal_uses_definition(self):
        ty = NominalType("pair", FixedDimType(2, INT64))
        assert conform([1, 2], ty) == [1, 2]
        with pytest.raises(ShapeMismatchError):
            conform([1], ty)
