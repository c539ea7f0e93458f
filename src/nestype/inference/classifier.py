"""
Value Classifier

Decides the category of a single node of a nested input value. The set of
categories is closed: anything that is not one of them is rejected.
"""

from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from ..shared.errors import HintNotApplicableError, InvalidKeyError, UnsupportedValueError
from ..shared.types import (
    Type, OptionType, BOOL, INT64, FLOAT64, COMPLEX128, BYTES, STRING, DEFAULT_DTYPE,
)
from ..shared.value_path import ROOT, ValuePath


class ValueKind(Enum):
    """Value category"""
    MISSING = "missing"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    COMPLEX = "complex"
    BYTES = "bytes"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    TUPLE = "tuple"


STRUCTURAL_KINDS = frozenset({ValueKind.SEQUENCE, ValueKind.MAPPING, ValueKind.TUPLE})

# Leaf type per scalar category
LEAF_TYPES: Dict[ValueKind, Type] = {
    ValueKind.MISSING: OptionType(DEFAULT_DTYPE),
    ValueKind.BOOLEAN: BOOL,
    ValueKind.INTEGER: INT64,
    ValueKind.FLOAT: FLOAT64,
    ValueKind.COMPLEX: COMPLEX128,
    ValueKind.BYTES: BYTES,
    ValueKind.STRING: STRING,
}

# Order matters: bool is a subclass of int, np.bool_ is not an np.integer.
_SCALAR_CHECKS = (
    ((bool, np.bool_), ValueKind.BOOLEAN),
    ((int, np.integer), ValueKind.INTEGER),
    ((float, np.floating), ValueKind.FLOAT),
    ((complex, np.complexfloating), ValueKind.COMPLEX),
    ((bytes, np.bytes_), ValueKind.BYTES),
    ((str,), ValueKind.STRING),
)


def unwrap_scalar_array(value: Any) -> Any:
    """A 0-d NumPy array stands for its single item."""
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return value.item()
    return value


def is_sequence(value: Any) -> bool:
    return isinstance(value, list) or (isinstance(value, np.ndarray) and value.ndim > 0)


def value_kind(value: Any, path: ValuePath = ROOT) -> ValueKind:
    """Category of one node, without looking at its children."""
    value = unwrap_scalar_array(value)
    if value is None:
        return ValueKind.MISSING
    if is_sequence(value):
        return ValueKind.SEQUENCE
    if isinstance(value, tuple):
        return ValueKind.TUPLE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    for host_types, kind in _SCALAR_CHECKS:
        if isinstance(value, host_types):
            return kind
    raise UnsupportedValueError(type(value).__name__, path=path)


def check_mapping_keys(mapping: Dict[Any, Any], path: ValuePath = ROOT) -> None:
    for key in mapping:
        if not isinstance(key, str):
            raise InvalidKeyError(key, path=path)


def classify(value: Any, dtype_hint: Optional[Type] = None, path: ValuePath = ROOT) -> ValueKind:
    """
    Classify a node.

    Mapping keys are verified here; a dtype hint is only legal for a
    Sequence-rooted value.
    """
    kind = value_kind(value, path)
    if dtype_hint is not None and kind is not ValueKind.SEQUENCE:
        raise HintNotApplicableError(path=path)
    if kind is ValueKind.MAPPING:
        check_mapping_keys(value, path)
    return kind


def classify_leaf(value: Any, path: ValuePath = ROOT) -> Type:
    """
    Scalar type of a leaf value.

    Missing classifies as the optional default dtype. Structural values have
    no leaf type.
    """
    kind = value_kind(value, path)
    if kind in STRUCTURAL_KINDS:
        raise UnsupportedValueError(kind.value, path=path)
    return LEAF_TYPES[kind]
