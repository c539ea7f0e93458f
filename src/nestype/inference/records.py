"""
Mapping/Tuple Type Builder

Record types from dicts (string keys, insertion order) and product types
from tuples. Fields and slots recurse through the driver, so they may hold
arbitrarily nested values.
"""

from typing import Any, Callable, Dict, Tuple

from ..shared.types import Type, RecordType, TupleType
from ..shared.value_path import ROOT, ValuePath
from .classifier import check_mapping_keys

InferNode = Callable[[Any, ValuePath], Type]


def build_record(mapping: Dict[str, Any], infer_node: InferNode,
                 path: ValuePath = ROOT) -> RecordType:
    # Keys are checked where the mapping occurs, not hoisted to the root.
    check_mapping_keys(mapping, path)
    return RecordType(
        (key, infer_node(item, path.child(key))) for key, item in mapping.items()
    )


def build_product(tup: Tuple[Any, ...], infer_node: InferNode,
                  path: ValuePath = ROOT) -> TupleType:
    return TupleType(
        infer_node(item, path.child(index)) for index, item in enumerate(tup)
    )
