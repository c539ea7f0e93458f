"""
Dtype Unifier

Derives the element type of an array from its flattened leaves, or checks
the leaves against an explicitly supplied dtype.
"""

import logging
from typing import Any, Callable, Optional, Sequence

from ..shared.errors import DtypeMismatchError
from ..shared.types import Type, OptionType, DEFAULT_DTYPE
from ..shared.value_path import ROOT, ValuePath
from .validation import ValueConformer

logger = logging.getLogger(__name__)

InferNode = Callable[[Any, ValuePath], Type]


def unify(leaves: Sequence[Any],
          explicit_dtype: Optional[Type] = None,
          infer_node: Optional[InferNode] = None,
          paths: Optional[Sequence[ValuePath]] = None,
          default: Type = DEFAULT_DTYPE) -> Type:
    """
    Element type for the flattened leaves of an array.

    Without an explicit dtype every non-missing leaf must infer to the same
    type as the first one (default when there is none); the result is
    optional if any leaf is missing. With an explicit dtype each leaf must
    conform to it and the dtype is returned unchanged.
    """
    if paths is None:
        paths = [ROOT] * len(leaves)
    if infer_node is None:
        from .driver import InferenceDriver
        infer_node = InferenceDriver().infer_node

    if explicit_dtype is not None:
        conformer = ValueConformer()
        for position, (leaf, path) in enumerate(zip(leaves, paths)):
            conformer.conform_leaf(leaf, explicit_dtype, path, position)
        return explicit_dtype

    dtype: Optional[Type] = None
    has_missing = False
    for position, (leaf, path) in enumerate(zip(leaves, paths)):
        if leaf is None:
            has_missing = True
            continue
        t = infer_node(leaf, path)
        if dtype is None:
            dtype = t
        elif t != dtype:
            raise DtypeMismatchError(dtype, t, position, path=path)

    if dtype is None:
        dtype = default
    if has_missing and not dtype.is_optional():
        dtype = OptionType(dtype)
    logger.debug(f"[Unifier] {len(leaves)} leaves -> {dtype}")
    return dtype
