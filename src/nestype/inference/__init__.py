"""
Inference engine: classifier, shape walker, dimension synthesizer, dtype
unifier, record/tuple builder, conformance checker and driver.
"""

from .classifier import ValueKind, classify, classify_leaf
from .walker import ShapeProfile, WalkResult, walk, data_shapes
from .dimensions import FixedDim, VarDim, synthesize, wrap, offsets_array
from .unifier import unify
from .records import build_record, build_product
from .validation import conform
from .driver import (
    Hint, ExplicitType, ExplicitDtype, Categories, Alias, DtypeAlias,
    Inferred, InferenceDriver, hint_from_keywords, infer, try_infer, typeof,
)
