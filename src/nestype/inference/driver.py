"""
Inference Driver

Orchestrates the classifier, walker, dimension synthesizer, dtype unifier and
record/tuple builder according to the caller's hint:

1. ExplicitType  - the value is validated against the given type
2. ExplicitDtype - shape is inferred, leaves are validated against the dtype
3. Categories    - len(value) * categorical(labels)
4. Alias         - a typedef; abstract typedefs get their dtype slot inferred
5. no hint       - full inference

DtypeAlias (a typedef used as dtype) is path 2 with the dtype resolved by name.
Every path returns the type together with the normalized value.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

from ..shared.errors import (
    AbstractTypeError, ConflictingHintsError, NestypeError, ShapeMismatchError,
    TooManyDimensionsError,
)
from ..shared.types import Type, FixedDimType
from ..shared.value_path import ROOT, ValuePath
from ..typesys.registry import Descriptor, TypeRegistry, TypeSystem
from ..utils.base import Result
from ..utils.config import MAX_DIM, MAX_NESTING
from .classifier import LEAF_TYPES, STRUCTURAL_KINDS, ValueKind, classify
from .dimensions import synthesize, wrap
from .records import build_product, build_record
from .unifier import unify
from .validation import conform
from .walker import walk

logger = logging.getLogger(__name__)


# ============================================================================
# Hints
# ============================================================================

@dataclass(frozen=True)
class Hint:
    """Caller intent; at most one hint per inference call."""


@dataclass(frozen=True)
class ExplicitType(Hint):
    descriptor: Descriptor


@dataclass(frozen=True)
class ExplicitDtype(Hint):
    descriptor: Descriptor


@dataclass(frozen=True)
class Categories(Hint):
    labels: Tuple[Any, ...]

    def __init__(self, labels):
        object.__setattr__(self, 'labels', tuple(labels))


@dataclass(frozen=True)
class Alias(Hint):
    name: str


@dataclass(frozen=True)
class DtypeAlias(Hint):
    name: str


_KEYWORD_HINTS = {
    "type": ExplicitType,
    "dtype": ExplicitDtype,
    "levels": Categories,
    "typedef": Alias,
    "dtypedef": DtypeAlias,
}


def hint_from_keywords(**keywords: Any) -> Optional[Hint]:
    """Build a hint from xnd-style keyword arguments (type=, dtype=, ...)."""
    given = [name for name, arg in keywords.items() if arg is not None]
    if len(given) > 1:
        raise ConflictingHintsError(given)
    if not given:
        return None
    name = given[0]
    return _KEYWORD_HINTS[name](keywords[name])


class Inferred(NamedTuple):
    """Inference result: the type and the value normalized to mirror it."""
    type: Type
    value: Any


# ============================================================================
# Driver
# ============================================================================

class InferenceDriver:
    """
    Inference driver.

    Stateless apart from its type system; safe to reuse across calls on
    independent values.
    """

    def __init__(self, type_system: Optional[TypeSystem] = None, max_dim: int = MAX_DIM,
                 max_nesting: int = MAX_NESTING):
        self.type_system = type_system if type_system is not None else TypeRegistry()
        self.max_dim = max_dim
        self.max_nesting = max_nesting
        self._dispatch: Dict[Optional[type], Callable[[Any, Any], Inferred]] = {
            type(None): self._infer_full,
            ExplicitType: self._infer_explicit_type,
            ExplicitDtype: self._infer_explicit_dtype,
            Categories: self._infer_categories,
            Alias: self._infer_alias,
            DtypeAlias: self._infer_dtype_alias,
        }

    def infer(self, value: Any, hint: Optional[Hint] = None) -> Inferred:
        handler = self._dispatch.get(type(hint))
        if handler is None:
            raise TypeError(f"unknown inference hint: {hint!r}")
        logger.debug(f"[Driver] {type(hint).__name__ if hint else 'full inference'}")
        return handler(value, hint)

    # ------------------------------------------------------------------
    # Recursive inference
    # ------------------------------------------------------------------

    def infer_node(self, value: Any, path: ValuePath = ROOT, dtype: Optional[Type] = None) -> Type:
        """
        Type of one node; structural children recurse back through here.

        dtype short-circuits leaf inference for a Sequence-rooted value.
        Structural nodes deeper than max_nesting steps from the root raise
        TooManyDimensionsError.
        """
        kind = classify(value, dtype, path)
        if kind in STRUCTURAL_KINDS and path.depth >= self.max_nesting:
            raise TooManyDimensionsError(path.depth + 1, path=path)
        if kind is ValueKind.SEQUENCE:
            return self._infer_array(value, path, dtype)
        if kind is ValueKind.MAPPING:
            return build_record(value, self.infer_node, path)
        if kind is ValueKind.TUPLE:
            return build_product(value, self.infer_node, path)
        return LEAF_TYPES[kind]

    def _infer_array(self, value: Any, path: ValuePath, dtype: Optional[Type]) -> Type:
        result = walk(value, self.max_dim, path)
        chain = synthesize(result.profile)
        element = unify(result.leaves, explicit_dtype=dtype,
                        infer_node=self.infer_node, paths=result.paths)
        return wrap(chain, element)

    # ------------------------------------------------------------------
    # Hint paths
    # ------------------------------------------------------------------

    def _infer_full(self, value: Any, hint: None) -> Inferred:
        t = self.infer_node(value)
        return Inferred(t, conform(value, t))

    def _infer_explicit_type(self, value: Any, hint: ExplicitType) -> Inferred:
        t = self.type_system.parse(hint.descriptor)
        if self.type_system.is_abstract(t):
            raise AbstractTypeError(t)
        return Inferred(t, conform(value, t))

    def _infer_explicit_dtype(self, value: Any, hint: ExplicitDtype) -> Inferred:
        return self._with_dtype(value, self.type_system.parse(hint.descriptor))

    def _infer_dtype_alias(self, value: Any, hint: DtypeAlias) -> Inferred:
        return self._with_dtype(value, self.type_system.resolve(hint.name))

    def _with_dtype(self, value: Any, dtype: Type) -> Inferred:
        t = self.infer_node(value, ROOT, dtype)
        return Inferred(t, conform(value, t))

    def _infer_categories(self, value: Any, hint: Categories) -> Inferred:
        categorical = self.type_system.categorical(hint.labels)
        kind = classify(value)
        if kind is not ValueKind.SEQUENCE:
            raise ShapeMismatchError(f"N * {categorical}", kind.value, path=ROOT)
        t = FixedDimType(len(value), categorical)
        return Inferred(t, conform(value, t))

    def _infer_alias(self, value: Any, hint: Alias) -> Inferred:
        t = self.type_system.resolve(hint.name)
        if self.type_system.is_abstract(t):
            hidden = self.type_system.hidden_dtype(t)
            if self.type_system.is_abstract(hidden):
                concrete = self.infer_node(value)
            else:
                concrete = self.infer_node(value, ROOT, hidden)
            logger.debug(f"[Driver] instantiating {hint.name} with {concrete}")
            t = self.type_system.instantiate(hint.name, concrete)
        return Inferred(t, conform(value, t))


# ============================================================================
# Module-level API
# ============================================================================

def infer(value: Any, hint: Optional[Hint] = None, *,
          type: Optional[Descriptor] = None,
          dtype: Optional[Descriptor] = None,
          levels: Optional[Any] = None,
          typedef: Optional[str] = None,
          dtypedef: Optional[str] = None,
          type_system: Optional[TypeSystem] = None) -> Inferred:
    """
    Infer the type of a value and normalize it.

        >>> infer([[1, 2, 3], [4]]).type
        VarDimType('var(offsets=[0, 2]) * var(offsets=[0, 3, 4]) * int64')
        >>> infer({'a': "xyz", 'b': [1, 2, 3]}).type
        RecordType('{a : string, b : 3 * int64}')

    The hint may be passed as a Hint object or through exactly one of the
    type, dtype, levels, typedef and dtypedef keywords.
    """
    keyword_hint = hint_from_keywords(type=type, dtype=dtype, levels=levels,
                                      typedef=typedef, dtypedef=dtypedef)
    if hint is not None and keyword_hint is not None:
        raise ConflictingHintsError([repr(hint), repr(keyword_hint)])
    driver = InferenceDriver(type_system)
    return driver.infer(value, hint if hint is not None else keyword_hint)


def try_infer(value: Any, hint: Optional[Hint] = None, **keywords: Any) -> Result:
    """Like infer(), but returns Result.ok(Inferred) or Result.err(error)."""
    try:
        return Result.ok(infer(value, hint, **keywords))
    except NestypeError as e:
        return Result.err(e)


def typeof(value: Any, *, dtype: Optional[Descriptor] = None,
           type_system: Optional[TypeSystem] = None) -> Type:
    """Inferred type only (no normalization, no validation pass)."""
    driver = InferenceDriver(type_system)
    parsed = driver.type_system.parse(dtype) if dtype is not None else None
    return driver.infer_node(value, ROOT, parsed)
