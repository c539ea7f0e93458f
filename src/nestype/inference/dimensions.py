"""
Dimension Synthesizer

Turns a shape profile into a chain of dimension descriptors. A level whose
branches all have the same length is a fixed dimension; otherwise it is a
var dimension described by prefix-sum offsets.

Ragged propagation: a fixed dimension cannot enclose a var dimension, so as
soon as one level is ragged every level of the chain is emitted as var.

    >>> synthesize(ShapeProfile([[3], [2, 3, 4]]))
    [VarDim(offsets=(0, 3), optional=False), VarDim(offsets=(0, 2, 5, 9), optional=False)]
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..shared.errors import NestypeImplementationError
from ..shared.types import Type, FixedDimType, VarDimType, SCALAR_TYPES
from ..utils.config import OFFSET_DTYPE
from .walker import ShapeProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixedDim:
    """All branches at this level have `length` children."""
    length: int
    optional: bool = False


@dataclass(frozen=True)
class VarDim:
    """Branch i at this level has offsets[i+1] - offsets[i] children."""
    offsets: Tuple[int, ...]
    optional: bool = False

    @property
    def nbranches(self) -> int:
        return len(self.offsets) - 1


DimensionNode = Union[FixedDim, VarDim]


@dataclass(frozen=True)
class LevelSummary:
    """One level of the profile with absent lengths replaced by zero."""
    lengths: Tuple[int, ...]
    optional: bool

    @classmethod
    def from_level(cls, level: Sequence[Optional[int]]) -> 'LevelSummary':
        optional = any(length is None for length in level)
        return cls(tuple(0 if length is None else length for length in level), optional)

    @property
    def uniform(self) -> bool:
        return len(set(self.lengths)) <= 1

    @property
    def shared_length(self) -> int:
        return self.lengths[0] if self.lengths else 0


def prefix_offsets(lengths: Sequence[int]) -> Tuple[int, ...]:
    """[2, 3, 4] -> (0, 2, 5, 9)"""
    sums = np.cumsum(np.asarray(lengths, dtype=np.int64))
    return (0,) + tuple(int(s) for s in sums)


def synthesize(profile: ShapeProfile) -> List[DimensionNode]:
    """
    Build the dimension chain for a shape profile, outermost first.

    Levels are examined innermost to outermost. Uniformity is numeric after
    absent -> 0 substitution.
    """
    summaries = [LevelSummary.from_level(level) for level in profile.innermost_first()]
    use_var = any(not s.uniform for s in summaries)

    chain: List[DimensionNode] = []
    for summary in summaries:
        if use_var:
            chain.append(VarDim(prefix_offsets(summary.lengths), summary.optional))
        else:
            chain.append(FixedDim(summary.shared_length, summary.optional))
    chain.reverse()
    logger.debug(f"[Dimensions] use_var={use_var} chain={chain}")
    return chain


def wrap(chain: Sequence[DimensionNode], dtype: Type) -> Type:
    """Compose the dimension chain (outermost first) around dtype."""
    t = dtype
    for node in reversed(chain):
        if isinstance(node, FixedDim):
            t = FixedDimType(node.length, t, optional=node.optional)
        elif isinstance(node, VarDim):
            t = VarDimType(t, offsets=node.offsets, optional=node.optional)
        else:
            raise NestypeImplementationError(f"unknown dimension node: {node!r}")
    return t


def offsets_array(dim: Union[VarDim, VarDimType]) -> np.ndarray:
    """Offsets of a var dimension as the array handed to the storage engine."""
    if dim.offsets is None:
        raise ValueError("var dimension has no offsets")
    return np.asarray(dim.offsets, dtype=SCALAR_TYPES[OFFSET_DTYPE].numpy_dtype)
