"""
Depth/Shape Walker

Extracts the flattened leaf data and the per-depth shape profile of a nested
list. The list may contain None for missing data or missing dimensions.

    >>> result = walk([[0, 1], [2, 3, 4], [5, 6, 7, 8]])
    >>> result.leaves
    [0, 1, 2, 3, 4, 5, 6, 7, 8]
    >>> result.profile.levels
    [[3], [2, 3, 4]]
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from ..shared.errors import TooManyDimensionsError, UnbalancedShapeError
from ..shared.value_path import ROOT, ValuePath
from ..utils.config import MAX_DIM
from .classifier import ValueKind, value_kind

logger = logging.getLogger(__name__)


@dataclass
class ShapeProfile:
    """
    Child counts per depth, outermost level first.

    Each level lists the lengths of all lists at that depth in depth-first
    order; None marks a missing branch (absent length).
    """
    levels: List[List[Optional[int]]] = field(default_factory=list)

    @property
    def ndim(self) -> int:
        return len(self.levels)

    def innermost_first(self) -> List[List[Optional[int]]]:
        return list(reversed(self.levels))


@dataclass
class WalkResult:
    """Flattened leaves (with their paths) and the shape profile."""
    leaves: List[Any]
    paths: List[ValuePath]
    profile: ShapeProfile


class _ShapeWalker:
    def __init__(self, max_dim: int):
        self.max_dim = max_dim
        self.shapes: List[List[Optional[int]]] = []
        self.data: List[List[Tuple[Any, ValuePath]]] = []
        self.max_depth = 0
        self.min_depth: Optional[int] = None          # non-missing terminals
        self.min_missing_depth: Optional[int] = None  # missing nodes

    def _level(self, depth: int) -> None:
        while len(self.shapes) <= depth:
            self.shapes.append([])
            self.data.append([])

    def _terminal(self, depth: int) -> None:
        if self.min_depth is None or depth < self.min_depth:
            self.min_depth = depth

    def search(self, depth: int, node: Any, path: ValuePath) -> None:
        self._level(depth)
        kind = value_kind(node, path)

        if kind is ValueKind.MISSING:
            # Recorded in both places; the final leaf depth decides which one counts.
            self.shapes[depth].append(None)
            self.data[depth].append((None, path))
            if self.min_missing_depth is None or depth < self.min_missing_depth:
                self.min_missing_depth = depth
        elif kind is ValueKind.SEQUENCE:
            if depth >= self.max_dim:
                raise TooManyDimensionsError(depth + 1, path=path)
            self.shapes[depth].append(len(node))
            self.max_depth = max(self.max_depth, depth + 1)
            if len(node) == 0:
                self._terminal(depth + 1)
            for index, item in enumerate(node):
                self.search(depth + 1, item, path.child(index))
        else:
            self.data[depth].append((node, path))
            self._terminal(depth)

    def check_balance(self, leaf_level: List[Tuple[Any, ValuePath]]) -> None:
        all_missing = bool(leaf_level) and all(v is None for v, _ in leaf_level)
        if all_missing:
            # Depth cannot be observed past a missing node.
            min_depth = self.min_depth
        else:
            candidates = [d for d in (self.min_depth, self.min_missing_depth) if d is not None]
            min_depth = min(candidates) if candidates else None
        if min_depth is not None and min_depth != self.max_depth:
            raise UnbalancedShapeError(min_depth, self.max_depth, path=self._shallowest(min_depth))

    def _shallowest(self, depth: int) -> Optional[ValuePath]:
        if depth < len(self.data) and self.data[depth]:
            return self.data[depth][0][1]
        return None


def walk(value: Any, max_dim: int = MAX_DIM, path: ValuePath = ROOT) -> WalkResult:
    """
    Walk a nested list depth-first.

    Returns the leaves found at the deepest level and the shape profile of
    all levels above it. Raises UnbalancedShapeError when leaves occur at
    different depths and TooManyDimensionsError past max_dim.
    """
    walker = _ShapeWalker(max_dim)
    walker.search(0, value, path)
    walker._level(walker.max_depth)

    leaf_level = walker.data[walker.max_depth]
    walker.check_balance(leaf_level)

    profile = ShapeProfile(levels=[list(level) for level in walker.shapes[:walker.max_depth]])
    leaves = [v for v, _ in leaf_level]
    paths = [p for _, p in leaf_level]
    logger.debug(f"[Walker] ndim={profile.ndim} leaves={len(leaves)} at {path}")
    return WalkResult(leaves=leaves, paths=paths, profile=profile)


def data_shapes(value: Any) -> Tuple[List[Any], List[List[Optional[int]]]]:
    """
    Extract array data and dimension shapes from a nested list.

    >>> data_shapes([[0, 1], [2, 3, 4], [5, 6, 7, 8]])
    ([0, 1, 2, 3, 4, 5, 6, 7, 8], [[2, 3, 4], [3]])

    Shapes are listed innermost first.
    """
    result = walk(value)
    return result.leaves, result.profile.innermost_first()
