"""
Value Path

Location of a node inside a nested input value, used in diagnostics the
way a source span is used for program text.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from ..utils.config import VALUE_ROOT

Step = Union[int, str]


@dataclass(frozen=True)
class ValuePath:
    """
    Path from the root value to a node.

    Steps are list/tuple indices (int) or mapping keys (str). Immutable
    (frozen) for hashability; child paths are derived, never mutated.
    """
    steps: Tuple[Step, ...] = ()

    def child(self, step: Step) -> 'ValuePath':
        return ValuePath(self.steps + (step,))

    @property
    def depth(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        """Format as value[0]['a'][2]"""
        return VALUE_ROOT + "".join(f"[{step!r}]" for step in self.steps)


ROOT = ValuePath()
