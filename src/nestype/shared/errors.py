"""
Error Reporting

Diagnostics for inference failures, rendered rustc-style with the path of
the offending node inside the input value.
"""

import os
import sys
from typing import Any, List, Optional, Sequence

from .value_path import ValuePath
from ..utils.config import COLOR_ENV_VAR


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set or not a TTY)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    if explicit in ("1", "true", "yes", "always"):
        return True
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def format_diagnostic(error: 'NestypeError', color: bool = False) -> str:
    """
    Render a single diagnostic.

    Example output (plain, no color)::

        error[E0606]: dtype mismatch: have int64 and float64
         --> value[1]
          |
          = note: leaf 1 of the flattened data
    """
    out: List[str] = []

    code_str = f"[{error.error_code}]" if error.error_code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )
    if error.path is not None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(error.path))

    if error.help or error.note:
        out.append(_style("  |", _BOLD, _BLUE, color=color))
        if error.help:
            out.append(
                _style("  = ", _BOLD, _CYAN, color=color)
                + _style("help: ", _BOLD, color=color)
                + error.help
            )
        if error.note:
            out.append(
                _style("  = ", _BOLD, _CYAN, color=color)
                + _style("note: ", _BOLD, color=color)
                + error.note
            )
    return "\n".join(out)


# ============================================================================
# Exception Classes
# ============================================================================

class NestypeError(Exception):
    """Base exception for all nestype errors"""
    origin = "nestype"

    def __init__(self,
                 message: str,
                 path: Optional[ValuePath] = None,
                 error_code: str = "E0600",
                 help: Optional[str] = None,
                 note: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.error_code = error_code
        self.help = help
        self.note = note

    def format(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return format_diagnostic(self, color=use_color)

    def __str__(self):
        return self.format()


class InferenceError(NestypeError):
    """Error raised by the inference engine for bad input shape or type"""
    origin = "inference"


class UnbalancedShapeError(InferenceError, ValueError):
    def __init__(self, min_depth: int, max_depth: int, path: Optional[ValuePath] = None):
        super().__init__(
            f"unbalanced tree: min depth {min_depth} and max depth {max_depth}",
            path=path,
            error_code="E0601",
            help="all leaves of a nested list must occur at the same depth",
        )
        self.min_depth = min_depth
        self.max_depth = max_depth


class TooManyDimensionsError(InferenceError, ValueError):
    def __init__(self, depth: int, path: Optional[ValuePath] = None):
        super().__init__(f"too many dimensions: {depth}", path=path, error_code="E0602")
        self.depth = depth


class InvalidKeyError(InferenceError, ValueError):
    def __init__(self, key: Any, path: Optional[ValuePath] = None):
        super().__init__(
            f"all mapping keys must be strings, found {key!r}",
            path=path,
            error_code="E0603",
        )
        self.key = key


class UnsupportedValueError(InferenceError, ValueError):
    def __init__(self, value_kind: str, path: Optional[ValuePath] = None):
        super().__init__(
            f"cannot infer type for value of kind '{value_kind}'",
            path=path,
            error_code="E0604",
        )
        self.value_kind = value_kind


class HintNotApplicableError(InferenceError, TypeError):
    def __init__(self, path: Optional[ValuePath] = None):
        super().__init__(
            "dtype argument is only supported for arrays",
            path=path,
            error_code="E0605",
            help="pass the full type instead of a dtype",
        )


class DtypeMismatchError(InferenceError, ValueError):
    def __init__(self, expected: Any, found: Any, position: int,
                 path: Optional[ValuePath] = None):
        super().__init__(
            f"dtype mismatch: have {expected} and {found}",
            path=path,
            error_code="E0606",
            note=f"leaf {position} of the flattened data",
        )
        self.expected = expected
        self.found = found
        self.position = position


class ConflictingHintsError(InferenceError, TypeError):
    def __init__(self, hints: Sequence[str]):
        super().__init__(
            "the 'type', 'dtype', 'levels', 'typedef' and 'dtypedef' arguments "
            "are mutually exclusive",
            error_code="E0607",
            note="got " + ", ".join(hints),
        )
        self.hints = tuple(hints)


class ShapeMismatchError(InferenceError, ValueError):
    def __init__(self, expected: Any, found: Any, path: Optional[ValuePath] = None):
        super().__init__(
            f"value does not match type: expected {expected}, found {found}",
            path=path,
            error_code="E0608",
        )
        self.expected = expected
        self.found = found


# ---------------------------------------------------------------------------
# Type system errors (passed through the driver unchanged)
# ---------------------------------------------------------------------------

class TypeSystemError(NestypeError):
    """Error raised by the type system collaborator"""
    origin = "typesys"

    def __init__(self, message: str, path: Optional[ValuePath] = None,
                 error_code: str = "E0700", help: Optional[str] = None):
        super().__init__(message, path=path, error_code=error_code, help=help)


class UndefinedTypeError(TypeSystemError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"undefined type or typedef: '{name}'", error_code="E0701")
        self.name = name


class AbstractTypeError(TypeSystemError, ValueError):
    def __init__(self, type_: Any):
        super().__init__(
            f"cannot create a value of abstract type '{type_}'",
            error_code="E0702",
            help="declare the type through a typedef to have it instantiated",
        )
        self.type = type_


class CategoricalError(TypeSystemError, ValueError):
    def __init__(self, message: str, path: Optional[ValuePath] = None):
        super().__init__(message, path=path, error_code="E0703")


class InstantiationError(TypeSystemError, ValueError):
    def __init__(self, name: str, pattern: Any, concrete: Any):
        super().__init__(
            f"cannot instantiate '{name}' ({pattern}) with '{concrete}'",
            error_code="E0704",
        )
        self.name = name
        self.pattern = pattern
        self.concrete = concrete


class NestypeImplementationError(Exception):
    """
    Error in the nestype implementation itself (not in the user's value).

    Never use this for bad input - use an InferenceError subclass instead.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
